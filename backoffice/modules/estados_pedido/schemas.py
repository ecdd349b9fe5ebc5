from pydantic import Field
from typing import Optional

from backoffice.shared.schemas import BackofficeModel

class EstadoPedidoCreate(BackofficeModel):
    nombre_estado: str = Field(..., min_length=2, max_length=100)
    descripcion: Optional[str] = Field(None, max_length=255)
    color: str = Field("#9E9E9E", pattern=r"^#[0-9A-Fa-f]{6}$")
    orden: Optional[int] = Field(None, ge=0, description="Posición en el flujo; por defecto al final")

class EstadoPedidoUpdate(BackofficeModel):
    nombre_estado: Optional[str] = Field(None, min_length=2, max_length=100)
    descripcion: Optional[str] = Field(None, max_length=255)
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    orden: Optional[int] = Field(None, ge=0)
    activo: Optional[bool] = None

class EstadoPedidoResponse(BackofficeModel):
    id_estado_pedido: int
    nombre_estado: str
    descripcion: Optional[str] = None
    color: Optional[str] = None
    orden: int
    activo: bool
    cantidad_ventas: int = 0
