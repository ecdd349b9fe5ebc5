from pydantic import Field
from typing import Optional

from backoffice.shared.schemas import BackofficeModel

# ==================== REQUEST SCHEMAS ====================

class MetodoPagoCreate(BackofficeModel):
    nombre_metodo: str = Field(..., min_length=2, max_length=100)
    id_tipo_metodo: int = Field(..., description="Tipo de método (efectivo, tarjeta, crédito tienda...)")
    descripcion: Optional[str] = Field(None, max_length=255)
    requiere_referencia: bool = False

class MetodoPagoUpdate(BackofficeModel):
    nombre_metodo: Optional[str] = Field(None, min_length=2, max_length=100)
    id_tipo_metodo: Optional[int] = None
    descripcion: Optional[str] = Field(None, max_length=255)
    requiere_referencia: Optional[bool] = None
    activo: Optional[bool] = None

# ==================== RESPONSE SCHEMAS ====================

class TipoMetodoPagoResponse(BackofficeModel):
    id_tipo_metodo: int
    codigo: str
    nombre: str
    descripcion: Optional[str] = None

class MetodoPagoResponse(BackofficeModel):
    id_metodo_pago: int
    nombre_metodo: str
    descripcion: Optional[str] = None
    id_tipo_metodo: int
    requiere_referencia: bool
    activo: bool
    es_credito: bool
    tipo: Optional[TipoMetodoPagoResponse] = None
