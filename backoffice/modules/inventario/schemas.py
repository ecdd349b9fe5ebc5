from pydantic import Field, field_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from backoffice.shared.schemas import BackofficeModel

# ==================== REQUEST SCHEMAS ====================

class VarianteCreate(BackofficeModel):
    codigo_sku: str = Field(..., min_length=2, max_length=100)
    talla: Optional[str] = Field(None, max_length=20)
    color: Optional[str] = Field(None, max_length=50)
    precio_venta: Optional[Decimal] = Field(None, ge=0, description="Vacío: usa el precio del producto")
    costo_unitario: Decimal = Field(Decimal("0"), ge=0)
    cantidad_stock: int = Field(0, ge=0)
    stock_minimo: int = Field(0, ge=0)

class ProductoCreate(BackofficeModel):
    nombre_producto: str = Field(..., min_length=2, max_length=255)
    descripcion: Optional[str] = None
    precio_venta: Decimal = Field(..., ge=0)
    variantes: List[VarianteCreate] = Field(..., min_length=1)

class AjusteStockRequest(BackofficeModel):
    cantidad: int = Field(..., description="Positivo para entradas, negativo para salidas")
    motivo: str = Field(..., min_length=3, max_length=255)

    @field_validator('cantidad')
    @classmethod
    def validate_cantidad(cls, v: int):
        if v == 0:
            raise ValueError('La cantidad del ajuste no puede ser 0')
        return v

# ==================== RESPONSE SCHEMAS ====================

class VarianteResponse(BackofficeModel):
    id_variante: int
    id_producto: int
    nombre_producto: Optional[str] = None
    codigo_sku: str
    talla: Optional[str] = None
    color: Optional[str] = None
    precio: Decimal
    costo_unitario: Optional[Decimal] = None
    cantidad_stock: int
    stock_minimo: int
    bajo_stock: bool
    activo: bool

class ProductoResponse(BackofficeModel):
    id_producto: int
    nombre_producto: str
    descripcion: Optional[str] = None
    precio_venta: Decimal
    activo: bool
    variantes: List[VarianteResponse] = []

class MovimientoInventarioResponse(BackofficeModel):
    id_movimiento: int
    id_variante: int
    codigo_sku: Optional[str] = None
    tipo_movimiento: str
    cantidad: int
    stock_anterior: int
    stock_nuevo: int
    motivo: Optional[str] = None
    id_venta: Optional[int] = None
    fecha_movimiento: datetime
