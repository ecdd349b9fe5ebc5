from pydantic import Field, field_validator, model_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum

from backoffice.shared.schemas import BackofficeModel

# ==================== ENUMS ====================

class TipoDescuento(str, Enum):
    porcentaje = "porcentaje"
    valor_fijo = "valor_fijo"

class EstadoDescuento(str, Enum):
    activo = "activo"
    inactivo = "inactivo"
    vencido = "vencido"

# ==================== REQUEST SCHEMAS ====================

class DescuentoCreate(BackofficeModel):
    codigo_descuento: str = Field(..., min_length=3, max_length=50, description="Código del cupón")
    nombre_descuento: str = Field(..., min_length=2, max_length=150)
    descripcion: Optional[str] = None
    tipo_descuento: TipoDescuento
    valor_descuento: Decimal = Field(..., gt=0)
    monto_minimo_compra: Decimal = Field(Decimal("0"), ge=0)
    cantidad_maxima_usos: Optional[int] = Field(None, ge=1, description="Usos totales permitidos; vacío = ilimitado")
    uso_por_cliente: Optional[int] = Field(None, ge=1, description="Usos por cliente; vacío = ilimitado")
    fecha_inicio: Optional[datetime] = None
    fecha_fin: Optional[datetime] = None

    @field_validator('codigo_descuento')
    @classmethod
    def validate_codigo(cls, v: str):
        return v.strip().upper()

    @model_validator(mode="after")
    def validate_reglas(self):
        if self.tipo_descuento == TipoDescuento.porcentaje and self.valor_descuento > 100:
            raise ValueError('Un descuento porcentual no puede superar el 100%')
        if self.fecha_inicio and self.fecha_fin and self.fecha_fin <= self.fecha_inicio:
            raise ValueError('La fecha de fin debe ser posterior a la fecha de inicio')
        return self

class DescuentoUpdate(BackofficeModel):
    nombre_descuento: Optional[str] = Field(None, min_length=2, max_length=150)
    descripcion: Optional[str] = None
    tipo_descuento: Optional[TipoDescuento] = None
    valor_descuento: Optional[Decimal] = Field(None, gt=0)
    monto_minimo_compra: Optional[Decimal] = Field(None, ge=0)
    cantidad_maxima_usos: Optional[int] = Field(None, ge=1)
    uso_por_cliente: Optional[int] = Field(None, ge=1)
    fecha_inicio: Optional[datetime] = None
    fecha_fin: Optional[datetime] = None

class EstadoDescuentoUpdate(BackofficeModel):
    estado: EstadoDescuento

class ValidarDescuentoRequest(BackofficeModel):
    codigo_descuento: str = Field(..., min_length=1)
    monto_compra: Decimal = Field(..., ge=0)
    id_usuario: Optional[int] = Field(None, description="Cliente, para validar el límite de uso por cliente")

# ==================== RESPONSE SCHEMAS ====================

class DescuentoResponse(BackofficeModel):
    id_descuento: int
    codigo_descuento: str
    nombre_descuento: str
    descripcion: Optional[str] = None
    tipo_descuento: TipoDescuento
    valor_descuento: Decimal
    monto_minimo_compra: Optional[Decimal] = None
    cantidad_maxima_usos: Optional[int] = None
    uso_por_cliente: Optional[int] = None
    usos_actuales: int
    fecha_inicio: Optional[datetime] = None
    fecha_fin: Optional[datetime] = None
    estado: EstadoDescuento
    fecha_creacion: Optional[datetime] = None

class ValidacionDescuentoResponse(BackofficeModel):
    valido: bool
    mensaje: str
    descuento: Optional[DescuentoResponse] = None
    valor_aplicado: Optional[Decimal] = None

class HistorialDescuentoResponse(BackofficeModel):
    id_historial: int
    id_descuento: int
    codigo_descuento: Optional[str] = None
    id_usuario: int
    nombre_cliente: Optional[str] = None
    id_venta: Optional[int] = None
    monto_compra: Decimal
    valor_aplicado: Decimal
    fecha_uso: datetime

class EstadisticasDescuentosResponse(BackofficeModel):
    total_descuentos: int
    activos: int
    inactivos: int
    vencidos: int
    total_usos: int
    ahorro_total: Decimal
    uso_ultimos_30_dias: int
