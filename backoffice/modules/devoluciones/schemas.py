from pydantic import Field, field_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from backoffice.shared.schemas import BackofficeModel

# ==================== REQUEST SCHEMAS ====================

class DetalleDevolucionRequest(BackofficeModel):
    id_detalle: int = Field(..., description="Línea de la venta que se devuelve")
    cantidad_devuelta: int = Field(..., ge=1)

class DevolucionCreate(BackofficeModel):
    id_venta: int
    motivo: str = Field(..., min_length=3, max_length=255)
    observaciones: Optional[str] = None
    detalles: List[DetalleDevolucionRequest] = Field(..., min_length=1)

    @field_validator('detalles')
    @classmethod
    def validate_lineas_unicas(cls, v: List[DetalleDevolucionRequest]):
        ids = [d.id_detalle for d in v]
        if len(set(ids)) != len(ids):
            raise ValueError('Cada línea de la venta debe aparecer una sola vez')
        return v

# ==================== RESPONSE SCHEMAS ====================

class DetalleDevolucionResponse(BackofficeModel):
    id_detalle_devolucion: int
    id_detalle: int
    id_variante: int
    codigo_sku: Optional[str] = None
    cantidad_devuelta: int
    precio_unitario: Decimal
    subtotal: Decimal

class DevolucionResumenResponse(BackofficeModel):
    id_devolucion: int
    numero_devolucion: str
    id_venta: int
    numero_factura: Optional[str] = None
    id_usuario: int
    nombre_cliente: Optional[str] = None
    tipo_devolucion: str
    motivo: str
    total_devolucion: Decimal
    monto_aplicado_saldo: Decimal
    monto_reembolso: Decimal
    estado: str
    fecha_devolucion: datetime

class DevolucionDetalleResponse(DevolucionResumenResponse):
    observaciones: Optional[str] = None
    id_usuario_registro: Optional[int] = None
    detalles: List[DetalleDevolucionResponse] = []
    saldo_venta: Optional[Decimal] = None
    estado_pago_venta: Optional[str] = None
