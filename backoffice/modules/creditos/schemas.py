from pydantic import Field, model_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum

from backoffice.shared.schemas import BackofficeModel
from backoffice.modules.ventas.schemas import PagoResponse, VentaResumenResponse

# ==================== ENUMS ====================

class EstadoCredito(str, Enum):
    activo = "activo"
    pagado = "pagado"
    vencido = "vencido"

# ==================== REQUEST SCHEMAS ====================

class PagoAbonoRequest(BackofficeModel):
    id_metodo_pago: int
    monto: Decimal = Field(..., gt=0)
    referencia: Optional[str] = Field(None, max_length=100)

class AbonoCreditoRequest(BackofficeModel):
    """
    Abono a un crédito: una lista de pagos o un único monto con su método
    """
    pagos: Optional[List[PagoAbonoRequest]] = None
    monto: Optional[Decimal] = Field(None, gt=0)
    id_metodo_pago: Optional[int] = None
    referencia: Optional[str] = Field(None, max_length=100)
    notas: Optional[str] = None

    @model_validator(mode="after")
    def validate_forma_pago(self):
        if self.pagos:
            return self
        if self.monto is None or self.id_metodo_pago is None:
            raise ValueError('Debe enviar pagos o monto e idMetodoPago')
        return self

    def lista_pagos(self) -> List[PagoAbonoRequest]:
        if self.pagos:
            return self.pagos
        return [PagoAbonoRequest(
            id_metodo_pago=self.id_metodo_pago,
            monto=self.monto,
            referencia=self.referencia
        )]

class AbonoVentaCreditoRequest(BackofficeModel):
    monto: Decimal = Field(..., gt=0)
    id_metodo_pago: int
    referencia: Optional[str] = Field(None, max_length=100)
    notas: Optional[str] = None

# ==================== RESPONSE SCHEMAS ====================

class CreditoResponse(BackofficeModel):
    id_credito: int
    id_venta: int
    numero_factura: Optional[str] = None
    id_usuario: int
    nombre_cliente: Optional[str] = None
    monto_inicial: Decimal
    monto_credito: Decimal
    monto_total: Decimal
    total_abonado: Decimal
    saldo_pendiente: Decimal
    fecha_inicio: datetime
    fecha_vencimiento: Optional[datetime] = None
    fecha_ultimo_pago: Optional[datetime] = None
    estado: EstadoCredito
    observaciones: Optional[str] = None

class CreditoDetalleResponse(CreditoResponse):
    abonos: List[PagoResponse] = []

class ResumenCreditoClienteResponse(BackofficeModel):
    id_usuario: int
    credito_total: Decimal
    total_abonado: Decimal
    saldo_total: Decimal
    cantidad_creditos_activos: int
    cantidad_creditos_pagados: int
    fecha_ultimo_credito: Optional[datetime] = None
    fecha_ultimo_pago: Optional[datetime] = None

class CreditosClienteResponse(BackofficeModel):
    resumen: Optional[ResumenCreditoClienteResponse] = None
    creditos: List[CreditoResponse] = []

class AbonoResponse(BackofficeModel):
    credito: CreditoResponse
    pagos: List[PagoResponse]
    monto_abonado: Decimal
    saldo_venta: Decimal
    estado_pago_venta: str

class VentaCreditoResponse(VentaResumenResponse):
    credito: Optional[CreditoResponse] = None
