from pydantic import Field, model_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum

from backoffice.shared.schemas import BackofficeModel

# ==================== ENUMS ====================

class TipoVenta(str, Enum):
    contado = "contado"
    credito = "credito"

class EstadoPago(str, Enum):
    pendiente = "pendiente"
    parcial = "parcial"
    pagado = "pagado"

# ==================== REQUEST SCHEMAS ====================

class DetalleVentaRequest(BackofficeModel):
    id_variante: int = Field(..., description="Variante vendida")
    cantidad: int = Field(..., ge=1, description="Cantidad")
    precio_unitario: Decimal = Field(..., ge=0, decimal_places=2, description="Precio unitario")
    descuento_linea: Decimal = Field(Decimal("0"), ge=0, decimal_places=2, description="Descuento aplicado a la línea")

    @model_validator(mode="after")
    def validate_descuento_linea(self):
        if self.descuento_linea > self.cantidad * self.precio_unitario:
            raise ValueError('El descuento de la línea no puede superar su subtotal')
        return self

class PagoVentaRequest(BackofficeModel):
    id_metodo_pago: int
    monto: Decimal = Field(..., ge=0, decimal_places=2, description="Monto asignado al método")
    referencia: Optional[str] = Field(None, max_length=100, description="Referencia del pago (voucher, transacción)")

class VentaCalculoRequest(BackofficeModel):
    """Carrito a calcular sin registrar la venta"""
    detalle_ventas: List[DetalleVentaRequest] = Field(..., min_length=1, description="Líneas de la venta")
    pagos: List[PagoVentaRequest] = Field(default_factory=list)
    aplica_iva: bool = False
    porcentaje_iva: Optional[Decimal] = Field(None, ge=0, le=100)
    codigo_descuento_usado: Optional[str] = None
    id_usuario: Optional[int] = Field(None, description="Cliente; habilita la validación de uso por cliente")

class VentaCreateRequest(VentaCalculoRequest):
    id_usuario: int = Field(..., description="Cliente de la venta")
    id_usuario_vendedor: Optional[int] = Field(None, description="Vendedor; por defecto el usuario autenticado")
    pagos: List[PagoVentaRequest] = Field(..., min_length=1, description="Pagos asignados")
    id_estado_pedido: Optional[int] = Field(None, description="Estado inicial; por defecto Pendiente")
    notas: Optional[str] = None
    direccion_entrega: Optional[str] = Field(None, max_length=255)
    total: Optional[Decimal] = Field(None, ge=0, description="Total calculado por el cliente, se verifica contra el del servidor")

class EstadoVentaUpdate(BackofficeModel):
    id_estado_pedido: int

# ==================== RESPONSE SCHEMAS ====================

class ResumenVentaResponse(BackofficeModel):
    subtotal: Decimal
    descuentos_linea: Decimal
    base_antes_cupon: Decimal
    descuento_cupon: Decimal
    base_imponible: Decimal
    impuestos: Decimal
    total: Decimal
    descuento_total: Decimal

class ResumenPagosResponse(BackofficeModel):
    total_asignado: Decimal
    monto_credito: Decimal
    monto_abonado: Decimal
    faltante: Decimal
    cambio: Decimal
    tipo_venta: TipoVenta
    modalidad: str
    pago_completo: bool

class DescuentoAplicadoResponse(BackofficeModel):
    id_descuento: int
    codigo_descuento: str
    tipo_descuento: str
    valor_descuento: Decimal
    valor_aplicado: Decimal

class CalculoVentaResponse(BackofficeModel):
    resumen: ResumenVentaResponse
    pagos: ResumenPagosResponse
    descuento: Optional[DescuentoAplicadoResponse] = None

class DetalleVentaResponse(BackofficeModel):
    id_detalle: int
    id_variante: int
    nombre_producto: Optional[str] = None
    codigo_sku: Optional[str] = None
    cantidad: int
    precio_unitario: Decimal
    subtotal: Decimal
    descuento_linea: Decimal
    total_linea: Decimal

class PagoResponse(BackofficeModel):
    id_pago: int
    id_venta: int
    id_metodo_pago: int
    nombre_metodo: Optional[str] = None
    id_credito: Optional[int] = None
    monto: Decimal
    referencia: Optional[str] = None
    tipo_pago: str
    saldo_anterior: Decimal
    saldo_nuevo: Decimal
    notas: Optional[str] = None
    fecha_pago: datetime

class CreditoVentaResponse(BackofficeModel):
    id_credito: int
    monto_credito: Decimal
    total_abonado: Decimal
    saldo_pendiente: Decimal
    fecha_vencimiento: Optional[datetime] = None
    estado: str

class VentaResumenResponse(BackofficeModel):
    id_venta: int
    numero_factura: str
    fecha_venta: datetime
    id_usuario: int
    nombre_cliente: Optional[str] = None
    id_estado_pedido: int
    nombre_estado: Optional[str] = None
    subtotal: Decimal
    descuento_total: Decimal
    impuestos: Decimal
    total: Decimal
    total_pagado: Decimal
    saldo_pendiente: Decimal
    estado_pago: EstadoPago
    tipo_venta: TipoVenta

class VentaDetalleResponse(VentaResumenResponse):
    id_usuario_vendedor: Optional[int] = None
    nombre_vendedor: Optional[str] = None
    notas: Optional[str] = None
    direccion_entrega: Optional[str] = None
    codigo_descuento_usado: Optional[str] = None
    detalles: List[DetalleVentaResponse] = []
    pagos: List[PagoResponse] = []
    credito: Optional[CreditoVentaResponse] = None
