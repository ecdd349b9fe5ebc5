from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from backoffice.shared.schemas import BackofficeModel

# ==================== ENUMS ====================

class RangoDashboard(str, Enum):
    dia = "dia"
    semana = "semana"
    mes = "mes"

class TipoReporteInventario(str, Enum):
    valoracion = "valoracion"
    stock_bajo = "stock_bajo"
    movimientos_recientes = "movimientos_recientes"

# ==================== BLOQUES COMUNES ====================

class PuntoVentas(BackofficeModel):
    fecha: date
    cantidad: int
    total: Decimal

class ProductoTop(BackofficeModel):
    id_producto: int
    nombre_producto: str
    cantidad_vendida: int
    total_vendido: Decimal

class VentasPorEstado(BackofficeModel):
    id_estado_pedido: int
    nombre_estado: str
    color: Optional[str] = None
    cantidad: int
    total: Decimal

# ==================== DASHBOARD ====================

class ResumenVentasDashboard(BackofficeModel):
    total_ventas: Decimal
    cantidad_ventas: int
    ticket_promedio: Decimal
    total_recaudado: Decimal

class ResumenCreditosDashboard(BackofficeModel):
    saldo_cartera: Decimal
    creditos_activos: int
    creditos_vencidos: int
    abonos_periodo: Decimal

class ResumenInventarioDashboard(BackofficeModel):
    total_variantes: int
    unidades_en_stock: int
    valor_inventario: Decimal
    variantes_bajo_stock: int

class DashboardResponse(BackofficeModel):
    rango: RangoDashboard
    fecha_inicio: datetime
    fecha_fin: datetime
    resumen_ventas: ResumenVentasDashboard
    resumen_creditos: ResumenCreditosDashboard
    nuevos_clientes: int
    top_productos: List[ProductoTop]
    grafico_ventas: List[PuntoVentas]
    resumen_inventario: ResumenInventarioDashboard

# ==================== REPORTE DE VENTAS ====================

class KpisVentas(BackofficeModel):
    total_ventas: Decimal
    total_pedidos: int
    ticket_promedio: Decimal
    ahorro_por_descuentos: Decimal
    impuestos: Decimal

class GraficosVentas(BackofficeModel):
    ventas_por_estado: List[VentasPorEstado]
    ventas_por_dia: List[PuntoVentas]
    top_productos: List[ProductoTop]

# ==================== REPORTE DE CRÉDITOS ====================

class KpisCreditos(BackofficeModel):
    total_otorgado: Decimal
    total_recuperado: Decimal
    total_pendiente: Decimal
    porcentaje_recuperacion: Decimal
    creditos_vencidos: int

class CreditosPorEstado(BackofficeModel):
    estado: str
    cantidad: int
    saldo: Decimal

class EvolucionMensual(BackofficeModel):
    mes: str
    otorgado: Decimal
    recuperado: Decimal

# ==================== REPORTE DE INVENTARIO ====================

class ItemInventario(BackofficeModel):
    id_variante: int
    codigo_sku: str
    nombre_producto: str
    talla: Optional[str] = None
    color: Optional[str] = None
    cantidad_stock: int
    stock_minimo: int
    costo_unitario: Decimal
    precio: Decimal
    valor_costo: Decimal
    valor_venta: Decimal
