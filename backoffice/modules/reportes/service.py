import logging
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.orm import Session

from backoffice.core.exceptions import ErrorValidacion
from backoffice.shared.calculos_venta import CERO, a_decimal, redondear
from backoffice.modules.creditos.repository import CreditosRepository
from backoffice.modules.creditos.schemas import CreditoResponse
from backoffice.modules.inventario.schemas import MovimientoInventarioResponse
from backoffice.modules.ventas.schemas import VentaResumenResponse
from .repository import ReportesRepository
from .schemas import (
    RangoDashboard, TipoReporteInventario, PuntoVentas, ProductoTop, VentasPorEstado,
    ResumenVentasDashboard, ResumenCreditosDashboard, ResumenInventarioDashboard,
    DashboardResponse, KpisVentas, GraficosVentas, KpisCreditos, CreditosPorEstado,
    EvolucionMensual, ItemInventario
)

logger = logging.getLogger(__name__)

DIAS_REPORTE_DEFECTO = 30

class ReportesService:
    """
    Dashboard y reportes de ventas, cartera e inventario.

    Las agrupaciones por día y por mes se hacen en Python para no depender
    de funciones de fecha propias de cada motor de base de datos.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = ReportesRepository(db)

    # ==================== RANGOS DE FECHAS ====================

    def _rango_dashboard(self, rango: RangoDashboard) -> Tuple[datetime, datetime]:
        ahora = datetime.now()
        hoy = datetime.combine(ahora.date(), time.min)
        if rango == RangoDashboard.dia:
            return hoy, ahora
        if rango == RangoDashboard.semana:
            return hoy - timedelta(days=6), ahora
        return hoy.replace(day=1), ahora

    def _rango_reporte(self, fecha_inicio: Optional[date], fecha_fin: Optional[date]) -> Tuple[datetime, datetime]:
        """Sin fechas se toman los últimos 30 días; la fecha fin incluye el día completo"""
        fin = fecha_fin or date.today()
        inicio = fecha_inicio or fin - timedelta(days=DIAS_REPORTE_DEFECTO - 1)
        if inicio > fin:
            raise ErrorValidacion("La fecha de inicio no puede ser posterior a la fecha fin")
        return datetime.combine(inicio, time.min), datetime.combine(fin, time.max)

    # ==================== AGREGACIONES ====================

    def _ventas_por_dia(self, filas, inicio: datetime, fin: datetime) -> List[PuntoVentas]:
        cantidades: Dict[date, int] = defaultdict(int)
        totales: Dict[date, Decimal] = defaultdict(lambda: CERO)
        for fecha_venta, total in filas:
            dia = fecha_venta.date()
            cantidades[dia] += 1
            totales[dia] += a_decimal(total)

        puntos = []
        dia = inicio.date()
        while dia <= fin.date():
            puntos.append(PuntoVentas(fecha=dia, cantidad=cantidades[dia], total=redondear(totales[dia])))
            dia += timedelta(days=1)
        return puntos

    def _top_productos(self, filas) -> List[ProductoTop]:
        return [
            ProductoTop(
                id_producto=id_producto,
                nombre_producto=nombre,
                cantidad_vendida=int(cantidad or 0),
                total_vendido=redondear(total)
            )
            for id_producto, nombre, cantidad, total in filas
        ]

    def _ticket_promedio(self, total, cantidad: int) -> Decimal:
        return redondear(a_decimal(total) / cantidad) if cantidad else CERO

    def _resumen_inventario(self) -> ResumenInventarioDashboard:
        variantes = self.repository.list_variantes()
        return ResumenInventarioDashboard(
            total_variantes=len(variantes),
            unidades_en_stock=sum(v.cantidad_stock for v in variantes),
            valor_inventario=redondear(sum(
                (a_decimal(v.costo_unitario) * v.cantidad_stock for v in variantes), CERO
            )),
            variantes_bajo_stock=sum(1 for v in variantes if v.bajo_stock)
        )

    # ==================== DASHBOARD ====================

    async def dashboard(self, rango: RangoDashboard) -> DashboardResponse:
        inicio, fin = self._rango_dashboard(rango)

        totales = self.repository.totales_ventas(inicio, fin)
        cartera = self.repository.cartera_actual()
        abonos = sum((a_decimal(monto) for _, monto in self.repository.abonos_en_rango(inicio, fin)), CERO)
        logger.info(f"Dashboard ({rango.value}): {totales['cantidad']} ventas desde {inicio:%Y-%m-%d}")

        return DashboardResponse(
            rango=rango,
            fecha_inicio=inicio,
            fecha_fin=fin,
            resumen_ventas=ResumenVentasDashboard(
                total_ventas=redondear(totales["total"]),
                cantidad_ventas=totales["cantidad"],
                ticket_promedio=self._ticket_promedio(totales["total"], totales["cantidad"]),
                total_recaudado=redondear(totales["total_pagado"])
            ),
            resumen_creditos=ResumenCreditosDashboard(
                saldo_cartera=redondear(cartera["saldo"]),
                creditos_activos=cartera["activos"],
                creditos_vencidos=cartera["vencidos"],
                abonos_periodo=redondear(abonos)
            ),
            nuevos_clientes=self.repository.nuevos_clientes(inicio, fin),
            top_productos=self._top_productos(self.repository.top_productos(inicio, fin)),
            grafico_ventas=self._ventas_por_dia(self.repository.fechas_y_totales(inicio, fin), inicio, fin),
            resumen_inventario=self._resumen_inventario()
        )

    # ==================== REPORTE DE VENTAS ====================

    async def reporte_ventas(
        self,
        fecha_inicio: Optional[date],
        fecha_fin: Optional[date],
        id_estado_pedido: Optional[int],
        id_usuario: Optional[int],
        offset: int,
        limit: int
    ) -> Tuple[List[VentaResumenResponse], int, Dict[str, Any]]:
        inicio, fin = self._rango_reporte(fecha_inicio, fecha_fin)

        totales = self.repository.totales_ventas(inicio, fin, id_estado_pedido, id_usuario)
        kpis = KpisVentas(
            total_ventas=redondear(totales["total"]),
            total_pedidos=totales["cantidad"],
            ticket_promedio=self._ticket_promedio(totales["total"], totales["cantidad"]),
            ahorro_por_descuentos=redondear(totales["descuentos"]),
            impuestos=redondear(totales["impuestos"])
        )

        por_estado = [
            VentasPorEstado(
                id_estado_pedido=id_estado,
                nombre_estado=nombre,
                color=color,
                cantidad=cantidad,
                total=redondear(total)
            )
            for id_estado, nombre, color, cantidad, total
            in self.repository.ventas_por_estado(inicio, fin, id_usuario)
            if not id_estado_pedido or id_estado == id_estado_pedido
        ]
        graficos = GraficosVentas(
            ventas_por_estado=por_estado,
            ventas_por_dia=self._ventas_por_dia(
                self.repository.fechas_y_totales(inicio, fin, id_estado_pedido, id_usuario), inicio, fin
            ),
            top_productos=self._top_productos(
                self.repository.top_productos(inicio, fin, 10, id_estado_pedido, id_usuario)
            )
        )

        ventas, total = self.repository.list_ventas(inicio, fin, id_estado_pedido, id_usuario, offset, limit)
        extra = {
            "kpis": kpis,
            "graficos": graficos,
            "fechaInicio": inicio,
            "fechaFin": fin
        }
        return [VentaResumenResponse.model_validate(v) for v in ventas], total, extra

    # ==================== REPORTE DE CRÉDITOS ====================

    async def reporte_creditos(
        self,
        fecha_inicio: Optional[date],
        fecha_fin: Optional[date],
        estado: Optional[str],
        solo_vencidos: bool,
        id_usuario: Optional[int]
    ) -> Dict[str, Any]:
        if CreditosRepository(self.db).marcar_vencidos():
            self.db.commit()

        inicio = datetime.combine(fecha_inicio, time.min) if fecha_inicio else None
        fin = datetime.combine(fecha_fin, time.max) if fecha_fin else None
        if inicio and fin and inicio > fin:
            raise ErrorValidacion("La fecha de inicio no puede ser posterior a la fecha fin")
        if solo_vencidos:
            estado = "vencido"

        creditos = self.repository.list_creditos(inicio, fin, estado, id_usuario)

        otorgado = sum((a_decimal(c.monto_credito) for c in creditos), CERO)
        recuperado = sum((a_decimal(c.total_abonado) for c in creditos), CERO)
        pendiente = sum((a_decimal(c.saldo_pendiente) for c in creditos), CERO)
        kpis = KpisCreditos(
            total_otorgado=redondear(otorgado),
            total_recuperado=redondear(recuperado),
            total_pendiente=redondear(pendiente),
            porcentaje_recuperacion=redondear(recuperado * 100 / otorgado) if otorgado else CERO,
            creditos_vencidos=sum(1 for c in creditos if c.estado == "vencido")
        )

        por_estado: Dict[str, List] = defaultdict(lambda: [0, CERO])
        for credito in creditos:
            por_estado[credito.estado][0] += 1
            por_estado[credito.estado][1] += a_decimal(credito.saldo_pendiente)

        # Evolución por mes: otorgado según inicio del crédito, recuperado según fecha del abono
        otorgado_mes: Dict[str, Decimal] = defaultdict(lambda: CERO)
        recuperado_mes: Dict[str, Decimal] = defaultdict(lambda: CERO)
        for credito in creditos:
            otorgado_mes[credito.fecha_inicio.strftime("%Y-%m")] += a_decimal(credito.monto_credito)
            for abono in credito.abonos:
                recuperado_mes[abono.fecha_pago.strftime("%Y-%m")] += a_decimal(abono.monto)

        return {
            "kpis": kpis,
            "porEstado": [
                CreditosPorEstado(estado=nombre, cantidad=cantidad, saldo=redondear(saldo))
                for nombre, (cantidad, saldo) in sorted(por_estado.items())
            ],
            "evolucionMensual": [
                EvolucionMensual(
                    mes=mes,
                    otorgado=redondear(otorgado_mes[mes]),
                    recuperado=redondear(recuperado_mes[mes])
                )
                for mes in sorted(set(otorgado_mes) | set(recuperado_mes))
            ],
            "creditos": [CreditoResponse.model_validate(c) for c in creditos]
        }

    # ==================== REPORTE DE INVENTARIO ====================

    def _item_inventario(self, variante) -> ItemInventario:
        costo = a_decimal(variante.costo_unitario)
        precio = a_decimal(variante.precio)
        return ItemInventario(
            id_variante=variante.id_variante,
            codigo_sku=variante.codigo_sku,
            nombre_producto=variante.nombre_producto,
            talla=variante.talla,
            color=variante.color,
            cantidad_stock=variante.cantidad_stock,
            stock_minimo=variante.stock_minimo,
            costo_unitario=costo,
            precio=precio,
            valor_costo=redondear(costo * variante.cantidad_stock),
            valor_venta=redondear(precio * variante.cantidad_stock)
        )

    async def reporte_inventario(self, tipo_reporte: TipoReporteInventario) -> Dict[str, Any]:
        if tipo_reporte == TipoReporteInventario.movimientos_recientes:
            movimientos = self.repository.movimientos_recientes()
            return {
                "tipoReporte": tipo_reporte,
                "movimientos": [MovimientoInventarioResponse.model_validate(m) for m in movimientos]
            }

        variantes = self.repository.list_variantes(
            solo_bajo_stock=tipo_reporte == TipoReporteInventario.stock_bajo
        )
        items = [self._item_inventario(v) for v in variantes]
        return {
            "tipoReporte": tipo_reporte,
            "items": items,
            "totales": {
                "variantes": len(items),
                "unidades": sum(i.cantidad_stock for i in items),
                "valorCosto": redondear(sum((i.valor_costo for i in items), CERO)),
                "valorVenta": redondear(sum((i.valor_venta for i in items), CERO))
            }
        }
