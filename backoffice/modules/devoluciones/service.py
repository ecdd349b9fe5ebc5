import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from backoffice.core.auth.dependencies import ROLES_PERSONAL
from backoffice.core.exceptions import (
    ErrorAPI, ErrorConflicto, ErrorNoEncontrado, ErrorProhibido, ErrorValidacion, ErrorInternoServidor
)
from backoffice.shared.calculos_venta import CERO, redondear
from backoffice.shared.database.models import Usuario, Venta
from backoffice.modules.creditos.repository import CreditosRepository
from backoffice.modules.inventario.repository import InventarioRepository
from backoffice.modules.ventas.repository import VentasRepository
from .repository import DevolucionesRepository
from .schemas import DevolucionCreate, DevolucionResumenResponse, DevolucionDetalleResponse

logger = logging.getLogger(__name__)


class DevolucionesService:
    """
    Devoluciones de venta: reingreso de stock y ajuste de saldos de venta y crédito
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = DevolucionesRepository(db)
        self.ventas = VentasRepository(db)
        self.inventario = InventarioRepository(db)
        self.creditos = CreditosRepository(db)

    # ==================== REGISTRO ====================

    def _valor_devuelto(self, venta: Venta, total_lineas_devueltas: Decimal) -> Decimal:
        """Parte del total de la venta (cupón e IVA incluidos) que corresponde a las líneas devueltas"""
        base = sum((d.total_linea for d in venta.detalles), CERO)
        if base <= 0:
            return CERO
        return redondear(venta.total * total_lineas_devueltas / base)

    async def crear(self, datos: DevolucionCreate, usuario: Usuario) -> DevolucionDetalleResponse:
        """
        Registrar una devolución ya procesada.

        Las unidades vuelven al inventario con un movimiento 'devolucion'.
        El valor devuelto reduce primero el saldo pendiente de la venta (y del
        crédito de tienda asociado); lo que exceda ese saldo queda como
        reembolso al cliente.
        """
        venta = self.ventas.get_by_id(datos.id_venta)
        if not venta:
            raise ErrorNoEncontrado("Venta no encontrada")

        lineas_venta = {d.id_detalle: d for d in venta.detalles}
        ya_devueltas = self.repository.cantidades_devueltas(list(lineas_venta))

        total_lineas = CERO
        for item in datos.detalles:
            linea = lineas_venta.get(item.id_detalle)
            if not linea:
                raise ErrorValidacion(f"La línea {item.id_detalle} no pertenece a la venta {venta.numero_factura}")
            disponible = linea.cantidad - ya_devueltas.get(item.id_detalle, 0)
            if item.cantidad_devuelta > disponible:
                raise ErrorConflicto(
                    f"Intenta devolver {item.cantidad_devuelta} unidades de {linea.codigo_sku}, "
                    f"pero solo quedan {disponible} por devolver"
                )
            total_lineas += linea.total_linea * item.cantidad_devuelta / linea.cantidad

        devueltas_despues = dict(ya_devueltas)
        for item in datos.detalles:
            devueltas_despues[item.id_detalle] = devueltas_despues.get(item.id_detalle, 0) + item.cantidad_devuelta
        es_total = all(devueltas_despues.get(d.id_detalle, 0) >= d.cantidad for d in venta.detalles)

        if es_total:
            # la última devolución cierra el total exacto de la venta
            total_devolucion = redondear(venta.total - self.repository.total_devuelto(venta.id_venta))
        else:
            total_devolucion = self._valor_devuelto(venta, total_lineas)

        try:
            ahora = datetime.now()
            aplicado = min(total_devolucion, venta.saldo_pendiente)
            reembolso = redondear(total_devolucion - aplicado)

            devolucion = self.repository.create({
                "numero_devolucion": self.repository.generar_numero_devolucion(),
                "id_venta": venta.id_venta,
                "id_usuario": venta.id_usuario,
                "tipo_devolucion": "total" if es_total else "parcial",
                "motivo": datos.motivo,
                "observaciones": datos.observaciones,
                "total_devolucion": total_devolucion,
                "monto_aplicado_saldo": aplicado,
                "monto_reembolso": reembolso,
                "estado": "procesada",
                "fecha_devolucion": ahora,
                "id_usuario_registro": usuario.id_usuario
            })

            # 1. Detalle y reingreso de stock
            for item in datos.detalles:
                linea = lineas_venta[item.id_detalle]
                self.repository.create_detalle({
                    "id_devolucion": devolucion.id_devolucion,
                    "id_detalle": linea.id_detalle,
                    "id_variante": linea.id_variante,
                    "cantidad_devuelta": item.cantidad_devuelta,
                    "precio_unitario": redondear(linea.total_linea / linea.cantidad),
                    "subtotal": redondear(linea.total_linea * item.cantidad_devuelta / linea.cantidad)
                })
                self.inventario.registrar_movimiento(
                    linea.variante,
                    item.cantidad_devuelta,
                    "devolucion",
                    f"Devolución {devolucion.numero_devolucion}",
                    id_venta=venta.id_venta,
                    id_usuario=usuario.id_usuario
                )

            # 2. Saldo de la venta
            if aplicado > 0:
                venta.saldo_pendiente = redondear(venta.saldo_pendiente - aplicado)
                if venta.saldo_pendiente <= 0:
                    venta.estado_pago = "pagado"

            # 3. Crédito de tienda asociado
            credito = venta.credito
            if credito and credito.estado != "pagado" and aplicado > 0:
                reduccion = min(aplicado, credito.saldo_pendiente)
                credito.saldo_pendiente = redondear(credito.saldo_pendiente - reduccion)
                credito.monto_credito = max(CERO, redondear(credito.monto_credito - reduccion))
                credito.monto_total = max(CERO, redondear(credito.monto_total - reduccion))
                liquidado = credito.saldo_pendiente <= 0
                if liquidado:
                    credito.estado = "pagado"
                self.creditos.registrar_devolucion_en_resumen(credito.id_usuario, reduccion, liquidado)

            self.db.commit()
            logger.info(
                f"Devolución {devolucion.numero_devolucion} de la venta {venta.numero_factura}"
                f" - total {total_devolucion} - reembolso {reembolso}"
            )

            return DevolucionDetalleResponse.model_validate(self.repository.get_by_id(devolucion.id_devolucion))

        except ErrorAPI:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.exception(f"Error registrando devolución: {e}")
            raise ErrorInternoServidor("Error registrando devolución")

    # ==================== CONSULTAS ====================

    async def listar(
        self,
        id_venta: Optional[int],
        id_usuario: Optional[int],
        offset: int,
        limit: int
    ) -> Tuple[List[DevolucionResumenResponse], int]:
        devoluciones, total = self.repository.list_devoluciones(id_venta, id_usuario, offset, limit)
        return [DevolucionResumenResponse.model_validate(d) for d in devoluciones], total

    async def obtener(self, id_devolucion: int, usuario: Usuario) -> DevolucionDetalleResponse:
        devolucion = self.repository.get_by_id(id_devolucion)
        if not devolucion:
            raise ErrorNoEncontrado("Devolución no encontrada")
        if usuario.nombre_rol not in ROLES_PERSONAL and devolucion.id_usuario != usuario.id_usuario:
            raise ErrorProhibido("No tiene acceso a esta devolución")
        return DevolucionDetalleResponse.model_validate(devolucion)
