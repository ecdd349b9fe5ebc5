import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from backoffice.core.auth.dependencies import ROLES_PERSONAL
from backoffice.core.exceptions import (
    ErrorAPI, ErrorConflicto, ErrorNoEncontrado, ErrorProhibido, ErrorValidacion, ErrorInternoServidor
)
from backoffice.shared.calculos_venta import redondear
from backoffice.shared.database.models import Credito, Usuario
from backoffice.modules.metodos_pago.repository import MetodosPagoRepository
from backoffice.modules.ventas.schemas import PagoResponse
from .repository import CreditosRepository
from .schemas import (
    PagoAbonoRequest, CreditoResponse, CreditoDetalleResponse, CreditosClienteResponse,
    ResumenCreditoClienteResponse, AbonoResponse, VentaCreditoResponse
)

logger = logging.getLogger(__name__)


class CreditosService:
    """
    Créditos de tienda: consulta de cartera y registro de abonos
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = CreditosRepository(db)
        self.metodos_repository = MetodosPagoRepository(db)

    def _actualizar_vencidos(self):
        if self.repository.marcar_vencidos():
            self.db.commit()

    def _verificar_acceso(self, id_usuario: int, usuario: Usuario):
        """Un cliente solo consulta sus propios créditos"""
        if usuario.nombre_rol not in ROLES_PERSONAL and usuario.id_usuario != id_usuario:
            raise ErrorProhibido("No tiene acceso a los créditos de otro cliente")

    # ==================== CONSULTAS ====================

    async def listar(
        self,
        estado: Optional[str],
        id_usuario: Optional[int],
        offset: int,
        limit: int
    ) -> Tuple[List[CreditoResponse], int]:
        self._actualizar_vencidos()
        creditos, total = self.repository.list_creditos(estado, id_usuario, offset, limit)
        return [CreditoResponse.model_validate(c) for c in creditos], total

    async def obtener(self, id_credito: int, usuario: Usuario) -> CreditoDetalleResponse:
        self._actualizar_vencidos()
        credito = self.repository.get_by_id(id_credito)
        if not credito:
            raise ErrorNoEncontrado("Crédito no encontrado")
        self._verificar_acceso(credito.id_usuario, usuario)
        return CreditoDetalleResponse.model_validate(credito)

    async def creditos_cliente(self, id_usuario: int, usuario: Usuario) -> CreditosClienteResponse:
        self._verificar_acceso(id_usuario, usuario)
        self._actualizar_vencidos()
        resumen = self.repository.get_resumen(id_usuario)
        return CreditosClienteResponse(
            resumen=ResumenCreditoClienteResponse.model_validate(resumen) if resumen else None,
            creditos=[CreditoResponse.model_validate(c) for c in self.repository.list_by_usuario(id_usuario)]
        )

    async def listar_ventas_credito(self, offset: int, limit: int) -> Tuple[List[VentaCreditoResponse], int]:
        self._actualizar_vencidos()
        ventas, total = self.repository.list_ventas_credito(offset, limit)
        return [VentaCreditoResponse.model_validate(v) for v in ventas], total

    # ==================== ABONOS ====================

    async def abonar(
        self,
        id_credito: int,
        pagos: List[PagoAbonoRequest],
        notas: Optional[str],
        usuario: Usuario
    ) -> AbonoResponse:
        credito = self.repository.get_by_id(id_credito)
        if not credito:
            raise ErrorNoEncontrado("Crédito no encontrado")
        return await self._registrar_abono(credito, pagos, notas, usuario)

    async def abonar_por_venta(
        self,
        id_venta: int,
        pagos: List[PagoAbonoRequest],
        notas: Optional[str],
        usuario: Usuario
    ) -> AbonoResponse:
        credito = self.repository.get_by_venta(id_venta)
        if not credito:
            raise ErrorNoEncontrado("La venta no tiene un crédito asociado")
        return await self._registrar_abono(credito, pagos, notas, usuario)

    async def _registrar_abono(
        self,
        credito: Credito,
        pagos: List[PagoAbonoRequest],
        notas: Optional[str],
        usuario: Usuario
    ) -> AbonoResponse:
        """
        Registrar uno o varios pagos contra el saldo del crédito.

        Cada pago encadena saldo anterior y nuevo; el que deja el saldo en cero
        queda como liquidación. Venta, crédito y resumen del cliente se
        actualizan en la misma transacción.
        """
        if credito.estado == "pagado":
            raise ErrorConflicto("El crédito ya está pagado")

        monto_total = redondear(sum((p.monto for p in pagos), Decimal("0")))
        if monto_total <= 0:
            raise ErrorValidacion("El monto del abono debe ser mayor a 0")
        if monto_total > credito.saldo_pendiente:
            raise ErrorValidacion(
                f"El abono ({monto_total}) supera el saldo pendiente ({credito.saldo_pendiente})"
            )

        metodos = self.metodos_repository.get_by_ids([p.id_metodo_pago for p in pagos])
        for pago in pagos:
            metodo = metodos.get(pago.id_metodo_pago)
            if not metodo or not metodo.activo:
                raise ErrorValidacion(f"Método de pago {pago.id_metodo_pago} no válido")
            if metodo.es_credito:
                raise ErrorValidacion("Un crédito no puede abonarse con crédito de tienda")
            if metodo.requiere_referencia and not pago.referencia:
                raise ErrorValidacion(f"El método {metodo.nombre_metodo} requiere referencia")

        try:
            ahora = datetime.now()
            venta = credito.venta
            saldo = credito.saldo_pendiente
            registrados = []

            for pago in pagos:
                saldo_nuevo = redondear(saldo - pago.monto)
                registrados.append(self.repository.create_pago({
                    "id_venta": credito.id_venta,
                    "id_metodo_pago": pago.id_metodo_pago,
                    "id_credito": credito.id_credito,
                    "monto": pago.monto,
                    "referencia": pago.referencia,
                    "tipo_pago": "liquidacion" if saldo_nuevo <= 0 else "abono",
                    "saldo_anterior": saldo,
                    "saldo_nuevo": saldo_nuevo,
                    "notas": notas,
                    "id_usuario_registro": usuario.id_usuario,
                    "fecha_pago": ahora
                }))
                saldo = saldo_nuevo

            liquidado = saldo <= 0
            credito.total_abonado = redondear(credito.total_abonado + monto_total)
            credito.saldo_pendiente = max(Decimal("0"), saldo)
            credito.fecha_ultimo_pago = ahora
            if liquidado:
                credito.estado = "pagado"
            if notas:
                credito.observaciones = f"{credito.observaciones}\n{notas}" if credito.observaciones else notas

            venta.total_pagado = redondear(venta.total_pagado + monto_total)
            venta.saldo_pendiente = max(Decimal("0"), redondear(venta.saldo_pendiente - monto_total))
            venta.estado_pago = "pagado" if venta.saldo_pendiente <= 0 else "parcial"

            self.repository.registrar_abono_en_resumen(credito.id_usuario, monto_total, liquidado, ahora)

            self.db.commit()
            self.db.refresh(credito)
            logger.info(
                f"Abono de {monto_total} al crédito {credito.id_credito}"
                f" - saldo {credito.saldo_pendiente}"
            )

            return AbonoResponse(
                credito=CreditoResponse.model_validate(credito),
                pagos=[PagoResponse.model_validate(p) for p in registrados],
                monto_abonado=monto_total,
                saldo_venta=venta.saldo_pendiente,
                estado_pago_venta=venta.estado_pago
            )

        except ErrorAPI:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.exception(f"Error registrando abono: {e}")
            raise ErrorInternoServidor("Error registrando abono")
