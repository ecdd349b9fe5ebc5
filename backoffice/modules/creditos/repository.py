from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple, Dict, Any
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import desc

from backoffice.shared.database.models import Credito, ClienteCreditoResumen, Pago, Venta

class CreditosRepository:
    """
    Repositorio de créditos de tienda, sus abonos y el resumen por cliente
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== CRÉDITOS ====================

    def get_by_id(self, id_credito: int) -> Optional[Credito]:
        return self.db.query(Credito).options(
            joinedload(Credito.venta),
            joinedload(Credito.cliente)
        ).filter(Credito.id_credito == id_credito).first()

    def get_by_venta(self, id_venta: int) -> Optional[Credito]:
        return self.db.query(Credito).filter(Credito.id_venta == id_venta).first()

    def list_creditos(
        self,
        estado: Optional[str] = None,
        id_usuario: Optional[int] = None,
        offset: int = 0,
        limit: int = 10
    ) -> Tuple[List[Credito], int]:
        query = self.db.query(Credito).options(
            joinedload(Credito.venta),
            joinedload(Credito.cliente)
        )
        if estado:
            query = query.filter(Credito.estado == estado)
        if id_usuario:
            query = query.filter(Credito.id_usuario == id_usuario)

        total = query.count()
        creditos = query.order_by(desc(Credito.fecha_inicio), desc(Credito.id_credito)).offset(offset).limit(limit).all()
        return creditos, total

    def list_by_usuario(self, id_usuario: int) -> List[Credito]:
        return self.db.query(Credito).options(joinedload(Credito.venta)).filter(
            Credito.id_usuario == id_usuario
        ).order_by(desc(Credito.fecha_inicio), desc(Credito.id_credito)).all()

    def marcar_vencidos(self) -> int:
        """Créditos activos con fecha de vencimiento pasada pasan a vencido"""
        return self.db.query(Credito).filter(
            Credito.estado == "activo",
            Credito.fecha_vencimiento < datetime.now()
        ).update({Credito.estado: "vencido"}, synchronize_session=False)

    def create(self, datos: Dict[str, Any]) -> Credito:
        credito = Credito(**datos)
        self.db.add(credito)
        self.db.flush()
        return credito

    def list_ventas_credito(self, offset: int, limit: int) -> Tuple[List[Venta], int]:
        query = self.db.query(Venta).options(
            joinedload(Venta.credito),
            joinedload(Venta.cliente)
        ).filter(Venta.tipo_venta == "credito")

        total = query.count()
        ventas = query.order_by(desc(Venta.fecha_venta), desc(Venta.id_venta)).offset(offset).limit(limit).all()
        return ventas, total

    # ==================== ABONOS ====================

    def create_pago(self, datos: Dict[str, Any]) -> Pago:
        pago = Pago(**datos)
        self.db.add(pago)
        self.db.flush()
        return pago

    # ==================== RESUMEN POR CLIENTE ====================

    def get_resumen(self, id_usuario: int) -> Optional[ClienteCreditoResumen]:
        return self.db.query(ClienteCreditoResumen).filter(
            ClienteCreditoResumen.id_usuario == id_usuario
        ).first()

    def _get_or_create_resumen(self, id_usuario: int) -> ClienteCreditoResumen:
        resumen = self.get_resumen(id_usuario)
        if not resumen:
            resumen = ClienteCreditoResumen(
                id_usuario=id_usuario,
                credito_total=Decimal("0"),
                total_abonado=Decimal("0"),
                saldo_total=Decimal("0"),
                cantidad_creditos_activos=0,
                cantidad_creditos_pagados=0
            )
            self.db.add(resumen)
            self.db.flush()
        return resumen

    def registrar_credito_en_resumen(self, id_usuario: int, monto: Decimal, fecha: datetime):
        resumen = self._get_or_create_resumen(id_usuario)
        resumen.credito_total += monto
        resumen.saldo_total += monto
        resumen.cantidad_creditos_activos += 1
        resumen.fecha_ultimo_credito = fecha
        self.db.flush()

    def registrar_abono_en_resumen(self, id_usuario: int, monto: Decimal, liquidado: bool, fecha: datetime):
        resumen = self._get_or_create_resumen(id_usuario)
        resumen.total_abonado += monto
        resumen.saldo_total = max(Decimal("0"), resumen.saldo_total - monto)
        if liquidado:
            resumen.cantidad_creditos_activos = max(0, resumen.cantidad_creditos_activos - 1)
            resumen.cantidad_creditos_pagados += 1
        resumen.fecha_ultimo_pago = fecha
        self.db.flush()

    def registrar_devolucion_en_resumen(self, id_usuario: int, monto: Decimal, liquidado: bool):
        """Una devolución reduce lo financiado, no cuenta como abono"""
        resumen = self._get_or_create_resumen(id_usuario)
        resumen.credito_total = max(Decimal("0"), resumen.credito_total - monto)
        resumen.saldo_total = max(Decimal("0"), resumen.saldo_total - monto)
        if liquidado:
            resumen.cantidad_creditos_activos = max(0, resumen.cantidad_creditos_activos - 1)
            resumen.cantidad_creditos_pagados += 1
        self.db.flush()
