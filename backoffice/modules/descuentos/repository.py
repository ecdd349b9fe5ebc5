from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional, Tuple, Dict, Any
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func, or_, desc

from backoffice.shared.database.models import Descuento, DescuentoCliente, HistorialDescuento

class DescuentosRepository:
    """
    Repositorio de cupones de descuento y su historial de uso
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== DESCUENTOS ====================

    def get_by_id(self, id_descuento: int) -> Optional[Descuento]:
        return self.db.query(Descuento).filter(Descuento.id_descuento == id_descuento).first()

    def get_by_codigo(self, codigo: str) -> Optional[Descuento]:
        return self.db.query(Descuento).filter(
            Descuento.codigo_descuento == codigo.strip().upper()
        ).first()

    def list_descuentos(
        self,
        busqueda: Optional[str] = None,
        estado: Optional[str] = None,
        tipo_descuento: Optional[str] = None,
        offset: int = 0,
        limit: int = 10
    ) -> Tuple[List[Descuento], int]:
        query = self.db.query(Descuento)

        if busqueda:
            patron = f"%{busqueda}%"
            query = query.filter(or_(
                Descuento.codigo_descuento.ilike(patron),
                Descuento.nombre_descuento.ilike(patron)
            ))
        if estado:
            query = query.filter(Descuento.estado == estado)
        if tipo_descuento:
            query = query.filter(Descuento.tipo_descuento == tipo_descuento)

        total = query.count()
        descuentos = query.order_by(desc(Descuento.id_descuento)).offset(offset).limit(limit).all()
        return descuentos, total

    def create(self, datos: Dict[str, Any]) -> Descuento:
        descuento = Descuento(**datos)
        self.db.add(descuento)
        self.db.flush()
        return descuento

    # ==================== USO ====================

    def get_usos_cliente(self, id_descuento: int, id_usuario: int) -> int:
        registro = self.db.query(DescuentoCliente).filter(
            DescuentoCliente.id_descuento == id_descuento,
            DescuentoCliente.id_usuario == id_usuario
        ).first()
        return registro.usos if registro else 0

    def registrar_uso(
        self,
        descuento: Descuento,
        id_usuario: int,
        id_venta: Optional[int],
        monto_compra: Decimal,
        valor_aplicado: Decimal
    ) -> HistorialDescuento:
        """Incrementar contadores de uso y dejar rastro en el historial (sin commit)"""
        ahora = datetime.now()
        descuento.usos_actuales = (descuento.usos_actuales or 0) + 1

        registro = self.db.query(DescuentoCliente).filter(
            DescuentoCliente.id_descuento == descuento.id_descuento,
            DescuentoCliente.id_usuario == id_usuario
        ).first()
        if registro:
            registro.usos += 1
            registro.fecha_ultimo_uso = ahora
        else:
            self.db.add(DescuentoCliente(
                id_descuento=descuento.id_descuento,
                id_usuario=id_usuario,
                usos=1,
                fecha_ultimo_uso=ahora
            ))

        historial = HistorialDescuento(
            id_descuento=descuento.id_descuento,
            id_usuario=id_usuario,
            id_venta=id_venta,
            monto_compra=monto_compra,
            valor_aplicado=valor_aplicado,
            fecha_uso=ahora
        )
        self.db.add(historial)
        self.db.flush()
        return historial

    # ==================== HISTORIAL Y ESTADÍSTICAS ====================

    def list_historial(
        self,
        id_descuento: Optional[int] = None,
        offset: int = 0,
        limit: int = 10
    ) -> Tuple[List[HistorialDescuento], int]:
        query = self.db.query(HistorialDescuento).options(
            joinedload(HistorialDescuento.descuento),
            joinedload(HistorialDescuento.usuario)
        )
        if id_descuento is not None:
            query = query.filter(HistorialDescuento.id_descuento == id_descuento)

        total = query.count()
        registros = query.order_by(
            desc(HistorialDescuento.fecha_uso), desc(HistorialDescuento.id_historial)
        ).offset(offset).limit(limit).all()
        return registros, total

    def count_por_estado(self) -> Dict[str, int]:
        filas = self.db.query(Descuento.estado, func.count(Descuento.id_descuento)).group_by(
            Descuento.estado
        ).all()
        return {estado: cantidad for estado, cantidad in filas}

    def get_totales_uso(self) -> Dict[str, Any]:
        total_usos = self.db.query(func.coalesce(func.sum(Descuento.usos_actuales), 0)).scalar()
        ahorro_total = self.db.query(
            func.coalesce(func.sum(HistorialDescuento.valor_aplicado), 0)
        ).scalar()
        uso_reciente = self.db.query(func.count(HistorialDescuento.id_historial)).filter(
            HistorialDescuento.fecha_uso >= datetime.now() - timedelta(days=30)
        ).scalar()
        return {
            "total_usos": total_usos or 0,
            "ahorro_total": ahorro_total or 0,
            "uso_ultimos_30_dias": uso_reciente or 0
        }
