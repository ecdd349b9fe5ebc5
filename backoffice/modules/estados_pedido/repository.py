from typing import List, Optional, Tuple, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy import func

from backoffice.shared.database.models import EstadoPedido, Venta

class EstadosPedidoRepository:

    def __init__(self, db: Session):
        self.db = db

    def list_con_ventas(self, solo_activos: bool = False) -> List[Tuple[EstadoPedido, int]]:
        """Estados ordenados por su posición en el flujo, con el número de ventas en cada uno"""
        query = self.db.query(
            EstadoPedido,
            func.count(Venta.id_venta)
        ).outerjoin(
            Venta, Venta.id_estado_pedido == EstadoPedido.id_estado_pedido
        ).group_by(EstadoPedido.id_estado_pedido)

        if solo_activos:
            query = query.filter(EstadoPedido.activo == True)

        return query.order_by(EstadoPedido.orden, EstadoPedido.id_estado_pedido).all()

    def get_by_id(self, id_estado_pedido: int) -> Optional[EstadoPedido]:
        return self.db.query(EstadoPedido).filter(
            EstadoPedido.id_estado_pedido == id_estado_pedido
        ).first()

    def get_by_nombre(self, nombre_estado: str) -> Optional[EstadoPedido]:
        return self.db.query(EstadoPedido).filter(
            EstadoPedido.nombre_estado == nombre_estado
        ).first()

    def get_max_orden(self) -> int:
        return self.db.query(func.max(EstadoPedido.orden)).scalar() or 0

    def count_ventas(self, id_estado_pedido: int) -> int:
        return self.db.query(func.count(Venta.id_venta)).filter(
            Venta.id_estado_pedido == id_estado_pedido
        ).scalar() or 0

    def create(self, datos: Dict[str, Any]) -> EstadoPedido:
        estado = EstadoPedido(**datos)
        self.db.add(estado)
        self.db.flush()
        return estado

    def delete(self, estado: EstadoPedido):
        self.db.delete(estado)
