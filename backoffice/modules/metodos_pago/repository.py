from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session, joinedload

from backoffice.shared.database.models import MetodoPago, TipoMetodoPago

class MetodosPagoRepository:
    """
    Repositorio de métodos de pago y sus tipos
    """

    def __init__(self, db: Session):
        self.db = db

    def list_activos(self) -> List[MetodoPago]:
        return self.db.query(MetodoPago).options(joinedload(MetodoPago.tipo)).filter(
            MetodoPago.activo == True
        ).order_by(MetodoPago.nombre_metodo).all()

    def list_tipos(self) -> List[TipoMetodoPago]:
        return self.db.query(TipoMetodoPago).filter(
            TipoMetodoPago.activo == True
        ).order_by(TipoMetodoPago.nombre).all()

    def get_by_id(self, id_metodo_pago: int) -> Optional[MetodoPago]:
        return self.db.query(MetodoPago).options(joinedload(MetodoPago.tipo)).filter(
            MetodoPago.id_metodo_pago == id_metodo_pago
        ).first()

    def get_by_ids(self, ids: List[int]) -> Dict[int, MetodoPago]:
        metodos = self.db.query(MetodoPago).options(joinedload(MetodoPago.tipo)).filter(
            MetodoPago.id_metodo_pago.in_(ids)
        ).all()
        return {metodo.id_metodo_pago: metodo for metodo in metodos}

    def get_by_nombre(self, nombre_metodo: str) -> Optional[MetodoPago]:
        return self.db.query(MetodoPago).filter(
            MetodoPago.nombre_metodo == nombre_metodo
        ).first()

    def get_tipo(self, id_tipo_metodo: int) -> Optional[TipoMetodoPago]:
        return self.db.query(TipoMetodoPago).filter(
            TipoMetodoPago.id_tipo_metodo == id_tipo_metodo
        ).first()

    def create(self, datos: Dict[str, Any]) -> MetodoPago:
        metodo = MetodoPago(**datos)
        self.db.add(metodo)
        self.db.flush()
        return metodo
