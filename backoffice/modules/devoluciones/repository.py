import time
from decimal import Decimal
from typing import List, Optional, Tuple, Dict, Any
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import desc, func

from backoffice.shared.database.models import Devolucion, DetalleDevolucion, VarianteProducto

class DevolucionesRepository:
    """
    Repositorio de devoluciones de venta y su detalle por línea
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== CONSULTAS ====================

    def list_devoluciones(
        self,
        id_venta: Optional[int] = None,
        id_usuario: Optional[int] = None,
        offset: int = 0,
        limit: int = 10
    ) -> Tuple[List[Devolucion], int]:
        query = self.db.query(Devolucion).options(
            joinedload(Devolucion.venta),
            joinedload(Devolucion.cliente)
        )
        if id_venta:
            query = query.filter(Devolucion.id_venta == id_venta)
        if id_usuario:
            query = query.filter(Devolucion.id_usuario == id_usuario)

        total = query.count()
        devoluciones = query.order_by(
            desc(Devolucion.fecha_devolucion), desc(Devolucion.id_devolucion)
        ).offset(offset).limit(limit).all()
        return devoluciones, total

    def get_by_id(self, id_devolucion: int) -> Optional[Devolucion]:
        return self.db.query(Devolucion).options(
            joinedload(Devolucion.venta),
            joinedload(Devolucion.cliente),
            joinedload(Devolucion.detalles).joinedload(DetalleDevolucion.variante).joinedload(VarianteProducto.producto)
        ).filter(Devolucion.id_devolucion == id_devolucion).first()

    def cantidades_devueltas(self, ids_detalle: List[int]) -> Dict[int, int]:
        """Unidades ya devueltas por línea de venta"""
        filas = self.db.query(
            DetalleDevolucion.id_detalle,
            func.sum(DetalleDevolucion.cantidad_devuelta)
        ).filter(
            DetalleDevolucion.id_detalle.in_(ids_detalle)
        ).group_by(DetalleDevolucion.id_detalle).all()
        return {id_detalle: int(cantidad or 0) for id_detalle, cantidad in filas}

    def total_devuelto(self, id_venta: int) -> Decimal:
        total = self.db.query(func.sum(Devolucion.total_devolucion)).filter(
            Devolucion.id_venta == id_venta
        ).scalar()
        return Decimal(str(total)) if total is not None else Decimal("0")

    def generar_numero_devolucion(self) -> str:
        """DV-<epoch en milisegundos>, único"""
        marca = int(time.time() * 1000)
        while self.db.query(Devolucion.id_devolucion).filter(Devolucion.numero_devolucion == f"DV-{marca}").first():
            marca += 1
        return f"DV-{marca}"

    # ==================== ESCRITURA ====================

    def create(self, datos: Dict[str, Any]) -> Devolucion:
        devolucion = Devolucion(**datos)
        self.db.add(devolucion)
        self.db.flush()
        return devolucion

    def create_detalle(self, datos: Dict[str, Any]) -> DetalleDevolucion:
        detalle = DetalleDevolucion(**datos)
        self.db.add(detalle)
        self.db.flush()
        return detalle
