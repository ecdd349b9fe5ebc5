from typing import List, Optional, Tuple, Dict, Any
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_, desc

from backoffice.shared.database.models import Producto, VarianteProducto, MovimientoInventario

class InventarioRepository:
    """
    Repositorio de productos, variantes y movimientos de stock
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== VARIANTES ====================

    def list_variantes(
        self,
        busqueda: Optional[str] = None,
        solo_bajo_stock: bool = False,
        offset: int = 0,
        limit: int = 10
    ) -> Tuple[List[VarianteProducto], int]:
        query = self.db.query(VarianteProducto).join(Producto).options(
            joinedload(VarianteProducto.producto)
        ).filter(
            VarianteProducto.activo == True,
            Producto.activo == True
        )

        if busqueda:
            patron = f"%{busqueda}%"
            query = query.filter(or_(
                Producto.nombre_producto.ilike(patron),
                VarianteProducto.codigo_sku.ilike(patron)
            ))
        if solo_bajo_stock:
            query = query.filter(VarianteProducto.cantidad_stock <= VarianteProducto.stock_minimo)

        total = query.count()
        variantes = query.order_by(
            Producto.nombre_producto, VarianteProducto.id_variante
        ).offset(offset).limit(limit).all()
        return variantes, total

    def get_variante(self, id_variante: int) -> Optional[VarianteProducto]:
        return self.db.query(VarianteProducto).options(
            joinedload(VarianteProducto.producto)
        ).filter(VarianteProducto.id_variante == id_variante).first()

    def get_variantes_by_ids(self, ids: List[int]) -> Dict[int, VarianteProducto]:
        variantes = self.db.query(VarianteProducto).options(
            joinedload(VarianteProducto.producto)
        ).filter(VarianteProducto.id_variante.in_(ids)).all()
        return {variante.id_variante: variante for variante in variantes}

    def get_by_sku(self, codigo_sku: str) -> Optional[VarianteProducto]:
        return self.db.query(VarianteProducto).filter(
            VarianteProducto.codigo_sku == codigo_sku
        ).first()

    # ==================== PRODUCTOS ====================

    def create_producto(self, datos: Dict[str, Any]) -> Producto:
        producto = Producto(**datos)
        self.db.add(producto)
        self.db.flush()
        return producto

    def create_variante(self, datos: Dict[str, Any]) -> VarianteProducto:
        variante = VarianteProducto(**datos)
        self.db.add(variante)
        self.db.flush()
        return variante

    # ==================== MOVIMIENTOS ====================

    def registrar_movimiento(
        self,
        variante: VarianteProducto,
        cantidad: int,
        tipo_movimiento: str,
        motivo: Optional[str] = None,
        id_venta: Optional[int] = None,
        id_usuario: Optional[int] = None
    ) -> MovimientoInventario:
        """
        Aplicar `cantidad` (con signo) al stock de la variante y registrar el movimiento.
        El llamador valida que el stock no quede negativo.
        """
        stock_anterior = variante.cantidad_stock
        variante.cantidad_stock = stock_anterior + cantidad

        movimiento = MovimientoInventario(
            id_variante=variante.id_variante,
            tipo_movimiento=tipo_movimiento,
            cantidad=cantidad,
            stock_anterior=stock_anterior,
            stock_nuevo=variante.cantidad_stock,
            motivo=motivo,
            id_venta=id_venta,
            id_usuario=id_usuario
        )
        self.db.add(movimiento)
        self.db.flush()
        return movimiento

    def list_movimientos(self, id_variante: int, limit: int = 20) -> List[MovimientoInventario]:
        return self.db.query(MovimientoInventario).filter(
            MovimientoInventario.id_variante == id_variante
        ).order_by(
            desc(MovimientoInventario.fecha_movimiento), desc(MovimientoInventario.id_movimiento)
        ).limit(limit).all()

    def list_movimientos_filtrados(
        self,
        id_variante: Optional[int] = None,
        tipo_movimiento: Optional[str] = None,
        id_venta: Optional[int] = None,
        offset: int = 0,
        limit: int = 10
    ) -> Tuple[List[MovimientoInventario], int]:
        query = self.db.query(MovimientoInventario).options(
            joinedload(MovimientoInventario.variante).joinedload(VarianteProducto.producto)
        )

        if id_variante:
            query = query.filter(MovimientoInventario.id_variante == id_variante)
        if tipo_movimiento:
            query = query.filter(MovimientoInventario.tipo_movimiento == tipo_movimiento)
        if id_venta:
            query = query.filter(MovimientoInventario.id_venta == id_venta)

        total = query.count()
        movimientos = query.order_by(
            desc(MovimientoInventario.fecha_movimiento), desc(MovimientoInventario.id_movimiento)
        ).offset(offset).limit(limit).all()
        return movimientos, total
