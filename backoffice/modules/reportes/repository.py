from datetime import datetime
from typing import List, Optional, Tuple, Dict, Any
from sqlalchemy.orm import Session, joinedload, selectinload
from sqlalchemy import func, desc

from backoffice.shared.database.models import (
    Venta, DetalleVenta, Pago, Credito, Usuario, Rol, EstadoPedido,
    Producto, VarianteProducto, MovimientoInventario
)

class ReportesRepository:
    """
    Consultas agregadas para dashboard y reportes
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== VENTAS ====================

    def _filtrar_ventas(
        self,
        query,
        inicio: Optional[datetime],
        fin: Optional[datetime],
        id_estado_pedido: Optional[int] = None,
        id_usuario: Optional[int] = None
    ):
        if inicio:
            query = query.filter(Venta.fecha_venta >= inicio)
        if fin:
            query = query.filter(Venta.fecha_venta <= fin)
        if id_estado_pedido:
            query = query.filter(Venta.id_estado_pedido == id_estado_pedido)
        if id_usuario:
            query = query.filter(Venta.id_usuario == id_usuario)
        return query

    def totales_ventas(self, inicio, fin, id_estado_pedido=None, id_usuario=None) -> Dict[str, Any]:
        query = self.db.query(
            func.count(Venta.id_venta),
            func.coalesce(func.sum(Venta.total), 0),
            func.coalesce(func.sum(Venta.total_pagado), 0),
            func.coalesce(func.sum(Venta.descuento_total), 0),
            func.coalesce(func.sum(Venta.impuestos), 0)
        )
        cantidad, total, pagado, descuentos, impuestos = self._filtrar_ventas(
            query, inicio, fin, id_estado_pedido, id_usuario
        ).one()
        return {
            "cantidad": cantidad or 0,
            "total": total or 0,
            "total_pagado": pagado or 0,
            "descuentos": descuentos or 0,
            "impuestos": impuestos or 0
        }

    def fechas_y_totales(self, inicio, fin, id_estado_pedido=None, id_usuario=None) -> List[Tuple[datetime, Any]]:
        query = self.db.query(Venta.fecha_venta, Venta.total)
        return self._filtrar_ventas(query, inicio, fin, id_estado_pedido, id_usuario).all()

    def ventas_por_estado(self, inicio, fin, id_usuario=None) -> List[Tuple]:
        query = self.db.query(
            EstadoPedido.id_estado_pedido,
            EstadoPedido.nombre_estado,
            EstadoPedido.color,
            func.count(Venta.id_venta),
            func.coalesce(func.sum(Venta.total), 0)
        ).join(Venta, Venta.id_estado_pedido == EstadoPedido.id_estado_pedido)
        query = self._filtrar_ventas(query, inicio, fin, None, id_usuario)
        return query.group_by(
            EstadoPedido.id_estado_pedido, EstadoPedido.nombre_estado, EstadoPedido.color
        ).order_by(EstadoPedido.orden).all()

    def top_productos(self, inicio, fin, limit: int = 5, id_estado_pedido=None, id_usuario=None) -> List[Tuple]:
        cantidad = func.sum(DetalleVenta.cantidad)
        query = self.db.query(
            Producto.id_producto,
            Producto.nombre_producto,
            cantidad,
            func.coalesce(func.sum(DetalleVenta.total_linea), 0)
        ).join(
            VarianteProducto, VarianteProducto.id_producto == Producto.id_producto
        ).join(
            DetalleVenta, DetalleVenta.id_variante == VarianteProducto.id_variante
        ).join(
            Venta, Venta.id_venta == DetalleVenta.id_venta
        )
        query = self._filtrar_ventas(query, inicio, fin, id_estado_pedido, id_usuario)
        return query.group_by(
            Producto.id_producto, Producto.nombre_producto
        ).order_by(desc(cantidad)).limit(limit).all()

    def list_ventas(self, inicio, fin, id_estado_pedido, id_usuario, offset: int, limit: int) -> Tuple[List[Venta], int]:
        query = self.db.query(Venta).options(
            joinedload(Venta.cliente),
            joinedload(Venta.estado_pedido)
        )
        query = self._filtrar_ventas(query, inicio, fin, id_estado_pedido, id_usuario)
        total = query.count()
        ventas = query.order_by(desc(Venta.fecha_venta), desc(Venta.id_venta)).offset(offset).limit(limit).all()
        return ventas, total

    # ==================== CRÉDITOS ====================

    def list_creditos(
        self,
        inicio: Optional[datetime],
        fin: Optional[datetime],
        estado: Optional[str] = None,
        id_usuario: Optional[int] = None
    ) -> List[Credito]:
        query = self.db.query(Credito).options(
            joinedload(Credito.venta),
            joinedload(Credito.cliente),
            selectinload(Credito.abonos)
        )
        if inicio:
            query = query.filter(Credito.fecha_inicio >= inicio)
        if fin:
            query = query.filter(Credito.fecha_inicio <= fin)
        if estado:
            query = query.filter(Credito.estado == estado)
        if id_usuario:
            query = query.filter(Credito.id_usuario == id_usuario)
        return query.order_by(desc(Credito.fecha_inicio), desc(Credito.id_credito)).all()

    def abonos_en_rango(self, inicio: Optional[datetime], fin: Optional[datetime]) -> List[Tuple[datetime, Any]]:
        query = self.db.query(Pago.fecha_pago, Pago.monto).filter(Pago.id_credito.isnot(None))
        if inicio:
            query = query.filter(Pago.fecha_pago >= inicio)
        if fin:
            query = query.filter(Pago.fecha_pago <= fin)
        return query.all()

    def cartera_actual(self) -> Dict[str, Any]:
        ahora = datetime.now()
        saldo, activos = self.db.query(
            func.coalesce(func.sum(Credito.saldo_pendiente), 0),
            func.count(Credito.id_credito)
        ).filter(Credito.estado != "pagado").one()
        vencidos = self.db.query(func.count(Credito.id_credito)).filter(
            Credito.estado != "pagado",
            Credito.fecha_vencimiento < ahora
        ).scalar()
        return {"saldo": saldo or 0, "activos": activos or 0, "vencidos": vencidos or 0}

    # ==================== CLIENTES ====================

    def nuevos_clientes(self, inicio: datetime, fin: datetime) -> int:
        return self.db.query(func.count(Usuario.id_usuario)).join(Rol).filter(
            Rol.nombre_rol == "Cliente",
            Usuario.fecha_registro >= inicio,
            Usuario.fecha_registro <= fin
        ).scalar() or 0

    # ==================== INVENTARIO ====================

    def list_variantes(self, solo_bajo_stock: bool = False) -> List[VarianteProducto]:
        query = self.db.query(VarianteProducto).join(Producto).options(
            joinedload(VarianteProducto.producto)
        ).filter(VarianteProducto.activo == True)
        if solo_bajo_stock:
            query = query.filter(VarianteProducto.cantidad_stock <= VarianteProducto.stock_minimo)
        return query.order_by(Producto.nombre_producto, VarianteProducto.codigo_sku).all()

    def movimientos_recientes(self, limit: int = 50) -> List[MovimientoInventario]:
        return self.db.query(MovimientoInventario).options(
            joinedload(MovimientoInventario.variante).joinedload(VarianteProducto.producto)
        ).order_by(
            desc(MovimientoInventario.fecha_movimiento), desc(MovimientoInventario.id_movimiento)
        ).limit(limit).all()
