import time
from typing import List, Optional, Tuple, Dict, Any
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_, desc

from backoffice.shared.database.models import (
    Venta, DetalleVenta, Pago, Usuario, EstadoPedido, VarianteProducto
)

class VentasRepository:
    """
    Repositorio de ventas, sus líneas y pagos
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== CONSULTAS ====================

    def list_ventas(
        self,
        busqueda: Optional[str] = None,
        id_estado_pedido: Optional[int] = None,
        id_usuario: Optional[int] = None,
        offset: int = 0,
        limit: int = 10
    ) -> Tuple[List[Venta], int]:
        query = self.db.query(Venta).join(
            Usuario, Venta.id_usuario == Usuario.id_usuario
        ).options(
            joinedload(Venta.cliente),
            joinedload(Venta.estado_pedido)
        )

        if busqueda:
            patron = f"%{busqueda}%"
            query = query.filter(or_(
                Venta.numero_factura.ilike(patron),
                Usuario.nombres.ilike(patron),
                Usuario.apellidos.ilike(patron),
                Usuario.correo_electronico.ilike(patron)
            ))
        if id_estado_pedido:
            query = query.filter(Venta.id_estado_pedido == id_estado_pedido)
        if id_usuario:
            query = query.filter(Venta.id_usuario == id_usuario)

        total = query.count()
        ventas = query.order_by(desc(Venta.fecha_venta), desc(Venta.id_venta)).offset(offset).limit(limit).all()
        return ventas, total

    def get_by_id(self, id_venta: int) -> Optional[Venta]:
        return self.db.query(Venta).options(
            joinedload(Venta.cliente),
            joinedload(Venta.vendedor),
            joinedload(Venta.estado_pedido),
            joinedload(Venta.detalles).joinedload(DetalleVenta.variante).joinedload(VarianteProducto.producto),
            joinedload(Venta.pagos).joinedload(Pago.metodo_pago),
            joinedload(Venta.credito)
        ).filter(Venta.id_venta == id_venta).first()

    def list_pagos(self, id_venta: int) -> List[Pago]:
        return self.db.query(Pago).options(joinedload(Pago.metodo_pago)).filter(
            Pago.id_venta == id_venta
        ).order_by(Pago.fecha_pago, Pago.id_pago).all()

    def get_estado(self, id_estado_pedido: int) -> Optional[EstadoPedido]:
        return self.db.query(EstadoPedido).filter(
            EstadoPedido.id_estado_pedido == id_estado_pedido
        ).first()

    def get_estado_inicial(self) -> Optional[EstadoPedido]:
        """'Pendiente' o, si no existe, el primer estado activo del flujo"""
        estado = self.db.query(EstadoPedido).filter(EstadoPedido.nombre_estado == "Pendiente").first()
        if estado:
            return estado
        return self.db.query(EstadoPedido).filter(
            EstadoPedido.activo == True
        ).order_by(EstadoPedido.orden).first()

    def generar_numero_factura(self) -> str:
        """FV-<epoch en milisegundos>, único"""
        marca = int(time.time() * 1000)
        while self.db.query(Venta.id_venta).filter(Venta.numero_factura == f"FV-{marca}").first():
            marca += 1
        return f"FV-{marca}"

    # ==================== ESCRITURA ====================

    def create_venta(self, datos: Dict[str, Any]) -> Venta:
        venta = Venta(**datos)
        self.db.add(venta)
        self.db.flush()
        return venta

    def create_detalle(self, datos: Dict[str, Any]) -> DetalleVenta:
        detalle = DetalleVenta(**datos)
        self.db.add(detalle)
        self.db.flush()
        return detalle

    def create_pago(self, datos: Dict[str, Any]) -> Pago:
        pago = Pago(**datos)
        self.db.add(pago)
        self.db.flush()
        return pago

    def list_pagos_filtrados(
        self,
        id_venta: Optional[int] = None,
        id_metodo_pago: Optional[int] = None,
        tipo_pago: Optional[str] = None,
        offset: int = 0,
        limit: int = 10
    ) -> Tuple[List[Pago], int]:
        query = self.db.query(Pago).options(joinedload(Pago.metodo_pago))

        if id_venta:
            query = query.filter(Pago.id_venta == id_venta)
        if id_metodo_pago:
            query = query.filter(Pago.id_metodo_pago == id_metodo_pago)
        if tipo_pago:
            query = query.filter(Pago.tipo_pago == tipo_pago)

        total = query.count()
        pagos = query.order_by(desc(Pago.fecha_pago), desc(Pago.id_pago)).offset(offset).limit(limit).all()
        return pagos, total
