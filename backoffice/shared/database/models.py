from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backoffice.config.database import Base

# ===== SEGURIDAD =====

class Rol(Base):
    """Rol de usuario (Administrador, Vendedor, Cajero, Gerente, Cliente)"""
    __tablename__ = "roles"

    id_rol = Column(Integer, primary_key=True, index=True)
    nombre_rol = Column(String(50), unique=True, nullable=False)
    descripcion = Column(String(255))
    activo = Column(Boolean, default=True)

    usuarios = relationship("Usuario", back_populates="rol")

class Usuario(Base):
    """Usuario del sistema; los clientes también son usuarios"""
    __tablename__ = "usuarios"

    id_usuario = Column(Integer, primary_key=True, index=True)
    nombres = Column(String(100), nullable=False)
    apellidos = Column(String(100), nullable=False)
    usuario = Column(String(50), unique=True, nullable=False, index=True)
    correo_electronico = Column(String(255), unique=True, nullable=False, index=True)
    contrasena = Column(String(255), nullable=False)
    telefono = Column(String(30))
    direccion = Column(String(255))
    id_rol = Column(Integer, ForeignKey("roles.id_rol"), nullable=False)
    estado = Column(String(20), default="activo", nullable=False)  # activo | inactivo | bloqueado | eliminado
    fecha_registro = Column(DateTime, default=datetime.now)
    ultima_conexion = Column(DateTime)

    rol = relationship("Rol", back_populates="usuarios")
    compras = relationship("Venta", back_populates="cliente", foreign_keys="Venta.id_usuario")
    creditos = relationship("Credito", back_populates="cliente")

    @property
    def nombre_rol(self):
        return self.rol.nombre_rol if self.rol else None

    @property
    def nombre_completo(self):
        return f"{self.nombres} {self.apellidos}"

# ===== CATÁLOGOS =====

class EstadoPedido(Base):
    """Estado del flujo de un pedido"""
    __tablename__ = "estados_pedido"

    id_estado_pedido = Column(Integer, primary_key=True, index=True)
    nombre_estado = Column(String(100), unique=True, nullable=False)
    descripcion = Column(String(255))
    color = Column(String(20), default="#9E9E9E")
    orden = Column(Integer, default=0)
    activo = Column(Boolean, default=True)

    ventas = relationship("Venta", back_populates="estado_pedido")

class TipoMetodoPago(Base):
    __tablename__ = "tipos_metodo_pago"

    id_tipo_metodo = Column(Integer, primary_key=True, index=True)
    codigo = Column(String(50), unique=True, nullable=False)
    nombre = Column(String(100), nullable=False)
    descripcion = Column(String(255))
    activo = Column(Boolean, default=True)

    metodos = relationship("MetodoPago", back_populates="tipo")

class MetodoPago(Base):
    __tablename__ = "metodos_pago"

    id_metodo_pago = Column(Integer, primary_key=True, index=True)
    nombre_metodo = Column(String(100), unique=True, nullable=False)
    descripcion = Column(String(255))
    id_tipo_metodo = Column(Integer, ForeignKey("tipos_metodo_pago.id_tipo_metodo"), nullable=False)
    requiere_referencia = Column(Boolean, default=False)
    activo = Column(Boolean, default=True)

    tipo = relationship("TipoMetodoPago", back_populates="metodos")

    @property
    def es_credito(self):
        """Los pagos con crédito de tienda no son dinero recibido"""
        return bool(self.tipo and self.tipo.codigo == "credito_tienda")

# ===== INVENTARIO =====

class Producto(Base):
    __tablename__ = "productos"

    id_producto = Column(Integer, primary_key=True, index=True)
    nombre_producto = Column(String(255), nullable=False)
    descripcion = Column(Text)
    precio_venta = Column(Numeric(12, 2), nullable=False, default=0)
    activo = Column(Boolean, default=True)
    fecha_creacion = Column(DateTime, server_default=func.current_timestamp())

    variantes = relationship("VarianteProducto", back_populates="producto")

class VarianteProducto(Base):
    """Variante vendible (talla/color) con su propio stock"""
    __tablename__ = "variantes_producto"

    id_variante = Column(Integer, primary_key=True, index=True)
    id_producto = Column(Integer, ForeignKey("productos.id_producto"), nullable=False)
    codigo_sku = Column(String(100), unique=True, nullable=False)
    talla = Column(String(20))
    color = Column(String(50))
    precio_venta = Column(Numeric(12, 2))  # None: usa el precio del producto
    costo_unitario = Column(Numeric(12, 2), default=0)
    cantidad_stock = Column(Integer, default=0, nullable=False)
    stock_minimo = Column(Integer, default=0, nullable=False)
    activo = Column(Boolean, default=True)

    producto = relationship("Producto", back_populates="variantes")
    movimientos = relationship("MovimientoInventario", back_populates="variante")

    @property
    def precio(self):
        if self.precio_venta is not None:
            return self.precio_venta
        return self.producto.precio_venta

    @property
    def nombre_producto(self):
        return self.producto.nombre_producto if self.producto else None

    @property
    def bajo_stock(self):
        return self.cantidad_stock <= self.stock_minimo

class MovimientoInventario(Base):
    """Movimiento de stock con signo: negativo para salidas"""
    __tablename__ = "movimientos_inventario"

    id_movimiento = Column(Integer, primary_key=True, index=True)
    id_variante = Column(Integer, ForeignKey("variantes_producto.id_variante"), nullable=False)
    tipo_movimiento = Column(String(30), nullable=False)  # venta | devolucion | ajuste | ingreso
    cantidad = Column(Integer, nullable=False)
    stock_anterior = Column(Integer, nullable=False)
    stock_nuevo = Column(Integer, nullable=False)
    motivo = Column(String(255))
    id_venta = Column(Integer, ForeignKey("ventas.id_venta"))
    id_usuario = Column(Integer, ForeignKey("usuarios.id_usuario"))
    fecha_movimiento = Column(DateTime, default=datetime.now, nullable=False)

    variante = relationship("VarianteProducto", back_populates="movimientos")

    @property
    def codigo_sku(self):
        return self.variante.codigo_sku if self.variante else None

# ===== DESCUENTOS =====

class Descuento(Base):
    """Cupón de descuento porcentual o de valor fijo"""
    __tablename__ = "descuentos"

    id_descuento = Column(Integer, primary_key=True, index=True)
    codigo_descuento = Column(String(50), unique=True, nullable=False, index=True)
    nombre_descuento = Column(String(150), nullable=False)
    descripcion = Column(Text)
    tipo_descuento = Column(String(20), nullable=False)  # porcentaje | valor_fijo
    valor_descuento = Column(Numeric(12, 2), nullable=False)
    monto_minimo_compra = Column(Numeric(12, 2), default=0)
    cantidad_maxima_usos = Column(Integer)  # None: ilimitado
    uso_por_cliente = Column(Integer)  # None: ilimitado
    usos_actuales = Column(Integer, default=0, nullable=False)
    fecha_inicio = Column(DateTime)
    fecha_fin = Column(DateTime)
    estado = Column(String(20), default="activo", nullable=False)  # activo | inactivo | vencido
    fecha_creacion = Column(DateTime, server_default=func.current_timestamp())

    historial = relationship("HistorialDescuento", back_populates="descuento")

class DescuentoCliente(Base):
    __tablename__ = "descuentos_cliente"

    id = Column(Integer, primary_key=True, index=True)
    id_descuento = Column(Integer, ForeignKey("descuentos.id_descuento"), nullable=False)
    id_usuario = Column(Integer, ForeignKey("usuarios.id_usuario"), nullable=False)
    usos = Column(Integer, default=0, nullable=False)
    fecha_ultimo_uso = Column(DateTime)

    __table_args__ = (
        UniqueConstraint('id_descuento', 'id_usuario', name='descuento_cliente_unico'),
    )

class HistorialDescuento(Base):
    __tablename__ = "historial_descuentos"

    id_historial = Column(Integer, primary_key=True, index=True)
    id_descuento = Column(Integer, ForeignKey("descuentos.id_descuento"), nullable=False)
    id_usuario = Column(Integer, ForeignKey("usuarios.id_usuario"), nullable=False)
    id_venta = Column(Integer, ForeignKey("ventas.id_venta"))
    monto_compra = Column(Numeric(12, 2), nullable=False)
    valor_aplicado = Column(Numeric(12, 2), nullable=False)
    fecha_uso = Column(DateTime, default=datetime.now, nullable=False)

    descuento = relationship("Descuento", back_populates="historial")
    usuario = relationship("Usuario")

    @property
    def codigo_descuento(self):
        return self.descuento.codigo_descuento if self.descuento else None

    @property
    def nombre_cliente(self):
        return self.usuario.nombre_completo if self.usuario else None

# ===== VENTAS =====

class Venta(Base):
    __tablename__ = "ventas"

    id_venta = Column(Integer, primary_key=True, index=True)
    numero_factura = Column(String(50), unique=True, nullable=False)
    id_usuario = Column(Integer, ForeignKey("usuarios.id_usuario"), nullable=False)
    id_usuario_vendedor = Column(Integer, ForeignKey("usuarios.id_usuario"))
    id_estado_pedido = Column(Integer, ForeignKey("estados_pedido.id_estado_pedido"), nullable=False)
    fecha_venta = Column(DateTime, default=datetime.now, nullable=False, index=True)
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    descuento_total = Column(Numeric(12, 2), nullable=False, default=0)
    impuestos = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False, default=0)
    total_pagado = Column(Numeric(12, 2), nullable=False, default=0)
    saldo_pendiente = Column(Numeric(12, 2), nullable=False, default=0)
    estado_pago = Column(String(20), default="pendiente", nullable=False)  # pendiente | parcial | pagado
    tipo_venta = Column(String(20), default="contado", nullable=False)  # contado | credito
    notas = Column(Text)
    direccion_entrega = Column(String(255))
    id_descuento = Column(Integer, ForeignKey("descuentos.id_descuento"))
    codigo_descuento_usado = Column(String(50))

    cliente = relationship("Usuario", back_populates="compras", foreign_keys=[id_usuario])
    vendedor = relationship("Usuario", foreign_keys=[id_usuario_vendedor])
    estado_pedido = relationship("EstadoPedido", back_populates="ventas")
    detalles = relationship("DetalleVenta", back_populates="venta")
    pagos = relationship("Pago", back_populates="venta", order_by="Pago.id_pago")
    credito = relationship("Credito", back_populates="venta", uselist=False)
    descuento = relationship("Descuento")

    @property
    def nombre_cliente(self):
        return self.cliente.nombre_completo if self.cliente else None

    @property
    def nombre_vendedor(self):
        return self.vendedor.nombre_completo if self.vendedor else None

    @property
    def nombre_estado(self):
        return self.estado_pedido.nombre_estado if self.estado_pedido else None

class DetalleVenta(Base):
    __tablename__ = "detalle_ventas"

    id_detalle = Column(Integer, primary_key=True, index=True)
    id_venta = Column(Integer, ForeignKey("ventas.id_venta"), nullable=False)
    id_variante = Column(Integer, ForeignKey("variantes_producto.id_variante"), nullable=False)
    cantidad = Column(Integer, nullable=False)
    precio_unitario = Column(Numeric(12, 2), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)
    descuento_linea = Column(Numeric(12, 2), nullable=False, default=0)
    total_linea = Column(Numeric(12, 2), nullable=False)

    venta = relationship("Venta", back_populates="detalles")
    variante = relationship("VarianteProducto")

    @property
    def nombre_producto(self):
        return self.variante.nombre_producto if self.variante else None

    @property
    def codigo_sku(self):
        return self.variante.codigo_sku if self.variante else None

class Pago(Base):
    """Dinero recibido: pago inicial de una venta o abono a un crédito"""
    __tablename__ = "pagos"

    id_pago = Column(Integer, primary_key=True, index=True)
    id_venta = Column(Integer, ForeignKey("ventas.id_venta"), nullable=False)
    id_metodo_pago = Column(Integer, ForeignKey("metodos_pago.id_metodo_pago"), nullable=False)
    id_credito = Column(Integer, ForeignKey("creditos.id_credito"))
    monto = Column(Numeric(12, 2), nullable=False)
    referencia = Column(String(100))
    tipo_pago = Column(String(20), nullable=False, default="inicial")  # inicial | abono | liquidacion
    saldo_anterior = Column(Numeric(12, 2), nullable=False)
    saldo_nuevo = Column(Numeric(12, 2), nullable=False)
    notas = Column(Text)
    id_usuario_registro = Column(Integer, ForeignKey("usuarios.id_usuario"))
    fecha_pago = Column(DateTime, default=datetime.now, nullable=False)

    venta = relationship("Venta", back_populates="pagos")
    metodo_pago = relationship("MetodoPago")
    credito = relationship("Credito", back_populates="abonos")

    @property
    def nombre_metodo(self):
        return self.metodo_pago.nombre_metodo if self.metodo_pago else None

class Credito(Base):
    """Saldo financiado con crédito de tienda, uno por venta"""
    __tablename__ = "creditos"

    id_credito = Column(Integer, primary_key=True, index=True)
    id_venta = Column(Integer, ForeignKey("ventas.id_venta"), unique=True, nullable=False)
    id_usuario = Column(Integer, ForeignKey("usuarios.id_usuario"), nullable=False)
    monto_inicial = Column(Numeric(12, 2), nullable=False, default=0)
    monto_credito = Column(Numeric(12, 2), nullable=False)
    monto_total = Column(Numeric(12, 2), nullable=False)
    total_abonado = Column(Numeric(12, 2), nullable=False, default=0)
    saldo_pendiente = Column(Numeric(12, 2), nullable=False)
    fecha_inicio = Column(DateTime, default=datetime.now, nullable=False)
    fecha_vencimiento = Column(DateTime)
    fecha_ultimo_pago = Column(DateTime)
    estado = Column(String(20), default="activo", nullable=False)  # activo | pagado | vencido
    observaciones = Column(Text)

    venta = relationship("Venta", back_populates="credito")
    cliente = relationship("Usuario", back_populates="creditos")
    abonos = relationship("Pago", back_populates="credito", order_by="Pago.id_pago")

    @property
    def numero_factura(self):
        return self.venta.numero_factura if self.venta else None

    @property
    def nombre_cliente(self):
        return self.cliente.nombre_completo if self.cliente else None

class ClienteCreditoResumen(Base):
    """Acumulado de crédito por cliente"""
    __tablename__ = "clientes_credito_resumen"

    id_usuario = Column(Integer, ForeignKey("usuarios.id_usuario"), primary_key=True)
    credito_total = Column(Numeric(12, 2), nullable=False, default=0)
    total_abonado = Column(Numeric(12, 2), nullable=False, default=0)
    saldo_total = Column(Numeric(12, 2), nullable=False, default=0)
    cantidad_creditos_activos = Column(Integer, nullable=False, default=0)
    cantidad_creditos_pagados = Column(Integer, nullable=False, default=0)
    fecha_ultimo_credito = Column(DateTime)
    fecha_ultimo_pago = Column(DateTime)

# ===== DEVOLUCIONES =====

class Devolucion(Base):
    """Devolución de unidades de una venta, procesada al registrarse"""
    __tablename__ = "devoluciones"

    id_devolucion = Column(Integer, primary_key=True, index=True)
    numero_devolucion = Column(String(50), unique=True, nullable=False)
    id_venta = Column(Integer, ForeignKey("ventas.id_venta"), nullable=False, index=True)
    id_usuario = Column(Integer, ForeignKey("usuarios.id_usuario"), nullable=False)
    tipo_devolucion = Column(String(20), nullable=False)  # total | parcial
    motivo = Column(String(255), nullable=False)
    observaciones = Column(Text)
    total_devolucion = Column(Numeric(12, 2), nullable=False)
    monto_aplicado_saldo = Column(Numeric(12, 2), nullable=False, default=0)
    monto_reembolso = Column(Numeric(12, 2), nullable=False, default=0)
    estado = Column(String(20), default="procesada", nullable=False)
    fecha_devolucion = Column(DateTime, default=datetime.now, nullable=False)
    id_usuario_registro = Column(Integer, ForeignKey("usuarios.id_usuario"))

    venta = relationship("Venta")
    cliente = relationship("Usuario", foreign_keys=[id_usuario])
    detalles = relationship("DetalleDevolucion", back_populates="devolucion")

    @property
    def saldo_venta(self):
        return self.venta.saldo_pendiente if self.venta else None

    @property
    def estado_pago_venta(self):
        return self.venta.estado_pago if self.venta else None

    @property
    def numero_factura(self):
        return self.venta.numero_factura if self.venta else None

    @property
    def nombre_cliente(self):
        return self.cliente.nombre_completo if self.cliente else None

class DetalleDevolucion(Base):
    __tablename__ = "detalle_devoluciones"

    id_detalle_devolucion = Column(Integer, primary_key=True, index=True)
    id_devolucion = Column(Integer, ForeignKey("devoluciones.id_devolucion"), nullable=False)
    id_detalle = Column(Integer, ForeignKey("detalle_ventas.id_detalle"), nullable=False, index=True)
    id_variante = Column(Integer, ForeignKey("variantes_producto.id_variante"), nullable=False)
    cantidad_devuelta = Column(Integer, nullable=False)
    precio_unitario = Column(Numeric(12, 2), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)

    devolucion = relationship("Devolucion", back_populates="detalles")
    variante = relationship("VarianteProducto")

    @property
    def codigo_sku(self):
        return self.variante.codigo_sku if self.variante else None
