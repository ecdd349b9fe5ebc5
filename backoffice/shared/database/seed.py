import logging

from sqlalchemy.orm import Session

from .models import Rol, EstadoPedido, TipoMetodoPago, MetodoPago

logger = logging.getLogger(__name__)

ROLES = [
    {"nombre_rol": "Administrador", "descripcion": "Acceso total al sistema"},
    {"nombre_rol": "Gerente", "descripcion": "Consulta de reportes y ventas"},
    {"nombre_rol": "Vendedor", "descripcion": "Registro de ventas"},
    {"nombre_rol": "Cajero", "descripcion": "Registro de pagos y abonos"},
    {"nombre_rol": "Cliente", "descripcion": "Usuario cliente de la tienda"},
]

ESTADOS_PEDIDO = [
    {"nombre_estado": "Pendiente", "descripcion": "Pedido registrado, pendiente de procesamiento", "color": "#FFA500", "orden": 1},
    {"nombre_estado": "Confirmado", "descripcion": "Pedido confirmado, listo para preparar", "color": "#2196F3", "orden": 2},
    {"nombre_estado": "En Preparación", "descripcion": "Pedido en proceso de preparación", "color": "#9C27B0", "orden": 3},
    {"nombre_estado": "Listo para Entrega", "descripcion": "Pedido preparado, listo para despacho", "color": "#00BCD4", "orden": 4},
    {"nombre_estado": "En Tránsito", "descripcion": "Pedido en camino al cliente", "color": "#FF9800", "orden": 5},
    {"nombre_estado": "Entregado", "descripcion": "Pedido entregado al cliente", "color": "#4CAF50", "orden": 6},
    {"nombre_estado": "Cancelado", "descripcion": "Pedido cancelado", "color": "#F44336", "orden": 7},
]

TIPOS_METODO_PAGO = [
    {"codigo": "efectivo", "nombre": "Efectivo", "descripcion": "Pago en efectivo"},
    {"codigo": "tarjeta_credito", "nombre": "Tarjeta Crédito", "descripcion": "Pago con tarjeta de crédito"},
    {"codigo": "tarjeta_debito", "nombre": "Tarjeta Débito", "descripcion": "Pago con tarjeta débito"},
    {"codigo": "transferencia", "nombre": "Transferencia", "descripcion": "Transferencia bancaria o digital"},
    {"codigo": "credito_tienda", "nombre": "Crédito Tienda", "descripcion": "Crédito otorgado por la tienda"},
    {"codigo": "mixto", "nombre": "Pago Mixto", "descripcion": "Combinación de dos o más métodos de pago"},
]

# (nombre, descripción, código de tipo, requiere referencia)
METODOS_PAGO = [
    ("Efectivo", "Pago total en efectivo", "efectivo", False),
    ("Tarjeta Crédito", "Pago total con tarjeta de crédito", "tarjeta_credito", True),
    ("Tarjeta Débito", "Pago total con tarjeta débito", "tarjeta_debito", True),
    ("PSE", "Pago por PSE", "transferencia", True),
    ("Nequi", "Pago con Nequi", "transferencia", True),
    ("Daviplata", "Pago con Daviplata", "transferencia", True),
    ("Crédito Tienda", "Pago a crédito con la tienda", "credito_tienda", False),
    ("Efectivo + Crédito", "Parte en efectivo y parte a crédito", "mixto", False),
    ("Tarjeta Crédito + Crédito", "Parte tarjeta crédito y parte a crédito tienda", "mixto", True),
    ("Tarjeta Débito + Crédito", "Parte tarjeta débito y parte a crédito tienda", "mixto", True),
    ("Efectivo + Tarjeta", "Pago combinado efectivo y tarjeta", "mixto", True),
    ("Transferencia + Crédito", "Pago transferencia y saldo a crédito", "mixto", True),
]


def seed_catalogos(db: Session):
    """
    Crear o actualizar los catálogos base. Puede ejecutarse varias veces.
    """
    for datos in ROLES:
        rol = db.query(Rol).filter(Rol.nombre_rol == datos["nombre_rol"]).first()
        if rol:
            rol.descripcion = datos["descripcion"]
        else:
            db.add(Rol(**datos, activo=True))

    for datos in ESTADOS_PEDIDO:
        estado = db.query(EstadoPedido).filter(
            EstadoPedido.nombre_estado == datos["nombre_estado"]
        ).first()
        if not estado:
            db.add(EstadoPedido(**datos, activo=True))

    tipos = {}
    for datos in TIPOS_METODO_PAGO:
        tipo = db.query(TipoMetodoPago).filter(TipoMetodoPago.codigo == datos["codigo"]).first()
        if not tipo:
            tipo = TipoMetodoPago(**datos, activo=True)
            db.add(tipo)
            db.flush()
        tipos[tipo.codigo] = tipo

    for nombre, descripcion, codigo_tipo, requiere_referencia in METODOS_PAGO:
        metodo = db.query(MetodoPago).filter(MetodoPago.nombre_metodo == nombre).first()
        if metodo:
            metodo.descripcion = descripcion
            metodo.id_tipo_metodo = tipos[codigo_tipo].id_tipo_metodo
            metodo.requiere_referencia = requiere_referencia
        else:
            db.add(MetodoPago(
                nombre_metodo=nombre,
                descripcion=descripcion,
                id_tipo_metodo=tipos[codigo_tipo].id_tipo_metodo,
                requiere_referencia=requiere_referencia,
                activo=True
            ))

    db.commit()
    logger.info("Catálogos base verificados")
