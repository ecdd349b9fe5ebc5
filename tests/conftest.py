"""Fixtures compartidas: base SQLite en memoria, catálogos, usuarios con token e inventario."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "clave-de-pruebas-backoffice")
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["SEED_ON_STARTUP"] = "false"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backoffice.config.database import Base, get_db
from backoffice.core.security import create_access_token, hash_password
from backoffice.main import app
from backoffice.shared.database.models import (
    Descuento, MetodoPago, Producto, Rol, Usuario, VarianteProducto
)
from backoffice.shared.database.seed import seed_catalogos

CONTRASENA = "secreta123"


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    seed_catalogos(session)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ==================== USUARIOS ====================

def crear_usuario(db, nombre_rol: str, usuario: str, estado: str = "activo") -> Usuario:
    rol = db.query(Rol).filter(Rol.nombre_rol == nombre_rol).one()
    nuevo = Usuario(
        nombres=usuario.capitalize(),
        apellidos="Pruebas",
        usuario=usuario,
        correo_electronico=f"{usuario}@tienda.com",
        contrasena=hash_password(CONTRASENA),
        id_rol=rol.id_rol,
        estado=estado
    )
    db.add(nuevo)
    db.commit()
    db.refresh(nuevo)
    return nuevo


def auth_headers(usuario: Usuario) -> dict:
    token = create_access_token({"sub": str(usuario.id_usuario), "rol": usuario.nombre_rol})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(db_session):
    return crear_usuario(db_session, "Administrador", "admin")


@pytest.fixture
def vendedor(db_session):
    return crear_usuario(db_session, "Vendedor", "vendedor")


@pytest.fixture
def gerente(db_session):
    return crear_usuario(db_session, "Gerente", "gerente")


@pytest.fixture
def cliente_usuario(db_session):
    return crear_usuario(db_session, "Cliente", "cliente")


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def vendedor_headers(vendedor):
    return auth_headers(vendedor)


@pytest.fixture
def gerente_headers(gerente):
    return auth_headers(gerente)


@pytest.fixture
def cliente_headers(cliente_usuario):
    return auth_headers(cliente_usuario)


# ==================== CATÁLOGOS E INVENTARIO ====================

@pytest.fixture
def metodos(db_session):
    """nombre del método -> id"""
    return {m.nombre_metodo: m.id_metodo_pago for m in db_session.query(MetodoPago).all()}


@pytest.fixture
def variantes(db_session):
    """
    Dos variantes de un mismo producto:
    - CAM-M-NEG: precio del producto (50.000), 10 unidades
    - CAM-L-BLA: precio propio (55.000), 2 unidades
    """
    producto = Producto(nombre_producto="Camiseta Básica", precio_venta=Decimal("50000"), activo=True)
    db_session.add(producto)
    db_session.flush()

    negra = VarianteProducto(
        id_producto=producto.id_producto, codigo_sku="CAM-M-NEG", talla="M", color="Negro",
        costo_unitario=Decimal("20000"), cantidad_stock=10, stock_minimo=3, activo=True
    )
    blanca = VarianteProducto(
        id_producto=producto.id_producto, codigo_sku="CAM-L-BLA", talla="L", color="Blanco",
        precio_venta=Decimal("55000"), costo_unitario=Decimal("22000"),
        cantidad_stock=2, stock_minimo=3, activo=True
    )
    db_session.add_all([negra, blanca])
    db_session.commit()
    return {"negra": negra, "blanca": blanca}


@pytest.fixture
def cupon_10(db_session):
    descuento = Descuento(
        codigo_descuento="BIENVENIDA10",
        nombre_descuento="Bienvenida 10%",
        tipo_descuento="porcentaje",
        valor_descuento=Decimal("10"),
        monto_minimo_compra=Decimal("30000"),
        cantidad_maxima_usos=100,
        uso_por_cliente=1,
        usos_actuales=0,
        estado="activo"
    )
    db_session.add(descuento)
    db_session.commit()
    return descuento


def payload_venta(id_cliente: int, lineas: list, pagos: list, **extra) -> dict:
    """Cuerpo de POST /ventas en camelCase"""
    payload = {
        "idUsuario": id_cliente,
        "detalleVentas": [
            {"idVariante": v.id_variante, "cantidad": cantidad, "precioUnitario": float(precio)}
            for v, cantidad, precio in lineas
        ],
        "pagos": [
            {"idMetodoPago": id_metodo, "monto": monto, **({"referencia": ref} if ref else {})}
            for id_metodo, monto, ref in pagos
        ]
    }
    payload.update(extra)
    return payload
