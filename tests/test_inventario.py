"""Tests de inventario: consulta de variantes, alta de productos y ajustes de stock."""

import pytest

from conftest import payload_venta


@pytest.fixture
def producto_nuevo():
    return {
        "nombreProducto": "Jean Clásico",
        "descripcion": "Jean azul de tiro medio",
        "precioVenta": 120000,
        "variantes": [
            {"codigoSku": "JEA-30-AZU", "talla": "30", "color": "Azul", "costoUnitario": 60000,
             "cantidadStock": 5, "stockMinimo": 2},
            {"codigoSku": "JEA-32-AZU", "talla": "32", "color": "Azul", "precioVenta": 125000},
        ]
    }


def test_listar_variantes_con_precio_vigente(client, vendedor_headers, variantes):
    listado = client.get("/api/inventario", headers=vendedor_headers).json()["datos"]

    assert listado["paginacion"]["totalRegistros"] == 2
    por_sku = {v["codigoSku"]: v for v in listado["datos"]}
    assert por_sku["CAM-M-NEG"]["precio"] == 50000
    assert por_sku["CAM-L-BLA"]["precio"] == 55000
    assert por_sku["CAM-M-NEG"]["nombreProducto"] == "Camiseta Básica"


def test_filtrar_bajo_stock_y_busqueda(client, vendedor_headers, variantes):
    bajo = client.get("/api/inventario", params={"soloBajoStock": True}, headers=vendedor_headers).json()["datos"]
    assert [v["codigoSku"] for v in bajo["datos"]] == ["CAM-L-BLA"]
    assert bajo["datos"][0]["bajoStock"] is True

    busqueda = client.get("/api/inventario", params={"busqueda": "neg"}, headers=vendedor_headers).json()["datos"]
    assert [v["codigoSku"] for v in busqueda["datos"]] == ["CAM-M-NEG"]


def test_cliente_no_consulta_inventario(client, cliente_headers):
    assert client.get("/api/inventario", headers=cliente_headers).status_code == 403


def test_crear_producto_registra_stock_inicial(client, admin_headers, producto_nuevo):
    response = client.post("/api/inventario/productos", json=producto_nuevo, headers=admin_headers)

    assert response.status_code == 201
    producto = response.json()["datos"]
    assert len(producto["variantes"]) == 2
    con_stock = next(v for v in producto["variantes"] if v["codigoSku"] == "JEA-30-AZU")
    assert con_stock["cantidadStock"] == 5

    detalle = client.get(f"/api/inventario/{con_stock['idVariante']}", headers=admin_headers).json()["datos"]
    movimiento = detalle["movimientos"][0]
    assert movimiento["tipoMovimiento"] == "ingreso"
    assert movimiento["stockAnterior"] == 0
    assert movimiento["stockNuevo"] == 5


def test_sku_existente(client, admin_headers, producto_nuevo, variantes):
    producto_nuevo["variantes"][0]["codigoSku"] = "CAM-M-NEG"

    response = client.post("/api/inventario/productos", json=producto_nuevo, headers=admin_headers)

    assert response.status_code == 409


def test_sku_repetido_en_el_mismo_producto(client, admin_headers, producto_nuevo):
    producto_nuevo["variantes"][1]["codigoSku"] = "JEA-30-AZU"

    response = client.post("/api/inventario/productos", json=producto_nuevo, headers=admin_headers)

    assert response.status_code == 400


def test_ajustes_de_stock(client, admin_headers, variantes):
    id_variante = variantes["negra"].id_variante

    salida = client.post(
        f"/api/inventario/{id_variante}/ajustes",
        json={"cantidad": -4, "motivo": "Prendas averiadas"},
        headers=admin_headers
    )
    assert salida.status_code == 201
    assert salida.json()["datos"]["stockNuevo"] == 6
    assert salida.json()["datos"]["tipoMovimiento"] == "ajuste"

    negativo = client.post(
        f"/api/inventario/{id_variante}/ajustes",
        json={"cantidad": -7, "motivo": "Conteo físico"},
        headers=admin_headers
    )
    assert negativo.status_code == 400
    assert "Stock insuficiente" in negativo.json()["mensaje"]


def test_ajuste_en_cero(client, admin_headers, variantes):
    response = client.post(
        f"/api/inventario/{variantes['negra'].id_variante}/ajustes",
        json={"cantidad": 0, "motivo": "Nada"},
        headers=admin_headers
    )
    assert response.status_code == 400


def test_variante_inexistente(client, admin_headers):
    assert client.get("/api/inventario/9999", headers=admin_headers).status_code == 404


def test_venta_descuenta_stock_y_deja_movimiento(client, vendedor_headers, cliente_usuario, variantes, metodos):
    venta = client.post("/api/ventas", json=payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 3, 50000)],
        [(metodos["Efectivo"], 150000, None)]
    ), headers=vendedor_headers).json()["datos"]

    detalle = client.get(
        f"/api/inventario/{variantes['negra'].id_variante}", headers=vendedor_headers
    ).json()["datos"]

    assert detalle["variante"]["cantidadStock"] == 7
    assert detalle["movimientos"][0]["tipoMovimiento"] == "venta"
    assert detalle["movimientos"][0]["cantidad"] == -3
    assert detalle["movimientos"][0]["idVenta"] == venta["idVenta"]


def test_error_interno_no_expone_el_detalle(client, admin_headers, producto_nuevo, monkeypatch):
    from backoffice.modules.inventario.repository import InventarioRepository

    def falla(self, datos):
        raise RuntimeError("UNIQUE constraint failed: productos.nombre_producto")

    monkeypatch.setattr(InventarioRepository, "create_producto", falla)

    response = client.post("/api/inventario/productos", json=producto_nuevo, headers=admin_headers)

    assert response.status_code == 500
    cuerpo = response.json()
    assert cuerpo["codigo"] == "ERROR_INTERNO_SERVIDOR"
    assert cuerpo["mensaje"] == "Error creando producto"
    assert "UNIQUE" not in response.text
