"""Tests de los catálogos de métodos de pago y estados de pedido."""

from conftest import payload_venta


# ==================== MÉTODOS DE PAGO ====================

def test_listar_metodos_activos(client, vendedor_headers):
    metodos = client.get("/api/metodos-pago", headers=vendedor_headers).json()["datos"]

    nombres = {m["nombreMetodo"]: m for m in metodos}
    assert len(metodos) == 12
    assert nombres["Crédito Tienda"]["esCredito"] is True
    assert nombres["Efectivo"]["esCredito"] is False
    assert nombres["Nequi"]["requiereReferencia"] is True
    assert nombres["Efectivo + Crédito"]["tipo"]["codigo"] == "mixto"


def test_listar_tipos(client, vendedor_headers):
    tipos = client.get("/api/metodos-pago/tipos", headers=vendedor_headers).json()["datos"]
    assert {t["codigo"] for t in tipos} >= {"efectivo", "credito_tienda", "mixto"}


def test_metodos_requieren_autenticacion(client):
    response = client.get("/api/metodos-pago")
    assert response.status_code == 401
    assert response.json()["codigo"] == "NO_AUTORIZADO"


def test_crear_y_desactivar_metodo(client, admin_headers):
    tipos = client.get("/api/metodos-pago/tipos", headers=admin_headers).json()["datos"]
    transferencia = next(t for t in tipos if t["codigo"] == "transferencia")

    response = client.post("/api/metodos-pago", json={
        "nombreMetodo": "Bancolombia",
        "idTipoMetodo": transferencia["idTipoMetodo"],
        "requiereReferencia": True
    }, headers=admin_headers)
    assert response.status_code == 201
    metodo = response.json()["datos"]
    assert metodo["tipo"]["codigo"] == "transferencia"

    duplicado = client.post("/api/metodos-pago", json={
        "nombreMetodo": "Bancolombia",
        "idTipoMetodo": transferencia["idTipoMetodo"]
    }, headers=admin_headers)
    assert duplicado.status_code == 409

    assert client.delete(f"/api/metodos-pago/{metodo['idMetodoPago']}", headers=admin_headers).status_code == 200
    activos = client.get("/api/metodos-pago", headers=admin_headers).json()["datos"]
    assert "Bancolombia" not in {m["nombreMetodo"] for m in activos}


def test_crear_metodo_con_tipo_invalido(client, admin_headers):
    response = client.post("/api/metodos-pago", json={"nombreMetodo": "Trueque", "idTipoMetodo": 999}, headers=admin_headers)
    assert response.status_code == 400


def test_metodo_inactivo_no_se_acepta_en_ventas(client, admin_headers, vendedor_headers, cliente_usuario, variantes, metodos):
    client.put(f"/api/metodos-pago/{metodos['Daviplata']}", json={"activo": False}, headers=admin_headers)

    response = client.post("/api/ventas", json=payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 1, 50000)],
        [(metodos["Daviplata"], 50000, "DV-1")]
    ), headers=vendedor_headers)

    assert response.status_code == 400


# ==================== ESTADOS DE PEDIDO ====================

def test_estados_en_orden(client, vendedor_headers):
    estados = client.get("/api/estados-pedido", headers=vendedor_headers).json()["datos"]

    assert [e["nombreEstado"] for e in estados][:2] == ["Pendiente", "Confirmado"]
    assert estados[-1]["nombreEstado"] == "Cancelado"
    assert all(e["cantidadVentas"] == 0 for e in estados)


def test_crear_estado_al_final(client, admin_headers):
    response = client.post("/api/estados-pedido", json={"nombreEstado": "Devuelto", "color": "#795548"}, headers=admin_headers)

    assert response.status_code == 201
    assert response.json()["datos"]["orden"] == 8

    duplicado = client.post("/api/estados-pedido", json={"nombreEstado": "Devuelto"}, headers=admin_headers)
    assert duplicado.status_code == 409


def test_color_invalido(client, admin_headers):
    response = client.post("/api/estados-pedido", json={"nombreEstado": "Raro", "color": "rojo"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["errores"][0]["campo"] == "color"


def test_no_se_elimina_estado_en_uso(client, admin_headers, vendedor_headers, cliente_usuario, variantes, metodos):
    client.post("/api/ventas", json=payload_venta(
        cliente_usuario.id_usuario, [(variantes["negra"], 1, 50000)], [(metodos["Efectivo"], 50000, None)]
    ), headers=vendedor_headers)
    estados = client.get("/api/estados-pedido", headers=admin_headers).json()["datos"]
    pendiente = next(e for e in estados if e["nombreEstado"] == "Pendiente")
    assert pendiente["cantidadVentas"] == 1

    response = client.delete(f"/api/estados-pedido/{pendiente['idEstadoPedido']}", headers=admin_headers)

    assert response.status_code == 409


def test_eliminar_estado_sin_ventas(client, admin_headers):
    nuevo = client.post("/api/estados-pedido", json={"nombreEstado": "Temporal"}, headers=admin_headers).json()["datos"]

    assert client.delete(f"/api/estados-pedido/{nuevo['idEstadoPedido']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/estados-pedido/{nuevo['idEstadoPedido']}", headers=admin_headers).status_code == 404
