"""Tests de créditos de tienda: abonos, liquidación, ventas a crédito y vencimiento."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from conftest import auth_headers, crear_usuario, payload_venta
from backoffice.shared.database.models import ClienteCreditoResumen, Credito


@pytest.fixture
def cajero_headers(db_session):
    return auth_headers(crear_usuario(db_session, "Cajero", "cajero"))


@pytest.fixture
def venta_credito(client, vendedor_headers, cliente_usuario, variantes, metodos):
    """Venta de 100.000: 40.000 en efectivo y 60.000 a crédito"""
    payload = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 2, 50000)],
        [(metodos["Efectivo"], 40000, None), (metodos["Crédito Tienda"], 60000, None)]
    )
    response = client.post("/api/ventas", json=payload, headers=vendedor_headers)
    assert response.status_code == 201
    return response.json()["datos"]


def test_abono_parcial(client, cajero_headers, venta_credito, metodos):
    id_credito = venta_credito["credito"]["idCredito"]

    response = client.post(
        f"/api/creditos/{id_credito}/abonos",
        json={"monto": 20000, "idMetodoPago": metodos["Efectivo"], "notas": "Primer abono"},
        headers=cajero_headers
    )

    assert response.status_code == 201
    abono = response.json()["datos"]
    assert abono["montoAbonado"] == 20000
    assert abono["credito"]["saldoPendiente"] == 40000
    assert abono["credito"]["totalAbonado"] == 20000
    assert abono["credito"]["estado"] == "activo"
    assert abono["pagos"][0]["tipoPago"] == "abono"
    assert abono["pagos"][0]["saldoAnterior"] == 60000
    assert abono["pagos"][0]["saldoNuevo"] == 40000
    assert abono["saldoVenta"] == 40000
    assert abono["estadoPagoVenta"] == "parcial"


def test_liquidacion_con_varios_metodos(client, db_session, cajero_headers, cliente_usuario, venta_credito, metodos):
    id_credito = venta_credito["credito"]["idCredito"]

    response = client.post(
        f"/api/creditos/{id_credito}/abonos",
        json={"pagos": [
            {"idMetodoPago": metodos["Efectivo"], "monto": 30000},
            {"idMetodoPago": metodos["Nequi"], "monto": 30000, "referencia": "NQ-998"},
        ]},
        headers=cajero_headers
    )

    assert response.status_code == 201
    abono = response.json()["datos"]
    assert [p["tipoPago"] for p in abono["pagos"]] == ["abono", "liquidacion"]
    assert abono["credito"]["estado"] == "pagado"
    assert abono["credito"]["saldoPendiente"] == 0
    assert abono["estadoPagoVenta"] == "pagado"

    db_session.expire_all()
    resumen = db_session.get(ClienteCreditoResumen, cliente_usuario.id_usuario)
    assert resumen.saldo_total == Decimal("0")
    assert resumen.cantidad_creditos_activos == 0
    assert resumen.cantidad_creditos_pagados == 1

    venta = client.get(f"/api/ventas/{venta_credito['idVenta']}", headers=cajero_headers).json()["datos"]
    assert venta["totalPagado"] == 100000

    # un crédito pagado no admite más abonos
    repetido = client.post(
        f"/api/creditos/{id_credito}/abonos",
        json={"monto": 1000, "idMetodoPago": metodos["Efectivo"]},
        headers=cajero_headers
    )
    assert repetido.status_code == 409
    assert repetido.json()["codigo"] == "CONFLICTO"


def test_abono_mayor_al_saldo(client, cajero_headers, venta_credito, metodos):
    response = client.post(
        f"/api/creditos/{venta_credito['credito']['idCredito']}/abonos",
        json={"monto": 60001, "idMetodoPago": metodos["Efectivo"]},
        headers=cajero_headers
    )
    assert response.status_code == 400
    assert "supera el saldo" in response.json()["mensaje"]


def test_abono_con_credito_tienda_rechazado(client, cajero_headers, venta_credito, metodos):
    response = client.post(
        f"/api/creditos/{venta_credito['credito']['idCredito']}/abonos",
        json={"monto": 1000, "idMetodoPago": metodos["Crédito Tienda"]},
        headers=cajero_headers
    )
    assert response.status_code == 400


def test_abono_sin_forma_de_pago(client, cajero_headers, venta_credito):
    response = client.post(
        f"/api/creditos/{venta_credito['credito']['idCredito']}/abonos",
        json={"notas": "sin monto"},
        headers=cajero_headers
    )
    assert response.status_code == 400
    assert response.json()["codigo"] == "VALIDACION_ERROR"


def test_vendedor_no_registra_abonos(client, vendedor_headers, venta_credito, metodos):
    response = client.post(
        f"/api/creditos/{venta_credito['credito']['idCredito']}/abonos",
        json={"monto": 1000, "idMetodoPago": metodos["Efectivo"]},
        headers=vendedor_headers
    )
    assert response.status_code == 403


def test_ventas_credito(client, admin_headers, venta_credito, metodos):
    listado = client.get("/api/ventas-credito", headers=admin_headers).json()["datos"]
    assert listado["paginacion"]["totalRegistros"] == 1
    assert listado["datos"][0]["credito"]["saldoPendiente"] == 60000

    response = client.post(
        f"/api/ventas-credito/{venta_credito['idVenta']}/abono",
        json={"monto": 10000, "idMetodoPago": metodos["Efectivo"]},
        headers=admin_headers
    )
    assert response.status_code == 201
    assert response.json()["datos"]["credito"]["saldoPendiente"] == 50000


def test_creditos_de_cliente_solo_propios(client, db_session, cliente_usuario, cliente_headers, venta_credito):
    propios = client.get(f"/api/creditos/cliente/{cliente_usuario.id_usuario}", headers=cliente_headers)
    assert propios.status_code == 200
    datos = propios.json()["datos"]
    assert datos["resumen"]["saldoTotal"] == 60000
    assert len(datos["creditos"]) == 1

    otro = crear_usuario(db_session, "Cliente", "vecino")
    ajenos = client.get(f"/api/creditos/cliente/{otro.id_usuario}", headers=cliente_headers)
    assert ajenos.status_code == 403


def test_creditos_vencidos_al_listar(client, db_session, admin_headers, venta_credito):
    credito = db_session.query(Credito).filter_by(id_credito=venta_credito["credito"]["idCredito"]).one()
    credito.fecha_vencimiento = datetime.now() - timedelta(days=1)
    db_session.commit()

    listado = client.get("/api/creditos", params={"estado": "vencido"}, headers=admin_headers).json()["datos"]

    assert listado["paginacion"]["totalRegistros"] == 1
    assert listado["datos"][0]["estado"] == "vencido"


def test_credito_absorbe_el_faltante_tolerado(client, admin_headers, vendedor_headers, cliente_usuario, variantes, metodos):
    payload = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 2, 50000)],
        [(metodos["Efectivo"], 40000, None), (metodos["Crédito Tienda"], 59950, None)]
    )
    venta = client.post("/api/ventas", json=payload, headers=vendedor_headers).json()["datos"]

    assert venta["saldoPendiente"] == 60000
    assert venta["credito"]["saldoPendiente"] == 60000

    response = client.post(
        f"/api/ventas-credito/{venta['idVenta']}/abono",
        json={"monto": 60000, "idMetodoPago": metodos["Efectivo"]},
        headers=admin_headers
    )

    assert response.status_code == 201
    abono = response.json()["datos"]
    assert abono["credito"]["estado"] == "pagado"
    assert abono["saldoVenta"] == 0
    assert abono["estadoPagoVenta"] == "pagado"
