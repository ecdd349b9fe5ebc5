"""Tests del registro y consulta de ventas vía API."""

from decimal import Decimal

from conftest import payload_venta
from backoffice.shared.database.models import (
    ClienteCreditoResumen, Credito, Descuento, MovimientoInventario, VarianteProducto
)


def test_venta_de_contado(client, db_session, vendedor_headers, cliente_usuario, variantes, metodos):
    negra = variantes["negra"]
    payload = payload_venta(
        cliente_usuario.id_usuario,
        [(negra, 2, 50000)],
        [(metodos["Efectivo"], 100000, None)],
        total=100000
    )

    response = client.post("/api/ventas", json=payload, headers=vendedor_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["exito"] is True
    venta = body["datos"]
    assert venta["numeroFactura"].startswith("FV-")
    assert venta["total"] == 100000
    assert venta["totalPagado"] == 100000
    assert venta["saldoPendiente"] == 0
    assert venta["estadoPago"] == "pagado"
    assert venta["tipoVenta"] == "contado"
    assert venta["nombreEstado"] == "Pendiente"
    assert venta["credito"] is None
    assert len(venta["detalles"]) == 1
    assert venta["pagos"][0]["tipoPago"] == "inicial"
    assert venta["pagos"][0]["saldoNuevo"] == 0

    db_session.expire_all()
    assert db_session.get(VarianteProducto, negra.id_variante).cantidad_stock == 8
    movimiento = db_session.query(MovimientoInventario).filter_by(id_venta=venta["idVenta"]).one()
    assert movimiento.cantidad == -2
    assert movimiento.tipo_movimiento == "venta"


def test_venta_mixta_genera_credito(client, db_session, vendedor_headers, cliente_usuario, variantes, metodos):
    payload = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 2, 50000)],
        [(metodos["Efectivo"], 40000, None), (metodos["Crédito Tienda"], 60000, None)]
    )

    response = client.post("/api/ventas", json=payload, headers=vendedor_headers)

    assert response.status_code == 201
    venta = response.json()["datos"]
    assert venta["tipoVenta"] == "credito"
    assert venta["totalPagado"] == 40000
    assert venta["saldoPendiente"] == 60000
    assert venta["estadoPago"] == "parcial"
    assert venta["credito"]["montoCredito"] == 60000
    assert venta["credito"]["estado"] == "activo"
    # el crédito no genera pago inicial
    assert len(venta["pagos"]) == 1

    credito = db_session.query(Credito).filter_by(id_venta=venta["idVenta"]).one()
    assert credito.monto_inicial == Decimal("40000")
    assert credito.fecha_vencimiento > credito.fecha_inicio
    resumen = db_session.get(ClienteCreditoResumen, cliente_usuario.id_usuario)
    assert resumen.saldo_total == Decimal("60000")
    assert resumen.cantidad_creditos_activos == 1


def test_venta_solo_credito_queda_pendiente(client, vendedor_headers, cliente_usuario, variantes, metodos):
    payload = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 1, 50000)],
        [(metodos["Crédito Tienda"], 50000, None)]
    )

    venta = client.post("/api/ventas", json=payload, headers=vendedor_headers).json()["datos"]

    assert venta["estadoPago"] == "pendiente"
    assert venta["totalPagado"] == 0
    assert venta["pagos"] == []


def test_venta_con_cupon_registra_uso(client, db_session, vendedor_headers, cliente_usuario, variantes, metodos, cupon_10):
    payload = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 2, 50000)],
        [(metodos["Efectivo"], 90000, None)],
        codigoDescuentoUsado="bienvenida10"
    )

    response = client.post("/api/ventas", json=payload, headers=vendedor_headers)

    assert response.status_code == 201
    venta = response.json()["datos"]
    assert venta["descuentoTotal"] == 10000
    assert venta["total"] == 90000
    assert venta["codigoDescuentoUsado"] == "BIENVENIDA10"

    db_session.expire_all()
    assert db_session.get(Descuento, cupon_10.id_descuento).usos_actuales == 1

    # uso por cliente agotado
    repetida = client.post("/api/ventas", json=payload, headers=vendedor_headers)
    assert repetida.status_code == 400
    assert repetida.json()["codigo"] == "DESCUENTO_INVALIDO"


def test_venta_con_iva(client, vendedor_headers, cliente_usuario, variantes, metodos):
    payload = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 1, 50000)],
        [(metodos["Efectivo"], 59500, None)],
        aplicaIva=True
    )

    venta = client.post("/api/ventas", json=payload, headers=vendedor_headers).json()["datos"]

    assert venta["impuestos"] == 9500
    assert venta["total"] == 59500


def test_stock_insuficiente(client, db_session, vendedor_headers, cliente_usuario, variantes, metodos):
    payload = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["blanca"], 3, 55000)],
        [(metodos["Efectivo"], 165000, None)]
    )

    response = client.post("/api/ventas", json=payload, headers=vendedor_headers)

    assert response.status_code == 400
    body = response.json()
    assert body["exito"] is False
    assert body["mensaje"] == "Stock insuficiente"
    assert "CAM-L-BLA" in body["errores"][0]
    db_session.expire_all()
    assert db_session.get(VarianteProducto, variantes["blanca"].id_variante).cantidad_stock == 2


def test_faltante_dentro_de_la_tolerancia(client, vendedor_headers, cliente_usuario, variantes, metodos):
    payload = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 2, 50000)],
        [(metodos["Efectivo"], 99950, None)]
    )

    venta = client.post("/api/ventas", json=payload, headers=vendedor_headers).json()["datos"]

    assert venta["saldoPendiente"] == 50
    assert venta["estadoPago"] == "parcial"


def test_venta_incompleta(client, vendedor_headers, cliente_usuario, variantes, metodos):
    payload = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 2, 50000)],
        [(metodos["Efectivo"], 99000, None)]
    )

    response = client.post("/api/ventas", json=payload, headers=vendedor_headers)

    assert response.status_code == 400
    assert response.json()["mensaje"].startswith("Venta incompleta")


def test_sobrepago_en_efectivo_es_cambio(client, vendedor_headers, cliente_usuario, variantes, metodos):
    payload = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 2, 50000)],
        [(metodos["Efectivo"], 120000, None)]
    )

    venta = client.post("/api/ventas", json=payload, headers=vendedor_headers).json()["datos"]

    assert venta["totalPagado"] == 100000
    assert venta["estadoPago"] == "pagado"
    assert venta["pagos"][0]["monto"] == 120000
    assert venta["pagos"][0]["saldoNuevo"] == 0


def test_sobrepago_con_credito_rechazado(client, vendedor_headers, cliente_usuario, variantes, metodos):
    payload = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 1, 50000)],
        [(metodos["Efectivo"], 30000, None), (metodos["Crédito Tienda"], 30000, None)]
    )

    response = client.post("/api/ventas", json=payload, headers=vendedor_headers)

    assert response.status_code == 400


def test_total_enviado_no_coincide(client, vendedor_headers, cliente_usuario, variantes, metodos):
    payload = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 2, 50000)],
        [(metodos["Efectivo"], 100000, None)],
        total=95000
    )

    response = client.post("/api/ventas", json=payload, headers=vendedor_headers)

    assert response.status_code == 400
    assert response.json()["errores"]["totalCalculado"] == 100000


def test_metodo_con_referencia_obligatoria(client, vendedor_headers, cliente_usuario, variantes, metodos):
    sin_referencia = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 1, 50000)],
        [(metodos["Tarjeta Crédito"], 50000, None)]
    )
    assert client.post("/api/ventas", json=sin_referencia, headers=vendedor_headers).status_code == 400

    con_referencia = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 1, 50000)],
        [(metodos["Tarjeta Crédito"], 50000, "VOUCHER-123")]
    )
    response = client.post("/api/ventas", json=con_referencia, headers=vendedor_headers)
    assert response.status_code == 201
    assert response.json()["datos"]["pagos"][0]["referencia"] == "VOUCHER-123"


def test_metodo_combinado_debe_desglosarse(client, vendedor_headers, cliente_usuario, variantes, metodos):
    payload = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 1, 50000)],
        [(metodos["Efectivo + Crédito"], 50000, None)]
    )

    response = client.post("/api/ventas", json=payload, headers=vendedor_headers)

    assert response.status_code == 400
    assert "desglosado" in response.json()["mensaje"]


def test_cliente_no_puede_registrar_ventas(client, cliente_headers, cliente_usuario, variantes, metodos):
    payload = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 1, 50000)],
        [(metodos["Efectivo"], 50000, None)]
    )

    response = client.post("/api/ventas", json=payload, headers=cliente_headers)

    assert response.status_code == 403
    assert response.json()["codigo"] == "PROHIBIDO"


def test_calcular_vista_previa(client, db_session, vendedor_headers, cliente_usuario, variantes, metodos, cupon_10):
    payload = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 2, 50000)],
        [(metodos["Efectivo"], 50000, None), (metodos["Crédito Tienda"], 40000, None)],
        codigoDescuentoUsado="BIENVENIDA10",
        aplicaIva=False
    )

    response = client.post("/api/ventas/calcular", json=payload, headers=vendedor_headers)

    assert response.status_code == 200
    calculo = response.json()["datos"]
    assert calculo["resumen"]["total"] == 90000
    assert calculo["resumen"]["descuentoCupon"] == 10000
    assert calculo["pagos"]["modalidad"] == "Mixto"
    assert calculo["pagos"]["pagoCompleto"] is True
    assert calculo["descuento"]["codigoDescuento"] == "BIENVENIDA10"
    # la vista previa no toca inventario
    db_session.expire_all()
    assert db_session.get(VarianteProducto, variantes["negra"].id_variante).cantidad_stock == 10


def test_listado_y_acceso_de_cliente(client, db_session, vendedor_headers, cliente_usuario, cliente_headers, variantes, metodos):
    from conftest import crear_usuario
    otro = crear_usuario(db_session, "Cliente", "otrocliente")
    for id_cliente in (cliente_usuario.id_usuario, otro.id_usuario):
        client.post("/api/ventas", json=payload_venta(
            id_cliente, [(variantes["negra"], 1, 50000)], [(metodos["Efectivo"], 50000, None)]
        ), headers=vendedor_headers)

    todas = client.get("/api/ventas", headers=vendedor_headers).json()["datos"]
    assert todas["paginacion"]["totalRegistros"] == 2

    propias = client.get("/api/ventas", headers=cliente_headers).json()["datos"]
    assert propias["paginacion"]["totalRegistros"] == 1
    assert propias["datos"][0]["idUsuario"] == cliente_usuario.id_usuario

    ajena = next(v for v in todas["datos"] if v["idUsuario"] == otro.id_usuario)
    assert client.get(f"/api/ventas/{ajena['idVenta']}", headers=cliente_headers).status_code == 403


def test_actualizar_estado_de_venta(client, vendedor_headers, cliente_usuario, variantes, metodos):
    venta = client.post("/api/ventas", json=payload_venta(
        cliente_usuario.id_usuario, [(variantes["negra"], 1, 50000)], [(metodos["Efectivo"], 50000, None)]
    ), headers=vendedor_headers).json()["datos"]
    estados = client.get("/api/estados-pedido", headers=vendedor_headers).json()["datos"]
    entregado = next(e for e in estados if e["nombreEstado"] == "Entregado")

    response = client.patch(
        f"/api/ventas/{venta['idVenta']}/estado",
        json={"idEstadoPedido": entregado["idEstadoPedido"]},
        headers=vendedor_headers
    )

    assert response.status_code == 200
    assert response.json()["datos"]["nombreEstado"] == "Entregado"

    pagos = client.get(f"/api/ventas/{venta['idVenta']}/pagos", headers=vendedor_headers).json()["datos"]
    assert len(pagos) == 1


def test_venta_inexistente(client, vendedor_headers):
    response = client.get("/api/ventas/9999", headers=vendedor_headers)
    assert response.status_code == 404
    assert response.json()["codigo"] == "NO_ENCONTRADO"


def test_precio_con_mas_de_dos_decimales(client, vendedor_headers, cliente_usuario, variantes):
    payload = {
        "idUsuario": cliente_usuario.id_usuario,
        "detalleVentas": [
            {"idVariante": variantes["negra"].id_variante, "cantidad": 1,
             "precioUnitario": 0.004, "descuentoLinea": 0.004}
        ]
    }

    response = client.post("/api/ventas/calcular", json=payload, headers=vendedor_headers)

    assert response.status_code == 400
    cuerpo = response.json()
    assert cuerpo["codigo"] == "VALIDACION_ERROR"
    campos = {error["campo"] for error in cuerpo["errores"]}
    assert "detalleVentas.0.precioUnitario" in campos


def test_error_al_registrar_no_deja_rastro(client, db_session, vendedor_headers, cliente_usuario, variantes, metodos, monkeypatch):
    from backoffice.modules.inventario.repository import InventarioRepository

    def falla(self, *args, **kwargs):
        raise RuntimeError("database is locked")

    monkeypatch.setattr(InventarioRepository, "registrar_movimiento", falla)
    payload = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 1, 50000)],
        [(metodos["Efectivo"], 50000, None)]
    )

    response = client.post("/api/ventas", json=payload, headers=vendedor_headers)

    assert response.status_code == 500
    assert response.json()["mensaje"] == "Error registrando venta"
    assert "locked" not in response.text
    db_session.expire_all()
    assert db_session.get(VarianteProducto, variantes["negra"].id_variante).cantidad_stock == 10
