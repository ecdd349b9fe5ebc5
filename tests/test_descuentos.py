"""Tests de cupones: gestión, reglas de validación, historial y estadísticas."""

from datetime import datetime, timedelta

from conftest import payload_venta
from backoffice.shared.database.models import Descuento


def crear_cupon(client, headers, **cambios):
    datos = {
        "codigoDescuento": "verano20",
        "nombreDescuento": "Verano 20%",
        "tipoDescuento": "porcentaje",
        "valorDescuento": 20,
        "montoMinimoCompra": 50000,
    }
    datos.update(cambios)
    return client.post("/api/descuentos", json=datos, headers=headers)


def validar(client, headers, codigo, monto, id_usuario=None):
    return client.post(
        "/api/descuentos/validar",
        json={"codigoDescuento": codigo, "montoCompra": monto, "idUsuario": id_usuario},
        headers=headers
    )


def test_crear_cupon_normaliza_codigo(client, admin_headers):
    response = crear_cupon(client, admin_headers)

    assert response.status_code == 201
    cupon = response.json()["datos"]
    assert cupon["codigoDescuento"] == "VERANO20"
    assert cupon["estado"] == "activo"
    assert cupon["usosActuales"] == 0

    duplicado = crear_cupon(client, admin_headers, codigoDescuento="VERANO20")
    assert duplicado.status_code == 409


def test_cupon_porcentual_mayor_a_100(client, admin_headers):
    response = crear_cupon(client, admin_headers, valorDescuento=120)
    assert response.status_code == 400
    assert response.json()["codigo"] == "VALIDACION_ERROR"


def test_solo_administrador_gestiona_cupones(client, vendedor_headers):
    assert crear_cupon(client, vendedor_headers).status_code == 403


def test_validar_cupon_aplicable(client, admin_headers, vendedor_headers):
    crear_cupon(client, admin_headers)

    response = validar(client, vendedor_headers, "verano20", 100000)

    assert response.status_code == 200
    resultado = response.json()["datos"]
    assert resultado["valido"] is True
    assert resultado["valorAplicado"] == 20000
    assert resultado["descuento"]["tipoDescuento"] == "porcentaje"


def test_validar_monto_minimo(client, admin_headers, vendedor_headers):
    crear_cupon(client, admin_headers)

    response = validar(client, vendedor_headers, "VERANO20", 40000)

    assert response.status_code == 400
    assert response.json()["codigo"] == "DESCUENTO_INVALIDO"
    assert "monto mínimo" in response.json()["mensaje"]


def test_validar_codigo_inexistente(client, vendedor_headers):
    response = validar(client, vendedor_headers, "NOEXISTE", 100000)
    assert response.status_code == 400
    assert response.json()["mensaje"] == "Código de descuento no encontrado"


def test_validar_cupon_inactivo(client, admin_headers, vendedor_headers):
    cupon = crear_cupon(client, admin_headers).json()["datos"]
    client.patch(f"/api/descuentos/{cupon['idDescuento']}/estado", json={"estado": "inactivo"}, headers=admin_headers)

    response = validar(client, vendedor_headers, "VERANO20", 100000)

    assert response.status_code == 400
    assert response.json()["mensaje"] == "El descuento no está activo"


def test_validar_cupon_aun_no_vigente(client, admin_headers, vendedor_headers):
    inicio = (datetime.now() + timedelta(days=2)).isoformat()
    crear_cupon(client, admin_headers, fechaInicio=inicio)

    response = validar(client, vendedor_headers, "VERANO20", 100000)

    assert response.json()["mensaje"] == "El descuento aún no está vigente"


def test_cupon_vencido_queda_marcado(client, db_session, admin_headers, vendedor_headers):
    cupon = crear_cupon(client, admin_headers).json()["datos"]
    descuento = db_session.get(Descuento, cupon["idDescuento"])
    descuento.fecha_fin = datetime.now() - timedelta(hours=1)
    db_session.commit()

    response = validar(client, vendedor_headers, "VERANO20", 100000)

    assert response.status_code == 400
    assert response.json()["mensaje"] == "El descuento ha vencido"
    db_session.expire_all()
    assert db_session.get(Descuento, cupon["idDescuento"]).estado == "vencido"


def test_maximo_de_usos(client, admin_headers, vendedor_headers, cliente_usuario, variantes, metodos):
    crear_cupon(client, admin_headers, montoMinimoCompra=0, cantidadMaximaUsos=1)
    venta = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 1, 50000)],
        [(metodos["Efectivo"], 40000, None)],
        codigoDescuentoUsado="VERANO20"
    )
    assert client.post("/api/ventas", json=venta, headers=vendedor_headers).status_code == 201

    response = validar(client, vendedor_headers, "VERANO20", 50000)

    assert response.status_code == 400
    assert "máximo de usos" in response.json()["mensaje"]


def test_cliente_valida_contra_su_propio_uso(client, admin_headers, vendedor_headers, cliente_headers,
                                             cliente_usuario, variantes, metodos):
    crear_cupon(client, admin_headers, montoMinimoCompra=0, usoPorCliente=1)
    venta = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 1, 50000)],
        [(metodos["Efectivo"], 40000, None)],
        codigoDescuentoUsado="VERANO20"
    )
    client.post("/api/ventas", json=venta, headers=vendedor_headers)

    # el idUsuario enviado se ignora: se valida contra el cliente autenticado
    response = validar(client, cliente_headers, "VERANO20", 50000, id_usuario=9999)

    assert response.status_code == 400
    assert "cliente ya utilizó" in response.json()["mensaje"]


def test_historial_y_estadisticas(client, admin_headers, vendedor_headers, cliente_usuario, variantes, metodos):
    cupon = crear_cupon(client, admin_headers, montoMinimoCompra=0).json()["datos"]
    venta = payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 1, 50000)],
        [(metodos["Efectivo"], 40000, None)],
        codigoDescuentoUsado="VERANO20"
    )
    client.post("/api/ventas", json=venta, headers=vendedor_headers)

    historial = client.get(f"/api/descuentos/{cupon['idDescuento']}/historial", headers=admin_headers).json()["datos"]
    assert historial["paginacion"]["totalRegistros"] == 1
    registro = historial["datos"][0]
    assert registro["valorAplicado"] == 10000
    assert registro["codigoDescuento"] == "VERANO20"

    estadisticas = client.get("/api/descuentos/estadisticas", headers=admin_headers).json()["datos"]
    assert estadisticas["totalDescuentos"] == 1
    assert estadisticas["activos"] == 1
    assert estadisticas["totalUsos"] == 1
    assert estadisticas["ahorroTotal"] == 10000


def test_eliminar_es_logico(client, admin_headers):
    cupon = crear_cupon(client, admin_headers).json()["datos"]

    assert client.delete(f"/api/descuentos/{cupon['idDescuento']}", headers=admin_headers).status_code == 200

    obtenido = client.get(f"/api/descuentos/{cupon['idDescuento']}", headers=admin_headers).json()["datos"]
    assert obtenido["estado"] == "inactivo"


def test_extender_vigencia_reactiva_cupon_vencido(client, db_session, admin_headers):
    cupon = crear_cupon(client, admin_headers).json()["datos"]
    descuento = db_session.get(Descuento, cupon["idDescuento"])
    descuento.estado = "vencido"
    db_session.commit()

    nueva_fin = (datetime.now() + timedelta(days=30)).isoformat()
    response = client.put(f"/api/descuentos/{cupon['idDescuento']}", json={"fechaFin": nueva_fin}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["datos"]["estado"] == "activo"
