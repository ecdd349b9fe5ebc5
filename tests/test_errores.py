"""Tests del sobre de errores, salud y raíz de la API."""


def test_ruta_inexistente(client):
    response = client.get("/api/no-existe")

    assert response.status_code == 404
    cuerpo = response.json()
    assert cuerpo["exito"] is False
    assert cuerpo["codigo"] == "RUTA_NO_ENCONTRADA"
    assert cuerpo["statusCode"] == 404
    assert "timestamp" in cuerpo


def test_errores_de_validacion(client, vendedor_headers):
    response = client.post("/api/ventas", json={"detalleVentas": []}, headers=vendedor_headers)

    assert response.status_code == 400
    cuerpo = response.json()
    assert cuerpo["codigo"] == "VALIDACION_ERROR"
    assert cuerpo["mensaje"] == "Errores de validación"
    campos = {error["campo"] for error in cuerpo["errores"]}
    assert {"idUsuario", "pagos"} <= campos


def test_recurso_no_encontrado(client, admin_headers):
    response = client.get("/api/descuentos/9999", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["codigo"] == "NO_ENCONTRADO"


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_raiz(client):
    response = client.get("/")
    assert response.status_code == 200


def test_tiempo_de_proceso_en_cabecera(client):
    response = client.get("/api/health")
    assert float(response.headers["X-Tiempo-Proceso"]) >= 0
