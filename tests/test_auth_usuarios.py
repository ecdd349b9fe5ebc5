"""Tests de autenticación y administración de usuarios."""

from conftest import CONTRASENA, crear_usuario, payload_venta


def registrar(client, usuario, **cambios):
    datos = {
        "nombres": "Ana",
        "apellidos": "Gómez",
        "usuario": usuario,
        "correoElectronico": f"{usuario}@correo.com",
        "contrasena": "clave123",
    }
    datos.update(cambios)
    return client.post("/api/auth/registro", json=datos)


# ==================== AUTH ====================

def test_login_por_usuario_y_por_correo(client, admin):
    por_usuario = client.post("/api/auth/login", json={"usuario": "admin", "contrasena": CONTRASENA})
    assert por_usuario.status_code == 200
    datos = por_usuario.json()["datos"]
    assert datos["tipoToken"] == "Bearer"
    assert datos["usuario"]["nombreRol"] == "Administrador"

    por_correo = client.post(
        "/api/auth/login",
        json={"correoElectronico": "ADMIN@tienda.com", "contrasena": CONTRASENA}
    )
    assert por_correo.status_code == 200

    perfil = client.get("/api/auth/perfil", headers={"Authorization": f"Bearer {datos['token']}"})
    assert perfil.json()["datos"]["usuario"] == "admin"


def test_login_contrasena_incorrecta(client, admin):
    response = client.post("/api/auth/login", json={"identificador": "admin", "contrasena": "otra"})
    assert response.status_code == 401
    assert response.json()["mensaje"] == "Credenciales inválidas"


def test_login_usuario_inactivo(client, db_session):
    crear_usuario(db_session, "Vendedor", "dormido", estado="inactivo")

    response = client.post("/api/auth/login", json={"usuario": "dormido", "contrasena": CONTRASENA})

    assert response.status_code == 401
    assert "inactivo" in response.json()["mensaje"]


def test_login_sin_identificador(client):
    response = client.post("/api/auth/login", json={"contrasena": "x"})
    assert response.status_code == 400
    assert response.json()["codigo"] == "VALIDACION_ERROR"


def test_primer_registro_es_administrador(client):
    primero = registrar(client, "fundadora")
    assert primero.status_code == 201
    assert primero.json()["datos"]["usuario"]["nombreRol"] == "Administrador"

    segundo = registrar(client, "compradora")
    assert segundo.json()["datos"]["usuario"]["nombreRol"] == "Cliente"

    repetido = registrar(client, "otra", correoElectronico="COMPRADORA@correo.com")
    assert repetido.status_code == 409


def test_token_de_usuario_desactivado(client, db_session, vendedor, vendedor_headers):
    vendedor.estado = "inactivo"
    db_session.commit()

    response = client.get("/api/auth/perfil", headers=vendedor_headers)

    assert response.status_code == 401


def test_token_invalido(client):
    response = client.get("/api/auth/perfil", headers={"Authorization": "Bearer no-es-un-jwt"})
    assert response.status_code == 401
    assert response.json()["codigo"] == "NO_AUTORIZADO"


def test_cambiar_contrasena(client, vendedor_headers):
    incorrecta = client.put(
        "/api/auth/cambiar-contrasena",
        json={"contrasenaActual": "mala", "contrasenaNueva": "nueva123"},
        headers=vendedor_headers
    )
    assert incorrecta.status_code == 400

    response = client.put(
        "/api/auth/cambiar-contrasena",
        json={"contrasenaActual": CONTRASENA, "contrasenaNueva": "nueva123"},
        headers=vendedor_headers
    )
    assert response.status_code == 200

    login = client.post("/api/auth/login", json={"usuario": "vendedor", "contrasena": "nueva123"})
    assert login.status_code == 200


# ==================== ADMINISTRACIÓN DE USUARIOS ====================

def test_crear_y_listar_usuarios(client, admin_headers, vendedor):
    response = client.post("/api/usuarios", json={
        "nombres": "Carlos",
        "apellidos": "Ruiz",
        "usuario": "cruiz",
        "correoElectronico": "cruiz@tienda.com",
        "contrasena": "clave123"
    }, headers=admin_headers)
    assert response.status_code == 201
    assert response.json()["datos"]["nombreRol"] == "Cliente"
    assert "contrasena" not in response.json()["datos"]

    listado = client.get("/api/usuarios", params={"rol": "Cliente"}, headers=admin_headers).json()["datos"]
    assert [u["usuario"] for u in listado["datos"]] == ["cruiz"]

    por_nombre = client.get("/api/usuarios", params={"nombre": "vend"}, headers=admin_headers).json()["datos"]
    assert por_nombre["paginacion"]["totalRegistros"] == 1


def test_usuario_duplicado(client, admin_headers, vendedor):
    response = client.post("/api/usuarios", json={
        "nombres": "Otro",
        "apellidos": "Vendedor",
        "usuario": "vendedor",
        "correoElectronico": "otro@tienda.com",
        "contrasena": "clave123"
    }, headers=admin_headers)

    assert response.status_code == 409
    assert response.json()["mensaje"] == "El nombre de usuario ya está en uso"


def test_correo_invalido(client, admin_headers):
    response = client.post("/api/usuarios", json={
        "nombres": "Sin",
        "apellidos": "Correo",
        "usuario": "sincorreo",
        "correoElectronico": "no-es-correo",
        "contrasena": "clave123"
    }, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["errores"][0]["campo"] == "correoElectronico"


def test_solo_administrador_lista_usuarios(client, vendedor_headers):
    assert client.get("/api/usuarios", headers=vendedor_headers).status_code == 403


def test_eliminacion_logica(client, admin_headers, vendedor):
    assert client.delete(f"/api/usuarios/{vendedor.id_usuario}", headers=admin_headers).status_code == 200

    assert client.get(f"/api/usuarios/{vendedor.id_usuario}", headers=admin_headers).status_code == 404
    listado = client.get("/api/usuarios", headers=admin_headers).json()["datos"]
    assert "vendedor" not in [u["usuario"] for u in listado["datos"]]


def test_no_puede_desactivarse_a_si_mismo(client, admin, admin_headers):
    response = client.patch(
        f"/api/usuarios/{admin.id_usuario}/estado",
        json={"estado": "inactivo"},
        headers=admin_headers
    )
    assert response.status_code == 400

    eliminar = client.delete(f"/api/usuarios/{admin.id_usuario}", headers=admin_headers)
    assert eliminar.status_code == 400


def test_cliente_solo_ve_sus_datos(client, db_session, cliente_usuario, cliente_headers):
    propio = client.get(f"/api/usuarios/{cliente_usuario.id_usuario}", headers=cliente_headers)
    assert propio.status_code == 200

    otro = crear_usuario(db_session, "Cliente", "otrocliente")
    ajeno = client.get(f"/api/usuarios/{otro.id_usuario}/metricas", headers=cliente_headers)
    assert ajeno.status_code == 403


def test_metricas_ventas_y_creditos_del_cliente(client, vendedor_headers, cliente_usuario, cliente_headers,
                                                variantes, metodos):
    client.post("/api/ventas", json=payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 2, 50000)],
        [(metodos["Efectivo"], 40000, None), (metodos["Crédito Tienda"], 60000, None)]
    ), headers=vendedor_headers)

    metricas = client.get(f"/api/usuarios/{cliente_usuario.id_usuario}/metricas", headers=cliente_headers).json()["datos"]
    assert metricas["totalCompras"] == 1
    assert metricas["montoTotalCompras"] == 100000
    assert metricas["ticketPromedio"] == 100000
    assert metricas["creditosActivos"] == 1
    assert metricas["saldoCreditoPendiente"] == 60000

    ventas = client.get(f"/api/usuarios/{cliente_usuario.id_usuario}/ventas", headers=cliente_headers).json()["datos"]
    assert ventas["paginacion"]["totalRegistros"] == 1

    creditos = client.get(f"/api/usuarios/{cliente_usuario.id_usuario}/creditos", headers=cliente_headers).json()["datos"]
    assert creditos[0]["saldoPendiente"] == 60000


def test_clientes_con_credito(client, admin_headers, vendedor_headers, cliente_usuario, variantes, metodos):
    client.post("/api/ventas", json=payload_venta(
        cliente_usuario.id_usuario,
        [(variantes["negra"], 1, 50000)],
        [(metodos["Crédito Tienda"], 50000, None)]
    ), headers=vendedor_headers)

    con_credito = client.get("/api/usuarios/con-credito", headers=admin_headers).json()["datos"]

    assert len(con_credito) == 1
    assert con_credito[0]["saldoTotal"] == 50000
    assert con_credito[0]["cantidadCreditosActivos"] == 1
