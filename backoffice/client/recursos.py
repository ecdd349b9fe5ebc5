"""
Envoltorios por recurso de la API. Los cuerpos y parámetros viajan en camelCase,
igual que los expone el servidor.
"""

from typing import Any, Dict, List, Optional


class Recurso:
    def __init__(self, api):
        self.api = api


# ==================== AUTENTICACIÓN Y USUARIOS ====================

class AuthApi(Recurso):

    def login(self, identificador: str, contrasena: str) -> Dict[str, Any]:
        """Inicia sesión y deja el token configurado en el cliente"""
        datos = self.api.post("/auth/login", {"identificador": identificador, "contrasena": contrasena})
        self.api.set_auth_token(datos["token"])
        return datos

    def registro(self, datos: Dict[str, Any]) -> Dict[str, Any]:
        respuesta = self.api.post("/auth/registro", datos)
        self.api.set_auth_token(respuesta["token"])
        return respuesta

    def perfil(self) -> Dict[str, Any]:
        return self.api.get("/auth/perfil")

    def cambiar_contrasena(self, actual: str, nueva: str) -> None:
        self.api.put("/auth/cambiar-contrasena", {"contrasenaActual": actual, "contrasenaNueva": nueva})

    def logout(self) -> None:
        try:
            self.api.post("/auth/logout")
        finally:
            self.api.set_auth_token(None)


class UsuariosApi(Recurso):

    def listar(self, pagina: int = 1, limite: int = 10, **filtros) -> Dict[str, Any]:
        """Filtros: nombre, correo, rol, estado"""
        return self.api.get("/usuarios", pagina=pagina, limite=limite, **filtros)

    def obtener(self, id_usuario: int) -> Dict[str, Any]:
        return self.api.get(f"/usuarios/{id_usuario}")

    def crear(self, datos: Dict[str, Any]) -> Dict[str, Any]:
        return self.api.post("/usuarios", datos)

    def actualizar(self, id_usuario: int, datos: Dict[str, Any]) -> Dict[str, Any]:
        return self.api.put(f"/usuarios/{id_usuario}", datos)

    def cambiar_estado(self, id_usuario: int, estado: str) -> Dict[str, Any]:
        return self.api.patch(f"/usuarios/{id_usuario}/estado", {"estado": estado})

    def eliminar(self, id_usuario: int) -> None:
        self.api.delete(f"/usuarios/{id_usuario}")

    def con_credito(self) -> List[Dict[str, Any]]:
        return self.api.get("/usuarios/con-credito")

    def metricas(self, id_usuario: int) -> Dict[str, Any]:
        return self.api.get(f"/usuarios/{id_usuario}/metricas")

    def ventas(self, id_usuario: int, pagina: int = 1, limite: int = 10) -> Dict[str, Any]:
        return self.api.get(f"/usuarios/{id_usuario}/ventas", pagina=pagina, limite=limite)

    def creditos(self, id_usuario: int) -> Dict[str, Any]:
        return self.api.get(f"/usuarios/{id_usuario}/creditos")


# ==================== VENTAS ====================

class VentasApi(Recurso):

    def listar(
        self,
        pagina: int = 1,
        limite: int = 10,
        busqueda: Optional[str] = None,
        estado_pedido: Optional[int] = None
    ) -> Dict[str, Any]:
        return self.api.get(
            "/ventas", pagina=pagina, limite=limite, busqueda=busqueda, estadoPedido=estado_pedido
        )

    def obtener(self, id_venta: int) -> Dict[str, Any]:
        return self.api.get(f"/ventas/{id_venta}")

    def pagos(self, id_venta: int) -> List[Dict[str, Any]]:
        return self.api.get(f"/ventas/{id_venta}/pagos")

    def calcular(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self.api.post("/ventas/calcular", payload)

    def crear(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self.api.post("/ventas", payload)

    def actualizar_estado(self, id_venta: int, id_estado_pedido: int) -> Dict[str, Any]:
        return self.api.patch(f"/ventas/{id_venta}/estado", {"idEstadoPedido": id_estado_pedido})


class DescuentosApi(Recurso):

    def listar(self, pagina: int = 1, limite: int = 10, busqueda: Optional[str] = None,
               estado: Optional[str] = None, tipo_descuento: Optional[str] = None) -> Dict[str, Any]:
        return self.api.get(
            "/descuentos", pagina=pagina, limite=limite,
            busqueda=busqueda, estado=estado, tipoDescuento=tipo_descuento
        )

    def obtener(self, id_descuento: int) -> Dict[str, Any]:
        return self.api.get(f"/descuentos/{id_descuento}")

    def por_codigo(self, codigo: str) -> Dict[str, Any]:
        return self.api.get(f"/descuentos/codigo/{codigo}")

    def validar(self, codigo: str, monto_compra, id_usuario: Optional[int] = None) -> Dict[str, Any]:
        return self.api.post("/descuentos/validar", {
            "codigoDescuento": codigo,
            "montoCompra": float(monto_compra),
            "idUsuario": id_usuario
        })

    def crear(self, datos: Dict[str, Any]) -> Dict[str, Any]:
        return self.api.post("/descuentos", datos)

    def actualizar(self, id_descuento: int, datos: Dict[str, Any]) -> Dict[str, Any]:
        return self.api.put(f"/descuentos/{id_descuento}", datos)

    def cambiar_estado(self, id_descuento: int, estado: str) -> Dict[str, Any]:
        return self.api.patch(f"/descuentos/{id_descuento}/estado", {"estado": estado})

    def eliminar(self, id_descuento: int) -> None:
        self.api.delete(f"/descuentos/{id_descuento}")

    def historial(self, id_descuento: Optional[int] = None, pagina: int = 1, limite: int = 10) -> Dict[str, Any]:
        if id_descuento:
            return self.api.get(f"/descuentos/{id_descuento}/historial", pagina=pagina, limite=limite)
        return self.api.get("/descuentos/historial", pagina=pagina, limite=limite)

    def estadisticas(self) -> Dict[str, Any]:
        return self.api.get("/descuentos/estadisticas")


class MetodosPagoApi(Recurso):

    def listar(self) -> List[Dict[str, Any]]:
        return self.api.get("/metodos-pago")

    def tipos(self) -> List[Dict[str, Any]]:
        return self.api.get("/metodos-pago/tipos")

    def obtener(self, id_metodo_pago: int) -> Dict[str, Any]:
        return self.api.get(f"/metodos-pago/{id_metodo_pago}")

    def crear(self, datos: Dict[str, Any]) -> Dict[str, Any]:
        return self.api.post("/metodos-pago", datos)

    def actualizar(self, id_metodo_pago: int, datos: Dict[str, Any]) -> Dict[str, Any]:
        return self.api.put(f"/metodos-pago/{id_metodo_pago}", datos)

    def eliminar(self, id_metodo_pago: int) -> None:
        self.api.delete(f"/metodos-pago/{id_metodo_pago}")


class EstadosPedidoApi(Recurso):

    def listar(self, solo_activos: bool = False) -> List[Dict[str, Any]]:
        return self.api.get("/estados-pedido", soloActivos=solo_activos)

    def obtener(self, id_estado_pedido: int) -> Dict[str, Any]:
        return self.api.get(f"/estados-pedido/{id_estado_pedido}")

    def crear(self, datos: Dict[str, Any]) -> Dict[str, Any]:
        return self.api.post("/estados-pedido", datos)

    def actualizar(self, id_estado_pedido: int, datos: Dict[str, Any]) -> Dict[str, Any]:
        return self.api.put(f"/estados-pedido/{id_estado_pedido}", datos)

    def eliminar(self, id_estado_pedido: int) -> None:
        self.api.delete(f"/estados-pedido/{id_estado_pedido}")


# ==================== CRÉDITOS ====================

class CreditosApi(Recurso):

    def listar(self, pagina: int = 1, limite: int = 10, estado: Optional[str] = None,
               id_usuario: Optional[int] = None) -> Dict[str, Any]:
        return self.api.get("/creditos", pagina=pagina, limite=limite, estado=estado, idUsuario=id_usuario)

    def obtener(self, id_credito: int) -> Dict[str, Any]:
        return self.api.get(f"/creditos/{id_credito}")

    def de_cliente(self, id_usuario: int) -> Dict[str, Any]:
        return self.api.get(f"/creditos/cliente/{id_usuario}")

    def abonar(self, id_credito: int, pagos: List[Dict[str, Any]], notas: Optional[str] = None) -> Dict[str, Any]:
        """`pagos`: [{idMetodoPago, monto, referencia?}]"""
        return self.api.post(f"/creditos/{id_credito}/abonos", {"pagos": pagos, "notas": notas})


class VentasCreditoApi(Recurso):

    def listar(self, pagina: int = 1, limite: int = 10) -> Dict[str, Any]:
        return self.api.get("/ventas-credito", pagina=pagina, limite=limite)

    def abonar(self, id_venta: int, monto, id_metodo_pago: int, notas: Optional[str] = None) -> Dict[str, Any]:
        return self.api.post(f"/ventas-credito/{id_venta}/abono", {
            "monto": float(monto),
            "idMetodoPago": id_metodo_pago,
            "notas": notas
        })


# ==================== PAGOS Y DEVOLUCIONES ====================

class PagosApi(Recurso):

    def listar(self, pagina: int = 1, limite: int = 10, id_venta: Optional[int] = None,
               id_metodo_pago: Optional[int] = None, tipo_pago: Optional[str] = None) -> Dict[str, Any]:
        return self.api.get(
            "/pagos", pagina=pagina, limite=limite,
            idVenta=id_venta, idMetodoPago=id_metodo_pago, tipoPago=tipo_pago
        )


class DevolucionesApi(Recurso):

    def listar(self, pagina: int = 1, limite: int = 10, id_venta: Optional[int] = None,
               id_usuario: Optional[int] = None) -> Dict[str, Any]:
        return self.api.get("/devoluciones", pagina=pagina, limite=limite, idVenta=id_venta, idUsuario=id_usuario)

    def obtener(self, id_devolucion: int) -> Dict[str, Any]:
        return self.api.get(f"/devoluciones/{id_devolucion}")

    def crear(self, id_venta: int, motivo: str, detalles: List[Dict[str, Any]],
              observaciones: Optional[str] = None) -> Dict[str, Any]:
        """`detalles`: [{"idDetalle": ..., "cantidadDevuelta": ...}]"""
        return self.api.post("/devoluciones", {
            "idVenta": id_venta,
            "motivo": motivo,
            "detalles": detalles,
            "observaciones": observaciones
        })


# ==================== INVENTARIO Y REPORTES ====================

class InventarioApi(Recurso):

    def listar(self, pagina: int = 1, limite: int = 10, busqueda: Optional[str] = None,
               solo_bajo_stock: bool = False) -> Dict[str, Any]:
        return self.api.get(
            "/inventario", pagina=pagina, limite=limite, busqueda=busqueda, soloBajoStock=solo_bajo_stock
        )

    def obtener(self, id_variante: int) -> Dict[str, Any]:
        return self.api.get(f"/inventario/{id_variante}")

    def crear_producto(self, datos: Dict[str, Any]) -> Dict[str, Any]:
        return self.api.post("/inventario/productos", datos)

    def ajustar(self, id_variante: int, cantidad: int, motivo: str) -> Dict[str, Any]:
        return self.api.post(f"/inventario/{id_variante}/ajustes", {"cantidad": cantidad, "motivo": motivo})

    def movimientos(self, pagina: int = 1, limite: int = 10, id_variante: Optional[int] = None,
                    tipo_movimiento: Optional[str] = None) -> Dict[str, Any]:
        return self.api.get(
            "/inventario/movimientos", pagina=pagina, limite=limite,
            idVariante=id_variante, tipoMovimiento=tipo_movimiento
        )


class ReportesApi(Recurso):

    def dashboard(self, rango: str = "dia") -> Dict[str, Any]:
        return self.api.get("/reportes/dashboard", rango=rango)

    def ventas(self, fecha_inicio=None, fecha_fin=None, id_estado_pedido: Optional[int] = None,
               id_usuario: Optional[int] = None, pagina: int = 1, limite: int = 10) -> Dict[str, Any]:
        return self.api.get(
            "/reportes/ventas",
            fechaInicio=fecha_inicio.isoformat() if fecha_inicio else None,
            fechaFin=fecha_fin.isoformat() if fecha_fin else None,
            idEstadoPedido=id_estado_pedido,
            idUsuario=id_usuario,
            pagina=pagina,
            limite=limite
        )

    def creditos(self, fecha_inicio=None, fecha_fin=None, estado: Optional[str] = None,
                 solo_vencidos: bool = False, id_usuario: Optional[int] = None) -> Dict[str, Any]:
        return self.api.get(
            "/reportes/creditos",
            fechaInicio=fecha_inicio.isoformat() if fecha_inicio else None,
            fechaFin=fecha_fin.isoformat() if fecha_fin else None,
            estado=estado,
            soloVencidos=solo_vencidos,
            idUsuario=id_usuario
        )

    def inventario(self, tipo_reporte: str = "valoracion") -> Dict[str, Any]:
        return self.api.get("/reportes/inventario", tipoReporte=tipo_reporte)
