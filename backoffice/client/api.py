import logging
import os
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

API_URL_DEFECTO = "http://localhost:8000/api"

class ApiError(Exception):
    """Error devuelto por la API, normalizado desde el sobre {exito, mensaje, codigo, errores}"""

    def __init__(
        self,
        mensaje: str,
        codigo: Optional[str] = None,
        status_code: Optional[int] = None,
        errores: Optional[List[Dict[str, Any]]] = None
    ):
        super().__init__(mensaje)
        self.mensaje = mensaje
        self.codigo = codigo
        self.status_code = status_code
        self.errores = errores or []

    def __str__(self) -> str:
        if self.status_code:
            return f"[{self.status_code} {self.codigo}] {self.mensaje}"
        return self.mensaje

class ApiClient:
    """
    Cliente HTTP de la API del back office.

    La URL base se toma de BACKOFFICE_API_URL. Cada respuesta exitosa se
    desempaqueta y se retorna el contenido de `datos`.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        token: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        self.base_url = (base_url or os.getenv("BACKOFFICE_API_URL", API_URL_DEFECTO)).rstrip("/")
        self._http = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport
        )
        self.set_auth_token(token)

        # Importación tardía: los recursos reciben este cliente
        from .recursos import (
            AuthApi, UsuariosApi, VentasApi, DescuentosApi, MetodosPagoApi,
            EstadosPedidoApi, CreditosApi, VentasCreditoApi, PagosApi, DevolucionesApi,
            InventarioApi, ReportesApi
        )
        self.auth = AuthApi(self)
        self.usuarios = UsuariosApi(self)
        self.ventas = VentasApi(self)
        self.descuentos = DescuentosApi(self)
        self.metodos_pago = MetodosPagoApi(self)
        self.estados_pedido = EstadosPedidoApi(self)
        self.creditos = CreditosApi(self)
        self.ventas_credito = VentasCreditoApi(self)
        self.pagos = PagosApi(self)
        self.devoluciones = DevolucionesApi(self)
        self.inventario = InventarioApi(self)
        self.reportes = ReportesApi(self)

    # ==================== TOKEN ====================

    def set_auth_token(self, token: Optional[str]) -> None:
        """Establece o elimina el token JWT"""
        if token:
            self._http.headers["Authorization"] = f"Bearer {token}"
        else:
            self._http.headers.pop("Authorization", None)

    @property
    def autenticado(self) -> bool:
        return "Authorization" in self._http.headers

    # ==================== PETICIONES ====================

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None
    ) -> Dict[str, Any]:
        """Ejecuta la petición y retorna el sobre completo de la respuesta"""
        if params:
            params = {clave: valor for clave, valor in params.items() if valor is not None}

        try:
            response = self._http.request(method, path, params=params or None, json=json)
        except httpx.HTTPError as e:
            logger.error(f"Error de conexión con {self.base_url}: {e}")
            raise ApiError(f"No fue posible conectar con el servidor: {e}", "ERROR_CONEXION") from e

        try:
            cuerpo = response.json() if response.content else {}
        except ValueError:
            cuerpo = {}

        if response.status_code == 401:
            logger.warning("Sesión expirada o no autorizada")

        if response.is_error:
            raise ApiError(
                cuerpo.get("mensaje") or response.reason_phrase,
                cuerpo.get("codigo"),
                response.status_code,
                cuerpo.get("errores")
            )
        return cuerpo

    def get(self, path: str, **params) -> Any:
        return self.request("GET", path, params=params).get("datos")

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json).get("datos")

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json).get("datos")

    def patch(self, path: str, json: Any = None) -> Any:
        return self.request("PATCH", path, json=json).get("datos")

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path).get("datos")

    # ==================== CICLO DE VIDA ====================

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()
