import logging
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .exceptions import ErrorAPI

logger = logging.getLogger(__name__)

CODIGOS_HTTP = {
    400: "VALIDACION_ERROR",
    401: "NO_AUTORIZADO",
    403: "PROHIBIDO",
    404: "NO_ENCONTRADO",
    405: "METODO_NO_PERMITIDO",
    409: "CONFLICTO",
}


def cuerpo_error(status_code: int, mensaje: str, codigo: str, errores=None) -> dict:
    cuerpo = {
        "exito": False,
        "mensaje": mensaje,
        "codigo": codigo,
        "statusCode": status_code,
        "timestamp": datetime.now().isoformat()
    }
    if errores is not None:
        cuerpo["errores"] = errores
    return cuerpo


def setup_exception_handlers(app: FastAPI):
    """Registrar los manejadores que normalizan todas las respuestas de error"""

    @app.exception_handler(ErrorAPI)
    async def error_api_handler(request: Request, exc: ErrorAPI):
        logger.warning(
            f"{request.method} {request.url.path} - {exc.codigo}: {exc.mensaje}"
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(cuerpo_error(exc.status_code, exc.mensaje, exc.codigo, exc.errores)),
            headers=exc.headers
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            mensaje = f"Ruta no encontrada: {request.method} {request.url.path}"
            codigo = "RUTA_NO_ENCONTRADA"
        else:
            mensaje = str(exc.detail)
            codigo = CODIGOS_HTTP.get(exc.status_code, "ERROR_HTTP")
        return JSONResponse(
            status_code=exc.status_code,
            content=cuerpo_error(exc.status_code, mensaje, codigo),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errores = [
            {
                "campo": ".".join(str(parte) for parte in error["loc"] if parte != "body"),
                "mensaje": error["msg"]
            }
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content=cuerpo_error(400, "Errores de validación", "VALIDACION_ERROR", errores)
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Error no controlado en {request.method} {request.url.path}: {exc}",
            exc_info=exc
        )
        return JSONResponse(
            status_code=500,
            content=cuerpo_error(500, "Error interno del servidor", "ERROR_INTERNO_SERVIDOR")
        )
