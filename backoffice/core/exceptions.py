from typing import Any, Optional

from fastapi import HTTPException


class ErrorAPI(HTTPException):
    """
    Error de negocio con código estable para el cliente.

    El manejador registrado en main lo serializa como
    {exito, mensaje, codigo, statusCode, errores}.
    """

    status_code_defecto = 500
    codigo_defecto = "ERROR_INTERNO_SERVIDOR"
    mensaje_defecto = "Error interno del servidor"

    def __init__(
        self,
        mensaje: Optional[str] = None,
        codigo: Optional[str] = None,
        errores: Optional[Any] = None,
        status_code: Optional[int] = None
    ):
        self.mensaje = mensaje or self.mensaje_defecto
        self.codigo = codigo or self.codigo_defecto
        self.errores = errores
        super().__init__(status_code=status_code or self.status_code_defecto, detail=self.mensaje)


class ErrorValidacion(ErrorAPI):
    status_code_defecto = 400
    codigo_defecto = "VALIDACION_ERROR"
    mensaje_defecto = "Datos inválidos"


class ErrorNoAutorizado(ErrorAPI):
    status_code_defecto = 401
    codigo_defecto = "NO_AUTORIZADO"
    mensaje_defecto = "No autorizado"


class ErrorProhibido(ErrorAPI):
    status_code_defecto = 403
    codigo_defecto = "PROHIBIDO"
    mensaje_defecto = "No tiene permisos para realizar esta acción"


class ErrorNoEncontrado(ErrorAPI):
    status_code_defecto = 404
    codigo_defecto = "NO_ENCONTRADO"
    mensaje_defecto = "Recurso no encontrado"


class ErrorConflicto(ErrorAPI):
    status_code_defecto = 409
    codigo_defecto = "CONFLICTO"
    mensaje_defecto = "El recurso ya existe o está en conflicto"


class ErrorInternoServidor(ErrorAPI):
    pass
