import math
from datetime import datetime
from typing import Any, List, Optional

from fastapi.encoders import jsonable_encoder


def respuesta_exitosa(datos: Any = None, mensaje: str = "Operación exitosa") -> dict:
    """
    Sobre estándar de respuesta: {exito, mensaje, datos, timestamp}.
    Los modelos pydantic se serializan con sus alias camelCase.
    """
    return {
        "exito": True,
        "mensaje": mensaje,
        "datos": jsonable_encoder(datos, by_alias=True),
        "timestamp": datetime.now().isoformat()
    }


def paginacion(total: int, pagina: int, limite: int) -> dict:
    return {
        "totalRegistros": total,
        "paginaActual": pagina,
        "totalPaginas": math.ceil(total / limite) if limite else 0,
        "registrosPorPagina": limite
    }


def respuesta_paginada(
    registros: List[Any],
    total: int,
    pagina: int,
    limite: int,
    mensaje: str = "Consulta exitosa",
    extra: Optional[dict] = None
) -> dict:
    datos = {"datos": registros, "paginacion": paginacion(total, pagina, limite)}
    if extra:
        datos.update(extra)
    return respuesta_exitosa(datos, mensaje)
