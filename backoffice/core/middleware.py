from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from backoffice.config.settings import settings
import time
import logging

logger = logging.getLogger(__name__)

# Rutas que no se registran en cada petición (sondeos de disponibilidad)
RUTAS_SILENCIOSAS = ("/", f"{settings.api_prefix}/health")

def setup_middleware(app: FastAPI):
    """CORS para la consola administrativa y registro de cada petición"""

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "Origin", "X-Requested-With"],
        expose_headers=["X-Tiempo-Proceso"],
        max_age=3600
    )

    @app.middleware("http")
    async def registrar_peticiones(request, call_next):
        inicio = time.time()

        response = await call_next(request)

        duracion = time.time() - inicio
        response.headers["X-Tiempo-Proceso"] = f"{duracion:.4f}"
        if request.url.path in RUTAS_SILENCIOSAS:
            return response

        # 5xx como error, 4xx como advertencia
        if response.status_code >= 500:
            nivel = logging.ERROR
        elif response.status_code >= 400:
            nivel = logging.WARNING
        else:
            nivel = logging.INFO
        logger.log(
            nivel,
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {duracion:.4f}s"
        )
        return response
