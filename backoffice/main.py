import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager

from backoffice.config.settings import settings
from backoffice.config.database import Base, SessionLocal, engine
from backoffice.core.errors import setup_exception_handlers
from backoffice.core.middleware import setup_middleware
from backoffice.api.v1.router import api_router
from backoffice.shared.database import models  # noqa: F401  registra las tablas en Base
from backoffice.shared.database.seed import seed_catalogos

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger("backoffice")

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"{settings.app_name} iniciando...")
    logger.info(f"Versión: {settings.version}")
    logger.info(f"Entorno: {'Desarrollo' if settings.debug else 'Producción'}")
    logger.info(f"JWT: {settings.algorithm}, expira en {settings.access_token_expire_minutes} minutos")

    if settings.auto_create_tables:
        Base.metadata.create_all(bind=engine)
    if settings.seed_on_startup:
        db = SessionLocal()
        try:
            seed_catalogos(db)
        finally:
            db.close()

    yield

    # Shutdown
    logger.info(f"{settings.app_name} detenida")

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Back office de ventas: ventas con pagos mixtos, descuentos, créditos de tienda y reportes",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)

# Setup middleware and error envelope
setup_middleware(app)
setup_exception_handlers(app)

# Include routers
app.include_router(api_router, prefix=settings.api_prefix)

# Root endpoint
@app.get("/")
async def root():
    return {
        "message": settings.app_name,
        "version": settings.version,
        "status": "running",
        "docs": "/docs" if settings.debug else "Disabled in production",
        "api": settings.api_prefix
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "backoffice.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
