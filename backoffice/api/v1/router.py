from fastapi import APIRouter

from backoffice.config.settings import settings
from backoffice.modules.auth import auth_router
from backoffice.modules.usuarios import usuarios_router
from backoffice.modules.ventas import ventas_router, pagos_router
from backoffice.modules.descuentos import descuentos_router
from backoffice.modules.metodos_pago import metodos_pago_router
from backoffice.modules.estados_pedido import estados_pedido_router
from backoffice.modules.creditos import creditos_router, ventas_credito_router
from backoffice.modules.inventario import inventario_router
from backoffice.modules.reportes import reportes_router
from backoffice.modules.devoluciones import devoluciones_router

# Router principal de la API
api_router = APIRouter()

# ==================== MÓDULOS ====================

api_router.include_router(auth_router)
api_router.include_router(usuarios_router)
api_router.include_router(ventas_router)
api_router.include_router(pagos_router)
api_router.include_router(descuentos_router)
api_router.include_router(metodos_pago_router)
api_router.include_router(estados_pedido_router)
api_router.include_router(creditos_router)
api_router.include_router(ventas_credito_router)
api_router.include_router(inventario_router)
api_router.include_router(reportes_router)
api_router.include_router(devoluciones_router)

# ==================== ENDPOINTS RAÍZ ====================

@api_router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.version,
        "modules": [
            "auth", "usuarios", "ventas", "pagos", "descuentos", "metodos-pago",
            "estados-pedido", "creditos", "ventas-credito", "inventario", "reportes",
            "devoluciones"
        ]
    }
