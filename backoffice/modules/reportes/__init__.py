"""
Módulo de Reportes - dashboard, ventas, cartera e inventario
"""

from .router import router as reportes_router
from .service import ReportesService

__all__ = [
    "reportes_router",
    "ReportesService"
]
