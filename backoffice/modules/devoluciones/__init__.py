"""
Módulo de Devoluciones - reingreso de unidades vendidas y ajuste de saldos
"""

from .router import router as devoluciones_router
from .service import DevolucionesService
from .repository import DevolucionesRepository

__all__ = [
    "devoluciones_router",
    "DevolucionesService",
    "DevolucionesRepository"
]
