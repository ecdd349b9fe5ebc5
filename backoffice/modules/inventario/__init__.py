"""
Módulo de Inventario - productos, variantes y movimientos de stock
"""

from .router import router as inventario_router
from .service import InventarioService
from .repository import InventarioRepository

__all__ = [
    "inventario_router",
    "InventarioService",
    "InventarioRepository"
]
