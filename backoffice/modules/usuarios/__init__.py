"""
Módulo de Usuarios - personal de la tienda y clientes
"""

from .router import router as usuarios_router
from .service import UsuariosService
from .repository import UsuariosRepository

__all__ = [
    "usuarios_router",
    "UsuariosService",
    "UsuariosRepository"
]
