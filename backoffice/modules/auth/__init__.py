"""
Módulo de Autenticación - login con JWT, registro y perfil
"""

from .router import router as auth_router
from .service import AuthService

__all__ = [
    "auth_router",
    "AuthService"
]
