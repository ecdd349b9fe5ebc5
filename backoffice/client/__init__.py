"""
Cliente de la API del back office y estado del asistente de ventas
"""

from .api import ApiClient, ApiError
from .carrito import CarritoVenta, ItemCarrito

__all__ = [
    "ApiClient",
    "ApiError",
    "CarritoVenta",
    "ItemCarrito"
]
