"""
Módulo de Métodos de Pago

Catálogo de métodos (Efectivo, Tarjetas, PSE, Nequi, Crédito Tienda, métodos
combinados) agrupados por tipo. Los métodos de tipo credito_tienda financian
la parte de la venta que queda como crédito del cliente.
"""

from .router import router as metodos_pago_router
from .service import MetodosPagoService
from .repository import MetodosPagoRepository

__all__ = [
    "metodos_pago_router",
    "MetodosPagoService",
    "MetodosPagoRepository"
]
