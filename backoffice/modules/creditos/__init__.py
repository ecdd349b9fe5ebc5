"""
Módulo de Créditos - cartera de créditos de tienda

Un crédito nace al registrar una venta con una parte pagada mediante un
método de tipo credito_tienda. Este módulo consulta la cartera y registra
los abonos, por crédito (/creditos) o por venta (/ventas-credito).
"""

from .router import router as creditos_router, ventas_credito_router
from .service import CreditosService
from .repository import CreditosRepository

__all__ = [
    "creditos_router",
    "ventas_credito_router",
    "CreditosService",
    "CreditosRepository"
]
