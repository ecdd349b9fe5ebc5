"""
Módulo de Estados de Pedido - flujo de trabajo de las ventas
"""

from .router import router as estados_pedido_router
from .service import EstadosPedidoService
from .repository import EstadosPedidoRepository

__all__ = [
    "estados_pedido_router",
    "EstadosPedidoService",
    "EstadosPedidoRepository"
]
