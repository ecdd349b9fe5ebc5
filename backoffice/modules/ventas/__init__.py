"""
Módulo de Ventas

- Cálculo de un carrito: subtotal, descuentos por línea, cupón, IVA y pagos
- Registro de ventas con múltiples métodos de pago y crédito de tienda
- Consulta de ventas y actualización del estado del pedido
- Listado general de pagos recibidos

Arquitectura:
- router.py: Endpoints FastAPI
- service.py: Lógica de negocio
- repository.py: Acceso a datos
- schemas.py: Modelos Pydantic de request/response
"""

from .router import router as ventas_router, pagos_router
from .service import VentasService
from .repository import VentasRepository

__all__ = [
    "ventas_router",
    "pagos_router",
    "VentasService",
    "VentasRepository"
]
