"""
Módulo de Descuentos - cupones porcentuales o de valor fijo

- Gestión de cupones con vigencia, monto mínimo y límites de uso
- Validación de un código contra un monto de compra
- Historial de uso y estadísticas de ahorro
"""

from .router import router as descuentos_router
from .service import DescuentosService
from .repository import DescuentosRepository

__all__ = [
    "descuentos_router",
    "DescuentosService",
    "DescuentosRepository"
]
