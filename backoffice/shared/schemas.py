from datetime import datetime
from decimal import Decimal

from fastapi import Query
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# ==================== CLASE BASE (Pydantic v2) ====================

class BackofficeModel(BaseModel):
    """
    Clase base para los esquemas de la API.
    Atributos en snake_case, JSON en camelCase (idVenta, totalPagado...).
    """
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
        json_encoders={
            Decimal: float,
            datetime: lambda v: v.isoformat(),
        }
    )


class PaginacionParams:
    """Parámetros de paginación comunes: ?pagina=1&limite=10"""

    def __init__(
        self,
        pagina: int = Query(1, ge=1, description="Página solicitada"),
        limite: int = Query(10, ge=1, le=100, description="Registros por página")
    ):
        self.pagina = pagina
        self.limite = limite

    @property
    def offset(self) -> int:
        return (self.pagina - 1) * self.limite
