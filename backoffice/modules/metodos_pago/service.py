import logging
from typing import List
from sqlalchemy.orm import Session

from backoffice.core.exceptions import ErrorConflicto, ErrorNoEncontrado, ErrorValidacion, ErrorInternoServidor
from .repository import MetodosPagoRepository
from .schemas import MetodoPagoCreate, MetodoPagoUpdate, MetodoPagoResponse, TipoMetodoPagoResponse

logger = logging.getLogger(__name__)

class MetodosPagoService:
    """
    Catálogo de métodos de pago disponibles en el asistente de ventas
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = MetodosPagoRepository(db)

    async def listar_activos(self) -> List[MetodoPagoResponse]:
        return [MetodoPagoResponse.model_validate(m) for m in self.repository.list_activos()]

    async def listar_tipos(self) -> List[TipoMetodoPagoResponse]:
        return [TipoMetodoPagoResponse.model_validate(t) for t in self.repository.list_tipos()]

    async def obtener(self, id_metodo_pago: int) -> MetodoPagoResponse:
        metodo = self.repository.get_by_id(id_metodo_pago)
        if not metodo:
            raise ErrorNoEncontrado("Método de pago no encontrado")
        return MetodoPagoResponse.model_validate(metodo)

    async def crear(self, datos: MetodoPagoCreate) -> MetodoPagoResponse:
        if self.repository.get_by_nombre(datos.nombre_metodo):
            raise ErrorConflicto(f"Ya existe el método de pago '{datos.nombre_metodo}'")
        if not self.repository.get_tipo(datos.id_tipo_metodo):
            raise ErrorValidacion("Tipo de método de pago no válido")

        try:
            metodo = self.repository.create({**datos.model_dump(), "activo": True})
            self.db.commit()
            return MetodoPagoResponse.model_validate(self.repository.get_by_id(metodo.id_metodo_pago))
        except Exception as e:
            self.db.rollback()
            logger.exception(f"Error creando método de pago: {e}")
            raise ErrorInternoServidor("Error creando método de pago")

    async def actualizar(self, id_metodo_pago: int, datos: MetodoPagoUpdate) -> MetodoPagoResponse:
        metodo = self.repository.get_by_id(id_metodo_pago)
        if not metodo:
            raise ErrorNoEncontrado("Método de pago no encontrado")

        cambios = datos.model_dump(exclude_unset=True)
        nombre = cambios.get("nombre_metodo")
        if nombre and nombre != metodo.nombre_metodo and self.repository.get_by_nombre(nombre):
            raise ErrorConflicto(f"Ya existe el método de pago '{nombre}'")
        if "id_tipo_metodo" in cambios and not self.repository.get_tipo(cambios["id_tipo_metodo"]):
            raise ErrorValidacion("Tipo de método de pago no válido")

        for campo, valor in cambios.items():
            setattr(metodo, campo, valor)
        self.db.commit()
        self.db.refresh(metodo)
        return MetodoPagoResponse.model_validate(metodo)

    async def eliminar(self, id_metodo_pago: int) -> None:
        """Eliminación lógica: el método deja de ofrecerse pero conserva su historial"""
        metodo = self.repository.get_by_id(id_metodo_pago)
        if not metodo:
            raise ErrorNoEncontrado("Método de pago no encontrado")
        metodo.activo = False
        self.db.commit()
