from typing import List
from sqlalchemy.orm import Session

from backoffice.core.exceptions import ErrorConflicto, ErrorNoEncontrado
from .repository import EstadosPedidoRepository
from .schemas import EstadoPedidoCreate, EstadoPedidoUpdate, EstadoPedidoResponse

class EstadosPedidoService:
    """
    Estados del flujo de pedidos (Pendiente, Confirmado, ..., Entregado, Cancelado)
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = EstadosPedidoRepository(db)

    def _to_response(self, estado, cantidad_ventas: int) -> EstadoPedidoResponse:
        respuesta = EstadoPedidoResponse.model_validate(estado)
        respuesta.cantidad_ventas = cantidad_ventas
        return respuesta

    async def listar(self, solo_activos: bool = False) -> List[EstadoPedidoResponse]:
        return [
            self._to_response(estado, cantidad)
            for estado, cantidad in self.repository.list_con_ventas(solo_activos)
        ]

    async def obtener(self, id_estado_pedido: int) -> EstadoPedidoResponse:
        estado = self.repository.get_by_id(id_estado_pedido)
        if not estado:
            raise ErrorNoEncontrado("Estado de pedido no encontrado")
        return self._to_response(estado, self.repository.count_ventas(id_estado_pedido))

    async def crear(self, datos: EstadoPedidoCreate) -> EstadoPedidoResponse:
        if self.repository.get_by_nombre(datos.nombre_estado):
            raise ErrorConflicto(f"Ya existe el estado '{datos.nombre_estado}'")

        valores = datos.model_dump()
        if valores["orden"] is None:
            valores["orden"] = self.repository.get_max_orden() + 1

        estado = self.repository.create({**valores, "activo": True})
        self.db.commit()
        self.db.refresh(estado)
        return self._to_response(estado, 0)

    async def actualizar(self, id_estado_pedido: int, datos: EstadoPedidoUpdate) -> EstadoPedidoResponse:
        estado = self.repository.get_by_id(id_estado_pedido)
        if not estado:
            raise ErrorNoEncontrado("Estado de pedido no encontrado")

        cambios = datos.model_dump(exclude_unset=True)
        nombre = cambios.get("nombre_estado")
        if nombre and nombre != estado.nombre_estado and self.repository.get_by_nombre(nombre):
            raise ErrorConflicto(f"Ya existe el estado '{nombre}'")

        for campo, valor in cambios.items():
            setattr(estado, campo, valor)
        self.db.commit()
        self.db.refresh(estado)
        return self._to_response(estado, self.repository.count_ventas(id_estado_pedido))

    async def eliminar(self, id_estado_pedido: int) -> None:
        estado = self.repository.get_by_id(id_estado_pedido)
        if not estado:
            raise ErrorNoEncontrado("Estado de pedido no encontrado")

        ventas = self.repository.count_ventas(id_estado_pedido)
        if ventas:
            raise ErrorConflicto(
                f"No se puede eliminar el estado: {ventas} venta(s) lo utilizan"
            )

        self.repository.delete(estado)
        self.db.commit()
