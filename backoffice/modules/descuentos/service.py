import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple, Dict, Any
from sqlalchemy.orm import Session

from backoffice.core.exceptions import ErrorConflicto, ErrorNoEncontrado, ErrorValidacion
from backoffice.shared.calculos_venta import Cupon, valor_cupon
from backoffice.shared.database.models import Descuento
from .repository import DescuentosRepository
from .schemas import (
    DescuentoCreate, DescuentoUpdate, DescuentoResponse, EstadoDescuento,
    ValidacionDescuentoResponse, HistorialDescuentoResponse, EstadisticasDescuentosResponse
)

logger = logging.getLogger(__name__)

class DescuentosService:
    """
    Gestión de cupones y reglas de validación de un código de descuento
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = DescuentosRepository(db)

    def _get_or_404(self, id_descuento: int) -> Descuento:
        descuento = self.repository.get_by_id(id_descuento)
        if not descuento:
            raise ErrorNoEncontrado("Descuento no encontrado")
        return descuento

    # ==================== VALIDACIÓN ====================

    def evaluar(
        self,
        descuento: Descuento,
        monto_compra: Decimal,
        id_usuario: Optional[int] = None
    ) -> Optional[str]:
        """
        Aplicar las reglas en orden: estado, vigencia, monto mínimo,
        usos totales y usos por cliente.

        Retorna el motivo de rechazo o None si el cupón es aplicable.
        Un cupón activo cuya fecha de fin ya pasó queda marcado como vencido.
        """
        ahora = datetime.now()

        if descuento.estado == EstadoDescuento.vencido.value:
            return "El descuento ha vencido"
        if descuento.estado != EstadoDescuento.activo.value:
            return "El descuento no está activo"

        if descuento.fecha_inicio and ahora < descuento.fecha_inicio:
            return "El descuento aún no está vigente"

        if descuento.fecha_fin and ahora > descuento.fecha_fin:
            descuento.estado = EstadoDescuento.vencido.value
            self.db.flush()
            logger.info(f"Descuento {descuento.codigo_descuento} marcado como vencido")
            return "El descuento ha vencido"

        minimo = descuento.monto_minimo_compra or Decimal("0")
        if monto_compra < minimo:
            return f"El monto mínimo de compra para este descuento es {minimo}"

        if descuento.cantidad_maxima_usos is not None and descuento.usos_actuales >= descuento.cantidad_maxima_usos:
            return "El descuento alcanzó el máximo de usos permitidos"

        if descuento.uso_por_cliente is not None and id_usuario is not None:
            usos = self.repository.get_usos_cliente(descuento.id_descuento, id_usuario)
            if usos >= descuento.uso_por_cliente:
                return "El cliente ya utilizó este descuento el máximo de veces permitido"

        return None

    def obtener_descuento_valido(
        self,
        codigo: str,
        monto_compra: Decimal,
        id_usuario: Optional[int] = None
    ) -> Tuple[Descuento, Decimal]:
        """
        Cupón aplicable y su valor sobre `monto_compra`, o ErrorValidacion.
        No hace commit: lo usa el registro de ventas dentro de su transacción.
        """
        descuento = self.repository.get_by_codigo(codigo)
        if not descuento:
            raise ErrorValidacion("Código de descuento no encontrado", codigo="DESCUENTO_INVALIDO")

        motivo = self.evaluar(descuento, monto_compra, id_usuario)
        if motivo:
            raise ErrorValidacion(motivo, codigo="DESCUENTO_INVALIDO")

        cupon = Cupon(descuento.tipo_descuento, descuento.valor_descuento, descuento.codigo_descuento)
        return descuento, valor_cupon(cupon, monto_compra)

    async def validar(
        self,
        codigo: str,
        monto_compra: Decimal,
        id_usuario: Optional[int] = None
    ) -> ValidacionDescuentoResponse:
        try:
            descuento, valor = self.obtener_descuento_valido(codigo, monto_compra, id_usuario)
        except ErrorValidacion:
            # conservar la marca de vencido si se produjo
            self.db.commit()
            raise

        return ValidacionDescuentoResponse(
            valido=True,
            mensaje="Descuento válido",
            descuento=DescuentoResponse.model_validate(descuento),
            valor_aplicado=valor
        )

    # ==================== CRUD ====================

    async def listar(
        self,
        busqueda: Optional[str],
        estado: Optional[str],
        tipo_descuento: Optional[str],
        offset: int,
        limit: int
    ) -> Tuple[list, int]:
        descuentos, total = self.repository.list_descuentos(busqueda, estado, tipo_descuento, offset, limit)
        return [DescuentoResponse.model_validate(d) for d in descuentos], total

    async def obtener(self, id_descuento: int) -> DescuentoResponse:
        return DescuentoResponse.model_validate(self._get_or_404(id_descuento))

    async def obtener_por_codigo(self, codigo: str) -> DescuentoResponse:
        descuento = self.repository.get_by_codigo(codigo)
        if not descuento:
            raise ErrorNoEncontrado("Descuento no encontrado")
        return DescuentoResponse.model_validate(descuento)

    async def crear(self, datos: DescuentoCreate) -> DescuentoResponse:
        if self.repository.get_by_codigo(datos.codigo_descuento):
            raise ErrorConflicto(f"Ya existe un descuento con el código {datos.codigo_descuento}")

        descuento = self.repository.create({
            **datos.model_dump(),
            "tipo_descuento": datos.tipo_descuento.value,
            "usos_actuales": 0,
            "estado": EstadoDescuento.activo.value
        })
        self.db.commit()
        self.db.refresh(descuento)
        logger.info(f"Descuento {descuento.codigo_descuento} creado")
        return DescuentoResponse.model_validate(descuento)

    async def actualizar(self, id_descuento: int, datos: DescuentoUpdate) -> DescuentoResponse:
        descuento = self._get_or_404(id_descuento)
        cambios = datos.model_dump(exclude_unset=True)

        tipo = cambios.get("tipo_descuento", descuento.tipo_descuento)
        valor = cambios.get("valor_descuento", descuento.valor_descuento)
        if tipo == "porcentaje" and valor > 100:
            raise ErrorValidacion("Un descuento porcentual no puede superar el 100%")

        inicio = cambios.get("fecha_inicio", descuento.fecha_inicio)
        fin = cambios.get("fecha_fin", descuento.fecha_fin)
        if inicio and fin and fin <= inicio:
            raise ErrorValidacion("La fecha de fin debe ser posterior a la fecha de inicio")

        for campo, valor_campo in cambios.items():
            setattr(descuento, campo, valor_campo.value if hasattr(valor_campo, "value") else valor_campo)

        # extender la vigencia reactiva un cupón vencido
        if descuento.estado == EstadoDescuento.vencido.value and fin and fin > datetime.now():
            descuento.estado = EstadoDescuento.activo.value

        self.db.commit()
        self.db.refresh(descuento)
        return DescuentoResponse.model_validate(descuento)

    async def cambiar_estado(self, id_descuento: int, estado: EstadoDescuento) -> DescuentoResponse:
        descuento = self._get_or_404(id_descuento)
        descuento.estado = estado.value
        self.db.commit()
        self.db.refresh(descuento)
        return DescuentoResponse.model_validate(descuento)

    async def eliminar(self, id_descuento: int) -> None:
        """Eliminación lógica: el cupón pasa a inactivo"""
        descuento = self._get_or_404(id_descuento)
        descuento.estado = EstadoDescuento.inactivo.value
        self.db.commit()

    # ==================== HISTORIAL Y ESTADÍSTICAS ====================

    async def historial(self, id_descuento: Optional[int], offset: int, limit: int) -> Tuple[list, int]:
        if id_descuento is not None:
            self._get_or_404(id_descuento)
        registros, total = self.repository.list_historial(id_descuento, offset, limit)
        return [HistorialDescuentoResponse.model_validate(r) for r in registros], total

    async def estadisticas(self) -> EstadisticasDescuentosResponse:
        por_estado: Dict[str, int] = self.repository.count_por_estado()
        totales: Dict[str, Any] = self.repository.get_totales_uso()
        return EstadisticasDescuentosResponse(
            total_descuentos=sum(por_estado.values()),
            activos=por_estado.get("activo", 0),
            inactivos=por_estado.get("inactivo", 0),
            vencidos=por_estado.get("vencido", 0),
            **totales
        )
