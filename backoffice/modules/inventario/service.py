import logging
from typing import Optional, Tuple
from sqlalchemy.orm import Session

from backoffice.core.exceptions import ErrorConflicto, ErrorNoEncontrado, ErrorValidacion, ErrorInternoServidor
from backoffice.shared.database.models import Usuario
from .repository import InventarioRepository
from .schemas import (
    ProductoCreate, ProductoResponse, AjusteStockRequest,
    VarianteResponse, MovimientoInventarioResponse
)

logger = logging.getLogger(__name__)

class InventarioService:
    """
    Consulta de variantes para el asistente de ventas y ajustes manuales de stock
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = InventarioRepository(db)

    async def listar_variantes(
        self,
        busqueda: Optional[str],
        solo_bajo_stock: bool,
        offset: int,
        limit: int
    ) -> Tuple[list, int]:
        variantes, total = self.repository.list_variantes(busqueda, solo_bajo_stock, offset, limit)
        return [VarianteResponse.model_validate(v) for v in variantes], total

    async def obtener_variante(self, id_variante: int) -> dict:
        variante = self.repository.get_variante(id_variante)
        if not variante:
            raise ErrorNoEncontrado("Variante no encontrada")
        return {
            "variante": VarianteResponse.model_validate(variante),
            "movimientos": [
                MovimientoInventarioResponse.model_validate(m)
                for m in self.repository.list_movimientos(id_variante)
            ]
        }

    async def crear_producto(self, datos: ProductoCreate, usuario: Usuario) -> ProductoResponse:
        skus = [v.codigo_sku for v in datos.variantes]
        if len(set(skus)) != len(skus):
            raise ErrorValidacion("Hay códigos SKU repetidos en las variantes")
        for sku in skus:
            if self.repository.get_by_sku(sku):
                raise ErrorConflicto(f"El SKU {sku} ya existe")

        try:
            producto = self.repository.create_producto({
                "nombre_producto": datos.nombre_producto,
                "descripcion": datos.descripcion,
                "precio_venta": datos.precio_venta,
                "activo": True
            })
            for datos_variante in datos.variantes:
                stock_inicial = datos_variante.cantidad_stock
                variante = self.repository.create_variante({
                    **datos_variante.model_dump(),
                    "cantidad_stock": 0,
                    "id_producto": producto.id_producto,
                    "activo": True
                })
                if stock_inicial:
                    self.repository.registrar_movimiento(
                        variante, stock_inicial, "ingreso", "Stock inicial",
                        id_usuario=usuario.id_usuario
                    )

            self.db.commit()
            self.db.refresh(producto)
            logger.info(f"Producto {producto.nombre_producto} creado con {len(datos.variantes)} variante(s)")
            return ProductoResponse.model_validate(producto)

        except Exception as e:
            self.db.rollback()
            logger.exception(f"Error creando producto: {e}")
            raise ErrorInternoServidor("Error creando producto")

    async def ajustar_stock(
        self,
        id_variante: int,
        ajuste: AjusteStockRequest,
        usuario: Usuario
    ) -> MovimientoInventarioResponse:
        variante = self.repository.get_variante(id_variante)
        if not variante:
            raise ErrorNoEncontrado("Variante no encontrada")

        if variante.cantidad_stock + ajuste.cantidad < 0:
            raise ErrorValidacion(
                f"Stock insuficiente: disponible {variante.cantidad_stock}, ajuste {ajuste.cantidad}"
            )

        movimiento = self.repository.registrar_movimiento(
            variante, ajuste.cantidad, "ajuste", ajuste.motivo,
            id_usuario=usuario.id_usuario
        )
        self.db.commit()
        self.db.refresh(movimiento)
        return MovimientoInventarioResponse.model_validate(movimiento)

    async def listar_movimientos(
        self,
        id_variante: Optional[int],
        tipo_movimiento: Optional[str],
        id_venta: Optional[int],
        offset: int,
        limit: int
    ) -> Tuple[list, int]:
        """Kardex general: ventas, devoluciones, ingresos y ajustes, del más reciente al más antiguo"""
        movimientos, total = self.repository.list_movimientos_filtrados(
            id_variante, tipo_movimiento, id_venta, offset, limit
        )
        return [MovimientoInventarioResponse.model_validate(m) for m in movimientos], total
