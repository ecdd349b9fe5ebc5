from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from backoffice.config.database import get_db
from backoffice.core.auth.dependencies import ROLES_PERSONAL, require_roles
from backoffice.core.responses import respuesta_exitosa, respuesta_paginada
from backoffice.shared.database.models import Usuario
from backoffice.shared.schemas import PaginacionParams
from .service import InventarioService
from .schemas import ProductoCreate, AjusteStockRequest

router = APIRouter(prefix="/inventario", tags=["Inventario"])

ROLES_INVENTARIO = list(ROLES_PERSONAL)

@router.get("")
async def listar_variantes(
    busqueda: Optional[str] = Query(None, description="Nombre de producto o SKU"),
    solo_bajo_stock: bool = Query(False, alias="soloBajoStock"),
    paginacion: PaginacionParams = Depends(),
    current_user: Usuario = Depends(require_roles(ROLES_INVENTARIO)),
    db: Session = Depends(get_db)
):
    """Variantes con stock y precio vigente, para el selector del asistente de ventas"""
    service = InventarioService(db)
    variantes, total = await service.listar_variantes(
        busqueda, solo_bajo_stock, paginacion.offset, paginacion.limite
    )
    return respuesta_paginada(variantes, total, paginacion.pagina, paginacion.limite, "Inventario obtenido")

@router.post("/productos", status_code=201)
async def crear_producto(
    datos: ProductoCreate,
    current_user: Usuario = Depends(require_roles(["Administrador"])),
    db: Session = Depends(get_db)
):
    service = InventarioService(db)
    return respuesta_exitosa(await service.crear_producto(datos, current_user), "Producto creado exitosamente")

@router.get("/movimientos")
async def listar_movimientos(
    id_variante: Optional[int] = Query(None, alias="idVariante"),
    tipo_movimiento: Optional[str] = Query(None, alias="tipoMovimiento", description="venta, devolucion, ajuste o ingreso"),
    id_venta: Optional[int] = Query(None, alias="idVenta"),
    paginacion: PaginacionParams = Depends(),
    current_user: Usuario = Depends(require_roles(ROLES_INVENTARIO)),
    db: Session = Depends(get_db)
):
    service = InventarioService(db)
    movimientos, total = await service.listar_movimientos(
        id_variante, tipo_movimiento, id_venta, paginacion.offset, paginacion.limite
    )
    return respuesta_paginada(movimientos, total, paginacion.pagina, paginacion.limite, "Movimientos obtenidos")

@router.get("/{id_variante}")
async def obtener_variante(
    id_variante: int,
    current_user: Usuario = Depends(require_roles(ROLES_INVENTARIO)),
    db: Session = Depends(get_db)
):
    service = InventarioService(db)
    return respuesta_exitosa(await service.obtener_variante(id_variante), "Variante obtenida")

@router.post("/{id_variante}/ajustes", status_code=201)
async def ajustar_stock(
    id_variante: int,
    ajuste: AjusteStockRequest,
    current_user: Usuario = Depends(require_roles(["Administrador"])),
    db: Session = Depends(get_db)
):
    """Ajuste manual de stock; el stock nunca queda negativo"""
    service = InventarioService(db)
    return respuesta_exitosa(await service.ajustar_stock(id_variante, ajuste, current_user), "Stock ajustado")
