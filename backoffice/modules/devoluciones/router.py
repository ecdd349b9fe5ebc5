from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from backoffice.config.database import get_db
from backoffice.core.auth.dependencies import get_current_user, require_roles
from backoffice.core.responses import respuesta_exitosa, respuesta_paginada
from backoffice.shared.database.models import Usuario
from backoffice.shared.schemas import PaginacionParams
from .service import DevolucionesService
from .schemas import DevolucionCreate

router = APIRouter(prefix="/devoluciones", tags=["Devoluciones"])

ROLES_DEVOLUCION = ["Administrador", "Gerente", "Vendedor"]

@router.get("")
async def listar_devoluciones(
    id_venta: Optional[int] = Query(None, alias="idVenta"),
    id_usuario: Optional[int] = Query(None, alias="idUsuario", description="Cliente de la venta"),
    paginacion: PaginacionParams = Depends(),
    current_user: Usuario = Depends(require_roles(ROLES_DEVOLUCION)),
    db: Session = Depends(get_db)
):
    service = DevolucionesService(db)
    devoluciones, total = await service.listar(id_venta, id_usuario, paginacion.offset, paginacion.limite)
    return respuesta_paginada(devoluciones, total, paginacion.pagina, paginacion.limite, "Devoluciones obtenidas")

@router.get("/{id_devolucion}")
async def obtener_devolucion(
    id_devolucion: int,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Un cliente solo puede consultar las devoluciones de sus compras"""
    service = DevolucionesService(db)
    return respuesta_exitosa(await service.obtener(id_devolucion, current_user), "Devolución obtenida")

@router.post("", status_code=201)
async def crear_devolucion(
    datos: DevolucionCreate,
    current_user: Usuario = Depends(require_roles(ROLES_DEVOLUCION)),
    db: Session = Depends(get_db)
):
    """
    Registrar la devolución de unidades de una venta.

    Incluye:
    - Validación contra las unidades vendidas y ya devueltas por línea
    - Reingreso de stock con movimiento de inventario
    - Ajuste del saldo de la venta y del crédito de tienda; el excedente es reembolso
    """
    service = DevolucionesService(db)
    return respuesta_exitosa(await service.crear(datos, current_user), "Devolución registrada exitosamente")
