from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backoffice.config.database import get_db
from backoffice.core.auth.dependencies import get_current_user, require_roles
from backoffice.core.responses import respuesta_exitosa
from backoffice.shared.database.models import Usuario
from .service import EstadosPedidoService
from .schemas import EstadoPedidoCreate, EstadoPedidoUpdate

router = APIRouter(prefix="/estados-pedido", tags=["Estados de Pedido"])

@router.get("")
async def listar_estados_pedido(
    solo_activos: bool = Query(False, alias="soloActivos"),
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = EstadosPedidoService(db)
    return respuesta_exitosa(await service.listar(solo_activos), "Estados de pedido obtenidos")

@router.get("/{id_estado_pedido}")
async def obtener_estado_pedido(
    id_estado_pedido: int,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = EstadosPedidoService(db)
    return respuesta_exitosa(await service.obtener(id_estado_pedido), "Estado de pedido obtenido")

@router.post("", status_code=201)
async def crear_estado_pedido(
    datos: EstadoPedidoCreate,
    current_user: Usuario = Depends(require_roles(["Administrador"])),
    db: Session = Depends(get_db)
):
    service = EstadosPedidoService(db)
    return respuesta_exitosa(await service.crear(datos), "Estado de pedido creado")

@router.put("/{id_estado_pedido}")
async def actualizar_estado_pedido(
    id_estado_pedido: int,
    datos: EstadoPedidoUpdate,
    current_user: Usuario = Depends(require_roles(["Administrador"])),
    db: Session = Depends(get_db)
):
    service = EstadosPedidoService(db)
    return respuesta_exitosa(await service.actualizar(id_estado_pedido, datos), "Estado de pedido actualizado")

@router.delete("/{id_estado_pedido}")
async def eliminar_estado_pedido(
    id_estado_pedido: int,
    current_user: Usuario = Depends(require_roles(["Administrador"])),
    db: Session = Depends(get_db)
):
    """Solo se eliminan estados que ninguna venta utiliza"""
    service = EstadosPedidoService(db)
    await service.eliminar(id_estado_pedido)
    return respuesta_exitosa(None, "Estado de pedido eliminado")
