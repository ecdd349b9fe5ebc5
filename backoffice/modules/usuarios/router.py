from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from backoffice.config.database import get_db
from backoffice.core.auth.dependencies import get_current_user, require_roles
from backoffice.core.responses import respuesta_exitosa, respuesta_paginada
from backoffice.shared.database.models import Usuario
from backoffice.shared.schemas import PaginacionParams
from .service import UsuariosService
from .schemas import UsuarioCreate, UsuarioUpdate, EstadoUsuarioUpdate

router = APIRouter(prefix="/usuarios", tags=["Usuarios"])

# ==================== ADMINISTRACIÓN ====================

@router.get("")
async def listar_usuarios(
    nombre: Optional[str] = Query(None),
    correo: Optional[str] = Query(None),
    rol: Optional[str] = Query(None, description="Nombre del rol"),
    estado: Optional[str] = Query(None),
    paginacion: PaginacionParams = Depends(),
    current_user: Usuario = Depends(require_roles(["Administrador"])),
    db: Session = Depends(get_db)
):
    service = UsuariosService(db)
    usuarios, total = await service.listar(nombre, correo, rol, estado, paginacion.offset, paginacion.limite)
    return respuesta_paginada(usuarios, total, paginacion.pagina, paginacion.limite, "Usuarios obtenidos")

@router.post("", status_code=201)
async def crear_usuario(
    datos: UsuarioCreate,
    current_user: Usuario = Depends(require_roles(["Administrador"])),
    db: Session = Depends(get_db)
):
    service = UsuariosService(db)
    return respuesta_exitosa(await service.crear(datos), "Usuario creado exitosamente")

@router.get("/con-credito")
async def usuarios_con_credito(
    current_user: Usuario = Depends(require_roles(["Administrador", "Vendedor"])),
    db: Session = Depends(get_db)
):
    """Clientes con saldo de crédito pendiente"""
    service = UsuariosService(db)
    return respuesta_exitosa(await service.con_credito(), "Clientes con crédito")

@router.get("/{id_usuario}")
async def obtener_usuario(
    id_usuario: int,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = UsuariosService(db)
    return respuesta_exitosa(await service.obtener(id_usuario, current_user), "Usuario obtenido")

@router.put("/{id_usuario}")
async def actualizar_usuario(
    id_usuario: int,
    datos: UsuarioUpdate,
    current_user: Usuario = Depends(require_roles(["Administrador"])),
    db: Session = Depends(get_db)
):
    service = UsuariosService(db)
    return respuesta_exitosa(await service.actualizar(id_usuario, datos), "Usuario actualizado")

@router.patch("/{id_usuario}/estado")
async def cambiar_estado_usuario(
    id_usuario: int,
    datos: EstadoUsuarioUpdate,
    current_user: Usuario = Depends(require_roles(["Administrador"])),
    db: Session = Depends(get_db)
):
    service = UsuariosService(db)
    return respuesta_exitosa(
        await service.cambiar_estado(id_usuario, datos.estado, current_user),
        "Estado del usuario actualizado"
    )

@router.delete("/{id_usuario}")
async def eliminar_usuario(
    id_usuario: int,
    current_user: Usuario = Depends(require_roles(["Administrador"])),
    db: Session = Depends(get_db)
):
    service = UsuariosService(db)
    await service.eliminar(id_usuario, current_user)
    return respuesta_exitosa(None, "Usuario eliminado")

# ==================== DATOS DEL CLIENTE ====================

@router.get("/{id_usuario}/metricas")
async def metricas_usuario(
    id_usuario: int,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = UsuariosService(db)
    return respuesta_exitosa(await service.metricas(id_usuario, current_user), "Métricas del usuario")

@router.get("/{id_usuario}/ventas")
async def ventas_usuario(
    id_usuario: int,
    paginacion: PaginacionParams = Depends(),
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = UsuariosService(db)
    ventas, total = await service.ventas(id_usuario, current_user, paginacion.offset, paginacion.limite)
    return respuesta_paginada(ventas, total, paginacion.pagina, paginacion.limite, "Compras del usuario")

@router.get("/{id_usuario}/creditos")
async def creditos_usuario(
    id_usuario: int,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = UsuariosService(db)
    return respuesta_exitosa(await service.creditos(id_usuario, current_user), "Créditos del usuario")
