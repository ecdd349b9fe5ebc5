from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from backoffice.config.database import get_db
from backoffice.core.auth.dependencies import ROLES_PERSONAL, get_current_user, require_roles
from backoffice.core.responses import respuesta_exitosa, respuesta_paginada
from backoffice.shared.database.models import Usuario
from backoffice.shared.schemas import PaginacionParams
from .service import DescuentosService
from .schemas import (
    DescuentoCreate, DescuentoUpdate, EstadoDescuento, EstadoDescuentoUpdate,
    TipoDescuento, ValidarDescuentoRequest
)

router = APIRouter(prefix="/descuentos", tags=["Descuentos"])

ROLES_GESTION = ["Administrador"]
ROLES_CONSULTA = list(ROLES_PERSONAL)

# ==================== CONSULTAS ====================

@router.get("")
async def listar_descuentos(
    busqueda: Optional[str] = Query(None, description="Código o nombre"),
    estado: Optional[EstadoDescuento] = Query(None),
    tipo_descuento: Optional[TipoDescuento] = Query(None, alias="tipoDescuento"),
    paginacion: PaginacionParams = Depends(),
    current_user: Usuario = Depends(require_roles(ROLES_CONSULTA)),
    db: Session = Depends(get_db)
):
    service = DescuentosService(db)
    descuentos, total = await service.listar(
        busqueda,
        estado.value if estado else None,
        tipo_descuento.value if tipo_descuento else None,
        paginacion.offset,
        paginacion.limite
    )
    return respuesta_paginada(descuentos, total, paginacion.pagina, paginacion.limite, "Descuentos obtenidos")

@router.get("/estadisticas")
async def estadisticas_descuentos(
    current_user: Usuario = Depends(require_roles(["Administrador", "Gerente"])),
    db: Session = Depends(get_db)
):
    service = DescuentosService(db)
    return respuesta_exitosa(await service.estadisticas(), "Estadísticas de descuentos")

@router.get("/historial")
async def historial_general(
    paginacion: PaginacionParams = Depends(),
    current_user: Usuario = Depends(require_roles(["Administrador", "Gerente"])),
    db: Session = Depends(get_db)
):
    service = DescuentosService(db)
    registros, total = await service.historial(None, paginacion.offset, paginacion.limite)
    return respuesta_paginada(registros, total, paginacion.pagina, paginacion.limite, "Historial de descuentos")

@router.get("/codigo/{codigo}")
async def obtener_por_codigo(
    codigo: str,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = DescuentosService(db)
    return respuesta_exitosa(await service.obtener_por_codigo(codigo), "Descuento obtenido")

@router.post("/validar")
async def validar_descuento(
    datos: ValidarDescuentoRequest,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Validar un cupón contra un monto de compra.

    Responde 400 con el motivo cuando el cupón no es aplicable
    (inactivo, fuera de vigencia, monto mínimo, límite de usos).
    """
    service = DescuentosService(db)
    # un cliente solo puede validar contra su propio historial de uso
    id_usuario = datos.id_usuario
    if current_user.nombre_rol == "Cliente":
        id_usuario = current_user.id_usuario
    resultado = await service.validar(datos.codigo_descuento, datos.monto_compra, id_usuario)
    return respuesta_exitosa(resultado, resultado.mensaje)

@router.get("/{id_descuento}/historial")
async def historial_descuento(
    id_descuento: int,
    paginacion: PaginacionParams = Depends(),
    current_user: Usuario = Depends(require_roles(["Administrador", "Gerente"])),
    db: Session = Depends(get_db)
):
    service = DescuentosService(db)
    registros, total = await service.historial(id_descuento, paginacion.offset, paginacion.limite)
    return respuesta_paginada(registros, total, paginacion.pagina, paginacion.limite, "Historial del descuento")

@router.get("/{id_descuento}")
async def obtener_descuento(
    id_descuento: int,
    current_user: Usuario = Depends(require_roles(ROLES_CONSULTA)),
    db: Session = Depends(get_db)
):
    service = DescuentosService(db)
    return respuesta_exitosa(await service.obtener(id_descuento), "Descuento obtenido")

# ==================== GESTIÓN ====================

@router.post("", status_code=201)
async def crear_descuento(
    datos: DescuentoCreate,
    current_user: Usuario = Depends(require_roles(ROLES_GESTION)),
    db: Session = Depends(get_db)
):
    service = DescuentosService(db)
    return respuesta_exitosa(await service.crear(datos), "Descuento creado exitosamente")

@router.put("/{id_descuento}")
async def actualizar_descuento(
    id_descuento: int,
    datos: DescuentoUpdate,
    current_user: Usuario = Depends(require_roles(ROLES_GESTION)),
    db: Session = Depends(get_db)
):
    service = DescuentosService(db)
    return respuesta_exitosa(await service.actualizar(id_descuento, datos), "Descuento actualizado")

@router.patch("/{id_descuento}/estado")
async def cambiar_estado_descuento(
    id_descuento: int,
    datos: EstadoDescuentoUpdate,
    current_user: Usuario = Depends(require_roles(ROLES_GESTION)),
    db: Session = Depends(get_db)
):
    service = DescuentosService(db)
    return respuesta_exitosa(await service.cambiar_estado(id_descuento, datos.estado), "Estado del descuento actualizado")

@router.delete("/{id_descuento}")
async def eliminar_descuento(
    id_descuento: int,
    current_user: Usuario = Depends(require_roles(ROLES_GESTION)),
    db: Session = Depends(get_db)
):
    """Desactiva el cupón (eliminación lógica)"""
    service = DescuentosService(db)
    await service.eliminar(id_descuento)
    return respuesta_exitosa(None, "Descuento desactivado")
