from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backoffice.config.database import get_db
from backoffice.core.auth.dependencies import get_current_user, require_roles
from backoffice.core.responses import respuesta_exitosa
from backoffice.shared.database.models import Usuario
from .service import MetodosPagoService
from .schemas import MetodoPagoCreate, MetodoPagoUpdate

router = APIRouter(prefix="/metodos-pago", tags=["Métodos de Pago"])

@router.get("")
async def listar_metodos_pago(
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Métodos de pago activos con su tipo, para el paso de pagos del asistente"""
    service = MetodosPagoService(db)
    return respuesta_exitosa(await service.listar_activos(), "Métodos de pago obtenidos")

@router.get("/tipos")
async def listar_tipos_metodo_pago(
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = MetodosPagoService(db)
    return respuesta_exitosa(await service.listar_tipos(), "Tipos de método de pago obtenidos")

@router.get("/{id_metodo_pago}")
async def obtener_metodo_pago(
    id_metodo_pago: int,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = MetodosPagoService(db)
    return respuesta_exitosa(await service.obtener(id_metodo_pago), "Método de pago obtenido")

@router.post("", status_code=201)
async def crear_metodo_pago(
    datos: MetodoPagoCreate,
    current_user: Usuario = Depends(require_roles(["Administrador"])),
    db: Session = Depends(get_db)
):
    service = MetodosPagoService(db)
    return respuesta_exitosa(await service.crear(datos), "Método de pago creado exitosamente")

@router.put("/{id_metodo_pago}")
async def actualizar_metodo_pago(
    id_metodo_pago: int,
    datos: MetodoPagoUpdate,
    current_user: Usuario = Depends(require_roles(["Administrador"])),
    db: Session = Depends(get_db)
):
    service = MetodosPagoService(db)
    return respuesta_exitosa(await service.actualizar(id_metodo_pago, datos), "Método de pago actualizado")

@router.delete("/{id_metodo_pago}")
async def eliminar_metodo_pago(
    id_metodo_pago: int,
    current_user: Usuario = Depends(require_roles(["Administrador"])),
    db: Session = Depends(get_db)
):
    """Desactiva el método de pago"""
    service = MetodosPagoService(db)
    await service.eliminar(id_metodo_pago)
    return respuesta_exitosa(None, "Método de pago desactivado")
