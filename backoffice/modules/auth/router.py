from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backoffice.config.database import get_db
from backoffice.core.auth.dependencies import get_current_user
from backoffice.core.responses import respuesta_exitosa
from backoffice.shared.database.models import Usuario
from backoffice.modules.usuarios.schemas import UsuarioResponse
from .service import AuthService
from .schemas import LoginRequest, RegistroRequest, CambiarContrasenaRequest

router = APIRouter(prefix="/auth", tags=["Autenticación"])

@router.post("/login")
async def login(datos: LoginRequest, db: Session = Depends(get_db)):
    """Iniciar sesión con usuario o correo electrónico"""
    service = AuthService(db)
    return respuesta_exitosa(await service.login(datos), "Inicio de sesión exitoso")

@router.post("/registro", status_code=201)
async def registro(datos: RegistroRequest, db: Session = Depends(get_db)):
    service = AuthService(db)
    return respuesta_exitosa(await service.registro(datos), "Usuario registrado exitosamente")

@router.get("/perfil")
async def perfil(current_user: Usuario = Depends(get_current_user)):
    return respuesta_exitosa(UsuarioResponse.model_validate(current_user), "Perfil obtenido")

@router.put("/cambiar-contrasena")
async def cambiar_contrasena(
    datos: CambiarContrasenaRequest,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = AuthService(db)
    await service.cambiar_contrasena(current_user, datos)
    return respuesta_exitosa(None, "Contraseña actualizada exitosamente")

@router.post("/logout")
async def logout(current_user: Usuario = Depends(get_current_user)):
    # JWT sin estado: el cliente descarta el token
    return respuesta_exitosa(None, "Sesión cerrada")
