import logging
from datetime import datetime
from sqlalchemy.orm import Session

from backoffice.config.settings import settings
from backoffice.core.exceptions import ErrorNoAutorizado, ErrorValidacion
from backoffice.core.security import create_access_token, hash_password, verify_password
from backoffice.shared.database.models import Usuario
from backoffice.modules.usuarios.repository import UsuariosRepository
from backoffice.modules.usuarios.schemas import UsuarioCreate, UsuarioResponse
from backoffice.modules.usuarios.service import UsuariosService
from .schemas import LoginRequest, RegistroRequest, CambiarContrasenaRequest, TokenResponse

logger = logging.getLogger(__name__)

class AuthService:
    """
    Autenticación con JWT: login, registro y cambio de contraseña
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = UsuariosRepository(db)

    def _emitir_token(self, usuario: Usuario) -> TokenResponse:
        token = create_access_token({"sub": str(usuario.id_usuario), "rol": usuario.nombre_rol})
        return TokenResponse(
            token=token,
            expira_en=settings.access_token_expire_minutes * 60,
            usuario=UsuarioResponse.model_validate(usuario)
        )

    async def login(self, datos: LoginRequest) -> TokenResponse:
        usuario = self.repository.get_by_identificador(datos.valor_identificador)

        if not usuario or not verify_password(datos.contrasena, usuario.contrasena):
            logger.warning(f"Intento de login fallido para {datos.valor_identificador}")
            raise ErrorNoAutorizado("Credenciales inválidas")
        if usuario.estado != "activo":
            raise ErrorNoAutorizado(f"Usuario {usuario.estado}, contacte al administrador")

        usuario.ultima_conexion = datetime.now()
        self.db.commit()
        self.db.refresh(usuario)
        return self._emitir_token(usuario)

    async def registro(self, datos: RegistroRequest) -> TokenResponse:
        """El primer usuario registrado queda como Administrador; los demás como Cliente"""
        nombre_rol = "Administrador" if self.repository.count_usuarios() == 0 else "Cliente"
        usuario = UsuariosService(self.db).registrar(
            UsuarioCreate(**datos.model_dump()),
            nombre_rol=nombre_rol
        )
        return self._emitir_token(usuario)

    async def cambiar_contrasena(self, usuario: Usuario, datos: CambiarContrasenaRequest) -> None:
        if not verify_password(datos.contrasena_actual, usuario.contrasena):
            raise ErrorValidacion("La contraseña actual es incorrecta")
        if datos.contrasena_actual == datos.contrasena_nueva:
            raise ErrorValidacion("La nueva contraseña debe ser diferente a la actual")

        usuario.contrasena = hash_password(datos.contrasena_nueva)
        self.db.commit()
        logger.info(f"Contraseña actualizada para {usuario.usuario}")
