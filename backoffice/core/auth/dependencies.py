from typing import Callable, List

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from backoffice.config.database import get_db
from backoffice.core.exceptions import ErrorNoAutorizado, ErrorProhibido
from backoffice.core.security import decode_access_token
from backoffice.shared.database.models import Usuario

bearer_scheme = HTTPBearer(auto_error=False)

# Roles internos con acceso a datos de cualquier cliente
ROLES_PERSONAL = ("Administrador", "Gerente", "Vendedor", "Cajero")


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> Usuario:
    """
    Resolver el usuario autenticado a partir del header Authorization: Bearer <token>
    """
    if credentials is None:
        raise ErrorNoAutorizado("Token no proporcionado")

    payload = decode_access_token(credentials.credentials)
    if not payload or "sub" not in payload:
        raise ErrorNoAutorizado("Token inválido o expirado")

    usuario = db.query(Usuario).filter(Usuario.id_usuario == int(payload["sub"])).first()
    if not usuario:
        raise ErrorNoAutorizado("Usuario no encontrado")
    if usuario.estado != "activo":
        raise ErrorNoAutorizado("Usuario inactivo")

    return usuario


def require_roles(roles: List[str]) -> Callable:
    """
    Dependencia que exige que el usuario autenticado tenga uno de los roles indicados
    """
    def role_checker(current_user: Usuario = Depends(get_current_user)) -> Usuario:
        if current_user.nombre_rol not in roles:
            raise ErrorProhibido(
                f"Acceso denegado. Roles permitidos: {', '.join(roles)}"
            )
        return current_user

    return role_checker
