from pydantic import Field, model_validator
from typing import Optional

from backoffice.shared.schemas import BackofficeModel
from backoffice.modules.usuarios.schemas import UsuarioBase, UsuarioResponse

# ==================== REQUEST SCHEMAS ====================

class LoginRequest(BackofficeModel):
    """Se acepta identificador, correo electrónico o nombre de usuario"""
    identificador: Optional[str] = None
    correo_electronico: Optional[str] = None
    usuario: Optional[str] = None
    contrasena: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_identificador(self):
        if not (self.identificador or self.correo_electronico or self.usuario):
            raise ValueError('Debe enviar el usuario o el correo electrónico')
        return self

    @property
    def valor_identificador(self) -> str:
        return (self.identificador or self.correo_electronico or self.usuario).strip()

class RegistroRequest(UsuarioBase):
    contrasena: str = Field(..., min_length=6, description="Contraseña (mínimo 6 caracteres)")

class CambiarContrasenaRequest(BackofficeModel):
    contrasena_actual: str = Field(..., min_length=1)
    contrasena_nueva: str = Field(..., min_length=6)

# ==================== RESPONSE SCHEMAS ====================

class TokenResponse(BackofficeModel):
    token: str
    tipo_token: str = "Bearer"
    expira_en: int = Field(..., description="Segundos de validez del token")
    usuario: UsuarioResponse
