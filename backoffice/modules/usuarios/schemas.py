from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum

from backoffice.shared.schemas import BackofficeModel

# ==================== ENUMS ====================

class EstadoUsuario(str, Enum):
    activo = "activo"
    inactivo = "inactivo"
    bloqueado = "bloqueado"

# ==================== REQUEST SCHEMAS ====================

def normalizar_correo(v: str) -> str:
    v = v.strip().lower()
    if "@" not in v or "." not in v.split("@")[-1]:
        raise ValueError('Correo electrónico inválido')
    return v

class UsuarioBase(BackofficeModel):
    nombres: str = Field(..., min_length=2, max_length=100)
    apellidos: str = Field(..., min_length=2, max_length=100)
    usuario: str = Field(..., min_length=3, max_length=50, description="Nombre de usuario único")
    correo_electronico: str = Field(..., max_length=255, description="Correo único del usuario")
    telefono: Optional[str] = Field(None, max_length=30)
    direccion: Optional[str] = Field(None, max_length=255)

    @field_validator('correo_electronico')
    @classmethod
    def validate_correo(cls, v: str):
        return normalizar_correo(v)

class UsuarioCreate(UsuarioBase):
    contrasena: str = Field(..., min_length=6, description="Contraseña (mínimo 6 caracteres)")
    id_rol: Optional[int] = Field(None, description="Rol asignado; por defecto Cliente")
    estado: EstadoUsuario = EstadoUsuario.activo

class UsuarioUpdate(BackofficeModel):
    nombres: Optional[str] = Field(None, min_length=2, max_length=100)
    apellidos: Optional[str] = Field(None, min_length=2, max_length=100)
    usuario: Optional[str] = Field(None, min_length=3, max_length=50)
    correo_electronico: Optional[str] = None
    telefono: Optional[str] = None
    direccion: Optional[str] = None
    contrasena: Optional[str] = Field(None, min_length=6)
    id_rol: Optional[int] = None
    estado: Optional[EstadoUsuario] = None

    @field_validator('correo_electronico')
    @classmethod
    def validate_correo(cls, v: Optional[str]):
        if v is None:
            return v
        return normalizar_correo(v)

class EstadoUsuarioUpdate(BackofficeModel):
    estado: EstadoUsuario

# ==================== RESPONSE SCHEMAS ====================

class UsuarioResponse(BackofficeModel):
    id_usuario: int
    nombres: str
    apellidos: str
    nombre_completo: str
    usuario: str
    correo_electronico: str
    telefono: Optional[str] = None
    direccion: Optional[str] = None
    id_rol: int
    nombre_rol: Optional[str] = None
    estado: str
    fecha_registro: Optional[datetime] = None
    ultima_conexion: Optional[datetime] = None

class UsuarioConCreditoResponse(BackofficeModel):
    id_usuario: int
    nombre_completo: str
    correo_electronico: str
    telefono: Optional[str] = None
    credito_total: Decimal = Decimal("0")
    saldo_total: Decimal = Decimal("0")
    cantidad_creditos_activos: int = 0

class MetricasUsuarioResponse(BackofficeModel):
    id_usuario: int
    total_compras: int
    monto_total_compras: Decimal
    ticket_promedio: Decimal
    ultima_compra: Optional[datetime] = None
    creditos_activos: int
    saldo_credito_pendiente: Decimal
    total_abonado: Decimal
    descuentos_usados: int
