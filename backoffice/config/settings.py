from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    # App Info
    app_name: str = "Backoffice Ventas API"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    api_prefix: str = "/api"

    # Database
    database_url: str
    auto_create_tables: bool = True
    seed_on_startup: bool = True

    # Security
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440  # 1 día
    allowed_origins: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Reglas de negocio de ventas
    iva_porcentaje_defecto: float = Field(
        default=19,
        description="Porcentaje de IVA aplicado cuando la venta lo solicita"
    )
    tolerancia_pago: float = Field(
        default=100,
        description="Diferencia máxima permitida entre total y pagos asignados"
    )
    dias_vencimiento_credito: int = Field(
        default=30,
        description="Días hasta el vencimiento de un crédito de tienda"
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

settings = Settings()
