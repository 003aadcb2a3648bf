from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    # App Info
    app_name: str = "Mainz Medical API"
    version: str = "1.0.0"
    debug: bool = False

    # Database
    database_url: str

    # Security
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 480  # 8 horas
    bcrypt_rounds: int = 10

    # CORS
    allowed_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])

    # Paginación
    default_page_size: int = 10
    max_page_size: int = 100

    # Despachos: validar transiciones de estado adyacentes
    strict_shipment_transitions: bool = Field(
        default=False,
        description="Si es True, solo se permiten transiciones consecutivas del despacho"
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)
