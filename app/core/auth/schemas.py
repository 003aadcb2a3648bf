from typing import Optional
from pydantic import BaseModel, Field


class Principal(BaseModel):
    """Identidad autenticada adjunta a cada request"""
    id: int
    usuario: str = ""
    rol: str


class LoginRequest(BaseModel):
    usuario: Optional[str] = Field(None, description="Nombre de usuario")
    password: Optional[str] = Field(None, description="Contraseña")


class LoginResponse(BaseModel):
    mensaje: str
    token: str
    usuario: Principal
