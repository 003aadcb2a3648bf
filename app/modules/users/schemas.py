from datetime import datetime
from pydantic import AliasChoices, BaseModel, Field, ConfigDict
from typing import Optional


class UserCreate(BaseModel):
    usuario: Optional[str] = Field(None, description="Nombre de usuario único")
    password: Optional[str] = Field(None, description="Contraseña (mínimo 6 caracteres)")
    id_rol: Optional[int] = Field(None, description="Rol del usuario")
    activo: bool = True

class UserUpdate(BaseModel):
    usuario: Optional[str] = None
    password: Optional[str] = None
    id_rol: Optional[int] = None
    activo: Optional[bool] = None

class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_usuario: int
    usuario: str
    activo: bool
    rol: Optional[str] = Field(None, validation_alias=AliasChoices("nombre_rol", "rol"))
    created_at: Optional[datetime] = None

class UserDetail(UserResponse):
    rol_descripcion: Optional[str] = None
    updated_at: Optional[datetime] = None

class UserCreatedResponse(BaseModel):
    mensaje: str
    id_usuario: int
    usuario: str
    id_rol: int

class UserMessage(BaseModel):
    mensaje: str
    id_usuario: int

class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_rol: int
    nombre_rol: str
    descripcion: Optional[str] = None
