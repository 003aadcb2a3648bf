from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v

# ==================== REQUEST SCHEMAS ====================

class ClientCreate(BaseModel):
    rut: str = Field(..., min_length=1, description="RUT chileno (12345678-9)")
    nombre: str = Field(..., min_length=1, description="Nombre o razón social")
    correo: Optional[EmailStr] = Field(None, description="Correo (único)")
    telefono: Optional[str] = None
    direccion: Optional[str] = None

    @field_validator("correo", mode="before")
    @classmethod
    def empty_correo(cls, v):
        return _blank_to_none(v)

class ClientUpdate(BaseModel):
    rut: Optional[str] = None
    nombre: Optional[str] = None
    correo: Optional[EmailStr] = None
    telefono: Optional[str] = None
    direccion: Optional[str] = None

    @field_validator("correo", mode="before")
    @classmethod
    def empty_correo(cls, v):
        return _blank_to_none(v)

class RutValidationRequest(BaseModel):
    rut: str = Field(..., min_length=1)

# ==================== RESPONSE SCHEMAS ====================

class ClientResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_cliente: int
    rut: str
    nombre: str
    correo: Optional[str] = None
    telefono: Optional[str] = None
    direccion: Optional[str] = None
    created_at: Optional[datetime] = None

class ClientCreatedResponse(BaseModel):
    mensaje: str
    id_cliente: int
    rut: str
    nombre: str
    correo: Optional[str] = None

class ClientMessage(BaseModel):
    mensaje: str
    id_cliente: int

class RutValidationResponse(BaseModel):
    valido: bool
    rut_formateado: Optional[str]
    mensaje: str
