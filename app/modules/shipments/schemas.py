from pydantic import BaseModel, Field, ConfigDict
from typing import Dict, List, Optional
from datetime import date
from enum import Enum

# ==================== ENUMS ====================

class ShipmentStatus(str, Enum):
    preparando = "preparando"
    enviado = "enviado"
    en_transito = "en_transito"
    entregado = "entregado"
    cancelado = "cancelado"

VALID_SHIPMENT_STATES = [s.value for s in ShipmentStatus]

TERMINAL_SHIPMENT_STATES = {ShipmentStatus.entregado.value, ShipmentStatus.cancelado.value}

# Transiciones consecutivas; cancelado es alcanzable desde cualquier estado no terminal
SHIPMENT_TRANSITIONS: Dict[str, List[str]] = {
    ShipmentStatus.preparando.value: [ShipmentStatus.enviado.value, ShipmentStatus.cancelado.value],
    ShipmentStatus.enviado.value: [ShipmentStatus.en_transito.value, ShipmentStatus.cancelado.value],
    ShipmentStatus.en_transito.value: [ShipmentStatus.entregado.value, ShipmentStatus.cancelado.value],
    ShipmentStatus.entregado.value: [],
    ShipmentStatus.cancelado.value: [],
}

# ==================== REQUEST SCHEMAS ====================

class ShipmentCreateRequest(BaseModel):
    id_cotizacion: Optional[int] = Field(None, description="ID de la cotización aprobada")
    fecha_envio: Optional[date] = Field(None, description="Fecha de envío")
    fecha_entrega_estimada: Optional[date] = Field(None, description="Fecha estimada de entrega")
    direccion_envio: Optional[str] = Field(None, description="Dirección de entrega")
    tracking_number: Optional[str] = Field(None, description="Número de seguimiento")
    observaciones: Optional[str] = Field(None, description="Observaciones")

class ShipmentUpdateRequest(BaseModel):
    """Patch de despacho: solo se actualizan los campos enviados"""
    fecha_envio: Optional[date] = None
    fecha_entrega_estimada: Optional[date] = None
    fecha_entrega_real: Optional[date] = None
    direccion_envio: Optional[str] = None
    estado: Optional[str] = Field(None, description="preparando | enviado | en_transito | entregado | cancelado")
    tracking_number: Optional[str] = None
    observaciones: Optional[str] = None

# ==================== RESPONSE SCHEMAS ====================

class ShipmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_despacho: int
    id_cotizacion: int
    fecha_envio: date
    fecha_entrega_estimada: Optional[date] = None
    fecha_entrega_real: Optional[date] = None
    direccion_envio: str
    estado: str
    tracking_number: Optional[str] = None
    observaciones: Optional[str] = None

class ShipmentDetailResponse(ShipmentResponse):
    fecha_emision: Optional[date] = None
    total: Optional[float] = None
    cotizacion_estado: Optional[str] = None
    cliente_nombre: Optional[str] = None
    cliente_rut: Optional[str] = None
    cliente_correo: Optional[str] = None
    cliente_telefono: Optional[str] = None

class ShipmentCreatedResponse(BaseModel):
    mensaje: str
    id_despacho: int
    id_cotizacion: int

class ShipmentMessage(BaseModel):
    mensaje: str
    id_despacho: int

class ShipmentStats(BaseModel):
    total_despachos: int
    preparando: int
    enviado: int
    en_transito: int
    entregado: int
    cancelado: int
