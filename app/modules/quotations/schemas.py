from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import date, datetime
from enum import Enum

from app.modules.shipments.schemas import ShipmentResponse

# ==================== ENUMS ====================

class QuotationStatus(str, Enum):
    pendiente = "pendiente"
    aprobada = "aprobada"
    rechazada = "rechazada"
    enviada = "enviada"

VALID_QUOTATION_STATES = [s.value for s in QuotationStatus]

# ==================== CLASE BASE PARA RESPUESTAS ====================

class QuotationBaseModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

# ==================== REQUEST SCHEMAS ====================

class QuotationItemRequest(BaseModel):
    # Opcionales a nivel de esquema: la validación de negocio la hace el servicio
    id_producto: Optional[int] = Field(None, description="ID del producto")
    cantidad: Optional[int] = Field(None, description="Cantidad (mayor a 0)")
    descuento: Optional[float] = Field(0, description="Descuento en monto (>= 0)")

class QuotationCreateRequest(BaseModel):
    id_cliente: Optional[int] = Field(None, description="ID del cliente")
    fecha_emision: Optional[str] = Field(None, description="Fecha de emisión YYYY-MM-DD")
    observaciones: Optional[str] = Field(None, description="Observaciones")
    productos: Optional[List[QuotationItemRequest]] = Field(None, description="Detalle de productos")

class QuotationUpdateRequest(BaseModel):
    """Patch de cotización: solo se actualizan los campos enviados"""
    estado: Optional[str] = Field(None, description="pendiente | aprobada | rechazada | enviada")
    observaciones: Optional[str] = Field(None, description="Observaciones")

# ==================== RESPONSE SCHEMAS ====================

class QuotationResponse(QuotationBaseModel):
    id_cotizacion: int
    fecha_emision: date
    id_cliente: int
    id_usuario: int
    estado: str
    total: float
    observaciones: Optional[str] = None
    cliente_nombre: Optional[str] = None
    created_at: Optional[datetime] = None

class QuotationCreatedResponse(BaseModel):
    mensaje: str
    cotizacion: QuotationResponse

class QuotationItemResponse(QuotationBaseModel):
    id_detalle: int
    id_cotizacion: int
    id_producto: int
    cantidad: int
    precio_unitario: float
    descuento: float
    subtotal: float
    producto_codigo: Optional[str] = None
    producto_nombre: Optional[str] = None
    producto_descripcion: Optional[str] = None
    nombre_categoria: Optional[str] = None

class QuotationDetailResponse(QuotationResponse):
    cliente_rut: Optional[str] = None
    cliente_correo: Optional[str] = None
    cliente_telefono: Optional[str] = None
    cliente_direccion: Optional[str] = None
    vendedor: Optional[str] = None
    productos: List[QuotationItemResponse] = []
    despacho: Optional[ShipmentResponse] = None

class QuotationSummary(QuotationBaseModel):
    id_cotizacion: int
    fecha_emision: date
    estado: str
    total: float
    observaciones: Optional[str] = None
    id_cliente: int
    cliente_rut: str
    cliente_nombre: str
    id_usuario: int
    vendedor: str
    cantidad_productos: int

class QuotationMessage(BaseModel):
    mensaje: str
    id_cotizacion: int

class QuotationStats(BaseModel):
    total_cotizaciones: int
    pendientes: int
    aprobadas: int
    rechazadas: int
    enviadas: int
    monto_total: float
    monto_promedio: float
