from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config.database import get_db, get_settings
from app.config.settings import Settings
from app.core.auth.dependencies import get_current_user, require_admin
from app.core.auth.schemas import Principal
from app.shared.utils.pagination import Page, PageParams, get_page_params
from app.modules.shipments.service import ShipmentService
from app.modules.shipments.schemas import (
    ShipmentCreateRequest, ShipmentUpdateRequest, ShipmentDetailResponse,
    ShipmentCreatedResponse, ShipmentMessage, ShipmentStats, ShipmentStatus
)

router = APIRouter(prefix="/despachos", tags=["Despachos"])

# ===== CONSULTAS =====

@router.get("", response_model=Page[ShipmentDetailResponse])
def list_shipments(
    estado: Optional[ShipmentStatus] = Query(None, description="Filtrar por estado"),
    fecha_desde: Optional[date] = Query(None, description="Fecha de envío desde"),
    fecha_hasta: Optional[date] = Query(None, description="Fecha de envío hasta"),
    page_params: PageParams = Depends(get_page_params),
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Listar despachos con cotización y cliente, ordenados por fecha de envío"""
    service = ShipmentService(db)
    return service.list_shipments(
        page_params,
        state=estado.value if estado else None,
        date_from=fecha_desde,
        date_to=fecha_hasta
    )

@router.get("/estadisticas/resumen", response_model=ShipmentStats)
def get_shipment_stats(
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ShipmentService(db).get_stats()

@router.get("/cotizacion/{quotation_id}", response_model=ShipmentDetailResponse)
def get_shipment_by_quotation(
    quotation_id: int,
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Despacho asociado a una cotización"""
    return ShipmentService(db).get_shipment_by_quotation(quotation_id)

@router.get("/{shipment_id}", response_model=ShipmentDetailResponse)
def get_shipment(
    shipment_id: int,
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ShipmentService(db).get_shipment(shipment_id)

# ===== ESCRITURA (solo admin) =====

@router.post("", response_model=ShipmentCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_shipment(
    shipment_data: ShipmentCreateRequest,
    current_user: Principal = Depends(require_admin),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db)
):
    """
    Crear despacho para una cotización aprobada

    **Validaciones:**
    - id_cotizacion, fecha_envio y direccion_envio obligatorios
    - La cotización existe y está 'aprobada' o 'enviada'
    - No existe otro despacho para la cotización

    La cotización queda en estado 'enviada' y el despacho en 'preparando'.
    """
    return ShipmentService(db, settings).create_shipment(shipment_data)

@router.put("/{shipment_id}", response_model=ShipmentMessage)
def update_shipment(
    shipment_id: int,
    update_data: ShipmentUpdateRequest,
    current_user: Principal = Depends(require_admin),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db)
):
    """Actualizar fechas, dirección, estado, tracking u observaciones"""
    return ShipmentService(db, settings).update_shipment(shipment_id, update_data)

@router.delete("/{shipment_id}", response_model=ShipmentMessage)
def delete_shipment(
    shipment_id: int,
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Eliminar despacho; la cotización vuelve a estado 'aprobada'"""
    return ShipmentService(db).delete_shipment(shipment_id)
