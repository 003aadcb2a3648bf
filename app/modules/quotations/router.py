# app/modules/quotations/router.py
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user, require_admin
from app.core.auth.schemas import Principal
from app.shared.utils.pagination import Page, PageParams, get_page_params
from .service import QuotationService
from .schemas import (
    QuotationCreateRequest, QuotationUpdateRequest, QuotationCreatedResponse,
    QuotationDetailResponse, QuotationSummary, QuotationMessage, QuotationStats,
    QuotationStatus
)

router = APIRouter(prefix="/cotizaciones", tags=["Cotizaciones"])

# ==================== CONSULTAS ====================

@router.get("", response_model=Page[QuotationSummary])
def list_quotations(
    id_cliente: Optional[int] = Query(None, description="Filtrar por cliente"),
    estado: Optional[QuotationStatus] = Query(None, description="Filtrar por estado"),
    fecha_desde: Optional[date] = Query(None, description="Fecha de emisión desde"),
    fecha_hasta: Optional[date] = Query(None, description="Fecha de emisión hasta"),
    page_params: PageParams = Depends(get_page_params),
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Listar cotizaciones con paginación

    Incluye cliente, vendedor y cantidad de productos de cada cotización.
    Ordenadas por fecha de emisión descendente.
    """
    service = QuotationService(db)
    return service.list_quotations(
        page_params,
        client_id=id_cliente,
        state=estado.value if estado else None,
        date_from=fecha_desde,
        date_to=fecha_hasta
    )

@router.get("/estadisticas/resumen", response_model=QuotationStats)
def get_quotation_stats(
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Totales por estado, monto total y monto promedio"""
    return QuotationService(db).get_stats()

@router.get("/{quotation_id}", response_model=QuotationDetailResponse)
def get_quotation(
    quotation_id: int,
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Cotización completa: cabecera, cliente, vendedor, detalle de productos
    (con código, nombre y categoría) y despacho si existe
    """
    return QuotationService(db).get_quotation(quotation_id)

# ==================== ESCRITURA ====================

@router.post("", response_model=QuotationCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_quotation(
    quotation_data: QuotationCreateRequest,
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Crear cotización con su detalle de productos

    **Validaciones (en orden):**
    - id_cliente y fecha_emision obligatorios, fecha en formato YYYY-MM-DD
    - Al menos un producto
    - Cliente existente
    - Cada producto existe, está activo y tiene cantidad > 0

    El precio unitario se toma del producto al momento de crear la cotización.
    Si algo falla no se guarda nada.
    """
    service = QuotationService(db)
    cotizacion = service.create_quotation(quotation_data, current_user)
    return {"mensaje": "Cotización creada exitosamente", "cotizacion": cotizacion}

@router.put("/{quotation_id}", response_model=QuotationMessage)
def update_quotation(
    quotation_id: int,
    update_data: QuotationUpdateRequest,
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Actualizar estado y/o observaciones (solo admin)"""
    return QuotationService(db).update_quotation(quotation_id, update_data)

@router.delete("/{quotation_id}", response_model=QuotationMessage)
def delete_quotation(
    quotation_id: int,
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Eliminar cotización (solo admin)

    No se permite si tiene un despacho asociado. El detalle se elimina en cascada.
    """
    return QuotationService(db).delete_quotation(quotation_id)
