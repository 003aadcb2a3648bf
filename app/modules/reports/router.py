from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import require_admin
from app.core.auth.schemas import Principal
from .service import ReportService
from .schemas import (
    SalesReport, TopProductsReport, TopClientsReport, StateReport,
    PendingShipmentsReport, Dashboard
)

router = APIRouter(prefix="/reportes", tags=["Reportes"])


@router.get("")
def list_reports(current_user: Principal = Depends(require_admin)):
    """Reportes disponibles (solo admin)"""
    return {
        "mensaje": "Módulo de Reportes 📊",
        "reportes_disponibles": [
            {"endpoint": "/reportes/ventas", "descripcion": "Reporte de ventas por período"},
            {"endpoint": "/reportes/productos-mas-vendidos", "descripcion": "Productos más vendidos"},
            {"endpoint": "/reportes/clientes-top", "descripcion": "Clientes con más cotizaciones"},
            {"endpoint": "/reportes/cotizaciones-por-estado", "descripcion": "Cotizaciones agrupadas por estado"},
            {"endpoint": "/reportes/despachos-pendientes", "descripcion": "Despachos pendientes de entrega"},
            {"endpoint": "/reportes/dashboard", "descripcion": "Dashboard general del sistema"}
        ]
    }


@router.get("/ventas", response_model=SalesReport)
def sales_report(
    fecha_desde: Optional[date] = Query(None, description="Desde (YYYY-MM-DD)"),
    fecha_hasta: Optional[date] = Query(None, description="Hasta (YYYY-MM-DD)"),
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Ventas agrupadas por mes (YYYY-MM), más reciente primero"""
    return ReportService(db).sales_report(fecha_desde, fecha_hasta)


@router.get("/productos-mas-vendidos", response_model=TopProductsReport)
def top_products(
    limit: int = Query(10, ge=1, le=100),
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Productos con más unidades en cotizaciones aprobadas o enviadas"""
    return ReportService(db).top_products(limit)


@router.get("/clientes-top", response_model=TopClientsReport)
def top_clients(
    limit: int = Query(10, ge=1, le=100),
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return ReportService(db).top_clients(limit)


@router.get("/cotizaciones-por-estado", response_model=StateReport)
def quotations_by_state(
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return ReportService(db).quotations_by_state()


@router.get("/despachos-pendientes", response_model=PendingShipmentsReport)
def pending_shipments(
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Despachos que no están entregados ni cancelados, el más antiguo primero"""
    return ReportService(db).pending_shipments()


@router.get("/dashboard", response_model=Dashboard)
def dashboard(
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return ReportService(db).dashboard()
