"""
Módulo de Reportes (solo admin)

Ventas por mes, productos más vendidos, clientes top, cotizaciones por estado,
despachos pendientes y dashboard general.
"""

from .router import router as reports_router
from .service import ReportService

__all__ = ["reports_router", "ReportService"]
