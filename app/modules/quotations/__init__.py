# app/modules/quotations/__init__.py
"""
Módulo de Cotizaciones

- Creación atómica de cotización + detalle (precio unitario congelado al crear)
- total = suma de subtotales calculados por la base de datos
- Cambio de estado y observaciones (admin)
- Eliminación solo si no tiene despacho (detalle en cascada)
- Listado paginado con filtros y estadísticas por estado

Arquitectura:
- router.py: Endpoints FastAPI
- service.py: Lógica de negocio
- repository.py: Acceso a datos
- schemas.py: Modelos Pydantic de request/response
"""

from .router import router as quotations_router
from .service import QuotationService
from .repository import QuotationRepository

__all__ = [
    "quotations_router",
    "QuotationService",
    "QuotationRepository"
]
