# app/api/v1/router.py
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.config.database import get_settings
from app.config.settings import Settings

# ✅ IMPORTAR MÓDULOS
from app.modules.users import users_router
from app.modules.clients import clients_router
from app.modules.catalog import products_router, categories_router
from app.modules.quotations import quotations_router
from app.modules.shipments.router import router as shipments_router
from app.modules.reports import reports_router

_STARTED_AT = time.monotonic()

# Router principal: cada módulo trae su propio prefijo (/usuarios, /clientes, ...)
api_router = APIRouter()

api_router.include_router(users_router)
api_router.include_router(clients_router)
api_router.include_router(products_router)
api_router.include_router(categories_router)
api_router.include_router(quotations_router)
api_router.include_router(shipments_router)
api_router.include_router(reports_router)


# ==================== ENDPOINTS RAÍZ ====================

@api_router.get("/")
async def api_root(settings: Settings = Depends(get_settings)):
    """Información del API"""
    return {
        "mensaje": "API Sistema de Gestión Mainz Medical Spa 🏥",
        "version": settings.version,
        "endpoints": {
            "usuarios": "/usuarios",
            "clientes": "/clientes",
            "productos": "/productos",
            "categorias": "/categorias",
            "cotizaciones": "/cotizaciones",
            "despachos": "/despachos",
            "reportes": "/reportes"
        },
        "documentacion": "/docs" if settings.debug else "Deshabilitada en producción",
        "estado": "Servidor funcionando correctamente ✅"
    }

@api_router.get("/health")
async def health_check():
    """Health check"""
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - _STARTED_AT, 3)
    }
