import logging
from typing import Optional

from fastapi import FastAPI
from contextlib import asynccontextmanager

from app.config.settings import Settings
from app.config.database import Database
from app.core.exceptions import setup_exception_handlers
from app.core.middleware import setup_middleware
from app.api.v1.router import api_router


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Construir la aplicación a partir de una configuración explícita.

    El engine y la fábrica de sesiones viven en ``app.state``; no hay
    configuración ni conexiones globales a nivel de módulo.
    """
    settings = settings or Settings()

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )

    database = Database(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        print("=" * 50)
        print("🏥 SISTEMA MAINZ MEDICAL SPA")
        print("=" * 50)
        print(f"📍 Version: {settings.version}")
        print(f"🌍 Environment: {'Development' if settings.debug else 'Production'}")
        print(f"🔐 JWT Algorithm: {settings.algorithm}")
        print(f"⏰ Token Expire: {settings.access_token_expire_minutes} minutes")
        print(f"🚚 Transiciones estrictas de despacho: {settings.strict_shipment_transitions}")
        print("=" * 50)

        yield

        # Shutdown
        print("🛑 Mainz Medical API Shutting down...")
        database.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="Sistema de Gestión de Cotizaciones y Despachos de Instrumental Quirúrgico",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan
    )

    # Las tablas deben existir antes de la primera request (incluido TestClient sin lifespan)
    database.create_all()

    app.state.settings = settings
    app.state.database = database

    setup_middleware(app, settings)
    setup_exception_handlers(app, debug=settings.debug)

    app.include_router(api_router)

    return app


if __name__ == "__main__":
    import uvicorn

    _settings = Settings()
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=_settings.host,
        port=_settings.port,
        reload=_settings.debug
    )
