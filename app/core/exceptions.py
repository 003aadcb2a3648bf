# app/core/exceptions.py
"""
Errores de negocio de la API.

Todas las respuestas de error se entregan como JSON ``{"mensaje": ..., ...}``.
Cada error puede llevar campos adicionales (``extra``) que se agregan al cuerpo,
por ejemplo el ``id_despacho`` existente cuando ya hay un despacho.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    mensaje = "Error del servidor"

    def __init__(self, mensaje: Optional[str] = None, **extra: Any):
        self.extra: Dict[str, Any] = extra
        super().__init__(status_code=self.status_code, detail=mensaje or self.mensaje)

    @property
    def code(self) -> str:
        return type(self).__name__


# ==================== TAXONOMÍA ====================

class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    mensaje = "Datos inválidos"

class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    mensaje = "Recurso no encontrado"

class ConflictError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    mensaje = "Conflicto con el estado actual del recurso"

class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    mensaje = "Token inválido o expirado"

class ForbiddenError(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    mensaje = "Acceso denegado: rol insuficiente"

class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    mensaje = "Error interno del servidor"


# ==================== COTIZACIONES ====================

class ClientNotFound(NotFoundError):
    mensaje = "Cliente no encontrado"

class ProductNotFound(NotFoundError):
    def __init__(self, product_id: Any):
        self.product_id = product_id
        super().__init__(f"Producto con ID {product_id} no encontrado", id_producto=product_id)

class ProductInactive(ConflictError):
    def __init__(self, product_id: Any):
        self.product_id = product_id
        super().__init__(f"El producto con ID {product_id} no está activo", id_producto=product_id)

class InvalidQuantity(ValidationError):
    mensaje = "La cantidad debe ser mayor a 0"

class InvalidDiscount(ValidationError):
    mensaje = "El descuento debe ser mayor o igual a 0"

class InvalidDateFormat(ValidationError):
    mensaje = "Formato de fecha inválido, use YYYY-MM-DD"

class EmptyLineItems(ValidationError):
    mensaje = "Debe incluir al menos un producto"

class QuotationNotFound(NotFoundError):
    mensaje = "Cotización no encontrada"

class InvalidState(ValidationError):
    mensaje = "Estado inválido"

class NoFieldsToUpdate(ValidationError):
    mensaje = "No hay campos para actualizar"

class HasShipment(ConflictError):
    mensaje = "No se puede eliminar la cotización porque tiene un despacho asociado"


# ==================== DESPACHOS ====================

class ShipmentNotFound(NotFoundError):
    mensaje = "Despacho no encontrado"

class QuotationNotApproved(ConflictError):
    mensaje = "Solo se pueden crear despachos para cotizaciones aprobadas"

class ShipmentAlreadyExists(ConflictError):
    def __init__(self, shipment_id: int):
        self.shipment_id = shipment_id
        super().__init__("Ya existe un despacho para esta cotización", id_despacho=shipment_id)

class InvalidTransition(ConflictError):
    mensaje = "Transición de estado no permitida"


# ==================== HANDLERS ====================

def setup_exception_handlers(app: FastAPI, debug: bool = False):
    """Registrar los handlers que convierten errores en JSON ``{mensaje, error?}``"""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND and not isinstance(exc, AppError):
            return JSONResponse(
                status_code=exc.status_code,
                content={
                    "mensaje": "El endpoint solicitado no existe",
                    "error": "Ruta no encontrada",
                    "path": request.url.path,
                    "metodo": request.method
                }
            )
        body: Dict[str, Any] = {"mensaje": exc.detail}
        if isinstance(exc, AppError):
            body.update(exc.extra)
        if debug and isinstance(exc, InternalError) and exc.__cause__ is not None:
            body["error"] = str(exc.__cause__)
        return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errores = [
            {"campo": ".".join(str(p) for p in err.get("loc", [])), "detalle": err.get("msg")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"mensaje": "Datos de entrada inválidos", "errores": errores}
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"❌ Error no controlado en {request.method} {request.url.path}")
        body: Dict[str, Any] = {"mensaje": InternalError.mensaje}
        if debug:
            body["error"] = str(exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)
