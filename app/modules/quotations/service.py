# app/modules/quotations/service.py
import logging
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.core.auth.schemas import Principal
from app.core.exceptions import (
    AppError, ValidationError, InternalError, ClientNotFound, ProductNotFound,
    ProductInactive, InvalidQuantity, InvalidDiscount, InvalidDateFormat,
    EmptyLineItems, QuotationNotFound, InvalidState, NoFieldsToUpdate, HasShipment
)
from app.shared.database.models import Quotation
from app.shared.utils.pagination import Page, PageParams
from app.modules.shipments.schemas import ShipmentResponse
from .repository import QuotationRepository
from .schemas import (
    QuotationCreateRequest, QuotationUpdateRequest, QuotationResponse,
    QuotationDetailResponse, QuotationItemResponse, QuotationSummary,
    QuotationStats, VALID_QUOTATION_STATES
)

logger = logging.getLogger(__name__)

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_issue_date(value: str) -> date:
    """Fecha ``YYYY-MM-DD``; también rechaza fechas inexistentes (2024-02-30)"""
    if not DATE_RE.match(value):
        raise InvalidDateFormat()
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise InvalidDateFormat() from e


class QuotationService:
    """
    Motor de cotizaciones: creación atómica con detalle, cambios de estado y consultas
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = QuotationRepository(db)

    # ==================== CREACIÓN ====================

    def create_quotation(
        self,
        data: QuotationCreateRequest,
        current_user: Principal
    ) -> QuotationResponse:
        """
        Crear cotización con su detalle en una sola unidad de trabajo.

        Cualquier error (validación o escritura) después de abrir la transacción
        hace rollback explícito: nunca queda una cabecera sin detalle ni un
        detalle parcial.
        """
        if data.id_cliente is None or not data.fecha_emision:
            raise ValidationError("id_cliente y fecha_emision son obligatorios")

        if not data.productos:
            raise EmptyLineItems()

        issue_date = parse_issue_date(data.fecha_emision)

        try:
            if not self.repository.get_client(data.id_cliente):
                raise ClientNotFound()

            quotation = self.repository.add_header(
                client_id=data.id_cliente,
                user_id=current_user.id,
                issue_date=issue_date,
                observations=data.observaciones
            )

            for item in data.productos:
                if item.id_producto is None or item.cantidad is None:
                    raise ValidationError("Cada producto debe tener id_producto y cantidad")

                product = self.repository.get_product(item.id_producto)
                if not product:
                    raise ProductNotFound(item.id_producto)
                if not product.activo:
                    raise ProductInactive(item.id_producto)
                if item.cantidad <= 0:
                    raise InvalidQuantity()

                self.repository.add_line_item(
                    quotation=quotation,
                    product=product,
                    quantity=item.cantidad,
                    discount=self._to_discount(item.descuento)
                )

            self.repository.recalculate_total(quotation)
            self.db.commit()

        except AppError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error creando cotización: {e}")
            raise InternalError("Error al crear cotización") from e

        self.db.refresh(quotation)
        logger.info(
            f"✅ Cotización {quotation.id_cotizacion} creada por usuario {current_user.id} "
            f"({len(data.productos)} productos, total {quotation.total})"
        )
        return self._build_response(quotation)

    @staticmethod
    def _to_discount(value: Optional[float]) -> Decimal:
        if value is None:
            return Decimal("0")
        try:
            discount = Decimal(str(value))
        except InvalidOperation as e:
            raise InvalidDiscount() from e
        if discount < 0:
            raise InvalidDiscount()
        return discount

    # ==================== ACTUALIZACIÓN / ELIMINACIÓN ====================

    def update_quotation(self, quotation_id: int, data: QuotationUpdateRequest) -> Dict[str, Any]:
        """Actualizar estado y/o observaciones (solo los campos enviados)"""
        if not self.repository.get_by_id(quotation_id):
            raise QuotationNotFound()

        patch = data.model_dump(exclude_unset=True)
        if not patch.get("estado"):
            patch.pop("estado", None)

        if "estado" in patch and patch["estado"] not in VALID_QUOTATION_STATES:
            raise InvalidState(estados_validos=VALID_QUOTATION_STATES)

        if not patch:
            raise NoFieldsToUpdate()

        try:
            self.repository.update_fields(quotation_id, patch)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error actualizando cotización {quotation_id}: {e}")
            raise InternalError("Error al actualizar cotización") from e

        return {"mensaje": "Cotización actualizada exitosamente", "id_cotizacion": quotation_id}

    def delete_quotation(self, quotation_id: int) -> Dict[str, Any]:
        """Eliminar cotización sin despacho; el detalle se elimina en cascada"""
        # el despacho asociado se informa antes que la existencia de la cotización
        shipment = self.repository.get_shipment_for(quotation_id)
        if shipment:
            raise HasShipment(
                sugerencia="Elimine primero el despacho o cambie el estado de la cotización",
                id_despacho=shipment.id_despacho
            )

        quotation = self.repository.get_by_id(quotation_id)
        if not quotation:
            raise QuotationNotFound()

        try:
            self.repository.delete(quotation)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error eliminando cotización {quotation_id}: {e}")
            raise InternalError("Error al eliminar cotización") from e

        logger.info(f"🗑️ Cotización {quotation_id} eliminada")
        return {"mensaje": "Cotización eliminada exitosamente", "id_cotizacion": quotation_id}

    # ==================== CONSULTAS ====================

    def get_quotation(self, quotation_id: int) -> QuotationDetailResponse:
        quotation = self.repository.get_with_details(quotation_id)
        if not quotation:
            raise QuotationNotFound()

        cliente = quotation.cliente
        productos = [
            QuotationItemResponse(
                id_detalle=d.id_detalle,
                id_cotizacion=d.id_cotizacion,
                id_producto=d.id_producto,
                cantidad=d.cantidad,
                precio_unitario=d.precio_unitario,
                descuento=d.descuento,
                subtotal=d.subtotal,
                producto_codigo=d.producto.codigo,
                producto_nombre=d.producto.nombre,
                producto_descripcion=d.producto.descripcion,
                nombre_categoria=d.producto.nombre_categoria
            )
            for d in quotation.detalles
        ]

        return QuotationDetailResponse(
            **self._header_fields(quotation),
            cliente_nombre=cliente.nombre,
            cliente_rut=cliente.rut,
            cliente_correo=cliente.correo,
            cliente_telefono=cliente.telefono,
            cliente_direccion=cliente.direccion,
            vendedor=quotation.usuario.usuario if quotation.usuario else None,
            productos=productos,
            despacho=ShipmentResponse.model_validate(quotation.despacho) if quotation.despacho else None
        )

    def list_quotations(
        self,
        params: PageParams,
        client_id: Optional[int] = None,
        state: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None
    ) -> Page[QuotationSummary]:
        data, total = self.repository.list_quotations(
            params, client_id=client_id, state=state, date_from=date_from, date_to=date_to
        )
        return Page[QuotationSummary].build(data, total, params)

    def get_stats(self) -> QuotationStats:
        return QuotationStats(**self.repository.get_stats())

    # ==================== HELPERS ====================

    @staticmethod
    def _header_fields(quotation: Quotation) -> Dict[str, Any]:
        return {
            "id_cotizacion": quotation.id_cotizacion,
            "fecha_emision": quotation.fecha_emision,
            "id_cliente": quotation.id_cliente,
            "id_usuario": quotation.id_usuario,
            "estado": quotation.estado,
            "total": quotation.total,
            "observaciones": quotation.observaciones,
            "created_at": quotation.created_at
        }

    def _build_response(self, quotation: Quotation) -> QuotationResponse:
        return QuotationResponse(
            **self._header_fields(quotation),
            cliente_nombre=quotation.cliente.nombre if quotation.cliente else None
        )
