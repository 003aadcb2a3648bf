import logging
from datetime import date
from typing import Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.config.settings import Settings
from app.core.exceptions import (
    ValidationError, InternalError, QuotationNotFound, QuotationNotApproved,
    ShipmentAlreadyExists, ShipmentNotFound, InvalidState, InvalidTransition,
    NoFieldsToUpdate
)
from app.shared.utils.pagination import Page, PageParams
from app.modules.shipments.repository import ShipmentRepository
from app.modules.shipments.schemas import (
    ShipmentCreateRequest, ShipmentUpdateRequest, ShipmentDetailResponse,
    ShipmentStats, VALID_SHIPMENT_STATES, SHIPMENT_TRANSITIONS
)

logger = logging.getLogger(__name__)

# Estados de cotización que admiten despacho
SHIPPABLE_QUOTATION_STATES = ("aprobada", "enviada")

# Campos que no aceptan null en un patch
NON_NULLABLE_FIELDS = ("fecha_envio", "direccion_envio", "estado")


class ShipmentService:
    """
    Coordinador de despachos.

    Crear un despacho deja la cotización en 'enviada'; eliminarlo la devuelve a
    'aprobada'. Ambas escrituras (despacho + estado de la cotización) se
    confirman en la misma transacción.
    """

    def __init__(self, db: Session, settings: Optional[Settings] = None):
        self.db = db
        self.repository = ShipmentRepository(db)
        self.strict_transitions = bool(settings and settings.strict_shipment_transitions)

    def create_shipment(self, data: ShipmentCreateRequest) -> Dict[str, Any]:
        if not data.id_cotizacion or not data.fecha_envio or not data.direccion_envio:
            raise ValidationError("id_cotizacion, fecha_envio y direccion_envio son obligatorios")

        quotation = self.repository.get_quotation(data.id_cotizacion)
        if not quotation:
            raise QuotationNotFound()

        if quotation.estado not in SHIPPABLE_QUOTATION_STATES:
            raise QuotationNotApproved(estado_actual=quotation.estado)

        existing = self.repository.get_by_quotation(data.id_cotizacion)
        if existing:
            raise ShipmentAlreadyExists(existing.id_despacho)

        try:
            shipment = self.repository.create(data.model_dump())
            self.repository.set_quotation_state(data.id_cotizacion, "enviada")
            self.db.commit()
        except IntegrityError as e:
            # Otro request creó el despacho entre la verificación y el insert
            self.db.rollback()
            existing = self.repository.get_by_quotation(data.id_cotizacion)
            if existing:
                raise ShipmentAlreadyExists(existing.id_despacho) from e
            logger.error(f"❌ Error de integridad creando despacho: {e}")
            raise InternalError("Error al crear despacho") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error creando despacho: {e}")
            raise InternalError("Error al crear despacho") from e

        logger.info(
            f"🚚 Despacho {shipment.id_despacho} creado para cotización {data.id_cotizacion}"
        )
        return {
            "mensaje": "Despacho creado exitosamente",
            "id_despacho": shipment.id_despacho,
            "id_cotizacion": data.id_cotizacion
        }

    def update_shipment(self, shipment_id: int, data: ShipmentUpdateRequest) -> Dict[str, Any]:
        shipment = self.repository.get_by_id(shipment_id)
        if not shipment:
            raise ShipmentNotFound()

        patch = data.model_dump(exclude_unset=True)
        for field in NON_NULLABLE_FIELDS:
            if field in patch and not patch[field]:
                patch.pop(field)

        new_state = patch.get("estado")
        if new_state is not None:
            if new_state not in VALID_SHIPMENT_STATES:
                raise InvalidState(estados_validos=VALID_SHIPMENT_STATES)
            if self.strict_transitions:
                self._check_transition(shipment.estado, new_state)

        if not patch:
            raise NoFieldsToUpdate()

        try:
            self.repository.update_fields(shipment_id, patch)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error actualizando despacho {shipment_id}: {e}")
            raise InternalError("Error al actualizar despacho") from e

        return {"mensaje": "Despacho actualizado exitosamente", "id_despacho": shipment_id}

    @staticmethod
    def _check_transition(current: str, new: str):
        if current == new:
            return
        allowed = SHIPMENT_TRANSITIONS.get(current, [])
        if new not in allowed:
            raise InvalidTransition(
                f"No se puede pasar de '{current}' a '{new}'",
                estado_actual=current,
                estados_permitidos=allowed
            )

    def delete_shipment(self, shipment_id: int) -> Dict[str, Any]:
        shipment = self.repository.get_by_id(shipment_id)
        if not shipment:
            raise ShipmentNotFound()

        quotation_id = shipment.id_cotizacion
        try:
            self.repository.delete(shipment)
            self.repository.set_quotation_state(quotation_id, "aprobada")
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error eliminando despacho {shipment_id}: {e}")
            raise InternalError("Error al eliminar despacho") from e

        logger.info(f"🗑️ Despacho {shipment_id} eliminado, cotización {quotation_id} vuelve a 'aprobada'")
        return {"mensaje": "Despacho eliminado exitosamente", "id_despacho": shipment_id}

    # ===== CONSULTAS =====

    def get_shipment(self, shipment_id: int) -> ShipmentDetailResponse:
        detail = self.repository.get_detail(shipment_id)
        if not detail:
            raise ShipmentNotFound()
        return ShipmentDetailResponse(**detail)

    def get_shipment_by_quotation(self, quotation_id: int) -> ShipmentDetailResponse:
        detail = self.repository.get_detail_by_quotation(quotation_id)
        if not detail:
            raise ShipmentNotFound("No hay despacho para esta cotización")
        return ShipmentDetailResponse(**detail)

    def list_shipments(
        self,
        params: PageParams,
        state: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None
    ) -> Page[ShipmentDetailResponse]:
        data, total = self.repository.list_shipments(
            params, state=state, date_from=date_from, date_to=date_to
        )
        return Page[ShipmentDetailResponse].build(data, total, params)

    def get_stats(self) -> ShipmentStats:
        return ShipmentStats(**self.repository.get_stats())
