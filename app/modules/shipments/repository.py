from datetime import date
from typing import List, Optional, Dict, Any, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import func, case, desc

from app.shared.database.models import Shipment, Quotation, Client
from app.shared.utils.pagination import PageParams


class ShipmentRepository:

    def __init__(self, db: Session):
        self.db = db

    # ===== CRUD BÁSICO (sin commit: el servicio controla la transacción) =====

    def get_quotation(self, quotation_id: int) -> Optional[Quotation]:
        return self.db.query(Quotation).filter(Quotation.id_cotizacion == quotation_id).first()

    def get_by_id(self, shipment_id: int) -> Optional[Shipment]:
        return self.db.query(Shipment).filter(Shipment.id_despacho == shipment_id).first()

    def get_by_quotation(self, quotation_id: int) -> Optional[Shipment]:
        return self.db.query(Shipment).filter(Shipment.id_cotizacion == quotation_id).first()

    def create(self, shipment_data: dict) -> Shipment:
        shipment = Shipment(estado="preparando", **shipment_data)
        self.db.add(shipment)
        self.db.flush()
        return shipment

    def update_fields(self, shipment_id: int, patch: Dict[str, Any]) -> bool:
        rows_updated = self.db.query(Shipment).filter(
            Shipment.id_despacho == shipment_id
        ).update(patch, synchronize_session="fetch")
        return rows_updated > 0

    def delete(self, shipment: Shipment):
        self.db.delete(shipment)
        self.db.flush()

    def set_quotation_state(self, quotation_id: int, state: str) -> bool:
        rows_updated = self.db.query(Quotation).filter(
            Quotation.id_cotizacion == quotation_id
        ).update({"estado": state}, synchronize_session="fetch")
        return rows_updated > 0

    # ===== CONSULTAS CON COTIZACIÓN + CLIENTE =====

    def _joined_query(self):
        return self.db.query(Shipment, Quotation, Client).join(
            Quotation, Shipment.id_cotizacion == Quotation.id_cotizacion
        ).join(
            Client, Quotation.id_cliente == Client.id_cliente
        )

    @staticmethod
    def _to_dict(shipment: Shipment, quotation: Quotation, client: Client) -> Dict[str, Any]:
        return {
            "id_despacho": shipment.id_despacho,
            "id_cotizacion": shipment.id_cotizacion,
            "fecha_envio": shipment.fecha_envio,
            "fecha_entrega_estimada": shipment.fecha_entrega_estimada,
            "fecha_entrega_real": shipment.fecha_entrega_real,
            "direccion_envio": shipment.direccion_envio,
            "estado": shipment.estado,
            "tracking_number": shipment.tracking_number,
            "observaciones": shipment.observaciones,
            "fecha_emision": quotation.fecha_emision,
            "total": quotation.total,
            "cotizacion_estado": quotation.estado,
            "cliente_nombre": client.nombre,
            "cliente_rut": client.rut,
            "cliente_correo": client.correo,
            "cliente_telefono": client.telefono
        }

    def get_detail(self, shipment_id: int) -> Optional[Dict[str, Any]]:
        row = self._joined_query().filter(Shipment.id_despacho == shipment_id).first()
        return self._to_dict(*row) if row else None

    def get_detail_by_quotation(self, quotation_id: int) -> Optional[Dict[str, Any]]:
        row = self._joined_query().filter(Shipment.id_cotizacion == quotation_id).first()
        return self._to_dict(*row) if row else None

    @staticmethod
    def _apply_filters(query, state: Optional[str], date_from: Optional[date], date_to: Optional[date]):
        if state:
            query = query.filter(Shipment.estado == state)
        if date_from:
            query = query.filter(Shipment.fecha_envio >= date_from)
        if date_to:
            query = query.filter(Shipment.fecha_envio <= date_to)
        return query

    def list_shipments(
        self,
        params: PageParams,
        state: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None
    ) -> Tuple[List[Dict[str, Any]], int]:
        query = self._apply_filters(self._joined_query(), state, date_from, date_to)
        rows = query.order_by(
            desc(Shipment.fecha_envio), desc(Shipment.id_despacho)
        ).limit(params.limit).offset(params.offset).all()

        total = self._apply_filters(
            self.db.query(func.count(Shipment.id_despacho)), state, date_from, date_to
        ).scalar() or 0

        return [self._to_dict(*row) for row in rows], total

    def get_stats(self) -> Dict[str, int]:
        states = ["preparando", "enviado", "en_transito", "entregado", "cancelado"]
        columns = [
            func.coalesce(func.sum(case((Shipment.estado == s, 1), else_=0)), 0)
            for s in states
        ]
        row = self.db.query(func.count(Shipment.id_despacho), *columns).one()

        stats = {"total_despachos": row[0] or 0}
        stats.update({state: value for state, value in zip(states, row[1:])})
        return stats
