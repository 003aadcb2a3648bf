# app/modules/quotations/repository.py
from datetime import date
from decimal import Decimal
from typing import List, Optional, Dict, Any, Tuple
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func, case, desc, select

from app.shared.database.models import (
    Quotation, QuotationItem, Client, Product, User, Shipment
)
from app.shared.utils.pagination import PageParams


class QuotationRepository:
    """
    Repositorio de cotizaciones y su detalle.

    Los métodos de escritura NO hacen commit: el servicio decide el límite de la
    transacción (la creación de una cotización es una sola unidad de trabajo).
    """

    def __init__(self, db: Session):
        self.db = db

    # ===== LECTURAS DE APOYO =====

    def get_client(self, client_id: int) -> Optional[Client]:
        return self.db.query(Client).filter(Client.id_cliente == client_id).first()

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.db.query(Product).filter(Product.id_producto == product_id).first()

    # ===== ESCRITURA =====

    def add_header(
        self,
        client_id: int,
        user_id: int,
        issue_date: date,
        observations: Optional[str]
    ) -> Quotation:
        """Insertar cabecera en estado 'pendiente' (flush para obtener el ID)"""
        quotation = Quotation(
            id_cliente=client_id,
            id_usuario=user_id,
            fecha_emision=issue_date,
            estado="pendiente",
            total=Decimal("0"),
            observaciones=observations
        )
        self.db.add(quotation)
        self.db.flush()
        return quotation

    def add_line_item(
        self,
        quotation: Quotation,
        product: Product,
        quantity: int,
        discount: Decimal
    ) -> QuotationItem:
        """Insertar detalle con el precio actual del producto; la BD calcula el subtotal"""
        item = QuotationItem(
            id_cotizacion=quotation.id_cotizacion,
            id_producto=product.id_producto,
            cantidad=quantity,
            precio_unitario=product.precio,
            descuento=discount
        )
        self.db.add(item)
        self.db.flush()
        # El subtotal lo genera la BD: releerlo
        self.db.refresh(item, attribute_names=["subtotal"])
        return item

    def recalculate_total(self, quotation: Quotation) -> Decimal:
        """total = SUM(subtotal) leído desde la BD"""
        self.db.flush()
        total = self.db.query(
            func.coalesce(func.sum(QuotationItem.subtotal), 0)
        ).filter(
            QuotationItem.id_cotizacion == quotation.id_cotizacion
        ).scalar()

        total = Decimal(str(total)).quantize(Decimal("0.01"))
        quotation.total = total
        self.db.flush()
        return total

    def update_fields(self, quotation_id: int, patch: Dict[str, Any]) -> bool:
        """UPDATE parametrizado solo con los campos del patch"""
        rows_updated = self.db.query(Quotation).filter(
            Quotation.id_cotizacion == quotation_id
        ).update(patch, synchronize_session="fetch")
        return rows_updated > 0

    def delete(self, quotation: Quotation):
        # cascade="all, delete-orphan" elimina el detalle
        self.db.delete(quotation)
        self.db.flush()

    # ===== CONSULTAS =====

    def get_by_id(self, quotation_id: int) -> Optional[Quotation]:
        return self.db.query(Quotation).filter(Quotation.id_cotizacion == quotation_id).first()

    def get_with_details(self, quotation_id: int) -> Optional[Quotation]:
        return self.db.query(Quotation).options(
            joinedload(Quotation.cliente),
            joinedload(Quotation.usuario),
            joinedload(Quotation.detalles).joinedload(QuotationItem.producto).joinedload(Product.categoria),
            joinedload(Quotation.despacho)
        ).filter(Quotation.id_cotizacion == quotation_id).first()

    def get_shipment_for(self, quotation_id: int) -> Optional[Shipment]:
        return self.db.query(Shipment).filter(Shipment.id_cotizacion == quotation_id).first()

    def _apply_filters(
        self,
        query,
        client_id: Optional[int],
        state: Optional[str],
        date_from: Optional[date],
        date_to: Optional[date]
    ):
        if client_id:
            query = query.filter(Quotation.id_cliente == client_id)
        if state:
            query = query.filter(Quotation.estado == state)
        if date_from:
            query = query.filter(Quotation.fecha_emision >= date_from)
        if date_to:
            query = query.filter(Quotation.fecha_emision <= date_to)
        return query

    def list_quotations(
        self,
        params: PageParams,
        client_id: Optional[int] = None,
        state: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None
    ) -> Tuple[List[Dict[str, Any]], int]:
        """Página de cabeceras con cantidad de productos por cotización + total de filas"""
        items_count = select(func.count(QuotationItem.id_detalle)).where(
            QuotationItem.id_cotizacion == Quotation.id_cotizacion
        ).correlate(Quotation).scalar_subquery()

        query = self.db.query(
            Quotation,
            Client.rut,
            Client.nombre,
            User.usuario,
            items_count.label("cantidad_productos")
        ).join(
            Client, Quotation.id_cliente == Client.id_cliente
        ).join(
            User, Quotation.id_usuario == User.id_usuario
        )
        query = self._apply_filters(query, client_id, state, date_from, date_to)

        rows = query.order_by(
            desc(Quotation.fecha_emision), desc(Quotation.id_cotizacion)
        ).limit(params.limit).offset(params.offset).all()

        count_query = self._apply_filters(
            self.db.query(func.count(Quotation.id_cotizacion)),
            client_id, state, date_from, date_to
        )
        total = count_query.scalar() or 0

        data = []
        for quotation, rut, nombre, vendedor, cantidad in rows:
            data.append({
                "id_cotizacion": quotation.id_cotizacion,
                "fecha_emision": quotation.fecha_emision,
                "estado": quotation.estado,
                "total": quotation.total,
                "observaciones": quotation.observaciones,
                "id_cliente": quotation.id_cliente,
                "cliente_rut": rut,
                "cliente_nombre": nombre,
                "id_usuario": quotation.id_usuario,
                "vendedor": vendedor,
                "cantidad_productos": cantidad or 0
            })

        return data, total

    def get_stats(self) -> Dict[str, Any]:
        def by_state(state: str):
            return func.coalesce(func.sum(case((Quotation.estado == state, 1), else_=0)), 0)

        row = self.db.query(
            func.count(Quotation.id_cotizacion),
            by_state("pendiente"),
            by_state("aprobada"),
            by_state("rechazada"),
            by_state("enviada"),
            func.coalesce(func.sum(Quotation.total), 0),
            func.coalesce(func.avg(Quotation.total), 0)
        ).one()

        return {
            "total_cotizaciones": row[0] or 0,
            "pendientes": row[1],
            "aprobadas": row[2],
            "rechazadas": row[3],
            "enviadas": row[4],
            "monto_total": float(row[5]),
            "monto_promedio": round(float(row[6]), 2)
        }
