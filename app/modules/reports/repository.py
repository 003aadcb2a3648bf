from datetime import date
from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy import func, case, extract, distinct

from app.shared.database.models import (
    Client, Product, Category, Quotation, QuotationItem, Shipment, User
)

# Estados que cuentan como venta concretada
SOLD_STATES = ("aprobada", "enviada")
CLOSED_SHIPMENT_STATES = ("entregado", "cancelado")


def _num(value) -> float:
    return round(float(value or 0), 2)


class ReportRepository:
    """
    Consultas agregadas de solo lectura para reportes y dashboard
    """

    def __init__(self, db: Session):
        self.db = db

    def sales_by_month(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        year = extract("year", Quotation.fecha_emision)
        month = extract("month", Quotation.fecha_emision)

        query = self.db.query(
            year.label("anio"),
            month.label("mes"),
            func.count(Quotation.id_cotizacion),
            func.sum(Quotation.total),
            func.avg(Quotation.total),
            func.sum(case((Quotation.estado == "aprobada", 1), else_=0)),
            func.sum(case((Quotation.estado == "rechazada", 1), else_=0))
        )
        if date_from:
            query = query.filter(Quotation.fecha_emision >= date_from)
        if date_to:
            query = query.filter(Quotation.fecha_emision <= date_to)

        rows = query.group_by(year, month).order_by(year.desc(), month.desc()).all()

        return [
            {
                "periodo": f"{int(anio):04d}-{int(mes):02d}",
                "total_cotizaciones": total,
                "monto_total": _num(monto),
                "monto_promedio": _num(promedio),
                "aprobadas": aprobadas or 0,
                "rechazadas": rechazadas or 0
            }
            for anio, mes, total, monto, promedio, aprobadas, rechazadas in rows
        ]

    def top_products(self, limit: int) -> List[Dict[str, Any]]:
        cantidad_vendida = func.sum(QuotationItem.cantidad)
        rows = self.db.query(
            Product.id_producto,
            Product.codigo,
            Product.nombre,
            Category.nombre_categoria,
            cantidad_vendida,
            func.count(distinct(QuotationItem.id_cotizacion)),
            func.sum(QuotationItem.subtotal)
        ).select_from(
            QuotationItem
        ).join(
            Product, QuotationItem.id_producto == Product.id_producto
        ).outerjoin(
            Category, Product.id_categoria == Category.id_categoria
        ).join(
            Quotation, QuotationItem.id_cotizacion == Quotation.id_cotizacion
        ).filter(
            Quotation.estado.in_(SOLD_STATES)
        ).group_by(
            Product.id_producto, Product.codigo, Product.nombre, Category.nombre_categoria
        ).order_by(cantidad_vendida.desc()).limit(limit).all()

        return [
            {
                "id_producto": row[0],
                "codigo": row[1],
                "nombre": row[2],
                "nombre_categoria": row[3],
                "cantidad_vendida": int(row[4] or 0),
                "veces_cotizado": row[5],
                "monto_total": _num(row[6])
            }
            for row in rows
        ]

    def top_clients(self, limit: int) -> List[Dict[str, Any]]:
        monto_total = func.sum(Quotation.total)
        rows = self.db.query(
            Client.id_cliente,
            Client.rut,
            Client.nombre,
            Client.correo,
            func.count(Quotation.id_cotizacion),
            monto_total,
            func.avg(Quotation.total),
            func.max(Quotation.fecha_emision)
        ).join(
            Quotation, Client.id_cliente == Quotation.id_cliente
        ).filter(
            Quotation.estado.in_(SOLD_STATES)
        ).group_by(
            Client.id_cliente, Client.rut, Client.nombre, Client.correo
        ).order_by(monto_total.desc()).limit(limit).all()

        return [
            {
                "id_cliente": row[0],
                "rut": row[1],
                "nombre": row[2],
                "correo": row[3],
                "total_cotizaciones": row[4],
                "monto_total": _num(row[5]),
                "monto_promedio": _num(row[6]),
                "ultima_cotizacion": row[7]
            }
            for row in rows
        ]

    def quotations_by_state(self) -> List[Dict[str, Any]]:
        cantidad = func.count(Quotation.id_cotizacion)
        rows = self.db.query(
            Quotation.estado,
            cantidad,
            func.sum(Quotation.total),
            func.avg(Quotation.total)
        ).group_by(Quotation.estado).order_by(cantidad.desc()).all()

        return [
            {
                "estado": estado,
                "cantidad": total,
                "monto_total": _num(monto),
                "monto_promedio": _num(promedio)
            }
            for estado, total, monto, promedio in rows
        ]

    def pending_shipments(self, today: date) -> List[Dict[str, Any]]:
        rows = self.db.query(
            Shipment, Quotation.total, Client.nombre, Client.rut
        ).join(
            Quotation, Shipment.id_cotizacion == Quotation.id_cotizacion
        ).join(
            Client, Quotation.id_cliente == Client.id_cliente
        ).filter(
            Shipment.estado.notin_(CLOSED_SHIPMENT_STATES)
        ).order_by(Shipment.fecha_envio.asc()).all()

        return [
            {
                "id_despacho": shipment.id_despacho,
                "id_cotizacion": shipment.id_cotizacion,
                "fecha_envio": shipment.fecha_envio,
                "fecha_entrega_estimada": shipment.fecha_entrega_estimada,
                "direccion_envio": shipment.direccion_envio,
                "estado": shipment.estado,
                "tracking_number": shipment.tracking_number,
                "total": _num(total),
                "cliente_nombre": nombre,
                "cliente_rut": rut,
                "dias_desde_envio": (today - shipment.fecha_envio).days
            }
            for shipment, total, nombre, rut in rows
        ]

    def general_stats(self) -> Dict[str, Any]:
        def count(column, *criteria):
            return self.db.query(func.count(column)).filter(*criteria).scalar() or 0

        ventas = self.db.query(func.sum(Quotation.total)).filter(
            Quotation.estado.in_(SOLD_STATES)
        ).scalar()

        return {
            "total_clientes": count(Client.id_cliente),
            "productos_activos": count(Product.id_producto, Product.activo.is_(True)),
            "total_cotizaciones": count(Quotation.id_cotizacion),
            "cotizaciones_pendientes": count(Quotation.id_cotizacion, Quotation.estado == "pendiente"),
            "despachos_pendientes": count(
                Shipment.id_despacho, Shipment.estado.notin_(CLOSED_SHIPMENT_STATES)
            ),
            "ventas_totales": _num(ventas),
            "usuarios_activos": count(User.id_usuario, User.activo.is_(True))
        }

    def month_stats(self, today: date) -> Dict[str, Any]:
        total, monto = self.db.query(
            func.count(Quotation.id_cotizacion),
            func.sum(Quotation.total)
        ).filter(
            extract("year", Quotation.fecha_emision) == today.year,
            extract("month", Quotation.fecha_emision) == today.month
        ).one()

        return {"cotizaciones_mes": total or 0, "monto_mes": _num(monto)}

    def recent_quotations(self, limit: int = 5) -> List[Dict[str, Any]]:
        rows = self.db.query(Quotation, Client.nombre).join(
            Client, Quotation.id_cliente == Client.id_cliente
        ).order_by(
            Quotation.fecha_emision.desc(), Quotation.id_cotizacion.desc()
        ).limit(limit).all()

        return [
            {
                "id_cotizacion": quotation.id_cotizacion,
                "fecha_emision": quotation.fecha_emision,
                "estado": quotation.estado,
                "total": _num(quotation.total),
                "cliente_nombre": nombre
            }
            for quotation, nombre in rows
        ]
