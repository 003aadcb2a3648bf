from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationError
from .repository import ReportRepository
from .schemas import (
    ReportPeriod, SalesReport, SalesPeriodRow, TopProductsReport, TopProductRow,
    TopClientsReport, TopClientRow, StateReport, StateRow, PendingShipmentsReport,
    PendingShipmentRow, Dashboard, GeneralStats, MonthStats, RecentQuotation
)


class ReportService:
    """Reportes de solo lectura para el administrador"""

    def __init__(self, db: Session):
        self.db = db
        self.repository = ReportRepository(db)

    def sales_report(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None
    ) -> SalesReport:
        if date_from and date_to and date_from > date_to:
            raise ValidationError("fecha_desde no puede ser posterior a fecha_hasta")

        rows = self.repository.sales_by_month(date_from, date_to)
        return SalesReport(
            periodo=ReportPeriod(desde=date_from, hasta=date_to),
            data=[SalesPeriodRow(**row) for row in rows]
        )

    def top_products(self, limit: int) -> TopProductsReport:
        rows = self.repository.top_products(limit)
        return TopProductsReport(top=limit, data=[TopProductRow(**row) for row in rows])

    def top_clients(self, limit: int) -> TopClientsReport:
        rows = self.repository.top_clients(limit)
        return TopClientsReport(top=limit, data=[TopClientRow(**row) for row in rows])

    def quotations_by_state(self) -> StateReport:
        return StateReport(data=[StateRow(**row) for row in self.repository.quotations_by_state()])

    def pending_shipments(self, today: Optional[date] = None) -> PendingShipmentsReport:
        rows = self.repository.pending_shipments(today or date.today())
        return PendingShipmentsReport(
            total_pendientes=len(rows),
            data=[PendingShipmentRow(**row) for row in rows]
        )

    def dashboard(self, today: Optional[date] = None) -> Dashboard:
        today = today or date.today()
        return Dashboard(
            estadisticas_generales=GeneralStats(**self.repository.general_stats()),
            mes_actual=MonthStats(**self.repository.month_stats(today)),
            ultimas_cotizaciones=[
                RecentQuotation(**row) for row in self.repository.recent_quotations()
            ]
        )
