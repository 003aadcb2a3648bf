from datetime import date
from pydantic import BaseModel
from typing import List, Optional

class ReportPeriod(BaseModel):
    desde: Optional[date] = None
    hasta: Optional[date] = None

class SalesPeriodRow(BaseModel):
    periodo: str
    total_cotizaciones: int
    monto_total: float
    monto_promedio: float
    aprobadas: int
    rechazadas: int

class SalesReport(BaseModel):
    periodo: ReportPeriod
    data: List[SalesPeriodRow]

class TopProductRow(BaseModel):
    id_producto: int
    codigo: str
    nombre: str
    nombre_categoria: Optional[str] = None
    cantidad_vendida: int
    veces_cotizado: int
    monto_total: float

class TopProductsReport(BaseModel):
    top: int
    data: List[TopProductRow]

class TopClientRow(BaseModel):
    id_cliente: int
    rut: str
    nombre: str
    correo: Optional[str] = None
    total_cotizaciones: int
    monto_total: float
    monto_promedio: float
    ultima_cotizacion: Optional[date] = None

class TopClientsReport(BaseModel):
    top: int
    data: List[TopClientRow]

class StateRow(BaseModel):
    estado: str
    cantidad: int
    monto_total: float
    monto_promedio: float

class StateReport(BaseModel):
    data: List[StateRow]

class PendingShipmentRow(BaseModel):
    id_despacho: int
    id_cotizacion: int
    fecha_envio: date
    fecha_entrega_estimada: Optional[date] = None
    direccion_envio: str
    estado: str
    tracking_number: Optional[str] = None
    total: float
    cliente_nombre: str
    cliente_rut: str
    dias_desde_envio: int

class PendingShipmentsReport(BaseModel):
    total_pendientes: int
    data: List[PendingShipmentRow]

class GeneralStats(BaseModel):
    total_clientes: int
    productos_activos: int
    total_cotizaciones: int
    cotizaciones_pendientes: int
    despachos_pendientes: int
    ventas_totales: float
    usuarios_activos: int

class MonthStats(BaseModel):
    cotizaciones_mes: int
    monto_mes: float

class RecentQuotation(BaseModel):
    id_cotizacion: int
    fecha_emision: date
    estado: str
    total: float
    cliente_nombre: str

class Dashboard(BaseModel):
    estadisticas_generales: GeneralStats
    mes_actual: MonthStats
    ultimas_cotizaciones: List[RecentQuotation]
