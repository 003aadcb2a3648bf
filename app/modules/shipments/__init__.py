"""
Módulo de Despachos

Maneja el despacho físico de cotizaciones aprobadas:
- Un despacho por cotización, solo para cotizaciones 'aprobada' o 'enviada'
- Crear despacho => cotización 'enviada'; eliminarlo => cotización 'aprobada'
- Estados: preparando -> enviado -> en_transito -> entregado (cancelado desde
  cualquier estado no terminal)
"""

from .schemas import (
    ShipmentCreateRequest,
    ShipmentUpdateRequest,
    ShipmentResponse,
    ShipmentStatus
)

__all__ = [
    "ShipmentCreateRequest",
    "ShipmentUpdateRequest",
    "ShipmentResponse",
    "ShipmentStatus"
]
