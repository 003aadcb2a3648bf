"""
Módulo de Clientes (hospitales, clínicas, organismos públicos)

- CRUD de clientes con RUT chileno validado (módulo 11) y formateado
- RUT y correo únicos
- No se eliminan clientes con cotizaciones
"""

from .router import router as clients_router
from .service import ClientService

__all__ = ["clients_router", "ClientService"]
