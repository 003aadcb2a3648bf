"""
Módulo de Catálogo - Productos (instrumental quirúrgico) y Categorías
"""

from .router import products_router, categories_router
from .service import CatalogService

__all__ = [
    "products_router",
    "categories_router",
    "CatalogService"
]
