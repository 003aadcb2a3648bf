from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user, require_admin
from app.core.auth.schemas import Principal
from app.shared.utils.pagination import Page, PageParams, get_page_params
from .service import CatalogService
from .schemas import (
    ProductCreate, ProductUpdate, ProductResponse, ProductCreatedResponse,
    ProductMessage, StockUpdate, ActiveUpdate, CategoryCreate, CategoryWithCount,
    CategoryDetail, CategoryCreatedResponse, CategoryMessage
)

products_router = APIRouter(prefix="/productos", tags=["Productos"])
categories_router = APIRouter(prefix="/categorias", tags=["Categorías"])

# ==================== PRODUCTOS ====================

@products_router.get("", response_model=Page[ProductResponse])
def list_products(
    nombre: Optional[str] = Query(None, description="Filtrar por nombre"),
    codigo: Optional[str] = Query(None, description="Filtrar por código"),
    id_categoria: Optional[int] = Query(None, description="Filtrar por categoría"),
    activo: Optional[bool] = Query(None, description="Filtrar por activo"),
    page_params: PageParams = Depends(get_page_params),
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return CatalogService(db).list_products(
        page_params, nombre=nombre, codigo=codigo, id_categoria=id_categoria, activo=activo
    )

@products_router.get("/codigo/{codigo}", response_model=ProductResponse)
def get_product_by_code(
    codigo: str,
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return CatalogService(db).get_product_by_code(codigo)

@products_router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: int,
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return CatalogService(db).get_product(product_id)

@products_router.post("", response_model=ProductCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    product_data: ProductCreate,
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Crear producto (solo admin): código único, precio > 0, categoría existente"""
    return CatalogService(db).create_product(product_data)

@products_router.put("/{product_id}", response_model=ProductMessage)
def update_product(
    product_id: int,
    update_data: ProductUpdate,
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return CatalogService(db).update_product(product_id, update_data)

@products_router.delete("/{product_id}", response_model=ProductMessage)
def delete_product(
    product_id: int,
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Eliminar producto no cotizado (solo admin). Si fue cotizado, desactivarlo."""
    return CatalogService(db).delete_product(product_id)

@products_router.patch("/{product_id}/stock", response_model=ProductMessage)
def update_product_stock(
    product_id: int,
    payload: StockUpdate,
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return CatalogService(db).update_stock(product_id, payload.stock)

@products_router.patch("/{product_id}/activar", response_model=ProductMessage)
def set_product_active(
    product_id: int,
    payload: ActiveUpdate,
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return CatalogService(db).set_active(product_id, payload.activo)

# ==================== CATEGORÍAS ====================

@categories_router.get("", response_model=List[CategoryWithCount])
def list_categories(
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return CatalogService(db).list_categories()

@categories_router.get("/{category_id}", response_model=CategoryDetail)
def get_category(
    category_id: int,
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return CatalogService(db).get_category(category_id)

@categories_router.post("", response_model=CategoryCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: CategoryCreate,
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return CatalogService(db).create_category(category_data)

@categories_router.put("/{category_id}", response_model=CategoryMessage)
def update_category(
    category_id: int,
    category_data: CategoryCreate,
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return CatalogService(db).update_category(category_id, category_data)

@categories_router.delete("/{category_id}", response_model=CategoryMessage)
def delete_category(
    category_id: int,
    current_user: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Eliminar categoría sin productos (solo admin)"""
    return CatalogService(db).delete_category(category_id)
