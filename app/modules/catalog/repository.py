from typing import List, Optional, Tuple, Dict, Any
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func

from app.shared.database.models import Product, Category, QuotationItem
from app.shared.utils.pagination import PageParams, paginate


class CatalogRepository:
    """Acceso a datos de productos y categorías"""

    def __init__(self, db: Session):
        self.db = db

    # ==================== PRODUCTOS ====================

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.db.query(Product).options(
            joinedload(Product.categoria)
        ).filter(Product.id_producto == product_id).first()

    def get_product_by_code(self, codigo: str) -> Optional[Product]:
        return self.db.query(Product).options(
            joinedload(Product.categoria)
        ).filter(Product.codigo == codigo).first()

    def code_in_use(self, codigo: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Product.id_producto).filter(Product.codigo == codigo)
        if exclude_id is not None:
            query = query.filter(Product.id_producto != exclude_id)
        return query.first() is not None

    def list_products(
        self,
        params: PageParams,
        nombre: Optional[str] = None,
        codigo: Optional[str] = None,
        id_categoria: Optional[int] = None,
        activo: Optional[bool] = None
    ) -> Tuple[List[Product], int]:
        query = self.db.query(Product).options(joinedload(Product.categoria))
        if nombre:
            query = query.filter(Product.nombre.ilike(f"%{nombre}%"))
        if codigo:
            query = query.filter(Product.codigo.ilike(f"%{codigo}%"))
        if id_categoria:
            query = query.filter(Product.id_categoria == id_categoria)
        if activo is not None:
            query = query.filter(Product.activo == activo)

        total = query.count()
        return paginate(query.order_by(Product.nombre), params), total

    def count_quotation_items(self, product_id: int) -> int:
        return self.db.query(func.count(QuotationItem.id_detalle)).filter(
            QuotationItem.id_producto == product_id
        ).scalar() or 0

    def create_product(self, product_data: dict) -> Product:
        product = Product(**product_data)
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def update_product(self, product_id: int, patch: dict) -> bool:
        rows_updated = self.db.query(Product).filter(
            Product.id_producto == product_id
        ).update(patch, synchronize_session="fetch")
        self.db.commit()
        return rows_updated > 0

    def delete_product(self, product_id: int) -> bool:
        rows_deleted = self.db.query(Product).filter(Product.id_producto == product_id).delete()
        self.db.commit()
        return rows_deleted > 0

    # ==================== CATEGORÍAS ====================

    def get_category(self, category_id: int) -> Optional[Category]:
        return self.db.query(Category).filter(Category.id_categoria == category_id).first()

    def category_name_in_use(self, nombre: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Category.id_categoria).filter(Category.nombre_categoria == nombre)
        if exclude_id is not None:
            query = query.filter(Category.id_categoria != exclude_id)
        return query.first() is not None

    def list_categories(self) -> List[Dict[str, Any]]:
        rows = self.db.query(
            Category, func.count(Product.id_producto)
        ).outerjoin(
            Product, Category.id_categoria == Product.id_categoria
        ).group_by(
            Category.id_categoria
        ).order_by(Category.nombre_categoria).all()

        return [
            {
                "id_categoria": category.id_categoria,
                "nombre_categoria": category.nombre_categoria,
                "descripcion": category.descripcion,
                "total_productos": total
            }
            for category, total in rows
        ]

    def get_category_products(self, category_id: int) -> List[Product]:
        return self.db.query(Product).options(joinedload(Product.categoria)).filter(
            Product.id_categoria == category_id
        ).order_by(Product.nombre).all()

    def count_category_products(self, category_id: int) -> int:
        return self.db.query(func.count(Product.id_producto)).filter(
            Product.id_categoria == category_id
        ).scalar() or 0

    def create_category(self, category_data: dict) -> Category:
        category = Category(**category_data)
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    def update_category(self, category_id: int, patch: dict) -> bool:
        rows_updated = self.db.query(Category).filter(
            Category.id_categoria == category_id
        ).update(patch, synchronize_session="fetch")
        self.db.commit()
        return rows_updated > 0

    def delete_category(self, category_id: int) -> bool:
        rows_deleted = self.db.query(Category).filter(Category.id_categoria == category_id).delete()
        self.db.commit()
        return rows_deleted > 0
