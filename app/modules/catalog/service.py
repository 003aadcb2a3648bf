from decimal import Decimal
from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import (
    ValidationError, ConflictError, NotFoundError, NoFieldsToUpdate
)
from app.shared.utils.pagination import Page, PageParams
from .repository import CatalogRepository
from .schemas import (
    ProductCreate, ProductUpdate, ProductResponse, CategoryCreate,
    CategoryWithCount, CategoryDetail, CategoryResponse
)


class CatalogService:
    """
    Catálogo de productos y categorías.

    Un producto referenciado por cotizaciones no se elimina (se desactiva);
    una categoría con productos no se elimina.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = CatalogRepository(db)

    # ==================== PRODUCTOS ====================

    def list_products(
        self,
        params: PageParams,
        nombre: Optional[str] = None,
        codigo: Optional[str] = None,
        id_categoria: Optional[int] = None,
        activo: Optional[bool] = None
    ) -> Page[ProductResponse]:
        products, total = self.repository.list_products(
            params, nombre=nombre, codigo=codigo, id_categoria=id_categoria, activo=activo
        )
        return Page[ProductResponse].build(
            [ProductResponse.model_validate(p) for p in products], total, params
        )

    def get_product(self, product_id: int) -> ProductResponse:
        product = self.repository.get_product(product_id)
        if not product:
            raise NotFoundError("Producto no encontrado")
        return ProductResponse.model_validate(product)

    def get_product_by_code(self, codigo: str) -> ProductResponse:
        product = self.repository.get_product_by_code(codigo)
        if not product:
            raise NotFoundError("Producto no encontrado")
        return ProductResponse.model_validate(product)

    def _check_category(self, category_id: Optional[int]):
        if category_id and not self.repository.get_category(category_id):
            raise ValidationError("La categoría especificada no existe")

    def create_product(self, data: ProductCreate) -> Dict[str, Any]:
        if self.repository.code_in_use(data.codigo):
            raise ConflictError("Ya existe un producto con ese código")

        self._check_category(data.id_categoria)

        product_data = data.model_dump()
        product_data["precio"] = Decimal(str(data.precio))
        try:
            product = self.repository.create_product(product_data)
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Ya existe un producto con ese código") from e

        return {
            "mensaje": "Producto creado exitosamente",
            "id_producto": product.id_producto,
            "codigo": product.codigo,
            "nombre": product.nombre,
            "precio": product.precio
        }

    def update_product(self, product_id: int, data: ProductUpdate) -> Dict[str, Any]:
        if not self.repository.get_product(product_id):
            raise NotFoundError("Producto no encontrado")

        patch = data.model_dump(exclude_unset=True)
        for field in ("codigo", "nombre", "precio", "stock", "activo"):
            if field in patch and patch[field] is None:
                patch.pop(field)
        if patch.get("codigo") == "":
            patch.pop("codigo")

        if "codigo" in patch and self.repository.code_in_use(patch["codigo"], exclude_id=product_id):
            raise ConflictError("El código ya está en uso por otro producto")

        if "id_categoria" in patch:
            self._check_category(patch["id_categoria"])

        if "precio" in patch:
            patch["precio"] = Decimal(str(patch["precio"]))

        if not patch:
            raise NoFieldsToUpdate()

        self.repository.update_product(product_id, patch)
        return {"mensaje": "Producto actualizado exitosamente", "id_producto": product_id}

    def delete_product(self, product_id: int) -> Dict[str, Any]:
        total = self.repository.count_quotation_items(product_id)
        if total > 0:
            raise ConflictError(
                "No se puede eliminar el producto porque está asociado a cotizaciones",
                cotizaciones_asociadas=total,
                sugerencia="Considere desactivar el producto en lugar de eliminarlo"
            )

        if not self.repository.delete_product(product_id):
            raise NotFoundError("Producto no encontrado")

        return {"mensaje": "Producto eliminado exitosamente", "id_producto": product_id}

    def update_stock(self, product_id: int, stock: int) -> Dict[str, Any]:
        if not self.repository.update_product(product_id, {"stock": stock}):
            raise NotFoundError("Producto no encontrado")
        return {"mensaje": "Stock actualizado exitosamente", "id_producto": product_id, "stock": stock}

    def set_active(self, product_id: int, activo: bool) -> Dict[str, Any]:
        if not self.repository.update_product(product_id, {"activo": activo}):
            raise NotFoundError("Producto no encontrado")
        return {
            "mensaje": f"Producto {'activado' if activo else 'desactivado'} exitosamente",
            "id_producto": product_id,
            "activo": activo
        }

    # ==================== CATEGORÍAS ====================

    def list_categories(self) -> List[CategoryWithCount]:
        return [CategoryWithCount(**row) for row in self.repository.list_categories()]

    def get_category(self, category_id: int) -> CategoryDetail:
        category = self.repository.get_category(category_id)
        if not category:
            raise NotFoundError("Categoría no encontrada")

        products = self.repository.get_category_products(category_id)
        return CategoryDetail(
            **CategoryResponse.model_validate(category).model_dump(),
            productos=[ProductResponse.model_validate(p) for p in products]
        )

    def create_category(self, data: CategoryCreate) -> Dict[str, Any]:
        if self.repository.category_name_in_use(data.nombre_categoria):
            raise ConflictError("Ya existe una categoría con ese nombre")

        category = self.repository.create_category(data.model_dump())
        return {
            "mensaje": "Categoría creada exitosamente",
            "id_categoria": category.id_categoria,
            "nombre_categoria": category.nombre_categoria
        }

    def update_category(self, category_id: int, data: CategoryCreate) -> Dict[str, Any]:
        if not self.repository.get_category(category_id):
            raise NotFoundError("Categoría no encontrada")

        if self.repository.category_name_in_use(data.nombre_categoria, exclude_id=category_id):
            raise ConflictError("El nombre ya está en uso por otra categoría")

        self.repository.update_category(category_id, data.model_dump())
        return {"mensaje": "Categoría actualizada exitosamente", "id_categoria": category_id}

    def delete_category(self, category_id: int) -> Dict[str, Any]:
        total = self.repository.count_category_products(category_id)
        if total > 0:
            raise ConflictError(
                "No se puede eliminar la categoría porque tiene productos asociados",
                productos_asociados=total,
                sugerencia="Reasigne los productos a otra categoría antes de eliminar"
            )

        if not self.repository.delete_category(category_id):
            raise NotFoundError("Categoría no encontrada")

        return {"mensaje": "Categoría eliminada exitosamente", "id_categoria": category_id}
