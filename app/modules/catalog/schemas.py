from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional

# ==================== PRODUCTOS ====================

class ProductCreate(BaseModel):
    codigo: str = Field(..., min_length=1, description="Código único del producto")
    nombre: str = Field(..., min_length=1, description="Nombre del producto")
    descripcion: Optional[str] = None
    precio: float = Field(..., gt=0, description="Precio (mayor a 0)")
    id_categoria: Optional[int] = Field(None, description="Categoría (opcional)")
    stock: int = Field(0, ge=0, description="Stock (mayor o igual a 0)")
    activo: bool = True

class ProductUpdate(BaseModel):
    codigo: Optional[str] = None
    nombre: Optional[str] = None
    descripcion: Optional[str] = None
    precio: Optional[float] = Field(None, gt=0)
    id_categoria: Optional[int] = None
    stock: Optional[int] = Field(None, ge=0)
    activo: Optional[bool] = None

class StockUpdate(BaseModel):
    stock: int = Field(..., ge=0, description="Nuevo stock")

class ActiveUpdate(BaseModel):
    activo: bool

class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_producto: int
    codigo: str
    nombre: str
    descripcion: Optional[str] = None
    precio: float
    id_categoria: Optional[int] = None
    nombre_categoria: Optional[str] = None
    stock: int
    activo: bool

class ProductCreatedResponse(BaseModel):
    mensaje: str
    id_producto: int
    codigo: str
    nombre: str
    precio: float

class ProductMessage(BaseModel):
    mensaje: str
    id_producto: int
    stock: Optional[int] = None
    activo: Optional[bool] = None

# ==================== CATEGORÍAS ====================

class CategoryCreate(BaseModel):
    nombre_categoria: str = Field(..., min_length=1, description="Nombre único de la categoría")
    descripcion: Optional[str] = None

class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_categoria: int
    nombre_categoria: str
    descripcion: Optional[str] = None

class CategoryWithCount(CategoryResponse):
    total_productos: int = 0

class CategoryDetail(CategoryResponse):
    productos: List[ProductResponse] = []

class CategoryCreatedResponse(BaseModel):
    mensaje: str
    id_categoria: int
    nombre_categoria: str

class CategoryMessage(BaseModel):
    mensaje: str
    id_categoria: int
