from sqlalchemy import (
    Column, Integer, String, Boolean, Date, DateTime, Text, ForeignKey, Numeric,
    Computed
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.config.database import Base

class TimestampMixin:
    """Mixin para timestamps automáticos"""
    created_at = Column(DateTime, server_default=func.current_timestamp())
    updated_at = Column(DateTime, server_default=func.current_timestamp(), onupdate=func.current_timestamp())

# ===== USUARIOS Y ROLES =====

class Role(Base):
    """Modelo de Rol - EXACTO A BD"""
    __tablename__ = "roles"

    id_rol = Column(Integer, primary_key=True, index=True)
    nombre_rol = Column(String(50), unique=True, nullable=False)
    descripcion = Column(String(255))

    usuarios = relationship("User", back_populates="rol")

class User(Base, TimestampMixin):
    """Modelo de Usuario - EXACTO A BD"""
    __tablename__ = "usuarios"

    id_usuario = Column(Integer, primary_key=True, index=True)
    usuario = Column(String(100), unique=True, nullable=False)
    password = Column(String(255), nullable=False)
    id_rol = Column(Integer, ForeignKey("roles.id_rol"), nullable=False)
    activo = Column(Boolean, default=True, nullable=False)

    # Relationships
    rol = relationship("Role", back_populates="usuarios")
    cotizaciones = relationship("Quotation", back_populates="usuario")

    @property
    def nombre_rol(self):
        return self.rol.nombre_rol if self.rol else None

    @property
    def rol_descripcion(self):
        return self.rol.descripcion if self.rol else None

# ===== CLIENTES =====

class Client(Base, TimestampMixin):
    """Modelo de Cliente (hospitales, clínicas, organismos públicos)"""
    __tablename__ = "clientes"

    id_cliente = Column(Integer, primary_key=True, index=True)
    rut = Column(String(12), unique=True, nullable=False, index=True)
    nombre = Column(String(255), nullable=False)
    correo = Column(String(255), unique=True)
    telefono = Column(String(50))
    direccion = Column(Text)

    cotizaciones = relationship("Quotation", back_populates="cliente")

# ===== CATÁLOGO =====

class Category(Base):
    """Modelo de Categoría de Producto - EXACTO A BD"""
    __tablename__ = "categoriaproducto"

    id_categoria = Column(Integer, primary_key=True, index=True)
    nombre_categoria = Column(String(100), unique=True, nullable=False)
    descripcion = Column(Text)

    productos = relationship("Product", back_populates="categoria")

class Product(Base, TimestampMixin):
    """Modelo de Producto (instrumental quirúrgico)"""
    __tablename__ = "productos"

    id_producto = Column(Integer, primary_key=True, index=True)
    codigo = Column(String(50), unique=True, nullable=False, index=True)
    nombre = Column(String(255), nullable=False)
    descripcion = Column(Text)
    precio = Column(Numeric(12, 2), nullable=False)
    id_categoria = Column(Integer, ForeignKey("categoriaproducto.id_categoria"))
    stock = Column(Integer, default=0, nullable=False)
    activo = Column(Boolean, default=True, nullable=False)

    categoria = relationship("Category", back_populates="productos")

    @property
    def nombre_categoria(self):
        return self.categoria.nombre_categoria if self.categoria else None

# ===== COTIZACIONES =====

class Quotation(Base, TimestampMixin):
    """Modelo de Cotización - total = suma de subtotales del detalle"""
    __tablename__ = "cotizaciones"

    id_cotizacion = Column(Integer, primary_key=True, index=True)
    fecha_emision = Column(Date, nullable=False, index=True)
    id_cliente = Column(Integer, ForeignKey("clientes.id_cliente"), nullable=False, index=True)
    id_usuario = Column(Integer, ForeignKey("usuarios.id_usuario"), nullable=False)
    estado = Column(String(20), default="pendiente", nullable=False, index=True)
    total = Column(Numeric(14, 2), default=0, nullable=False)
    observaciones = Column(Text)

    # Relationships
    cliente = relationship("Client", back_populates="cotizaciones")
    usuario = relationship("User", back_populates="cotizaciones")
    detalles = relationship(
        "QuotationItem",
        back_populates="cotizacion",
        cascade="all, delete-orphan",
        order_by="QuotationItem.id_detalle"
    )
    despacho = relationship("Shipment", back_populates="cotizacion", uselist=False)

class QuotationItem(Base):
    """Detalle de cotización - subtotal calculado por la base de datos"""
    __tablename__ = "detallecotizacion"

    id_detalle = Column(Integer, primary_key=True, index=True)
    id_cotizacion = Column(
        Integer,
        ForeignKey("cotizaciones.id_cotizacion", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    id_producto = Column(Integer, ForeignKey("productos.id_producto"), nullable=False, index=True)
    cantidad = Column(Integer, nullable=False)
    precio_unitario = Column(Numeric(12, 2), nullable=False)
    descuento = Column(Numeric(12, 2), default=0, nullable=False)
    subtotal = Column(
        Numeric(14, 2),
        Computed("cantidad * precio_unitario - descuento", persisted=True)
    )

    cotizacion = relationship("Quotation", back_populates="detalles")
    producto = relationship("Product")

# ===== DESPACHOS =====

class Shipment(Base, TimestampMixin):
    """Modelo de Despacho - a lo más un despacho por cotización"""
    __tablename__ = "despacho"

    id_despacho = Column(Integer, primary_key=True, index=True)
    id_cotizacion = Column(
        Integer,
        ForeignKey("cotizaciones.id_cotizacion"),
        unique=True,
        nullable=False
    )
    fecha_envio = Column(Date, nullable=False, index=True)
    fecha_entrega_estimada = Column(Date)
    fecha_entrega_real = Column(Date)
    direccion_envio = Column(Text, nullable=False)
    estado = Column(String(20), default="preparando", nullable=False, index=True)
    tracking_number = Column(String(100))
    observaciones = Column(Text)

    cotizacion = relationship("Quotation", back_populates="despacho")
