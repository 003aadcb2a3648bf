# tests/conftest.py
"""
Configuración global para los tests pytest

Cada test recibe una app nueva con su propia base SQLite en memoria, roles y
usuarios sembrados, y tokens JWT listos para usar.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.config.settings import Settings
from app.core.auth.security import create_access_token, get_password_hash
from app.main import create_app
from app.shared.database.models import Role, User, Client, Category, Product

TEST_RUT = "12345678-5"


@pytest.fixture
def settings():
    """Configuración de test: SQLite en memoria y bcrypt rápido"""
    return Settings(
        database_url="sqlite:///:memory:",
        secret_key="test-secret-key",
        bcrypt_rounds=4,
        debug=False,
        _env_file=None
    )


@pytest.fixture
def app(settings):
    application = create_app(settings)
    yield application
    application.state.database.dispose()


@pytest.fixture
def session_factory(app):
    return app.state.database.SessionLocal


@pytest.fixture
def seed(session_factory, settings):
    """Roles, usuarios, un cliente y productos base"""
    with session_factory() as db:
        admin_role = Role(nombre_rol="admin", descripcion="Administrador del sistema")
        seller_role = Role(nombre_rol="vendedor", descripcion="Vendedor")
        db.add_all([admin_role, seller_role])
        db.flush()

        admin = User(
            usuario="admin",
            password=get_password_hash("admin123", settings.bcrypt_rounds),
            id_rol=admin_role.id_rol
        )
        seller = User(
            usuario="vendedor",
            password=get_password_hash("vendedor123", settings.bcrypt_rounds),
            id_rol=seller_role.id_rol
        )
        inactive = User(
            usuario="inactivo",
            password=get_password_hash("inactivo123", settings.bcrypt_rounds),
            id_rol=seller_role.id_rol,
            activo=False
        )
        db.add_all([admin, seller, inactive])

        category = Category(nombre_categoria="Instrumental quirúrgico")
        db.add(category)
        db.flush()

        client = Client(
            rut=TEST_RUT,
            nombre="Hospital Regional",
            correo="compras@hospital.cl",
            telefono="+56 2 2345 6789",
            direccion="Av. Siempre Viva 123"
        )
        scalpel = Product(
            codigo="BIS-001", nombre="Bisturí N°3", precio=Decimal("1000"),
            id_categoria=category.id_categoria, stock=50, activo=True
        )
        scissors = Product(
            codigo="TIJ-003", nombre="Tijera Mayo", precio=Decimal("2500"),
            id_categoria=category.id_categoria, stock=20, activo=True
        )
        forceps = Product(
            codigo="PIN-002", nombre="Pinza Kelly", precio=Decimal("500"),
            id_categoria=category.id_categoria, stock=0, activo=False
        )
        db.add_all([client, scalpel, scissors, forceps])
        db.commit()

        return {
            "admin_role_id": admin_role.id_rol,
            "seller_role_id": seller_role.id_rol,
            "admin_id": admin.id_usuario,
            "seller_id": seller.id_usuario,
            "inactive_id": inactive.id_usuario,
            "category_id": category.id_categoria,
            "client_id": client.id_cliente,
            "scalpel_id": scalpel.id_producto,
            "scissors_id": scissors.id_producto,
            "inactive_product_id": forceps.id_producto
        }


@pytest.fixture
def client(app, seed):
    return TestClient(app)


def _token(settings, user_id, usuario, rol):
    return create_access_token({"id": user_id, "usuario": usuario, "rol": rol}, settings)


@pytest.fixture
def admin_headers(settings, seed):
    return {"Authorization": f"Bearer {_token(settings, seed['admin_id'], 'admin', 'admin')}"}


@pytest.fixture
def seller_headers(settings, seed):
    return {"Authorization": f"Bearer {_token(settings, seed['seller_id'], 'vendedor', 'vendedor')}"}


@pytest.fixture
def quotation_payload(seed):
    """Cotización de 3 bisturíes (1000 c/u) con 100 de descuento"""
    return {
        "id_cliente": seed["client_id"],
        "fecha_emision": "2024-05-10",
        "observaciones": "Licitación pabellón",
        "productos": [
            {"id_producto": seed["scalpel_id"], "cantidad": 3, "descuento": 100}
        ]
    }


@pytest.fixture
def create_quotation(client, seller_headers, quotation_payload):
    """Crear una cotización vía API y retornar su ID"""
    def _create(payload=None):
        response = client.post("/cotizaciones", json=payload or quotation_payload, headers=seller_headers)
        assert response.status_code == 201, response.text
        return response.json()["cotizacion"]["id_cotizacion"]
    return _create


@pytest.fixture
def approved_quotation(client, admin_headers, create_quotation):
    quotation_id = create_quotation()
    response = client.put(
        f"/cotizaciones/{quotation_id}", json={"estado": "aprobada"}, headers=admin_headers
    )
    assert response.status_code == 200, response.text
    return quotation_id
