"""
Pytest fixtures for GranaFlux backend tests.

Every test gets a fresh in-memory database. Tenants are created through the
public registration endpoint so fixtures exercise the same path as clients.
"""

import pytest

from granaflux import create_app
from granaflux.extensions import db

PASSWORD = "segredo123"


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def app():
    """Create application for testing."""
    app = create_app({
        "TESTING": True,
        "ENV": "testing",
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "SQLALCHEMY_TRACK_MODIFICATIONS": False,
        "BCRYPT_ROUNDS": 4,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    """Create test client."""
    return app.test_client()


def _register(client, email: str, company_name: str) -> dict:
    resp = client.post("/api/auth/register", json={
        "email": email,
        "password": PASSWORD,
        "name": f"Dono {company_name}",
        "companyName": company_name,
    })
    assert resp.status_code == 201, resp.get_json()
    body = resp.get_json()
    return {
        "token": body["token"],
        "headers": auth_headers(body["token"]),
        "user": body["user"],
        "company_id": body["user"]["companyId"],
    }


def _add_staff(client, owner: dict, email: str, role: str) -> dict:
    resp = client.post("/api/users", headers=owner["headers"], json={
        "email": email,
        "password": PASSWORD,
        "name": f"{role.title()} {email.split('@')[0]}",
        "role": role,
    })
    assert resp.status_code == 201, resp.get_json()

    login = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert login.status_code == 200, login.get_json()
    token = login.get_json()["token"]
    return {
        "token": token,
        "headers": auth_headers(token),
        "user": login.get_json()["user"],
        "company_id": owner["company_id"],
    }


@pytest.fixture(scope="function")
def owner_a(client):
    """OWNER of Company A (first tenant)."""
    return _register(client, "dono@empresa-a.com", "Empresa A")


@pytest.fixture(scope="function")
def owner_b(client):
    """OWNER of Company B (second tenant)."""
    return _register(client, "dono@empresa-b.com", "Empresa B")


@pytest.fixture(scope="function")
def admin_a(client, owner_a):
    return _add_staff(client, owner_a, "admin@empresa-a.com", "ADMIN")


@pytest.fixture(scope="function")
def cashier_a(client, owner_a):
    return _add_staff(client, owner_a, "caixa@empresa-a.com", "CASHIER")


@pytest.fixture(scope="function")
def user_a(client, owner_a):
    return _add_staff(client, owner_a, "func@empresa-a.com", "USER")


@pytest.fixture(scope="function")
def cashier_b(client, owner_b):
    return _add_staff(client, owner_b, "caixa@empresa-b.com", "CASHIER")


def _create_product(client, owner: dict, *, name: str, stock: int, min_stock: int, price: float) -> dict:
    category = client.post("/api/categories", headers=owner["headers"], json={
        "name": f"Estoque {name}",
        "type": "PRODUCT",
    })
    assert category.status_code == 201, category.get_json()

    resp = client.post("/api/products", headers=owner["headers"], json={
        "name": name,
        "price": price,
        "stock": stock,
        "minStock": min_stock,
        "categoryId": category.get_json()["id"],
    })
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


@pytest.fixture(scope="function")
def product_a(client, owner_a):
    """Product in Company A: stock=5, minStock=2, price=10."""
    return _create_product(client, owner_a, name="Teclado", stock=5, min_stock=2, price=10)


@pytest.fixture(scope="function")
def product_b(client, owner_b):
    """Product in Company B."""
    return _create_product(client, owner_b, name="Monitor", stock=3, min_stock=1, price=500)


@pytest.fixture(scope="function")
def make_product(client):
    def factory(owner, **kwargs):
        return _create_product(client, owner, **kwargs)
    return factory
