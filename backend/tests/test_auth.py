"""
Registration, login and session tests.
"""

from granaflux.extensions import db
from granaflux.models import Category, Company, SessionToken, User


class TestRegister:

    def test_register_creates_company_owner_and_defaults(self, client):
        resp = client.post("/api/auth/register", json={
            "email": "Ana@Loja.com",
            "password": "segredo123",
            "name": "Ana",
            "companyName": "Loja da Ana",
            "cnpj": "11222333000181",
        })
        assert resp.status_code == 201, resp.get_json()
        body = resp.get_json()
        assert body["token"]
        assert body["user"]["role"] == "OWNER"
        assert body["user"]["email"] == "ana@loja.com"
        assert body["user"]["company"]["name"] == "Loja da Ana"

        company = db.session.get(Company, body["user"]["companyId"])
        names = {c.name for c in db.session.query(Category).filter_by(company_id=company.id)}
        assert {"Vendas", "Serviços", "Aluguel"} <= names
        assert company.default_sales_category.name == "Vendas"

    def test_password_is_hashed_and_token_is_not_stored(self, client, owner_a):
        user = db.session.get(User, owner_a["user"]["id"])
        assert user.password_hash != "segredo123"
        assert user.password_hash.startswith("$2")

        stored = [s.token_hash for s in db.session.query(SessionToken).all()]
        assert owner_a["token"] not in stored

    def test_duplicate_email_is_rejected(self, client, owner_a):
        resp = client.post("/api/auth/register", json={
            "email": "dono@empresa-a.com", "password": "segredo123", "name": "X", "companyName": "Outra",
        })
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Email já está em uso"
        assert db.session.query(Company).count() == 1

    def test_validation_errors(self, client):
        resp = client.post("/api/auth/register", json={"email": "invalido", "password": "123"})
        assert resp.status_code == 400
        fields = {e["field"] for e in resp.get_json()["errors"]}
        assert fields == {"email", "password", "name", "companyName"}


class TestLogin:

    def test_login_and_me(self, client, owner_a):
        resp = client.post("/api/auth/login", json={"email": "dono@empresa-a.com", "password": "segredo123"})
        assert resp.status_code == 200
        token = resp.get_json()["token"]
        assert token != owner_a["token"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.get_json()["user"]["id"] == owner_a["user"]["id"]
        assert me.get_json()["user"]["lastLoginAt"] is not None

    def test_wrong_password(self, client, owner_a):
        resp = client.post("/api/auth/login", json={"email": "dono@empresa-a.com", "password": "errada1"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Credenciais inválidas"

    def test_unknown_email(self, client):
        resp = client.post("/api/auth/login", json={"email": "ninguem@x.com", "password": "segredo123"})
        assert resp.status_code == 401


class TestPasswordChange:

    def test_change_own_password_keeps_current_session(self, client, cashier_a):
        other = client.post(
            "/api/auth/login", json={"email": "caixa@empresa-a.com", "password": "segredo123"}
        ).get_json()["token"]

        resp = client.put(
            f"/api/users/{cashier_a['user']['id']}/password",
            json={"currentPassword": "segredo123", "newPassword": "novasenha"},
            headers=cashier_a["headers"],
        )
        assert resp.status_code == 200

        assert client.get("/api/auth/me", headers=cashier_a["headers"]).status_code == 200
        assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {other}"}).status_code == 403
        assert client.post(
            "/api/auth/login", json={"email": "caixa@empresa-a.com", "password": "novasenha"}
        ).status_code == 200

    def test_wrong_current_password(self, client, cashier_a):
        resp = client.put(
            f"/api/users/{cashier_a['user']['id']}/password",
            json={"currentPassword": "nope", "newPassword": "novasenha"},
            headers=cashier_a["headers"],
        )
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Senha atual incorreta"

    def test_short_new_password(self, client, cashier_a):
        resp = client.put(
            f"/api/users/{cashier_a['user']['id']}/password",
            json={"currentPassword": "segredo123", "newPassword": "123"},
            headers=cashier_a["headers"],
        )
        assert resp.status_code == 400
        assert resp.get_json()["errors"][0]["field"] == "newPassword"


class TestUserDeletion:

    def test_owner_deletes_idle_user(self, client, owner_a, user_a):
        resp = client.delete(f"/api/users/{user_a['user']['id']}", headers=owner_a["headers"])
        assert resp.status_code == 200
        assert db.session.get(User, user_a["user"]["id"]) is None

    def test_user_with_sales_is_deactivated(self, client, owner_a, cashier_a):
        client.post("/api/sales", headers=cashier_a["headers"], json={
            "clientName": "C", "paymentMethod": "CASH",
            "items": [{"itemName": "Serviço", "quantity": 1, "unitPrice": 10}],
        })
        resp = client.delete(f"/api/users/{cashier_a['user']['id']}", headers=owner_a["headers"])
        assert resp.status_code == 200

        user = db.session.get(User, cashier_a["user"]["id"])
        assert user is not None
        assert user.is_active is False

    def test_owner_cannot_delete_self(self, client, owner_a):
        resp = client.delete(f"/api/users/{owner_a['user']['id']}", headers=owner_a["headers"])
        assert resp.status_code == 400


class TestHealth:

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "OK"
        assert body["environment"] == "testing"
        assert resp.headers["X-Content-Type-Options"] == "nosniff"

    def test_unknown_route_is_json_404(self, client):
        resp = client.get("/api/nao-existe")
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "Rota não encontrada"
