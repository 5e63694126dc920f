"""
Authorization tests.

Verifies:
- Requests without a bearer token return 401
- Unknown, revoked or deactivated-user tokens return 403
- Role-restricted routes return 403 for other roles
"""

from datetime import timedelta

import pytest

from granaflux.extensions import db
from granaflux.models import SessionToken
from granaflux.services.session_service import hash_token


# =============================================================================
# UNAUTHENTICATED ACCESS (401)
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/auth/me"),
            ("GET", "/api/users"),
            ("GET", "/api/companies/me"),
            ("GET", "/api/categories"),
            ("GET", "/api/revenues"),
            ("GET", "/api/expenses"),
            ("GET", "/api/products"),
            ("POST", "/api/products/1/stock"),
            ("GET", "/api/clients"),
            ("GET", "/api/sales"),
            ("POST", "/api/sales"),
            ("GET", "/api/commissions"),
            ("GET", "/api/tasks"),
            ("GET", "/api/reports/dashboard"),
        ],
    )
    def test_requires_auth(self, client, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"
        assert resp.get_json()["error"] == "Token de acesso requerido"

    def test_non_bearer_scheme_is_401(self, client):
        resp = client.get("/api/sales", headers={"Authorization": "Basic abc"})
        assert resp.status_code == 401


# =============================================================================
# INVALID TOKENS (403)
# =============================================================================


class TestInvalidTokens:

    def test_unknown_token(self, client):
        resp = client.get("/api/sales", headers={"Authorization": "Bearer not-a-real-token"})
        assert resp.status_code == 403
        assert resp.get_json()["error"] == "Token inválido"

    def test_token_after_logout(self, client, owner_a):
        assert client.post("/api/auth/logout", headers=owner_a["headers"]).status_code == 200
        resp = client.get("/api/auth/me", headers=owner_a["headers"])
        assert resp.status_code == 403

    def test_expired_token(self, client, owner_a):
        session = db.session.query(SessionToken).filter_by(token_hash=hash_token(owner_a["token"])).one()
        session.expires_at = session.created_at - timedelta(minutes=1)
        db.session.commit()

        assert client.get("/api/auth/me", headers=owner_a["headers"]).status_code == 403

    def test_deactivated_user_loses_access(self, client, owner_a, cashier_a):
        resp = client.put(
            f"/api/users/{cashier_a['user']['id']}", json={"isActive": False}, headers=owner_a["headers"]
        )
        assert resp.status_code == 200
        assert resp.get_json()["isActive"] is False

        assert client.get("/api/sales", headers=cashier_a["headers"]).status_code == 403
        login = client.post("/api/auth/login", json={"email": "caixa@empresa-a.com", "password": "segredo123"})
        assert login.status_code == 401


# =============================================================================
# ROLE GATES (403)
# =============================================================================


class TestRoleGates:

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/users"),
            ("POST", "/api/users"),
            ("DELETE", "/api/users/1"),
            ("PUT", "/api/companies/me"),
            ("DELETE", "/api/clients/1"),
            ("PUT", "/api/products/1"),
            ("DELETE", "/api/products/1"),
            ("GET", "/api/commissions/reports/by-user"),
            ("GET", "/api/sales/reports/by-seller"),
            ("POST", "/api/tasks"),
        ],
    )
    def test_cashier_denied(self, client, cashier_a, method, path):
        resp = getattr(client, method.lower())(path, json={}, headers=cashier_a["headers"])
        assert resp.status_code == 403
        assert resp.get_json()["error"] == "Acesso negado"

    @pytest.mark.parametrize(
        "method,path",
        [
            ("POST", "/api/sales"),
            ("POST", "/api/products"),
            ("POST", "/api/products/1/stock"),
        ],
    )
    def test_user_role_denied(self, client, user_a, method, path):
        resp = getattr(client, method.lower())(path, json={}, headers=user_a["headers"])
        assert resp.status_code == 403

    def test_admin_cannot_delete_users(self, client, admin_a, cashier_a):
        resp = client.delete(f"/api/users/{cashier_a['user']['id']}", headers=admin_a["headers"])
        assert resp.status_code == 403

    def test_admin_cannot_change_roles(self, client, admin_a, cashier_a):
        resp = client.put(
            f"/api/users/{cashier_a['user']['id']}", json={"role": "ADMIN"}, headers=admin_a["headers"]
        )
        assert resp.status_code == 403

    def test_owner_can_change_roles(self, client, owner_a, cashier_a):
        resp = client.put(
            f"/api/users/{cashier_a['user']['id']}", json={"role": "ADMIN"}, headers=owner_a["headers"]
        )
        assert resp.status_code == 200
        assert resp.get_json()["role"] == "ADMIN"

    def test_staff_cannot_edit_others(self, client, cashier_a, user_a):
        resp = client.put(f"/api/users/{user_a['user']['id']}", json={"name": "X"}, headers=cashier_a["headers"])
        assert resp.status_code == 403

    def test_owner_role_is_not_assignable(self, client, owner_a):
        resp = client.post("/api/users", headers=owner_a["headers"], json={
            "email": "outro-dono@empresa-a.com", "password": "segredo123", "name": "Outro", "role": "OWNER",
        })
        assert resp.status_code == 400
