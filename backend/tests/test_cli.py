"""
CLI command tests.

Verifies:
- companies create bootstraps a tenant (OWNER, default categories, default sales category)
- companies create reports FAIL for weak passwords and duplicate emails
- users list prints users, optionally filtered by company
- system init-db / reset-db manage the schema
"""

import pytest

from granaflux.extensions import db
from granaflux.models import Category, Company, User
from granaflux.models.auth import ROLE_OWNER


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


def _create_company(runner, email="dono@padaria.com", password="segredo1", name="Padaria Central"):
    return runner.invoke(args=[
        "companies", "create",
        "--name", name,
        "--owner-email", email,
        "--owner-password", password,
        "--owner-name", "Ana Dona",
    ])


# =============================================================================
# COMPANIES CREATE
# =============================================================================


class TestCompaniesCreate:

    def test_creates_company_owner_and_categories(self, runner):
        result = _create_company(runner, email="  Dono@Padaria.com ")
        assert result.exit_code == 0, result.output
        assert "PASS Created company: Padaria Central" in result.output
        assert "PASS Created OWNER: dono@padaria.com" in result.output

        company = db.session.query(Company).filter_by(name="Padaria Central").one()
        owner = db.session.query(User).filter_by(email="dono@padaria.com").one()
        assert owner.company_id == company.id
        assert owner.role == ROLE_OWNER
        assert owner.name == "Ana Dona"

        categories = db.session.query(Category).filter_by(company_id=company.id).all()
        assert len(categories) == 8
        default = db.session.get(Category, company.default_sales_category_id)
        assert default.name == "Vendas"

    def test_created_owner_can_log_in(self, runner, client):
        assert _create_company(runner).exit_code == 0

        resp = client.post("/api/auth/login", json={"email": "dono@padaria.com", "password": "segredo1"})
        assert resp.status_code == 200
        assert resp.get_json()["user"]["role"] == ROLE_OWNER

    def test_weak_password_fails_without_writing(self, runner):
        result = _create_company(runner, password="123")
        assert result.exit_code == 0
        assert "FAIL Senha deve ter pelo menos 6 caracteres" in result.output
        assert "PASS" not in result.output
        assert db.session.query(Company).count() == 0
        assert db.session.query(User).count() == 0

    def test_duplicate_email_fails(self, runner):
        assert _create_company(runner).exit_code == 0

        result = _create_company(runner, name="Outra Padaria")
        assert "FAIL Email já está em uso" in result.output
        assert db.session.query(Company).count() == 1

    def test_missing_required_option(self, runner):
        result = runner.invoke(args=["companies", "create", "--name", "Sem Dono"])
        assert result.exit_code != 0
        assert "--owner-email" in result.output


# =============================================================================
# USERS LIST
# =============================================================================


class TestUsersList:

    def test_lists_users_with_role(self, runner):
        _create_company(runner)

        result = runner.invoke(args=["users", "list"])
        assert result.exit_code == 0, result.output
        assert "dono@padaria.com" in result.output
        assert ROLE_OWNER in result.output

    def test_filter_by_company(self, runner):
        _create_company(runner)
        _create_company(runner, email="dona@mercado.com", name="Mercado Bom")
        mercado = db.session.query(Company).filter_by(name="Mercado Bom").one()

        result = runner.invoke(args=["users", "list", "--company-id", str(mercado.id)])
        assert "dona@mercado.com" in result.output
        assert "dono@padaria.com" not in result.output

    def test_empty(self, runner):
        result = runner.invoke(args=["users", "list", "--company-id", "999"])
        assert "No users found." in result.output


# =============================================================================
# SYSTEM
# =============================================================================


class TestSystemCommands:

    def test_init_db_is_idempotent(self, runner):
        _create_company(runner)

        result = runner.invoke(args=["system", "init-db"])
        assert result.exit_code == 0, result.output
        assert "PASS Database ready." in result.output
        assert db.session.query(User).count() == 1

    def test_reset_db_requires_confirmation(self, runner):
        _create_company(runner)

        result = runner.invoke(args=["system", "reset-db"], input="n\n")
        assert result.exit_code != 0
        assert db.session.query(User).count() == 1

    def test_reset_db_with_yes_drops_data(self, runner):
        _create_company(runner)
        db.session.remove()

        result = runner.invoke(args=["system", "reset-db", "--yes"])
        assert result.exit_code == 0, result.output
        assert "PASS Database reset complete." in result.output
        assert db.session.query(User).count() == 0
        assert db.session.query(Company).count() == 0
