"""
Revenue and expense tests.

Verifies:
- CRUD through /api/revenues and /api/expenses
- Category type compatibility
- Revenues created by a sale are read-only through the ledger
- Category and date filters
"""

import pytest


def _category_id(client, owner, name):
    categories = client.get("/api/categories", headers=owner["headers"]).get_json()
    return next(c["id"] for c in categories if c["name"] == name)


# =============================================================================
# CRUD
# =============================================================================


class TestLedgerCrud:

    @pytest.mark.parametrize("resource,category", [("revenues", "Serviços"), ("expenses", "Aluguel")])
    def test_create_update_delete(self, client, owner_a, resource, category):
        category_id = _category_id(client, owner_a, category)
        created = client.post(f"/api/{resource}", headers=owner_a["headers"], json={
            "description": "Lançamento", "amount": "199.90",
            "date": "2026-03-10T12:00:00Z", "categoryId": category_id,
        })
        assert created.status_code == 201, created.get_json()
        entry = created.get_json()
        assert entry["amount"] == 199.9
        assert entry["date"] == "2026-03-10T12:00:00Z"
        assert entry["category"]["id"] == category_id
        assert entry["user"]["id"] == owner_a["user"]["id"]

        updated = client.put(
            f"/api/{resource}/{entry['id']}", json={"amount": 250, "notes": "ajuste"}, headers=owner_a["headers"]
        )
        assert updated.status_code == 200
        assert updated.get_json()["amount"] == 250.0
        assert updated.get_json()["description"] == "Lançamento"

        assert client.delete(f"/api/{resource}/{entry['id']}", headers=owner_a["headers"]).status_code == 200
        assert client.get(f"/api/{resource}/{entry['id']}", headers=owner_a["headers"]).status_code == 404

    def test_date_defaults_to_now(self, client, owner_a):
        resp = client.post("/api/expenses", headers=owner_a["headers"], json={
            "description": "Material", "amount": 10, "categoryId": _category_id(client, owner_a, "Fornecedores"),
        })
        assert resp.status_code == 201
        assert resp.get_json()["date"].endswith("Z")

    def test_validation_errors(self, client, owner_a):
        resp = client.post("/api/revenues", headers=owner_a["headers"], json={"amount": -5, "date": "ontem"})
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["error"] == "Dados inválidos"
        assert {e["field"] for e in body["errors"]} == {"description", "amount", "date", "categoryId"}

    def test_any_role_may_record_entries(self, client, user_a, owner_a):
        resp = client.post("/api/expenses", headers=user_a["headers"], json={
            "description": "Café", "amount": 12.5, "categoryId": _category_id(client, owner_a, "Fornecedores"),
        })
        assert resp.status_code == 201


# =============================================================================
# CATEGORY COMPATIBILITY
# =============================================================================


class TestCategoryCompatibility:

    def test_expense_category_rejected_for_revenue(self, client, owner_a):
        resp = client.post("/api/revenues", headers=owner_a["headers"], json={
            "description": "Errada", "amount": 10, "categoryId": _category_id(client, owner_a, "Marketing"),
        })
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Categoria inválida"

    def test_both_category_accepted_for_either(self, client, owner_a):
        both = client.post(
            "/api/categories", json={"name": "Diversos", "type": "BOTH"}, headers=owner_a["headers"]
        ).get_json()
        for resource in ("revenues", "expenses"):
            resp = client.post(f"/api/{resource}", headers=owner_a["headers"], json={
                "description": "Misto", "amount": 1, "categoryId": both["id"],
            })
            assert resp.status_code == 201

    def test_other_company_category_rejected(self, client, owner_a, owner_b):
        resp = client.post("/api/expenses", headers=owner_a["headers"], json={
            "description": "Vazamento", "amount": 10, "categoryId": _category_id(client, owner_b, "Aluguel"),
        })
        assert resp.status_code == 400

    def test_switching_to_incompatible_category_on_update(self, client, owner_a):
        created = client.post("/api/expenses", headers=owner_a["headers"], json={
            "description": "Anúncio", "amount": 80, "categoryId": _category_id(client, owner_a, "Marketing"),
        }).get_json()
        resp = client.put(
            f"/api/expenses/{created['id']}",
            json={"categoryId": _category_id(client, owner_a, "Vendas")},
            headers=owner_a["headers"],
        )
        assert resp.status_code == 400


# =============================================================================
# SALE-DERIVED REVENUE
# =============================================================================


class TestSaleRevenue:

    def test_sale_revenue_is_read_only(self, client, owner_a):
        sale = client.post("/api/sales", headers=owner_a["headers"], json={
            "clientName": "Balcão", "paymentMethod": "PIX", "items": [{"itemName": "Corte", "quantity": 1, "unitPrice": 40}],
        })
        assert sale.status_code == 201

        revenues = client.get("/api/revenues", headers=owner_a["headers"]).get_json()["revenues"]
        from_sale = next(r for r in revenues if r["saleId"] == sale.get_json()["id"])

        update = client.put(f"/api/revenues/{from_sale['id']}", json={"amount": 1}, headers=owner_a["headers"])
        assert update.status_code == 400
        assert update.get_json()["error"] == "Receita gerada por venda não pode ser alterada"

        delete = client.delete(f"/api/revenues/{from_sale['id']}", headers=owner_a["headers"])
        assert delete.status_code == 400


# =============================================================================
# FILTERS
# =============================================================================


class TestLedgerFilters:

    @pytest.fixture
    def entries(self, client, owner_a):
        rent = _category_id(client, owner_a, "Aluguel")
        taxes = _category_id(client, owner_a, "Impostos")
        for description, date, category_id in (
            ("Aluguel jan", "2026-01-05", rent),
            ("Aluguel fev", "2026-02-05", rent),
            ("DAS fev", "2026-02-20", taxes),
        ):
            resp = client.post("/api/expenses", headers=owner_a["headers"], json={
                "description": description, "amount": 100, "date": date, "categoryId": category_id,
            })
            assert resp.status_code == 201
        return {"rent": rent, "taxes": taxes}

    def test_newest_first(self, client, owner_a, entries):
        body = client.get("/api/expenses", headers=owner_a["headers"]).get_json()
        assert [e["description"] for e in body["expenses"]] == ["DAS fev", "Aluguel fev", "Aluguel jan"]
        assert body["pagination"]["total"] == 3

    def test_by_category(self, client, owner_a, entries):
        body = client.get(f"/api/expenses?categoryId={entries['taxes']}", headers=owner_a["headers"]).get_json()
        assert [e["description"] for e in body["expenses"]] == ["DAS fev"]

    def test_by_date_range(self, client, owner_a, entries):
        body = client.get(
            "/api/expenses?startDate=2026-02-01&endDate=2026-02-10", headers=owner_a["headers"]
        ).get_json()
        assert [e["description"] for e in body["expenses"]] == ["Aluguel fev"]

    def test_malformed_date_is_rejected(self, client, owner_a):
        resp = client.get("/api/expenses?startDate=amanha", headers=owner_a["headers"])
        assert resp.status_code == 400
