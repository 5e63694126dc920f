"""
Tenant isolation tests.

Company A's credentials never see or touch Company B's rows: listings are
filtered by the session's company and direct lookups answer 404.
"""

import pytest


@pytest.fixture
def populated(client, owner_a, owner_b, cashier_a, cashier_b, product_a, product_b):
    """Both companies with a client, a sale, a ledger entry and a task each."""
    data = {}
    for key, owner, cashier, product in (
        ("a", owner_a, cashier_a, product_a),
        ("b", owner_b, cashier_b, product_b),
    ):
        customer = client.post(
            "/api/clients", json={"name": f"Cliente {key.upper()}", "cpf": "12345678901"}, headers=owner["headers"]
        ).get_json()
        sale = client.post("/api/sales", headers=cashier["headers"], json={
            "clientId": customer["id"],
            "paymentMethod": "PIX",
            "items": [{"productId": product["id"], "itemName": product["name"], "quantity": 1, "unitPrice": 10}],
        }).get_json()
        categories = client.get("/api/categories?type=EXPENSE", headers=owner["headers"]).get_json()
        expense = client.post("/api/expenses", headers=owner["headers"], json={
            "description": "Aluguel", "amount": 1000, "categoryId": categories[0]["id"],
        }).get_json()
        task = client.post("/api/tasks", json={"title": f"Tarefa {key}"}, headers=owner["headers"]).get_json()
        data[key] = {"client": customer, "sale": sale, "expense": expense, "task": task, "product": product}
    return data


class TestListingsAreScoped:

    @pytest.mark.parametrize(
        "path,key",
        [
            ("/api/products", "products"),
            ("/api/clients", "clients"),
            ("/api/sales", "sales"),
            ("/api/revenues", "revenues"),
            ("/api/expenses", "expenses"),
            ("/api/commissions", "commissions"),
            ("/api/tasks", "tasks"),
        ],
    )
    def test_listing_only_returns_own_rows(self, client, owner_a, populated, path, key):
        body = client.get(path, headers=owner_a["headers"]).get_json()
        rows = body[key]
        assert len(rows) == 1
        assert body["pagination"]["total"] == 1

    def test_categories_and_users_are_scoped(self, client, owner_a, owner_b, populated):
        a_categories = {c["id"] for c in client.get("/api/categories", headers=owner_a["headers"]).get_json()}
        b_categories = {c["id"] for c in client.get("/api/categories", headers=owner_b["headers"]).get_json()}
        assert a_categories.isdisjoint(b_categories)

        users = client.get("/api/users", headers=owner_a["headers"]).get_json()
        assert {u["companyId"] for u in users} == {owner_a["company_id"]}

    def test_same_cpf_allowed_in_different_companies(self, populated):
        assert populated["a"]["client"]["cpf"] == populated["b"]["client"]["cpf"]


class TestDirectAccessIsBlocked:

    @pytest.mark.parametrize(
        "path_template,key",
        [
            ("/api/products/{id}", "product"),
            ("/api/clients/{id}", "client"),
            ("/api/sales/{id}", "sale"),
            ("/api/expenses/{id}", "expense"),
            ("/api/tasks/{id}", "task"),
        ],
    )
    def test_get_other_company_row_is_404(self, client, owner_a, populated, path_template, key):
        resp = client.get(path_template.format(id=populated["b"][key]["id"]), headers=owner_a["headers"])
        assert resp.status_code == 404

    def test_cannot_modify_other_company_rows(self, client, owner_a, populated):
        b = populated["b"]
        assert client.put(
            f"/api/products/{b['product']['id']}", json={"name": "Hack"}, headers=owner_a["headers"]
        ).status_code == 404
        assert client.post(
            f"/api/products/{b['product']['id']}/stock",
            json={"type": "ADJUSTMENT", "quantity": 0, "reason": "x"},
            headers=owner_a["headers"],
        ).status_code == 404
        assert client.delete(f"/api/clients/{b['client']['id']}", headers=owner_a["headers"]).status_code == 404
        assert client.delete(f"/api/expenses/{b['expense']['id']}", headers=owner_a["headers"]).status_code == 404

    def test_sale_cannot_use_other_company_product_or_client(self, client, cashier_a, populated):
        b = populated["b"]
        resp = client.post("/api/sales", headers=cashier_a["headers"], json={
            "clientName": "X",
            "paymentMethod": "CASH",
            "items": [{"productId": b["product"]["id"], "itemName": "Monitor", "quantity": 1, "unitPrice": 1}],
        })
        assert resp.status_code == 400

        resp = client.post("/api/sales", headers=cashier_a["headers"], json={
            "clientId": b["client"]["id"],
            "paymentMethod": "CASH",
            "items": [{"itemName": "Serviço", "quantity": 1, "unitPrice": 1}],
        })
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Cliente não encontrado"

    def test_reports_are_scoped(self, client, owner_a, populated):
        summary = client.get("/api/reports/dashboard", headers=owner_a["headers"]).get_json()["summary"]
        assert summary["totalRevenues"] == 10.0
        assert summary["totalExpenses"] == 1000.0
