"""
Financial report tests: dashboard, monthly breakdown and cash flow.
"""

import pytest


def _category_id(client, owner, name):
    categories = client.get("/api/categories", headers=owner["headers"]).get_json()
    return next(c["id"] for c in categories if c["name"] == name)


@pytest.fixture
def ledger(client, owner_a):
    """March 2026: revenues 1000 + 500, expenses 300. April 2026: expense 200."""
    services = _category_id(client, owner_a, "Serviços")
    rent = _category_id(client, owner_a, "Aluguel")
    marketing = _category_id(client, owner_a, "Marketing")

    rows = (
        ("revenues", "Projeto", 1000, "2026-03-03T10:00:00Z", services),
        ("revenues", "Consultoria", 500, "2026-03-20T10:00:00Z", services),
        ("expenses", "Aluguel março", 300, "2026-03-05T10:00:00Z", rent),
        ("expenses", "Campanha", 200, "2026-04-02T10:00:00Z", marketing),
    )
    for resource, description, amount, date, category_id in rows:
        resp = client.post(f"/api/{resource}", headers=owner_a["headers"], json={
            "description": description, "amount": amount, "date": date, "categoryId": category_id,
        })
        assert resp.status_code == 201, resp.get_json()
    return {"services": services, "rent": rent}


# =============================================================================
# DASHBOARD
# =============================================================================


class TestDashboard:

    def test_month_summary(self, client, owner_a, ledger):
        body = client.get("/api/reports/dashboard?month=3&year=2026", headers=owner_a["headers"]).get_json()

        assert body["summary"] == {
            "totalRevenues": 1500.0,
            "totalExpenses": 300.0,
            "netProfit": 1200.0,
            "profitMargin": 80.0,
            "revenuesCount": 2,
            "expensesCount": 1,
        }
        assert [(c["categoryId"], c["total"], c["count"], c["percentage"]) for c in body["revenuesByCategory"]] == [
            (ledger["services"], 1500.0, 2, 100.0)
        ]
        assert [c["categoryId"] for c in body["expensesByCategory"]] == [ledger["rent"]]
        assert len(body["recentTransactions"]) == 3
        assert body["recentTransactions"][0]["description"] == "Consultoria"

    def test_unbounded_without_period(self, client, owner_a, ledger):
        summary = client.get("/api/reports/dashboard", headers=owner_a["headers"]).get_json()["summary"]
        assert summary["totalExpenses"] == 500.0
        assert summary["netProfit"] == 1000.0

    def test_explicit_range(self, client, owner_a, ledger):
        summary = client.get(
            "/api/reports/dashboard?startDate=2026-03-15&endDate=2026-04-30", headers=owner_a["headers"]
        ).get_json()["summary"]
        assert summary["totalRevenues"] == 500.0
        assert summary["totalExpenses"] == 200.0

    def test_empty_company_has_zero_margin(self, client, owner_a):
        summary = client.get("/api/reports/dashboard", headers=owner_a["headers"]).get_json()["summary"]
        assert summary["totalRevenues"] == 0
        assert summary["profitMargin"] == 0

    def test_last_second_of_month_belongs_to_that_month(self, client, owner_a):
        resp = client.post("/api/revenues", headers=owner_a["headers"], json={
            "description": "Fechamento", "amount": 75, "date": "2026-03-31T23:59:59.500000Z",
            "categoryId": _category_id(client, owner_a, "Serviços"),
        })
        assert resp.status_code == 201, resp.get_json()

        march = client.get("/api/reports/dashboard?month=3&year=2026", headers=owner_a["headers"]).get_json()
        april = client.get("/api/reports/dashboard?month=4&year=2026", headers=owner_a["headers"]).get_json()
        assert march["summary"]["totalRevenues"] == 75.0
        assert april["summary"]["totalRevenues"] == 0

    def test_invalid_month(self, client, owner_a):
        resp = client.get("/api/reports/dashboard?month=13&year=2026", headers=owner_a["headers"])
        assert resp.status_code == 400


# =============================================================================
# MONTHLY
# =============================================================================


class TestMonthly:

    def test_twelve_months(self, client, owner_a, ledger):
        body = client.get("/api/reports/monthly?year=2026", headers=owner_a["headers"]).get_json()

        assert body["year"] == 2026
        assert len(body["months"]) == 12
        assert body["months"][0]["monthName"] == "Janeiro"

        march, april = body["months"][2], body["months"][3]
        assert (march["revenues"], march["expenses"], march["balance"]) == (1500.0, 300.0, 1200.0)
        assert (april["revenues"], april["expenses"], april["balance"]) == (0, 200.0, -200.0)
        assert body["totals"] == {"revenues": 1500.0, "expenses": 500.0, "balance": 1000.0}

    def test_other_year_is_empty(self, client, owner_a, ledger):
        body = client.get("/api/reports/monthly?year=2025", headers=owner_a["headers"]).get_json()
        assert all(m["revenues"] == 0 and m["expenses"] == 0 for m in body["months"])


# =============================================================================
# CASH FLOW
# =============================================================================


class TestCashFlow:

    def test_window(self, client, owner_a, ledger):
        body = client.get(
            "/api/reports/cash-flow?startDate=2026-03-01&endDate=2026-03-31T23:59:59Z", headers=owner_a["headers"]
        ).get_json()
        assert body["startDate"] == "2026-03-01T00:00:00Z"
        assert (body["inflow"], body["outflow"], body["net"]) == (1500.0, 300.0, 1200.0)

    def test_sales_feed_inflow(self, client, owner_a):
        client.post("/api/sales", headers=owner_a["headers"], json={
            "clientName": "Balcão", "paymentMethod": "CASH", "items": [{"itemName": "Serviço", "quantity": 2, "unitPrice": 30}],
        })
        body = client.get("/api/reports/cash-flow", headers=owner_a["headers"]).get_json()
        assert body["inflow"] == 60.0
        assert body["startDate"] is None
