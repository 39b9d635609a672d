"""Expense ledger and finance summary."""

from services.finance_service import summarize


class TestExpenses:
    def test_add_defaults_date(self, client):
        response = client.post(
            "/api/expenses", json={"type": "Facebook Ads", "amount": 1500, "description": "Boost"}
        )
        assert response.status_code == 201
        expense = response.json()["expense"]
        assert expense["type"] == "Facebook Ads"
        assert expense["amount"] == 1500
        assert expense["date"]
        assert expense["created_at"]

    def test_negative_amount_is_invalid(self, client, fake_db):
        response = client.post("/api/expenses", json={"type": "Ads", "amount": -5})
        assert response.status_code == 422
        assert fake_db.rows("expenses") == []

    def test_list_and_delete(self, client):
        created = client.post(
            "/api/expenses", json={"type": "Packaging", "amount": 200, "date": "2026-10-01"}
        ).json()["expense"]
        items = client.get("/api/expenses").json()["items"]
        assert [item["id"] for item in items] == [created["id"]]
        assert items[0]["date"] == "2026-10-01"
        assert client.delete(f"/api/expenses/{created['id']}").status_code == 200
        assert client.get("/api/expenses").json()["items"] == []

    def test_delete_unknown(self, client):
        assert client.delete("/api/expenses/missing").status_code == 404


class TestFinanceSummary:
    def test_summarize(self):
        orders = [
            {"status": "Delivered", "total_value": 1000},
            {"status": "Delivered", "total_value": "500.5"},
            {"status": "Processing", "total_value": 300},
            {"status": "Shipped", "total_value": None},
            {"status": "Cancelled", "total_value": 700},
        ]
        expenses = [
            {"type": "Ads", "amount": 400},
            {"type": "Ads", "amount": 100},
            {"type": "Packaging", "amount": "50"},
        ]
        summary = summarize(orders, expenses, 990)
        assert summary["total_orders"] == 5
        assert summary["status_counts"] == {
            "Delivered": 2,
            "Processing": 1,
            "Shipped": 1,
            "Cancelled": 1,
        }
        assert summary["delivered_revenue"] == 1500.5
        assert summary["pending_value"] == 300
        assert summary["total_expenses"] == 550
        assert summary["expenses_by_type"] == {"Ads": 500, "Packaging": 50}
        assert summary["net_profit"] == 950.5
        assert summary["stock_quantity"] == 990

    def test_endpoint(self, client, place_order):
        order = place_order(items=2, total_value=1200).json()["order"]
        client.patch(f"/api/orders/{order['id']}", json={"status": "Delivered"})
        client.post("/api/expenses", json={"type": "Ads", "amount": 200})
        body = client.get("/api/finance-summary").json()
        assert body["success"] is True
        assert body["delivered_revenue"] == 1200
        assert body["total_expenses"] == 200
        assert body["net_profit"] == 1000
        assert body["stock_quantity"] == 998
