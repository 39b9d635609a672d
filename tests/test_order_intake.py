"""Order intake: blocklist, duplicate suppression, history snapshot, ids."""

import asyncio

from schemas import OrderCreate
from services import orders_service


class TestPlaceOrder:
    def test_first_order_gets_501(self, place_order, fake_db):
        response = place_order()
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["order_id"] == 501
        order = body["order"]
        assert order["status"] == "Processing"
        assert order["phone_call_status"] == "Pending"
        assert order["inventory_deducted"] is False
        assert order["is_restocked"] is False
        assert order["source"] == "Website"
        assert order["created_at"]
        assert len(fake_db.rows("orders")) == 1

    def test_ids_keep_increasing(self, place_order):
        first = place_order(phone="01711000001").json()["order_id"]
        second = place_order(phone="01711000002").json()["order_id"]
        assert (first, second) == (501, 502)

    def test_scalar_items_are_normalized(self, place_order):
        order = place_order(items="abc").json()["order"]
        assert order["items"] == 1

    def test_non_finite_scalar_items_count_as_one(self, place_order):
        for index, items in enumerate(("nan", "inf", "1e400")):
            response = place_order(phone=f"0171100010{index}", items=items)
            assert response.status_code == 201
            assert response.json()["order"]["items"] == 1

    def test_line_items_are_kept(self, place_order):
        items = [{"name": "Panjabi", "quantity": 2}, {"name": "Cap"}]
        order = place_order(items=items).json()["order"]
        assert order["items"] == items

    def test_client_ip_taken_from_forwarded_header(self, client):
        response = client.post(
            "/api/orders",
            json={"name": "Karim", "phone": "01811000000"},
            headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"},
        )
        assert response.json()["order"]["ip_address"] == "203.0.113.9"

    def test_missing_phone_is_rejected(self, client, fake_db):
        response = client.post("/api/orders", json={"name": "Karim"})
        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "validation_failed"
        assert fake_db.rows("orders") == []


class TestDuplicateActiveOrder:
    def test_second_active_order_conflicts(self, place_order, fake_db):
        assert place_order().status_code == 201
        response = place_order(device_id="device-2")
        assert response.status_code == 409
        assert response.json()["code"] == "active_order_exists"
        assert len(fake_db.rows("orders")) == 1

    def test_new_order_allowed_after_delivery(self, client, place_order):
        first = place_order().json()["order"]
        client.patch(f"/api/orders/{first['id']}", json={"status": "Delivered"})
        response = place_order()
        assert response.status_code == 201
        assert response.json()["order_id"] == 502

    def test_cancelled_and_returned_are_terminal(self, client, place_order):
        first = place_order().json()["order"]
        client.patch(f"/api/orders/{first['id']}", json={"status": "Cancelled"})
        second = place_order()
        assert second.status_code == 201
        second_id = second.json()["order"]["id"]
        client.patch(f"/api/orders/{second_id}", json={"status": "Shipped"})
        client.patch(f"/api/orders/{second_id}", json={"status": "Returned"})
        assert place_order().status_code == 201

    def test_shipped_order_still_blocks(self, client, place_order):
        first = place_order().json()["order"]
        client.patch(f"/api/orders/{first['id']}", json={"status": "Shipped"})
        assert place_order().status_code == 409


class TestCustomerHistory:
    def test_first_order_is_new_customer(self, place_order):
        stats = place_order().json()["order"]["customer_stats"]
        assert stats == {
            "is_returning_customer": False,
            "total_orders_before_this": 0,
            "customer_type": "New",
        }

    def test_snapshot_counts_previous_orders(self, client, place_order):
        first = place_order().json()["order"]
        client.patch(f"/api/orders/{first['id']}", json={"status": "Delivered"})
        stats = place_order().json()["order"]["customer_stats"]
        assert stats["is_returning_customer"] is True
        assert stats["total_orders_before_this"] == 1
        assert stats["customer_type"] == "Returning"

    def test_snapshot_is_not_recomputed(self, client, place_order, fake_db):
        first = place_order().json()["order"]
        client.patch(f"/api/orders/{first['id']}", json={"status": "Delivered"})
        place_order()
        stored = next(row for row in fake_db.rows("orders") if row["id"] == first["id"])
        assert stored["customer_stats"]["total_orders_before_this"] == 0


class TestAbandonedCartCleanup:
    def test_drafts_removed_by_phone_and_device(self, client, place_order, fake_db):
        client.post("/api/partial-orders", json={"device_id": "device-9", "number": "01711000000"})
        client.post("/api/partial-orders", json={"device_id": "device-1", "name": "Rahim"})
        client.post("/api/partial-orders", json={"device_id": "device-7", "phone": "01999999999"})
        assert place_order().status_code == 201
        remaining = [row["device_id"] for row in fake_db.rows("partial_orders")]
        assert remaining == ["device-7"]

    def test_cleanup_failure_does_not_fail_order(self, client, place_order, fake_db):
        client.post("/api/partial-orders", json={"device_id": "device-1"})
        fake_db.fail_next("partial_orders", "delete")
        response = place_order()
        assert response.status_code == 201
        assert len(fake_db.rows("orders")) == 1


class TestStorageFailure:
    def test_failed_insert_returns_generic_error(self, client, place_order, fake_db):
        fake_db.fail_next("orders", "insert")
        response = place_order()
        assert response.status_code == 500
        body = response.json()
        assert body == {"success": False, "code": "storage_failure", "message": "Failed to store order"}


class TestManualOrders:
    def test_manual_order_skips_screening(self, client, place_order):
        client.post("/api/admin/blocked-users", json={"identifier": "01711000000"})
        response = client.post(
            "/api/manual-orders",
            json={"name": "Rahim Uddin", "phone": "01711000000", "items": 2},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["order"]["source"] == "Manual"
        assert body["order_id"] == 501
        second = client.post(
            "/api/manual-orders", json={"name": "Rahim Uddin", "phone": "01711000000"}
        )
        assert second.status_code == 201
        assert second.json()["order"]["customer_stats"]["total_orders_before_this"] == 1


class TestConcurrentIntake:
    def test_parallel_orders_get_distinct_ids(self, fake_db):
        async def _place_many():
            payloads = [
                OrderCreate(name=f"Customer {index}", phone=f"0170000000{index}")
                for index in range(6)
            ]
            return await asyncio.gather(
                *(orders_service.place_order(payload) for payload in payloads)
            )

        rows = asyncio.run(_place_many())
        assert sorted(row["order_id"] for row in rows) == list(range(501, 507))

    def test_parallel_duplicates_accept_only_one(self, fake_db):
        async def _place_same():
            payload = OrderCreate(name="Same", phone="01700000000")
            return await asyncio.gather(
                *(orders_service.place_order(payload) for _ in range(4)),
                return_exceptions=True,
            )

        results = asyncio.run(_place_same())
        accepted = [result for result in results if isinstance(result, dict)]
        assert len(accepted) == 1
        assert len(fake_db.rows("orders")) == 1
