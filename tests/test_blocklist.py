"""Fraud blocklist management and enforcement."""

import pytest


class TestBlocklistManagement:
    def test_add_trims_identifier(self, client, fake_db):
        response = client.post(
            "/api/admin/blocked-users", json={"identifier": "  01711000000 ", "note": "fake COD"}
        )
        assert response.status_code == 201
        entry = response.json()["entry"]
        assert entry["identifier"] == "01711000000"
        assert entry["note"] == "fake COD"
        assert entry["blocked_at"]

    def test_duplicate_identifier_conflicts(self, client):
        client.post("/api/admin/blocked-users", json={"identifier": "device-x"})
        response = client.post("/api/admin/blocked-users", json={"identifier": " device-x"})
        assert response.status_code == 409
        assert response.json()["code"] == "already_blocked"

    def test_match_is_case_sensitive(self, client):
        client.post("/api/admin/blocked-users", json={"identifier": "Device-X"})
        response = client.post("/api/admin/blocked-users", json={"identifier": "device-x"})
        assert response.status_code == 201

    def test_empty_identifier_is_invalid(self, client):
        response = client.post("/api/admin/blocked-users", json={"identifier": "   "})
        assert response.status_code == 400
        assert response.json()["code"] == "identifier_missing"

    def test_list_newest_first(self, client, fake_db):
        fake_db.tables["blocked_users"] = [
            {"id": "1", "identifier": "old", "blocked_at": "2026-01-01T00:00:00+00:00"},
            {"id": "2", "identifier": "new", "blocked_at": "2026-03-01T00:00:00+00:00"},
        ]
        items = client.get("/api/admin/blocked-users").json()["items"]
        assert [item["identifier"] for item in items] == ["new", "old"]

    def test_remove(self, client):
        client.post("/api/admin/blocked-users", json={"identifier": "203.0.113.7"})
        response = client.delete("/api/admin/blocked-users/203.0.113.7")
        assert response.status_code == 200
        assert client.get("/api/admin/blocked-users").json()["items"] == []

    def test_remove_unknown(self, client):
        response = client.delete("/api/admin/blocked-users/unknown")
        assert response.status_code == 404


class TestBlocklistEnforcement:
    @pytest.mark.parametrize(
        "identifier, query",
        [
            ("01711000000", {"phone": "01711000000"}),
            ("device-1", {"device_id": "device-1"}),
            ("198.51.100.4", {"ip": "198.51.100.4"}),
        ],
    )
    def test_ban_status_reports_banned(self, client, identifier, query):
        client.post("/api/admin/blocked-users", json={"identifier": identifier})
        response = client.get("/api/check-ban-status", params=query)
        assert response.json() == {"success": True, "banned": True}

    def test_ban_status_clean(self, client):
        client.post("/api/admin/blocked-users", json={"identifier": "device-9"})
        response = client.get("/api/check-ban-status", params={"device_id": "device-1"})
        assert response.json()["banned"] is False

    def test_ban_status_uses_client_ip(self, client):
        client.post("/api/admin/blocked-users", json={"identifier": "192.0.2.10"})
        response = client.get("/api/check-ban-status", headers={"X-Forwarded-For": "192.0.2.10"})
        assert response.json()["banned"] is True

    @pytest.mark.parametrize(
        "identifier, headers",
        [
            ("01711000000", {}),
            ("device-1", {}),
            ("198.51.100.4", {"X-Forwarded-For": "198.51.100.4"}),
        ],
    )
    def test_order_from_banned_identifier_is_declined(
        self, client, fake_db, identifier, headers
    ):
        client.post("/api/admin/blocked-users", json={"identifier": identifier})
        response = client.post(
            "/api/orders",
            json={"name": "Rahim", "phone": "01711000000", "device_id": "device-1"},
            headers=headers,
        )
        assert response.status_code == 403
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "order_declined"
        assert identifier not in body["message"]
        assert fake_db.rows("orders") == []

    def test_unblocked_customer_can_order_again(self, client, place_order):
        client.post("/api/admin/blocked-users", json={"identifier": "device-1"})
        assert place_order().status_code == 403
        client.delete("/api/admin/blocked-users/device-1")
        assert place_order().status_code == 201
