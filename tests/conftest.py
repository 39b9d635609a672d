import asyncio
import os

os.environ.setdefault("SUPABASE_URL", "https://project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
os.environ["DEFAULT_STOCK_QUANTITY"] = "1000"
os.environ["STRICT_STATUS_TRANSITIONS"] = "true"
os.environ["ALLOW_UNLINKED_RESTOCK"] = "true"
os.environ["ADDRESS_CLASSIFIER_API_KEY"] = ""
os.environ["STEADFAST_API_KEY"] = ""
os.environ["STEADFAST_SECRET_KEY"] = ""

import pytest
from fastapi.testclient import TestClient

import supabase_client
from services import courier_service, order_lifecycle_service, orders_service

from fake_supabase import FakeSupabase


@pytest.fixture(autouse=True)
def fake_db(monkeypatch):
    db = FakeSupabase()
    monkeypatch.setattr(supabase_client, "_client", db)
    return db


@pytest.fixture(autouse=True)
def fresh_ledger_lock(monkeypatch):
    lock = asyncio.Lock()
    for module in (orders_service, order_lifecycle_service, courier_service):
        monkeypatch.setattr(module, "ledger_lock", lock)
    return lock


@pytest.fixture
def client(fake_db):
    from main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def place_order(client):
    def _place(**overrides):
        payload = {
            "name": "Rahim Uddin",
            "phone": "01711000000",
            "address": "House 12, Road 5, Dhanmondi, Dhaka",
            "device_id": "device-1",
            "items": 1,
            "total_value": 1250,
        }
        payload.update(overrides)
        return client.post("/api/orders", json=payload)

    return _place
