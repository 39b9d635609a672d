import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from errors import NotFoundError, StorageFailure, ValidationFailure
from order_status import OrderStatus
from repositories.partial_orders_repository import (
    delete_by_field,
    delete_partial_order as repo_delete_partial_order,
    fetch_partial_orders,
    insert_partial_order,
    upsert_by_device,
)

logger = logging.getLogger("profit-first")

# Places older storefront builds put the customer's phone in a draft.
PHONE_FIELD_PATHS = (
    ("phone",),
    ("number",),
    ("customer", "phone"),
    ("customer_info", "phone"),
    ("customerInfo", "phone"),
)


def extract_phone(data: Dict[str, Any]) -> Optional[str]:
    for path in PHONE_FIELD_PATHS:
        value: Any = data
        for key in path:
            if not isinstance(value, dict):
                value = None
                break
            value = value.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def save_partial_order(payload: Dict[str, Any]) -> Dict[str, Any]:
    device_id = str(payload.get("device_id") or "").strip()
    if not device_id:
        raise ValidationFailure("device_id is required", code="device_id_missing")
    data = {key: value for key, value in payload.items() if key != "device_id"}
    record = {
        "device_id": device_id,
        "phone": extract_phone(data),
        "data": data,
        "status": OrderStatus.ABANDONED.value,
        "moved_from_active": False,
        "last_updated": _now(),
    }
    try:
        return await asyncio.to_thread(upsert_by_device, record)
    except RuntimeError as exc:  # pragma: no cover - network/database error
        raise StorageFailure("Failed to store partial order") from exc


async def list_partial_orders() -> List[Dict[str, Any]]:
    return await asyncio.to_thread(fetch_partial_orders)


async def delete_partial_order(draft_id: str) -> None:
    deleted = await asyncio.to_thread(repo_delete_partial_order, draft_id)
    if not deleted:
        raise NotFoundError("Partial order not found")


def build_demoted_draft(order: Dict[str, Any]) -> Dict[str, Any]:
    data = {key: value for key, value in order.items() if key != "id"}
    data["status"] = OrderStatus.ABANDONED.value
    data["moved_from_active"] = True
    now = _now()
    # device_id stays inside data: the keyed column belongs to live checkouts.
    return {
        "device_id": None,
        "phone": order.get("phone") or extract_phone(data),
        "data": data,
        "status": OrderStatus.ABANDONED.value,
        "moved_from_active": True,
        "original_order_id": order.get("order_id"),
        "created_at": now,
        "last_updated": now,
    }


def store_demoted_draft(order: Dict[str, Any]) -> Dict[str, Any]:
    return insert_partial_order(build_demoted_draft(order))


def discard_draft(draft_id: str) -> bool:
    return repo_delete_partial_order(draft_id)


def _cleanup_sync(phone: Optional[str], device_id: Optional[str]) -> int:
    removed = 0
    if phone:
        removed += delete_by_field("phone", phone)
    if device_id:
        removed += delete_by_field("device_id", device_id)
    return removed


async def cleanup_for_order(phone: Optional[str], device_id: Optional[str]) -> int:
    try:
        removed = await asyncio.to_thread(_cleanup_sync, phone, device_id)
    except Exception as exc:
        logger.warning("Partial order cleanup failed for %s: %s", phone or device_id, exc)
        return 0
    if removed:
        logger.info("Removed %s partial order(s) for %s", removed, phone or device_id)
    return removed
