import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from errors import ConflictError, ForbiddenError, NotFoundError, StorageFailure
from order_status import TERMINAL_STATUSES, OrderStatus
from repositories.orders_repository import (
    count_orders,
    fetch_order,
    fetch_orders,
    find_active_order,
    insert_order,
    update_order,
)
from schemas import OrderCreate
from services.blocklist_service import collect_identifiers, is_banned_sync
from services.inventory_service import allocate_order_id, normalize_items
from services.ledger_lock import ledger_lock
from services.partial_orders_service import cleanup_for_order

logger = logging.getLogger("profit-first")

DEFAULT_CALL_STATUS = "Pending"
SOURCE_WEBSITE = "Website"
SOURCE_MANUAL = "Manual"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _customer_stats(previous_orders: int) -> Dict[str, Any]:
    return {
        "is_returning_customer": previous_orders > 0,
        "total_orders_before_this": previous_orders,
        "customer_type": "Returning" if previous_orders > 0 else "New",
    }


def _build_record(
    payload: OrderCreate,
    *,
    order_id: int,
    previous_orders: int,
    client_ip: Optional[str],
    source: str,
) -> Dict[str, Any]:
    return {
        "order_id": order_id,
        "name": payload.name.strip(),
        "phone": payload.phone.strip(),
        "address": _clean(payload.address),
        "device_id": _clean(payload.device_id),
        "ip_address": _clean(client_ip),
        "items": normalize_items(payload.items),
        "price": payload.price,
        "total_value": payload.total_value,
        "shipping_method": payload.shipping_method,
        "shipping_cost": payload.shipping_cost,
        "note": payload.note,
        "source": source,
        "status": OrderStatus.PROCESSING.value,
        "phone_call_status": _clean(payload.phone_call_status) or DEFAULT_CALL_STATUS,
        "customer_stats": _customer_stats(previous_orders),
        "inventory_deducted": False,
        "is_restocked": False,
        "created_at": _now(),
    }


def _intake_sync(
    payload: OrderCreate,
    client_ip: Optional[str],
    *,
    screen: bool,
    source: str,
) -> Dict[str, Any]:
    phone = payload.phone.strip()
    if screen:
        identifiers = collect_identifiers(payload.device_id, phone, client_ip)
        if identifiers and is_banned_sync(identifiers):
            logger.warning("Declined order from blocklisted customer %s", phone)
            raise ForbiddenError("Unable to process this order", code="order_declined")
        if find_active_order(phone, TERMINAL_STATUSES):
            raise ConflictError(
                "An active order already exists for this phone number",
                code="active_order_exists",
            )

    previous_orders = count_orders(phone)
    order_id = allocate_order_id()
    record = _build_record(
        payload,
        order_id=order_id,
        previous_orders=previous_orders,
        client_ip=client_ip,
        source=source,
    )
    try:
        return insert_order(record)
    except RuntimeError as exc:
        raise StorageFailure("Failed to store order") from exc


async def place_order(payload: OrderCreate, client_ip: Optional[str] = None) -> Dict[str, Any]:
    async with ledger_lock:
        row = await asyncio.to_thread(
            _intake_sync, payload, client_ip, screen=True, source=SOURCE_WEBSITE
        )
    logger.info("Order %s placed for %s", row["order_id"], row["phone"])
    await cleanup_for_order(row.get("phone"), row.get("device_id"))
    return row


async def place_manual_order(payload: OrderCreate) -> Dict[str, Any]:
    async with ledger_lock:
        row = await asyncio.to_thread(
            _intake_sync, payload, None, screen=False, source=SOURCE_MANUAL
        )
    logger.info("Manual order %s entered for %s", row["order_id"], row["phone"])
    return row


async def list_orders() -> List[Dict[str, Any]]:
    return await asyncio.to_thread(fetch_orders)


async def get_order(record_id: str) -> Dict[str, Any]:
    order = await asyncio.to_thread(fetch_order, record_id)
    if not order:
        raise NotFoundError("Order not found")
    return order


async def update_order_fields(record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    payload = dict(fields)
    payload["updated_at"] = _now()
    row = await asyncio.to_thread(update_order, record_id, payload)
    if row is None:
        raise NotFoundError("Order not found")
    return row
