import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

import steadfast
from config import settings
from errors import ConflictError, NotFoundError, UpstreamFailure
from order_status import COURIER_STATUS_MAP, OrderStatus, is_transition_allowed
from repositories.orders_repository import (
    fetch_order,
    update_by_consignment,
    update_order,
)
from services.ledger_lock import ledger_lock
from services.order_lifecycle_service import apply_transition_locked

logger = logging.getLogger("profit-first")

# Orders with a consignment request in flight. Only touched from the event loop.
_dispatching: Set[str] = set()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def _get_order(record_id: str) -> Dict[str, Any]:
    order = await asyncio.to_thread(fetch_order, record_id)
    if not order:
        raise NotFoundError("Order not found")
    return order


def _record_dispatch_sync(
    record_id: str,
    consignment: steadfast.Consignment,
    strict: bool,
) -> Dict[str, Any]:
    courier_fields = {
        "courier_consignment_id": consignment.consignment_id,
        "courier_tracking_code": consignment.tracking_code,
        "courier_status": consignment.status,
        "courier_updated_at": _now(),
    }
    order = fetch_order(record_id)
    if not order:
        raise NotFoundError("Order not found")
    if order.get("courier_consignment_id"):
        logger.error(
            "Order %s already has consignment %s; dropping %s",
            order.get("order_id"),
            order.get("courier_consignment_id"),
            consignment.consignment_id,
        )
        raise ConflictError("Order already sent to courier", code="already_dispatched")
    if not is_transition_allowed(order.get("status"), OrderStatus.SHIPPED.value, strict=strict):
        # Parcel is with the courier either way; keep the consignment reference.
        logger.warning(
            "Order %s changed to %s while dispatching; status left unchanged",
            order.get("order_id"),
            order.get("status"),
        )
        return update_order(record_id, courier_fields) or order
    return apply_transition_locked(
        order, OrderStatus.SHIPPED.value, strict=strict, extra_fields=courier_fields
    )


async def create_courier_order(record_id: str, *, strict: Optional[bool] = None) -> Dict[str, Any]:
    if strict is None:
        strict = settings.strict_status_transitions
    async with ledger_lock:
        order = await _get_order(record_id)
        if order.get("courier_consignment_id") or record_id in _dispatching:
            raise ConflictError("Order already sent to courier", code="already_dispatched")
        if not is_transition_allowed(order.get("status"), OrderStatus.SHIPPED.value, strict=strict):
            raise ConflictError(
                f"Cannot ship an order in status {order.get('status')}",
                code="illegal_transition",
            )
        _dispatching.add(record_id)

    try:
        invoice = steadfast.build_invoice(order)
        try:
            consignment = await asyncio.to_thread(steadfast.create_consignment, invoice)
        except steadfast.CourierError as exc:
            logger.error(
                "Courier create failed for order %s: %s %s", order.get("order_id"), exc, exc.payload
            )
            raise UpstreamFailure("Courier API error", code="courier_error") from exc

        async with ledger_lock:
            row = await asyncio.to_thread(_record_dispatch_sync, record_id, consignment, strict)
    finally:
        _dispatching.discard(record_id)
    logger.info(
        "Order %s sent to courier as %s", order.get("order_id"), consignment.consignment_id
    )
    return row


def _apply_remote_status_sync(
    record_id: str,
    delivery_status: str,
    strict: bool,
) -> Dict[str, Any]:
    mirror = {"courier_status": delivery_status, "courier_updated_at": _now()}
    order = fetch_order(record_id)
    if not order:
        raise NotFoundError("Order not found")
    target = COURIER_STATUS_MAP.get(delivery_status)
    if target and target != order.get("status"):
        if is_transition_allowed(order.get("status"), target, strict=strict):
            return apply_transition_locked(order, target, strict=strict, extra_fields=mirror)
        logger.warning(
            "Courier reports %s for order %s in status %s; local status kept",
            delivery_status,
            order.get("order_id"),
            order.get("status"),
        )
    return update_order(record_id, mirror) or order


async def check_courier_status(record_id: str, *, strict: Optional[bool] = None) -> Dict[str, Any]:
    if strict is None:
        strict = settings.strict_status_transitions
    order = await _get_order(record_id)
    consignment_id = order.get("courier_consignment_id")
    if not consignment_id:
        raise NotFoundError("No courier data found for this order", code="courier_data_missing")
    try:
        delivery_status = await asyncio.to_thread(steadfast.fetch_delivery_status, consignment_id)
    except steadfast.CourierError as exc:
        logger.error("Courier status check failed for %s: %s %s", consignment_id, exc, exc.payload)
        raise UpstreamFailure("Failed to fetch status from courier", code="courier_error") from exc

    async with ledger_lock:
        row = await asyncio.to_thread(_apply_remote_status_sync, record_id, delivery_status, strict)
    return {"courier_status": delivery_status, "local_status": row.get("status"), "order": row}


async def handle_courier_webhook(payload: Dict[str, Any]) -> bool:
    """Mirror a pushed courier status; the local status is left untouched.

    The courier does not sign its callbacks, so the payload is trusted only
    as far as matching a consignment we created.
    """
    logger.info("Courier webhook received: %s", payload)
    consignment_id = payload.get("consignment_id")
    status = payload.get("status")
    if not consignment_id or not status:
        return False
    updated = await asyncio.to_thread(
        update_by_consignment,
        str(consignment_id),
        {"courier_status": str(status), "courier_updated_at": _now()},
    )
    if not updated:
        logger.warning("Courier webhook for unknown consignment %s", consignment_id)
    return updated
