"""Status transitions, restocking and demotion of ledger orders.

Every function that touches the stock counter runs its storage calls while
holding ``ledger_lock``; the ``*_locked`` helpers assume the caller already
does.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from config import settings
from errors import ConflictError, NotFoundError, StorageFailure, ValidationFailure
from order_status import (
    DEDUCTING_STATUSES,
    STATUS_TIMESTAMP_FIELDS,
    OrderStatus,
    is_transition_allowed,
    parse_status,
)
from repositories.orders_repository import delete_order, fetch_order, update_order
from services.inventory_service import adjust_stock, resolve_quantity
from services.ledger_lock import ledger_lock
from services.partial_orders_service import discard_draft, store_demoted_draft

logger = logging.getLogger("profit-first")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _load_order(record_id: str) -> Dict[str, Any]:
    order = fetch_order(record_id)
    if not order:
        raise NotFoundError("Order not found")
    return order


def _update_or_fail(record_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    row = update_order(record_id, payload)
    if row is None:
        raise StorageFailure("Failed to update order")
    return row


def _move_stock_or_revert(
    order: Dict[str, Any],
    payload: Dict[str, Any],
    delta: int,
) -> None:
    try:
        adjust_stock(delta)
    except Exception as exc:
        logger.exception("Stock update for order %s failed, reverting: %s", order["id"], exc)
        update_order(order["id"], {key: order.get(key) for key in payload})
        raise StorageFailure("Failed to update stock") from exc


def apply_transition_locked(
    order: Dict[str, Any],
    target: str,
    *,
    strict: bool,
    extra_fields: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    current = order.get("status")
    if not is_transition_allowed(current, target, strict=strict):
        raise ConflictError(
            f"Cannot move order from {current} to {target}", code="illegal_transition"
        )

    now = _now()
    payload: Dict[str, Any] = {"status": target, "updated_at": now}
    timestamp_field = STATUS_TIMESTAMP_FIELDS.get(target)
    if timestamp_field and not order.get(timestamp_field):
        payload[timestamp_field] = now
    if extra_fields:
        payload.update(extra_fields)

    deduct = target in DEDUCTING_STATUSES and not order.get("inventory_deducted")
    quantity = resolve_quantity(order.get("items"))
    if deduct:
        payload["inventory_deducted"] = True

    row = _update_or_fail(order["id"], payload)
    if deduct:
        _move_stock_or_revert(order, payload, -quantity)
        logger.info("Order %s deducted %s unit(s) on %s", order.get("order_id"), quantity, target)
    if current != target:
        logger.info("Order %s moved %s -> %s", order.get("order_id"), current, target)
    return row


def _transition_sync(record_id: str, target: str, strict: bool) -> Dict[str, Any]:
    order = _load_order(record_id)
    return apply_transition_locked(order, target, strict=strict)


async def transition_order_status(
    record_id: str,
    status: Any,
    *,
    strict: Optional[bool] = None,
) -> Dict[str, Any]:
    value = status.value if isinstance(status, OrderStatus) else str(status)
    target = parse_status(value)
    if target is None:
        raise ValidationFailure(f"Unknown status: {value}", code="unknown_status")
    if strict is None:
        strict = settings.strict_status_transitions
    async with ledger_lock:
        return await asyncio.to_thread(_transition_sync, record_id, target.value, strict)


def _restock_sync(record_id: str, allow_unlinked: bool) -> Dict[str, Any]:
    order = _load_order(record_id)
    if order.get("is_restocked"):
        raise ConflictError("Order was already restocked", code="already_restocked")
    if not order.get("inventory_deducted") and not allow_unlinked:
        raise ConflictError(
            "Order never deducted stock; restock is disabled for it",
            code="restock_not_allowed",
        )
    if not order.get("inventory_deducted"):
        logger.warning("Restocking order %s that never deducted stock", order.get("order_id"))

    quantity = resolve_quantity(order.get("items"))
    payload = {"is_restocked": True, "restocked_at": _now(), "updated_at": _now()}
    row = _update_or_fail(record_id, payload)
    _move_stock_or_revert(order, payload, quantity)
    logger.info("Order %s restocked %s unit(s)", order.get("order_id"), quantity)
    return row


async def restock_order(
    record_id: str,
    *,
    allow_unlinked: Optional[bool] = None,
) -> Dict[str, Any]:
    if allow_unlinked is None:
        allow_unlinked = settings.allow_unlinked_restock
    async with ledger_lock:
        return await asyncio.to_thread(_restock_sync, record_id, allow_unlinked)


def _demote_sync(record_id: str) -> Dict[str, Any]:
    order = _load_order(record_id)
    quantity = resolve_quantity(order.get("items"))
    try:
        draft = store_demoted_draft(order)
    except RuntimeError as exc:
        raise StorageFailure("Failed to store abandoned order") from exc

    try:
        deleted = delete_order(record_id)
    except Exception as exc:
        logger.exception("Deleting order %s during demotion failed: %s", record_id, exc)
        deleted = False
    if not deleted:
        try:
            discarded = discard_draft(draft["id"])
        except Exception as exc:
            logger.exception("Discarding draft %s failed: %s", draft["id"], exc)
            discarded = False
        if not discarded:
            logger.error(
                "Demotion of order %s left draft %s behind; remove it manually",
                record_id,
                draft["id"],
            )
        raise StorageFailure("Failed to move order to abandoned")

    restocked = 0
    if order.get("inventory_deducted") and not order.get("is_restocked"):
        restocked = quantity
        try:
            adjust_stock(restocked)
        except Exception as exc:
            logger.exception(
                "Order %s demoted but %s unit(s) were not restocked: %s",
                order.get("order_id"),
                restocked,
                exc,
            )
            raise StorageFailure("Order moved but stock was not restored") from exc
    logger.info(
        "Order %s moved to abandoned as draft %s (restocked %s)",
        order.get("order_id"),
        draft["id"],
        restocked,
    )
    return {"draft": draft, "restocked_quantity": restocked}


async def move_order_to_abandoned(record_id: str) -> Dict[str, Any]:
    async with ledger_lock:
        return await asyncio.to_thread(_demote_sync, record_id)
