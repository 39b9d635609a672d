import asyncio
import logging
import math
from typing import Any

from config import settings
from repositories.counters_repository import (
    ORDER_ID_COUNTER,
    STOCK_COUNTER,
    fetch_counter,
    store_counter,
)
from repositories.orders_repository import count_orders

logger = logging.getLogger("profit-first")

ORDER_ID_OFFSET = 501


def _to_number(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
    elif not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    # "nan", "inf" and "1e400" all parse as floats.
    return number if math.isfinite(number) else None


def resolve_quantity(items: Any) -> int:
    """Number of stock units an order's ``items`` field stands for.

    A list sums each entry's ``quantity`` (entries without a numeric one count
    as 1); a scalar is coerced to a number. Anything that ends up non-positive
    or non-numeric resolves to 1, so every order moves at least one unit.
    """
    if isinstance(items, (list, tuple)):
        total = 0
        for entry in items:
            quantity = _to_number(entry.get("quantity")) if isinstance(entry, dict) else None
            total += int(quantity) if quantity is not None else 1
        return total if total > 0 else 1
    number = _to_number(items)
    if number is None or int(number) <= 0:
        return 1
    return int(number)


def normalize_items(items: Any) -> Any:
    if isinstance(items, (list, tuple)):
        return list(items)
    return resolve_quantity(items)


def read_stock() -> int:
    value = fetch_counter(STOCK_COUNTER)
    return settings.default_stock_quantity if value is None else value


def adjust_stock(delta: int) -> int:
    """Caller must hold the ledger lock."""
    new_value = read_stock() + delta
    store_counter(STOCK_COUNTER, new_value)
    logger.info("Stock adjusted by %s, now %s", delta, new_value)
    return new_value


def allocate_order_id() -> int:
    """Caller must hold the ledger lock."""
    next_id = fetch_counter(ORDER_ID_COUNTER)
    if next_id is None:
        next_id = ORDER_ID_OFFSET + count_orders()
    store_counter(ORDER_ID_COUNTER, next_id + 1)
    return next_id


def ensure_stock_counter() -> int:
    value = fetch_counter(STOCK_COUNTER)
    if value is None:
        value = store_counter(STOCK_COUNTER, settings.default_stock_quantity)
        logger.info("Stock counter initialised to %s", value)
    return value


async def get_stock_quantity() -> int:
    return await asyncio.to_thread(read_stock)
