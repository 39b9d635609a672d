from enum import Enum
from typing import Dict, FrozenSet, Optional


class OrderStatus(str, Enum):
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    RETURNED = "Returned"
    ABANDONED = "Abandoned"


TERMINAL_STATUSES: FrozenSet[str] = frozenset(
    {OrderStatus.DELIVERED.value, OrderStatus.CANCELLED.value, OrderStatus.RETURNED.value}
)

# Statuses that mean the parcel physically left the warehouse.
DEDUCTING_STATUSES: FrozenSet[str] = frozenset(
    {OrderStatus.SHIPPED.value, OrderStatus.DELIVERED.value}
)

STATUS_TIMESTAMP_FIELDS: Dict[str, str] = {
    OrderStatus.SHIPPED.value: "shipped_at",
    OrderStatus.DELIVERED.value: "delivered_at",
    OrderStatus.CANCELLED.value: "cancelled_at",
    OrderStatus.RETURNED.value: "returned_at",
}

VALID_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    OrderStatus.PROCESSING.value: frozenset(
        {OrderStatus.SHIPPED.value, OrderStatus.DELIVERED.value, OrderStatus.CANCELLED.value}
    ),
    OrderStatus.SHIPPED.value: frozenset(
        {OrderStatus.DELIVERED.value, OrderStatus.CANCELLED.value, OrderStatus.RETURNED.value}
    ),
    OrderStatus.DELIVERED.value: frozenset({OrderStatus.RETURNED.value}),
    OrderStatus.CANCELLED.value: frozenset({OrderStatus.PROCESSING.value}),
    OrderStatus.RETURNED.value: frozenset(),
    OrderStatus.ABANDONED.value: frozenset(),
}

# Spellings written by older storefront builds; rewritten by
# tools/migrate_legacy_statuses.py, never accepted at runtime.
LEGACY_STATUS_ALIASES: Dict[str, str] = {
    "Return": OrderStatus.RETURNED.value,
    "Cancel": OrderStatus.CANCELLED.value,
}

COURIER_STATUS_MAP: Dict[str, str] = {
    "delivered": OrderStatus.DELIVERED.value,
    "partial_delivered": OrderStatus.DELIVERED.value,
    "cancelled": OrderStatus.CANCELLED.value,
}


def parse_status(value: str) -> Optional[OrderStatus]:
    try:
        return OrderStatus(value)
    except ValueError:
        return None


def is_transition_allowed(current: Optional[str], target: str, *, strict: bool = True) -> bool:
    if target == OrderStatus.ABANDONED.value:
        return False
    if current == target:
        return True
    if not strict:
        return True
    return target in VALID_TRANSITIONS.get(current or "", frozenset())
