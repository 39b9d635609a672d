import asyncio
from datetime import date, datetime, timezone
from typing import Any, Dict, List

from errors import NotFoundError, StorageFailure
from order_status import OrderStatus
from repositories.expenses_repository import (
    delete_expense as repo_delete_expense,
    fetch_expenses,
    insert_expense,
)
from repositories.orders_repository import fetch_orders
from schemas import ExpenseCreate
from services.inventory_service import read_stock

PENDING_STATUSES = (OrderStatus.PROCESSING.value, OrderStatus.SHIPPED.value)


def _parse_float(value: Any) -> float:
    try:
        if value is None or value == "":
            return 0.0
        return float(value)
    except (TypeError, ValueError):
        return 0.0


async def list_expenses() -> List[Dict[str, Any]]:
    return await asyncio.to_thread(fetch_expenses)


async def add_expense(payload: ExpenseCreate) -> Dict[str, Any]:
    record = {
        "type": payload.type.strip(),
        "amount": payload.amount,
        "description": payload.description,
        "date": payload.date or date.today().isoformat(),
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    try:
        return await asyncio.to_thread(insert_expense, record)
    except RuntimeError as exc:  # pragma: no cover - network/database error
        raise StorageFailure("Failed to store expense") from exc


async def delete_expense(expense_id: str) -> None:
    deleted = await asyncio.to_thread(repo_delete_expense, expense_id)
    if not deleted:
        raise NotFoundError("Expense not found")


def summarize(
    orders: List[Dict[str, Any]],
    expenses: List[Dict[str, Any]],
    stock_quantity: int,
) -> Dict[str, Any]:
    status_counts: Dict[str, int] = {}
    delivered_revenue = 0.0
    pending_value = 0.0
    for order in orders:
        status = str(order.get("status") or "Unknown")
        status_counts[status] = status_counts.get(status, 0) + 1
        value = _parse_float(order.get("total_value"))
        if status == OrderStatus.DELIVERED.value:
            delivered_revenue += value
        elif status in PENDING_STATUSES:
            pending_value += value

    expenses_by_type: Dict[str, float] = {}
    total_expenses = 0.0
    for expense in expenses:
        amount = _parse_float(expense.get("amount"))
        kind = str(expense.get("type") or "Other")
        expenses_by_type[kind] = expenses_by_type.get(kind, 0.0) + amount
        total_expenses += amount

    return {
        "total_orders": len(orders),
        "status_counts": status_counts,
        "delivered_revenue": round(delivered_revenue, 2),
        "pending_value": round(pending_value, 2),
        "total_expenses": round(total_expenses, 2),
        "expenses_by_type": {key: round(value, 2) for key, value in expenses_by_type.items()},
        "net_profit": round(delivered_revenue - total_expenses, 2),
        "stock_quantity": stock_quantity,
    }


async def get_finance_summary() -> Dict[str, Any]:
    orders, expenses, stock_quantity = await asyncio.gather(
        asyncio.to_thread(fetch_orders),
        asyncio.to_thread(fetch_expenses),
        asyncio.to_thread(read_stock),
    )
    return summarize(orders, expenses, stock_quantity)
