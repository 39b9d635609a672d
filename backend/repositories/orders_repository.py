from typing import Any, Dict, Iterable, List, Optional

import supabase_client

TABLE_NAME = "orders"


def fetch_orders() -> List[Dict[str, Any]]:
    response = (
        supabase_client.get_client()
        .table(TABLE_NAME)
        .select("*")
        .order("created_at", desc=True)
        .execute()
    )
    return response.data or []


def fetch_order(record_id: str) -> Optional[Dict[str, Any]]:
    response = (
        supabase_client.get_client()
        .table(TABLE_NAME)
        .select("*")
        .eq("id", record_id)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def find_active_order(phone: str, terminal_statuses: Iterable[str]) -> Optional[Dict[str, Any]]:
    response = (
        supabase_client.get_client()
        .table(TABLE_NAME)
        .select("*")
        .eq("phone", phone)
        .not_.in_("status", list(terminal_statuses))
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def count_orders(phone: Optional[str] = None) -> int:
    query = supabase_client.get_client().table(TABLE_NAME).select("id", count="exact")
    if phone is not None:
        query = query.eq("phone", phone)
    response = query.execute()
    if response.count is not None:
        return response.count
    return len(response.data or [])


def insert_order(record: Dict[str, Any]) -> Dict[str, Any]:
    response = supabase_client.get_client().table(TABLE_NAME).insert(record).execute()
    if not response.data:
        raise RuntimeError("Failed to store order")
    return response.data[0]


def update_order(record_id: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    response = (
        supabase_client.get_client()
        .table(TABLE_NAME)
        .update(payload)
        .eq("id", record_id)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def update_by_consignment(consignment_id: str, payload: Dict[str, Any]) -> bool:
    response = (
        supabase_client.get_client()
        .table(TABLE_NAME)
        .update(payload)
        .eq("courier_consignment_id", consignment_id)
        .execute()
    )
    return bool(response.data)


def delete_order(record_id: str) -> bool:
    response = (
        supabase_client.get_client()
        .table(TABLE_NAME)
        .delete()
        .eq("id", record_id)
        .execute()
    )
    return bool(response.data)
