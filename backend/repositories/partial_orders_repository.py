from typing import Any, Dict, List

import supabase_client

TABLE_NAME = "partial_orders"


def fetch_partial_orders() -> List[Dict[str, Any]]:
    response = (
        supabase_client.get_client()
        .table(TABLE_NAME)
        .select("*")
        .order("last_updated", desc=True)
        .execute()
    )
    return response.data or []


def upsert_by_device(record: Dict[str, Any]) -> Dict[str, Any]:
    response = (
        supabase_client.get_client()
        .table(TABLE_NAME)
        .upsert(record, on_conflict="device_id")
        .execute()
    )
    if not response.data:
        raise RuntimeError("Failed to store partial order")
    return response.data[0]


def insert_partial_order(record: Dict[str, Any]) -> Dict[str, Any]:
    response = supabase_client.get_client().table(TABLE_NAME).insert(record).execute()
    if not response.data:
        raise RuntimeError("Failed to store partial order")
    return response.data[0]


def delete_partial_order(draft_id: str) -> bool:
    response = (
        supabase_client.get_client()
        .table(TABLE_NAME)
        .delete()
        .eq("id", draft_id)
        .execute()
    )
    return bool(response.data)


def delete_by_field(column: str, value: str) -> int:
    response = (
        supabase_client.get_client()
        .table(TABLE_NAME)
        .delete()
        .eq(column, value)
        .execute()
    )
    return len(response.data or [])
