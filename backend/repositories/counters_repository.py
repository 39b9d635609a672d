from typing import Optional

import supabase_client

TABLE_NAME = "counters"

STOCK_COUNTER = "stock"
ORDER_ID_COUNTER = "next_order_id"


def fetch_counter(name: str) -> Optional[int]:
    response = (
        supabase_client.get_client()
        .table(TABLE_NAME)
        .select("*")
        .eq("name", name)
        .limit(1)
        .execute()
    )
    items = response.data or []
    if not items:
        return None
    return int(items[0]["value"])


def store_counter(name: str, value: int) -> int:
    response = (
        supabase_client.get_client()
        .table(TABLE_NAME)
        .upsert({"name": name, "value": value}, on_conflict="name")
        .execute()
    )
    if not response.data:
        raise RuntimeError(f"Failed to store counter {name}")
    return int(response.data[0]["value"])
