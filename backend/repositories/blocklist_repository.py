from typing import Any, Dict, Iterable, List, Optional

import supabase_client

TABLE_NAME = "blocked_users"


def fetch_entries() -> List[Dict[str, Any]]:
    response = (
        supabase_client.get_client()
        .table(TABLE_NAME)
        .select("*")
        .order("blocked_at", desc=True)
        .execute()
    )
    return response.data or []


def fetch_entry(identifier: str) -> Optional[Dict[str, Any]]:
    response = (
        supabase_client.get_client()
        .table(TABLE_NAME)
        .select("*")
        .eq("identifier", identifier)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def any_blocked(identifiers: Iterable[str]) -> bool:
    response = (
        supabase_client.get_client()
        .table(TABLE_NAME)
        .select("id")
        .in_("identifier", list(identifiers))
        .limit(1)
        .execute()
    )
    return bool(response.data)


def insert_entry(record: Dict[str, Any]) -> Dict[str, Any]:
    response = supabase_client.get_client().table(TABLE_NAME).insert(record).execute()
    if not response.data:
        raise RuntimeError("Failed to store blocklist entry")
    return response.data[0]


def delete_entry(identifier: str) -> bool:
    response = (
        supabase_client.get_client()
        .table(TABLE_NAME)
        .delete()
        .eq("identifier", identifier)
        .execute()
    )
    return bool(response.data)
