from typing import Any, Dict, List

import supabase_client

TABLE_NAME = "expenses"


def fetch_expenses() -> List[Dict[str, Any]]:
    response = (
        supabase_client.get_client()
        .table(TABLE_NAME)
        .select("*")
        .order("created_at", desc=True)
        .execute()
    )
    return response.data or []


def insert_expense(record: Dict[str, Any]) -> Dict[str, Any]:
    response = supabase_client.get_client().table(TABLE_NAME).insert(record).execute()
    if not response.data:
        raise RuntimeError("Failed to store expense")
    return response.data[0]


def delete_expense(expense_id: str) -> bool:
    response = (
        supabase_client.get_client()
        .table(TABLE_NAME)
        .delete()
        .eq("id", expense_id)
        .execute()
    )
    return bool(response.data)
