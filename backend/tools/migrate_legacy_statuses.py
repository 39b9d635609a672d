"""Rewrite legacy order statuses ("Return", "Cancel") to their canonical names.

Run once from the backend directory:

    python -m tools.migrate_legacy_statuses --dry-run
    python -m tools.migrate_legacy_statuses
"""

import sys
from typing import Any, Dict, List

from dotenv import load_dotenv

import supabase_client
from order_status import LEGACY_STATUS_ALIASES
from repositories.orders_repository import TABLE_NAME, update_order


def _fetch_legacy_rows() -> List[Dict[str, Any]]:
    response = (
        supabase_client.get_client()
        .table(TABLE_NAME)
        .select("id, order_id, status")
        .in_("status", list(LEGACY_STATUS_ALIASES))
        .execute()
    )
    return response.data or []


def migrate(dry_run: bool = False) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for row in _fetch_legacy_rows():
        legacy = row["status"]
        canonical = LEGACY_STATUS_ALIASES[legacy]
        print(f"order {row.get('order_id')} ({row['id']}): {legacy} -> {canonical}")
        if not dry_run:
            update_order(row["id"], {"status": canonical})
        counts[legacy] = counts.get(legacy, 0) + 1
    return counts


def main() -> None:
    load_dotenv()
    dry_run = "--dry-run" in sys.argv[1:]
    counts = migrate(dry_run=dry_run)
    total = sum(counts.values())
    verb = "would be rewritten" if dry_run else "rewritten"
    print(f"{total} order(s) {verb}: {counts}")


if __name__ == "__main__":
    main()
