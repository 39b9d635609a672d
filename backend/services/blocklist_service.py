import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Set

from errors import ConflictError, NotFoundError, StorageFailure, ValidationFailure
from repositories.blocklist_repository import (
    any_blocked,
    delete_entry,
    fetch_entries,
    fetch_entry,
    insert_entry,
)

logger = logging.getLogger("profit-first")


def collect_identifiers(*values: Optional[str]) -> Set[str]:
    identifiers: Set[str] = set()
    for value in values:
        if value is None:
            continue
        text = str(value).strip()
        if text:
            identifiers.add(text)
    return identifiers


def is_banned_sync(identifiers: Iterable[str]) -> bool:
    candidates = collect_identifiers(*identifiers)
    if not candidates:
        return False
    return any_blocked(candidates)


async def is_banned(identifiers: Iterable[str]) -> bool:
    return await asyncio.to_thread(is_banned_sync, list(identifiers))


async def list_blocked_users() -> List[Dict[str, Any]]:
    return await asyncio.to_thread(fetch_entries)


async def block_identifier(identifier: str, note: Optional[str] = None) -> Dict[str, Any]:
    value = (identifier or "").strip()
    if not value:
        raise ValidationFailure("Identifier is required", code="identifier_missing")
    existing = await asyncio.to_thread(fetch_entry, value)
    if existing:
        raise ConflictError("Identifier is already blocked", code="already_blocked")
    record = {
        "identifier": value,
        "note": note,
        "blocked_at": datetime.now(timezone.utc).isoformat(),
    }
    try:
        row = await asyncio.to_thread(insert_entry, record)
    except RuntimeError as exc:  # pragma: no cover - network/database error
        raise StorageFailure("Failed to store blocklist entry") from exc
    logger.info("Blocked identifier %s", value)
    return row


async def unblock_identifier(identifier: str) -> None:
    value = (identifier or "").strip()
    deleted = await asyncio.to_thread(delete_entry, value)
    if not deleted:
        raise NotFoundError("Identifier is not blocked")
    logger.info("Unblocked identifier %s", value)
