import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Dict

import httpx

from config import settings
from errors import NotFoundError, StorageFailure, ValidationFailure
from repositories.orders_repository import fetch_order, update_order

logger = logging.getLogger("profit-first")

UNKNOWN_LOCATION = {"district": "Unknown", "thana": "Manual Check"}

SYSTEM_PROMPT = (
    "You classify Bangladeshi delivery addresses. Reply with a JSON object "
    'containing exactly two string keys: "district" and "thana". Use the '
    "English name of each. If a value cannot be determined, use \"Unknown\"."
)


class AddressClassificationError(Exception):
    pass


def _parse_location(content: str) -> Dict[str, str]:
    text = content.strip()
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise AddressClassificationError(f"Unparsable classifier output: {content!r}") from exc
    if not isinstance(data, dict):
        raise AddressClassificationError("Classifier output is not an object")
    district = str(data.get("district") or "").strip()
    thana = str(data.get("thana") or "").strip()
    if not district or not thana:
        raise AddressClassificationError("Classifier output is missing district or thana")
    return {"district": district, "thana": thana}


async def classify_address(address: str) -> Dict[str, str]:
    if not settings.address_classifier_api_key:
        raise AddressClassificationError("Address classifier is not configured")
    headers = {
        "Authorization": f"Bearer {settings.address_classifier_api_key}",
        "Content-Type": "application/json",
    }
    payload = {
        "model": settings.address_classifier_model,
        "temperature": 0,
        "response_format": {"type": "json_object"},
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": address},
        ],
    }
    try:
        async with httpx.AsyncClient(timeout=settings.address_classifier_timeout_seconds) as client:
            response = await client.post(
                settings.address_classifier_url, headers=headers, json=payload
            )
        response.raise_for_status()
        body = response.json()
        content = body["choices"][0]["message"]["content"]
    except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as exc:
        raise AddressClassificationError(str(exc)) from exc
    return _parse_location(content)


async def resolve_location(address: str) -> Dict[str, str]:
    try:
        return await classify_address(address)
    except AddressClassificationError as exc:
        logger.warning("Address classification failed, using fallback: %s", exc)
        return dict(UNKNOWN_LOCATION)


async def _store_location(record_id: str, location: Dict[str, str]) -> bool:
    payload = {
        "district": location["district"],
        "thana": location["thana"],
        "location_analyzed_at": datetime.now(timezone.utc).isoformat(),
    }
    row = await asyncio.to_thread(update_order, record_id, payload)
    return row is not None


async def enrich_order_location(record_id: str, address: str) -> None:
    try:
        location = await resolve_location(address)
        await _store_location(record_id, location)
    except Exception as exc:  # pragma: no cover - background guard
        logger.exception("Location enrichment for order %s failed: %s", record_id, exc)


async def analyze_order_location(record_id: str) -> Dict[str, str]:
    order = await asyncio.to_thread(fetch_order, record_id)
    if not order:
        raise NotFoundError("Order not found")
    address = str(order.get("address") or "").strip()
    if not address:
        raise ValidationFailure("Order has no address to analyze", code="address_missing")
    location = await resolve_location(address)
    if not await _store_location(record_id, location):
        raise StorageFailure("Failed to store location")
    return location
