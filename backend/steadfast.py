from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from config import settings

HOME_DELIVERY = 0


class CourierError(Exception):
    def __init__(self, message: str, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.payload = payload or {}


@dataclass
class Consignment:
    consignment_id: str
    tracking_code: Optional[str]
    status: Optional[str]


def _headers() -> Dict[str, str]:
    if not settings.steadfast_api_key or not settings.steadfast_secret_key:
        raise CourierError("Steadfast credentials are not configured")
    return {
        "Api-Key": settings.steadfast_api_key,
        "Secret-Key": settings.steadfast_secret_key,
        "Content-Type": "application/json",
    }


def _request(method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    url = f"{settings.steadfast_base_url.rstrip('/')}/{path.lstrip('/')}"
    try:
        response = requests.request(
            method,
            url,
            json=payload,
            headers=_headers(),
            timeout=settings.courier_timeout_seconds,
        )
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as exc:
        raise CourierError(f"Steadfast request failed: {exc}") from exc
    if not isinstance(data, dict):
        raise CourierError("Unexpected Steadfast response", {"body": data})
    if data.get("status") != 200:
        raise CourierError("Steadfast rejected the request", data)
    return data


def build_invoice(order: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "invoice": str(order.get("order_id")),
        "recipient_name": order.get("name") or "",
        "recipient_phone": order.get("phone") or "",
        "recipient_address": order.get("address") or "",
        "cod_amount": order.get("total_value") or 0,
        "note": order.get("note") or "Handle with care",
        "delivery_type": HOME_DELIVERY,
    }


def create_consignment(invoice: Dict[str, Any]) -> Consignment:
    data = _request("POST", "/create_order", invoice)
    consignment = data.get("consignment") or {}
    consignment_id = consignment.get("consignment_id")
    if consignment_id is None:
        raise CourierError("Steadfast response has no consignment id", data)
    return Consignment(
        consignment_id=str(consignment_id),
        tracking_code=consignment.get("tracking_code"),
        status=consignment.get("status"),
    )


def fetch_delivery_status(consignment_id: str) -> str:
    data = _request("GET", f"/status_by_cid/{consignment_id}")
    status = data.get("delivery_status")
    if not status:
        raise CourierError("Steadfast response has no delivery status", data)
    return str(status)
