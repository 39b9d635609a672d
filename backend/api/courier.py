from fastapi import APIRouter, Request

from schemas import (
    CourierCreateRequest,
    CourierCreateResponse,
    CourierStatusResponse,
    MessageResponse,
)
from services import courier_service

router = APIRouter(prefix="/api/courier", tags=["courier"])


@router.post("/create-order", response_model=CourierCreateResponse)
async def create_courier_order(payload: CourierCreateRequest) -> CourierCreateResponse:
    row = await courier_service.create_courier_order(payload.order_id)
    return CourierCreateResponse(
        consignment_id=row["courier_consignment_id"],
        tracking_code=row.get("courier_tracking_code"),
        courier_status=row.get("courier_status"),
    )


@router.get("/check-status/{record_id}", response_model=CourierStatusResponse)
async def check_courier_status(record_id: str) -> CourierStatusResponse:
    result = await courier_service.check_courier_status(record_id)
    return CourierStatusResponse(
        courier_status=result["courier_status"],
        local_status=result["local_status"],
    )


@router.post("/webhook", response_model=MessageResponse)
async def courier_webhook(request: Request) -> MessageResponse:
    try:
        payload = await request.json()
    except ValueError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}
    await courier_service.handle_courier_webhook(payload)
    return MessageResponse(message="Webhook received")
