from fastapi import APIRouter

from schemas import (
    MessageResponse,
    PartialOrderListResponse,
    PartialOrderResult,
    PartialOrderSave,
)
from services import partial_orders_service

router = APIRouter(prefix="/api/partial-orders", tags=["partial-orders"])


@router.post("", response_model=PartialOrderResult)
async def save_partial_order(payload: PartialOrderSave) -> PartialOrderResult:
    row = await partial_orders_service.save_partial_order(payload.model_dump())
    return PartialOrderResult(draft=row)


@router.get("", response_model=PartialOrderListResponse)
async def list_partial_orders() -> PartialOrderListResponse:
    items = await partial_orders_service.list_partial_orders()
    return PartialOrderListResponse(items=items)


@router.delete("/{draft_id}", response_model=MessageResponse)
async def delete_partial_order(draft_id: str) -> MessageResponse:
    await partial_orders_service.delete_partial_order(draft_id)
    return MessageResponse(message="Partial order deleted")
