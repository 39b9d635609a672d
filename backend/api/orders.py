from fastapi import APIRouter, BackgroundTasks, Depends, status

from client_ip import get_client_ip
from schemas import (
    CallStatusUpdateRequest,
    DemotionResponse,
    InventoryResponse,
    LocationResponse,
    NoteUpdateRequest,
    OrderCreate,
    OrderListResponse,
    OrderPlacedResponse,
    OrderResult,
    PriceUpdateRequest,
    ShippingMethodUpdateRequest,
    StatusUpdateRequest,
)
from services import orders_service
from services.address_classifier_service import analyze_order_location, enrich_order_location
from services.inventory_service import get_stock_quantity
from services.order_lifecycle_service import (
    move_order_to_abandoned,
    restock_order,
    transition_order_status,
)

router = APIRouter(prefix="/api", tags=["orders"])


def _schedule_enrichment(background_tasks: BackgroundTasks, row: dict) -> None:
    address = (row.get("address") or "").strip()
    if address:
        background_tasks.add_task(enrich_order_location, row["id"], address)


@router.post("/orders", response_model=OrderPlacedResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: OrderCreate,
    background_tasks: BackgroundTasks,
    client_ip: str | None = Depends(get_client_ip),
) -> OrderPlacedResponse:
    row = await orders_service.place_order(payload, client_ip)
    _schedule_enrichment(background_tasks, row)
    return OrderPlacedResponse(order_id=row["order_id"], order=row)


@router.post(
    "/manual-orders", response_model=OrderPlacedResponse, status_code=status.HTTP_201_CREATED
)
async def create_manual_order(
    payload: OrderCreate,
    background_tasks: BackgroundTasks,
) -> OrderPlacedResponse:
    row = await orders_service.place_manual_order(payload)
    _schedule_enrichment(background_tasks, row)
    return OrderPlacedResponse(message="Manual order placed", order_id=row["order_id"], order=row)


@router.get("/orders", response_model=OrderListResponse)
async def read_orders() -> OrderListResponse:
    items = await orders_service.list_orders()
    return OrderListResponse(items=items)


@router.get("/orders/{record_id}", response_model=OrderResult)
async def read_order(record_id: str) -> OrderResult:
    return OrderResult(order=await orders_service.get_order(record_id))


@router.patch("/orders/{record_id}", response_model=OrderResult)
async def update_status(record_id: str, payload: StatusUpdateRequest) -> OrderResult:
    return OrderResult(order=await transition_order_status(record_id, payload.status))


@router.patch("/orders/{record_id}/call-status", response_model=OrderResult)
async def update_call_status(record_id: str, payload: CallStatusUpdateRequest) -> OrderResult:
    row = await orders_service.update_order_fields(
        record_id, {"phone_call_status": payload.phone_call_status.strip()}
    )
    return OrderResult(order=row)


@router.patch("/orders/{record_id}/shipping-method", response_model=OrderResult)
async def update_shipping_method(
    record_id: str,
    payload: ShippingMethodUpdateRequest,
) -> OrderResult:
    fields = {"shipping_method": payload.shipping_method}
    if payload.shipping_cost is not None:
        fields["shipping_cost"] = payload.shipping_cost
    return OrderResult(order=await orders_service.update_order_fields(record_id, fields))


@router.patch("/orders/{record_id}/price", response_model=OrderResult)
async def update_price(record_id: str, payload: PriceUpdateRequest) -> OrderResult:
    fields = {"total_value": payload.total_value}
    if payload.price is not None:
        fields["price"] = payload.price
    return OrderResult(order=await orders_service.update_order_fields(record_id, fields))


@router.patch("/orders/{record_id}/note", response_model=OrderResult)
async def update_note(record_id: str, payload: NoteUpdateRequest) -> OrderResult:
    row = await orders_service.update_order_fields(record_id, {"note": payload.note})
    return OrderResult(order=row)


@router.patch("/orders/{record_id}/restock-return", response_model=OrderResult)
async def restock_return(record_id: str) -> OrderResult:
    return OrderResult(order=await restock_order(record_id))


@router.post("/orders/{record_id}/move-to-abandoned", response_model=DemotionResponse)
async def move_to_abandoned(record_id: str) -> DemotionResponse:
    result = await move_order_to_abandoned(record_id)
    return DemotionResponse(
        draft_id=result["draft"]["id"],
        restocked_quantity=result["restocked_quantity"],
    )


@router.post("/orders/{record_id}/analyze-location", response_model=LocationResponse)
async def analyze_location(record_id: str) -> LocationResponse:
    location = await analyze_order_location(record_id)
    return LocationResponse(**location)


@router.get("/inventory", response_model=InventoryResponse)
async def read_inventory() -> InventoryResponse:
    return InventoryResponse(quantity=await get_stock_quantity())
