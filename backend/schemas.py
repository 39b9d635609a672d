from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from order_status import OrderStatus

ItemsField = Union[List[Dict[str, Any]], int, float, str, None]


class OrderCreate(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1, description="Customer phone, used for duplicate checks")
    address: Optional[str] = None
    device_id: Optional[str] = None
    items: ItemsField = None
    price: Optional[float] = None
    total_value: Optional[float] = Field(
        default=None, description="Collectable cash-on-delivery amount"
    )
    shipping_method: Optional[str] = None
    shipping_cost: Optional[float] = None
    note: Optional[str] = None
    phone_call_status: Optional[str] = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    order_id: int
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    status: str
    items: ItemsField = None
    total_value: Optional[float] = None
    inventory_deducted: bool = False
    is_restocked: bool = False
    created_at: Optional[str] = None


class OrderPlacedResponse(BaseModel):
    success: bool = True
    message: str = "Order placed"
    order_id: int
    order: OrderResponse


class OrderResult(BaseModel):
    success: bool = True
    order: OrderResponse


class OrderListResponse(BaseModel):
    success: bool = True
    items: List[OrderResponse]


class StatusUpdateRequest(BaseModel):
    status: OrderStatus


class CallStatusUpdateRequest(BaseModel):
    phone_call_status: str = Field(..., min_length=1)


class ShippingMethodUpdateRequest(BaseModel):
    shipping_method: str = Field(..., min_length=1)
    shipping_cost: Optional[float] = None


class PriceUpdateRequest(BaseModel):
    total_value: float
    price: Optional[float] = None


class NoteUpdateRequest(BaseModel):
    note: str = ""


class DemotionResponse(BaseModel):
    success: bool = True
    message: str = "Order moved to abandoned"
    draft_id: str
    restocked_quantity: int


class LocationResponse(BaseModel):
    success: bool = True
    district: str
    thana: str


class InventoryResponse(BaseModel):
    success: bool = True
    quantity: int


class PartialOrderSave(BaseModel):
    model_config = ConfigDict(extra="allow")

    device_id: Optional[str] = None


class PartialOrderResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    device_id: Optional[str] = None
    phone: Optional[str] = None
    status: str
    data: Dict[str, Any] = {}
    moved_from_active: bool = False
    original_order_id: Optional[int] = None
    last_updated: Optional[str] = None


class PartialOrderResult(BaseModel):
    success: bool = True
    draft: PartialOrderResponse


class PartialOrderListResponse(BaseModel):
    success: bool = True
    items: List[PartialOrderResponse]


class BlockedUserCreate(BaseModel):
    identifier: str
    note: Optional[str] = None


class BlockedUserResponse(BaseModel):
    id: str
    identifier: str
    note: Optional[str] = None
    blocked_at: Optional[str] = None


class BlockedUserResult(BaseModel):
    success: bool = True
    entry: BlockedUserResponse


class BlockedUserListResponse(BaseModel):
    success: bool = True
    items: List[BlockedUserResponse]


class BanStatusResponse(BaseModel):
    success: bool = True
    banned: bool


class ExpenseCreate(BaseModel):
    type: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)
    description: Optional[str] = None
    date: Optional[str] = Field(default=None, description="ISO date; defaults to today")


class ExpenseResponse(BaseModel):
    id: str
    type: str
    amount: float
    description: Optional[str] = None
    date: Optional[str] = None
    created_at: Optional[str] = None


class ExpenseResult(BaseModel):
    success: bool = True
    expense: ExpenseResponse


class ExpenseListResponse(BaseModel):
    success: bool = True
    items: List[ExpenseResponse]


class FinanceSummaryResponse(BaseModel):
    success: bool = True
    total_orders: int
    status_counts: Dict[str, int]
    delivered_revenue: float
    pending_value: float
    total_expenses: float
    expenses_by_type: Dict[str, float]
    net_profit: float
    stock_quantity: int


class CourierCreateRequest(BaseModel):
    order_id: str = Field(..., description="Ledger record id of the order to dispatch")


class CourierCreateResponse(BaseModel):
    success: bool = True
    message: str = "Sent to courier successfully"
    consignment_id: str
    tracking_code: Optional[str] = None
    courier_status: Optional[str] = None


class CourierStatusResponse(BaseModel):
    success: bool = True
    courier_status: str
    local_status: str


class MessageResponse(BaseModel):
    success: bool = True
    message: str
