from fastapi import APIRouter, status

from schemas import (
    ExpenseCreate,
    ExpenseListResponse,
    ExpenseResult,
    FinanceSummaryResponse,
    MessageResponse,
)
from services import finance_service

router = APIRouter(prefix="/api", tags=["finance"])


@router.get("/finance-summary", response_model=FinanceSummaryResponse)
async def read_finance_summary() -> FinanceSummaryResponse:
    summary = await finance_service.get_finance_summary()
    return FinanceSummaryResponse(**summary)


@router.get("/expenses", response_model=ExpenseListResponse)
async def list_expenses() -> ExpenseListResponse:
    return ExpenseListResponse(items=await finance_service.list_expenses())


@router.post("/expenses", response_model=ExpenseResult, status_code=status.HTTP_201_CREATED)
async def create_expense(payload: ExpenseCreate) -> ExpenseResult:
    return ExpenseResult(expense=await finance_service.add_expense(payload))


@router.delete("/expenses/{expense_id}", response_model=MessageResponse)
async def delete_expense(expense_id: str) -> MessageResponse:
    await finance_service.delete_expense(expense_id)
    return MessageResponse(message="Expense deleted")
