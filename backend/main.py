import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import (
    blocked_users_router,
    courier_router,
    finance_router,
    orders_router,
    partial_orders_router,
)
from config import settings
from errors import OrderServiceError
from services.inventory_service import ensure_stock_counter

logger = logging.getLogger("profit-first")

app = FastAPI(title="Profit First API")

allow_origins = settings.allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(orders_router)
app.include_router(partial_orders_router)
app.include_router(blocked_users_router)
app.include_router(finance_router)
app.include_router(courier_router)


@app.on_event("startup")
async def _on_startup() -> None:
    stock = await asyncio.to_thread(ensure_stock_counter)
    logger.info("Stock on startup: %s", stock)
    if allow_origins == ["*"]:
        logger.warning(
            "CORS is set to allow all origins with credentials; set ALLOWED_ORIGINS to explicit values for production."
        )


@app.exception_handler(OrderServiceError)
async def _service_error_handler(request: Request, exc: OrderServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "code": exc.code, "message": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "code": "validation_failed",
            "message": "; ".join(errors) or "Invalid request",
        },
    )


@app.middleware("http")
async def log_preflight(request, call_next):
    if request.method == "OPTIONS":
        origin = request.headers.get("origin", "")
        logger.info("CORS preflight %s %s origin=%s", request.method, request.url.path, origin)
    response = await call_next(request)
    return response


@app.get("/")
async def root():
    return {"success": True, "message": "Profit First API"}
