from .blocked_users import router as blocked_users_router
from .courier import router as courier_router
from .finance import router as finance_router
from .orders import router as orders_router
from .partial_orders import router as partial_orders_router

__all__ = [
    "blocked_users_router",
    "courier_router",
    "finance_router",
    "orders_router",
    "partial_orders_router",
]
