"""API routers package."""

from shopdesk.api.routers.cash_sessions import router as cash_sessions_router
from shopdesk.api.routers.users import router as users_router
from shopdesk.api.routers.audit_logs import router as audit_logs_router
from shopdesk.api.routers.products import router as products_router
from shopdesk.api.routers.sales import router as sales_router

__all__ = [
    "cash_sessions_router",
    "users_router",
    "audit_logs_router",
    "products_router",
    "sales_router",
]
