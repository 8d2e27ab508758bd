"""Pydantic schemas for API request/response."""

from shopdesk.api.schemas.cash_session import (
    OpenSessionRequest,
    MovementRequest,
    ReopenRequest,
    CashSessionResponse,
    CashSessionDetailResponse,
    SessionSummaryResponse,
)
from shopdesk.api.schemas.user import (
    LoginRequest,
    UserCreateRequest,
    UserResponse,
    AuditLogResponse,
    CashRegisterAuditResponse,
)
from shopdesk.api.schemas.catalog import (
    ProductCreateRequest,
    StockUpdateRequest,
    PurchaseRequest,
    ProductResponse,
    SaleCreateRequest,
    SaleCancelRequest,
    SaleResponse,
)

__all__ = [
    "OpenSessionRequest",
    "MovementRequest",
    "ReopenRequest",
    "CashSessionResponse",
    "CashSessionDetailResponse",
    "SessionSummaryResponse",
    "LoginRequest",
    "UserCreateRequest",
    "UserResponse",
    "AuditLogResponse",
    "CashRegisterAuditResponse",
    "ProductCreateRequest",
    "StockUpdateRequest",
    "PurchaseRequest",
    "ProductResponse",
    "SaleCreateRequest",
    "SaleCancelRequest",
    "SaleResponse",
]
