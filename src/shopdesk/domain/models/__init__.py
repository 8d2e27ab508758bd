"""Domain models package."""

from shopdesk.domain.models.enums import (
    SessionStatus,
    MovementType,
    SaleStatus,
    AuditAction,
    AuditEntity,
)
from shopdesk.domain.models.cash import CashSession, CashMovement
from shopdesk.domain.models.audit import AuditLogEntry, CashRegisterAuditEntry
from shopdesk.domain.models.user import (
    User,
    AuthUser,
    PermissionProfile,
    ADMIN_PROFILE_ID,
    SYSTEM_USER_ID,
)
from shopdesk.domain.models.catalog import Product, StockHistoryEntry, ParameterItem
from shopdesk.domain.models.sales import Sale, SaleItem, Payment
from shopdesk.domain.models.cache import CacheEntry

__all__ = [
    "SessionStatus",
    "MovementType",
    "SaleStatus",
    "AuditAction",
    "AuditEntity",
    "CashSession",
    "CashMovement",
    "AuditLogEntry",
    "CashRegisterAuditEntry",
    "User",
    "AuthUser",
    "PermissionProfile",
    "ADMIN_PROFILE_ID",
    "SYSTEM_USER_ID",
    "Product",
    "StockHistoryEntry",
    "ParameterItem",
    "Sale",
    "SaleItem",
    "Payment",
    "CacheEntry",
]
