"""Domain layer - pure business models and rules with no I/O."""

from shopdesk.domain.models import (
    CashSession,
    CashMovement,
    AuditLogEntry,
    CashRegisterAuditEntry,
    User,
    AuthUser,
    PermissionProfile,
    Product,
    StockHistoryEntry,
    ParameterItem,
    Sale,
    SaleItem,
    Payment,
    CacheEntry,
    SessionStatus,
    MovementType,
    SaleStatus,
    AuditAction,
    AuditEntity,
)
from shopdesk.domain.rules import reconcile_sessions, apply_movement, is_stale, auto_close

__all__ = [
    "CashSession",
    "CashMovement",
    "AuditLogEntry",
    "CashRegisterAuditEntry",
    "User",
    "AuthUser",
    "PermissionProfile",
    "Product",
    "StockHistoryEntry",
    "ParameterItem",
    "Sale",
    "SaleItem",
    "Payment",
    "CacheEntry",
    "SessionStatus",
    "MovementType",
    "SaleStatus",
    "AuditAction",
    "AuditEntity",
    "reconcile_sessions",
    "apply_movement",
    "is_stale",
    "auto_close",
]
