"""Enumerations for domain models."""

from enum import Enum


class SessionStatus(str, Enum):
    """Lifecycle states of a cash session."""

    OPEN = "open"
    CLOSED = "closed"


class MovementType(str, Enum):
    """Cash movements recorded against an open session."""

    WITHDRAWAL = "withdrawal"
    DEPOSIT = "deposit"


class SaleStatus(str, Enum):
    """Sale states."""

    FINALIZED = "finalized"
    CANCELLED = "cancelled"


class AuditAction(str, Enum):
    """Actions recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    SALE_CREATE = "SALE_CREATE"
    SALE_CANCEL = "SALE_CANCEL"
    STOCK_ADJUST = "STOCK_ADJUST"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    CASH_OPEN = "CASH_OPEN"
    CASH_CLOSE = "CASH_CLOSE"
    CASH_REOPEN = "CASH_REOPEN"
    CASH_AUTO_CLOSE = "CASH_AUTO_CLOSE"
    CASH_WITHDRAWAL = "CASH_WITHDRAWAL"
    CASH_SUPPLY = "CASH_SUPPLY"
    BACKUP_RESTORE = "BACKUP_RESTORE"


class AuditEntity(str, Enum):
    """Entity kinds referenced by audit entries."""

    PRODUCT = "PRODUCT"
    CUSTOMER = "CUSTOMER"
    SUPPLIER = "SUPPLIER"
    SALE = "SALE"
    PURCHASE_ORDER = "PURCHASE_ORDER"
    USER = "USER"
    PAYMENT_METHOD = "PAYMENT_METHOD"
    BRAND = "BRAND"
    CATEGORY = "CATEGORY"
    GRADE = "GRADE"
    WARRANTY = "WARRANTY"
    STORAGE_LOCATION = "STORAGE_LOCATION"
    CONDITION = "CONDITION"
    RECEIPT_TERM = "RECEIPT_TERM"
    PERMISSION_PROFILE = "PERMISSION_PROFILE"
    CASH_SESSION = "CASH_SESSION"
    SYSTEM = "SYSTEM"
