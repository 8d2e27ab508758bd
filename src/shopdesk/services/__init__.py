"""Service layer - data access, caching and business rules."""

from shopdesk.services.broadcast import (
    CLEAR_CACHE,
    BroadcastHub,
    CacheBroadcaster,
    LocalBroadcastChannel,
    NullBroadcaster,
)
from shopdesk.services.cache_service import CacheService, DEFAULT_TTL_SECONDS, STATIC_TTL_SECONDS
from shopdesk.services.resilience import (
    RemoteCaller,
    fetch_with_retry,
    is_network_error,
    with_timeout,
)
from shopdesk.services.background import BackgroundTaskQueue, ImmediateTaskQueue, TaskQueue
from shopdesk.services.audit_service import AuditService
from shopdesk.services.cash_session_service import (
    CashSessionService,
    MovementCreate,
    SessionSummary,
)
from shopdesk.services.user_service import UserService, UserCreate, UserUpdate, ProfileUpdate
from shopdesk.services.product_service import ProductService, ProductCreate, PurchaseItem
from shopdesk.services.parameter_service import ParameterService, PARAMETER_ENTITIES
from shopdesk.services.sales_service import SalesService, SaleCreate
from shopdesk.services.backup_service import BackupService, BACKUP_TABLES

__all__ = [
    "CLEAR_CACHE",
    "BroadcastHub",
    "CacheBroadcaster",
    "LocalBroadcastChannel",
    "NullBroadcaster",
    "CacheService",
    "DEFAULT_TTL_SECONDS",
    "STATIC_TTL_SECONDS",
    "RemoteCaller",
    "fetch_with_retry",
    "is_network_error",
    "with_timeout",
    "BackgroundTaskQueue",
    "ImmediateTaskQueue",
    "TaskQueue",
    "AuditService",
    "CashSessionService",
    "MovementCreate",
    "SessionSummary",
    "UserService",
    "UserCreate",
    "UserUpdate",
    "ProfileUpdate",
    "ProductService",
    "ProductCreate",
    "PurchaseItem",
    "ParameterService",
    "PARAMETER_ENTITIES",
    "SalesService",
    "SaleCreate",
    "BackupService",
    "BACKUP_TABLES",
]
