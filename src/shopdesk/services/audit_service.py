"""Audit trail writes (fire-and-forget) and cached reads."""

import logging
import uuid
from decimal import Decimal
from typing import Any, Optional

from shopdesk.core.timezone import now_local
from shopdesk.domain.models import (
    AuditAction,
    AuditEntity,
    AuditLogEntry,
    CashRegisterAuditEntry,
)
from shopdesk.repositories.mappers import (
    audit_from_row,
    audit_to_row,
    register_audit_from_row,
    register_audit_to_row,
)
from shopdesk.repositories.protocols import RemoteDataService
from shopdesk.services.background import TaskQueue
from shopdesk.services.cache_service import CacheService
from shopdesk.services.resilience import RemoteCaller

logger = logging.getLogger(__name__)

AUDIT_LOGS_KEY = "audit_logs"
REGISTER_AUDIT_LOGS_KEY = "cash_register_audit_logs"


class AuditService:
    """
    Append-only audit trail.

    Writes never block or fail the business operation that caused them:
    they run on the task queue and failures are only logged.
    """

    def __init__(
        self,
        remote: RemoteDataService,
        cache: CacheService,
        tasks: TaskQueue,
        call: Optional[RemoteCaller] = None,
    ):
        self._remote = remote
        self._cache = cache
        self._tasks = tasks
        self._call = call or RemoteCaller()

    def add_audit_log(
        self,
        user_id: str,
        user_name: str,
        action: AuditAction,
        entity: AuditEntity,
        entity_id: str,
        details: str = "",
    ) -> AuditLogEntry:
        """Schedule an audit entry and return it immediately."""
        entry = AuditLogEntry(
            id=str(uuid.uuid4()),
            timestamp=now_local(),
            user_id=user_id,
            user_name=user_name,
            action=action,
            entity=entity,
            entity_id=entity_id,
            details=details,
        )
        self._tasks.submit(
            f"audit:{entry.action.value}",
            self._write,
            "audit_logs",
            audit_to_row(entry),
            AUDIT_LOGS_KEY,
        )
        return entry

    def add_cash_register_audit(
        self,
        session_id: str,
        user_id: str,
        user_name: str,
        action: AuditAction,
        amount: Optional[Decimal] = None,
        reason: Optional[str] = None,
        movement_type: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> CashRegisterAuditEntry:
        entry = CashRegisterAuditEntry(
            id=str(uuid.uuid4()),
            timestamp=now_local(),
            session_id=session_id,
            user_id=user_id,
            user_name=user_name,
            action=action,
            amount=amount,
            reason=reason,
            movement_type=movement_type,
            metadata=dict(metadata or {}),
        )
        self._tasks.submit(
            f"register-audit:{entry.action.value}",
            self._write,
            "cash_register_audit_logs",
            register_audit_to_row(entry),
            REGISTER_AUDIT_LOGS_KEY,
        )
        return entry

    def get_audit_logs(self) -> list[AuditLogEntry]:
        """All audit entries, newest first."""
        def fetch() -> list[AuditLogEntry]:
            rows = self._call(
                lambda: self._remote.select("audit_logs", order_by="timestamp", descending=True),
                "list audit logs",
            )
            return [audit_from_row(r) for r in rows]

        return self._cache.fetch_with_cache(AUDIT_LOGS_KEY, fetch)

    def get_cash_register_audit_logs(
        self, session_id: Optional[str] = None
    ) -> list[CashRegisterAuditEntry]:
        """Register audit entries, optionally for one session, newest first."""
        filters = {"session_id": session_id} if session_id else None

        def fetch() -> list[CashRegisterAuditEntry]:
            rows = self._call(
                lambda: self._remote.select(
                    "cash_register_audit_logs",
                    filters=filters,
                    order_by="timestamp",
                    descending=True,
                ),
                "list cash register audit logs",
            )
            return [register_audit_from_row(r) for r in rows]

        key = f"{REGISTER_AUDIT_LOGS_KEY}_{session_id or 'all'}"
        return self._cache.fetch_with_cache(key, fetch)

    def _write(self, table: str, row: dict[str, Any], cache_key: str) -> None:
        self._call(lambda: self._remote.insert(table, row), f"insert {table}")
        self._cache.clear_cache([cache_key])
