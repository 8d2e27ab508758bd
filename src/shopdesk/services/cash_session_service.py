"""Cash register sessions: opening, movements, closing, reopening and day rollover."""

import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Optional, Protocol

from shopdesk.core.exceptions import (
    AppError,
    AuthorizationError,
    DuplicateSessionError,
    NotFoundError,
    RemoteIntegrityError,
    ValidationError,
)
from shopdesk.core.timezone import now_local, start_of_day, to_local, today_local
from shopdesk.domain.models import (
    SYSTEM_USER_ID,
    AuditAction,
    AuditEntity,
    CashMovement,
    CashSession,
    MovementType,
    SessionStatus,
    User,
)
from shopdesk.domain.rules import apply_movement, is_stale, reconcile_sessions
from shopdesk.repositories.mappers import (
    movement_to_row,
    session_from_row,
    session_to_row,
    to_iso,
)
from shopdesk.repositories.protocols import RemoteDataService
from shopdesk.services.audit_service import AuditService
from shopdesk.services.background import TaskQueue
from shopdesk.services.cache_service import CacheService
from shopdesk.services.resilience import RemoteCaller

logger = logging.getLogger(__name__)

TABLE = "cash_sessions"
CACHE_KEY = "cash_sessions"
SYSTEM_USER_NAME = "Sistema"

MANAGE_ALL_SESSIONS = "can_manage_all_cash_sessions"
REOPEN_SESSION = "can_reopen_cash_session"

_OPEN_ATTEMPTS = 3


class PermissionChecker(Protocol):
    def is_admin(self, user: User) -> bool:
        ...

    def has_permission(self, user: User, grant: str) -> bool:
        ...


@dataclass
class MovementCreate:
    """Input data for a withdrawal or deposit."""

    type: MovementType
    amount: Decimal
    reason: str = ""
    sale_id: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.type, str):
            self.type = MovementType(self.type)
        if not isinstance(self.amount, Decimal):
            self.amount = Decimal(str(self.amount))


@dataclass(frozen=True)
class SessionSummary:
    """Totals of one session plus whether they agree with its movement log."""

    session_id: str
    opening_balance: Decimal
    deposits: Decimal
    withdrawals: Decimal
    cash_in_register: Decimal
    expected_cash: Decimal
    movement_count: int
    is_reconciled: bool


class CashSessionService:
    """
    Service for cash register sessions.

    Enforces one session per user per local calendar day, keeps the running
    balance consistent with the movement log, and closes sessions left open
    past their day unless an administrator reopened them.
    """

    def __init__(
        self,
        remote: RemoteDataService,
        cache: CacheService,
        audit: AuditService,
        permissions: PermissionChecker,
        tasks: TaskQueue,
        call: Optional[RemoteCaller] = None,
    ):
        self._remote = remote
        self._cache = cache
        self._audit = audit
        self._permissions = permissions
        self._tasks = tasks
        self._call = call or RemoteCaller()

    # ===== Reads =====

    def list_sessions(self, current_user_id: Optional[str] = None) -> list[CashSession]:
        """
        Sessions newest first, for one user or everyone.

        Stale sessions come back already closed; the matching storage repair
        runs in the background.
        """
        filters = {"user_id": current_user_id} if current_user_id else None

        def fetch() -> list[CashSession]:
            rows = self._call(
                lambda: self._remote.select(
                    TABLE, filters=filters, order_by="open_time", descending=True
                ),
                "list cash sessions",
            )
            return [session_from_row(r) for r in rows]

        key = f"{CACHE_KEY}_{current_user_id or 'all'}"
        sessions = self._cache.fetch_with_cache(key, fetch)

        today = today_local()
        reconciled = reconcile_sessions(sessions, today)
        stale_ids = [
            before.id for before, after in zip(sessions, reconciled)
            if before.status != after.status
        ]
        if stale_ids:
            logger.info("Auto-closing %d stale cash session(s)", len(stale_ids))
            self._tasks.submit("cash-session-auto-close", self._repair_stale, stale_ids)
        return reconciled

    def get_session(self, session_id: str) -> CashSession:
        session = self._load(session_id)
        return reconcile_sessions([session], today_local())[0]

    def get_today_session(self, user_id: str) -> Optional[CashSession]:
        """The user's session opened today (open or closed), if any."""
        today = today_local()
        start, end = start_of_day(today), start_of_day(today + timedelta(days=1))
        rows = self._call(
            lambda: self._remote.select(
                TABLE,
                filters={
                    "user_id": user_id,
                    "open_time": [
                        ("gte", to_iso(start)),
                        ("lt", to_iso(end)),
                    ],
                },
                order_by="open_time",
                descending=True,
                limit=1,
            ),
            "find today's cash session",
        )
        return session_from_row(rows[0]) if rows else None

    @staticmethod
    def summarize(session: CashSession) -> SessionSummary:
        return SessionSummary(
            session_id=session.id,
            opening_balance=session.opening_balance,
            deposits=session.deposits,
            withdrawals=session.withdrawals,
            cash_in_register=session.cash_in_register,
            expected_cash=session.expected_cash,
            movement_count=len(session.movements),
            is_reconciled=session.is_reconciled,
        )

    # ===== Lifecycle =====

    def open_session(
        self,
        user_id: str,
        opening_balance: Decimal,
        user_name: str = "",
    ) -> CashSession:
        """
        Open today's session for ``user_id``.

        Raises:
            DuplicateSessionError: a session already exists for today.
            ValidationError: negative opening balance.
        """
        opening_balance = Decimal(str(opening_balance))
        if opening_balance < 0:
            raise ValidationError("Opening balance cannot be negative")

        for _ in range(_OPEN_ATTEMPTS):
            self._ensure_no_session_today(user_id)

            total = self._call(lambda: self._remote.count(TABLE), "count cash sessions")
            session = CashSession(
                id=str(uuid.uuid4()),
                user_id=user_id,
                display_id=total + 1,
                open_time=now_local(),
                opening_balance=opening_balance,
                cash_in_register=opening_balance,
            )
            row = session_to_row(session)
            try:
                self._call(lambda: self._remote.insert(TABLE, row), "open cash session")
            except RemoteIntegrityError:
                # Lost a race: either this user's day is taken or the display id is.
                logger.warning("Conflict opening cash session for %s, re-checking", user_id)
                continue
            break
        else:
            self._ensure_no_session_today(user_id)
            raise ValidationError("Could not allocate a cash session number, try again")

        self._cache.clear_cache([CACHE_KEY])
        self._audit.add_audit_log(
            user_id, user_name, AuditAction.CASH_OPEN, AuditEntity.CASH_SESSION,
            session.id, f"Caixa #{session.display_id} aberto com {opening_balance}",
        )
        logger.info("Cash session #%d opened for %s", session.display_id, user_id)
        return session

    def add_movement(self, session_id: str, data: MovementCreate, actor: User) -> CashSession:
        """Record a withdrawal or deposit against an open session."""
        session = self._load_current(session_id)
        self._require_owner_or_admin(session, actor)
        if not session.is_open:
            raise ValidationError("Cannot add a movement to a closed cash session")
        if data.amount <= 0:
            raise ValidationError("Movement amount must be greater than zero")

        movement = CashMovement(
            id=str(uuid.uuid4()),
            type=data.type,
            amount=data.amount,
            reason=data.reason,
            timestamp=now_local(),
            sale_id=data.sale_id,
        )
        updated = apply_movement(session, movement)
        self._call(
            lambda: self._remote.update(TABLE, session_id, {
                "movements": [movement_to_row(m) for m in updated.movements],
                "cash_in_register": updated.cash_in_register,
                "withdrawals": updated.withdrawals,
                "deposits": updated.deposits,
            }),
            "add cash movement",
        )
        self._cache.clear_cache([CACHE_KEY])

        action = (
            AuditAction.CASH_WITHDRAWAL
            if movement.type == MovementType.WITHDRAWAL
            else AuditAction.CASH_SUPPLY
        )
        self._audit.add_audit_log(
            actor.id, actor.name, action, AuditEntity.CASH_SESSION, session_id,
            f"{movement.type.value} {movement.amount}: {movement.reason}",
        )
        self._audit.add_cash_register_audit(
            session_id, actor.id, actor.name, action,
            amount=movement.amount,
            reason=movement.reason,
            movement_type=movement.type.value,
            metadata={
                "movement_id": movement.id,
                "cash_before": str(session.cash_in_register),
                "cash_after": str(updated.cash_in_register),
            },
        )
        return updated

    def close_session(self, session_id: str, actor: User) -> CashSession:
        session = self._load_current(session_id)
        self._require_owner_or_admin(session, actor)
        if not session.is_open:
            raise ValidationError("Cash session is already closed")

        close_time = now_local()
        self._call(
            lambda: self._remote.update(TABLE, session_id, {
                "status": SessionStatus.CLOSED.value,
                "close_time": to_iso(close_time),
            }),
            "close cash session",
        )
        session.status = SessionStatus.CLOSED
        session.close_time = close_time
        self._cache.clear_cache([CACHE_KEY])

        self._audit.add_audit_log(
            actor.id, actor.name, AuditAction.CASH_CLOSE, AuditEntity.CASH_SESSION,
            session_id, f"Caixa #{session.display_id} fechado com {session.cash_in_register}",
        )
        self._audit.add_cash_register_audit(
            session_id, actor.id, actor.name, AuditAction.CASH_CLOSE,
            amount=session.cash_in_register,
            metadata={
                "display_id": session.display_id,
                "owner_id": session.user_id,
                "expected_cash": str(session.expected_cash),
                "withdrawals": str(session.withdrawals),
                "deposits": str(session.deposits),
            },
        )
        return session

    def reopen_session(self, session_id: str, actor: User, reason: str) -> CashSession:
        """
        Reopen a closed session. Administrators or holders of the reopen grant only.

        The reopen metadata exempts the session from automatic day-rollover closing.
        """
        session = self._load_current(session_id)
        if session.is_open:
            raise ValidationError("Cash session is already open")
        if not (
            self._permissions.is_admin(actor)
            or self._permissions.has_permission(actor, REOPEN_SESSION)
        ):
            raise AuthorizationError("Only administrators can reopen a cash session")
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("A reason is required to reopen a cash session")

        reopened_at = now_local()
        previous_close = session.close_time
        self._call(
            lambda: self._remote.update(TABLE, session_id, {
                "status": SessionStatus.OPEN.value,
                "close_time": None,
                "reopened_by": actor.id,
                "reopened_at": to_iso(reopened_at),
                "reopen_reason": reason,
            }),
            "reopen cash session",
        )
        session.status = SessionStatus.OPEN
        session.close_time = None
        session.reopened_by = actor.id
        session.reopened_at = reopened_at
        session.reopen_reason = reason
        self._cache.clear_cache([CACHE_KEY])

        self._audit.add_audit_log(
            actor.id, actor.name, AuditAction.CASH_REOPEN, AuditEntity.CASH_SESSION,
            session_id, f"Caixa #{session.display_id} reaberto: {reason}",
        )
        self._audit.add_cash_register_audit(
            session_id, actor.id, actor.name, AuditAction.CASH_REOPEN,
            reason=reason,
            metadata={
                "display_id": session.display_id,
                "owner_id": session.user_id,
                "previous_close_time": to_iso(previous_close),
            },
        )
        return session

    # ===== Internals =====

    def _load(self, session_id: str) -> CashSession:
        row = self._call(lambda: self._remote.get(TABLE, session_id), "get cash session")
        if row is None:
            raise NotFoundError("Cash session", session_id)
        return session_from_row(row)

    def _load_current(self, session_id: str) -> CashSession:
        """Load a session for mutation, persisting its auto-close first if it went stale."""
        session = self._load(session_id)
        today = today_local()
        if not is_stale(session, today):
            return session
        closed = reconcile_sessions([session], today)[0]
        self._persist_auto_close(closed)
        self._cache.clear_cache([CACHE_KEY])
        return closed

    def _ensure_no_session_today(self, user_id: str) -> None:
        existing = self.get_today_session(user_id)
        if existing is not None:
            raise DuplicateSessionError(
                existing.status.value,
                to_local(existing.open_time).strftime("%d/%m/%Y %H:%M"),
            )

    def _require_owner_or_admin(self, session: CashSession, actor: User) -> None:
        if session.user_id == actor.id:
            return
        if self._permissions.is_admin(actor) or self._permissions.has_permission(
            actor, MANAGE_ALL_SESSIONS
        ):
            return
        raise AuthorizationError("Only the session owner or an administrator can do this")

    def _repair_stale(self, session_ids: list[str]) -> None:
        """Persist auto-closes. Re-reads each row so a concurrent reopen wins."""
        today = today_local()
        try:
            for session_id in session_ids:
                try:
                    current = self._load(session_id)
                    if is_stale(current, today):
                        self._persist_auto_close(reconcile_sessions([current], today)[0])
                except AppError as e:
                    logger.error("Could not auto-close cash session %s: %s", session_id, e)
        finally:
            self._cache.clear_cache([CACHE_KEY])

    def _persist_auto_close(self, closed: CashSession) -> None:
        self._call(
            lambda: self._remote.update(TABLE, closed.id, {
                "status": SessionStatus.CLOSED.value,
                "close_time": to_iso(closed.close_time),
            }),
            "auto-close cash session",
        )
        self._audit.add_audit_log(
            SYSTEM_USER_ID, SYSTEM_USER_NAME, AuditAction.CASH_AUTO_CLOSE,
            AuditEntity.CASH_SESSION, closed.id,
            f"Caixa #{closed.display_id} fechado automaticamente",
        )
