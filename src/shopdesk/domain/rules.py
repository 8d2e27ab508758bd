"""Pure cash-session rules. No I/O; callers persist the results."""

from dataclasses import replace
from datetime import date

from shopdesk.core.timezone import end_of_day, to_local
from shopdesk.domain.models import CashMovement, CashSession, MovementType, SessionStatus


def opened_on(session: CashSession, day: date) -> bool:
    """Check whether the session's open time falls on ``day`` (local calendar)."""
    return to_local(session.open_time).date() == day


def is_stale(session: CashSession, today: date) -> bool:
    """
    Open past the calendar day it was opened in.

    Sessions carrying reopen metadata are exempt: an administrator
    deliberately kept them open.
    """
    if not session.is_open or session.has_reopen_metadata:
        return False
    return to_local(session.open_time).date() < today


def auto_close(session: CashSession) -> CashSession:
    """Closed copy of ``session`` as of 23:59:59.999 of its opening day."""
    return replace(
        session,
        status=SessionStatus.CLOSED,
        close_time=end_of_day(session.open_time),
    )


def reconcile_sessions(sessions: list[CashSession], today: date) -> list[CashSession]:
    """Return ``sessions`` with every stale one replaced by its auto-closed copy."""
    return [auto_close(s) if is_stale(s, today) else s for s in sessions]


def apply_movement(session: CashSession, movement: CashMovement) -> CashSession:
    """Copy of ``session`` with ``movement`` appended and running totals adjusted."""
    if movement.type == MovementType.WITHDRAWAL:
        withdrawals = session.withdrawals + movement.amount
        deposits = session.deposits
    else:
        withdrawals = session.withdrawals
        deposits = session.deposits + movement.amount
    return replace(
        session,
        movements=[*session.movements, movement],
        withdrawals=withdrawals,
        deposits=deposits,
        cash_in_register=session.cash_in_register + movement.signed_amount,
    )
