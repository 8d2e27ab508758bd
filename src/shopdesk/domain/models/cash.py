"""Cash session and cash movement domain models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from shopdesk.domain.models.enums import MovementType, SessionStatus


@dataclass(frozen=True)
class CashMovement:
    """
    A single withdrawal or deposit against a cash session.

    Immutable once appended to its session.
    """

    id: str
    type: MovementType
    amount: Decimal
    reason: str
    timestamp: datetime
    sale_id: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.type, str):
            object.__setattr__(self, "type", MovementType(self.type))

    @property
    def signed_amount(self) -> Decimal:
        """Effect on the cash in the register."""
        if self.type == MovementType.WITHDRAWAL:
            return -self.amount
        return self.amount


@dataclass
class CashSession:
    """
    A register's opening-to-closing work period.

    cash_in_register must always equal opening_balance + deposits - withdrawals.
    Sessions are never deleted, only transitioned between open and closed.
    """

    id: str
    user_id: str
    display_id: int
    open_time: datetime
    opening_balance: Decimal = field(default_factory=lambda: Decimal("0"))
    cash_in_register: Decimal = field(default_factory=lambda: Decimal("0"))
    withdrawals: Decimal = field(default_factory=lambda: Decimal("0"))
    deposits: Decimal = field(default_factory=lambda: Decimal("0"))
    movements: list[CashMovement] = field(default_factory=list)
    status: SessionStatus = SessionStatus.OPEN
    close_time: Optional[datetime] = None
    reopened_by: Optional[str] = None
    reopened_at: Optional[datetime] = None
    reopen_reason: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.status, str):
            self.status = SessionStatus(self.status)

    @property
    def is_open(self) -> bool:
        return self.status == SessionStatus.OPEN

    @property
    def has_reopen_metadata(self) -> bool:
        """True when an administrator explicitly reopened this session."""
        return self.reopened_at is not None or bool(self.reopened_by)

    @property
    def expected_cash(self) -> Decimal:
        return self.opening_balance + self.deposits - self.withdrawals

    @property
    def is_reconciled(self) -> bool:
        """Running totals agree with each other and with the movement log."""
        logged_withdrawals = sum(
            (m.amount for m in self.movements if m.type == MovementType.WITHDRAWAL),
            Decimal("0"),
        )
        logged_deposits = sum(
            (m.amount for m in self.movements if m.type == MovementType.DEPOSIT),
            Decimal("0"),
        )
        return (
            self.cash_in_register == self.expected_cash
            and logged_withdrawals == self.withdrawals
            and logged_deposits == self.deposits
        )
