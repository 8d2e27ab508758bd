"""Store-credit and installment rules."""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta

MONTHLY = "monthly"
BIWEEKLY = "biweekly"


@dataclass(frozen=True)
class CreditCheck:
    """Outcome of a credit-limit check."""

    allowed: bool
    available: Decimal
    reason: Optional[str] = None  # "credit_blocked" | "limit_exceeded"


def calculate_installment_dates(start: date, count: int, frequency: str = MONTHLY) -> list[date]:
    """
    Due dates for ``count`` installments after ``start``.

    Monthly installments keep the start day, clamped to the last day of
    shorter months (Jan 31 -> Feb 28). Biweekly installments are 15 days apart.
    """
    if count < 0:
        raise ValueError("count must be >= 0")
    if frequency == MONTHLY:
        # relativedelta clamps to month end and never drifts (31 -> 28 -> 31)
        return [start + relativedelta(months=i + 1) for i in range(count)]
    if frequency == BIWEEKLY:
        return [start + timedelta(days=15 * (i + 1)) for i in range(count)]
    raise ValueError(f"Unknown installment frequency: {frequency}")


def check_credit_limit(
    allow_credit: bool,
    credit_limit: Optional[Decimal],
    credit_used: Optional[Decimal],
    purchase_amount: Decimal,
) -> CreditCheck:
    """Decide whether a customer may buy ``purchase_amount`` on store credit."""
    if not allow_credit:
        return CreditCheck(allowed=False, available=Decimal("0"), reason="credit_blocked")

    limit = credit_limit or Decimal("0")
    used = credit_used or Decimal("0")
    available = max(Decimal("0"), limit - used)

    if purchase_amount > available:
        return CreditCheck(allowed=False, available=available, reason="limit_exceeded")
    return CreditCheck(allowed=True, available=available)
