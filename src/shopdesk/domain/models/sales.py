"""Sale domain models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from shopdesk.domain.models.enums import SaleStatus


@dataclass(frozen=True)
class SaleItem:
    product_id: str
    quantity: int
    unit_price: Decimal
    unit_cost: Decimal = field(default_factory=lambda: Decimal("0"))
    description: str = ""

    @property
    def total(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def profit(self) -> Decimal:
        return (self.unit_price - self.unit_cost) * self.quantity


@dataclass(frozen=True)
class Payment:
    method: str
    amount: Decimal
    installments: int = 1


@dataclass
class Sale:
    """A finalized (or later cancelled) point-of-sale transaction."""

    id: str
    date: datetime
    customer_id: Optional[str]
    salesperson_id: str
    items: list[SaleItem] = field(default_factory=list)
    payments: list[Payment] = field(default_factory=list)
    subtotal: Decimal = field(default_factory=lambda: Decimal("0"))
    discount: Decimal = field(default_factory=lambda: Decimal("0"))
    total: Decimal = field(default_factory=lambda: Decimal("0"))
    status: SaleStatus = SaleStatus.FINALIZED
    origin: str = "POS"
    cash_session_id: Optional[str] = None
    observations: str = ""
    cancel_reason: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.status, str):
            self.status = SaleStatus(self.status)

    @property
    def profit(self) -> Decimal:
        return sum((item.profit for item in self.items), Decimal("0")) - self.discount
