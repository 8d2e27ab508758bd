"""Point-of-sale transactions and their stock effects."""

import logging
import re
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import Optional, Protocol

from shopdesk.core.exceptions import NotFoundError, ValidationError
from shopdesk.core.timezone import now_local, start_of_day, today_local
from shopdesk.domain.models import (
    AuditAction,
    AuditEntity,
    Payment,
    Sale,
    SaleItem,
    SaleStatus,
    User,
)
from shopdesk.repositories.mappers import sale_from_row, sale_to_row, to_iso
from shopdesk.repositories.protocols import RemoteDataService
from shopdesk.services.audit_service import AuditService
from shopdesk.services.background import TaskQueue
from shopdesk.services.cache_service import CacheService
from shopdesk.services.product_service import ProductService
from shopdesk.services.resilience import RemoteCaller

logger = logging.getLogger(__name__)

TABLE = "sales"
CACHE_KEY = "sales"

_SALE_ID_RE = re.compile(r"^ID-(\d+)$")


class SaleNotifier(Protocol):
    def send_sale_notification(
        self, description: str, profit: Decimal, daily_profit: Optional[Decimal] = None
    ) -> bool:
        ...


@dataclass
class SaleCreate:
    """Input data for a new sale."""

    items: list[SaleItem]
    payments: list[Payment] = field(default_factory=list)
    customer_id: Optional[str] = None
    discount: Decimal = Decimal("0")
    cash_session_id: Optional[str] = None
    observations: str = ""
    origin: str = "POS"


class SalesService:
    """
    Service for sales.

    A sale touches products and the cash session views, so every mutation
    clears ``sales``, ``products`` and ``cash_sessions``.
    """

    def __init__(
        self,
        remote: RemoteDataService,
        cache: CacheService,
        audit: AuditService,
        products: ProductService,
        tasks: TaskQueue,
        notifier: Optional[SaleNotifier] = None,
        call: Optional[RemoteCaller] = None,
    ):
        self._remote = remote
        self._cache = cache
        self._audit = audit
        self._products = products
        self._tasks = tasks
        self._notifier = notifier
        self._call = call or RemoteCaller()

    def list_sales(
        self,
        user_id: Optional[str] = None,
        cash_session_id: Optional[str] = None,
    ) -> list[Sale]:
        """Sales newest first, optionally for one salesperson and/or one cash session."""
        filters = {}
        if user_id:
            filters["salesperson_id"] = user_id
        if cash_session_id:
            filters["cash_session_id"] = cash_session_id

        def fetch() -> list[Sale]:
            rows = self._call(
                lambda: self._remote.select(
                    TABLE, filters=filters or None, order_by="date", descending=True
                ),
                "list sales",
            )
            return [sale_from_row(r) for r in rows]

        key = f"{CACHE_KEY}_{user_id or 'all'}_{cash_session_id or 'all'}"
        return self._cache.fetch_with_cache(key, fetch)

    def get_sale(self, sale_id: str) -> Sale:
        row = self._call(lambda: self._remote.get(TABLE, sale_id), "get sale")
        if row is None:
            raise NotFoundError("Sale", sale_id)
        return sale_from_row(row)

    def add_sale(self, data: SaleCreate, actor: User) -> Sale:
        """
        Record a finalized sale and deduct its items from stock.

        Stock never goes below zero. A notification is sent in the background.
        """
        if not data.items:
            raise ValidationError("A sale needs at least one item")
        for item in data.items:
            if item.quantity <= 0:
                raise ValidationError(f"Invalid quantity for product {item.product_id}")

        subtotal = sum((item.total for item in data.items), Decimal("0"))
        discount = Decimal(str(data.discount))
        if discount < 0 or discount > subtotal:
            raise ValidationError("Discount must be between zero and the subtotal")
        total = subtotal - discount
        paid = sum((p.amount for p in data.payments), Decimal("0"))
        if data.payments and paid < total:
            raise ValidationError(f"Payments ({paid}) do not cover the total ({total})")

        products = {item.product_id: self._products.get_product(item.product_id) for item in data.items}

        sale = Sale(
            id=self._next_sale_id(),
            date=now_local(),
            customer_id=data.customer_id,
            salesperson_id=actor.id,
            items=list(data.items),
            payments=list(data.payments),
            subtotal=subtotal,
            discount=discount,
            total=total,
            status=SaleStatus.FINALIZED,
            origin=data.origin,
            cash_session_id=data.cash_session_id,
            observations=data.observations,
        )
        self._call(lambda: self._remote.insert(TABLE, sale_to_row(sale)), "add sale")

        for item in data.items:
            current = products[item.product_id].stock
            self._products.update_stock(
                item.product_id,
                max(0, current - item.quantity),
                f"Venda {sale.id}",
                actor,
                related_id=sale.id,
                audit=False,
            )
            products[item.product_id].stock = max(0, current - item.quantity)

        self._cache.clear_cache([CACHE_KEY, "products", "cash_sessions"])
        self._audit.add_audit_log(
            actor.id, actor.name, AuditAction.SALE_CREATE, AuditEntity.SALE, sale.id,
            f"Venda {sale.id} de {sale.total} ({len(sale.items)} itens)",
        )
        if self._notifier is not None:
            description = ", ".join(
                f"{item.quantity}x {item.description or products[item.product_id].name}"
                for item in sale.items
            )
            self._tasks.submit("sale-notification", self._notify_sale, description, sale.profit)
        logger.info("Sale %s recorded by %s", sale.id, actor.id)
        return sale

    def cancel_sale(self, sale_id: str, reason: str, actor: User) -> Sale:
        """Mark a sale cancelled and return its items to stock."""
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("A reason is required to cancel a sale")
        sale = self.get_sale(sale_id)
        if sale.status == SaleStatus.CANCELLED:
            raise ValidationError(f"Sale {sale_id} is already cancelled")

        for item in sale.items:
            try:
                product = self._products.get_product(item.product_id)
            except NotFoundError:
                logger.warning("Product %s of sale %s no longer exists", item.product_id, sale_id)
                continue
            self._products.update_stock(
                item.product_id,
                product.stock + item.quantity,
                f"Cancelamento {sale.id}",
                actor,
                related_id=sale.id,
                audit=False,
            )

        self._call(
            lambda: self._remote.update(TABLE, sale_id, {
                "status": SaleStatus.CANCELLED.value,
                "cancel_reason": reason,
            }),
            "cancel sale",
        )
        sale.status = SaleStatus.CANCELLED
        sale.cancel_reason = reason
        self._cache.clear_cache([CACHE_KEY, "products", "cash_sessions"])
        self._audit.add_audit_log(
            actor.id, actor.name, AuditAction.SALE_CANCEL, AuditEntity.SALE, sale_id,
            f"Venda {sale_id} cancelada: {reason}",
        )
        return sale

    def daily_profit(self) -> Decimal:
        """Profit of today's finalized sales."""
        today = today_local()
        start, end = start_of_day(today), start_of_day(today + timedelta(days=1))
        rows = self._call(
            lambda: self._remote.select(TABLE, filters={
                "date": [("gte", to_iso(start)), ("lt", to_iso(end))],
                "status": SaleStatus.FINALIZED.value,
            }),
            "list today's sales",
        )
        return sum((sale_from_row(r).profit for r in rows), Decimal("0"))

    def _notify_sale(self, description: str, profit: Decimal) -> None:
        self._notifier.send_sale_notification(description, profit, self.daily_profit())

    def _next_sale_id(self) -> str:
        rows = self._call(lambda: self._remote.select(TABLE), "list sale ids")
        highest = 0
        for row in rows:
            match = _SALE_ID_RE.match(str(row.get("id", "")))
            if match:
                highest = max(highest, int(match.group(1)))
        return f"ID-{highest + 1}"
