"""Product catalogue and stock adjustments."""

import json
import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional, Protocol

from shopdesk.core.exceptions import NotFoundError, ValidationError
from shopdesk.core.timezone import now_local
from shopdesk.domain.models import AuditAction, AuditEntity, Product, StockHistoryEntry, User
from shopdesk.repositories.mappers import (
    product_from_row,
    product_to_row,
    stock_entry_to_row,
)
from shopdesk.repositories.protocols import RemoteDataService
from shopdesk.services.audit_service import AuditService
from shopdesk.services.background import TaskQueue
from shopdesk.services.cache_service import CacheService
from shopdesk.services.resilience import RemoteCaller

logger = logging.getLogger(__name__)

TABLE = "products"
CACHE_KEY = "products"

_UPDATABLE = (
    "name", "price", "cost_price", "sku", "brand", "category", "model",
    "condition", "storage_location", "supplier_id",
)


@dataclass
class ProductCreate:
    """Input data for creating a product."""

    name: str
    price: Decimal = Decimal("0")
    cost_price: Decimal = Decimal("0")
    stock: int = 0
    sku: Optional[str] = None
    brand: Optional[str] = None
    category: Optional[str] = None
    model: Optional[str] = None
    condition: Optional[str] = None
    storage_location: Optional[str] = None
    supplier_id: Optional[str] = None


@dataclass
class PurchaseItem:
    """One line of a stock purchase."""

    product_id: str
    quantity: int
    unit_cost: Decimal = Decimal("0")

    @property
    def total(self) -> Decimal:
        return Decimal(str(self.unit_cost)) * self.quantity


class PurchaseNotifier(Protocol):
    def send_purchase_notification(self, user_name: str, supplier_name: str, total: Decimal) -> bool:
        ...


class ProductService:
    """Service for products. Every mutation invalidates ``products`` and all its variants."""

    def __init__(
        self,
        remote: RemoteDataService,
        cache: CacheService,
        audit: AuditService,
        call: Optional[RemoteCaller] = None,
        tasks: Optional[TaskQueue] = None,
        notifier: Optional[PurchaseNotifier] = None,
    ):
        self._remote = remote
        self._cache = cache
        self._audit = audit
        self._call = call or RemoteCaller()
        self._tasks = tasks
        self._notifier = notifier

    def list_products(self, filters: Optional[dict[str, Any]] = None) -> list[Product]:
        """Products by name, optionally filtered by exact column values."""
        key = CACHE_KEY
        if filters:
            key = f"{CACHE_KEY}_{json.dumps(filters, sort_keys=True, default=str)}"

        def fetch() -> list[Product]:
            rows = self._call(
                lambda: self._remote.select(TABLE, filters=filters, order_by="name"),
                "list products",
            )
            return [product_from_row(r) for r in rows]

        return self._cache.fetch_with_cache(key, fetch)

    def get_product(self, product_id: str) -> Product:
        row = self._call(lambda: self._remote.get(TABLE, product_id), "get product")
        if row is None:
            raise NotFoundError("Product", product_id)
        return product_from_row(row)

    def add_product(self, data: ProductCreate, actor: User) -> Product:
        if not (data.name or "").strip():
            raise ValidationError("Product name is required")
        if data.stock < 0:
            raise ValidationError("Stock cannot be negative")
        if Decimal(str(data.price)) < 0 or Decimal(str(data.cost_price)) < 0:
            raise ValidationError("Prices cannot be negative")

        now = now_local()
        product = Product(
            id=str(uuid.uuid4()),
            name=data.name.strip(),
            price=Decimal(str(data.price)),
            cost_price=Decimal(str(data.cost_price)),
            stock=data.stock,
            sku=data.sku,
            brand=data.brand,
            category=data.category,
            model=data.model,
            condition=data.condition,
            storage_location=data.storage_location,
            supplier_id=data.supplier_id,
            created_at=now,
        )
        if data.stock:
            product.stock_history.append(StockHistoryEntry(
                id=str(uuid.uuid4()),
                old_stock=0,
                new_stock=data.stock,
                adjustment=data.stock,
                reason="Estoque inicial",
                timestamp=now,
                changed_by=actor.id,
            ))
        self._call(lambda: self._remote.insert(TABLE, product_to_row(product)), "add product")
        self._cache.clear_cache([CACHE_KEY])
        self._audit.add_audit_log(
            actor.id, actor.name, AuditAction.CREATE, AuditEntity.PRODUCT, product.id,
            f"Produto {product.name} criado",
        )
        return product

    def update_product(self, product_id: str, changes: dict[str, Any], actor: User) -> Product:
        """Update descriptive fields. Stock goes through ``update_stock``."""
        unknown = set(changes) - set(_UPDATABLE)
        if unknown:
            raise ValidationError(f"Fields cannot be updated here: {', '.join(sorted(unknown))}")
        self.get_product(product_id)
        row = self._call(
            lambda: self._remote.update(TABLE, product_id, dict(changes)), "update product"
        )
        product = product_from_row(row)
        self._cache.clear_cache([CACHE_KEY])
        self._audit.add_audit_log(
            actor.id, actor.name, AuditAction.UPDATE, AuditEntity.PRODUCT, product_id,
            f"Campos alterados: {', '.join(sorted(changes))}",
        )
        return product

    def delete_product(self, product_id: str, actor: User) -> None:
        product = self.get_product(product_id)
        self._call(lambda: self._remote.delete(TABLE, product_id), "delete product")
        self._cache.clear_cache([CACHE_KEY])
        self._audit.add_audit_log(
            actor.id, actor.name, AuditAction.DELETE, AuditEntity.PRODUCT, product_id,
            f"Produto {product.name} removido",
        )

    def update_stock(
        self,
        product_id: str,
        new_stock: int,
        reason: str,
        actor: User,
        related_id: Optional[str] = None,
        audit: bool = True,
    ) -> Product:
        """Set the stock level and append a history entry recording the change."""
        if new_stock < 0:
            raise ValidationError("Stock cannot be negative")
        product = self.get_product(product_id)
        entry = StockHistoryEntry(
            id=str(uuid.uuid4()),
            old_stock=product.stock,
            new_stock=new_stock,
            adjustment=new_stock - product.stock,
            reason=reason,
            timestamp=now_local(),
            changed_by=actor.id,
            related_id=related_id,
        )
        history = [*product.stock_history, entry]
        self._call(
            lambda: self._remote.update(TABLE, product_id, {
                "stock": new_stock,
                "stock_history": [stock_entry_to_row(e) for e in history],
            }),
            "update stock",
        )
        product.stock = new_stock
        product.stock_history = history
        self._cache.clear_cache([CACHE_KEY])
        if audit:
            self._audit.add_audit_log(
                actor.id, actor.name, AuditAction.STOCK_ADJUST, AuditEntity.PRODUCT, product_id,
                f"Estoque {entry.old_stock} -> {entry.new_stock}: {reason}",
            )
        return product

    def register_purchase(
        self,
        items: list[PurchaseItem],
        supplier_name: str,
        actor: User,
    ) -> list[Product]:
        """
        Add purchased quantities to stock and announce the purchase.

        Each product gets a stock history entry; the notification is sent in
        the background.
        """
        supplier_name = (supplier_name or "").strip()
        if not supplier_name:
            raise ValidationError("Supplier name is required")
        if not items:
            raise ValidationError("A purchase needs at least one item")
        for item in items:
            if item.quantity <= 0:
                raise ValidationError(f"Invalid quantity for product {item.product_id}")
            if Decimal(str(item.unit_cost)) < 0:
                raise ValidationError(f"Invalid unit cost for product {item.product_id}")

        products = {item.product_id: self.get_product(item.product_id) for item in items}
        purchase_id = str(uuid.uuid4())
        updated = []
        for item in items:
            product = products[item.product_id]
            product = self.update_stock(
                item.product_id,
                product.stock + item.quantity,
                f"Compra {supplier_name}",
                actor,
                related_id=purchase_id,
                audit=False,
            )
            products[item.product_id] = product
            updated.append(product)

        total = sum((item.total for item in items), Decimal("0"))
        self._audit.add_audit_log(
            actor.id, actor.name, AuditAction.STOCK_ADJUST, AuditEntity.PRODUCT, purchase_id,
            f"Compra de {supplier_name}: {len(items)} itens, total {total}",
        )
        if self._notifier is not None and self._tasks is not None:
            self._tasks.submit(
                "purchase-notification",
                self._notifier.send_purchase_notification,
                actor.name,
                supplier_name,
                total,
            )
        logger.info("Purchase %s from %s registered by %s", purchase_id, supplier_name, actor.id)
        return updated
