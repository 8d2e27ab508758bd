"""Product and parameter-table domain models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional


@dataclass(frozen=True)
class StockHistoryEntry:
    """One stock change for a product."""

    id: str
    old_stock: int
    new_stock: int
    adjustment: int
    reason: str
    timestamp: datetime
    changed_by: str
    related_id: Optional[str] = None


@dataclass
class Product:
    """Inventory item."""

    id: str
    name: str
    price: Decimal = field(default_factory=lambda: Decimal("0"))
    cost_price: Decimal = field(default_factory=lambda: Decimal("0"))
    stock: int = 0
    sku: Optional[str] = None
    brand: Optional[str] = None
    category: Optional[str] = None
    model: Optional[str] = None
    condition: Optional[str] = None
    storage_location: Optional[str] = None
    supplier_id: Optional[str] = None
    stock_history: list[StockHistoryEntry] = field(default_factory=list)
    created_at: Optional[datetime] = None


@dataclass
class ParameterItem:
    """Row of a near-static lookup table (brands, warranties, ...)."""

    id: str
    name: str
    attributes: dict[str, Any] = field(default_factory=dict)
