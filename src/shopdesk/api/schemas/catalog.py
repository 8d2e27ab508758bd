"""Pydantic schemas for product and sale endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from shopdesk.api.schemas.base import CamelModel
from shopdesk.domain.models.enums import SaleStatus


class ProductCreateRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(default=Decimal("0"), ge=0)
    cost_price: Decimal = Field(default=Decimal("0"), ge=0)
    stock: int = Field(default=0, ge=0)
    sku: Optional[str] = None
    brand: Optional[str] = None
    category: Optional[str] = None
    model: Optional[str] = None
    condition: Optional[str] = None
    storage_location: Optional[str] = None
    supplier_id: Optional[str] = None


class StockUpdateRequest(CamelModel):
    new_stock: int = Field(..., ge=0)
    reason: str = Field(..., min_length=1)


class PurchaseItemSchema(CamelModel):
    product_id: str
    quantity: int = Field(..., gt=0)
    unit_cost: Decimal = Field(default=Decimal("0"), ge=0)


class PurchaseRequest(CamelModel):
    """Request schema for a stock purchase from a supplier."""

    supplier_name: str = Field(..., min_length=1)
    items: list[PurchaseItemSchema] = Field(..., min_length=1)


class StockHistoryResponse(CamelModel):
    id: str
    old_stock: int
    new_stock: int
    adjustment: int
    reason: str
    timestamp: datetime
    changed_by: str
    related_id: Optional[str] = None


class ProductResponse(CamelModel):
    id: str
    name: str
    price: Decimal
    cost_price: Decimal
    stock: int
    sku: Optional[str] = None
    brand: Optional[str] = None
    category: Optional[str] = None
    model: Optional[str] = None
    condition: Optional[str] = None
    storage_location: Optional[str] = None
    supplier_id: Optional[str] = None
    stock_history: list[StockHistoryResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class SaleItemSchema(CamelModel):
    product_id: str
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)
    unit_cost: Decimal = Field(default=Decimal("0"), ge=0)
    description: str = ""


class PaymentSchema(CamelModel):
    method: str
    amount: Decimal = Field(..., ge=0)
    installments: int = Field(default=1, ge=1)


class SaleCreateRequest(CamelModel):
    """Request schema for recording a sale."""

    items: list[SaleItemSchema] = Field(..., min_length=1)
    payments: list[PaymentSchema] = Field(default_factory=list)
    customer_id: Optional[str] = None
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    cash_session_id: Optional[str] = None
    observations: str = ""
    origin: str = "POS"


class SaleCancelRequest(CamelModel):
    reason: str = Field(..., min_length=1)


class SaleResponse(CamelModel):
    id: str
    date: datetime
    customer_id: Optional[str] = None
    salesperson_id: str
    items: list[SaleItemSchema]
    payments: list[PaymentSchema]
    subtotal: Decimal
    discount: Decimal
    total: Decimal
    status: SaleStatus
    origin: str
    cash_session_id: Optional[str] = None
    observations: str = ""
    cancel_reason: Optional[str] = None
