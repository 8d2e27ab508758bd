"""
Row <-> domain conversions at the remote data service boundary.

Rows carry snake_case columns, ISO 8601 timestamps and JSON-safe nested
values (decimals as strings). Domain objects carry datetimes in the local
timezone and Decimals.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import pytz

from shopdesk.core.timezone import parse_datetime_local, to_local
from shopdesk.domain.models import (
    AuditLogEntry,
    CashMovement,
    CashRegisterAuditEntry,
    CashSession,
    ParameterItem,
    Payment,
    PermissionProfile,
    Product,
    Sale,
    SaleItem,
    StockHistoryEntry,
    User,
)
from shopdesk.repositories.protocols import Row


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """Serialize as UTC ISO 8601 so stored strings sort chronologically."""
    if dt is None:
        return None
    return to_local(dt).astimezone(pytz.utc).isoformat()


def from_iso(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return to_local(value)
    return parse_datetime_local(str(value))


def to_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))


def _opt_decimal(value: Any) -> Optional[Decimal]:
    return None if value is None else Decimal(str(value))


# Cash sessions

def movement_to_row(movement: CashMovement) -> Row:
    return {
        "id": movement.id,
        "type": movement.type.value,
        "amount": str(movement.amount),
        "reason": movement.reason,
        "timestamp": to_iso(movement.timestamp),
        "sale_id": movement.sale_id,
    }


def movement_from_row(row: Row) -> CashMovement:
    return CashMovement(
        id=row["id"],
        type=row["type"],
        amount=to_decimal(row.get("amount")),
        reason=row.get("reason") or "",
        timestamp=from_iso(row.get("timestamp")),
        sale_id=row.get("sale_id"),
    )


def session_from_row(row: Row) -> CashSession:
    return CashSession(
        id=row["id"],
        user_id=row["user_id"],
        display_id=int(row.get("display_id") or 0),
        open_time=from_iso(row["open_time"]),
        opening_balance=to_decimal(row.get("opening_balance")),
        cash_in_register=to_decimal(row.get("cash_in_register")),
        withdrawals=to_decimal(row.get("withdrawals")),
        deposits=to_decimal(row.get("deposits")),
        movements=[movement_from_row(m) for m in row.get("movements") or []],
        status=row["status"],
        close_time=from_iso(row.get("close_time")),
        reopened_by=row.get("reopened_by"),
        reopened_at=from_iso(row.get("reopened_at")),
        reopen_reason=row.get("reopen_reason"),
    )


def session_to_row(session: CashSession) -> Row:
    return {
        "id": session.id,
        "user_id": session.user_id,
        "display_id": session.display_id,
        "session_date": to_local(session.open_time).date().isoformat(),
        "opening_balance": session.opening_balance,
        "cash_in_register": session.cash_in_register,
        "withdrawals": session.withdrawals,
        "deposits": session.deposits,
        "movements": [movement_to_row(m) for m in session.movements],
        "open_time": to_iso(session.open_time),
        "close_time": to_iso(session.close_time),
        "status": session.status.value,
        "reopened_by": session.reopened_by,
        "reopened_at": to_iso(session.reopened_at),
        "reopen_reason": session.reopen_reason,
    }


# Audit

def audit_from_row(row: Row) -> AuditLogEntry:
    return AuditLogEntry(
        id=row["id"],
        timestamp=from_iso(row["timestamp"]),
        user_id=row["user_id"],
        user_name=row["user_name"],
        action=row["action"],
        entity=row["entity"],
        entity_id=row["entity_id"],
        details=row.get("details") or "",
    )


def audit_to_row(entry: AuditLogEntry) -> Row:
    return {
        "id": entry.id,
        "timestamp": to_iso(entry.timestamp),
        "user_id": entry.user_id,
        "user_name": entry.user_name,
        "action": entry.action.value,
        "entity": entry.entity.value,
        "entity_id": entry.entity_id,
        "details": entry.details,
    }


def register_audit_from_row(row: Row) -> CashRegisterAuditEntry:
    return CashRegisterAuditEntry(
        id=row["id"],
        timestamp=from_iso(row["timestamp"]),
        session_id=row["session_id"],
        user_id=row["user_id"],
        user_name=row["user_name"],
        action=row["action"],
        amount=_opt_decimal(row.get("amount")),
        reason=row.get("reason"),
        movement_type=row.get("movement_type"),
        metadata=dict(row.get("extra") or {}),
    )


def register_audit_to_row(entry: CashRegisterAuditEntry) -> Row:
    return {
        "id": entry.id,
        "timestamp": to_iso(entry.timestamp),
        "session_id": entry.session_id,
        "user_id": entry.user_id,
        "user_name": entry.user_name,
        "action": entry.action.value,
        "amount": entry.amount,
        "reason": entry.reason,
        "movement_type": entry.movement_type,
        "extra": entry.metadata,
    }


# Users and permissions

def user_from_row(row: Row) -> User:
    return User(
        id=row["id"],
        name=row.get("name") or "",
        email=row.get("email") or "",
        permission_profile_id=row.get("permission_profile_id") or "",
        phone=row.get("phone") or "",
        active=bool(row.get("active", True)),
        created_at=from_iso(row.get("created_at")),
    )


def profile_from_row(row: Row) -> PermissionProfile:
    return PermissionProfile(
        id=row["id"],
        name=row.get("name") or row["id"],
        permissions={k: bool(v) for k, v in (row.get("permissions") or {}).items()},
    )


def profile_to_row(profile: PermissionProfile) -> Row:
    return {"id": profile.id, "name": profile.name, "permissions": dict(profile.permissions)}


# Products

def stock_entry_to_row(entry: StockHistoryEntry) -> Row:
    return {
        "id": entry.id,
        "old_stock": entry.old_stock,
        "new_stock": entry.new_stock,
        "adjustment": entry.adjustment,
        "reason": entry.reason,
        "timestamp": to_iso(entry.timestamp),
        "changed_by": entry.changed_by,
        "related_id": entry.related_id,
    }


def stock_entry_from_row(row: Row) -> StockHistoryEntry:
    return StockHistoryEntry(
        id=row["id"],
        old_stock=int(row.get("old_stock") or 0),
        new_stock=int(row.get("new_stock") or 0),
        adjustment=int(row.get("adjustment") or 0),
        reason=row.get("reason") or "",
        timestamp=from_iso(row.get("timestamp")),
        changed_by=row.get("changed_by") or "",
        related_id=row.get("related_id"),
    )


def product_from_row(row: Row) -> Product:
    return Product(
        id=row["id"],
        name=row["name"],
        price=to_decimal(row.get("price")),
        cost_price=to_decimal(row.get("cost_price")),
        stock=int(row.get("stock") or 0),
        sku=row.get("sku"),
        brand=row.get("brand"),
        category=row.get("category"),
        model=row.get("model"),
        condition=row.get("condition"),
        storage_location=row.get("storage_location"),
        supplier_id=row.get("supplier_id"),
        stock_history=[stock_entry_from_row(e) for e in row.get("stock_history") or []],
        created_at=from_iso(row.get("created_at")),
    )


def product_to_row(product: Product) -> Row:
    return {
        "id": product.id,
        "name": product.name,
        "price": product.price,
        "cost_price": product.cost_price,
        "stock": product.stock,
        "sku": product.sku,
        "brand": product.brand,
        "category": product.category,
        "model": product.model,
        "condition": product.condition,
        "storage_location": product.storage_location,
        "supplier_id": product.supplier_id,
        "stock_history": [stock_entry_to_row(e) for e in product.stock_history],
        "created_at": to_iso(product.created_at),
    }


# Sales

def sale_from_row(row: Row) -> Sale:
    return Sale(
        id=row["id"],
        date=from_iso(row["date"]),
        customer_id=row.get("customer_id"),
        salesperson_id=row["salesperson_id"],
        items=[
            SaleItem(
                product_id=i["product_id"],
                quantity=int(i["quantity"]),
                unit_price=to_decimal(i.get("unit_price")),
                unit_cost=to_decimal(i.get("unit_cost")),
                description=i.get("description") or "",
            )
            for i in row.get("items") or []
        ],
        payments=[
            Payment(
                method=p["method"],
                amount=to_decimal(p.get("amount")),
                installments=int(p.get("installments") or 1),
            )
            for p in row.get("payments") or []
        ],
        subtotal=to_decimal(row.get("subtotal")),
        discount=to_decimal(row.get("discount")),
        total=to_decimal(row.get("total")),
        status=row["status"],
        origin=row.get("origin") or "POS",
        cash_session_id=row.get("cash_session_id"),
        observations=row.get("observations") or "",
        cancel_reason=row.get("cancel_reason"),
    )


def sale_to_row(sale: Sale) -> Row:
    return {
        "id": sale.id,
        "date": to_iso(sale.date),
        "customer_id": sale.customer_id,
        "salesperson_id": sale.salesperson_id,
        "items": [
            {
                "product_id": i.product_id,
                "quantity": i.quantity,
                "unit_price": str(i.unit_price),
                "unit_cost": str(i.unit_cost),
                "description": i.description,
            }
            for i in sale.items
        ],
        "payments": [
            {"method": p.method, "amount": str(p.amount), "installments": p.installments}
            for p in sale.payments
        ],
        "subtotal": sale.subtotal,
        "discount": sale.discount,
        "total": sale.total,
        "status": sale.status.value,
        "origin": sale.origin,
        "cash_session_id": sale.cash_session_id,
        "observations": sale.observations,
        "cancel_reason": sale.cancel_reason,
    }


# Parameter tables

def parameter_from_row(row: Row) -> ParameterItem:
    return ParameterItem(
        id=row["id"],
        name=row.get("name") or "",
        attributes=dict(row.get("attributes") or {}),
    )


def parameter_to_row(item: ParameterItem) -> Row:
    return {"id": item.id, "name": item.name, "attributes": dict(item.attributes)}
