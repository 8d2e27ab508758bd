"""SQLAlchemy ORM model definitions for the tables behind the remote data service."""

from decimal import Decimal

from sqlalchemy import (
    Column,
    String,
    Boolean,
    Integer,
    Text,
    Numeric,
    JSON,
    UniqueConstraint,
)

from shopdesk.repositories.sqlalchemy.database import Base

# Timestamps are stored the way the hosted backend returns them: ISO 8601
# strings, normalized to UTC by the mappers so lexical order is time order.
Timestamp = String(40)
Money = Numeric(precision=18, scale=2)


class UserORM(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    phone = Column(String(32), default="")
    permission_profile_id = Column(String(64), nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(Timestamp, nullable=True)


class PermissionProfileORM(Base):
    __tablename__ = "permissions_profiles"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    permissions = Column(JSON, default=dict)


class AuthCredentialORM(Base):
    """Credentials owned by the auth sub-interface, separate from profiles."""

    __tablename__ = "auth_credentials"

    id = Column(String(36), primary_key=True)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)
    created_at = Column(Timestamp, nullable=True)


class CashSessionORM(Base):
    __tablename__ = "cash_sessions"
    __table_args__ = (
        # Backs the one-session-per-user-per-day rule against racing requests
        UniqueConstraint("user_id", "session_date", name="uq_cash_sessions_user_day"),
    )

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=False, index=True)
    display_id = Column(Integer, unique=True, nullable=False)
    session_date = Column(String(10), nullable=False)  # local YYYY-MM-DD of open_time
    opening_balance = Column(Money, default=Decimal("0"))
    cash_in_register = Column(Money, default=Decimal("0"))
    withdrawals = Column(Money, default=Decimal("0"))
    deposits = Column(Money, default=Decimal("0"))
    movements = Column(JSON, default=list)
    open_time = Column(Timestamp, nullable=False)
    close_time = Column(Timestamp, nullable=True)
    status = Column(String(16), nullable=False)
    reopened_by = Column(String(36), nullable=True)
    reopened_at = Column(Timestamp, nullable=True)
    reopen_reason = Column(Text, nullable=True)


class AuditLogORM(Base):
    __tablename__ = "audit_logs"

    id = Column(String(36), primary_key=True)
    timestamp = Column(Timestamp, nullable=False, index=True)
    user_id = Column(String(36), nullable=False)
    user_name = Column(String(255), nullable=False)
    action = Column(String(32), nullable=False)
    entity = Column(String(32), nullable=False)
    entity_id = Column(String(64), nullable=False)
    details = Column(Text, default="")


class CashRegisterAuditLogORM(Base):
    __tablename__ = "cash_register_audit_logs"

    id = Column(String(36), primary_key=True)
    timestamp = Column(Timestamp, nullable=False, index=True)
    session_id = Column(String(36), nullable=False, index=True)
    user_id = Column(String(36), nullable=False)
    user_name = Column(String(255), nullable=False)
    action = Column(String(32), nullable=False)
    amount = Column(Money, nullable=True)
    reason = Column(Text, nullable=True)
    movement_type = Column(String(16), nullable=True)
    extra = Column(JSON, default=dict)


class ProductORM(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    sku = Column(String(64), nullable=True)
    brand = Column(String(128), nullable=True)
    category = Column(String(128), nullable=True)
    model = Column(String(128), nullable=True)
    condition = Column(String(64), nullable=True)
    storage_location = Column(String(128), nullable=True)
    supplier_id = Column(String(36), nullable=True)
    price = Column(Money, default=Decimal("0"))
    cost_price = Column(Money, default=Decimal("0"))
    stock = Column(Integer, default=0)
    stock_history = Column(JSON, default=list)
    created_at = Column(Timestamp, nullable=True)


class SaleORM(Base):
    __tablename__ = "sales"

    id = Column(String(36), primary_key=True)
    date = Column(Timestamp, nullable=False, index=True)
    customer_id = Column(String(36), nullable=True)
    salesperson_id = Column(String(36), nullable=False)
    items = Column(JSON, default=list)
    payments = Column(JSON, default=list)
    subtotal = Column(Money, default=Decimal("0"))
    discount = Column(Money, default=Decimal("0"))
    total = Column(Money, default=Decimal("0"))
    status = Column(String(16), nullable=False)
    origin = Column(String(32), default="POS")
    cash_session_id = Column(String(36), nullable=True, index=True)
    observations = Column(Text, default="")
    cancel_reason = Column(Text, nullable=True)


class _ParameterColumns:
    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    attributes = Column(JSON, default=dict)


PARAMETER_TABLES = (
    "brands",
    "categories",
    "grades",
    "product_conditions",
    "storage_locations",
    "warranties",
    "payment_methods",
    "receipt_terms",
)


def _parameter_model(table: str) -> type:
    class_name = "".join(part.title() for part in table.split("_")) + "ORM"
    return type(class_name, (_ParameterColumns, Base), {"__tablename__": table})


PARAMETER_MODELS: dict[str, type] = {table: _parameter_model(table) for table in PARAMETER_TABLES}


TABLE_MODELS: dict[str, type] = {
    "users": UserORM,
    "permissions_profiles": PermissionProfileORM,
    "cash_sessions": CashSessionORM,
    "audit_logs": AuditLogORM,
    "cash_register_audit_logs": CashRegisterAuditLogORM,
    "products": ProductORM,
    "sales": SaleORM,
    **PARAMETER_MODELS,
}
