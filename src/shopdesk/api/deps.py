"""Dependency injection for FastAPI."""

from typing import Optional

from fastapi import Depends, Header

from shopdesk.app_context import AppContext, get_app_context
from shopdesk.core.exceptions import AuthorizationError
from shopdesk.domain.models import User
from shopdesk.services import (
    AuditService,
    CashSessionService,
    ProductService,
    SalesService,
    UserService,
)


def get_context() -> AppContext:
    """Provide the process-wide AppContext."""
    return get_app_context()


def get_user_service(ctx: AppContext = Depends(get_context)) -> UserService:
    return ctx.users


def get_cash_session_service(ctx: AppContext = Depends(get_context)) -> CashSessionService:
    return ctx.cash_sessions


def get_audit_service(ctx: AppContext = Depends(get_context)) -> AuditService:
    return ctx.audit


def get_product_service(ctx: AppContext = Depends(get_context)) -> ProductService:
    return ctx.products


def get_sales_service(ctx: AppContext = Depends(get_context)) -> SalesService:
    return ctx.sales


def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    users: UserService = Depends(get_user_service),
) -> User:
    """Resolve the acting user from the ``X-User-Id`` header."""
    if not x_user_id:
        raise AuthorizationError("Missing X-User-Id header")
    user = users.get_profile(x_user_id)
    if user is None or not user.active:
        raise AuthorizationError("Unknown or inactive user")
    return user


def require_admin(
    user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> User:
    if not users.has_permission(user, "can_manage_users"):
        raise AuthorizationError("Administrator access required")
    return user
