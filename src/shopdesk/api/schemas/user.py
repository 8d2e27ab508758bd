"""Pydantic schemas for user and audit endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import Field

from shopdesk.api.schemas.base import CamelModel
from shopdesk.domain.models.enums import AuditAction, AuditEntity


class LoginRequest(CamelModel):
    email: str
    password: str


class UserCreateRequest(CamelModel):
    """Request schema for creating a user."""

    name: str = Field(..., min_length=1, max_length=255)
    email: str
    password: str = Field(..., min_length=6)
    permission_profile_id: str = "profile-seller"
    phone: str = ""


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    phone: str
    permission_profile_id: str
    active: bool
    created_at: Optional[datetime] = None


class AuditLogResponse(CamelModel):
    id: str
    timestamp: datetime
    user_id: str
    user_name: str
    action: AuditAction
    entity: AuditEntity
    entity_id: str
    details: str


class CashRegisterAuditResponse(CamelModel):
    id: str
    timestamp: datetime
    session_id: str
    user_id: str
    user_name: str
    action: AuditAction
    amount: Optional[Decimal] = None
    reason: Optional[str] = None
    movement_type: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
