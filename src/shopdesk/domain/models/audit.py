"""Audit trail domain models. Both kinds are append-only."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from shopdesk.domain.models.enums import AuditAction, AuditEntity


@dataclass(frozen=True)
class AuditLogEntry:
    """Who did what, when, to which entity."""

    id: str
    timestamp: datetime
    user_id: str
    user_name: str
    action: AuditAction
    entity: AuditEntity
    entity_id: str
    details: str

    def __post_init__(self) -> None:
        if isinstance(self.action, str):
            object.__setattr__(self, "action", AuditAction(self.action))
        if isinstance(self.entity, str):
            object.__setattr__(self, "entity", AuditEntity(self.entity))


@dataclass(frozen=True)
class CashRegisterAuditEntry:
    """Structured record for governance-sensitive register actions."""

    id: str
    timestamp: datetime
    session_id: str
    user_id: str
    user_name: str
    action: AuditAction
    amount: Optional[Decimal] = None
    reason: Optional[str] = None
    movement_type: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.action, str):
            object.__setattr__(self, "action", AuditAction(self.action))
