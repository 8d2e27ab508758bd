"""Pydantic schemas for cash session endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from shopdesk.api.schemas.base import CamelModel
from shopdesk.domain.models.enums import MovementType, SessionStatus


class OpenSessionRequest(CamelModel):
    """Request schema for opening today's session."""

    opening_balance: Decimal = Field(default=Decimal("0"), ge=0)


class MovementRequest(CamelModel):
    type: MovementType
    amount: Decimal = Field(..., gt=0)
    reason: str = ""
    sale_id: Optional[str] = None


class ReopenRequest(CamelModel):
    reason: str = Field(..., min_length=1)


class MovementResponse(CamelModel):
    id: str
    type: MovementType
    amount: Decimal
    reason: str
    timestamp: datetime
    sale_id: Optional[str] = None


class CashSessionResponse(CamelModel):
    """Response schema for a single cash session."""

    id: str
    user_id: str
    display_id: int
    open_time: datetime
    close_time: Optional[datetime] = None
    status: SessionStatus
    opening_balance: Decimal
    cash_in_register: Decimal
    withdrawals: Decimal
    deposits: Decimal
    movements: list[MovementResponse]
    reopened_by: Optional[str] = None
    reopened_at: Optional[datetime] = None
    reopen_reason: Optional[str] = None


class SessionSummaryResponse(CamelModel):
    session_id: str
    opening_balance: Decimal
    deposits: Decimal
    withdrawals: Decimal
    cash_in_register: Decimal
    expected_cash: Decimal
    movement_count: int
    is_reconciled: bool


class CashSessionDetailResponse(CamelModel):
    session: CashSessionResponse
    summary: SessionSummaryResponse
