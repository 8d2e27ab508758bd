"""Cash session endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from shopdesk.api.deps import get_cash_session_service, get_current_user
from shopdesk.api.schemas import (
    CashSessionDetailResponse,
    CashSessionResponse,
    MovementRequest,
    OpenSessionRequest,
    ReopenRequest,
    SessionSummaryResponse,
)
from shopdesk.domain.models import User
from shopdesk.services import CashSessionService, MovementCreate

router = APIRouter(prefix="/cash-sessions", tags=["cash-sessions"])


@router.get("", response_model=list[CashSessionResponse])
def list_sessions(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    service: CashSessionService = Depends(get_cash_session_service),
    _: User = Depends(get_current_user),
):
    """List sessions newest first; stale ones come back auto-closed."""
    return [CashSessionResponse.model_validate(s) for s in service.list_sessions(user_id)]


@router.post("", response_model=CashSessionResponse, status_code=201)
def open_session(
    data: OpenSessionRequest,
    service: CashSessionService = Depends(get_cash_session_service),
    user: User = Depends(get_current_user),
):
    """Open today's session for the acting user."""
    session = service.open_session(user.id, data.opening_balance, user.name)
    return CashSessionResponse.model_validate(session)


@router.get("/{session_id}", response_model=CashSessionDetailResponse)
def get_session(
    session_id: str,
    service: CashSessionService = Depends(get_cash_session_service),
    _: User = Depends(get_current_user),
):
    session = service.get_session(session_id)
    return CashSessionDetailResponse(
        session=CashSessionResponse.model_validate(session),
        summary=SessionSummaryResponse.model_validate(service.summarize(session)),
    )


@router.post("/{session_id}/movements", response_model=CashSessionResponse)
def add_movement(
    session_id: str,
    data: MovementRequest,
    service: CashSessionService = Depends(get_cash_session_service),
    user: User = Depends(get_current_user),
):
    movement = MovementCreate(
        type=data.type, amount=data.amount, reason=data.reason, sale_id=data.sale_id
    )
    return CashSessionResponse.model_validate(service.add_movement(session_id, movement, user))


@router.post("/{session_id}/close", response_model=CashSessionResponse)
def close_session(
    session_id: str,
    service: CashSessionService = Depends(get_cash_session_service),
    user: User = Depends(get_current_user),
):
    return CashSessionResponse.model_validate(service.close_session(session_id, user))


@router.post("/{session_id}/reopen", response_model=CashSessionResponse)
def reopen_session(
    session_id: str,
    data: ReopenRequest,
    service: CashSessionService = Depends(get_cash_session_service),
    user: User = Depends(get_current_user),
):
    """Reopen a closed session (administrators or holders of the reopen grant)."""
    return CashSessionResponse.model_validate(
        service.reopen_session(session_id, user, data.reason)
    )
