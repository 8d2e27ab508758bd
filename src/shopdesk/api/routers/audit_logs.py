"""Audit trail endpoints (read-only)."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from shopdesk.api.deps import get_audit_service, require_admin
from shopdesk.api.schemas import AuditLogResponse, CashRegisterAuditResponse
from shopdesk.domain.models import User
from shopdesk.services import AuditService

router = APIRouter(prefix="/audit-logs", tags=["audit-logs"])


@router.get("", response_model=list[AuditLogResponse])
def list_audit_logs(
    service: AuditService = Depends(get_audit_service),
    _: User = Depends(require_admin),
):
    return [AuditLogResponse.model_validate(e) for e in service.get_audit_logs()]


@router.get("/cash-register", response_model=list[CashRegisterAuditResponse])
def list_cash_register_audit_logs(
    session_id: Optional[str] = Query(default=None, alias="sessionId"),
    service: AuditService = Depends(get_audit_service),
    _: User = Depends(require_admin),
):
    return [
        CashRegisterAuditResponse.model_validate(e)
        for e in service.get_cash_register_audit_logs(session_id)
    ]
