"""Sale endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from shopdesk.api.deps import get_current_user, get_sales_service
from shopdesk.api.schemas import SaleCancelRequest, SaleCreateRequest, SaleResponse
from shopdesk.domain.models import Payment, SaleItem, User
from shopdesk.services import SaleCreate, SalesService

router = APIRouter(prefix="/sales", tags=["sales"])


@router.get("", response_model=list[SaleResponse])
def list_sales(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    cash_session_id: Optional[str] = Query(default=None, alias="cashSessionId"),
    service: SalesService = Depends(get_sales_service),
    _: User = Depends(get_current_user),
):
    return [SaleResponse.model_validate(s) for s in service.list_sales(user_id, cash_session_id)]


@router.post("", response_model=SaleResponse, status_code=201)
def create_sale(
    data: SaleCreateRequest,
    service: SalesService = Depends(get_sales_service),
    user: User = Depends(get_current_user),
):
    sale = service.add_sale(
        SaleCreate(
            items=[SaleItem(**item.model_dump()) for item in data.items],
            payments=[Payment(**p.model_dump()) for p in data.payments],
            customer_id=data.customer_id,
            discount=data.discount,
            cash_session_id=data.cash_session_id,
            observations=data.observations,
            origin=data.origin,
        ),
        user,
    )
    return SaleResponse.model_validate(sale)


@router.post("/{sale_id}/cancel", response_model=SaleResponse)
def cancel_sale(
    sale_id: str,
    data: SaleCancelRequest,
    service: SalesService = Depends(get_sales_service),
    user: User = Depends(get_current_user),
):
    return SaleResponse.model_validate(service.cancel_sale(sale_id, data.reason, user))
