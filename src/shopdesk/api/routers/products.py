"""Product endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from shopdesk.api.deps import get_current_user, get_product_service
from shopdesk.api.schemas import (
    ProductCreateRequest,
    ProductResponse,
    PurchaseRequest,
    StockUpdateRequest,
)
from shopdesk.domain.models import User
from shopdesk.services import ProductCreate, ProductService, PurchaseItem

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=list[ProductResponse])
def list_products(
    category: Optional[str] = Query(default=None),
    brand: Optional[str] = Query(default=None),
    model: Optional[str] = Query(default=None),
    service: ProductService = Depends(get_product_service),
    _: User = Depends(get_current_user),
):
    filters = {k: v for k, v in {"category": category, "brand": brand, "model": model}.items() if v}
    return [ProductResponse.model_validate(p) for p in service.list_products(filters or None)]


@router.post("", response_model=ProductResponse, status_code=201)
def create_product(
    data: ProductCreateRequest,
    service: ProductService = Depends(get_product_service),
    user: User = Depends(get_current_user),
):
    product = service.add_product(ProductCreate(**data.model_dump()), user)
    return ProductResponse.model_validate(product)


@router.post("/purchases", response_model=list[ProductResponse], status_code=201)
def register_purchase(
    data: PurchaseRequest,
    service: ProductService = Depends(get_product_service),
    user: User = Depends(get_current_user),
):
    items = [PurchaseItem(**item.model_dump()) for item in data.items]
    products = service.register_purchase(items, data.supplier_name, user)
    return [ProductResponse.model_validate(p) for p in products]


@router.put("/{product_id}/stock", response_model=ProductResponse)
def update_stock(
    product_id: str,
    data: StockUpdateRequest,
    service: ProductService = Depends(get_product_service),
    user: User = Depends(get_current_user),
):
    product = service.update_stock(product_id, data.new_stock, data.reason, user)
    return ProductResponse.model_validate(product)


@router.delete("/{product_id}", status_code=204)
def delete_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
    user: User = Depends(get_current_user),
):
    service.delete_product(product_id, user)
