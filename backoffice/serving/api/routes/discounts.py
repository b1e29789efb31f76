"""
Discounts API Endpoints

CRUD plus activity views. Activity is evaluated against the store clock
at request time.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Response

from backoffice.container import Backoffice
from backoffice.discounts.evaluator import discount_status
from backoffice.serving.api.dependencies import get_backoffice, get_owner_id
from backoffice.storage.models import Discount, DiscountStatus

router = APIRouter()


class DiscountView(Discount):
    """Discount with its display status"""
    status: DiscountStatus


def _view(discount: Discount, backoffice: Backoffice) -> DiscountView:
    return DiscountView(
        **discount.model_dump(),
        status=discount_status(discount, backoffice.now()),
    )


@router.get("", response_model=List[DiscountView])
def list_discounts(
    status: Optional[DiscountStatus] = None,
    owner_id: int = Depends(get_owner_id),
    backoffice: Backoffice = Depends(get_backoffice),
) -> List[DiscountView]:
    """List discounts, optionally only those with a given display status"""
    if status is None:
        discounts = backoffice.discounts.list_discounts(owner_id)
    else:
        discounts = backoffice.discounts.list_discounts_by_status(owner_id, status, backoffice.now())
    return [_view(d, backoffice) for d in discounts]


@router.get("/active", response_model=List[Discount])
def list_active_discounts(
    owner_id: int = Depends(get_owner_id),
    backoffice: Backoffice = Depends(get_backoffice),
) -> List[Discount]:
    return backoffice.discounts.list_active_discounts(owner_id, backoffice.now())


@router.get("/{discount_id}", response_model=DiscountView)
def get_discount(
    discount_id: int,
    backoffice: Backoffice = Depends(get_backoffice),
) -> DiscountView:
    discount = backoffice.discounts.get_discount(discount_id)
    if discount is None:
        raise HTTPException(status_code=404, detail="Discount not found")
    return _view(discount, backoffice)


@router.post("", response_model=Discount, status_code=201)
def create_discount(
    payload: Dict[str, Any] = Body(...),
    owner_id: int = Depends(get_owner_id),
    backoffice: Backoffice = Depends(get_backoffice),
) -> Discount:
    return backoffice.discounts.create_discount(owner_id, payload)


@router.patch("/{discount_id}", response_model=Discount)
def update_discount(
    discount_id: int,
    payload: Dict[str, Any] = Body(...),
    backoffice: Backoffice = Depends(get_backoffice),
) -> Discount:
    discount = backoffice.discounts.update_discount(discount_id, payload)
    if discount is None:
        raise HTTPException(status_code=404, detail="Discount not found")
    return discount


@router.delete("/{discount_id}", status_code=204)
def delete_discount(
    discount_id: int,
    backoffice: Backoffice = Depends(get_backoffice),
) -> Response:
    if not backoffice.discounts.delete_discount(discount_id):
        raise HTTPException(status_code=404, detail="Discount not found")
    return Response(status_code=204)
