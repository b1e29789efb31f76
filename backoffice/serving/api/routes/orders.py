"""
Orders API Endpoints

Order CRUD (no delete), line items and refund quotes.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import BaseModel

from backoffice.config import Settings
from backoffice.container import Backoffice
from backoffice.errors import ValidationError
from backoffice.serving.api.dependencies import get_app_settings, get_backoffice, get_owner_id
from backoffice.storage.models import Order, OrderItem

router = APIRouter()


class OrderDetail(Order):
    """Order with its line items"""
    items: List[OrderItem] = []


class RefundQuote(BaseModel):
    """Refund due for a selection of an order's items"""
    order_id: int
    item_ids: List[int]
    refund_amount: float


def _detail(order: Order, backoffice: Backoffice) -> OrderDetail:
    return OrderDetail(**order.model_dump(), items=backoffice.orders.get_order_items(order.id))


@router.get("", response_model=List[Order])
def list_orders(
    owner_id: int = Depends(get_owner_id),
    backoffice: Backoffice = Depends(get_backoffice),
) -> List[Order]:
    return backoffice.orders.list_orders(owner_id)


@router.get("/recent", response_model=List[OrderDetail])
def get_recent_orders(
    limit: Optional[int] = Query(None, ge=1, le=100),
    owner_id: int = Depends(get_owner_id),
    backoffice: Backoffice = Depends(get_backoffice),
    settings: Settings = Depends(get_app_settings),
) -> List[OrderDetail]:
    """Newest orders first, each with its items"""
    limit = limit or settings.recent_orders_limit
    return [_detail(o, backoffice) for o in backoffice.orders.get_recent_orders(owner_id, limit)]


@router.get("/{order_id}", response_model=OrderDetail)
def get_order(
    order_id: int,
    backoffice: Backoffice = Depends(get_backoffice),
) -> OrderDetail:
    order = backoffice.orders.get_order(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return _detail(order, backoffice)


@router.post("", response_model=Order, status_code=201)
def create_order(
    payload: Dict[str, Any] = Body(...),
    owner_id: int = Depends(get_owner_id),
    backoffice: Backoffice = Depends(get_backoffice),
) -> Order:
    """Create an order; an optional "items" list creates its line items too"""
    data = dict(payload)
    items = data.pop("items", None)
    if items is not None and not isinstance(items, list):
        raise ValidationError("order", {"items": ["must be a list of order items"]})
    return backoffice.orders.create_order(owner_id, data, items=items)


@router.patch("/{order_id}", response_model=Order)
def update_order(
    order_id: int,
    payload: Dict[str, Any] = Body(...),
    backoffice: Backoffice = Depends(get_backoffice),
) -> Order:
    order = backoffice.orders.update_order(order_id, payload)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.get("/{order_id}/items", response_model=List[OrderItem])
def get_order_items(
    order_id: int,
    backoffice: Backoffice = Depends(get_backoffice),
) -> List[OrderItem]:
    return backoffice.orders.get_order_items(order_id)


@router.post("/{order_id}/items", response_model=OrderItem, status_code=201)
def add_order_item(
    order_id: int,
    payload: Dict[str, Any] = Body(...),
    backoffice: Backoffice = Depends(get_backoffice),
) -> OrderItem:
    if backoffice.orders.get_order(order_id) is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return backoffice.orders.add_order_item(order_id, payload)


@router.get("/items/{item_id}", response_model=OrderItem)
def get_order_item(
    item_id: int,
    backoffice: Backoffice = Depends(get_backoffice),
) -> OrderItem:
    item = backoffice.orders.get_order_item(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Order item not found")
    return item


@router.patch("/items/{item_id}", response_model=OrderItem)
def update_order_item(
    item_id: int,
    payload: Dict[str, Any] = Body(...),
    backoffice: Backoffice = Depends(get_backoffice),
) -> OrderItem:
    item = backoffice.orders.update_order_item(item_id, payload)
    if item is None:
        raise HTTPException(status_code=404, detail="Order item not found")
    return item


@router.get("/{order_id}/refund-amount", response_model=RefundQuote)
def get_refund_amount(
    order_id: int,
    item_ids: List[int] = Query(default=[]),
    backoffice: Backoffice = Depends(get_backoffice),
) -> RefundQuote:
    """Refund for the selected items, to pre-fill a return request"""
    if backoffice.orders.get_order(order_id) is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return RefundQuote(
        order_id=order_id,
        item_ids=item_ids,
        refund_amount=backoffice.returns.calculate_refund_amount(order_id, item_ids),
    )
