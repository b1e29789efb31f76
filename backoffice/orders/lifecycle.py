"""
Order and Return Lifecycle

Order mutation, line items, and return requests bound to an order.

No transition graph is enforced. status, payment_status and escrow_status
move independently, so a cancelled order with released escrow is a valid
record. Return statuses can likewise jump between any two values.

Return requests reference the order they belong to (which must exist) and a
list of order item ids. Those ids are stored as submitted; they are not
checked against the order's items, and refund_amount is never recomputed.
Use calculate_refund_amount to derive the figure before submitting.
"""

from typing import Any, Collection as CollectionT, List, Mapping, Optional, Sequence

import structlog

from backoffice.errors import ValidationError, validate_payload
from backoffice.storage.models import (
    Order,
    OrderCreate,
    OrderItem,
    OrderItemCreate,
    OrderItemUpdate,
    OrderUpdate,
    Return,
    ReturnCreate,
    ReturnUpdate,
)
from backoffice.storage.store import EntityStore

logger = structlog.get_logger(__name__)


def newest_first(order: Order) -> float:
    """Sort key: newest created_at first, orders without a timestamp last"""
    return -order.created_at.timestamp() if order.created_at else float("inf")


class OrderService:
    """Orders and their line items"""
    
    def __init__(self, store: EntityStore):
        self.store = store
    
    def list_orders(self, owner_id: int) -> List[Order]:
        return self.store.orders.list(lambda o: o.owner_id == owner_id)
    
    def get_order(self, order_id: int) -> Optional[Order]:
        return self.store.orders.get(order_id)
    
    def get_recent_orders(self, owner_id: int, limit: int = 5) -> List[Order]:
        return sorted(self.list_orders(owner_id), key=newest_first)[:limit]
    
    def create_order(
        self,
        owner_id: int,
        data: Mapping[str, Any],
        items: Optional[Sequence[Mapping[str, Any]]] = None,
    ) -> Order:
        """
        Create an order and, optionally, its line items.
        
        Every item is validated before the order is stored, so a bad item
        leaves nothing behind. The order total is stored as given.
        """
        payload = validate_payload(OrderCreate, data, "order")
        item_payloads = []
        item_errors = {}
        for index, item in enumerate(items or []):
            try:
                item_payloads.append(validate_payload(OrderItemCreate, item, "order item"))
            except ValidationError as e:
                for field, messages in e.errors.items():
                    item_errors[f"items.{index}.{field}"] = messages
        if item_errors:
            raise ValidationError("order", item_errors)
        
        with self.store.lock:
            order = self.store.orders.create(dict(payload.model_dump(), owner_id=owner_id))
            for item_payload in item_payloads:
                self.store.order_items.create(dict(item_payload.model_dump(), order_id=order.id))
        
        logger.info(
            "Order created",
            id=order.id,
            owner_id=owner_id,
            total=order.total,
            items=len(item_payloads),
        )
        return order
    
    def update_order(self, order_id: int, data: Mapping[str, Any]) -> Optional[Order]:
        """Partial update; status fields are not cross-checked"""
        changes = validate_payload(OrderUpdate, data, "order").model_dump(exclude_unset=True)
        order = self.store.orders.update(order_id, changes)
        if order is not None:
            logger.info(
                "Order updated",
                id=order_id,
                fields=sorted(changes),
                status=order.status.value,
                payment_status=order.payment_status.value,
                escrow_status=order.escrow_status.value,
            )
        return order
    
    def get_order_items(self, order_id: int) -> List[OrderItem]:
        return self.store.order_items.list(lambda i: i.order_id == order_id)
    
    def get_order_item(self, item_id: int) -> Optional[OrderItem]:
        return self.store.order_items.get(item_id)
    
    def add_order_item(self, order_id: int, data: Mapping[str, Any]) -> OrderItem:
        payload = validate_payload(OrderItemCreate, data, "order item")
        with self.store.lock:
            if self.store.orders.get(order_id) is None:
                raise ValidationError(
                    "order item", {"order_id": [f"order {order_id} does not exist"]}
                )
            item = self.store.order_items.create(dict(payload.model_dump(), order_id=order_id))
        
        logger.info("Order item added", id=item.id, order_id=order_id, product_id=item.product_id)
        return item
    
    def update_order_item(self, item_id: int, data: Mapping[str, Any]) -> Optional[OrderItem]:
        """Partial update. total is not recomputed from price and quantity."""
        changes = validate_payload(OrderItemUpdate, data, "order item").model_dump(exclude_unset=True)
        return self.store.order_items.update(item_id, changes)


class ReturnService:
    """Return requests and refund bookkeeping"""
    
    def __init__(self, store: EntityStore):
        self.store = store
    
    def list_returns(self, owner_id: int) -> List[Return]:
        order_ids = {o.id for o in self.store.orders.list(lambda o: o.owner_id == owner_id)}
        return self.store.returns.list(lambda r: r.order_id in order_ids)
    
    def get_return(self, return_id: int) -> Optional[Return]:
        return self.store.returns.get(return_id)
    
    def create_return(self, data: Mapping[str, Any]) -> Return:
        """
        Open a return against an existing order.
        
        requested_items may name items of any order, or none at all.
        """
        payload = validate_payload(ReturnCreate, data, "return")
        with self.store.lock:
            if self.store.orders.get(payload.order_id) is None:
                raise ValidationError(
                    "return", {"order_id": [f"order {payload.order_id} does not exist"]}
                )
            return_request = self.store.returns.create(payload.model_dump())
        
        logger.info(
            "Return created",
            id=return_request.id,
            order_id=return_request.order_id,
            requested_items=return_request.requested_items,
            refund_amount=return_request.refund_amount,
        )
        return return_request
    
    def update_return(self, return_id: int, data: Mapping[str, Any]) -> Optional[Return]:
        changes = validate_payload(ReturnUpdate, data, "return").model_dump(exclude_unset=True)
        with self.store.lock:
            order_id = changes.get("order_id")
            if order_id is not None and self.store.orders.get(order_id) is None:
                raise ValidationError("return", {"order_id": [f"order {order_id} does not exist"]})
            return_request = self.store.returns.update(return_id, changes)
        if return_request is not None:
            logger.info(
                "Return updated",
                id=return_id,
                fields=sorted(changes),
                status=return_request.status.value,
            )
        return return_request
    
    def calculate_refund_amount(self, order_id: int, item_ids: CollectionT[int]) -> float:
        """Sum of total over the order's items whose id is in item_ids"""
        selected = set(item_ids)
        items = self.store.order_items.list(lambda i: i.order_id == order_id)
        return sum((item.total for item in items if item.id in selected), 0.0)
