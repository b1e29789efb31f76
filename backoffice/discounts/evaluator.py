"""
Discount Evaluator

Decides whether a promotion is running and which products it targets.

A discount is active when its is_active flag is set AND the current time is
inside its optional [start_date, end_date] window (both ends inclusive).
The flag and the window are independent: an expired window never clears
is_active, and a cleared flag overrides any window.

Nothing here prices anything. Scope matching only answers "does this
discount target this product"; applying the percentage or fixed value
is left to whatever checkout flow consumes these results.
"""

from datetime import datetime
from typing import Any, Collection as CollectionT, List, Mapping, Optional

import structlog

from backoffice.errors import ValidationError, validate_payload
from backoffice.storage.models import (
    Discount,
    DiscountCreate,
    DiscountScope,
    DiscountStatus,
    DiscountUpdate,
    Product,
    ensure_utc,
)
from backoffice.storage.store import EntityStore

logger = structlog.get_logger(__name__)


def is_discount_active(discount: Discount, now: datetime) -> bool:
    """Boolean activity test used when listing or applying discounts"""
    now = ensure_utc(now)
    if not discount.is_active:
        return False
    if discount.start_date is not None and discount.start_date > now:
        return False
    if discount.end_date is not None and discount.end_date < now:
        return False
    return True


def discount_status(discount: Discount, now: datetime) -> DiscountStatus:
    """
    Display classification.
    
    Checked in order: inactive flag, future start (scheduled), past end
    (expired). A window that both starts in the future and ended in the
    past reads as scheduled.
    """
    now = ensure_utc(now)
    if not discount.is_active:
        return DiscountStatus.INACTIVE
    if discount.start_date is not None and discount.start_date > now:
        return DiscountStatus.SCHEDULED
    if discount.end_date is not None and discount.end_date < now:
        return DiscountStatus.EXPIRED
    return DiscountStatus.ACTIVE


def discount_applies_to(
    discount: Discount,
    product: Product,
    tag_ids: CollectionT[int] = (),
) -> bool:
    """
    Whether a discount's scope selects a product.
    
    all selects everything; category, product and tag compare scope_id with
    the product's category_id, its own id, or one of its tag ids.
    """
    if discount.scope == DiscountScope.ALL:
        return True
    if discount.scope_id is None:
        return False
    if discount.scope == DiscountScope.CATEGORY:
        return product.category_id == discount.scope_id
    if discount.scope == DiscountScope.PRODUCT:
        return product.id == discount.scope_id
    return discount.scope_id in tag_ids


def _check_scope(values: Mapping[str, Any]) -> dict:
    """Clear scope_id for scope=all; require it for every other scope"""
    values = dict(values)
    if values.get("scope") == DiscountScope.ALL:
        values["scope_id"] = None
    elif values.get("scope_id") is None:
        raise ValidationError(
            "discount",
            {"scope_id": [f"required when scope is '{values.get('scope').value}'"]},
        )
    return values


class DiscountService:
    """Discount CRUD plus activity queries"""
    
    def __init__(self, store: EntityStore):
        self.store = store
    
    def list_discounts(self, owner_id: int) -> List[Discount]:
        return self.store.discounts.list(lambda d: d.owner_id == owner_id)
    
    def get_discount(self, discount_id: int) -> Optional[Discount]:
        return self.store.discounts.get(discount_id)
    
    def create_discount(self, owner_id: int, data: Mapping[str, Any]) -> Discount:
        payload = validate_payload(DiscountCreate, data, "discount")
        values = _check_scope(payload.model_dump())
        discount = self.store.discounts.create(dict(values, owner_id=owner_id))
        logger.info(
            "Discount created",
            id=discount.id,
            owner_id=owner_id,
            scope=discount.scope.value,
            scope_id=discount.scope_id,
        )
        return discount
    
    def update_discount(self, discount_id: int, data: Mapping[str, Any]) -> Optional[Discount]:
        """
        Partial update. The scope rule is checked against the merged record,
        so changing scope to 'tag' without a scope_id is rejected.
        """
        changes = validate_payload(DiscountUpdate, data, "discount").model_dump(exclude_unset=True)
        with self.store.lock:
            current = self.store.discounts.get(discount_id)
            if current is None:
                return None
            merged = _check_scope(dict(current.model_dump(), **changes))
            if "scope" in changes or "scope_id" in changes:
                changes["scope_id"] = merged["scope_id"]
            discount = self.store.discounts.update(discount_id, changes)
        
        logger.info("Discount updated", id=discount_id, fields=sorted(changes))
        return discount
    
    def delete_discount(self, discount_id: int) -> bool:
        deleted = self.store.discounts.delete(discount_id)
        if deleted:
            logger.info("Discount deleted", id=discount_id)
        return deleted
    
    def list_active_discounts(self, owner_id: int, now: datetime) -> List[Discount]:
        return [d for d in self.list_discounts(owner_id) if is_discount_active(d, now)]
    
    def list_discounts_by_status(
        self,
        owner_id: int,
        status: DiscountStatus,
        now: datetime,
    ) -> List[Discount]:
        return [d for d in self.list_discounts(owner_id) if discount_status(d, now) == status]
    
    def discounts_for_product(
        self,
        owner_id: int,
        product_id: int,
        now: datetime,
    ) -> List[Discount]:
        """Active discounts whose scope selects the product (empty if it does not exist)"""
        product = self.store.products.get(product_id)
        if product is None:
            return []
        tag_ids = {
            link.tag_id
            for link in self.store.product_tags.list(lambda pt: pt.product_id == product_id)
        }
        return [
            d for d in self.list_active_discounts(owner_id, now)
            if discount_applies_to(d, product, tag_ids)
        ]
