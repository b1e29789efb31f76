"""
Unit Tests - Discount Evaluator
"""
from datetime import datetime, timedelta, timezone
from itertools import product as cartesian

import pytest

from backoffice.discounts.evaluator import (
    discount_applies_to,
    discount_status,
    is_discount_active,
)
from backoffice.errors import ValidationError
from backoffice.storage.models import Discount, DiscountScope, DiscountStatus, Product

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)
DAY = timedelta(days=1)


def make_discount(**overrides) -> Discount:
    values = {
        "id": 1,
        "owner_id": 1,
        "name": "Promo",
        "type": "percentage",
        "value": 10,
        "scope": "all",
    }
    values.update(overrides)
    return Discount(**values)


def make_product(**overrides) -> Product:
    values = {"id": 7, "owner_id": 1, "name": "Mug", "price": 12.0, "cost": 4.0, "category_id": 3}
    values.update(overrides)
    return Product(**values)


class TestActiveWindow:
    """Tests for the boolean activity rule"""
    
    @pytest.mark.parametrize(
        "is_active,start,end",
        list(cartesian([True, False], [None, -DAY, DAY], [None, -DAY, DAY])),
    )
    def test_matches_definition(self, is_active, start, end):
        """Test active == flag and (no start or start <= now) and (no end or end >= now)"""
        discount = make_discount(
            is_active=is_active,
            start_date=NOW + start if start is not None else None,
            end_date=NOW + end if end is not None else None,
        )
        expected = (
            is_active
            and (discount.start_date is None or discount.start_date <= NOW)
            and (discount.end_date is None or discount.end_date >= NOW)
        )
        
        assert is_discount_active(discount, NOW) == expected
    
    def test_expired_window_is_inactive(self):
        """Test an end date in the past deactivates without touching the flag"""
        discount = make_discount(is_active=True, end_date=NOW - DAY)
        
        assert is_discount_active(discount, NOW) is False
        assert discount.is_active is True
        assert discount_status(discount, NOW) == DiscountStatus.EXPIRED
    
    def test_future_start_is_scheduled(self):
        """Test a future start is inactive but displays as scheduled"""
        discount = make_discount(is_active=True, start_date=NOW + DAY)
        
        assert is_discount_active(discount, NOW) is False
        assert discount_status(discount, NOW) == DiscountStatus.SCHEDULED
    
    def test_window_bounds_inclusive(self):
        """Test start == now and end == now both count as running"""
        discount = make_discount(start_date=NOW, end_date=NOW)
        
        assert is_discount_active(discount, NOW) is True
        assert discount_status(discount, NOW) == DiscountStatus.ACTIVE
    
    def test_flag_overrides_window(self):
        """Test a cleared flag wins over a running window"""
        discount = make_discount(is_active=False, start_date=NOW - DAY, end_date=NOW + DAY)
        
        assert is_discount_active(discount, NOW) is False
        assert discount_status(discount, NOW) == DiscountStatus.INACTIVE
    
    def test_naive_dates_read_as_utc(self):
        """Test naive datetimes compare as UTC"""
        discount = make_discount(start_date=datetime(2025, 1, 15, 11, 0))
        
        assert discount.start_date.tzinfo is not None
        assert is_discount_active(discount, datetime(2025, 1, 15, 12, 0)) is True


class TestScopeMatching:
    """Tests for declarative scope matching"""
    
    def test_all_matches_everything(self):
        """Test scope=all selects any product"""
        assert discount_applies_to(make_discount(scope="all"), make_product())
    
    def test_category_scope(self):
        """Test scope=category compares category ids"""
        product = make_product(category_id=3)
        
        assert discount_applies_to(make_discount(scope="category", scope_id=3), product)
        assert not discount_applies_to(make_discount(scope="category", scope_id=4), product)
    
    def test_product_scope(self):
        """Test scope=product compares product ids"""
        product = make_product(id=7)
        
        assert discount_applies_to(make_discount(scope="product", scope_id=7), product)
        assert not discount_applies_to(make_discount(scope="product", scope_id=3), product)
    
    def test_tag_scope(self):
        """Test scope=tag looks at the product's tag ids"""
        discount = make_discount(scope="tag", scope_id=5)
        
        assert discount_applies_to(discount, make_product(), tag_ids={5, 6})
        assert not discount_applies_to(discount, make_product(), tag_ids={6})


class TestDiscountService:
    """Tests for discount CRUD and queries"""
    
    def test_scoped_discount_requires_scope_id(self, backoffice, owner):
        """Test category scope without scope_id is rejected"""
        with pytest.raises(ValidationError) as exc_info:
            backoffice.discounts.create_discount(owner.id, {
                "name": "Apparel", "type": "percentage", "value": 20, "scope": "category",
            })
        
        assert "scope_id" in exc_info.value.errors
        assert len(backoffice.store.discounts) == 0
    
    def test_scope_all_clears_scope_id(self, backoffice, owner):
        """Test scope=all drops any scope_id given"""
        discount = backoffice.discounts.create_discount(owner.id, {
            "name": "Everything", "type": "fixed", "value": 5, "scope": "all", "scope_id": 9,
        })
        
        assert discount.scope == DiscountScope.ALL
        assert discount.scope_id is None
    
    def test_percentage_above_hundred_accepted(self, backoffice, owner):
        """Test percentage values are only checked for sign"""
        discount = backoffice.discounts.create_discount(owner.id, {
            "name": "Typo", "type": "percentage", "value": 150, "scope": "all",
        })
        
        assert discount.value == 150
    
    def test_negative_value_rejected(self, backoffice, owner):
        """Test discount values cannot be negative"""
        with pytest.raises(ValidationError) as exc_info:
            backoffice.discounts.create_discount(owner.id, {
                "name": "Bad", "type": "fixed", "value": -1, "scope": "all",
            })
        
        assert "value" in exc_info.value.errors
    
    def test_update_checks_merged_scope(self, backoffice, owner):
        """Test switching to a scoped discount without scope_id is rejected"""
        discount = backoffice.discounts.create_discount(owner.id, {
            "name": "Everything", "type": "fixed", "value": 5, "scope": "all",
        })
        
        with pytest.raises(ValidationError):
            backoffice.discounts.update_discount(discount.id, {"scope": "tag"})
        
        assert backoffice.discounts.get_discount(discount.id) == discount
    
    def test_update_to_all_clears_scope_id(self, backoffice, owner):
        """Test widening a scoped discount drops its scope_id"""
        discount = backoffice.discounts.create_discount(owner.id, {
            "name": "Tagged", "type": "fixed", "value": 5, "scope": "tag", "scope_id": 2,
        })
        
        updated = backoffice.discounts.update_discount(discount.id, {"scope": "all"})
        
        assert updated.scope_id is None
        assert updated.name == "Tagged"
    
    def test_update_missing_returns_none(self, backoffice):
        """Test updating an unknown discount reports absence"""
        assert backoffice.discounts.update_discount(42, {"value": 1}) is None
    
    def test_active_and_status_listing(self, backoffice, owner, other_owner, clock):
        """Test activity queries use the rule and stay per owner"""
        now = clock.now
        create = backoffice.discounts.create_discount
        running = create(owner.id, {"name": "Running", "type": "fixed", "value": 5, "scope": "all"})
        create(owner.id, {"name": "Later", "type": "fixed", "value": 5, "scope": "all",
                          "start_date": now + DAY})
        create(owner.id, {"name": "Over", "type": "fixed", "value": 5, "scope": "all",
                          "end_date": now - DAY})
        create(owner.id, {"name": "Off", "type": "fixed", "value": 5, "scope": "all",
                          "is_active": False})
        create(other_owner.id, {"name": "Theirs", "type": "fixed", "value": 5, "scope": "all"})
        
        assert backoffice.discounts.list_active_discounts(owner.id, now) == [running]
        by_status = {
            status: [d.name for d in backoffice.discounts.list_discounts_by_status(owner.id, status, now)]
            for status in DiscountStatus
        }
        assert by_status == {
            DiscountStatus.ACTIVE: ["Running"],
            DiscountStatus.SCHEDULED: ["Later"],
            DiscountStatus.EXPIRED: ["Over"],
            DiscountStatus.INACTIVE: ["Off"],
        }
    
    def test_discounts_for_product(self, backoffice, owner, product_data, clock):
        """Test only active discounts targeting the product are returned"""
        category = backoffice.catalog.create_category(owner.id, {"name": "Audio"})
        product = backoffice.catalog.create_product(owner.id, dict(product_data, category_id=category.id))
        tag = backoffice.catalog.create_tag(owner.id, {"name": "Sale"})
        backoffice.catalog.add_tag_to_product(product.id, tag.id)
        create = backoffice.discounts.create_discount
        by_category = create(owner.id, {"name": "Audio", "type": "percentage", "value": 10,
                                        "scope": "category", "scope_id": category.id})
        by_tag = create(owner.id, {"name": "Sale", "type": "percentage", "value": 10,
                                   "scope": "tag", "scope_id": tag.id})
        create(owner.id, {"name": "Other product", "type": "fixed", "value": 3,
                          "scope": "product", "scope_id": product.id + 1})
        create(owner.id, {"name": "Paused", "type": "fixed", "value": 3,
                          "scope": "product", "scope_id": product.id, "is_active": False})
        
        found = backoffice.discounts.discounts_for_product(owner.id, product.id, clock.now)
        
        assert found == [by_category, by_tag]
        assert backoffice.discounts.discounts_for_product(owner.id, 999, clock.now) == []
