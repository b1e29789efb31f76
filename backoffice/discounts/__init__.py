"""
Discounts Module
"""
from .evaluator import (
    DiscountService,
    discount_applies_to,
    discount_status,
    is_discount_active,
)

__all__ = [
    "DiscountService",
    "discount_applies_to",
    "discount_status",
    "is_discount_active",
]
