"""
Shop Back-Office

Catalog, promotion, order/return and analytics core for a small shop.
"""

__version__ = "1.0.0"
