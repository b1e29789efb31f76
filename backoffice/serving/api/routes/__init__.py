"""
API Routes Module
"""
from .health import router as health_router
from .products import router as products_router
from .categories import router as categories_router
from .tags import router as tags_router
from .discounts import router as discounts_router
from .orders import router as orders_router
from .returns import router as returns_router
from .analytics import router as analytics_router

__all__ = [
    "health_router",
    "products_router",
    "categories_router",
    "tags_router",
    "discounts_router",
    "orders_router",
    "returns_router",
    "analytics_router",
]
