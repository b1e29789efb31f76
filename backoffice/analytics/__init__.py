"""
Analytics Module
"""
from .aggregator import (
    AnalyticsAggregator,
    CategoryProductCount,
    DashboardSummary,
    ProductRevenue,
)

__all__ = [
    "AnalyticsAggregator",
    "CategoryProductCount",
    "DashboardSummary",
    "ProductRevenue",
]
