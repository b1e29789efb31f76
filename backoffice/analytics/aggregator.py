"""
Analytics Aggregator

Dashboard metrics derived from raw orders, order items and products.

Every query is a fresh full scan; nothing is cached or maintained
incrementally, so results always reflect the store at call time. That
includes profit, which is priced against each product's *current* cost:
changing a product's cost changes the profit of past orders too.

Date windows are inclusive on both ends and apply to the parent order's
created_at. Orders without a timestamp are always in the window; revenue
and profit share that rule.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel
import structlog

from backoffice.discounts.evaluator import is_discount_active
from backoffice.orders.lifecycle import newest_first
from backoffice.storage.models import Discount, Order, ensure_utc
from backoffice.storage.store import EntityStore

logger = structlog.get_logger(__name__)


class ProductRevenue(BaseModel):
    """Revenue for one product; name is the item's denormalized product_name"""
    product_id: int
    name: str
    revenue: float


class CategoryProductCount(BaseModel):
    """Number of products filed under a category"""
    category_id: int
    name: str
    count: int


class DashboardStats(BaseModel):
    total_revenue: float
    total_profit: float
    total_customers: int
    active_products: int


class DashboardSummary(BaseModel):
    """Everything the dashboard page renders"""
    stats: DashboardStats
    product_counts_by_category: List[CategoryProductCount]
    recent_orders: List[Order]
    active_discounts: List[Discount]


def _in_window(
    order: Order,
    start_date: Optional[datetime],
    end_date: Optional[datetime],
) -> bool:
    if order.created_at is None:
        return True
    if start_date is not None and order.created_at < start_date:
        return False
    if end_date is not None and order.created_at > end_date:
        return False
    return True


class AnalyticsAggregator:
    """
    Read-only analytics over an entity store.
    
    Example:
        aggregator = AnalyticsAggregator(store)
        rows = aggregator.product_revenue(owner_id=1, start_date=datetime(2025, 1, 1))
        total = aggregator.total_revenue(owner_id=1)
    """
    
    def __init__(self, store: EntityStore):
        self.store = store
    
    def _orders_in_window(
        self,
        owner_id: int,
        start_date: Optional[datetime],
        end_date: Optional[datetime],
    ) -> Dict[int, Order]:
        start_date = ensure_utc(start_date)
        end_date = ensure_utc(end_date)
        return {
            order.id: order
            for order in self.store.orders.list(lambda o: o.owner_id == owner_id)
            if _in_window(order, start_date, end_date)
        }
    
    def product_revenue(
        self,
        owner_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[ProductRevenue]:
        """
        Item totals grouped by product, in order of first appearance.
        
        Products that were deleted since still get a row.
        """
        orders = self._orders_in_window(owner_id, start_date, end_date)
        rows: Dict[int, ProductRevenue] = {}
        
        for item in self.store.order_items.list(lambda i: i.order_id in orders):
            row = rows.get(item.product_id)
            if row is None:
                row = rows[item.product_id] = ProductRevenue(
                    product_id=item.product_id,
                    name=item.product_name,
                    revenue=0.0,
                )
            row.revenue += item.total
        
        logger.debug(
            "Product revenue computed",
            owner_id=owner_id,
            orders=len(orders),
            products=len(rows),
        )
        return list(rows.values())
    
    def total_revenue(
        self,
        owner_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> float:
        return sum(
            (row.revenue for row in self.product_revenue(owner_id, start_date, end_date)),
            0.0,
        )
    
    def total_profit(
        self,
        owner_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> float:
        """
        Sum of item.total - product.cost * item.quantity.
        
        Items whose product no longer exists are left out, since there is
        no cost to price them against.
        """
        orders = self._orders_in_window(owner_id, start_date, end_date)
        profit = 0.0
        skipped = 0
        
        for item in self.store.order_items.list(lambda i: i.order_id in orders):
            product = self.store.products.get(item.product_id)
            if product is None:
                skipped += 1
                continue
            profit += item.total - product.cost * item.quantity
        
        if skipped:
            logger.debug("Profit skipped items of deleted products", owner_id=owner_id, skipped=skipped)
        return profit
    
    def total_customers(self, owner_id: int) -> int:
        """Distinct customer emails, compared exactly as stored"""
        emails = {o.customer_email for o in self.store.orders.list(lambda o: o.owner_id == owner_id)}
        return len(emails)
    
    def product_counts(self, owner_id: int) -> List[CategoryProductCount]:
        """Product count per owned category; empty categories report 0"""
        counts: Dict[Optional[int], int] = {}
        for product in self.store.products.list():
            counts[product.category_id] = counts.get(product.category_id, 0) + 1
        
        return [
            CategoryProductCount(
                category_id=category.id,
                name=category.name,
                count=counts.get(category.id, 0),
            )
            for category in self.store.categories.list(lambda c: c.owner_id == owner_id)
        ]
    
    def dashboard(
        self,
        owner_id: int,
        now: datetime,
        recent_limit: int = 5,
    ) -> DashboardSummary:
        orders = self.store.orders.list(lambda o: o.owner_id == owner_id)
        recent_orders = sorted(orders, key=newest_first)[:recent_limit]
        active_discounts = [
            d for d in self.store.discounts.list(lambda d: d.owner_id == owner_id)
            if is_discount_active(d, now)
        ]
        
        stats = DashboardStats(
            total_revenue=self.total_revenue(owner_id),
            total_profit=self.total_profit(owner_id),
            total_customers=self.total_customers(owner_id),
            active_products=len(self.store.products.list(lambda p: p.owner_id == owner_id)),
        )
        logger.info(
            "Dashboard computed",
            owner_id=owner_id,
            total_revenue=stats.total_revenue,
            total_profit=stats.total_profit,
            total_customers=stats.total_customers,
        )
        return DashboardSummary(
            stats=stats,
            product_counts_by_category=self.product_counts(owner_id),
            recent_orders=recent_orders,
            active_discounts=active_discounts,
        )
