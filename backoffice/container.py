"""
Service Container

Bundles one entity store with the services that operate on it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from backoffice.accounts import UserService
from backoffice.analytics.aggregator import AnalyticsAggregator
from backoffice.catalog.service import CatalogService
from backoffice.discounts.evaluator import DiscountService
from backoffice.orders.lifecycle import OrderService, ReturnService
from backoffice.quality.integrity import IntegrityAuditor, IntegrityReport, create_default_auditor
from backoffice.storage.models import utc_now
from backoffice.storage.store import Clock, EntityStore


@dataclass
class Backoffice:
    store: EntityStore
    users: UserService = field(init=False)
    catalog: CatalogService = field(init=False)
    discounts: DiscountService = field(init=False)
    orders: OrderService = field(init=False)
    returns: ReturnService = field(init=False)
    analytics: AnalyticsAggregator = field(init=False)
    auditor: IntegrityAuditor = field(init=False)
    
    def __post_init__(self):
        self.users = UserService(self.store)
        self.catalog = CatalogService(self.store)
        self.discounts = DiscountService(self.store)
        self.orders = OrderService(self.store)
        self.returns = ReturnService(self.store)
        self.analytics = AnalyticsAggregator(self.store)
        self.auditor = create_default_auditor()
    
    def now(self) -> datetime:
        return self.store.clock()
    
    def audit(self) -> IntegrityReport:
        return self.auditor.audit(self.store)


def create_backoffice(clock: Optional[Clock] = None) -> Backoffice:
    return Backoffice(store=EntityStore(clock=clock or utc_now))
