"""
Integrity Audit

Rule-based consistency checks across the entity store.

The store accepts dangling references, duplicate tag links and return
requests naming items of another order. This module finds them; it never
modifies the store or blocks a write.

Features:
- Referential checks (category, tag links, order items, returns, discount scope)
- Duplicate association detection
- Derived amount checks (item totals, refund amounts)
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import structlog

from backoffice.storage.models import DiscountScope, utc_now
from backoffice.storage.store import EntityStore

logger = structlog.get_logger(__name__)

# (ids of failing records, number of records examined, extra details)
CheckOutcome = Tuple[Sequence[int], int, Dict[str, Any]]

AMOUNT_TOLERANCE = 0.005


class IntegritySeverity(str, Enum):
    """Severity levels for integrity failures"""
    ERROR = "error"  # broken reference
    WARNING = "warning"  # inconsistent but usable


class IntegrityStatus(str, Enum):
    """Overall audit status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class IntegrityCheck:
    """Single check result"""
    name: str
    passed: bool
    severity: IntegritySeverity
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    failed_records: List[int] = field(default_factory=list)
    total_records: int = 0


@dataclass
class IntegrityReport:
    """Complete audit result"""
    status: IntegrityStatus
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[IntegrityCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=utc_now)
    completed_at: Optional[datetime] = None
    
    def get(self, name: str) -> Optional[IntegrityCheck]:
        return next((c for c in self.checks if c.name == name), None)


class IntegrityAuditor:
    """
    Runs a list of named checks against a store.
    
    Example:
        auditor = IntegrityAuditor()
        auditor.add_check("product_category_refs", check_product_categories, "dangling category")
        report = auditor.audit(store)
    """
    
    def __init__(self):
        self._checks: List[Tuple[str, Callable[[EntityStore], CheckOutcome], str, IntegritySeverity]] = []
    
    def add_check(
        self,
        name: str,
        check_func: Callable[[EntityStore], CheckOutcome],
        description: str,
        severity: IntegritySeverity = IntegritySeverity.ERROR,
    ) -> "IntegrityAuditor":
        self._checks.append((name, check_func, description, severity))
        return self
    
    def audit(self, store: EntityStore) -> IntegrityReport:
        """
        Run every registered check.
        
        Args:
            store: Store to inspect
            
        Returns:
            IntegrityReport with one result per check
        """
        started_at = utc_now()
        results = []
        
        with store.lock:
            for name, check_func, description, severity in self._checks:
                failed, total, details = check_func(store)
                passed = not failed
                results.append(IntegrityCheck(
                    name=name,
                    passed=passed,
                    severity=severity,
                    message=f"{len(failed)} record(s) with {description}" if not passed else "OK",
                    details=details,
                    failed_records=sorted(failed),
                    total_records=total,
                ))
                if not passed:
                    logger.warning(
                        f"Integrity check failed: {name}",
                        failed=len(failed),
                        severity=severity.value,
                    )
        
        passed_checks = sum(1 for r in results if r.passed)
        failed_checks = sum(1 for r in results if not r.passed and r.severity == IntegritySeverity.ERROR)
        warning_count = sum(1 for r in results if not r.passed and r.severity == IntegritySeverity.WARNING)
        
        if failed_checks > 0:
            status = IntegrityStatus.FAILED
        elif warning_count > 0:
            status = IntegrityStatus.PARTIAL
        else:
            status = IntegrityStatus.PASSED
        
        logger.info(
            f"Integrity audit complete: {status.value}",
            passed=passed_checks,
            failed=failed_checks,
            warnings=warning_count,
        )
        return IntegrityReport(
            status=status,
            total_checks=len(results),
            passed_checks=passed_checks,
            failed_checks=failed_checks,
            warning_count=warning_count,
            checks=results,
            started_at=started_at,
            completed_at=utc_now(),
        )


# =============================================================================
# CHECKS
# =============================================================================

def check_product_categories(store: EntityStore) -> CheckOutcome:
    products = store.products.list()
    failed = [
        p.id for p in products
        if p.category_id is not None and store.categories.get(p.category_id) is None
    ]
    return failed, len(products), {}


def check_product_tag_links(store: EntityStore) -> CheckOutcome:
    links = store.product_tags.list()
    failed = [
        link.id for link in links
        if store.products.get(link.product_id) is None or store.tags.get(link.tag_id) is None
    ]
    return failed, len(links), {}


def check_duplicate_tag_links(store: EntityStore) -> CheckOutcome:
    links = store.product_tags.list()
    pairs = Counter((link.product_id, link.tag_id) for link in links)
    seen = set()
    failed = []
    for link in links:
        pair = (link.product_id, link.tag_id)
        if pairs[pair] > 1:
            # the first link of a pair is kept as the original
            if pair in seen:
                failed.append(link.id)
            seen.add(pair)
    duplicates = [list(pair) for pair, n in pairs.items() if n > 1]
    return failed, len(links), {"duplicate_pairs": duplicates}


def check_order_item_orders(store: EntityStore) -> CheckOutcome:
    items = store.order_items.list()
    failed = [i.id for i in items if store.orders.get(i.order_id) is None]
    return failed, len(items), {}


def check_order_item_totals(store: EntityStore) -> CheckOutcome:
    items = store.order_items.list()
    failed = [
        i.id for i in items
        if abs(i.total - i.price * i.quantity) > AMOUNT_TOLERANCE
    ]
    return failed, len(items), {}


def check_return_orders(store: EntityStore) -> CheckOutcome:
    returns = store.returns.list()
    failed = [r.id for r in returns if store.orders.get(r.order_id) is None]
    return failed, len(returns), {}


def check_return_items(store: EntityStore) -> CheckOutcome:
    returns = store.returns.list()
    failed = []
    foreign: Dict[int, List[int]] = {}
    for r in returns:
        own_items = {i.id for i in store.order_items.list(lambda i: i.order_id == r.order_id)}
        outside = [item_id for item_id in r.requested_items if item_id not in own_items]
        if outside:
            failed.append(r.id)
            foreign[r.id] = outside
    return failed, len(returns), {"foreign_items": foreign}


def check_refund_amounts(store: EntityStore) -> CheckOutcome:
    returns = [r for r in store.returns.list() if r.refund_amount is not None]
    failed = []
    for r in returns:
        requested = set(r.requested_items)
        expected = sum(
            (i.total for i in store.order_items.list(lambda i: i.order_id == r.order_id) if i.id in requested),
            0.0,
        )
        if abs(expected - r.refund_amount) > AMOUNT_TOLERANCE:
            failed.append(r.id)
    return failed, len(returns), {}


def check_discount_scopes(store: EntityStore) -> CheckOutcome:
    targets = {
        DiscountScope.CATEGORY: store.categories,
        DiscountScope.PRODUCT: store.products,
        DiscountScope.TAG: store.tags,
    }
    scoped = [d for d in store.discounts.list() if d.scope != DiscountScope.ALL]
    failed = [
        d.id for d in scoped
        if d.scope_id is None or targets[d.scope].get(d.scope_id) is None
    ]
    return failed, len(scoped), {}


def create_default_auditor() -> IntegrityAuditor:
    """Create auditor with every back-office check"""
    return (
        IntegrityAuditor()
        .add_check("product_category_refs", check_product_categories, "a missing category")
        .add_check("product_tag_refs", check_product_tag_links, "a missing product or tag")
        .add_check(
            "duplicate_product_tags",
            check_duplicate_tag_links,
            "a duplicated product/tag pair",
            severity=IntegritySeverity.WARNING,
        )
        .add_check("order_item_order_refs", check_order_item_orders, "a missing order")
        .add_check(
            "order_item_totals",
            check_order_item_totals,
            "total != price x quantity",
            severity=IntegritySeverity.WARNING,
        )
        .add_check("return_order_refs", check_return_orders, "a missing order")
        .add_check("return_requested_items", check_return_items, "items from another order")
        .add_check(
            "return_refund_amounts",
            check_refund_amounts,
            "a refund different from the requested items' total",
            severity=IntegritySeverity.WARNING,
        )
        .add_check("discount_scope_refs", check_discount_scopes, "a scope_id that does not resolve")
    )
