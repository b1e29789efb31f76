"""
Analytics API Endpoints

Dashboard summary, product revenue and the integrity audit. Every call
recomputes from the store.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
import structlog

from backoffice.analytics.aggregator import DashboardSummary, ProductRevenue
from backoffice.config import Settings
from backoffice.container import Backoffice
from backoffice.serving.api.dependencies import get_app_settings, get_backoffice, get_owner_id

router = APIRouter()
logger = structlog.get_logger(__name__)


class IntegrityCheckView(BaseModel):
    name: str
    passed: bool
    severity: str
    message: str
    details: Dict[str, Any]
    failed_records: List[int]
    total_records: int


class IntegrityReportView(BaseModel):
    """Integrity audit response"""
    status: str
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[IntegrityCheckView]
    started_at: datetime
    completed_at: Optional[datetime]


@router.get("/dashboard", response_model=DashboardSummary)
def get_dashboard(
    owner_id: int = Depends(get_owner_id),
    backoffice: Backoffice = Depends(get_backoffice),
    settings: Settings = Depends(get_app_settings),
) -> DashboardSummary:
    return backoffice.analytics.dashboard(
        owner_id,
        now=backoffice.now(),
        recent_limit=settings.recent_orders_limit,
    )


@router.get("/product-revenue", response_model=List[ProductRevenue])
def get_product_revenue(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    owner_id: int = Depends(get_owner_id),
    backoffice: Backoffice = Depends(get_backoffice),
) -> List[ProductRevenue]:
    """
    Revenue per product for orders created inside [start_date, end_date].
    
    Both bounds are optional ISO-8601 datetimes; naive values are read as UTC.
    """
    logger.debug("get_product_revenue called", start_date=str(start_date), end_date=str(end_date))
    return backoffice.analytics.product_revenue(owner_id, start_date, end_date)


@router.get("/integrity", response_model=IntegrityReportView)
def get_integrity_report(
    backoffice: Backoffice = Depends(get_backoffice),
) -> IntegrityReportView:
    """Dangling references and inconsistent amounts across the whole store"""
    report = backoffice.audit()
    return IntegrityReportView(
        status=report.status.value,
        total_checks=report.total_checks,
        passed_checks=report.passed_checks,
        failed_checks=report.failed_checks,
        warning_count=report.warning_count,
        checks=[
            IntegrityCheckView(
                name=c.name,
                passed=c.passed,
                severity=c.severity.value,
                message=c.message,
                details=c.details,
                failed_records=c.failed_records,
                total_records=c.total_records,
            )
            for c in report.checks
        ],
        started_at=report.started_at,
        completed_at=report.completed_at,
    )
