"""
Health Check Endpoints
"""

from typing import Dict

from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel

from backoffice.config import Settings
from backoffice.container import Backoffice
from backoffice.serving.api.dependencies import get_app_settings, get_backoffice

router = APIRouter()


class HealthStatus(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    records: Dict[str, int]


@router.get("/health", response_model=HealthStatus)
def health_check(
    backoffice: Backoffice = Depends(get_backoffice),
    settings: Settings = Depends(get_app_settings),
) -> HealthStatus:
    return HealthStatus(
        status="healthy",
        version=settings.version,
        environment=settings.app_env,
        records=backoffice.store.counts(),
    )


@router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    """Prometheus exposition of request metrics"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
