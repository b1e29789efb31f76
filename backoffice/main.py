"""
FastAPI Application

Main entry point for the Shop Back-Office API.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import structlog

from backoffice.config import Settings, get_settings
from backoffice.container import Backoffice, create_backoffice
from backoffice.errors import ValidationError
from backoffice.serving.api.middleware import RequestLoggingMiddleware
from backoffice.serving.api.routes import (
    analytics_router,
    categories_router,
    discounts_router,
    health_router,
    orders_router,
    products_router,
    returns_router,
    tags_router,
)
from backoffice.storage.seed import seed_sample_data

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    from backoffice.config.logging import configure_logging
    settings = app.state.settings
    configure_logging(settings=settings)
    
    logger.info("Starting application", app=settings.app_name, environment=settings.app_env)
    
    if settings.seed_sample_data and not app.state.backoffice.store.users.list():
        seed_sample_data(app.state.backoffice)
    
    yield
    
    logger.info("Shutting down...")


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.info("Rejected invalid payload", entity=exc.entity, fields=sorted(exc.errors))
    return JSONResponse(status_code=400, content=exc.to_dict())


def create_app(
    backoffice: Optional[Backoffice] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.
    
    Args:
        backoffice: Services to serve; a fresh empty store when omitted
        settings: Configuration; the cached environment settings when omitted
    
    Returns:
        Configured FastAPI app instance
    """
    settings = settings or get_settings()
    
    app = FastAPI(
        title=settings.app_name,
        description="Catalog, promotions, orders, returns and dashboard analytics",
        version=settings.version,
        debug=settings.debug,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.backoffice = backoffice or create_backoffice()
    
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)
    
    app.add_exception_handler(ValidationError, validation_error_handler)
    
    app.include_router(health_router, prefix="/api", tags=["Health"])
    app.include_router(products_router, prefix="/api/products", tags=["Products"])
    app.include_router(categories_router, prefix="/api/categories", tags=["Categories"])
    app.include_router(tags_router, prefix="/api/tags", tags=["Tags"])
    app.include_router(discounts_router, prefix="/api/discounts", tags=["Discounts"])
    app.include_router(orders_router, prefix="/api/orders", tags=["Orders"])
    app.include_router(returns_router, prefix="/api/returns", tags=["Returns"])
    app.include_router(analytics_router, prefix="/api/analytics", tags=["Analytics"])
    
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
