"""
API Middleware

Request logging with a per-request id bound into structlog context, so
every log line emitted while serving a request carries it. Request counts
and latencies are recorded as Prometheus metrics.
"""

import time
from typing import Callable

from fastapi import Request, Response
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

logger = structlog.get_logger(__name__)


# =============================================================================
# METRICS
# =============================================================================

HTTP_REQUESTS = Counter(
    "backoffice_http_requests_total",
    "Total number of HTTP requests served",
    ["method", "route", "status"],
)

HTTP_REQUEST_DURATION = Histogram(
    "backoffice_http_request_duration_seconds",
    "Time spent serving HTTP requests",
    ["method", "route"],
)


def _route_template(request: Request) -> str:
    """
    Full templated path of the matched route, e.g. /api/orders/{order_id}.
    
    Built from the request path with each path parameter swapped for its
    placeholder, so router prefixes are kept and label cardinality stays
    bounded. Requests that matched no route share one label.
    """
    if request.scope.get("route") is None:
        return "unmatched"
    # path params come in path order; match them left to right
    pending = [(str(value), name) for name, value in request.path_params.items()]
    segments = []
    for segment in request.url.path.split("/"):
        if pending and segment == pending[0][0]:
            segment = "{" + pending.pop(0)[1] + "}"
        segments.append(segment)
    return "/".join(segments)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all requests with timing information"""
    
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        request_id = request.headers.get("X-Request-ID", str(time.time_ns()))
        
        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        ):
            logger.info(
                "Request started",
                client=request.client.host if request.client else None,
            )
            
            response = await call_next(request)
            elapsed = time.perf_counter() - start_time
            
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=round(elapsed * 1000, 2),
            )
        
        route = _route_template(request)
        HTTP_REQUESTS.labels(method=request.method, route=route, status=str(response.status_code)).inc()
        HTTP_REQUEST_DURATION.labels(method=request.method, route=route).observe(elapsed)
        
        response.headers["X-Response-Time"] = f"{elapsed * 1000:.2f}ms"
        response.headers["X-Request-ID"] = request_id
        return response
