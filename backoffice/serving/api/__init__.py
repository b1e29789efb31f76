"""
API Module
"""
from .dependencies import get_app_settings, get_backoffice, get_owner_id
from .middleware import RequestLoggingMiddleware

__all__ = [
    "get_app_settings",
    "get_backoffice",
    "get_owner_id",
    "RequestLoggingMiddleware",
]
