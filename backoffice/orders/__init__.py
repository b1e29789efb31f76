"""
Orders Module
"""
from .lifecycle import OrderService, ReturnService

__all__ = ["OrderService", "ReturnService"]
