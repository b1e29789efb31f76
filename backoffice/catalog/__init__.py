"""
Catalog Module
"""
from .service import CatalogService

__all__ = ["CatalogService"]
