"""
Storage Module
"""
from .store import Collection, EntityStore

__all__ = [
    "Collection",
    "EntityStore",
]
