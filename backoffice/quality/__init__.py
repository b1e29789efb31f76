"""
Data Quality Module
"""
from .integrity import IntegrityAuditor, IntegrityReport, create_default_auditor

__all__ = [
    "IntegrityAuditor",
    "IntegrityReport",
    "create_default_auditor",
]
