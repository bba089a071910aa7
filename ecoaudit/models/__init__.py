"""
EcoAudit - SQLAlchemy Models Package

This package contains all database models for the application.
"""

from ecoaudit.models.base import BaseModel
from ecoaudit.models.audit import Audit, Image
from ecoaudit.models.audit_data import AuditResponseMixin, WasteData, WaterData

__all__ = [
    "BaseModel",
    "Audit",
    "Image",
    "AuditResponseMixin",
    "WasteData",
    "WaterData",
]
