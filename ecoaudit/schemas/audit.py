"""
EcoAudit - Audit Registry Schemas

Pydantic schemas for creating and describing the parent audit record.
"""

from typing import Optional

from pydantic import BaseModel, Field

from ecoaudit.schemas.waste import CamelModel


class AuditCreate(BaseModel):
    """Request model for creating an audit. Field names match the form posting them."""
    centre_name: str = Field(..., min_length=1)
    audit_date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD")
    auditor_name: str = Field(..., min_length=1)


class AuditCreateResponse(CamelModel):
    success: bool = True
    audit_id: int
    centre_name: str
    audit_date: str
    auditor_name: str
    created_at: Optional[str] = None


class ImageCreate(BaseModel):
    """Metadata for an already-stored image."""
    image_path: str = Field(..., min_length=1)
    related_item: Optional[str] = None
