"""
EcoAudit - Audit Registry Models

The parent audit identity (facility, date, auditor) and the image metadata
recorded against it. Response data lives in the EAV tables in
``ecoaudit.models.audit_data``.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from ecoaudit.models.base import BaseModel


class Audit(BaseModel):
    """
    Audit identity record.
    
    Owned by the registry; the waste audit store only references it by id
    and never mutates it.
    """
    
    __tablename__ = "audits"
    
    centre_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    audit_date: Mapped[date] = mapped_column(Date, nullable=False)
    auditor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class Image(BaseModel):
    """Metadata for a photo taken during an audit."""
    
    __tablename__ = "images"
    
    audit_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("audits.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    related_item: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Form item the photo documents, e.g. a bin or section key",
    )
    image_path: Mapped[str] = mapped_column(Text, nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
