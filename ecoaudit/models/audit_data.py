"""
EcoAudit - Audit Response Models (entity-attribute-value)

Each row stores one (audit, item key) pair. Section payloads are JSON text;
scalar metadata is stored as primitive text.

There is deliberately no unique constraint on (audit_id, item_key): the
one-entry-per-key invariant is maintained by the store's write operations,
so all writes must go through ``WasteAuditStore``.
"""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from ecoaudit.models.base import BaseModel


class AuditResponseMixin:
    """Columns shared by every audit-type response table."""
    
    @declared_attr
    def audit_id(cls) -> Mapped[int]:
        return mapped_column(
            Integer,
            ForeignKey("audits.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    
    item_key: Mapped[str] = mapped_column(String(100), nullable=False)
    response: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class WasteData(AuditResponseMixin, BaseModel):
    """Waste audit responses."""
    
    __tablename__ = "waste_data"


class WaterData(AuditResponseMixin, BaseModel):
    """Water audit responses. Reserved for the water audit type; nothing writes here yet."""
    
    __tablename__ = "water_data"
