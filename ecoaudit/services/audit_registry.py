"""
EcoAudit - Audit Registry

Creates the parent audit records (facility, date, auditor) that waste audit
entries are keyed against, and records image metadata for them.
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ecoaudit.models.audit import Audit, Image
from ecoaudit.utils.error_handling import (
    AuditNotFoundException,
    ValidationException,
)

logger = logging.getLogger(__name__)


class AuditRegistry:
    """Service for audit identity records and their images."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_audit(
        self,
        centre_name: str,
        audit_date: str,
        auditor_name: str,
    ) -> Audit:
        """
        Create a new audit record.

        Args:
            centre_name: Facility being audited
            audit_date: Date of the audit, YYYY-MM-DD
            auditor_name: Person carrying out the audit

        Returns:
            The created Audit, with its assigned id

        Raises:
            ValidationException: a field is missing or the date is malformed
        """
        if not centre_name or not audit_date or not auditor_name:
            raise ValidationException(
                "All fields (centre_name, audit_date, auditor_name) are required"
            )
        try:
            parsed_date = date.fromisoformat(audit_date)
        except ValueError:
            raise ValidationException(
                "audit_date must be in YYYY-MM-DD format",
                field="audit_date",
            )

        audit = Audit(
            centre_name=centre_name,
            audit_date=parsed_date,
            auditor_name=auditor_name,
        )
        self.db.add(audit)
        await self.db.commit()
        await self.db.refresh(audit)

        logger.info(f"Created audit {audit.id} for {centre_name}")
        return audit

    async def get_audit(self, audit_id: int) -> Optional[Audit]:
        """Get an audit by id, or None."""
        return await self.db.get(Audit, audit_id)

    async def add_image(
        self,
        audit_id: int,
        image_path: str,
        related_item: Optional[str] = None,
    ) -> Image:
        """
        Record metadata for an image already stored at ``image_path``.

        Raises:
            AuditNotFoundException: no audit with this id
        """
        if await self.get_audit(audit_id) is None:
            raise AuditNotFoundException(audit_id, resource_type="Audit")

        image = Image(
            audit_id=audit_id,
            related_item=related_item,
            image_path=image_path,
        )
        self.db.add(image)
        await self.db.commit()
        await self.db.refresh(image)
        return image

    async def list_images(self, audit_id: int) -> List[Image]:
        """
        Images recorded for an audit, oldest first.

        Raises:
            AuditNotFoundException: no audit with this id
        """
        if await self.get_audit(audit_id) is None:
            raise AuditNotFoundException(audit_id, resource_type="Audit")

        result = await self.db.execute(
            select(Image).where(Image.audit_id == audit_id).order_by(Image.id)
        )
        return list(result.scalars().all())
