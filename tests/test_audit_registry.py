"""
EcoAudit - Audit Registry Tests
"""

from datetime import date

import pytest

from ecoaudit.services.audit_registry import AuditRegistry
from ecoaudit.utils.error_handling import AuditNotFoundException, ValidationException


class TestAuditRegistry:
    """Test audit creation and image metadata."""

    @pytest.mark.asyncio
    async def test_create_audit(self, db_session):
        registry = AuditRegistry(db_session)

        audit = await registry.create_audit("Hillside Hall", "2024-06-30", "Sam")

        assert audit.id is not None
        assert audit.audit_date == date(2024, 6, 30)
        assert (await registry.get_audit(audit.id)).centre_name == "Hillside Hall"

    @pytest.mark.asyncio
    async def test_create_audit_requires_all_fields(self, db_session):
        registry = AuditRegistry(db_session)

        with pytest.raises(ValidationException):
            await registry.create_audit("Hillside Hall", "2024-06-30", "")

    @pytest.mark.asyncio
    async def test_create_audit_rejects_bad_date(self, db_session):
        registry = AuditRegistry(db_session)

        with pytest.raises(ValidationException) as exc_info:
            await registry.create_audit("Hillside Hall", "2024-13-45", "Sam")

        assert exc_info.value.field == "audit_date"

    @pytest.mark.asyncio
    async def test_images(self, db_session, test_audit):
        registry = AuditRegistry(db_session)

        await registry.add_image(test_audit.id, "/uploads/bin-1.jpg", related_item="bin-1")
        await registry.add_image(test_audit.id, "/uploads/hall.jpg")
        images = await registry.list_images(test_audit.id)

        assert [image.image_path for image in images] == ["/uploads/bin-1.jpg", "/uploads/hall.jpg"]
        assert images[0].related_item == "bin-1"

    @pytest.mark.asyncio
    async def test_image_for_unknown_audit(self, db_session):
        registry = AuditRegistry(db_session)

        with pytest.raises(AuditNotFoundException):
            await registry.add_image(9999, "/uploads/x.jpg")

    @pytest.mark.asyncio
    async def test_list_images_for_unknown_audit(self, db_session):
        registry = AuditRegistry(db_session)

        with pytest.raises(AuditNotFoundException):
            await registry.list_images(9999)

    @pytest.mark.asyncio
    async def test_list_images_without_images(self, db_session, test_audit):
        registry = AuditRegistry(db_session)

        assert await registry.list_images(test_audit.id) == []
