"""
EcoAudit - Waste Audit Store Tests

Tests for persisting, merging, reconstructing and listing waste audits.
"""

import json

import pytest
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from ecoaudit.models.audit import Image
from ecoaudit.models.audit_data import WasteData
from ecoaudit.schemas.waste import (
    BinType,
    OrganicWasteComposting,
    SyncStatus,
    WasteAuditData,
)
from ecoaudit.services.waste_audit_store import WasteAuditStore
from ecoaudit.utils.error_handling import MetadataDecodeError


async def _count_entries(db: AsyncSession, audit_id: int, item_key: str) -> int:
    return await db.scalar(
        select(func.count())
        .select_from(WasteData)
        .where(WasteData.audit_id == audit_id, WasteData.item_key == item_key)
    )


async def _stored_response(db: AsyncSession, audit_id: int, item_key: str) -> str:
    return await db.scalar(
        select(WasteData.response)
        .where(WasteData.audit_id == audit_id, WasteData.item_key == item_key)
    )


class TestSave:
    """Test full saves (replace semantics)."""

    @pytest.mark.asyncio
    async def test_save_and_get_round_trip(self, db_session, test_audit, waste_audit_data):
        store = WasteAuditStore(db_session)

        result = await store.save(test_audit.id, waste_audit_data)
        record = await store.get(test_audit.id)

        assert result.success is True
        assert result.waste_audit_id == test_audit.id
        assert record.audit_id == test_audit.id
        assert record.last_saved is not None
        expected = waste_audit_data.model_dump(exclude={"audit_id", "last_saved"})
        assert record.model_dump(exclude={"audit_id", "last_saved"}) == expected

    @pytest.mark.asyncio
    async def test_save_writes_one_entry_per_present_key(self, db_session, test_audit, waste_audit_data):
        store = WasteAuditStore(db_session)

        await store.save(test_audit.id, waste_audit_data)

        result = await db_session.execute(
            select(WasteData.item_key).where(WasteData.audit_id == test_audit.id)
        )
        keys = sorted(result.scalars().all())
        assert keys == sorted([
            "facilityInfrastructure",
            "wasteStreamsAssessment",
            "organicWasteComposting",
            "wastePreventionMeasures",
            "behavioralTraining",
            "completedSections",
            "isQuickMode",
            "lastSaved",
        ])

    @pytest.mark.asyncio
    async def test_save_replaces_omitted_sections(self, db_session, test_audit, waste_audit_data):
        store = WasteAuditStore(db_session)
        await store.save(test_audit.id, waste_audit_data)

        partial = WasteAuditData(organic_waste_composting=OrganicWasteComposting(kitchen_present=False))
        await store.save(test_audit.id, partial)
        record = await store.get(test_audit.id)

        assert record.organic_waste_composting.kitchen_present is False
        assert record.facility_infrastructure is None
        assert record.completed_sections is None

    @pytest.mark.asyncio
    async def test_caller_last_saved_is_superseded(self, db_session, test_audit):
        store = WasteAuditStore(db_session)

        await store.save(test_audit.id, WasteAuditData(last_saved="1999-01-01T00:00:00.000Z"))
        record = await store.get(test_audit.id)

        assert record.last_saved != "1999-01-01T00:00:00.000Z"
        assert await _count_entries(db_session, test_audit.id, "lastSaved") == 1

    @pytest.mark.asyncio
    async def test_unknown_enum_value_round_trips(self, db_session, test_audit, waste_audit_data):
        store = WasteAuditStore(db_session)
        waste_audit_data.facility_infrastructure.bin_inventory[0].bin_type = "compactor"
        waste_audit_data.sync_status = "archived"

        await store.save(test_audit.id, waste_audit_data)
        record = await store.get(test_audit.id)

        assert record.facility_infrastructure.bin_inventory[0].bin_type == "compactor"
        assert record.facility_infrastructure.bin_inventory[1].bin_type == BinType.DRY_RECYCLABLES
        assert record.sync_status == "archived"


class TestUpdate:
    """Test partial updates (merge semantics)."""

    @pytest.mark.asyncio
    async def test_update_keeps_other_sections(self, db_session, test_audit, waste_audit_data):
        store = WasteAuditStore(db_session)
        await store.save(test_audit.id, waste_audit_data)

        partial = WasteAuditData(
            organic_waste_composting=OrganicWasteComposting(kitchen_present=True, composting_system="bokashi"),
            sync_status=SyncStatus.PENDING,
        )
        assert await store.update(test_audit.id, partial) is True
        record = await store.get(test_audit.id)

        assert record.organic_waste_composting.composting_system == "bokashi"
        assert record.facility_infrastructure == waste_audit_data.facility_infrastructure
        assert record.completed_sections == 5
        assert record.sync_status == SyncStatus.PENDING

    @pytest.mark.asyncio
    async def test_update_is_idempotent(self, db_session, test_audit, waste_audit_data):
        store = WasteAuditStore(db_session)
        await store.save(test_audit.id, waste_audit_data)
        partial = WasteAuditData(completed_sections=6, is_quick_mode=True)

        await store.update(test_audit.id, partial)
        first = await store.get(test_audit.id)
        await store.update(test_audit.id, partial)
        second = await store.get(test_audit.id)

        assert first.model_dump(exclude={"last_saved"}) == second.model_dump(exclude={"last_saved"})
        assert await _count_entries(db_session, test_audit.id, "completedSections") == 1
        assert await _count_entries(db_session, test_audit.id, "isQuickMode") == 1
        assert await _count_entries(db_session, test_audit.id, "lastSaved") == 1

    @pytest.mark.asyncio
    async def test_update_creates_record(self, db_session, test_audit):
        store = WasteAuditStore(db_session)

        await store.update(test_audit.id, WasteAuditData(completed_sections=1))

        assert await store.exists(test_audit.id) is True
        assert (await store.get(test_audit.id)).completed_sections == 1

    @pytest.mark.asyncio
    async def test_update_keeps_unknown_stored_keys(self, db_session, test_audit):
        store = WasteAuditStore(db_session)
        db_session.add(WasteData(
            audit_id=test_audit.id,
            item_key="facilityInfrastructure",
            response='{"auditorComment":"kept?","binInventory":[{"binType":"glass","qrCode":"X1"}]}',
        ))
        await db_session.commit()

        record = await store.get(test_audit.id)
        section = record.facility_infrastructure
        section.notes = "checked"
        await store.update(test_audit.id, WasteAuditData(facility_infrastructure=section))

        stored = json.loads(await _stored_response(db_session, test_audit.id, "facilityInfrastructure"))
        assert stored == {
            "auditorComment": "kept?",
            "binInventory": [{"binType": "glass", "qrCode": "X1"}],
            "notes": "checked",
        }

    @pytest.mark.asyncio
    async def test_update_keeps_wrongly_typed_stored_value(self, db_session, test_audit):
        store = WasteAuditStore(db_session)
        db_session.add(WasteData(
            audit_id=test_audit.id,
            item_key="facilityInfrastructure",
            response='{"notes":"Yard","totalBins":"two"}',
        ))
        await db_session.commit()

        record = await store.get(test_audit.id)
        assert record.facility_infrastructure.total_bins == "two"
        assert record.facility_infrastructure.notes == "Yard"

        await store.update(test_audit.id, WasteAuditData(
            facility_infrastructure=record.facility_infrastructure,
            completed_sections=1,
        ))

        stored = await _stored_response(db_session, test_audit.id, "facilityInfrastructure")
        assert stored == '{"notes":"Yard","totalBins":"two"}'


class TestGetDeleteExists:
    """Test reads, existence checks and deletion."""

    @pytest.mark.asyncio
    async def test_get_unknown_audit_is_none(self, db_session):
        store = WasteAuditStore(db_session)

        assert await store.get(9999) is None
        assert await store.exists(9999) is False

    @pytest.mark.asyncio
    async def test_exists_matches_get(self, db_session, test_audit, waste_audit_data):
        store = WasteAuditStore(db_session)
        assert await store.exists(test_audit.id) is False

        await store.save(test_audit.id, waste_audit_data)

        assert await store.exists(test_audit.id) is True
        assert await store.get(test_audit.id) is not None

    @pytest.mark.asyncio
    async def test_delete_removes_entries_and_images(self, db_session, test_audit, waste_audit_data):
        store = WasteAuditStore(db_session)
        await store.save(test_audit.id, waste_audit_data)
        db_session.add(Image(audit_id=test_audit.id, image_path="/uploads/bin-1.jpg", related_item="bin-1"))
        await db_session.commit()

        assert await store.delete(test_audit.id) is True

        assert await store.get(test_audit.id) is None
        assert await store.exists(test_audit.id) is False
        images = await db_session.scalar(select(func.count()).select_from(Image))
        assert images == 0

    @pytest.mark.asyncio
    async def test_delete_unknown_audit_succeeds(self, db_session):
        store = WasteAuditStore(db_session)

        assert await store.delete(424242) is True

    @pytest.mark.asyncio
    async def test_corrupt_section_is_dropped(self, db_session, test_audit, waste_audit_data):
        store = WasteAuditStore(db_session)
        await store.save(test_audit.id, waste_audit_data)
        await db_session.execute(
            WasteData.__table__.update()
            .where(WasteData.audit_id == test_audit.id, WasteData.item_key == "wasteStreamsAssessment")
            .values(response='{"assessments": [')
        )
        await db_session.commit()

        record = await store.get(test_audit.id)

        assert record.waste_streams_assessment is None
        assert record.facility_infrastructure is not None
        assert record.behavioral_training is not None

    @pytest.mark.asyncio
    async def test_corrupt_completed_sections_raises(self, db_session, test_audit):
        store = WasteAuditStore(db_session)
        db_session.add(WasteData(audit_id=test_audit.id, item_key="completedSections", response="six"))
        await db_session.commit()

        with pytest.raises(MetadataDecodeError):
            await store.get(test_audit.id)

    @pytest.mark.asyncio
    async def test_unknown_keys_are_ignored(self, db_session, test_audit):
        store = WasteAuditStore(db_session)
        db_session.add(WasteData(audit_id=test_audit.id, item_key="legacyKey", response="whatever"))
        db_session.add(WasteData(audit_id=test_audit.id, item_key="isQuickMode", response="true"))
        await db_session.commit()

        record = await store.get(test_audit.id)

        assert record.is_quick_mode is True


class TestListing:
    """Test facility listings and statistics."""

    @pytest.mark.asyncio
    async def test_list_orders_newest_first(self, db_session, make_audit):
        older = await make_audit(audit_date="2024-01-10")
        newer = await make_audit(audit_date="2024-03-02")
        store = WasteAuditStore(db_session)

        summaries = await store.list_all()

        assert [summary.audit_id for summary in summaries] == [newer.id, older.id]

    @pytest.mark.asyncio
    async def test_list_defaults_without_metadata(self, db_session, test_audit):
        store = WasteAuditStore(db_session)

        summaries = await store.list_all()

        assert len(summaries) == 1
        summary = summaries[0]
        assert summary.centre_name == "Riverside Community Centre"
        assert summary.audit_date == "2024-05-01"
        assert summary.completed_sections == 0
        assert summary.sync_status == SyncStatus.OFFLINE
        assert summary.last_modified is not None

    @pytest.mark.asyncio
    async def test_list_reads_metadata(self, db_session, test_audit, waste_audit_data):
        store = WasteAuditStore(db_session)
        waste_audit_data.sync_status = SyncStatus.SYNCED
        await store.save(test_audit.id, waste_audit_data)
        record = await store.get(test_audit.id)

        summary = (await store.list_all())[0]

        assert summary.completed_sections == 5
        assert summary.sync_status == SyncStatus.SYNCED
        assert summary.last_modified == record.last_saved

    @pytest.mark.asyncio
    async def test_list_tolerates_unparsable_completed_sections(self, db_session, test_audit):
        store = WasteAuditStore(db_session)
        db_session.add(WasteData(audit_id=test_audit.id, item_key="completedSections", response="six"))
        await db_session.commit()

        summary = (await store.list_all())[0]

        assert summary.completed_sections == 0

    @pytest.mark.asyncio
    async def test_list_by_facility_filters(self, db_session, make_audit):
        await make_audit(centre_name="Hillside Hall")
        riverside = await make_audit(centre_name="Riverside Community Centre")
        store = WasteAuditStore(db_session)

        summaries = await store.list_by_facility("Riverside Community Centre")

        assert [summary.audit_id for summary in summaries] == [riverside.id]

    @pytest.mark.asyncio
    async def test_stats_with_completed_audits(self, db_session, make_audit):
        store = WasteAuditStore(db_session)
        for _ in range(4):
            audit = await make_audit()
            await store.save(audit.id, WasteAuditData(completed_sections=6))

        stats = await store.stats()

        assert stats.total_audits == 4
        assert stats.completed_audits == 4
        assert stats.average_completion == 6
        assert stats.audits_with_photos == 0

    @pytest.mark.asyncio
    async def test_stats_mixed_completion(self, db_session, make_audit):
        store = WasteAuditStore(db_session)
        first = await make_audit()
        second = await make_audit()
        third = await make_audit()
        await store.save(first.id, WasteAuditData(completed_sections=6))
        await store.save(second.id, WasteAuditData(completed_sections=2))
        await store.save(third.id, WasteAuditData(is_quick_mode=True))
        db_session.add(Image(audit_id=first.id, image_path="/uploads/a.jpg"))
        await db_session.commit()

        stats = await store.stats()

        assert stats.total_audits == 3
        assert stats.completed_audits == 1
        assert stats.average_completion == 4
        assert stats.audits_with_photos == 1

    @pytest.mark.asyncio
    async def test_stats_empty(self, db_session):
        stats = await WasteAuditStore(db_session).stats()

        assert stats.total_audits == 0
        assert stats.average_completion == 0


class TestStorageFaults:
    """Test behaviour when the entry table is unavailable."""

    @pytest.mark.asyncio
    async def test_faults_become_failure_results(self, db_session, test_audit, waste_audit_data):
        store = WasteAuditStore(db_session)
        audit_id = test_audit.id
        await db_session.execute(text("DROP TABLE waste_data"))
        await db_session.commit()

        result = await store.save(audit_id, waste_audit_data)
        assert result.success is False
        assert result.validation_errors[0].startswith("Failed to save waste audit")

        assert await store.update(audit_id, waste_audit_data) is False
        assert await store.delete(audit_id) is False
        assert await store.get(audit_id) is None
        assert await store.exists(audit_id) is False
        assert (await store.stats()).total_audits == 0
