"""
EcoAudit - Waste Audit Store

Persists waste audit records in the waste_data entity-attribute-value table
and reconstructs them.

Two write paths with different contracts:

- ``save`` REPLACES: every existing entry for the audit is deleted, then the
  sections and metadata present in the given record are inserted. Anything
  omitted from the record is gone afterwards.
- ``update`` MERGES: each key present in the given record is upserted;
  other keys are left alone.

Both run in one transaction and both stamp a fresh ``lastSaved``. Write
faults come back as failure results; read paths (get, list, stats) degrade
to empty/default results instead of raising.
"""

import logging
from typing import Any, List, Optional, Tuple

from sqlalchemy import Integer, and_, cast, delete, distinct, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from ecoaudit.models.audit import Audit, Image
from ecoaudit.models.audit_data import WasteData
from ecoaudit.schemas.waste import (
    SaveWasteAuditResponse,
    SyncStatus,
    WasteAuditData,
    WasteAuditStats,
    WasteAuditSummary,
)
from ecoaudit.services.section_codec import (
    COMPLETED_SECTIONS_KEY,
    IS_QUICK_MODE_KEY,
    LAST_SAVED_KEY,
    SECTIONS,
    SYNC_STATUS_KEY,
    decode_entry,
    encode_bool,
    encode_enum,
    encode_int,
    encode_section,
    section_note,
    utc_timestamp,
)

logger = logging.getLogger(__name__)

FULLY_COMPLETED_SECTIONS = 6


class WasteAuditStore:
    """Service for storing and reconstructing waste audit records."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ===========================================
    # ENCODING
    # ===========================================

    @staticmethod
    def _encode_entries(data: WasteAuditData) -> List[Tuple[str, str]]:
        """Encode every present section and metadata value, plus a fresh lastSaved."""
        entries = []
        for spec in SECTIONS:
            section = getattr(data, spec.field_name)
            if section is not None:
                entries.append((spec.item_key, encode_section(section)))
        if data.completed_sections is not None:
            entries.append((COMPLETED_SECTIONS_KEY, encode_int(data.completed_sections)))
        if data.is_quick_mode is not None:
            entries.append((IS_QUICK_MODE_KEY, encode_bool(data.is_quick_mode)))
        if data.sync_status:
            entries.append((SYNC_STATUS_KEY, encode_enum(data.sync_status)))
        # A caller-supplied lastSaved is always superseded
        entries.append((LAST_SAVED_KEY, utc_timestamp()))
        return entries

    def _add_entries(self, audit_id: int, entries: List[Tuple[str, str]]) -> None:
        self.db.add_all([
            WasteData(
                audit_id=audit_id,
                item_key=item_key,
                response=response,
                notes=section_note(item_key),
            )
            for item_key, response in entries
        ])

    # ===========================================
    # WRITES
    # ===========================================

    async def save(self, audit_id: int, data: WasteAuditData) -> SaveWasteAuditResponse:
        """
        Replace the stored record for an audit.

        Deletes every existing entry for ``audit_id``, then writes one entry
        per present section, the present metadata, and a fresh lastSaved.
        Sections and metadata missing from ``data`` are NOT preserved; use
        ``update`` to merge.

        Returns:
            Success result, or a failure carrying one message describing the fault
        """
        entries = self._encode_entries(data)

        try:
            await self.db.execute(delete(WasteData).where(WasteData.audit_id == audit_id))
            self._add_entries(audit_id, entries)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error saving waste audit {audit_id}: {e}")
            return SaveWasteAuditResponse(
                success=False,
                validation_errors=[f"Failed to save waste audit: {e}"],
            )

        logger.debug(f"Saved waste audit {audit_id} ({len(entries)} entries)")
        return SaveWasteAuditResponse(success=True, waste_audit_id=audit_id)

    async def update(self, audit_id: int, updates: WasteAuditData) -> bool:
        """
        Merge a partial record into the stored one.

        Every section or metadata value present in ``updates`` replaces the
        stored entry for the same key; other keys are untouched. Applying
        the same partial twice yields the same record (apart from lastSaved).

        Returns:
            True if all writes landed, False on a storage fault
        """
        entries = self._encode_entries(updates)
        keys = [item_key for item_key, _ in entries]
        try:
            await self.db.execute(
                delete(WasteData).where(
                    and_(
                        WasteData.audit_id == audit_id,
                        WasteData.item_key.in_(keys),
                    )
                )
            )
            self._add_entries(audit_id, entries)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error updating waste audit {audit_id}: {e}")
            return False

        return True

    async def delete(self, audit_id: int) -> bool:
        """
        Remove every entry and every image record for an audit.

        Deleting an audit with nothing stored is a successful no-op. The
        parent audit row itself is left in place.
        """
        try:
            await self.db.execute(delete(WasteData).where(WasteData.audit_id == audit_id))
            await self.db.execute(delete(Image).where(Image.audit_id == audit_id))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error deleting waste audit {audit_id}: {e}")
            return False

        logger.info(f"Deleted waste audit {audit_id}")
        return True

    # ===========================================
    # READS
    # ===========================================

    async def get(self, audit_id: int) -> Optional[WasteAuditData]:
        """
        Reconstruct the stored record for an audit.

        Returns:
            The record, or None when nothing is stored (or storage is unavailable)

        Raises:
            MetadataDecodeError: completedSections holds a non-integer value
        """
        try:
            result = await self.db.execute(
                select(WasteData.item_key, WasteData.response)
                .where(WasteData.audit_id == audit_id)
                .order_by(WasteData.id)
            )
            records = result.all()
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving waste audit {audit_id}: {e}")
            return None

        if not records:
            return None

        fields: dict = {"audit_id": audit_id}
        for item_key, response in records:
            decoded = decode_entry(item_key, response)
            if decoded is not None:
                field_name, value = decoded
                fields[field_name] = value

        return WasteAuditData(**fields)

    async def exists(self, audit_id: int) -> bool:
        """True iff at least one entry is stored for the audit."""
        try:
            count = await self.db.scalar(
                select(func.count()).select_from(WasteData).where(WasteData.audit_id == audit_id)
            )
        except SQLAlchemyError as e:
            logger.error(f"Error checking waste audit existence for {audit_id}: {e}")
            return False
        return bool(count)

    async def list_by_facility(self, centre_name: str) -> List[WasteAuditSummary]:
        """Summaries of every audit for one facility, newest first."""
        return await self._list_summaries(centre_name)

    async def list_all(self) -> List[WasteAuditSummary]:
        """Summaries of every audit across all facilities, newest first."""
        return await self._list_summaries(None)

    async def _list_summaries(self, centre_name: Optional[str]) -> List[WasteAuditSummary]:
        completed = aliased(WasteData)
        sync = aliased(WasteData)
        saved = aliased(WasteData)

        query = (
            select(
                Audit.id,
                Audit.centre_name,
                Audit.audit_date,
                Audit.auditor_name,
                Audit.created_at,
                completed.response.label("completed_sections"),
                sync.response.label("sync_status"),
                saved.response.label("last_modified"),
            )
            .outerjoin(completed, and_(completed.audit_id == Audit.id, completed.item_key == COMPLETED_SECTIONS_KEY))
            .outerjoin(sync, and_(sync.audit_id == Audit.id, sync.item_key == SYNC_STATUS_KEY))
            .outerjoin(saved, and_(saved.audit_id == Audit.id, saved.item_key == LAST_SAVED_KEY))
        )
        if centre_name is not None:
            query = query.where(Audit.centre_name == centre_name)
        query = query.order_by(Audit.audit_date.desc(), Audit.created_at.desc(), Audit.id.desc())

        try:
            result = await self.db.execute(query)
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error(f"Error listing waste audits: {e}")
            return []

        return [
            WasteAuditSummary(
                id=row.id,
                audit_id=row.id,
                centre_name=row.centre_name,
                audit_date=_iso(row.audit_date),
                auditor_name=row.auditor_name,
                completed_sections=_parse_completed(row.completed_sections),
                last_modified=row.last_modified or _iso(row.created_at),
                sync_status=row.sync_status or SyncStatus.OFFLINE,
            )
            for row in rows
        ]

    async def stats(self) -> WasteAuditStats:
        """
        Completion statistics across all stored records.

        totalAudits counts audits with any stored entry; completedAudits
        those whose completedSections is exactly 6; averageCompletion is the
        mean of stored completedSections values (0 when none).
        """
        completed_value = cast(WasteData.response, Integer)
        try:
            total = await self.db.scalar(select(func.count(distinct(WasteData.audit_id))))
            completed = await self.db.scalar(
                select(func.count(distinct(WasteData.audit_id))).where(
                    and_(
                        WasteData.item_key == COMPLETED_SECTIONS_KEY,
                        completed_value == FULLY_COMPLETED_SECTIONS,
                    )
                )
            )
            average = await self.db.scalar(
                select(func.avg(completed_value)).where(WasteData.item_key == COMPLETED_SECTIONS_KEY)
            )
            with_photos = await self.db.scalar(select(func.count(distinct(Image.audit_id))))
        except SQLAlchemyError as e:
            logger.error(f"Error getting waste audit statistics: {e}")
            return WasteAuditStats()

        return WasteAuditStats(
            total_audits=total or 0,
            completed_audits=completed or 0,
            average_completion=float(average or 0),
            audits_with_photos=with_photos or 0,
        )


def _parse_completed(text: Optional[str]) -> int:
    # Listing is lenient: absent or unparsable counts as 0
    if not text:
        return 0
    try:
        return int(text.strip())
    except ValueError:
        return 0


def _iso(value: Any) -> Optional[str]:
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)
