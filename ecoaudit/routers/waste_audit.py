"""
EcoAudit - Waste Audit Router

API endpoints for saving, auto-saving, loading, listing and scoring waste
audit records. All persistence goes through WasteAuditStore; all scoring
through the scoring engine.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from ecoaudit.config import get_settings
from ecoaudit.dependencies import get_waste_audit_store
from ecoaudit.schemas.waste import (
    AutoSaveResponse,
    CalculateRequest,
    CalculateResponse,
    SaveWasteAuditRequest,
    SaveWasteAuditResponse,
    SyncStatus,
    WasteAuditData,
    WasteAuditListResponse,
)
from ecoaudit.services.scoring import compute_insights
from ecoaudit.services.section_codec import utc_timestamp
from ecoaudit.services.validation import ensure_valid_waste_audit
from ecoaudit.services.waste_audit_store import WasteAuditStore
from ecoaudit.utils.error_handling import AuditNotFoundException, StorageFaultException

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/waste-audit", tags=["Waste Audit"])


def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True)


@router.post("/save", response_model=SaveWasteAuditResponse, response_model_exclude_none=True)
async def save_waste_audit(
    body: SaveWasteAuditRequest,
    store: WasteAuditStore = Depends(get_waste_audit_store),
):
    """
    Save a complete waste audit record.

    The stored record is replaced by the one given; sections omitted from the
    body are removed. Rejected with 400 when the record fails validation
    (unless isAutoSave is set).
    """
    warnings = ensure_valid_waste_audit(body.waste_audit_data, is_auto_save=body.is_auto_save)

    data = body.waste_audit_data.model_copy(update={"sync_status": SyncStatus.SYNCED})
    result = await store.save(body.audit_id, data)
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_dump(result),
        )

    logger.info(f"Waste audit saved for audit {body.audit_id}")
    return SaveWasteAuditResponse(
        success=True,
        waste_audit_id=result.waste_audit_id,
        validation_errors=warnings or None,
    )


@router.post("/autosave", response_model=AutoSaveResponse, response_model_exclude_none=True)
async def autosave_waste_audit(
    body: SaveWasteAuditRequest,
    store: WasteAuditStore = Depends(get_waste_audit_store),
):
    """
    Merge a partial record into the stored one.

    Only the sections present in the body are written; everything else
    already stored is kept.
    """
    warnings = ensure_valid_waste_audit(body.waste_audit_data, is_auto_save=True)
    if warnings:
        logger.debug(f"Auto-save for audit {body.audit_id} has {len(warnings)} validation warning(s)")

    data = body.waste_audit_data.model_copy(update={"sync_status": SyncStatus.PENDING})
    if not await store.update(body.audit_id, data):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_dump(AutoSaveResponse(success=False, error="Auto-save failed")),
        )

    return AutoSaveResponse(
        success=True,
        timestamp=utc_timestamp(),
        message="Auto-saved successfully",
    )


@router.get("/list", response_model=WasteAuditListResponse, response_model_exclude_none=True)
async def list_waste_audits(
    center: Optional[str] = Query(None, description="Filter by facility name"),
    stats: bool = Query(False, description="Include completion statistics"),
    store: WasteAuditStore = Depends(get_waste_audit_store),
):
    """List waste audits, newest first, optionally for one facility."""
    if center:
        audits = await store.list_by_facility(center)
    else:
        audits = await store.list_all()

    return WasteAuditListResponse(
        audits=audits,
        stats=await store.stats() if stats else None,
        total=len(audits),
        filters={"center": center},
        retrieved_at=utc_timestamp(),
    )


@router.post("/calculate", response_model=CalculateResponse)
async def calculate_insights(body: CalculateRequest):
    """Score a record without storing it."""
    user_count = body.user_count or get_settings().default_user_count
    insights = compute_insights(body.waste_audit_data, user_count)
    return CalculateResponse(**insights.model_dump(), calculated_at=utc_timestamp())


@router.get("/{audit_id}", response_model=WasteAuditData, response_model_exclude_none=True)
async def get_waste_audit(
    audit_id: int,
    store: WasteAuditStore = Depends(get_waste_audit_store),
):
    """Load the stored record for an audit."""
    record = await store.get(audit_id)
    if record is None:
        raise AuditNotFoundException(audit_id)
    # Serialized here: stored sections may keep values their field types reject
    return JSONResponse(
        content=record.model_dump(mode="json", by_alias=True, exclude_none=True, warnings=False)
    )


@router.delete("/{audit_id}")
async def delete_waste_audit(
    audit_id: int,
    store: WasteAuditStore = Depends(get_waste_audit_store),
):
    """Delete every stored entry and image record for an audit."""
    if not await store.exists(audit_id):
        raise AuditNotFoundException(audit_id)

    if not await store.delete(audit_id):
        raise StorageFaultException(f"Failed to delete waste audit {audit_id}")

    return {"success": True, "message": "Waste audit deleted successfully"}
