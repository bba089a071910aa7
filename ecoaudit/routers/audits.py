"""
EcoAudit - Audit Router

API endpoints for creating audits and recording their images.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from ecoaudit.dependencies import get_audit_registry
from ecoaudit.schemas.audit import AuditCreate, AuditCreateResponse, ImageCreate
from ecoaudit.services.audit_registry import AuditRegistry

router = APIRouter(prefix="/api/audit", tags=["Audits"])


@router.post("/create", response_model=AuditCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_audit(
    body: AuditCreate,
    registry: AuditRegistry = Depends(get_audit_registry),
):
    """Create the parent audit a waste audit record is saved against."""
    audit = await registry.create_audit(
        centre_name=body.centre_name,
        audit_date=body.audit_date,
        auditor_name=body.auditor_name,
    )

    return AuditCreateResponse(
        audit_id=audit.id,
        centre_name=audit.centre_name,
        audit_date=audit.audit_date.isoformat(),
        auditor_name=audit.auditor_name,
        created_at=audit.created_at.isoformat() if audit.created_at else None,
    )


@router.post("/{audit_id}/images", status_code=status.HTTP_201_CREATED)
async def add_image(
    audit_id: int,
    body: ImageCreate,
    registry: AuditRegistry = Depends(get_audit_registry),
) -> Dict[str, Any]:
    """Record metadata for an image that has already been stored."""
    image = await registry.add_image(
        audit_id=audit_id,
        image_path=body.image_path,
        related_item=body.related_item,
    )
    return {
        "success": True,
        "imageId": image.id,
        "auditId": image.audit_id,
        "imagePath": image.image_path,
        "relatedItem": image.related_item,
    }


@router.get("/{audit_id}/images")
async def list_images(
    audit_id: int,
    registry: AuditRegistry = Depends(get_audit_registry),
) -> Dict[str, Any]:
    images = await registry.list_images(audit_id)
    return {
        "auditId": audit_id,
        "images": [
            {
                "id": image.id,
                "imagePath": image.image_path,
                "relatedItem": image.related_item,
                "uploadedAt": image.uploaded_at.isoformat() if image.uploaded_at else None,
            }
            for image in images
        ],
    }
