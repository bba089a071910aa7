"""
EcoAudit - Services Package

Business logic services.
"""

from ecoaudit.services.audit_registry import AuditRegistry
from ecoaudit.services.waste_audit_store import WasteAuditStore
from ecoaudit.services.scoring import compute_insights
from ecoaudit.services.validation import ensure_valid_waste_audit, validate_waste_audit
