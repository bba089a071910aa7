"""
EcoAudit - Schemas Package

Pydantic schemas for request/response validation.
"""

from ecoaudit.schemas.waste import (
    # Enums
    BinLocation,
    BinType,
    BinSize,
    BinColour,
    LidType,
    CollectionFrequency,
    DayOfWeek,
    ContaminationType,
    WasteStream,
    FoodWasteDisposal,
    CompostingSystem,
    CompostUsage,
    ImplementationLevel,
    YesNoPlanned,
    FeedbackMechanism,
    MonitoringFrequency,
    SyncStatus,
    # Sections
    BinInventoryItem,
    FacilityWasteInfrastructure,
    WasteStreamAssessment,
    WasteStreamsAssessment,
    SpecialWasteItem,
    SpecialWasteManagement,
    OrganicWasteComposting,
    WastePreventionMeasures,
    BehavioralTraining,
    # Record
    WasteAuditData,
    # Derived results
    WasteAuditCalculations,
    QuickWin,
    WasteAuditInsights,
    WasteAuditSummary,
    WasteAuditStats,
    WasteAuditListResponse,
    # Request / response
    SaveWasteAuditRequest,
    SaveWasteAuditResponse,
    AutoSaveResponse,
    CalculateRequest,
    CalculateResponse,
)
from ecoaudit.schemas.audit import AuditCreate, AuditCreateResponse, ImageCreate
