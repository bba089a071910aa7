"""
EcoAudit - Waste Audit Schemas

Pydantic schemas for the waste audit record, its six sections, and the
results derived from it.

Field names are snake_case in Python and camelCase on the wire and in the
stored section JSON. Every field is optional so partial records can be
built incrementally and reconstructed from storage.

Enumerated fields accept any string: a legal value is parsed into its enum,
anything else is kept verbatim. Stored records can therefore carry stale
values after the option lists change; ``validate_waste_audit`` is where
legality is checked. Section models also keep keys they do not declare, and
stored sections keep values of the wrong type, so reading a section and
writing it back never loses data.
"""

from enum import Enum, IntEnum
from typing import Annotated, Any, Callable, Dict, List, Literal, Optional, Type, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS
# =============================================================================

class BinLocation(str, Enum):
    KITCHEN = "kitchen"
    MAIN_HALL = "main_hall"
    TOILETS = "toilets"
    OUTDOOR = "outdoor"
    OFFICE = "office"
    OTHER = "other"


class BinType(str, Enum):
    GENERAL_WASTE = "general_waste"
    DRY_RECYCLABLES = "dry_recyclables"
    ORGANIC_COMPOST = "organic_compost"
    GLASS = "glass"
    BATTERIES = "batteries"
    WEEE = "weee"


class BinSize(IntEnum):
    """Standard bin sizes in litres; OTHER means a custom size is given."""
    SIZE_60L = 60
    SIZE_120L = 120
    SIZE_240L = 240
    SIZE_660L = 660
    SIZE_1100L = 1100
    OTHER = 0


class BinColour(str, Enum):
    BLACK_GREY = "black_grey"
    BLUE = "blue"
    GREEN = "green"
    BROWN = "brown"
    OTHER = "other"


class LidType(str, Enum):
    OPEN_TOP = "open_top"
    FLIP_LID = "flip_lid"
    RESTRICTED_OPENING = "restricted_opening"
    LOCKED = "locked"


class CollectionFrequency(str, Enum):
    DAILY = "daily"
    TWICE_WEEKLY = "twice_weekly"
    WEEKLY = "weekly"
    FORTNIGHTLY = "fortnightly"
    MONTHLY = "monthly"


class DayOfWeek(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class ContaminationType(str, Enum):
    PLASTIC_BAGS = "plastic_bags"
    FOOD_WASTE = "food_waste"
    LIQUIDS = "liquids"
    NON_RECYCLABLES = "non_recyclables"
    OTHER = "other"


class WasteStream(str, Enum):
    GENERAL = "general"
    DRY_RECYCLABLES = "dry_recyclables"
    ORGANIC = "organic"
    GLASS = "glass"
    HAZARDOUS = "hazardous"


class FoodWasteDisposal(str, Enum):
    BROWN_BIN = "brown_bin"
    COMPOSTER = "composter"
    FOOD_DIGESTER = "food_digester"
    WASTE_DISPOSAL_UNIT = "waste_disposal_unit"
    GENERAL_WASTE = "general_waste"


class CompostingSystem(str, Enum):
    NONE = "none"
    TRADITIONAL = "traditional"
    BOKASHI = "bokashi"
    WORM_FARM = "worm_farm"
    OTHER = "other"


class CompostUsage(str, Enum):
    RARELY = "rarely"
    MONTHLY = "monthly"
    WEEKLY = "weekly"
    DAILY = "daily"


class ImplementationLevel(str, Enum):
    NOT_IMPLEMENTED = "not_implemented"
    PLANNED = "planned"
    PARTIAL = "partial"
    FULL = "full"


class YesNoPlanned(str, Enum):
    YES = "yes"
    NO = "no"
    PLANNED = "planned"


class FeedbackMechanism(str, Enum):
    NONE = "none"
    SUGGESTION_BOX = "suggestion_box"
    EMAIL = "email"
    REGULAR_MEETINGS = "regular_meetings"


class MonitoringFrequency(str, Enum):
    NEVER = "never"
    OCCASIONALLY = "occasionally"
    MONTHLY = "monthly"
    WEEKLY = "weekly"


class SyncStatus(str, Enum):
    SYNCED = "synced"
    PENDING = "pending"
    OFFLINE = "offline"


def _enum_or_raw(enum_cls: Type[Enum]) -> Callable[[Any], Any]:
    """Parse a legal value into its enum member; pass anything else through."""
    def parse(value: Any) -> Any:
        try:
            return enum_cls(value)
        except (ValueError, TypeError):
            return value
    return parse


# Enum-or-raw-string field types
BinLocationValue = Annotated[Union[BinLocation, str], BeforeValidator(_enum_or_raw(BinLocation))]
BinTypeValue = Annotated[Union[BinType, str], BeforeValidator(_enum_or_raw(BinType))]
BinSizeValue = Annotated[Union[BinSize, int], BeforeValidator(_enum_or_raw(BinSize))]
BinColourValue = Annotated[Union[BinColour, str], BeforeValidator(_enum_or_raw(BinColour))]
LidTypeValue = Annotated[Union[LidType, str], BeforeValidator(_enum_or_raw(LidType))]
CollectionFrequencyValue = Annotated[Union[CollectionFrequency, str], BeforeValidator(_enum_or_raw(CollectionFrequency))]
DayOfWeekValue = Annotated[Union[DayOfWeek, str], BeforeValidator(_enum_or_raw(DayOfWeek))]
ContaminationTypeValue = Annotated[Union[ContaminationType, str], BeforeValidator(_enum_or_raw(ContaminationType))]
WasteStreamValue = Annotated[Union[WasteStream, str], BeforeValidator(_enum_or_raw(WasteStream))]
FoodWasteDisposalValue = Annotated[Union[FoodWasteDisposal, str], BeforeValidator(_enum_or_raw(FoodWasteDisposal))]
CompostingSystemValue = Annotated[Union[CompostingSystem, str], BeforeValidator(_enum_or_raw(CompostingSystem))]
CompostUsageValue = Annotated[Union[CompostUsage, str], BeforeValidator(_enum_or_raw(CompostUsage))]
ImplementationLevelValue = Annotated[Union[ImplementationLevel, str], BeforeValidator(_enum_or_raw(ImplementationLevel))]
YesNoPlannedValue = Annotated[Union[YesNoPlanned, str], BeforeValidator(_enum_or_raw(YesNoPlanned))]
FeedbackMechanismValue = Annotated[Union[FeedbackMechanism, str], BeforeValidator(_enum_or_raw(FeedbackMechanism))]
MonitoringFrequencyValue = Annotated[Union[MonitoringFrequency, str], BeforeValidator(_enum_or_raw(MonitoringFrequency))]
SyncStatusValue = Annotated[Union[SyncStatus, str], BeforeValidator(_enum_or_raw(SyncStatus))]


# =============================================================================
# BASE SCHEMA
# =============================================================================

class CamelModel(BaseModel):
    """Base schema: camelCase aliases, snake_case attributes, unknown keys dropped."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# Validation context flag set when decoding stored sections
KEEP_STORED_VALUES = "keep_stored_values"


class SectionModel(CamelModel):
    """
    Base for the six sections and the items nested in them.

    Unknown keys are kept as extra fields. When validated with the
    ``KEEP_STORED_VALUES`` context flag, a value that does not fit its
    field's type is kept verbatim instead of failing the whole section, so
    a stored section always re-encodes to what was stored.
    """
    model_config = ConfigDict(extra="allow")

    @field_validator("*", mode="wrap")
    @classmethod
    def _keep_stored_value(
        cls,
        value: Any,
        handler: ValidatorFunctionWrapHandler,
        info: ValidationInfo,
    ) -> Any:
        try:
            return handler(value)
        except ValidationError:
            if info.context and info.context.get(KEEP_STORED_VALUES):
                return value
            raise


# =============================================================================
# SECTION A: FACILITY WASTE INFRASTRUCTURE
# =============================================================================

class BinInventoryItem(SectionModel):
    id: Optional[str] = None
    location: Optional[BinLocationValue] = None
    bin_type: Optional[BinTypeValue] = None
    size_in_litres: Optional[BinSizeValue] = None
    custom_size: Optional[float] = None
    colour: Optional[BinColourValue] = None
    lid_type: Optional[LidTypeValue] = None
    signage_present: Optional[bool] = None
    signage_quality: Optional[float] = Field(None, description="1-5 scale")
    photo_path: Optional[str] = None


class FacilityWasteInfrastructure(SectionModel):
    bin_inventory: Optional[List[BinInventoryItem]] = None
    total_bins: Optional[int] = None
    outdoor_bins_present: Optional[bool] = None
    notes: Optional[str] = None


# =============================================================================
# SECTION B: WASTE STREAMS ASSESSMENT
# =============================================================================

class WasteStreamAssessment(SectionModel):
    waste_stream: Optional[WasteStreamValue] = None
    estimated_weekly_volume_litres: Optional[float] = None
    collection_frequency: Optional[CollectionFrequencyValue] = None
    collection_days: Optional[List[DayOfWeekValue]] = None
    contamination_level: Optional[float] = Field(None, description="1-5 severity")
    common_contaminants: Optional[List[ContaminationTypeValue]] = None
    contractor_name: Optional[str] = None
    annual_cost_euros: Optional[float] = None
    notes: Optional[str] = None
    contamination_photo_path: Optional[str] = None


class WasteStreamsAssessment(SectionModel):
    assessments: Optional[List[WasteStreamAssessment]] = None
    total_annual_cost: Optional[float] = None
    primary_contractor: Optional[str] = None


# =============================================================================
# SECTION C: SPECIAL WASTE MANAGEMENT
# =============================================================================

class SpecialWasteItem(SectionModel):
    type: Optional[str] = None
    status: Optional[YesNoPlannedValue] = None
    location: Optional[str] = None
    collection_frequency: Optional[CollectionFrequencyValue] = None
    notes: Optional[str] = None


class SpecialWasteManagement(SectionModel):
    battery_collection: Optional[SpecialWasteItem] = None
    weee_collection: Optional[SpecialWasteItem] = None
    printer_cartridges: Optional[SpecialWasteItem] = None
    fluorescent_tubes: Optional[SpecialWasteItem] = None
    chemical_paint_storage: Optional[SpecialWasteItem] = None
    confidential_waste_shredding: Optional[SpecialWasteItem] = None
    textiles_collection: Optional[SpecialWasteItem] = None
    mobile_phone_recycling: Optional[SpecialWasteItem] = None


# =============================================================================
# SECTION D: ORGANIC WASTE & COMPOSTING
# =============================================================================

class OrganicWasteComposting(SectionModel):
    kitchen_present: Optional[bool] = None
    food_waste_volume_kg_per_week: Optional[float] = None
    food_waste_disposal_method: Optional[FoodWasteDisposalValue] = None
    composting_system: Optional[CompostingSystemValue] = None
    composting_capacity_litres: Optional[float] = None
    composting_usage_level: Optional[CompostUsageValue] = None
    coffee_grounds_disposal: Optional[str] = None
    cooking_oil_disposal: Optional[str] = None
    notes: Optional[str] = None


# =============================================================================
# SECTION E: WASTE PREVENTION MEASURES
# =============================================================================

class WastePreventionMeasures(SectionModel):
    procurement_policy: Optional[ImplementationLevelValue] = None
    reusable_cups_bottles: Optional[ImplementationLevelValue] = None
    water_fountains_refill_stations: Optional[ImplementationLevelValue] = None
    paperless_communication: Optional[ImplementationLevelValue] = None
    donation_system: Optional[ImplementationLevelValue] = None
    repair_cafe: Optional[ImplementationLevelValue] = None
    bulk_buying: Optional[ImplementationLevelValue] = None
    eliminate_single_use: Optional[ImplementationLevelValue] = None
    notes: Optional[str] = None


# =============================================================================
# SECTION F: BEHAVIORAL & TRAINING
# =============================================================================

class BehavioralTraining(SectionModel):
    last_waste_training_date: Optional[str] = Field(None, description="ISO date string")
    waste_champion_appointed: Optional[bool] = None
    waste_champion_name: Optional[str] = None
    user_education_materials_displayed: Optional[bool] = None
    education_materials_photo_path: Optional[str] = None
    waste_monitoring_records_kept: Optional[MonitoringFrequencyValue] = None
    feedback_mechanism: Optional[FeedbackMechanismValue] = None
    additional_notes: Optional[str] = None


# =============================================================================
# COMPLETE RECORD
# =============================================================================

class WasteAuditData(CamelModel):
    """
    A (possibly partial) waste audit record.

    ``None`` means "absent": an absent section is never written by the
    store and never appears in a reconstructed record.
    """
    audit_id: Optional[int] = None

    facility_infrastructure: Optional[FacilityWasteInfrastructure] = None
    waste_streams_assessment: Optional[WasteStreamsAssessment] = None
    special_waste_management: Optional[SpecialWasteManagement] = None
    organic_waste_composting: Optional[OrganicWasteComposting] = None
    waste_prevention_measures: Optional[WastePreventionMeasures] = None
    behavioral_training: Optional[BehavioralTraining] = None

    completed_sections: Optional[int] = Field(None, description="0-6, advisory")
    is_quick_mode: Optional[bool] = None
    last_saved: Optional[str] = None
    sync_status: Optional[SyncStatusValue] = None


# =============================================================================
# DERIVED RESULTS
# =============================================================================

class WasteAuditCalculations(CamelModel):
    estimated_annual_waste_cost: float = 0
    potential_savings_from_contamination_reduction: float = 0
    recycling_rate_estimate: float = Field(0, description="Percentage")
    weekly_waste_per_user: float = Field(0, description="kg per user per week")
    carbon_footprint_estimate: Optional[int] = Field(None, description="kg CO2 equivalent per year")


class QuickWin(CamelModel):
    id: str
    title: str
    description: str
    estimated_cost_euros: float
    estimated_savings_euros: float
    impact_level: Literal["low", "medium", "high"]
    priority: int = Field(..., description="1 = highest priority")
    category: Literal["infrastructure", "contamination", "prevention", "training"]


class WasteAuditInsights(CamelModel):
    calculations: WasteAuditCalculations
    quick_wins: List[QuickWin] = []
    compliance_alerts: List[str] = []
    grant_opportunities: List[str] = []
    overall_score: int = Field(0, ge=0, le=100)
    recommendations: List[str] = []


# =============================================================================
# LISTING AND STATISTICS
# =============================================================================

class WasteAuditSummary(CamelModel):
    id: int
    audit_id: int
    centre_name: str
    audit_date: str
    auditor_name: str
    completed_sections: int = 0
    overall_score: Optional[int] = None
    last_modified: Optional[str] = None
    sync_status: SyncStatusValue = SyncStatus.OFFLINE


class WasteAuditStats(CamelModel):
    total_audits: int = 0
    completed_audits: int = 0
    average_completion: float = 0
    audits_with_photos: int = 0


class WasteAuditListResponse(CamelModel):
    audits: List[WasteAuditSummary]
    stats: Optional[WasteAuditStats] = None
    total: int
    filters: Dict[str, Optional[str]]
    retrieved_at: str


# =============================================================================
# REQUEST / RESPONSE
# =============================================================================

class SaveWasteAuditRequest(CamelModel):
    audit_id: int = Field(..., gt=0)
    waste_audit_data: WasteAuditData
    is_auto_save: bool = False


class SaveWasteAuditResponse(CamelModel):
    success: bool
    waste_audit_id: Optional[int] = None
    validation_errors: Optional[List[str]] = None


class AutoSaveResponse(CamelModel):
    success: bool
    timestamp: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None


class CalculateRequest(CamelModel):
    waste_audit_data: WasteAuditData
    user_count: Optional[int] = None


class CalculateResponse(WasteAuditInsights):
    calculated_at: str
