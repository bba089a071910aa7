"""
EcoAudit - Waste Audit Validation

Range, sign and enum checks applied when a caller builds a record to save.
Decoded records are never validated here implicitly; callers that need to
trust a stored record re-run ``validate_waste_audit`` on it.
"""

from enum import Enum
from typing import Any, Iterable, List, Optional, Type

from ecoaudit.schemas.waste import (
    BinInventoryItem,
    BinColour,
    BinLocation,
    BinSize,
    BinType,
    CollectionFrequency,
    CompostingSystem,
    CompostUsage,
    ContaminationType,
    DayOfWeek,
    FeedbackMechanism,
    FoodWasteDisposal,
    ImplementationLevel,
    LidType,
    MonitoringFrequency,
    SpecialWasteItem,
    SyncStatus,
    WasteAuditData,
    WasteStream,
    WasteStreamAssessment,
    YesNoPlanned,
)
from ecoaudit.utils.error_handling import AuditValidationException

MIN_LEVEL = 1
MAX_LEVEL = 5
MAX_COMPLETED_SECTIONS = 6

PREVENTION_MEASURE_FIELDS = (
    "procurement_policy",
    "reusable_cups_bottles",
    "water_fountains_refill_stations",
    "paperless_communication",
    "donation_system",
    "repair_cafe",
    "bulk_buying",
    "eliminate_single_use",
)

SPECIAL_WASTE_FIELDS = (
    "battery_collection",
    "weee_collection",
    "printer_cartridges",
    "fluorescent_tubes",
    "chemical_paint_storage",
    "confidential_waste_shredding",
    "textiles_collection",
    "mobile_phone_recycling",
)


def _is_legal(value: Any, enum_cls: Type[Enum]) -> bool:
    if isinstance(value, enum_cls):
        return True
    try:
        enum_cls(value)
    except (ValueError, TypeError):
        return False
    return True


def _check_enum(errors: List[str], label: str, value: Any, enum_cls: Type[Enum]) -> None:
    if value is not None and not _is_legal(value, enum_cls):
        errors.append(f"{label}: '{value}' is not a valid option")


def _check_enum_list(errors: List[str], label: str, values: Optional[Iterable[Any]], enum_cls: Type[Enum]) -> None:
    if values is not None and not isinstance(values, list):
        values = [values]
    for value in values or []:
        _check_enum(errors, label, value, enum_cls)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_number(errors: List[str], label: str, value: Any) -> None:
    # Records decoded from storage keep wrongly typed values verbatim
    if value is not None and not _is_number(value):
        errors.append(f"{label}: '{value}' is not a number")


def _is_negative(value: Any) -> bool:
    return _is_number(value) and value < 0


def _outside_level_range(value: Any) -> bool:
    return _is_number(value) and (value < MIN_LEVEL or value > MAX_LEVEL)


def _as_list(values: Any) -> List[Any]:
    return values if isinstance(values, list) else []


def validate_waste_audit(data: WasteAuditData, is_auto_save: bool = False) -> List[str]:
    """
    Check a (partial) waste audit record.

    Args:
        data: The record the caller intends to save
        is_auto_save: Auto-saves tolerate work in progress, so an empty
            bin inventory is not reported

    Returns:
        Human-readable problems, empty when the record is acceptable
    """
    errors: List[str] = []

    infrastructure = data.facility_infrastructure
    if infrastructure is not None:
        bins = infrastructure.bin_inventory
        if isinstance(bins, list) and len(bins) == 0 and not is_auto_save:
            errors.append("At least one bin must be documented in facility infrastructure")
        for index, item in enumerate(_as_list(bins), start=1):
            if not isinstance(item, BinInventoryItem):
                continue
            label = f"Bin {index}"
            _check_number(errors, f"{label} signage quality", item.signage_quality)
            _check_number(errors, f"{label} custom size", item.custom_size)
            if _outside_level_range(item.signage_quality):
                errors.append(f"{label}: Signage quality must be between 1 and 5")
            if _is_negative(item.custom_size):
                errors.append(f"{label}: Custom size cannot be negative")
            _check_enum(errors, f"{label} location", item.location, BinLocation)
            _check_enum(errors, f"{label} bin type", item.bin_type, BinType)
            _check_enum(errors, f"{label} size", item.size_in_litres, BinSize)
            _check_enum(errors, f"{label} colour", item.colour, BinColour)
            _check_enum(errors, f"{label} lid type", item.lid_type, LidType)

    streams = data.waste_streams_assessment
    if streams is not None:
        for index, stream in enumerate(_as_list(streams.assessments), start=1):
            if not isinstance(stream, WasteStreamAssessment):
                continue
            label = f"Waste stream {index}"
            _check_number(errors, f"{label} volume", stream.estimated_weekly_volume_litres)
            _check_number(errors, f"{label} contamination level", stream.contamination_level)
            _check_number(errors, f"{label} annual cost", stream.annual_cost_euros)
            if _is_negative(stream.estimated_weekly_volume_litres):
                errors.append(f"{label}: Volume cannot be negative")
            if _outside_level_range(stream.contamination_level):
                errors.append(f"{label}: Contamination level must be between 1 and 5")
            if _is_negative(stream.annual_cost_euros):
                errors.append(f"{label}: Annual cost cannot be negative")
            _check_enum(errors, f"{label} type", stream.waste_stream, WasteStream)
            _check_enum(errors, f"{label} collection frequency", stream.collection_frequency, CollectionFrequency)
            _check_enum_list(errors, f"{label} collection day", stream.collection_days, DayOfWeek)
            _check_enum_list(errors, f"{label} contaminant", stream.common_contaminants, ContaminationType)

    special = data.special_waste_management
    if special is not None:
        for field_name in SPECIAL_WASTE_FIELDS:
            item = getattr(special, field_name)
            if not isinstance(item, SpecialWasteItem):
                continue
            label = field_name.replace("_", " ").capitalize()
            _check_enum(errors, f"{label} status", item.status, YesNoPlanned)
            _check_enum(errors, f"{label} collection frequency", item.collection_frequency, CollectionFrequency)

    organic = data.organic_waste_composting
    if organic is not None:
        _check_number(errors, "Food waste volume", organic.food_waste_volume_kg_per_week)
        _check_number(errors, "Composting capacity", organic.composting_capacity_litres)
        if _is_negative(organic.food_waste_volume_kg_per_week):
            errors.append("Food waste volume cannot be negative")
        if _is_negative(organic.composting_capacity_litres):
            errors.append("Composting capacity cannot be negative")
        _check_enum(errors, "Food waste disposal method", organic.food_waste_disposal_method, FoodWasteDisposal)
        _check_enum(errors, "Composting system", organic.composting_system, CompostingSystem)
        _check_enum(errors, "Composting usage level", organic.composting_usage_level, CompostUsage)

    prevention = data.waste_prevention_measures
    if prevention is not None:
        for field_name in PREVENTION_MEASURE_FIELDS:
            label = field_name.replace("_", " ").capitalize()
            _check_enum(errors, label, getattr(prevention, field_name), ImplementationLevel)

    training = data.behavioral_training
    if training is not None:
        _check_enum(errors, "Waste monitoring records", training.waste_monitoring_records_kept, MonitoringFrequency)
        _check_enum(errors, "Feedback mechanism", training.feedback_mechanism, FeedbackMechanism)

    if data.completed_sections is not None and not 0 <= data.completed_sections <= MAX_COMPLETED_SECTIONS:
        errors.append("Completed sections must be between 0 and 6")
    _check_enum(errors, "Sync status", data.sync_status, SyncStatus)

    return errors


def ensure_valid_waste_audit(data: WasteAuditData, is_auto_save: bool = False) -> List[str]:
    """
    Validate a record before a write.

    Returns the problems found (informational) when auto-saving; otherwise
    any problem rejects the write.

    Raises:
        AuditValidationException: problems were found and this is not an auto-save
    """
    errors = validate_waste_audit(data, is_auto_save=is_auto_save)
    if errors and not is_auto_save:
        raise AuditValidationException(errors)
    return errors
