"""
EcoAudit - Section Codec

Text encoding for the values stored in the waste_data table.

- Sections (the six structured parts of a record) are stored as canonical
  JSON: camelCase keys, sorted, compact, absent fields omitted.
- ``completedSections`` is decimal text, ``isQuickMode`` is "true"/"false",
  ``syncStatus`` and ``lastSaved`` are stored verbatim.

Decoding a section is lossless for any JSON object: unknown keys and values
of the wrong type are carried through verbatim. A payload that is not valid
JSON, or not a JSON object, is logged and reported as absent so the rest of
the record can still be reconstructed. Decoding integer metadata does not
degrade; a corrupt value raises ``MetadataDecodeError``.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, NamedTuple, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from ecoaudit.schemas.waste import (
    KEEP_STORED_VALUES,
    BehavioralTraining,
    FacilityWasteInfrastructure,
    OrganicWasteComposting,
    SpecialWasteManagement,
    WastePreventionMeasures,
    WasteStreamsAssessment,
)
from ecoaudit.utils.error_handling import MetadataDecodeError, SectionDecodeError

logger = logging.getLogger(__name__)


class SectionSpec(NamedTuple):
    """Where a section lives: its stored item key, record attribute and model."""
    item_key: str
    field_name: str
    model: Type[BaseModel]


# Fixed order; save iterates sections in this order
SECTIONS: Tuple[SectionSpec, ...] = (
    SectionSpec("facilityInfrastructure", "facility_infrastructure", FacilityWasteInfrastructure),
    SectionSpec("wasteStreamsAssessment", "waste_streams_assessment", WasteStreamsAssessment),
    SectionSpec("specialWasteManagement", "special_waste_management", SpecialWasteManagement),
    SectionSpec("organicWasteComposting", "organic_waste_composting", OrganicWasteComposting),
    SectionSpec("wastePreventionMeasures", "waste_prevention_measures", WastePreventionMeasures),
    SectionSpec("behavioralTraining", "behavioral_training", BehavioralTraining),
)

SECTION_KEYS: Tuple[str, ...] = tuple(spec.item_key for spec in SECTIONS)
_SECTIONS_BY_KEY: Dict[str, SectionSpec] = {spec.item_key: spec for spec in SECTIONS}

# Scalar metadata: item key -> record attribute
COMPLETED_SECTIONS_KEY = "completedSections"
IS_QUICK_MODE_KEY = "isQuickMode"
SYNC_STATUS_KEY = "syncStatus"
LAST_SAVED_KEY = "lastSaved"

METADATA_FIELDS: Dict[str, str] = {
    COMPLETED_SECTIONS_KEY: "completed_sections",
    IS_QUICK_MODE_KEY: "is_quick_mode",
    SYNC_STATUS_KEY: "sync_status",
    LAST_SAVED_KEY: "last_saved",
}

# Stored alongside each entry in the notes column
ENTRY_NOTES: Dict[str, str] = {
    COMPLETED_SECTIONS_KEY: "Number of completed sections",
    IS_QUICK_MODE_KEY: "Quick mode flag",
    SYNC_STATUS_KEY: "Synchronization status",
    LAST_SAVED_KEY: "Last saved timestamp",
}


def section_note(item_key: str) -> str:
    return ENTRY_NOTES.get(item_key, f"Waste audit section: {item_key}")


# ===========================================
# SECTIONS
# ===========================================

def encode_section(section: BaseModel) -> str:
    """Serialize a section model to canonical JSON text."""
    # Values kept verbatim from storage may not match their field types
    payload = section.model_dump(mode="json", by_alias=True, exclude_none=True, warnings=False)
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def parse_section(item_key: str, text: Optional[str]) -> BaseModel:
    """
    Decode a stored section, raising instead of degrading.

    Raises:
        SectionDecodeError: unknown key, missing text, unparseable JSON, or a
            payload that is not a JSON object
    """
    spec = _SECTIONS_BY_KEY.get(item_key)
    if spec is None:
        raise SectionDecodeError(item_key, "not a section key")
    if text is None:
        raise SectionDecodeError(item_key, "no stored value")

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise SectionDecodeError(item_key, f"invalid JSON ({e.msg} at position {e.pos})") from e

    if not isinstance(payload, dict):
        raise SectionDecodeError(item_key, f"expected a JSON object, got {type(payload).__name__}")

    try:
        return spec.model.model_validate(payload, context={KEEP_STORED_VALUES: True})
    except ValidationError as e:
        raise SectionDecodeError(item_key, f"{e.error_count()} field error(s)") from e


def decode_section(item_key: str, text: Optional[str]) -> Optional[BaseModel]:
    """Decode a stored section, or ``None`` (logged) if it cannot be decoded."""
    try:
        return parse_section(item_key, text)
    except SectionDecodeError as e:
        logger.warning(f"Dropping section from reconstructed record: {e}")
        return None


# ===========================================
# SCALAR METADATA
# ===========================================

def encode_bool(value: bool) -> str:
    return "true" if value else "false"


def decode_bool(text: Optional[str]) -> bool:
    return text == "true"


def encode_int(value: int) -> str:
    return str(int(value))


def decode_int(item_key: str, text: Optional[str]) -> int:
    try:
        return int(text.strip())
    except (AttributeError, ValueError) as e:
        raise MetadataDecodeError(item_key, text, original_error=e) from e


def encode_enum(value: Any) -> str:
    # Enum members store their value; unknown strings are stored as given
    return str(getattr(value, "value", value))


def decode_enum(text: Optional[str]) -> Optional[str]:
    """Identity. Stored enum values are not checked against their legal set."""
    return text


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, ``Z`` suffixed."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


# ===========================================
# DISPATCH
# ===========================================

def encode_value(item_key: str, value: Any) -> str:
    """Encode any record value by the item key it is stored under."""
    if item_key in _SECTIONS_BY_KEY:
        return encode_section(value)
    if item_key == COMPLETED_SECTIONS_KEY:
        return encode_int(value)
    if item_key == IS_QUICK_MODE_KEY:
        return encode_bool(value)
    if item_key == SYNC_STATUS_KEY:
        return encode_enum(value)
    if item_key == LAST_SAVED_KEY:
        return str(value)
    raise KeyError(f"Unknown waste audit item key '{item_key}'")


def decode_entry(item_key: str, text: Optional[str]) -> Optional[Tuple[str, Any]]:
    """
    Decode one stored entry into ``(record attribute, value)``.

    Returns ``None`` for keys outside the known set and for sections that
    cannot be decoded.
    """
    if item_key in _SECTIONS_BY_KEY:
        section = decode_section(item_key, text)
        if section is None:
            return None
        return _SECTIONS_BY_KEY[item_key].field_name, section
    if item_key == COMPLETED_SECTIONS_KEY:
        return METADATA_FIELDS[item_key], decode_int(item_key, text)
    if item_key == IS_QUICK_MODE_KEY:
        return METADATA_FIELDS[item_key], decode_bool(text)
    if item_key in (SYNC_STATUS_KEY, LAST_SAVED_KEY):
        return METADATA_FIELDS[item_key], decode_enum(text)
    return None
