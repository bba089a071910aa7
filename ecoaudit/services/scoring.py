"""
EcoAudit - Waste Audit Scoring

Pure functions deriving metrics, quick wins, alerts, grant hints and an
overall 0-100 score from a (possibly partial) waste audit record.

Nothing here performs I/O. Values read from a reconstructed record are
untrusted: any field may be missing and enumerated fields may hold values
outside their legal set, so every rule treats the unknown as "not matching".
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Optional, Type, TypeVar

from ecoaudit.schemas.waste import (
    BinInventoryItem,
    BinType,
    CompostingSystem,
    ImplementationLevel,
    MonitoringFrequency,
    QuickWin,
    WasteAuditCalculations,
    WasteAuditData,
    WasteAuditInsights,
    WastePreventionMeasures,
    WasteStream,
    WasteStreamAssessment,
)

DEFAULT_USER_COUNT = 100

# Litres to kilograms, and kilograms of waste to kilograms of CO2e
LITRES_TO_KG = 0.5
CO2_PER_KG_WASTE = 0.5
WEEKS_PER_YEAR = 52

HIGH_CONTAMINATION = 3
WORST_CONTAMINATION = 5
CONTAMINATION_SAVINGS_RATE = 0.15
POOR_SIGNAGE = 3
LARGE_FACILITY_LITRES_PER_WEEK = 1000
PREVENTION_GRANT_THRESHOLD = 50
MAX_QUICK_WINS = 5

PREVENTION_MEASURES = (
    "procurement_policy",
    "reusable_cups_bottles",
    "water_fountains_refill_stations",
    "paperless_communication",
    "donation_system",
    "repair_cafe",
    "bulk_buying",
    "eliminate_single_use",
)

IMPLEMENTATION_POINTS = {
    ImplementationLevel.FULL: 4,
    ImplementationLevel.PARTIAL: 2,
    ImplementationLevel.PLANNED: 1,
    ImplementationLevel.NOT_IMPLEMENTED: 0,
}
MAX_POINTS_PER_MEASURE = 4

RECYCLABLE_STREAMS = (WasteStream.DRY_RECYCLABLES, WasteStream.ORGANIC)


def round_half_up(value: float, places: int = 0) -> float:
    """Round halves away from zero (2.5 -> 3), unlike round()'s banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


Item = TypeVar("Item")


def _number(value: Any) -> Optional[float]:
    # Stored sections may hold values of the wrong type; those count as absent
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _items(values: Any, item_cls: Type[Item]) -> List[Item]:
    if not isinstance(values, list):
        return []
    return [value for value in values if isinstance(value, item_cls)]


def _assessments(data: WasteAuditData) -> List[WasteStreamAssessment]:
    if data.waste_streams_assessment is None:
        return []
    return _items(data.waste_streams_assessment.assessments, WasteStreamAssessment)


def _bins(data: WasteAuditData) -> List[BinInventoryItem]:
    if data.facility_infrastructure is None:
        return []
    return _items(data.facility_infrastructure.bin_inventory, BinInventoryItem)


def _is_contaminated(stream: WasteStreamAssessment) -> bool:
    level = _number(stream.contamination_level)
    return level is not None and level > HIGH_CONTAMINATION


def _kitchen_without_composting(data: WasteAuditData) -> bool:
    organic = data.organic_waste_composting
    return bool(
        organic is not None
        and organic.kitchen_present
        and organic.composting_system == CompostingSystem.NONE
    )


# ===========================================
# METRICS
# ===========================================

def calculate_waste_metrics(data: WasteAuditData, user_count: int) -> WasteAuditCalculations:
    """
    Calculate cost, volume and carbon metrics from the waste streams.

    Args:
        data: Waste audit record
        user_count: Facility users per week, for the per-user figure

    Returns:
        Calculations; rates rounded to 2 places, carbon to a whole number
    """
    total_annual_cost = 0.0
    total_weekly_volume = 0.0
    recyclable_volume = 0.0
    contamination_issues = 0

    for stream in _assessments(data):
        cost = _number(stream.annual_cost_euros)
        if cost:
            total_annual_cost += cost

        volume = _number(stream.estimated_weekly_volume_litres) or 0
        total_weekly_volume += volume

        if stream.waste_stream in RECYCLABLE_STREAMS:
            recyclable_volume += volume

        if _is_contaminated(stream):
            contamination_issues += 1

    recycling_rate = (recyclable_volume / total_weekly_volume) * 100 if total_weekly_volume > 0 else 0

    # Contamination reduction typically trims collection costs by 10-20%
    potential_savings = total_annual_cost * CONTAMINATION_SAVINGS_RATE if contamination_issues > 0 else 0

    weekly_waste_per_user = (total_weekly_volume * LITRES_TO_KG) / user_count if user_count > 0 else 0

    carbon_footprint = (total_weekly_volume * LITRES_TO_KG * WEEKS_PER_YEAR) * CO2_PER_KG_WASTE

    return WasteAuditCalculations(
        estimated_annual_waste_cost=total_annual_cost,
        potential_savings_from_contamination_reduction=potential_savings,
        recycling_rate_estimate=round_half_up(recycling_rate, 2),
        weekly_waste_per_user=round_half_up(weekly_waste_per_user, 2),
        carbon_footprint_estimate=int(round_half_up(carbon_footprint)),
    )


# ===========================================
# QUICK WINS
# ===========================================

def generate_quick_wins(data: WasteAuditData) -> List[QuickWin]:
    """
    Low-cost improvements suggested by the current audit state.

    Conditions are checked in a fixed order and priorities are handed out in
    that order, so the result is sorted by priority and capped at five.
    """
    quick_wins: List[QuickWin] = []
    priority = 1

    bins = _bins(data)
    has_recycling_bins = any(item.bin_type == BinType.DRY_RECYCLABLES for item in bins)

    if not has_recycling_bins:
        quick_wins.append(QuickWin(
            id="add-recycling-bins",
            title="Add Recycling Bins",
            description="No recycling bins detected. Adding clearly labelled recycling bins can reduce general waste costs.",
            estimated_cost_euros=150,
            estimated_savings_euros=500,
            impact_level="high",
            priority=priority,
            category="infrastructure",
        ))
        priority += 1

    poor_signage_bins = [
        item for item in bins
        if item.signage_present and _number(item.signage_quality) is not None and item.signage_quality < POOR_SIGNAGE
    ]
    if poor_signage_bins:
        quick_wins.append(QuickWin(
            id="improve-signage",
            title="Improve Bin Signage",
            description=f"{len(poor_signage_bins)} bins have poor signage quality. Clear signage reduces contamination.",
            estimated_cost_euros=50,
            estimated_savings_euros=200,
            impact_level="medium",
            priority=priority,
            category="infrastructure",
        ))
        priority += 1

    if any(_is_contaminated(stream) for stream in _assessments(data)):
        quick_wins.append(QuickWin(
            id="contamination-training",
            title="Staff Waste Training",
            description="High contamination levels detected. Staff training can reduce collection costs.",
            estimated_cost_euros=100,
            estimated_savings_euros=400,
            impact_level="high",
            priority=priority,
            category="training",
        ))
        priority += 1

    training = data.behavioral_training
    if training is None or not training.waste_champion_appointed:
        quick_wins.append(QuickWin(
            id="appoint-champion",
            title="Appoint Waste Champion",
            description="Designate a staff member as waste champion to drive improvements.",
            estimated_cost_euros=0,
            estimated_savings_euros=300,
            impact_level="medium",
            priority=priority,
            category="training",
        ))
        priority += 1

    if _kitchen_without_composting(data):
        quick_wins.append(QuickWin(
            id="start-composting",
            title="Start Composting System",
            description="Kitchen present but no composting. A simple system could reduce organic waste costs.",
            estimated_cost_euros=200,
            estimated_savings_euros=600,
            impact_level="high",
            priority=priority,
            category="prevention",
        ))
        priority += 1

    quick_wins.sort(key=lambda win: win.priority)
    return quick_wins[:MAX_QUICK_WINS]


# ===========================================
# ALERTS AND GRANTS
# ===========================================

def generate_compliance_alerts(data: WasteAuditData) -> List[str]:
    """Regulatory concerns raised by the audit."""
    alerts: List[str] = []
    streams = _assessments(data)

    has_hazardous = any(stream.waste_stream == WasteStream.HAZARDOUS for stream in streams)
    special = data.special_waste_management
    if has_hazardous and (special is None or special.weee_collection is None):
        alerts.append("Hazardous waste detected but no WEEE collection arrangement documented")

    total_volume = sum(_number(stream.estimated_weekly_volume_litres) or 0 for stream in streams)
    organic = data.organic_waste_composting
    if (
        total_volume > LARGE_FACILITY_LITRES_PER_WEEK
        and organic is not None
        and organic.composting_system == CompostingSystem.NONE
    ):
        alerts.append("Large facility (>1000L/week) should consider organic waste separation")

    return alerts


def generate_grant_opportunities(data: WasteAuditData) -> List[str]:
    """Funding programmes the facility may qualify for."""
    opportunities: List[str] = []

    if calculate_prevention_score(data.waste_prevention_measures) < PREVENTION_GRANT_THRESHOLD:
        opportunities.append("Eligible for SEAI Community Grant - waste prevention measures scoring low")

    prevention = data.waste_prevention_measures
    if prevention is not None and prevention.repair_cafe == ImplementationLevel.NOT_IMPLEMENTED:
        opportunities.append("Circular Economy Programme funding available for repair initiatives")

    if _kitchen_without_composting(data):
        opportunities.append("Community Foundation grants available for composting projects")

    return opportunities


# ===========================================
# SCORES
# ===========================================

def calculate_prevention_score(prevention: Optional[WastePreventionMeasures]) -> float:
    """
    Percentage of the achievable prevention points.

    Each of the eight measures scores 4 (full), 2 (partial), 1 (planned) or
    0 (not implemented, missing, or unrecognised).
    """
    if prevention is None:
        return 0

    score = 0
    for measure in PREVENTION_MEASURES:
        value = getattr(prevention, measure)
        for level, points in IMPLEMENTATION_POINTS.items():
            if value == level:
                score += points
                break

    return (score / (len(PREVENTION_MEASURES) * MAX_POINTS_PER_MEASURE)) * 100


def calculate_overall_score(data: WasteAuditData) -> int:
    """
    Weighted score out of 100.

    Infrastructure (20) and prevention (30) always count towards the
    achievable maximum. Training (25) counts only when the training section
    is present, contamination (25) only when at least one stream exists.
    """
    score = 0.0
    max_score = 0

    # Infrastructure (0-20)
    bins = _bins(data)
    recycling_bins = [item for item in bins if item.bin_type == BinType.DRY_RECYCLABLES]
    score += min(len(bins) * 2, 10)
    score += 10 if recycling_bins else 0
    max_score += 20

    # Prevention (0-30)
    score += (calculate_prevention_score(data.waste_prevention_measures) / 100) * 30
    max_score += 30

    # Training (0-25)
    training = data.behavioral_training
    if training is not None:
        if training.waste_champion_appointed:
            score += 10
        if training.user_education_materials_displayed:
            score += 10
        if training.waste_monitoring_records_kept != MonitoringFrequency.NEVER:
            score += 5
        max_score += 25

    # Contamination (0-25); lower is better, an unrated stream counts as worst
    streams = _assessments(data)
    if streams:
        levels = [
            _number(stream.contamination_level) or WORST_CONTAMINATION
            for stream in streams
        ]
        average_contamination = sum(levels) / len(levels)
        score += ((WORST_CONTAMINATION - average_contamination) / 4) * 25
        max_score += 25

    if max_score == 0:
        return 0
    # Out-of-range stored levels must not push the score outside 0-100
    return max(0, min(100, int(round_half_up((score / max_score) * 100))))


def generate_recommendations(data: WasteAuditData) -> List[str]:
    """Headline recommendations for the overall score band."""
    overall_score = calculate_overall_score(data)

    if overall_score < 40:
        return [
            "Priority: Focus on basic infrastructure - ensure adequate bins and signage",
            "Consider appointing a waste champion to drive improvements",
        ]
    if overall_score < 70:
        return [
            "Good foundation - focus on contamination reduction through training",
            "Implement waste prevention measures to reduce overall volumes",
        ]
    return [
        "Excellent waste management - consider sharing best practices with other centers",
        "Explore advanced initiatives like circular economy projects",
    ]


def compute_insights(data: WasteAuditData, user_count: Optional[int] = None) -> WasteAuditInsights:
    """Run every scoring function over one record."""
    if user_count is None:
        user_count = DEFAULT_USER_COUNT

    return WasteAuditInsights(
        calculations=calculate_waste_metrics(data, user_count),
        quick_wins=generate_quick_wins(data),
        compliance_alerts=generate_compliance_alerts(data),
        grant_opportunities=generate_grant_opportunities(data),
        overall_score=calculate_overall_score(data),
        recommendations=generate_recommendations(data),
    )
