"""AI assessment output models.

Shape of the report the vision model produces. The model's JSON is trusted
for content but not for types, so these fields coerce instead of rejecting:
numbers arrive as strings ("$1,250"), scales come back out of range and
enum values get invented. Unknown enum values fall back to the field
default, scales and percentages are clamped, unusable numbers become 0.

Structural gaps (missing ids, summary figures, client data, the budget
notice) are filled in by services.enrichment. The functional assessment
sections (adl, iadl, mobility, falls_risk) are never produced by the model;
they are copied from the client's own submission.
"""

import math
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from models.base import CamelModel
from models.functional_assessment import (
    ADLAssessment,
    FallsRiskAssessment,
    IADLAssessment,
    MobilityAssessment,
)
from utils.formatting import round_half_up

DEFAULT_CONFIDENCE = 50


# =============================================================================
# COERCION
# =============================================================================


def _number(value: Any, default: float = 0) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.replace(",", "").replace("$", "").strip()
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return number if math.isfinite(number) else default


def _amount(value: Any) -> float:
    return max(0, _number(value))


def _percent(value: Any) -> float:
    return max(0, min(100, _number(value, DEFAULT_CONFIDENCE)))


def _scale(value: Any, low: int, high: int) -> int:
    """Integer on a fixed scale; anything unreadable lands on ``low``."""
    return max(low, min(high, round_half_up(_number(value, low))))


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _optional_text(value: Any) -> Optional[str]:
    return _text(value) or None


def _text_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [_text(item) for item in value if _text(item)]


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


def _object(value: Any) -> Any:
    return value if isinstance(value, (dict, BaseModel)) else {}


def _objects(value: Any) -> list:
    """List entries that are objects; anything else is dropped."""
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, (dict, BaseModel))]


def _known_value(model: type, value: Any, info: ValidationInfo) -> str:
    """Enum value, or the field's default when the value is not a member."""
    default = model.model_fields[info.field_name].default
    if isinstance(value, Enum):
        value = value.value
    text = _text(value).strip().lower()
    allowed = {member.value for member in type(default)}
    return text if text in allowed else default.value


# =============================================================================
# ENUMS
# =============================================================================


class HazardCategory(str, Enum):
    """Hazard taxonomy used to classify every detected hazard."""

    FALL_RISK = "fall_risk"
    ACCESSIBILITY = "accessibility"
    LIGHTING = "lighting"
    FLOORING = "flooring"
    GRAB_BARS_MISSING = "grab_bars_missing"
    TRIP_HAZARD = "trip_hazard"
    BURN_RISK = "burn_risk"
    ELECTRICAL = "electrical"
    STRUCTURAL = "structural"
    PLUMBING = "plumbing"
    VENTILATION = "ventilation"
    SAFETY_DEVICES = "safety_devices"
    DOOR_HARDWARE = "door_hardware"
    STORAGE_REACH = "storage_reach"
    OTHER = "other"


class ModificationCategory(str, Enum):
    """HUD OAHMP Appendix B aligned modification categories."""

    BATHROOM = "bathroom"
    GRAB_BARS = "grab_bars"
    GENERAL_FALL_PREVENTION = "general_fall_prevention"
    LIGHTING = "lighting"
    FLOORING = "flooring"
    DOORS_INTERIOR = "doors_interior"
    DOORS_EXTERIOR = "doors_exterior"
    KITCHEN = "kitchen"
    ACCESSIBILITY = "accessibility"
    STAIRS_RAILINGS = "stairs_railings"
    RAMPS = "ramps"
    HOME_SAFETY_DEVICES = "home_safety_devices"
    ELECTRICAL = "electrical"
    HVAC_PLUMBING = "hvac_plumbing"
    PATHWAYS_WALKWAYS = "pathways_walkways"
    ADAPTIVE_EQUIPMENT = "adaptive_equipment"
    MISCELLANEOUS_REPAIRS = "miscellaneous_repairs"


class EquipmentCategory(str, Enum):
    """Adaptive equipment categories."""

    BATHROOM_LARGE = "bathroom_large"
    BATHROOM_SMALL = "bathroom_small"
    MOBILITY_TRANSFER = "mobility_transfer"
    KITCHEN_AIDS = "kitchen_aids"
    PERSONAL_CARE = "personal_care"
    VISION_AIDS = "vision_aids"
    HEARING_AIDS = "hearing_aids"
    ORGANIZATION = "organization"
    SAFETY_DEVICES = "safety_devices"
    OTHER = "other"


class RoomType(str, Enum):
    """Room types the model may recognize in a photo."""

    BATHROOM = "bathroom"
    BEDROOM = "bedroom"
    KITCHEN = "kitchen"
    LIVING_ROOM = "living_room"
    HALLWAY = "hallway"
    ENTRANCE = "entrance"
    STAIRS = "stairs"
    LAUNDRY = "laundry"
    GARAGE = "garage"
    OTHER = "other"


class FeatureCondition(str, Enum):
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class FallsRiskReduction(str, Enum):
    NONE = "none"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class ModificationType(str, Enum):
    """Maintenance items are preferred; rehabilitation needs justification."""

    MAINTENANCE = "maintenance"
    REHABILITATION = "rehabilitation"


# =============================================================================
# DETECTIONS
# =============================================================================


class ConfidenceScores(CamelModel):
    """Model confidence, 0-100 each."""

    overall: float = Field(default=DEFAULT_CONFIDENCE, ge=0, le=100)
    image_quality: float = Field(default=DEFAULT_CONFIDENCE, ge=0, le=100)
    hazard_detection: float = Field(default=DEFAULT_CONFIDENCE, ge=0, le=100)
    recommendations: float = Field(default=DEFAULT_CONFIDENCE, ge=0, le=100)

    @field_validator("*", mode="before")
    @classmethod
    def clamp_percent(cls, v):
        return _percent(v)


class DetectedRoom(CamelModel):
    room_type: RoomType = RoomType.OTHER
    image_ids: List[str] = Field(default_factory=list)
    confidence: float = Field(default=DEFAULT_CONFIDENCE, ge=0, le=100)

    @field_validator("room_type", mode="before")
    @classmethod
    def known_room(cls, v, info: ValidationInfo):
        return _known_value(cls, v, info)

    @field_validator("image_ids", mode="before")
    @classmethod
    def image_id_list(cls, v):
        return _text_list(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v):
        return _percent(v)


class HazardLocation(CamelModel):
    room: str = ""
    specific_area: Optional[str] = None

    @field_validator("room", mode="before")
    @classmethod
    def room_text(cls, v):
        return _text(v)

    @field_validator("specific_area", mode="before")
    @classmethod
    def area_text(cls, v):
        return _optional_text(v)


class DetectedHazard(CamelModel):
    """A hazard spotted in one of the photos."""

    id: str
    image_id: str = ""
    category: HazardCategory = HazardCategory.OTHER
    description: str = ""
    severity: int = Field(default=0, ge=0, le=4, description="0 none .. 4 critical")
    location: HazardLocation = Field(default_factory=HazardLocation)
    affects_adls: List[str] = Field(default_factory=list, alias="affectsADLs")
    confidence: float = Field(default=DEFAULT_CONFIDENCE, ge=0, le=100)

    @field_validator("id", "image_id", "description", mode="before")
    @classmethod
    def as_text(cls, v):
        return _text(v)

    @field_validator("category", mode="before")
    @classmethod
    def known_category(cls, v, info: ValidationInfo):
        return _known_value(cls, v, info)

    @field_validator("severity", mode="before")
    @classmethod
    def clamp_severity(cls, v):
        return _scale(v, 0, 4)

    @field_validator("location", mode="before")
    @classmethod
    def location_object(cls, v):
        return _object(v)

    @field_validator("affects_adls", mode="before")
    @classmethod
    def adl_list(cls, v):
        return _text_list(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v):
        return _percent(v)


class ExistingAccessibilityFeature(CamelModel):
    """Accessibility feature already present in the home."""

    feature: str = ""
    image_id: str = ""
    location: str = ""
    condition: FeatureCondition = FeatureCondition.FAIR

    @field_validator("feature", "image_id", "location", mode="before")
    @classmethod
    def as_text(cls, v):
        return _text(v)

    @field_validator("condition", mode="before")
    @classmethod
    def known_condition(cls, v, info: ValidationInfo):
        return _known_value(cls, v, info)


# =============================================================================
# RECOMMENDATIONS
# =============================================================================


class CostBreakdown(CamelModel):
    """Cost of one modification. A bare number is read as the total."""

    materials: float = Field(default=0, ge=0)
    labor: float = Field(default=0, ge=0)
    total: float = Field(default=0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def fill_total(cls, data):
        if isinstance(data, BaseModel):
            return data
        if not isinstance(data, dict):
            return {"total": data}
        if _amount(data.get("total")):
            return data
        return {**data, "total": _amount(data.get("materials")) + _amount(data.get("labor"))}

    @field_validator("materials", "labor", "total", mode="before")
    @classmethod
    def non_negative(cls, v):
        return _amount(v)


class RecommendedModification(CamelModel):
    """A recommended home modification with cost estimate."""

    id: str
    category: ModificationCategory = ModificationCategory.MISCELLANEOUS_REPAIRS
    subcategory: str = ""
    description: str = ""

    room: str = ""
    specific_location: Optional[str] = None

    addresses_hazard: str = ""
    affected_adls: List[str] = Field(default_factory=list, alias="affectedADLs")
    affected_iadls: List[str] = Field(default_factory=list, alias="affectedIADLs")
    falls_risk_reduction: FallsRiskReduction = FallsRiskReduction.NONE

    priority: int = Field(default=1, ge=1, le=4, description="1 low .. 4 urgent")
    priority_justification: str = ""

    estimated_cost: CostBreakdown = Field(default_factory=CostBreakdown)

    modification_type: ModificationType = ModificationType.MAINTENANCE
    requires_licensed_contractor: bool = False
    requires_permit: bool = False
    requires_environmental_review: bool = False

    specifications: Optional[str] = None
    product_recommendations: List[str] = Field(default_factory=list)

    @field_validator(
        "id", "subcategory", "description", "room", "addresses_hazard", "priority_justification",
        mode="before",
    )
    @classmethod
    def as_text(cls, v):
        return _text(v)

    @field_validator("specific_location", "specifications", mode="before")
    @classmethod
    def as_optional_text(cls, v):
        return _optional_text(v)

    @field_validator("affected_adls", "affected_iadls", "product_recommendations", mode="before")
    @classmethod
    def as_text_list(cls, v):
        return _text_list(v)

    @field_validator("category", "falls_risk_reduction", "modification_type", mode="before")
    @classmethod
    def known_values(cls, v, info: ValidationInfo):
        return _known_value(cls, v, info)

    @field_validator("priority", mode="before")
    @classmethod
    def clamp_priority(cls, v):
        return _scale(v, 1, 4)

    @field_validator(
        "requires_licensed_contractor", "requires_permit", "requires_environmental_review",
        mode="before",
    )
    @classmethod
    def as_flag(cls, v):
        return _flag(v)


class AdaptiveEquipment(CamelModel):
    """Adaptive equipment suggestion."""

    id: str
    category: EquipmentCategory = EquipmentCategory.OTHER
    name: str = ""
    description: str = ""
    addresses_adl: List[str] = Field(default_factory=list, alias="addressesADL")
    addresses_iadl: List[str] = Field(default_factory=list, alias="addressesIADL")
    reduces_risk: str = ""
    estimated_cost: float = Field(default=0, ge=0)
    requires_installation: bool = False
    requires_training: bool = False
    priority: int = Field(default=1, ge=1, le=4)

    @field_validator("id", "name", "description", "reduces_risk", mode="before")
    @classmethod
    def as_text(cls, v):
        return _text(v)

    @field_validator("category", mode="before")
    @classmethod
    def known_category(cls, v, info: ValidationInfo):
        return _known_value(cls, v, info)

    @field_validator("addresses_adl", "addresses_iadl", mode="before")
    @classmethod
    def as_text_list(cls, v):
        return _text_list(v)

    @field_validator("estimated_cost", mode="before")
    @classmethod
    def non_negative(cls, v):
        return _amount(v)

    @field_validator("requires_installation", "requires_training", mode="before")
    @classmethod
    def as_flag(cls, v):
        return _flag(v)

    @field_validator("priority", mode="before")
    @classmethod
    def clamp_priority(cls, v):
        return _scale(v, 1, 4)


# =============================================================================
# SUMMARY / OUTPUT
# =============================================================================


class CostRange(CamelModel):
    low: float = Field(default=0, ge=0)
    high: float = Field(default=0, ge=0)

    @field_validator("low", "high", mode="before")
    @classmethod
    def non_negative(cls, v):
        return _amount(v)


class AssessmentSummary(CamelModel):
    overall_safety_score: float = Field(default=50, ge=0, le=100)
    critical_issues_count: int = Field(default=0, ge=0)
    primary_risk_areas: List[str] = Field(default_factory=list)
    estimated_total_cost: CostRange = Field(default_factory=CostRange)
    top_three_recommendations: List[str] = Field(default_factory=list)

    @field_validator("overall_safety_score", mode="before")
    @classmethod
    def clamp_score(cls, v):
        return _percent(v)

    @field_validator("critical_issues_count", mode="before")
    @classmethod
    def whole_count(cls, v):
        return int(_amount(v))

    @field_validator("primary_risk_areas", "top_three_recommendations", mode="before")
    @classmethod
    def as_text_list(cls, v):
        return _text_list(v)

    @field_validator("estimated_total_cost", mode="before")
    @classmethod
    def cost_object(cls, v):
        return _object(v)


class AIAssessmentOutput(CamelModel):
    """Enriched assessment report."""

    confidence: ConfidenceScores = Field(default_factory=ConfidenceScores)

    # Client-supplied functional assessments, merged in after the model call
    adl: Optional[ADLAssessment] = None
    iadl: Optional[IADLAssessment] = None
    mobility: Optional[MobilityAssessment] = None
    falls_risk: Optional[FallsRiskAssessment] = None

    detected_rooms: List[DetectedRoom] = Field(default_factory=list)
    detected_hazards: List[DetectedHazard] = Field(default_factory=list)
    existing_accessibility: List[ExistingAccessibilityFeature] = Field(default_factory=list)
    recommendations: List[RecommendedModification] = Field(default_factory=list)
    equipment_suggestions: List[AdaptiveEquipment] = Field(default_factory=list)

    summary: AssessmentSummary = Field(default_factory=AssessmentSummary)

    limitations: List[str] = Field(default_factory=list)
    additional_photos_needed: List[str] = Field(default_factory=list)
    requires_professional_assessment: bool = False
    professional_assessment_reason: Optional[str] = None

    @field_validator("confidence", "summary", mode="before")
    @classmethod
    def section_object(cls, v):
        return _object(v)

    @field_validator(
        "detected_rooms", "detected_hazards", "existing_accessibility", "recommendations",
        "equipment_suggestions",
        mode="before",
    )
    @classmethod
    def object_entries(cls, v):
        return _objects(v)

    @field_validator("limitations", "additional_photos_needed", mode="before")
    @classmethod
    def as_text_list(cls, v):
        return _text_list(v)

    @field_validator("requires_professional_assessment", mode="before")
    @classmethod
    def as_flag(cls, v):
        return _flag(v)

    @field_validator("professional_assessment_reason", mode="before")
    @classmethod
    def as_optional_text(cls, v):
        return _optional_text(v)

    def total_recommendation_cost(self) -> float:
        """Sum of estimated_cost.total across all recommendations."""
        return sum(rec.estimated_cost.total for rec in self.recommendations)

    def total_equipment_cost(self) -> float:
        return sum(item.estimated_cost for item in self.equipment_suggestions)
