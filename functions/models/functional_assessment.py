"""Functional assessment models.

ADL (Katz Index), IADL (Lawton-Brody), mobility and CDC STEADI falls-risk
structures collected by the intake wizard. Every structure is partial: the
wizard may submit any subset of fields, and the derived fields (scores,
independence level, risk level) are recomputed by services.scoring.
"""

from enum import Enum, IntEnum
from typing import List, Optional

from pydantic import Field

from models.base import CamelModel


# =============================================================================
# ENUMS
# =============================================================================


class DifficultyLevel(IntEnum):
    """Difficulty performing an activity."""

    NONE = 0      # No difficulty, no help needed
    SOME = 1      # Some difficulty, but no help needed
    MUCH = 2      # Much difficulty, but no help needed
    UNABLE = 3    # Unable without help


class FrequencyLevel(IntEnum):
    """How often a mobility device is used."""

    NEVER = 0
    RARELY = 1
    SOMETIMES = 2
    FREQUENTLY = 3
    ALWAYS = 4


class IndependenceLevel(str, Enum):
    """Independence band derived from a 0-24 difficulty score."""

    FULLY_INDEPENDENT = "fully_independent"
    MOSTLY_INDEPENDENT = "mostly_independent"
    MODERATELY_IMPAIRED = "moderately_impaired"
    SIGNIFICANT_ASSISTANCE = "significant_assistance"
    DEPENDENT = "dependent"


class RestFrequency(str, Enum):
    """How often the client must rest while walking."""

    NEVER = "never"
    OCCASIONALLY = "occasionally"
    FREQUENTLY = "frequently"
    ALWAYS = "always"


class FallLocation(str, Enum):
    """Where a fall happened."""

    BATHROOM = "bathroom"
    BEDROOM = "bedroom"
    KITCHEN = "kitchen"
    STAIRS = "stairs"
    ENTRANCE = "entrance"
    YARD = "yard"
    OTHER = "other"


class RiskLevel(str, Enum):
    """Overall falls risk level."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


# =============================================================================
# ADL / IADL
# =============================================================================


class ActivityDifficulty(CamelModel):
    """Self-reported difficulty with a single ADL or IADL activity."""

    difficulty_level: int = Field(default=DifficultyLevel.NONE, ge=0, le=3)
    needs_help: bool = False
    notes: str = ""
    hazards_identified: List[str] = Field(default_factory=list)


ADL_ACTIVITIES = (
    "bathing",
    "dressing_upper_body",
    "dressing_lower_body",
    "transferring",
    "eating",
    "toileting",
    "walking",
    "grooming",
)

IADL_ACTIVITIES = (
    "preparing_meals",
    "light_housework",
    "shopping",
    "using_telephone",
    "laundry",
    "transportation",
    "medications",
    "managing_finances",
)


class _ActivityScores(CamelModel):
    """Derived fields shared by ADL and IADL assessments."""

    total_difficulties: Optional[int] = Field(default=None, ge=0, le=8)
    total_score: Optional[int] = Field(default=None, ge=0, le=24)
    identified_hazards: List[str] = Field(default_factory=list)
    independence_level: Optional[IndependenceLevel] = None


class ADLAssessment(_ActivityScores):
    """Activities of Daily Living, Katz Index methodology."""

    bathing: Optional[ActivityDifficulty] = None
    dressing_upper_body: Optional[ActivityDifficulty] = None
    dressing_lower_body: Optional[ActivityDifficulty] = None
    transferring: Optional[ActivityDifficulty] = None
    eating: Optional[ActivityDifficulty] = None
    toileting: Optional[ActivityDifficulty] = None
    walking: Optional[ActivityDifficulty] = None
    grooming: Optional[ActivityDifficulty] = None

    def activities(self) -> List[Optional[ActivityDifficulty]]:
        return [getattr(self, name) for name in ADL_ACTIVITIES]


class IADLAssessment(_ActivityScores):
    """Instrumental ADLs, Lawton-Brody methodology."""

    preparing_meals: Optional[ActivityDifficulty] = None
    light_housework: Optional[ActivityDifficulty] = None
    shopping: Optional[ActivityDifficulty] = None
    using_telephone: Optional[ActivityDifficulty] = None
    laundry: Optional[ActivityDifficulty] = None
    transportation: Optional[ActivityDifficulty] = None
    medications: Optional[ActivityDifficulty] = None
    managing_finances: Optional[ActivityDifficulty] = None

    def activities(self) -> List[Optional[ActivityDifficulty]]:
        return [getattr(self, name) for name in IADL_ACTIVITIES]


# =============================================================================
# MOBILITY
# =============================================================================


class DeviceUsage(CamelModel):
    """Usage of one mobility device."""

    frequency: int = Field(default=FrequencyLevel.NEVER, ge=0, le=4)
    indoor_use: bool = False
    outdoor_use: bool = False
    device_type: Optional[str] = None


class MobilityAssessment(CamelModel):
    """Mobility devices, balance/gait and endurance."""

    uses_wheelchair: Optional[DeviceUsage] = None
    uses_walker: Optional[DeviceUsage] = None
    uses_cane: Optional[DeviceUsage] = None
    uses_other_device: Optional[DeviceUsage] = None

    balance_issues: bool = False
    balance_notes: Optional[str] = None
    gait_issues: bool = False
    gait_notes: Optional[str] = None

    can_walk_one_block: Optional[bool] = None
    can_climb_flight_of_stairs: Optional[bool] = None
    rest_frequency: Optional[RestFrequency] = None

    def mobility_aids(self) -> List[str]:
        """Devices in use, in wheelchair/walker/cane/other order."""
        aids = []
        for name, usage in (
            ("wheelchair", self.uses_wheelchair),
            ("walker", self.uses_walker),
            ("cane", self.uses_cane),
        ):
            if usage is not None and usage.frequency > 0:
                aids.append(name)
        if self.uses_other_device is not None and self.uses_other_device.device_type:
            aids.append(self.uses_other_device.device_type)
        return aids


# =============================================================================
# FALLS RISK (CDC STEADI)
# =============================================================================


class FallDetail(CamelModel):
    """One fall in the past 12 months."""

    location: FallLocation = FallLocation.OTHER
    location_specific: Optional[str] = None
    caused_injury: bool = False
    injury_type: Optional[str] = None
    required_medical_attention: bool = False
    was_hospitalized: bool = False
    nights_hospitalized: int = Field(default=0, ge=0)


FALLS_EFFICACY_ACTIVITIES = (
    "cleaning_house",
    "getting_dressed",
    "preparing_meals",
    "taking_bath",
    "going_shopping",
    "getting_in_out_chair",
    "going_up_down_stairs",
    "walking_in_neighborhood",
    "reaching_in_cabinets",
    "answering_door",
)


class FallsEfficacy(CamelModel):
    """Confidence (1-10) doing each activity without falling; total 10-100."""

    cleaning_house: int = Field(default=10, ge=1, le=10)
    getting_dressed: int = Field(default=10, ge=1, le=10)
    preparing_meals: int = Field(default=10, ge=1, le=10)
    taking_bath: int = Field(default=10, ge=1, le=10)
    going_shopping: int = Field(default=10, ge=1, le=10)
    getting_in_out_chair: int = Field(default=10, ge=1, le=10)
    going_up_down_stairs: int = Field(default=10, ge=1, le=10)
    walking_in_neighborhood: int = Field(default=10, ge=1, le=10)
    reaching_in_cabinets: int = Field(default=10, ge=1, le=10)
    answering_door: int = Field(default=10, ge=1, le=10)
    total_score: Optional[int] = Field(default=None, ge=10, le=100)

    def ratings(self) -> List[int]:
        return [getattr(self, name) for name in FALLS_EFFICACY_ACTIVITIES]


RISK_FACTOR_NAMES = (
    "history_of_falls",
    "fear_of_falling",
    "mobility_problems",
    "balance_problems",
    "vision_problems",
    "cognitive_impairment",
    "medication_risks",
    "incontinence",
    "foot_problems",
    "environmental_hazards",
)


class RiskFactors(CamelModel):
    """STEADI risk factor checklist."""

    history_of_falls: bool = False
    fear_of_falling: bool = False
    mobility_problems: bool = False
    balance_problems: bool = False
    vision_problems: bool = False
    cognitive_impairment: bool = False
    medication_risks: bool = False  # 4+ meds or psychoactive meds
    incontinence: bool = False
    foot_problems: bool = False
    environmental_hazards: bool = False

    def count(self) -> int:
        return sum(1 for name in RISK_FACTOR_NAMES if getattr(self, name))


class FallsRiskAssessment(CamelModel):
    """Falls history, falls efficacy and STEADI risk factors."""

    has_fallen_past_year: bool = False
    number_of_falls: int = Field(default=0, ge=0)
    fall_details: List[FallDetail] = Field(default_factory=list)
    falls_efficacy: FallsEfficacy = Field(default_factory=FallsEfficacy)
    risk_factors: RiskFactors = Field(default_factory=RiskFactors)
    overall_risk_level: Optional[RiskLevel] = None
    falls_efficacy_score: Optional[int] = None
    notes: Optional[str] = None
