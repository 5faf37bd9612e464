"""Functional assessment scoring.

Katz ADL / Lawton-Brody IADL difficulty scores, independence bands, falls
efficacy totals and the CDC STEADI falls risk level. All functions are pure;
out-of-range inputs are rejected earlier by the pydantic models, so nothing
here clamps.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, TypeVar, Union

from models.functional_assessment import (
    ActivityDifficulty,
    ADLAssessment,
    FallsEfficacy,
    FallsRiskAssessment,
    IADLAssessment,
    IndependenceLevel,
    RiskFactors,
    RiskLevel,
)

MAX_ACTIVITY_SCORE = 24  # 8 activities x difficulty 3

# (upper bound of score / max, level), checked in order
INDEPENDENCE_THRESHOLDS = (
    (0.25, IndependenceLevel.FULLY_INDEPENDENT),
    (0.5, IndependenceLevel.MOSTLY_INDEPENDENT),
    (0.75, IndependenceLevel.MODERATELY_IMPAIRED),
    (0.9, IndependenceLevel.SIGNIFICANT_ASSISTANCE),
)

HIGH_RISK_FACTOR_COUNT = 5
MODERATE_RISK_FACTOR_COUNT = 3
HIGH_RISK_EFFICACY_BELOW = 40
MODERATE_RISK_EFFICACY_BELOW = 70


@dataclass(frozen=True)
class ActivityScore:
    """Derived totals for an ADL or IADL assessment."""

    total_difficulties: int
    total_score: int
    independence_level: IndependenceLevel


def classify_independence(total_score: int, max_score: int = MAX_ACTIVITY_SCORE) -> IndependenceLevel:
    """Map a difficulty score to one of the five independence bands.

    Bands are inclusive at the upper edge: 6/24 is exactly 0.25 and stays
    fully independent, 7/24 is mostly independent.
    """
    ratio = total_score / max_score
    for upper, level in INDEPENDENCE_THRESHOLDS:
        if ratio <= upper:
            return level
    return IndependenceLevel.DEPENDENT


def _score_activities(activities: Iterable[Optional[ActivityDifficulty]]) -> ActivityScore:
    levels = [activity.difficulty_level if activity is not None else 0 for activity in activities]
    total_score = sum(levels)
    return ActivityScore(
        total_difficulties=sum(1 for level in levels if level > 0),
        total_score=total_score,
        independence_level=classify_independence(total_score),
    )


def compute_adl_score(adl: ADLAssessment) -> ActivityScore:
    """Score the 8 Katz activities; an activity not answered counts as 0."""
    return _score_activities(adl.activities())


def compute_iadl_score(iadl: IADLAssessment) -> ActivityScore:
    """Score the 8 Lawton-Brody activities; an activity not answered counts as 0."""
    return _score_activities(iadl.activities())


def compute_falls_efficacy_score(efficacy: FallsEfficacy) -> int:
    """Sum of the ten 1-10 confidence ratings (10..100)."""
    return sum(efficacy.ratings())


def compute_risk_level(
    risk_factors: RiskFactors,
    efficacy_score: int,
    has_fallen_past_year: bool,
    fall_count: int,
) -> RiskLevel:
    """CDC STEADI overall falls risk.

    high: fallen in the past year with at least one recorded fall, 5+ risk
    factors, or efficacy below 40. moderate: 3+ risk factors or efficacy
    below 70. Otherwise low.
    """
    factor_count = risk_factors.count()

    if (has_fallen_past_year and fall_count >= 1) \
            or factor_count >= HIGH_RISK_FACTOR_COUNT \
            or efficacy_score < HIGH_RISK_EFFICACY_BELOW:
        return RiskLevel.HIGH
    if factor_count >= MODERATE_RISK_FACTOR_COUNT or efficacy_score < MODERATE_RISK_EFFICACY_BELOW:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


# =============================================================================
# Recompute derived fields on a model
# =============================================================================

ActivityAssessment = TypeVar("ActivityAssessment", ADLAssessment, IADLAssessment)


def _collect_hazards(activities: Iterable[Optional[ActivityDifficulty]]) -> List[str]:
    hazards: List[str] = []
    for activity in activities:
        if activity is not None:
            hazards.extend(activity.hazards_identified)
    return hazards


def _score_assessment(assessment: ActivityAssessment) -> ActivityAssessment:
    activities = assessment.activities()
    score = _score_activities(activities)
    return assessment.model_copy(update={
        "total_difficulties": score.total_difficulties,
        "total_score": score.total_score,
        "independence_level": score.independence_level.value,
        "identified_hazards": _collect_hazards(activities),
    })


def score_adl_assessment(adl: ADLAssessment) -> ADLAssessment:
    """Copy of ``adl`` with every derived field recomputed from its activities."""
    return _score_assessment(adl)


def score_iadl_assessment(iadl: IADLAssessment) -> IADLAssessment:
    """Copy of ``iadl`` with every derived field recomputed from its activities."""
    return _score_assessment(iadl)


def score_falls_risk_assessment(falls_risk: FallsRiskAssessment) -> FallsRiskAssessment:
    """Copy of ``falls_risk`` with efficacy total, fall count and risk level recomputed."""
    efficacy_score = compute_falls_efficacy_score(falls_risk.falls_efficacy)
    fall_count = len(falls_risk.fall_details)
    risk_level = compute_risk_level(
        falls_risk.risk_factors,
        efficacy_score,
        falls_risk.has_fallen_past_year,
        fall_count,
    )
    return falls_risk.model_copy(update={
        "number_of_falls": fall_count,
        "falls_efficacy": falls_risk.falls_efficacy.model_copy(update={"total_score": efficacy_score}),
        "falls_efficacy_score": efficacy_score,
        "overall_risk_level": risk_level.value,
    })


def independence_label(level: Union[IndependenceLevel, str, None]) -> str:
    """Human-readable independence band, e.g. "Mostly Independent"."""
    if not level:
        return "Not specified"
    value = level.value if isinstance(level, IndependenceLevel) else level
    return value.replace("_", " ").title()
