"""HUD OAHMP eligibility calculation.

A client is eligible when they are 62 or older, their household income is at
most 80% of the Area Median Income, and the home is their primary residence.
Income is required: without a usable income figure the income requirement is
reported as not met.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from config.settings import settings
from models.client import EligibilityVerification
from utils.formatting import round_half_up

logger = structlog.get_logger(__name__)

MINIMUM_AGE = 62
MAX_INCOME_PERCENT_OF_AMI = 80


@dataclass(frozen=True)
class EligibilityResult:
    """Derived eligibility flags."""

    meets_age_requirement: bool
    income_percent_of_ami: Optional[int]
    meets_income_requirement: bool
    is_eligible: bool


def income_percent_of_ami(income: Optional[float], ami: Optional[float]) -> Optional[int]:
    """Household income as a whole percentage of AMI, rounded half up.

    Returns None when income or AMI is missing or not positive.
    """
    if not income or not ami or income <= 0 or ami <= 0:
        return None
    return round_half_up(income * 100 / ami)


def compute_eligibility(
    age: Optional[int],
    income: Optional[float],
    ami: Optional[float] = None,
    is_primary_residence: Optional[bool] = False,
) -> EligibilityResult:
    """Compute age, income and residence eligibility.

    Args:
        age: Client age in years, if known.
        income: Annual household income, if entered.
        ami: Area Median Income (default from settings, 80,000).
        is_primary_residence: Whether the home is the client's primary residence.

    Returns:
        EligibilityResult with every derived flag.
    """
    if ami is None:
        ami = settings.default_area_median_income

    meets_age = age is not None and age >= MINIMUM_AGE
    percent = income_percent_of_ami(income, ami)
    meets_income = percent is not None and percent <= MAX_INCOME_PERCENT_OF_AMI
    residence_ok = bool(is_primary_residence)

    return EligibilityResult(
        meets_age_requirement=meets_age,
        income_percent_of_ami=percent,
        meets_income_requirement=meets_income,
        is_eligible=meets_age and meets_income and residence_ok,
    )


def apply_eligibility(
    verification: EligibilityVerification,
    age: Optional[int],
) -> EligibilityVerification:
    """Return a copy of ``verification`` with all derived fields recomputed."""
    result = compute_eligibility(
        age=age,
        income=verification.household_income,
        ami=verification.area_median_income,
        is_primary_residence=verification.is_primary_residence,
    )

    if verification.is_eligible is not None and verification.is_eligible != result.is_eligible:
        logger.info(
            "eligibility_recomputed",
            submitted=verification.is_eligible,
            computed=result.is_eligible,
        )

    return verification.model_copy(update={
        "area_median_income": verification.area_median_income or settings.default_area_median_income,
        "meets_age_requirement": result.meets_age_requirement,
        "income_percent_of_ami": result.income_percent_of_ami,
        "meets_income_requirement": result.meets_income_requirement,
        "is_eligible": result.is_eligible,
    })
