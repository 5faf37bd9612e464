"""Client demographics, eligibility and property models.

All structures are partial: the intake wizard fills them step by step and
any field may be missing when a submission arrives.
"""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from models.base import CamelModel


class OwnershipType(str, Enum):
    """How the client holds title to the home."""

    SOLE_OWNER = "sole_owner"
    JOINT_OWNER = "joint_owner"
    SPOUSE_OF_OWNER = "spouse_of_owner"
    TRUST = "trust"
    OTHER = "other"


class EntryType(str, Enum):
    """Primary entry type of the home."""

    GROUND_LEVEL = "ground_level"
    STEPS = "steps"
    RAMP = "ramp"
    ELEVATOR = "elevator"


# =============================================================================
# CLIENT DEMOGRAPHICS
# =============================================================================


class Address(CamelModel):
    """Postal address."""

    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    county: Optional[str] = None

    def formatted(self) -> Optional[str]:
        """Format as "street, city, state zip"; None when nothing was entered."""
        state_zip = " ".join(part for part in (self.state, self.zip_code) if part)
        parts = [part for part in (self.street, self.city, state_zip) if part]
        return ", ".join(parts) if parts else None


class ClientDemographics(CamelModel):
    """Client demographics collected by the intake wizard."""

    client_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0)
    gender: Optional[str] = None

    phone: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    preferred_contact_method: Optional[str] = None
    preferred_language: Optional[str] = None

    address: Optional[Address] = None

    race: List[str] = Field(default_factory=list)
    ethnicity: Optional[str] = None

    lives_alone: Optional[bool] = None
    household_size: Optional[int] = None
    adults_over62: Optional[int] = Field(default=None, alias="adultsOver62")
    has_caregiver: Optional[bool] = None
    caregiver_relationship: Optional[str] = None

    aging_in_place_importance: Optional[int] = Field(default=None, ge=1, le=5)

    def full_name(self) -> Optional[str]:
        """First and last name joined by a space, or None when both are blank."""
        parts = [part.strip() for part in (self.first_name, self.last_name) if part and part.strip()]
        return " ".join(parts) if parts else None

    def formatted_address(self) -> Optional[str]:
        return self.address.formatted() if self.address else None


# =============================================================================
# ELIGIBILITY (HUD OAHMP)
# =============================================================================


class EligibilityVerification(CamelModel):
    """Program eligibility inputs and derived flags.

    meets_age_requirement, income_percent_of_ami, meets_income_requirement
    and is_eligible are derived by services.eligibility; values submitted by
    the client are recomputed, never trusted.
    """

    meets_age_requirement: Optional[bool] = None

    is_homeowner: Optional[bool] = None
    ownership_type: Optional[OwnershipType] = None
    ownership_documentation: Optional[str] = None

    household_income: Optional[float] = Field(default=None, ge=0)
    area_median_income: Optional[float] = None  # settings.default_area_median_income when absent
    income_percent_of_ami: Optional[int] = Field(default=None, alias="incomePercentOfAMI")
    meets_income_requirement: Optional[bool] = None
    income_documentation: List[str] = Field(default_factory=list)

    is_primary_residence: Optional[bool] = None
    years_at_residence: Optional[float] = None

    is_eligible: Optional[bool] = None
    eligibility_notes: Optional[str] = None
    verified_by: Optional[str] = None
    verified_date: Optional[str] = None


# =============================================================================
# PROPERTY
# =============================================================================


class PropertyCharacteristics(CamelModel):
    """Physical characteristics of the home.

    Older wizard screens write ``homeType`` and ``numberOfStories``; newer ones
    write ``propertyType`` and ``stories``. Both spellings are accepted.
    """

    property_type: Optional[str] = None
    home_type: Optional[str] = None
    year_built: Optional[int] = None
    square_footage: Optional[int] = None
    stories: Optional[int] = None
    number_of_stories: Optional[int] = None
    has_basement: Optional[bool] = None
    has_garage: Optional[bool] = None

    primary_entry_type: Optional[EntryType] = None
    number_of_steps_to_entry: Optional[int] = None

    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    half_baths: Optional[int] = None

    existing_accessibility_features: List[str] = Field(default_factory=list)

    def resolved_type(self) -> Optional[str]:
        return self.home_type or self.property_type

    def resolved_stories(self) -> Optional[int]:
        return self.number_of_stories or self.stories
