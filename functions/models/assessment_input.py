"""AI assessment input models.

WizardState mirrors what the intake wizard collects (nested full assessment
plus the older flat clientInfo / propertyInfo fields). AssessmentInput is the
normalized, immutable request handed to the prompt builder and the AI gateway;
it is produced by services.request_normalizer.
"""

from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from models.base import CamelModel
from models.client import ClientDemographics, EligibilityVerification, PropertyCharacteristics
from models.functional_assessment import (
    ADLAssessment,
    FallsRiskAssessment,
    IADLAssessment,
    MobilityAssessment,
)


class ProgramType(str, Enum):
    """Federal program the assessment is performed for."""

    OAHMP = "OAHMP"  # HUD Older Adults Home Modification Program
    CIL = "CIL"      # ACL Centers for Independent Living
    AAA = "AAA"      # Area Agency on Aging
    CDBG = "CDBG"    # Community Development Block Grant
    OTHER = "OTHER"


# =============================================================================
# IMAGES
# =============================================================================


class ImageRef(CamelModel):
    """A submitted photo: remote URL or base64 data URI."""

    id: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1, description="http(s) URL or data:image/...;base64 URI")
    room: Optional[str] = None
    user_notes: Optional[str] = None


class RemoteImage(BaseModel):
    """Image that must be fetched before it can be sent to the model."""

    kind: Literal["remote"] = "remote"
    url: str


class InlineImage(BaseModel):
    """Image already embedded in the request."""

    kind: Literal["inline"] = "inline"
    mime_type: str = "image/jpeg"
    data: bytes


ImageSource = Union[RemoteImage, InlineImage]


class ImagePayload(BaseModel):
    """Resolved image bytes ready for the AI gateway."""

    image_id: str
    mime_type: str
    data: bytes


# =============================================================================
# CONTEXT
# =============================================================================


class SelfReportedInfo(CamelModel):
    """Flat client information (the wizard's legacy ``clientInfo``)."""

    name: Optional[str] = None
    address: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0)
    lives_alone: Optional[bool] = None
    mobility_aids: Optional[List[str]] = None
    recent_falls: Optional[bool] = None
    primary_concerns: Optional[List[str]] = None
    current_medical_conditions: Optional[List[str]] = None


class PropertyInfo(CamelModel):
    """Flat property information (the wizard's legacy ``propertyInfo``)."""

    type: Optional[str] = None
    year_built: Optional[int] = None
    stories: Optional[int] = None


class AssessmentContext(CamelModel):
    """Program context; budget_cap is filled with the program default when absent."""

    program_type: ProgramType = ProgramType.OAHMP
    budget_cap: Optional[float] = Field(default=None, ge=0)
    priority_areas: Optional[List[str]] = None


class FullAssessment(CamelModel):
    """The wizard's comprehensive assessment bundle."""

    client_demographics: Optional[ClientDemographics] = None
    eligibility: Optional[EligibilityVerification] = None
    property_characteristics: Optional[PropertyCharacteristics] = None
    adl_assessment: Optional[ADLAssessment] = None
    iadl_assessment: Optional[IADLAssessment] = None
    mobility_assessment: Optional[MobilityAssessment] = None
    falls_risk_assessment: Optional[FallsRiskAssessment] = None


# =============================================================================
# WIZARD STATE / NORMALIZED INPUT
# =============================================================================


class WizardState(CamelModel):
    """Everything the intake wizard has collected at submission time."""

    images: List[ImageRef] = Field(default_factory=list)

    client_demographics: Optional[ClientDemographics] = None
    eligibility: Optional[EligibilityVerification] = None
    property_characteristics: Optional[PropertyCharacteristics] = None
    adl_assessment: Optional[ADLAssessment] = None
    iadl_assessment: Optional[IADLAssessment] = None
    mobility_assessment: Optional[MobilityAssessment] = None
    falls_risk_assessment: Optional[FallsRiskAssessment] = None

    client_info: SelfReportedInfo = Field(default_factory=SelfReportedInfo)
    property_info: PropertyInfo = Field(default_factory=PropertyInfo)
    assessment_context: AssessmentContext = Field(default_factory=AssessmentContext)


class AssessmentInput(CamelModel):
    """Normalized request to the AI gateway. Immutable once built."""

    images: List[ImageRef] = Field(..., min_length=1)
    self_reported_info: Optional[SelfReportedInfo] = None
    property_info: Optional[PropertyInfo] = None
    assessment_context: AssessmentContext
    full_assessment: Optional[FullAssessment] = None

    class Config:
        frozen = True
