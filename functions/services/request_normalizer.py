"""Assessment request normalization.

Turns what the intake wizard collected into one immutable AssessmentInput.
The wizard carries the same facts twice: in the nested full assessment
(demographics, property characteristics, functional assessments) and in the
older flat clientInfo / propertyInfo fields. One precedence rule applies
everywhere: a value derived from the nested assessment wins, and the flat
field is used only where the nested value is absent.
"""

from typing import Any, Dict, List, Optional

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from config.errors import ErrorCode, ValidationError
from config.settings import settings
from models.assessment_input import (
    AssessmentContext,
    AssessmentInput,
    FullAssessment,
    PropertyInfo,
    SelfReportedInfo,
    WizardState,
)
from services.eligibility import apply_eligibility
from services.scoring import (
    score_adl_assessment,
    score_falls_risk_assessment,
    score_iadl_assessment,
)

logger = structlog.get_logger(__name__)


def _present(model: Optional[BaseModel]) -> bool:
    """True when a partial wizard structure carries at least one submitted field."""
    return model is not None and bool(model.model_fields_set)


def _first(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


# =============================================================================
# Flat info merging
# =============================================================================


def _merge_self_reported(state: WizardState) -> Optional[SelfReportedInfo]:
    legacy = state.client_info
    demographics = state.client_demographics if _present(state.client_demographics) else None
    mobility = state.mobility_assessment if _present(state.mobility_assessment) else None
    falls_risk = state.falls_risk_assessment if _present(state.falls_risk_assessment) else None

    merged = SelfReportedInfo(
        name=_first(demographics.full_name() if demographics else None, legacy.name),
        address=_first(demographics.formatted_address() if demographics else None, legacy.address),
        age=_first(demographics.age if demographics else None, legacy.age),
        lives_alone=_first(demographics.lives_alone if demographics else None, legacy.lives_alone),
        mobility_aids=_first(mobility.mobility_aids() if mobility else None, legacy.mobility_aids),
        recent_falls=_first(falls_risk.has_fallen_past_year if falls_risk else None, legacy.recent_falls),
        primary_concerns=legacy.primary_concerns,
        current_medical_conditions=legacy.current_medical_conditions,
    )
    return merged if merged.model_dump(exclude_none=True) else None


def _merge_property(state: WizardState) -> Optional[PropertyInfo]:
    legacy = state.property_info
    characteristics = state.property_characteristics if _present(state.property_characteristics) else None

    merged = PropertyInfo(
        type=_first(characteristics.resolved_type() if characteristics else None, legacy.type),
        year_built=_first(characteristics.year_built if characteristics else None, legacy.year_built),
        stories=_first(characteristics.resolved_stories() if characteristics else None, legacy.stories),
    )
    return merged if merged.model_dump(exclude_none=True) else None


# =============================================================================
# Nested assessment
# =============================================================================


def _score_full_assessment(state: WizardState, age: Optional[int]) -> Optional[FullAssessment]:
    """Recompute every derived score in the nested bundle; drop empty sections."""
    sections: Dict[str, Any] = {}

    if _present(state.client_demographics):
        sections["client_demographics"] = state.client_demographics
    if _present(state.eligibility):
        sections["eligibility"] = apply_eligibility(state.eligibility, age)
    if _present(state.property_characteristics):
        sections["property_characteristics"] = state.property_characteristics
    if _present(state.adl_assessment):
        sections["adl_assessment"] = score_adl_assessment(state.adl_assessment)
    if _present(state.iadl_assessment):
        sections["iadl_assessment"] = score_iadl_assessment(state.iadl_assessment)
    if _present(state.mobility_assessment):
        sections["mobility_assessment"] = state.mobility_assessment
    if _present(state.falls_risk_assessment):
        sections["falls_risk_assessment"] = score_falls_risk_assessment(state.falls_risk_assessment)

    return FullAssessment(**sections) if sections else None


def _normalize_context(context: AssessmentContext) -> AssessmentContext:
    return context.model_copy(update={
        "budget_cap": context.budget_cap or settings.default_budget_cap,
    })


# =============================================================================
# Public API
# =============================================================================


def build_assessment_input(state: WizardState) -> AssessmentInput:
    """Build the normalized AI request from collected wizard data.

    Args:
        state: Wizard data at submission time.

    Returns:
        Immutable AssessmentInput with defaults applied (budget cap 5000,
        program OAHMP) and derived scores recomputed.

    Raises:
        ValidationError: If no images were submitted.
    """
    if not state.images:
        raise ValidationError("At least one image is required", field="images")

    self_reported = _merge_self_reported(state)
    age = self_reported.age if self_reported else None
    full_assessment = _score_full_assessment(state, age)

    assessment_input = AssessmentInput(
        images=list(state.images),
        self_reported_info=self_reported,
        property_info=_merge_property(state),
        assessment_context=_normalize_context(state.assessment_context),
        full_assessment=full_assessment,
    )

    logger.info(
        "assessment_input_built",
        image_count=len(assessment_input.images),
        program_type=assessment_input.assessment_context.program_type,
        budget_cap=assessment_input.assessment_context.budget_cap,
        has_full_assessment=full_assessment is not None,
    )
    return assessment_input


def _validation_details(exc: PydanticValidationError) -> List[Dict[str, Any]]:
    return [
        {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
        for err in exc.errors()
    ]


def wizard_state_from_request(body: Dict[str, Any]) -> WizardState:
    """Parse a submission request body into WizardState.

    The body carries ``images``, ``selfReportedInfo``, ``propertyInfo``,
    ``assessmentContext`` and an optional ``fullAssessment`` bundle.

    Raises:
        ValidationError: If the body does not match the expected shape.
    """
    full = body.get("fullAssessment") or {}
    if not isinstance(full, dict):
        raise ValidationError(
            "fullAssessment must be an object",
            field="fullAssessment",
            code=ErrorCode.INVALID_FIELD,
        )

    try:
        bundle = FullAssessment.model_validate(full)
        return WizardState.model_validate({
            "images": body.get("images") or [],
            "clientInfo": body.get("selfReportedInfo") or {},
            "propertyInfo": body.get("propertyInfo") or {},
            "assessmentContext": body.get("assessmentContext") or {},
            **dict(bundle),
        })
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid assessment request",
            details={"errors": _validation_details(e)},
        ) from e


def build_assessment_input_from_request(body: Dict[str, Any]) -> AssessmentInput:
    """Parse and normalize a submission request body in one step."""
    return build_assessment_input(wizard_state_from_request(body))
