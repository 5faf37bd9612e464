"""Request validation for the assessment entry points.

Checks the minimal shape each entry point needs before any work is done:
the submission endpoint needs images, the report endpoint needs an
assessment object, the combined endpoint needs images and a client name.
Everything else is optional and defaulted downstream.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError
import structlog

from config.errors import ValidationError
from models.assessment_input import ProgramType
from models.assessment_output import AIAssessmentOutput

logger = structlog.get_logger(__name__)

REPORT_FORMATS = ("pdf", "buffer")


@dataclass
class ValidationResult:
    """Result of request validation."""
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    missing_field: Optional[str] = None  # first required field that was absent
    parsed: Any = None

    def add_error(self, message: str, missing_field: Optional[str] = None) -> None:
        self.is_valid = False
        self.errors.append(message)
        if missing_field and self.missing_field is None:
            self.missing_field = missing_field

    def raise_for_errors(self) -> None:
        """Raise ValidationError carrying the first error as its message."""
        if self.is_valid:
            return
        raise ValidationError(
            self.errors[0],
            field=self.missing_field,
            details={"errors": self.errors},
        )


def _check_images(data: Dict[str, Any], result: ValidationResult) -> None:
    images = data.get("images")
    if not isinstance(images, list) or len(images) == 0:
        result.add_error("At least one image is required", missing_field="images")
        return

    for i, image in enumerate(images):
        if not isinstance(image, dict):
            result.add_error(f"images[{i}] must be an object")
            continue
        if not image.get("id"):
            result.add_error(f"images[{i}].id is required", missing_field=f"images[{i}].id")
        if not image.get("url"):
            result.add_error(f"images[{i}].url is required", missing_field=f"images[{i}].url")


def _check_program_type(value: Any, path: str, result: ValidationResult) -> None:
    if value is None:
        return
    allowed = [p.value for p in ProgramType]
    if value not in allowed:
        result.add_error(f"{path} must be one of {', '.join(allowed)}")


def _check_object(data: Dict[str, Any], key: str, result: ValidationResult) -> Dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        result.add_error(f"{key} must be an object")
        return {}
    return value


def validate_assessment_request(data: Dict[str, Any]) -> ValidationResult:
    """Validate a submission request body.

    Requires a non-empty ``images`` list whose entries carry ``id`` and
    ``url``. ``assessmentContext.programType`` may be omitted (OAHMP is
    assumed) but must be a known program when present.
    """
    result = ValidationResult()
    if not isinstance(data, dict):
        result.add_error("Request body must be a JSON object")
        return result

    _check_images(data, result)
    for key in ("selfReportedInfo", "propertyInfo", "fullAssessment"):
        _check_object(data, key, result)
    context = _check_object(data, "assessmentContext", result)
    _check_program_type(context.get("programType"), "assessmentContext.programType", result)

    if not result.is_valid:
        logger.warning("assessment_request_invalid", errors=result.errors)
    return result


def validate_report_request(data: Dict[str, Any]) -> ValidationResult:
    """Validate a report request body and parse its ``assessment``.

    On success ``parsed`` holds the AIAssessmentOutput.
    """
    result = ValidationResult()
    if not isinstance(data, dict):
        result.add_error("Request body must be a JSON object")
        return result

    assessment = data.get("assessment")
    if not assessment:
        result.add_error("Assessment data is required", missing_field="assessment")
    elif not isinstance(assessment, dict):
        result.add_error("assessment must be an object")
    else:
        try:
            result.parsed = AIAssessmentOutput.model_validate(assessment)
        except PydanticValidationError as e:
            for err in e.errors():
                loc = ".".join(str(part) for part in err["loc"])
                result.add_error(f"assessment.{loc}: {err['msg']}")

    _check_object(data, "clientInfo", result)
    _check_program_type(data.get("programType"), "programType", result)

    fmt = data.get("format")
    if fmt is not None and fmt not in REPORT_FORMATS:
        result.add_error(f"format must be one of {', '.join(REPORT_FORMATS)}")

    if not result.is_valid:
        logger.warning("report_request_invalid", errors=result.errors)
    return result


def validate_complete_request(data: Dict[str, Any]) -> ValidationResult:
    """Validate a combined analysis + report request body."""
    result = ValidationResult()
    if not isinstance(data, dict):
        result.add_error("Request body must be a JSON object")
        return result

    _check_images(data, result)

    client = _check_object(data, "client", result)
    if not client.get("name"):
        result.add_error("Client name is required", missing_field="client.name")

    _check_object(data, "property", result)
    _check_object(data, "report", result)
    config = _check_object(data, "config", result)
    _check_program_type(config.get("programType"), "config.programType", result)

    if not result.is_valid:
        logger.warning("complete_request_invalid", errors=result.errors)
    return result
