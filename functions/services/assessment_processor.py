"""Assessment pipeline orchestration.

Submission request -> normalized AssessmentInput -> image payloads -> prompt
-> AI gateway -> enriched AIAssessmentOutput, plus the report and combined
flows that render that output to PDF. Each step either succeeds or raises an
AssessmentError subclass; nothing is retried.
"""

import base64
import time
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Optional
from uuid import uuid4

import structlog

from config.errors import ValidationError
from config.settings import settings
from models.assessment_input import AssessmentInput, ProgramType
from models.assessment_output import AIAssessmentOutput
from services.assessment_schema import get_response_format
from services.enrichment import enrich
from services.image_loader import resolve_images
from services.llm_service import AssessmentGateway
from services.pdf_generator import (
    DEFAULT_ASSESSOR_NAME,
    DEFAULT_CLIENT_ADDRESS,
    DEFAULT_CLIENT_NAME,
    ReportRequest,
    build_report_filename,
    generate_pdf_bytes,
)
from services.prompt_builder import build_prompt
from services.request_normalizer import build_assessment_input_from_request
from utils.pipeline_logger import (
    log_assessment_complete,
    log_assessment_failed,
    log_assessment_start,
)
from validators.request_validator import (
    validate_assessment_request,
    validate_complete_request,
    validate_report_request,
)

logger = structlog.get_logger(__name__)

PDF_MIME_TYPE = "application/pdf"

Renderer = Callable[[AIAssessmentOutput, ReportRequest], bytes]


class AssessmentProcessor:
    """Runs one assessment from normalized input to enriched output."""

    def __init__(self, gateway: Optional[AssessmentGateway] = None):
        self._gateway = gateway

    @property
    def gateway(self) -> AssessmentGateway:
        if self._gateway is None:
            self._gateway = AssessmentGateway()
        return self._gateway

    async def analyze(self, assessment_input: AssessmentInput) -> AIAssessmentOutput:
        """Resolve images, build the prompt, call the gateway and enrich the result.

        Raises:
            GatewayError: If an image cannot be loaded or the model call fails.
            ConfigurationError: If the gateway has no credential.
        """
        start_time = time.perf_counter()
        context = assessment_input.assessment_context

        log_assessment_start(
            image_count=len(assessment_input.images),
            program_type=context.program_type,
            budget_cap=context.budget_cap,
        )

        try:
            images = await resolve_images(assessment_input.images)
            prompt_text = build_prompt(assessment_input)
            raw = await self.gateway.generate(prompt_text, images, schema=get_response_format())
        except Exception as e:
            log_assessment_failed(e, (time.perf_counter() - start_time) * 1000)
            raise

        output = enrich(raw, assessment_input)

        log_assessment_complete(
            hazards=len(output.detected_hazards),
            recommendations=len(output.recommendations),
            safety_score=output.summary.overall_safety_score,
            duration_ms=(time.perf_counter() - start_time) * 1000,
        )
        return output


# =============================================================================
# Submission
# =============================================================================


def _processor_for(gateway: Optional[AssessmentGateway]) -> AssessmentProcessor:
    """Default gateway needs a configured credential; injected ones are trusted."""
    if gateway is None:
        settings.validate()
    return AssessmentProcessor(gateway)


async def process_assessment_request(
    body: Dict[str, Any],
    gateway: Optional[AssessmentGateway] = None,
) -> AIAssessmentOutput:
    """Validate, normalize and analyze one submission request body.

    Raises:
        ValidationError: If the body has no images or is malformed.
        ConfigurationError: If no gateway is passed and the API key is unset.
        GatewayError: If the model call fails.
    """
    validate_assessment_request(body).raise_for_errors()
    processor = _processor_for(gateway)
    assessment_input = build_assessment_input_from_request(body)
    return await processor.analyze(assessment_input)


# =============================================================================
# Report
# =============================================================================


@dataclass
class ReportFile:
    """Rendered report ready to be streamed or base64-encoded."""
    content: bytes
    filename: str
    mime_type: str = PDF_MIME_TYPE

    def to_base64(self) -> str:
        return base64.b64encode(self.content).decode("ascii")


def _parse_date(value: Any) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as e:
        raise ValidationError(
            f"assessmentDate must be an ISO date: {value}",
            details={"value": str(value)},
        ) from e


def build_report_request(body: Dict[str, Any]) -> ReportRequest:
    """ReportRequest from a report request body, defaults for anything missing."""
    client_info = body.get("clientInfo") or {}
    return ReportRequest(
        client_name=client_info.get("name") or DEFAULT_CLIENT_NAME,
        client_address=client_info.get("address") or DEFAULT_CLIENT_ADDRESS,
        assessment_date=_parse_date(body.get("assessmentDate")) or date.today(),
        assessor_name=body.get("assessorName") or DEFAULT_ASSESSOR_NAME,
        organization_name=body.get("organizationName") or settings.report_organization_name,
        program_type=body.get("programType") or ProgramType.OAHMP.value,
        case_number=body.get("caseNumber"),
        budget_cap=body.get("budgetCap"),
    )


def generate_assessment_report(body: Dict[str, Any], renderer: Optional[Renderer] = None) -> ReportFile:
    """Render a previously produced assessment to PDF.

    Raises:
        ValidationError: If ``assessment`` is missing or malformed.
        RenderError: If rendering fails.
    """
    validation = validate_report_request(body)
    validation.raise_for_errors()

    renderer = renderer or generate_pdf_bytes
    request = build_report_request(body)
    content = renderer(validation.parsed, request)

    # The filename falls back to "Assessment" rather than the printed placeholder name
    client_name = (body.get("clientInfo") or {}).get("name")
    return ReportFile(
        content=content,
        filename=build_report_filename(client_name, request.assessment_date),
    )


# =============================================================================
# Combined pipeline
# =============================================================================


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


def _submission_from_complete(body: Dict[str, Any]) -> Dict[str, Any]:
    """Map a combined request onto the submission request shape."""
    client = body.get("client") or {}
    config = body.get("config") or {}
    return {
        "images": body.get("images"),
        "selfReportedInfo": _drop_none({
            "name": client.get("name"),
            "address": client.get("address"),
            "age": client.get("age"),
            "livesAlone": client.get("livesAlone"),
            "mobilityAids": client.get("mobilityAids"),
            "recentFalls": client.get("recentFalls"),
            "primaryConcerns": client.get("primaryConcerns"),
            "currentMedicalConditions": client.get("medicalConditions"),
        }),
        "propertyInfo": body.get("property") or {},
        "assessmentContext": _drop_none({
            "programType": config.get("programType"),
            "budgetCap": config.get("budgetCap"),
            "priorityAreas": config.get("priorityAreas"),
        }),
    }


def new_assessment_id() -> str:
    """assess-{epoch_ms}-{6 hex chars}"""
    return f"assess-{int(time.time() * 1000)}-{uuid4().hex[:6]}"


async def run_complete_assessment(
    body: Dict[str, Any],
    gateway: Optional[AssessmentGateway] = None,
    renderer: Optional[Renderer] = None,
) -> Dict[str, Any]:
    """Analyze images and render the PDF report in one call.

    Returns:
        ``{"assessment", "pdf", "metadata"}``; ``pdf`` is None when
        ``report.generatePdf`` is false.
    """
    start_time = time.perf_counter()

    validate_complete_request(body).raise_for_errors()
    processor = _processor_for(gateway)

    assessment_input = build_assessment_input_from_request(_submission_from_complete(body))
    output = await processor.analyze(assessment_input)

    context = assessment_input.assessment_context
    budget_cap = context.budget_cap or settings.default_budget_cap
    total_cost = output.total_recommendation_cost()
    assessment_id = new_assessment_id()

    client = body.get("client") or {}
    report_options = body.get("report") or {}

    pdf = None
    if report_options.get("generatePdf") is not False:
        request = ReportRequest(
            client_name=client["name"],
            client_address=client.get("address") or DEFAULT_CLIENT_ADDRESS,
            assessor_name=report_options.get("assessorName") or DEFAULT_ASSESSOR_NAME,
            organization_name=report_options.get("organizationName") or settings.report_organization_name,
            program_type=context.program_type,
            case_number=report_options.get("caseNumber"),
            budget_cap=budget_cap,
        )
        content = (renderer or generate_pdf_bytes)(output, request)
        report_file = ReportFile(
            content=content,
            filename=build_report_filename(client["name"], request.assessment_date),
        )
        pdf = {"base64": report_file.to_base64(), "filename": report_file.filename}

    processing_time_ms = int((time.perf_counter() - start_time) * 1000)

    metadata = {
        "assessmentId": assessment_id,
        "processingTimeMs": processing_time_ms,
        "imageCount": len(assessment_input.images),
        "hazardsFound": len(output.detected_hazards),
        "recommendationsCount": len(output.recommendations),
        "estimatedCost": output.summary.estimated_total_cost.to_json_dict(),
        "totalCost": total_cost,
        "withinBudget": total_cost <= budget_cap,
    }

    logger.info(
        "complete_assessment_finished",
        assessment_id=assessment_id,
        hazards=metadata["hazardsFound"],
        recommendations=metadata["recommendationsCount"],
        total_cost=total_cost,
        within_budget=metadata["withinBudget"],
        pdf_generated=pdf is not None,
        processing_time_ms=processing_time_ms,
    )

    return {
        "assessment": output.to_json_dict(),
        "pdf": pdf,
        "metadata": metadata,
    }
