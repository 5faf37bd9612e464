"""Cloud Function entry points for the home safety assessment pipeline.

Provides HTTP endpoints for:
- Analyzing home photos into an enriched safety assessment
- Rendering an assessment to a PDF report
- Running both in one call
"""

import asyncio
import json
from typing import Dict, Any
from datetime import datetime, date

import structlog
from firebase_functions import https_fn, options

from config.errors import AssessmentError, ErrorCode, ValidationError
from services.assessment_processor import (
    generate_assessment_report,
    process_assessment_request,
    run_complete_assessment,
)

logger = structlog.get_logger()

# ============================================================================
# Helper Functions
# ============================================================================


def success_response(data: Dict[str, Any]) -> Dict[str, Any]:
    """Build success response."""
    return {"success": True, "data": data}


def error_response(code: str, message: str, details: Dict[str, Any] = None) -> Dict[str, Any]:
    """Build error response."""
    body = {
        "success": False,
        "error": message,
        "code": code,
    }
    if details:
        body["details"] = details
    return body


def get_request_json(req: https_fn.Request) -> Dict[str, Any]:
    """Extract JSON from request body.

    Args:
        req: HTTP request object.

    Returns:
        Parsed JSON data.

    Raises:
        ValidationError: If JSON is invalid or not an object.
    """
    try:
        data = req.get_json(force=True)
    except Exception as e:
        raise ValidationError(
            message=f"Invalid JSON in request body: {str(e)}"
        )
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _handle_errors(event: str, fn):
    """Run fn() and map failures onto JSON error responses."""
    try:
        return fn()
    except AssessmentError as e:
        if e.status >= 500:
            logger.error(event, error=e.message, code=e.code)
        return _json_response(
            e.to_dict(),
            status=e.status
        )
    except Exception as e:
        logger.exception(event, error=str(e))
        return _json_response(
            error_response(ErrorCode.INTERNAL_ERROR, str(e) or "Unknown error occurred"),
            status=500
        )


# ============================================================================
# Assessment Entry Points
# ============================================================================


ASSESS_DOCS = {
    "endpoint": "assess",
    "description": "Analyze home photos and return an enriched home safety assessment",
    "method": "POST",
    "requestBody": {
        "images": "array (required) - [{id, url (http(s) URL or base64 data URI), room?, userNotes?}]",
        "selfReportedInfo": "object (optional) - {name, address, age, livesAlone, mobilityAids, recentFalls, primaryConcerns, currentMedicalConditions}",
        "propertyInfo": "object (optional) - {type, yearBuilt, stories}",
        "assessmentContext": "object - {programType: OAHMP | CIL | AAA | CDBG | OTHER, budgetCap?, priorityAreas?}",
        "fullAssessment": "object (optional) - {clientDemographics, eligibility, propertyCharacteristics, adlAssessment, iadlAssessment, mobilityAssessment, fallsRiskAssessment}",
    },
    "response": "AIAssessmentOutput",
}


@https_fn.on_request(
    timeout_sec=300,  # vision model calls with several photos
    memory=options.MemoryOption.GB_1,
    region="us-central1"
)
def assess(req: https_fn.Request) -> https_fn.Response:
    """Analyze home photos.

    Request body:
    {
        "images": [{"id": "img-1", "url": "https://...", "room": "bathroom"}],
        "selfReportedInfo": {...},
        "propertyInfo": {...},
        "assessmentContext": {"programType": "OAHMP", "budgetCap": 5000},
        "fullAssessment": {...}  // optional
    }

    Response: the enriched AIAssessmentOutput.
    """
    if req.method == "OPTIONS":
        return _cors_response()
    if req.method == "GET":
        return _json_response(ASSESS_DOCS)

    def _run():
        data = get_request_json(req)
        logger.info("assess_request_received", image_count=len(data.get("images") or []))
        output = asyncio.run(process_assessment_request(data))
        return _json_response(output.to_json_dict())

    return _handle_errors("assess_error", _run)


REPORT_DOCS = {
    "endpoint": "assessment_report",
    "description": "Generates HUD OAHMP compliant PDF reports from assessment data",
    "method": "POST",
    "requestBody": {
        "assessment": "AIAssessmentOutput (required)",
        "clientInfo": "object - {name, address}",
        "assessmentDate": "string (ISO date)",
        "assessorName": "string",
        "organizationName": "string",
        "programType": "OAHMP | CIL | AAA | CDBG | OTHER",
        "caseNumber": "string",
        "format": "pdf (file download, default) | buffer (base64 JSON)",
    },
}


@https_fn.on_request(
    timeout_sec=120,
    memory=options.MemoryOption.GB_1,
    region="us-central1"
)
def assessment_report(req: https_fn.Request) -> https_fn.Response:
    """Render an assessment to PDF.

    Returns the PDF as an attachment, or for ``format: "buffer"``:
    {
        "success": true,
        "data": {"base64": "...", "mimeType": "application/pdf", "filename": "..."}
    }
    """
    if req.method == "OPTIONS":
        return _cors_response()
    if req.method == "GET":
        return _json_response(REPORT_DOCS)

    def _run():
        data = get_request_json(req)
        report = generate_assessment_report(data)

        if data.get("format") == "buffer":
            return _json_response(success_response({
                "base64": report.to_base64(),
                "mimeType": report.mime_type,
                "filename": report.filename,
            }))

        return https_fn.Response(
            report.content,
            status=200,
            mimetype=report.mime_type,
            headers={
                **CORS_HEADERS,
                "Content-Disposition": f'attachment; filename="{report.filename}"',
                "Content-Length": str(len(report.content)),
            }
        )

    return _handle_errors("assessment_report_error", _run)


COMPLETE_DOCS = {
    "endpoint": "complete_assessment",
    "description": "Complete assessment pipeline: analyze images + generate PDF in one call",
    "method": "POST",
    "requestBody": {
        "images": "array (required)",
        "client": "object (required) - {name (required), address, age, livesAlone, mobilityAids, recentFalls, primaryConcerns, medicalConditions}",
        "property": "object - {type, yearBuilt, stories}",
        "config": "object - {programType (default OAHMP), budgetCap (default 5000), priorityAreas}",
        "report": "object - {assessorName, organizationName, caseNumber, generatePdf (default true)}",
    },
    "responseBody": {
        "success": "boolean",
        "data": {
            "assessment": "AIAssessmentOutput",
            "pdf": "{base64, filename} | null",
            "metadata": "{assessmentId, processingTimeMs, imageCount, hazardsFound, recommendationsCount, estimatedCost, totalCost, withinBudget}",
        },
    },
}


@https_fn.on_request(
    timeout_sec=540,
    memory=options.MemoryOption.GB_1,
    region="us-central1"
)
def complete_assessment(req: https_fn.Request) -> https_fn.Response:
    """Analyze images and render the PDF report in one call."""
    if req.method == "OPTIONS":
        return _cors_response()
    if req.method == "GET":
        return _json_response(COMPLETE_DOCS)

    def _run():
        data = get_request_json(req)
        result = asyncio.run(run_complete_assessment(data))
        return _json_response(success_response(result))

    return _handle_errors("complete_assessment_error", _run)


CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Max-Age": "3600"
}


def _cors_response() -> https_fn.Response:
    """Return CORS preflight response."""
    return https_fn.Response(
        "",
        status=204,
        headers=CORS_HEADERS
    )


def _json_response(data: dict, status: int = 200) -> https_fn.Response:
    """Return JSON response with CORS headers."""

    def _json_default(o: Any):
        """JSON serializer for objects not serializable by default."""
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        return str(o)

    return https_fn.Response(
        json.dumps(data, default=_json_default),
        status=status,
        mimetype="application/json",
        headers=CORS_HEADERS
    )
