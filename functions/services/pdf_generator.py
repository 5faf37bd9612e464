"""
PDF Report Generation Service for home safety assessments.

Generates HUD OAHMP style PDF reports from enriched assessment outputs using
WeasyPrint and Jinja2 templates. Reports include a cover page, Executive
Summary, ADL and IADL tables, Falls Risk & Mobility, Identified Hazards,
Priority and Additional Recommendations, and a Cost Summary.

Architecture:
- Uses Jinja2 for HTML template rendering (templates/assessment_report.html)
- Uses WeasyPrint for HTML to PDF conversion
- Returns PDF bytes; callers decide whether to stream, base64 or save them
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from datetime import date, datetime
from pathlib import Path
import re
import time

import structlog
from jinja2 import Environment, FileSystemLoader, select_autoescape

from config.settings import settings
from config.errors import RenderError
from models.assessment_input import ProgramType
from models.assessment_output import AIAssessmentOutput
from models.functional_assessment import ActivityDifficulty
from services.cost_summary import priority_label, safety_score_label, summarize_costs
from utils.formatting import format_currency

# Configure structlog logger
logger = structlog.get_logger(__name__)

# Template directory
TEMPLATE_DIR = Path(__file__).parent.parent / "templates"

REPORT_TEMPLATE = "assessment_report.html"

DEFAULT_CLIENT_NAME = "Client Name"
DEFAULT_CLIENT_ADDRESS = "Address Not Provided"
DEFAULT_ASSESSOR_NAME = "AI-Assisted Assessment"

# Available sections, in page order
ALL_SECTIONS = [
    "cover",
    "executive_summary",
    "adl",
    "iadl",
    "falls_risk",
    "hazards",
    "priority_recommendations",
    "additional_recommendations",
    "cost_summary",
]

# Recommendations at or above this priority go on the Priority page
PRIORITY_THRESHOLD = 3

ADL_ROWS = (
    ("eating", "Eating"),
    ("dressing_upper_body", "Dressing (Upper Body)"),
    ("dressing_lower_body", "Dressing (Lower Body)"),
    ("bathing", "Bathing"),
    ("toileting", "Toileting"),
    ("transferring", "Transferring"),
    ("walking", "Walking (Indoors)"),
    ("grooming", "Grooming"),
)

IADL_ROWS = (
    ("using_telephone", "Using Telephone"),
    ("shopping", "Shopping"),
    ("preparing_meals", "Food Preparation"),
    ("light_housework", "Light Housekeeping"),
    ("laundry", "Laundry"),
    ("transportation", "Transportation"),
    ("medications", "Medications"),
    ("managing_finances", "Finances"),
)

DIFFICULTY_TEXT = {
    0: "Independent",
    1: "Some Difficulty",
    2: "Great Difficulty",
    3: "Unable to Do",
}


# =============================================================================
# Data Models
# =============================================================================


@dataclass
class ReportRequest:
    """
    Client and report metadata printed on the report.

    Attributes:
        client_name: Printed on the cover page
        client_address: Printed under the client name
        assessment_date: Date of the assessment (defaults to today)
        assessor_name: Assessor, or the AI-assisted placeholder
        organization_name: AAA / CIL organization issuing the report
        program_type: Funding program (OAHMP, CIL, AAA, CDBG, OTHER)
        case_number: Optional case / reference number
        budget_cap: Program budget cap for the cost summary (settings default when None)
        sections: Optional list of sections to include (None = all applicable)
    """

    client_name: str = DEFAULT_CLIENT_NAME
    client_address: str = DEFAULT_CLIENT_ADDRESS
    assessment_date: date = field(default_factory=date.today)
    assessor_name: str = DEFAULT_ASSESSOR_NAME
    organization_name: str = field(default_factory=lambda: settings.report_organization_name)
    program_type: str = ProgramType.OAHMP.value
    case_number: Optional[str] = None
    budget_cap: Optional[float] = None
    sections: Optional[List[str]] = None

    def get_sections(self) -> List[str]:
        """Return requested sections in page order, defaulting to all sections."""
        if self.sections is None:
            return ALL_SECTIONS.copy()
        return [s for s in ALL_SECTIONS if s in self.sections]


@dataclass
class PDFGenerationResult:
    """
    Result of local PDF generation.

    Attributes:
        output_path: Absolute path of the written file
        page_count: Number of pages in the generated PDF
        file_size_bytes: Size of the PDF file in bytes
        generated_at: ISO timestamp when the PDF was generated
    """

    output_path: str
    page_count: int
    file_size_bytes: int
    generated_at: str


# =============================================================================
# Template Engine Setup
# =============================================================================


def _humanize(value: Any) -> str:
    """bathroom_main -> bathroom main"""
    return str(value or "").replace("_", " ")


def _severity_class(severity: int) -> str:
    if severity >= 4:
        return "danger"
    if severity >= 3:
        return "warning"
    if severity >= 2:
        return "caution"
    return "success"


def _priority_class(priority: int) -> str:
    return {4: "danger", 3: "warning", 2: "caution"}.get(priority, "success")


def _score_class(score: float) -> str:
    if score >= 80:
        return "success"
    if score >= 60:
        return "caution"
    if score >= 40:
        return "warning"
    return "danger"


def _format_long_date(value: date) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def _get_jinja_env() -> Environment:
    """
    Create and configure Jinja2 environment.

    Returns:
        Configured Jinja2 Environment
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )
    env.filters["currency"] = format_currency
    env.filters["humanize"] = _humanize
    env.filters["severity_class"] = _severity_class
    env.filters["priority_class"] = _priority_class
    env.filters["priority_label"] = priority_label
    env.filters["score_class"] = _score_class
    return env


# =============================================================================
# Template Context
# =============================================================================


def _activity_rows(assessment, rows) -> List[Dict[str, Any]]:
    """Table rows for the activities that were actually assessed."""
    result = []
    for name, label in rows:
        activity: Optional[ActivityDifficulty] = getattr(assessment, name)
        if activity is None:
            continue
        result.append({
            "label": label,
            "status": DIFFICULTY_TEXT.get(activity.difficulty_level, "Unknown"),
            "needs_help": activity.needs_help,
            "notes": activity.notes or "-",
        })
    return result


def _device_rows(mobility) -> List[Dict[str, Any]]:
    rows = []
    for label, usage in (
        ("Cane", mobility.uses_cane),
        ("Walker", mobility.uses_walker),
        ("Wheelchair", mobility.uses_wheelchair),
    ):
        if usage is None or usage.frequency == 0:
            continue
        places = [p for p, used in (("Indoors", usage.indoor_use), ("Outdoors", usage.outdoor_use)) if used]
        rows.append({"label": label, "used": " ".join(places) or "-"})
    if mobility.uses_other_device is not None and mobility.uses_other_device.device_type:
        rows.append({"label": mobility.uses_other_device.device_type, "used": "-"})
    return rows


def _available_sections(output: AIAssessmentOutput, requested: List[str]) -> List[str]:
    """Drop sections with nothing to show."""
    has_content = {
        "adl": output.adl is not None,
        "iadl": output.iadl is not None,
        "falls_risk": output.falls_risk is not None or output.mobility is not None,
        "hazards": len(output.detected_hazards) > 0,
        "priority_recommendations": any(
            rec.priority >= PRIORITY_THRESHOLD for rec in output.recommendations
        ),
        "additional_recommendations": any(
            rec.priority < PRIORITY_THRESHOLD for rec in output.recommendations
        ),
    }
    return [s for s in requested if has_content.get(s, True)]


def build_report_context(output: AIAssessmentOutput, request: ReportRequest) -> Dict[str, Any]:
    """
    Build the template context for one report.

    Args:
        output: Enriched assessment output
        request: Client and report metadata

    Returns:
        Dictionary passed to the Jinja2 template
    """
    costs = summarize_costs(output, request.budget_cap)
    score = output.summary.overall_safety_score

    context = {
        "sections": _available_sections(output, request.get_sections()),
        "report": {
            "client_name": request.client_name,
            "client_address": request.client_address,
            "assessment_date": _format_long_date(request.assessment_date),
            "assessor_name": request.assessor_name,
            "organization_name": request.organization_name,
            "program_type": request.program_type,
            "case_number": request.case_number,
            "generated_at": datetime.now().strftime("%B %d, %Y %I:%M %p"),
        },
        "assessment": output,
        "safety": {
            "score": score,
            "label": safety_score_label(score),
        },
        "costs": costs,
        "priority_recommendations": [
            rec for rec in output.recommendations if rec.priority >= PRIORITY_THRESHOLD
        ],
        "additional_recommendations": [
            rec for rec in output.recommendations if rec.priority < PRIORITY_THRESHOLD
        ],
        "adl_rows": _activity_rows(output.adl, ADL_ROWS) if output.adl else [],
        "iadl_rows": _activity_rows(output.iadl, IADL_ROWS) if output.iadl else [],
        "device_rows": _device_rows(output.mobility) if output.mobility else [],
    }
    return context


# =============================================================================
# PDF Generation
# =============================================================================


def render_report_html(output: AIAssessmentOutput, request: Optional[ReportRequest] = None) -> str:
    """
    Render HTML from the Jinja2 template.

    Args:
        output: Enriched assessment output
        request: Client and report metadata (defaults when None)

    Returns:
        Rendered HTML string
    """
    request = request or ReportRequest()
    env = _get_jinja_env()
    template = env.get_template(REPORT_TEMPLATE)
    return template.render(**build_report_context(output, request))


def _html_to_pdf(html_content: str) -> bytes:
    """
    Convert HTML to PDF using WeasyPrint.

    Args:
        html_content: Rendered HTML string

    Returns:
        PDF content as bytes
    """
    from weasyprint import HTML
    from weasyprint.text.fonts import FontConfiguration

    font_config = FontConfiguration()

    html_doc = HTML(string=html_content, base_url=str(TEMPLATE_DIR))

    return html_doc.write_pdf(font_config=font_config)


def _count_pdf_pages(pdf_bytes: bytes) -> int:
    """
    Count the number of pages in a PDF.

    Args:
        pdf_bytes: PDF content as bytes

    Returns:
        Number of pages
    """
    content = pdf_bytes.decode("latin-1", errors="ignore")
    return content.count("/Type /Page") - content.count("/Type /Pages")


def generate_pdf_bytes(output: AIAssessmentOutput, request: Optional[ReportRequest] = None) -> bytes:
    """
    Generate the assessment report as PDF bytes.

    Args:
        output: Enriched assessment output
        request: Client and report metadata (defaults when None)

    Returns:
        PDF content as bytes

    Raises:
        RenderError: If template rendering or PDF conversion fails
    """
    start_time = time.perf_counter()
    request = request or ReportRequest()

    logger.info(
        "pdf_generation_started",
        client_name=request.client_name,
        program_type=request.program_type,
        hazards=len(output.detected_hazards),
        recommendations=len(output.recommendations),
    )

    try:
        html_content = render_report_html(output, request)
        pdf_bytes = _html_to_pdf(html_content)
    except Exception as e:
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.error(
            "pdf_generation_error",
            error=str(e),
            error_type=type(e).__name__,
            duration_ms=round(duration_ms, 2),
        )
        raise RenderError(
            f"Failed to generate PDF report: {e}",
            renderer="pdf",
            details={"error_type": type(e).__name__},
        ) from e

    duration_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        "pdf_generated",
        page_count=_count_pdf_pages(pdf_bytes),
        file_size_kb=round(len(pdf_bytes) / 1024, 2),
        duration_ms=round(duration_ms, 2),
    )
    return pdf_bytes


# =============================================================================
# Local PDF Generation (for scripts and demos)
# =============================================================================


def generate_pdf_local(
    output: AIAssessmentOutput,
    output_path: str,
    request: Optional[ReportRequest] = None,
) -> PDFGenerationResult:
    """
    Generate the report and save it to a local file.

    Args:
        output: Enriched assessment output
        output_path: Local file path to save PDF
        request: Client and report metadata

    Returns:
        PDFGenerationResult with local file path
    """
    pdf_bytes = generate_pdf_bytes(output, request)

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_bytes(pdf_bytes)

    page_count = _count_pdf_pages(pdf_bytes)

    logger.info(
        "pdf_generated_local",
        output_path=output_path,
        page_count=page_count,
    )

    return PDFGenerationResult(
        output_path=str(output_file.absolute()),
        page_count=page_count,
        file_size_bytes=len(pdf_bytes),
        generated_at=datetime.now().isoformat(),
    )


# =============================================================================
# Utility Functions
# =============================================================================


def sanitize_filename_part(value: Optional[str], max_length: int, fallback: str = "Assessment") -> str:
    """Replace non-alphanumerics with underscores and truncate."""
    if not value:
        return fallback
    return re.sub(r"[^a-zA-Z0-9]", "_", value)[:max_length]


def build_report_filename(
    client_name: Optional[str],
    report_date: Optional[date] = None,
    ext: str = "pdf",
) -> str:
    """
    Build the download filename for a report.

    Example:
        >>> build_report_filename("Mary O'Neil", date(2025, 3, 4))
        'HomeAssessment_Mary_O_Neil_2025-03-04.pdf'
    """
    report_date = report_date or date.today()
    safe_name = sanitize_filename_part(client_name, 30)
    return f"HomeAssessment_{safe_name}_{report_date.isoformat()}.{ext}"


def get_available_sections() -> List[str]:
    """Return list of all available PDF sections."""
    return ALL_SECTIONS.copy()
