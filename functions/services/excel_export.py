"""
Spreadsheet export for assessment results.

Builds an openpyxl workbook with Summary, Hazards, Recommendations and
Equipment sheets, plus ADL Assessment, IADL Assessment, Falls Risk and
Mobility sheets when those sections are present in the output.
"""

from datetime import date
from io import BytesIO
from typing import Any, Iterable, List, Optional, Sequence

import structlog
from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.worksheet.worksheet import Worksheet

from config.errors import RenderError
from models.assessment_input import SelfReportedInfo
from models.assessment_output import AIAssessmentOutput
from models.functional_assessment import (
    ADL_ACTIVITIES,
    IADL_ACTIVITIES,
    RISK_FACTOR_NAMES,
)
from services.cost_summary import priority_label
from services.pdf_generator import sanitize_filename_part
from utils.formatting import format_currency

logger = structlog.get_logger(__name__)

XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

TITLE_FONT = Font(bold=True, size=14)
HEADER_FONT = Font(bold=True)


def _yes_no(value: Any) -> str:
    return "Yes" if value else "No"


def _label(name: str) -> str:
    """dressing_upper_body -> Dressing Upper Body"""
    return name.replace("_", " ").title()


def _append_rows(sheet: Worksheet, rows: Iterable[Sequence[Any]]) -> None:
    for row in rows:
        sheet.append(list(row))


def _add_table(wb: Workbook, title: str, header: List[str], rows: Iterable[Sequence[Any]]) -> Worksheet:
    sheet = wb.create_sheet(title)
    sheet.append(header)
    for cell in sheet[1]:
        cell.font = HEADER_FONT
    _append_rows(sheet, rows)
    sheet.freeze_panes = "A2"
    return sheet


def _add_sections_sheet(wb: Workbook, title: str, rows: Iterable[Sequence[Any]]) -> Worksheet:
    sheet = wb.create_sheet(title)
    _append_rows(sheet, rows)
    sheet["A1"].font = TITLE_FONT
    return sheet


def _summary_rows(output: AIAssessmentOutput, client: SelfReportedInfo, report_date: date) -> List[List[Any]]:
    summary = output.summary
    confidence = output.confidence
    return [
        ["Home Safety Assessment Report"],
        [],
        ["Client Name", client.name or "Not Provided"],
        ["Property Address", client.address or "Not Provided"],
        ["Assessment Date", report_date.isoformat()],
        [],
        ["Overall Safety Score", summary.overall_safety_score],
        ["Critical Issues", summary.critical_issues_count],
        ["Total Recommendations", len(output.recommendations)],
        [
            "Estimated Cost Range",
            f"{format_currency(summary.estimated_total_cost.low)} - "
            f"{format_currency(summary.estimated_total_cost.high)}",
        ],
        [],
        ["Confidence Metrics"],
        ["Overall Confidence", f"{confidence.overall:g}%"],
        ["Image Quality", f"{confidence.image_quality:g}%"],
        ["Hazard Detection", f"{confidence.hazard_detection:g}%"],
        ["Recommendations", f"{confidence.recommendations:g}%"],
        [],
        ["Primary Risk Areas"],
        *[[area] for area in summary.primary_risk_areas],
    ]


def _activity_rows(title: str, assessment, names) -> List[List[Any]]:
    rows: List[List[Any]] = [
        [title],
        [],
        ["Independence Level", _label(assessment.independence_level or "not_assessed")],
        ["Total Score", assessment.total_score or 0],
        ["Total Activities with Difficulty", assessment.total_difficulties or 0],
        [],
        ["Activity", "Difficulty Level", "Needs Help", "Notes"],
    ]
    for name in names:
        activity = getattr(assessment, name)
        if activity is None:
            rows.append([_label(name), "", "No", ""])
        else:
            rows.append([_label(name), activity.difficulty_level, _yes_no(activity.needs_help), activity.notes])
    return rows


def _falls_rows(falls) -> List[List[Any]]:
    rows: List[List[Any]] = [
        ["Falls Risk Assessment"],
        [],
        ["Has Fallen Past Year", _yes_no(falls.has_fallen_past_year)],
        ["Number of Falls", falls.number_of_falls],
        ["Overall Risk Level", _label(falls.overall_risk_level or "not_assessed")],
        ["Falls Efficacy Score", falls.falls_efficacy_score or falls.falls_efficacy.total_score or ""],
        [],
        ["Risk Factors"],
    ]
    for name in RISK_FACTOR_NAMES:
        rows.append([_label(name), _yes_no(getattr(falls.risk_factors, name))])
    return rows


def _mobility_rows(mobility) -> List[List[Any]]:
    rows: List[List[Any]] = [["Mobility Assessment"], [], ["Mobility Aids"]]
    for label, usage in (
        ("Uses Wheelchair", mobility.uses_wheelchair),
        ("Uses Walker", mobility.uses_walker),
        ("Uses Cane", mobility.uses_cane),
    ):
        in_use = usage is not None and usage.frequency > 0
        rows.append([
            label, _yes_no(in_use),
            "Indoor", _yes_no(usage.indoor_use if usage else False),
            "Outdoor", _yes_no(usage.outdoor_use if usage else False),
        ])
    other = mobility.uses_other_device
    rows.extend([
        ["Other Device", (other.device_type if other else None) or "None"],
        [],
        ["Balance and Gait"],
        ["Balance Issues", _yes_no(mobility.balance_issues), mobility.balance_notes or ""],
        ["Gait Issues", _yes_no(mobility.gait_issues), mobility.gait_notes or ""],
        [],
        ["Endurance"],
        ["Can Walk One Block", _yes_no(mobility.can_walk_one_block)],
        ["Can Climb Flight of Stairs", _yes_no(mobility.can_climb_flight_of_stairs)],
        ["Rest Frequency", _label(mobility.rest_frequency or "not_assessed")],
    ])
    return rows


def build_workbook(
    output: AIAssessmentOutput,
    client_info: Optional[SelfReportedInfo] = None,
    report_date: Optional[date] = None,
) -> Workbook:
    """
    Build the assessment workbook.

    Args:
        output: Enriched assessment output
        client_info: Client name/address for the Summary sheet
        report_date: Date printed on the Summary sheet (defaults to today)

    Returns:
        openpyxl Workbook
    """
    client = client_info or SelfReportedInfo()
    report_date = report_date or date.today()

    wb = Workbook()
    wb.remove(wb.active)

    summary = _add_sections_sheet(wb, "Summary", _summary_rows(output, client, report_date))
    summary.column_dimensions["A"].width = 32
    summary.column_dimensions["B"].width = 40

    _add_table(
        wb,
        "Hazards",
        ["ID", "Location", "Specific Area", "Category", "Description", "Severity", "Confidence", "Affects ADLs"],
        (
            [
                h.id,
                h.location.room,
                h.location.specific_area or "",
                h.category,
                h.description,
                h.severity,
                f"{h.confidence:g}%",
                ", ".join(h.affects_adls),
            ]
            for h in output.detected_hazards
        ),
    )

    _add_table(
        wb,
        "Recommendations",
        [
            "ID", "Room", "Category", "Subcategory", "Description", "Priority", "Modification Type",
            "Materials Cost", "Labor Cost", "Total Cost", "Specifications", "Requires Permit",
            "Requires Contractor",
        ],
        (
            [
                r.id,
                r.room,
                r.category,
                r.subcategory,
                r.description,
                priority_label(r.priority).title(),
                r.modification_type,
                r.estimated_cost.materials,
                r.estimated_cost.labor,
                r.estimated_cost.total,
                r.specifications or "",
                _yes_no(r.requires_permit),
                _yes_no(r.requires_licensed_contractor),
            ]
            for r in output.recommendations
        ),
    )

    _add_table(
        wb,
        "Equipment",
        [
            "ID", "Name", "Category", "Description", "Priority", "Estimated Cost", "Reduces Risk",
            "Requires Installation", "Requires Training",
        ],
        (
            [
                e.id,
                e.name,
                e.category,
                e.description,
                priority_label(e.priority).title(),
                e.estimated_cost,
                e.reduces_risk,
                _yes_no(e.requires_installation),
                _yes_no(e.requires_training),
            ]
            for e in output.equipment_suggestions
        ),
    )

    if output.adl is not None:
        _add_sections_sheet(wb, "ADL Assessment", _activity_rows("ADL Assessment", output.adl, ADL_ACTIVITIES))
    if output.iadl is not None:
        _add_sections_sheet(wb, "IADL Assessment", _activity_rows("IADL Assessment", output.iadl, IADL_ACTIVITIES))
    if output.falls_risk is not None:
        _add_sections_sheet(wb, "Falls Risk", _falls_rows(output.falls_risk))
    if output.mobility is not None:
        _add_sections_sheet(wb, "Mobility", _mobility_rows(output.mobility))

    return wb


def export_workbook_bytes(
    output: AIAssessmentOutput,
    client_info: Optional[SelfReportedInfo] = None,
    report_date: Optional[date] = None,
) -> bytes:
    """
    Build the workbook and serialize it to .xlsx bytes.

    Raises:
        RenderError: If the workbook cannot be built or saved
    """
    try:
        wb = build_workbook(output, client_info, report_date)
        buffer = BytesIO()
        wb.save(buffer)
    except Exception as e:
        logger.error("xlsx_export_error", error=str(e), error_type=type(e).__name__)
        raise RenderError(f"Failed to export spreadsheet: {e}", renderer="xlsx") from e

    data = buffer.getvalue()
    logger.info("xlsx_exported", sheets=wb.sheetnames, file_size_kb=round(len(data) / 1024, 2))
    return data


def build_workbook_filename(client_name: Optional[str], report_date: Optional[date] = None) -> str:
    """HomeAssessment_{name[:20]}_{YYYY-MM-DD}.xlsx"""
    report_date = report_date or date.today()
    return f"HomeAssessment_{sanitize_filename_part(client_name, 20)}_{report_date.isoformat()}.xlsx"
