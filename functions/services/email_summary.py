"""Plain-text email summary of an assessment and its mailto: link."""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional
from urllib.parse import quote

from models.assessment_input import SelfReportedInfo
from models.assessment_output import AIAssessmentOutput
from utils.formatting import format_currency


@dataclass
class EmailSummary:
    subject: str
    body: str


def _heading(title: str) -> List[str]:
    return ["", title, "-" * len(title)]


def _level(value: Optional[str]) -> str:
    return (value or "Not Assessed").replace("_", " ")


def _yes_no(value) -> str:
    return "Yes" if value else "No"


def build_email_summary(
    output: AIAssessmentOutput,
    client_info: Optional[SelfReportedInfo] = None,
    report_date: Optional[date] = None,
) -> EmailSummary:
    """Summary, top priorities and functional assessment highlights as plain text."""
    client = client_info or SelfReportedInfo()
    report_date = report_date or date.today()
    summary = output.summary
    cost = summary.estimated_total_cost

    lines = [
        "Home Safety Assessment Report",
        "",
        f"Client: {client.name or 'Not Provided'}",
        f"Address: {client.address or 'Not Provided'}",
        f"Date: {report_date.isoformat()}",
        *_heading("SUMMARY"),
        f"Overall Safety Score: {summary.overall_safety_score:g}/100",
        f"Critical Issues: {summary.critical_issues_count}",
        f"Total Recommendations: {len(output.recommendations)}",
        f"Estimated Cost: {format_currency(cost.low)} - {format_currency(cost.high)}",
        "",
        "Top 3 Priorities:",
        *[f"{i}. {rec}" for i, rec in enumerate(summary.top_three_recommendations, start=1)],
        "",
        f"Primary Risk Areas: {', '.join(summary.primary_risk_areas)}",
    ]

    for title, assessment in (("ADL ASSESSMENT", output.adl), ("IADL ASSESSMENT", output.iadl)):
        if assessment is None:
            continue
        lines.extend([
            *_heading(title),
            f"Independence Level: {_level(assessment.independence_level)}",
            f"Total Score: {assessment.total_score or 0}",
            f"Activities with Difficulty: {assessment.total_difficulties or 0}",
        ])

    if output.falls_risk is not None:
        lines.extend([
            *_heading("FALLS RISK ASSESSMENT"),
            f"Has Fallen Past Year: {_yes_no(output.falls_risk.has_fallen_past_year)}",
            f"Number of Falls: {output.falls_risk.number_of_falls}",
        ])

    if output.mobility is not None:
        aids = [aid.title() for aid in output.mobility.mobility_aids()]
        lines.extend([
            *_heading("MOBILITY ASSESSMENT"),
            f"Mobility Aids: {', '.join(aids) if aids else 'None'}",
            f"Balance Issues: {_yes_no(output.mobility.balance_issues)}",
            f"Gait Issues: {_yes_no(output.mobility.gait_issues)}",
        ])

    lines.extend([
        "",
        "---",
        "This is an automated summary. Download the full PDF report for complete details.",
    ])

    return EmailSummary(
        subject=f"Home Safety Assessment Report - {client.name or 'Client'}",
        body="\n".join(lines),
    )


def build_mailto_link(summary: EmailSummary, recipient: str = "") -> str:
    """mailto: URL with the subject and body percent-encoded."""
    return f"mailto:{recipient}?subject={quote(summary.subject)}&body={quote(summary.body)}"
