"""Unit tests for the email summary."""

from datetime import date
from urllib.parse import unquote

from models.assessment_input import SelfReportedInfo
from models.assessment_output import AIAssessmentOutput
from services.email_summary import EmailSummary, build_email_summary, build_mailto_link


class TestBuildEmailSummary:

    def test_subject(self, enriched_output):
        summary = build_email_summary(enriched_output, SelfReportedInfo(name="Mary Johnson"))

        assert summary.subject == "Home Safety Assessment Report - Mary Johnson"

    def test_subject_without_client(self):
        assert build_email_summary(AIAssessmentOutput()).subject == "Home Safety Assessment Report - Client"

    def test_body(self, enriched_output):
        body = build_email_summary(
            enriched_output,
            SelfReportedInfo(name="Mary Johnson", address="12 Elm St"),
            date(2025, 3, 4),
        ).body

        assert "Client: Mary Johnson" in body
        assert "Date: 2025-03-04" in body
        assert "Overall Safety Score: 58/100" in body
        assert "Estimated Cost: $3,200 - $4,800" in body
        assert "1. Install grab bars at the tub" in body
        assert "Primary Risk Areas: bathroom, stairs" in body
        assert "Independence Level: fully independent" in body
        assert "Has Fallen Past Year: Yes" in body
        assert "Mobility Aids: Cane" in body
        assert body.endswith("Download the full PDF report for complete details.")

    def test_sections_omitted_without_client_data(self):
        body = build_email_summary(AIAssessmentOutput()).body

        assert "ADL ASSESSMENT" not in body
        assert "FALLS RISK ASSESSMENT" not in body
        assert "MOBILITY ASSESSMENT" not in body


def test_mailto_link_encodes_subject_and_body():
    summary = EmailSummary(subject="Report - Mary & Co", body="Line 1\nLine 2")

    link = build_mailto_link(summary, "case.worker@example.org")

    assert link.startswith("mailto:case.worker@example.org?subject=")
    assert "&body=" in link
    assert "\n" not in link
    subject = link.split("?subject=")[1].split("&body=")[0]
    assert unquote(subject) == "Report - Mary & Co"
