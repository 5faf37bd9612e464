"""Unit tests for assessment pipeline orchestration.

The chat model is mocked and PDF rendering is replaced by a stub renderer,
so these tests need neither network access nor WeasyPrint.
"""

import base64
import json
import re
from datetime import date

import pytest
from unittest.mock import AsyncMock, MagicMock

from config.errors import ConfigurationError, ErrorCode, GatewayError, ValidationError
from models.assessment_output import AIAssessmentOutput
from services.assessment_processor import (
    AssessmentProcessor,
    build_report_request,
    generate_assessment_report,
    new_assessment_id,
    process_assessment_request,
    run_complete_assessment,
)
from services.enrichment import is_budget_notice
from tests.fixtures.mock_assessment_data import INLINE_PNG, get_minimal_request


class TestAssessmentProcessor:
    """Tests for AssessmentProcessor.analyze."""

    @pytest.mark.asyncio
    async def test_analyze(self, mock_gateway, sample_assessment_input):
        processor = AssessmentProcessor(mock_gateway)

        output = await processor.analyze(sample_assessment_input)

        assert isinstance(output, AIAssessmentOutput)
        assert len(output.detected_hazards) == 2
        assert output.summary.estimated_total_cost.low == 3200
        assert output.adl.total_score == 4

    @pytest.mark.asyncio
    async def test_analyze_sends_prompt_and_images(self, mock_gateway, sample_assessment_input):
        await AssessmentProcessor(mock_gateway).analyze(sample_assessment_input)

        messages = mock_gateway._client.ainvoke.call_args.args[0]
        parts = messages[1].content
        assert "Image 1 (ID: img-1)" in parts[0]["text"]
        assert sum(1 for part in parts if part["type"] == "image_url") == 2

    @pytest.mark.asyncio
    async def test_gateway_failure_propagates(self, mock_gateway, sample_assessment_input):
        mock_gateway._client.ainvoke.side_effect = Exception("upstream unavailable")

        with pytest.raises(GatewayError):
            await AssessmentProcessor(mock_gateway).analyze(sample_assessment_input)


class TestProcessAssessmentRequest:

    @pytest.mark.asyncio
    async def test_success(self, mock_gateway, sample_wizard_request):
        output = await process_assessment_request(sample_wizard_request, gateway=mock_gateway)

        assert output.recommendations[0].id == "rec-1"
        assert output.falls_risk.overall_risk_level == "high"

    @pytest.mark.asyncio
    async def test_no_images_rejected_before_gateway(self, mock_gateway):
        with pytest.raises(ValidationError) as exc_info:
            await process_assessment_request({"images": []}, gateway=mock_gateway)

        assert exc_info.value.message == "At least one image is required"
        assert exc_info.value.status == 400
        mock_gateway._client.ainvoke.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_api_key(self, monkeypatch, mock_settings):
        from config.secrets import clear_secret_cache

        monkeypatch.setattr(mock_settings, "_openai_api_key", None)
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        clear_secret_cache()

        with pytest.raises(ConfigurationError):
            await process_assessment_request(get_minimal_request())

        clear_secret_cache()


class TestGenerateAssessmentReport:
    """Report endpoint flow with a stub renderer."""

    def test_build_report_request_defaults(self):
        request = build_report_request({})

        assert request.client_name == "Client Name"
        assert request.client_address == "Address Not Provided"
        assert request.assessor_name == "AI-Assisted Assessment"
        assert request.organization_name == "HOMEase AI"
        assert request.program_type == "OAHMP"
        assert request.assessment_date == date.today()

    def test_build_report_request_values(self):
        request = build_report_request({
            "clientInfo": {"name": "Mary Johnson", "address": "12 Elm St"},
            "assessmentDate": "2025-03-04T15:30:00Z",
            "assessorName": "Jane Smith, OTR/L",
            "programType": "CIL",
            "caseNumber": "C-1",
            "budgetCap": 7500,
        })

        assert request.client_name == "Mary Johnson"
        assert request.assessment_date == date(2025, 3, 4)
        assert request.program_type == "CIL"
        assert request.budget_cap == 7500

    def test_bad_date(self):
        with pytest.raises(ValidationError):
            build_report_request({"assessmentDate": "yesterday"})

    def test_report(self, enriched_output, fake_renderer):
        body = {
            "assessment": enriched_output.to_json_dict(),
            "clientInfo": {"name": "Mary O'Neil"},
            "assessmentDate": "2025-03-04",
        }

        report = generate_assessment_report(body, renderer=fake_renderer)

        assert report.content == b"%PDF-1.7 fake report"
        assert report.mime_type == "application/pdf"
        assert report.filename == "HomeAssessment_Mary_O_Neil_2025-03-04.pdf"
        assert base64.b64decode(report.to_base64()) == report.content

        output, request = fake_renderer.call_args.args
        assert output == enriched_output
        assert request.client_name == "Mary O'Neil"

    def test_filename_without_client_name(self, enriched_output, fake_renderer):
        body = {"assessment": enriched_output.to_json_dict(), "assessmentDate": "2025-03-04"}

        report = generate_assessment_report(body, renderer=fake_renderer)

        assert report.filename == "HomeAssessment_Assessment_2025-03-04.pdf"
        assert fake_renderer.call_args.args[1].client_name == "Client Name"

    def test_missing_assessment(self, fake_renderer):
        with pytest.raises(ValidationError) as exc_info:
            generate_assessment_report({"clientInfo": {"name": "x"}}, renderer=fake_renderer)

        assert exc_info.value.message == "Assessment data is required"
        fake_renderer.assert_not_called()


class TestRunCompleteAssessment:
    """Combined analysis + report flow."""

    @pytest.mark.asyncio
    async def test_complete(self, mock_gateway, fake_renderer, sample_complete_request):
        result = await run_complete_assessment(sample_complete_request, gateway=mock_gateway, renderer=fake_renderer)

        assert set(result) == {"assessment", "pdf", "metadata"}
        assert result["assessment"]["summary"]["overallSafetyScore"] == 58

        pdf = result["pdf"]
        assert base64.b64decode(pdf["base64"]) == b"%PDF-1.7 fake report"
        assert pdf["filename"].startswith("HomeAssessment_Mary_Johnson_")

        metadata = result["metadata"]
        assert re.fullmatch(r"assess-\d+-[0-9a-f]{6}", metadata["assessmentId"])
        assert metadata["imageCount"] == 2
        assert metadata["hazardsFound"] == 2
        assert metadata["recommendationsCount"] == 3
        assert metadata["totalCost"] == 4000
        assert metadata["withinBudget"] is True
        assert metadata["estimatedCost"] == {"low": 3200, "high": 4800}
        assert metadata["processingTimeMs"] >= 0

    @pytest.mark.asyncio
    async def test_report_options_reach_renderer(self, mock_gateway, fake_renderer, sample_complete_request):
        await run_complete_assessment(sample_complete_request, gateway=mock_gateway, renderer=fake_renderer)

        request = fake_renderer.call_args.args[1]
        assert request.client_name == "Mary Johnson"
        assert request.assessor_name == "Jane Smith, OTR/L"
        assert request.organization_name == "Dayton Area Agency on Aging"
        assert request.case_number == "OAHMP-2025-0042"
        assert request.budget_cap == 5000

    @pytest.mark.asyncio
    async def test_client_maps_to_self_reported_info(self, mock_gateway, fake_renderer, sample_complete_request):
        await run_complete_assessment(sample_complete_request, gateway=mock_gateway, renderer=fake_renderer)

        prompt = mock_gateway._client.ainvoke.call_args.args[0][1].content[0]["text"]
        assert "- Age: 74 years old" in prompt
        assert "- Medical conditions: arthritis" in prompt
        assert "- Property type: single_family" in prompt

    @pytest.mark.asyncio
    async def test_pdf_skipped(self, mock_gateway, fake_renderer, sample_complete_request):
        sample_complete_request["report"]["generatePdf"] = False

        result = await run_complete_assessment(sample_complete_request, gateway=mock_gateway, renderer=fake_renderer)

        assert result["pdf"] is None
        fake_renderer.assert_not_called()

    @pytest.mark.asyncio
    async def test_over_budget(self, mock_gateway, fake_renderer, sample_complete_request, over_budget_raw_output):
        mock_gateway._client.ainvoke.return_value.content = json.dumps(over_budget_raw_output)

        result = await run_complete_assessment(sample_complete_request, gateway=mock_gateway, renderer=fake_renderer)

        assert result["metadata"]["totalCost"] == 6200
        assert result["metadata"]["withinBudget"] is False
        notices = [l for l in result["assessment"]["limitations"] if l.startswith("Total recommended")]
        assert len(notices) == 1

    @pytest.mark.asyncio
    async def test_client_name_required(self, mock_gateway, sample_complete_request):
        del sample_complete_request["client"]["name"]

        with pytest.raises(ValidationError) as exc_info:
            await run_complete_assessment(sample_complete_request, gateway=mock_gateway)

        assert exc_info.value.message == "Client name is required"
        assert exc_info.value.code == ErrorCode.MISSING_FIELD

    @pytest.mark.asyncio
    async def test_renderer_failure_propagates(self, sample_complete_request):
        from config.errors import RenderError

        gateway = AsyncMock()
        gateway.generate.return_value = {}
        renderer = MagicMock(side_effect=RenderError("boom", renderer="pdf"))

        with pytest.raises(RenderError):
            await run_complete_assessment(sample_complete_request, gateway=gateway, renderer=renderer)


def test_new_assessment_id_is_unique():
    assert new_assessment_id() != new_assessment_id()


class TestDefaultBudgetCap:
    """One image, OAHMP, no budget cap given: the program default applies."""

    @staticmethod
    def _submission():
        return {
            "images": [{"id": "img-1", "url": INLINE_PNG, "room": "bathroom"}],
            "assessmentContext": {"programType": "OAHMP"},
        }

    @pytest.mark.asyncio
    async def test_within_default_budget(self, mock_gateway):
        output = await process_assessment_request(self._submission(), gateway=mock_gateway)

        prompt = mock_gateway._client.ainvoke.call_args.args[0][1].content[0]["text"]
        assert "- Budget cap: $5,000" in prompt
        assert output.total_recommendation_cost() == 4000
        assert not any(is_budget_notice(item) for item in output.limitations)

    @pytest.mark.asyncio
    async def test_default_comes_from_settings(self, mock_gateway, mock_settings, monkeypatch):
        monkeypatch.setattr(mock_settings, "default_budget_cap", 3500.0)

        output = await process_assessment_request(self._submission(), gateway=mock_gateway)

        prompt = mock_gateway._client.ainvoke.call_args.args[0][1].content[0]["text"]
        assert "- Budget cap: $3,500" in prompt
        assert [item for item in output.limitations if is_budget_notice(item)] == [
            "Total recommended modifications ($4,000) exceed program budget cap ($3,500). "
            "Prioritization required."
        ]

    @pytest.mark.asyncio
    async def test_complete_without_budget_cap(self, mock_gateway, fake_renderer):
        body = {
            "images": self._submission()["images"],
            "client": {"name": "Mary Johnson"},
            "config": {"programType": "OAHMP"},
        }

        result = await run_complete_assessment(body, gateway=mock_gateway, renderer=fake_renderer)

        metadata = result["metadata"]
        assert metadata["imageCount"] == 1
        assert metadata["totalCost"] == 4000
        assert metadata["withinBudget"] is True
        assert fake_renderer.call_args.args[1].budget_cap == 5000
        assert not any(is_budget_notice(item) for item in result["assessment"]["limitations"])
