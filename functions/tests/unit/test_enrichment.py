"""Unit tests for response validation and enrichment."""

import pytest

from models.assessment_output import AIAssessmentOutput
from services.enrichment import (
    apply_budget_notice,
    budget_overrun_message,
    enrich,
    is_budget_notice,
)
from services.request_normalizer import build_assessment_input_from_request
from tests.fixtures.mock_assessment_data import get_minimal_request


@pytest.fixture
def minimal_input():
    return build_assessment_input_from_request(get_minimal_request())


def _budget_notices(output: AIAssessmentOutput):
    return [item for item in output.limitations if is_budget_notice(item)]


class TestDefaults:
    """Absent fields get defaults."""

    def test_empty_object(self, minimal_input):
        output = enrich({}, minimal_input)

        assert output.detected_hazards == []
        assert output.recommendations == []
        assert output.equipment_suggestions == []
        assert output.limitations == []
        assert output.confidence.overall == 50
        assert output.confidence.image_quality == 50
        assert output.summary.overall_safety_score == 50
        assert output.summary.critical_issues_count == 0
        assert output.summary.estimated_total_cost.low == 0
        assert output.summary.estimated_total_cost.high == 0
        assert output.requires_professional_assessment is False

    def test_non_object_response(self, minimal_input):
        output = enrich(["not", "an", "object"], minimal_input)

        assert output.detected_hazards == []

    def test_fallback_ids_in_original_order(self, minimal_input):
        raw = {
            "detectedHazards": [{"description": "a"}, {"id": "custom", "description": "b"}, {"description": "c"}],
            "recommendations": [{"description": "x"}, {"description": "y"}],
            "equipmentSuggestions": [{"name": "Reacher"}],
        }

        output = enrich(raw, minimal_input)

        assert [h.id for h in output.detected_hazards] == ["hazard-1", "custom", "hazard-3"]
        assert [r.id for r in output.recommendations] == ["rec-1", "rec-2"]
        assert [e.id for e in output.equipment_suggestions] == ["equip-1"]

    def test_malformed_entries_are_coerced(self, minimal_input):
        raw = {
            "detectedHazards": [
                {"category": "alien_invasion", "severity": 9, "confidence": 140},
                "not an object",
            ],
            "recommendations": [
                {"category": "teleporter", "priority": "0", "estimatedCost": "$1,250"},
            ],
        }

        output = enrich(raw, minimal_input)

        assert len(output.detected_hazards) == 1
        hazard = output.detected_hazards[0]
        assert hazard.category == "other"
        assert hazard.severity == 4
        assert hazard.confidence == 100

        rec = output.recommendations[0]
        assert rec.category == "miscellaneous_repairs"
        assert rec.priority == 1
        assert rec.estimated_cost.total == 1250

    def test_cost_total_from_parts(self, minimal_input):
        raw = {"recommendations": [{"estimatedCost": {"materials": 100, "labor": 50}}]}

        output = enrich(raw, minimal_input)

        assert output.recommendations[0].estimated_cost.total == 150

    def test_number_too_large_for_float(self, minimal_input):
        raw = {
            "recommendations": [{"estimatedCost": {"total": 10**400}, "priority": 10**400}],
            "summary": {"overallSafetyScore": 10**400},
        }

        output = enrich(raw, minimal_input)

        assert output.recommendations[0].estimated_cost.total == 0
        assert output.recommendations[0].priority == 1
        assert output.summary.overall_safety_score == 50


class TestSummary:
    """Derived summary figures."""

    def test_cost_range_derived_when_low_is_zero(self, enriched_output):
        cost = enriched_output.summary.estimated_total_cost

        assert cost.low == 3200
        assert cost.high == 4800

    def test_cost_range_kept_when_model_supplies_it(self, sample_raw_output, sample_assessment_input):
        sample_raw_output["summary"]["estimatedTotalCost"] = {"low": 3500, "high": 4500}

        output = enrich(sample_raw_output, sample_assessment_input)

        assert output.summary.estimated_total_cost.low == 3500
        assert output.summary.estimated_total_cost.high == 4500

    def test_zero_hazards_gives_zero_critical(self, minimal_input):
        output = enrich({"recommendations": []}, minimal_input)

        assert output.summary.critical_issues_count == 0
        assert _budget_notices(output) == []

    def test_critical_count_from_severity(self, sample_raw_output, sample_assessment_input):
        sample_raw_output["summary"]["criticalIssuesCount"] = 0
        sample_raw_output["detectedHazards"].append({"severity": 4})

        output = enrich(sample_raw_output, sample_assessment_input)

        assert output.summary.critical_issues_count == 2

    def test_model_critical_count_is_kept(self, enriched_output):
        assert enriched_output.summary.critical_issues_count == 1


class TestClientDataMerge:

    def test_functional_sections_come_from_submission(self, enriched_output, sample_assessment_input):
        full = sample_assessment_input.full_assessment

        assert enriched_output.adl == full.adl_assessment
        assert enriched_output.iadl == full.iadl_assessment
        assert enriched_output.mobility == full.mobility_assessment
        assert enriched_output.falls_risk == full.falls_risk_assessment

    def test_model_cannot_override_client_data(self, sample_raw_output, sample_assessment_input):
        sample_raw_output["adl"] = {"totalScore": 24}

        output = enrich(sample_raw_output, sample_assessment_input)

        assert output.adl.total_score == 4

    def test_no_submission_data(self, minimal_input):
        output = enrich({"adl": {"totalScore": 3}}, minimal_input)

        assert output.adl is None
        assert output.falls_risk is None


class TestBudgetNotice:
    """Budget overrun notice in limitations."""

    def test_within_budget_has_no_notice(self, enriched_output):
        assert enriched_output.total_recommendation_cost() == 4000
        assert _budget_notices(enriched_output) == []
        assert enriched_output.limitations == ["Night-time lighting could not be assessed"]

    def test_over_budget_adds_exactly_one_notice(self, over_budget_output):
        assert _budget_notices(over_budget_output) == [
            "Total recommended modifications ($6,200) exceed program budget cap ($5,000). "
            "Prioritization required."
        ]

    def test_stale_notice_is_replaced(self, over_budget_raw_output, sample_assessment_input):
        over_budget_raw_output["limitations"] = [
            "Night-time lighting could not be assessed",
            budget_overrun_message(9999, 5000),
        ]

        output = enrich(over_budget_raw_output, sample_assessment_input)

        assert len(_budget_notices(output)) == 1
        assert "$6,200" in _budget_notices(output)[0]
        assert output.limitations[0] == "Night-time lighting could not be assessed"

    def test_model_written_cost_remark_is_kept(self, over_budget_raw_output, sample_assessment_input):
        remark = "Total recommended modifications assume standard fixtures"
        over_budget_raw_output["limitations"] = [remark]

        output = enrich(over_budget_raw_output, sample_assessment_input)

        assert output.limitations[0] == remark
        assert len(_budget_notices(output)) == 1

    def test_notice_pattern(self):
        assert is_budget_notice(budget_overrun_message(6200, 5000))
        assert is_budget_notice(budget_overrun_message(5000.5, 5000))
        assert not is_budget_notice("Total recommended modifications ($6,200) may change after inspection")

    def test_exactly_at_cap_is_within_budget(self):
        assert apply_budget_notice([], 5000, 5000) == []

    def test_cents_are_shown(self):
        assert "($5,000.50)" in budget_overrun_message(5000.5, 5000)


class TestIdempotence:

    def test_enrich_twice_is_stable(self, over_budget_output, sample_assessment_input):
        again = enrich(over_budget_output, sample_assessment_input)

        assert again.model_dump() == over_budget_output.model_dump()

    def test_enrich_json_round_trip_is_stable(self, enriched_output, sample_assessment_input):
        again = enrich(enriched_output.to_json_dict(), sample_assessment_input)

        assert again.to_json_dict() == enriched_output.to_json_dict()
