"""Response validation and enrichment.

The output models coerce field types and ranges on their own (see
models.assessment_output). enrich() fills in what they cannot know,
applying in order:

1. empty collections for absent lists, 50 for absent confidence scores
2. sequential fallback ids (hazard-N, rec-N, equip-N) in original order
3. summary.criticalIssuesCount from severity-4 hazards when the model gave 0
4. summary.estimatedTotalCost as 80% / 120% of the recommendation total
   when the model's low estimate is 0
5. the client's own ADL / IADL / mobility / falls-risk data merged in
6. a single, current budget overrun notice in limitations

Running enrich on its own output changes nothing.
"""

import re
from typing import Any, Dict, List, Union

import structlog

from config.settings import settings
from models.assessment_input import AssessmentInput
from models.assessment_output import AIAssessmentOutput, AssessmentSummary, CostRange, DetectedHazard
from utils.formatting import format_currency, round_half_up

logger = structlog.get_logger(__name__)

CRITICAL_SEVERITY = 4
COST_RANGE_LOW_FACTOR = 0.8
COST_RANGE_HIGH_FACTOR = 1.2

_AMOUNT = r"\$[\d,]+(?:\.\d{2})?"
BUDGET_NOTICE_PATTERN = re.compile(
    rf"^Total recommended modifications \({_AMOUNT}\) exceed program "
    rf"budget cap \({_AMOUNT}\)\. Prioritization required\.$"
)


def _has_id(entry: Dict[str, Any]) -> bool:
    value = entry.get("id")
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, float)) or (isinstance(value, str) and value != "")


def _with_fallback_ids(entries: Any, prefix: str) -> List[Dict[str, Any]]:
    """Object entries in order, numbered ``{prefix}-N`` where the id is missing."""
    if not isinstance(entries, list):
        return []
    objects = [entry for entry in entries if isinstance(entry, dict)]
    return [
        entry if _has_id(entry) else {**entry, "id": f"{prefix}-{position}"}
        for position, entry in enumerate(objects, start=1)
    ]


def _summary(
    summary: AssessmentSummary,
    hazards: List[DetectedHazard],
    total_cost: float,
) -> AssessmentSummary:
    update: Dict[str, Any] = {}
    if not summary.critical_issues_count:
        update["critical_issues_count"] = sum(
            1 for hazard in hazards if hazard.severity >= CRITICAL_SEVERITY
        )
    if summary.estimated_total_cost.low == 0:
        update["estimated_total_cost"] = CostRange(
            low=round_half_up(total_cost * COST_RANGE_LOW_FACTOR),
            high=round_half_up(total_cost * COST_RANGE_HIGH_FACTOR),
        )
    return summary.model_copy(update=update)


# =============================================================================
# Budget notice
# =============================================================================


def budget_overrun_message(total_cost: float, budget_cap: float) -> str:
    return (
        f"Total recommended modifications ({format_currency(total_cost)}) exceed program "
        f"budget cap ({format_currency(budget_cap)}). Prioritization required."
    )


def is_budget_notice(item: str) -> bool:
    return bool(BUDGET_NOTICE_PATTERN.match(item))


def apply_budget_notice(limitations: List[str], total_cost: float, budget_cap: float) -> List[str]:
    """Drop any earlier overrun notice and add one with the current figures when over budget."""
    kept = [item for item in limitations if not is_budget_notice(item)]
    if total_cost > budget_cap:
        kept.append(budget_overrun_message(total_cost, budget_cap))
    return kept


# =============================================================================
# Public API
# =============================================================================


def enrich(
    raw: Union[Dict[str, Any], AIAssessmentOutput, Any],
    assessment_input: AssessmentInput,
) -> AIAssessmentOutput:
    """Fill defaults, derive summary figures and merge client data.

    Args:
        raw: Parsed model JSON (any shape) or an already enriched output.
        assessment_input: The request the output answers.

    Returns:
        A complete AIAssessmentOutput. Never raises for malformed content.
    """
    if isinstance(raw, AIAssessmentOutput):
        raw = raw.model_dump(mode="json", by_alias=True)
    if not isinstance(raw, dict):
        logger.warning("enrichment_non_object_response", received_type=type(raw).__name__)
        raw = {}

    full = assessment_input.full_assessment
    output = AIAssessmentOutput.model_validate({
        **raw,
        "detectedHazards": _with_fallback_ids(raw.get("detectedHazards"), "hazard"),
        "recommendations": _with_fallback_ids(raw.get("recommendations"), "rec"),
        "equipmentSuggestions": _with_fallback_ids(raw.get("equipmentSuggestions"), "equip"),
        "adl": full.adl_assessment if full else None,
        "iadl": full.iadl_assessment if full else None,
        "mobility": full.mobility_assessment if full else None,
        "fallsRisk": full.falls_risk_assessment if full else None,
    })

    total_cost = output.total_recommendation_cost()
    budget_cap = assessment_input.assessment_context.budget_cap or settings.default_budget_cap

    output = output.model_copy(update={
        "summary": _summary(output.summary, output.detected_hazards, total_cost),
        "limitations": apply_budget_notice(output.limitations, total_cost, budget_cap),
    })

    logger.info(
        "assessment_enriched",
        hazards=len(output.detected_hazards),
        recommendations=len(output.recommendations),
        equipment=len(output.equipment_suggestions),
        total_cost=total_cost,
        budget_cap=budget_cap,
        over_budget=total_cost > budget_cap,
    )
    return output
