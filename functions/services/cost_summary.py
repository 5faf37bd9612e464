"""Budget analysis for enriched assessments.

Groups recommendation costs by priority, compares them with the program
budget cap and picks the set of modifications that fits the budget.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from config.settings import settings
from models.assessment_output import AIAssessmentOutput, RecommendedModification

PRIORITY_LABELS = {
    4: "URGENT",
    3: "HIGH",
    2: "MEDIUM",
    1: "LOW",
}


@dataclass
class PriorityBucket:
    """Recommendations sharing one priority level."""

    priority: int
    label: str
    count: int
    cost: float
    percent: float  # share of total cost, 0-100


@dataclass
class CostSummary:
    """Totals shown on the cost summary page and in exports."""

    total_cost: float
    budget_cap: float
    within_budget: bool
    over_budget_amount: float
    equipment_total: float
    by_priority: List[PriorityBucket] = field(default_factory=list)
    funded: List[RecommendedModification] = field(default_factory=list)

    @property
    def funded_total(self) -> float:
        return sum(rec.estimated_cost.total for rec in self.funded)


def priority_label(priority: int) -> str:
    """URGENT / HIGH / MEDIUM / LOW for priorities 4..1."""
    return PRIORITY_LABELS.get(priority, "LOW")


def safety_score_label(score: float) -> str:
    if score >= 80:
        return "Good"
    if score >= 60:
        return "Fair"
    if score >= 40:
        return "Needs Attention"
    return "Critical"


def prioritize_modifications(
    modifications: Sequence[RecommendedModification],
    budget: float,
) -> List[RecommendedModification]:
    """Pick modifications that fit the budget.

    Highest priority first, cheapest first within a priority; each one is
    kept while the running total stays within budget. A modification that
    does not fit is skipped and cheaper ones after it may still be kept.
    """
    ordered = sorted(modifications, key=lambda rec: (-rec.priority, rec.estimated_cost.total))

    selected: List[RecommendedModification] = []
    running_total = 0.0
    for rec in ordered:
        if running_total + rec.estimated_cost.total <= budget:
            running_total += rec.estimated_cost.total
            selected.append(rec)
    return selected


def summarize_costs(output: AIAssessmentOutput, budget_cap: Optional[float] = None) -> CostSummary:
    """Cost totals, per-priority buckets and the budget-constrained selection."""
    cap = budget_cap or settings.default_budget_cap
    total = output.total_recommendation_cost()

    buckets = []
    for priority in sorted(PRIORITY_LABELS, reverse=True):
        recs = [rec for rec in output.recommendations if rec.priority == priority]
        cost = sum(rec.estimated_cost.total for rec in recs)
        buckets.append(PriorityBucket(
            priority=priority,
            label=priority_label(priority),
            count=len(recs),
            cost=cost,
            percent=(cost / total * 100) if total > 0 else 0,
        ))

    return CostSummary(
        total_cost=total,
        budget_cap=cap,
        within_budget=total <= cap,
        over_budget_amount=max(0, total - cap),
        equipment_total=output.total_equipment_cost(),
        by_priority=buckets,
        funded=prioritize_modifications(output.recommendations, cap),
    )
