"""
Cohort Profitability

Contribution margin for a customer segment, the margin each customer
brings in and a profitability index that nets out acquisition cost
against ongoing servicing cost.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List

from bizcase.calculations.numeric import round_currency
from bizcase.calculations.validation import validate_cohort

logger = logging.getLogger(__name__)

CONTRIBUTION_MARGIN_BENCHMARKS = {"optimal": 40, "acceptable": 20, "critical": 0}
PROFITABILITY_INDEX_BENCHMARKS = {"optimal": 2.0, "acceptable": 1.0, "critical": 0}


@dataclass(frozen=True)
class CohortInput:
    cohort_name: str
    cohort_revenue: float
    direct_costs: float
    customer_count: int
    acquisition_cost: float  # per customer
    servicing_cost_per_customer: float


def calculate_cohort_metrics(cohort: CohortInput) -> Dict:
    """
    Calculate contribution margin (%), margin per customer and the
    profitability index (margin per customer - acquisition) / servicing.

    Raises:
        InputValidationError: If the name is blank or any amount is invalid
    """
    validate_cohort(cohort)

    total_margin = cohort.cohort_revenue - cohort.direct_costs
    contribution_margin = round_currency(total_margin / cohort.cohort_revenue * 100)
    margin_per_customer = round_currency(total_margin / cohort.customer_count)
    # Index is taken from the rounded per-customer margin
    profitability_index = round_currency(
        (margin_per_customer - cohort.acquisition_cost) / cohort.servicing_cost_per_customer
    )

    logger.debug(
        f"Cohort {cohort.cohort_name}: margin={contribution_margin}% "
        f"per_customer={margin_per_customer} index={profitability_index}"
    )

    return {
        "cohort_name": cohort.cohort_name,
        "contribution_margin": contribution_margin,
        "margin_per_customer": margin_per_customer,
        "profitability_index": profitability_index,
        "is_losing_money": contribution_margin < 0,
    }


def cohort_recommendations(contribution_margin: float, profitability_index: float) -> List[str]:
    recommendations = []

    if contribution_margin < CONTRIBUTION_MARGIN_BENCHMARKS["critical"]:
        recommendations.append(
            "CRITICAL: This cohort is losing money. Consider discontinuing service "
            "or restructuring pricing."
        )
        recommendations.append(
            "Analyze which cost components are driving losses and look for cost reductions."
        )
    elif contribution_margin < CONTRIBUTION_MARGIN_BENCHMARKS["acceptable"]:
        recommendations.append(
            "Contribution margin is below the 20% average. Review pricing for this segment."
        )
        recommendations.append("Consider upselling higher-margin products to this cohort.")
    elif contribution_margin >= CONTRIBUTION_MARGIN_BENCHMARKS["optimal"]:
        recommendations.append(
            "High-value cohort. Consider investing in expansion and acquisition for this segment."
        )
        recommendations.append(
            "Analyze what makes this cohort profitable and replicate it in other segments."
        )

    if profitability_index < PROFITABILITY_INDEX_BENCHMARKS["critical"]:
        recommendations.append(
            "Acquisition costs exceed lifetime contribution. Reduce CAC or increase customer value."
        )
    elif profitability_index < PROFITABILITY_INDEX_BENCHMARKS["acceptable"]:
        recommendations.append(
            "Marginal profitability. Focus on retention to extend customer lifetime value."
        )

    return recommendations
