"""
SaaS Metrics

Unit economics for a subscription business: customer lifetime value
against acquisition cost, CAC payback, net revenue retention and the
Rule of 40.
"""

import logging
from dataclasses import dataclass
from typing import Dict

from bizcase.calculations.numeric import round_currency, safe_divide
from bizcase.calculations.validation import validate_saas

logger = logging.getLogger(__name__)

SAAS_BENCHMARKS = {
    "ltv_cac_ratio": {"optimal": 5.0, "acceptable": 3.0, "industry": 3.5, "higher_is_better": True},
    "payback_months": {"optimal": 12, "acceptable": 18, "industry": 15, "higher_is_better": False},
    "nrr": {"optimal": 120, "acceptable": 100, "industry": 110, "higher_is_better": True},
    "rule_of_40": {"optimal": 50, "acceptable": 40, "industry": 40, "higher_is_better": True},
}


@dataclass(frozen=True)
class SaaSInput:
    """Monthly figures; rates and margins are percentages."""

    average_revenue_per_user: float
    churn_rate: float
    cac: float
    gross_margin: float
    starting_mrr: float
    expansion_mrr: float = 0.0
    churned_mrr: float = 0.0
    contracted_mrr: float = 0.0
    revenue_growth_rate: float = 0.0
    profit_margin: float = 0.0


def calculate_ltv(average_revenue_per_user: float, gross_margin: float, churn_rate: float) -> float:
    """(ARPU x gross margin) / churn; 0 when nobody churns."""
    return safe_divide(average_revenue_per_user * gross_margin / 100, churn_rate / 100, 0.0)


def calculate_nrr(
    starting_mrr: float, expansion_mrr: float, churned_mrr: float, contracted_mrr: float
) -> float:
    ending_mrr = starting_mrr + expansion_mrr - churned_mrr - contracted_mrr
    return safe_divide(ending_mrr, starting_mrr, 0.0) * 100


def classify_saas_metric(name: str, value: float) -> str:
    bands = SAAS_BENCHMARKS[name]
    if bands["higher_is_better"]:
        if value >= bands["optimal"]:
            return "optimal"
        if value >= bands["acceptable"]:
            return "acceptable"
        return "concerning"

    if value <= bands["optimal"]:
        return "optimal"
    if value <= bands["acceptable"]:
        return "acceptable"
    return "concerning"


def calculate_saas_metrics(saas: SaaSInput) -> Dict:
    """
    Calculate LTV, LTV/CAC, CAC payback, NRR and the Rule of 40.

    LTV is rounded before the LTV/CAC ratio is taken from it. A zero churn
    rate or zero gross margin yields 0 rather than an infinite value.

    Returns:
        Dict of metric values plus a ``status`` band for each benchmarked metric

    Raises:
        InputValidationError: If any input is invalid
    """
    validate_saas(saas)

    ltv = round_currency(
        calculate_ltv(saas.average_revenue_per_user, saas.gross_margin, saas.churn_rate)
    )
    ltv_cac_ratio = round_currency(ltv / saas.cac)
    monthly_gross_profit = saas.average_revenue_per_user * saas.gross_margin / 100
    payback_months = round_currency(safe_divide(saas.cac, monthly_gross_profit, 0.0))
    nrr = round_currency(
        calculate_nrr(saas.starting_mrr, saas.expansion_mrr, saas.churned_mrr, saas.contracted_mrr)
    )
    rule_of_40 = round_currency(saas.revenue_growth_rate + saas.profit_margin)

    logger.debug(
        f"SaaS metrics: ltv={ltv} ltv_cac={ltv_cac_ratio} payback={payback_months} "
        f"nrr={nrr} rule_of_40={rule_of_40}"
    )

    return {
        "ltv": ltv,
        "cac": round_currency(saas.cac),
        "ltv_cac_ratio": ltv_cac_ratio,
        "payback_months": payback_months,
        "nrr": nrr,
        "rule_of_40": rule_of_40,
        "status": {
            "ltv_cac_ratio": classify_saas_metric("ltv_cac_ratio", ltv_cac_ratio),
            "payback_months": classify_saas_metric("payback_months", payback_months),
            "nrr": classify_saas_metric("nrr", nrr),
            "rule_of_40": classify_saas_metric("rule_of_40", rule_of_40),
        },
    }
