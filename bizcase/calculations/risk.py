"""
Risk Metrics

Cash runway, the date cash runs out at the current burn rate, and the
compound revenue-at-risk from monthly churn.
"""

import logging
from datetime import date
from typing import Dict, Optional

from dateutil.relativedelta import relativedelta

from bizcase.calculations.numeric import round_currency, safe_divide
from bizcase.calculations.validation import assert_range, validate_runway

logger = logging.getLogger(__name__)

RUNWAY_BENCHMARKS = {"optimal": 18, "acceptable": 12, "critical": 6}
CHURN_IMPACT_BENCHMARKS = {"optimal": 10, "acceptable": 20, "critical": 30}


def runway_status(runway_months: float) -> str:
    if runway_months < RUNWAY_BENCHMARKS["critical"]:
        return "critical"
    if runway_months < RUNWAY_BENCHMARKS["acceptable"]:
        return "warning"
    return "healthy"


def calculate_runway(
    current_cash: float,
    monthly_burn_rate: float,
    planned_fundraising: float = 0.0,
    as_of: Optional[date] = None,
) -> Dict:
    """
    Months of operation left at the current burn rate.

    Args:
        current_cash: Cash on hand
        monthly_burn_rate: Net cash consumed per month
        planned_fundraising: Committed funding to add to cash
        as_of: Date the runway is measured from (default today)

    Returns:
        Dict with runway_months, zero_cash_date (ISO) and status
    """
    validate_runway(current_cash, monthly_burn_rate, planned_fundraising)

    runway = safe_divide(current_cash + planned_fundraising, monthly_burn_rate, 0.0)
    start = as_of or date.today()
    zero_cash_date = start + relativedelta(months=int(runway))

    logger.debug(f"Runway: {runway:.2f} months, zero cash on {zero_cash_date.isoformat()}")

    return {
        "runway_months": round_currency(runway),
        "zero_cash_date": zero_cash_date.isoformat(),
        "status": runway_status(runway),
    }


def churn_impact_status(churn_impact: float) -> str:
    """Band a churn impact (%) against CHURN_IMPACT_BENCHMARKS; lower is better."""
    if churn_impact <= CHURN_IMPACT_BENCHMARKS["optimal"]:
        return "optimal"
    if churn_impact <= CHURN_IMPACT_BENCHMARKS["acceptable"]:
        return "acceptable"
    if churn_impact < CHURN_IMPACT_BENCHMARKS["critical"]:
        return "warning"
    return "critical"


def calculate_churn_impact(monthly_churn_rate: float, months: int = 6) -> float:
    """
    Share of revenue lost to churn over ``months``, as a percentage.

    Compound probability: 1 - (1 - churn)^months.
    """
    assert_range(monthly_churn_rate, 0, 100, "monthly_churn_rate")
    assert_range(months, 1, 120, "months")
    retention = (1 - monthly_churn_rate / 100) ** months
    return round_currency((1 - retention) * 100)
