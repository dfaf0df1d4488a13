"""
Standard Investment Metrics

ROI, NPV, IRR and payback period for a single business-case scenario,
plus the monthly and cumulative cash flow series they are built from.
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from bizcase.calculations import irr
from bizcase.calculations.numeric import round_currency, round_series, safe_divide
from bizcase.calculations.parallel import run_parallel
from bizcase.calculations.validation import assert_range, validate_scenario

logger = logging.getLogger(__name__)

BEST_CASE_MULTIPLIER = 1.3
WORST_CASE_MULTIPLIER = 0.7


@dataclass(frozen=True)
class ScenarioInput:
    """Assumptions for one business case. Rates are annual percentages."""

    initial_investment: float
    discount_rate: float
    project_duration: int  # Months
    yearly_revenue: float
    revenue_growth: float
    operating_costs: float  # Annual
    maintenance_costs: float  # Annual
    multiplier: float = 1.0  # Applied to revenue only


def monthly_discount_rate(annual_rate_percent: float) -> float:
    """Annual percentage rate to monthly decimal rate."""
    return annual_rate_percent / 100 / 12


def build_monthly_cash_flows(scenario: ScenarioInput) -> List[float]:
    """
    Monthly net cash flow for months 1..project_duration.

    Revenue starts at yearly_revenue / 12 and compounds monthly at
    revenue_growth / 12; costs are flat at (operating + maintenance) / 12.
    """
    base_revenue = scenario.yearly_revenue / 12 * scenario.multiplier
    monthly_growth = 1 + scenario.revenue_growth / 100 / 12
    monthly_costs = (scenario.operating_costs + scenario.maintenance_costs) / 12

    return [
        base_revenue * (monthly_growth ** month) - monthly_costs
        for month in range(int(scenario.project_duration))
    ]


def calculate_roi(npv: float, initial_investment: float) -> float:
    """ROI as a percentage of the initial investment, from NPV."""
    return safe_divide(npv, initial_investment, 0.0) * 100


def calculate_metrics(scenario: ScenarioInput) -> Dict:
    """
    Calculate all standard metrics for a scenario.

    Args:
        scenario: Scenario assumptions

    Returns:
        Dict with roi, npv, irr (annual %), irr_converged, payback_period
        (months; equals project_duration when never reached),
        payback_achieved (cumulative flow reached zero at some month),
        monthly_cash_flow and cumulative_cash_flow

    Raises:
        InputValidationError: If any field is invalid
    """
    validate_scenario(scenario)

    cash_flows = build_monthly_cash_flows(scenario)
    cumulative = irr.cumulative_cash_flows(scenario.initial_investment, cash_flows)

    npv = irr.calculate_npv(
        scenario.initial_investment,
        cash_flows,
        monthly_discount_rate(scenario.discount_rate),
    )
    roi = calculate_roi(npv, scenario.initial_investment)
    payback = irr.calculate_payback_period(scenario.initial_investment, cash_flows)
    irr_result = irr.calculate_irr(scenario.initial_investment, cash_flows)

    logger.debug(
        f"Metrics: npv={npv:.2f} roi={roi:.2f} irr={irr_result.annual_rate_percent:.2f} "
        f"payback={payback:.2f} months={scenario.project_duration}"
    )

    return {
        "roi": round_currency(roi),
        "npv": round_currency(npv),
        "irr": round_currency(irr_result.annual_rate_percent),
        "irr_converged": irr_result.converged,
        "payback_period": round_currency(payback),
        "payback_achieved": any(value >= 0 for value in cumulative),
        "total_net_cash_flow": round_currency(sum(cash_flows)),
        "monthly_cash_flow": round_series(cash_flows),
        "cumulative_cash_flow": round_series(cumulative),
    }


def scenario_cases(scenario: ScenarioInput) -> Dict[str, ScenarioInput]:
    """
    Expected, best and worst case inputs.

    An explicit multiplier other than 1.0 replaces both the best and the
    worst case default.
    """
    override = scenario.multiplier if scenario.multiplier != 1.0 else None
    return {
        "expected": replace(scenario, multiplier=1.0),
        "best": replace(scenario, multiplier=override or BEST_CASE_MULTIPLIER),
        "worst": replace(scenario, multiplier=override or WORST_CASE_MULTIPLIER),
    }


def calculate_all_scenarios(
    scenario: ScenarioInput, max_workers: Optional[int] = None
) -> Dict[str, Dict]:
    """Calculate expected, best and worst case metrics."""
    cases = scenario_cases(scenario)
    results = run_parallel(calculate_metrics, cases.values(), max_workers)
    return dict(zip(cases.keys(), results))


def calculate_scenario_with_adjustments(
    scenario: ScenarioInput,
    sales_adjustment: float = 0.0,
    costs_adjustment: float = 0.0,
    discount_adjustment: float = 0.0,
) -> Dict:
    """
    Recalculate with what-if adjustments.

    Args:
        scenario: Base assumptions
        sales_adjustment: Percent change to yearly revenue (-50 to +50)
        costs_adjustment: Percent change to both cost lines (-50 to +50)
        discount_adjustment: Percentage points added to the discount rate (-5 to +5)
    """
    assert_range(sales_adjustment, -50, 50, "sales_adjustment")
    assert_range(costs_adjustment, -50, 50, "costs_adjustment")
    assert_range(discount_adjustment, -5, 5, "discount_adjustment")

    adjusted = replace(
        scenario,
        yearly_revenue=scenario.yearly_revenue * (1 + sales_adjustment / 100),
        operating_costs=scenario.operating_costs * (1 + costs_adjustment / 100),
        maintenance_costs=scenario.maintenance_costs * (1 + costs_adjustment / 100),
        discount_rate=scenario.discount_rate + discount_adjustment,
    )
    return calculate_metrics(adjusted)
