"""
Composite Operational Indices

Three ratio metrics computed from operational inputs:

- OFI  (Operational Friction Index): annual cost of manual process work
  relative to revenue. Lower is better.
- TFDI (Tech-Debt Financial Drag Index): maintenance share of the dev
  budget plus incident cost, relative to the dev budget. Lower is better.
- SER  (Strategic Efficiency Ratio): revenue growth relative to burn-rate
  growth. Higher is better.

Each index is computed only when its own inputs are present.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from bizcase.calculations.numeric import round_currency, round_ratio, safe_divide
from bizcase.calculations.validation import InputValidationError, validate_composite

logger = logging.getLogger(__name__)

WEEKS_PER_YEAR = 52
BURN_RATE_FLOOR = 0.01
BURN_DECREASE_BONUS = 1.5

INDEX_BENCHMARKS = {
    "ofi": {"optimal": 0.03, "acceptable": 0.08, "industry": 0.10, "higher_is_better": False},
    "tfdi": {"optimal": 0.15, "acceptable": 0.25, "industry": 0.30, "higher_is_better": False},
    "ser": {"optimal": 2.0, "acceptable": 1.0, "industry": 1.2, "higher_is_better": True},
}


@dataclass(frozen=True)
class CompositeInputs:
    """Operational inputs; any of the three groups may be left out."""

    # Operational friction
    manual_hours_per_week: Optional[float] = None
    hourly_cost: Optional[float] = None
    automation_potential: Optional[float] = None  # %, 0-100
    # Tech debt
    maintenance_hours_per_sprint: Optional[float] = None
    total_dev_hours_per_sprint: Optional[float] = None
    team_annual_cost: Optional[float] = None
    incident_cost_per_month: Optional[float] = None
    # Efficiency (current_revenue is also the OFI denominator)
    current_revenue: Optional[float] = None
    previous_revenue: Optional[float] = None
    current_burn_rate: Optional[float] = None
    previous_burn_rate: Optional[float] = None

    def has_friction_inputs(self) -> bool:
        return _all_present(self.manual_hours_per_week, self.hourly_cost, self.current_revenue)

    def has_tech_debt_inputs(self) -> bool:
        return _all_present(
            self.maintenance_hours_per_sprint,
            self.total_dev_hours_per_sprint,
            self.team_annual_cost,
            self.incident_cost_per_month,
        )

    def has_efficiency_inputs(self) -> bool:
        return _all_present(
            self.current_revenue,
            self.previous_revenue,
            self.current_burn_rate,
            self.previous_burn_rate,
        )


def _all_present(*values) -> bool:
    return all(value is not None for value in values)


def calculate_ofi(manual_hours_per_week: float, hourly_cost: float, current_revenue: float) -> float:
    """(manual hours/week * hourly cost * 52) / annual revenue."""
    annual_manual_cost = manual_hours_per_week * hourly_cost * WEEKS_PER_YEAR
    return safe_divide(annual_manual_cost, current_revenue, 0.0)


def calculate_tfdi(
    maintenance_hours_per_sprint: float,
    total_dev_hours_per_sprint: float,
    team_annual_cost: float,
    incident_cost_per_month: float,
) -> float:
    """(maintenance share * team cost + incident cost * 12) / team cost."""
    maintenance_ratio = safe_divide(maintenance_hours_per_sprint, total_dev_hours_per_sprint, 0.0)
    total_drag = maintenance_ratio * team_annual_cost + incident_cost_per_month * 12
    return safe_divide(total_drag, team_annual_cost, 0.0)


def calculate_ser(
    current_revenue: float,
    previous_revenue: float,
    current_burn_rate: float,
    previous_burn_rate: float,
) -> float:
    """
    Revenue growth rate over the magnitude of the burn-rate change.

    Both rates are period-over-period fractions. An unchanged burn rate is
    floored at 0.01 so the ratio stays finite; a falling burn rate earns a
    1.5x bonus.
    """
    revenue_growth_rate = safe_divide(current_revenue - previous_revenue, previous_revenue, 0.0)
    burn_rate_change = safe_divide(
        current_burn_rate - previous_burn_rate, previous_burn_rate, BURN_RATE_FLOOR
    )
    denominator = abs(burn_rate_change) or BURN_RATE_FLOOR

    ser = revenue_growth_rate / denominator
    if burn_rate_change < 0:
        ser *= BURN_DECREASE_BONUS
    return ser


def classify_index(name: str, value: float) -> str:
    """Band an index value as optimal, acceptable or concerning."""
    try:
        bands = INDEX_BENCHMARKS[name]
    except KeyError:
        raise InputValidationError("index", f"Unknown composite index: {name}")

    if bands["higher_is_better"]:
        if value > bands["optimal"]:
            return "optimal"
        if value >= bands["acceptable"]:
            return "acceptable"
        return "concerning"

    if value < bands["optimal"]:
        return "optimal"
    if value < bands["acceptable"]:
        return "acceptable"
    return "concerning"


def calculate_composite_indices(inputs: CompositeInputs) -> Dict:
    """
    Calculate every index whose inputs are present.

    Returns:
        Dict keyed by index name ("ofi", "tfdi", "ser") with value, band and
        benchmarks. OFI also reports the recoverable cost when an
        automation potential is given.

    Raises:
        InputValidationError: If no index can be computed or inputs are invalid
    """
    validate_composite(inputs)
    results = {}

    if inputs.has_friction_inputs():
        ofi = calculate_ofi(inputs.manual_hours_per_week, inputs.hourly_cost, inputs.current_revenue)
        results["ofi"] = _index_result("ofi", ofi)
        annual_manual_cost = inputs.manual_hours_per_week * inputs.hourly_cost * WEEKS_PER_YEAR
        results["ofi"]["annual_manual_cost"] = round_currency(annual_manual_cost)
        if inputs.automation_potential is not None:
            results["ofi"]["recoverable_cost"] = round_currency(
                annual_manual_cost * inputs.automation_potential / 100
            )

    if inputs.has_tech_debt_inputs():
        tfdi = calculate_tfdi(
            inputs.maintenance_hours_per_sprint,
            inputs.total_dev_hours_per_sprint,
            inputs.team_annual_cost,
            inputs.incident_cost_per_month,
        )
        results["tfdi"] = _index_result("tfdi", tfdi)

    if inputs.has_efficiency_inputs():
        ser = calculate_ser(
            inputs.current_revenue,
            inputs.previous_revenue,
            inputs.current_burn_rate,
            inputs.previous_burn_rate,
        )
        results["ser"] = _index_result("ser", ser)

    if not results:
        raise InputValidationError(
            "composite_inputs", "At least one complete group of composite inputs is required"
        )

    logger.debug(
        "Composite indices: "
        + ", ".join(f"{name}={result['value']}" for name, result in results.items())
    )
    return results


def _index_result(name: str, value: float) -> Dict:
    bands = INDEX_BENCHMARKS[name]
    return {
        "value": round_ratio(value),
        "band": classify_index(name, value),
        "benchmarks": {
            "optimal": bands["optimal"],
            "acceptable": bands["acceptable"],
            "industry": bands["industry"],
        },
    }
