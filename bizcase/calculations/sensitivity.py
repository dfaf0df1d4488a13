"""
Sensitivity Analysis

One-at-a-time sweeps of the standard metrics engine: each variable is
scaled by a set of percentage variations while every other input stays at
its base value. The sweep feeds a sensitivity matrix and a tornado
dataset ranked by impact range.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from bizcase.calculations.metrics import ScenarioInput, calculate_metrics
from bizcase.calculations.numeric import round_currency
from bizcase.calculations.parallel import run_parallel
from bizcase.calculations.validation import InputValidationError, assert_range, validate_scenario

logger = logging.getLogger(__name__)

DEFAULT_VARIABLES = (
    "initial_investment",
    "yearly_revenue",
    "operating_costs",
    "maintenance_costs",
)
SUPPORTED_VARIABLES = DEFAULT_VARIABLES + ("discount_rate", "revenue_growth")
DEFAULT_VARIATIONS = (-30, -20, -10, 0, 10, 20, 30)
SUPPORTED_METRICS = ("npv", "roi")


def perturb(scenario: ScenarioInput, variable: str, variation_percent: float) -> ScenarioInput:
    """Copy of the scenario with one field scaled by (1 + variation / 100)."""
    if variable not in SUPPORTED_VARIABLES:
        raise InputValidationError(
            "variables",
            f"Unsupported sensitivity variable: {variable}. "
            f"Expected one of {', '.join(SUPPORTED_VARIABLES)}",
        )
    value = getattr(scenario, variable)
    return replace(scenario, **{variable: value * (1 + variation_percent / 100)})


def _check_sweep_args(variables: Sequence[str], variations: Sequence[float]) -> None:
    if not variables:
        raise InputValidationError("variables", "variables must not be empty")
    if not variations:
        raise InputValidationError("variations", "variations must not be empty")
    for index, variation in enumerate(variations):
        field = f"variations[{index}]"
        assert_range(variation, -100, 1000, field)
        # -100% zeroes the variable; investment and revenue must stay positive
        if variation <= -100:
            raise InputValidationError(field, f"{field} must be greater than -100, got {variation}")
    for variable in variables:
        if variable not in SUPPORTED_VARIABLES:
            raise InputValidationError(
                "variables", f"Unsupported sensitivity variable: {variable}"
            )


def _evaluate_cell(cell: Tuple[ScenarioInput, str, float]) -> Dict:
    scenario, variable, variation = cell
    result = calculate_metrics(perturb(scenario, variable, variation))
    return {
        "variable": variable,
        "variation_percent": variation,
        "npv": result["npv"],
        "roi": result["roi"],
    }


def sweep(
    base: ScenarioInput,
    variables: Sequence[str] = DEFAULT_VARIABLES,
    variations: Sequence[float] = DEFAULT_VARIATIONS,
    max_workers: Optional[int] = None,
) -> Dict:
    """
    Build the sensitivity matrix.

    Args:
        base: Unperturbed scenario
        variables: Scenario fields to vary
        variations: Percentage variations applied to each field
        max_workers: Optional thread pool size for the cell fan-out

    Returns:
        Dict with ``base`` ({npv, roi} of the unperturbed scenario) and
        ``matrix`` mapping each variable to its points in variation order
    """
    validate_scenario(base)
    _check_sweep_args(variables, variations)

    base_result = calculate_metrics(base)
    cells = [(base, variable, variation) for variable in variables for variation in variations]
    points = run_parallel(_evaluate_cell, cells, max_workers)

    matrix: Dict[str, List[Dict]] = {variable: [] for variable in variables}
    for point in points:
        matrix[point["variable"]].append(point)

    logger.debug(f"Sensitivity sweep: {len(variables)} variables x {len(variations)} variations")

    return {
        "base": {"npv": base_result["npv"], "roi": base_result["roi"]},
        "variations": list(variations),
        "matrix": matrix,
    }


def extreme_variations(variations: Sequence[float]) -> Tuple[float, float]:
    """Most negative and most positive variation; the tornado bar ends."""
    negatives = [v for v in variations if v < 0]
    positives = [v for v in variations if v > 0]
    if not negatives or not positives:
        raise InputValidationError(
            "variations", "variations must include at least one negative and one positive value"
        )
    return min(negatives), max(positives)


def tornado_from_matrix(sensitivity: Dict, metric: str = "npv") -> List[Dict]:
    """
    Rank variables by the width of their impact on ``metric``.

    Impacts are measured at the extreme variations relative to the base
    value; entries come back sorted by descending range.
    """
    if metric not in SUPPORTED_METRICS:
        raise InputValidationError("metric", f"metric must be one of {', '.join(SUPPORTED_METRICS)}")

    negative_variation, positive_variation = extreme_variations(sensitivity["variations"])
    base_value = sensitivity["base"][metric]

    entries = []
    for variable, points in sensitivity["matrix"].items():
        by_variation = {point["variation_percent"]: point[metric] for point in points}
        negative_impact = by_variation[negative_variation] - base_value
        positive_impact = by_variation[positive_variation] - base_value
        entries.append(
            {
                "variable": variable,
                "negative_variation": negative_variation,
                "positive_variation": positive_variation,
                "negative_impact": round_currency(negative_impact),
                "positive_impact": round_currency(positive_impact),
                "range": round_currency(abs(positive_impact - negative_impact)),
            }
        )

    entries.sort(key=lambda entry: entry["range"], reverse=True)
    for rank, entry in enumerate(entries, start=1):
        entry["rank"] = rank
    return entries


def generate_tornado(
    base: ScenarioInput,
    variables: Sequence[str] = DEFAULT_VARIABLES,
    variations: Sequence[float] = DEFAULT_VARIATIONS,
    metric: str = "npv",
    max_workers: Optional[int] = None,
) -> List[Dict]:
    """Sweep the scenario and return the ranked tornado dataset."""
    extreme_variations(variations)
    return tornado_from_matrix(sweep(base, variables, variations, max_workers), metric)
