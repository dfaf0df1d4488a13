"""
Break-even Analysis

Units and revenue needed for revenue to cover fixed plus variable costs.
"""

import logging
import math
from typing import Dict, Optional

from bizcase.calculations.numeric import round_currency, safe_divide
from bizcase.calculations.validation import validate_break_even

logger = logging.getLogger(__name__)

MARGIN_OF_SAFETY_BENCHMARKS = {"healthy": 25, "acceptable": 10, "critical": 0}


def margin_of_safety_status(margin_of_safety: float) -> str:
    """Band a margin of safety (%) against MARGIN_OF_SAFETY_BENCHMARKS."""
    if margin_of_safety >= MARGIN_OF_SAFETY_BENCHMARKS["healthy"]:
        return "healthy"
    if margin_of_safety >= MARGIN_OF_SAFETY_BENCHMARKS["acceptable"]:
        return "acceptable"
    if margin_of_safety >= MARGIN_OF_SAFETY_BENCHMARKS["critical"]:
        return "warning"
    return "critical"


def calculate_break_even(
    fixed_costs: float,
    price_per_unit: float,
    variable_cost_per_unit: float,
    current_sales_units: Optional[float] = None,
    period_months: int = 12,
) -> Dict:
    """
    Calculate break-even point and margin of safety.

    Break-even units are rounded up to whole units before break-even revenue
    is derived from them, so revenue always covers the fixed costs.

    Raises:
        InputValidationError: If price does not exceed variable cost or any
            input is invalid
    """
    validate_break_even(
        fixed_costs, price_per_unit, variable_cost_per_unit, current_sales_units, period_months
    )

    contribution_margin = price_per_unit - variable_cost_per_unit
    contribution_margin_ratio = safe_divide(contribution_margin, price_per_unit, 0.0)

    break_even_units = math.ceil(fixed_costs / contribution_margin)
    break_even_revenue = break_even_units * price_per_unit

    margin_of_safety = None
    margin_of_safety_units = None
    is_above_break_even = False
    if current_sales_units is not None:
        margin_of_safety_units = current_sales_units - break_even_units
        margin_of_safety = safe_divide(margin_of_safety_units, current_sales_units, 0.0) * 100
        is_above_break_even = current_sales_units >= break_even_units

    logger.debug(
        f"Break-even: units={break_even_units} revenue={break_even_revenue:.2f} "
        f"margin_ratio={contribution_margin_ratio:.4f}"
    )

    return {
        "break_even_units": break_even_units,
        "break_even_revenue": round_currency(break_even_revenue),
        "contribution_margin_per_unit": round_currency(contribution_margin),
        "contribution_margin_ratio": round_currency(contribution_margin_ratio * 100),
        "margin_of_safety": (
            round_currency(margin_of_safety) if margin_of_safety is not None else None
        ),
        "margin_of_safety_units": margin_of_safety_units,
        "margin_of_safety_status": (
            margin_of_safety_status(margin_of_safety) if margin_of_safety is not None else None
        ),
        "units_per_month": math.ceil(break_even_units / period_months),
        "revenue_per_month": round_currency(break_even_revenue / period_months),
        "is_above_break_even": is_above_break_even,
    }
