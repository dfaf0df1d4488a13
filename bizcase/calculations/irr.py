"""
IRR, NPV and Payback Calculations

Monthly-period primitives used by the standard metrics engine. Cash flows
are the monthly net flows for months 1..n; the initial investment is an
outflow at month 0. IRR is solved with Newton-Raphson on the monthly rate.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from bizcase.calculations.numeric import safe_divide

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 100
TOLERANCE = 1e-4
DERIVATIVE_FLOOR = 1e-10
DEFAULT_GUESS = 0.10 / 12
RATE_LOWER_BOUND = -0.99
RATE_UPPER_BOUND = 10.0


@dataclass(frozen=True)
class IRRResult:
    """Outcome of the IRR solver."""

    monthly_rate: float
    annual_rate_percent: float
    converged: bool
    iterations: int
    reset: bool = False


def _periods(count: int) -> np.ndarray:
    return np.arange(1, count + 1, dtype=float)


def calculate_npv(
    initial_investment: float, cash_flows: Sequence[float], monthly_rate: float
) -> float:
    """
    Calculate NPV of monthly cash flows.

    Args:
        initial_investment: Upfront outflow at month 0 (positive number)
        cash_flows: Net cash flow for months 1..n
        monthly_rate: Monthly discount rate as decimal (annual % / 100 / 12)

    Returns:
        NPV value
    """
    if monthly_rate == 0:
        # No discounting: the plain sum, not a float-divided one.
        return -initial_investment + sum(cash_flows)

    flows = np.asarray(cash_flows, dtype=float)
    # Factors can underflow to 0 on long horizons; the result is then inf
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        factors = np.power(1.0 + monthly_rate, _periods(len(flows)))
        return float(-initial_investment + np.sum(flows / factors))


def _npv_derivative(cash_flows: Sequence[float], monthly_rate: float) -> float:
    """Derivative of NPV with respect to the monthly rate (for Newton-Raphson)."""
    flows = np.asarray(cash_flows, dtype=float)
    periods = _periods(len(flows))
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        factors = np.power(1.0 + monthly_rate, periods + 1)
        return float(-np.sum(periods * flows / factors))


def calculate_irr(
    initial_investment: float,
    cash_flows: Sequence[float],
    guess: float = DEFAULT_GUESS,
    max_iterations: int = MAX_ITERATIONS,
    tolerance: float = TOLERANCE,
) -> IRRResult:
    """
    Calculate IRR using Newton-Raphson on the monthly rate.

    Never raises on non-convergence: the last rate the loop held is
    annualized and returned with ``converged=False``. When an update leaves
    (-0.99, 10), or NPV stops being finite, the rate is reset to the guess
    and the loop stops, so the estimate is always finite.

    Args:
        initial_investment: Upfront outflow at month 0
        cash_flows: Net cash flow for months 1..n
        guess: Initial monthly rate (default 10% annual / 12)

    Returns:
        IRRResult with the annualized rate as a percentage
    """
    rate = guess
    converged = False
    reset = False
    iterations = 0

    for iterations in range(1, max_iterations + 1):
        npv = calculate_npv(initial_investment, cash_flows, rate)
        dnpv = _npv_derivative(cash_flows, rate)
        if not (math.isfinite(npv) and math.isfinite(dnpv)):
            rate = guess
            reset = True
            break

        if abs(npv) < tolerance:
            converged = True
            break

        if abs(dnpv) < DERIVATIVE_FLOOR:
            break

        rate = rate - npv / dnpv

        # NaN compares False against both bounds
        if not math.isfinite(rate) or rate < RATE_LOWER_BOUND or rate > RATE_UPPER_BOUND:
            rate = guess
            reset = True
            break

    if not converged:
        logger.warning(
            f"IRR did not converge after {iterations} iterations "
            f"(reset={reset}); returning best-effort estimate"
        )

    return IRRResult(
        monthly_rate=rate,
        annual_rate_percent=annualize_monthly_rate(rate) * 100,
        converged=converged,
        iterations=iterations,
        reset=reset,
    )


def calculate_payback_period(
    initial_investment: float, cash_flows: Sequence[float]
) -> float:
    """
    Calculate payback period in months.

    Linear interpolation inside the month where cumulative cash flow
    (starting at -initial_investment) first reaches zero. If it never does
    within the horizon, the horizon length is returned.
    """
    cumulative = -initial_investment

    for month, cf in enumerate(cash_flows):
        previous = cumulative
        cumulative += cf
        if cumulative >= 0:
            fraction = safe_divide(-previous, cf, 0.0)
            return month + fraction

    return float(len(cash_flows))


def cumulative_cash_flows(
    initial_investment: float, cash_flows: Sequence[float]
) -> List[float]:
    """Running total of cash flows, starting from -initial_investment."""
    result = []
    cumulative = -initial_investment
    for cf in cash_flows:
        cumulative += cf
        result.append(cumulative)
    return result


def annualize_monthly_rate(monthly_rate: float) -> float:
    """Compound a monthly rate over 12 months, as a decimal."""
    return ((1 + monthly_rate) ** 12) - 1
