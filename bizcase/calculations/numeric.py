"""
Numeric helpers shared by every calculation module.

Rounding happens only at the result boundary; internal iteration keeps
full float precision.
"""

import math


CURRENCY_DECIMALS = 2
RATIO_DECIMALS = 4


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning ``default`` instead of raising when the denominator is zero."""
    if denominator == 0:
        return default
    return numerator / denominator


def round_value(value: float, decimals: int = CURRENCY_DECIMALS) -> float:
    """
    Round half away from zero.

    Python's round() is banker's rounding, which drifts from the usual
    spreadsheet behavior on exact halves (0.125 -> 0.12).
    """
    if not math.isfinite(value):
        return value
    multiplier = 10 ** decimals
    scaled = abs(value) * multiplier
    rounded = math.floor(scaled + 0.5) / multiplier
    return math.copysign(rounded, value) if rounded != 0 else 0.0


def round_currency(value: float) -> float:
    return round_value(value, CURRENCY_DECIMALS)


def round_ratio(value: float) -> float:
    return round_value(value, RATIO_DECIMALS)


def round_series(values, decimals: int = CURRENCY_DECIMALS):
    """Round every element of a sequence."""
    return [round_value(v, decimals) for v in values]
