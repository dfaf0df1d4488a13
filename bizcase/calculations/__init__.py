"""
Financial Calculation Engine

Core calculation modules for small-business investment decisions.
All operations are pure: a fresh input record in, a result record out.
"""

from bizcase.calculations import (
    amortization,
    benchmarks,
    break_even,
    cashflow,
    cohort,
    composite,
    employee,
    irr,
    marketing,
    metrics,
    pricing,
    risk,
    saas,
    sensitivity,
)

__all__ = [
    "amortization",
    "benchmarks",
    "break_even",
    "cashflow",
    "cohort",
    "composite",
    "employee",
    "irr",
    "marketing",
    "metrics",
    "pricing",
    "risk",
    "saas",
    "sensitivity",
]
