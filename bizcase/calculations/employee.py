"""
Employee ROI

First-year return on a hire: fully loaded cost against the revenue the
role is expected to generate, with hourly productivity compared to a
typical cost and productivity for the role type.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List

from bizcase.calculations.numeric import round_currency, round_value, safe_divide
from bizcase.calculations.validation import assert_positive, assert_range, validate_employee

logger = logging.getLogger(__name__)

WEEKS_PER_YEAR = 52
ASSUMED_BENEFITS_RATIO = 0.20

ROLE_BENCHMARKS = {
    "sales": {"avg_cost_per_hour": 35, "avg_productivity": 3.0},
    "operations": {"avg_cost_per_hour": 28, "avg_productivity": 2.0},
    "technical": {"avg_cost_per_hour": 45, "avg_productivity": 2.5},
    "administrative": {"avg_cost_per_hour": 22, "avg_productivity": 1.5},
}


@dataclass(frozen=True)
class EmployeeInput:
    annual_salary: float
    annual_benefits: float
    onboarding_costs: float
    revenue_generated: float  # expected annual revenue attributable to the role
    hours_per_week: float = 40
    role_type: str = "operations"


def compare_to_role(cost_per_hour: float, productivity_ratio: float, role_type: str) -> Dict:
    """
    Cost efficiency is "above" average when the hour is cheaper than the
    role norm; productivity level is compared directly.
    """
    benchmark = ROLE_BENCHMARKS[role_type]

    if cost_per_hour < benchmark["avg_cost_per_hour"] * 0.9:
        cost_efficiency = "above"
    elif cost_per_hour > benchmark["avg_cost_per_hour"] * 1.1:
        cost_efficiency = "below"
    else:
        cost_efficiency = "average"

    if productivity_ratio > benchmark["avg_productivity"] * 1.2:
        productivity_level = "high"
    elif productivity_ratio < benchmark["avg_productivity"] * 0.8:
        productivity_level = "low"
    else:
        productivity_level = "average"

    return {"cost_efficiency": cost_efficiency, "productivity_level": productivity_level}


def calculate_employee_roi(employee: EmployeeInput) -> Dict:
    """
    Calculate first-year ROI and productivity for a hire.

    Onboarding is a one-off cost: it counts toward the first-year total but
    not toward the hourly cost. Payback is the months of net contribution
    needed to recover onboarding, or None when contribution is not positive.

    Raises:
        InputValidationError: If any input is invalid or the role type is unknown
    """
    validate_employee(employee, ROLE_BENCHMARKS)

    recurring_cost = employee.annual_salary + employee.annual_benefits
    total_cost = recurring_cost + employee.onboarding_costs
    net_contribution = employee.revenue_generated - total_cost
    roi = net_contribution / total_cost * 100

    annual_hours = employee.hours_per_week * WEEKS_PER_YEAR
    cost_per_hour = recurring_cost / annual_hours
    revenue_per_hour = employee.revenue_generated / annual_hours
    productivity_ratio = safe_divide(revenue_per_hour, cost_per_hour, 0.0)

    payback_months = None
    if net_contribution > 0:
        payback_months = round_value(employee.onboarding_costs / (net_contribution / 12), 1)

    logger.debug(
        f"Employee ROI ({employee.role_type}): roi={roi:.2f}% "
        f"productivity={productivity_ratio:.2f} net={net_contribution:.2f}"
    )

    return {
        "total_cost": round_currency(total_cost),
        "roi_percentage": round_currency(roi),
        "net_contribution": round_currency(net_contribution),
        "revenue_per_dollar_spent": round_currency(employee.revenue_generated / total_cost),
        "cost_per_hour": round_currency(cost_per_hour),
        "revenue_per_hour": round_currency(revenue_per_hour),
        "break_even_revenue": round_currency(total_cost),
        "productivity_ratio": round_currency(productivity_ratio),
        "is_worth_hiring": roi > 0 and productivity_ratio > 1,
        "payback_months": payback_months,
        "benchmark_comparison": compare_to_role(
            cost_per_hour, productivity_ratio, employee.role_type
        ),
    }


def employee_recommendations(result: Dict) -> List[str]:
    recommendations = []

    if result["is_worth_hiring"]:
        recommendations.append(
            f"Positive ROI: the role generates ${result['revenue_per_dollar_spent']:.2f} "
            "for every $1 spent."
        )
    else:
        recommendations.append(
            "This hire may not generate positive ROI based on projected revenue."
        )
        recommendations.append(
            "Consider whether the role could generate more revenue with better tools or training."
        )

    roi = result["roi_percentage"]
    if roi > 100:
        recommendations.append("Excellent ROI. Consider hiring additional similar roles.")
    elif roi > 50:
        recommendations.append("Good ROI. This is a valuable team member.")
    elif roi > 0:
        recommendations.append(
            "Moderate ROI. Look for ways to increase productivity or reduce costs."
        )

    productivity_level = result["benchmark_comparison"]["productivity_level"]
    if productivity_level == "high":
        recommendations.append("Productivity is ABOVE the role average.")
    elif productivity_level == "low":
        recommendations.append(
            "Productivity is BELOW the role average. Consider training or process improvements."
        )

    if result["payback_months"] is not None:
        recommendations.append(
            f"Onboarding investment recovered in {result['payback_months']} months."
        )

    return recommendations


def calculate_optimal_salary_range(expected_revenue: float, target_roi: float = 50) -> Dict:
    """
    Salary range that still returns ``target_roi`` percent on the revenue.

    Benefits are assumed to add 20% on top of salary; the range runs from
    85% of the affordable salary up to the affordable salary itself.
    """
    assert_positive(expected_revenue, "expected_revenue")
    assert_range(target_roi, -99, 1000, "target_roi")

    max_total_cost = expected_revenue / (1 + target_roi / 100)
    salary_portion = max_total_cost / (1 + ASSUMED_BENEFITS_RATIO)

    return {
        "max_total_cost": round_value(max_total_cost, 0),
        "recommended_salary_range": {
            "min": round_value(salary_portion * 0.85, 0),
            "max": round_value(salary_portion, 0),
        },
        "assumed_benefits_ratio": ASSUMED_BENEFITS_RATIO,
    }
