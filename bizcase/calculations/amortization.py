"""
Loan Amortization Calculations

Monthly payment, full amortization schedule and affordability for a
fixed-rate small-business loan. Rates are annual percentages.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional

from bizcase.calculations.numeric import round_currency, safe_divide
from bizcase.calculations.validation import InputValidationError, validate_loan

logger = logging.getLogger(__name__)

AFFORDABILITY_THRESHOLD_PERCENT = 40.0


@dataclass(frozen=True)
class LoanInput:
    """A loan offer, optionally with the business cash flow that services it."""

    principal: float
    annual_rate: float
    term_months: int
    origination_fee_percent: Optional[float] = None
    monthly_revenue: Optional[float] = None
    monthly_expenses: Optional[float] = None


def calculate_payment(principal: float, annual_rate: float, term_months: int) -> float:
    """
    Calculate monthly loan payment.

    Standard annuity formula; straight-line principal / term when the
    rate is zero.

    Args:
        principal: Loan principal amount
        annual_rate: Annual interest rate as percentage (e.g., 8 for 8%)
        term_months: Loan term in months

    Returns:
        Monthly payment amount (positive number)
    """
    monthly_rate = annual_rate / 100 / 12

    if monthly_rate == 0:
        return principal / term_months

    growth = (1 + monthly_rate) ** term_months
    return principal * monthly_rate * growth / (growth - 1)


def generate_amortization_schedule(
    principal: float, annual_rate: float, term_months: int, payment: Optional[float] = None
) -> List[Dict]:
    """
    Generate a full amortization schedule.

    The recurrence runs at full precision. Rows are rounded to cents and
    the final row absorbs the accumulated rounding drift, so the rounded
    principal column sums to the loan principal and the last balance is 0.

    Returns:
        List of rows with month, payment, principal, interest, balance
    """
    monthly_rate = annual_rate / 100 / 12
    if payment is None:
        payment = calculate_payment(principal, annual_rate, term_months)

    schedule = []
    balance = principal
    principal_paid_rounded = 0.0

    for month in range(1, term_months + 1):
        interest = balance * monthly_rate

        if month == term_months:
            principal_pmt = round_currency(principal - principal_paid_rounded)
            row_payment = principal_pmt + interest
            balance = 0.0
        else:
            principal_pmt = payment - interest
            row_payment = payment
            balance = max(0.0, balance - principal_pmt)
            principal_pmt = round_currency(principal_pmt)
            principal_paid_rounded += principal_pmt

        schedule.append(
            {
                "month": month,
                "payment": round_currency(row_payment),
                "principal": principal_pmt,
                "interest": round_currency(interest),
                "balance": round_currency(balance),
            }
        )

    return schedule


def calculate_effective_rate(
    net_proceeds: float, monthly_payment: float, term_months: int
) -> float:
    """
    Approximate effective annual rate including fees, as a percentage.

    Simple-interest approximation on an average balance of half the net
    proceeds; not an exact APR.
    """
    total_paid = monthly_payment * term_months
    total_interest = total_paid - net_proceeds
    average_balance = net_proceeds / 2
    years = term_months / 12
    return safe_divide(safe_divide(total_interest, average_balance, 0.0), years, 0.0) * 100


def calculate_affordability(
    monthly_payment: float,
    monthly_revenue: Optional[float],
    monthly_expenses: Optional[float],
) -> Dict:
    """
    Debt service ratio of the payment against monthly net cash flow.

    Without both revenue and expenses affordability is unknown and every
    field is None. A non-positive net cash flow cannot service any debt.
    """
    if monthly_revenue is None or monthly_expenses is None:
        return {
            "debt_service_ratio": None,
            "is_affordable": None,
            "max_affordable_payment": None,
            "cushion_after_payment": None,
        }

    net_cash_flow = monthly_revenue - monthly_expenses
    cushion = net_cash_flow - monthly_payment

    if net_cash_flow <= 0:
        return {
            "debt_service_ratio": None,
            "is_affordable": False,
            "max_affordable_payment": 0.0,
            "cushion_after_payment": round_currency(cushion),
        }

    debt_service_ratio = monthly_payment / net_cash_flow * 100
    return {
        "debt_service_ratio": round_currency(debt_service_ratio),
        "is_affordable": debt_service_ratio <= AFFORDABILITY_THRESHOLD_PERCENT,
        "max_affordable_payment": round_currency(
            net_cash_flow * AFFORDABILITY_THRESHOLD_PERCENT / 100
        ),
        "cushion_after_payment": round_currency(cushion),
    }


def calculate_loan(
    principal: float,
    annual_rate: float,
    term_months: int,
    origination_fee_percent: Optional[float] = None,
    monthly_revenue: Optional[float] = None,
    monthly_expenses: Optional[float] = None,
) -> Dict:
    """
    Calculate loan metrics, schedule and affordability.

    Args:
        principal: Loan principal amount
        annual_rate: Annual interest rate as percentage
        term_months: Loan term in months (1-360)
        origination_fee_percent: Upfront fee as percent of principal (0-10)
        monthly_revenue: Business monthly revenue, for affordability
        monthly_expenses: Business monthly expenses, for affordability

    Raises:
        InputValidationError: If any input is invalid
    """
    validate_loan(
        principal,
        annual_rate,
        term_months,
        origination_fee_percent,
        monthly_revenue,
        monthly_expenses,
    )
    term_months = int(term_months)

    monthly_payment = calculate_payment(principal, annual_rate, term_months)
    schedule = generate_amortization_schedule(principal, annual_rate, term_months, monthly_payment)

    total_payment = monthly_payment * term_months
    total_interest = total_payment - principal

    fees = principal * (origination_fee_percent or 0) / 100
    total_cost_with_fees = total_payment + fees
    effective_annual_rate = calculate_effective_rate(principal - fees, monthly_payment, term_months)

    first_year = schedule[: min(12, term_months)]
    halfway_point = term_months // 2
    principal_at_halfway = schedule[halfway_point - 1]["balance"] if halfway_point > 0 else 0.0

    logger.debug(
        f"Loan: payment={monthly_payment:.2f} interest={total_interest:.2f} "
        f"effective_rate={effective_annual_rate:.2f}"
    )

    return {
        "monthly_payment": round_currency(monthly_payment),
        "total_payment": round_currency(total_payment),
        "total_interest": round_currency(total_interest),
        "effective_annual_rate": round_currency(effective_annual_rate),
        "total_cost_with_fees": round_currency(total_cost_with_fees),
        "amortization_schedule": schedule,
        "first_year_principal": round_currency(sum(row["principal"] for row in first_year)),
        "first_year_interest": round_currency(sum(row["interest"] for row in first_year)),
        "affordability": calculate_affordability(monthly_payment, monthly_revenue, monthly_expenses),
        "payoff_summary": {
            "halfway_point": halfway_point,
            "principal_at_halfway": principal_at_halfway,
        },
    }


def compare_loan_options(loans: List[LoanInput]) -> Dict:
    """
    Compare loan offers by total cost including fees.

    Returns:
        Dict with per-option summaries, the index of the cheapest option and
        the savings versus the most expensive one
    """
    if not loans:
        raise InputValidationError("loans", "loans must contain at least one option")

    options = []
    for loan in loans:
        result = calculate_loan(**asdict(loan))
        options.append(
            {
                **asdict(loan),
                "total_cost": result["total_cost_with_fees"],
                "monthly_payment": result["monthly_payment"],
            }
        )

    costs = [option["total_cost"] for option in options]
    best_option = costs.index(min(costs))

    return {
        "options": options,
        "best_option": best_option,
        "savings": round_currency(max(costs) - min(costs)),
    }
