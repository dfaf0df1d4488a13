"""
Cash Flow Forecast Calculations

Projects month-by-month cash for a small business and flags the months
where the balance goes negative. Growth rates are monthly percentages.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Sequence

from dateutil.relativedelta import relativedelta

from bizcase.calculations.numeric import round_currency
from bizcase.calculations.validation import validate_forecast

logger = logging.getLogger(__name__)

MONTH_NAMES = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]
DEFAULT_FORECAST_MONTHS = 12


@dataclass(frozen=True)
class MonthAmount:
    """A one-off amount landing in a specific forecast month (1-based)."""

    month: int
    amount: float
    description: str = ""


@dataclass(frozen=True)
class ForecastInput:
    """Inputs for a cash flow forecast."""

    starting_cash: float
    monthly_revenue: float
    monthly_expenses: float
    growth_rate: float = 0.0  # Monthly revenue growth, %
    expense_growth_rate: float = 0.0  # Monthly expense growth, %
    seasonal_factors: Optional[Sequence[float]] = None  # 12 entries, 0.1-3.0
    one_time_expenses: Sequence[MonthAmount] = ()
    expected_receivables: Sequence[MonthAmount] = ()
    forecast_months: int = DEFAULT_FORECAST_MONTHS
    start_date: Optional[date] = None


def calculate_growth_factor(rate_percent: float, month: int) -> float:
    """Compound growth factor for a 1-based month (month 1 has factor 1.0)."""
    return (1 + rate_percent / 100) ** (month - 1)


def seasonal_factor(factors: Optional[Sequence[float]], month: int) -> float:
    """Seasonal multiplier for a 1-based month, cycling every 12 months."""
    if not factors:
        return 1.0
    return factors[(month - 1) % 12]


def sum_for_month(amounts: Sequence[MonthAmount], month: int) -> float:
    """Total of the one-off amounts keyed to exactly this month."""
    return sum(item.amount for item in amounts if item.month == month)


def month_label(month: int, start_date: Optional[date] = None) -> str:
    """Calendar month name; cycles from January when no start date is given."""
    if start_date is None:
        return MONTH_NAMES[(month - 1) % 12]
    return MONTH_NAMES[(start_date + relativedelta(months=month - 1)).month - 1]


def minimum_cash_reserve(average_monthly_net_flow: float, monthly_expenses: float) -> float:
    """Three months of average burn when burning, else two months of expenses."""
    if average_monthly_net_flow < 0:
        return abs(average_monthly_net_flow) * 3
    return monthly_expenses * 2


def generate_forecast(forecast: ForecastInput) -> Dict:
    """
    Generate a monthly cash flow forecast.

    Args:
        forecast: Forecast inputs

    Returns:
        Dict with monthly_forecasts rows and summary fields

    Raises:
        InputValidationError: If any input is invalid
    """
    validate_forecast(forecast)
    forecast_months = int(forecast.forecast_months)

    rows = []
    current_cash = forecast.starting_cash
    total_revenue = 0.0
    total_expenses = 0.0
    lowest_cash = forecast.starting_cash
    lowest_cash_month = 0
    deficit_months: List[int] = []

    for month in range(1, forecast_months + 1):
        # === REVENUE ===
        revenue = (
            forecast.monthly_revenue
            * calculate_growth_factor(forecast.growth_rate, month)
            * seasonal_factor(forecast.seasonal_factors, month)
        )
        revenue += sum_for_month(forecast.expected_receivables, month)

        # === EXPENSES ===
        expenses = forecast.monthly_expenses * calculate_growth_factor(
            forecast.expense_growth_rate, month
        )
        expenses += sum_for_month(forecast.one_time_expenses, month)

        net_cash_flow = revenue - expenses
        current_cash += net_cash_flow
        total_revenue += revenue
        total_expenses += expenses

        is_deficit = current_cash < 0
        if is_deficit:
            deficit_months.append(month)

        if current_cash < lowest_cash:
            lowest_cash = current_cash
            lowest_cash_month = month

        rows.append(
            {
                "month": month,
                "month_name": month_label(month, forecast.start_date),
                "revenue": round_currency(revenue),
                "expenses": round_currency(expenses),
                "net_cash_flow": round_currency(net_cash_flow),
                "ending_cash": round_currency(current_cash),
                "is_deficit": is_deficit,
            }
        )

    total_net_cash_flow = total_revenue - total_expenses
    average_monthly_net_flow = total_net_cash_flow / forecast_months
    reserve = minimum_cash_reserve(average_monthly_net_flow, forecast.monthly_expenses)
    is_healthy = not deficit_months and lowest_cash >= reserve

    logger.debug(
        f"Forecast: ending_cash={current_cash:.2f} lowest={lowest_cash:.2f} "
        f"deficit_months={deficit_months}"
    )

    return {
        "monthly_forecasts": rows,
        "total_revenue": round_currency(total_revenue),
        "total_expenses": round_currency(total_expenses),
        "total_net_cash_flow": round_currency(total_net_cash_flow),
        "ending_cash_balance": round_currency(current_cash),
        "lowest_cash_balance": round_currency(lowest_cash),
        "lowest_cash_month": lowest_cash_month,
        "deficit_months": deficit_months,
        "months_until_deficit": deficit_months[0] if deficit_months else None,
        "minimum_cash_reserve_needed": round_currency(reserve),
        "average_monthly_net_flow": round_currency(average_monthly_net_flow),
        "is_healthy": is_healthy,
    }


def forecast_alerts(result: Dict) -> List[str]:
    """Plain-text alerts for a forecast result."""
    alerts = []

    if result["months_until_deficit"] is not None:
        alerts.append(f"CRITICAL: Cash goes negative in month {result['months_until_deficit']}.")

    if result["lowest_cash_balance"] < result["minimum_cash_reserve_needed"]:
        alerts.append(
            f"Cash drops to {result['lowest_cash_balance']:,.2f} in month "
            f"{result['lowest_cash_month']}, below the recommended reserve of "
            f"{result['minimum_cash_reserve_needed']:,.2f}."
        )

    average = result["average_monthly_net_flow"]
    if average < 0:
        alerts.append(f"Average monthly cash burn: {abs(average):,.2f}.")
    elif average > 0:
        alerts.append(f"Average monthly cash gain: {average:,.2f}.")

    if result["is_healthy"]:
        alerts.append("Cash flow forecast looks healthy.")

    return alerts
