"""
Input Validation

Range, finiteness and positivity checks plus the cross-field rules each
engine relies on. Every check is pure and fails fast on the first
violation; nothing is clamped or coerced.
"""

import math
from typing import Iterable, Optional


class InputValidationError(ValueError):
    """Raised when an input field fails validation."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


def assert_finite(value: float, field: str) -> None:
    """Reject None, non-numeric values, NaN and infinities."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InputValidationError(field, f"{field} must be a finite number, got {value!r}")
    if not math.isfinite(value):
        raise InputValidationError(field, f"{field} must be a finite number, got {value}")


def assert_positive(value: float, field: str) -> None:
    """Value must be finite and strictly greater than zero."""
    assert_finite(value, field)
    if value <= 0:
        raise InputValidationError(field, f"{field} must be positive, got {value}")


def assert_non_negative(value: float, field: str) -> None:
    """Value must be finite and zero or greater."""
    assert_finite(value, field)
    if value < 0:
        raise InputValidationError(field, f"{field} must be non-negative, got {value}")


def assert_range(value: float, minimum: float, maximum: float, field: str) -> None:
    """Value must be finite and within [minimum, maximum]."""
    assert_finite(value, field)
    if value < minimum or value > maximum:
        raise InputValidationError(
            field, f"{field} must be between {minimum} and {maximum}, got {value}"
        )


def assert_optional_non_negative(value: Optional[float], field: str) -> None:
    if value is not None:
        assert_non_negative(value, field)


def validate_scenario(scenario) -> None:
    """Validate a ScenarioInput for the standard metrics engine."""
    if scenario is None:
        raise InputValidationError("scenario", "scenario input cannot be None")

    assert_positive(scenario.initial_investment, "initial_investment")
    assert_range(scenario.discount_rate, 0, 100, "discount_rate")
    assert_range(scenario.project_duration, 1, 600, "project_duration")
    if int(scenario.project_duration) != scenario.project_duration:
        raise InputValidationError(
            "project_duration",
            f"project_duration must be a whole number of months, got {scenario.project_duration}",
        )
    assert_positive(scenario.yearly_revenue, "yearly_revenue")
    assert_range(scenario.revenue_growth, -100, 1000, "revenue_growth")
    assert_non_negative(scenario.operating_costs, "operating_costs")
    assert_non_negative(scenario.maintenance_costs, "maintenance_costs")
    assert_positive(scenario.multiplier, "multiplier")


def validate_loan(
    principal: float,
    annual_rate: float,
    term_months: int,
    origination_fee_percent: Optional[float] = None,
    monthly_revenue: Optional[float] = None,
    monthly_expenses: Optional[float] = None,
) -> None:
    """Validate amortization inputs."""
    assert_positive(principal, "principal")
    assert_range(annual_rate, 0, 100, "annual_rate")
    assert_range(term_months, 1, 360, "term_months")
    if int(term_months) != term_months:
        raise InputValidationError(
            "term_months", f"term_months must be a whole number of months, got {term_months}"
        )
    if origination_fee_percent is not None:
        assert_range(origination_fee_percent, 0, 10, "origination_fee_percent")
    assert_optional_non_negative(monthly_revenue, "monthly_revenue")
    assert_optional_non_negative(monthly_expenses, "monthly_expenses")


def validate_forecast(forecast) -> None:
    """Validate a ForecastInput for the cash flow forecast engine."""
    assert_finite(forecast.starting_cash, "starting_cash")
    assert_positive(forecast.monthly_revenue, "monthly_revenue")
    assert_positive(forecast.monthly_expenses, "monthly_expenses")
    assert_range(forecast.growth_rate, -100, 1000, "growth_rate")
    assert_range(forecast.expense_growth_rate, -100, 1000, "expense_growth_rate")
    assert_range(forecast.forecast_months, 1, 60, "forecast_months")
    if int(forecast.forecast_months) != forecast.forecast_months:
        raise InputValidationError(
            "forecast_months",
            f"forecast_months must be a whole number, got {forecast.forecast_months}",
        )

    if forecast.seasonal_factors is not None:
        if len(forecast.seasonal_factors) != 12:
            raise InputValidationError(
                "seasonal_factors",
                f"seasonal_factors must have 12 entries, got {len(forecast.seasonal_factors)}",
            )
        for index, factor in enumerate(forecast.seasonal_factors):
            assert_range(factor, 0.1, 3.0, f"seasonal_factors[{index}]")

    _validate_month_amounts(forecast.one_time_expenses, "one_time_expenses", forecast.forecast_months)
    _validate_month_amounts(forecast.expected_receivables, "expected_receivables", forecast.forecast_months)


def _validate_month_amounts(events: Iterable, field: str, forecast_months: int) -> None:
    for index, event in enumerate(events or ()):
        assert_range(event.month, 1, forecast_months, f"{field}[{index}].month")
        assert_non_negative(event.amount, f"{field}[{index}].amount")


def validate_composite(inputs) -> None:
    """
    Validate CompositeInputs.

    Only the field groups that are present are checked, so each index can be
    computed on its own. The maintenance/total hours rule is a single
    combined precondition.
    """
    if inputs.has_friction_inputs():
        assert_non_negative(inputs.manual_hours_per_week, "manual_hours_per_week")
        assert_non_negative(inputs.hourly_cost, "hourly_cost")
        assert_positive(inputs.current_revenue, "current_revenue")
        if inputs.automation_potential is not None:
            assert_range(inputs.automation_potential, 0, 100, "automation_potential")

    if inputs.has_tech_debt_inputs():
        validate_sprint_hours(inputs.maintenance_hours_per_sprint, inputs.total_dev_hours_per_sprint)
        assert_positive(inputs.team_annual_cost, "team_annual_cost")
        assert_non_negative(inputs.incident_cost_per_month, "incident_cost_per_month")

    if inputs.has_efficiency_inputs():
        assert_positive(inputs.current_revenue, "current_revenue")
        assert_positive(inputs.previous_revenue, "previous_revenue")
        assert_positive(inputs.current_burn_rate, "current_burn_rate")
        assert_positive(inputs.previous_burn_rate, "previous_burn_rate")


def validate_sprint_hours(maintenance_hours: float, total_hours: float) -> None:
    """0 <= maintenance hours <= total hours, total hours > 0, as one check."""
    field = "maintenance_hours_per_sprint"
    assert_finite(maintenance_hours, field)
    assert_finite(total_hours, "total_dev_hours_per_sprint")
    if total_hours <= 0 or maintenance_hours < 0 or maintenance_hours > total_hours:
        raise InputValidationError(
            field,
            "maintenance_hours_per_sprint must be between 0 and total_dev_hours_per_sprint "
            f"(> 0), got {maintenance_hours} of {total_hours}",
        )


def validate_break_even(
    fixed_costs: float,
    price_per_unit: float,
    variable_cost_per_unit: float,
    current_sales_units: Optional[float] = None,
    period_months: int = 12,
) -> None:
    """Validate break-even inputs; price must exceed variable cost."""
    assert_non_negative(fixed_costs, "fixed_costs")
    assert_positive(price_per_unit, "price_per_unit")
    assert_non_negative(variable_cost_per_unit, "variable_cost_per_unit")
    if price_per_unit <= variable_cost_per_unit:
        raise InputValidationError(
            "price_per_unit",
            f"price_per_unit must be greater than variable_cost_per_unit "
            f"({price_per_unit} <= {variable_cost_per_unit})",
        )
    assert_optional_non_negative(current_sales_units, "current_sales_units")
    assert_range(period_months, 1, 120, "period_months")


def validate_runway(current_cash: float, monthly_burn_rate: float, planned_fundraising: float = 0.0) -> None:
    assert_non_negative(current_cash, "current_cash")
    assert_positive(monthly_burn_rate, "monthly_burn_rate")
    assert_non_negative(planned_fundraising, "planned_fundraising")


def validate_cash_flows(initial_investment: float, cash_flows, discount_rate: float) -> None:
    """Validate an explicit series of monthly cash flows for NPV/IRR."""
    assert_positive(initial_investment, "initial_investment")
    assert_range(discount_rate, 0, 100, "discount_rate")
    if not cash_flows:
        raise InputValidationError("cash_flows", "cash_flows must not be empty")
    for index, flow in enumerate(cash_flows):
        assert_finite(flow, f"cash_flows[{index}]")


def validate_pricing(pricing) -> None:
    assert_positive(pricing.cost_per_unit, "cost_per_unit")
    assert_range(pricing.desired_margin, 0, 99, "desired_margin")
    if pricing.competitor_price is not None:
        assert_positive(pricing.competitor_price, "competitor_price")
    if pricing.target_volume is not None:
        assert_positive(pricing.target_volume, "target_volume")
    assert_optional_non_negative(pricing.fixed_costs_per_period, "fixed_costs_per_period")


def validate_campaign(campaign, channels: Iterable[str]) -> None:
    """Validate a MarketingCampaign; the channel must have benchmarks."""
    assert_positive(campaign.total_spend, "total_spend")
    assert_positive(campaign.conversions, "conversions")
    assert_positive(campaign.revenue_per_conversion, "revenue_per_conversion")
    assert_optional_non_negative(campaign.impressions, "impressions")
    assert_optional_non_negative(campaign.clicks, "clicks")
    if campaign.channel not in channels:
        raise InputValidationError(
            "channel", f"Unknown marketing channel: {campaign.channel}"
        )


def validate_employee(employee, role_types: Iterable[str]) -> None:
    assert_positive(employee.annual_salary, "annual_salary")
    assert_non_negative(employee.annual_benefits, "annual_benefits")
    assert_non_negative(employee.onboarding_costs, "onboarding_costs")
    assert_non_negative(employee.revenue_generated, "revenue_generated")
    assert_range(employee.hours_per_week, 1, 80, "hours_per_week")
    if employee.role_type not in role_types:
        raise InputValidationError("role_type", f"Unknown role type: {employee.role_type}")


def validate_saas(saas) -> None:
    """Validate SaaSInput. MRR movements may be zero."""
    assert_positive(saas.average_revenue_per_user, "average_revenue_per_user")
    assert_range(saas.churn_rate, 0, 100, "churn_rate")
    assert_positive(saas.cac, "cac")
    assert_range(saas.gross_margin, 0, 100, "gross_margin")
    assert_positive(saas.starting_mrr, "starting_mrr")
    assert_non_negative(saas.expansion_mrr, "expansion_mrr")
    assert_non_negative(saas.churned_mrr, "churned_mrr")
    assert_non_negative(saas.contracted_mrr, "contracted_mrr")
    assert_range(saas.revenue_growth_rate, -100, 1000, "revenue_growth_rate")
    assert_range(saas.profit_margin, -100, 100, "profit_margin")


def validate_cohort(cohort) -> None:
    if not isinstance(cohort.cohort_name, str) or not cohort.cohort_name.strip():
        raise InputValidationError("cohort_name", "cohort_name is required")
    assert_positive(cohort.cohort_revenue, "cohort_revenue")
    assert_non_negative(cohort.direct_costs, "direct_costs")
    assert_positive(cohort.customer_count, "customer_count")
    assert_non_negative(cohort.acquisition_cost, "acquisition_cost")
    assert_positive(cohort.servicing_cost_per_customer, "servicing_cost_per_customer")
