"""
Tests for the financial calculation engine.
"""

import math
from dataclasses import replace
from datetime import date

import pytest

from bizcase.calculations.amortization import (
    LoanInput,
    calculate_affordability,
    calculate_loan,
    calculate_payment,
    compare_loan_options,
    generate_amortization_schedule,
)
from bizcase.calculations.break_even import calculate_break_even, margin_of_safety_status
from bizcase.calculations.cashflow import (
    ForecastInput,
    MonthAmount,
    forecast_alerts,
    generate_forecast,
    month_label,
)
from bizcase.calculations.irr import (
    DEFAULT_GUESS,
    annualize_monthly_rate,
    calculate_irr,
    calculate_npv,
    calculate_payback_period,
)
from bizcase.calculations.metrics import (
    ScenarioInput,
    build_monthly_cash_flows,
    calculate_all_scenarios,
    calculate_metrics,
    calculate_scenario_with_adjustments,
)
from bizcase.calculations.numeric import round_currency, round_value, safe_divide
from bizcase.calculations.risk import calculate_churn_impact, calculate_runway, churn_impact_status
from bizcase.calculations.validation import InputValidationError


class TestNumeric:
    """Test rounding and safe division helpers."""

    def test_round_half_away_from_zero(self):
        assert round_value(0.125, 2) == 0.13
        assert round_value(-0.125, 2) == -0.13
        assert round_currency(2.5) == 2.5

    def test_round_keeps_non_finite(self):
        assert math.isinf(round_value(float("inf"), 2))

    def test_safe_divide_default(self):
        assert safe_divide(10, 0) == 0.0
        assert safe_divide(10, 0, default=-1) == -1
        assert safe_divide(10, 4) == 2.5


class TestIRRCalculations:
    """Test NPV, IRR and payback functions."""

    def test_npv_zero_rate_is_plain_sum(self):
        """At a zero rate NPV is exactly -investment + sum of flows."""
        assert calculate_npv(100, [50, 50], 0) == 0
        assert calculate_npv(1000, [300, 300, 300], 0) == -100

    def test_npv_decreases_with_rate(self):
        """Positive flows are worth less the higher the discount rate."""
        flows = [100] * 24
        assert calculate_npv(1000, flows, 0.005) > calculate_npv(1000, flows, 0.01)
        assert calculate_npv(1000, flows, 0.01) > calculate_npv(1000, flows, 0.02)

    def test_irr_single_period(self):
        """Investment of 1000 returning 1100 next month is 10% monthly."""
        result = calculate_irr(1000, [1100])
        assert result.converged
        assert abs(result.monthly_rate - 0.10) < 1e-6
        assert abs(result.annual_rate_percent - (1.1 ** 12 - 1) * 100) < 1e-3

    def test_irr_zeroes_npv(self):
        """NPV at the solved IRR is effectively zero."""
        flows = [300] * 48
        result = calculate_irr(10000, flows)
        assert result.converged
        assert abs(calculate_npv(10000, flows, result.monthly_rate)) < 1e-3

    def test_irr_negative_returns(self):
        """Total return below investment gives a negative IRR."""
        result = calculate_irr(1000, [100] * 8)
        assert result.converged
        assert result.annual_rate_percent < 0

    def test_irr_non_convergence_returns_estimate(self):
        """Outflow-only projects never converge but still return a finite estimate."""
        result = calculate_irr(1000, [-10] * 12)
        assert result.converged is False
        assert math.isfinite(result.annual_rate_percent)

    def test_irr_out_of_bounds_resets_to_guess(self):
        result = calculate_irr(1000, [-10] * 12)
        assert result.reset
        assert result.monthly_rate == DEFAULT_GUESS

    def test_payback_interpolates(self):
        """Payback falls halfway through the third month."""
        assert calculate_payback_period(100, [40, 40, 40]) == 2.5

    def test_payback_never_reached(self):
        """Payback equals the horizon when it is never reached."""
        assert calculate_payback_period(100, [10, 10]) == 2.0

    def test_annualize_monthly_rate(self):
        assert annualize_monthly_rate(0) == 0
        assert abs(annualize_monthly_rate(0.01) - 0.126825) < 1e-6

    def test_irr_underflow_stays_finite(self):
        """Long horizons that underflow the discount factors still give a finite rate."""
        result = calculate_irr(10_000_000, [10_000 / 12] * 600)
        assert math.isfinite(result.monthly_rate)
        assert math.isfinite(result.annual_rate_percent)


class TestMetrics:
    """Test the standard metrics engine."""

    def test_cash_flow_series_length(self, base_scenario):
        result = calculate_metrics(base_scenario)
        assert len(result["monthly_cash_flow"]) == 36
        assert len(result["cumulative_cash_flow"]) == 36

    def test_revenue_compounds_monthly(self, base_scenario):
        flows = build_monthly_cash_flows(replace(base_scenario, operating_costs=0, maintenance_costs=0))
        assert flows[0] == pytest.approx(10000)
        assert flows[1] == pytest.approx(10000 * (1 + 0.05 / 12))

    def test_cumulative_matches_total(self, base_scenario):
        result = calculate_metrics(base_scenario)
        expected = -base_scenario.initial_investment + result["total_net_cash_flow"]
        assert abs(result["cumulative_cash_flow"][-1] - expected) < 0.02

    def test_roi_from_npv(self, base_scenario):
        result = calculate_metrics(base_scenario)
        expected = result["npv"] / base_scenario.initial_investment * 100
        assert abs(result["roi"] - expected) < 0.01

    def test_profitable_scenario(self, base_scenario):
        result = calculate_metrics(base_scenario)
        assert result["npv"] > 0
        assert result["irr_converged"]
        assert result["payback_achieved"]
        assert 0 < result["payback_period"] < 36

    def test_zero_discount_rate_npv(self, base_scenario):
        """With no discounting NPV is the undiscounted net position."""
        result = calculate_metrics(replace(base_scenario, discount_rate=0))
        expected = result["total_net_cash_flow"] - base_scenario.initial_investment
        assert abs(result["npv"] - expected) < 0.01

    def test_npv_increases_with_revenue(self, base_scenario):
        low = calculate_metrics(base_scenario)["npv"]
        high = calculate_metrics(replace(base_scenario, yearly_revenue=150000))["npv"]
        assert high > low

    def test_payback_not_achieved(self, base_scenario):
        """Payback equals the project duration when never reached."""
        result = calculate_metrics(replace(base_scenario, yearly_revenue=60000, revenue_growth=0))
        assert result["payback_period"] == 36
        assert result["payback_achieved"] is False

    def test_payback_achieved_when_crossing_is_later_lost(self):
        """Shrinking revenue can cross zero early and fall back below it."""
        scenario = ScenarioInput(1000, 10, 60, 120000, -100, 60000, 0)
        result = calculate_metrics(scenario)
        assert result["payback_period"] == 0.2
        assert result["payback_achieved"] is True
        assert result["cumulative_cash_flow"][-1] < 0

    def test_long_horizon_irr_is_finite(self):
        result = calculate_metrics(ScenarioInput(10_000_000, 10, 600, 10_000, 0, 0, 0))
        assert math.isfinite(result["irr"])

    def test_all_scenarios_ordering(self, base_scenario):
        results = calculate_all_scenarios(base_scenario)
        assert set(results) == {"expected", "best", "worst"}
        assert results["best"]["npv"] > results["expected"]["npv"] > results["worst"]["npv"]

    def test_all_scenarios_parallel_matches_serial(self, base_scenario):
        assert calculate_all_scenarios(base_scenario, max_workers=3) == calculate_all_scenarios(
            base_scenario
        )

    def test_explicit_multiplier_overrides_cases(self, base_scenario):
        results = calculate_all_scenarios(replace(base_scenario, multiplier=1.2))
        assert results["best"] == results["worst"]

    def test_adjusted_sales(self, base_scenario):
        base = calculate_metrics(base_scenario)
        adjusted = calculate_scenario_with_adjustments(base_scenario, sales_adjustment=10)
        assert adjusted["npv"] > base["npv"]

    def test_adjusted_discount(self, base_scenario):
        base = calculate_metrics(base_scenario)
        adjusted = calculate_scenario_with_adjustments(base_scenario, discount_adjustment=5)
        assert adjusted["npv"] < base["npv"]

    def test_adjustment_out_of_range(self, base_scenario):
        with pytest.raises(InputValidationError) as exc:
            calculate_scenario_with_adjustments(base_scenario, sales_adjustment=60)
        assert exc.value.field == "sales_adjustment"

    def test_invalid_investment(self, base_scenario):
        with pytest.raises(InputValidationError) as exc:
            calculate_metrics(replace(base_scenario, initial_investment=0))
        assert exc.value.field == "initial_investment"


class TestAmortization:
    """Test loan amortization calculations."""

    def test_calculate_payment(self):
        """$100k at 8% over 5 years."""
        payment = calculate_payment(100000, 8, 60)
        assert 2000 < payment < 2100

    def test_zero_rate_payment(self):
        assert calculate_payment(12000, 0, 12) == 1000

    def test_schedule_closes_to_zero(self):
        """Last balance is zero and rounded principal sums to the loan."""
        schedule = generate_amortization_schedule(100000, 8, 60)
        assert len(schedule) == 60
        assert schedule[-1]["balance"] == 0
        assert abs(sum(row["principal"] for row in schedule) - 100000) < 0.005

    def test_schedule_balance_decreases(self):
        schedule = generate_amortization_schedule(50000, 6, 24)
        balances = [row["balance"] for row in schedule]
        assert balances == sorted(balances, reverse=True)

    def test_loan_totals(self):
        result = calculate_loan(100000, 8, 60, origination_fee_percent=2)
        assert abs(result["total_interest"] - (result["total_payment"] - 100000)) < 0.01
        assert abs(result["total_cost_with_fees"] - (result["total_payment"] + 2000)) < 0.01
        assert result["effective_annual_rate"] > 8
        assert result["payoff_summary"]["halfway_point"] == 30

    def test_affordable_loan(self):
        result = calculate_loan(100000, 8, 60, monthly_revenue=20000, monthly_expenses=10000)
        affordability = result["affordability"]
        assert affordability["is_affordable"] is True
        assert affordability["max_affordable_payment"] == 4000

    def test_unaffordable_payment(self):
        """Payment above 40% of net cash flow is not affordable."""
        affordability = calculate_affordability(2027.64, 20000, 15000)
        assert affordability["debt_service_ratio"] == 40.55
        assert affordability["is_affordable"] is False

    def test_affordability_negative_net(self):
        affordability = calculate_affordability(1000, 10000, 12000)
        assert affordability["debt_service_ratio"] is None
        assert affordability["is_affordable"] is False
        assert affordability["cushion_after_payment"] == -3000

    def test_affordability_unknown(self):
        assert calculate_affordability(1000, None, 5000)["is_affordable"] is None

    def test_compare_loans(self):
        result = compare_loan_options(
            [LoanInput(100000, 9, 60), LoanInput(100000, 7, 60, origination_fee_percent=1)]
        )
        assert result["best_option"] == 1
        assert result["savings"] > 0

    def test_compare_no_loans(self):
        with pytest.raises(InputValidationError):
            compare_loan_options([])

    def test_invalid_term(self):
        with pytest.raises(InputValidationError) as exc:
            calculate_loan(100000, 8, 361)
        assert exc.value.field == "term_months"


class TestCashFlowForecast:
    """Test cash flow forecast generation."""

    def test_early_deficit(self):
        """Expenses above revenue push a small balance negative in month 1."""
        result = generate_forecast(
            ForecastInput(starting_cash=10000, monthly_revenue=20000, monthly_expenses=35000)
        )
        assert result["months_until_deficit"] is not None
        assert result["months_until_deficit"] <= 2
        assert result["monthly_forecasts"][0]["is_deficit"] is True
        assert result["is_healthy"] is False
        assert result["minimum_cash_reserve_needed"] == 45000
        assert any(alert.startswith("CRITICAL") for alert in forecast_alerts(result))

    def test_healthy_forecast(self):
        result = generate_forecast(
            ForecastInput(starting_cash=50000, monthly_revenue=20000, monthly_expenses=15000)
        )
        assert result["deficit_months"] == []
        assert result["minimum_cash_reserve_needed"] == 30000
        assert result["lowest_cash_month"] == 0
        assert result["ending_cash_balance"] == 110000
        assert result["is_healthy"] is True

    def test_growth_rate(self):
        result = generate_forecast(
            ForecastInput(
                starting_cash=0, monthly_revenue=20000, monthly_expenses=10000, growth_rate=10
            )
        )
        assert result["monthly_forecasts"][1]["revenue"] == 22000

    def test_seasonal_factors_cycle(self):
        """Seasonality repeats every 12 months."""
        factors = [1.0] * 11 + [2.0]
        result = generate_forecast(
            ForecastInput(
                starting_cash=0,
                monthly_revenue=20000,
                monthly_expenses=10000,
                seasonal_factors=factors,
                forecast_months=24,
            )
        )
        rows = result["monthly_forecasts"]
        assert rows[10]["revenue"] == 20000
        assert rows[11]["revenue"] == 40000
        assert rows[23]["revenue"] == 40000

    def test_one_time_events(self):
        result = generate_forecast(
            ForecastInput(
                starting_cash=0,
                monthly_revenue=20000,
                monthly_expenses=15000,
                one_time_expenses=[MonthAmount(3, 10000, "Equipment")],
                expected_receivables=[MonthAmount(4, 5000)],
            )
        )
        rows = result["monthly_forecasts"]
        assert rows[2]["expenses"] == 25000
        assert rows[3]["revenue"] == 25000

    def test_month_labels_follow_start_date(self):
        assert month_label(1) == "Jan"
        assert month_label(13) == "Jan"
        assert month_label(1, date(2025, 11, 1)) == "Nov"
        assert month_label(3, date(2025, 11, 1)) == "Jan"

    def test_seasonal_factor_count(self):
        with pytest.raises(InputValidationError) as exc:
            generate_forecast(
                ForecastInput(
                    starting_cash=0,
                    monthly_revenue=20000,
                    monthly_expenses=10000,
                    seasonal_factors=[1.0] * 11,
                )
            )
        assert exc.value.field == "seasonal_factors"

    def test_event_outside_horizon(self):
        with pytest.raises(InputValidationError):
            generate_forecast(
                ForecastInput(
                    starting_cash=0,
                    monthly_revenue=20000,
                    monthly_expenses=10000,
                    one_time_expenses=[MonthAmount(13, 1000)],
                )
            )


class TestBreakEven:
    """Test break-even analysis."""

    def test_break_even_rounds_units_up(self):
        result = calculate_break_even(50000, 25, 10)
        assert result["break_even_units"] == 3334
        assert result["break_even_revenue"] == 83350
        assert result["contribution_margin_per_unit"] == 15
        assert result["contribution_margin_ratio"] == 60
        assert result["units_per_month"] == 278

    def test_margin_of_safety(self):
        result = calculate_break_even(50000, 25, 10, current_sales_units=4000)
        assert result["margin_of_safety_units"] == 666
        assert result["margin_of_safety"] == 16.65
        assert result["is_above_break_even"] is True
        assert result["margin_of_safety_status"] == "acceptable"

    def test_margin_of_safety_status_bands(self):
        assert calculate_break_even(50000, 25, 10)["margin_of_safety_status"] is None
        assert margin_of_safety_status(30) == "healthy"
        assert margin_of_safety_status(5) == "warning"
        below = calculate_break_even(50000, 25, 10, current_sales_units=3000)
        assert below["margin_of_safety"] < 0
        assert below["margin_of_safety_status"] == "critical"

    def test_price_must_exceed_variable_cost(self):
        with pytest.raises(InputValidationError) as exc:
            calculate_break_even(50000, 10, 10)
        assert exc.value.field == "price_per_unit"


class TestRisk:
    """Test runway and churn impact."""

    def test_runway(self):
        result = calculate_runway(60000, 5000, as_of=date(2025, 1, 31))
        assert result["runway_months"] == 12
        assert result["zero_cash_date"] == "2026-01-31"
        assert result["status"] == "healthy"

    def test_runway_status_bands(self):
        assert calculate_runway(30000, 5000)["status"] == "warning"
        assert calculate_runway(20000, 5000)["status"] == "critical"

    def test_runway_includes_fundraising(self):
        assert calculate_runway(30000, 5000, planned_fundraising=30000)["runway_months"] == 12

    def test_runway_requires_burn(self):
        with pytest.raises(InputValidationError):
            calculate_runway(60000, 0)

    def test_churn_impact(self):
        assert calculate_churn_impact(5) == 26.49
        assert calculate_churn_impact(0) == 0

    def test_churn_impact_status(self):
        assert churn_impact_status(calculate_churn_impact(1)) == "optimal"
        assert churn_impact_status(calculate_churn_impact(3)) == "acceptable"
        assert churn_impact_status(calculate_churn_impact(5)) == "warning"
        assert churn_impact_status(calculate_churn_impact(10)) == "critical"
