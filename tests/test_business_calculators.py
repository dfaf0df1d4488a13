"""
Tests for the pricing, marketing, hiring, SaaS and cohort calculators.
"""

from dataclasses import replace

import pytest

from bizcase.calculations.cohort import (
    CohortInput,
    calculate_cohort_metrics,
    cohort_recommendations,
)
from bizcase.calculations.employee import (
    EmployeeInput,
    calculate_employee_roi,
    calculate_optimal_salary_range,
    employee_recommendations,
)
from bizcase.calculations.marketing import (
    MarketingCampaign,
    calculate_marketing_roi,
    compare_channels,
    marketing_recommendations,
)
from bizcase.calculations.pricing import (
    PricingInput,
    calculate_pricing,
    pricing_recommendations,
)
from bizcase.calculations.saas import SaaSInput, calculate_saas_metrics, classify_saas_metric
from bizcase.calculations.validation import InputValidationError


@pytest.fixture
def facebook_campaign():
    return MarketingCampaign(
        total_spend=5000,
        conversions=100,
        revenue_per_conversion=150,
        channel="facebook",
        impressions=50000,
        clicks=2000,
    )


class TestPricing:
    """Test price point calculations."""

    def test_target_margin_price(self):
        result = calculate_pricing(PricingInput(cost_per_unit=15, desired_margin=40))
        assert result["target_margin_price"] == 25
        assert result["markup_percentage"] == 66.67
        assert result["gross_profit_per_unit"] == 10
        assert result["break_even_price"] is None
        assert result["competitor_comparison"] is None
        assert result["price_strategies"]["competitive"] == 25

    def test_competitor_pulls_recommendation(self):
        result = calculate_pricing(
            PricingInput(
                cost_per_unit=15,
                desired_margin=40,
                competitor_price=30,
                target_volume=1000,
                fixed_costs_per_period=5000,
            )
        )
        assert result["recommended_price"] == 26.5
        assert result["recommended_price_range"]["low"] == 23.85
        assert result["break_even_price"] == 20
        assert result["competitor_comparison"] == {
            "difference": -5,
            "percentage_diff": -16.67,
            "position": "below",
        }
        assert result["price_strategies"]["premium"] == pytest.approx(28.75)
        assert result["price_strategies"]["penetration"] == pytest.approx(21.25)

    def test_recommendation_floor(self):
        """The recommended price never drops below cost plus 10%."""
        result = calculate_pricing(PricingInput(cost_per_unit=100, desired_margin=0))
        assert result["recommended_price"] == 110

    def test_recommendations_mention_position(self):
        inputs = PricingInput(cost_per_unit=15, desired_margin=40, competitor_price=30)
        recommendations = pricing_recommendations(calculate_pricing(inputs), inputs)
        assert "Your price is 16.7% below competitors." in recommendations
        assert recommendations[-1] == "At the target price you earn $10.00 per unit."

    def test_margin_bounds(self):
        with pytest.raises(InputValidationError) as exc:
            calculate_pricing(PricingInput(cost_per_unit=15, desired_margin=100))
        assert exc.value.field == "desired_margin"


class TestMarketingROI:
    """Test campaign ROI and channel comparison."""

    def test_campaign_metrics(self, facebook_campaign):
        result = calculate_marketing_roi(facebook_campaign)
        assert result["roi_percentage"] == 200
        assert result["roas"] == 3
        assert result["cost_per_acquisition"] == 50
        assert result["cost_per_click"] == 2.5
        assert result["conversion_rate"] == 5
        assert result["click_through_rate"] == 4
        assert result["lifetime_value_to_cac"] == 9
        assert result["break_even_conversions"] == 34
        assert result["is_profitable"] is True

    def test_benchmark_comparison(self, facebook_campaign):
        result = calculate_marketing_roi(facebook_campaign)
        assert result["channel_efficiency"] == "average"
        assert result["benchmark_comparison"] == {
            "cac_vs_benchmark": "same",
            "conversion_vs_benchmark": "better",
        }

    def test_excellent_channel(self):
        result = calculate_marketing_roi(
            MarketingCampaign(
                total_spend=1000, conversions=100, revenue_per_conversion=50, channel="email"
            )
        )
        assert result["channel_efficiency"] == "excellent"
        assert result["cost_per_click"] is None
        assert result["benchmark_comparison"]["conversion_vs_benchmark"] == "same"

    def test_losing_campaign(self):
        campaign = MarketingCampaign(
            total_spend=5000, conversions=20, revenue_per_conversion=100, channel="google"
        )
        result = calculate_marketing_roi(campaign)
        assert result["channel_efficiency"] == "poor"
        assert result["benchmark_comparison"]["cac_vs_benchmark"] == "worse"
        assert "Need 30 more conversions to break even." in marketing_recommendations(
            result, campaign
        )

    def test_unknown_channel(self, facebook_campaign):
        with pytest.raises(InputValidationError) as exc:
            calculate_marketing_roi(replace(facebook_campaign, channel="billboard"))
        assert exc.value.field == "channel"

    def test_compare_channels(self, facebook_campaign):
        losing = MarketingCampaign(
            total_spend=5000, conversions=20, revenue_per_conversion=100, channel="google"
        )
        result = compare_channels([losing, facebook_campaign])
        assert result["best_channel"] == "facebook"
        assert result["worst_channel"] == "google"
        assert [r["channel"] for r in result["results"]] == ["facebook", "google"]
        assert result["recommendations"][-1] == "Consider shifting budget from google to facebook."

    def test_compare_requires_campaigns(self):
        with pytest.raises(InputValidationError):
            compare_channels([])


class TestEmployeeROI:
    """Test hiring ROI."""

    hire = EmployeeInput(
        annual_salary=60000,
        annual_benefits=12000,
        onboarding_costs=5000,
        revenue_generated=150000,
        hours_per_week=40,
    )

    def test_first_year_roi(self):
        result = calculate_employee_roi(self.hire)
        assert result["total_cost"] == 77000
        assert result["roi_percentage"] == 94.81
        assert result["revenue_per_dollar_spent"] == 1.95
        assert result["cost_per_hour"] == 34.62
        assert result["revenue_per_hour"] == 72.12
        assert result["productivity_ratio"] == 2.08
        assert result["payback_months"] == 0.8
        assert result["is_worth_hiring"] is True

    def test_role_benchmarks(self):
        result = calculate_employee_roi(self.hire)
        assert result["benchmark_comparison"] == {
            "cost_efficiency": "below",
            "productivity_level": "average",
        }

    def test_unprofitable_hire(self):
        result = calculate_employee_roi(replace(self.hire, revenue_generated=50000))
        assert result["is_worth_hiring"] is False
        assert result["payback_months"] is None
        assert employee_recommendations(result)[0].startswith("This hire may not")

    def test_hours_bound(self):
        with pytest.raises(InputValidationError) as exc:
            calculate_employee_roi(replace(self.hire, hours_per_week=90))
        assert exc.value.field == "hours_per_week"

    def test_unknown_role(self):
        with pytest.raises(InputValidationError) as exc:
            calculate_employee_roi(replace(self.hire, role_type="executive"))
        assert exc.value.field == "role_type"

    def test_optimal_salary_range(self):
        result = calculate_optimal_salary_range(150000)
        assert result["max_total_cost"] == 100000
        assert result["recommended_salary_range"] == {"min": 70833, "max": 83333}
        assert result["assumed_benefits_ratio"] == 0.2


class TestSaaSMetrics:
    """Test subscription unit economics."""

    account = SaaSInput(
        average_revenue_per_user=100,
        churn_rate=5,
        cac=500,
        gross_margin=80,
        starting_mrr=10000,
        expansion_mrr=1500,
        churned_mrr=500,
        contracted_mrr=200,
        revenue_growth_rate=30,
        profit_margin=15,
    )

    def test_metrics(self):
        result = calculate_saas_metrics(self.account)
        assert result["ltv"] == 1600
        assert result["ltv_cac_ratio"] == 3.2
        assert result["payback_months"] == 6.25
        assert result["nrr"] == 108
        assert result["rule_of_40"] == 45

    def test_status_bands(self):
        status = calculate_saas_metrics(self.account)["status"]
        assert status == {
            "ltv_cac_ratio": "acceptable",
            "payback_months": "optimal",
            "nrr": "acceptable",
            "rule_of_40": "acceptable",
        }
        assert classify_saas_metric("payback_months", 24) == "concerning"

    def test_zero_churn_ltv(self):
        assert calculate_saas_metrics(replace(self.account, churn_rate=0))["ltv"] == 0

    def test_churn_bounds(self):
        with pytest.raises(InputValidationError) as exc:
            calculate_saas_metrics(replace(self.account, churn_rate=120))
        assert exc.value.field == "churn_rate"


class TestCohortMetrics:
    """Test cohort profitability."""

    cohort = CohortInput(
        cohort_name="Enterprise Q1",
        cohort_revenue=500000,
        direct_costs=200000,
        customer_count=50,
        acquisition_cost=5000,
        servicing_cost_per_customer=200,
    )

    def test_profitable_cohort(self):
        result = calculate_cohort_metrics(self.cohort)
        assert result["contribution_margin"] == 60
        assert result["margin_per_customer"] == 6000
        assert result["profitability_index"] == 5
        assert result["is_losing_money"] is False
        recommendations = cohort_recommendations(60, 5)
        assert len(recommendations) == 2
        assert recommendations[0].startswith("High-value cohort")

    def test_losing_cohort(self):
        result = calculate_cohort_metrics(replace(self.cohort, direct_costs=600000))
        assert result["contribution_margin"] == -20
        assert result["profitability_index"] == -35
        assert result["is_losing_money"] is True
        recommendations = cohort_recommendations(
            result["contribution_margin"], result["profitability_index"]
        )
        assert recommendations[0].startswith("CRITICAL")
        assert recommendations[-1].startswith("Acquisition costs exceed")

    def test_name_required(self):
        with pytest.raises(InputValidationError) as exc:
            calculate_cohort_metrics(replace(self.cohort, cohort_name="  "))
        assert exc.value.field == "cohort_name"
