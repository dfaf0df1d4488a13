"""
Financial calculation API endpoints.

These endpoints accept inputs and return calculated results. Validation
errors come back as 400 with the offending field named in the detail.
"""

from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from bizcase.calculations import (
    amortization,
    break_even,
    cashflow,
    cohort,
    employee,
    irr,
    marketing,
    metrics,
    pricing,
    risk,
    saas,
)
from bizcase.calculations.numeric import round_currency
from bizcase.calculations.offload import calculate_with_offload
from bizcase.calculations.validation import validate_cash_flows
from bizcase.config import get_settings

router = APIRouter()


class ScenarioModel(BaseModel):
    """Business case assumptions. Rates are annual percentages."""

    initial_investment: float
    discount_rate: float
    project_duration: int
    yearly_revenue: float
    revenue_growth: float = 0.0
    operating_costs: float = 0.0
    maintenance_costs: float = 0.0
    multiplier: float = 1.0

    def to_input(self) -> metrics.ScenarioInput:
        return metrics.ScenarioInput(**self.model_dump())


class MetricsResponse(BaseModel):
    """Standard metrics for one scenario."""

    roi: float
    npv: float
    irr: float
    irr_converged: bool
    payback_period: float
    payback_achieved: bool
    total_net_cash_flow: float
    monthly_cash_flow: List[float]
    cumulative_cash_flow: List[float]


@router.post("/metrics", response_model=MetricsResponse)
def calculate_metrics(inputs: ScenarioModel):
    """Calculate ROI, NPV, IRR and payback for a scenario."""
    try:
        return calculate_with_offload(inputs.to_input())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/scenarios", response_model=Dict[str, MetricsResponse])
def calculate_scenarios(inputs: ScenarioModel):
    """Calculate expected, best and worst case metrics."""
    try:
        return metrics.calculate_all_scenarios(
            inputs.to_input(), max_workers=get_settings().parallel_max_workers
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class AdjustmentInput(BaseModel):
    """What-if adjustments on top of a base scenario."""

    scenario: ScenarioModel
    sales_adjustment: float = 0.0
    costs_adjustment: float = 0.0
    discount_adjustment: float = 0.0


@router.post("/adjusted", response_model=MetricsResponse)
def calculate_adjusted(inputs: AdjustmentInput):
    """Recalculate a scenario with sales, cost and discount rate adjustments."""
    try:
        return metrics.calculate_scenario_with_adjustments(
            inputs.scenario.to_input(),
            sales_adjustment=inputs.sales_adjustment,
            costs_adjustment=inputs.costs_adjustment,
            discount_adjustment=inputs.discount_adjustment,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class IRRInput(BaseModel):
    """Monthly cash flows after an upfront investment."""

    initial_investment: float
    cash_flows: List[float]
    discount_rate: float = 10.0


class IRRResponse(BaseModel):
    """Response with IRR calculation."""

    irr: float
    irr_converged: bool
    npv: float
    payback_period: float


@router.post("/irr", response_model=IRRResponse)
async def calculate_irr_endpoint(inputs: IRRInput):
    """Calculate IRR, NPV and payback for explicit monthly cash flows."""
    try:
        validate_cash_flows(inputs.initial_investment, inputs.cash_flows, inputs.discount_rate)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = irr.calculate_irr(inputs.initial_investment, inputs.cash_flows)
    npv = irr.calculate_npv(
        inputs.initial_investment,
        inputs.cash_flows,
        metrics.monthly_discount_rate(inputs.discount_rate),
    )
    payback = irr.calculate_payback_period(inputs.initial_investment, inputs.cash_flows)

    return IRRResponse(
        irr=round_currency(result.annual_rate_percent),
        irr_converged=result.converged,
        npv=round_currency(npv),
        payback_period=round_currency(payback),
    )


class LoanModel(BaseModel):
    """Input for a loan calculation."""

    principal: float
    annual_rate: float
    term_months: int
    origination_fee_percent: Optional[float] = None
    monthly_revenue: Optional[float] = None
    monthly_expenses: Optional[float] = None


@router.post("/amortization")
async def calculate_amortization(inputs: LoanModel):
    """Calculate payment, amortization schedule and affordability."""
    try:
        return amortization.calculate_loan(**inputs.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class LoanComparisonInput(BaseModel):
    loans: List[LoanModel]


@router.post("/loans/compare")
async def compare_loans(inputs: LoanComparisonInput):
    """Rank loan offers by total cost including fees."""
    try:
        return amortization.compare_loan_options(
            [amortization.LoanInput(**loan.model_dump()) for loan in inputs.loans]
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class MonthAmountModel(BaseModel):
    month: int
    amount: float
    description: str = ""


class ForecastModel(BaseModel):
    """Input for a cash flow forecast. Growth rates are monthly percentages."""

    starting_cash: float
    monthly_revenue: float
    monthly_expenses: float
    growth_rate: float = 0.0
    expense_growth_rate: float = 0.0
    seasonal_factors: Optional[List[float]] = None
    one_time_expenses: List[MonthAmountModel] = []
    expected_receivables: List[MonthAmountModel] = []
    forecast_months: int = cashflow.DEFAULT_FORECAST_MONTHS
    start_date: Optional[date] = None


@router.post("/forecast")
async def calculate_forecast(inputs: ForecastModel):
    """Project monthly cash and flag deficit months."""
    forecast = cashflow.ForecastInput(
        starting_cash=inputs.starting_cash,
        monthly_revenue=inputs.monthly_revenue,
        monthly_expenses=inputs.monthly_expenses,
        growth_rate=inputs.growth_rate,
        expense_growth_rate=inputs.expense_growth_rate,
        seasonal_factors=inputs.seasonal_factors,
        one_time_expenses=[cashflow.MonthAmount(**e.model_dump()) for e in inputs.one_time_expenses],
        expected_receivables=[
            cashflow.MonthAmount(**r.model_dump()) for r in inputs.expected_receivables
        ],
        forecast_months=inputs.forecast_months,
        start_date=inputs.start_date,
    )
    try:
        result = cashflow.generate_forecast(forecast)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result["alerts"] = cashflow.forecast_alerts(result)
    return result


class BreakEvenModel(BaseModel):
    fixed_costs: float
    price_per_unit: float
    variable_cost_per_unit: float
    current_sales_units: Optional[float] = None
    period_months: int = 12


@router.post("/break-even")
async def calculate_break_even(inputs: BreakEvenModel):
    """Calculate break-even units, revenue and margin of safety."""
    try:
        return break_even.calculate_break_even(**inputs.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class RunwayModel(BaseModel):
    current_cash: float
    monthly_burn_rate: float
    planned_fundraising: float = 0.0
    as_of: Optional[date] = None
    monthly_churn_rate: Optional[float] = None


@router.post("/runway")
async def calculate_runway(inputs: RunwayModel):
    """Calculate cash runway and, optionally, six-month churn impact."""
    try:
        result = risk.calculate_runway(
            inputs.current_cash,
            inputs.monthly_burn_rate,
            inputs.planned_fundraising,
            as_of=inputs.as_of,
        )
        if inputs.monthly_churn_rate is not None:
            churn_impact = risk.calculate_churn_impact(inputs.monthly_churn_rate)
            result["churn_impact_6mo"] = churn_impact
            result["churn_impact_status"] = risk.churn_impact_status(churn_impact)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return result


class PricingModel(BaseModel):
    cost_per_unit: float
    desired_margin: float
    competitor_price: Optional[float] = None
    target_volume: Optional[float] = None
    fixed_costs_per_period: Optional[float] = None


@router.post("/pricing")
async def calculate_pricing(inputs: PricingModel):
    """Calculate target, recommended and strategy prices."""
    pricing_input = pricing.PricingInput(**inputs.model_dump())
    try:
        result = pricing.calculate_pricing(pricing_input)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result["recommendations"] = pricing.pricing_recommendations(result, pricing_input)
    return result


class CampaignModel(BaseModel):
    total_spend: float
    conversions: float
    revenue_per_conversion: float
    channel: str = "other"
    impressions: Optional[float] = None
    clicks: Optional[float] = None


@router.post("/marketing-roi")
async def calculate_marketing_roi(inputs: CampaignModel):
    """Calculate campaign ROI, ROAS and acquisition cost."""
    campaign = marketing.MarketingCampaign(**inputs.model_dump())
    try:
        result = marketing.calculate_marketing_roi(campaign)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result["recommendations"] = marketing.marketing_recommendations(result, campaign)
    return result


class ChannelComparisonInput(BaseModel):
    campaigns: List[CampaignModel]


@router.post("/marketing-roi/compare")
async def compare_marketing_channels(inputs: ChannelComparisonInput):
    """Rank campaigns by ROI and flag budget to shift."""
    try:
        return marketing.compare_channels(
            [marketing.MarketingCampaign(**c.model_dump()) for c in inputs.campaigns]
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class EmployeeModel(BaseModel):
    annual_salary: float
    annual_benefits: float = 0.0
    onboarding_costs: float = 0.0
    revenue_generated: float
    hours_per_week: float = 40
    role_type: str = "operations"


@router.post("/employee-roi")
async def calculate_employee_roi(inputs: EmployeeModel):
    """Calculate first-year ROI and productivity for a hire."""
    try:
        result = employee.calculate_employee_roi(employee.EmployeeInput(**inputs.model_dump()))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result["recommendations"] = employee.employee_recommendations(result)
    return result


class SalaryRangeInput(BaseModel):
    expected_revenue: float
    target_roi: float = 50.0


@router.post("/employee-roi/salary-range")
async def calculate_salary_range(inputs: SalaryRangeInput):
    """Salary range that keeps a hire at the target ROI."""
    try:
        return employee.calculate_optimal_salary_range(inputs.expected_revenue, inputs.target_roi)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class SaaSModel(BaseModel):
    average_revenue_per_user: float
    churn_rate: float
    cac: float
    gross_margin: float
    starting_mrr: float
    expansion_mrr: float = 0.0
    churned_mrr: float = 0.0
    contracted_mrr: float = 0.0
    revenue_growth_rate: float = 0.0
    profit_margin: float = 0.0


@router.post("/saas")
async def calculate_saas_metrics(inputs: SaaSModel):
    """Calculate LTV/CAC, CAC payback, NRR and Rule of 40."""
    try:
        return saas.calculate_saas_metrics(saas.SaaSInput(**inputs.model_dump()))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class CohortModel(BaseModel):
    cohort_name: str
    cohort_revenue: float
    direct_costs: float
    customer_count: int
    acquisition_cost: float
    servicing_cost_per_customer: float


@router.post("/cohort")
async def calculate_cohort_metrics(inputs: CohortModel):
    """Calculate contribution margin and profitability for a customer cohort."""
    try:
        result = cohort.calculate_cohort_metrics(cohort.CohortInput(**inputs.model_dump()))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result["recommendations"] = cohort.cohort_recommendations(
        result["contribution_margin"], result["profitability_index"]
    )
    return result
