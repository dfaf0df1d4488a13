"""
Analysis API endpoints: sensitivity, composite indices and benchmarks.
"""

from dataclasses import asdict
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from bizcase.api.calculations import ScenarioModel
from bizcase.calculations import benchmarks, break_even, composite, sensitivity
from bizcase.calculations.benchmarks import ReferenceNotFoundError
from bizcase.config import get_settings
from bizcase.reference.industry import (
    BUSINESS_TEMPLATES,
    BenchmarkRange,
    get_available_industries,
    get_business_template,
    get_industry_benchmarks,
)

router = APIRouter()


class SensitivityInput(BaseModel):
    """Base scenario and the sweep to run over it."""

    scenario: ScenarioModel
    variables: List[str] = list(sensitivity.DEFAULT_VARIABLES)
    variations: List[float] = list(sensitivity.DEFAULT_VARIATIONS)


class TornadoInput(SensitivityInput):
    metric: str = "npv"


@router.post("/sensitivity")
def run_sensitivity(inputs: SensitivityInput):
    """Sensitivity matrix of NPV and ROI per variable and variation."""
    try:
        return sensitivity.sweep(
            inputs.scenario.to_input(),
            inputs.variables,
            inputs.variations,
            max_workers=get_settings().parallel_max_workers,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/tornado")
def run_tornado(inputs: TornadoInput):
    """Tornado dataset ranked by impact range, widest first."""
    try:
        return sensitivity.generate_tornado(
            inputs.scenario.to_input(),
            inputs.variables,
            inputs.variations,
            metric=inputs.metric,
            max_workers=get_settings().parallel_max_workers,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class CompositeModel(BaseModel):
    """Operational inputs; supply any complete group."""

    manual_hours_per_week: Optional[float] = None
    hourly_cost: Optional[float] = None
    automation_potential: Optional[float] = None
    maintenance_hours_per_sprint: Optional[float] = None
    total_dev_hours_per_sprint: Optional[float] = None
    team_annual_cost: Optional[float] = None
    incident_cost_per_month: Optional[float] = None
    current_revenue: Optional[float] = None
    previous_revenue: Optional[float] = None
    current_burn_rate: Optional[float] = None
    previous_burn_rate: Optional[float] = None


@router.post("/composite")
async def calculate_composite(inputs: CompositeModel):
    """Calculate OFI, TFDI and SER from whichever inputs are present."""
    try:
        return composite.calculate_composite_indices(
            composite.CompositeInputs(**inputs.model_dump())
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class BenchmarkRangeModel(BaseModel):
    p25: float
    median: float
    p75: float
    optimal: float


class BenchmarkCompareInput(BaseModel):
    value: float
    benchmark: BenchmarkRangeModel
    higher_is_better: bool = True


@router.post("/benchmarks/compare")
async def compare_to_benchmark(inputs: BenchmarkCompareInput):
    """Percentile bucket of a value against supplied benchmark bands."""
    bands = BenchmarkRange(**inputs.benchmark.model_dump())
    try:
        percentile = benchmarks.compare(inputs.value, bands, inputs.higher_is_better)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "percentile": percentile,
        "score": benchmarks.score_metric(inputs.value, bands, inputs.higher_is_better),
    }


class IndustryCompareInput(BaseModel):
    metric: str
    value: float
    industry: Optional[str] = None


@router.post("/benchmarks/industry")
async def compare_to_industry(inputs: IndustryCompareInput):
    """Compare a metric value to an industry's benchmark bands."""
    industry = inputs.industry or get_settings().default_industry
    try:
        return benchmarks.compare_to_industry(industry, inputs.metric, inputs.value)
    except ReferenceNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class HealthScoreInput(BaseModel):
    metrics: Dict[str, Optional[float]]
    industry: Optional[str] = None


@router.post("/benchmarks/health-score")
async def health_score(inputs: HealthScoreInput):
    """Weighted business health score against an industry."""
    industry = inputs.industry or get_settings().default_industry
    try:
        return benchmarks.calculate_health_score(industry, inputs.metrics)
    except ReferenceNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/industries")
async def list_industries():
    """Available industries with their benchmark bands."""
    return [
        {
            "industry": industry,
            "display_name": get_industry_benchmarks(industry).display_name,
            "metrics": {
                name: asdict(bands)
                for name, bands in get_industry_benchmarks(industry).metrics.items()
            },
        }
        for industry in get_available_industries()
    ]


def _template_dict(template) -> Dict:
    return {
        "id": template.id,
        "name": template.name,
        "industry": template.industry,
        "description": template.description,
        "default_inputs": asdict(template.default_inputs),
        "benchmarks": {name: asdict(band) for name, band in template.benchmarks.items()},
    }


@router.get("/templates")
async def list_templates():
    """Business templates: default inputs and benchmark bands per industry."""
    return [_template_dict(template) for template in BUSINESS_TEMPLATES]


class TemplateAssessInput(BaseModel):
    metric: str
    value: float


@router.post("/templates/{template_id}/assess")
async def assess_template_metric(template_id: str, inputs: TemplateAssessInput):
    """Healthy / warning / critical status of a value against a template band."""
    try:
        return benchmarks.assess_metric_health(template_id, inputs.metric, inputs.value)
    except ReferenceNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/templates/{template_id}")
async def get_template(template_id: str):
    template = get_business_template(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Template not found: {template_id}")
    return _template_dict(template)


class TemplateBreakEvenInput(BaseModel):
    """Overrides for the template's default break-even inputs."""

    fixed_costs: Optional[float] = None
    price_per_unit: Optional[float] = None
    variable_cost_per_unit: Optional[float] = None
    current_sales_units: Optional[float] = None
    period_months: int = 12


@router.post("/templates/{template_id}/break-even")
async def template_break_even(template_id: str, inputs: TemplateBreakEvenInput):
    """Break-even analysis seeded from a business template."""
    try:
        params = benchmarks.apply_break_even_template(
            template_id,
            fixed_costs=inputs.fixed_costs,
            price_per_unit=inputs.price_per_unit,
            variable_cost_per_unit=inputs.variable_cost_per_unit,
        )
        return break_even.calculate_break_even(
            **params,
            current_sales_units=inputs.current_sales_units,
            period_months=inputs.period_months,
        )
    except ReferenceNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
