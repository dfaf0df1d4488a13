"""
Industry Reference Data

Static benchmark bands per industry and business templates (default
inputs plus benchmark ranges). Read-only configuration: every record is a
frozen dataclass and every table a read-only mapping.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


@dataclass(frozen=True)
class BenchmarkRange:
    """Percentile bands for one metric."""

    p25: float
    median: float
    p75: float
    optimal: float


@dataclass(frozen=True)
class IndustryBenchmark:
    industry: str
    display_name: str
    metrics: Mapping[str, BenchmarkRange]


@dataclass(frozen=True)
class TemplateBand:
    min: float
    max: float
    optimal: float


@dataclass(frozen=True)
class TemplateInputs:
    fixed_costs: float
    price_per_unit: float
    variable_cost_per_unit: float
    desired_margin: float


@dataclass(frozen=True)
class BusinessTemplate:
    id: str
    name: str
    industry: str
    description: str
    default_inputs: TemplateInputs
    benchmarks: Mapping[str, TemplateBand]


METRIC_NAMES: Tuple[str, ...] = (
    "gross_margin_percent",
    "net_margin_percent",
    "operating_margin_percent",
    "labor_cost_percent",
    "rent_cost_percent",
    "inventory_turnover",
    "current_ratio",
    "days_receivable",
    "days_payable",
    "revenue_growth_percent",
)


def _industry(industry: str, display_name: str, rows) -> IndustryBenchmark:
    metrics = {
        name: BenchmarkRange(*values) for name, values in zip(METRIC_NAMES, rows)
    }
    return IndustryBenchmark(industry, display_name, MappingProxyType(metrics))


# Rows follow METRIC_NAMES; each row is (p25, median, p75, optimal).
INDUSTRY_BENCHMARKS: Mapping[str, IndustryBenchmark] = MappingProxyType(
    {
        "restaurant": _industry(
            "restaurant",
            "Restaurant / Food Service",
            [
                (55, 62, 70, 65),
                (2, 5, 10, 8),
                (3, 8, 15, 12),
                (25, 30, 38, 28),
                (5, 8, 12, 7),
                (20, 30, 45, 35),
                (0.8, 1.2, 1.8, 1.5),
                (0, 3, 7, 2),
                (15, 25, 35, 25),
                (2, 5, 12, 8),
            ],
        ),
        "ecommerce": _industry(
            "ecommerce",
            "E-commerce / Online Retail",
            [
                (30, 42, 55, 45),
                (3, 8, 15, 12),
                (5, 10, 18, 14),
                (8, 12, 18, 10),
                (1, 3, 5, 2),
                (4, 8, 15, 10),
                (1.2, 1.8, 2.5, 2.0),
                (0, 2, 5, 1),
                (20, 35, 50, 40),
                (10, 20, 40, 25),
            ],
        ),
        "services": _industry(
            "services",
            "Professional Services / Consulting",
            [
                (50, 65, 80, 70),
                (10, 18, 30, 22),
                (12, 22, 35, 28),
                (40, 50, 60, 48),
                (3, 6, 10, 5),
                (0, 0, 0, 0),  # Not applicable to services
                (1.5, 2.2, 3.5, 2.5),
                (30, 45, 60, 35),
                (20, 30, 45, 30),
                (5, 12, 25, 15),
            ],
        ),
        "retail": _industry(
            "retail",
            "Retail Store / Physical Shop",
            [
                (28, 38, 48, 42),
                (1, 4, 8, 5),
                (3, 6, 10, 7),
                (12, 16, 22, 15),
                (6, 10, 15, 9),
                (3, 6, 10, 7),
                (1.2, 1.8, 2.5, 2.0),
                (0, 5, 15, 3),
                (25, 40, 60, 45),
                (1, 4, 10, 6),
            ],
        ),
        "manufacturing": _industry(
            "manufacturing",
            "Manufacturing / Production",
            [
                (22, 32, 42, 35),
                (3, 7, 12, 9),
                (5, 10, 16, 12),
                (15, 22, 30, 20),
                (3, 5, 8, 5),
                (4, 7, 12, 9),
                (1.3, 2.0, 2.8, 2.2),
                (35, 50, 70, 45),
                (30, 45, 65, 50),
                (2, 6, 12, 8),
            ],
        ),
    }
)


def _template(id, name, description, inputs, bands) -> BusinessTemplate:
    return BusinessTemplate(
        id=id,
        name=name,
        industry=id,
        description=description,
        default_inputs=TemplateInputs(*inputs),
        benchmarks=MappingProxyType(
            {
                "gross_margin": TemplateBand(*bands[0]),
                "net_margin": TemplateBand(*bands[1]),
                "labor_cost_ratio": TemplateBand(*bands[2]),
            }
        ),
    )


# Default inputs: (fixed_costs, price_per_unit, variable_cost_per_unit, desired_margin)
# Bands: gross margin, net margin, labor cost ratio as (min, max, optimal)
BUSINESS_TEMPLATES: Tuple[BusinessTemplate, ...] = (
    _template(
        "restaurant",
        "Restaurant / Cafe",
        "Restaurants, cafes and food businesses; tracks food and labor cost.",
        (15000, 15, 5.25, 65),
        ((55, 75, 65), (3, 15, 8), (20, 35, 28)),
    ),
    _template(
        "ecommerce",
        "E-commerce / Online Store",
        "Online stores; shipping, acquisition cost and typical margins.",
        (5000, 50, 25, 40),
        ((30, 60, 45), (5, 20, 12), (5, 20, 12)),
    ),
    _template(
        "services",
        "Professional Services",
        "Consultants, agencies and freelancers; labor-heavy, low variable cost.",
        (8000, 150, 15, 70),
        ((50, 80, 70), (15, 40, 25), (40, 60, 50)),
    ),
    _template(
        "retail",
        "Retail Store",
        "Physical shops; inventory and floor space considerations.",
        (12000, 30, 18, 40),
        ((30, 50, 40), (2, 10, 5), (15, 25, 18)),
    ),
    _template(
        "manufacturing",
        "Manufacturing / Production",
        "Manufacturers; high fixed costs and economies of scale.",
        (50000, 100, 55, 35),
        ((25, 45, 35), (5, 15, 10), (15, 30, 22)),
    ),
)


def get_industry_benchmarks(industry: str) -> Optional[IndustryBenchmark]:
    return INDUSTRY_BENCHMARKS.get(industry)


def get_available_industries() -> Tuple[str, ...]:
    return tuple(INDUSTRY_BENCHMARKS.keys())


def get_business_template(template_id: str) -> Optional[BusinessTemplate]:
    return next((t for t in BUSINESS_TEMPLATES if t.id == template_id), None)
