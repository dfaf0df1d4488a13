"""
Benchmark Comparison

Places computed values against static percentile bands and aggregates
several metrics into a weighted business health score. Benchmark tables
are read, never modified.
"""

import logging
from dataclasses import asdict
from typing import Dict, Mapping, Optional

from bizcase.calculations.numeric import round_value, safe_divide
from bizcase.calculations.validation import InputValidationError, assert_finite
from bizcase.reference.industry import (
    BenchmarkRange,
    BusinessTemplate,
    IndustryBenchmark,
    get_business_template,
    get_industry_benchmarks,
)

logger = logging.getLogger(__name__)

TOP_25 = "top25"
ABOVE_MEDIAN = "aboveMedian"
BELOW_MEDIAN = "belowMedian"
BOTTOM_25 = "bottom25"

HEALTH_WEIGHTS: Mapping[str, int] = {
    "gross_margin_percent": 25,
    "net_margin_percent": 20,
    "current_ratio": 15,
    "labor_cost_percent": 15,
    "revenue_growth_percent": 15,
    "inventory_turnover": 10,
}

BUCKET_MESSAGES = {
    TOP_25: "Your {metric} is in the top 25% of the industry.",
    ABOVE_MEDIAN: "Your {metric} is above the industry median.",
    BELOW_MEDIAN: "Your {metric} is below the industry median.",
    BOTTOM_25: "Your {metric} is in the bottom 25% of the industry.",
}


class ReferenceNotFoundError(LookupError):
    """Raised when an industry, metric or template is not in the reference data."""


def is_higher_better(metric: str) -> bool:
    """Cost ratios and day counts are lower-is-better; everything else higher."""
    return "cost" not in metric and not metric.startswith("days")


def compare(value: float, benchmark: BenchmarkRange, higher_is_better: bool = True) -> str:
    """
    Percentile bucket of a value against a benchmark range.

    Returns:
        One of "top25", "aboveMedian", "belowMedian", "bottom25"
    """
    assert_finite(value, "value")

    if higher_is_better:
        if value >= benchmark.p75:
            return TOP_25
        if value >= benchmark.median:
            return ABOVE_MEDIAN
        if value >= benchmark.p25:
            return BELOW_MEDIAN
        return BOTTOM_25

    if value <= benchmark.p25:
        return TOP_25
    if value <= benchmark.median:
        return ABOVE_MEDIAN
    if value <= benchmark.p75:
        return BELOW_MEDIAN
    return BOTTOM_25


def score_metric(value: float, benchmark: BenchmarkRange, higher_is_better: bool = True) -> int:
    """Five-tier score (100/85/70/50/30) by the best threshold the value crosses."""
    if higher_is_better:
        thresholds = (benchmark.optimal, benchmark.p75, benchmark.median, benchmark.p25)
        crossed = (value >= threshold for threshold in thresholds)
    else:
        thresholds = (benchmark.optimal, benchmark.p25, benchmark.median, benchmark.p75)
        crossed = (value <= threshold for threshold in thresholds)

    for score, hit in zip((100, 85, 70, 50), crossed):
        if hit:
            return score
    return 30


def _require_industry(industry: str) -> IndustryBenchmark:
    benchmarks = get_industry_benchmarks(industry)
    if benchmarks is None:
        raise ReferenceNotFoundError(f"Industry not found: {industry}")
    return benchmarks


def _require_metric(benchmarks: IndustryBenchmark, metric: str) -> BenchmarkRange:
    try:
        return benchmarks.metrics[metric]
    except KeyError:
        raise ReferenceNotFoundError(
            f"Metric not found for {benchmarks.industry}: {metric}"
        )


def compare_to_industry(industry: str, metric: str, value: float) -> Dict:
    """
    Compare a metric value to an industry's benchmark bands.

    Returns:
        Dict with percentile bucket, % deviation from median and optimal
        (one decimal), a message and the benchmark itself

    Raises:
        ReferenceNotFoundError: If the industry or metric is unknown
    """
    benchmark = _require_metric(_require_industry(industry), metric)
    percentile = compare(value, benchmark, is_higher_better(metric))

    vs_median = safe_divide(value - benchmark.median, benchmark.median, 0.0) * 100
    vs_optimal = safe_divide(value - benchmark.optimal, benchmark.optimal, 0.0) * 100

    return {
        "percentile": percentile,
        "vs_median": round_value(vs_median, 1),
        "vs_optimal": round_value(vs_optimal, 1),
        "message": BUCKET_MESSAGES[percentile].format(metric=metric),
        "benchmark": asdict(benchmark),
    }


def health_category(score: float) -> str:
    if score >= 85:
        return "excellent"
    if score >= 70:
        return "good"
    if score >= 50:
        return "fair"
    return "poor"


def calculate_health_score(
    industry: str,
    metrics: Mapping[str, Optional[float]],
    weights: Mapping[str, int] = HEALTH_WEIGHTS,
) -> Dict:
    """
    Weighted business health score (0-100) over the weighted metrics given.

    Metrics without a weight, or given as None, are ignored. With nothing
    scorable the overall score is 0.
    """
    benchmarks = _require_industry(industry)

    breakdown = []
    total_weight = 0
    weighted_score = 0

    for metric, value in metrics.items():
        weight = weights.get(metric, 0)
        if weight == 0 or value is None:
            continue
        assert_finite(value, metric)

        benchmark = _require_metric(benchmarks, metric)
        score = score_metric(value, benchmark, is_higher_better(metric))

        breakdown.append({"metric": metric, "value": value, "score": score, "weight": weight})
        total_weight += weight
        weighted_score += score * weight

    overall = int(round_value(weighted_score / total_weight, 0)) if total_weight else 0
    logger.debug(f"Health score for {industry}: {overall} over {len(breakdown)} metrics")

    return {
        "overall_score": overall,
        "category": health_category(overall),
        "breakdown": breakdown,
    }


def _require_template(template_id: str) -> BusinessTemplate:
    template = get_business_template(template_id)
    if template is None:
        raise ReferenceNotFoundError(f"Template not found: {template_id}")
    return template


def apply_break_even_template(template_id: str, **overrides) -> Dict:
    """Break-even inputs from a template's defaults, with caller overrides."""
    defaults = _require_template(template_id).default_inputs
    inputs = {
        "fixed_costs": defaults.fixed_costs,
        "price_per_unit": defaults.price_per_unit,
        "variable_cost_per_unit": defaults.variable_cost_per_unit,
    }
    inputs.update({key: value for key, value in overrides.items() if value is not None})
    return inputs


def assess_metric_health(template_id: str, metric: str, value: float) -> Dict:
    """
    Healthy / warning / critical status of a value against a template band.

    Labor cost ratio is lower-is-better; the margins are higher-is-better.
    """
    template = _require_template(template_id)
    try:
        band = template.benchmarks[metric]
    except KeyError:
        raise InputValidationError(
            "metric", f"metric must be one of {', '.join(template.benchmarks)}"
        )
    assert_finite(value, "value")

    if metric == "labor_cost_ratio":
        if value <= band.optimal:
            status = "healthy"
            message = f"Labor cost of {value}% is at or below optimal ({band.optimal}%)"
        elif value <= band.max:
            status = "warning"
            message = f"Labor cost of {value}% is above optimal but within range"
        else:
            status = "critical"
            message = f"Labor cost of {value}% exceeds industry maximum ({band.max}%)"
    else:
        if value >= band.optimal:
            status = "healthy"
            message = f"{metric} of {value}% meets or exceeds optimal ({band.optimal}%)"
        elif value >= band.min:
            status = "warning"
            message = f"{metric} of {value}% is below optimal but acceptable"
        else:
            status = "critical"
            message = f"{metric} of {value}% is below industry minimum ({band.min}%)"

    return {"status": status, "message": message, "benchmark": asdict(band)}
