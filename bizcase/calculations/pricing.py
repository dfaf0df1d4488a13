"""
Pricing

Price points for a product or service from unit cost and a target gross
margin, optionally positioned against a competitor's price.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from bizcase.calculations.numeric import round_currency
from bizcase.calculations.validation import validate_pricing

logger = logging.getLogger(__name__)

PREMIUM_FACTOR = 1.15
PENETRATION_FACTOR = 0.85
# Recommended price leans 70/30 toward our own target over the competitor
TARGET_WEIGHT = 0.7
MINIMUM_MARKUP = 1.1
SAME_PRICE_TOLERANCE = 0.5


@dataclass(frozen=True)
class PricingInput:
    cost_per_unit: float
    desired_margin: float  # gross margin %, 0-99
    competitor_price: Optional[float] = None
    target_volume: Optional[float] = None
    fixed_costs_per_period: Optional[float] = None


def target_margin_price(cost_per_unit: float, desired_margin: float) -> float:
    """Price at which gross margin equals ``desired_margin`` percent."""
    return cost_per_unit / (1 - desired_margin / 100)


def recommended_price(
    target_price: float, minimum_price: float, competitor_price: Optional[float] = None
) -> float:
    price = target_price
    if competitor_price is not None:
        price = target_price * TARGET_WEIGHT + competitor_price * (1 - TARGET_WEIGHT)
    return round_currency(max(price, minimum_price * MINIMUM_MARKUP))


def compare_to_competitor(price: float, competitor_price: float) -> Dict:
    difference = price - competitor_price
    if difference > SAME_PRICE_TOLERANCE:
        position = "above"
    elif difference < -SAME_PRICE_TOLERANCE:
        position = "below"
    else:
        position = "same"
    return {
        "difference": round_currency(difference),
        "percentage_diff": round_currency(difference / competitor_price * 100),
        "position": position,
    }


def calculate_pricing(pricing: PricingInput) -> Dict:
    """
    Calculate target, recommended and strategy prices.

    The unit cost is the minimum price. Break-even price spreads the fixed
    costs over the target volume and is only reported when both are given.

    Raises:
        InputValidationError: If any input is invalid
    """
    validate_pricing(pricing)

    cost = pricing.cost_per_unit
    target_price = target_margin_price(cost, pricing.desired_margin)

    break_even_price = None
    if pricing.fixed_costs_per_period is not None and pricing.target_volume is not None:
        break_even_price = round_currency(
            cost + pricing.fixed_costs_per_period / pricing.target_volume
        )

    competitor_comparison = None
    if pricing.competitor_price is not None:
        competitor_comparison = compare_to_competitor(target_price, pricing.competitor_price)

    recommended = recommended_price(target_price, cost, pricing.competitor_price)

    logger.debug(f"Pricing: target={target_price:.2f} recommended={recommended:.2f}")

    return {
        "minimum_price": round_currency(cost),
        "target_margin_price": round_currency(target_price),
        "markup_percentage": round_currency((target_price - cost) / cost * 100),
        "gross_profit_per_unit": round_currency(target_price - cost),
        "break_even_price": break_even_price,
        "competitor_comparison": competitor_comparison,
        "recommended_price": recommended,
        "recommended_price_range": {
            "low": round_currency(max(cost * MINIMUM_MARKUP, recommended * 0.9)),
            "high": round_currency(recommended * PREMIUM_FACTOR),
        },
        "price_strategies": {
            "premium": round_currency(target_price * PREMIUM_FACTOR),
            "competitive": round_currency(
                pricing.competitor_price if pricing.competitor_price is not None else target_price
            ),
            "penetration": round_currency(target_price * PENETRATION_FACTOR),
        },
    }


def pricing_recommendations(result: Dict, pricing: PricingInput) -> List[str]:
    recommendations = []

    if pricing.desired_margin < 20:
        recommendations.append(
            "Low margin target (< 20%). Consider if this is sustainable long-term."
        )
    elif pricing.desired_margin > 60:
        recommendations.append(
            "High margin target (> 60%). Ensure the value proposition justifies premium pricing."
        )

    comparison = result["competitor_comparison"]
    if comparison is not None and comparison["position"] != "same":
        gap = abs(comparison["percentage_diff"])
        recommendations.append(f"Your price is {gap:.1f}% {comparison['position']} competitors.")
        if comparison["position"] == "above":
            recommendations.append("Ensure your product or service has clear differentiators.")
        else:
            recommendations.append("You may have room to increase prices.")

    price_range = result["recommended_price_range"]
    recommendations.append(
        f"Recommended price range: ${price_range['low']:.2f} - ${price_range['high']:.2f}"
    )
    recommendations.append(
        f"At the target price you earn ${result['gross_profit_per_unit']:.2f} per unit."
    )
    return recommendations
