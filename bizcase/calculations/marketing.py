"""
Marketing ROI

Return on a campaign's spend by channel, with click funnel metrics when
impressions and clicks are supplied and a comparison against typical
acquisition cost and conversion rate for the channel.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from bizcase.calculations.numeric import round_currency, safe_divide
from bizcase.calculations.validation import InputValidationError, validate_campaign

logger = logging.getLogger(__name__)

CHANNEL_BENCHMARKS = {
    "facebook": {"avg_cac": 50, "avg_conversion_rate": 2.5},
    "google": {"avg_cac": 45, "avg_conversion_rate": 3.0},
    "instagram": {"avg_cac": 55, "avg_conversion_rate": 2.0},
    "email": {"avg_cac": 15, "avg_conversion_rate": 5.0},
    "referral": {"avg_cac": 25, "avg_conversion_rate": 8.0},
    "other": {"avg_cac": 40, "avg_conversion_rate": 2.5},
}

# Lifetime value is estimated as three first purchases
LTV_PURCHASE_MULTIPLE = 3


@dataclass(frozen=True)
class MarketingCampaign:
    total_spend: float
    conversions: float
    revenue_per_conversion: float
    channel: str = "other"
    impressions: Optional[float] = None
    clicks: Optional[float] = None


def rate_channel_efficiency(roi: float, cac: float, channel: str) -> str:
    avg_cac = CHANNEL_BENCHMARKS[channel]["avg_cac"]
    if roi > 200 and cac < avg_cac * 0.7:
        return "excellent"
    if roi > 100 and cac < avg_cac:
        return "good"
    if roi > 0:
        return "average"
    return "poor"


def compare_to_channel(cac: float, conversion_rate: Optional[float], channel: str) -> Dict:
    """Acquisition cost and conversion rate against the channel average."""
    benchmark = CHANNEL_BENCHMARKS[channel]

    if cac < benchmark["avg_cac"] * 0.9:
        cac_vs_benchmark = "better"
    elif cac > benchmark["avg_cac"] * 1.1:
        cac_vs_benchmark = "worse"
    else:
        cac_vs_benchmark = "same"

    conversion_vs_benchmark = "same"
    if conversion_rate is not None:
        if conversion_rate > benchmark["avg_conversion_rate"] * 1.2:
            conversion_vs_benchmark = "better"
        elif conversion_rate < benchmark["avg_conversion_rate"] * 0.8:
            conversion_vs_benchmark = "worse"

    return {
        "cac_vs_benchmark": cac_vs_benchmark,
        "conversion_vs_benchmark": conversion_vs_benchmark,
    }


def calculate_marketing_roi(campaign: MarketingCampaign) -> Dict:
    """
    Calculate ROI, ROAS and acquisition cost for a campaign.

    Click metrics (cost per click, conversion rate, revenue per click) are
    None unless clicks are given and non-zero; click-through rate also
    needs non-zero impressions.

    Raises:
        InputValidationError: If any input is invalid or the channel is unknown
    """
    validate_campaign(campaign, CHANNEL_BENCHMARKS)

    total_revenue = campaign.conversions * campaign.revenue_per_conversion
    net_profit = total_revenue - campaign.total_spend
    roi = net_profit / campaign.total_spend * 100
    roas = total_revenue / campaign.total_spend
    cost_per_acquisition = campaign.total_spend / campaign.conversions

    cost_per_click = None
    conversion_rate = None
    revenue_per_click = None
    if campaign.clicks:
        cost_per_click = campaign.total_spend / campaign.clicks
        conversion_rate = campaign.conversions / campaign.clicks * 100
        revenue_per_click = total_revenue / campaign.clicks

    click_through_rate = None
    if campaign.impressions and campaign.clicks is not None:
        click_through_rate = campaign.clicks / campaign.impressions * 100

    ltv_to_cac = safe_divide(
        campaign.revenue_per_conversion * LTV_PURCHASE_MULTIPLE, cost_per_acquisition, 0.0
    )

    logger.debug(
        f"Marketing ROI ({campaign.channel}): roi={roi:.2f}% roas={roas:.2f} "
        f"cac={cost_per_acquisition:.2f}"
    )

    return {
        "roi_percentage": round_currency(roi),
        "roas": round_currency(roas),
        "total_revenue": round_currency(total_revenue),
        "net_profit": round_currency(net_profit),
        "cost_per_acquisition": round_currency(cost_per_acquisition),
        "cost_per_click": _round_optional(cost_per_click),
        "click_through_rate": _round_optional(click_through_rate),
        "conversion_rate": _round_optional(conversion_rate),
        "revenue_per_click": _round_optional(revenue_per_click),
        "lifetime_value_to_cac": round_currency(ltv_to_cac),
        "channel_efficiency": rate_channel_efficiency(roi, cost_per_acquisition, campaign.channel),
        "benchmark_comparison": compare_to_channel(
            cost_per_acquisition, conversion_rate, campaign.channel
        ),
        "is_profitable": net_profit > 0,
        "break_even_conversions": math.ceil(
            campaign.total_spend / campaign.revenue_per_conversion
        ),
    }


def _round_optional(value: Optional[float]) -> Optional[float]:
    return round_currency(value) if value is not None else None


def marketing_recommendations(result: Dict, campaign: MarketingCampaign) -> List[str]:
    recommendations = []

    if result["is_profitable"]:
        recommendations.append(f"Campaign is profitable. Net profit: ${result['net_profit']:,.2f}")
    else:
        recommendations.append(
            f"Campaign is LOSING money. Net loss: ${abs(result['net_profit']):,.2f}"
        )
        shortfall = result["break_even_conversions"] - campaign.conversions
        recommendations.append(f"Need {shortfall:g} more conversions to break even.")

    roas = result["roas"]
    if roas >= 4:
        recommendations.append(f"Excellent ROAS of {roas:.1f}x. Consider increasing budget.")
    elif roas >= 2:
        recommendations.append(f"Good ROAS of {roas:.1f}x. Campaign is healthy.")
    elif roas >= 1:
        recommendations.append(
            f"ROAS of {roas:.1f}x is break-even territory. Optimize targeting."
        )

    cac = result["cost_per_acquisition"]
    cac_vs_benchmark = result["benchmark_comparison"]["cac_vs_benchmark"]
    if cac_vs_benchmark == "better":
        recommendations.append(
            f"CAC of ${cac:.2f} is BELOW the average for {campaign.channel}. Great efficiency."
        )
    elif cac_vs_benchmark == "worse":
        recommendations.append(
            f"CAC of ${cac:.2f} is ABOVE the average for {campaign.channel}. "
            "Review targeting and creative."
        )

    if result["click_through_rate"] is not None and result["click_through_rate"] < 1:
        recommendations.append("Low click-through rate. Test new ad creative and copy.")
    if result["conversion_rate"] is not None and result["conversion_rate"] < 1:
        recommendations.append("Low conversion rate. Review landing page experience.")

    ltv_to_cac = result["lifetime_value_to_cac"]
    if ltv_to_cac >= 3:
        recommendations.append(
            f"Strong LTV/CAC ratio of {ltv_to_cac:.1f}x. Sustainable acquisition."
        )
    elif ltv_to_cac < 1.5:
        recommendations.append(
            f"LTV/CAC of {ltv_to_cac:.1f}x is concerning. Reduce CAC or improve retention."
        )

    return recommendations


def compare_channels(campaigns: Sequence[MarketingCampaign]) -> Dict:
    """
    Rank campaigns by ROI.

    Returns:
        Dict with per-campaign results (highest ROI first), best_channel,
        worst_channel and recommendations
    """
    if not campaigns:
        raise InputValidationError("campaigns", "At least one campaign is required")

    results = []
    for campaign in campaigns:
        roi = calculate_marketing_roi(campaign)
        results.append(
            {
                "channel": campaign.channel,
                "total_spend": campaign.total_spend,
                "conversions": campaign.conversions,
                "roi": roi["roi_percentage"],
                "roas": roi["roas"],
                "cac": roi["cost_per_acquisition"],
            }
        )

    results.sort(key=lambda result: result["roi"], reverse=True)
    best, worst = results[0], results[-1]

    recommendations = [
        f"Best performing channel: {best['channel'].upper()} ({best['roi']:.1f}% ROI)",
        f"Worst performing channel: {worst['channel'].upper()} ({worst['roi']:.1f}% ROI)",
    ]
    if best["roi"] > 0 and worst["roi"] < 0:
        recommendations.append(
            f"Consider shifting budget from {worst['channel']} to {best['channel']}."
        )

    return {
        "results": results,
        "best_channel": best["channel"],
        "worst_channel": worst["channel"],
        "recommendations": recommendations,
    }
