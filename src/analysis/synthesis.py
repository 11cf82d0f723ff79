"""
Aggregator: tagged extraction results -> competitor analysis report.

Everything here is a pure function of its inputs. The optional narrator (the
Gemini SWOT writer) is the only collaborator, and it can only replace the four
SWOT lists after the rule-based report is already complete.
"""

from typing import Dict, List, Optional, Protocol, Sequence

from src.analysis.profiles import build_profiles
from src.analysis.scoring import NO_GAPS_MESSAGE, average, identify_market_gaps
from src.core.logging import get_logger
from src.models.payload import SocialLinks
from src.models.reports import (
    AnalysisContext,
    CompetitorAnalysisReport,
    CompetitorProfile,
    PerformanceMetrics,
    Recommendation,
    StrategicInsights,
    SynthesizedReport,
)
from src.models.results import ExtractionResult

logger = get_logger(__name__)

SWOT_KEYS = ("strengths", "weaknesses", "opportunities", "threats")

DEFAULT_SWOT: Dict[str, List[str]] = {
    "strengths": [
        "Unique value proposition in the market",
        "Strong customer relationships and loyalty",
        "Innovative product development approach",
        "Experienced team with industry expertise",
    ],
    "weaknesses": [
        "Limited marketing budget compared to competitors",
        "Smaller team size affecting development speed",
        "Less brand recognition in the market",
        "Limited geographic presence",
    ],
    "opportunities": [
        "Growing market demand for your solutions",
        "Technology advancements enabling new features",
        "Strategic partnerships with complementary services",
        "Untapped market segments and demographics",
    ],
    "threats": [
        "Large competitors entering your market space",
        "Economic uncertainty affecting customer decisions",
        "Rapid technology changes requiring adaptation",
        "Regulatory changes impacting business operations",
    ],
}

COMPETITIVE_ADVANTAGES: Dict[str, str] = {
    "price_advantage": "Competitive pricing with better value proposition",
    "quality_advantage": "Superior product quality and reliability",
    "service_advantage": "Exceptional customer service and support",
    "innovation_advantage": "Continuous innovation and feature updates",
}

STRATEGIC_RECOMMENDATIONS: List[Recommendation] = [
    Recommendation(
        recommendation="Focus on niche market differentiation",
        priority="High",
        impact="High - Establish unique market position",
        effort="Medium - Requires strategic planning and execution",
        timeline="6-12 months",
    ),
    Recommendation(
        recommendation="Invest in customer success and retention",
        priority="High",
        impact="High - Improve customer lifetime value",
        effort="Low - Leverage existing relationships",
        timeline="3-6 months",
    ),
    Recommendation(
        recommendation="Develop strategic partnerships",
        priority="Medium",
        impact="Medium - Expand market reach and capabilities",
        effort="Medium - Requires relationship building",
        timeline="6-9 months",
    ),
]

STRONG_SCORE = 80
WEAK_SEO_SCORE = 70


class SwotNarrator(Protocol):
    def narrate(
        self, profiles: Sequence[CompetitorProfile], context: AnalysisContext
    ) -> Optional[Dict[str, List[str]]]:
        ...


def _analysed(profiles: Sequence[CompetitorProfile]) -> List[CompetitorProfile]:
    return [p for p in profiles if p.data_quality != "failed"]


def _unused_networks(profiles: Sequence[CompetitorProfile]) -> List[str]:
    used = {network for p in profiles for network in p.social_links.present()}
    return [n for n in SocialLinks.model_fields if n not in used]


def rule_based_swot(
    profiles: Sequence[CompetitorProfile],
    context: Optional[AnalysisContext] = None,
) -> Dict[str, List[str]]:
    """
    Four SWOT lists from the competitor profiles.

    Strengths are openings the competitors leave, weaknesses are where they
    are ahead. A list with no data-driven entry gets the default items.
    """
    context = context or AnalysisContext()
    live = _analysed(profiles)
    swot: Dict[str, List[str]] = {key: [] for key in SWOT_KEYS}

    if live:
        avg_seo = average([p.website_analysis.seo_score for p in live])
        if avg_seo < WEAK_SEO_SCORE:
            swot["strengths"].append(
                f"Competitors average an SEO score of {avg_seo}; stronger on-page SEO is within reach"
            )
        if not any(p.pricing_info.has_pricing for p in live):
            swot["strengths"].append("No analysed competitor publishes pricing; transparent pricing stands out")
        if all(p.content_analysis.content_quality in ("Low", "Unknown") for p in live):
            swot["strengths"].append("Competitor content is thin; in-depth content can win attention")

        with_ads = [p for p in live if p.marketing_analysis.has_ads]
        if with_ads:
            swot["weaknesses"].append(
                f"{len(with_ads)} of {len(live)} competitors run paid advertising"
            )
        strong_brands = [p.competitor_name for p in live if p.competitive_position.brand_strength >= STRONG_SCORE]
        if strong_brands:
            swot["weaknesses"].append(f"Strong social branding at {', '.join(strong_brands)}")
        frequent = [
            p.competitor_name for p in live
            if p.content_analysis.content_frequency.startswith(("High", "Medium"))
        ]
        if frequent:
            swot["weaknesses"].append(f"Frequent publishing at {', '.join(frequent)}")

        gaps = identify_market_gaps(p.content_analysis.content_categories for p in live)
        swot["opportunities"].extend(g for g in gaps if g != NO_GAPS_MESSAGE)
        unused = _unused_networks(live)
        if unused:
            swot["opportunities"].append(f"Social channels no competitor uses: {', '.join(unused)}")

        innovators = [p.competitor_name for p in live if p.competitive_position.innovation_score >= STRONG_SCORE]
        if innovators:
            swot["threats"].append(f"Innovation-focused messaging from {', '.join(innovators)}")
        authority = average([p.seo_analysis.domain_authority for p in live])
        if authority > 50:
            swot["threats"].append(f"Established domain authority among competitors (average {authority})")

    failed = len(profiles) - len(live)
    if failed:
        swot["threats"].append(f"{failed} competitor(s) could not be analysed; their position is unknown")

    for key in SWOT_KEYS:
        if not swot[key]:
            swot[key] = list(DEFAULT_SWOT[key])
    return swot


def rule_based_recommendations(profiles: Sequence[CompetitorProfile]) -> List[Recommendation]:
    """Data-driven recommendations followed by the standing strategic ones."""
    live = _analysed(profiles)
    recommendations: List[Recommendation] = []

    gaps = [g for g in identify_market_gaps(p.content_analysis.content_categories for p in live)
            if g != NO_GAPS_MESSAGE]
    if live and gaps:
        recommendations.append(Recommendation(
            recommendation=f"Target the gap: {gaps[0]}",
            priority="High",
            impact="High - Reach demand competitors do not serve",
            effort="Medium - New content and positioning",
            timeline="3-6 months",
            category="Market Gaps",
        ))

    if live and average([p.website_analysis.seo_score for p in live]) >= STRONG_SCORE:
        recommendations.append(Recommendation(
            recommendation="Match competitor on-page SEO (titles, descriptions, social tags)",
            priority="High",
            impact="Medium - Keep parity in search visibility",
            effort="Low - Metadata changes",
            timeline="1-3 months",
            category="SEO",
        ))

    recommendations.extend(r.model_copy() for r in STRATEGIC_RECOMMENDATIONS)
    return recommendations


def performance_metrics(profiles: Sequence[CompetitorProfile]) -> PerformanceMetrics:
    live = _analysed(profiles)
    return PerformanceMetrics(
        profiles_analyzed=len(profiles),
        live_profiles=sum(1 for p in profiles if p.data_quality == "ok"),
        fallback_profiles=sum(1 for p in profiles if p.data_quality != "ok"),
        average_seo_score=average([p.website_analysis.seo_score for p in live]),
        average_brand_strength=average([p.competitive_position.brand_strength for p in live]),
        average_innovation_score=average([p.competitive_position.innovation_score for p in live]),
        average_customer_engagement=average([p.competitive_position.customer_engagement for p in live]),
    )


def strategic_insights(profiles: Sequence[CompetitorProfile]) -> StrategicInsights:
    return StrategicInsights(
        market_gaps=identify_market_gaps(p.content_analysis.content_categories for p in profiles),
        competitive_advantages=dict(COMPETITIVE_ADVANTAGES),
        strategic_recommendations=[r.model_copy() for r in STRATEGIC_RECOMMENDATIONS],
        performance_metrics=performance_metrics(profiles),
    )


def synthesize(
    profiles: Sequence[CompetitorProfile],
    context: Optional[AnalysisContext] = None,
    narrator: Optional[SwotNarrator] = None,
) -> SynthesizedReport:
    """
    Rule-based SWOT plus recommendations, optionally narrated.

    The narrator's lists replace the rule-based ones only when it returns a
    non-empty list for every SWOT key.
    """
    context = context or AnalysisContext()
    swot = rule_based_swot(profiles, context)
    source = "rules"

    if narrator is not None:
        try:
            narrated = narrator.narrate(profiles, context)
        except Exception as e:
            logger.warning(f"SWOT narrator failed, keeping rule-based lists: {e}")
            narrated = None
        if narrated and all(narrated.get(key) for key in SWOT_KEYS):
            swot = {key: list(narrated[key]) for key in SWOT_KEYS}
            source = "llm"

    return SynthesizedReport(
        **swot,
        recommendations=rule_based_recommendations(profiles),
        source=source,
    )


def aggregate(
    results: Sequence[ExtractionResult],
    context: Optional[AnalysisContext] = None,
    narrator: Optional[SwotNarrator] = None,
) -> CompetitorAnalysisReport:
    """
    Build the full report for one batch.

    Args:
        results: Tagged extraction results, in target order
        context: Industry, focus and competitor names supplied by the caller
        narrator: Optional SWOT narrator

    Returns:
        CompetitorAnalysisReport with one profile per result

    Example:
        >>> report = aggregate([], AnalysisContext(industry="Marketing"))
        >>> report.total_competitors
        0
    """
    context = context or AnalysisContext()
    results = list(results)
    profiles = build_profiles(results)

    report = CompetitorAnalysisReport(
        context=context,
        profiles=profiles,
        swot=synthesize(profiles, context, narrator),
        insights=strategic_insights(profiles),
        total_competitors=len(results),
        successful_extractions=sum(1 for r in results if not r.is_failed),
        failed_extractions=sum(1 for r in results if r.is_failed),
    )
    logger.info(
        f"Aggregated {report.total_competitors} competitors "
        f"({report.successful_extractions} ok, {report.failed_extractions} failed), SWOT from {report.swot.source}"
    )
    return report
