"""
Competitor profiles built from tagged extraction results.

A profile is always complete. Failed results get the default profile
(SEO 50, categories ["General"], positions at 50, market share "Unknown").
"""

from typing import Iterable, List

from src.analysis.scoring import (
    assess_brand_strength,
    assess_content_quality,
    assess_customer_engagement,
    calculate_innovation_score,
    calculate_market_share,
    calculate_seo_score,
    estimate_content_frequency,
)
from src.models.payload import ExtractionPayload
from src.models.reports import (
    CompetitivePosition,
    CompetitorProfile,
    ContentAnalysis,
    MarketingAnalysis,
    SEOAnalysis,
    SocialPresence,
    TrafficAnalysis,
    WebsiteAnalysis,
)
from src.models.results import ExtractionResult


def total_known_visits(results: Iterable[ExtractionResult]) -> int:
    """Sum of estimated visits over results that were not failures."""
    return sum(r.payload.estimates.traffic.total_visits for r in results if not r.is_failed)


def _website_analysis(payload: ExtractionPayload) -> WebsiteAnalysis:
    meta = payload.meta_tags
    return WebsiteAnalysis(
        title=meta.title or "Unknown",
        description=meta.description or "Unknown",
        meta_keywords=meta.keywords,
        social_presence=SocialPresence(
            og_title=meta.og_title,
            og_description=meta.og_description,
            og_image=meta.og_image,
            twitter_card=meta.twitter_card,
        ),
        seo_score=calculate_seo_score(payload),
    )


def _content_analysis(payload: ExtractionPayload) -> ContentAnalysis:
    blog = payload.blog_content
    return ContentAnalysis(
        blog_topics=list(blog.posts),
        content_categories=list(blog.categories) or ["General"],
        content_frequency=estimate_content_frequency(blog.total_links),
        content_quality=assess_content_quality(blog.posts),
    )


def _marketing_analysis(payload: ExtractionPayload) -> MarketingAnalysis:
    ads = payload.estimates.ads
    return MarketingAnalysis(
        has_ads=payload.ad_creatives.has_ads,
        ad_networks=list(payload.ad_creatives.ad_networks),
        total_ads=ads.total_ads,
        active_campaigns=ads.active_campaigns,
        estimated_ad_spend=ads.estimated_spend,
        targeting_strategy=list(ads.targeting),
        creative_themes=list(ads.creative_themes),
        source=ads.source,
    )


def _seo_analysis(payload: ExtractionPayload) -> SEOAnalysis:
    links = payload.estimates.backlinks
    return SEOAnalysis(
        total_backlinks=links.total_backlinks,
        referring_domains=links.referring_domains,
        domain_authority=links.domain_authority,
        link_quality=links.link_quality,
        source=links.source,
    )


def _traffic_analysis(payload: ExtractionPayload) -> TrafficAnalysis:
    traffic = payload.estimates.traffic
    return TrafficAnalysis(
        total_visits=traffic.total_visits,
        traffic_sources=traffic.traffic_sources,
        top_referrers=list(traffic.top_referrers),
        search_keywords=list(traffic.search_keywords),
        geographic_reach=list(traffic.geographic_distribution),
        source=traffic.source,
    )


def build_profile(result: ExtractionResult, batch_total_visits: int = 0) -> CompetitorProfile:
    """
    Build the profile for one tagged result.

    Args:
        result: OK, FALLBACK or FAILED extraction result
        batch_total_visits: Known visits across the batch, for market share

    Returns:
        CompetitorProfile with every field set
    """
    target = result.target
    base = dict(
        competitor_name=target.label,
        website=target.url,
        domain=target.domain,
        industry=target.industry,
        data_quality=result.status.value,
    )

    if result.is_failed:
        return CompetitorProfile(
            **base,
            failure=result.failure.value if result.failure else None,
        )

    payload = result.payload
    return CompetitorProfile(
        **base,
        website_analysis=_website_analysis(payload),
        content_analysis=_content_analysis(payload),
        marketing_analysis=_marketing_analysis(payload),
        seo_analysis=_seo_analysis(payload),
        traffic_analysis=_traffic_analysis(payload),
        competitive_position=CompetitivePosition(
            market_share=calculate_market_share(payload.estimates.traffic, batch_total_visits),
            brand_strength=assess_brand_strength(payload),
            innovation_score=calculate_innovation_score(payload),
            customer_engagement=assess_customer_engagement(payload),
        ),
        social_links=payload.social_links,
        contact_info=payload.contact_info,
        pricing_info=payload.pricing_info,
    )


def build_profiles(results: List[ExtractionResult]) -> List[CompetitorProfile]:
    """One profile per result, in result order."""
    batch_visits = total_known_visits(results)
    return [build_profile(r, batch_visits) for r in results]
