"""
Fallback data provider.

Two kinds of stand-in data live here:

- Zeroed payloads ("Unknown", 0, empty lists) with the exact shape the
  aggregator expects, used when a target failed.
- Simulated off-page estimates (ads, backlinks, traffic) for when no
  analytics API is configured. Each domain gets its own generator seeded
  from the provider seed and the domain, so a rerun with the same seed
  reproduces the same numbers.

All randomness in the project is confined to this module.
"""

import random
from typing import Optional, Union

from src.core.logging import get_logger
from src.models.payload import (
    AdEstimate,
    BacklinkEstimate,
    EstimateSource,
    Estimates,
    ExtractionPayload,
    TrafficEstimate,
    TrafficSources,
)
from src.models.reports import CitationListing
from src.models.results import ExtractionResult, KeywordRanking
from src.models.targets import CompetitorURL, DirectoryDescriptor, RankingTarget, TargetKind

logger = get_logger(__name__)

DEFAULT_SEED = 42

AD_TYPES = ["Image", "Video", "Carousel", "Collection"]
AD_TARGETING = ["Interest-based", "Lookalike", "Custom Audience"]
CREATIVE_THEMES = ["Professional", "Modern", "Innovative", "Trustworthy", "Creative"]
REFERRING_DOMAINS = ["example.com", "referrer1.com", "referrer2.com", "partner.com"]
LINK_QUALITIES = ["High", "Medium", "Low"]
TOP_REFERRERS = ["google.com", "facebook.com", "linkedin.com", "twitter.com"]
SEARCH_KEYWORDS = ["business solution", "industry tool", "professional service", "enterprise software"]
COUNTRIES = ["United States", "United Kingdom", "Canada", "Australia", "Germany"]

FallbackPayload = Union[ExtractionPayload, CitationListing, KeywordRanking]


class FallbackDataProvider:
    """
    Source of labelled placeholder data.

    Args:
        seed: Base seed for simulated estimates

    Example:
        >>> provider = FallbackDataProvider(seed=7)
        >>> provider.simulated_estimates("acme.com") == provider.simulated_estimates("acme.com")
        True
    """

    def __init__(self, seed: int = DEFAULT_SEED):
        self.seed = seed

    def fallback_for(self, kind: TargetKind, target=None) -> FallbackPayload:
        """
        Zeroed payload for a target kind.

        Args:
            kind: competitor, directory or ranking
            target: Optional target used to label the payload

        Returns:
            ExtractionPayload, CitationListing or KeywordRanking
        """
        kind = TargetKind(kind)
        if kind == TargetKind.COMPETITOR:
            url = target.url if isinstance(target, CompetitorURL) else ""
            return ExtractionPayload(url=url)
        if kind == TargetKind.DIRECTORY:
            if isinstance(target, DirectoryDescriptor):
                return CitationListing(platform=target.name, url=target.url)
            return CitationListing(platform="Unknown")
        if isinstance(target, RankingTarget):
            return KeywordRanking.unranked(target)
        return KeywordRanking(keyword="Unknown")

    def _rng(self, domain: str) -> random.Random:
        return random.Random(f"{self.seed}:{domain}")

    def simulated_estimates(self, domain: str) -> Estimates:
        """Ads, backlinks and traffic drawn from the per-domain generator."""
        rng = self._rng(domain)
        return Estimates(
            ads=self._simulated_ads(rng),
            backlinks=self._simulated_backlinks(rng),
            traffic=self._simulated_traffic(rng),
        )

    def simulated_traffic(self, domain: str) -> TrafficEstimate:
        return self.simulated_estimates(domain).traffic

    @staticmethod
    def _prefix(rng: random.Random, items, low: int, high: int):
        return list(items[: rng.randint(low, high)])

    def _simulated_ads(self, rng: random.Random) -> AdEstimate:
        return AdEstimate(
            total_ads=rng.randint(10, 59),
            active_campaigns=rng.randint(2, 9),
            estimated_spend=f"${rng.randint(5000, 54999)}",
            ad_types=list(AD_TYPES),
            targeting=list(AD_TARGETING),
            creative_themes=self._prefix(rng, CREATIVE_THEMES, 2, 4),
            source=EstimateSource.SIMULATED,
        )

    def _simulated_backlinks(self, rng: random.Random) -> BacklinkEstimate:
        return BacklinkEstimate(
            total_backlinks=rng.randint(1000, 10999),
            referring_domains=rng.randint(100, 599),
            domain_authority=rng.randint(30, 79),
            link_quality=rng.choice(LINK_QUALITIES),
            top_referring_domains=self._prefix(rng, REFERRING_DOMAINS, 1, 3),
            source=EstimateSource.SIMULATED,
        )

    def _simulated_traffic(self, rng: random.Random) -> TrafficEstimate:
        return TrafficEstimate(
            total_visits=rng.randint(100_000, 1_099_999),
            unique_visitors=rng.randint(50_000, 549_999),
            page_views=rng.randint(300_000, 3_299_999),
            traffic_sources=TrafficSources(
                direct=rng.randint(20, 59),
                search=rng.randint(30, 69),
                social=rng.randint(10, 29),
                referral=rng.randint(5, 19),
                email=rng.randint(2, 11),
            ),
            top_referrers=self._prefix(rng, TOP_REFERRERS, 1, 3),
            search_keywords=self._prefix(rng, SEARCH_KEYWORDS, 1, 3),
            geographic_distribution=self._prefix(rng, COUNTRIES, 1, 3),
            source=EstimateSource.SIMULATED,
        )

    def fallback_result(self, target: CompetitorURL, estimates: Optional[Estimates] = None) -> ExtractionResult:
        """
        FALLBACK-tagged result for a competitor that was not loaded.

        Used when browser automation is switched off for a run.
        """
        payload = ExtractionPayload(
            url=target.url,
            estimates=estimates or self.simulated_estimates(target.domain),
        )
        logger.debug(f"Fallback payload for {target.url}")
        return ExtractionResult.fallback(target, payload)
