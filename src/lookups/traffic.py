"""
Off-page estimates for a competitor domain.

Traffic comes from SimilarWeb when an API key is configured; ads, backlinks
and any failed traffic lookup come from the fallback provider's seeded
simulation.
"""

from typing import Any, Dict, Optional

from src.core.config import get_config
from src.core.error_logger import get_error_logger
from src.core.error_models import ErrorComponent, ErrorSeverity, ErrorStage
from src.core.logging import get_logger
from src.fallback.provider import FallbackDataProvider
from src.lookups.http_client import fetch_json
from src.lookups.rankings import FetchFn
from src.models.payload import EstimateSource, Estimates, TrafficEstimate, TrafficSources

logger = get_logger(__name__)

SIMILARWEB_BASE_URL = "https://api.similarweb.com/v1"


def _int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def parse_similarweb_traffic(visits: Dict[str, Any], sources: Optional[Dict[str, Any]]) -> TrafficEstimate:
    """Map SimilarWeb visits and traffic-source responses onto TrafficEstimate."""
    share = _as_dict(_as_dict(sources).get("sources"))
    return TrafficEstimate(
        total_visits=_int(visits.get("totalVisits") or visits.get("visits")),
        unique_visitors=_int(visits.get("uniqueVisitors")),
        page_views=_int(visits.get("pageViews")),
        traffic_sources=TrafficSources(
            direct=_int(share.get("direct")),
            search=_int(share.get("search")),
            social=_int(share.get("social")),
            referral=_int(share.get("referral")),
            email=_int(share.get("email") or share.get("mail")),
        ),
        source=EstimateSource.LIVE,
    )


class TrafficLookup:
    """
    Args:
        api_key: SimilarWeb API key; empty means simulated traffic
        fallback: Provider for simulated estimates
        fetch: JSON fetcher, defaults to fetch_json
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        fallback: Optional[FallbackDataProvider] = None,
        fetch: Optional[FetchFn] = None,
        timeout: float = 10.0,
        retries: int = 2,
    ):
        self.api_key = api_key or ""
        self.fallback = fallback or FallbackDataProvider()
        self._fetch = fetch or fetch_json
        self.timeout = timeout
        self.retries = retries

    @classmethod
    def from_config(cls, fallback: Optional[FallbackDataProvider] = None) -> "TrafficLookup":
        config = get_config()
        return cls(
            api_key=config.similarweb_api_key,
            fallback=fallback or FallbackDataProvider(config.fallback_seed),
            timeout=config.http_timeout_s,
            retries=config.http_max_retries,
        )

    def live_traffic(self, domain: str) -> Optional[TrafficEstimate]:
        if not self.api_key:
            return None
        headers = {"api-key": self.api_key}
        visits = self._fetch(
            f"{SIMILARWEB_BASE_URL}/website/{domain}/total-traffic-and-engagement/visits",
            params={"granularity": "monthly"},
            headers=headers,
            timeout=self.timeout,
            retries=self.retries,
        )
        if not isinstance(visits, dict) or not visits:
            logger.debug(f"No usable SimilarWeb visits for {domain}")
            return None
        sources = self._fetch(
            f"{SIMILARWEB_BASE_URL}/website/{domain}/traffic-sources/overview",
            headers=headers,
            timeout=self.timeout,
            retries=self.retries,
        )
        return parse_similarweb_traffic(visits, sources)

    def estimates_for(self, domain: str) -> Estimates:
        """Simulated estimates, with live traffic swapped in when the lookup works."""
        simulated = self.fallback.simulated_estimates(domain)
        try:
            traffic = self.live_traffic(domain)
        except Exception as e:
            logger.warning(f"SimilarWeb traffic for {domain} unusable: {e}")
            get_error_logger().log_exception(
                e,
                component=ErrorComponent.LOOKUP,
                stage=ErrorStage.PARSE_JSON,
                domain=domain,
                severity=ErrorSeverity.WARNING,
                metadata={"lookup": "similarweb"},
            )
            return simulated
        if traffic is None:
            return simulated
        logger.debug(f"Live traffic for {domain}: {traffic.total_visits} visits")
        return simulated.model_copy(update={"traffic": traffic})
