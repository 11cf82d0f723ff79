"""
Local search ranking lookup (Google Custom Search + Places text search).

Ranking rules:
    - organic rank: first result whose title or snippet names the business
    - local pack: a Places result whose name or address names the business
    - ranking: 1 when in the local pack, else the organic rank, else -1
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional

from src.core.config import get_config
from src.core.logging import get_logger
from src.lookups.http_client import fetch_json
from src.models.payload import EstimateSource
from src.models.results import KeywordRanking
from src.models.targets import RankingTarget

logger = get_logger(__name__)

CUSTOM_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
PLACES_TEXT_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/textsearch/json"
FEATURED_OG_TYPES = ("article", "website")

FetchFn = Callable[..., Optional[Any]]


def _dict_items(value: Any) -> List[Dict[str, Any]]:
    """Keep the object entries of a decoded JSON list."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def organic_rank(items: List[Dict[str, Any]], business_name: str) -> int:
    """1-based position of the first item naming the business, -1 if none."""
    needle = business_name.lower()
    for position, item in enumerate(items or [], start=1):
        title = str(item.get("title") or "").lower()
        snippet = str(item.get("snippet") or "").lower()
        if needle in title or needle in snippet:
            return position
    return -1


def has_featured_snippet(items: List[Dict[str, Any]]) -> bool:
    if not items:
        return False
    pagemap = items[0].get("pagemap")
    metatags = _dict_items(pagemap.get("metatags") if isinstance(pagemap, dict) else None)
    return any(tag.get("og:type") in FEATURED_OG_TYPES for tag in metatags)


def in_local_pack(places: List[Dict[str, Any]], business_name: str) -> bool:
    needle = business_name.lower()
    return any(
        needle in str(place.get("name") or "").lower()
        or needle in str(place.get("formatted_address") or "").lower()
        for place in places or []
    )


class RankingLookup:
    """
    Looks up where a business ranks for one keyword in one location.

    Without an API key and search engine id every lookup returns an unranked
    keyword labelled as fallback data.

    Args:
        api_key: Google API key
        cse_id: Custom Search engine id
        fetch: JSON fetcher, defaults to fetch_json
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        cse_id: Optional[str] = None,
        fetch: Optional[FetchFn] = None,
        timeout: float = 10.0,
        retries: int = 2,
    ):
        self.api_key = api_key or ""
        self.cse_id = cse_id or ""
        self._fetch = fetch or fetch_json
        self.timeout = timeout
        self.retries = retries

    @classmethod
    def from_config(cls) -> "RankingLookup":
        config = get_config()
        return cls(
            api_key=config.google_api_key,
            cse_id=config.google_cse_id,
            timeout=config.http_timeout_s,
            retries=config.http_max_retries,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.cse_id)

    def lookup(self, target: RankingTarget) -> KeywordRanking:
        if not self.configured:
            return KeywordRanking.unranked(target)

        query = target.search_query
        search = self._fetch(
            CUSTOM_SEARCH_URL,
            params={"key": self.api_key, "cx": self.cse_id, "q": query, "num": 10},
            timeout=self.timeout,
            retries=self.retries,
        )
        if not isinstance(search, dict):
            return KeywordRanking.unranked(target, message="search lookup unavailable")

        items = _dict_items(search.get("items"))
        organic = organic_rank(items, target.business_name)

        places = self._fetch(
            PLACES_TEXT_SEARCH_URL,
            params={"query": query, "key": self.api_key, "type": "establishment"},
            timeout=self.timeout,
            retries=self.retries,
        )
        results = places.get("results") if isinstance(places, dict) else None
        local_pack = in_local_pack(_dict_items(results), target.business_name)

        if local_pack:
            ranking = 1
        elif organic > 0:
            ranking = organic
        else:
            ranking = -1

        logger.debug(f"'{query}' for {target.business_name}: ranking={ranking} local_pack={local_pack}")
        return KeywordRanking(
            keyword=target.keyword,
            search_query=query,
            ranking=ranking,
            organic_ranking=organic,
            local_pack=local_pack,
            featured_snippet=has_featured_snippet(items),
            source=EstimateSource.LIVE,
        )

    async def rank(self, session, target: RankingTarget) -> KeywordRanking:
        """Orchestrator item function; the session is unused."""
        return await asyncio.to_thread(self.lookup, target)
