"""
Unit tests for the HTTP JSON client and the ranking/traffic lookups.

No network: requests is exercised through a fake Session that replays
canned responses.
"""

import json

import pytest
import requests

from src.fallback import FallbackDataProvider
from src.lookups.http_client import fetch_json
from src.lookups.rankings import (
    CUSTOM_SEARCH_URL,
    PLACES_TEXT_SEARCH_URL,
    RankingLookup,
    has_featured_snippet,
    in_local_pack,
    organic_rank,
)
from src.lookups.traffic import TrafficLookup, parse_similarweb_traffic
from src.models.payload import EstimateSource
from src.models.targets import RankingTarget

API_URL = "https://api.example.com/v1/data"


def _response(status: int, body=None, raw: str = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.url = API_URL
    response.encoding = "utf-8"
    response._content = (raw if raw is not None else json.dumps(body or {})).encode("utf-8")
    return response


class FakeHTTPSession:
    """Replays responses (or raises exceptions) in order."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []
        self.closed = False

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self):
        self.closed = True


class TestFetchJson:
    def test_decodes_json(self):
        http = FakeHTTPSession(_response(200, {"items": [1, 2]}))
        assert fetch_json(API_URL, params={"q": "x"}, session=http, timeout=5) == {"items": [1, 2]}
        assert http.calls[0]["params"] == {"q": "x"}
        assert http.calls[0]["timeout"] == 5
        assert http.closed is False

    def test_retryable_status_is_retried(self):
        delays = []
        http = FakeHTTPSession(_response(503), _response(429), _response(200, {"ok": True}))

        assert fetch_json(API_URL, session=http, sleep=delays.append) == {"ok": True}
        assert len(http.calls) == 3
        assert delays == [0.5, 1.0]

    def test_client_error_not_retried(self, error_records):
        http = FakeHTTPSession(_response(403))

        assert fetch_json(API_URL, session=http, sleep=lambda _: None) is None
        assert len(http.calls) == 1

        record = error_records()[0]
        assert record["component"] == "lookup"
        assert record["stage"] == "fetch_json"
        assert record["domain"] == "api.example.com"
        assert record["severity"] == "warning"

    def test_connection_errors_exhaust_retries(self):
        http = FakeHTTPSession(*[requests.ConnectionError("refused")] * 3)
        assert fetch_json(API_URL, retries=2, session=http, sleep=lambda _: None) is None
        assert len(http.calls) == 3

    def test_invalid_json_is_none(self):
        http = FakeHTTPSession(_response(200, raw="<html>not json</html>"))
        assert fetch_json(API_URL, session=http) is None


class TestRankingHelpers:
    ITEMS = [
        {"title": "Best plumbers in Springfield", "snippet": "Top 10 list"},
        {"title": "Springfield Plumbing | Home", "snippet": "Family owned",
         "pagemap": {"metatags": [{"og:type": "website"}]}},
    ]

    def test_organic_rank_is_one_based(self):
        assert organic_rank(self.ITEMS, "Springfield Plumbing") == 2
        assert organic_rank(self.ITEMS, "Rival Rooter") == -1
        assert organic_rank([], "Anyone") == -1

    def test_featured_snippet_reads_first_item(self):
        assert has_featured_snippet(self.ITEMS) is False
        assert has_featured_snippet(self.ITEMS[1:]) is True

    def test_local_pack_matches_name_or_address(self):
        places = [{"name": "Rival Rooter", "formatted_address": "1 Elm St, Springfield Plumbing Plaza"}]
        assert in_local_pack(places, "Springfield Plumbing") is True
        assert in_local_pack(places, "Nobody") is False


class FakeFetch:
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def __call__(self, url, params=None, headers=None, timeout=10.0, retries=2):
        self.calls.append({"url": url, "params": params, "headers": headers})
        return self.responses.get(url)


@pytest.fixture
def ranking_target():
    return RankingTarget(keyword="plumber", location="Springfield, IL", business_name="Springfield Plumbing")


class TestRankingLookup:
    def test_unconfigured_returns_unranked(self, ranking_target):
        fetch = FakeFetch({})
        ranking = RankingLookup(fetch=fetch).lookup(ranking_target)

        assert ranking.ranking == -1
        assert ranking.source == EstimateSource.FALLBACK
        assert fetch.calls == []

    def test_local_pack_ranks_first(self, ranking_target):
        fetch = FakeFetch({
            CUSTOM_SEARCH_URL: {"items": TestRankingHelpers.ITEMS},
            PLACES_TEXT_SEARCH_URL: {"results": [{"name": "Springfield Plumbing"}]},
        })
        ranking = RankingLookup("key", "cx", fetch=fetch).lookup(ranking_target)

        assert ranking.ranking == 1
        assert ranking.organic_ranking == 2
        assert ranking.local_pack is True
        assert ranking.source == EstimateSource.LIVE
        assert fetch.calls[0]["params"]["q"] == "plumber Springfield, IL"

    def test_organic_rank_without_local_pack(self, ranking_target):
        fetch = FakeFetch({CUSTOM_SEARCH_URL: {"items": TestRankingHelpers.ITEMS}})
        ranking = RankingLookup("key", "cx", fetch=fetch).lookup(ranking_target)
        assert ranking.ranking == 2
        assert ranking.local_pack is False

    def test_failed_search_is_unranked(self, ranking_target):
        ranking = RankingLookup("key", "cx", fetch=FakeFetch({})).lookup(ranking_target)
        assert ranking.ranking == -1
        assert ranking.error_message == "search lookup unavailable"

    async def test_rank_is_an_item_function(self, ranking_target):
        fetch = FakeFetch({CUSTOM_SEARCH_URL: {"items": TestRankingHelpers.ITEMS}})
        ranking = await RankingLookup("key", "cx", fetch=fetch).rank(None, ranking_target)
        assert ranking.keyword == "plumber"


class TestTrafficLookup:
    VISITS = {"totalVisits": 120000.0, "uniqueVisitors": "40000", "pageViews": None}
    SOURCES = {"sources": {"direct": 35, "search": 40, "social": 12, "referral": 8, "mail": 5}}

    def test_parse_similarweb(self):
        traffic = parse_similarweb_traffic(self.VISITS, self.SOURCES)
        assert traffic.total_visits == 120000
        assert traffic.unique_visitors == 40000
        assert traffic.page_views == 0
        assert traffic.traffic_sources.email == 5
        assert traffic.source == EstimateSource.LIVE

    def test_without_key_everything_is_simulated(self):
        provider = FallbackDataProvider(seed=3)
        estimates = TrafficLookup(fallback=provider, fetch=FakeFetch({})).estimates_for("acme.example")
        assert estimates == provider.simulated_estimates("acme.example")

    def test_live_traffic_replaces_only_traffic(self):
        provider = FallbackDataProvider(seed=3)
        fetch = FakeFetch({
            "https://api.similarweb.com/v1/website/acme.example/total-traffic-and-engagement/visits": self.VISITS,
            "https://api.similarweb.com/v1/website/acme.example/traffic-sources/overview": self.SOURCES,
        })
        estimates = TrafficLookup("sw-key", fallback=provider, fetch=fetch).estimates_for("acme.example")
        simulated = provider.simulated_estimates("acme.example")

        assert estimates.traffic.total_visits == 120000
        assert estimates.traffic.source == EstimateSource.LIVE
        assert estimates.ads == simulated.ads
        assert estimates.backlinks == simulated.backlinks
        assert fetch.calls[0]["headers"] == {"api-key": "sw-key"}

    def test_failed_live_lookup_falls_back(self):
        provider = FallbackDataProvider()
        estimates = TrafficLookup("sw-key", fallback=provider, fetch=FakeFetch({})).estimates_for("acme.example")
        assert estimates.traffic.source == EstimateSource.SIMULATED

    def test_array_response_falls_back(self):
        provider = FallbackDataProvider(seed=3)
        lookup = TrafficLookup("sw-key", fallback=provider, fetch=lambda *a, **k: [{"visits": 10}])

        estimates = lookup.estimates_for("acme.example")
        assert estimates == provider.simulated_estimates("acme.example")

    def test_array_sources_keep_live_visits(self):
        fetch = FakeFetch({
            "https://api.similarweb.com/v1/website/acme.example/total-traffic-and-engagement/visits": self.VISITS,
            "https://api.similarweb.com/v1/website/acme.example/traffic-sources/overview": {"sources": [35, 40]},
        })
        estimates = TrafficLookup("sw-key", fallback=FallbackDataProvider(), fetch=fetch).estimates_for("acme.example")

        assert estimates.traffic.total_visits == 120000
        assert estimates.traffic.traffic_sources.search == 0

    def test_unexpected_fetch_error_falls_back(self, error_records):
        def broken(*args, **kwargs):
            raise KeyError("visits")

        provider = FallbackDataProvider(seed=3)
        estimates = TrafficLookup("sw-key", fallback=provider, fetch=broken).estimates_for("acme.example")

        assert estimates.traffic.source == EstimateSource.SIMULATED
        record = error_records()[0]
        assert record["component"] == "lookup"
        assert record["severity"] == "warning"
        assert record["metadata"] == {"lookup": "similarweb"}


class TestRankingLookupShapes:
    def test_array_search_response_is_unranked(self, ranking_target):
        lookup = RankingLookup("key", "cx", fetch=lambda *a, **k: [{"title": "Springfield Plumbing"}])
        ranking = lookup.lookup(ranking_target)
        assert ranking.ranking == -1
        assert ranking.error_message == "search lookup unavailable"

    def test_malformed_places_ignored(self, ranking_target):
        fetch = FakeFetch({
            CUSTOM_SEARCH_URL: {"items": ["junk", {"title": "Springfield Plumbing"}]},
            PLACES_TEXT_SEARCH_URL: {"results": "none"},
        })
        ranking = RankingLookup("key", "cx", fetch=fetch).lookup(ranking_target)
        assert ranking.ranking == 1
        assert ranking.organic_ranking == 1
        assert ranking.local_pack is False
