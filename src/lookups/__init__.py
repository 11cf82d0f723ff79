"""
Outbound third-party lookups. Every lookup has a fallback.

Exports:
    - fetch_json: GET + JSON decode with retry, None on failure
    - RankingLookup: Google Custom Search / Places local ranking
    - TrafficLookup: SimilarWeb traffic with simulated fallback
"""

from src.lookups.http_client import fetch_json
from src.lookups.rankings import RankingLookup
from src.lookups.traffic import TrafficLookup

__all__ = ["fetch_json", "RankingLookup", "TrafficLookup"]
