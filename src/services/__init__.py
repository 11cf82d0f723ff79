"""
End-to-end services: one batch in, one report out.
"""

from src.services.competitor_analysis import CompetitorAnalysisService
from src.services.citation_building import CitationBuildingService
from src.services.local_rankings import LocalRankingService

__all__ = [
    "CompetitorAnalysisService",
    "CitationBuildingService",
    "LocalRankingService",
]
