"""
Deterministic aggregation over tagged results.

Exports:
    - aggregate: Extraction results -> CompetitorAnalysisReport
    - build_profile: One result -> CompetitorProfile
    - summarize_submissions: Submission results -> CitationBatchSummary
    - summarize_rankings: Keyword rankings -> RankingSummary
"""

from src.analysis.citations import (
    calculate_profile_completeness,
    find_citation_inconsistencies,
    identify_missing_citations,
    summarize_submissions,
)
from src.analysis.profiles import build_profile, build_profiles
from src.analysis.rankings import (
    calculate_overall_score,
    generate_local_recommendations,
    score_competitor,
    summarize_rankings,
)
from src.analysis.synthesis import aggregate, synthesize

__all__ = [
    "aggregate",
    "build_profile",
    "build_profiles",
    "calculate_overall_score",
    "calculate_profile_completeness",
    "find_citation_inconsistencies",
    "generate_local_recommendations",
    "identify_missing_citations",
    "score_competitor",
    "summarize_rankings",
    "summarize_submissions",
    "synthesize",
]
