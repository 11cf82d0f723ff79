"""
Local ranking summary, overall local score and recommendations.
"""

from typing import List, Sequence

from src.analysis.scoring import calculate_competitor_score
from src.models.reports import (
    CompetitorRankingScore,
    LocalRecommendation,
    RankingSummary,
)
from src.models.results import KeywordRanking

RANKING_POINTS = 50
COMPLETENESS_POINTS = 30
LOCAL_PACK_POINTS = 20
POINTS_PER_LOCAL_PACK = 4


def _ranked(rankings: Sequence[KeywordRanking]) -> List[KeywordRanking]:
    return [r for r in rankings or [] if r.ranking > 0]


def calculate_overall_score(rankings: Sequence[KeywordRanking], profile_completeness: int) -> int:
    """
    Overall local score out of 100.

    - ranking: 50 - (average rank - 1) * 5, floor 0, only over ranked keywords
    - profile completeness: completeness * 0.3, capped at 30
    - local pack: 4 per appearance, capped at 20
    """
    ranked = _ranked(rankings)
    score = 0.0
    if ranked:
        avg_rank = sum(r.ranking for r in ranked) / len(ranked)
        score += max(0.0, RANKING_POINTS - (avg_rank - 1) * 5)
    score += min(COMPLETENESS_POINTS, max(0, profile_completeness) * 0.3)
    local_pack = sum(1 for r in ranked if r.local_pack)
    score += min(LOCAL_PACK_POINTS, local_pack * POINTS_PER_LOCAL_PACK)
    return int(round(score))


def summarize_rankings(rankings: Sequence[KeywordRanking], profile_completeness: int = 0) -> RankingSummary:
    """
    Example:
        >>> summarize_rankings([]).overall_score
        0
    """
    rankings = list(rankings or [])
    ranked = _ranked(rankings)
    average_ranking = round(sum(r.ranking for r in ranked) / len(ranked)) if ranked else 0
    return RankingSummary(
        total_keywords=len(rankings),
        average_ranking=average_ranking,
        top3_rankings=sum(1 for r in ranked if r.ranking <= 3),
        local_pack_appearances=sum(1 for r in ranked if r.local_pack),
        overall_score=calculate_overall_score(rankings, profile_completeness),
    )


def score_competitor(name: str, rankings: Sequence[KeywordRanking]) -> CompetitorRankingScore:
    return CompetitorRankingScore(
        name=name,
        keywords=list(rankings),
        overall_score=calculate_competitor_score(rankings),
    )


def generate_local_recommendations(
    summary: RankingSummary, profile_completeness: int
) -> List[LocalRecommendation]:
    recommendations: List[LocalRecommendation] = []

    if summary.average_ranking > 5:
        recommendations.append(LocalRecommendation(
            priority="High",
            category="Rankings",
            recommendation="Focus on improving local keyword rankings through content optimization and citation building",
            action="Create location-specific content and build local citations",
        ))

    if summary.local_pack_appearances < summary.total_keywords * 0.3:
        recommendations.append(LocalRecommendation(
            priority="High",
            category="Local Pack",
            recommendation="Increase presence in Google Local Pack results",
            action="Optimize Google My Business profile and encourage customer reviews",
        ))

    if profile_completeness < 80:
        recommendations.append(LocalRecommendation(
            priority="Medium",
            category="GMB Optimization",
            recommendation="Complete Google My Business profile to improve local visibility",
            action="Add missing information, photos, and business hours",
        ))

    return recommendations
