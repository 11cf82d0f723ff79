"""
Unit tests for local ranking summaries and recommendations.
"""

from src.analysis.rankings import (
    calculate_overall_score,
    generate_local_recommendations,
    score_competitor,
    summarize_rankings,
)
from src.models.reports import RankingSummary
from src.models.results import KeywordRanking


def _rank(keyword: str, ranking: int, local_pack: bool = False) -> KeywordRanking:
    return KeywordRanking(keyword=keyword, ranking=ranking, local_pack=local_pack)


class TestOverallScore:
    def test_ranking_completeness_and_local_pack(self):
        rankings = [_rank("plumber", 1, local_pack=True), _rank("drain cleaning", 3)]
        # 50 - (2 - 1) * 5 = 45, completeness 30, one local pack 4
        assert calculate_overall_score(rankings, 100) == 79

    def test_unranked_keywords_only_count_completeness(self):
        assert calculate_overall_score([_rank("plumber", -1)], 50) == 15

    def test_local_pack_points_capped(self):
        rankings = [_rank(f"kw{i}", 1, local_pack=True) for i in range(8)]
        assert calculate_overall_score(rankings, 0) == 70

    def test_poor_rankings_floor_at_zero(self):
        assert calculate_overall_score([_rank("plumber", 20)], 0) == 0


class TestSummary:
    def test_summary_counts(self):
        rankings = [
            _rank("plumber", 2, local_pack=True),
            _rank("water heater", 5),
            _rank("emergency plumber", -1),
        ]
        summary = summarize_rankings(rankings, profile_completeness=75)

        assert summary.total_keywords == 3
        assert summary.average_ranking == 4
        assert summary.top3_rankings == 1
        assert summary.local_pack_appearances == 1
        assert summary.overall_score == calculate_overall_score(rankings, 75)

    def test_empty(self):
        assert summarize_rankings([]) == RankingSummary()


class TestCompetitorScore:
    def test_mean_of_ranked_keywords(self):
        score = score_competitor("Rival Plumbing", [_rank("a", 1), _rank("b", 3), _rank("c", -1)])
        assert score.name == "Rival Plumbing"
        assert score.overall_score == 90
        assert len(score.keywords) == 3


class TestRecommendations:
    def test_weak_profile_gets_all_three(self):
        summary = RankingSummary(total_keywords=5, average_ranking=8, local_pack_appearances=0)
        recommendations = generate_local_recommendations(summary, profile_completeness=50)
        assert [r.category for r in recommendations] == ["Rankings", "Local Pack", "GMB Optimization"]

    def test_strong_profile_gets_none(self):
        summary = RankingSummary(total_keywords=5, average_ranking=2, local_pack_appearances=3)
        assert generate_local_recommendations(summary, profile_completeness=90) == []
