"""
Local performance: keyword rankings for the business and its competitors,
scored together with profile completeness.
"""

from typing import List, Optional, Sequence

from src.analysis.citations import calculate_profile_completeness
from src.analysis.rankings import (
    generate_local_recommendations,
    score_competitor,
    summarize_rankings,
)
from src.batch.cancellation import CancelToken
from src.core.logging import get_logger
from src.lookups.rankings import RankingLookup
from src.models.reports import LocalPerformanceReport
from src.models.targets import BusinessData, RankingTarget
from src.services.base import BatchService

logger = get_logger(__name__)


def ranking_targets(name: str, keywords: Sequence[str], location: str) -> List[RankingTarget]:
    return [RankingTarget(keyword=k, location=location, business_name=name) for k in keywords]


class LocalRankingService(BatchService):
    """
    Ranking lookups go through the orchestrator without a browser session, so
    they get the same ordering, delay and cancellation as the page batches.

    Args:
        lookup: Ranking lookup, built from Config when omitted
    """

    batch_kind = "rankings"

    def __init__(self, lookup: Optional[RankingLookup] = None, **batch_options):
        super().__init__(**batch_options)
        self.lookup = lookup or RankingLookup.from_config()

    async def report(
        self,
        business: BusinessData,
        keywords: Sequence[str],
        competitors: Sequence[str] = (),
        cancel_token: Optional[CancelToken] = None,
    ) -> LocalPerformanceReport:
        """
        Rank the business and each competitor for every keyword.

        Returns:
            LocalPerformanceReport; keywords that could not be looked up
            count as unranked
        """
        name = business.business_name or "Unknown"
        keywords = [k for k in keywords if k.strip()]
        location = business.location

        targets = ranking_targets(name, keywords, location)
        for competitor in competitors:
            targets.extend(ranking_targets(competitor, keywords, location))

        batch = await self.orchestrator(None).run_batch(targets, self.lookup.rank, cancel_token)
        self.last_batch = batch

        n = len(keywords)
        rankings = batch.results[:n]
        competitor_scores = [
            score_competitor(competitor, batch.results[n * (i + 1): n * (i + 2)])
            for i, competitor in enumerate(competitors)
        ]

        completeness = calculate_profile_completeness(business)
        summary = summarize_rankings(rankings, completeness)
        report = LocalPerformanceReport(
            business_name=name,
            location=location or "Unknown",
            profile_completeness=completeness,
            rankings=rankings,
            summary=summary,
            competitors=competitor_scores,
            recommendations=generate_local_recommendations(summary, completeness),
        )

        logger.info(
            f"Local report for {name}: {summary.total_keywords} keywords, "
            f"average rank {summary.average_ranking}, score {summary.overall_score}"
        )
        self.log_report(batch, name, {"keywords": n, "overall_score": summary.overall_score})
        return report
