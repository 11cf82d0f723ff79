"""
Competitor analysis: extract every competitor site in one batch and aggregate
the results into a CompetitorAnalysisReport.
"""

import asyncio
from typing import List, Optional, Sequence

from src.analysis.synthesis import SwotNarrator, aggregate
from src.automation.extractor import TargetExtractor
from src.automation.queries import ExtractionProfile
from src.automation.session import AutomationSession
from src.batch.cancellation import CancelToken
from src.core.config import get_config
from src.core.logging import get_logger
from src.fallback.provider import FallbackDataProvider
from src.lookups.traffic import TrafficLookup
from src.models.reports import AnalysisContext, CompetitorAnalysisReport
from src.models.results import ExtractionResult
from src.models.targets import CompetitorURL
from src.services.base import BatchService, session_from_config
from src.utils.url_utils import normalize_target_url

logger = get_logger(__name__)


def build_targets(urls: Sequence[str], context: AnalysisContext) -> List[CompetitorURL]:
    """
    One CompetitorURL per input, in input order.

    Bare domains get a scheme. Unusable strings are kept as given so the batch
    still reports a failed result for them.
    """
    targets = []
    for i, raw in enumerate(urls):
        name = context.competitor_names[i] if i < len(context.competitor_names) else None
        targets.append(CompetitorURL(
            url=normalize_target_url(raw) or raw,
            industry=context.industry,
            name=name or None,
        ))
    return targets


class CompetitorAnalysisService(BatchService):
    """
    Args:
        session: Browser session; built from Config when omitted
        extractor: Target extractor
        traffic: Off-page estimate lookup
        narrator: Optional SWOT narrator
        use_browser: False skips the browser and reports fallback payloads
    """

    batch_kind = "competitors"

    def __init__(
        self,
        session: Optional[AutomationSession] = None,
        extractor: Optional[TargetExtractor] = None,
        traffic: Optional[TrafficLookup] = None,
        narrator: Optional[SwotNarrator] = None,
        use_browser: bool = True,
        **batch_options,
    ):
        super().__init__(**batch_options)
        self.use_browser = use_browser
        self.session = session
        self.extractor = extractor or TargetExtractor()
        self.traffic = traffic or TrafficLookup()
        self.narrator = narrator

    @property
    def fallback(self) -> FallbackDataProvider:
        return self.traffic.fallback

    @classmethod
    def from_config(cls, use_browser: bool = True) -> "CompetitorAnalysisService":
        from src.llm import GeminiSwotNarrator

        config = get_config()
        fallback = FallbackDataProvider(config.fallback_seed)
        return cls(
            session=session_from_config() if use_browser else None,
            extractor=TargetExtractor(
                profile=ExtractionProfile(nav_timeout_ms=config.nav_timeout_ms, settle_ms=config.settle_ms)
            ),
            traffic=TrafficLookup.from_config(fallback),
            narrator=GeminiSwotNarrator.from_config(),
            use_browser=use_browser,
        )

    async def extract_one(self, session: Optional[AutomationSession], target: CompetitorURL) -> ExtractionResult:
        """Orchestrator item function: extraction plus off-page estimates."""
        if not self.use_browser:
            estimates = await asyncio.to_thread(self.traffic.estimates_for, target.domain)
            return self.fallback.fallback_result(target, estimates)

        result = await self.extractor.extract(session, target)
        if result.is_failed:
            return result

        estimates = await asyncio.to_thread(self.traffic.estimates_for, target.domain)
        return result.with_payload(result.payload.model_copy(update={"estimates": estimates}))

    async def analyze(
        self,
        urls: Sequence[str],
        context: Optional[AnalysisContext] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> CompetitorAnalysisReport:
        """
        Run the competitor batch and aggregate it.

        Returns:
            CompetitorAnalysisReport with one profile per URL, in order

        Raises:
            SessionStartFailed: If the browser cannot be started
        """
        context = context or AnalysisContext()
        targets = build_targets(urls, context)

        session = None
        if self.use_browser:
            if self.session is None:
                self.session = session_from_config()
            session = self.session

        batch = await self.orchestrator(session).run_batch(targets, self.extract_one, cancel_token)
        self.last_batch = batch

        # narrator calls block (Gemini request plus retry sleeps)
        report = await asyncio.to_thread(aggregate, batch.results, context, self.narrator)
        self.log_report(batch, context.industry, {
            "successful": report.successful_extractions,
            "failed": report.failed_extractions,
            "swot_source": report.swot.source,
        })
        return report
