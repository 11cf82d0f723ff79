"""
Citation building: submit the business to a list of directories and summarize
what was submitted, what failed and which listings are still missing.
"""

from typing import Optional, Sequence

from src.analysis.citations import summarize_submissions
from src.automation.session import AutomationSession
from src.automation.strategies import DEFAULT_DIRECTORIES, DirectoryDispatcher, SubmissionTimings
from src.batch.cancellation import CancelToken
from src.core.config import get_config
from src.core.logging import get_logger
from src.models.reports import CitationBatchSummary, CitationListing
from src.models.results import SubmissionResult
from src.models.targets import BusinessData, DirectoryDescriptor
from src.services.base import BatchService, session_from_config

logger = get_logger(__name__)


class CitationBuildingService(BatchService):
    """
    Args:
        session: Browser session; built from Config when omitted
        dispatcher: Directory dispatcher
    """

    batch_kind = "citations"

    def __init__(
        self,
        session: Optional[AutomationSession] = None,
        dispatcher: Optional[DirectoryDispatcher] = None,
        **batch_options,
    ):
        super().__init__(**batch_options)
        self.session = session
        self.dispatcher = dispatcher or DirectoryDispatcher()

    @classmethod
    def from_config(cls) -> "CitationBuildingService":
        config = get_config()
        return cls(
            session=session_from_config(),
            dispatcher=DirectoryDispatcher(SubmissionTimings(nav_timeout_ms=config.nav_timeout_ms)),
        )

    async def build(
        self,
        business: BusinessData,
        directories: Optional[Sequence[DirectoryDescriptor]] = None,
        existing_citations: Sequence[CitationListing] = (),
        cancel_token: Optional[CancelToken] = None,
    ) -> CitationBatchSummary:
        """
        Submit `business` to every directory, in order.

        Args:
            business: NAP data and profile details
            directories: Directories to submit to, DEFAULT_DIRECTORIES when None
            existing_citations: Listings the business already has

        Raises:
            SessionStartFailed: If the browser cannot be started
        """
        directories = list(DEFAULT_DIRECTORIES if directories is None else directories)
        if self.session is None:
            self.session = session_from_config()

        async def submit(session: AutomationSession, directory: DirectoryDescriptor) -> SubmissionResult:
            return await self.dispatcher.submit(session, directory, business)

        batch = await self.orchestrator(self.session).run_batch(directories, submit, cancel_token)
        self.last_batch = batch

        summary = summarize_submissions(batch.results, business, existing_citations)
        logger.info(
            f"Citations for {summary.business_name}: {summary.total_submitted} submitted "
            f"({summary.total_low_confidence} low confidence), {summary.total_failed} failed"
        )
        self.log_report(batch, business.business_name, {
            "submitted": summary.total_submitted,
            "low_confidence": summary.total_low_confidence,
            "failed": summary.total_failed,
        })
        return summary
