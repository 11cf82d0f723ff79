"""
Shared plumbing for the end-to-end services.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from src.automation.session import AutomationSession
from src.batch.orchestrator import BatchOrchestrator
from src.core.config import get_config
from src.core.process_logger import get_process_logger
from src.core.process_models import ProcessStatus, ProcessStep
from src.models.reports import BatchReport


def session_from_config() -> AutomationSession:
    config = get_config()
    return AutomationSession(headless=config.headless, user_agent=config.user_agent)


class BatchService:
    """
    Base for services that run one orchestrated batch and build a report.

    Unset batch settings are read from Config.

    Args:
        inter_item_delay: Seconds between items
        concurrency: Items in flight at once
        deadline_s: Optional batch deadline
        process_logger: Step sink, defaults to the global process logger
    """

    batch_kind = "batch"

    def __init__(
        self,
        inter_item_delay: Optional[float] = None,
        concurrency: Optional[int] = None,
        deadline_s: Optional[float] = None,
        process_logger=None,
    ):
        config = get_config()
        self.inter_item_delay = config.inter_item_delay_s if inter_item_delay is None else inter_item_delay
        self.concurrency = config.batch_concurrency if concurrency is None else concurrency
        self.deadline_s = config.batch_deadline_s if deadline_s is None else deadline_s
        self._process_logger = process_logger
        self.last_batch: Optional[BatchReport] = None

    @property
    def process_logger(self):
        if self._process_logger is None:
            self._process_logger = get_process_logger()
        return self._process_logger

    def orchestrator(self, session: Optional[AutomationSession]) -> BatchOrchestrator:
        return BatchOrchestrator(
            session=session,
            batch_kind=self.batch_kind,
            inter_item_delay=self.inter_item_delay,
            concurrency=self.concurrency,
            deadline_s=self.deadline_s,
            process_logger=self._process_logger,
        )

    def log_report(self, batch: BatchReport, target: str, metadata: Dict[str, Any]) -> None:
        self.process_logger.log_step(
            run_id=batch.run_id,
            step=ProcessStep.REPORT_COMPLETE,
            batch_kind=self.batch_kind,
            target=target or self.batch_kind,
            started_at=batch.started_at,
            completed_at=datetime.now(timezone.utc).isoformat(),
            status=ProcessStatus.SUCCESS,
            metadata={"total": batch.total, "cancelled": batch.cancelled, **metadata},
        )
