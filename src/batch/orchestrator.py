"""
Batch orchestrator: run one item function over many targets.

The orchestrator owns the session for the duration of a batch. It starts it
before the first item, releases it exactly once when the batch ends (on
success, failure, cancellation or a fatal error) and guarantees one tagged
result per target in submission order.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional, Sequence

from src.automation.session import AutomationSession
from src.batch.cancellation import CancelToken
from src.core.error_logger import get_error_logger
from src.core.error_models import ErrorComponent, ErrorSeverity, ErrorStage
from src.core.exceptions import FailureReason, SessionStartFailed
from src.core.logging import get_logger, run_context
from src.core.process_logger import get_process_logger
from src.core.process_models import ProcessStatus, ProcessStep
from src.models.reports import BatchReport
from src.models.results import TaggedResult, Target, failed_result_for

logger = get_logger(__name__)

ItemFn = Callable[[Optional[AutomationSession], Target], Awaitable[TaggedResult]]

DEADLINE_MESSAGE = "batch deadline exceeded"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _outcome(result) -> str:
    if result.is_failed:
        return f"failed:{result.failure.value if result.failure else 'unknown'}"
    status = getattr(result, "status", None)
    return status.value if status is not None else "ok"


class BatchOrchestrator:
    """
    Sequential (or bounded-concurrent) batch runner.

    Args:
        session: Shared browser session; None for batches that never open a page
        batch_kind: Label written to process logs ("competitors", "citations", ...)
        inter_item_delay: Seconds to wait after each item, whatever its outcome
        concurrency: Items in flight at once (1 = strictly sequential)
        deadline_s: Optional wall-clock budget for the whole batch
        sleep: Awaitable sleep, replaceable in tests
        clock: Monotonic clock, replaceable in tests
        process_logger: Step sink, defaults to the global process logger
        error_logger: Error sink, defaults to the global error logger

    Example:
        >>> orchestrator = BatchOrchestrator(AutomationSession(), batch_kind="competitors")
        >>> report = await orchestrator.run_batch(targets, extractor.extract)
        >>> [r.status for r in report.results]
    """

    def __init__(
        self,
        session: Optional[AutomationSession] = None,
        batch_kind: str = "batch",
        inter_item_delay: float = 2.0,
        concurrency: int = 1,
        deadline_s: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        process_logger=None,
        error_logger=None,
    ):
        if inter_item_delay < 0:
            raise ValueError("inter_item_delay must be non-negative")
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        if deadline_s is not None and deadline_s <= 0:
            raise ValueError("deadline_s must be positive")

        self.session = session
        self.batch_kind = batch_kind
        self.inter_item_delay = inter_item_delay
        self.concurrency = concurrency
        self.deadline_s = deadline_s
        self._sleep = sleep
        self._clock = clock
        self._process_logger = process_logger
        self._error_logger = error_logger
        self._started: float = 0.0

    @property
    def process_logger(self):
        if self._process_logger is None:
            self._process_logger = get_process_logger()
        return self._process_logger

    @property
    def error_logger(self):
        if self._error_logger is None:
            self._error_logger = get_error_logger()
        return self._error_logger

    async def run_batch(
        self,
        targets: Sequence[Target],
        item_fn: ItemFn,
        cancel_token: Optional[CancelToken] = None,
    ) -> BatchReport:
        """
        Run `item_fn(session, target)` for every target.

        Args:
            targets: Ordered targets
            item_fn: Coroutine producing one tagged result per target
            cancel_token: Optional token checked between items

        Returns:
            BatchReport whose results[i] belongs to targets[i]

        Raises:
            SessionStartFailed: If the browser cannot be started; the session
                is still released before the error propagates
        """
        run_id = self.process_logger.generate_run_id()
        with run_context(run_id):
            return await self._run_batch(run_id, list(targets), item_fn, cancel_token or CancelToken())

    async def _run_batch(self, run_id, targets, item_fn, token) -> BatchReport:
        report = BatchReport(run_id=run_id, batch_kind=self.batch_kind)
        results: List[Optional[TaggedResult]] = [None] * len(targets)
        self._started = self._clock()

        self._log_step(run_id, ProcessStep.BATCH_START, "batch", report.started_at,
                       status=ProcessStatus.IN_PROGRESS, metadata={"total": len(targets)})
        logger.info(f"Batch {run_id[:8]} ({self.batch_kind}): {len(targets)} targets")

        try:
            if targets:
                if self.concurrency == 1:
                    await self._run_sequential(run_id, targets, item_fn, token, results)
                else:
                    await self._run_concurrent(run_id, targets, item_fn, token, results)
        except SessionStartFailed as e:
            logger.error(f"Batch {run_id[:8]} aborted: {e}")
            self._log_step(run_id, ProcessStep.BATCH_COMPLETE, "batch", report.started_at,
                           status=ProcessStatus.FAILED, metadata={"error": str(e)})
            raise
        finally:
            await self._release_session()

        remaining = [i for i, r in enumerate(results) if r is None]
        if remaining:
            reason = token.reason or "cancelled"
            for index in remaining:
                results[index] = failed_result_for(targets[index], FailureReason.CANCELLED, reason)
            report.cancelled = True
            self._log_step(run_id, ProcessStep.BATCH_CANCELLED, "batch", report.started_at,
                           metadata={"remaining": len(remaining), "reason": reason})

        report.results = results
        report.completed_at = _now()
        report.duration_seconds = round(self._clock() - self._started, 3)

        self._log_step(run_id, ProcessStep.BATCH_COMPLETE, "batch", report.started_at,
                       completed_at=report.completed_at,
                       metadata={"succeeded": report.succeeded, "failed": report.failed,
                                 "cancelled": report.cancelled})
        return report

    async def _run_sequential(self, run_id, targets, item_fn, token, results) -> None:
        for index, target in enumerate(targets):
            if self._should_stop(token):
                return
            if index == 0:
                await self._acquire_session()
            results[index] = await self._run_item(run_id, index, target, item_fn, token)
            if self.inter_item_delay:
                await self._sleep(self.inter_item_delay)

    async def _run_concurrent(self, run_id, targets, item_fn, token, results) -> None:
        await self._acquire_session()
        semaphore = asyncio.Semaphore(self.concurrency)

        async def worker(index: int, target: Target) -> None:
            async with semaphore:
                if self._should_stop(token):
                    return
                results[index] = await self._run_item(run_id, index, target, item_fn, token)
                if self.inter_item_delay:
                    await self._sleep(self.inter_item_delay)

        tasks = [asyncio.ensure_future(worker(i, t)) for i, t in enumerate(targets)]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _run_item(self, run_id, index, target, item_fn, token) -> TaggedResult:
        started_at = _now()
        remaining = self._remaining_time()
        try:
            if remaining is None:
                result = await item_fn(self.session, target)
            else:
                result = await asyncio.wait_for(item_fn(self.session, target), timeout=remaining)
        except SessionStartFailed:
            raise
        except asyncio.TimeoutError as e:
            if remaining is None:
                result = self._escaped(run_id, index, target, e)
            else:
                token.cancel(DEADLINE_MESSAGE)
                result = failed_result_for(target, FailureReason.CANCELLED, DEADLINE_MESSAGE)
        except Exception as e:
            result = self._escaped(run_id, index, target, e)

        outcome = _outcome(result)
        self._log_step(
            run_id, ProcessStep.ITEM_COMPLETE, target.label, started_at,
            completed_at=_now(),
            status=ProcessStatus.FAILED if result.is_failed else ProcessStatus.SUCCESS,
            metadata={"index": index, "outcome": outcome},
        )
        return result

    def _escaped(self, run_id, index, target, e: Exception) -> TaggedResult:
        """Convert an error that escaped the item function into a failed result."""
        logger.error(f"Item {index} ({target.label}) raised {type(e).__name__}: {e}")
        self.error_logger.log_exception(
            e,
            component=ErrorComponent.ORCHESTRATOR,
            stage=ErrorStage.RUN_ITEM,
            domain=target.domain,
            url=getattr(target, "url", None),
            severity=ErrorSeverity.ERROR,
            metadata={"run_id": run_id, "index": index},
        )
        return failed_result_for(target, FailureReason.UNEXPECTED, f"{type(e).__name__}: {e}")

    def _remaining_time(self) -> Optional[float]:
        if self.deadline_s is None:
            return None
        return max(0.0, self.deadline_s - (self._clock() - self._started))

    def _should_stop(self, token: CancelToken) -> bool:
        if token.is_cancelled:
            return True
        remaining = self._remaining_time()
        if remaining is not None and remaining <= 0:
            token.cancel(DEADLINE_MESSAGE)
            logger.warning(f"Batch deadline of {self.deadline_s}s reached")
            return True
        return False

    async def _acquire_session(self) -> None:
        if self.session is not None:
            await self.session.acquire()

    async def _release_session(self) -> None:
        if self.session is not None:
            await self.session.release()

    def _log_step(self, run_id, step, target, started_at, completed_at=None,
                  status=ProcessStatus.SUCCESS, metadata=None) -> None:
        self.process_logger.log_step(
            run_id=run_id,
            step=step,
            batch_kind=self.batch_kind,
            target=target,
            started_at=started_at,
            completed_at=completed_at,
            status=status,
            metadata=metadata,
        )
