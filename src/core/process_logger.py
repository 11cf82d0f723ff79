"""
Process logging for batch runs with Supabase integration.

Falls back to `logs/process/process_<date>.jsonl` when Supabase is not
configured. Logging a step never raises.
"""

import uuid
from pathlib import Path
from typing import Optional, Dict, Any
from datetime import datetime, timezone

from src.core.config import get_config
from src.core.logging import get_logger
from src.core.sink import RecordSink, create_supabase_client
from src.core.process_models import (
    ProcessStep,
    ProcessStatus,
    ProcessLogRecord,
    get_step_description,
)

logger = get_logger(__name__)

PROCESS_LOG_TABLE = "process_logs"

_process_logger: Optional["ProcessLogger"] = None


class ProcessLogger:
    """
    Batch step logger with database and file fallback.

    Usage:
        >>> process_logger = get_process_logger()
        >>> run_id = process_logger.generate_run_id()
        >>> process_logger.log_step(
        ...     run_id=run_id,
        ...     step=ProcessStep.BATCH_START,
        ...     batch_kind="competitors",
        ...     target="batch",
        ...     metadata={"total": 3}
        ... )
    """

    def __init__(self, fallback_dir: Path, client=None):
        self._sink = RecordSink(PROCESS_LOG_TABLE, fallback_dir, "process", client=client)

    @property
    def fallback_dir(self) -> Path:
        return self._sink.fallback_dir

    @staticmethod
    def generate_run_id() -> str:
        return str(uuid.uuid4())

    def log_step(
        self,
        run_id: str,
        step: ProcessStep,
        batch_kind: str,
        target: str,
        started_at: Optional[str] = None,
        completed_at: Optional[str] = None,
        status: ProcessStatus = ProcessStatus.SUCCESS,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Log a process step. Never raises.

        Args:
            run_id: UUID correlating all steps in a batch
            step: Process step type
            batch_kind: Kind of batch (competitors, citations, rankings)
            target: Target domain, directory name, or "batch"
            started_at: Step start timestamp (defaults to now)
            completed_at: Step completion timestamp (None while in progress)
            status: Execution status
            metadata: Additional context

        Returns:
            True if logged successfully, False otherwise
        """
        try:
            now = datetime.now(timezone.utc).isoformat()
            record = ProcessLogRecord(
                run_id=run_id,
                step=step,
                batch_kind=batch_kind,
                target=target,
                started_at=started_at or now,
                completed_at=completed_at,
                status=status,
                metadata=metadata or {},
            )
            record.duration_seconds = record.calculate_duration()

            desc = get_step_description(step, **{"batch_kind": batch_kind, **(metadata or {})})
            logger.info(f"[Process] {batch_kind} | {record.target} | {record.step} | {desc}")

            return self._sink.write(record.model_dump())
        except Exception as e:
            logger.error(f"Process logger failed: {e} - Step: {step}")
            return False


def get_process_logger() -> ProcessLogger:
    """Get the global ProcessLogger instance, built from configuration on first use."""
    global _process_logger
    if _process_logger is None:
        config = get_config()
        client = None
        if config.supabase_enabled:
            client = create_supabase_client(
                config.supabase_url, config.supabase_service_role_key, "Process logging"
            )
        _process_logger = ProcessLogger(fallback_dir=config.log_dir / "process", client=client)
    return _process_logger
