"""
Centralized error logging with Supabase integration.

Every per-target failure that the extractor, dispatcher or orchestrator turns
into a tagged result is also written here as a validated ErrorRecord, so a
report that shows "Unknown" can still be traced back to its cause.
"""

from pathlib import Path
from typing import Optional, Dict, Any

from src.core.config import get_config
from src.core.logging import NO_RUN, current_run_id, get_logger
from src.core.sink import RecordSink, create_supabase_client
from src.core.error_models import (
    ErrorRecord,
    ErrorComponent,
    ErrorSeverity,
    ErrorType,
)

logger = get_logger(__name__)

ERROR_LOG_TABLE = "error_logs"

# Singleton instance
_error_logger: Optional["ErrorLogger"] = None


def _with_run_id(metadata: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Copy of metadata carrying the active batch run id, when there is one."""
    metadata = dict(metadata or {})
    run_id = current_run_id()
    if run_id != NO_RUN:
        metadata.setdefault("run_id", run_id)
    return metadata


class ErrorLogger:
    """
    Error logger with database and file fallback.

    Usage:
        >>> error_logger = get_error_logger()
        >>> error_logger.log_error(
        ...     component=ErrorComponent.EXTRACTOR,
        ...     stage=ErrorStage.NAVIGATE,
        ...     error_type=ErrorType.NAVIGATION_TIMEOUT,
        ...     domain="competitor.com",
        ...     message="Navigation timeout after 30s",
        ...     url="https://competitor.com",
        ...     metadata={"timeout_ms": 30000}
        ... )
    """

    def __init__(self, fallback_dir: Path, client=None):
        self._sink = RecordSink(ERROR_LOG_TABLE, fallback_dir, "errors", client=client)

    @property
    def fallback_dir(self) -> Path:
        return self._sink.fallback_dir

    def log_error(
        self,
        component: ErrorComponent,
        stage: str,
        error_type: ErrorType,
        domain: str,
        message: str,
        url: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        exception_type: Optional[str] = None,
        stack_trace: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Log an error. Never raises.

        Returns:
            True if logged successfully, False otherwise
        """
        try:
            record = ErrorRecord(
                component=component,
                stage=stage,
                error_type=error_type,
                severity=severity,
                domain=domain,
                url=url,
                message=message,
                exception_type=exception_type,
                stack_trace=stack_trace,
                metadata=_with_run_id(metadata),
            )
            return self._sink.write(record.model_dump())
        except Exception as e:
            logger.error(f"Error logger failed: {e} - Original error: {message}")
            return False

    def log_exception(
        self,
        exc: Exception,
        component: ErrorComponent,
        stage: str,
        domain: str,
        url: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        error_type: Optional[ErrorType] = None,
        include_stack_trace: Optional[bool] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Log an exception with automatic classification. Never raises.

        Example:
            >>> try:
            ...     await page.goto(url, timeout=30000)
            ... except PlaywrightTimeoutError as e:
            ...     error_logger.log_exception(
            ...         e,
            ...         component=ErrorComponent.EXTRACTOR,
            ...         stage=ErrorStage.NAVIGATE,
            ...         domain=domain_of(url),
            ...         url=url,
            ...     )
        """
        try:
            record = ErrorRecord.from_exception(
                exc=exc,
                component=component,
                stage=stage,
                domain=domain,
                url=url,
                severity=severity,
                error_type=error_type,
                include_stack_trace=include_stack_trace,
                metadata=_with_run_id(metadata),
            )
            return self._sink.write(record.model_dump())
        except Exception as e:
            logger.error(f"Error logger failed: {e} - Original exception: {type(exc).__name__}")
            return False


def get_error_logger() -> ErrorLogger:
    """
    Get the global ErrorLogger instance, built from configuration on first use.

    Returns:
        Global ErrorLogger singleton
    """
    global _error_logger
    if _error_logger is None:
        config = get_config()
        client = None
        if config.supabase_enabled:
            client = create_supabase_client(
                config.supabase_url, config.supabase_service_role_key, "Error logging"
            )
        _error_logger = ErrorLogger(fallback_dir=config.log_dir / "errors", client=client)
    return _error_logger
