"""
Core utilities shared by every component:
- Configuration management
- Structured logging
- Exception taxonomy
- Error and process logging
"""

from src.core.logging import get_logger, setup_logging
from src.core.config import get_config, Config
from src.core.exceptions import (
    FailureReason,
    AutomationError,
    NavigationTimeout,
    NavigationFailed,
    ExtractionQueryFailed,
    SessionStartFailed,
    SubmissionFieldNotFound,
    SubmissionSubmitNotFound,
)
from src.core.error_logger import get_error_logger
from src.core.process_logger import get_process_logger
from src.core.error_models import (
    ErrorComponent,
    ErrorSeverity,
    ErrorType,
    ErrorStage,
    ErrorRecord,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "get_config",
    "Config",
    "FailureReason",
    "AutomationError",
    "NavigationTimeout",
    "NavigationFailed",
    "ExtractionQueryFailed",
    "SessionStartFailed",
    "SubmissionFieldNotFound",
    "SubmissionSubmitNotFound",
    "get_error_logger",
    "get_process_logger",
    "ErrorComponent",
    "ErrorSeverity",
    "ErrorType",
    "ErrorStage",
    "ErrorRecord",
]
