"""
Pydantic models for structured error logging.

This module defines type-safe error record models with automatic validation
and classification so every failed target leaves a consistent trace.
"""

import json
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field, field_validator, ConfigDict

from src.core.exceptions import AutomationError, FailureReason


class ErrorComponent(str, Enum):
    """System components that can generate errors."""
    SESSION = "session"
    EXTRACTOR = "extractor"
    DISPATCHER = "dispatcher"
    ORCHESTRATOR = "orchestrator"
    AGGREGATOR = "aggregator"
    LOOKUP = "lookup"
    LLM = "llm"
    CONFIG = "config"
    UNKNOWN = "unknown"


class ErrorSeverity(str, Enum):
    """Error severity levels matching logging standards."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorType(str, Enum):
    """
    Categorized error types for classification.

    New error types should be added here to keep the taxonomy in one place.
    """
    # Browser automation
    NAVIGATION_TIMEOUT = "navigation_timeout"
    NAVIGATION_FAILED = "navigation_failed"
    EXTRACTION_QUERY_FAILED = "extraction_query_failed"
    SESSION_START_FAILED = "session_start_failed"
    FIELD_NOT_FOUND = "field_not_found"
    SUBMIT_NOT_FOUND = "submit_not_found"
    BROWSER_ERROR = "browser_error"

    # Network/API errors
    TIMEOUT = "timeout"
    CONNECTION_ERROR = "connection_error"
    HTTP_ERROR = "http_error"
    RATE_LIMIT = "rate_limit"

    # Parsing errors
    PARSE_ERROR = "parse_error"
    JSON_ERROR = "json_error"
    VALIDATION_ERROR = "validation_error"

    # Configuration errors
    CONFIG_ERROR = "config_error"

    # Unknown/uncategorized
    UNKNOWN = "unknown"


_REASON_TO_TYPE = {
    FailureReason.NAVIGATION_TIMEOUT: ErrorType.NAVIGATION_TIMEOUT,
    FailureReason.NAVIGATION_FAILED: ErrorType.NAVIGATION_FAILED,
    FailureReason.EXTRACTION_QUERY_FAILED: ErrorType.EXTRACTION_QUERY_FAILED,
    FailureReason.SESSION_START_FAILED: ErrorType.SESSION_START_FAILED,
}


class ErrorStage:
    """
    Standardized stage names for error logging.

    Use these constants to ensure consistency across the codebase.
    """
    # Session stages
    ACQUIRE_SESSION = "acquire_session"
    RELEASE_SESSION = "release_session"
    OPEN_PAGE = "open_page"
    CLOSE_PAGE = "close_page"

    # Extractor stages
    NAVIGATE = "navigate"
    RUN_QUERY = "run_query"

    # Dispatcher stages
    PRE_STEP = "pre_step"
    FILL_FIELD = "fill_field"
    SELECT_CATEGORY = "select_category"
    SUBMIT_FORM = "submit_form"

    # Orchestrator stages
    RUN_ITEM = "run_item"

    # Lookup / LLM stages
    FETCH_JSON = "fetch_json"
    CALL_LLM = "call_llm"
    PARSE_JSON = "parse_json"

    # Config stages
    LOAD_CONFIG = "load_config"
    VALIDATE_CONFIG = "validate_config"


class ErrorRecord(BaseModel):
    """
    Structured error record for database insertion.

    This model validates all error data before logging to ensure consistency
    and prevent logging errors from causing additional failures.
    """
    component: ErrorComponent = Field(..., description="System component")
    stage: str = Field(..., min_length=1, max_length=100, description="Processing stage")
    error_type: ErrorType = Field(..., description="Error category")
    severity: ErrorSeverity = Field(default=ErrorSeverity.ERROR, description="Severity level")
    domain: str = Field(..., min_length=1, max_length=255, description="Target domain")
    message: str = Field(..., min_length=1, description="Human-readable error message")

    url: Optional[str] = Field(None, max_length=2048, description="Specific URL if applicable")
    exception_type: Optional[str] = Field(None, max_length=255, description="Exception class name")
    stack_trace: Optional[str] = Field(None, description="Stack trace for unexpected errors")

    metadata: Dict[str, Any] = Field(default_factory=dict, description="Additional context")

    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Error timestamp"
    )

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        use_enum_values=True,
    )

    @field_validator("stage")
    @classmethod
    def validate_stage(cls, v: str) -> str:
        """Ensure stage is normalized."""
        if not v or not v.strip():
            return "unknown"
        return v.strip().lower().replace(" ", "_")

    @field_validator("domain", mode="before")
    @classmethod
    def validate_domain(cls, v: Optional[str]) -> str:
        if not v or not str(v).strip():
            return "unknown"
        return str(v).strip().lower()[:255]

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        """Ensure message is not empty."""
        if not v or not v.strip():
            return "No error message provided"
        return v.strip()[:5000]

    @field_validator("metadata")
    @classmethod
    def sanitize_metadata(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        """Convert non-JSON-serializable metadata values to strings."""
        sanitized = {}
        for key, value in v.items():
            try:
                json.dumps(value)
                sanitized[key] = value
            except (TypeError, ValueError):
                sanitized[key] = str(value)
        return sanitized

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        component: ErrorComponent,
        stage: str,
        domain: str,
        url: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        error_type: Optional[ErrorType] = None,
        include_stack_trace: Optional[bool] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "ErrorRecord":
        """
        Create ErrorRecord from an exception with automatic classification.

        Example:
            >>> try:
            ...     await page.goto(url, timeout=30000)
            ... except PlaywrightTimeoutError as e:
            ...     record = ErrorRecord.from_exception(
            ...         e,
            ...         component=ErrorComponent.EXTRACTOR,
            ...         stage=ErrorStage.NAVIGATE,
            ...         domain="competitor.com",
            ...     )
        """
        if error_type is None:
            error_type = cls._classify_exception(exc)

        message = str(exc) or f"{type(exc).__name__} occurred"
        exception_type = f"{type(exc).__module__}.{type(exc).__name__}"

        if include_stack_trace is None:
            include_stack_trace = cls._should_include_stack(exc, severity)

        stack_trace = None
        if include_stack_trace:
            stack_trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
            if len(stack_trace) > 10000:
                stack_trace = stack_trace[:10000] + "\n... (truncated)"

        return cls(
            component=component,
            stage=stage,
            error_type=error_type,
            severity=severity,
            domain=domain,
            url=url,
            message=message,
            exception_type=exception_type,
            stack_trace=stack_trace,
            metadata=metadata or {},
        )

    @staticmethod
    def _classify_exception(exc: Exception) -> ErrorType:
        """
        Automatically classify exception into ErrorType.

        Automation errors carry their own reason; everything else is matched
        on exception name and message patterns.
        """
        if isinstance(exc, AutomationError):
            return _REASON_TO_TYPE.get(exc.reason, ErrorType.BROWSER_ERROR)

        exc_name = type(exc).__name__.lower()
        exc_msg = str(exc).lower()

        if "validation" in exc_name:
            return ErrorType.VALIDATION_ERROR
        if "timeout" in exc_name or "timeout" in exc_msg:
            return ErrorType.TIMEOUT
        if "connection" in exc_name:
            return ErrorType.CONNECTION_ERROR
        if "429" in exc_msg or "rate limit" in exc_msg:
            return ErrorType.RATE_LIMIT
        if "http" in exc_name or "status" in exc_msg:
            return ErrorType.HTTP_ERROR
        if "json" in exc_name:
            return ErrorType.JSON_ERROR
        if "parse" in exc_name:
            return ErrorType.PARSE_ERROR
        if "playwright" in type(exc).__module__ or "browser" in exc_name:
            return ErrorType.BROWSER_ERROR

        return ErrorType.UNKNOWN

    @staticmethod
    def _should_include_stack(exc: Exception, severity: ErrorSeverity) -> bool:
        """
        Expected errors (timeouts, navigation failures) don't need stacks.
        Unexpected errors do.
        """
        if severity == ErrorSeverity.CRITICAL:
            return True

        if severity in (ErrorSeverity.WARNING, ErrorSeverity.INFO, ErrorSeverity.DEBUG):
            return False

        if isinstance(exc, AutomationError):
            return False

        expected = (
            'ValidationError',
            'ValueError',
            'TimeoutError',
        )
        return type(exc).__name__ not in expected
