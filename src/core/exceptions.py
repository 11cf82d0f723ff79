"""
Exception taxonomy for browser automation.

Every per-target exception carries a FailureReason so the Extractor and
Dispatcher can turn it into a tagged result at their boundary. Only
SessionStartFailed is allowed to escape a batch.
"""

from enum import Enum
from typing import Optional


class FailureReason(str, Enum):
    """Classification carried by failed tagged results."""
    NAVIGATION_TIMEOUT = "navigation_timeout"
    NAVIGATION_FAILED = "navigation_failed"
    EXTRACTION_QUERY_FAILED = "extraction_query_failed"
    SESSION_START_FAILED = "session_start_failed"
    SUBMISSION_FAILED = "submission_failed"
    CANCELLED = "cancelled"
    UNEXPECTED = "unexpected"


class AutomationError(Exception):
    """Base class for errors raised while driving the browser."""

    reason: FailureReason = FailureReason.UNEXPECTED

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class NavigationTimeout(AutomationError):
    """Navigation did not settle within the configured timeout."""
    reason = FailureReason.NAVIGATION_TIMEOUT


class NavigationFailed(AutomationError):
    """DNS, connection or HTTP-level failure while loading a page."""
    reason = FailureReason.NAVIGATION_FAILED


class ExtractionQueryFailed(AutomationError):
    """A named DOM query raised while reading the loaded document."""
    reason = FailureReason.EXTRACTION_QUERY_FAILED

    def __init__(self, query: str, message: str, url: Optional[str] = None):
        super().__init__(f"query '{query}' failed: {message}", url=url)
        self.query = query


class SessionStartFailed(AutomationError):
    """The browser process could not be launched. Fatal for a batch."""
    reason = FailureReason.SESSION_START_FAILED


class SubmissionFieldNotFound(AutomationError):
    """No selector matched a form field. Non-fatal."""
    reason = FailureReason.SUBMISSION_FAILED

    def __init__(self, field: str, url: Optional[str] = None):
        super().__init__(f"no input matched field '{field}'", url=url)
        self.field = field


class SubmissionSubmitNotFound(AutomationError):
    """No submit control matched. Non-fatal."""
    reason = FailureReason.SUBMISSION_FAILED
