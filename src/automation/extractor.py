"""
Target extractor: load one competitor page and turn it into a tagged result.

`extract()` never raises for per-target problems. Navigation timeouts,
navigation failures and failing core queries come back as
`ExtractionResult.failed(...)`; auxiliary queries that fail fall back to
their empty section. Only SessionStartFailed escapes, because without a
browser no target can proceed.
"""

import asyncio
from typing import Dict, Optional

from src.automation.queries import (
    CORE_QUERIES,
    QUERIES,
    ExtractionProfile,
    QueryFn,
    parse_document,
    run_query,
)
from src.automation.session import AutomationSession
from src.core.error_logger import get_error_logger
from src.core.error_models import ErrorComponent, ErrorSeverity, ErrorStage
from src.core.exceptions import (
    AutomationError,
    ExtractionQueryFailed,
    FailureReason,
    NavigationFailed,
    NavigationTimeout,
    SessionStartFailed,
)
from src.core.logging import get_logger
from src.models.payload import ExtractionPayload
from src.models.results import ExtractionResult
from src.models.targets import CompetitorURL
from src.utils.url_utils import domain_of

logger = get_logger(__name__)

DEFAULT_PROFILE = ExtractionProfile()


def _is_timeout(exc: Exception) -> bool:
    if isinstance(exc, asyncio.TimeoutError):
        return True
    return type(exc).__name__ == "TimeoutError"


async def navigate(page, url: str, profile: ExtractionProfile) -> None:
    """
    Go to `url` and wait for the profile's load signal plus settle delay.

    Raises:
        NavigationTimeout: The load signal did not arrive within the timeout
        NavigationFailed: DNS/connection error or HTTP status >= 400
    """
    try:
        response = await page.goto(url, wait_until=profile.wait_until, timeout=profile.nav_timeout_ms)
    except Exception as e:
        if _is_timeout(e):
            raise NavigationTimeout(
                f"navigation exceeded {profile.nav_timeout_ms}ms: {e}", url=url
            ) from e
        raise NavigationFailed(f"navigation failed: {e}", url=url) from e

    status = getattr(response, "status", None) if response is not None else None
    if status is not None and status >= 400:
        raise NavigationFailed(f"HTTP {status}", url=url)

    if profile.settle_ms:
        await page.wait_for_timeout(profile.settle_ms)


class TargetExtractor:
    """
    Runs an extraction profile against competitor pages.

    Args:
        profile: Default extraction profile
        queries: Query registry override (name -> function)
        error_logger: Error sink, defaults to the global error logger
    """

    def __init__(
        self,
        profile: Optional[ExtractionProfile] = None,
        queries: Optional[Dict[str, QueryFn]] = None,
        error_logger=None,
    ):
        self.profile = profile or DEFAULT_PROFILE
        self.queries = dict(queries) if queries is not None else dict(QUERIES)
        self._error_logger = error_logger

    @property
    def error_logger(self):
        if self._error_logger is None:
            self._error_logger = get_error_logger()
        return self._error_logger

    async def extract(
        self,
        session: AutomationSession,
        target: CompetitorURL,
        profile: Optional[ExtractionProfile] = None,
    ) -> ExtractionResult:
        """
        Extract one target inside its own page context.

        Returns:
            ExtractionResult tagged OK or FAILED

        Raises:
            SessionStartFailed: If the session cannot be started
        """
        profile = profile or self.profile
        url = target.url
        logger.info(f"Extracting {url}")

        try:
            async with session.page_scope() as page:
                await navigate(page, url, profile)
                html = await page.content()
                payload = self._run_queries(html, url, profile)
        except SessionStartFailed:
            raise
        except AutomationError as e:
            self._log_failure(e, target, stage=_stage_for(e))
            return ExtractionResult.failed(target, e.reason, str(e))
        except Exception as e:
            self._log_failure(e, target, stage=ErrorStage.NAVIGATE, severity=ErrorSeverity.ERROR)
            return ExtractionResult.failed(target, FailureReason.UNEXPECTED, f"{type(e).__name__}: {e}")

        logger.info(
            f"Extracted {url}: {len(payload.content_structure.headings)} headings, "
            f"{len(payload.social_links.present())} social links"
        )
        return ExtractionResult.ok(target, payload)

    def _run_queries(self, html: str, url: str, profile: ExtractionProfile) -> ExtractionPayload:
        soup = parse_document(html)
        sections = {}
        for name in profile.queries:
            try:
                sections[name] = run_query(name, soup, self.queries)
            except Exception as e:
                if name in CORE_QUERIES:
                    raise ExtractionQueryFailed(name, str(e), url=url) from e
                logger.warning(f"Query '{name}' failed on {url}, using default: {e}")
                self.error_logger.log_exception(
                    e,
                    component=ErrorComponent.EXTRACTOR,
                    stage=ErrorStage.RUN_QUERY,
                    domain=domain_of(url),
                    url=url,
                    severity=ErrorSeverity.WARNING,
                    metadata={"query": name},
                )
        return ExtractionPayload(url=url, **sections)

    def _log_failure(
        self,
        exc: Exception,
        target: CompetitorURL,
        stage: str,
        severity: ErrorSeverity = ErrorSeverity.WARNING,
    ) -> None:
        logger.warning(f"Extraction failed for {target.url}: {exc}")
        self.error_logger.log_exception(
            exc,
            component=ErrorComponent.EXTRACTOR,
            stage=stage,
            domain=target.domain,
            url=target.url,
            severity=severity,
        )


def _stage_for(exc: AutomationError) -> str:
    if isinstance(exc, ExtractionQueryFailed):
        return ErrorStage.RUN_QUERY
    return ErrorStage.NAVIGATE
