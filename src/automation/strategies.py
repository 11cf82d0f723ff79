"""
Directory submission strategies and the dispatcher that selects them.

Each DirectoryType has exactly one strategy class. Strategies differ only in
their entry point, an optional pre-step click, field selectors and category
handling; the flow itself lives in SubmissionStrategy.run().
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from src.automation.extractor import navigate
from src.automation.forms import (
    GENERIC_FIELD_SELECTORS,
    GENERIC_SUBMIT_SELECTORS,
    FieldSelectors,
    click_first,
    fill_field,
    fill_fields,
    submit_form,
)
from src.automation.queries import ExtractionProfile
from src.automation.session import AutomationSession
from src.core.error_logger import get_error_logger
from src.core.error_models import ErrorComponent, ErrorSeverity, ErrorStage
from src.core.exceptions import (
    AutomationError,
    FailureReason,
    SessionStartFailed,
    SubmissionFieldNotFound,
    SubmissionSubmitNotFound,
)
from src.core.logging import get_logger
from src.models.results import SubmissionResult
from src.models.targets import BusinessData, DirectoryDescriptor, DirectoryType

logger = get_logger(__name__)


def with_generic(specific: Dict[str, Sequence[str]]) -> FieldSelectors:
    """Directory-specific selectors first, then the generic ones for each field."""
    merged: Dict[str, List[str]] = {}
    for field, generic in GENERIC_FIELD_SELECTORS.items():
        ordered = list(specific.get(field, []))
        ordered += [sel for sel in generic if sel not in ordered]
        merged[field] = ordered
    return merged


@dataclass(frozen=True)
class SubmissionTimings:
    nav_timeout_ms: int = 30_000
    settle_ms: int = 3_000
    action_delay_ms: int = 2_000
    post_submit_ms: int = 3_000


class SubmissionStrategy:
    """
    Best-effort form submission for one directory type.

    Subclasses override the class attributes. A run records which fields were
    filled and which had no matching input; it only fails on navigation or
    unexpected errors.
    """
    directory_type: DirectoryType = DirectoryType.GENERIC
    entry_url: Optional[str] = None
    pre_step_selectors: Tuple[str, ...] = ()
    field_selectors: FieldSelectors = GENERIC_FIELD_SELECTORS
    category_selectors: Tuple[str, ...] = ()
    submit_selectors: Tuple[str, ...] = ('button[type="submit"]',)

    def entry_point(self, directory: DirectoryDescriptor) -> str:
        return self.entry_url or directory.url

    async def run(
        self,
        page,
        directory: DirectoryDescriptor,
        business: BusinessData,
        timings: SubmissionTimings,
    ) -> SubmissionResult:
        entry = self.entry_point(directory)
        profile = ExtractionProfile(
            name=f"submit:{self.directory_type.value}",
            nav_timeout_ms=timings.nav_timeout_ms,
            settle_ms=timings.settle_ms,
        )
        await navigate(page, entry, profile)

        if self.pre_step_selectors:
            clicked = await click_first(page, self.pre_step_selectors)
            if clicked:
                logger.debug(f"[{directory.name}] pre-step clicked: {clicked}")
                await page.wait_for_timeout(timings.action_delay_ms)

        filled, missing = await fill_fields(page, business, self.field_selectors)

        category = business.primary_category
        if self.category_selectors and category and "category" not in filled:
            try:
                await fill_field(page, "category", category, self.category_selectors)
                filled.append("category")
            except SubmissionFieldNotFound:
                missing.append("category")
            except Exception as e:
                logger.warning(f"[{directory.name}] category selection failed: {e}")
                missing.append("category")

        try:
            await submit_form(page, self.submit_selectors)
            submit_clicked = True
            await page.wait_for_timeout(timings.post_submit_ms)
        except SubmissionSubmitNotFound:
            logger.info(f"[{directory.name}] no submit control found")
            submit_clicked = False

        return SubmissionResult.submitted(
            directory,
            fields_filled=filled,
            missing_fields=missing,
            submit_clicked=submit_clicked,
            entry_url=entry,
        )


class GoogleMyBusinessStrategy(SubmissionStrategy):
    directory_type = DirectoryType.GOOGLE_MY_BUSINESS
    entry_url = "https://business.google.com/create"
    field_selectors = with_generic({
        "name": ['input[aria-label*="Business name"]', 'input[name="businessName"]'],
        "phone": ['input[aria-label*="phone" i]', 'input[type="tel"]'],
        "website": ['input[aria-label*="Website"]'],
    })
    category_selectors = ('input[aria-label*="category" i]', 'input[name="category"]')
    submit_selectors = ('button:has-text("Next")', 'button[type="submit"]')


class YelpStrategy(SubmissionStrategy):
    directory_type = DirectoryType.YELP
    pre_step_selectors = ('[data-testid="claim-business-button"]',)
    field_selectors = with_generic({})
    category_selectors = (
        'select[name="category"]',
        'select[name="business_category"]',
        'input[name="category"]',
    )


class FacebookStrategy(SubmissionStrategy):
    directory_type = DirectoryType.FACEBOOK
    entry_url = "https://www.facebook.com/pages/create"
    field_selectors = with_generic({"name": ['input[name="page_name"]']})
    category_selectors = ('input[name="category"]',)


class YellowPagesStrategy(SubmissionStrategy):
    directory_type = DirectoryType.YELLOWPAGES
    pre_step_selectors = ('a[href*="add-business"]',)
    field_selectors = with_generic({})


class AngiStrategy(SubmissionStrategy):
    directory_type = DirectoryType.ANGI
    entry_url = "https://www.angi.com/business-registration"
    field_selectors = with_generic({})


class BBBStrategy(SubmissionStrategy):
    directory_type = DirectoryType.BBB
    entry_url = "https://www.bbb.org/us/add-business"
    field_selectors = with_generic({})


class GenericStrategy(SubmissionStrategy):
    directory_type = DirectoryType.GENERIC
    field_selectors = GENERIC_FIELD_SELECTORS
    submit_selectors = tuple(GENERIC_SUBMIT_SELECTORS)


STRATEGIES: Dict[DirectoryType, SubmissionStrategy] = {
    cls.directory_type: cls()
    for cls in (
        GoogleMyBusinessStrategy,
        YelpStrategy,
        FacebookStrategy,
        YellowPagesStrategy,
        AngiStrategy,
        BBBStrategy,
        GenericStrategy,
    )
}


def _check_exhaustive(table: Dict[DirectoryType, SubmissionStrategy]) -> None:
    missing = [t.value for t in DirectoryType if t not in table]
    if missing:
        raise RuntimeError(f"No submission strategy registered for: {missing}")


_check_exhaustive(STRATEGIES)


def strategy_for(directory: DirectoryDescriptor) -> SubmissionStrategy:
    return STRATEGIES[DirectoryType.parse(directory.directory_type)]


class DirectoryDispatcher:
    """
    Routes each directory to its strategy inside an isolated page.

    Args:
        timings: Navigation timeout and waits used by every strategy
        error_logger: Error sink, defaults to the global error logger
    """

    def __init__(self, timings: Optional[SubmissionTimings] = None, error_logger=None):
        self.timings = timings or SubmissionTimings()
        self._error_logger = error_logger

    @property
    def error_logger(self):
        if self._error_logger is None:
            self._error_logger = get_error_logger()
        return self._error_logger

    async def submit(
        self,
        session: AutomationSession,
        directory: DirectoryDescriptor,
        business: BusinessData,
    ) -> SubmissionResult:
        """
        Submit `business` to one directory.

        Returns:
            SubmissionResult; never raises for per-directory problems

        Raises:
            SessionStartFailed: If the session cannot be started
        """
        strategy = strategy_for(directory)
        entry = strategy.entry_point(directory)
        logger.info(f"Submitting to {directory.name} via {type(strategy).__name__}")

        try:
            async with session.page_scope() as page:
                result = await strategy.run(page, directory, business, self.timings)
        except SessionStartFailed:
            raise
        except AutomationError as e:
            self._log_failure(e, directory, entry)
            return SubmissionResult.failed(directory, e.reason, str(e), entry_url=entry)
        except Exception as e:
            self._log_failure(e, directory, entry, severity=ErrorSeverity.ERROR)
            return SubmissionResult.failed(
                directory, FailureReason.UNEXPECTED, f"{type(e).__name__}: {e}", entry_url=entry
            )

        logger.info(
            f"{directory.name}: filled {len(result.fields_filled)} field(s), "
            f"missing {result.missing_fields or 'none'}, confidence={result.confidence.value}"
        )
        return result

    def _log_failure(
        self,
        exc: Exception,
        directory: DirectoryDescriptor,
        entry: str,
        severity: ErrorSeverity = ErrorSeverity.WARNING,
    ) -> None:
        logger.warning(f"Submission to {directory.name} failed: {exc}")
        self.error_logger.log_exception(
            exc,
            component=ErrorComponent.DISPATCHER,
            stage=ErrorStage.SUBMIT_FORM,
            domain=directory.domain,
            url=entry,
            severity=severity,
            metadata={"directory_type": directory.directory_type.value},
        )


DEFAULT_DIRECTORIES: List[DirectoryDescriptor] = [
    DirectoryDescriptor(name="Yelp", url="https://biz.yelp.com", directory_type="yelp", priority="High"),
    DirectoryDescriptor(
        name="Facebook Business",
        url="https://www.facebook.com/pages/create",
        directory_type="facebook",
        priority="High",
    ),
    DirectoryDescriptor(
        name="Yellow Pages", url="https://www.yellowpages.com", directory_type="yellowpages", priority="Medium"
    ),
    DirectoryDescriptor(name="Angie's List", url="https://www.angi.com", directory_type="angi", priority="Medium"),
    DirectoryDescriptor(
        name="Better Business Bureau", url="https://www.bbb.org", directory_type="bbb", priority="Medium"
    ),
    DirectoryDescriptor(name="Foursquare", url="https://foursquare.com", directory_type="generic", priority="Low"),
    DirectoryDescriptor(name="TripAdvisor", url="https://www.tripadvisor.com", directory_type="generic", priority="Low"),
]
