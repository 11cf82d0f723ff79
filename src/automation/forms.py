"""
Best-effort form helpers built on Playwright locators.

Selectors for a field are tried in priority order and the first visible
match wins. Missing fields and submit controls raise the non-fatal
Submission* errors so the strategy can record them and keep going.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from src.core.exceptions import SubmissionFieldNotFound, SubmissionSubmitNotFound
from src.core.logging import get_logger
from src.models.targets import BusinessData

logger = get_logger(__name__)

FieldSelectors = Dict[str, Sequence[str]]

SEMANTIC_FIELDS: Tuple[str, ...] = ("name", "address", "city", "state", "zip", "phone", "website")

GENERIC_FIELD_SELECTORS: FieldSelectors = {
    "name": ['input[name="business_name"]', 'input[name="company_name"]', 'input[name="name"]'],
    "address": ['input[name="address"]', 'input[name="street"]', 'input[name="street_address"]'],
    "city": ['input[name="city"]'],
    "state": ['input[name="state"]', 'select[name="state"]'],
    "zip": ['input[name="zip"]', 'input[name="zip_code"]', 'input[name="postal_code"]'],
    "phone": ['input[name="phone"]', 'input[name="telephone"]', 'input[name="phone_number"]'],
    "website": ['input[name="website"]', 'input[name="url"]', 'input[name="web_site"]'],
}

OPTIONS_SCRIPT = "el => Array.from(el.options).map(o => [o.value, o.textContent])"
SELECT_TIMEOUT_MS = 5_000

GENERIC_SUBMIT_SELECTORS: List[str] = [
    'button[type="submit"]',
    'input[type="submit"]',
    'button:has-text("Submit")',
    'button:has-text("Create")',
    'button:has-text("Add")',
]


async def first_match(page, selectors: Sequence[str]):
    """Return the first visible locator among `selectors`, or None."""
    for sel in selectors:
        try:
            loc = page.locator(sel).first
            if await loc.count() and await loc.is_visible():
                return loc
        except Exception as e:
            logger.debug(f"Selector {sel} not usable: {e}")
    return None


async def _is_select(loc) -> bool:
    tag = await loc.evaluate("el => el.tagName")
    return str(tag).lower() == "select"


def match_option(options: Sequence[Sequence[str]], wanted: str) -> Optional[str]:
    """
    Pick the option value for `wanted` from (value, text) pairs.

    An exact value or text match wins, then the first option whose text
    contains `wanted`, then the first whose text is contained in `wanted`.
    Comparison is case-insensitive; blank options are skipped.

    Example:
        >>> match_option([("", "Choose..."), ("plb", "Plumbers & Drains")], "Plumber")
        'plb'
    """
    needle = wanted.strip().lower()
    if not needle:
        return None
    pairs = [(str(v), str(t).strip().lower()) for v, t in options if str(t).strip()]

    for value, text in pairs:
        if needle in (value.lower(), text):
            return value
    for value, text in pairs:
        if needle in text:
            return value
    for value, text in pairs:
        if text in needle:
            return value
    return None


async def select_matching(loc, field: str, value: str, url: Optional[str] = None) -> str:
    """
    Select the option of a <select> that best matches `value`.

    Raises:
        SubmissionFieldNotFound: No option matched
    """
    options = await loc.evaluate(OPTIONS_SCRIPT)
    option_value = match_option(options or [], value)
    if option_value is None:
        raise SubmissionFieldNotFound(field, url=url)
    await loc.select_option(value=option_value, timeout=SELECT_TIMEOUT_MS)
    return option_value


async def fill_field(page, field: str, value: str, selectors: Sequence[str]) -> str:
    """
    Fill one semantic field using the first matching selector.

    Returns:
        The selector that was filled

    Raises:
        SubmissionFieldNotFound: No selector matched
    """
    loc = await first_match(page, selectors)
    if loc is None:
        raise SubmissionFieldNotFound(field, url=getattr(page, "url", None))

    if await _is_select(loc):
        await select_matching(loc, field, value, url=getattr(page, "url", None))
    else:
        await loc.fill(value)
    return field


async def fill_fields(
    page,
    business: BusinessData,
    field_selectors: FieldSelectors,
) -> Tuple[List[str], List[str]]:
    """
    Fill every field that has a value and a matching input.

    Returns:
        (fields_filled, missing_fields). Fields with no business value are in
        neither list.
    """
    filled: List[str] = []
    missing: List[str] = []
    for field, selectors in field_selectors.items():
        value = business.field_value(field)
        if not value:
            continue
        try:
            await fill_field(page, field, value, selectors)
            filled.append(field)
        except SubmissionFieldNotFound as e:
            logger.debug(str(e))
            missing.append(field)
        except Exception as e:
            logger.warning(f"Filling '{field}' failed: {e}")
            missing.append(field)
    return filled, missing


async def click_first(page, selectors: Sequence[str]) -> Optional[str]:
    """Click the first visible match. Returns the selector clicked, or None."""
    for sel in selectors:
        try:
            loc = page.locator(sel).first
            if await loc.count() and await loc.is_visible():
                await loc.click()
                return sel
        except Exception as e:
            logger.debug(f"Click on {sel} failed: {e}")
    return None


async def submit_form(page, selectors: Sequence[str]) -> str:
    """
    Click the first matching submit control.

    Raises:
        SubmissionSubmitNotFound: No submit control matched
    """
    clicked = await click_first(page, selectors)
    if clicked is None:
        raise SubmissionSubmitNotFound("no submit control matched", url=getattr(page, "url", None))
    return clicked
