"""
URL helpers for competitor targets and directory entry points.
"""

from typing import Optional
from urllib.parse import urlparse
from src.core.logging import get_logger

logger = get_logger(__name__)


def normalize_target_url(url: str) -> Optional[str]:
    """
    Turn user input into an absolute http(s) URL.

    Args:
        url: Raw URL or bare domain

    Returns:
        Absolute URL, or None if nothing usable was given

    Examples:
        >>> normalize_target_url("competitor.com")
        'https://competitor.com'

        >>> normalize_target_url("  http://competitor.com/pricing ")
        'http://competitor.com/pricing'

        >>> normalize_target_url("")
        None
    """
    if not url or not isinstance(url, str):
        return None

    url = url.strip()
    if not url:
        return None

    if not url.startswith(('http://', 'https://')):
        url = f"https://{url.lstrip('/')}"

    if not validate_url(url):
        logger.warning(f"Cannot normalize URL: '{url}'")
        return None
    return url


def validate_url(url: str) -> bool:
    """
    Check if a URL is valid and complete.

    Examples:
        >>> validate_url("https://example.com/pricing")
        True

        >>> validate_url("/pricing")
        False
    """
    if not url or not isinstance(url, str):
        return False

    url = url.strip()
    if not url.startswith(('http://', 'https://')):
        return False

    try:
        result = urlparse(url)
    except ValueError:
        return False
    return bool(result.scheme and result.netloc)


def extract_domain(url: str) -> Optional[str]:
    """
    Extract the host of a URL without a leading "www.".

    Examples:
        >>> extract_domain("https://www.competitor.com/blog/post")
        'competitor.com'

        >>> extract_domain("invalid")
        None
    """
    if not url or not isinstance(url, str):
        return None

    try:
        netloc = urlparse(url.strip()).netloc
    except ValueError:
        return None

    if not netloc:
        return None
    netloc = netloc.lower()
    return netloc[4:] if netloc.startswith("www.") else netloc


def domain_of(url: str) -> str:
    """extract_domain() that never returns None, for log records."""
    return extract_domain(url) or "unknown"


def extract_company_name(domain: str) -> str:
    """
    Build a display name from a domain.

    Examples:
        >>> extract_company_name("acme-marketing.com")
        'Acme Marketing'

        >>> extract_company_name("")
        'Unknown'
    """
    if not domain:
        return "Unknown"

    base = domain.lower()
    if base.startswith("www."):
        base = base[4:]
    base = base.split('.')[0]
    base = base.replace('-', ' ').replace('_', ' ')
    base = ' '.join(base.split()).strip().title()
    return base if base else domain
