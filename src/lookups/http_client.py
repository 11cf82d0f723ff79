"""
Thin JSON-over-HTTP client for third-party lookups.

`fetch_json` never raises. Connection errors, timeouts and retryable HTTP
statuses are retried with exponential backoff; anything left over is logged
and reported as None, and the caller falls back to its placeholder data.
"""

import time
from typing import Any, Callable, Dict, Optional

import requests

from src.core.error_logger import get_error_logger
from src.core.error_models import ErrorComponent, ErrorSeverity, ErrorStage
from src.core.logging import get_logger
from src.utils.retry import RetryConfig, retry_with_backoff
from src.utils.url_utils import domain_of

logger = get_logger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class RetryableHTTPError(requests.HTTPError):
    """HTTP status worth another attempt."""


def _get(session: requests.Session, url: str, params, headers, timeout: float) -> Any:
    response = session.get(url, params=params, headers=headers, timeout=timeout)
    if response.status_code in RETRYABLE_STATUS_CODES:
        raise RetryableHTTPError(f"HTTP {response.status_code}", response=response)
    response.raise_for_status()
    return response.json()


def fetch_json(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 10.0,
    retries: int = 2,
    session: Optional[requests.Session] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Optional[Any]:
    """
    GET `url` and decode the JSON body.

    Args:
        url: Endpoint
        params: Query parameters
        headers: Extra request headers (API keys go here or in params)
        timeout: Per-attempt timeout in seconds
        retries: Retries after the first attempt
        session: Optional requests.Session (tests pass a fake)
        sleep: Backoff sleep, replaceable in tests

    Returns:
        Decoded JSON, or None when the lookup failed

    Example:
        >>> data = fetch_json("https://www.googleapis.com/customsearch/v1",
        ...                   params={"key": key, "cx": cx, "q": "plumber austin"})
        >>> items = (data or {}).get("items", [])
    """
    http = session or requests.Session()
    try:
        return retry_with_backoff(
            lambda: _get(http, url, params, headers, timeout),
            config=RetryConfig(max_retries=retries, base_delay=0.5, max_delay=8.0),
            retry_on=(requests.ConnectionError, requests.Timeout, RetryableHTTPError),
            sleep=sleep,
        )
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"Lookup failed for {url}: {e}")
        get_error_logger().log_exception(
            e,
            component=ErrorComponent.LOOKUP,
            stage=ErrorStage.FETCH_JSON,
            domain=domain_of(url),
            url=url,
            severity=ErrorSeverity.WARNING,
        )
        return None
    finally:
        if session is None:
            http.close()
