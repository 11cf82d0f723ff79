"""
Retry utility with exponential backoff.

Used by the outbound JSON lookups. Browser navigation is never retried.
"""

import time
from typing import Callable, TypeVar, Optional
from dataclasses import dataclass
from src.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 60.0
    exponential_base: float = 2.0

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.base_delay <= 0:
            raise ValueError("base_delay must be positive")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be >= base_delay")
        if self.exponential_base <= 1:
            raise ValueError("exponential_base must be > 1")

    def delay_for(self, attempt: int) -> float:
        """Backoff delay before retry number `attempt + 1` (attempt is 0-based)."""
        return min(self.base_delay * (self.exponential_base ** attempt), self.max_delay)


def retry_with_backoff(
    func: Callable[[], T],
    config: Optional[RetryConfig] = None,
    retry_on: tuple = (Exception,),
    on_retry: Optional[Callable[[int, Exception], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Retry a function with exponential backoff.

    Args:
        func: Function to retry (takes no arguments)
        config: Retry configuration (default: 3 retries, 1s base delay)
        retry_on: Tuple of exception types to retry on
        on_retry: Optional callback called on each retry (attempt, exception)
        sleep: Sleep function, replaceable in tests

    Returns:
        Result from successful function call

    Raises:
        Last exception if all retries exhausted

    Example:
        >>> result = retry_with_backoff(
        ...     lambda: session.get(url, timeout=10).json(),
        ...     config=RetryConfig(max_retries=2, base_delay=0.5),
        ...     retry_on=(requests.RequestException,),
        ... )
    """
    if config is None:
        config = RetryConfig()

    for attempt in range(config.max_retries + 1):
        try:
            return func()
        except retry_on as e:
            if attempt == config.max_retries:
                logger.error(f"All {config.max_retries} retries exhausted: {e}")
                raise

            delay = config.delay_for(attempt)
            logger.warning(f"Retry {attempt + 1}/{config.max_retries} after {delay:.2f}s: {e}")

            if on_retry:
                on_retry(attempt + 1, e)

            sleep(delay)

    raise RuntimeError("Retry logic error")
