"""Cooperative cancellation for batch runs."""

from typing import Optional


class CancelToken:
    """
    Flag checked by the orchestrator between items.

    Cancelling does not interrupt the item already running; the items not yet
    started come back as cancelled failures.

    Example:
        >>> token = CancelToken()
        >>> token.cancel("user abort")
        >>> token.is_cancelled
        True
    """

    def __init__(self):
        self._cancelled = False
        self._reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._cancelled:
            self._cancelled = True
            self._reason = reason

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self._cancelled}, reason={self._reason!r})"
