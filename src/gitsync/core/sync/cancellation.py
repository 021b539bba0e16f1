"""
Cooperative cancellation for push and pull.

A workflow checks its token between steps. Once a pull has started its
merge the token is no longer consulted, so cancelling never leaves a
half-written working tree.
"""

from __future__ import annotations

import threading
import time

from gitsync.core.sync.errors import GitTimeoutError, OperationCancelledError


class CancellationToken:
    """
    A cancel flag plus an optional overall deadline.

    Example:
        >>> token = CancellationToken(timeout=30)
        >>> token.check("fetch")      # raises once cancelled or expired
        >>> fetch_timeout = token.bound(120)  # at most 30 seconds
    """

    def __init__(self, timeout: float | None = None) -> None:
        """
        Args:
            timeout: Seconds from now until the deadline (None for no deadline)
        """
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        """Request cancellation. Safe to call from any thread."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def check(self, step: str) -> None:
        """
        Abort if cancellation was requested or the deadline has passed.

        Raises:
            OperationCancelledError: If cancel() was called
            GitTimeoutError: If the deadline expired
        """
        if self.cancelled:
            raise OperationCancelledError(f"Operation cancelled before {step}", operation=step)
        if self.expired:
            raise GitTimeoutError(f"Deadline exceeded before {step}", operation=step)

    def bound(self, timeout: float | None) -> float | None:
        """Return the smaller of timeout and the time left before the deadline."""
        remaining = self.remaining()
        if remaining is None:
            return timeout
        if timeout is None:
            return remaining
        return min(timeout, remaining)
