"""Cooperative cancellation for export and import runs.

A CancelToken is created by the caller and passed into a pipeline, which
checks it at every suspension point (each fetch, each throttle delay).
"""

import threading
import time
from typing import Callable, Optional

from deckpress.errors import OperationCancelledError


class CancelToken:
    """Caller-owned cancellation flag with an optional deadline.

    Args:
        timeout: Seconds from creation after which the token counts as
            cancelled (None for no deadline)
        clock: Monotonic clock, injectable for tests
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._event = threading.Event()
        self._clock = clock
        self._deadline = clock() + timeout if timeout is not None else None
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled by caller") -> None:
        self.reason = reason
        self._event.set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and self._clock() >= self._deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.expired

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError(self.reason or "cancelled")
        if self.expired:
            raise OperationCancelledError("deadline exceeded")

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    def wait(self, seconds: float) -> None:
        """Sleep for seconds, waking early (and raising) when cancelled."""
        self.raise_if_cancelled()
        remaining = self.remaining()
        if remaining is not None:
            seconds = min(seconds, remaining)
        self._event.wait(seconds)
        self.raise_if_cancelled()


def check(cancel: Optional[CancelToken]) -> None:
    """Raise OperationCancelledError if the optional token is cancelled."""
    if cancel is not None:
        cancel.raise_if_cancelled()
