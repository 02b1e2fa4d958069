"""
Cancellation context threaded through every lifecycle operation.
"""

import threading
import time
from collections.abc import Callable

from ..utils.exceptions import CancelledError


class Context:
    """Carries an optional deadline and a cancel signal.

    The deadline is expressed in the units of ``clock`` (monotonic seconds by
    default). ``cancel`` may be called from any thread.
    """

    def __init__(
        self,
        deadline: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.deadline = deadline
        self.clock = clock
        self._cancelled = threading.Event()
        self._reason = ""

    @classmethod
    def with_timeout(
        cls, seconds: float, clock: Callable[[], float] = time.monotonic
    ) -> "Context":
        return cls(deadline=clock() + seconds, clock=clock)

    def cancel(self, reason: str = "cancelled") -> None:
        self._reason = reason
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and self.clock() >= self.deadline

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - self.clock())

    def check(self) -> None:
        """Raise CancelledError if the context was cancelled or has expired."""
        if self.cancelled:
            raise CancelledError(f"Operation cancelled: {self._reason}")
        if self.expired:
            raise CancelledError("Operation deadline exceeded")

    def sleep(self, seconds: float) -> None:
        """Sleep for ``seconds``, waking early if cancelled or the deadline passes."""
        remaining = self.remaining()
        if remaining is not None:
            seconds = min(seconds, remaining)
        self._cancelled.wait(seconds)


def background() -> Context:
    """A context that is never cancelled and has no deadline."""
    return Context()
