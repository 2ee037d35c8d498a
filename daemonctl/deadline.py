"""
Cancellable deadlines for bounded polling.

A Deadline combines an optional timeout with a cancellation flag. Waiting on
it blocks on a single threading.Event, so a poll loop wakes up either when the
next interval elapses or as soon as the deadline is cancelled or expires,
whichever comes first. Nothing busy-loops.

Example:
    with Deadline.after(10.0) as deadline:
        for tick in deadline.ticks(0.5):
            if check():
                break

    # From another thread:
    deadline.cancel()
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterator
from typing import Any


class Deadline:
    """
    Deadline with an optional timeout and explicit cancellation.

    Thread safety: cancel() may be called from any thread; waiters wake up
    immediately.
    """

    def __init__(self, timeout: float | None = None) -> None:
        """
        Initialize the deadline.

        Args:
            timeout: Seconds from now until the deadline expires. None means
                the deadline only finishes when cancelled.
        """
        if timeout is not None and timeout < 0:
            raise ValueError(f"timeout must be non-negative, got {timeout}")
        self._expires_at = None if timeout is None else time.monotonic() + timeout
        self._cancelled = threading.Event()

    @classmethod
    def after(cls, seconds: float) -> Deadline:
        """Create a deadline that expires ``seconds`` from now."""
        return cls(seconds)

    def cancel(self) -> None:
        """Finish the deadline immediately and wake any waiter."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        """True if cancel() was called."""
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        """True if the timeout has elapsed."""
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def done(self) -> bool:
        """True once the deadline is cancelled or expired."""
        return self.cancelled or self.expired

    def remaining(self) -> float | None:
        """Seconds left before expiry, None if unbounded, 0.0 once done."""
        if self.cancelled:
            return 0.0
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    def wait(self, secs: float) -> bool:
        """
        Block for up to ``secs`` seconds or until the deadline finishes.

        Args:
            secs: Maximum seconds to block

        Returns:
            True if the deadline finished during (or before) the wait, False if
            the full interval elapsed with the deadline still open.
        """
        remaining = self.remaining()
        if remaining is not None and remaining <= secs:
            self._cancelled.wait(timeout=remaining)
            return True
        return self._cancelled.wait(timeout=secs)

    def ticks(self, interval: float) -> Iterator[int]:
        """
        Yield a tick count once per interval until the deadline finishes.

        The first tick fires after one full interval. Once the deadline is
        done no further tick is yielded, even if the interval also elapsed.

        Args:
            interval: Seconds between ticks

        Yields:
            int: Tick count starting from 0.
        """
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")

        tick = 0
        while not self.wait(interval):
            yield tick
            tick += 1

    def __enter__(self) -> Deadline:
        return self

    def __exit__(self, *args: Any) -> None:
        self.cancel()

    def __repr__(self) -> str:
        return f"Deadline(remaining={self.remaining()}, cancelled={self.cancelled})"
