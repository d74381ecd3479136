from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable

from .errors import RateGoverned


class RateGovernor:
    """Sliding-window gate consulted before any provider call.

    Keeps the timestamps of permitted calls. Each check first drops the ones
    older than the window; when ``max_per_window`` remain the call is denied
    immediately, with no waiting or retry.
    """

    def __init__(
        self,
        max_per_window: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_per_window <= 0:
            raise ValueError(f"max_per_window must be positive, got: {max_per_window}")
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got: {window_seconds}")

        self.max_per_window = max_per_window
        self.window_seconds = window_seconds
        self._clock = clock
        self._timestamps: deque[float] = deque()

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._timestamps and self._timestamps[0] <= cutoff:
            self._timestamps.popleft()

    def acquire(self, query: str | None = None) -> None:
        """Record a permitted call, or raise ``RateGoverned`` if the window is full."""
        now = self._clock()
        self._prune(now)
        if len(self._timestamps) >= self.max_per_window:
            raise RateGoverned(
                f"{len(self._timestamps)} calls in the last {self.window_seconds:g}s "
                f"(limit {self.max_per_window})",
                provider="governor",
                query=query,
            )
        self._timestamps.append(now)

    def in_window(self) -> int:
        self._prune(self._clock())
        return len(self._timestamps)

    def reset(self) -> None:
        self._timestamps.clear()

    def stats(self) -> dict:
        used = self.in_window()
        return {
            "window_seconds": self.window_seconds,
            "max_per_window": self.max_per_window,
            "used": used,
            "remaining": max(0, self.max_per_window - used),
        }
