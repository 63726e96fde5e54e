"""Sliding-window request limiter for the public GitHub endpoints."""

from __future__ import annotations

import time
from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


class RateLimiter:
    """In-memory per-client request limiter.

    Each client may make ``limit`` requests per ``window_seconds``.
    Clients with no request inside the window are forgotten, at most
    once per window.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._events: dict[str, deque[float]] = {}
        self._last_prune = clock()

    @property
    def tracked_clients(self) -> int:
        return len(self._events)

    def check(self, client_id: str) -> tuple[bool, int, int]:
        """Record a request for ``client_id``.

        Returns:
            ``(allowed, remaining, reset)`` where ``reset`` is the epoch
            second at which the oldest request leaves the window.
        """
        now = self._clock()
        window_start = now - self.window_seconds
        if now - self._last_prune >= self.window_seconds:
            self._prune(window_start)
            self._last_prune = now

        bucket = self._events.setdefault(client_id, deque())
        while bucket and bucket[0] <= window_start:
            bucket.popleft()

        if len(bucket) >= self.limit:
            reset = int(bucket[0] + self.window_seconds)
            return False, 0, reset

        bucket.append(now)
        remaining = max(self.limit - len(bucket), 0)
        reset = int(bucket[0] + self.window_seconds)
        return True, remaining, reset

    def reset(self) -> None:
        self._events.clear()

    def _prune(self, window_start: float) -> None:
        idle = [
            client_id
            for client_id, bucket in self._events.items()
            if not bucket or bucket[-1] <= window_start
        ]
        for client_id in idle:
            del self._events[client_id]
