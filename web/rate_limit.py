"""
Fixed-window, per-client rate limiting for the /api routes.

Each client address gets a counter per window of RATE_LIMIT_WINDOW_S seconds.
Windows are aligned to multiples of the window length, so every client's
counter resets at the same instant. Counters live in process memory, which
matches the rest of the service: one process, nothing persisted.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable

from fastapi import HTTPException, Request

from solver.constants import RATE_LIMIT_MAX_REQUESTS, RATE_LIMIT_WINDOW_S

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again after a minute."


class RateLimitExceeded(HTTPException):
    def __init__(self, reset_seconds: int):
        super().__init__(
            status_code=429,
            detail=RATE_LIMIT_MESSAGE,
            headers={"Retry-After": str(reset_seconds)},
        )


@dataclass(frozen=True)
class RateLimitResult:
    count: int
    limit: int
    reset_seconds: int


class RateLimiter:
    """
    In-memory fixed-window counter keyed by client.

    Args:
        limit:          Requests allowed per window.
        window_seconds: Window length.
        clock:          Returns the current time in seconds.
    """

    def __init__(
        self,
        limit: int = RATE_LIMIT_MAX_REQUESTS,
        window_seconds: float = RATE_LIMIT_WINDOW_S,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._counts: dict[str, tuple[float, int]] = {}

    def _window_start(self, now: float) -> float:
        return (now // self.window_seconds) * self.window_seconds

    def hit(self, key: str) -> RateLimitResult:
        """
        Count one request for key.

        Raises:
            RateLimitExceeded: key has used up its allowance for this window.
        """
        now = self._clock()
        window_start = self._window_start(now)
        reset_seconds = max(0, int(window_start + self.window_seconds - now))

        with self._lock:
            # Drop counters from earlier windows so idle clients don't accumulate.
            stale = [k for k, (start, _) in self._counts.items() if start < window_start]
            for k in stale:
                del self._counts[k]

            start, count = self._counts.get(key, (window_start, 0))
            count += 1
            self._counts[key] = (start, count)

        if count > self.limit:
            raise RateLimitExceeded(reset_seconds)
        return RateLimitResult(count=count, limit=self.limit, reset_seconds=reset_seconds)


def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency: charge the calling client against the app's limiter."""
    limiter: RateLimiter = request.app.state.rate_limiter
    client = request.client.host if request.client else "unknown"
    limiter.hit(client)
