"""Fixed-window request counters for the login and public routes.

Call sites depend on ``get_rate_limiter`` and the ``RateLimiter`` protocol
only, so the in-memory implementation can be swapped for a shared counter
(e.g. Redis) through ``app.dependency_overrides`` or by rebinding
``rate_limiter``. The in-memory state is per process: with several replicas
each one enforces its own limit.
"""
from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Protocol

from fastapi import Depends, HTTPException, Request, status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateDecision:
    allowed: bool
    retry_after: float = 0.0


class RateLimiter(Protocol):
    def hit(self, key: str, *, limit: int, window_seconds: float) -> RateDecision:
        """Count one request for ``key`` and decide whether it may proceed."""
        ...

    def reset(self) -> None:
        ...


@dataclass
class _Window:
    count: int
    reset_at: float


class InMemoryRateLimiter:
    """Thread-safe process-local limiter.

    FastAPI runs sync endpoints in a threadpool, so the map is guarded by a lock.
    Expired windows are purged on every hit, which keeps the map bounded by the
    number of keys seen within one window.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, *, limit: int, window_seconds: float) -> RateDecision:
        now = self._clock()
        with self._lock:
            self._purge(now)
            window = self._windows.get(key)
            if window is None:
                window = _Window(count=0, reset_at=now + window_seconds)
                self._windows[key] = window
            window.count += 1
            if window.count > limit:
                return RateDecision(allowed=False, retry_after=window.reset_at - now)
        return RateDecision(allowed=True)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._windows)

    def _purge(self, now: float) -> None:
        expired = [k for k, w in self._windows.items() if w.reset_at <= now]
        for k in expired:
            del self._windows[k]


rate_limiter: RateLimiter = InMemoryRateLimiter()


def get_rate_limiter() -> RateLimiter:
    return rate_limiter


def client_ip(request: Request) -> str:
    """
    Best-effort resolution of the client IP.
    Uses the first X-Forwarded-For entry if present, otherwise request.client.host.
    """
    fwd = request.headers.get("x-forwarded-for")
    if fwd:
        first = fwd.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def enforce(limiter: RateLimiter, key: str, *, limit: int, window_seconds: float) -> None:
    """Raise 429 with a Retry-After header once ``key`` is over its limit."""
    decision = limiter.hit(key, limit=limit, window_seconds=window_seconds)
    if decision.allowed:
        return
    retry_after = max(1, math.ceil(decision.retry_after))
    logger.warning("Rate limit exceeded for %s (retry in %ss)", key, retry_after)
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Too many requests. Try again later.",
        headers={"Retry-After": str(retry_after)},
    )


class RateLimitByIP:
    """Route dependency limiting one route group per client IP."""

    def __init__(
        self,
        group: str,
        limit: Callable[[], int],
        window_seconds: Callable[[], float],
    ) -> None:
        self.group = group
        self.limit = limit
        self.window_seconds = window_seconds

    def __call__(self, request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> None:
        enforce(
            limiter,
            f"{self.group}:ip:{client_ip(request)}",
            limit=self.limit(),
            window_seconds=self.window_seconds(),
        )
