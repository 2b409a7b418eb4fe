"""
In-memory sliding window rate limiter.

Default: 100 requests per 15 minutes per client. Counts live in process
memory, so each worker process limits independently.
"""

import math
import threading
import time
from collections import deque
from dataclasses import dataclass
from functools import wraps
from typing import Callable, Deque, Dict

from flask import current_app, jsonify, make_response, request

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_seconds: int


class SlidingWindowRateLimiter:
    """Tracks request timestamps per client key."""

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: float = 900,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def __len__(self) -> int:
        """Number of client keys currently tracked."""
        with self._lock:
            return len(self._hits)

    def hit(self, key: str) -> RateLimitResult:
        """Record one request for ``key`` if it is within the limit."""
        now = self._clock()
        window_start = now - self.window_seconds

        with self._lock:
            # Keys that stopped sending requests are dropped once per window
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(window_start)
                self._last_sweep = now

            hits = self._hits.get(key)
            if hits is None:
                hits = self._hits[key] = deque()
            else:
                _trim(hits, window_start)

            allowed = len(hits) < self.max_requests
            if allowed:
                hits.append(now)

            reset_at = hits[0] + self.window_seconds if hits else now + self.window_seconds
            return RateLimitResult(
                allowed=allowed,
                limit=self.max_requests,
                remaining=max(self.max_requests - len(hits), 0),
                reset_seconds=max(int(math.ceil(reset_at - now)), 0),
            )

    def _sweep(self, window_start: float) -> None:
        for key in list(self._hits):
            hits = self._hits[key]
            _trim(hits, window_start)
            if not hits:
                del self._hits[key]


def _trim(hits: Deque[float], window_start: float) -> None:
    while hits and hits[0] <= window_start:
        hits.popleft()


def client_key() -> str:
    """
    Client IP as seen by the WSGI server.

    ``X-Forwarded-For`` is only honoured when ``create_app`` wraps the app in
    ``ProxyFix`` for a configured number of trusted proxies.
    """
    return f"ip:{request.remote_addr or 'unknown'}"


def _apply_headers(response, result: RateLimitResult):
    response.headers["RateLimit-Limit"] = str(result.limit)
    response.headers["RateLimit-Remaining"] = str(result.remaining)
    response.headers["RateLimit-Reset"] = str(result.reset_seconds)
    return response


def rate_limited(f):
    """
    Decorator enforcing the app's SlidingWindowRateLimiter.
    Returns 429 once the client exceeds its window.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        limiter = current_app.extensions.get("rate_limiter")
        if limiter is None:
            return f(*args, **kwargs)

        result = limiter.hit(client_key())
        if not result.allowed:
            response = make_response(jsonify({"error": RATE_LIMIT_MESSAGE}), 429)
            response.headers["Retry-After"] = str(result.reset_seconds)
            return _apply_headers(response, result)

        return _apply_headers(make_response(f(*args, **kwargs)), result)
    return decorated_function
