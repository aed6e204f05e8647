"""
Fixed-window per-client rate limiting for the analysis endpoints.
"""
import threading
import time
from typing import Callable, Dict, Iterable, Tuple

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from .config import RATE_LIMIT_MAX, RATE_LIMIT_WINDOW_MS, env_int

LIMITED_PATHS = ("/api/analyze", "/api/walkthrough")


class RateLimiter:
    """
    Counts requests per key within a window. The counter table belongs to the instance.
    """

    def __init__(self, window_ms: int = RATE_LIMIT_WINDOW_MS, max_requests: int = RATE_LIMIT_MAX,
                 clock: Callable[[], float] = time.monotonic):
        self.window_ms = window_ms
        self.max_requests = max_requests
        self._clock = clock
        self._entries: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_env(cls) -> "RateLimiter":
        return cls(env_int("RATE_LIMIT_WINDOW_MS", RATE_LIMIT_WINDOW_MS), env_int("RATE_LIMIT_MAX", RATE_LIMIT_MAX))

    def hit(self, key: str) -> bool:
        """Record one request; False when the key is over the limit."""
        now = self._clock() * 1000
        with self._lock:
            count, start = self._entries.get(key, (0, now))
            if now - start > self.window_ms:
                count, start = 0, now
            count += 1
            self._entries[key] = (count, start)
        return count <= self.max_requests

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limiter: RateLimiter, paths: Iterable[str] = LIMITED_PATHS):
        super().__init__(app)
        self.limiter = limiter
        self.paths = tuple(paths)

    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith(self.paths):
            ip = request.client.host if request.client else "unknown"
            try:
                allowed = self.limiter.hit(ip)
            except Exception as e:
                # limiter failures never block a request
                print(f"[ratelimit] error={type(e).__name__}: {e}")
                allowed = True
            if not allowed:
                lim = self.limiter
                return JSONResponse(
                    status_code=429,
                    content={
                        "error": "rate_limited",
                        "message": f"Too many requests. Limit is {lim.max_requests} per {lim.window_ms / 1000:g}s",
                    },
                )
        return await call_next(request)
