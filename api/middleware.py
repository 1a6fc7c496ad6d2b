import logging
import math
import time
from collections import deque
from threading import Lock
from typing import Iterable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 30
DEFAULT_WINDOW_SECONDS = 60

# each of these can trigger a crawl or model calls
LIMITED_PATHS = frozenset({"/scan", "/fix"})


def client_ip(request: Request) -> str:
    # first hop of X-Forwarded-For when behind a proxy
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class SlidingWindowLimiter:
    """Per-key sliding window over hit timestamps. In-process, so per instance only."""

    def __init__(self, limit: int, window_seconds: float):
        self.limit = limit
        self.window_seconds = window_seconds
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = 0.0
        self._lock = Lock()

    def _sweep(self, now: float) -> None:
        # forget keys with no hit inside the window
        cutoff = now - self.window_seconds
        for key in [k for k, hits in self._hits.items() if not hits or hits[-1] <= cutoff]:
            del self._hits[key]
        self._last_sweep = now

    def check(self, key: str, now: float | None = None) -> int:
        """Record a hit for `key`. Returns 0 if allowed, else seconds until a slot frees."""
        now = time.monotonic() if now is None else now
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= now - self.window_seconds:
                hits.popleft()
            if len(hits) >= self.limit:
                return max(1, math.ceil(hits[0] + self.window_seconds - now))
            hits.append(now)
            return 0


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        requests_per_window: int = DEFAULT_LIMIT,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        paths: Iterable[str] = LIMITED_PATHS,
    ):
        super().__init__(app)
        self.limiter = SlidingWindowLimiter(requests_per_window, window_seconds)
        self.paths = frozenset(paths)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path.rstrip("/") or "/"
        if path not in self.paths:
            return await call_next(request)

        ip = client_ip(request)
        retry_after = self.limiter.check(ip)
        if retry_after:
            logger.warning("Rate limit hit for %s on %s (retry in %ds)", ip, path, retry_after)
            return JSONResponse(
                status_code=429,
                content={"success": False, "message": f"Too many requests. Retry in {retry_after}s."},
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s -> %d (%dms) from %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            client_ip(request),
        )
        return response
