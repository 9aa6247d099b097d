# File: app/middleware/rate_limit.py | Version: 2.0 | Title: Lightweight in-memory rate limiting middleware
import time
from collections import deque
from typing import Deque, Dict, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.core.config import settings


class MemoryRateLimiter(BaseHTTPMiddleware):
    """
    Sliding-window limiter keyed by (client ip, path).
    Off by default; enable with RATE_LIMIT_ENABLED=true.

    Settings:
      RATE_LIMIT_WINDOW_SECONDS (default 60)
      RATE_LIMIT_MAX_REQUESTS    (default 120)
    """

    def __init__(
        self,
        app,
        enabled: Optional[bool] = None,
        window_seconds: Optional[int] = None,
        max_requests: Optional[int] = None,
    ):
        super().__init__(app)
        self.enabled = settings.RATE_LIMIT_ENABLED if enabled is None else enabled
        self.window = window_seconds or settings.RATE_LIMIT_WINDOW_SECONDS
        self.max_req = max_requests or settings.RATE_LIMIT_MAX_REQUESTS
        self._buckets: Dict[Tuple[str, str], Deque[float]] = {}

    async def dispatch(self, request: Request, call_next):
        if not self.enabled:
            return await call_next(request)

        client_ip = request.headers.get("x-forwarded-for") or (
            request.client.host if request.client else "unknown"
        )
        key = (client_ip, request.url.path)
        now = time.time()
        window_start = now - self.window

        bucket = self._buckets.setdefault(key, deque())
        # purge old
        while bucket and bucket[0] < window_start:
            bucket.popleft()

        if len(bucket) >= self.max_req:
            retry_after = max(1, int(bucket[0] + self.window - now))
            return JSONResponse(
                {"error": {"code": "TOO_MANY_REQUESTS", "message": "Rate limit exceeded"}},
                status_code=429,
                headers={"Retry-After": str(retry_after)},
            )

        bucket.append(now)
        return await call_next(request)
