"""
Market Registry Backend — Rate Limiting Middleware
====================================================

What:  Per-IP sliding window limiter in front of the API.
Why:   The login endpoint compares plaintext passwords; throttling keeps
       credential guessing slow.

Algorithm: Sliding Window Log
    1. Each IP keeps a deque of request timestamps
    2. Timestamps older than the window are dropped on every request
    3. A full window → 429 with Retry-After set to when the oldest expires
    4. IPs are kept in least-recently-active order; entries whose newest
       hit has left the window are evicted from the front on every request

In-memory state is per process; multi-worker deployments need a shared
store for accurate limits.
"""

import logging
import time
from collections import OrderedDict, deque
from typing import Deque

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Args:
        max_requests: requests allowed per IP inside one window
        window_seconds: window length

    Health checks and API docs are never limited.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app, max_requests: int = 300, window_seconds: int = 60):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._hits: "OrderedDict[str, Deque[float]]" = OrderedDict()

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.monotonic()
        self._evict_idle(now - self.window_seconds)

        hits = self._hits.get(client_ip)
        if hits is None:
            hits = self._hits[client_ip] = deque()

        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()

        if len(hits) >= self.max_requests:
            retry_after = int(hits[0] + self.window_seconds - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(hits),
                self.window_seconds,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": f"Too many requests. Please wait {retry_after} seconds before retrying.",
                    "details": {"retry_after": retry_after},
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        hits.append(now)
        self._hits.move_to_end(client_ip)
        return await call_next(request)

    def _evict_idle(self, window_start: float) -> None:
        """Drop IPs with no request inside the current window."""
        evicted = 0
        while self._hits:
            ip, hits = next(iter(self._hits.items()))
            if hits and hits[-1] > window_start:
                break
            del self._hits[ip]
            evicted += 1

        if evicted:
            logger.debug("Evicted %d idle IP entries", evicted)
