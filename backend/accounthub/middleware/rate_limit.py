"""
AccountHub Backend — Rate Limiting Middleware
===============================================

What:  Per-IP sliding window rate limiter.
How:   Keeps the timestamps of each IP's requests inside the window; a request
       arriving when the window is full gets 429 with Retry-After.
Who:   Runs inside RequestIDMiddleware, so rejections carry the request ID.

Single-process only: counters live in this worker's memory.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from accounthub.config import settings
from accounthub.exceptions import RateLimitExceededError
from accounthub.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

# Tracked timestamps between sweeps of idle IPs
_CLEANUP_EVERY = 1000


def rate_limit_response(exc: RateLimitExceededError, request_id: str) -> JSONResponse:
    """429 body in the same shape the app's exception handlers produce."""
    return JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "message": exc.message,
            "details": exc.context,
            "request_id": request_id,
        },
        headers={"Retry-After": str(exc.retry_after)},
    )


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Configuration (read per request, from settings):
        rate_limit_requests: Max requests per window
        rate_limit_window: Window duration in seconds

    Health checks and API docs are never limited.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._hits: Dict[str, List[float]] = defaultdict(list)
        self._tracked = 0

    def _client_key(self, request: Request) -> str:
        # Behind a proxy this is the proxy's address
        return request.client.host if request.client else "unknown"

    def _recent_hits(self, client: str, now: float) -> List[float]:
        window_start = now - settings.rate_limit_window
        hits = [ts for ts in self._hits[client] if ts > window_start]
        self._hits[client] = hits
        return hits

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client = self._client_key(request)
        now = time.time()
        hits = self._recent_hits(client, now)

        if len(hits) >= settings.rate_limit_requests:
            rid = request_id_var.get("")
            retry_after = int(hits[0] + settings.rate_limit_window - now) + 1
            logger.warning(
                "[%s] Rate limit exceeded for %s %s from %s (%d requests in %ds)",
                rid,
                request.method,
                request.url.path,
                client,
                len(hits),
                settings.rate_limit_window,
            )
            return rate_limit_response(RateLimitExceededError(retry_after=retry_after), rid)

        hits.append(now)
        self._tracked += 1
        if self._tracked % _CLEANUP_EVERY == 0:
            self._forget_idle_clients(now - settings.rate_limit_window)

        return await call_next(request)

    def _forget_idle_clients(self, window_start: float) -> None:
        idle = [
            client for client, hits in self._hits.items()
            if not hits or hits[-1] <= window_start
        ]
        for client in idle:
            del self._hits[client]
        if idle:
            logger.debug("Dropped rate-limit state for %d idle clients", len(idle))
