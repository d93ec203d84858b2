"""
NoteGraph — Rate Limiting Middleware
======================================

What:  Per-IP sliding window limit on POSTs to the GraphQL endpoint.
Why:   The API has no authentication; this is the only brake on a client
       hammering it. Only operations cost anything: /health and the GraphiQL
       page (GET) are never counted.
How:   A deque of request timestamps per IP, trimmed from the left as they
       fall out of the window.

Rejection shape:
    HTTP 429 with Retry-After and a GraphQL-shaped body, so NotesClient
    reports it like any other failed operation (OperationError, code
    RATE_LIMITED) instead of a transport failure:

        {"data": null,
         "errors": [{"message": "Too many requests...",
                     "extensions": {"code": "RATE_LIMITED", "retry_after": 42}}]}

    The state is per process; multi-worker deployments need a shared store.
"""

import logging
import time
from collections import deque
from typing import Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from notegraph.config import settings
from notegraph.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

# Forget idle IPs once this many are tracked
MAX_TRACKED_CLIENTS = 10_000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter for GraphQL operations.

    Configuration (read per request, from settings):
        rate_limit_requests: Max operations per window per IP
        rate_limit_window:   Window duration in seconds
    """

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._history: Dict[str, Deque[float]] = {}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method != "POST" or request.url.path != settings.graphql_path:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.monotonic()
        history = self._trim(client_ip, now)

        if len(history) >= settings.rate_limit_requests:
            retry_after = int(history[0] + settings.rate_limit_window - now) + 1
            return self._reject(client_ip, retry_after)

        history.append(now)
        if len(self._history) > MAX_TRACKED_CLIENTS:
            self._forget_idle(now)
        return await call_next(request)

    def _trim(self, client_ip: str, now: float) -> Deque[float]:
        history = self._history.setdefault(client_ip, deque())
        window_start = now - settings.rate_limit_window
        while history and history[0] <= window_start:
            history.popleft()
        return history

    def _reject(self, client_ip: str, retry_after: int) -> JSONResponse:
        exc = RateLimitExceededError(retry_after=retry_after)
        logger.warning(
            "Rate limit exceeded for IP %s: %d operations in %ds window",
            client_ip,
            settings.rate_limit_requests,
            settings.rate_limit_window,
        )
        return JSONResponse(
            status_code=429,
            content={
                "data": None,
                "errors": [{"message": exc.message, "extensions": exc.extensions}],
            },
            headers={"Retry-After": str(retry_after)},
        )

    def _forget_idle(self, now: float) -> None:
        idle = [ip for ip in self._history if not self._trim(ip, now)]
        for ip in idle:
            del self._history[ip]
        logger.debug("Forgot %d idle rate-limit entries", len(idle))
