"""
NoteGraph — Request Logging Middleware
========================================

What:  One access log line per GraphQL request: operation, status, duration.
Why:   Every operation is a POST to the same path, so "POST /graphql 200" on
       its own says nothing. The line names the operation instead.
How:   The operation name comes from the X-GraphQL-Operation header, which
       NotesClient sends with every request. Other callers (GraphiQL, curl)
       show up as "anonymous". The body is never read here.

What we log vs what we DON'T log (privacy):
    ✅ Log: operation, method, status, duration, IP, request ID
    ❌ Don't log: query text, variables (note contents), headers
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from notegraph.config import settings
from notegraph.middleware.request_id import request_id_var

logger = logging.getLogger("notegraph.access")

OPERATION_HEADER = "X-GraphQL-Operation"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Access log for the GraphQL endpoint.

    GraphQL errors come back with HTTP 200 and are logged by the schema
    (api/schema.py). Here 4xx/5xx mean the request never reached a resolver
    (rate limited, malformed JSON, crash), so they get WARNING/ERROR.
    GET requests are the GraphiQL page and its assets; they log at DEBUG.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path != settings.graphql_path:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        operation = request.headers.get(OPERATION_HEADER) or "anonymous"
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        elif request.method == "GET":
            log_level = logging.DEBUG
        else:
            log_level = logging.INFO

        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"
        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            operation,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "operation": operation,
                "status": status,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response
