"""
NoteGraph — GraphQL Transport
===============================

What:  Sends one GraphQL operation per call over HTTP and returns the parsed
       `data` / `errors` pair.
Why:   Keeps httpx out of the hooks; tests hand in an httpx client backed by
       ASGITransport so the real app answers without a server.
How:   POST {"query", "variables", "operationName"} as JSON, with the request
       id and operation name in headers for the server access log.

Failure Mapping:
    httpx.HTTPError (connect, timeout, ...)  → TransportError
    Body is not JSON / has no data or errors → TransportError (with status code)
    Body has `errors` (any status)           → returned to the caller as-is

No retry is attempted: each call sends exactly one request.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from notegraph.config import settings
from notegraph.exceptions import TransportError
from notegraph.middleware.logging import OPERATION_HEADER
from notegraph.middleware.request_id import REQUEST_ID_HEADER, new_request_id

logger = logging.getLogger(__name__)


@dataclass
class GraphQLResponse:
    data: Optional[Dict[str, Any]] = None
    errors: List[Dict[str, Any]] = field(default_factory=list)
    request_id: str = ""


class GraphQLTransport:
    """
    GraphQL-over-HTTP transport built on httpx.AsyncClient.

    Args:
        url:     GraphQL endpoint (defaults to settings.api_url)
        timeout: Per-request timeout in seconds (defaults to settings.client_timeout)
        client:  An existing AsyncClient to use; the transport will not close it
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url or settings.api_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.client_timeout,
        )

    async def execute(
        self,
        document: str,
        variables: Optional[Dict[str, Any]] = None,
        operation_name: Optional[str] = None,
    ) -> GraphQLResponse:
        """Send one operation. Raises TransportError if no GraphQL answer came back."""
        payload: Dict[str, Any] = {"query": document}
        if variables:
            payload["variables"] = variables
        if operation_name:
            payload["operationName"] = operation_name

        rid = new_request_id()
        headers = {REQUEST_ID_HEADER: rid}
        if operation_name:
            headers[OPERATION_HEADER] = operation_name
        try:
            response = await self._client.post(self.url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("[%s] %s failed: %s", rid, operation_name or "operation", e)
            raise TransportError(
                message=f"Could not reach the notes service at {self.url}",
                context={"error_type": type(e).__name__, "request_id": rid},
            ) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict) or ("data" not in body and "errors" not in body):
            logger.warning(
                "[%s] %s: unexpected HTTP %d response",
                rid, operation_name or "operation", response.status_code,
            )
            raise TransportError(
                message=f"The notes service answered with HTTP {response.status_code}",
                status_code=response.status_code,
                context={"request_id": rid},
            )

        return GraphQLResponse(
            data=body.get("data"),
            errors=body.get("errors") or [],
            request_id=response.headers.get(REQUEST_ID_HEADER, rid),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
