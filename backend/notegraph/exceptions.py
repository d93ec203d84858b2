"""
NoteGraph — Custom Exception Hierarchy
========================================

What:  Defines application-specific exceptions for server and client errors.
Why:   Custom exceptions carry a stable machine-readable code that survives
       the trip through GraphQL (`errors[].extensions.code`) and can be
       matched on by the client without parsing messages.
How:   Each exception class carries a message and optional context dict.
       Server exceptions expose `extensions`, which graphql-core copies onto
       the GraphQLError it builds from the original exception.
Who:   Raised by services and middleware (server) and by the transport and
       hooks (client).

Exception Hierarchy:
    NoteGraphError (base)
    ├── ValidationError          → VALIDATION_ERROR (client can fix)
    ├── NotFoundError            → NOT_FOUND
    ├── DatabaseError            → INTERNAL_SERVER_ERROR
    ├── RateLimitExceededError   → RATE_LIMITED (HTTP 429)
    ├── TransportError           → TRANSPORT_ERROR (client side)
    └── OperationError           → code reported by the server (client side)
"""

from typing import Any, Dict, List, Optional, Union


class NoteGraphError(Exception):
    """
    Base exception for all NoteGraph application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; only `public_context` is returned)
    """

    code = "INTERNAL_SERVER_ERROR"

    # Context keys that are safe to expose in GraphQL error extensions
    public_context: tuple = ()

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    @property
    def extensions(self) -> Dict[str, Any]:
        """GraphQL error extensions: the code plus any public context."""
        ext: Dict[str, Any] = {"code": self.code}
        for key in self.public_context:
            if key in self.context:
                ext[key] = self.context[key]
        return ext


class ValidationError(NoteGraphError):
    """
    Raised when client input fails validation.

    When:    Blank title on create or update.
    Note:    Missing required arguments never reach the service; GraphQL
             validation rejects them before any resolver runs.

    Example error:
        {
            "message": "Title must not be empty",
            "extensions": {"code": "VALIDATION_ERROR", "field": "title"}
        }
    """

    code = "VALIDATION_ERROR"
    public_context = ("field",)

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(NoteGraphError):
    """
    Raised when a mutation references a resource that does not exist.

    When:    updateNote / deleteNote with an unknown id.
    Why not for reads: the `note` query reports absence as a null result.
    """

    code = "NOT_FOUND"
    public_context = ("resource", "resource_id")

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(NoteGraphError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic.
        Detailed error info (SQL, constraint names) is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(NoteGraphError):
    """Raised when a client exceeds the per-IP request rate limit."""

    code = "RATE_LIMITED"
    public_context = ("retry_after",)

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many requests. Please wait {retry_after} seconds before retrying."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class TransportError(NoteGraphError):
    """
    Raised by the client when the API cannot be reached or answers with
    something that is not a GraphQL response.

    No retry is attempted; the caller re-triggers the action.
    """

    code = "TRANSPORT_ERROR"

    def __init__(
        self,
        message: str = "Could not reach the notes service",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.status_code = status_code


class OperationError(NoteGraphError):
    """
    Raised by the client when a GraphQL response carries errors.

    Attributes:
        code:   extensions.code of the first error ("GRAPHQL_ERROR" when absent)
        path:   Response path of the first error, e.g. ["updateNote"]
        errors: Raw error dicts as returned by the server
    """

    def __init__(self, errors: List[Dict[str, Any]]):
        first = errors[0] if errors else {}
        extensions = first.get("extensions") or {}
        self.code = extensions.get("code", "GRAPHQL_ERROR")
        self.path: Optional[List[Union[str, int]]] = first.get("path")
        self.errors = errors
        super().__init__(
            message=first.get("message", "GraphQL operation failed"),
            context={"code": self.code, "count": len(errors)},
        )
