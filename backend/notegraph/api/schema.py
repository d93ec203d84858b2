"""
NoteGraph — GraphQL Schema & Resolvers
========================================

What:  Query and Mutation roots, the executable schema, and the FastAPI router.
Why:   This is the whole server-side contract: five operations, each a direct
       pass-through to one NoteService call.
How:   Every resolver opens one session scope from the request context, calls
       the service, and converts the ORM record to the wire type after the
       scope has committed.

SDL (generated by strawberry):
    type Query {
      notes(search: String = null): [Note!]!
      note(id: ID!): Note
    }

    type Mutation {
      createNote(title: String!, content: String!): Note!
      updateNote(id: ID!, title: String, content: String): Note!
      deleteNote(id: ID!): Boolean!
    }

Error Reporting:
    Application errors carry `extensions.code` (VALIDATION_ERROR, NOT_FOUND,
    INTERNAL_SERVER_ERROR). Anything else is masked so stack traces and SQL
    never reach the client; the original is logged server-side.
"""

import logging
from typing import List, Optional

import strawberry
from graphql import GraphQLError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from strawberry.extensions import MaskErrors
from strawberry.fastapi import GraphQLRouter
from strawberry.types import Info

from notegraph.api.context import NoteContext
from notegraph.api.types import Note
from notegraph.config import settings
from notegraph.exceptions import NoteGraphError, NotFoundError, ValidationError
from notegraph.middleware.request_id import request_id_var
from notegraph.schemas.note import NotePatch
from notegraph.services.note_service import note_service

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again or contact support."


@strawberry.type
class Query:
    @strawberry.field(
        description=(
            "All notes, newest first. With `search`, only notes whose title or "
            "content contains it (case-insensitive)."
        )
    )
    async def notes(
        self,
        info: Info[NoteContext, None],
        search: Optional[str] = None,
    ) -> List[Note]:
        async with info.context.session() as db:
            records = await note_service.list_notes(db, search=search)
        return [Note.from_model(record) for record in records]

    @strawberry.field(description="The note with this id, or null if there is none.")
    async def note(
        self,
        info: Info[NoteContext, None],
        id: strawberry.ID,
    ) -> Optional[Note]:
        async with info.context.session() as db:
            record = await note_service.get_note(db, id)
        return Note.from_model(record) if record is not None else None


@strawberry.type
class Mutation:
    @strawberry.mutation(description="Create a note. The server assigns id and timestamps.")
    async def create_note(
        self,
        info: Info[NoteContext, None],
        title: str,
        content: str,
    ) -> Note:
        async with info.context.session() as db:
            record = await note_service.create_note(db, title=title, content=content)
        return Note.from_model(record)

    @strawberry.mutation(
        description=(
            "Update a note. Omitted, null and empty-string arguments leave the "
            "field unchanged; updatedAt is always refreshed."
        )
    )
    async def update_note(
        self,
        info: Info[NoteContext, None],
        id: strawberry.ID,
        title: Optional[str] = strawberry.UNSET,
        content: Optional[str] = strawberry.UNSET,
    ) -> Note:
        arguments = {
            name: value
            for name, value in (("title", title), ("content", content))
            if value is not strawberry.UNSET
        }
        patch = NotePatch.from_arguments(arguments, apply_empty=settings.apply_empty_updates)
        async with info.context.session() as db:
            record = await note_service.update_note(db, id, patch)
        return Note.from_model(record)

    @strawberry.mutation(description="Delete a note. Deleting an unknown id is an error.")
    async def delete_note(
        self,
        info: Info[NoteContext, None],
        id: strawberry.ID,
    ) -> bool:
        async with info.context.session() as db:
            return await note_service.delete_note(db, id)


def _should_mask_error(error: GraphQLError) -> bool:
    """Mask unexpected exceptions; keep application and validation errors."""
    original = error.original_error
    return original is not None and not isinstance(original, NoteGraphError)


class NoteSchema(strawberry.Schema):
    """Schema with severity-aware error logging."""

    def process_errors(self, errors, execution_context=None) -> None:
        rid = request_id_var.get("")
        for error in errors:
            original = error.original_error
            if isinstance(original, (ValidationError, NotFoundError)):
                logger.warning("[%s] %s: %s", rid, original.code, original.message)
            elif isinstance(original, NoteGraphError):
                logger.error(
                    "[%s] %s: %s | Context: %s",
                    rid, original.code, original.message, original.context,
                )
            elif original is None:
                # Parse/validation failures, e.g. createNote without a title
                logger.warning("[%s] Rejected GraphQL request: %s", rid, error.message)
            else:
                logger.error(
                    "[%s] Unexpected error: %s", rid, str(original), exc_info=original
                )


class NoteMaskErrors(MaskErrors):
    """MaskErrors preconfigured for this schema; strawberry builds one per request."""

    def __init__(self, *, execution_context=None):
        super().__init__(
            should_mask_error=_should_mask_error,
            error_message=UNEXPECTED_ERROR_MESSAGE,
        )


schema = NoteSchema(
    query=Query,
    mutation=Mutation,
    extensions=[NoteMaskErrors],
)


def build_graphql_router(
    session_factory: async_sessionmaker[AsyncSession],
) -> GraphQLRouter:
    """
    Build the FastAPI router serving the schema.

    GET requests from a browser get the GraphiQL explorer when
    settings.graphql_ide is enabled.
    """

    async def get_context() -> NoteContext:
        return NoteContext(session_factory=session_factory)

    return GraphQLRouter(
        schema,
        context_getter=get_context,
        graphql_ide="graphiql" if settings.graphql_ide else None,
    )
