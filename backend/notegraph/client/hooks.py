"""
NoteGraph — Client Data Hooks
===============================

What:  One method per API operation, each with a declared cache-update rule.
Why:   Views call these and read the cache afterwards; after any successful
       mutation every cached view of the data already agrees with the server.
How:   Each call sends exactly one operation through GraphQLTransport and then
       reconciles the NormalizedCache.

Cache-Update Rules:
    use_notes(search)   → result stored under notes({"search": …}); one entry per search value
    use_note(id)        → stored under note({"id": …}); empty id skips the request
    create_note         → new Note prepended to every cached notes list it matches
    update_note         → returned fields merged into the Note entity by id
    delete_note         → id removed from every notes list; entity evicted

Error Policy:
    Queries use "all": errors and any partial data both come back on the
    QueryResult, and a TransportError is returned rather than raised.
    Mutations raise (OperationError / TransportError) and leave the cache
    untouched. Nothing is retried.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

from notegraph.client.cache import MISSING, NormalizedCache, REF_KEY
from notegraph.client.documents import (
    CREATE_NOTE,
    DELETE_NOTE,
    GET_NOTE,
    GET_NOTES,
    UPDATE_NOTE,
)
from notegraph.client.transport import GraphQLTransport
from notegraph.exceptions import NoteGraphError, OperationError, TransportError

logger = logging.getLogger(__name__)

FetchPolicy = Literal["cache-first", "network-only"]

NOTE_TYPENAME = "Note"


@dataclass
class QueryResult:
    """
    State of one query as seen by a view.

    Attributes:
        data:       The field value: a list of notes, a note, or None
        error:      OperationError / TransportError, if any
        loading:    A request for this key is in flight and nothing is cached
        skipped:    The query was not sent (precondition not met)
        from_cache: Served without a network round trip
    """
    data: Any = None
    error: Optional[NoteGraphError] = None
    loading: bool = False
    skipped: bool = False
    from_cache: bool = False


def canonical_note_id(note_id: str) -> str:
    """The id as the server spells it (lowercase, hyphenated) when it is a UUID."""
    try:
        return str(uuid.UUID(note_id))
    except (TypeError, ValueError):
        return note_id


def note_matches_search(note: Dict[str, Any], search: Optional[str]) -> bool:
    """Client-side mirror of the server filter: substring of title or content."""
    if not search:
        return True
    needle = search.lower()
    return needle in (note.get("title") or "").lower() or needle in (note.get("content") or "").lower()


class NotesClient:
    """
    Typed access to the notes API backed by a normalized cache.

    Args:
        transport: Where operations are sent
        cache:     Shared cache; a fresh one is created when omitted
    """

    def __init__(
        self,
        transport: GraphQLTransport,
        cache: Optional[NormalizedCache] = None,
    ):
        self.transport = transport
        self.cache = cache if cache is not None else NormalizedCache()
        self._in_flight: Dict[str, int] = {}

    @classmethod
    def connect(cls, url: Optional[str] = None, timeout: Optional[float] = None) -> "NotesClient":
        """Client talking to `url` (settings.api_url by default)."""
        return cls(GraphQLTransport(url=url, timeout=timeout))

    async def __aenter__(self) -> "NotesClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        self.cache.reset()
        await self.transport.aclose()

    # ── Queries ───────────────────────────────────────────────────────────

    async def use_notes(
        self,
        search: Optional[str] = None,
        fetch_policy: FetchPolicy = "cache-first",
    ) -> QueryResult:
        """All notes, or those matching `search`. An empty search means all."""
        return await self._query("notes", GET_NOTES, "GetNotes", {"search": search or None}, fetch_policy)

    def peek_notes(self, search: Optional[str] = None) -> QueryResult:
        """Current cached state for use_notes(search), without any request."""
        return self._peek("notes", {"search": search or None})

    async def use_note(
        self,
        note_id: Optional[str],
        fetch_policy: FetchPolicy = "cache-first",
    ) -> QueryResult:
        """One note by id. No request is sent for an empty id."""
        if not note_id:
            return QueryResult(skipped=True)
        return await self._query("note", GET_NOTE, "GetNote", {"id": note_id}, fetch_policy)

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create_note(self, title: str, content: str) -> Dict[str, Any]:
        """Create a note and prepend it to every cached list it belongs in."""
        data = await self._mutate(CREATE_NOTE, "CreateNote", {"title": title, "content": content})
        note = data["createNote"]
        ref = self.cache.write_entity(note)

        def prepend(value: Any, args: Dict[str, Any]) -> Any:
            if not isinstance(value, list) or ref in value:
                return value
            if not note_matches_search(note, args.get("search")):
                return value
            return [ref] + value

        self.cache.modify("notes", prepend)
        return self.cache.read_entity(NOTE_TYPENAME, note["id"])

    async def update_note(
        self,
        note_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Update a note; None leaves a field unchanged.

        The response has no createdAt, so the merged entity is returned: it
        keeps createdAt from any earlier read.
        """
        variables = {"id": note_id, "title": title, "content": content}
        data = await self._mutate(
            UPDATE_NOTE,
            "UpdateNote",
            {k: v for k, v in variables.items() if v is not None},
        )
        note = data["updateNote"]
        self.cache.write_entity(note)
        return self.cache.read_entity(NOTE_TYPENAME, note["id"])

    async def delete_note(self, note_id: str) -> bool:
        """Delete a note and drop it from every cached view."""
        data = await self._mutate(DELETE_NOTE, "DeleteNote", {"id": note_id})
        deleted = bool(data.get("deleteNote"))
        if deleted:
            cache_id = canonical_note_id(note_id)
            ref = {REF_KEY: self.cache.identify(NOTE_TYPENAME, cache_id)}
            self.cache.modify(
                "notes",
                lambda value, args: (
                    [item for item in value if item != ref]
                    if isinstance(value, list) and ref in value
                    else value
                ),
            )
            self.cache.evict(NOTE_TYPENAME, cache_id)
        return deleted

    # ── Internals ─────────────────────────────────────────────────────────

    def _peek(self, field_name: str, variables: Dict[str, Any]) -> QueryResult:
        cached = self.cache.read_query(field_name, variables)
        if cached is not MISSING:
            return QueryResult(data=cached, from_cache=True)
        key = self.cache.root_key(field_name, variables)
        return QueryResult(loading=self._in_flight.get(key, 0) > 0)

    async def _query(
        self,
        field_name: str,
        document: str,
        operation_name: str,
        variables: Dict[str, Any],
        fetch_policy: FetchPolicy,
    ) -> QueryResult:
        args = self.cache.canonical_args(variables)
        if fetch_policy == "cache-first":
            cached = self.cache.read_query(field_name, args)
            if cached is not MISSING:
                return QueryResult(data=cached, from_cache=True)

        key = self.cache.root_key(field_name, args)
        seq = self.cache.next_sequence()
        self._in_flight[key] = self._in_flight.get(key, 0) + 1
        try:
            response = await self.transport.execute(document, args, operation_name)
        except TransportError as e:
            return QueryResult(error=e)
        finally:
            self._in_flight[key] -= 1
            if not self._in_flight[key]:
                del self._in_flight[key]

        error = OperationError(response.errors) if response.errors else None
        if error is not None:
            logger.warning("%s returned errors: [%s] %s", operation_name, error.code, error.message)

        data = None
        if response.data is not None and field_name in response.data:
            value = response.data[field_name]
            # A null caused by an error is not a real "absent" result
            if value is not None or error is None:
                self.cache.write_query(field_name, args, value, seq=seq)
            cached = self.cache.read_query(field_name, args)
            data = None if cached is MISSING else cached
        return QueryResult(data=data, error=error)

    async def _mutate(
        self,
        document: str,
        operation_name: str,
        variables: Dict[str, Any],
    ) -> Dict[str, Any]:
        response = await self.transport.execute(document, variables, operation_name)
        if response.errors:
            error = OperationError(response.errors)
            logger.warning("%s failed: [%s] %s", operation_name, error.code, error.message)
            raise error
        return response.data or {}
