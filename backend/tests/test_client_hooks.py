"""
NoteGraph — Client Hook Tests
===============================

What:  Tests for NotesClient against the real app (in-process) and against
       httpx.MockTransport for failure cases.
Why:   After every successful mutation the cache must already agree with the
       server, with no refetch.

What we test:
    ✅ Queries are cached per search term; cache-first avoids a second request
    ✅ create_note prepends only to cached lists whose search matches
    ✅ update_note is visible in every cached list and keeps createdAt
    ✅ delete_note removes the note from every cached view
    ✅ Failed mutations raise and leave the cache unchanged
    ✅ Transport failures come back on the QueryResult, nothing is retried
"""

import asyncio
import json

import httpx
import pytest

from notegraph.client.hooks import NotesClient, canonical_note_id, note_matches_search
from notegraph.client.transport import GraphQLTransport
from notegraph.exceptions import OperationError, TransportError


def ids(result):
    return [n["id"] for n in result.data]


class TestQueries:
    @pytest.mark.asyncio
    async def test_use_notes_caches_result(self, notes_client):
        first = await notes_client.use_notes()
        assert first.data == []
        assert first.error is None
        assert not first.from_cache

        second = await notes_client.use_notes()
        assert second.from_cache
        assert second.data == []

    @pytest.mark.asyncio
    async def test_network_only_refetches(self, notes_client, gql):
        await notes_client.use_notes()
        await gql('mutation { createNote(title: "Behind your back", content: "") { id } }')

        cached = await notes_client.use_notes()
        fresh = await notes_client.use_notes(fetch_policy="network-only")

        assert cached.data == []
        assert [n["title"] for n in fresh.data] == ["Behind your back"]

    @pytest.mark.asyncio
    async def test_use_note_skips_empty_id(self, notes_client):
        result = await notes_client.use_note("")
        assert result.skipped
        assert result.data is None

    @pytest.mark.asyncio
    async def test_use_note_unknown_is_none(self, notes_client):
        result = await notes_client.use_note("00000000-0000-0000-0000-000000000000")
        assert result.data is None
        assert result.error is None

    @pytest.mark.asyncio
    async def test_peek_before_any_request(self, notes_client):
        result = notes_client.peek_notes()
        assert result.data is None
        assert not result.loading


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_prepends_to_cached_list(self, notes_client):
        existing = await notes_client.create_note("Older", "first")
        await notes_client.use_notes()
        await asyncio.sleep(0.002)

        created = await notes_client.create_note("Newer", "second")

        assert created["__typename"] == "Note"
        assert ids(notes_client.peek_notes()) == [created["id"], existing["id"]]

    @pytest.mark.asyncio
    async def test_create_only_touches_matching_searches(self, notes_client):
        await notes_client.use_notes()
        await notes_client.use_notes("python")
        await notes_client.use_notes("rust")

        created = await notes_client.create_note("Python tips", "use venvs")

        assert ids(notes_client.peek_notes()) == [created["id"]]
        assert ids(notes_client.peek_notes("python")) == [created["id"]]
        assert notes_client.peek_notes("rust").data == []

    @pytest.mark.asyncio
    async def test_cache_matches_server_after_create(self, notes_client):
        await notes_client.use_notes()
        await notes_client.create_note("One", "")

        cached = notes_client.peek_notes().data
        fresh = await notes_client.use_notes(fetch_policy="network-only")

        assert cached == fresh.data

    @pytest.mark.asyncio
    async def test_failed_create_leaves_cache_unchanged(self, notes_client):
        await notes_client.use_notes()

        with pytest.raises(OperationError) as exc_info:
            await notes_client.create_note("   ", "blank title")

        assert exc_info.value.code == "VALIDATION_ERROR"
        assert exc_info.value.path == ["createNote"]
        assert notes_client.peek_notes().data == []


class TestUpdate:
    @pytest.mark.asyncio
    async def test_update_visible_everywhere_and_keeps_created_at(self, notes_client):
        created = await notes_client.create_note("Draft", "body")
        await notes_client.use_notes()
        await notes_client.use_note(created["id"])

        updated = await notes_client.update_note(created["id"], title="Final")

        assert updated["title"] == "Final"
        assert updated["content"] == "body"
        assert updated["createdAt"] == created["createdAt"]
        assert updated["updatedAt"] > created["updatedAt"]
        assert notes_client.peek_notes().data[0]["title"] == "Final"
        assert (await notes_client.use_note(created["id"])).data["title"] == "Final"

    @pytest.mark.asyncio
    async def test_update_unknown_raises_not_found(self, notes_client):
        with pytest.raises(OperationError) as exc_info:
            await notes_client.update_note("00000000-0000-0000-0000-000000000000", title="x")
        assert exc_info.value.code == "NOT_FOUND"


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_removes_from_every_view(self, notes_client):
        keep = await notes_client.create_note("Keep", "alpha")
        drop = await notes_client.create_note("Drop", "alpha")
        await notes_client.use_notes()
        await notes_client.use_notes("alpha")
        await notes_client.use_note(drop["id"])

        assert await notes_client.delete_note(drop["id"]) is True

        assert ids(notes_client.peek_notes()) == [keep["id"]]
        assert ids(notes_client.peek_notes("alpha")) == [keep["id"]]
        assert (await notes_client.use_note(drop["id"])).data is None
        assert notes_client.cache.read_entity("Note", drop["id"]) is None

    @pytest.mark.asyncio
    async def test_delete_with_differently_spelled_id(self, notes_client):
        note = await notes_client.create_note("Shouting", "")
        await notes_client.use_notes()

        assert await notes_client.delete_note(note["id"].upper()) is True

        assert notes_client.peek_notes().data == []
        assert notes_client.cache.read_entity("Note", note["id"]) is None

    @pytest.mark.asyncio
    async def test_delete_twice_fails(self, notes_client):
        note = await notes_client.create_note("Once", "")
        await notes_client.delete_note(note["id"])

        with pytest.raises(OperationError) as exc_info:
            await notes_client.delete_note(note["id"])
        assert exc_info.value.code == "NOT_FOUND"


class TestTransportFailures:
    @staticmethod
    def client_with(handler):
        calls = []

        def recording(request):
            calls.append(request)
            return handler(request)

        http = httpx.AsyncClient(transport=httpx.MockTransport(recording))
        return NotesClient(GraphQLTransport(url="http://notes.invalid/graphql", client=http)), calls

    @pytest.mark.asyncio
    async def test_connection_error_is_returned_not_raised(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client, calls = self.client_with(refuse)

        result = await client.use_notes()

        assert isinstance(result.error, TransportError)
        assert result.data is None
        assert not result.loading
        assert len(calls) == 1  # no retry
        assert not client.cache.has_query("notes")

    @pytest.mark.asyncio
    async def test_non_graphql_response(self):
        client, _ = self.client_with(lambda request: httpx.Response(502, text="Bad gateway"))

        result = await client.use_notes()

        assert isinstance(result.error, TransportError)
        assert result.error.status_code == 502

    @pytest.mark.asyncio
    async def test_mutation_transport_error_raises(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client, _ = self.client_with(refuse)

        with pytest.raises(TransportError):
            await client.create_note("T", "C")

    @pytest.mark.asyncio
    async def test_sends_request_id_header(self):
        client, calls = self.client_with(
            lambda request: httpx.Response(200, json={"data": {"notes": []}})
        )

        await client.use_notes()

        assert calls[0].headers["X-Request-ID"]
        assert calls[0].headers["X-GraphQL-Operation"] == "GetNotes"


class TestSearchMatching:
    def test_note_matches_search(self):
        note = {"title": "GraphQL Notes", "content": "Apollo cache"}
        assert note_matches_search(note, None)
        assert note_matches_search(note, "graphql")
        assert note_matches_search(note, "CACHE")
        assert not note_matches_search(note, "rust")

    def test_canonical_note_id(self):
        assert canonical_note_id("FE4929CD-0000-4000-8000-00000000000A") == "fe4929cd-0000-4000-8000-00000000000a"
        assert canonical_note_id("not-a-uuid") == "not-a-uuid"


def note_payload(note_id, title):
    return {
        "__typename": "Note",
        "id": note_id,
        "title": title,
        "content": "",
        "createdAt": "2024-01-15T12:00:00+00:00",
        "updatedAt": "2024-01-15T12:00:00+00:00",
    }


class TestOverlappingRequests:
    """A list response that started before a mutation must not undo its cache patch."""

    @staticmethod
    def held_list_client(held_notes, release):
        async def handler(request):
            operation = json.loads(request.content)["operationName"]
            if operation == "GetNotes":
                await release.wait()
                return httpx.Response(200, json={"data": {"notes": held_notes}})
            if operation == "CreateNote":
                return httpx.Response(200, json={"data": {"createNote": note_payload("new", "New")}})
            return httpx.Response(200, json={"data": {"deleteNote": True}})

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return NotesClient(GraphQLTransport(url="http://notes.invalid/graphql", client=http))

    @pytest.mark.asyncio
    async def test_slow_list_does_not_drop_created_note(self):
        release = asyncio.Event()
        client = self.held_list_client([note_payload("old", "Old")], release)
        client.cache.write_query("notes", {}, [note_payload("old", "Old")])

        refetch = asyncio.create_task(client.use_notes(fetch_policy="network-only"))
        await asyncio.sleep(0)
        await client.create_note("New", "")
        assert ids(client.peek_notes()) == ["new", "old"]

        release.set()
        await refetch

        assert ids(client.peek_notes()) == ["new", "old"]

    @pytest.mark.asyncio
    async def test_slow_list_does_not_restore_deleted_note(self):
        release = asyncio.Event()
        stale = [note_payload("new", "New"), note_payload("old", "Old")]
        client = self.held_list_client(stale, release)
        client.cache.write_query("notes", {}, stale)

        refetch = asyncio.create_task(client.use_notes(fetch_policy="network-only"))
        await asyncio.sleep(0)
        await client.delete_note("new")

        release.set()
        await refetch

        assert ids(client.peek_notes()) == ["old"]
