# Client package init
"""
NoteGraph — Python Client
===========================

What:  Typed access to the GraphQL API with a normalized client-side cache.

Module Inventory:
    - documents.py:  The five GraphQL operation documents
    - transport.py:  httpx-based GraphQL-over-HTTP transport
    - cache.py:      NormalizedCache (entities by id + root query entries)
    - hooks.py:      NotesClient: queries/mutations with cache-update rules
    - views.py:      NotesListView: plain-text list/form view model

Typical use:
    async with NotesClient.connect() as client:
        created = await client.create_note("Title", "Body")
        result = await client.use_notes()      # fetched once, then served from cache
"""

from notegraph.client.cache import NormalizedCache
from notegraph.client.hooks import NotesClient, QueryResult
from notegraph.client.transport import GraphQLTransport

__all__ = ["GraphQLTransport", "NormalizedCache", "NotesClient", "QueryResult"]
