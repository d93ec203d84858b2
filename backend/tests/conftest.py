"""
NoteGraph Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Every layer is tested against a real (throwaway) SQLite database, so
       the SQL that search and ordering rely on actually runs.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    engine            → fresh SQLite file with tables created
    ├── session_factory
    │   ├── db_session    → AsyncSession for service-level tests
    │   └── app           → create_app() bound to this database
    │       └── test_client   → httpx AsyncClient over ASGITransport
    │           ├── gql           → POST a GraphQL document, return the JSON body
    │           └── notes_client  → NotesClient talking to the app in-process
"""

import os
import tempfile

# Override settings for testing BEFORE any notegraph imports
# Why: The module-level engine and settings are built at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="notegraph_test_"), "default.db"
)
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

from typing import Any, AsyncGenerator, Dict, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from notegraph.client.hooks import NotesClient
from notegraph.client.transport import GraphQLTransport
from notegraph.database import build_engine, build_session_factory, create_tables


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine(tmp_path):
    """A SQLite database file unique to this test, with all tables created."""
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'notes.db'}")
    await create_tables(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """
    Provides an AsyncSession for calling NoteService directly.

    Tests commit explicitly where they need a later read to see the write.
    """
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Application & Clients
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(session_factory):
    from notegraph.main import create_app
    return create_app(session_factory=session_factory)


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient routed straight into the app (no server).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def gql(test_client):
    """
    Post one GraphQL operation and return the decoded body.

    Usage:
        body = await gql("{ notes { id } }")
        assert body["data"]["notes"] == []
    """

    async def execute(query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"query": query}
        if variables is not None:
            payload["variables"] = variables
        response = await test_client.post("/graphql", json=payload)
        return response.json()

    return execute


@pytest.fixture
def notes_client(test_client) -> NotesClient:
    """NotesClient whose transport reuses the in-process test client."""
    return NotesClient(GraphQLTransport(url="http://test/graphql", client=test_client))
