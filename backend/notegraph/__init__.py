"""
NoteGraph — Application Package Initializer
=============================================

What: Marks the `notegraph` directory as a Python package.
Why:  Enables module imports like `from notegraph.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The package is split into a server side and a client side that share
    configuration and the exception hierarchy:

    ┌─────────────────────────────────────┐
    │      GraphQL API (api/)             │  ← Wire contract + resolvers
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, partial-update merging
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    ┌─────────────────────────────────────┐
    │      Views (client/views.py)        │  ← Plain-text list/form view model
    ├─────────────────────────────────────┤
    │      Hooks (client/hooks.py)        │  ← Operations + cache-update rules
    ├─────────────────────────────────────┤
    │  Cache + Transport (client/)        │  ← Normalized cache, httpx transport
    └─────────────────────────────────────┘

    Resolvers never touch SQL directly and hooks never touch HTTP directly,
    so each layer can be tested on its own.
"""

__version__ = "1.0.0"
