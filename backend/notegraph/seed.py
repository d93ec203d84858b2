"""
NoteGraph — Database Seed Script
==================================

What:  Replaces all notes with a set of sample notes for manual testing.
How:   `notegraph-seed` (or `python -m notegraph.seed`). Creates tables first
       when pointed at SQLite; PostgreSQL expects `alembic upgrade head`.

Notes are inserted one at a time with a short pause so each gets a distinct
createdAt and the list order is predictable.
"""

import asyncio
import logging
from typing import List, Tuple

from sqlalchemy import delete

from notegraph.config import settings
from notegraph.database import create_tables, dispose_engine, session_scope
from notegraph.main import setup_logging
from notegraph.models.note import Note
from notegraph.services.note_service import note_service

logger = logging.getLogger(__name__)

SEED_NOTES: List[Tuple[str, str]] = [
    (
        "GraphQL Fundamentals",
        "GraphQL is a query language for APIs and a runtime for fulfilling those "
        "queries with your existing data. Clients ask for exactly what they need.\n\n"
        "- Single endpoint for all operations\n- Strong type system\n"
        "- Queries, Mutations, and Subscriptions\n- Resolver functions handle data fetching",
    ),
    (
        "Async Python Patterns",
        "asyncio essentials:\n\n- async def / await for coroutines\n"
        "- asyncio.gather for concurrency\n- async context managers for resources\n"
        "- Never block the event loop with synchronous I/O",
    ),
    (
        "Database Design Principles",
        "- Normalization: eliminate redundancy\n- Primary keys identify each record\n"
        "- Indexing improves query performance\n- ACID: Atomicity, Consistency, Isolation, Durability\n\n"
        "For PostgreSQL: use UUID and JSONB types where they fit; lean on constraints.",
    ),
    (
        "Client Cache Management",
        "A normalized cache stores objects by __typename and id.\n\n"
        "- Cache policies: cache-first, network-only\n- Update the cache after mutations\n"
        "- Evict deleted objects\n- Use consistent ID fields",
    ),
    (
        "Python Type Hints",
        "- Generics: reusable type definitions\n- Optional and Union\n"
        "- TypedDict and dataclasses for structured data\n- Literal for fixed string values\n"
        "- Protocols for structural typing",
    ),
    (
        "FastAPI Application Layout",
        "- Application factory with create_app()\n- Routers per resource\n"
        "- Middleware for request IDs, logging, rate limiting\n"
        "- Lifespan handler for startup and shutdown",
    ),
    (
        "SQLAlchemy 2.0 Features",
        "- Mapped[] annotations with mapped_column()\n- select() everywhere\n"
        "- AsyncSession with async_sessionmaker\n- Alembic for migrations\n\n"
        "Useful commands:\n- alembic upgrade head\n- alembic revision --autogenerate",
    ),
    (
        "CSS Grid vs Flexbox",
        "Grid for two-dimensional page layout (rows and columns, dashboards).\n"
        "Flexbox for one-dimensional layout (nav bars, centering, components).\n"
        "Often used together.",
    ),
    (
        "API Security Best Practices",
        "- Authentication and authorization\n- Validate all inputs\n"
        "- Rate limiting\n- HTTPS everywhere\n- CORS configuration\n\n"
        "For GraphQL specifically:\n- Query depth limiting\n- Disable introspection in production",
    ),
    (
        "Git Workflow Strategies",
        "GitHub Flow: single main branch, feature branches with pull requests, "
        "deploy from main.\n\nAtomic commits with clear messages; protect main with reviews.",
    ),
    (
        "Performance Optimization Techniques",
        "- Measure first: profile before optimizing\n- Cache expensive results\n"
        "- Batch database queries\n- Index the columns you filter and sort on",
    ),
    (
        "Docker Development Setup",
        "- Multi-stage builds for smaller images\n- Non-root user\n"
        "- docker compose for database + API\n- Volume mounts for hot reloading",
    ),
]


async def seed(pause: float = 0.01) -> int:
    """Clear the notes table and insert SEED_NOTES. Returns how many were created."""
    if settings.is_sqlite:
        await create_tables()

    async with session_scope() as db:
        await db.execute(delete(Note))
    logger.info("Cleared existing notes")

    logger.info("Creating %d notes...", len(SEED_NOTES))
    for index, (title, content) in enumerate(SEED_NOTES, start=1):
        async with session_scope() as db:
            await note_service.create_note(db, title=title, content=content)
        await asyncio.sleep(pause)
        if index % 3 == 0:
            logger.info("Created %d/%d notes", index, len(SEED_NOTES))

    async with session_scope() as db:
        newest = (await note_service.list_notes(db))[:3]
    logger.info("Sample of created notes:")
    for note in newest:
        logger.info("  %s (ID: %s...)", note.title, str(note.id)[:8])

    return len(SEED_NOTES)


def main() -> None:
    """Console entry point: notegraph-seed."""
    setup_logging()
    try:
        created = asyncio.run(_run())
    except Exception:
        logger.exception("Error during seeding")
        raise SystemExit(1)
    logger.info("Seeding completed: %d notes created", created)


async def _run() -> int:
    try:
        return await seed()
    finally:
        await dispose_engine()


if __name__ == "__main__":
    main()
