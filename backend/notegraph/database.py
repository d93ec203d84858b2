"""
NoteGraph — Database Session Management
=========================================

What:  Async SQLAlchemy engine, session factory, and per-operation session scope.
Why:   Centralizes all database connection logic in one place.
How:   Creates an async engine with connection pooling and provides a session
       scope that commits on success and rolls back on error.
Who:   Used by GraphQL resolvers (one scope per operation), the health route,
       the seed script and Alembic.
When:  Engine is created at module import; sessions are created per operation.

Connection Pooling Strategy:
    pool_size=20:     Persistent connections for normal load
    max_overflow=10:  Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:    Validates connections before use (catches stale connections)
    pool_recycle=3600: Recycles connections every hour

    SQLite (tests, local experiments) gets no pool sizing: in-memory databases
    use a static pool that rejects those arguments.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from notegraph.config import settings


def engine_options(url: str) -> Dict[str, Any]:
    """Keyword arguments for create_async_engine appropriate to the backend."""
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


def build_engine(url: Optional[str] = None) -> AsyncEngine:
    """Create an async engine for `url` (defaults to settings.database_url)."""
    url = url or settings.database_url
    return create_async_engine(url, **engine_options(url))


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: resolvers read attributes after the scope commits
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


# ── Engine & Session Factory ──────────────────────────────────────────────
engine = build_engine()
async_session_factory = build_session_factory(engine)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for migrations and
    the tests use to create tables.
    """
    pass


# ── Session Scope ─────────────────────────────────────────────────────────
@asynccontextmanager
async def session_scope(
    factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a transactional session for one GraphQL operation.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the caller (the resolver performs its storage call)
        3. On success: commits the transaction
        4. On error: rolls back the transaction and re-raises
        5. Always: closes the session (returns connection to pool)

    The commit happens before the resolver returns, so the response a client
    receives always describes persisted state.
    """
    factory = factory or async_session_factory
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_tables(bind: Optional[AsyncEngine] = None) -> None:
    """
    Create all tables from the ORM metadata.

    Used by tests and local SQLite runs; PostgreSQL deployments use Alembic.
    """
    # Models register on Base.metadata at import
    from notegraph.models import note  # noqa: F401

    bind = bind or engine
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Gracefully closes all connections in the pool (called on shutdown)."""
    await engine.dispose()
