"""
NoteGraph — GraphQL Request Context
=====================================

What:  Per-request context object handed to every resolver.
Why:   Resolvers need a database session but must not reach for a global;
       the session factory is injected when the router is built, which lets
       tests point the whole API at a throwaway database.
"""

from typing import AsyncContextManager

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from strawberry.fastapi import BaseContext

from notegraph.database import session_scope


class NoteContext(BaseContext):
    """Carries the session factory; FastAPI fills in request/response."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__()
        self.session_factory = session_factory

    def session(self) -> AsyncContextManager[AsyncSession]:
        """One transactional scope per operation (commit on success)."""
        return session_scope(self.session_factory)
