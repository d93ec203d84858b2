"""
NoteGraph — Note SQLAlchemy Model
===================================

What:  ORM model representing the `notes` table.
Why:   Maps Python objects to database rows for type-safe database operations.
How:   Inherits from SQLAlchemy's DeclarativeBase; Alembic reads this for migrations.
Who:   Used by NoteService for CRUD operations and by Alembic for schema management.

Table Design Rationale:
    - UUID primary key: Opaque, globally unique, assigned at creation
    - title: Short required text (non-empty is enforced by the service)
    - content: Unbounded text, may be empty
    - created_at / updated_at: UTC with timezone; equal at creation

    Index on created_at DESC:
        The list query is always "newest first", with or without a search term.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from notegraph.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A single note.

    Lifecycle:
        1. Created by createNote (server assigns id and both timestamps)
        2. Partially updated by updateNote (updated_at refreshed each time)
        3. Deleted by deleteNote (terminal; the id is never reused)
    """

    __tablename__ = "notes"

    # Uuid (not the postgresql dialect type) so the same model runs on SQLite in tests
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    # All storage in UTC; SQLite returns these naive, see services.note_service.as_utc
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title={self.title!r}, created_at='{self.created_at}')>"


# Newest-first listing uses this index for every notes() query
Index("idx_notes_created_at", Note.created_at.desc())
