"""
NoteGraph — Note Service (Storage Operations)
===============================================

What:  The five storage operations behind the GraphQL contract:
       list (with optional search), get, create, partial update, delete.
Why:   Keeps SQLAlchemy out of the resolvers; each resolver maps to exactly
       one method here.
How:   Each method receives the AsyncSession for the current operation
       (opened by the resolver's session scope) and flushes its changes;
       the scope commits.
Who:   Called by api/schema.py resolvers and by the seed script.

Design Decision:
    NoteService is stateless — it receives the db session for each call.
    This enables:
    1. Easy testing: hand it a session bound to a throwaway SQLite database
    2. Transaction safety: each GraphQL operation gets its own session
    3. No thread-safety concerns: no shared mutable state
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notegraph.exceptions import DatabaseError, NotFoundError, ValidationError
from notegraph.models.note import Note
from notegraph.schemas.note import NotePatch

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 255


def as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo on the way back; all stored timestamps are UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_note_id(note_id: str) -> Optional[uuid.UUID]:
    """Return the UUID for `note_id`, or None if it cannot be one."""
    try:
        return uuid.UUID(str(note_id))
    except (TypeError, ValueError):
        return None


def like_pattern(term: str) -> str:
    """Substring pattern for LIKE with wildcards in `term` matched literally."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class NoteService:
    """
    Business logic layer for note operations.

    Responsibilities:
        - list_notes(): all notes, or those matching a search term, newest first
        - get_note(): single lookup; absence is a normal result (None)
        - create_note(): validates and inserts with server-assigned id/timestamps
        - update_note(): applies a NotePatch and refreshes updated_at
        - delete_note(): removes a note; unknown ids raise NotFoundError

    Error Handling Strategy:
        SQLAlchemy errors are wrapped in DatabaseError (hides internal details).
        ValidationError and NotFoundError propagate unchanged.
    """

    async def list_notes(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
    ) -> List[Note]:
        """
        List notes, newest first.

        Search semantics:
            Case-insensitive substring match against title OR content.
            An absent or empty search returns every note.

        Ordering:
            created_at DESC, then id ASC so that notes sharing a timestamp
            come back in the same order on every query.
        """
        query = select(Note)
        if search:
            pattern = like_pattern(search)
            query = query.where(
                or_(
                    Note.title.ilike(pattern, escape="\\"),
                    Note.content.ilike(pattern, escape="\\"),
                )
            )
        query = query.order_by(Note.created_at.desc(), Note.id.asc())

        try:
            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve notes. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def get_note(self, db: AsyncSession, note_id: str) -> Optional[Note]:
        """
        Retrieve a single note by ID.

        Returns None for unknown ids and for ids that are not valid UUIDs;
        a missing note is not an error for reads.
        """
        parsed = parse_note_id(note_id)
        if parsed is None:
            return None
        try:
            result = await db.execute(select(Note).where(Note.id == parsed))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the note. Please try again.",
                context={"note_id": str(note_id)},
            )

    async def create_note(self, db: AsyncSession, title: str, content: str) -> Note:
        """
        Create a note.

        The server assigns the id and sets created_at == updated_at.

        Raises:
            ValidationError: Blank or over-long title (nothing is written)
            DatabaseError: Insert failed
        """
        self._validate_title(title)
        now = datetime.now(timezone.utc)
        note = Note(title=title, content=content, created_at=now, updated_at=now)
        try:
            db.add(note)
            await db.flush()  # Assigns the UUID without committing
        except SQLAlchemyError as e:
            logger.error("Database error creating note: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the note. Please try again.",
                context={"error_type": type(e).__name__},
            )
        logger.info("Note created: %s", note.id)
        return note

    async def update_note(
        self,
        db: AsyncSession,
        note_id: str,
        patch: NotePatch,
    ) -> Note:
        """
        Apply a partial update.

        Only fields present in the patch are written. updated_at is refreshed
        on every successful call and always moves strictly forward, even when
        the clock has not advanced since the last write. id and created_at
        never change.

        Raises:
            NotFoundError: No note with this id
            ValidationError: Patch sets a blank or over-long title
        """
        note = await self.get_note(db, note_id)
        if note is None:
            raise NotFoundError(resource="note", resource_id=str(note_id))

        changes = patch.changes()
        if "title" in changes:
            self._validate_title(changes["title"])

        for name, value in changes.items():
            setattr(note, name, value)
        note.updated_at = self._next_timestamp(note.updated_at)

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not update the note. Please try again.",
                context={"note_id": str(note_id)},
            )
        logger.info("Note %s updated: fields=%s", note.id, sorted(changes) or "none")
        return note

    async def delete_note(self, db: AsyncSession, note_id: str) -> bool:
        """
        Delete a note. Not idempotent: a second delete raises NotFoundError.
        """
        note = await self.get_note(db, note_id)
        if note is None:
            raise NotFoundError(resource="note", resource_id=str(note_id))
        try:
            await db.delete(note)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not delete the note. Please try again.",
                context={"note_id": str(note_id)},
            )
        logger.info("Note deleted: %s", note_id)
        return True

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _validate_title(title: str) -> None:
        if not title or not title.strip():
            raise ValidationError(message="Title must not be empty", field="title")
        if len(title) > TITLE_MAX_LENGTH:
            raise ValidationError(
                message=f"Title must be at most {TITLE_MAX_LENGTH} characters",
                field="title",
            )

    @staticmethod
    def _next_timestamp(previous: datetime) -> datetime:
        now = datetime.now(timezone.utc)
        previous = as_utc(previous)
        if now <= previous:
            now = previous + timedelta(microseconds=1)
        return now


# ── Singleton Instance ────────────────────────────────────────────────────
note_service = NoteService()
