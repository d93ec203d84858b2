"""
NoteGraph — Notes List View Model
===================================

What:  The list page as a plain-text view model: search box state, create and
       edit forms, and a text rendering of the current query result.
Why:   Gives the hooks a real consumer. Everything a UI would show (counts,
       empty states, the error banner) is decided here and is testable
       without a UI toolkit.

Behaviour:
    - Searching re-runs use_notes for the new term (cached per term)
    - Create/update/delete failures are logged; form state is left as it was
      so the user can retry
    - Any error renders a banner naming the API URL, above whatever data
      the result still carries
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from notegraph.client.hooks import NotesClient, QueryResult
from notegraph.exceptions import NoteGraphError

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 150


def format_timestamp(value: Optional[str]) -> str:
    """'2024-01-15T12:00:00+00:00' → 'Jan 15, 2024 12:00'."""
    if not value:
        return ""
    try:
        return datetime.fromisoformat(value).strftime("%b %d, %Y %H:%M")
    except ValueError:
        return value


def preview(content: str, length: int = PREVIEW_LENGTH) -> str:
    flat = " ".join(content.split())
    if len(flat) <= length:
        return flat
    return flat[: length - 3].rstrip() + "..."


class NotesListView:
    """
    State and handlers for the notes list page.

    Attributes:
        search_term:      Current search box contents
        editing:          Note being edited (None when the edit form is closed)
        show_create_form: Whether the create form is open
    """

    def __init__(self, client: NotesClient):
        self.client = client
        self.search_term = ""
        self.editing: Optional[Dict[str, Any]] = None
        self.show_create_form = False

    async def load(self) -> QueryResult:
        return await self.client.use_notes(self.search_term)

    async def set_search(self, term: str) -> QueryResult:
        self.search_term = term
        return await self.load()

    def start_edit(self, note: Dict[str, Any]) -> None:
        self.editing = note

    def cancel(self) -> None:
        self.editing = None
        self.show_create_form = False

    # ── Handlers ──────────────────────────────────────────────────────────

    async def handle_create(self, title: str, content: str) -> bool:
        try:
            await self.client.create_note(title, content)
        except NoteGraphError as e:
            logger.error("Error creating note: %s", e.message)
            return False
        self.show_create_form = False
        return True

    async def handle_update(self, title: str, content: str) -> bool:
        if self.editing is None:
            return False
        try:
            await self.client.update_note(self.editing["id"], title=title, content=content)
        except NoteGraphError as e:
            logger.error("Error updating note: %s", e.message)
            return False
        self.editing = None
        return True

    async def handle_delete(self, note_id: str, confirmed: bool = True) -> bool:
        if not confirmed:
            return False
        try:
            return await self.client.delete_note(note_id)
        except NoteGraphError as e:
            logger.error("Error deleting note: %s", e.message)
            return False

    # ── Rendering ─────────────────────────────────────────────────────────

    def render(self, result: QueryResult) -> str:
        """Text rendering of the page for `result` (from load / peek_notes)."""
        lines: List[str] = []
        if result.error is not None:
            lines = [
                f"Error loading notes: {result.error.message}",
                f"Make sure the notes service is running at {self.client.transport.url}.",
            ]
            # Nothing to list: the banner is the whole page
            if not result.data:
                return "\n".join(lines)
            lines.append("")

        notes: List[Dict[str, Any]] = result.data or []
        lines += ["My Notes", f"{len(notes)} notes total"]

        if self.search_term:
            if result.loading:
                lines.append("Searching...")
            else:
                lines.append(f'Found {len(notes)} notes matching "{self.search_term}"')

        lines.append("")
        if result.loading:
            lines.append("Loading...")
        elif not notes:
            if self.search_term:
                lines.append("No notes found")
                lines.append(
                    f'No notes match your search "{self.search_term}". Try a different search term.'
                )
            else:
                lines.append("No notes yet")
                lines.append("Get started by creating your first note!")
        else:
            for note in notes:
                lines.extend(self.render_card(note))
        return "\n".join(lines)

    @staticmethod
    def render_card(note: Dict[str, Any]) -> List[str]:
        return [
            f"# {note['title']}",
            preview(note.get("content") or ""),
            f"Updated {format_timestamp(note.get('updatedAt'))}",
            "",
        ]
