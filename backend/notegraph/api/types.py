"""
NoteGraph — GraphQL Object Types
==================================

What:  The `Note` type exposed on the wire.
Why:   Separate from the ORM model so the wire shape (camelCase fields,
       string timestamps, opaque ID) is fixed independently of storage.

Field Mapping:
    id         ← notes.id (UUID, rendered as a string ID)
    title      ← notes.title
    content    ← notes.content
    createdAt  ← notes.created_at (ISO 8601, UTC)
    updatedAt  ← notes.updated_at (ISO 8601, UTC)
"""

import strawberry

from notegraph.models.note import Note as NoteModel
from notegraph.services.note_service import as_utc


@strawberry.type(description="A single note. Timestamps are ISO 8601 strings in UTC.")
class Note:
    id: strawberry.ID
    title: str
    content: str
    created_at: str
    updated_at: str

    @classmethod
    def from_model(cls, note: NoteModel) -> "Note":
        return cls(
            id=strawberry.ID(str(note.id)),
            title=note.title,
            content=note.content,
            created_at=as_utc(note.created_at).isoformat(),
            updated_at=as_utc(note.updated_at).isoformat(),
        )
