"""
NoteGraph — GraphQL Operation Documents
=========================================

What:  The exact operations the client sends.
Why:   Kept in one module so the wire contract the client depends on is
       visible at a glance.

Every selection includes __typename so NormalizedCache can key entities
as "Note:<id>". UPDATE_NOTE deliberately omits createdAt; the cached
entity keeps the createdAt it already had.
"""

NOTE_FIELDS = """
    __typename
    id
    title
    content
    createdAt
    updatedAt
"""

GET_NOTES = f"""
query GetNotes($search: String) {{
  notes(search: $search) {{{NOTE_FIELDS}  }}
}}
"""

GET_NOTE = f"""
query GetNote($id: ID!) {{
  note(id: $id) {{{NOTE_FIELDS}  }}
}}
"""

CREATE_NOTE = f"""
mutation CreateNote($title: String!, $content: String!) {{
  createNote(title: $title, content: $content) {{{NOTE_FIELDS}  }}
}}
"""

UPDATE_NOTE = """
mutation UpdateNote($id: ID!, $title: String, $content: String) {
  updateNote(id: $id, title: $title, content: $content) {
    __typename
    id
    title
    content
    updatedAt
  }
}
"""

DELETE_NOTE = """
mutation DeleteNote($id: ID!) {
  deleteNote(id: $id)
}
"""
