# API package init
"""
NoteGraph — GraphQL API Package
=================================

What:  The GraphQL wire contract and its resolvers.
How:   strawberry types (types.py) fix the wire shape; schema.py maps each
       operation to one NoteService call; context.py hands every resolver a
       transactional session scope.

Operation Inventory:
    Query.notes(search)                      → NoteService.list_notes
    Query.note(id)                           → NoteService.get_note
    Mutation.createNote(title, content)      → NoteService.create_note
    Mutation.updateNote(id, title, content)  → NoteService.update_note
    Mutation.deleteNote(id)                  → NoteService.delete_note
"""
