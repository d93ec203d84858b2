# Services package init
"""
NoteGraph Backend — Services Layer
====================================

What:  Business logic between the GraphQL resolvers and the database.
Why:   Resolvers deal with arguments and wire types; services own validation,
       search semantics, ordering and timestamp rules.
How:   Services take an AsyncSession plus plain values and return ORM objects.
       The caller owns the transaction (see database.session_scope).

Service Inventory:
    - NoteService: list/search, get, create, update, delete for notes
"""
