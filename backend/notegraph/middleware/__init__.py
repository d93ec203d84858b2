# Middleware package init
"""
NoteGraph — Middleware Package
================================

What:  Cross-cutting concerns applied to every HTTP request.

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → GraphQL / health

    1. Rate Limit FIRST: GraphQL POSTs only; rejected before any processing
    2. Request ID: Correlation ID for logs (also visible to resolvers)
    3. Logging: GraphQL operation name, status and duration with the request ID
"""
