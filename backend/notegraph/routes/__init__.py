# Routes package init
"""
NoteGraph — REST Routes Package
=================================

What:  Plain HTTP routes that live beside the GraphQL endpoint.

Route Inventory:
    - health.py:  GET /health   (service health check)

All note operations go through GraphQL (see notegraph.api); only operational
endpoints that load balancers and uptime checks expect to be plain HTTP live here.
"""
