"""API layer: canonical query surface for voter collections.

Key rules:

1. No SQLAlchemy imports - predicates come from voterroll.query, reads and
   writes go through collection handles
2. Return Pydantic envelopes, or None for a not-found lookup
3. Every listing paginates through voterroll.query.pagination
"""
