"""
Pydantic schema definitions for API payloads.

Schemas are separated from the domain records in ``app.models`` to
decouple the API representation from persistence.
"""
