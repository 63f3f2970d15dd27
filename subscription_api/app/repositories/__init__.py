"""
Persistence adapters.

Repositories encapsulate how records are stored and retrieved.
Services depend on a repository instance passed to them rather than
opening database connections themselves.
"""
