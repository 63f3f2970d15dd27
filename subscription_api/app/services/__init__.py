"""
Service layer abstraction.

Each service encapsulates the business logic for a domain and talks to
storage only through the repository it was constructed with.
"""
