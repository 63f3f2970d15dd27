"""
Application package initializer.

The package is split into the storage adapter (``repositories``), the
business rules (``services``), the shared domain records (``models``)
and the HTTP layer (``api`` and ``schemas``).  ``main`` wires them
together.
"""
