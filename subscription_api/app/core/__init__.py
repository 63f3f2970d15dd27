"""
Core infrastructure: configuration, logging, database access and
domain error kinds.
"""
