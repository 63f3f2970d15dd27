"""
Top‑level package for the Subscription Service.

All functionality lives in submodules under ``app``.
"""

__all__ = []
