"""
Top‑level router for version 1 of the API.
"""

from fastapi import APIRouter

from .endpoints import subscriptions

router = APIRouter()

router.include_router(subscriptions.router, prefix="/subscriptions", tags=["subscriptions"])
