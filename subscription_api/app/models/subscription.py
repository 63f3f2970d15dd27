"""
Domain records for subscriptions.

These plain dataclasses are what the service and repository layers
exchange.  They are deliberately separate from the pydantic schemas in
``app.schemas`` so that the HTTP representation (month/year strings,
response shapes) can change without touching persistence.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass
class Subscription:
    """A stored subscription.  ``end_date`` is always populated."""

    id: str
    service_name: str
    price: int
    user_id: str
    start_date: date
    end_date: date
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class SubscriptionInput:
    """Caller‑supplied fields for create and full‑replacement update."""

    service_name: str
    price: int
    user_id: str
    start_date: date
    end_date: Optional[date] = None


@dataclass(frozen=True)
class ListFilter:
    """Exact‑match filters and paging for listing subscriptions.

    ``None`` for a filter field means "any value".  ``limit`` of
    ``None`` lets the service apply its configured default page size.
    """

    user_id: Optional[str] = None
    service_name: Optional[str] = None
    limit: Optional[int] = None
    offset: int = 0
