"""
Service layer for subscriptions.

``SubscriptionService`` enforces the business rules for subscription
records before anything reaches storage:

* ``service_name`` must be non‑empty after trimming (it is stored
  trimmed);
* ``price`` must be a non‑negative integer;
* ``user_id`` must be a syntactically valid UUID (it is stored in
  canonical form);
* subscription ids must be valid UUIDs and are looked up in canonical
  form;
* ``start_date`` is normalised to the first day of its month;
* ``end_date`` must not precede ``start_date`` and defaults to
  ``start_date + 30 days`` when omitted.

Violations raise ``InvalidInputError``; missing records raise
``NotFoundError``.  Storage failures propagate unchanged.  The
repository is passed in by the caller, so the service holds no
connection state of its own.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Callable, List, Optional

from subscription_api.app.core.errors import InvalidInputError
from subscription_api.app.models import ListFilter, Subscription, SubscriptionInput
from subscription_api.app.repositories.subscription_repository import SubscriptionRepository

logger = logging.getLogger(__name__)

DEFAULT_TERM = timedelta(days=30)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubscriptionService:
    """Business rules and period aggregation for subscriptions."""

    def __init__(
        self,
        repository: SubscriptionRepository,
        default_page_size: int = 50,
        max_page_size: int = 1000,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repo = repository
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size
        self._clock = clock

    async def create(self, data: SubscriptionInput) -> Subscription:
        """Validate ``data``, assign an id and timestamps, and persist it."""
        service_name, user_id, start, end = self._validate(data)
        now = self._clock()
        sub = Subscription(
            id=str(uuid.uuid4()),
            service_name=service_name,
            price=data.price,
            user_id=user_id,
            start_date=start,
            end_date=end,
            created_at=now,
            updated_at=now,
        )
        try:
            await self._repo.create(sub)
        except Exception:
            logger.exception("Failed to store subscription for user %s", user_id)
            raise
        logger.info(
            "A subscription to %s was added for user %s from %s to %s for %s units",
            sub.service_name,
            sub.user_id,
            sub.start_date.isoformat(),
            sub.end_date.isoformat(),
            sub.price,
        )
        return sub

    async def get(self, subscription_id: str) -> Subscription:
        return await self._repo.get(self._canonical_id(subscription_id))

    async def update(self, subscription_id: str, data: SubscriptionInput) -> Subscription:
        """Fully replace the mutable fields of an existing subscription.

        ``id`` and ``created_at`` are kept.  An omitted ``end_date`` is
        recomputed from the new ``start_date`` rather than carried over.
        ``updated_at`` always moves forward, even if the clock has not
        advanced since the previous write.
        """
        existing = await self._repo.get(self._canonical_id(subscription_id))
        service_name, user_id, start, end = self._validate(data)
        now = self._clock()
        if now <= existing.updated_at:
            now = existing.updated_at + timedelta(microseconds=1)
        updated = Subscription(
            id=existing.id,
            service_name=service_name,
            price=data.price,
            user_id=user_id,
            start_date=start,
            end_date=end,
            created_at=existing.created_at,
            updated_at=now,
        )
        await self._repo.update(updated)
        logger.info(
            "The subscription %s for user %s was updated: %s for %s units",
            updated.id,
            updated.user_id,
            updated.service_name,
            updated.price,
        )
        return updated

    async def delete(self, subscription_id: str) -> None:
        existing = await self._repo.get(self._canonical_id(subscription_id))
        await self._repo.delete(existing.id)
        logger.info(
            "The subscription %s for user %s was deleted (%s)",
            existing.id,
            existing.user_id,
            existing.service_name,
        )

    async def list(self, filters: ListFilter) -> List[Subscription]:
        """Return one page of subscriptions matching ``filters``, newest first."""
        limit = self._default_page_size if filters.limit is None else filters.limit
        if isinstance(limit, bool) or not 1 <= limit <= self._max_page_size:
            raise InvalidInputError(f"limit must be between 1 and {self._max_page_size}")
        if filters.offset < 0:
            raise InvalidInputError("offset must be >= 0")
        resolved = ListFilter(
            user_id=self._normalise_user_filter(filters.user_id),
            service_name=filters.service_name,
            limit=limit,
            offset=filters.offset,
        )
        return await self._repo.list(resolved)

    async def sum_for_period(
        self,
        period_start: date,
        period_end: date,
        user_id: Optional[str] = None,
        service_name: Optional[str] = None,
    ) -> int:
        """Total ``price`` of subscriptions active at any point in the period.

        A subscription counts when its interval intersects
        ``[period_start, period_end]``, not only when it lies fully
        inside it.
        """
        period_start, period_end = _as_date(period_start), _as_date(period_end)
        if period_end < period_start:
            raise InvalidInputError("period end must not be before period start")
        return await self._repo.total_cost(
            period_start,
            period_end,
            user_id=self._normalise_user_filter(user_id),
            service_name=service_name,
        )

    @staticmethod
    def _validate(data: SubscriptionInput) -> tuple[str, str, date, date]:
        """Check business rules and return normalised fields.

        Returns ``(service_name, user_id, start_date, end_date)`` with the
        default end date applied.
        """
        if not isinstance(data.service_name, str) or not data.service_name.strip():
            raise InvalidInputError("service_name must not be empty")
        if isinstance(data.price, bool) or not isinstance(data.price, int) or data.price < 0:
            raise InvalidInputError("price must be a non-negative integer")
        user_id = _parse_uuid(data.user_id)
        if user_id is None:
            raise InvalidInputError("user_id must be a valid UUID")
        if not isinstance(data.start_date, date):
            raise InvalidInputError("start_date is required")
        start = _as_date(data.start_date).replace(day=1)
        if data.end_date is None:
            end = start + DEFAULT_TERM
        else:
            if not isinstance(data.end_date, date):
                raise InvalidInputError("end_date must be a date")
            end = _as_date(data.end_date)
            if end < start:
                raise InvalidInputError("end_date must not be before start_date")
        return data.service_name.strip(), user_id, start, end

    @staticmethod
    def _canonical_id(subscription_id: str) -> str:
        canonical = _parse_uuid(subscription_id)
        if canonical is None:
            raise InvalidInputError("subscription id must be a valid UUID")
        return canonical

    @staticmethod
    def _normalise_user_filter(user_id: Optional[str]) -> Optional[str]:
        if user_id is None:
            return None
        canonical = _parse_uuid(user_id)
        if canonical is None:
            raise InvalidInputError("user_id filter must be a valid UUID")
        return canonical


def _as_date(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


def _parse_uuid(value: object) -> Optional[str]:
    """Return ``value`` in canonical UUID form, or ``None`` if malformed."""
    if not isinstance(value, str):
        return None
    try:
        return str(uuid.UUID(value))
    except ValueError:
        return None
