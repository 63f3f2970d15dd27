"""Shared pytest fixtures for the subscription service tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from subscription_api.app.core.db import init_db
from subscription_api.app.repositories.subscription_repository import SubscriptionRepository
from subscription_api.app.services.subscription_service import SubscriptionService


class StepClock:
    """Deterministic clock that advances one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """Fresh SQLite file with all migrations applied."""
    path = str(tmp_path / "subscriptions.db")
    init_db(path)
    return path


@pytest.fixture
def repository(db_path: str) -> SubscriptionRepository:
    return SubscriptionRepository(db_path)


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def service(repository: SubscriptionRepository, clock: StepClock) -> SubscriptionService:
    return SubscriptionService(repository, default_page_size=50, max_page_size=1000, clock=clock)
