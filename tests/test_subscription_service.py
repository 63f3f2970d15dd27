"""Tests for SubscriptionService — validation, defaults, lifecycle, totals."""

from __future__ import annotations

import logging
from datetime import date, timedelta

import pytest

from subscription_api.app.core.errors import (
    ErrorKind,
    InvalidInputError,
    NotFoundError,
    SubscriptionError,
)
from subscription_api.app.models import ListFilter, SubscriptionInput
from subscription_api.app.services.subscription_service import SubscriptionService

USER_ID = "60601fee-2bf1-4721-ae6f-7636e79a0cba"
OTHER_USER_ID = "1b4e28ba-2fa1-11d2-883f-0016d3cca427"
MISSING_ID = "00000000-0000-4000-8000-000000000000"


def _input(**overrides) -> SubscriptionInput:
    fields = {
        "service_name": "Netflix",
        "price": 499,
        "user_id": USER_ID,
        "start_date": date(2025, 10, 1),
        "end_date": None,
    }
    fields.update(overrides)
    return SubscriptionInput(**fields)


# ---------------------------------------------------------------------------
# create()
# ---------------------------------------------------------------------------


class TestCreate:
    @pytest.mark.asyncio
    async def test_default_end_date_is_thirty_days_after_start(self, service: SubscriptionService) -> None:
        sub = await service.create(_input())
        assert sub.start_date == date(2025, 10, 1)
        assert sub.end_date == date(2025, 10, 31)
        assert sub.end_date - sub.start_date == timedelta(days=30)
        assert sub.price == 499
        assert sub.service_name == "Netflix"

    @pytest.mark.asyncio
    async def test_assigns_id_and_equal_timestamps(self, service: SubscriptionService) -> None:
        sub = await service.create(_input())
        assert sub.id
        assert sub.created_at == sub.updated_at
        assert sub.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, service: SubscriptionService) -> None:
        first = await service.create(_input())
        second = await service.create(_input())
        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_start_date_normalised_to_first_of_month(self, service: SubscriptionService) -> None:
        sub = await service.create(_input(start_date=date(2025, 3, 17)))
        assert sub.start_date == date(2025, 3, 1)
        assert sub.end_date == date(2025, 3, 31)

    @pytest.mark.asyncio
    async def test_explicit_end_date_kept(self, service: SubscriptionService) -> None:
        sub = await service.create(_input(end_date=date(2026, 1, 1)))
        assert sub.end_date == date(2026, 1, 1)

    @pytest.mark.asyncio
    async def test_end_equal_to_start_allowed(self, service: SubscriptionService) -> None:
        sub = await service.create(_input(end_date=date(2025, 10, 1)))
        assert sub.end_date == sub.start_date

    @pytest.mark.asyncio
    async def test_persisted(self, service: SubscriptionService) -> None:
        sub = await service.create(_input())
        assert await service.get(sub.id) == sub

    @pytest.mark.asyncio
    async def test_name_is_trimmed_and_user_id_canonical(self, service: SubscriptionService) -> None:
        sub = await service.create(_input(service_name="  Spotify ", user_id=USER_ID.upper()))
        assert sub.service_name == "Spotify"
        assert sub.user_id == USER_ID

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"service_name": ""},
            {"service_name": "   "},
            {"price": -1},
            {"price": True},
            {"user_id": "not-a-uuid"},
            {"user_id": ""},
            {"end_date": date(2025, 9, 1)},
        ],
    )
    async def test_rejects_invalid_input(self, service: SubscriptionService, overrides) -> None:
        with pytest.raises(InvalidInputError) as excinfo:
            await service.create(_input(**overrides))
        assert excinfo.value.kind is ErrorKind.INVALID_INPUT

    @pytest.mark.asyncio
    async def test_zero_price_allowed(self, service: SubscriptionService) -> None:
        sub = await service.create(_input(price=0))
        assert sub.price == 0

    @pytest.mark.asyncio
    async def test_rejected_input_is_not_stored(self, service: SubscriptionService) -> None:
        with pytest.raises(InvalidInputError):
            await service.create(_input(price=-5))
        assert await service.list(ListFilter()) == []


# ---------------------------------------------------------------------------
# get() / update() / delete()
# ---------------------------------------------------------------------------


class TestGet:
    @pytest.mark.asyncio
    async def test_missing_raises_not_found(self, service: SubscriptionService) -> None:
        with pytest.raises(NotFoundError) as excinfo:
            await service.get(MISSING_ID)
        assert excinfo.value.kind is ErrorKind.NOT_FOUND
        assert isinstance(excinfo.value, SubscriptionError)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "spelling",
        [str.upper, lambda s: "{" + s + "}", lambda s: "urn:uuid:" + s, lambda s: s.replace("-", "")],
    )
    async def test_accepts_any_uuid_spelling(self, service: SubscriptionService, spelling) -> None:
        sub = await service.create(_input())
        assert await service.get(spelling(sub.id)) == sub


class TestMalformedId:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", ["get", "update", "delete"])
    async def test_raises_invalid_input(self, service: SubscriptionService, operation) -> None:
        args = ("abc", _input()) if operation == "update" else ("abc",)
        with pytest.raises(InvalidInputError) as excinfo:
            await getattr(service, operation)(*args)
        assert excinfo.value.kind is ErrorKind.INVALID_INPUT


class TestUpdate:
    @pytest.mark.asyncio
    async def test_replaces_all_fields(self, service: SubscriptionService) -> None:
        original = await service.create(_input(end_date=date(2026, 6, 1)))
        updated = await service.update(
            original.id,
            _input(
                service_name="Yandex Plus",
                price=400,
                user_id=OTHER_USER_ID,
                start_date=date(2025, 7, 1),
                end_date=date(2025, 12, 1),
            ),
        )
        fetched = await service.get(original.id)
        assert fetched == updated
        assert fetched.service_name == "Yandex Plus"
        assert fetched.price == 400
        assert fetched.user_id == OTHER_USER_ID
        assert fetched.start_date == date(2025, 7, 1)
        assert fetched.end_date == date(2025, 12, 1)
        assert fetched.id == original.id
        assert fetched.created_at == original.created_at
        assert fetched.updated_at > original.updated_at

    @pytest.mark.asyncio
    async def test_omitted_end_date_recomputed_not_merged(self, service: SubscriptionService) -> None:
        original = await service.create(_input(end_date=date(2027, 1, 1)))
        updated = await service.update(original.id, _input(start_date=date(2026, 2, 1)))
        assert updated.end_date == date(2026, 3, 3)

    @pytest.mark.asyncio
    async def test_updated_at_advances_even_with_frozen_clock(self, repository, clock) -> None:
        frozen = clock()
        service = SubscriptionService(repository, clock=lambda: frozen)
        original = await service.create(_input())
        updated = await service.update(original.id, _input(price=1))
        assert updated.updated_at > original.updated_at

    @pytest.mark.asyncio
    async def test_missing_raises_not_found(self, service: SubscriptionService) -> None:
        with pytest.raises(NotFoundError):
            await service.update(MISSING_ID, _input())

    @pytest.mark.asyncio
    async def test_end_before_start_rejected(self, service: SubscriptionService) -> None:
        original = await service.create(_input())
        with pytest.raises(InvalidInputError):
            await service.update(
                original.id,
                _input(start_date=date(2025, 5, 1), end_date=date(2025, 4, 1)),
            )
        assert await service.get(original.id) == original


class TestDelete:
    @pytest.mark.asyncio
    async def test_then_get_raises_not_found(self, service: SubscriptionService) -> None:
        sub = await service.create(_input())
        await service.delete(sub.id)
        with pytest.raises(NotFoundError):
            await service.get(sub.id)

    @pytest.mark.asyncio
    async def test_missing_raises_not_found(self, service: SubscriptionService) -> None:
        with pytest.raises(NotFoundError):
            await service.delete(MISSING_ID)

    @pytest.mark.asyncio
    async def test_uppercase_id_deletes_record(self, service: SubscriptionService) -> None:
        sub = await service.create(_input())
        await service.delete(sub.id.upper())
        with pytest.raises(NotFoundError):
            await service.get(sub.id)

    @pytest.mark.asyncio
    async def test_logs_owning_user(self, service: SubscriptionService, caplog) -> None:
        sub = await service.create(_input())
        with caplog.at_level(logging.INFO, logger="subscription_api.app.services.subscription_service"):
            await service.delete(sub.id)
        assert any(USER_ID in record.getMessage() and "deleted" in record.getMessage() for record in caplog.records)

    @pytest.mark.asyncio
    async def test_twice_raises_not_found(self, service: SubscriptionService) -> None:
        sub = await service.create(_input())
        await service.delete(sub.id)
        with pytest.raises(NotFoundError):
            await service.delete(sub.id)


# ---------------------------------------------------------------------------
# list()
# ---------------------------------------------------------------------------


class TestList:
    @pytest.mark.asyncio
    async def test_limit_returns_newest_first(self, service: SubscriptionService) -> None:
        created = [await service.create(_input(price=i)) for i in range(5)]
        page = await service.list(ListFilter(user_id=USER_ID, limit=2, offset=0))
        assert [s.id for s in page] == [created[4].id, created[3].id]

    @pytest.mark.asyncio
    async def test_offset(self, service: SubscriptionService) -> None:
        created = [await service.create(_input(price=i)) for i in range(5)]
        page = await service.list(ListFilter(limit=2, offset=3))
        assert [s.id for s in page] == [created[1].id, created[0].id]

    @pytest.mark.asyncio
    async def test_filters(self, service: SubscriptionService) -> None:
        await service.create(_input(service_name="Netflix"))
        spotify = await service.create(_input(service_name="Spotify"))
        other = await service.create(_input(service_name="Spotify", user_id=OTHER_USER_ID))

        by_name = await service.list(ListFilter(service_name="Spotify"))
        assert {s.id for s in by_name} == {spotify.id, other.id}

        both = await service.list(ListFilter(service_name="Spotify", user_id=OTHER_USER_ID))
        assert [s.id for s in both] == [other.id]

        assert len(await service.list(ListFilter())) == 3

    @pytest.mark.asyncio
    async def test_no_match_is_empty(self, service: SubscriptionService) -> None:
        await service.create(_input())
        assert await service.list(ListFilter(service_name="Nothing")) == []

    @pytest.mark.asyncio
    async def test_default_page_size(self, repository) -> None:
        service = SubscriptionService(repository, default_page_size=3)
        for _ in range(4):
            await service.create(_input())
        assert len(await service.list(ListFilter())) == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "filters",
        [
            ListFilter(limit=0),
            ListFilter(limit=1001),
            ListFilter(offset=-1),
            ListFilter(user_id="nope"),
        ],
    )
    async def test_rejects_bad_paging_or_filter(self, service: SubscriptionService, filters) -> None:
        with pytest.raises(InvalidInputError):
            await service.list(filters)


# ---------------------------------------------------------------------------
# sum_for_period()
# ---------------------------------------------------------------------------


class TestSumForPeriod:
    @pytest.mark.asyncio
    async def test_inverted_range_rejected(self, service: SubscriptionService) -> None:
        with pytest.raises(InvalidInputError):
            await service.sum_for_period(date(2025, 2, 1), date(2025, 1, 1))

    @pytest.mark.asyncio
    async def test_no_overlap_is_zero(self, service: SubscriptionService) -> None:
        assert await service.sum_for_period(date(2025, 1, 1), date(2025, 1, 1)) == 0
        await service.create(_input(start_date=date(2024, 1, 1), end_date=date(2024, 2, 1)))
        assert await service.sum_for_period(date(2025, 1, 1), date(2025, 12, 31)) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "period_start, period_end, expected",
        [
            # fully contained in the subscription
            (date(2025, 1, 15), date(2025, 1, 20), 100),
            # partial overlap touching the end date
            (date(2025, 1, 25), date(2025, 2, 15), 100),
            # ends exactly on the start date
            (date(2024, 12, 1), date(2025, 1, 1), 100),
            # starts the day after the subscription ended
            (date(2025, 2, 2), date(2025, 3, 1), 0),
        ],
    )
    async def test_overlap_window(
        self, service: SubscriptionService, period_start, period_end, expected
    ) -> None:
        await service.create(
            _input(price=100, start_date=date(2025, 1, 1), end_date=date(2025, 2, 1))
        )
        assert await service.sum_for_period(period_start, period_end) == expected

    @pytest.mark.asyncio
    async def test_sums_and_filters(self, service: SubscriptionService) -> None:
        start = date(2025, 1, 1)
        await service.create(_input(service_name="Netflix", price=499, start_date=start))
        await service.create(_input(service_name="Spotify", price=199, start_date=start))
        await service.create(
            _input(service_name="Spotify", price=299, user_id=OTHER_USER_ID, start_date=start)
        )
        period = (date(2025, 1, 1), date(2025, 1, 31))

        assert await service.sum_for_period(*period) == 997
        assert await service.sum_for_period(*period, user_id=USER_ID) == 698
        assert await service.sum_for_period(*period, service_name="Spotify") == 498
        assert (
            await service.sum_for_period(*period, user_id=OTHER_USER_ID, service_name="Spotify")
            == 299
        )

    @pytest.mark.asyncio
    async def test_bad_user_filter_rejected(self, service: SubscriptionService) -> None:
        with pytest.raises(InvalidInputError):
            await service.sum_for_period(date(2025, 1, 1), date(2025, 2, 1), user_id="nope")
