"""
SQLite storage adapter for subscriptions.

``SubscriptionRepository`` is the only component that writes the
``subscriptions`` table.  Each public coroutine is one unit of work on
its own short‑lived connection: the blocking ``sqlite3`` call runs in a
worker thread, and if the awaiting task is cancelled the connection is
interrupted so the statement aborts and its transaction is rolled
back.  Every write is a single statement.

All queries use parameterized statements.  Optional filters are
equality predicates joined with ``AND``; a ``None`` filter matches any
value.  Zero‑row effects on update and delete are reported as
``NotFoundError``; driver errors propagate unchanged.
"""

from __future__ import annotations

import asyncio
import contextlib
import sqlite3
from datetime import date, datetime
from typing import Callable, List, Optional, TypeVar

from subscription_api.app.core.db import get_connection
from subscription_api.app.core.errors import NotFoundError
from subscription_api.app.models import ListFilter, Subscription

T = TypeVar("T")

_COLUMNS = "id, service_name, price, user_id, start_date, end_date, created_at, updated_at"


class SubscriptionRepository:
    """Persist and query subscription records."""

    def __init__(self, db_path: str, timeout: float = 5.0) -> None:
        self._db_path = db_path
        self._timeout = timeout

    async def _run(self, work: Callable[[sqlite3.Cursor], T]) -> T:
        conn = get_connection(self._db_path, self._timeout)

        def call() -> T:
            try:
                # ``with conn`` commits on success and rolls back on error.
                with conn:
                    return work(conn.cursor())
            finally:
                conn.close()

        try:
            return await asyncio.to_thread(call)
        except asyncio.CancelledError:
            # The worker may already have closed the connection.
            with contextlib.suppress(sqlite3.ProgrammingError):
                conn.interrupt()
            raise

    async def create(self, sub: Subscription) -> None:
        def work(cursor: sqlite3.Cursor) -> None:
            cursor.execute(
                f"INSERT INTO subscriptions ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    sub.id,
                    sub.service_name,
                    sub.price,
                    sub.user_id,
                    sub.start_date.isoformat(),
                    sub.end_date.isoformat(),
                    sub.created_at.isoformat(timespec="microseconds"),
                    sub.updated_at.isoformat(timespec="microseconds"),
                ),
            )

        await self._run(work)

    async def get(self, subscription_id: str) -> Subscription:
        """Return the subscription with the given id.

        Raises ``NotFoundError`` only when no row matches.
        """

        def work(cursor: sqlite3.Cursor) -> Optional[sqlite3.Row]:
            return cursor.execute(
                f"SELECT {_COLUMNS} FROM subscriptions WHERE id = ?",
                (subscription_id,),
            ).fetchone()

        row = await self._run(work)
        if row is None:
            raise NotFoundError(subscription_id)
        return self._row_to_subscription(row)

    async def update(self, sub: Subscription) -> None:
        """Overwrite every mutable column of an existing row.

        ``id`` and ``created_at`` are never written.
        """

        def work(cursor: sqlite3.Cursor) -> int:
            cursor.execute(
                """
                UPDATE subscriptions
                SET service_name = ?, price = ?, user_id = ?, start_date = ?, end_date = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    sub.service_name,
                    sub.price,
                    sub.user_id,
                    sub.start_date.isoformat(),
                    sub.end_date.isoformat(),
                    sub.updated_at.isoformat(timespec="microseconds"),
                    sub.id,
                ),
            )
            return cursor.rowcount

        if await self._run(work) == 0:
            raise NotFoundError(sub.id)

    async def delete(self, subscription_id: str) -> None:
        def work(cursor: sqlite3.Cursor) -> int:
            cursor.execute("DELETE FROM subscriptions WHERE id = ?", (subscription_id,))
            return cursor.rowcount

        if await self._run(work) == 0:
            raise NotFoundError(subscription_id)

    async def list(self, filters: ListFilter) -> List[Subscription]:
        """Return one page of matching subscriptions, newest first.

        ``filters.limit`` must already be resolved to a concrete value.
        """
        where, params = self._filter_clause(filters.user_id, filters.service_name)
        # rowid breaks ties between rows created within the same microsecond.
        query = (
            f"SELECT {_COLUMNS} FROM subscriptions{where} "
            "ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?"
        )
        params.extend([filters.limit, filters.offset])

        def work(cursor: sqlite3.Cursor) -> List[sqlite3.Row]:
            return cursor.execute(query, params).fetchall()

        rows = await self._run(work)
        return [self._row_to_subscription(row) for row in rows]

    async def total_cost(
        self,
        period_start: date,
        period_end: date,
        user_id: Optional[str] = None,
        service_name: Optional[str] = None,
    ) -> int:
        """Sum ``price`` over subscriptions overlapping the period.

        A subscription overlaps when ``start_date <= period_end`` and
        ``end_date >= period_start``; both bounds are inclusive.
        """
        where, params = self._filter_clause(
            user_id,
            service_name,
            extra=["start_date <= ?", "end_date >= ?"],
            extra_params=[period_end.isoformat(), period_start.isoformat()],
        )
        query = f"SELECT COALESCE(SUM(price), 0) FROM subscriptions{where}"

        def work(cursor: sqlite3.Cursor) -> int:
            return cursor.execute(query, params).fetchone()[0]

        return int(await self._run(work))

    @staticmethod
    def _filter_clause(
        user_id: Optional[str],
        service_name: Optional[str],
        extra: Optional[List[str]] = None,
        extra_params: Optional[list] = None,
    ) -> tuple[str, list]:
        """Build a ``WHERE`` clause from the optional equality filters."""
        conditions: List[str] = list(extra or [])
        params: list = list(extra_params or [])
        if user_id is not None:
            conditions.append("user_id = ?")
            params.append(user_id)
        if service_name is not None:
            conditions.append("service_name = ?")
            params.append(service_name)
        if not conditions:
            return "", params
        return " WHERE " + " AND ".join(conditions), params

    @staticmethod
    def _row_to_subscription(row: sqlite3.Row) -> Subscription:
        """Convert a database row to a ``Subscription``."""
        return Subscription(
            id=row["id"],
            service_name=row["service_name"],
            price=row["price"],
            user_id=row["user_id"],
            start_date=date.fromisoformat(row["start_date"]),
            end_date=date.fromisoformat(row["end_date"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
