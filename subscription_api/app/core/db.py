"""
SQLite database integration and simple migration system.

This module provides functions for resolving the database location
(``get_database_path``), opening connections (``get_connection``) and
applying migrations on application start (``init_db``).  It uses
SQLite as an embedded relational store; to switch to another DBMS you
would replace the connection logic and adapt SQL syntax in the
repository accordingly.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: subscriptions table
    (
        1,
        """
        -- Dates are stored as ISO ``YYYY-MM-DD`` text so that range
        -- comparisons in SQL follow calendar order.  Timestamps are ISO
        -- 8601 strings with an explicit UTC offset.
        CREATE TABLE IF NOT EXISTS subscriptions (
            id TEXT PRIMARY KEY,
            service_name TEXT NOT NULL,
            price INTEGER NOT NULL CHECK (price >= 0),
            user_id TEXT NOT NULL,
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            CHECK (end_date >= start_date)
        );
        """,
    ),
    # Migration 2: lookup indices for the list and total filters
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_subscriptions_user_id ON subscriptions(user_id);
        CREATE INDEX IF NOT EXISTS idx_subscriptions_service_name ON subscriptions(service_name);
        CREATE INDEX IF NOT EXISTS idx_subscriptions_created_at ON subscriptions(created_at);
        """,
    ),
]


def get_database_path(database_url: str) -> str:
    """Compute the path to the SQLite database file.

    An absolute path is used directly; anything else is resolved
    relative to the project root.
    """
    if os.path.isabs(database_url):
        return database_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / database_url).resolve())


def get_connection(db_path: str, timeout: float = 5.0) -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be read by
    name.  The connection may be handed to a worker thread and
    interrupted from the event loop thread, so the same‑thread check is
    disabled; callers must still use each connection for one unit of
    work only.
    """
    conn = sqlite3.connect(db_path, timeout=timeout, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_cursor(db_path: str, timeout: float = 5.0) -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection(db_path, timeout)
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


def init_db(db_path: str, timeout: float = 5.0) -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations defined in
    ``MIGRATIONS``.  To add a migration, append it with an incremented
    version number.
    """
    with get_cursor(db_path, timeout) as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) AS version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                logger.info("Applied migration %s", version)
                current_version = version
