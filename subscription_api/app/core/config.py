"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from environment
variables, with defaults provided for all fields.  A ``Settings``
instance is created once by the process entry point and handed to
``create_app``; nothing in the application reads configuration from a
module‑level global.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Subscription Service")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Path to the SQLite database file.  A relative path is resolved
    # against the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "subscriptions.db")

    # Seconds the driver waits on a locked database before giving up.
    db_timeout: float = float(os.getenv("DB_TIMEOUT", "5"))

    # Page size used by the list endpoint when the client does not ask
    # for one, and the hard upper bound for any requested page.
    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "50"))
    max_page_size: int = int(os.getenv("MAX_PAGE_SIZE", "1000"))

    app_host: str = os.getenv("APP_HOST", "0.0.0.0")
    app_port: int = int(os.getenv("APP_PORT", "8080"))
