"""
Main entrypoint for the Subscription Service API.

This module assembles the FastAPI application, sets up logging and
includes versioned routers.  ``create_app`` builds the storage
adapter and the service once and attaches the service to
``app.state``, from where the endpoints receive it as a dependency.
The module‑level ``app`` makes it easy to run with uvicorn, e.g.::

    uvicorn subscription_api.app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from .api.v1.endpoints import health
from .api.v1.router import router as v1_router
from .core.config import Settings
from .core.db import get_database_path, init_db
from .core.logging_config import setup_logging
from .repositories.subscription_repository import SubscriptionRepository
from .services.subscription_service import SubscriptionService

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use.  When omitted, settings are read from the
        environment.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    settings = settings or Settings()
    # Initialise logging before anything else so that the startup hook
    # and the service can log.
    setup_logging(settings.log_level, settings.log_file or None)

    db_path = get_database_path(settings.database_url)
    repository = SubscriptionRepository(db_path, timeout=settings.db_timeout)
    service = SubscriptionService(
        repository,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Creates the database file if needed and brings the schema up
        # to date before the first request is served.
        init_db(db_path, timeout=settings.db_timeout)
        logger.info("Starting subscriptions service with database %s", db_path)
        yield
        logger.info("Subscriptions service stopped")

    app = FastAPI(title=settings.project_name, version=settings.api_version, lifespan=lifespan)
    app.state.settings = settings
    app.state.subscription_service = service

    app.include_router(health.router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
