"""Entry point for the Subscription Service.

Serves the application built at import time by
``subscription_api.app.main`` with Uvicorn, on the ``APP_HOST`` and
``APP_PORT`` it was configured with (defaults ``0.0.0.0`` and
``8080``).

Usage:
    python run.py
"""
import asyncio

from uvicorn import Config, Server

from subscription_api.app.main import app


async def main() -> None:
    """Serve the API until interrupted."""
    settings = app.state.settings
    config = Config(
        app=app,
        host=settings.app_host,
        port=settings.app_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
