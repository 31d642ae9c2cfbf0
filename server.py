"""Back-office entrypoint: settings, logging, Sentry, then the admin API."""
from __future__ import annotations

import asyncio

from backoffice import __version__
from backoffice.api.api_server import run_api_server
from backoffice.bootstrap import build_container
from backoffice.core.config import load_settings
from backoffice.integrations.sentry_integration import init_sentry
from logging_config import logger, setup_logging


async def main() -> None:
    settings = load_settings()
    setup_logging()
    init_sentry(settings.sentry_dsn, environment=settings.environment, release=__version__)

    if not settings.remote_configured:
        logger.warning("SUPABASE_URL / SUPABASE_ANON_KEY not set: sync and payment validation disabled")

    container = build_container(settings)
    await run_api_server(container, host=settings.api.host, port=settings.api.port)


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Back-office stopped")


if __name__ == "__main__":
    run()
