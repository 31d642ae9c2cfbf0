"""
Sentry Integration for Error Tracking.

Partial-sync failures (remote call failing after the local mutation was
applied) are reported here so divergence between local and remote state
is visible outside the process logs.
"""

import logging

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

logger = logging.getLogger(__name__)


def init_sentry(dsn: str | None, environment: str = "development", release: str | None = None) -> bool:
    """
    Initialize Sentry SDK for error tracking.

    Returns:
        True if Sentry was initialized, False otherwise.
    """
    if not dsn:
        logger.info("Sentry DSN not configured, skipping initialization")
        return False

    try:
        logging_integration = LoggingIntegration(
            level=logging.INFO,  # breadcrumbs
            event_level=logging.ERROR,
        )

        sentry_sdk.init(
            dsn=dsn,
            environment=environment,
            traces_sample_rate=0.1,
            integrations=[logging_integration],
            send_default_pii=False,
            release=release or "local",
        )

        logger.info(f"Sentry initialized for environment: {environment}")
        return True

    except Exception as e:
        logger.error(f"Failed to initialize Sentry: {e}")
        return False


def capture_exception(error: BaseException, **extra) -> None:
    """Capture an exception and send to Sentry."""
    try:
        with sentry_sdk.new_scope() as scope:
            for key, value in extra.items():
                scope.set_extra(key, value)
            sentry_sdk.capture_exception(error)
    except Exception as e:
        logger.debug(f"Sentry capture_exception failed: {e}")


def capture_message(message: str, level: str = "info", **extra) -> None:
    """Capture a message and send to Sentry."""
    try:
        with sentry_sdk.new_scope() as scope:
            for key, value in extra.items():
                scope.set_extra(key, value)
            sentry_sdk.capture_message(message, level=level)
    except Exception as e:
        logger.debug(f"Sentry capture_message failed: {e}")
