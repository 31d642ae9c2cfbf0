"""Async retry logic with exponential backoff for remote store calls."""
from __future__ import annotations

import asyncio
import functools
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(
    attempt: int,
    initial_delay: float,
    max_delay: float,
    exponential_base: float = 2.0,
    jitter: float = 0.0,
) -> float:
    """Delay before retry number ``attempt`` (1-based), capped at ``max_delay``."""
    delay = initial_delay * (exponential_base ** max(attempt - 1, 0))
    if jitter:
        delay += random.uniform(0, jitter)
    return min(delay, max_delay)


def async_retry(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    jitter: float = 0.0,
    exceptions: tuple = (Exception,),
):
    """Retry decorator with exponential backoff for coroutine functions.

    Args:
        max_attempts: Maximum number of attempts
        initial_delay: Delay before the first retry in seconds
        max_delay: Maximum delay between retries
        exponential_base: Base for exponential backoff calculation
        jitter: Upper bound of random seconds added to every delay
        exceptions: Tuple of exceptions to catch and retry

    Example:
        @async_retry(max_attempts=3, exceptions=(NetworkException,))
        async def fetch_orders(store):
            return await store.fetch_all("orders")
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            last_exception: BaseException | None = None

            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e

                    if attempt < max_attempts:
                        delay = backoff_delay(
                            attempt, initial_delay, max_delay, exponential_base, jitter
                        )
                        logger.warning(
                            f"Remote operation {func.__name__} failed (attempt {attempt}/{max_attempts}): {e}. "
                            f"Retrying in {delay:.2f}s..."
                        )
                        await asyncio.sleep(delay)
                    else:
                        logger.error(
                            f"Remote operation {func.__name__} failed after {max_attempts} attempts: {e}"
                        )

            assert last_exception is not None
            raise last_exception

        return wrapper

    return decorator


def is_connection_error(error: Exception) -> bool:
    """Check if error is a connection-related error."""
    error_msg = str(error).lower()
    connection_keywords = [
        "connection",
        "timeout",
        "server closed",
        "network",
        "broken pipe",
        "connection refused",
        "no route to host",
    ]
    return any(keyword in error_msg for keyword in connection_keywords)
