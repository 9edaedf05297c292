"""Retry with additive backoff for async operations."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from ollama_datagen.errors import UnsupportedTypeError

__all__ = [
    "run_with_retries",
    "MAX_ATTEMPTS",
    "INITIAL_DELAY",
    "DEFAULT_BACKOFF_INCREMENT",
]

T = TypeVar("T")

MAX_ATTEMPTS = 5
INITIAL_DELAY = 5.0
DEFAULT_BACKOFF_INCREMENT = 15.0

# Programming errors; retrying cannot fix them
_NON_RETRYABLE: tuple[type[BaseException], ...] = (UnsupportedTypeError,)


async def run_with_retries(
    operation: Callable[[], Awaitable[T]],
    backoff_increment: float = DEFAULT_BACKOFF_INCREMENT,
    *,
    max_attempts: int = MAX_ATTEMPTS,
    initial_delay: float = INITIAL_DELAY,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    logger: Optional[logging.Logger] = None,
) -> T:
    """
    Await ``operation()`` until it succeeds or ``max_attempts`` is reached.

    The delay starts at ``initial_delay`` seconds and grows by
    ``backoff_increment`` after every failed attempt. The exception from the
    last attempt propagates unchanged.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt.
        backoff_increment: Seconds added to the delay after each failure.
        max_attempts: Total attempts, including the first one.
        initial_delay: Seconds to wait after the first failure.
        sleep: Awaitable sleep function, replaceable in tests.
        logger: Optional logger for attempt reports.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    log = logger or logging.getLogger(__name__)
    delay = initial_delay
    attempt = 1
    while True:
        try:
            return await operation()
        except _NON_RETRYABLE:
            raise
        except Exception as exc:
            if attempt >= max_attempts:
                raise
            log.warning(
                "Exception on attempt %d: %s. Will retry after %ss",
                attempt,
                exc,
                delay,
            )
            await sleep(delay)
            delay += backoff_increment
            attempt += 1
