"""Bounded retry with exponential backoff for transactional work."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from peoplehub.exceptions import ConcurrentBookingError, RetryableTransactionError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 0.05  # seconds


async def retry_transaction(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run an operation, re-running it on transient transaction failures.

    Only ``RetryableTransactionError`` triggers a retry; every other
    exception propagates immediately. The delay before attempt ``n + 1`` is
    ``base_delay * 2**(n - 1)``.

    Args:
        operation: Zero-argument coroutine factory running one full attempt
        max_attempts: Total number of attempts (at least 1)
        base_delay: Delay before the second attempt, in seconds
        sleep: Sleep function (injectable for tests)

    Returns:
        Result of the first successful attempt

    Raises:
        ConcurrentBookingError: If every attempt failed transiently
    """
    max_attempts = max(1, max_attempts)
    last_error: RetryableTransactionError | None = None

    for attempt in range(max_attempts):
        try:
            return await operation()
        except RetryableTransactionError as e:
            last_error = e
            if attempt < max_attempts - 1:
                delay = base_delay * (2**attempt)
                logger.warning(
                    f"Transaction attempt {attempt + 1}/{max_attempts} failed "
                    f"({type(e).__name__}), retrying in {delay}s"
                )
                await sleep(delay)

    logger.error(f"Transaction failed after {max_attempts} attempts: {type(last_error).__name__}")
    raise ConcurrentBookingError(max_attempts) from last_error
