"""Bounded retry with linear backoff for upstream API calls."""

from typing import Callable, TypeVar
import time
import logging

logger = logging.getLogger(__name__)

T = TypeVar('T')

DEFAULT_MAX_ATTEMPTS = 3


def linear_backoff(attempt: int) -> float:
    """Seconds to wait after failed attempt number `attempt` (1-based)."""
    return float(attempt)


def retry_call(
    operation: Callable[[int], T],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    backoff: Callable[[int], float] = linear_backoff,
    sleep: Callable[[float], None] = time.sleep,
    retry_on: tuple = (Exception,)
) -> T:
    """
    Call `operation(attempt)` until it succeeds or attempts run out.

    Args:
        operation: Callable receiving the 1-based attempt number
        max_attempts: Total attempts before giving up
        backoff: Maps a failed attempt number to the delay before the next one
        sleep: Sleep function (swap for a fake clock in tests)
        retry_on: Exception types that count as a retryable failure

    Returns:
        Whatever `operation` returns on its first success

    Raises:
        The exception from the final attempt. Nothing is waited after it.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    for attempt in range(1, max_attempts + 1):
        try:
            return operation(attempt)
        except retry_on as e:
            if attempt >= max_attempts:
                raise
            delay = backoff(attempt)
            logger.warning(f"Attempt {attempt}/{max_attempts} failed: {e}; retrying in {delay:g}s")
            sleep(delay)
