"""
Bounded retry with exponential backoff for external calls.
"""
import logging
import random
import time
from typing import Callable, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Delay before retry number `attempt` (1-based), with jitter."""
    delay = min(base_delay * (2 ** (attempt - 1)), max_delay)
    return random.uniform(delay * 0.5, delay)


def call_with_retries(
    fn: Callable[[], T],
    *,
    max_attempts: int = 1,
    base_delay: float = 0.5,
    max_delay: float = 8.0,
    retry_on: Tuple[Type[BaseException], ...] = (),
    sleep: Callable[[float], None] = time.sleep,
    label: str = "call",
) -> T:
    """
    Run `fn` up to `max_attempts` times.

    Only exceptions listed in `retry_on` are retried; anything else propagates
    immediately. The last retryable exception is re-raised unchanged once
    attempts are exhausted.

    Args:
        fn: Zero-argument callable to run
        max_attempts: Total attempts including the first (1 disables retries)
        base_delay: Delay before the first retry, in seconds
        max_delay: Upper bound for any single delay, in seconds
        retry_on: Exception types considered transient
        sleep: Sleep function, injectable for tests
        label: Name used in log messages

    Returns:
        Result of `fn`
    """
    attempts = max(1, max_attempts)
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except retry_on as e:
            if attempt >= attempts:
                raise
            delay = backoff_delay(attempt, base_delay, max_delay)
            logger.warning("%s attempt %d/%d failed, retrying in %.2fs: %s", label, attempt, attempts, delay, e)
            sleep(delay)
    raise RuntimeError("unreachable")
