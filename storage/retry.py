"""
Bounded retry with exponential backoff.
Every external call (GitHub, OpenAI, Google Sheets) goes through with_retry so the
failure/retry contract lives in one place.
"""

import functools
import logging
import time
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 1.0


def backoff_delay(base_delay: float, attempt: int) -> float:
    """Seconds to wait after failed attempt number `attempt` (1-based)."""
    return float(base_delay) * (2 ** (attempt - 1))


def with_retry(
    operation: Callable[[], T],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    label: Optional[str] = None,
    sleep: Callable[[float], Any] = time.sleep,
) -> T:
    """Run `operation` until it succeeds or `max_attempts` attempts have failed.

    Every exception is treated as transient. After failed attempt n the caller waits
    base_delay * 2**(n-1) seconds. When the attempts are exhausted the last exception
    is re-raised unchanged.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
    name = label or getattr(operation, "__name__", "operation")

    attempt = 1
    while True:
        try:
            logger.debug("%s: attempt %d/%d", name, attempt, max_attempts)
            return operation()
        except Exception as exc:
            logger.warning("%s: attempt %d failed: %s", name, attempt, exc)
            if attempt >= max_attempts:
                logger.error("%s: all %d attempts failed", name, max_attempts)
                raise
            wait_seconds = backoff_delay(base_delay, attempt)
            logger.debug("%s: waiting %.2fs before retry", name, wait_seconds)
            sleep(wait_seconds)
            attempt += 1


def retrying(max_attempts: int = DEFAULT_MAX_ATTEMPTS, base_delay: float = DEFAULT_BASE_DELAY, label: Optional[str] = None):
    """Decorator form of with_retry for functions that are always retried the same way."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            return with_retry(lambda: func(*args, **kwargs), max_attempts=max_attempts, base_delay=base_delay, label=label or func.__name__)

        return wrapper

    return decorator


class RetryPolicy:
    """Attempt bound and base delay carried by a component."""

    def __init__(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS, base_delay: float = DEFAULT_BASE_DELAY, sleep: Callable[[float], Any] = time.sleep):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.max_attempts = int(max_attempts)
        self.base_delay = float(base_delay)
        self.sleep = sleep

    def run(self, operation: Callable[[], T], label: Optional[str] = None) -> T:
        return with_retry(operation, max_attempts=self.max_attempts, base_delay=self.base_delay, label=label, sleep=self.sleep)

    def __repr__(self):
        return f"RetryPolicy(max_attempts={self.max_attempts}, base_delay={self.base_delay})"


__all__ = ["DEFAULT_MAX_ATTEMPTS", "DEFAULT_BASE_DELAY", "backoff_delay", "with_retry", "retrying", "RetryPolicy"]
