"""
Bounded retries for operations that can fail transiently, such as inserting
an order whose freshly drawn claim code is already taken.
"""
import logging
import random
import time
from functools import wraps
from typing import Any, Callable, TypeVar

T = TypeVar('T')

logger = logging.getLogger(__name__)


def backoff_delay(
    attempt: int,
    initial_delay: float,
    max_delay: float,
    exponential_base: float,
    jitter: bool,
) -> float:
    """Seconds to wait after failed ``attempt`` (0-based)."""
    delay = initial_delay * exponential_base ** attempt
    if jitter:
        delay += delay * 0.25 * random.random()
    return min(delay, max_delay)


def retry_with_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    exceptions: tuple = (Exception,),
):
    """
    Retry the decorated callable on ``exceptions``.

    The callable runs at most ``max_retries + 1`` times; the last failure is
    re-raised unchanged. An ``initial_delay`` of 0 retries immediately.
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= max_retries:
                        raise

                    logger.warning(
                        "retrying_operation",
                        extra={
                            "operation": func.__name__,
                            "error": f"{type(e).__name__}: {e}",
                            "details": {"attempt": attempt + 1, "max_retries": max_retries},
                        },
                    )
                    delay = backoff_delay(attempt, initial_delay, max_delay, exponential_base, jitter)
                    if delay > 0:
                        time.sleep(delay)
                    attempt += 1

        return wrapper
    return decorator
