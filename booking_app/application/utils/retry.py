"""
Retry helper for store reads.

Writes are never retried: a failed write surfaces to the caller and nothing
is assumed to have been persisted.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from functools import wraps
from typing import TypeVar

from booking_app.application.exceptions import StoreUnavailable

T = TypeVar("T")

logger = logging.getLogger(__name__)


def retry_read(
    attempts: int = 3,
    base_delay: float = 0.2,
    max_delay: float = 2.0,
    exceptions: tuple[type[BaseException], ...] = (StoreUnavailable,),
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Exponential backoff retry decorator for synchronous reads."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            delay = base_delay
            for attempt in range(1, attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= attempts:
                        raise
                    logger.warning(
                        "Retrying %s after error %s (attempt %s/%s, delay %.1fs)",
                        func.__name__,
                        e,
                        attempt,
                        attempts,
                        delay,
                    )
                    time.sleep(delay)
                    delay = min(delay * 2, max_delay)
            raise RuntimeError("unreachable")

        return wrapper

    return decorator


def read_with_retry(func: Callable[[], T], attempts: int = 3, base_delay: float = 0.2) -> T:
    return retry_read(attempts=attempts, base_delay=base_delay)(func)()
