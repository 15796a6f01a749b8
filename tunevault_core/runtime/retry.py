"""
Backoff for remote storage calls.

Storage adapters own their retry behaviour; the gateway above them never
retries. An adapter decorates its single-attempt call with
``sync_with_retry(policy)`` and raises RetryableError for answers worth
repeating. Timeouts are not retried.
"""

from __future__ import annotations

import functools
import random
import time
from typing import Any, Callable, TypeVar

from loguru import logger
from pydantic import BaseModel

from .errors import RetryableError

T = TypeVar("T")


class RetryPolicy(BaseModel):
    """
    How often and how patiently an adapter retries.

    The delay before retry N (0-indexed) is
    ``min(base_delay * exponential_base ** N, max_delay)`` plus up to 25%
    jitter.
    """

    max_attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 10.0
    exponential_base: float = 2.0
    jitter: bool = True
    retry_on_status: tuple[int, ...] = (429, 502, 503, 504)

    model_config = {"frozen": True}

    def calculate_delay(self, attempt: int) -> float:
        delay = min(self.base_delay * (self.exponential_base**attempt), self.max_delay)
        if self.jitter:
            delay += delay * 0.25 * random.random()
        return delay

    def should_retry_status(self, status_code: int) -> bool:
        return status_code in self.retry_on_status


def sync_with_retry(policy: RetryPolicy) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Retry the decorated call while it raises RetryableError.

    The last RetryableError is re-raised once ``policy.max_attempts`` is
    spent. Any other exception propagates on the first attempt.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except RetryableError as e:
                    attempt += 1
                    if attempt >= policy.max_attempts:
                        logger.warning(
                            f"[{e.debug_id}] Giving up on {func.__name__} after "
                            f"{attempt} attempts: {e.message_safe}"
                        )
                        raise

                    delay = policy.calculate_delay(attempt - 1)
                    logger.info(
                        f"[{e.debug_id}] Retry {attempt}/{policy.max_attempts - 1} "
                        f"for {func.__name__} in {delay:.2f}s: {e.message_safe}"
                    )
                    time.sleep(delay)

        return wrapper

    return decorator
