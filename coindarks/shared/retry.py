"""
Bounded retry helper.

Runs a callable up to ``attempts`` times, sleeping ``backoff * n``
seconds after the n-th failure. Only exceptions listed in ``retry_on``
are retried; anything else propagates immediately. After the last
attempt the final exception is re-raised unchanged.
"""

import logging
import time
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def with_retries(
    fn: Callable[[], T],
    attempts: int = 3,
    backoff: float = 0.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Optional[Callable[[int, BaseException], None]] = None,
) -> T:
    """Call ``fn`` with bounded retries.

    Args:
        fn: Zero-argument callable to run.
        attempts: Total number of calls allowed (at least 1).
        backoff: Base cooldown in seconds; grows linearly per attempt.
        retry_on: Exception types that trigger another attempt.
        sleep: Sleep function, injectable for tests.
        on_retry: Optional hook called with (attempt, error) before retrying.

    Returns:
        Whatever ``fn`` returns on its first successful call.
    """
    attempts = max(1, attempts)
    for attempt in range(1, attempts):
        try:
            return fn()
        except retry_on as exc:
            logger.warning(
                "Attempt %d/%d failed (%s); retrying",
                attempt,
                attempts,
                type(exc).__name__,
            )
            if on_retry is not None:
                on_retry(attempt, exc)
            if backoff > 0:
                sleep(backoff * attempt)
    return fn()
