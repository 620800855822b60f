"""Bounded retry policy for store writes."""

import logging
import time
from typing import Any, Callable, Optional

from .error_handler import DuplicateTransaction, TrackerError


logger = logging.getLogger(__name__)


def fixed_backoff(seconds: float) -> Callable[[int], float]:
    """Backoff that waits the same amount after every failed attempt"""
    return lambda attempt: seconds


def is_retryable(error: Exception) -> bool:
    """Duplicates will never succeed on retry; everything else might"""
    return not isinstance(error, DuplicateTransaction)


class RetryPolicy:
    """Runs a callable up to ``max_attempts`` times.

    Args:
        max_attempts: Total number of attempts, including the first
        backoff: Maps the failed attempt number (1-based) to a delay in seconds
        is_retryable: Predicate deciding whether an error is worth retrying
        sleep: Function used to wait between attempts
    """

    def __init__(self,
                 max_attempts: int = 3,
                 backoff: Optional[Callable[[int], float]] = None,
                 is_retryable: Callable[[Exception], bool] = is_retryable,
                 sleep: Callable[[float], Any] = time.sleep):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.backoff = backoff or fixed_backoff(0.1)
        self.is_retryable = is_retryable
        self.sleep = sleep

    def call(self, fn: Callable[..., Any], *args, **kwargs) -> Any:
        """Call ``fn`` until it succeeds, fails permanently or the budget is spent"""
        for attempt in range(1, self.max_attempts + 1):
            try:
                return fn(*args, **kwargs)
            except TrackerError as e:
                if not self.is_retryable(e):
                    raise
                if attempt == self.max_attempts:
                    logger.error(f"Giving up after {attempt} attempts: {e}")
                    raise
                delay = self.backoff(attempt)
                logger.warning(f"Attempt {attempt}/{self.max_attempts} failed: {e}; retrying in {delay:.2f}s")
                self.sleep(delay)
