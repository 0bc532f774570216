"""Retry policy with exponential backoff for estimator calls."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import TypeVar

from nutriwise.errors import TransientEstimatorError

_logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_transient(exc: Exception) -> bool:
    """Return True for rate-limit and overload failures."""
    return isinstance(exc, TransientEstimatorError)


@dataclass(frozen=True)
class RetryPolicy:
    """Retries retryable failures with doubling delays."""

    max_attempts: int = 3
    initial_delay_seconds: float = 3.0
    backoff_factor: float = 2.0
    is_retryable: Callable[[Exception], bool] = is_transient

    def with_attempts(self, max_attempts: int) -> "RetryPolicy":
        """Return a copy with a different attempt budget."""
        return replace(self, max_attempts=max_attempts)

    def delay_for(self, failures: int) -> float:
        """Return the delay after the given number of failed attempts."""
        return self.initial_delay_seconds * self.backoff_factor ** (failures - 1)

    async def run(
        self,
        func: Callable[[], Awaitable[T]],
        *,
        action: str,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> T:
        """Call func until it succeeds, fails fatally or attempts run out."""
        failures = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                failures += 1
                if failures >= self.max_attempts or not self.is_retryable(exc):
                    _logger.error(
                        "Estimator %s failed after %s attempt(s): %s",
                        action,
                        failures,
                        exc,
                    )
                    raise
                delay = self.delay_for(failures)
                _logger.warning(
                    "Estimator %s failed (attempt %s/%s), retrying in %.1fs: %s",
                    action,
                    failures,
                    self.max_attempts,
                    delay,
                    exc,
                )
                await sleep(delay)
