"""
RetryStrategy - Exponential backoff with jitter for API operations.

Only errors from the Verisoul taxonomy take part in retry decisions; any other
exception propagates on the first attempt.
"""

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from loguru import logger

from verisoul.services.errors import (
    RETRYABLE_CLIENT_STATUSES,
    ValidationError,
    VerisoulApiError,
)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryStrategy:
    """
    Re-run an async operation on transient API failures.

    Delay before retry number k (1-indexed) is
    min(base * multiplier^(k-1) + jitter, max_delay), jitter in [0, 10%].

    Usage:
        retry = RetryStrategy(max_attempts=3, base_delay_ms=1000)
        data = await retry.execute(lambda: transport.get(url))
    """

    max_attempts: int = 3
    base_delay_ms: int = 1000
    backoff_multiplier: float = 2.0
    max_delay_ms: int = 30000
    sleep: Callable[[float], Awaitable[None]] = field(
        default=asyncio.sleep, repr=False, compare=False
    )

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay_ms < 0:
            raise ValueError(f"base_delay_ms must be >= 0, got {self.base_delay_ms}")
        if self.backoff_multiplier < 1:
            raise ValueError(
                f"backoff_multiplier must be >= 1, got {self.backoff_multiplier}"
            )
        if self.max_delay_ms < 0:
            raise ValueError(f"max_delay_ms must be >= 0, got {self.max_delay_ms}")

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run operation until it succeeds or retries are exhausted.

        Raises:
            VerisoulApiError: The last classified error once no retry applies
        """
        attempt = 1

        while True:
            try:
                result = await operation()
            except VerisoulApiError as e:
                if not self.should_retry(e):
                    logger.debug(f"Not retrying {type(e).__name__}: {e}")
                    raise

                if attempt >= self.max_attempts:
                    logger.error(
                        f"Operation failed after {self.max_attempts} attempts: {e}"
                    )
                    raise

                delay_ms = self.calculate_delay(attempt)
                logger.info(
                    f"Retrying operation (attempt {attempt}/{self.max_attempts} "
                    f"failed: {e}), next attempt in {delay_ms:.0f}ms"
                )
                await self.sleep(delay_ms / 1000)
                attempt += 1
                continue

            if attempt > 1:
                logger.info(f"Operation succeeded on attempt {attempt}")
            return result

    def should_retry(self, error: VerisoulApiError) -> bool:
        """Decide whether a classified error is worth another attempt."""
        if isinstance(error, ValidationError):
            return False

        status = error.status_code
        if 400 <= status < 500 and status not in RETRYABLE_CLIENT_STATUSES:
            return False

        return error.retryable

    def calculate_delay(self, attempt: int) -> float:
        """Backoff delay in milliseconds after the given failed attempt."""
        delay = self.base_delay_ms * self.backoff_multiplier ** (attempt - 1)

        # Jitter: up to 10% of the computed delay
        delay += random.uniform(0, delay * 0.1)

        return min(delay, self.max_delay_ms)
