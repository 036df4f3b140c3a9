"""
CircuitBreaker - Sheds load from a failing upstream using shared, TTL'd state.

States:
- CLOSED: Normal operation, calls pass through, failures counted
- OPEN: Calls rejected with CircuitOpenError until the recovery window elapses
- HALF_OPEN: One probing call allowed

Transitions:
- CLOSED → OPEN: failure count reaches failure_threshold
- OPEN → HALF_OPEN: recovery_time elapsed since the last failure
- HALF_OPEN → CLOSED: probe succeeds (failure count reset)
- HALF_OPEN → OPEN: probe fails (failure re-recorded)

State lives in a CacheStore under keys namespaced by service, so breakers
sharing a store never collide and state survives across client instances.
The state key expires after recovery_time, failure bookkeeping after
FAILURE_TTL seconds, so an idle breaker decays back to CLOSED on its own.

Read-modify-write on the failure count is not atomic; concurrent callers may
lose an increment. The breaker is a load-shedding heuristic, not a lock.
"""

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

from loguru import logger

from verisoul.services.cache import CacheStore
from verisoul.services.errors import CircuitOpenError, RequestTimeoutError

T = TypeVar("T")

FAILURE_TTL = 600  # seconds


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Blocking requests
    HALF_OPEN = "half_open"  # Testing recovery


@dataclass
class CircuitBreakerConfig:
    """Configuration for circuit breaker."""

    failure_threshold: int = 5  # Failures before opening
    timeout_seconds: float = 60.0  # Failed calls at least this slow become timeouts
    recovery_time: float = 300.0  # Seconds in OPEN before probing

    def __post_init__(self):
        if self.failure_threshold < 1:
            raise ValueError(
                f"failure_threshold must be >= 1, got {self.failure_threshold}"
            )
        if self.timeout_seconds < 0:
            raise ValueError(
                f"timeout_seconds must be >= 0, got {self.timeout_seconds}"
            )
        if self.recovery_time < 0:
            raise ValueError(f"recovery_time must be >= 0, got {self.recovery_time}")


class CircuitBreaker:
    """
    Circuit breaker for a single logical service.

    Usage:
        cb = CircuitBreaker("PhoneClient", cache)
        data = await cb.call(lambda: retry.execute(operation))
    """

    def __init__(
        self,
        service: str,
        cache: CacheStore,
        config: CircuitBreakerConfig | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.service = service
        self.config = config or CircuitBreakerConfig()
        self._cache = cache
        self._clock = clock

    async def call(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run operation under the breaker.

        Raises:
            CircuitOpenError: If the circuit is open and still recovering
            Exception: Whatever operation raised, unchanged unless it was slow
        """
        state = await self.get_state()

        if state == CircuitState.OPEN:
            if not await self._should_attempt_recovery():
                remaining = await self.get_time_until_recovery()
                logger.warning(
                    f"Circuit breaker '{self.service}' OPEN - rejecting request"
                )
                raise CircuitOpenError(self.service, remaining)
            await self._transition_to_half_open()
            state = CircuitState.HALF_OPEN

        if state == CircuitState.HALF_OPEN:
            return await self._probe(operation)

        return await self._call_closed(operation)

    async def _call_closed(self, operation: Callable[[], Awaitable[T]]) -> T:
        try:
            return await self._execute(operation)
        except Exception:
            await self._record_failure()
            failures = await self._get_failure_count()
            if failures >= self.config.failure_threshold:
                await self._transition_to_open(failures)
            raise

    async def _probe(self, operation: Callable[[], Awaitable[T]]) -> T:
        try:
            result = await self._execute(operation)
        except Exception:
            await self._set_state(CircuitState.OPEN)
            await self._record_failure()
            logger.warning(
                f"Circuit breaker '{self.service}' re-OPENED "
                f"(failure during HALF_OPEN probe)"
            )
            raise

        await self._transition_to_closed()
        return result

    async def _execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Time the call; only a failed call is checked against the timeout."""
        start = self._clock()

        try:
            result = await operation()
        except Exception as e:
            duration = self._clock() - start
            if duration >= self.config.timeout_seconds:
                raise RequestTimeoutError.operation_timed_out(
                    duration, endpoint=getattr(e, "endpoint", None)
                ) from e
            raise

        await self._record_success()
        return result

    # State transitions

    async def _transition_to_open(self, failures: int) -> None:
        await self._set_state(CircuitState.OPEN)
        logger.warning(
            f"Circuit breaker '{self.service}' OPENED after {failures} failures"
        )

    async def _transition_to_half_open(self) -> None:
        await self._set_state(CircuitState.HALF_OPEN)
        logger.info(f"Circuit breaker '{self.service}' transitioned to HALF_OPEN")

    async def _transition_to_closed(self) -> None:
        await self._set_state(CircuitState.CLOSED)
        await self._reset_failures()
        logger.info(f"Circuit breaker '{self.service}' CLOSED (recovered)")

    # Store access. Store failures never escape: reads fall back to defaults
    # and writes are dropped.

    async def get_state(self) -> CircuitState:
        """Current state as recorded in the store; CLOSED when absent or unknown."""
        try:
            raw = await self._cache.get(self._state_key, None)
        except Exception as e:
            logger.warning(f"Circuit breaker '{self.service}' state read failed: {e}")
            return CircuitState.CLOSED

        if raw is None:
            return CircuitState.CLOSED

        try:
            return CircuitState(raw)
        except ValueError:
            return CircuitState.CLOSED

    async def _set_state(self, state: CircuitState) -> None:
        try:
            await self._cache.set(
                self._state_key, state.value, self.config.recovery_time
            )
        except Exception as e:
            logger.warning(f"Circuit breaker '{self.service}' state write failed: {e}")

    async def _get_failure_count(self) -> int:
        try:
            count = await self._cache.get(self._failures_key, 0)
        except Exception as e:
            logger.warning(
                f"Circuit breaker '{self.service}' failure count read failed: {e}"
            )
            return 0
        try:
            return int(count)
        except (TypeError, ValueError):
            return 0

    async def _get_last_failure(self) -> float | None:
        try:
            value = await self._cache.get(self._last_failure_key, None)
        except Exception as e:
            logger.warning(
                f"Circuit breaker '{self.service}' last failure read failed: {e}"
            )
            return None
        try:
            return float(value) if value is not None else None
        except (TypeError, ValueError):
            return None

    async def _record_failure(self) -> None:
        count = await self._get_failure_count() + 1
        try:
            await self._cache.set(self._failures_key, count, FAILURE_TTL)
            await self._cache.set(self._last_failure_key, self._clock(), FAILURE_TTL)
        except Exception as e:
            logger.warning(f"Circuit breaker '{self.service}' failure write failed: {e}")
            return
        logger.debug(f"Circuit breaker '{self.service}' recorded failure ({count})")

    async def _record_success(self) -> None:
        count = max(0, await self._get_failure_count() - 1)
        try:
            if count > 0:
                await self._cache.set(self._failures_key, count, FAILURE_TTL)
            else:
                await self._cache.delete(self._failures_key)
        except Exception as e:
            logger.warning(f"Circuit breaker '{self.service}' success write failed: {e}")

    async def _reset_failures(self) -> None:
        try:
            await self._cache.delete(self._failures_key)
            await self._cache.delete(self._last_failure_key)
        except Exception as e:
            logger.warning(f"Circuit breaker '{self.service}' reset failed: {e}")

    async def _should_attempt_recovery(self) -> bool:
        last_failure = await self._get_last_failure()
        if last_failure is None:
            return True
        return self._clock() - last_failure >= self.config.recovery_time

    # Status

    async def get_time_until_recovery(self) -> float | None:
        """Seconds until an OPEN circuit may probe again."""
        last_failure = await self._get_last_failure()
        if last_failure is None:
            return None
        remaining = self.config.recovery_time - (self._clock() - last_failure)
        return max(0.0, remaining)

    async def reset(self) -> None:
        """Manually reset the circuit breaker."""
        try:
            await self._cache.delete(self._state_key)
        except Exception as e:
            logger.warning(f"Circuit breaker '{self.service}' reset failed: {e}")
        await self._reset_failures()
        logger.info(f"Circuit breaker '{self.service}' manually reset")

    async def get_status(self) -> dict[str, Any]:
        """Get current status as dictionary."""
        state = await self.get_state()
        return {
            "service": self.service,
            "state": state.value,
            "failure_count": await self._get_failure_count(),
            "last_failure": await self._get_last_failure(),
            "time_until_recovery": (
                await self.get_time_until_recovery()
                if state == CircuitState.OPEN
                else None
            ),
        }

    @property
    def _state_key(self) -> str:
        return f"circuit_breaker:{self.service}:state"

    @property
    def _failures_key(self) -> str:
        return f"circuit_breaker:{self.service}:failures"

    @property
    def _last_failure_key(self) -> str:
        return f"circuit_breaker:{self.service}:last_failure"
