"""
Tests for RetryStrategy.

Covers:
- Retry eligibility per error class
- Backoff delay growth, jitter bounds and cap
- Propagation of exhausted and non-API errors
"""

import pytest

from verisoul.services.errors import (
    BusinessLogicError,
    RequestTimeoutError,
    ValidationError,
    VerisoulApiError,
    VerisoulConnectionError,
    error_from_status,
)
from verisoul.services.retry import RetryStrategy

ENDPOINT = "https://api.sandbox.verisoul.ai/phone"


class ScriptedOperation:
    """Async callable raising the scripted errors before returning result."""

    def __init__(self, *errors: Exception, result=None):
        self.errors = list(errors)
        self.result = result if result is not None else {"ok": True}
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


@pytest.fixture
def retry(sleep):
    return RetryStrategy(max_attempts=3, base_delay_ms=1000, sleep=sleep)


class TestExecute:
    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self, retry, sleep):
        operation = ScriptedOperation()

        assert await retry.execute(operation) == {"ok": True}
        assert operation.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failure(self, retry, sleep):
        operation = ScriptedOperation(VerisoulConnectionError.connection_failed(ENDPOINT))

        assert await retry.execute(operation) == {"ok": True}
        assert operation.calls == 2
        assert len(sleep.delays) == 1

    @pytest.mark.asyncio
    async def test_exhausts_attempts_with_growing_delays(self, retry, sleep):
        error = VerisoulApiError.server_error(ENDPOINT, 500, {})
        operation = ScriptedOperation(error, error, error, error)

        with pytest.raises(VerisoulApiError) as exc_info:
            await retry.execute(operation)

        assert exc_info.value is error
        assert operation.calls == 3
        assert len(sleep.delays) == 2
        assert 1.0 <= sleep.delays[0] <= 1.1
        assert 2.0 <= sleep.delays[1] <= 2.2

    @pytest.mark.asyncio
    async def test_succeeds_on_last_attempt_after_connect_errors(self, retry, sleep):
        error = VerisoulConnectionError.network_error(ENDPOINT, "connection refused")
        operation = ScriptedOperation(error, error, result={"session_id": "abc"})

        assert await retry.execute(operation) == {"session_id": "abc"}
        assert operation.calls == 3
        assert 1.0 <= sleep.delays[0] <= 1.1
        assert 2.0 <= sleep.delays[1] <= 2.2

    @pytest.mark.asyncio
    async def test_validation_error_is_not_retried(self, retry, sleep):
        operation = ScriptedOperation(ValidationError("phone_number is invalid"))

        with pytest.raises(ValidationError):
            await retry.execute(operation)

        assert operation.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 404])
    async def test_client_errors_are_not_retried(self, retry, status):
        operation = ScriptedOperation(error_from_status(ENDPOINT, status, {}))

        with pytest.raises(VerisoulApiError):
            await retry.execute(operation)

        assert operation.calls == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            VerisoulApiError.rate_limit_exceeded(ENDPOINT, {}),
            VerisoulApiError.server_error(ENDPOINT, 408, {}),
            VerisoulApiError.server_error(ENDPOINT, 503, {}),
            RequestTimeoutError.timeout(ENDPOINT, 30),
        ],
    )
    async def test_transient_errors_are_retried(self, retry, error):
        operation = ScriptedOperation(error)

        await retry.execute(operation)

        assert operation.calls == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            BusinessLogicError("Business logic error: x", status_code=200),
            VerisoulApiError.invalid_response(ENDPOINT, "not json"),
        ],
    )
    async def test_response_content_errors_are_not_retried(self, retry, error):
        operation = ScriptedOperation(error)

        with pytest.raises(VerisoulApiError):
            await retry.execute(operation)

        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_foreign_exceptions_propagate_immediately(self, retry, sleep):
        operation = ScriptedOperation(RuntimeError("bug"))

        with pytest.raises(RuntimeError):
            await retry.execute(operation)

        assert operation.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_single_attempt_never_sleeps(self, sleep):
        retry = RetryStrategy(max_attempts=1, sleep=sleep)
        operation = ScriptedOperation(VerisoulApiError.server_error(ENDPOINT, 500, {}))

        with pytest.raises(VerisoulApiError):
            await retry.execute(operation)

        assert operation.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_logs_exhaustion(self, retry, log_messages):
        error = VerisoulApiError.server_error(ENDPOINT, 500, {})
        operation = ScriptedOperation(error, error, error)

        with pytest.raises(VerisoulApiError):
            await retry.execute(operation)

        assert any("failed after 3 attempts" in m for m in log_messages)


class TestCalculateDelay:
    def test_exponential_growth_with_bounded_jitter(self):
        retry = RetryStrategy(base_delay_ms=1000, backoff_multiplier=2.0)

        for attempt, base in [(1, 1000), (2, 2000), (3, 4000)]:
            delay = retry.calculate_delay(attempt)
            assert base <= delay <= base * 1.1

    def test_capped_at_max_delay(self):
        retry = RetryStrategy(base_delay_ms=20000, max_delay_ms=30000)
        assert retry.calculate_delay(2) == 30000

    def test_zero_base_delay(self):
        assert RetryStrategy(base_delay_ms=0).calculate_delay(3) == 0


class TestConfig:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_attempts": 0},
            {"base_delay_ms": -1},
            {"backoff_multiplier": 0.5},
            {"max_delay_ms": -1},
        ],
    )
    def test_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            RetryStrategy(**kwargs)

    def test_defaults(self):
        retry = RetryStrategy()

        assert retry.max_attempts == 3
        assert retry.base_delay_ms == 1000
        assert retry.backoff_multiplier == 2.0
        assert retry.max_delay_ms == 30000
