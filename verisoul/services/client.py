"""
VerisoulClient - Call orchestrator shared by every endpoint client.

Composes:
- HttpTransport for the single HTTP exchange
- RetryStrategy for transient failures
- CircuitBreaker (backed by a CacheStore) for failure protection
"""

from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from loguru import logger

from verisoul.endpoints import ApiEndpoint, VerisoulEnvironment
from verisoul.services.cache import CacheStore, InMemoryCache
from verisoul.services.circuit_breaker import CircuitBreaker, CircuitBreakerConfig
from verisoul.services.errors import VerisoulApiError
from verisoul.services.retry import RetryStrategy
from verisoul.services.transport import HttpTransport

CLIENT_VERSION = "1.0.0"

Dispatch = Callable[[str, dict[str, Any] | None], Awaitable[dict[str, Any]]]


class VerisoulClient:
    """
    Base client for the Verisoul API.

    Each instance owns one retry strategy and one circuit breaker keyed by
    its class name; the cache store behind the breaker may be shared.

    Usage:
        class PhoneClient(VerisoulClient):
            async def verify_phone(self, phone_number: str) -> dict[str, Any]:
                return await self.call(
                    ApiEndpoint.VERIFY_PHONE, data={"phone_number": phone_number}
                )

        async with PhoneClient(api_key="...") as phone:
            result = await phone.verify_phone("+15551234567")
    """

    def __init__(
        self,
        api_key: str,
        environment: VerisoulEnvironment = VerisoulEnvironment.SANDBOX,
        timeout: float = 30,
        connect_timeout: float = 10,
        retry_attempts: int = 3,
        retry_delay: int = 1000,
        http_client: httpx.AsyncClient | None = None,
        cache: CacheStore | None = None,
        failure_threshold: int = 5,
        breaker_timeout: float | None = None,
        breaker_recovery_time: float = 300,
        transport: HttpTransport | None = None,
    ):
        self._validate_params(api_key, timeout, connect_timeout)

        self._api_key = api_key
        self._environment = VerisoulEnvironment(environment)
        self.timeout = timeout
        self.connect_timeout = connect_timeout

        self.retry_strategy = RetryStrategy(
            max_attempts=retry_attempts,
            base_delay_ms=retry_delay,
        )

        self.cache = cache if cache is not None else InMemoryCache()
        self.circuit_breaker = CircuitBreaker(
            service=self.service_id,
            cache=self.cache,
            config=CircuitBreakerConfig(
                failure_threshold=failure_threshold,
                timeout_seconds=breaker_timeout if breaker_timeout is not None else timeout,
                recovery_time=breaker_recovery_time,
            ),
        )

        self.headers = self._build_default_headers()
        self.transport = transport or HttpTransport(
            timeout=timeout,
            connect_timeout=connect_timeout,
            http_client=http_client,
        )
        self.transport.set_headers(self.headers)

    @classmethod
    def create(
        cls,
        api_key: str,
        environment: VerisoulEnvironment = VerisoulEnvironment.SANDBOX,
    ) -> "VerisoulClient":
        return cls(api_key, environment)

    @property
    def service_id(self) -> str:
        """Circuit breaker key for this client."""
        return type(self).__name__

    @property
    def api_key(self) -> str:
        return self._api_key

    def set_api_key(self, api_key: str) -> "VerisoulClient":
        if not api_key:
            raise ValueError("API key is required")
        self._api_key = api_key
        self.headers = self._build_default_headers()
        self.transport.set_headers(self.headers)
        return self

    @property
    def environment(self) -> VerisoulEnvironment:
        return self._environment

    def set_environment(self, environment: VerisoulEnvironment) -> "VerisoulClient":
        self._environment = VerisoulEnvironment(environment)
        return self

    @property
    def base_url(self) -> str:
        return self._environment.base_url

    async def call(
        self,
        endpoint: ApiEndpoint,
        parameters: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Call an API endpoint through breaker and retry.

        Args:
            endpoint: Endpoint descriptor (verb + URL template)
            parameters: Values for the URL template placeholders
            data: Query parameters for GET, JSON body otherwise

        Returns:
            Decoded JSON object

        Raises:
            CircuitOpenError: If the circuit breaker is open
            VerisoulApiError: For any classified API failure
            ValueError: If the endpoint uses an unsupported HTTP verb
        """
        path = endpoint.with_parameters(parameters)
        dispatch = self._resolve_dispatch(endpoint.method)

        async def attempt() -> dict[str, Any]:
            return await dispatch(self.base_url + path, data)

        async def operation() -> dict[str, Any]:
            return await self.retry_strategy.execute(attempt)

        result = await self.circuit_breaker.call(operation)

        if not isinstance(result, dict):
            raise VerisoulApiError.invalid_response(
                self.base_url + path, "Response is not a JSON object"
            )
        return result

    # Raw verbs: retried, not breaker-protected

    async def get(
        self,
        endpoint: str,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        url = self.base_url + endpoint
        return await self.retry_strategy.execute(
            lambda: self.transport.get(url, query, headers)
        )

    async def post(
        self,
        endpoint: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        url = self.base_url + endpoint
        return await self.retry_strategy.execute(
            lambda: self.transport.post(url, data, headers)
        )

    async def put(
        self,
        endpoint: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        url = self.base_url + endpoint
        return await self.retry_strategy.execute(
            lambda: self.transport.put(url, data, headers)
        )

    async def delete(
        self,
        endpoint: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        url = self.base_url + endpoint
        return await self.retry_strategy.execute(
            lambda: self.transport.delete(url, data, headers)
        )

    def _resolve_dispatch(self, method: Any) -> Dispatch:
        verb = str(getattr(method, "value", method)).upper()
        dispatchers: dict[str, Dispatch] = {
            "GET": self.transport.get,
            "POST": self.transport.post,
            "PUT": self.transport.put,
            "DELETE": self.transport.delete,
        }
        if verb not in dispatchers:
            raise ValueError(f"Unsupported HTTP method: {verb}")
        return dispatchers[verb]

    @staticmethod
    def _validate_params(api_key: str, timeout: float, connect_timeout: float) -> None:
        if not api_key:
            raise ValueError("API key is required")
        if timeout < 1 or timeout > 300:
            raise ValueError("Timeout must be between 1 and 300 seconds")
        if connect_timeout <= 0 or connect_timeout > timeout:
            raise ValueError("Connect timeout must be positive and <= timeout")

    def _build_default_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "x-api-key": self._api_key,
            "User-Agent": f"Verisoul-Python/{CLIENT_VERSION}",
            "X-Client-Version": CLIENT_VERSION,
        }

    async def close(self) -> None:
        """Close the transport and its HTTP client."""
        await self.transport.close()
        logger.debug(f"{self.service_id} closed")

    async def __aenter__(self) -> "VerisoulClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def get_health_status(self) -> dict[str, Any]:
        """Breaker status plus environment details."""
        return {
            "service": self.service_id,
            "environment": self._environment.value,
            "base_url": self.base_url,
            "circuit_breaker": await self.circuit_breaker.get_status(),
        }
