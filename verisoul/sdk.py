"""
Verisoul - Entry point bundling every endpoint client.

Clients are built on first access and share one configuration, one cache
store (and therefore circuit breaker state) and, when given, one
httpx.AsyncClient.
"""

from collections.abc import Mapping
from typing import Any, TypeVar

import httpx
from loguru import logger

from verisoul.clients import (
    AccountClient,
    FaceMatchClient,
    IDCheckClient,
    ListClient,
    PhoneClient,
    SessionClient,
)
from verisoul.endpoints import VerisoulEnvironment
from verisoul.services.cache import CacheStore, InMemoryCache
from verisoul.services.client import VerisoulClient
from verisoul.settings import Settings, load_settings

C = TypeVar("C", bound=VerisoulClient)


class Verisoul:
    """
    Usage:
        async with Verisoul(api_key="...") as verisoul:
            session = await verisoul.sessions.get_session("abc")
            await verisoul.lists.add_account_to_list("blocked", "user-1")
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
    ):
        if not api_key:
            raise ValueError("API key is required")

        self._api_key = api_key
        self._environment = VerisoulEnvironment(environment)
        self._options: dict[str, Any] = {
            "timeout": timeout,
            "connect_timeout": connect_timeout,
            "retry_attempts": retry_attempts,
            "retry_delay": retry_delay,
            "failure_threshold": failure_threshold,
            "breaker_timeout": breaker_timeout,
            "breaker_recovery_time": breaker_recovery_time,
        }
        self._http_client = http_client
        self.cache = cache if cache is not None else InMemoryCache()

        # Lazy-loaded clients, keyed by class
        self._clients: dict[type[VerisoulClient], VerisoulClient] = {}

    @classmethod
    def create(
        cls,
        api_key: str,
        environment: VerisoulEnvironment = VerisoulEnvironment.SANDBOX,
    ) -> "Verisoul":
        return cls(api_key, environment)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
        cache: CacheStore | None = None,
    ) -> "Verisoul":
        return cls(
            api_key=settings.api_key,
            environment=settings.environment,
            timeout=settings.timeout,
            connect_timeout=settings.connect_timeout,
            retry_attempts=settings.retry_attempts,
            retry_delay=settings.retry_delay_ms,
            http_client=http_client,
            cache=cache,
            failure_threshold=settings.failure_threshold,
            breaker_timeout=settings.breaker_timeout,
            breaker_recovery_time=settings.breaker_recovery_time,
        )

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Verisoul":
        """Build from VERISOUL_* environment variables (and .env)."""
        return cls.from_settings(load_settings(env))

    def _client(self, client_cls: type[C]) -> C:
        client = self._clients.get(client_cls)
        if client is None:
            client = client_cls(
                self._api_key,
                self._environment,
                http_client=self._http_client,
                cache=self.cache,
                **self._options,
            )
            self._clients[client_cls] = client
            logger.debug(f"Created {client_cls.__name__}")
        return client  # type: ignore[return-value]

    @property
    def phone(self) -> PhoneClient:
        return self._client(PhoneClient)

    @property
    def sessions(self) -> SessionClient:
        return self._client(SessionClient)

    @property
    def accounts(self) -> AccountClient:
        return self._client(AccountClient)

    @property
    def lists(self) -> ListClient:
        return self._client(ListClient)

    @property
    def face_match(self) -> FaceMatchClient:
        return self._client(FaceMatchClient)

    @property
    def id_check(self) -> IDCheckClient:
        return self._client(IDCheckClient)

    @property
    def api_key(self) -> str:
        return self._api_key

    def set_api_key(self, api_key: str) -> "Verisoul":
        """Change the API key for this and every already built client."""
        if not api_key:
            raise ValueError("API key is required")
        self._api_key = api_key
        for client in self._clients.values():
            client.set_api_key(api_key)
        return self

    @property
    def environment(self) -> VerisoulEnvironment:
        return self._environment

    def set_environment(self, environment: VerisoulEnvironment) -> "Verisoul":
        self._environment = VerisoulEnvironment(environment)
        for client in self._clients.values():
            client.set_environment(self._environment)
        return self

    async def get_health_status(self) -> dict[str, Any]:
        """Status of every client built so far."""
        return {
            "environment": self._environment.value,
            "clients": {
                client.service_id: await client.get_health_status()
                for client in self._clients.values()
            },
        }

    async def close(self) -> None:
        for client in self._clients.values():
            await client.close()
        self._clients.clear()

    async def __aenter__(self) -> "Verisoul":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
