"""
Service layer infrastructure - resilience patterns for Verisoul API calls.

Provides:
- HttpTransport: One HTTP exchange mapped onto the error taxonomy
- RetryStrategy: Exponential backoff with jitter
- CircuitBreaker: Shared, TTL'd failure protection
- InMemoryCache: Default CacheStore behind the breaker
- VerisoulClient: Orchestrator combining all of the above
"""

from verisoul.services.errors import (
    ErrorKind,
    VerisoulApiError,
    VerisoulConnectionError,
    RequestTimeoutError,
    AuthenticationError,
    BadRequestError,
    NotFoundError,
    ValidationError,
    RateLimitError,
    ServerError,
    InvalidResponseError,
    BusinessLogicError,
    CircuitOpenError,
    error_from_status,
)
from verisoul.services.cache import CacheStore, CacheEntry, CacheStats, InMemoryCache
from verisoul.services.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitState,
)
from verisoul.services.retry import RetryStrategy
from verisoul.services.transport import HttpTransport
from verisoul.services.client import VerisoulClient

__all__ = [
    # Errors
    "ErrorKind",
    "VerisoulApiError",
    "VerisoulConnectionError",
    "RequestTimeoutError",
    "AuthenticationError",
    "BadRequestError",
    "NotFoundError",
    "ValidationError",
    "RateLimitError",
    "ServerError",
    "InvalidResponseError",
    "BusinessLogicError",
    "CircuitOpenError",
    "error_from_status",
    # Cache
    "CacheStore",
    "CacheEntry",
    "CacheStats",
    "InMemoryCache",
    # Circuit Breaker
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitState",
    # Retry
    "RetryStrategy",
    # Transport
    "HttpTransport",
    # Client
    "VerisoulClient",
]
