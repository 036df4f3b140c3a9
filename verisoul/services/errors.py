"""
Service layer exceptions.

Every failure surfaced by the client is a VerisoulApiError subclass carrying
the endpoint, the HTTP status (0 when there was no response) and the decoded
response body when one was available.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Classification of API failures."""

    CONNECTION = "connection"
    TIMEOUT = "timeout"
    AUTHENTICATION = "authentication"
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    INVALID_RESPONSE = "invalid_response"
    BUSINESS_LOGIC = "business_logic"
    CIRCUIT_OPEN = "circuit_open"


# 4xx codes that are still worth another attempt
RETRYABLE_CLIENT_STATUSES = frozenset({408, 429})


class VerisoulApiError(Exception):
    """Base exception for Verisoul API errors."""

    kind: ErrorKind = ErrorKind.SERVER_ERROR

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        response: dict[str, Any] | None = None,
        endpoint: str | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response = response or {}
        self.endpoint = endpoint
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        """Whether another attempt could reasonably succeed."""
        if self.kind in (ErrorKind.CONNECTION, ErrorKind.TIMEOUT):
            return True
        # Response-content failures stay final even while attempts remain
        if self.kind in (
            ErrorKind.VALIDATION,
            ErrorKind.INVALID_RESPONSE,
            ErrorKind.BUSINESS_LOGIC,
            ErrorKind.CIRCUIT_OPEN,
        ):
            return False
        if 400 <= self.status_code < 500:
            return self.status_code in RETRYABLE_CLIENT_STATUSES
        return self.status_code >= 500

    def to_dict(self) -> dict[str, Any]:
        """Error details for logging."""
        return {
            "message": self.message,
            "status_code": self.status_code,
            "endpoint": self.endpoint,
            "response": self.response,
            "kind": self.kind.value,
        }

    @classmethod
    def authentication_failed(cls, endpoint: str) -> "AuthenticationError":
        return AuthenticationError(
            "Authentication failed for Verisoul API",
            status_code=401,
            endpoint=endpoint,
        )

    @classmethod
    def bad_request(cls, endpoint: str, response: dict[str, Any]) -> "BadRequestError":
        message = "Bad request to Verisoul API"
        error = response.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            message = error["message"]
        return BadRequestError(
            message, status_code=400, response=response, endpoint=endpoint
        )

    @classmethod
    def not_found(cls, endpoint: str, response: dict[str, Any]) -> "NotFoundError":
        return NotFoundError(
            "Resource not found", status_code=404, response=response, endpoint=endpoint
        )

    @classmethod
    def validation_failed(
        cls, endpoint: str, response: dict[str, Any]
    ) -> "ValidationError":
        message = response.get("message")
        return ValidationError(
            message if isinstance(message, str) else "Validation failed",
            response=response,
            endpoint=endpoint,
        )

    @classmethod
    def rate_limit_exceeded(
        cls, endpoint: str, response: dict[str, Any]
    ) -> "RateLimitError":
        return RateLimitError(
            "Rate limit exceeded for Verisoul API",
            status_code=429,
            response=response,
            endpoint=endpoint,
        )

    @classmethod
    def server_error(
        cls, endpoint: str, status_code: int, response: dict[str, Any]
    ) -> "ServerError":
        return ServerError(
            "Verisoul API server error",
            status_code=status_code,
            response=response,
            endpoint=endpoint,
        )

    @classmethod
    def invalid_response(cls, endpoint: str, reason: str) -> "InvalidResponseError":
        return InvalidResponseError(
            f"Invalid response from Verisoul API: {reason}", endpoint=endpoint
        )


class VerisoulConnectionError(VerisoulApiError):
    """The request never produced an HTTP response."""

    kind = ErrorKind.CONNECTION

    @classmethod
    def connection_failed(cls, endpoint: str) -> "VerisoulConnectionError":
        return cls(
            f"Failed to connect to Verisoul API at endpoint: {endpoint}",
            endpoint=endpoint,
        )

    @classmethod
    def network_error(cls, endpoint: str, error: str) -> "VerisoulConnectionError":
        return cls(
            f"Network error connecting to Verisoul API: {error}",
            endpoint=endpoint,
        )


class RequestTimeoutError(VerisoulConnectionError):
    """Request timed out."""

    kind = ErrorKind.TIMEOUT

    @classmethod
    def timeout(cls, endpoint: str, timeout: float) -> "RequestTimeoutError":
        return cls(
            f"Connection to Verisoul API timed out after {timeout:g} seconds",
            endpoint=endpoint,
        )

    @classmethod
    def operation_timed_out(
        cls, duration: float, endpoint: str | None = None
    ) -> "RequestTimeoutError":
        return cls(
            f"Operation timed out after {duration:.2f} seconds",
            status_code=504,
            endpoint=endpoint,
        )


class AuthenticationError(VerisoulApiError):
    """API key rejected (401)."""

    kind = ErrorKind.AUTHENTICATION


class BadRequestError(VerisoulApiError):
    """Malformed request (400)."""

    kind = ErrorKind.BAD_REQUEST


class NotFoundError(VerisoulApiError):
    """Resource does not exist (404)."""

    kind = ErrorKind.NOT_FOUND


class ValidationError(VerisoulApiError):
    """Field-level validation failure (422)."""

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        response: dict[str, Any] | None = None,
        endpoint: str | None = None,
    ):
        self.field = field
        self.value = value
        if response is None and field is not None:
            response = {"field": field, "value": value}
        super().__init__(
            message, status_code=422, response=response, endpoint=endpoint
        )

    @classmethod
    def invalid_field(cls, field: str, value: Any, reason: str) -> "ValidationError":
        return cls(f"Invalid {field}: {reason}", field=field, value=value)

    @classmethod
    def missing_field(cls, field: str) -> "ValidationError":
        return cls(f"Missing required field: {field}", field=field)


class RateLimitError(VerisoulApiError):
    """Rate limit exceeded (429)."""

    kind = ErrorKind.RATE_LIMITED


class ServerError(VerisoulApiError):
    """Any other non-2xx status."""

    kind = ErrorKind.SERVER_ERROR


class InvalidResponseError(VerisoulApiError):
    """Response body is not a JSON object."""

    kind = ErrorKind.INVALID_RESPONSE


class BusinessLogicError(VerisoulApiError):
    """HTTP 200 whose body reports a failure."""

    kind = ErrorKind.BUSINESS_LOGIC


class CircuitOpenError(VerisoulApiError):
    """Circuit breaker is open, request blocked."""

    kind = ErrorKind.CIRCUIT_OPEN

    def __init__(self, service: str, reset_after_seconds: float | None = None):
        self.service = service
        self.reset_after_seconds = reset_after_seconds
        message = f"Circuit breaker is OPEN for service: {service}"
        if reset_after_seconds is not None:
            message += f", retry after {reset_after_seconds:.1f}s"
        super().__init__(message, status_code=503)


def error_from_status(
    endpoint: str, status_code: int, response: dict[str, Any]
) -> VerisoulApiError:
    """Map a non-2xx HTTP status onto the error taxonomy."""
    if status_code == 401:
        return VerisoulApiError.authentication_failed(endpoint)
    if status_code == 400:
        return VerisoulApiError.bad_request(endpoint, response)
    if status_code == 404:
        return VerisoulApiError.not_found(endpoint, response)
    if status_code == 422:
        return VerisoulApiError.validation_failed(endpoint, response)
    if status_code == 429:
        return VerisoulApiError.rate_limit_exceeded(endpoint, response)
    return VerisoulApiError.server_error(endpoint, status_code, response)
