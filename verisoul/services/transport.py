"""
HttpTransport - Single HTTP exchange with the Verisoul API.

Performs exactly one request and turns the outcome into either a decoded
JSON object or a classified VerisoulApiError. No retries, no caching.
"""

import json
from typing import Any

import httpx
from loguru import logger

from verisoul.services.errors import (
    BusinessLogicError,
    RequestTimeoutError,
    VerisoulApiError,
    VerisoulConnectionError,
    error_from_status,
)

JSON_CONTENT_TYPE = "application/json"


class HttpTransport:
    """
    Async HTTP transport with taxonomy-mapped errors.

    Usage:
        transport = HttpTransport(timeout=30, connect_timeout=10)
        data = await transport.get("https://api.sandbox.verisoul.ai/session/abc")
    """

    def __init__(
        self,
        timeout: float = 30.0,
        connect_timeout: float = 10.0,
        headers: dict[str, str] | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        if timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {timeout}")
        if connect_timeout <= 0 or connect_timeout > timeout:
            raise ValueError(
                f"connect_timeout must be > 0 and <= timeout ({timeout}), "
                f"got {connect_timeout}"
            )

        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.headers: dict[str, str] = dict(headers or {})

        # HTTP client (lazy initialization unless injected)
        self._http_client = http_client
        self._owns_client = http_client is None

    def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self._build_timeout(),
                follow_redirects=True,
            )
        return self._http_client

    def _build_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.timeout, connect=self.connect_timeout)

    def set_headers(self, headers: dict[str, str]) -> "HttpTransport":
        self.headers = dict(headers)
        return self

    async def get(
        self,
        url: str,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        return await self.request("GET", url, params=query, headers=headers)

    async def post(
        self,
        url: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        return await self.request("POST", url, json_data=data, headers=headers)

    async def put(
        self,
        url: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        return await self.request("PUT", url, json_data=data, headers=headers)

    async def delete(
        self,
        url: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        return await self.request("DELETE", url, json_data=data, headers=headers)

    async def request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """
        Execute one HTTP request.

        Args:
            method: HTTP verb
            url: Absolute URL
            params: Query parameters; ones already in the URL win
            json_data: JSON body, sent only when non-empty
            headers: Per-request headers, override defaults

        Returns:
            Decoded JSON object

        Raises:
            VerisoulConnectionError: No response (connect failure, timeout, other)
            VerisoulApiError: Non-2xx status, invalid body, or business error
        """
        client = self._get_http_client()
        req_headers = {**self.headers, **(headers or {})}

        try:
            response = await client.request(
                method=method,
                url=url,
                params=self._merge_query_params(url, params),
                headers=req_headers,
                json=json_data or None,
                timeout=self._build_timeout(),
            )

        except httpx.TimeoutException as e:
            raise RequestTimeoutError.timeout(url, self.timeout) from e

        except httpx.ConnectError as e:
            raise VerisoulConnectionError.network_error(url, str(e)) from e

        except Exception as e:
            raise VerisoulConnectionError.connection_failed(url) from e

        logger.debug(f"{method} {url} -> {response.status_code}")
        return self._handle_response(response, url)

    def _handle_response(self, response: httpx.Response, url: str) -> dict[str, Any]:
        if not response.is_success:
            raise error_from_status(
                url, response.status_code, self._decode_error_body(response)
            )

        content_type = response.headers.get("content-type", "")
        if JSON_CONTENT_TYPE not in content_type:
            raise VerisoulApiError.invalid_response(
                url, f"Expected JSON response, got: {content_type}"
            )

        try:
            data = json.loads(response.content)
        except ValueError as e:
            raise VerisoulApiError.invalid_response(
                url, f"Invalid JSON response: {e}"
            ) from e

        if not isinstance(data, dict):
            raise VerisoulApiError.invalid_response(url, "Response is not a JSON object")

        self._validate_business_logic(data, url)
        return data

    @staticmethod
    def _validate_business_logic(data: dict[str, Any], url: str) -> None:
        """Reject 200 responses whose body reports a failure."""
        if data.get("error") is not None:
            error = data["error"]
            message = error if isinstance(error, str) else "Unknown error"
            raise BusinessLogicError(
                f"Business logic error: {message}",
                status_code=200,
                response=data,
                endpoint=url,
            )

        if data.get("success") is False:
            message = _first_present(data, "message", default="Operation failed")
            raise BusinessLogicError(
                f"Operation failed: {message}",
                status_code=200,
                response=data,
                endpoint=url,
            )

        if data.get("status") == "error":
            message = _first_present(
                data, "message", "error_message", default="Unknown error"
            )
            raise BusinessLogicError(
                f"API returned error status: {message}",
                status_code=200,
                response=data,
                endpoint=url,
            )

    @staticmethod
    def _decode_error_body(response: httpx.Response) -> dict[str, Any]:
        try:
            decoded = json.loads(response.content)
        except ValueError:
            return {}
        return decoded if isinstance(decoded, dict) else {}

    @staticmethod
    def _merge_query_params(
        url: str, params: dict[str, Any] | None
    ) -> dict[str, Any] | None:
        if not params:
            return None
        existing = dict(httpx.URL(url).params)
        return {**params, **existing}

    async def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None
            logger.debug("HttpTransport closed")


def _first_present(data: dict[str, Any], *keys: str, default: str) -> Any:
    """Value of the first key that is set and not null; empty strings count."""
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return default
