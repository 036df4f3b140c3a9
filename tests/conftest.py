"""
Shared fixtures for the Verisoul client tests.

Time is faked through injectable clocks and sleep coroutines; HTTP is faked
with httpx.MockTransport so no test touches the network.
"""

from collections.abc import Callable

import httpx
import pytest
from loguru import logger

from verisoul.services.cache import InMemoryCache

API_KEY = "test-api-key"
SANDBOX_URL = "https://api.sandbox.verisoul.ai"


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Replacement for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class MockApi:
    """
    Scripted HTTP backend.

    Responses are served in order; the last one repeats once the script runs
    out. An exception instance in the script is raised instead of answering.
    """

    def __init__(self, *responses: httpx.Response | Exception | Callable):
        self.responses = list(responses) or [httpx.Response(200, json={})]
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.responses)) - 1
        response = self.responses[index]
        if callable(response) and not isinstance(response, httpx.Response):
            response = response(request)
        if isinstance(response, Exception):
            raise response
        return response

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


def json_response(status_code: int = 200, body=None) -> httpx.Response:
    return httpx.Response(status_code, json={} if body is None else body)


@pytest.fixture
def clock():
    """Fake wall clock."""
    return FakeClock()


@pytest.fixture
def sleep():
    """Recording sleep for retry delays."""
    return RecordingSleep()


@pytest.fixture
def cache(clock):
    """In-memory cache store driven by the fake clock."""
    return InMemoryCache(clock=clock)


@pytest.fixture
def log_messages():
    """Capture library log records emitted during the test."""
    messages: list[str] = []
    logger.enable("verisoul")
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
    logger.disable("verisoul")
