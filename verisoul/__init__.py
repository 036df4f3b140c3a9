"""
Async client for the Verisoul identity verification API.
"""

from loguru import logger

from verisoul.clients import (
    AccountClient,
    FaceMatchClient,
    IDCheckClient,
    ListClient,
    PhoneClient,
    SessionClient,
)
from verisoul.endpoints import ApiEndpoint, HttpMethod, VerisoulEnvironment
from verisoul.sdk import Verisoul
from verisoul.services import (
    CircuitOpenError,
    InMemoryCache,
    VerisoulApiError,
    VerisoulClient,
)
from verisoul.services.client import CLIENT_VERSION
from verisoul.settings import Settings, load_settings

__version__ = CLIENT_VERSION

# Library logging is opt-in: logger.enable("verisoul")
logger.disable("verisoul")

__all__ = [
    "Verisoul",
    "VerisoulEnvironment",
    # Clients
    "VerisoulClient",
    "AccountClient",
    "SessionClient",
    "PhoneClient",
    "ListClient",
    "FaceMatchClient",
    "IDCheckClient",
    # Endpoints
    "ApiEndpoint",
    "HttpMethod",
    # Errors
    "VerisoulApiError",
    "CircuitOpenError",
    # Cache
    "InMemoryCache",
    # Settings
    "Settings",
    "load_settings",
]
