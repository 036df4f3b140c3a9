"""
Endpoint clients for the Verisoul API.

Every client returns the decoded JSON object unchanged.
"""

from verisoul.clients.account import AccountClient
from verisoul.clients.liveness import FaceMatchClient, IDCheckClient, LivenessApiClient
from verisoul.clients.lists import ListClient
from verisoul.clients.phone import PhoneClient
from verisoul.clients.session import SessionClient

__all__ = [
    "AccountClient",
    "SessionClient",
    "PhoneClient",
    "ListClient",
    # Liveness
    "LivenessApiClient",
    "FaceMatchClient",
    "IDCheckClient",
]
