"""
Verisoul API endpoints and environments.
"""

from enum import Enum
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit


class VerisoulEnvironment(str, Enum):
    """Deployment the client talks to."""

    SANDBOX = "sandbox"
    PRODUCTION = "production"

    @property
    def base_url(self) -> str:
        if self is VerisoulEnvironment.PRODUCTION:
            return "https://api.prod.verisoul.ai"
        return "https://api.sandbox.verisoul.ai"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class ApiEndpoint(Enum):
    """
    Every Verisoul API endpoint with its verb and URL template.

    Templates use {name} placeholders; placeholders inside the query string
    are optional and dropped when no value is supplied.
    """

    # Accounts
    ACCOUNT_GET = (HttpMethod.GET, "/account/{account_id}")
    ACCOUNT_SESSIONS = (HttpMethod.GET, "/account/{account_id}/sessions")
    ACCOUNT_LINKED = (HttpMethod.GET, "/account/{account_id}/accounts-linked")
    ACCOUNT_UPDATE = (HttpMethod.PUT, "/account/{account_id}")
    ACCOUNT_DELETE = (HttpMethod.DELETE, "/account/{account_id}")

    # Sessions
    SESSION_AUTHENTICATE = (HttpMethod.POST, "/session/authenticate")
    SESSION_UNAUTHENTICATED = (HttpMethod.POST, "/session/unauthenticated")
    SESSION_GET = (HttpMethod.GET, "/session/{session_id}")

    # Liveness
    FACE_MATCH_SESSION_START = (
        HttpMethod.GET,
        "/liveness/session?referring_session_id={referring_session_id}",
    )
    ID_CHECK_SESSION_START = (
        HttpMethod.GET,
        "/liveness/session?id=true&referring_session_id={referring_session_id}",
    )
    ENROLL = (HttpMethod.POST, "/liveness/enroll")
    VERIFY_FACE = (HttpMethod.POST, "/liveness/verify-face")
    VERIFY_IDENTITY = (HttpMethod.POST, "/liveness/verify-identity")
    VERIFY_ID = (HttpMethod.POST, "/liveness/verify-id")

    # Phone
    VERIFY_PHONE = (HttpMethod.POST, "/phone")

    # Lists
    LIST_CREATE = (HttpMethod.POST, "/list/{list_name}")
    LIST_GET_ALL = (HttpMethod.GET, "/list")
    LIST_GET = (HttpMethod.GET, "/list/{list_name}")
    LIST_ADD_ACCOUNT = (HttpMethod.POST, "/list/{list_name}/account/{account_id}")
    LIST_DELETE = (HttpMethod.DELETE, "/list/{list_name}")
    LIST_REMOVE_ACCOUNT = (
        HttpMethod.DELETE,
        "/list/{list_name}/account/{account_id}",
    )

    def __init__(self, method: HttpMethod, url_template: str):
        self.method = method
        self.url_template = url_template

    def with_parameters(self, parameters: dict[str, Any] | None = None) -> str:
        """
        Fill placeholders in the URL template.

        Parameters without a matching placeholder are ignored. Query-string
        parameters whose placeholder is still unfilled are removed.
        """
        path = self.url_template
        for key, value in (parameters or {}).items():
            path = path.replace("{" + key + "}", _format_value(value))

        parts = urlsplit(path)
        if not parts.query or "{" not in parts.query:
            return path

        query = [
            (key, value)
            for key, value in parse_qsl(parts.query, keep_blank_values=True)
            if "{" not in value
        ]
        if not query:
            return parts.path
        return f"{parts.path}?{urlencode(query)}"


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
