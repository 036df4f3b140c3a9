"""
Session endpoints.
"""

from typing import Any

from verisoul.endpoints import ApiEndpoint
from verisoul.services.client import VerisoulClient


class SessionClient(VerisoulClient):
    """Score device sessions, with or without an associated account."""

    async def authenticate(
        self,
        account: dict[str, Any],
        session_id: str,
        accounts_linked: bool = False,
    ) -> dict[str, Any]:
        """
        Authenticate a session against an account.

        Args:
            account: Account payload; must contain at least "id"
            session_id: Session identifier from the client-side SDK
            accounts_linked: Ask for linked accounts in the response
        """
        return await self.call(
            ApiEndpoint.SESSION_AUTHENTICATE,
            {"accounts_linked": accounts_linked},
            {"account": account, "session_id": session_id},
        )

    async def unauthenticated(
        self, session_id: str, accounts_linked: bool = False
    ) -> dict[str, Any]:
        return await self.call(
            ApiEndpoint.SESSION_UNAUTHENTICATED,
            {"accounts_linked": accounts_linked},
            {"session_id": session_id},
        )

    async def get_session(self, session_id: str) -> dict[str, Any]:
        return await self.call(ApiEndpoint.SESSION_GET, {"session_id": session_id})
