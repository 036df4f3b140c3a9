"""
Liveness endpoints: face match and ID check.

Both flows start a liveness session, verify the captured media and can
enroll the verified face against an account.
"""

from typing import Any

from verisoul.endpoints import ApiEndpoint
from verisoul.services.client import VerisoulClient


class LivenessApiClient(VerisoulClient):
    """Shared biometric operations."""

    async def enroll(self, session_id: str, account_id: str) -> dict[str, Any]:
        return await self.call(
            ApiEndpoint.ENROLL,
            data={"session_id": session_id, "account_id": account_id},
        )


class FaceMatchClient(LivenessApiClient):
    async def session(self, referring_session_id: str | None = None) -> dict[str, Any]:
        """Start a face match session, optionally tied to a device session."""
        params = {}
        if referring_session_id is not None:
            params["referring_session_id"] = referring_session_id
        return await self.call(ApiEndpoint.FACE_MATCH_SESSION_START, params)

    async def verify(self, session_id: str) -> dict[str, Any]:
        return await self.call(ApiEndpoint.VERIFY_FACE, data={"session_id": session_id})

    async def verify_identity(self, session_id: str, account_id: str) -> dict[str, Any]:
        """Match the session's face against the face enrolled for account_id."""
        return await self.call(
            ApiEndpoint.VERIFY_IDENTITY,
            data={"session_id": session_id, "account_id": account_id},
        )


class IDCheckClient(LivenessApiClient):
    async def session(self, referring_session_id: str | None = None) -> dict[str, Any]:
        """Start an ID document check session."""
        params: dict[str, Any] = {"id": True}
        if referring_session_id is not None:
            params["referring_session_id"] = referring_session_id
        return await self.call(ApiEndpoint.ID_CHECK_SESSION_START, params)

    async def verify(self, session_id: str) -> dict[str, Any]:
        return await self.call(ApiEndpoint.VERIFY_ID, data={"session_id": session_id})
