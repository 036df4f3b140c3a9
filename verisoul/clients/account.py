"""
Account endpoints.
"""

from typing import Any

from verisoul.endpoints import ApiEndpoint
from verisoul.services.client import VerisoulClient


class AccountClient(VerisoulClient):
    """Read, update and delete end-user accounts."""

    async def get_account(self, account_id: str) -> dict[str, Any]:
        return await self.call(ApiEndpoint.ACCOUNT_GET, {"account_id": account_id})

    async def get_account_sessions(self, account_id: str) -> dict[str, Any]:
        return await self.call(
            ApiEndpoint.ACCOUNT_SESSIONS, {"account_id": account_id}
        )

    async def get_linked_accounts(self, account_id: str) -> dict[str, Any]:
        return await self.call(ApiEndpoint.ACCOUNT_LINKED, {"account_id": account_id})

    async def update_account(
        self, account_id: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        """Update account fields (email, metadata, group, ...)."""
        return await self.call(
            ApiEndpoint.ACCOUNT_UPDATE, {"account_id": account_id}, data
        )

    async def delete_account(self, account_id: str) -> dict[str, Any]:
        return await self.call(ApiEndpoint.ACCOUNT_DELETE, {"account_id": account_id})
