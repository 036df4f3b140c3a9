"""
Account list endpoints.
"""

from typing import Any

from verisoul.endpoints import ApiEndpoint
from verisoul.services.client import VerisoulClient


class ListClient(VerisoulClient):
    """Manage named account lists (allow lists, block lists, ...)."""

    async def create_list(self, name: str, description: str) -> dict[str, Any]:
        return await self.call(
            ApiEndpoint.LIST_CREATE,
            {"list_name": name},
            {"list_description": description},
        )

    async def get_all_lists(self) -> dict[str, Any]:
        """All lists; the list entries are under the "lists" key."""
        return await self.call(ApiEndpoint.LIST_GET_ALL)

    async def get_list(self, list_name: str) -> dict[str, Any]:
        return await self.call(ApiEndpoint.LIST_GET, {"list_name": list_name})

    async def add_account_to_list(
        self, list_name: str, account_id: str
    ) -> dict[str, Any]:
        return await self.call(
            ApiEndpoint.LIST_ADD_ACCOUNT,
            {"list_name": list_name, "account_id": account_id},
        )

    async def delete_list(self, list_name: str) -> dict[str, Any]:
        return await self.call(ApiEndpoint.LIST_DELETE, {"list_name": list_name})

    async def remove_account_from_list(
        self, list_name: str, account_id: str
    ) -> dict[str, Any]:
        return await self.call(
            ApiEndpoint.LIST_REMOVE_ACCOUNT,
            {"list_name": list_name, "account_id": account_id},
        )
