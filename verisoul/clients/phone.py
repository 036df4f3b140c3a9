"""
Phone verification endpoint.
"""

from typing import Any

from verisoul.endpoints import ApiEndpoint
from verisoul.services.client import VerisoulClient


class PhoneClient(VerisoulClient):
    async def verify_phone(self, phone_number: str) -> dict[str, Any]:
        return await self.call(
            ApiEndpoint.VERIFY_PHONE, data={"phone_number": phone_number}
        )
