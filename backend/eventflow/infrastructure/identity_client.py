"""
Admin client for the external identity provider.
Only account deletion is needed by the retention job.
"""

import uuid
from typing import Optional

import httpx

from eventflow.core.exceptions import TransportFailure
from eventflow.services.interfaces.stores import IdentityProvider


class HttpIdentityProvider(IdentityProvider):

    def __init__(
        self,
        admin_url: str,
        service_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=admin_url,
            headers={"Authorization": f"Bearer {service_key}", "apikey": service_key},
            timeout=timeout,
            transport=transport,
        )

    async def delete_user(self, user_id: uuid.UUID) -> None:
        try:
            response = await self._client.delete(f"/admin/users/{user_id}")
        except httpx.HTTPError as e:
            raise TransportFailure(f"Identity provider unreachable: {e}", user_id=str(user_id)) from e

        # Already gone counts as deleted
        if response.status_code == 404:
            return
        if response.is_error:
            raise TransportFailure(
                f"Identity provider refused deletion ({response.status_code})",
                user_id=str(user_id),
            )

    async def aclose(self) -> None:
        await self._client.aclose()
