"""
HTTP mail provider client (Resend-compatible JSON API).
"""

from typing import Optional

import httpx

from eventflow.core.exceptions import TransportFailure
from eventflow.core.logging import get_logger
from eventflow.services.interfaces.mailer import Mailer, MailMessage

logger = get_logger(__name__)


class HttpMailer(Mailer):

    def __init__(
        self,
        api_url: str,
        api_key: str,
        sender: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.sender = sender
        self._client = httpx.AsyncClient(
            base_url=api_url,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
            transport=transport,
        )

    async def send(self, message: MailMessage) -> str:
        payload = {
            "from": self.sender,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
        try:
            response = await self._client.post("/emails", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportFailure(
                f"Mail provider rejected message ({e.response.status_code})",
                recipient=message.to,
            ) from e
        except httpx.HTTPError as e:
            raise TransportFailure(f"Mail provider unreachable: {e}", recipient=message.to) from e

        return str(response.json().get("id", ""))

    async def aclose(self) -> None:
        await self._client.aclose()
