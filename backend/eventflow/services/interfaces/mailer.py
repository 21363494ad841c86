"""
Outbound mail interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class MailMessage:
    to: str
    subject: str
    html: str


class Mailer(ABC):

    @abstractmethod
    async def send(self, message: MailMessage) -> str:
        """
        Hand one message to the mail provider.

        Returns:
            The provider's message id (accepted/queued, not delivered)

        Raises:
            TransportFailure: the provider refused the message or was unreachable
        """
        pass
