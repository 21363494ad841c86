"""
Redemption ledger for approval tokens.

Approval tokens are bearer capabilities bounded only by their expiry.
A ledger can optionally make them single-use.

Implementations:
- NullTokenLedger: every redemption is accepted (baseline behaviour)
- RedisTokenLedger: SET NX per token signature, expiring with the token;
  DEL releases it when the action fails
"""

from abc import ABC, abstractmethod
from datetime import datetime

class TokenLedger(ABC):

    @abstractmethod
    async def redeem(self, signature: str, expires_at: datetime) -> bool:
        """
        Record a token redemption.

        Args:
            signature: The token's MAC, unique per issued token
            expires_at: When the token stops being valid anyway

        Returns:
            True if this is the first redemption
            False if the token was redeemed before
        """
        pass

    @abstractmethod
    async def release(self, signature: str) -> None:
        """
        Forget a redemption whose action could not be applied, so the
        same link can be retried.
        """
        pass


class NullTokenLedger(TokenLedger):
    """No tracking - expiry is the only replay bound."""

    async def redeem(self, signature: str, expires_at: datetime) -> bool:
        return True

    async def release(self, signature: str) -> None:
        return None
