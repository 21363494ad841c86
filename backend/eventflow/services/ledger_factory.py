"""
Token ledger factory.
Configures whether approval tokens are single-use.
"""

from eventflow.core.config import Settings
from eventflow.core.logging import get_logger
from eventflow.infrastructure.redis_client import RedisClient
from eventflow.infrastructure.token_ledger import RedisTokenLedger
from eventflow.services.interfaces.token_ledger import NullTokenLedger, TokenLedger

logger = get_logger(__name__)


async def get_token_ledger(settings: Settings) -> TokenLedger:
    """
    Get the configured ledger.

    - APPROVAL_TOKEN_SINGLE_USE off: NullTokenLedger (expiry is the only bound)
    - on, Redis reachable: RedisTokenLedger
    - on, Redis disabled or down: NullTokenLedger, with a warning
    """
    if not settings.APPROVAL_TOKEN_SINGLE_USE:
        return NullTokenLedger()

    client = await RedisClient.get_client(settings)
    if client is None:
        logger.warning("token_ledger_degraded", reason="redis_unavailable")
        return NullTokenLedger()
    return RedisTokenLedger(client)
