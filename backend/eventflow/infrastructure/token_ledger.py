"""
Redis-backed single-use ledger for approval tokens.

Circuit breaker pattern:
  On Redis failure the ledger "fails open" and accepts the redemption.
  Expiry still bounds every token, so an outage only falls back to the
  baseline (multi-use until expiry) behaviour.
"""

from datetime import datetime

import redis.asyncio as redis

from eventflow.core.logging import get_logger
from eventflow.core.metrics import redis_connection_errors
from eventflow.core.timeutils import utcnow
from eventflow.services.interfaces.token_ledger import TokenLedger

logger = get_logger(__name__)

KEY_PREFIX = "approval-token:redeemed:"


class RedisTokenLedger(TokenLedger):

    def __init__(self, client: redis.Redis):
        self.redis = client

    async def redeem(self, signature: str, expires_at: datetime) -> bool:
        ttl_ms = int((expires_at - utcnow()).total_seconds() * 1000)
        if ttl_ms <= 0:
            # Already expired tokens never reach the ledger; keep the key briefly anyway
            ttl_ms = 1000

        try:
            first = await self.redis.set(f"{KEY_PREFIX}{signature}", "1", nx=True, px=ttl_ms)
        except Exception as e:
            redis_connection_errors.inc()
            logger.error("token_ledger_unavailable", error=str(e))
            return True

        if not first:
            logger.warning("approval_token_replayed")
        return bool(first)

    async def release(self, signature: str) -> None:
        try:
            await self.redis.delete(f"{KEY_PREFIX}{signature}")
        except Exception as e:
            # The key expires with the token anyway
            redis_connection_errors.inc()
            logger.error("token_ledger_release_failed", error=str(e))
