"""
Async Redis client used by the single-use token ledger.
Separated from business logic for clean architecture.
"""

from typing import Optional

import redis.asyncio as redis

from eventflow.core.config import Settings
from eventflow.core.logging import get_logger
from eventflow.core.metrics import redis_connection_errors

logger = get_logger(__name__)


class RedisClient:
    """Process-wide Redis connection pool, created lazily."""

    _instance: Optional[redis.Redis] = None

    @classmethod
    async def get_client(cls, settings: Settings) -> Optional[redis.Redis]:
        """Get or create the client. Returns None if Redis is disabled or unreachable."""
        if not settings.REDIS_ENABLED:
            return None

        if cls._instance is None:
            client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30,
            )
            try:
                await client.ping()
            except Exception as e:
                redis_connection_errors.inc()
                logger.error("redis_connection_failed", error=str(e))
                await client.aclose()
                return None
            logger.info("redis_connected", url=settings.REDIS_URL)
            cls._instance = client
        return cls._instance

    @classmethod
    async def close(cls) -> None:
        if cls._instance is not None:
            await cls._instance.aclose()
            cls._instance = None


async def get_redis_status(settings: Settings) -> dict:
    """Redis status for the health endpoint."""
    client = await RedisClient.get_client(settings)
    if not client:
        return {"status": "disabled" if not settings.REDIS_ENABLED else "unavailable"}
    try:
        await client.ping()
        return {"status": "connected"}
    except Exception as e:
        return {"status": "error", "error": str(e)}
