"""
Tests for the single-use approval token ledger.
"""

from datetime import timedelta

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from eventflow.core.config import Settings
from eventflow.core.timeutils import utcnow
from eventflow.infrastructure.token_ledger import KEY_PREFIX, RedisTokenLedger
from eventflow.services.interfaces.token_ledger import NullTokenLedger
from eventflow.services.ledger_factory import get_token_ledger


class FakeRedis:
    """Implements just SET NX PX and DEL."""

    def __init__(self, broken: bool = False):
        self.store: dict[str, tuple[str, int]] = {}
        self.broken = broken

    async def set(self, key, value, nx=False, px=None):
        if self.broken:
            raise RedisConnectionError("redis down")
        if nx and key in self.store:
            return None
        self.store[key] = (value, px)
        return True

    async def delete(self, key):
        if self.broken:
            raise RedisConnectionError("redis down")
        return 1 if self.store.pop(key, None) else 0


@pytest.mark.asyncio
async def test_first_redemption_wins():
    client = FakeRedis()
    ledger = RedisTokenLedger(client)
    expires_at = utcnow() + timedelta(hours=1)

    assert await ledger.redeem("sig-a", expires_at) is True
    assert await ledger.redeem("sig-a", expires_at) is False
    assert await ledger.redeem("sig-b", expires_at) is True


@pytest.mark.asyncio
async def test_key_lives_until_token_expiry():
    client = FakeRedis()
    ledger = RedisTokenLedger(client)

    await ledger.redeem("sig", utcnow() + timedelta(hours=1))

    _, ttl_ms = client.store[f"{KEY_PREFIX}sig"]
    assert 3_590_000 < ttl_ms <= 3_600_000


@pytest.mark.asyncio
async def test_redis_outage_fails_open():
    ledger = RedisTokenLedger(FakeRedis(broken=True))
    assert await ledger.redeem("sig", utcnow() + timedelta(hours=1)) is True


@pytest.mark.asyncio
async def test_null_ledger_accepts_everything():
    ledger = NullTokenLedger()
    expires_at = utcnow() + timedelta(hours=1)
    assert await ledger.redeem("sig", expires_at) is True
    assert await ledger.redeem("sig", expires_at) is True


@pytest.mark.asyncio
async def test_factory_without_single_use():
    ledger = await get_token_ledger(Settings(APPROVAL_TOKEN_SINGLE_USE=False))
    assert isinstance(ledger, NullTokenLedger)


@pytest.mark.asyncio
async def test_factory_degrades_when_redis_disabled():
    settings = Settings(APPROVAL_TOKEN_SINGLE_USE=True, REDIS_ENABLED=False)
    ledger = await get_token_ledger(settings)
    assert isinstance(ledger, NullTokenLedger)


@pytest.mark.asyncio
async def test_released_signature_can_be_redeemed_again():
    ledger = RedisTokenLedger(FakeRedis())
    expires_at = utcnow() + timedelta(hours=1)

    assert await ledger.redeem("sig", expires_at) is True
    await ledger.release("sig")
    assert await ledger.redeem("sig", expires_at) is True


@pytest.mark.asyncio
async def test_release_during_outage_does_not_raise():
    ledger = RedisTokenLedger(FakeRedis(broken=True))
    await ledger.release("sig")
