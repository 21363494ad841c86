"""
Infrastructure layer - external system integrations.
Keeps business logic clean from implementation details.
"""

from .identity_client import HttpIdentityProvider
from .mail_client import HttpMailer
from .redis_client import RedisClient, get_redis_status
from .token_ledger import RedisTokenLedger

__all__ = [
    'HttpIdentityProvider', 'HttpMailer', 'RedisClient', 'RedisTokenLedger',
    'get_redis_status',
]
