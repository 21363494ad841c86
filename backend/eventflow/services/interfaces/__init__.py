"""
Service interfaces for dependency inversion.
Allows swapping store, transport and ledger implementations (and fakes in
tests) without changing business logic.
"""

from .mailer import Mailer, MailMessage
from .stores import EventStore, IdentityProvider, ProfileStore, SubscriptionStore
from .token_ledger import NullTokenLedger, TokenLedger

__all__ = [
    'EventStore', 'IdentityProvider', 'ProfileStore', 'SubscriptionStore',
    'Mailer', 'MailMessage', 'NullTokenLedger', 'TokenLedger',
]
