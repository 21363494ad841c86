"""
Dependency wiring.

Every handler gets its collaborators built from the injected Settings, so
tests can swap any store, transport or clock through
app.dependency_overrides instead of patching module globals.
"""

from datetime import timedelta
from typing import AsyncGenerator

from fastapi import Depends

from eventflow.core.config import Settings, get_settings
from eventflow.core.timeutils import Clock, utcnow
from eventflow.db.session import get_sessionmaker
from eventflow.infrastructure.identity_client import HttpIdentityProvider
from eventflow.infrastructure.mail_client import HttpMailer
from eventflow.infrastructure.sql_stores import SqlEventStore, SqlProfileStore, SqlSubscriptionStore
from eventflow.services.approval_tokens import ApprovalTokenCodec
from eventflow.services.dispatcher import NotificationDispatcher
from eventflow.services.interfaces.mailer import Mailer
from eventflow.services.interfaces.stores import (
    EventStore, IdentityProvider, ProfileStore, SubscriptionStore,
)
from eventflow.services.interfaces.token_ledger import TokenLedger
from eventflow.services.ledger_factory import get_token_ledger
from eventflow.services.lifecycle import EventLifecycleController
from eventflow.services.notifications import LinkSettings, NotificationService
from eventflow.services.retention import RetentionPolicy, RetentionScheduler
from eventflow.services.subscription_service import SubscriptionService


def get_clock() -> Clock:
    return utcnow


# Stores

def get_event_store() -> EventStore:
    return SqlEventStore(get_sessionmaker())


def get_subscription_store() -> SubscriptionStore:
    return SqlSubscriptionStore(get_sessionmaker())


def get_profile_store() -> ProfileStore:
    return SqlProfileStore(get_sessionmaker())


# External services

async def get_mailer(settings: Settings = Depends(get_settings)) -> AsyncGenerator[Mailer, None]:
    mailer = HttpMailer(
        api_url=settings.MAIL_API_URL,
        api_key=settings.MAIL_API_KEY,
        sender=settings.MAIL_FROM,
        timeout=settings.NOTIFICATION_SEND_TIMEOUT_SECONDS,
    )
    try:
        yield mailer
    finally:
        await mailer.aclose()


async def get_identity_provider(
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[IdentityProvider, None]:
    identity = HttpIdentityProvider(
        admin_url=settings.IDENTITY_ADMIN_URL,
        service_key=settings.IDENTITY_ADMIN_KEY,
    )
    try:
        yield identity
    finally:
        await identity.aclose()


async def get_ledger(settings: Settings = Depends(get_settings)) -> TokenLedger:
    return await get_token_ledger(settings)


# Services

def get_links(settings: Settings = Depends(get_settings)) -> LinkSettings:
    return LinkSettings(
        site_url=settings.SITE_URL,
        public_api_url=settings.PUBLIC_API_URL,
        admin_email=settings.ADMIN_EMAIL,
    )


def get_token_codec(
    settings: Settings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> ApprovalTokenCodec:
    return ApprovalTokenCodec(
        secret=settings.APPROVAL_TOKEN_SECRET,
        default_ttl=timedelta(hours=settings.APPROVAL_TOKEN_TTL_HOURS),
        clock=clock,
    )


def get_dispatcher(
    mailer: Mailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
) -> NotificationDispatcher:
    return NotificationDispatcher(mailer, send_timeout=settings.NOTIFICATION_SEND_TIMEOUT_SECONDS)


def get_notification_service(
    events: EventStore = Depends(get_event_store),
    subscriptions: SubscriptionStore = Depends(get_subscription_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    codec: ApprovalTokenCodec = Depends(get_token_codec),
    links: LinkSettings = Depends(get_links),
) -> NotificationService:
    return NotificationService(events, subscriptions, dispatcher, codec, links)


def get_lifecycle_controller(
    events: EventStore = Depends(get_event_store),
    notifications: NotificationService = Depends(get_notification_service),
) -> EventLifecycleController:
    return EventLifecycleController(events, notifications)


def get_retention_scheduler(
    profiles: ProfileStore = Depends(get_profile_store),
    events: EventStore = Depends(get_event_store),
    identity: IdentityProvider = Depends(get_identity_provider),
    mailer: Mailer = Depends(get_mailer),
    links: LinkSettings = Depends(get_links),
    settings: Settings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> RetentionScheduler:
    policy = RetentionPolicy(
        warning_after_months=settings.RETENTION_WARNING_MONTHS,
        delete_after_months=settings.RETENTION_PERIOD_MONTHS,
        min_notice=timedelta(days=settings.RETENTION_MIN_NOTICE_DAYS),
    )
    return RetentionScheduler(profiles, events, identity, mailer, links, policy=policy, clock=clock)


def get_subscription_service(
    subscriptions: SubscriptionStore = Depends(get_subscription_store),
) -> SubscriptionService:
    return SubscriptionService(subscriptions)
