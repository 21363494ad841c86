"""
Pytest fixtures: in-memory stores, a recording mailer, a fixed clock and
an HTTP client wired to the app through dependency overrides.

No database or mail provider is needed; every external collaborator is
replaced behind its interface.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from eventflow.api import dependencies
from eventflow.main import app
from eventflow.services.approval_tokens import ApprovalTokenCodec
from eventflow.services.dispatcher import NotificationDispatcher
from eventflow.services.interfaces.token_ledger import NullTokenLedger
from eventflow.services.notifications import NotificationService
from tests.fakes import (
    LINKS,
    SECRET,
    FakeIdentityProvider,
    InMemoryEventStore,
    InMemoryProfileStore,
    InMemorySubscriptionStore,
    RecordingMailer,
    fixed_clock,
)


@pytest.fixture
def event_store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def subscription_store() -> InMemorySubscriptionStore:
    return InMemorySubscriptionStore()


@pytest.fixture
def profile_store() -> InMemoryProfileStore:
    return InMemoryProfileStore()


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def codec() -> ApprovalTokenCodec:
    return ApprovalTokenCodec(SECRET, clock=fixed_clock)


@pytest.fixture
def notification_service(event_store, subscription_store, mailer, codec) -> NotificationService:
    dispatcher = NotificationDispatcher(mailer, send_timeout=0.5)
    return NotificationService(event_store, subscription_store, dispatcher, codec, LINKS)


@pytest_asyncio.fixture(scope="function")
async def client(
    event_store, subscription_store, profile_store, identity, mailer, codec,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with every external collaborator replaced by a fake."""
    app.dependency_overrides[dependencies.get_event_store] = lambda: event_store
    app.dependency_overrides[dependencies.get_subscription_store] = lambda: subscription_store
    app.dependency_overrides[dependencies.get_profile_store] = lambda: profile_store
    app.dependency_overrides[dependencies.get_identity_provider] = lambda: identity
    app.dependency_overrides[dependencies.get_mailer] = lambda: mailer
    app.dependency_overrides[dependencies.get_ledger] = lambda: NullTokenLedger()
    app.dependency_overrides[dependencies.get_token_codec] = lambda: codec
    app.dependency_overrides[dependencies.get_clock] = lambda: fixed_clock
    app.dependency_overrides[dependencies.get_links] = lambda: LINKS

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()

