"""
SQLAlchemy implementations of the record stores.

Each operation runs in its own short transaction (`sessionmaker.begin()`),
so the retention job can keep going after one account's delete fails.
Database errors surface as StoreFailure.
"""

import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eventflow.core.exceptions import StoreFailure, SubscriptionConflict
from eventflow.core.logging import get_logger
from eventflow.models.event import ApprovalState, Event
from eventflow.models.profile import Profile
from eventflow.models.subscription import NewsletterSubscription
from eventflow.services.interfaces.stores import EventStore, ProfileStore, SubscriptionStore

logger = get_logger(__name__)


class _SqlStore:

    def __init__(self, sessions: async_sessionmaker[AsyncSession]):
        self._sessions = sessions

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._sessions.begin() as session:
                yield session
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            logger.error("store_operation_failed", operation=operation, error=str(e))
            raise StoreFailure() from e


class SqlEventStore(_SqlStore, EventStore):

    async def get(self, event_id: uuid.UUID) -> Optional[Event]:
        async with self._transaction("event_get") as session:
            return await session.get(Event, event_id)

    async def get_in_state(self, event_id: uuid.UUID, state: ApprovalState) -> Optional[Event]:
        async with self._transaction("event_get_in_state") as session:
            result = await session.execute(
                select(Event).where(Event.id == event_id, Event.approval_state == state)
            )
            return result.scalar_one_or_none()

    async def set_approval_state(self, event_id: uuid.UUID, state: ApprovalState) -> Optional[Event]:
        # Single UPDATE ... RETURNING: a concurrently deleted event yields None
        async with self._transaction("event_set_approval_state") as session:
            result = await session.execute(
                update(Event)
                .where(Event.id == event_id)
                .values(approval_state=state, updated_at=func.now())
                .returning(Event)
            )
            return result.scalar_one_or_none()

    async def delete_by_organizer(self, organizer_id: uuid.UUID) -> int:
        async with self._transaction("event_delete_by_organizer") as session:
            result = await session.execute(delete(Event).where(Event.organizer_id == organizer_id))
            return result.rowcount or 0


class SqlSubscriptionStore(_SqlStore, SubscriptionStore):

    async def list_all(self) -> list[NewsletterSubscription]:
        async with self._transaction("subscription_list") as session:
            result = await session.execute(select(NewsletterSubscription))
            return list(result.scalars().all())

    async def add(self, subscription: NewsletterSubscription) -> NewsletterSubscription:
        try:
            async with self._transaction("subscription_add") as session:
                session.add(subscription)
                await session.flush()
                await session.refresh(subscription)
        except IntegrityError as e:
            raise SubscriptionConflict(email=subscription.email) from e
        return subscription


class SqlProfileStore(_SqlStore, ProfileStore):

    async def get(self, profile_id: uuid.UUID) -> Optional[Profile]:
        async with self._transaction("profile_get") as session:
            return await session.get(Profile, profile_id)

    async def list_inactive_since(self, cutoff: datetime) -> list[Profile]:
        baseline = func.greatest(
            Profile.created_at,
            func.coalesce(Profile.last_active_at, Profile.created_at),
            func.coalesce(Profile.retention_extended_at, Profile.created_at),
        )
        async with self._transaction("profile_list_inactive") as session:
            result = await session.execute(
                select(Profile).where(baseline <= cutoff).order_by(Profile.created_at.asc())
            )
            return list(result.scalars().all())

    async def mark_warning_sent(self, profile_id: uuid.UUID, sent_at: datetime) -> None:
        async with self._transaction("profile_mark_warning") as session:
            await session.execute(
                update(Profile)
                .where(Profile.id == profile_id)
                .values(retention_warning_sent_at=sent_at)
            )

    async def extend_retention(self, profile_id: uuid.UUID, extended_at: datetime) -> bool:
        async with self._transaction("profile_extend_retention") as session:
            result = await session.execute(
                update(Profile)
                .where(Profile.id == profile_id)
                .values(retention_extended_at=extended_at, retention_warning_sent_at=None)
            )
            return bool(result.rowcount)

    async def delete(self, profile_id: uuid.UUID) -> None:
        async with self._transaction("profile_delete") as session:
            await session.execute(delete(Profile).where(Profile.id == profile_id))
