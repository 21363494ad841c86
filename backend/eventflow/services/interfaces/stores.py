"""
Record store interfaces.

The moderation pipeline only needs a handful of predicate queries, so the
stores are kept deliberately narrow. SQLAlchemy implementations live in
eventflow.infrastructure.sql_stores; tests substitute in-memory fakes.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from eventflow.models.event import ApprovalState, Event
from eventflow.models.profile import Profile
from eventflow.models.subscription import NewsletterSubscription


class EventStore(ABC):

    @abstractmethod
    async def get(self, event_id: uuid.UUID) -> Optional[Event]:
        """Fetch an event by id, whatever its approval state."""
        pass

    @abstractmethod
    async def get_in_state(self, event_id: uuid.UUID, state: ApprovalState) -> Optional[Event]:
        """Fetch an event only if it is currently in `state`."""
        pass

    @abstractmethod
    async def set_approval_state(self, event_id: uuid.UUID, state: ApprovalState) -> Optional[Event]:
        """
        Set the approval state in a single conditional update.

        Returns:
            The updated event, or None if no row with that id exists
        """
        pass

    @abstractmethod
    async def delete_by_organizer(self, organizer_id: uuid.UUID) -> int:
        """Delete every event owned by an organizer. Returns rows deleted."""
        pass


class SubscriptionStore(ABC):

    @abstractmethod
    async def list_all(self) -> list[NewsletterSubscription]:
        pass

    @abstractmethod
    async def add(self, subscription: NewsletterSubscription) -> NewsletterSubscription:
        """
        Insert a subscription.

        Raises:
            SubscriptionConflict: the email is already subscribed
        """
        pass


class ProfileStore(ABC):

    @abstractmethod
    async def get(self, profile_id: uuid.UUID) -> Optional[Profile]:
        pass

    @abstractmethod
    async def list_inactive_since(self, cutoff: datetime) -> list[Profile]:
        """
        Profiles whose retention baseline (latest of created, last active
        and extended) is at or before `cutoff`.
        """
        pass

    @abstractmethod
    async def mark_warning_sent(self, profile_id: uuid.UUID, sent_at: datetime) -> None:
        pass

    @abstractmethod
    async def extend_retention(self, profile_id: uuid.UUID, extended_at: datetime) -> bool:
        """
        Reset the retention baseline and clear any pending warning.

        Returns:
            False if the profile does not exist
        """
        pass

    @abstractmethod
    async def delete(self, profile_id: uuid.UUID) -> None:
        pass


class IdentityProvider(ABC):
    """Admin side of the external identity provider."""

    @abstractmethod
    async def delete_user(self, user_id: uuid.UUID) -> None:
        """
        Raises:
            TransportFailure: the provider rejected or did not answer
        """
        pass
