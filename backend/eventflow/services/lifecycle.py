"""
Event moderation state machine.

  pending --approve--> approved   (organizer + subscribers notified, best effort)
  pending --reject---> rejected   (nothing sent)

The state update is the durable outcome. Notification rounds run after it
and can fail without undoing it; their results are returned so callers can
report them. The controller does not require the event to be pending:
setting the same state twice is harmless, and approval links are bounded
by their expiry.
"""

import asyncio
import uuid
from dataclasses import dataclass
from typing import Optional

from eventflow.core.exceptions import RecordNotFound
from eventflow.core.logging import get_logger
from eventflow.core.metrics import record_moderation_action
from eventflow.models.event import ApprovalAction, ApprovalState, Event
from eventflow.services.dispatcher import DispatchReport
from eventflow.services.interfaces.stores import EventStore
from eventflow.services.notifications import NotificationService, SubscriberNotification

logger = get_logger(__name__)


@dataclass
class ModerationOutcome:
    action: ApprovalAction
    event: Event
    organizer: Optional[DispatchReport] = None
    subscribers: Optional[SubscriberNotification] = None
    notification_errors: int = 0


class EventLifecycleController:

    def __init__(self, events: EventStore, notifications: NotificationService):
        self.events = events
        self.notifications = notifications

    async def _transition(self, event_id: uuid.UUID, action: ApprovalAction) -> Event:
        try:
            event = await self.events.set_approval_state(event_id, action.target_state)
        except Exception:
            record_moderation_action(action.value, "error")
            raise

        if event is None:
            record_moderation_action(action.value, "not_found")
            logger.warning("moderation_event_not_found", action=action.value, event_id=str(event_id))
            raise RecordNotFound("Event not found", event_id=str(event_id))

        record_moderation_action(action.value, "success")
        return event

    async def approve(self, event_id: uuid.UUID) -> ModerationOutcome:
        event = await self._transition(event_id, ApprovalAction.APPROVE)
        logger.info("event_approved", event_id=str(event_id), title=event.title)

        outcome = ModerationOutcome(action=ApprovalAction.APPROVE, event=event)
        organizer, subscribers = await asyncio.gather(
            self.notifications.notify_organizer(event),
            self.notifications.notify_subscribers(event.id),
            return_exceptions=True,
        )

        if isinstance(organizer, Exception):
            outcome.notification_errors += 1
            logger.error("organizer_notification_failed", event_id=str(event_id), error=str(organizer))
        else:
            outcome.organizer = organizer

        if isinstance(subscribers, Exception):
            outcome.notification_errors += 1
            logger.error("subscriber_notification_failed", event_id=str(event_id), error=str(subscribers))
        else:
            outcome.subscribers = subscribers

        return outcome

    async def reject(self, event_id: uuid.UUID) -> ModerationOutcome:
        event = await self._transition(event_id, ApprovalAction.REJECT)
        logger.info("event_rejected", event_id=str(event_id), title=event.title)
        return ModerationOutcome(action=ApprovalAction.REJECT, event=event)

    async def apply(self, action: ApprovalAction, event_id: uuid.UUID) -> ModerationOutcome:
        if action is ApprovalAction.APPROVE:
            return await self.approve(event_id)
        return await self.reject(event_id)
