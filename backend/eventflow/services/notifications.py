"""
Notification rounds built on top of the dispatcher.

All user-supplied event fields are HTML-escaped before they are placed in
a message body; subjects are plain text.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from html import escape
from typing import Optional
from urllib.parse import urlencode

from eventflow.core.exceptions import RecordNotFound, ValidationError
from eventflow.core.logging import get_logger
from eventflow.models.event import ApprovalAction, ApprovalState, Event
from eventflow.services.approval_tokens import ApprovalTokenCodec
from eventflow.services.dispatcher import DispatchReport, NotificationDispatcher
from eventflow.services.interfaces.mailer import MailMessage
from eventflow.services.interfaces.stores import EventStore, SubscriptionStore
from eventflow.services.matching import match_subscribers

logger = get_logger(__name__)


@dataclass(frozen=True)
class LinkSettings:
    site_url: str
    public_api_url: str
    admin_email: str

    def site(self, path: str) -> str:
        return f"{self.site_url.rstrip('/')}{path}"

    def api(self, path: str, **params) -> str:
        url = f"{self.public_api_url.rstrip('/')}/api/v1{path}"
        if params:
            url = f"{url}?{urlencode(params)}"
        return url


@dataclass
class SubscriberNotification:
    event_id: uuid.UUID
    matched: int = 0
    report: DispatchReport = field(default_factory=DispatchReport)


def _format_date(moment: Optional[datetime]) -> str:
    if moment is None:
        return ""
    return moment.strftime("%A, %B %d, %Y %H:%M")


def _wrap(body: str) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">'
        f"{body}"
        "</div>"
    )


def render_organizer_confirmation(event: Event, links: LinkSettings, to: str) -> MailMessage:
    body = (
        '<h1 style="color: #28a745;">Your Event is Now Live!</h1>'
        f"<p>Great news! Your event \"<strong>{escape(event.title)}</strong>\" has been approved "
        "and is now visible to everyone.</p>"
        f'<p><a href="{escape(links.site(f"/event/{event.id}"))}">View your event</a></p>'
    )
    return MailMessage(to=to, subject="Your Event Has Been Approved!", html=_wrap(body))


def render_subscriber_alert(event: Event, links: LinkSettings, to: str) -> MailMessage:
    free = '<p style="color: #28a745; font-weight: bold;">FREE EVENT</p>' if event.is_free else ""
    description = f"<p>{escape(event.description)}</p>" if event.description else ""
    body = (
        '<h1 style="color: #006AA7;">New Event Matching Your Interests!</h1>'
        f"<h2>{escape(event.title)}</h2>"
        f"<p><strong>Category:</strong> {escape(event.category)}</p>"
        f"<p><strong>Location:</strong> {escape(event.location)}</p>"
        f"<p><strong>Date:</strong> {_format_date(event.start_datetime)}</p>"
        f"{free}{description}"
        f'<p><a href="{escape(links.site(f"/event/{event.id}"))}">View Event Details</a></p>'
        '<p style="color: #999; font-size: 12px;">You received this email because you subscribed '
        "to notifications for events matching your preferences.</p>"
    )
    return MailMessage(to=to, subject=f"New Event Alert: {event.title}", html=_wrap(body))


def render_moderation_request(
    event: Event,
    approve_url: str,
    reject_url: str,
    ttl_days: int,
    to: str,
) -> MailMessage:
    body = (
        '<h1 style="color: #333;">New Event Submission</h1>'
        f'<h2 style="color: #006AA7;">{escape(event.title)}</h2>'
        f"<p><strong>Category:</strong> {escape(event.category)}<br>"
        f"<strong>Location:</strong> {escape(event.location)}<br>"
        f"<strong>Start:</strong> {_format_date(event.start_datetime)}</p>"
        f"<p><strong>Description:</strong> {escape(event.description or 'No description provided')}</p>"
        f"<p><strong>Organizer:</strong> {escape(event.organizer_email or '')}<br>"
        f"{escape(event.organizer_description or '')}</p>"
        f'<p><a href="{escape(approve_url)}">Approve Event</a> | '
        f'<a href="{escape(reject_url)}">Reject Event</a></p>'
        f'<p style="color: #999; font-size: 12px;">These links expire in {ttl_days} days.</p>'
    )
    return MailMessage(to=to, subject=f"New Event Pending Approval: {event.title}", html=_wrap(body))


class NotificationService:

    def __init__(
        self,
        events: EventStore,
        subscriptions: SubscriptionStore,
        dispatcher: NotificationDispatcher,
        codec: ApprovalTokenCodec,
        links: LinkSettings,
    ):
        self.events = events
        self.subscriptions = subscriptions
        self.dispatcher = dispatcher
        self.codec = codec
        self.links = links

    async def notify_organizer(self, event: Event) -> DispatchReport:
        if not event.organizer_email:
            logger.warning("organizer_email_missing", event_id=str(event.id))
            return DispatchReport()
        return await self.dispatcher.dispatch(
            [event.organizer_email],
            lambda to: render_organizer_confirmation(event, self.links, to),
            kind="organizer",
        )

    async def notify_subscribers(self, event_id: uuid.UUID) -> SubscriberNotification:
        """
        Tell every matching subscriber about an approved event.

        Raises:
            RecordNotFound: no such event, or it is not approved
        """
        event = await self.events.get_in_state(event_id, ApprovalState.APPROVED)
        if event is None:
            raise RecordNotFound("Event not found or not approved", event_id=str(event_id))

        subscriptions = await self.subscriptions.list_all()
        matched = match_subscribers(event, subscriptions)
        logger.info(
            "subscribers_matched",
            event_id=str(event_id),
            total=len(subscriptions),
            matched=len(matched),
        )

        report = await self.dispatcher.dispatch(
            [sub.email for sub in matched],
            lambda to: render_subscriber_alert(event, self.links, to),
            kind="subscriber",
        )
        return SubscriberNotification(event_id=event_id, matched=len(matched), report=report)

    async def request_moderation(self, event_id: uuid.UUID) -> DispatchReport:
        """
        Email the moderators a pending event with one-click approve/reject links.

        Raises:
            RecordNotFound: no such event
            ValidationError: the event has already been moderated
        """
        event = await self.events.get(event_id)
        if event is None:
            raise RecordNotFound("Event not found", event_id=str(event_id))
        if event.approval_state != ApprovalState.PENDING:
            raise ValidationError("Event has already been moderated", event_id=str(event_id))

        approve_url = self.links.api("/approve", token=self.codec.issue(ApprovalAction.APPROVE, event.id))
        reject_url = self.links.api("/approve", token=self.codec.issue(ApprovalAction.REJECT, event.id))
        ttl_days = max(self.codec.default_ttl.days, 1)

        return await self.dispatcher.dispatch(
            [self.links.admin_email],
            lambda to: render_moderation_request(event, approve_url, reject_url, ttl_days, to),
            kind="moderation",
        )
