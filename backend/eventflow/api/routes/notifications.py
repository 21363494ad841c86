"""
Notification endpoints: subscriber fan-out and moderation requests.
"""

from fastapi import APIRouter, Depends

from eventflow.api.dependencies import get_links, get_notification_service
from eventflow.schemas.event import EventIdRequest, ModerationRequestResponse, NotifyResponse
from eventflow.services.notifications import LinkSettings, NotificationService

router = APIRouter(tags=["Notifications"])


@router.post("/notify", response_model=NotifyResponse)
async def notify_subscribers(
    request: EventIdRequest,
    notifications: NotificationService = Depends(get_notification_service),
):
    """
    Email every matching subscriber about an approved event.
    Individual send failures are counted, not raised.
    """
    result = await notifications.notify_subscribers(request.event_id)
    return NotifyResponse(
        success=True,
        notified_count=result.report.delivered,
        matched_count=result.matched,
        failed_count=result.report.failed,
    )


@router.post("/moderation/requests", response_model=ModerationRequestResponse)
async def request_moderation(
    request: EventIdRequest,
    notifications: NotificationService = Depends(get_notification_service),
    links: LinkSettings = Depends(get_links),
):
    """Send the moderators an approve/reject email for a pending event."""
    report = await notifications.request_moderation(request.event_id)
    return ModerationRequestResponse(success=report.delivered == 1, recipient=links.admin_email)
