"""
One-click moderation endpoint opened from the moderator's email.
"""

from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse, Response

from eventflow.api.dependencies import (
    get_ledger, get_lifecycle_controller, get_links, get_token_codec,
)
from eventflow.api.pages import page
from eventflow.core.exceptions import RecordNotFound, StoreFailure, TokenError, TokenExpired
from eventflow.core.logging import get_logger
from eventflow.core.metrics import record_token_verification
from eventflow.models.event import ApprovalAction
from eventflow.services.approval_tokens import ApprovalTokenCodec
from eventflow.services.interfaces.token_ledger import TokenLedger
from eventflow.services.lifecycle import EventLifecycleController
from eventflow.services.notifications import LinkSettings

logger = get_logger(__name__)
router = APIRouter(tags=["Moderation"])


@router.get("/approve")
async def redeem_approval_token(
    token: Optional[str] = Query(None),
    codec: ApprovalTokenCodec = Depends(get_token_codec),
    ledger: TokenLedger = Depends(get_ledger),
    lifecycle: EventLifecycleController = Depends(get_lifecycle_controller),
    links: LinkSettings = Depends(get_links),
) -> Response:
    """
    Verify a signed approval token and apply its action.

    Approve redirects to the public confirmation page; reject answers with
    a plain confirmation. Expired and invalid links get different pages
    because the fix differs: ask for a new email vs. contact support.
    """
    if not token:
        return page("Invalid Request", "Missing approval token.", 400)

    try:
        claim = codec.verify(token)
    except TokenExpired:
        return page(
            "Link Expired",
            "This approval link has expired. Ask for a new moderation email to act on this event.",
            400,
        )
    except TokenError:
        return page(
            "Invalid Link",
            "This approval link is invalid. Contact support if you believe this is a mistake.",
            400,
        )

    if not await ledger.redeem(claim.signature, claim.expires_at):
        record_token_verification("replayed")
        return page("Link Already Used", "This approval link has already been used.", 400)

    logger.info("approval_token_redeemed", action=claim.action.value, event_id=str(claim.event_id))

    try:
        outcome = await lifecycle.apply(claim.action, claim.event_id)
    except RecordNotFound:
        return page("Event Not Found", "The event no longer exists.", 404)
    except StoreFailure:
        # Nothing was applied; the link must stay usable for a retry
        await ledger.release(claim.signature)
        return page("Error", "Something went wrong. Please try again later.", 500)

    if claim.action is ApprovalAction.APPROVE:
        query = urlencode({"title": outcome.event.title or "Unknown Event"})
        return RedirectResponse(url=f"{links.site('/event-approved')}?{query}", status_code=303)

    return page(
        "Event Rejected",
        f'The event "{outcome.event.title or "Unknown"}" has been rejected.',
    )
