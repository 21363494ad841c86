"""
Data retention endpoints: the scheduled batch trigger and the one-click
extension link sent in warning emails.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from eventflow.api.dependencies import get_retention_scheduler
from eventflow.api.pages import page
from eventflow.core.exceptions import RecordNotFound, ValidationError
from eventflow.core.logging import get_logger
from eventflow.schemas.retention import RetentionRunResponse
from eventflow.services.retention import RetentionScheduler

logger = get_logger(__name__)
router = APIRouter(tags=["Retention"])


@router.post("/retention/run", response_model=RetentionRunResponse)
async def run_retention(
    scheduler: RetentionScheduler = Depends(get_retention_scheduler),
):
    """
    Warn accounts nearing the retention deadline, then delete expired ones.
    Meant to be called by an external scheduler (e.g. daily cron).
    """
    summary = await scheduler.run()
    return RetentionRunResponse(warned=summary.warned, deleted=summary.deleted, errors=summary.errors)


@router.get("/extend", response_class=HTMLResponse)
async def extend_retention(
    user_id: Optional[str] = Query(None),
    scheduler: RetentionScheduler = Depends(get_retention_scheduler),
):
    """
    Keep an account for another retention period.

    The link carries the bare account id, not a signed token; see DESIGN.md.
    """
    if not user_id:
        return page("Invalid Request", "Missing user ID.", 400)

    try:
        await scheduler.extend_retention(user_id)
    except ValidationError:
        return page("Invalid User ID", "The provided user ID is not valid.", 400)
    except RecordNotFound:
        return page("Account Not Found", "We could not find an account for this link.", 404)
    except Exception as e:
        logger.error("retention_extend_failed", user_id=user_id, error=str(e))
        return page(
            "Error",
            "Failed to extend your data retention. Please try again or contact support.",
            500,
        )

    return page(
        "Data Retention Extended!",
        "Your account and all your data will be kept for another year.",
    )
