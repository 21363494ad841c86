"""
GDPR-style data retention job.

RETENTION LIFECYCLE
===================

The retention baseline is the latest of: profile creation, last activity,
last retention extension. Per account the state is derived, never stored:

  active        baseline is younger than the warning threshold (11 months)
  warning_due   past the warning threshold, no warning sent since baseline
  warned        warning sent, deletion threshold (12 months) not reached
                or minimum notice period not yet elapsed
  deletion_due  past the deletion threshold and warned long enough ago

Extending resets the baseline to "now" and clears the warning, which moves
the account back to active for another full period.

A run warns first, then deletes. Candidates are processed one at a time;
a failing account is logged and counted and the loop moves on. A failing
candidate query aborts only its own phase.

Deleting an account removes events -> profile -> identity. There is no
compensation: if a later step fails the earlier deletions stand and the
account is reported as an error.
"""

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from html import escape
from typing import Optional

from eventflow.core.exceptions import RecordNotFound, ValidationError
from eventflow.core.logging import get_logger
from eventflow.core.metrics import record_retention_outcome
from eventflow.core.timeutils import Clock, ensure_aware, is_uuid, shift_months, utcnow
from eventflow.models.profile import Profile
from eventflow.services.interfaces.mailer import Mailer, MailMessage
from eventflow.services.interfaces.stores import EventStore, IdentityProvider, ProfileStore
from eventflow.services.notifications import LinkSettings

logger = get_logger(__name__)


class RetentionStatus(str, enum.Enum):
    ACTIVE = "active"
    WARNING_DUE = "warning_due"
    WARNED = "warned"
    DELETION_DUE = "deletion_due"


@dataclass(frozen=True)
class RetentionPolicy:
    warning_after_months: int = 11
    delete_after_months: int = 12
    min_notice: timedelta = timedelta(days=14)


@dataclass
class RetentionSummary:
    warned: int = 0
    deleted: int = 0
    errors: int = 0


def retention_baseline(profile: Profile) -> datetime:
    moments = [
        ensure_aware(m)
        for m in (profile.created_at, profile.last_active_at, profile.retention_extended_at)
        if m is not None
    ]
    return max(moments)


def retention_status(profile: Profile, now: datetime, policy: RetentionPolicy) -> RetentionStatus:
    baseline = retention_baseline(profile)
    if baseline > shift_months(now, -policy.warning_after_months):
        return RetentionStatus.ACTIVE

    warned_at = profile.retention_warning_sent_at
    if warned_at is None or ensure_aware(warned_at) < baseline:
        # A warning from an earlier retention period does not count
        return RetentionStatus.WARNING_DUE

    if baseline <= shift_months(now, -policy.delete_after_months) and \
            ensure_aware(warned_at) <= now - policy.min_notice:
        return RetentionStatus.DELETION_DUE
    return RetentionStatus.WARNED


def render_retention_warning(profile: Profile, extend_url: str) -> MailMessage:
    name = escape(profile.full_name or "Valued User")
    html = (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">'
        '<h1 style="color: #006AA7;">Important Notice About Your Data</h1>'
        f"<p>Dear {name},</p>"
        "<p>It has been almost a year since you last used your account. Inactive "
        "accounts are deleted after 12 months.</p>"
        '<h2 style="color: #dc3545;">Your data will be permanently deleted soon</h2>'
        "<p>This includes your profile information, all events you have created "
        "and your account access.</p>"
        f'<p><a href="{escape(extend_url)}">Keep My Data - Extend for 1 Year</a></p>'
        "</div>"
    )
    return MailMessage(
        to=profile.email,
        subject="Important: Your Data Will Be Deleted Soon",
        html=html,
    )


class RetentionScheduler:

    def __init__(
        self,
        profiles: ProfileStore,
        events: EventStore,
        identity: IdentityProvider,
        mailer: Mailer,
        links: LinkSettings,
        policy: RetentionPolicy = RetentionPolicy(),
        clock: Clock = utcnow,
    ):
        self.profiles = profiles
        self.events = events
        self.identity = identity
        self.mailer = mailer
        self.links = links
        self.policy = policy
        self.clock = clock

    async def _candidates(self, wanted: RetentionStatus) -> list[Profile]:
        now = self.clock()
        cutoff = shift_months(now, -self.policy.warning_after_months)
        inactive = await self.profiles.list_inactive_since(cutoff)
        return [p for p in inactive if retention_status(p, now, self.policy) == wanted]

    async def find_warning_candidates(self) -> list[Profile]:
        return await self._candidates(RetentionStatus.WARNING_DUE)

    async def find_deletion_candidates(self) -> list[Profile]:
        return await self._candidates(RetentionStatus.DELETION_DUE)

    def extend_url(self, profile_id: uuid.UUID) -> str:
        return self.links.api("/extend", user_id=str(profile_id))

    async def send_warning(self, profile: Profile) -> None:
        """
        Email the account owner a one-click extension link. The warning is
        only recorded once the mail provider has accepted the message.
        """
        message = render_retention_warning(profile, self.extend_url(profile.id))
        await self.mailer.send(message)
        await self.profiles.mark_warning_sent(profile.id, self.clock())
        logger.info("retention_warning_sent", user_id=str(profile.id), email=profile.email)

    async def delete_account(self, profile: Profile) -> None:
        """Cascade delete: events, then profile, then identity. Stops at the first failure."""
        user_id = profile.id

        step = "events"
        try:
            deleted_events = await self.events.delete_by_organizer(user_id)
            step = "profile"
            await self.profiles.delete(user_id)
            step = "identity"
            await self.identity.delete_user(user_id)
        except Exception as e:
            logger.error("retention_delete_step_failed", user_id=str(user_id), step=step, error=str(e))
            raise

        logger.info(
            "retention_account_deleted",
            user_id=str(user_id),
            email=profile.email,
            events_deleted=deleted_events,
        )

    async def extend_retention(self, account_id: Optional[str]) -> Profile:
        """
        Reset the retention period for one account. Safe to call repeatedly.

        Raises:
            ValidationError: account_id is not a UUID
            RecordNotFound: no profile with that id
        """
        if not is_uuid(account_id):
            raise ValidationError("The provided user ID is not valid")

        profile_id = uuid.UUID(account_id)
        if not await self.profiles.extend_retention(profile_id, self.clock()):
            raise RecordNotFound("Account not found", user_id=account_id)

        logger.info("retention_extended", user_id=account_id)
        profile = await self.profiles.get(profile_id)
        if profile is None:
            raise RecordNotFound("Account not found", user_id=account_id)
        return profile

    async def _warn_phase(self, summary: RetentionSummary) -> None:
        try:
            candidates = await self.find_warning_candidates()
        except Exception as e:
            summary.errors += 1
            logger.error("retention_warning_query_failed", error=str(e))
            return

        logger.info("retention_warning_candidates", count=len(candidates))
        for profile in candidates:
            try:
                await self.send_warning(profile)
            except Exception as e:
                summary.errors += 1
                logger.error("retention_warning_failed", user_id=str(profile.id), error=str(e))
            else:
                summary.warned += 1

    async def _delete_phase(self, summary: RetentionSummary) -> None:
        try:
            candidates = await self.find_deletion_candidates()
        except Exception as e:
            summary.errors += 1
            logger.error("retention_deletion_query_failed", error=str(e))
            return

        logger.info("retention_deletion_candidates", count=len(candidates))
        for profile in candidates:
            try:
                await self.delete_account(profile)
            except Exception:
                summary.errors += 1
            else:
                summary.deleted += 1

    async def run(self) -> RetentionSummary:
        summary = RetentionSummary()
        await self._warn_phase(summary)
        await self._delete_phase(summary)

        record_retention_outcome("warned", summary.warned)
        record_retention_outcome("deleted", summary.deleted)
        record_retention_outcome("error", summary.errors)
        logger.info(
            "retention_run_completed",
            warned=summary.warned,
            deleted=summary.deleted,
            errors=summary.errors,
        )
        return summary
