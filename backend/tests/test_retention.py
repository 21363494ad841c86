"""
Tests for the retention job: candidate selection, warning, cascade delete
and extension.
"""

import uuid
from datetime import timedelta

import pytest

from eventflow.core.exceptions import RecordNotFound, ValidationError
from eventflow.core.timeutils import shift_months
from eventflow.services.retention import (
    RetentionPolicy,
    RetentionScheduler,
    RetentionStatus,
    retention_status,
)
from tests.fakes import LINKS, NOW, fixed_clock, make_event, make_profile

WARNING_CUTOFF = shift_months(NOW, -11)
DELETION_CUTOFF = shift_months(NOW, -12)


def stale_profile(**overrides):
    """Profile whose baseline lies just past the warning threshold."""
    fields = dict(
        created_at=WARNING_CUTOFF - timedelta(days=60),
        last_active_at=WARNING_CUTOFF - timedelta(days=1),
    )
    fields.update(overrides)
    return make_profile(**fields)


def expired_profile(**overrides):
    """Past the deletion threshold and warned three weeks ago."""
    fields = dict(
        created_at=shift_months(NOW, -13),
        last_active_at=None,
        retention_warning_sent_at=NOW - timedelta(days=21),
    )
    fields.update(overrides)
    return make_profile(**fields)


@pytest.fixture
def scheduler(profile_store, event_store, identity, mailer) -> RetentionScheduler:
    return RetentionScheduler(
        profile_store, event_store, identity, mailer, LINKS, clock=fixed_clock,
    )


# --------------------------------------------------------------- status

def test_recently_active_account_is_active():
    profile = make_profile(last_active_at=NOW - timedelta(days=3))
    assert retention_status(profile, NOW, RetentionPolicy()) == RetentionStatus.ACTIVE


def test_warning_threshold_uses_calendar_months():
    on_the_edge = make_profile(created_at=WARNING_CUTOFF)
    just_inside = make_profile(created_at=WARNING_CUTOFF + timedelta(seconds=1))

    assert retention_status(on_the_edge, NOW, RetentionPolicy()) == RetentionStatus.WARNING_DUE
    assert retention_status(just_inside, NOW, RetentionPolicy()) == RetentionStatus.ACTIVE


def test_warning_from_previous_period_does_not_count():
    profile = stale_profile(retention_warning_sent_at=WARNING_CUTOFF - timedelta(days=30))
    assert retention_status(profile, NOW, RetentionPolicy()) == RetentionStatus.WARNING_DUE


def test_deletion_waits_for_minimum_notice():
    profile = expired_profile(retention_warning_sent_at=NOW - timedelta(days=3))
    assert retention_status(profile, NOW, RetentionPolicy()) == RetentionStatus.WARNED


def test_expired_and_warned_account_is_due_for_deletion():
    assert retention_status(expired_profile(), NOW, RetentionPolicy()) == RetentionStatus.DELETION_DUE


def test_extension_resets_baseline():
    profile = expired_profile(retention_extended_at=NOW - timedelta(days=1))
    assert retention_status(profile, NOW, RetentionPolicy()) == RetentionStatus.ACTIVE


# ------------------------------------------------------------- warnings

@pytest.mark.asyncio
async def test_stale_account_is_warned_once(scheduler, profile_store, mailer):
    profile = profile_store.add(stale_profile())

    assert [p.id for p in await scheduler.find_warning_candidates()] == [profile.id]

    await scheduler.send_warning(profile)

    assert profile.retention_warning_sent_at == NOW
    assert await scheduler.find_warning_candidates() == []
    message = mailer.sent[0]
    assert message.to == profile.email
    assert f"https://api.example.com/api/v1/extend?user_id={profile.id}" in message.html


@pytest.mark.asyncio
async def test_failed_warning_is_not_recorded(scheduler, profile_store, mailer):
    profile = profile_store.add(stale_profile())
    mailer.fail_for.add(profile.email)

    summary = await scheduler.run()

    assert summary.warned == 0
    assert summary.errors == 1
    assert profile.retention_warning_sent_at is None


@pytest.mark.asyncio
async def test_warning_escapes_display_name(scheduler, profile_store, mailer):
    profile = profile_store.add(stale_profile(full_name="<b>Mallory</b>"))
    await scheduler.send_warning(profile)
    assert "<b>Mallory</b>" not in mailer.sent[0].html


# ------------------------------------------------------------- deletion

@pytest.mark.asyncio
async def test_deletion_cascades_events_profile_identity(
    scheduler, profile_store, event_store, identity,
):
    profile = profile_store.add(expired_profile())
    event_store.add(make_event(organizer_id=profile.id))
    event_store.add(make_event(organizer_id=profile.id))
    bystander = event_store.add(make_event())

    summary = await scheduler.run()

    assert summary.deleted == 1
    assert summary.errors == 0
    assert profile.id not in profile_store.profiles
    assert list(event_store.events) == [bystander.id]
    assert identity.deleted == [profile.id]


@pytest.mark.asyncio
async def test_recently_extended_account_survives(scheduler, profile_store, identity):
    profile = profile_store.add(expired_profile(retention_extended_at=NOW - timedelta(days=1)))

    summary = await scheduler.run()

    assert summary.deleted == 0
    assert profile.id in profile_store.profiles
    assert identity.deleted == []


@pytest.mark.asyncio
async def test_partial_failures_are_counted_and_the_run_continues(
    scheduler, profile_store, event_store, identity,
):
    broken_events = profile_store.add(expired_profile(email="a@example.com"))
    broken_identity = profile_store.add(expired_profile(email="b@example.com"))
    healthy = profile_store.add(expired_profile(email="c@example.com"))
    event_store.fail_delete_for.add(broken_events.id)
    identity.fail_for.add(broken_identity.id)

    summary = await scheduler.run()

    assert summary.deleted == 1
    assert summary.errors == 2
    # events failed first, nothing else was touched
    assert broken_events.id in profile_store.profiles
    # identity failed last, the profile deletion stands
    assert broken_identity.id not in profile_store.profiles
    assert identity.deleted == [healthy.id]


@pytest.mark.asyncio
async def test_candidate_query_failure_is_reported(scheduler, profile_store):
    profile_store.add(stale_profile())
    profile_store.fail_listing = True

    summary = await scheduler.run()

    assert summary.warned == 0
    assert summary.deleted == 0
    assert summary.errors == 2


@pytest.mark.asyncio
async def test_run_warns_and_deletes_in_one_pass(scheduler, profile_store, mailer, identity):
    to_warn = profile_store.add(stale_profile(email="warn@example.com"))
    to_delete = profile_store.add(expired_profile(email="gone@example.com"))
    profile_store.add(make_profile(email="fresh@example.com"))

    summary = await scheduler.run()

    assert (summary.warned, summary.deleted, summary.errors) == (1, 1, 0)
    assert mailer.recipients() == [to_warn.email]
    assert identity.deleted == [to_delete.id]


# ------------------------------------------------------------ extension

@pytest.mark.asyncio
async def test_extend_retention_moves_account_back_to_active(scheduler, profile_store):
    profile = profile_store.add(stale_profile(retention_warning_sent_at=NOW - timedelta(days=2)))

    extended = await scheduler.extend_retention(str(profile.id))

    assert extended.retention_extended_at == NOW
    assert extended.retention_warning_sent_at is None
    assert retention_status(extended, NOW, RetentionPolicy()) == RetentionStatus.ACTIVE


@pytest.mark.asyncio
async def test_extend_retention_twice_is_harmless(scheduler, profile_store):
    profile = profile_store.add(stale_profile())
    await scheduler.extend_retention(str(profile.id))
    extended = await scheduler.extend_retention(str(profile.id))
    assert extended.retention_extended_at == NOW


@pytest.mark.asyncio
@pytest.mark.parametrize("account_id", [
    None, "", "not-a-uuid", "12345678-1234-1234-1234-12345678901",
    "12345678-1234-1234-1234-123456789012\n",
])
async def test_extend_retention_rejects_malformed_ids(scheduler, account_id):
    with pytest.raises(ValidationError):
        await scheduler.extend_retention(account_id)


@pytest.mark.asyncio
async def test_extend_retention_unknown_account(scheduler):
    with pytest.raises(RecordNotFound):
        await scheduler.extend_retention(str(uuid.uuid4()))
