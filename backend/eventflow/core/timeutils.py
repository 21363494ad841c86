"""
Time helpers shared by the token codec and the retention job.
"""

import calendar
import re
from datetime import datetime, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]

# Store identifiers are UUIDs; the version nibble is not checked.
UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_epoch_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def from_epoch_millis(millis: int) -> datetime:
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)


def ensure_aware(moment: datetime) -> datetime:
    """Treat naive datetimes coming back from the store as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def shift_months(moment: datetime, months: int) -> datetime:
    """
    Move a datetime by whole calendar months, clamping the day to the
    length of the target month (Mar 31 - 1 month -> Feb 28/29).
    """
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def is_uuid(value: Optional[str]) -> bool:
    return bool(value) and UUID_PATTERN.fullmatch(value) is not None
