from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Optional

from ..core.constants import LATE_AFTER, WORKDAY_UTC_OFFSET_HOURS
from ..core.exceptions import ValidationError
from .money import round2

WORKDAY_OFFSET = timedelta(hours=WORKDAY_UTC_OFFSET_HOURS)

# Instants are stored timezone-naive in UTC; local wall-clock is UTC+5.


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        if isinstance(value, str):
            return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        pass
    raise ValidationError(f"Invalid date {value!r} (expected YYYY-MM-DD)")


def parse_month(value: str) -> date:
    """Parse YYYY-MM (or any YYYY-MM-DD inside the month) into the month's first day."""
    v = value.strip() if isinstance(value, str) else ""
    for fmt in ("%Y-%m", "%Y-%m-%d"):
        try:
            return datetime.strptime(v, fmt).date().replace(day=1)
        except ValueError:
            continue
    raise ValidationError(f"Invalid month {value!r} (expected YYYY-MM)")


def now_utc() -> datetime:
    """Current UTC time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_local(instant: datetime) -> datetime:
    return instant + WORKDAY_OFFSET


def local_day(instant: datetime) -> date:
    """Calendar day an instant belongs to under the UTC+5 day boundary."""
    return to_local(instant).date()


def local_day_bounds(day: date) -> tuple[datetime, datetime]:
    """UTC window [start, end) covering one local calendar day."""
    start = datetime.combine(day, time.min) - WORKDAY_OFFSET
    return start, start + timedelta(days=1)


def local_range_bounds(start_day: Optional[date], end_day: Optional[date]) -> tuple[Optional[datetime], Optional[datetime]]:
    start = local_day_bounds(start_day)[0] if start_day else None
    end = local_day_bounds(end_day)[1] if end_day else None
    return start, end


def is_late_check_in(instant: datetime, *, late_after: time = LATE_AFTER) -> bool:
    """Late iff local wall-clock hour:minute is strictly after ``late_after``.

    Seconds are ignored: 09:00:59 is still on time.
    """
    local = to_local(instant)
    return (local.hour, local.minute) > (late_after.hour, late_after.minute)


def hours_between(start: datetime, end: datetime) -> Decimal:
    seconds = Decimal(str((end - start).total_seconds()))
    return round2(seconds / Decimal(3600))


def month_bounds(month: date) -> tuple[datetime, datetime]:
    """UTC window [first day 00:00:00, last day 23:59:59] of a calendar month."""
    first = month.replace(day=1)
    last_day = calendar.monthrange(first.year, first.month)[1]
    return (
        datetime.combine(first, time.min),
        datetime.combine(first.replace(day=last_day), time(23, 59, 59)),
    )


def month_dates(month: date) -> tuple[date, date]:
    start, end = month_bounds(month)
    return start.date(), end.date()
