"""
Date and interval helpers

Every availability computation works on whole calendar days with
inclusive bounds. Values are normalized to ``date`` before they are
compared so that a block stored as a date and a request that arrived
as a timestamp compare the same way.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, Tuple

from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore

ONE_DAY = timedelta(days=1)

Interval = Tuple[date, date]


def normalize(value: date | datetime | str) -> date:
    """
    Truncate a value to its calendar day (midnight)

    Aware datetimes are converted to the current time zone first, so
    ``2024-06-10T23:30:00-02:00`` lands on the day it is in locally.
    """
    if isinstance(value, str):
        value = _parse(value)
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Cannot normalize {type(value).__name__} to a date")


def _parse(raw: str) -> date | datetime:
    raw = raw.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        if len(raw) == 10:
            return date.fromisoformat(raw)
        return datetime.fromisoformat(raw)
    except ValueError:
        raise ValueError(f"Invalid date: {raw!r}") from None


def overlaps(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """
    Inclusive overlap test for two closed day ranges

    ``[10, 12]`` and ``[12, 14]`` overlap (they share the 12th);
    ``[10, 12]`` and ``[13, 14]`` do not.
    """
    return a_start <= b_end and a_end >= b_start


def overlap_q(start: date, end: date, *, start_field: str = "start_date", end_field: str = "end_date") -> Q:
    """ORM form of :func:`overlaps` for rows with a start/end date pair."""
    return Q(**{f"{start_field}__lte": end}) & Q(**{f"{end_field}__gte": start})


def days_between(start: date, end: date) -> int:
    return (end - start).days


def shift_days(day: date, days: int) -> date:
    """Move a day forward or back, saturating at ``date.min`` and ``date.max``."""
    try:
        return day + timedelta(days=days)
    except OverflowError:
        return date.max if days > 0 else date.min


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every day from start to end, both included."""
    current = start
    while current <= end:
        yield current
        if current == date.max:
            return
        current += ONE_DAY


def clip(interval: Interval, bounds: Interval) -> Interval | None:
    """Restrict an interval to bounds; None when they do not intersect."""
    start = max(interval[0], bounds[0])
    end = min(interval[1], bounds[1])
    if start > end:
        return None
    return start, end


def unique_date_set(intervals: Iterable[Interval]) -> set[str]:
    """
    Expand intervals to individual ISO days and union them

    Overlapping or adjacent intervals therefore never count a day twice.
    """
    days: set[str] = set()
    for start, end in intervals:
        days.update(day.isoformat() for day in iter_days(start, end))
    return days


def weekday_index(day: date) -> int:
    """Weekday with Sunday as 0 and Saturday as 6."""
    return (day.weekday() + 1) % 7
