"""
Recurring pattern expansion

Recurring instances are never stored. They are regenerated from the
pattern every time a conflict check, analytics run or calendar export
needs them, so expansion must be pure: the same pattern and window
always yield the same instances with the same ids.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from shared.domain.dates import iter_days, normalize, weekday_index


@dataclass(frozen=True)
class RecurringInstance:
    """One materialized day of a recurring pattern."""

    id: str
    pattern_id: int
    listing_type: str
    listing_id: int
    date: date
    reason: str
    created_by_id: int | None

    @property
    def start_date(self) -> date:
        return self.date

    @property
    def end_date(self) -> date:
        return self.date


def instance_id(pattern_id, day: date) -> str:
    return f"{pattern_id}-{day.isoformat()}"


def expand(pattern, window_start, window_end) -> list[RecurringInstance]:
    """
    Expand a weekly pattern over ``[window_start, window_end]``

    The pattern is anything exposing ``id``, ``listing_type``,
    ``listing_id``, ``days_of_week``, ``start_date``, ``end_date``
    (None for open-ended), ``reason`` and ``created_by_id``.
    """
    window_start = normalize(window_start)
    window_end = normalize(window_end)
    pattern_start = normalize(pattern.start_date)
    pattern_end = normalize(pattern.end_date) if pattern.end_date else window_end

    effective_start = max(pattern_start, window_start)
    effective_end = min(pattern_end, window_end)
    if effective_start > effective_end:
        return []

    weekdays = frozenset(pattern.days_of_week)
    return [
        RecurringInstance(
            id=instance_id(pattern.id, day),
            pattern_id=pattern.id,
            listing_type=pattern.listing_type,
            listing_id=pattern.listing_id,
            date=day,
            reason=pattern.reason or "",
            created_by_id=pattern.created_by_id,
        )
        for day in iter_days(effective_start, effective_end)
        if weekday_index(day) in weekdays
    ]


def expand_all(patterns, window_start, window_end) -> list[RecurringInstance]:
    instances: list[RecurringInstance] = []
    for pattern in patterns:
        instances.extend(expand(pattern, window_start, window_end))
    return instances
