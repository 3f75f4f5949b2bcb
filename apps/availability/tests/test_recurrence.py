"""Tests for weekly recurring pattern expansion."""

from __future__ import annotations

from datetime import date, timedelta

from apps.availability.domain.recurrence import expand, expand_all
from apps.availability.models import RecurringBlockPattern
from shared.domain.dates import iter_days, weekday_index


def _pattern(pk=7, days=(1, 3), start=date(2024, 6, 1), end=None, reason="Service") -> RecurringBlockPattern:
    return RecurringBlockPattern(
        id=pk,
        listing_type="vehicle",
        listing_id=11,
        days_of_week=list(days),
        start_date=start,
        end_date=end,
        reason=reason,
        created_by_id=3,
    )


def test_monday_and_wednesday_in_first_week_of_june() -> None:
    instances = expand(_pattern(), date(2024, 6, 1), date(2024, 6, 9))

    assert [instance.date for instance in instances] == [date(2024, 6, 3), date(2024, 6, 5)]
    first = instances[0]
    assert first.id == "7-2024-06-03"
    assert first.pattern_id == 7
    assert (first.listing_type, first.listing_id) == ("vehicle", 11)
    assert first.reason == "Service"
    assert first.created_by_id == 3
    assert first.start_date == first.end_date == date(2024, 6, 3)


def test_expansion_respects_pattern_bounds() -> None:
    pattern = _pattern(days=range(7), start=date(2024, 6, 5), end=date(2024, 6, 7))
    instances = expand(pattern, date(2024, 6, 1), date(2024, 6, 30))
    assert [instance.date for instance in instances] == [
        date(2024, 6, 5),
        date(2024, 6, 6),
        date(2024, 6, 7),
    ]


def test_window_outside_pattern_is_empty() -> None:
    pattern = _pattern(start=date(2024, 6, 10), end=date(2024, 6, 20))
    assert expand(pattern, date(2024, 6, 1), date(2024, 6, 9)) == []
    assert expand(pattern, date(2024, 6, 21), date(2024, 7, 1)) == []


def test_open_ended_pattern_runs_to_window_end() -> None:
    instances = expand(_pattern(days=[0]), date(2025, 1, 1), date(2025, 1, 31))
    assert [instance.date.day for instance in instances] == [5, 12, 19, 26]


def test_every_day_of_window_matches_weekday_rule() -> None:
    days = [2, 6]
    window_start, window_end = date(2024, 2, 20), date(2024, 4, 10)
    produced = {instance.date for instance in expand(_pattern(days=days), window_start, window_end)}

    for day in iter_days(window_start, window_end):
        assert (day in produced) == (weekday_index(day) in days)


def test_expansion_is_deterministic() -> None:
    pattern = _pattern()
    window = (date(2024, 6, 1), date(2024, 6, 1) + timedelta(days=60))
    assert expand(pattern, *window) == expand(pattern, *window)


def test_expand_all_concatenates_patterns() -> None:
    patterns = [_pattern(pk=1, days=[1]), _pattern(pk=2, days=[1])]
    instances = expand_all(patterns, date(2024, 6, 3), date(2024, 6, 3))
    assert [instance.id for instance in instances] == ["1-2024-06-03", "2-2024-06-03"]
