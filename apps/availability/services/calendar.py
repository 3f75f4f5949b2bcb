"""
Calendar Exporter

Serializes blocks, recurring instances and bookings into an iCalendar
(RFC 5545) document of all-day events, and builds the per-day calendar
view used by the availability API.

Exports are deterministic: UIDs are namespaced by source and DTSTAMP is
pinned to the range start, so exporting the same range twice yields the
same bytes.
"""

from __future__ import annotations

from datetime import date

from django.utils import timezone  # type: ignore

from apps.bookings.models import Booking
from apps.listings.models import ListingRef
from shared.domain.dates import days_between, iter_days, normalize, shift_days

from ..conf import engine_setting
from ..errors import ErrorCode, ValidationFailed
from .resolver import AvailabilitySources, ConflictResolver

CRLF = "\r\n"
LINE_LIMIT = 75

# The day view also shows requests that are still waiting for an answer.
DAY_VIEW_STATUSES = (*Booking.CONFLICT_STATUSES, Booking.Status.COMPLETED)


def escape_text(value: str) -> str:
    """Escape a TEXT value: backslash, semicolon, comma and newlines."""
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
        .replace("\r", "\\n")
    )


def _ical_date(day: date) -> str:
    return day.strftime("%Y%m%d")


def _event_end(start: date, end: date) -> str:
    """All-day DTEND is exclusive; a range ending on date.max is given as a duration."""
    if end == date.max:
        return f"DURATION:P{days_between(start, end) + 1}D"
    return f"DTEND;VALUE=DATE:{_ical_date(shift_days(end, 1))}"


def fold_line(line: str) -> str:
    """Fold a content line into chunks of at most 75 octets (RFC 5545 3.1)."""
    if len(line.encode("utf-8")) <= LINE_LIMIT:
        return line

    chunks, current, size = [], "", 0
    for char in line:
        width = len(char.encode("utf-8"))
        if size + width > LINE_LIMIT:
            chunks.append(current)
            current, size = " ", 1
        current += char
        size += width
    chunks.append(current)
    return CRLF.join(chunks)


class CalendarExporter:
    def __init__(self, resolver: ConflictResolver | None = None):
        self.resolver = resolver or ConflictResolver()

    def default_range(self) -> tuple[date, date]:
        today = timezone.localdate()
        return today, shift_days(today, engine_setting("EXPORT_DEFAULT_DAYS"))

    def _resolve_range(self, range_start, range_end) -> tuple[date, date]:
        default_start, default_end = self.default_range()
        start = normalize(range_start) if range_start else default_start
        end = normalize(range_end) if range_end else (
            shift_days(start, engine_setting("EXPORT_DEFAULT_DAYS")) if range_start else default_end
        )
        if start > end:
            raise ValidationFailed(ErrorCode.INVALID_DATE_RANGE, "Range start must not be after range end.")
        return start, end

    def _gather(self, ref: ListingRef, start: date, end: date) -> AvailabilitySources:
        return self.resolver.gather(ref, start, end, booking_statuses=Booking.UTILIZATION_STATUSES)

    # --- iCalendar ----------------------------------------------------------
    def export_calendar(self, ref: ListingRef, range_start=None, range_end=None) -> str:
        start, end = self._resolve_range(range_start, range_end)
        sources = self._gather(ref, start, end)
        domain = engine_setting("CALENDAR_UID_DOMAIN")
        stamp = f"{_ical_date(start)}T000000Z"

        lines = [
            "BEGIN:VCALENDAR",
            "VERSION:2.0",
            f"PRODID:{engine_setting('CALENDAR_PRODID')}",
            "CALSCALE:GREGORIAN",
            "METHOD:PUBLISH",
            f"X-WR-CALNAME:{escape_text(f'Availability {ref}')}",
        ]

        for block in sources.blocks:
            lines += self._event(
                uid=f"block-{block.pk}@{domain}",
                stamp=stamp,
                start=block.start_date,
                end=block.end_date,
                summary=block.reason or "Blocked",
                category="BLOCKED",
            )
        for instance in sources.instances:
            lines += self._event(
                uid=f"recurring-{instance.id}@{domain}",
                stamp=stamp,
                start=instance.date,
                end=instance.date,
                summary=instance.reason or "Blocked (recurring)",
                category="RECURRING",
            )
        for booking in sources.bookings:
            lines += self._event(
                uid=f"booking-{booking.pk}@{domain}",
                stamp=stamp,
                start=booking.start_date,
                end=booking.end_date,
                summary=f"Booking {booking.booking_number}",
                category="BOOKED",
                description=f"Status: {booking.get_status_display()}",
            )

        lines.append("END:VCALENDAR")
        return CRLF.join(fold_line(line) for line in lines) + CRLF

    @staticmethod
    def _event(*, uid, stamp, start, end, summary, category, description=None) -> list[str]:
        event = [
            "BEGIN:VEVENT",
            f"UID:{uid}",
            f"DTSTAMP:{stamp}",
            f"DTSTART;VALUE=DATE:{_ical_date(start)}",
            _event_end(start, end),
            f"SUMMARY:{escape_text(summary)}",
            f"CATEGORIES:{category}",
            "TRANSP:OPAQUE",
        ]
        if description:
            event.append(f"DESCRIPTION:{escape_text(description)}")
        event.append("END:VEVENT")
        return event

    # --- day view -----------------------------------------------------------
    def build_calendar_days(self, ref: ListingRef, range_start, range_end) -> list[dict]:
        """
        One entry per day with status ``booked``, ``blocked`` or ``available``

        ``booked`` takes precedence over ``blocked``.
        """
        start, end = self._resolve_range(range_start, range_end)
        sources = self.resolver.gather(ref, start, end, booking_statuses=DAY_VIEW_STATUSES)

        days: dict[date, dict] = {
            day: {"date": day.isoformat(), "status": "available", "details": None}
            for day in iter_days(start, end)
        }

        for block in sources.blocks:
            for day in iter_days(max(block.start_date, start), min(block.end_date, end)):
                if days[day]["status"] == "available":
                    days[day].update(
                        status="blocked",
                        details={"block_id": block.pk, "reason": block.reason, "is_recurring": False},
                    )
        for instance in sources.instances:
            if days[instance.date]["status"] == "available":
                days[instance.date].update(
                    status="blocked",
                    details={
                        "block_id": instance.pattern_id,
                        "instance_id": instance.id,
                        "reason": instance.reason,
                        "is_recurring": True,
                    },
                )
        for booking in sources.bookings:
            for day in iter_days(max(booking.start_date, start), min(booking.end_date, end)):
                days[day].update(
                    status="booked",
                    details={
                        "booking_id": booking.pk,
                        "booking_number": booking.booking_number,
                        "booking_status": booking.status,
                    },
                )

        return list(days.values())
