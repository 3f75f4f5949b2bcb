"""
Analytics Aggregator

Day counts over a period: how much of it was blocked, how much of the
remaining capacity was booked. Days are counted as unique calendar
dates so overlapping or adjacent blocks never count a day twice.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from apps.bookings.models import Booking
from apps.listings.models import ListingRef
from shared.domain.dates import clip, days_between, normalize, unique_date_set

from ..errors import ErrorCode, ValidationFailed
from .resolver import ConflictResolver


@dataclass(frozen=True)
class AnalyticsResult:
    period_start: str
    period_end: str
    total_days: int
    blocked_days: int
    booked_days: int
    available_days: int
    blocked_percentage: float
    utilization_rate: float
    total_blocks: int
    recurring_instances: int

    def as_dict(self) -> dict:
        return asdict(self)


class AnalyticsAggregator:
    def __init__(self, resolver: ConflictResolver | None = None):
        self.resolver = resolver or ConflictResolver()

    def get_analytics(self, ref: ListingRef, period_start, period_end) -> AnalyticsResult:
        start, end = normalize(period_start), normalize(period_end)
        if start > end:
            raise ValidationFailed(ErrorCode.INVALID_DATE_RANGE, "Period start must not be after period end.")
        period = (start, end)

        sources = self.resolver.gather(ref, start, end, booking_statuses=Booking.UTILIZATION_STATUSES)

        blocked_intervals = [
            clip((block.start_date, block.end_date), period) for block in sources.blocks
        ] + [
            clip((instance.date, instance.date), period) for instance in sources.instances
        ]
        booked_intervals = [
            clip((booking.start_date, booking.end_date), period) for booking in sources.bookings
        ]

        total_days = days_between(start, end) + 1
        blocked_days = len(unique_date_set(interval for interval in blocked_intervals if interval))
        booked_days = len(unique_date_set(interval for interval in booked_intervals if interval))
        available_days = total_days - blocked_days

        blocked_percentage = blocked_days / total_days * 100
        utilization_rate = booked_days / available_days * 100 if available_days > 0 else 0.0

        return AnalyticsResult(
            period_start=start.isoformat(),
            period_end=end.isoformat(),
            total_days=total_days,
            blocked_days=blocked_days,
            booked_days=booked_days,
            available_days=available_days,
            blocked_percentage=round(blocked_percentage, 2),
            utilization_rate=round(min(utilization_rate, 100.0), 2),
            total_blocks=len(sources.blocks),
            recurring_instances=len(sources.instances),
        )
