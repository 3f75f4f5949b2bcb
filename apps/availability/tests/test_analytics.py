"""Tests for blocked share and utilization analytics."""

from __future__ import annotations

from datetime import date

import pytest

from apps.availability.errors import AvailabilityError, ErrorCode
from apps.availability.models import AvailabilityBlock, RecurringBlockPattern
from apps.availability.services import AnalyticsAggregator
from apps.bookings.models import Booking
from apps.listings.models import ListingRef

pytestmark = pytest.mark.django_db

PERIOD = (date(2024, 6, 1), date(2024, 6, 10))


@pytest.fixture
def aggregator() -> AnalyticsAggregator:
    return AnalyticsAggregator()


@pytest.fixture
def block(vehicle, provider_admin):
    def _block(start, end):
        return AvailabilityBlock.objects.create(
            listing_type="vehicle",
            listing_id=vehicle.pk,
            start_date=start,
            end_date=end,
            created_by=provider_admin,
        )

    return _block


def test_ten_day_period_with_three_blocked_and_two_booked_days(aggregator, vehicle, block, make_booking) -> None:
    block(date(2024, 6, 1), date(2024, 6, 2))
    block(date(2024, 6, 2), date(2024, 6, 3))
    make_booking(date(2024, 6, 5), date(2024, 6, 6), vehicle=vehicle)

    result = aggregator.get_analytics(ListingRef.of(vehicle), *PERIOD)

    assert result.total_days == 10
    assert result.blocked_days == 3
    assert result.booked_days == 2
    assert result.available_days == 7
    assert result.blocked_percentage == 30.0
    assert result.utilization_rate == 28.57
    assert result.total_blocks == 2
    assert result.recurring_instances == 0


def test_intervals_are_clipped_to_period(aggregator, vehicle, block, make_booking) -> None:
    block(date(2024, 5, 25), date(2024, 6, 1))
    make_booking(date(2024, 6, 9), date(2024, 6, 15), vehicle=vehicle)

    result = aggregator.get_analytics(ListingRef.of(vehicle), *PERIOD)

    assert result.blocked_days == 1
    assert result.booked_days == 2


def test_recurring_instances_count_as_blocked(aggregator, vehicle, provider_admin) -> None:
    RecurringBlockPattern.objects.create(
        listing_type="vehicle",
        listing_id=vehicle.pk,
        days_of_week=[1, 3],
        start_date=date(2024, 6, 1),
        created_by=provider_admin,
    )

    result = aggregator.get_analytics(ListingRef.of(vehicle), *PERIOD)

    assert result.recurring_instances == 3  # Mon 3rd, Wed 5th, Mon 10th
    assert result.blocked_days == 3


def test_pending_and_cancelled_bookings_are_not_utilization(aggregator, vehicle, make_booking) -> None:
    make_booking(date(2024, 6, 2), date(2024, 6, 3), vehicle=vehicle, status=Booking.Status.PENDING)
    make_booking(date(2024, 6, 4), date(2024, 6, 5), vehicle=vehicle, status=Booking.Status.CANCELLED)
    make_booking(date(2024, 6, 7), date(2024, 6, 8), vehicle=vehicle, status=Booking.Status.COMPLETED)

    assert aggregator.get_analytics(ListingRef.of(vehicle), *PERIOD).booked_days == 2


def test_fully_blocked_period_has_zero_utilization(aggregator, vehicle, block) -> None:
    block(date(2024, 5, 1), date(2024, 7, 1))

    result = aggregator.get_analytics(ListingRef.of(vehicle), *PERIOD)

    assert result.available_days == 0
    assert result.blocked_percentage == 100.0
    assert result.utilization_rate == 0.0


def test_utilization_is_capped_at_hundred(aggregator, vehicle, block, make_booking) -> None:
    block(date(2024, 6, 1), date(2024, 6, 8))
    make_booking(date(2024, 6, 1), date(2024, 6, 10), vehicle=vehicle)

    result = aggregator.get_analytics(ListingRef.of(vehicle), *PERIOD)

    assert result.available_days == 2
    assert result.booked_days == 10
    assert result.utilization_rate == 100.0


def test_conservation_and_ranges(aggregator, vehicle, block, make_booking) -> None:
    block(date(2024, 6, 3), date(2024, 6, 4))
    make_booking(date(2024, 6, 6), date(2024, 6, 9), vehicle=vehicle)

    result = aggregator.get_analytics(ListingRef.of(vehicle), *PERIOD)

    assert result.blocked_days + result.available_days == result.total_days
    assert 0 <= result.blocked_percentage <= 100
    assert 0 <= result.utilization_rate <= 100


def test_single_day_period(aggregator, vehicle) -> None:
    result = aggregator.get_analytics(ListingRef.of(vehicle), date(2024, 6, 1), date(2024, 6, 1))
    assert result.total_days == 1
    assert result.as_dict()["period_start"] == "2024-06-01"


def test_period_start_after_end_is_rejected(aggregator, vehicle) -> None:
    with pytest.raises(AvailabilityError) as excinfo:
        aggregator.get_analytics(ListingRef.of(vehicle), date(2024, 6, 10), date(2024, 6, 1))
    assert excinfo.value.code == ErrorCode.INVALID_DATE_RANGE


def test_period_at_end_of_calendar(aggregator, vehicle, block, make_booking) -> None:
    block(date(9999, 12, 30), date.max)
    make_booking(date(9999, 12, 1), date(9999, 12, 3), vehicle=vehicle)

    result = aggregator.get_analytics(ListingRef.of(vehicle), date(9999, 12, 1), date.max)

    assert result.total_days == 31
    assert result.blocked_days == 2
    assert result.booked_days == 3
    assert result.period_end == "9999-12-31"
