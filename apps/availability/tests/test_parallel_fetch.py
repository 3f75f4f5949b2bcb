"""Fetching blocks, patterns and bookings on worker threads."""

from __future__ import annotations

import threading
from datetime import date

import pytest

from apps.availability.models import AvailabilityBlock, RecurringBlockPattern
from apps.availability.services import ConflictResolver
from apps.bookings.models import Booking
from apps.listings.models import ListingRef

pytestmark = pytest.mark.django_db(transaction=True)


@pytest.fixture
def busy_vehicle(vehicle, provider_admin, make_booking):
    AvailabilityBlock.objects.create(
        listing_type="vehicle",
        listing_id=vehicle.pk,
        start_date=date(2024, 6, 10),
        end_date=date(2024, 6, 10),
        reason="Maintenance",
        created_by=provider_admin,
    )
    RecurringBlockPattern.objects.create(
        listing_type="vehicle",
        listing_id=vehicle.pk,
        days_of_week=[4],
        start_date=date(2024, 6, 1),
        end_date=date(2024, 6, 30),
        reason="Weekly service",
        created_by=provider_admin,
    )
    make_booking(date(2024, 6, 11), date(2024, 6, 12), vehicle=vehicle, status=Booking.Status.PENDING)
    return vehicle


def _spy(resolver: ConflictResolver, threads: list) -> None:
    for name in ("fetch_blocks", "fetch_patterns", "fetch_bookings"):
        original = getattr(resolver, name)

        def wrapper(*args, _original=original):
            threads.append(threading.current_thread())
            return _original(*args)

        setattr(resolver, name, wrapper)


def test_parallel_check_matches_serial_check(busy_vehicle) -> None:
    ref = ListingRef.of(busy_vehicle)
    parallel = ConflictResolver(parallel=True)
    threads: list = []
    _spy(parallel, threads)

    result = parallel.check_availability(ref, date(2024, 6, 10), date(2024, 6, 13))
    serial = ConflictResolver(parallel=False).check_availability(ref, date(2024, 6, 10), date(2024, 6, 13))

    assert len(threads) == 3
    assert threading.main_thread() not in threads
    assert not result.available
    kinds = sorted((c.type.value, c.is_recurring) for c in result.conflicts)
    assert kinds == [("block", False), ("block", True), ("booking", False)]
    assert result == serial


def test_parallel_check_of_free_dates(busy_vehicle) -> None:
    result = ConflictResolver(parallel=True).check_availability(
        ListingRef.of(busy_vehicle), date(2024, 6, 14), date(2024, 6, 19)
    )
    assert result.available
    assert result.conflicts == []
