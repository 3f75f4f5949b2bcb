from __future__ import annotations

from datetime import date, timedelta

import pytest
from django.utils import timezone

from apps.bookings.models import Booking
from apps.bookings.tasks import EXPIRED_REASON, expire_pending_bookings

pytestmark = pytest.mark.django_db


def test_overdue_pending_requests_are_cancelled(vehicle, driver, make_booking) -> None:
    overdue = make_booking(date(2024, 6, 1), date(2024, 6, 3), vehicle=vehicle, status=Booking.Status.PENDING)
    fresh = make_booking(date(2024, 6, 5), date(2024, 6, 7), vehicle=vehicle, status=Booking.Status.PENDING)
    accepted = make_booking(date(2024, 6, 9), date(2024, 6, 11), driver=driver)

    past = timezone.now() - timedelta(minutes=5)
    Booking.objects.filter(pk__in=[overdue.pk, accepted.pk]).update(expires_at=past)
    Booking.objects.filter(pk=fresh.pk).update(expires_at=timezone.now() + timedelta(hours=3))

    assert expire_pending_bookings() == {"expired": 1}

    overdue.refresh_from_db()
    assert overdue.status == Booking.Status.CANCELLED
    assert overdue.cancellation_reason == EXPIRED_REASON
    assert Booking.objects.get(pk=fresh.pk).status == Booking.Status.PENDING
    assert Booking.objects.get(pk=accepted.pk).status == Booking.Status.ACCEPTED


def test_nothing_to_expire(vehicle, make_booking) -> None:
    make_booking(date(2024, 6, 1), date(2024, 6, 3), vehicle=vehicle, status=Booking.Status.PENDING)
    assert expire_pending_bookings() == {"expired": 0}
