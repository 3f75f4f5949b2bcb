"""Tests for booking status transitions."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from django.utils import timezone

from apps.availability.errors import ErrorCode, ValidationFailed
from apps.bookings.models import Booking
from apps.bookings.services import change_booking_status

pytestmark = pytest.mark.django_db

Status = Booking.Status


@pytest.fixture
def booking_in(vehicle, make_booking):
    def _booking(status) -> Booking:
        return make_booking(date(2024, 6, 10), date(2024, 6, 12), vehicle=vehicle, status=status)

    return _booking


def test_expired_request_cannot_be_accepted(booking_in) -> None:
    booking = booking_in(Status.PENDING)
    Booking.objects.filter(pk=booking.pk).update(expires_at=timezone.now() - timedelta(hours=1))

    with pytest.raises(ValidationFailed) as excinfo:
        change_booking_status(booking, Status.ACCEPTED)

    assert excinfo.value.code == ErrorCode.BOOKING_EXPIRED
    assert booking.booking_number in excinfo.value.message
    booking.refresh_from_db()
    assert booking.status == Status.PENDING


def test_expired_request_can_still_be_cancelled(booking_in) -> None:
    booking = booking_in(Status.PENDING)
    Booking.objects.filter(pk=booking.pk).update(expires_at=timezone.now() - timedelta(hours=1))

    assert change_booking_status(booking, Status.CANCELLED, reason="Expired").status == Status.CANCELLED


def test_request_within_deadline_is_accepted(booking_in) -> None:
    booking = booking_in(Status.PENDING)
    Booking.objects.filter(pk=booking.pk).update(expires_at=timezone.now() + timedelta(hours=1))

    assert change_booking_status(booking, Status.ACCEPTED).status == Status.ACCEPTED


@pytest.mark.parametrize("current", [Status.ACTIVE, Status.DISPUTED])
def test_running_and_disputed_bookings_can_be_cancelled(booking_in, current) -> None:
    booking = change_booking_status(booking_in(current), Status.CANCELLED, reason="Contract terminated")

    booking.refresh_from_db()
    assert booking.status == Status.CANCELLED
    assert booking.cancellation_reason == "Contract terminated"
    assert booking.cancelled_at is not None


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (Status.ACCEPTED, Status.DISPUTED),
        (Status.PENDING, Status.ACTIVE),
        (Status.COMPLETED, Status.CANCELLED),
        (Status.CANCELLED, Status.PENDING),
        (Status.CLOSED, Status.DISPUTED),
    ],
)
def test_illegal_transitions_are_rejected(booking_in, current, target) -> None:
    booking = booking_in(current)

    with pytest.raises(ValidationFailed) as excinfo:
        change_booking_status(booking, target)

    assert excinfo.value.code == ErrorCode.INVALID_STATUS_TRANSITION
    booking.refresh_from_db()
    assert booking.status == current


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (Status.ACTIVE, Status.DISPUTED),
        (Status.COMPLETED, Status.DISPUTED),
        (Status.COMPLETED, Status.CLOSED),
        (Status.DISPUTED, Status.CLOSED),
    ],
)
def test_dispute_and_close_transitions(booking_in, current, target) -> None:
    assert change_booking_status(booking_in(current), target).status == target
