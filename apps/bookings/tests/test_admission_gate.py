"""Tests for admitting booking requests."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.availability.errors import AvailabilityError, ErrorCode
from apps.availability.models import AvailabilityBlock, RecurringBlockPattern
from apps.bookings.models import Booking
from apps.bookings.services import BookingAdmissionGate, BookingRequest
from apps.listings.models import DriverListing
from apps.notifications.models import Notification, NotificationType
from apps.users.models import Company

pytestmark = pytest.mark.django_db


@pytest.fixture
def gate() -> BookingAdmissionGate:
    return BookingAdmissionGate()


@pytest.fixture
def request_for(renter_company, renter_user):
    def _request(start, end, *, vehicle=None, driver=None, **extra) -> BookingRequest:
        return BookingRequest(
            renter_company_id=extra.pop("renter_company_id", renter_company.pk),
            start_date=start,
            end_date=end,
            requested_by=renter_user,
            vehicle_listing_id=vehicle.pk if vehicle else None,
            driver_listing_id=driver.pk if driver else None,
            **extra,
        )

    return _request


def _code(excinfo) -> ErrorCode:
    return excinfo.value.code


def test_blocked_vehicle_scenario(gate, request_for, vehicle, provider_admin, renter_user) -> None:
    AvailabilityBlock.objects.create(
        listing_type="vehicle",
        listing_id=vehicle.pk,
        start_date=date(2024, 6, 10),
        end_date=date(2024, 6, 12),
        reason="Maintenance",
        created_by=provider_admin,
    )

    with pytest.raises(AvailabilityError) as excinfo:
        gate.create_booking_request(request_for(date(2024, 6, 11), date(2024, 6, 13), vehicle=vehicle))
    assert _code(excinfo) == ErrorCode.NOT_AVAILABLE
    assert excinfo.value.conflicts[0].reason == "Maintenance"
    assert not Booking.objects.exists()

    rejection = Notification.objects.get(user=renter_user)
    assert rejection.type == NotificationType.BOOKING_REJECTED_BLOCKED_DATES
    assert rejection.title == "Booking Request Rejected - Dates Not Available"
    assert rejection.metadata["listing_id"] == vehicle.pk
    assert "Maintenance" in rejection.message

    booking = gate.create_booking_request(request_for(date(2024, 6, 13), date(2024, 6, 15), vehicle=vehicle))
    assert booking.status == Booking.Status.PENDING


def test_recurring_block_rejects_request(gate, request_for, driver, provider_admin) -> None:
    RecurringBlockPattern.objects.create(
        listing_type="driver",
        listing_id=driver.pk,
        days_of_week=[0, 6],
        start_date=date(2024, 1, 1),
        created_by=provider_admin,
    )
    with pytest.raises(AvailabilityError) as excinfo:
        gate.create_booking_request(request_for(date(2024, 6, 7), date(2024, 6, 10), driver=driver))
    assert _code(excinfo) == ErrorCode.NOT_AVAILABLE
    assert all(conflict.is_recurring for conflict in excinfo.value.conflicts)


def test_pending_booking_holds_dates(gate, request_for, vehicle) -> None:
    gate.create_booking_request(request_for(date(2024, 6, 10), date(2024, 6, 12), vehicle=vehicle))

    with pytest.raises(AvailabilityError) as excinfo:
        gate.create_booking_request(request_for(date(2024, 6, 12), date(2024, 6, 14), vehicle=vehicle))
    assert _code(excinfo) == ErrorCode.VEHICLE_NOT_AVAILABLE
    assert Booking.objects.count() == 1


def test_booked_driver_is_reported_by_type(gate, request_for, vehicle, driver, make_booking) -> None:
    make_booking(date(2024, 6, 1), date(2024, 6, 3), driver=driver)

    with pytest.raises(AvailabilityError) as excinfo:
        gate.create_booking_request(
            request_for(date(2024, 6, 2), date(2024, 6, 4), vehicle=vehicle, driver=driver)
        )
    assert _code(excinfo) == ErrorCode.DRIVER_NOT_AVAILABLE
    assert excinfo.value.status_code == 409


def test_cancelled_booking_frees_dates(gate, request_for, vehicle, make_booking) -> None:
    make_booking(date(2024, 6, 1), date(2024, 6, 3), vehicle=vehicle, status=Booking.Status.CANCELLED)
    booking = gate.create_booking_request(request_for(date(2024, 6, 1), date(2024, 6, 3), vehicle=vehicle))
    assert booking.pk is not None


def test_vehicle_and_driver_booking_cost(gate, request_for, vehicle, driver, provider_company) -> None:
    before = timezone.now()
    booking = gate.create_booking_request(
        request_for(date(2024, 6, 13), date(2024, 6, 15), vehicle=vehicle, driver=driver, notes="Site B")
    )

    assert booking.booking_number.startswith("BK-")
    assert booking.provider_company == provider_company
    assert booking.vehicle_listing == vehicle
    assert booking.driver_listing == driver
    assert booking.duration_days == 2
    assert booking.total == Decimal("8600.00")
    assert booking.currency == "NOK"
    assert booking.notes == "Site B"
    assert before + timedelta(hours=24) <= booking.expires_at <= timezone.now() + timedelta(hours=24)


def test_provider_admins_are_told_after_commit(
    gate, request_for, vehicle, provider_admin, renter_user, django_capture_on_commit_callbacks
) -> None:
    with django_capture_on_commit_callbacks(execute=True):
        booking = gate.create_booking_request(request_for(date(2024, 6, 13), date(2024, 6, 15), vehicle=vehicle))

    notification = Notification.objects.get(type=NotificationType.BOOKING_REQUEST_RECEIVED)
    assert notification.user == provider_admin
    assert notification.metadata["booking_number"] == booking.booking_number
    assert not Notification.objects.filter(user=renter_user).exists()


@pytest.mark.parametrize(
    ("start", "end"),
    [(date(2024, 6, 15), date(2024, 6, 13)), (date(2024, 6, 13), date(2024, 6, 13))],
)
def test_start_must_precede_end(gate, request_for, vehicle, start, end) -> None:
    with pytest.raises(AvailabilityError) as excinfo:
        gate.create_booking_request(request_for(start, end, vehicle=vehicle))
    assert _code(excinfo) == ErrorCode.INVALID_DATE_RANGE


def test_at_least_one_listing(gate, request_for) -> None:
    with pytest.raises(AvailabilityError) as excinfo:
        gate.create_booking_request(request_for(date(2024, 6, 13), date(2024, 6, 15)))
    assert _code(excinfo) == ErrorCode.AT_LEAST_ONE_LISTING_REQUIRED


def test_renter_needs_company(gate, request_for, vehicle) -> None:
    with pytest.raises(AvailabilityError) as excinfo:
        gate.create_booking_request(
            request_for(date(2024, 6, 13), date(2024, 6, 15), vehicle=vehicle, renter_company_id=None)
        )
    assert _code(excinfo) == ErrorCode.COMPANY_REQUIRED


def test_self_booking(gate, request_for, vehicle, provider_company) -> None:
    with pytest.raises(AvailabilityError) as excinfo:
        gate.create_booking_request(
            request_for(
                date(2024, 6, 13), date(2024, 6, 15), vehicle=vehicle, renter_company_id=provider_company.pk
            )
        )
    assert _code(excinfo) == ErrorCode.SELF_BOOKING_NOT_ALLOWED


def test_missing_listings(gate, request_for, vehicle) -> None:
    request = request_for(date(2024, 6, 13), date(2024, 6, 15))
    request.vehicle_listing_id = 4040
    with pytest.raises(AvailabilityError) as excinfo:
        gate.create_booking_request(request)
    assert _code(excinfo) == ErrorCode.VEHICLE_LISTING_NOT_FOUND

    request = request_for(date(2024, 6, 13), date(2024, 6, 15), vehicle=vehicle)
    request.driver_listing_id = 4040
    with pytest.raises(AvailabilityError) as excinfo:
        gate.create_booking_request(request)
    assert _code(excinfo) == ErrorCode.DRIVER_LISTING_NOT_FOUND


def test_provider_mismatch(gate, request_for, vehicle, driver) -> None:
    stranger = Company.objects.create(name="Tromsø Frakt AS", organization_number="955555555")
    with pytest.raises(AvailabilityError) as excinfo:
        gate.create_booking_request(
            request_for(date(2024, 6, 13), date(2024, 6, 15), vehicle=vehicle, provider_company_id=stranger.pk)
        )
    assert _code(excinfo) == ErrorCode.VEHICLE_PROVIDER_MISMATCH

    with pytest.raises(AvailabilityError) as excinfo:
        gate.create_booking_request(
            request_for(date(2024, 6, 13), date(2024, 6, 15), driver=driver, provider_company_id=stranger.pk)
        )
    assert _code(excinfo) == ErrorCode.DRIVER_PROVIDER_MISMATCH


def test_vehicle_and_driver_from_different_companies(gate, request_for, vehicle) -> None:
    elsewhere = Company.objects.create(name="Tromsø Frakt AS", organization_number="955555555")
    foreign_driver = DriverListing.objects.create(company=elsewhere, name="Ola", daily_rate=Decimal("1500.00"))

    with pytest.raises(AvailabilityError) as excinfo:
        gate.create_booking_request(
            request_for(date(2024, 6, 13), date(2024, 6, 15), vehicle=vehicle, driver=foreign_driver)
        )
    assert _code(excinfo) == ErrorCode.CROSS_COMPANY_VEHICLE_DRIVER_NOT_ALLOWED


def test_sequential_requests_never_double_book(gate, request_for, vehicle) -> None:
    windows = [
        (date(2024, 6, 1), date(2024, 6, 4)),
        (date(2024, 6, 3), date(2024, 6, 6)),
        (date(2024, 6, 5), date(2024, 6, 8)),
        (date(2024, 6, 9), date(2024, 6, 10)),
        (date(2024, 6, 10), date(2024, 6, 12)),
    ]
    for start, end in windows:
        try:
            gate.create_booking_request(request_for(start, end, vehicle=vehicle))
        except AvailabilityError:
            pass

    held = list(Booking.objects.filter(vehicle_listing=vehicle).order_by("start_date"))
    assert [(b.start_date.day, b.end_date.day) for b in held] == [(1, 4), (5, 8), (9, 10)]
    for earlier, later in zip(held, held[1:]):
        assert earlier.end_date < later.start_date
