"""Tests for manual blocks and recurring pattern maintenance."""

from __future__ import annotations

from datetime import date

import pytest

from apps.availability.domain.recurrence import expand
from apps.availability.errors import AvailabilityError, ErrorCode
from apps.availability.models import AvailabilityBlock, RecurringBlockPattern
from apps.availability.services import BlockStore
from apps.bookings.models import Booking
from apps.listings.models import ListingRef
from apps.notifications.models import Notification, NotificationType
from apps.users.models import User

pytestmark = pytest.mark.django_db


@pytest.fixture
def store() -> BlockStore:
    return BlockStore()


@pytest.fixture
def pattern(vehicle, provider_admin) -> RecurringBlockPattern:
    return RecurringBlockPattern.objects.create(
        listing_type="vehicle",
        listing_id=vehicle.pk,
        days_of_week=[1, 3],
        start_date=date(2024, 6, 1),
        end_date=date(2024, 6, 30),
        reason="Weekly service",
        created_by=provider_admin,
    )


def _codes(excinfo) -> ErrorCode:
    return excinfo.value.code


# --- manual blocks ------------------------------------------------------------

def test_create_block(store, vehicle, provider_admin) -> None:
    block = store.create_block(
        ListingRef.of(vehicle), date(2024, 6, 10), date(2024, 6, 12), "Maintenance", provider_admin
    )
    assert block.pk is not None
    assert (block.listing_type, block.listing_id) == ("vehicle", vehicle.pk)
    assert block.created_by == provider_admin


def test_single_day_block_is_allowed(store, vehicle, provider_admin) -> None:
    block = store.create_block(ListingRef.of(vehicle), "2024-06-10", "2024-06-10", "", provider_admin)
    assert block.start_date == block.end_date == date(2024, 6, 10)


def test_block_with_start_after_end_is_rejected(store, vehicle, provider_admin) -> None:
    with pytest.raises(AvailabilityError) as excinfo:
        store.create_block(ListingRef.of(vehicle), date(2024, 6, 12), date(2024, 6, 10), "", provider_admin)
    assert _codes(excinfo) == ErrorCode.INVALID_DATE_RANGE
    assert not AvailabilityBlock.objects.exists()


def test_block_on_missing_listing_is_rejected(store, provider_admin) -> None:
    with pytest.raises(AvailabilityError) as excinfo:
        store.create_block(ListingRef("vehicle", 999), date(2024, 6, 10), date(2024, 6, 12), "", provider_admin)
    assert _codes(excinfo) == ErrorCode.LISTING_NOT_FOUND


@pytest.mark.parametrize("status", [Booking.Status.ACCEPTED, Booking.Status.ACTIVE])
def test_block_over_live_booking_fails(store, vehicle, provider_admin, make_booking, status) -> None:
    booking = make_booking(date(2024, 6, 11), date(2024, 6, 13), vehicle=vehicle, status=status)

    with pytest.raises(AvailabilityError) as excinfo:
        store.create_block(
            ListingRef.of(vehicle), date(2024, 6, 10), date(2024, 6, 11), "Maintenance", provider_admin
        )
    assert _codes(excinfo) == ErrorCode.BOOKING_CONFLICT
    assert [c.booking_id for c in excinfo.value.conflicts] == [booking.pk]
    assert not AvailabilityBlock.objects.exists()


def test_block_over_pending_booking_warns_both_sides(
    store, vehicle, provider_admin, renter_user, make_booking, django_capture_on_commit_callbacks
) -> None:
    booking = make_booking(date(2024, 6, 11), date(2024, 6, 13), vehicle=vehicle, status=Booking.Status.PENDING)

    with django_capture_on_commit_callbacks(execute=True):
        block = store.create_block(
            ListingRef.of(vehicle), date(2024, 6, 12), date(2024, 6, 14), "Maintenance", provider_admin
        )

    assert AvailabilityBlock.objects.filter(pk=block.pk).exists()
    warnings = Notification.objects.filter(type=NotificationType.AVAILABILITY_CONFLICT)
    assert sorted(warnings.values_list("user__email", flat=True)) == sorted(
        [renter_user.email, provider_admin.email]
    )
    renter_warning = warnings.get(user=renter_user)
    assert renter_warning.metadata["booking_number"] == booking.booking_number
    assert renter_warning.metadata["block_id"] == block.pk


def test_block_without_pending_overlap_sends_nothing(
    store, vehicle, provider_admin, django_capture_on_commit_callbacks
) -> None:
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        store.create_block(ListingRef.of(vehicle), date(2024, 6, 12), date(2024, 6, 14), "", provider_admin)
    assert callbacks == []
    assert not Notification.objects.exists()


def test_only_creator_deletes_block(store, vehicle, provider_admin, provider_company) -> None:
    block = store.create_block(ListingRef.of(vehicle), date(2024, 6, 10), date(2024, 6, 12), "", provider_admin)
    colleague = User.objects.create_user(email="colleague@nordlys.no", password="x", company=provider_company)

    with pytest.raises(AvailabilityError) as excinfo:
        store.delete_block(block.pk, colleague)
    assert _codes(excinfo) == ErrorCode.UNAUTHORIZED

    store.delete_block(block.pk, provider_admin)
    assert not AvailabilityBlock.objects.exists()

    with pytest.raises(AvailabilityError) as excinfo:
        store.delete_block(block.pk, provider_admin)
    assert _codes(excinfo) == ErrorCode.BLOCK_NOT_FOUND


def test_list_blocks_narrows_to_window(store, vehicle, provider_admin) -> None:
    ref = ListingRef.of(vehicle)
    first = store.create_block(ref, date(2024, 6, 1), date(2024, 6, 2), "", provider_admin)
    second = store.create_block(ref, date(2024, 6, 20), date(2024, 6, 22), "", provider_admin)

    assert store.list_blocks(ref) == [first, second]
    assert store.list_blocks(ref, date(2024, 6, 2), date(2024, 6, 10)) == [first]


# --- bulk ---------------------------------------------------------------------

def test_bulk_block_reports_each_listing(store, vehicle, provider_company, provider_admin, make_booking) -> None:
    busy = vehicle.__class__.objects.create(
        company=provider_company, title="Scania R500", daily_rate="2000.00"
    )
    make_booking(date(2024, 6, 10), date(2024, 6, 12), vehicle=busy)

    result = store.create_bulk_blocks(
        [vehicle.pk, busy.pk, 4040],
        "vehicle",
        date(2024, 6, 11),
        date(2024, 6, 11),
        "Inspection",
        provider_admin,
    )

    assert result.successful == [vehicle.pk]
    assert [(f["listing_id"], f["reason"]) for f in result.failed] == [
        (busy.pk, "BOOKING_CONFLICT"),
        (4040, "LISTING_NOT_FOUND"),
    ]
    assert result.failed[0]["conflicts"][0]["type"] == "booking"
    assert AvailabilityBlock.objects.count() == 1


def test_bulk_block_uses_authorize_hook(store, vehicle, provider_admin) -> None:
    def refuse(listing):
        raise AvailabilityError(ErrorCode.LISTING_ACCESS_DENIED)

    result = store.create_bulk_blocks(
        [vehicle.pk], "vehicle", date(2024, 6, 11), date(2024, 6, 12), "", provider_admin, authorize=refuse
    )
    assert result.successful == []
    assert result.failed[0]["reason"] == "LISTING_ACCESS_DENIED"


# --- recurring patterns -----------------------------------------------------

def test_create_recurring_pattern_normalizes_days(store, vehicle, provider_admin) -> None:
    pattern = store.create_recurring_pattern(
        ListingRef.of(vehicle), [3, 1, 3], date(2024, 6, 1), None, "Service", provider_admin
    )
    assert pattern.days_of_week == [1, 3]
    assert pattern.end_date is None


@pytest.mark.parametrize("days", [[], [7], [-1], ["1"], [True], "1,3"])
def test_invalid_days_of_week(store, vehicle, provider_admin, days) -> None:
    with pytest.raises(AvailabilityError) as excinfo:
        store.create_recurring_pattern(ListingRef.of(vehicle), days, date(2024, 6, 1), None, "", provider_admin)
    assert _codes(excinfo) == ErrorCode.INVALID_DAYS_OF_WEEK


def test_recurring_pattern_does_not_check_bookings(store, vehicle, provider_admin, make_booking) -> None:
    make_booking(date(2024, 6, 3), date(2024, 6, 5), vehicle=vehicle)
    pattern = store.create_recurring_pattern(
        ListingRef.of(vehicle), [1], date(2024, 6, 1), date(2024, 6, 30), "", provider_admin
    )
    assert pattern.pk is not None


def test_update_all_changes_pattern_in_place(store, pattern, provider_admin) -> None:
    updated = store.update_recurring_pattern(pattern.pk, {"days_of_week": [5]}, "all", None, provider_admin)
    assert updated.pk == pattern.pk
    assert updated.days_of_week == [5]
    assert RecurringBlockPattern.objects.count() == 1


def test_update_future_preserves_history(store, pattern, provider_admin) -> None:
    window = (date(2024, 6, 1), date(2024, 6, 30))
    before = [i.date for i in expand(pattern, *window) if i.date < date(2024, 6, 15)]

    successor = store.update_recurring_pattern(
        pattern.pk, {"days_of_week": [5], "reason": "Friday wash"}, "future", date(2024, 6, 15), provider_admin
    )

    pattern.refresh_from_db()
    assert pattern.end_date == date(2024, 6, 14)
    assert [i.date for i in expand(pattern, *window)] == before

    assert successor.pk != pattern.pk
    assert successor.split_from == pattern
    assert successor.start_date == date(2024, 6, 15)
    assert successor.end_date == date(2024, 6, 30)
    assert successor.days_of_week == [5]
    assert [i.date.day for i in expand(successor, *window)] == [21, 28]


def test_update_future_before_start_acts_like_all(store, pattern, provider_admin) -> None:
    updated = store.update_recurring_pattern(pattern.pk, {"reason": "x"}, "future", date(2024, 5, 1), provider_admin)
    assert updated.pk == pattern.pk
    assert RecurringBlockPattern.objects.count() == 1


def test_update_requires_known_scope_and_pivot(store, pattern, provider_admin) -> None:
    with pytest.raises(AvailabilityError) as excinfo:
        store.update_recurring_pattern(pattern.pk, {}, "someday", None, provider_admin)
    assert _codes(excinfo) == ErrorCode.INVALID_SCOPE

    with pytest.raises(AvailabilityError) as excinfo:
        store.update_recurring_pattern(pattern.pk, {}, "future", None, provider_admin)
    assert _codes(excinfo) == ErrorCode.INVALID_SCOPE


def test_update_checks_existence_and_creator(store, pattern, renter_user) -> None:
    with pytest.raises(AvailabilityError) as excinfo:
        store.update_recurring_pattern(pattern.pk + 100, {}, "all", None, renter_user)
    assert _codes(excinfo) == ErrorCode.RECURRING_BLOCK_NOT_FOUND

    with pytest.raises(AvailabilityError) as excinfo:
        store.update_recurring_pattern(pattern.pk, {"reason": "mine"}, "all", None, renter_user)
    assert _codes(excinfo) == ErrorCode.UNAUTHORIZED


def test_delete_all_removes_pattern(store, pattern, provider_admin) -> None:
    assert store.delete_recurring_pattern(pattern.pk, "all", None, provider_admin) is None
    assert not RecurringBlockPattern.objects.exists()


def test_delete_future_truncates(store, pattern, provider_admin) -> None:
    remaining = store.delete_recurring_pattern(pattern.pk, "future", date(2024, 6, 10), provider_admin)
    assert remaining.end_date == date(2024, 6, 9)
    assert [i.date.day for i in expand(remaining, date(2024, 6, 1), date(2024, 6, 30))] == [3, 5]


def test_delete_future_on_first_day_deletes(store, pattern, provider_admin) -> None:
    assert store.delete_recurring_pattern(pattern.pk, "future", pattern.start_date, provider_admin) is None
    assert not RecurringBlockPattern.objects.exists()
