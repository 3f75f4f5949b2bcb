"""
Booking Admission Gate

The write path for booking requests. Availability is re-checked and the
booking inserted inside one transaction that holds row locks on every
requested listing, so two concurrent requests for the same listing are
serialized and cannot both see the dates as free.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.availability.conf import engine_setting
from apps.availability.domain.conflicts import AvailabilityResult
from apps.availability.errors import AvailabilityError, Conflict, ErrorCode, NotFound, ValidationFailed
from apps.availability.services.resolver import ConflictResolver
from apps.listings.models import ListingRef, ListingType
from apps.listings.services import get_listing, lock_listings
from shared.application.message_bus import message_bus
from shared.application.uow import DjangoUnitOfWork
from shared.domain.dates import days_between, normalize
from shared.domain.value_objects import DateRange, Money

from .domain.events import BookingRejectedForBlockedDates, BookingRequested
from .models import Booking

logger = logging.getLogger(__name__)


@dataclass
class BookingRequest:
    """Input of :meth:`BookingAdmissionGate.create_booking_request`."""

    renter_company_id: int | None
    start_date: date
    end_date: date
    requested_by: Any = None
    provider_company_id: int | None = None
    vehicle_listing_id: int | None = None
    driver_listing_id: int | None = None
    notes: str = ""


class BookingAdmissionGate:
    """Stateless; construct one per request."""

    NOT_AVAILABLE_CODES = {
        ListingType.VEHICLE: ErrorCode.VEHICLE_NOT_AVAILABLE,
        ListingType.DRIVER: ErrorCode.DRIVER_NOT_AVAILABLE,
    }

    def __init__(self, resolver: ConflictResolver | None = None, bus=message_bus):
        self.resolver = resolver or ConflictResolver()
        self.bus = bus

    # --- validation ---------------------------------------------------------
    def _validate(self, request: BookingRequest) -> DateRange:
        if not request.vehicle_listing_id and not request.driver_listing_id:
            raise ValidationFailed(
                ErrorCode.AT_LEAST_ONE_LISTING_REQUIRED, "Request a vehicle, a driver or both."
            )

        start, end = normalize(request.start_date), normalize(request.end_date)
        if start >= end:
            raise ValidationFailed(ErrorCode.INVALID_DATE_RANGE, "End date must be after start date.")

        if request.renter_company_id is None:
            raise ValidationFailed(ErrorCode.COMPANY_REQUIRED, "Join a company before requesting bookings.")
        return DateRange(start, end)

    def _load_listings(self, request: BookingRequest) -> list:
        listings = []
        vehicle = driver = None

        if request.vehicle_listing_id:
            vehicle = get_listing(
                ListingType.VEHICLE,
                request.vehicle_listing_id,
                not_found_code=ErrorCode.VEHICLE_LISTING_NOT_FOUND,
            )
            listings.append(vehicle)
        if request.driver_listing_id:
            driver = get_listing(
                ListingType.DRIVER,
                request.driver_listing_id,
                not_found_code=ErrorCode.DRIVER_LISTING_NOT_FOUND,
            )
            listings.append(driver)

        explicit_provider = request.provider_company_id is not None
        if not explicit_provider:
            request.provider_company_id = listings[0].company_id

        if request.renter_company_id == request.provider_company_id:
            raise ValidationFailed(
                ErrorCode.SELF_BOOKING_NOT_ALLOWED, "A company cannot book its own listings."
            )
        if explicit_provider and vehicle is not None and vehicle.company_id != request.provider_company_id:
            raise ValidationFailed(
                ErrorCode.VEHICLE_PROVIDER_MISMATCH, "The vehicle does not belong to the provider company."
            )
        if explicit_provider and driver is not None and driver.company_id != request.provider_company_id:
            raise ValidationFailed(
                ErrorCode.DRIVER_PROVIDER_MISMATCH, "The driver does not belong to the provider company."
            )
        if vehicle is not None and driver is not None and vehicle.company_id != driver.company_id:
            raise ValidationFailed(
                ErrorCode.CROSS_COMPANY_VEHICLE_DRIVER_NOT_ALLOWED,
                "Vehicle and driver must come from the same company.",
            )
        return listings

    @staticmethod
    def _cost(listings, duration_days: int) -> tuple[Money, dict[str, Any]]:
        total = None
        try:
            for listing in listings:
                cost = Money(listing.daily_rate, listing.currency) * duration_days
                total = cost if total is None else total + cost
        except ValueError as exc:
            raise ValidationFailed(ErrorCode.CURRENCY_MISMATCH, str(exc)) from None
        return total, {"provider_rate": total.amount, "total": total.amount, "currency": total.currency}

    # --- admission ----------------------------------------------------------
    def _rejection(self, listing, result: AvailabilityResult, request: BookingRequest, dates: DateRange):
        summary = "; ".join(conflict.describe() for conflict in result.conflicts)
        ref = ListingRef.of(listing)

        if result.block_conflicts:
            event = BookingRejectedForBlockedDates(
                requested_by_id=getattr(request.requested_by, "pk", None),
                listing_type=ref.listing_type,
                listing_id=ref.listing_id,
                listing_title=listing.display_name,
                dates=dates,
                conflict_summary=summary,
            )
            error = Conflict(
                ErrorCode.NOT_AVAILABLE,
                f"{listing.display_name} is blocked on the requested dates. {summary}",
                conflicts=result.conflicts,
            )
            return error, event

        error = Conflict(
            self.NOT_AVAILABLE_CODES[ListingType(ref.listing_type)],
            f"{listing.display_name} is already booked on the requested dates. {summary}",
            conflicts=result.conflicts,
        )
        return error, None

    def create_booking_request(self, request: BookingRequest) -> Booking:
        """
        Admit a booking request as PENDING or reject it

        Raises :class:`AvailabilityError` subclasses. A rejection caused by
        blocked dates also tells the requester, once the transaction has
        been rolled back.
        """
        dates = self._validate(request)
        listings = self._load_listings(request)
        duration_days = days_between(dates.start_date, dates.end_date)
        total, costs = self._cost(listings, duration_days)

        rejection_event = None
        try:
            with DjangoUnitOfWork() as uow:
                lock_listings(listings)

                for listing in listings:
                    result = self.resolver.check_availability(
                        ListingRef.of(listing), dates.start_date, dates.end_date
                    )
                    if not result.available:
                        error, rejection_event = self._rejection(listing, result, request, dates)
                        raise error

                booking = Booking.objects.create(
                    renter_company_id=request.renter_company_id,
                    provider_company_id=request.provider_company_id,
                    vehicle_listing=next((l for l in listings if l.listing_type == ListingType.VEHICLE), None),
                    driver_listing=next((l for l in listings if l.listing_type == ListingType.DRIVER), None),
                    requested_by=request.requested_by,
                    start_date=dates.start_date,
                    end_date=dates.end_date,
                    status=Booking.Status.PENDING,
                    duration_days=duration_days,
                    notes=request.notes,
                    expires_at=timezone.now() + timedelta(hours=engine_setting("BOOKING_TIMEOUT_HOURS")),
                    **costs,
                )
                uow.record(
                    BookingRequested(
                        booking_id=booking.pk,
                        booking_number=booking.booking_number,
                        renter_company_id=booking.renter_company_id,
                        provider_company_id=booking.provider_company_id,
                        requested_by_id=booking.requested_by_id,
                        dates=dates,
                        total=total,
                        listing_titles=tuple(listing.display_name for listing in listings),
                    )
                )
        except AvailabilityError as exc:
            logger.info("Booking request for %s rejected: %s", dates, exc.code)
            if rejection_event is not None:
                self.bus.publish_events([rejection_event])
            raise

        logger.info(
            "Booking request created",
            extra={
                "booking_id": booking.pk,
                "booking_number": booking.booking_number,
                "renter_company_id": booking.renter_company_id,
                "provider_company_id": booking.provider_company_id,
                "total": str(booking.total),
            },
        )
        return booking


# --- status changes ---------------------------------------------------------

def change_booking_status(booking: Booking, status: str, *, reason: str = "") -> Booking:
    """Apply a status transition under a row lock on the booking."""

    with transaction.atomic():
        booking = Booking.objects.select_for_update().get(pk=booking.pk)
        if not booking.can_transition_to(status):
            raise ValidationFailed(
                ErrorCode.INVALID_STATUS_TRANSITION,
                f"Cannot move booking {booking.booking_number} from {booking.status} to {status}.",
            )
        if status == Booking.Status.ACCEPTED and booking.should_expire():
            raise ValidationFailed(
                ErrorCode.BOOKING_EXPIRED,
                f"Booking request {booking.booking_number} expired at {booking.expires_at.isoformat()}.",
            )
        if status == Booking.Status.CANCELLED:
            booking.mark_cancelled(reason)
        else:
            booking.transition_to(status)
    logger.info("Booking %s moved to %s", booking.booking_number, status)
    return booking


def get_booking(booking_id) -> Booking:
    try:
        return Booking.objects.select_related(
            "renter_company", "provider_company", "vehicle_listing", "driver_listing"
        ).get(pk=booking_id)
    except (Booking.DoesNotExist, ValueError):
        raise NotFound(ErrorCode.BOOKING_NOT_FOUND, f"Booking {booking_id} not found.") from None
