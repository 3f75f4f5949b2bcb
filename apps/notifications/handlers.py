"""Turn committed domain events into user notifications."""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model  # type: ignore

from apps.availability.domain.events import PendingBookingsOverlapBlock
from apps.bookings.domain.events import BookingRejectedForBlockedDates, BookingRequested
from shared.application.message_bus import message_bus

from .models import NotificationType
from .services import notify, notify_many

logger = logging.getLogger(__name__)


def _user(user_id):
    if user_id is None:
        return None
    return get_user_model().objects.filter(pk=user_id, is_active=True).first()


def handle_booking_requested(event: BookingRequested) -> None:
    from apps.users.models import Company

    provider = Company.objects.filter(pk=event.provider_company_id).first()
    if provider is None:
        logger.warning(f"Provider company {event.provider_company_id} missing for booking {event.booking_number}")
        return

    listings = ", ".join(event.listing_titles) or "your listing"
    notify_many(
        provider.admins(),
        NotificationType.BOOKING_REQUEST_RECEIVED,
        "New booking request",
        f"Booking request {event.booking_number} for {listings} from {event.dates.start_date.isoformat()} "
        f"to {event.dates.end_date.isoformat()} ({event.total}). Please accept or decline it.",
        {
            "booking_id": event.booking_id,
            "booking_number": event.booking_number,
            "renter_company_id": event.renter_company_id,
            "start_date": event.dates.start_date.isoformat(),
            "end_date": event.dates.end_date.isoformat(),
        },
    )


def handle_booking_rejected_for_blocked_dates(event: BookingRejectedForBlockedDates) -> None:
    requester = _user(event.requested_by_id)
    if requester is None:
        logger.warning(f"No requester to tell about blocked dates on {event.listing_type} {event.listing_id}")
        return

    notify(
        requester,
        NotificationType.BOOKING_REJECTED_BLOCKED_DATES,
        "Booking Request Rejected - Dates Not Available",
        f"Your booking request for {event.listing_title} from {event.dates.start_date.isoformat()} to "
        f"{event.dates.end_date.isoformat()} was automatically rejected because the dates are blocked "
        f"by the provider. {event.conflict_summary}",
        {
            "listing_id": event.listing_id,
            "listing_type": event.listing_type,
            "listing_title": event.listing_title,
            "start_date": event.dates.start_date.isoformat(),
            "end_date": event.dates.end_date.isoformat(),
            "conflicts": event.conflict_summary,
        },
    )


def handle_pending_bookings_overlap_block(event: PendingBookingsOverlapBlock) -> None:
    from apps.bookings.models import Booking

    window = f"{event.dates.start_date.isoformat()} to {event.dates.end_date.isoformat()}"
    bookings = list(
        Booking.objects.filter(pk__in=event.pending_booking_ids).select_related("requested_by")
    )
    metadata = {
        "block_id": event.block_id,
        "listing_type": event.listing_type,
        "listing_id": event.listing_id,
        "start_date": event.dates.start_date.isoformat(),
        "end_date": event.dates.end_date.isoformat(),
    }

    for booking in bookings:
        if booking.requested_by is None:
            continue
        notify(
            booking.requested_by,
            NotificationType.AVAILABILITY_CONFLICT,
            "Dates of your pending booking were blocked",
            f"The provider blocked {window}, which overlaps your pending booking {booking.booking_number}. "
            "The request may be declined.",
            {**metadata, "booking_id": booking.pk, "booking_number": booking.booking_number},
        )

    creator = _user(event.created_by_id)
    if creator is not None:
        numbers = ", ".join(booking.booking_number for booking in bookings)
        notify(
            creator,
            NotificationType.AVAILABILITY_CONFLICT,
            "New block overlaps pending bookings",
            f"The block {window} overlaps pending booking requests: {numbers}. "
            "Decline or reschedule them before they are accepted.",
            {**metadata, "booking_ids": list(event.pending_booking_ids)},
        )


def register_handlers(bus=message_bus) -> None:
    bus.register_event_handler(BookingRequested, handle_booking_requested)
    bus.register_event_handler(BookingRejectedForBlockedDates, handle_booking_rejected_for_blocked_dates)
    bus.register_event_handler(PendingBookingsOverlapBlock, handle_pending_bookings_overlap_block)
