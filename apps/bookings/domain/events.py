"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
BookingRequested is published after the booking commits; the rejection
event is published after the admission transaction has been rolled back.
"""

from dataclasses import dataclass

from shared.domain.base import DomainEvent
from shared.domain.value_objects import DateRange, Money


@dataclass
class BookingRequested(DomainEvent):
    """
    Event: A renter company requested a booking (status PENDING)

    Triggers:
    - Notify the provider company's admins
    """
    booking_id: int
    booking_number: str
    renter_company_id: int
    provider_company_id: int
    requested_by_id: int | None
    dates: DateRange
    total: Money
    listing_titles: tuple[str, ...] = ()


@dataclass
class BookingRejectedForBlockedDates(DomainEvent):
    """
    Event: A booking request hit a manual or recurring block

    Triggers:
    - Tell the requester which dates are blocked
    """
    requested_by_id: int | None
    listing_type: str
    listing_id: int
    listing_title: str
    dates: DateRange
    conflict_summary: str
