"""Availability domain events."""

from dataclasses import dataclass

from shared.domain.base import DomainEvent
from shared.domain.value_objects import DateRange


@dataclass
class PendingBookingsOverlapBlock(DomainEvent):
    """
    Event: A new block covers dates of bookings that are still pending

    The block is kept. Renters of the pending bookings and the provider
    who created the block are warned once the block is committed.
    """
    block_id: int
    listing_type: str
    listing_id: int
    dates: DateRange
    reason: str
    created_by_id: int
    pending_booking_ids: tuple[int, ...]
