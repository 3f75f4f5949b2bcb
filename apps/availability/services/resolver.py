"""
Conflict Resolver

The single answer to "can this listing be rented in this window". It
merges three independent sources of unavailability:

- manual blocks
- recurring patterns, expanded against the window
- bookings that currently hold their dates

The same gathering step feeds analytics and the calendar export, which
only differ in which booking statuses they count.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from django.db import connection, transaction  # type: ignore
from django.db.models import Q  # type: ignore

from apps.bookings.models import Booking
from apps.listings.models import ListingRef
from shared.domain.dates import normalize, overlap_q, overlaps

from ..conf import engine_setting
from ..domain.conflicts import AvailabilityResult, ConflictDetail
from ..domain.recurrence import RecurringInstance, expand_all
from ..errors import ErrorCode, ValidationFailed
from ..models import AvailabilityBlock, RecurringBlockPattern

logger = logging.getLogger(__name__)


@dataclass
class AvailabilitySources:
    """Everything that makes a listing unavailable inside a window."""

    start: date
    end: date
    blocks: list[AvailabilityBlock] = field(default_factory=list)
    instances: list[RecurringInstance] = field(default_factory=list)
    bookings: list[Booking] = field(default_factory=list)

    def conflicts(self) -> list[ConflictDetail]:
        details = [ConflictDetail.from_block(block) for block in self.blocks]
        details.extend(ConflictDetail.from_instance(instance) for instance in self.instances)
        details.extend(ConflictDetail.from_booking(booking) for booking in self.bookings)
        return details


def _close_connection_after(func, *args):
    try:
        return func(*args)
    finally:
        connection.close()


class ConflictResolver:
    """Stateless; construct one per request."""

    def __init__(self, *, parallel: bool | None = None):
        self.parallel = engine_setting("PARALLEL_FETCH") if parallel is None else parallel

    # --- fetching -----------------------------------------------------------
    def fetch_blocks(self, ref: ListingRef, start: date, end: date) -> list[AvailabilityBlock]:
        queryset = AvailabilityBlock.objects.for_listing(ref.listing_type, ref.listing_id)
        return [
            block
            for block in queryset.filter(overlap_q(start, end))
            if overlaps(block.start_date, block.end_date, start, end)
        ]

    def fetch_patterns(self, ref: ListingRef, start: date, end: date) -> list[RecurringBlockPattern]:
        queryset = RecurringBlockPattern.objects.for_listing(ref.listing_type, ref.listing_id)
        active = overlap_q(start, end) | (Q(end_date__isnull=True) & Q(start_date__lte=end))
        return list(queryset.filter(active))

    def fetch_bookings(
        self,
        ref: ListingRef,
        start: date,
        end: date,
        statuses: Iterable[str] = Booking.CONFLICT_STATUSES,
        exclude_booking_id: int | None = None,
    ) -> list[Booking]:
        queryset = (
            Booking.objects.for_listing(ref.listing_type, ref.listing_id)
            .filter(status__in=list(statuses))
            .overlapping(start, end)
            .order_by("start_date", "id")
        )
        if exclude_booking_id is not None:
            queryset = queryset.exclude(pk=exclude_booking_id)
        return [
            booking
            for booking in queryset
            if overlaps(booking.start_date, booking.end_date, start, end)
        ]

    def gather(
        self,
        ref: ListingRef,
        start,
        end,
        *,
        booking_statuses: Iterable[str] = Booking.CONFLICT_STATUSES,
        exclude_booking_id: int | None = None,
    ) -> AvailabilitySources:
        start, end = normalize(start), normalize(end)
        if start > end:
            raise ValidationFailed(ErrorCode.INVALID_DATE_RANGE, "Start date must not be after end date.")

        statuses = tuple(booking_statuses)
        jobs = (
            (self.fetch_blocks, (ref, start, end)),
            (self.fetch_patterns, (ref, start, end)),
            (self.fetch_bookings, (ref, start, end, statuses, exclude_booking_id)),
        )

        if self.parallel and not transaction.get_connection().in_atomic_block:
            with ThreadPoolExecutor(max_workers=len(jobs)) as executor:
                futures = [executor.submit(_close_connection_after, func, *args) for func, args in jobs]
                blocks, patterns, bookings = [future.result() for future in futures]
        else:
            # Inside a transaction every read must see the locked rows on this connection.
            blocks, patterns, bookings = [func(*args) for func, args in jobs]

        return AvailabilitySources(
            start=start,
            end=end,
            blocks=blocks,
            instances=expand_all(patterns, start, end),
            bookings=bookings,
        )

    # --- verdict ------------------------------------------------------------
    def check_availability(
        self,
        ref: ListingRef,
        start,
        end,
        *,
        exclude_booking_id: int | None = None,
    ) -> AvailabilityResult:
        sources = self.gather(ref, start, end, exclude_booking_id=exclude_booking_id)
        conflicts = sources.conflicts()
        if conflicts:
            logger.info(
                "Listing %s unavailable %s..%s: %d conflicts",
                ref,
                sources.start,
                sources.end,
                len(conflicts),
            )
        return AvailabilityResult(available=not conflicts, conflicts=conflicts)
