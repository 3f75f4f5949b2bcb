"""
Block Store

Manual blocks and recurring weekly patterns for a listing.

Creating a manual block re-checks bookings under the listing's row lock:
accepted or active bookings make the block fail, pending ones only
trigger a warning once the block commits. Recurring patterns are set
ahead of time and are not checked against bookings.

Changing or deleting a recurring pattern with ``scope="future"`` splits
it at a pivot date so that every instance before the pivot stays exactly
as it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable

from django.db import transaction  # type: ignore

from apps.bookings.models import Booking
from apps.listings.models import ListingRef
from apps.listings.services import get_listing, lock_listings
from shared.application.uow import DjangoUnitOfWork
from shared.domain.dates import normalize
from shared.domain.value_objects import DateRange

from ..domain.conflicts import ConflictDetail
from ..domain.events import PendingBookingsOverlapBlock
from ..errors import AvailabilityError, Conflict, ErrorCode, NotFound, PermissionDenied, ValidationFailed
from ..models import AvailabilityBlock, RecurringBlockPattern
from .resolver import ConflictResolver

logger = logging.getLogger(__name__)

SCOPE_ALL = "all"
SCOPE_FUTURE = "future"
SCOPES = (SCOPE_ALL, SCOPE_FUTURE)

PATTERN_FIELDS = ("days_of_week", "start_date", "end_date", "reason")


@dataclass
class BulkBlockResult:
    successful: list[int] = field(default_factory=list)
    failed: list[dict[str, Any]] = field(default_factory=list)
    blocks: list[AvailabilityBlock] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {"successful": self.successful, "failed": self.failed}


def _date_range(start, end) -> DateRange:
    start, end = normalize(start), normalize(end)
    if start > end:
        raise ValidationFailed(ErrorCode.INVALID_DATE_RANGE, "Start date must not be after end date.")
    return DateRange(start, end)


def validate_days_of_week(days) -> list[int]:
    if isinstance(days, (str, bytes)) or not isinstance(days, Iterable):
        raise ValidationFailed(ErrorCode.INVALID_DAYS_OF_WEEK, "Days of week must be a list of weekdays.")
    days = list(days)
    if not days:
        raise ValidationFailed(ErrorCode.INVALID_DAYS_OF_WEEK, "Pick at least one weekday.")
    for day in days:
        if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
            raise ValidationFailed(
                ErrorCode.INVALID_DAYS_OF_WEEK,
                "Weekdays are numbered 0 (Sunday) to 6 (Saturday).",
            )
    return sorted(set(days))


def _ensure_creator(obj, requester) -> None:
    if obj.created_by_id != requester.pk:
        logger.warning(
            "User %s tried to change %s %s owned by %s",
            requester.pk,
            obj._meta.verbose_name,
            obj.pk,
            obj.created_by_id,
        )
        raise PermissionDenied(ErrorCode.UNAUTHORIZED, "Only the creator can change this block.")


class BlockStore:
    """Stateless; construct one per request."""

    def __init__(self, resolver: ConflictResolver | None = None):
        self.resolver = resolver or ConflictResolver()

    # --- manual blocks ------------------------------------------------------
    def list_blocks(self, ref: ListingRef, start=None, end=None):
        if start is not None and end is not None:
            window = _date_range(start, end)
            return self.resolver.fetch_blocks(ref, *window.as_tuple())
        return list(AvailabilityBlock.objects.for_listing(ref.listing_type, ref.listing_id))

    def create_block(self, ref: ListingRef, start, end, reason: str, creator) -> AvailabilityBlock:
        dates = _date_range(start, end)

        with DjangoUnitOfWork() as uow:
            lock_listings([get_listing(ref.listing_type, ref.listing_id)])

            bookings = self.resolver.fetch_bookings(ref, dates.start_date, dates.end_date)
            live = [booking for booking in bookings if booking.status != Booking.Status.PENDING]
            if live:
                logger.info("Block %s on %s refused: %d live bookings overlap", dates, ref, len(live))
                raise Conflict(
                    ErrorCode.BOOKING_CONFLICT,
                    "Cannot block dates that have accepted or active bookings.",
                    conflicts=[ConflictDetail.from_booking(booking) for booking in live],
                )

            block = AvailabilityBlock.objects.create(
                listing_type=ref.listing_type,
                listing_id=ref.listing_id,
                start_date=dates.start_date,
                end_date=dates.end_date,
                reason=reason or "",
                created_by=creator,
            )
            pending = [booking.pk for booking in bookings]
            if pending:
                uow.record(
                    PendingBookingsOverlapBlock(
                        block_id=block.pk,
                        listing_type=ref.listing_type,
                        listing_id=ref.listing_id,
                        dates=dates,
                        reason=block.reason,
                        created_by_id=creator.pk,
                        pending_booking_ids=tuple(pending),
                    )
                )

        logger.info("Block %s created on %s (%s)", block.pk, ref, dates)
        return block

    def create_bulk_blocks(
        self,
        listing_ids: Iterable[int],
        listing_type: str,
        start,
        end,
        reason: str,
        creator,
        *,
        authorize=None,
    ) -> BulkBlockResult:
        """
        Block the same dates on several listings

        Each listing succeeds or fails on its own; one failure never rolls
        back another listing's block. ``authorize(listing)`` may raise to
        refuse a listing.
        """
        dates = _date_range(start, end)
        result = BulkBlockResult()
        for listing_id in listing_ids:
            ref = ListingRef(listing_type, listing_id)
            try:
                if authorize is not None:
                    authorize(get_listing(listing_type, listing_id))
                block = self.create_block(ref, dates.start_date, dates.end_date, reason, creator)
            except AvailabilityError as exc:
                result.failed.append(
                    {
                        "listing_id": listing_id,
                        "reason": exc.code.value,
                        "message": exc.message,
                        "conflicts": [conflict.as_dict() for conflict in exc.conflicts],
                    }
                )
                continue
            result.successful.append(listing_id)
            result.blocks.append(block)

        logger.info(
            "Bulk block on %d %s listings: %d created, %d failed",
            len(result.successful) + len(result.failed),
            listing_type,
            len(result.successful),
            len(result.failed),
        )
        return result

    def delete_block(self, block_id, requester) -> None:
        try:
            block = AvailabilityBlock.objects.get(pk=block_id)
        except (AvailabilityBlock.DoesNotExist, ValueError):
            raise NotFound(ErrorCode.BLOCK_NOT_FOUND, f"Block {block_id} not found.") from None
        _ensure_creator(block, requester)
        block.delete()
        logger.info("Block %s deleted by user %s", block_id, requester.pk)

    # --- recurring patterns -------------------------------------------------
    def list_recurring_patterns(self, ref: ListingRef):
        return list(RecurringBlockPattern.objects.for_listing(ref.listing_type, ref.listing_id))

    def create_recurring_pattern(
        self,
        ref: ListingRef,
        days_of_week,
        start,
        end,
        reason: str,
        creator,
    ) -> RecurringBlockPattern:
        days = validate_days_of_week(days_of_week)
        start_date = normalize(start)
        end_date = normalize(end) if end else None
        if end_date is not None:
            _date_range(start_date, end_date)

        pattern = RecurringBlockPattern.objects.create(
            listing_type=ref.listing_type,
            listing_id=ref.listing_id,
            days_of_week=days,
            start_date=start_date,
            end_date=end_date,
            reason=reason or "",
            created_by=creator,
        )
        logger.info("Recurring pattern %s created on %s for weekdays %s", pattern.pk, ref, days)
        return pattern

    def _get_pattern(self, pattern_id) -> RecurringBlockPattern:
        try:
            return RecurringBlockPattern.objects.get(pk=pattern_id)
        except (RecurringBlockPattern.DoesNotExist, ValueError):
            raise NotFound(
                ErrorCode.RECURRING_BLOCK_NOT_FOUND, f"Recurring block {pattern_id} not found."
            ) from None

    @staticmethod
    def _check_scope(scope: str, pivot_date) -> date | None:
        if scope not in SCOPES:
            raise ValidationFailed(ErrorCode.INVALID_SCOPE, f"Scope must be one of: {', '.join(SCOPES)}.")
        if scope == SCOPE_FUTURE:
            if pivot_date is None:
                raise ValidationFailed(ErrorCode.INVALID_SCOPE, "A pivot date is required for future scope.")
            return normalize(pivot_date)
        return None

    @staticmethod
    def _merged_fields(pattern: RecurringBlockPattern, changes: dict) -> dict:
        merged = {name: changes.get(name, getattr(pattern, name)) for name in PATTERN_FIELDS}
        merged["days_of_week"] = validate_days_of_week(merged["days_of_week"])
        merged["start_date"] = normalize(merged["start_date"])
        merged["end_date"] = normalize(merged["end_date"]) if merged["end_date"] else None
        merged["reason"] = merged["reason"] or ""
        if merged["end_date"] is not None:
            _date_range(merged["start_date"], merged["end_date"])
        return merged

    def update_recurring_pattern(
        self,
        pattern_id,
        changes: dict,
        scope: str,
        pivot_date,
        requester,
    ) -> RecurringBlockPattern:
        """
        Change a recurring pattern

        ``all`` rewrites the pattern in place. ``future`` ends the original
        the day before ``pivot_date`` and returns a new pattern starting on
        the pivot that carries the changes. A pivot on or before the
        pattern's start leaves no history to keep, so it acts like ``all``.
        """
        with transaction.atomic():
            pattern = self._get_pattern(pattern_id)
            _ensure_creator(pattern, requester)
            pivot = self._check_scope(scope, pivot_date)

            if pivot is None or pivot <= pattern.start_date:
                merged = self._merged_fields(pattern, changes)
                for name, value in merged.items():
                    setattr(pattern, name, value)
                pattern.save()
                logger.info("Recurring pattern %s updated in place", pattern.pk)
                return pattern

            if pattern.end_date is not None and pattern.end_date < pivot:
                logger.info("Recurring pattern %s ends before %s; nothing to change", pattern.pk, pivot)
                return pattern

            successor_changes = {"start_date": pivot, **changes}
            if "start_date" in changes and normalize(changes["start_date"]) < pivot:
                successor_changes["start_date"] = pivot
            merged = self._merged_fields(pattern, successor_changes)

            pattern.end_date = pivot - timedelta(days=1)
            pattern.save(update_fields=["end_date", "updated_at"])

            successor = RecurringBlockPattern.objects.create(
                listing_type=pattern.listing_type,
                listing_id=pattern.listing_id,
                created_by=pattern.created_by,
                split_from=pattern,
                **merged,
            )
            logger.info(
                "Recurring pattern %s split at %s; successor %s",
                pattern.pk,
                pivot,
                successor.pk,
            )
            return successor

    def delete_recurring_pattern(self, pattern_id, scope: str, pivot_date, requester) -> RecurringBlockPattern | None:
        """
        Remove a recurring pattern

        ``future`` keeps the instances before ``pivot_date`` and returns the
        truncated pattern; when nothing would remain the pattern is deleted
        and None is returned.
        """
        with transaction.atomic():
            pattern = self._get_pattern(pattern_id)
            _ensure_creator(pattern, requester)
            pivot = self._check_scope(scope, pivot_date)

            if pivot is None or pivot <= pattern.start_date:
                pattern.delete()
                logger.info("Recurring pattern %s deleted", pattern_id)
                return None

            new_end = pivot - timedelta(days=1)
            if pattern.end_date is None or pattern.end_date > new_end:
                pattern.end_date = new_end
                pattern.save(update_fields=["end_date", "updated_at"])
            logger.info("Recurring pattern %s truncated to end %s", pattern.pk, pattern.end_date)
            return pattern
