"""Listing lookup, ownership checks and row locking."""

from __future__ import annotations

import logging
from typing import Iterable

from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from apps.availability.errors import ErrorCode, NotFound, PermissionDenied, ValidationFailed

from .models import LISTING_MODELS, ListingType

logger = logging.getLogger(__name__)


def parse_listing_type(value) -> ListingType:
    try:
        return ListingType(value)
    except ValueError:
        raise ValidationFailed(
            ErrorCode.INVALID_LISTING_TYPE,
            f"Listing type must be one of: {', '.join(ListingType.values)}.",
        ) from None


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def get_listing(listing_type, listing_id, *, not_found_code: ErrorCode = ErrorCode.LISTING_NOT_FOUND):
    """Return the vehicle or driver listing behind a listing reference."""

    model = LISTING_MODELS[parse_listing_type(listing_type)]
    try:
        return model.objects.select_related("company").get(pk=listing_id)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFound(not_found_code, f"{model._meta.verbose_name} {listing_id} not found.") from None


def ensure_listing_owner(listing, user) -> None:
    """Only members of the owning company (or platform admins) manage a listing."""

    if user.is_platform_admin():
        return
    if not user.belongs_to(listing.company_id):
        logger.warning(
            "User %s denied access to %s listing %s",
            user.pk,
            listing.listing_type,
            listing.pk,
        )
        raise PermissionDenied(ErrorCode.LISTING_ACCESS_DENIED, "You do not manage this listing.")


def lock_listings(listings: Iterable) -> list:
    """
    Take row locks on the given listings for the current transaction

    Locks are acquired in a stable (type, id) order so that two requests
    locking the same vehicle and driver cannot deadlock. Outside of an
    atomic block this is a plain read.
    """
    ordered = sorted(listings, key=lambda listing: (listing.listing_type, listing.pk))
    locked = []
    for listing in ordered:
        queryset = _lock_queryset_if_possible(type(listing).objects.filter(pk=listing.pk))
        locked.extend(queryset)
    return locked
