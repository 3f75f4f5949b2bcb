"""Named failures of the availability and booking engine.

Every failure a caller can act on carries a stable ``code`` from
:class:`ErrorCode`. The subclasses group codes by how the HTTP layer
reports them.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from django.db import models  # type: ignore


class ErrorCode(models.TextChoices):
    # Input validation
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE", "Invalid date range"
    INVALID_DAYS_OF_WEEK = "INVALID_DAYS_OF_WEEK", "Invalid days of week"
    INVALID_SCOPE = "INVALID_SCOPE", "Invalid scope"
    INVALID_LISTING_TYPE = "INVALID_LISTING_TYPE", "Invalid listing type"
    AT_LEAST_ONE_LISTING_REQUIRED = "AT_LEAST_ONE_LISTING_REQUIRED", "At least one listing required"
    COMPANY_REQUIRED = "COMPANY_REQUIRED", "Company required"
    SELF_BOOKING_NOT_ALLOWED = "SELF_BOOKING_NOT_ALLOWED", "Self booking not allowed"
    VEHICLE_PROVIDER_MISMATCH = "VEHICLE_PROVIDER_MISMATCH", "Vehicle provider mismatch"
    DRIVER_PROVIDER_MISMATCH = "DRIVER_PROVIDER_MISMATCH", "Driver provider mismatch"
    CROSS_COMPANY_VEHICLE_DRIVER_NOT_ALLOWED = (
        "CROSS_COMPANY_VEHICLE_DRIVER_NOT_ALLOWED",
        "Vehicle and driver belong to different companies",
    )
    CURRENCY_MISMATCH = "CURRENCY_MISMATCH", "Listings are priced in different currencies"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION", "Invalid status transition"
    BOOKING_EXPIRED = "BOOKING_EXPIRED", "Booking request expired"
    # Authorization
    UNAUTHORIZED = "UNAUTHORIZED", "Unauthorized"
    LISTING_ACCESS_DENIED = "LISTING_ACCESS_DENIED", "Listing access denied"
    # Not found
    BLOCK_NOT_FOUND = "BLOCK_NOT_FOUND", "Block not found"
    RECURRING_BLOCK_NOT_FOUND = "RECURRING_BLOCK_NOT_FOUND", "Recurring block not found"
    LISTING_NOT_FOUND = "LISTING_NOT_FOUND", "Listing not found"
    VEHICLE_LISTING_NOT_FOUND = "VEHICLE_LISTING_NOT_FOUND", "Vehicle listing not found"
    DRIVER_LISTING_NOT_FOUND = "DRIVER_LISTING_NOT_FOUND", "Driver listing not found"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND", "Booking not found"
    # Conflicts
    BOOKING_CONFLICT = "BOOKING_CONFLICT", "Booking conflict"
    NOT_AVAILABLE = "NOT_AVAILABLE", "Not available"
    VEHICLE_NOT_AVAILABLE = "VEHICLE_NOT_AVAILABLE", "Vehicle not available"
    DRIVER_NOT_AVAILABLE = "DRIVER_NOT_AVAILABLE", "Driver not available"


class AvailabilityError(Exception):
    """Base failure carrying a code, a human readable message and conflicts."""

    status_code = 400

    def __init__(self, code: ErrorCode | str, message: str | None = None, conflicts: Iterable = ()):
        self.code = ErrorCode(code)
        self.message = message or self.code.label
        self.conflicts: Sequence = tuple(conflicts)
        super().__init__(f"{self.code}: {self.message}")

    def as_dict(self) -> dict:
        payload = {"code": self.code.value, "message": self.message}
        if self.conflicts:
            payload["conflicts"] = [
                conflict.as_dict() if hasattr(conflict, "as_dict") else conflict
                for conflict in self.conflicts
            ]
        return payload


class ValidationFailed(AvailabilityError):
    status_code = 400


class PermissionDenied(AvailabilityError):
    status_code = 403


class NotFound(AvailabilityError):
    status_code = 404


class Conflict(AvailabilityError):
    status_code = 409
