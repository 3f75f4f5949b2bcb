"""Booking domain models for the rental marketplace."""

from __future__ import annotations

import secrets
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.db import models  # type: ignore
from django.db.models import F, Q  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.listings.models import ListingType
from shared.domain.dates import overlap_q


class BookingQuerySet(models.QuerySet):
    def for_listing(self, listing_type: str, listing_id: int):
        if listing_type == ListingType.VEHICLE:
            return self.filter(vehicle_listing_id=listing_id)
        return self.filter(driver_listing_id=listing_id)

    def overlapping(self, start, end):
        return self.filter(overlap_q(start, end))


class Booking(models.Model):
    """Rental of a vehicle, a driver or both from one provider company."""

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        ACCEPTED = "ACCEPTED", _("Accepted")
        ACTIVE = "ACTIVE", _("Active")
        COMPLETED = "COMPLETED", _("Completed")
        CANCELLED = "CANCELLED", _("Cancelled")
        DISPUTED = "DISPUTED", _("Disputed")
        CLOSED = "CLOSED", _("Closed")

    CONFLICT_STATUSES = (Status.PENDING, Status.ACCEPTED, Status.ACTIVE)
    UTILIZATION_STATUSES = (Status.ACCEPTED, Status.ACTIVE, Status.COMPLETED)

    TRANSITIONS = {
        Status.PENDING: (Status.ACCEPTED, Status.CANCELLED),
        Status.ACCEPTED: (Status.ACTIVE, Status.CANCELLED),
        Status.ACTIVE: (Status.COMPLETED, Status.DISPUTED, Status.CANCELLED),
        Status.COMPLETED: (Status.CLOSED, Status.DISPUTED),
        Status.DISPUTED: (Status.CLOSED, Status.CANCELLED),
        Status.CANCELLED: (),
        Status.CLOSED: (),
    }

    booking_number = models.CharField(max_length=32, unique=True, editable=False)
    renter_company = models.ForeignKey(
        "users.Company",
        on_delete=models.PROTECT,
        related_name="rentals",
    )
    provider_company = models.ForeignKey(
        "users.Company",
        on_delete=models.PROTECT,
        related_name="provided_bookings",
    )
    vehicle_listing = models.ForeignKey(
        "listings.VehicleListing",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="bookings",
    )
    driver_listing = models.ForeignKey(
        "listings.DriverListing",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="bookings",
    )
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="booking_requests",
    )
    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    duration_days = models.PositiveIntegerField(default=1)
    provider_rate = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="NOK")
    notes = models.TextField(blank=True)
    expires_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_("Pending requests not answered by this time are cancelled."),
    )
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__gt=F("start_date")),
                name="booking_valid_dates",
            ),
            models.CheckConstraint(
                condition=Q(vehicle_listing__isnull=False) | Q(driver_listing__isnull=False),
                name="booking_has_listing",
            ),
        ]
        indexes = [
            models.Index(fields=["vehicle_listing", "start_date", "end_date"], name="booking_vehicle_dates_idx"),
            models.Index(fields=["driver_listing", "start_date", "end_date"], name="booking_driver_dates_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.booking_number} ({self.status})"

    def clean(self) -> None:
        if self.start_date and self.end_date and self.start_date >= self.end_date:
            raise ValidationError(_("End date must be after start date."))
        if not self.vehicle_listing_id and not self.driver_listing_id:
            raise ValidationError(_("A booking needs a vehicle or a driver listing."))

    def save(self, *args, **kwargs):  # type: ignore
        if self._state.adding and not self.booking_number:
            self.booking_number = self.generate_booking_number()
        super().save(*args, **kwargs)

    @staticmethod
    def generate_booking_number() -> str:
        timestamp = int(timezone.now().timestamp() * 1000)
        return f"BK-{timestamp}-{secrets.randbelow(1000):03d}"

    def can_transition_to(self, status: str) -> bool:
        return status in self.TRANSITIONS.get(self.status, ())

    def transition_to(self, status: str) -> None:
        if not self.can_transition_to(status):
            raise ValidationError(
                _("Cannot move booking from %(current)s to %(target)s."),
                params={"current": self.status, "target": status},
            )
        self.status = status
        update_fields = ["status", "updated_at"]
        if status == self.Status.CANCELLED:
            self.cancelled_at = timezone.now()
            update_fields += ["cancelled_at", "cancellation_reason"]
        self.save(update_fields=update_fields)

    def mark_cancelled(self, reason: str = "") -> None:
        self.cancellation_reason = reason
        self.transition_to(self.Status.CANCELLED)

    def should_expire(self) -> bool:
        return bool(self.expires_at and timezone.now() > self.expires_at and self.status == self.Status.PENDING)
