"""Listing models.

Vehicles and drivers are offered separately; a booking may combine one of
each when both belong to the same provider company.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class ListingType(models.TextChoices):
    VEHICLE = "vehicle", _("Vehicle")
    DRIVER = "driver", _("Driver")


class ListingStatus(models.TextChoices):
    DRAFT = "draft", _("Draft")
    ACTIVE = "active", _("Active")
    INACTIVE = "inactive", _("Inactive")


def _default_currency() -> str:
    return settings.AVAILABILITY_ENGINE.get("DEFAULT_CURRENCY", "NOK")


class Listing(models.Model):
    """Fields shared by vehicle and driver listings."""

    listing_type: str = ""

    company = models.ForeignKey(
        "users.Company",
        on_delete=models.CASCADE,
        related_name="%(class)ss",
    )
    description = models.TextField(blank=True)
    daily_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    currency = models.CharField(max_length=3, default=_default_currency)
    status = models.CharField(max_length=20, choices=ListingStatus.choices, default=ListingStatus.DRAFT)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    @property
    def display_name(self) -> str:
        raise NotImplementedError

    def activate(self) -> None:
        if self.status != ListingStatus.ACTIVE:
            self.status = ListingStatus.ACTIVE
            self.save(update_fields=["status", "updated_at"])

    def deactivate(self) -> None:
        if self.status == ListingStatus.ACTIVE:
            self.status = ListingStatus.INACTIVE
            self.save(update_fields=["status", "updated_at"])


class VehicleListing(Listing):
    listing_type = ListingType.VEHICLE

    title = models.CharField(max_length=255)
    registration_number = models.CharField(max_length=20, blank=True)
    vehicle_type = models.CharField(max_length=50, blank=True)
    capacity = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        verbose_name = _("Vehicle listing")
        verbose_name_plural = _("Vehicle listings")
        ordering = ["title"]
        indexes = [
            models.Index(fields=["company", "status"], name="vehicle_company_status_idx"),
        ]

    def __str__(self) -> str:
        return self.title

    @property
    def display_name(self) -> str:
        return self.title


class DriverListing(Listing):
    listing_type = ListingType.DRIVER

    name = models.CharField(max_length=255)
    license_class = models.CharField(max_length=20, blank=True)
    languages = models.JSONField(default=list, blank=True)

    class Meta:
        verbose_name = _("Driver listing")
        verbose_name_plural = _("Driver listings")
        ordering = ["name"]
        indexes = [
            models.Index(fields=["company", "status"], name="driver_company_status_idx"),
        ]

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name


@dataclass(frozen=True)
class ListingRef:
    """Identifies the subject of availability: ``(listing_type, listing_id)``."""

    listing_type: str
    listing_id: int

    @classmethod
    def of(cls, listing: Listing) -> "ListingRef":
        return cls(str(listing.listing_type), listing.pk)

    def __str__(self) -> str:
        return f"{self.listing_type}:{self.listing_id}"


LISTING_MODELS = {
    ListingType.VEHICLE: VehicleListing,
    ListingType.DRIVER: DriverListing,
}
