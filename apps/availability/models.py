"""Availability models.

A listing is unavailable on a day when a manual block covers it, when a
recurring weekly pattern expands to it, or when a live booking holds it.
Blocks and patterns reference listings by ``(listing_type, listing_id)``
so a single table serves vehicles and drivers.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.db import models  # type: ignore
from django.db.models import F, Q  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.listings.models import ListingType


class ListingScopedQuerySet(models.QuerySet):
    def for_listing(self, listing_type: str, listing_id: int):
        return self.filter(listing_type=listing_type, listing_id=listing_id)


class AvailabilityBlock(models.Model):
    """One-off unavailability window; both dates are included."""

    listing_type = models.CharField(max_length=10, choices=ListingType.choices)
    listing_id = models.PositiveBigIntegerField()
    start_date = models.DateField()
    end_date = models.DateField()
    reason = models.CharField(max_length=255, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="availability_blocks",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ListingScopedQuerySet.as_manager()

    class Meta:
        verbose_name = _("Availability block")
        verbose_name_plural = _("Availability blocks")
        ordering = ["start_date", "id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(start_date__lte=F("end_date")),
                name="availability_block_dates_ordered",
            ),
        ]
        indexes = [
            models.Index(
                fields=["listing_type", "listing_id", "start_date", "end_date"],
                name="avail_block_listing_dates_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.listing_type} #{self.listing_id}: {self.start_date} - {self.end_date}"

    def clean(self):
        super().clean()
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValidationError({"end_date": _("End date must not be before start date.")})


class RecurringBlockPattern(models.Model):
    """Weekly rule: unavailable on the given weekdays (0=Sunday..6=Saturday)."""

    listing_type = models.CharField(max_length=10, choices=ListingType.choices)
    listing_id = models.PositiveBigIntegerField()
    days_of_week = models.JSONField(default=list)
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True, help_text=_("Empty means open-ended."))
    reason = models.CharField(max_length=255, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="recurring_block_patterns",
    )
    split_from = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="successors",
        help_text=_("Pattern this one continues after a future-scoped change."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ListingScopedQuerySet.as_manager()

    class Meta:
        verbose_name = _("Recurring block pattern")
        verbose_name_plural = _("Recurring block patterns")
        ordering = ["start_date", "id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__isnull=True) | Q(start_date__lte=F("end_date")),
                name="recurring_pattern_dates_ordered",
            ),
        ]
        indexes = [
            models.Index(
                fields=["listing_type", "listing_id", "start_date"],
                name="recurring_listing_start_idx",
            ),
        ]

    def __str__(self) -> str:
        until = self.end_date or "open"
        return f"{self.listing_type} #{self.listing_id}: days {self.days_of_week} from {self.start_date} to {until}"

    def clean(self):
        super().clean()
        days = self.days_of_week or []
        if not days or any(not isinstance(day, int) or not 0 <= day <= 6 for day in days):
            raise ValidationError({"days_of_week": _("Pick at least one weekday between 0 and 6.")})
        if self.end_date and self.start_date and self.start_date > self.end_date:
            raise ValidationError({"end_date": _("End date must not be before start date.")})
