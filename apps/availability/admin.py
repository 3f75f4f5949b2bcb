"""Admin registration for availability blocks and recurring patterns."""

from __future__ import annotations

from django.contrib import admin

from .models import AvailabilityBlock, RecurringBlockPattern


@admin.register(AvailabilityBlock)
class AvailabilityBlockAdmin(admin.ModelAdmin):
    list_display = ("id", "listing_type", "listing_id", "start_date", "end_date", "reason", "created_by")
    list_filter = ("listing_type", "start_date")
    search_fields = ("reason", "created_by__email")
    readonly_fields = ("created_at", "updated_at")


@admin.register(RecurringBlockPattern)
class RecurringBlockPatternAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "listing_type",
        "listing_id",
        "days_of_week",
        "start_date",
        "end_date",
        "split_from",
        "created_by",
    )
    list_filter = ("listing_type",)
    search_fields = ("reason", "created_by__email")
    raw_id_fields = ("split_from",)
    readonly_fields = ("created_at", "updated_at")
