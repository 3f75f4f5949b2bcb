"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_number",
        "renter_company",
        "provider_company",
        "vehicle_listing",
        "driver_listing",
        "status",
        "start_date",
        "end_date",
        "total",
        "created_at",
    )
    list_filter = ("status", "start_date", "end_date")
    search_fields = ("booking_number", "renter_company__name", "provider_company__name")
    readonly_fields = (
        "booking_number",
        "created_at",
        "updated_at",
        "total",
        "provider_rate",
        "duration_days",
    )
