"""Admin registrations for listings."""

from __future__ import annotations

from django.contrib import admin

from .models import DriverListing, VehicleListing


@admin.register(VehicleListing)
class VehicleListingAdmin(admin.ModelAdmin):
    list_display = ("title", "company", "registration_number", "daily_rate", "currency", "status")
    list_filter = ("status", "vehicle_type")
    search_fields = ("title", "registration_number", "company__name")
    readonly_fields = ("created_at", "updated_at")


@admin.register(DriverListing)
class DriverListingAdmin(admin.ModelAdmin):
    list_display = ("name", "company", "license_class", "daily_rate", "currency", "status")
    list_filter = ("status", "license_class")
    search_fields = ("name", "company__name")
    readonly_fields = ("created_at", "updated_at")
