"""Serializers for listings."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import DriverListing, VehicleListing


class VehicleListingSerializer(serializers.ModelSerializer):
    company_name = serializers.CharField(source="company.name", read_only=True)
    listing_type = serializers.ReadOnlyField()

    class Meta:
        model = VehicleListing
        fields = [
            "id",
            "listing_type",
            "company",
            "company_name",
            "title",
            "description",
            "registration_number",
            "vehicle_type",
            "capacity",
            "daily_rate",
            "currency",
            "status",
            "created_at",
        ]
        read_only_fields = ["company", "status", "created_at"]


class DriverListingSerializer(serializers.ModelSerializer):
    company_name = serializers.CharField(source="company.name", read_only=True)
    listing_type = serializers.ReadOnlyField()

    class Meta:
        model = DriverListing
        fields = [
            "id",
            "listing_type",
            "company",
            "company_name",
            "name",
            "description",
            "license_class",
            "languages",
            "daily_rate",
            "currency",
            "status",
            "created_at",
        ]
        read_only_fields = ["company", "status", "created_at"]
