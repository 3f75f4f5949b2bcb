"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Booking
from .services import BookingRequest


class BookingCreateSerializer(serializers.Serializer):
    """Booking request from a renter company."""

    vehicle_listing = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    driver_listing = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    provider_company = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def to_booking_request(self) -> BookingRequest:
        data = self.validated_data
        user = self.context["request"].user
        return BookingRequest(
            renter_company_id=user.company_id,
            provider_company_id=data.get("provider_company"),
            vehicle_listing_id=data.get("vehicle_listing"),
            driver_listing_id=data.get("driver_listing"),
            start_date=data["start_date"],
            end_date=data["end_date"],
            requested_by=user,
            notes=data.get("notes", ""),
        )


class BookingSerializer(serializers.ModelSerializer):
    """Read representation of a booking."""

    renter_company_name = serializers.ReadOnlyField(source="renter_company.name")
    provider_company_name = serializers.ReadOnlyField(source="provider_company.name")
    vehicle_title = serializers.ReadOnlyField(source="vehicle_listing.title", default=None)
    driver_name = serializers.ReadOnlyField(source="driver_listing.name", default=None)

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_number",
            "renter_company",
            "renter_company_name",
            "provider_company",
            "provider_company_name",
            "vehicle_listing",
            "vehicle_title",
            "driver_listing",
            "driver_name",
            "requested_by",
            "start_date",
            "end_date",
            "status",
            "duration_days",
            "provider_rate",
            "total",
            "currency",
            "notes",
            "expires_at",
            "cancelled_at",
            "cancellation_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BookingStatusChangeSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
