"""Serializers for availability blocks, recurring patterns and queries."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.listings.models import ListingRef, ListingType

from .models import AvailabilityBlock, RecurringBlockPattern
from .services.blocks import SCOPE_ALL, SCOPES


class ListingRefSerializer(serializers.Serializer):
    listing_type = serializers.ChoiceField(choices=ListingType.choices)
    listing_id = serializers.IntegerField(min_value=1)

    def listing_ref(self) -> ListingRef:
        data = self.validated_data
        return ListingRef(data["listing_type"], data["listing_id"])


class AvailabilityBlockSerializer(serializers.ModelSerializer):
    class Meta:
        model = AvailabilityBlock
        fields = [
            "id",
            "listing_type",
            "listing_id",
            "start_date",
            "end_date",
            "reason",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AvailabilityBlockCreateSerializer(ListingRefSerializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class BulkBlockCreateSerializer(serializers.Serializer):
    listing_type = serializers.ChoiceField(choices=ListingType.choices)
    listing_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=False,
    )
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class RecurringBlockPatternSerializer(serializers.ModelSerializer):
    class Meta:
        model = RecurringBlockPattern
        fields = [
            "id",
            "listing_type",
            "listing_id",
            "days_of_week",
            "start_date",
            "end_date",
            "reason",
            "split_from",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class RecurringPatternCreateSerializer(ListingRefSerializer):
    # Weekday range is checked by the block store so the error carries its code.
    days_of_week = serializers.ListField(child=serializers.IntegerField())
    start_date = serializers.DateField()
    end_date = serializers.DateField(required=False, allow_null=True, default=None)
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class RecurringPatternUpdateSerializer(serializers.Serializer):
    days_of_week = serializers.ListField(child=serializers.IntegerField(), required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False, allow_null=True)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)
    scope = serializers.CharField(required=False, default=SCOPE_ALL)
    pivot_date = serializers.DateField(required=False, allow_null=True, default=None)

    def changes(self) -> dict:
        return {
            name: value
            for name, value in self.validated_data.items()
            if name not in {"scope", "pivot_date"}
        }


class ScopeSerializer(serializers.Serializer):
    """``scope`` and ``pivot_date`` for deleting a recurring pattern."""

    scope = serializers.CharField(required=False, default=SCOPE_ALL, help_text=f"One of {SCOPES}")
    pivot_date = serializers.DateField(required=False, allow_null=True, default=None)


class AvailabilityCheckSerializer(ListingRefSerializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    exclude_booking_id = serializers.IntegerField(required=False, allow_null=True, default=None)


class DateWindowSerializer(serializers.Serializer):
    """Optional ``start``/``end`` query parameters."""

    start = serializers.DateField(required=False, allow_null=True, default=None)
    end = serializers.DateField(required=False, allow_null=True, default=None)
