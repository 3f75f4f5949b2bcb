"""FilterSet definitions for availability listings."""

from __future__ import annotations

import django_filters  # type: ignore

from apps.listings.models import ListingType

from .models import AvailabilityBlock, RecurringBlockPattern


class AvailabilityBlockFilterSet(django_filters.FilterSet):
    """Blocks of one listing, optionally narrowed to an inclusive window."""

    listing_type = django_filters.ChoiceFilter(choices=ListingType.choices)
    listing_id = django_filters.NumberFilter(field_name="listing_id")
    # A block is in the window when it ends on/after start and starts on/before end.
    start = django_filters.DateFilter(field_name="end_date", lookup_expr="gte")
    end = django_filters.DateFilter(field_name="start_date", lookup_expr="lte")
    created_by = django_filters.NumberFilter(field_name="created_by_id")

    class Meta:
        model = AvailabilityBlock
        fields = ["listing_type", "listing_id"]


class RecurringPatternFilterSet(django_filters.FilterSet):
    listing_type = django_filters.ChoiceFilter(choices=ListingType.choices)
    listing_id = django_filters.NumberFilter(field_name="listing_id")
    active_on = django_filters.DateFilter(method="filter_active_on")

    class Meta:
        model = RecurringBlockPattern
        fields = ["listing_type", "listing_id"]

    def filter_active_on(self, queryset, name, value):  # type: ignore
        return queryset.filter(start_date__lte=value).exclude(end_date__lt=value)
