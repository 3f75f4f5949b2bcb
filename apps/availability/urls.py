"""URL routing for availability."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import (
    AvailabilityBlockViewSet,
    AvailabilityCheckView,
    ListingAnalyticsView,
    ListingCalendarExportView,
    ListingCalendarView,
    RecurringBlockPatternViewSet,
)

router = DefaultRouter()
router.register(r"blocks", AvailabilityBlockViewSet, basename="availability-block")
router.register(r"recurring", RecurringBlockPatternViewSet, basename="recurring-block")

urlpatterns = [
    path("", include(router.urls)),
    path("check/", AvailabilityCheckView.as_view(), name="availability-check"),
    path(
        "calendar/<str:listing_type>/<int:listing_id>/",
        ListingCalendarView.as_view(),
        name="availability-calendar",
    ),
    path(
        "analytics/<str:listing_type>/<int:listing_id>/",
        ListingAnalyticsView.as_view(),
        name="availability-analytics",
    ),
    path(
        "export/<str:listing_type>/<int:listing_id>/",
        ListingCalendarExportView.as_view(),
        name="availability-export",
    ),
]
