"""URL routing for listings."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import DriverListingViewSet, VehicleListingViewSet

router = DefaultRouter()
router.register(r"vehicles", VehicleListingViewSet, basename="vehicle-listing")
router.register(r"drivers", DriverListingViewSet, basename="driver-listing")

urlpatterns = [
    path("", include(router.urls)),
]
