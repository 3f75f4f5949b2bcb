"""API views for listings."""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.availability.errors import ErrorCode, ValidationFailed

from .models import DriverListing, ListingStatus, VehicleListing
from .serializers import DriverListingSerializer, VehicleListingSerializer
from .services import ensure_listing_owner


class ListingViewSetMixin:
    """Active listings are public to the marketplace; companies also see their drafts."""

    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["company", "status"]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user
        if user.is_platform_admin():
            return qs
        return qs.filter(Q(status=ListingStatus.ACTIVE) | Q(company_id=user.company_id))

    def perform_create(self, serializer):  # type: ignore
        user = self.request.user
        if user.company_id is None:
            raise ValidationFailed(ErrorCode.COMPANY_REQUIRED, "Join a company before creating listings.")
        serializer.save(company_id=user.company_id)

    def perform_update(self, serializer):  # type: ignore
        ensure_listing_owner(serializer.instance, self.request.user)
        serializer.save()

    def perform_destroy(self, instance):  # type: ignore
        ensure_listing_owner(instance, self.request.user)
        instance.delete()

    @action(detail=True, methods=["post"])
    def activate(self, request, pk=None):  # type: ignore
        listing = self.get_object()
        ensure_listing_owner(listing, request.user)
        listing.activate()
        return Response({"status": listing.status}, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):  # type: ignore
        listing = self.get_object()
        ensure_listing_owner(listing, request.user)
        listing.deactivate()
        return Response({"status": listing.status}, status=status.HTTP_200_OK)


class VehicleListingViewSet(ListingViewSetMixin, viewsets.ModelViewSet):
    queryset = VehicleListing.objects.select_related("company").all()
    serializer_class = VehicleListingSerializer


class DriverListingViewSet(ListingViewSetMixin, viewsets.ModelViewSet):
    queryset = DriverListing.objects.select_related("company").all()
    serializer_class = DriverListingSerializer
