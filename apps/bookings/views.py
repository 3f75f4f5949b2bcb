"""API views for the booking domain."""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .models import Booking
from .serializers import BookingCreateSerializer, BookingSerializer, BookingStatusChangeSerializer
from .services import BookingAdmissionGate, change_booking_status


class IsBookingStakeholder(permissions.BasePermission):
    """Members of the renter or provider company, and platform admins."""

    def has_object_permission(self, request, view, obj: Booking):  # type: ignore
        user = request.user
        if user.is_platform_admin():
            return True
        return user.company_id in (obj.renter_company_id, obj.provider_company_id)


def _is_provider(user, booking: Booking) -> bool:
    return user.is_platform_admin() or user.company_id == booking.provider_company_id


class BookingViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Booking requests and their lifecycle."""

    queryset = Booking.objects.select_related(
        "renter_company", "provider_company", "vehicle_listing", "driver_listing"
    ).all()
    permission_classes = [permissions.IsAuthenticated, IsBookingStakeholder]
    filterset_fields = ["status", "vehicle_listing", "driver_listing"]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action in {"accept", "start", "complete", "cancel"}:
            return BookingStatusChangeSerializer
        return BookingSerializer

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if user.is_platform_admin():
            return qs
        if user.company_id is None:
            return qs.none()
        return qs.filter(Q(renter_company_id=user.company_id) | Q(provider_company_id=user.company_id))

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = BookingAdmissionGate().create_booking_request(serializer.to_booking_request())
        read_serializer = BookingSerializer(booking, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    def _provider_transition(self, request, target: str):
        booking: Booking = self.get_object()  # type: ignore
        if not _is_provider(request.user, booking):
            return Response(status=status.HTTP_403_FORBIDDEN)
        booking = change_booking_status(booking, target)
        return Response({"status": booking.status}, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def accept(self, request, pk=None):  # type: ignore
        return self._provider_transition(request, Booking.Status.ACCEPTED)

    @action(detail=True, methods=["post"])
    def start(self, request, pk=None):  # type: ignore
        return self._provider_transition(request, Booking.Status.ACTIVE)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):  # type: ignore
        return self._provider_transition(request, Booking.Status.COMPLETED)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = change_booking_status(
            booking,
            Booking.Status.CANCELLED,
            reason=serializer.validated_data["reason"],
        )
        return Response({"status": booking.status}, status=status.HTTP_200_OK)
