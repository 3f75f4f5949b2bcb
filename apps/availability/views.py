"""API views for availability: blocks, recurring patterns and queries."""

from __future__ import annotations

from django.http import HttpResponse  # type: ignore
from django.utils import timezone  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.listings.models import ListingRef
from apps.listings.services import ensure_listing_owner, get_listing
from shared.domain.dates import shift_days

from .conf import engine_setting
from .filters import AvailabilityBlockFilterSet, RecurringPatternFilterSet
from .models import AvailabilityBlock, RecurringBlockPattern
from .serializers import (
    AvailabilityBlockCreateSerializer,
    AvailabilityBlockSerializer,
    AvailabilityCheckSerializer,
    BulkBlockCreateSerializer,
    DateWindowSerializer,
    RecurringBlockPatternSerializer,
    RecurringPatternCreateSerializer,
    RecurringPatternUpdateSerializer,
    ScopeSerializer,
)
from .services import AnalyticsAggregator, BlockStore, CalendarExporter, ConflictResolver


def _owned_listing_ref(listing_type, listing_id, user) -> ListingRef:
    listing = get_listing(listing_type, listing_id)
    ensure_listing_owner(listing, user)
    return ListingRef.of(listing)


class AvailabilityBlockViewSet(mixins.CreateModelMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    """Manual blocks: list, create, bulk create and delete."""

    queryset = AvailabilityBlock.objects.select_related("created_by").all()
    serializer_class = AvailabilityBlockSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_class = AvailabilityBlockFilterSet

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return AvailabilityBlockCreateSerializer
        if self.action == "bulk":
            return BulkBlockCreateSerializer
        return AvailabilityBlockSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        ref = _owned_listing_ref(data["listing_type"], data["listing_id"], request.user)

        block = BlockStore().create_block(
            ref,
            data["start_date"],
            data["end_date"],
            data["reason"],
            request.user,
        )
        read_serializer = AvailabilityBlockSerializer(block, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    def destroy(self, request, pk=None):  # type: ignore
        BlockStore().delete_block(pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["post"], url_path="bulk")
    def bulk(self, request):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = BlockStore().create_bulk_blocks(
            data["listing_ids"],
            data["listing_type"],
            data["start_date"],
            data["end_date"],
            data["reason"],
            request.user,
            authorize=lambda listing: ensure_listing_owner(listing, request.user),
        )
        payload = result.as_dict()
        payload["blocks"] = AvailabilityBlockSerializer(result.blocks, many=True).data
        response_status = status.HTTP_201_CREATED if result.successful else status.HTTP_200_OK
        return Response(payload, status=response_status)


class RecurringBlockPatternViewSet(mixins.CreateModelMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    """Weekly recurring blocks with ``all``/``future`` scoped changes."""

    queryset = RecurringBlockPattern.objects.select_related("created_by").all()
    serializer_class = RecurringBlockPatternSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_class = RecurringPatternFilterSet

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return RecurringPatternCreateSerializer
        if self.action in {"update", "partial_update"}:
            return RecurringPatternUpdateSerializer
        if self.action == "destroy":
            return ScopeSerializer
        return RecurringBlockPatternSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        ref = _owned_listing_ref(data["listing_type"], data["listing_id"], request.user)

        pattern = BlockStore().create_recurring_pattern(
            ref,
            data["days_of_week"],
            data["start_date"],
            data["end_date"],
            data["reason"],
            request.user,
        )
        read_serializer = RecurringBlockPatternSerializer(pattern, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    def update(self, request, pk=None, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        pattern = BlockStore().update_recurring_pattern(
            pk,
            serializer.changes(),
            serializer.validated_data["scope"],
            serializer.validated_data["pivot_date"],
            request.user,
        )
        read_serializer = RecurringBlockPatternSerializer(pattern, context=self.get_serializer_context())
        return Response(read_serializer.data, status=status.HTTP_200_OK)

    def partial_update(self, request, pk=None, **kwargs):  # type: ignore
        return self.update(request, pk=pk, **kwargs)

    def destroy(self, request, pk=None):  # type: ignore
        serializer = self.get_serializer(data=request.data or request.query_params)
        serializer.is_valid(raise_exception=True)

        remaining = BlockStore().delete_recurring_pattern(
            pk,
            serializer.validated_data["scope"],
            serializer.validated_data["pivot_date"],
            request.user,
        )
        if remaining is None:
            return Response(status=status.HTTP_204_NO_CONTENT)
        read_serializer = RecurringBlockPatternSerializer(remaining, context=self.get_serializer_context())
        return Response(read_serializer.data, status=status.HTTP_200_OK)


class AvailabilityCheckView(APIView):
    """Can this listing be rented for the given inclusive dates?"""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):  # type: ignore
        serializer = AvailabilityCheckSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        get_listing(data["listing_type"], data["listing_id"])

        result = ConflictResolver().check_availability(
            serializer.listing_ref(),
            data["start_date"],
            data["end_date"],
            exclude_booking_id=data["exclude_booking_id"],
        )
        return Response(result.as_dict())


class ListingWindowMixin:
    """Resolves ``<listing_type>/<listing_id>`` and the optional date window."""

    permission_classes = [permissions.IsAuthenticated]

    def listing_ref(self, listing_type, listing_id) -> ListingRef:
        listing = get_listing(listing_type, listing_id)
        return ListingRef.of(listing)

    def window(self, request):
        serializer = DateWindowSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data["start"], serializer.validated_data["end"]


class ListingCalendarView(ListingWindowMixin, APIView):
    def get(self, request, listing_type, listing_id):  # type: ignore
        ref = self.listing_ref(listing_type, listing_id)
        start, end = self.window(request)
        days = CalendarExporter().build_calendar_days(ref, start, end)
        return Response(
            {
                "listing_type": ref.listing_type,
                "listing_id": ref.listing_id,
                "start": days[0]["date"] if days else None,
                "end": days[-1]["date"] if days else None,
                "days": days,
            }
        )


class ListingAnalyticsView(ListingWindowMixin, APIView):
    """Blocked share and utilization; defaults to the last 30 days."""

    def get(self, request, listing_type, listing_id):  # type: ignore
        ref = self.listing_ref(listing_type, listing_id)
        start, end = self.window(request)
        end = end or timezone.localdate()
        start = start or shift_days(end, 1 - engine_setting("ANALYTICS_DEFAULT_DAYS"))

        result = AnalyticsAggregator().get_analytics(ref, start, end)
        return Response(result.as_dict())


class ListingCalendarExportView(ListingWindowMixin, APIView):
    """iCalendar feed of blocks, recurring instances and bookings."""

    def get(self, request, listing_type, listing_id):  # type: ignore
        ref = self.listing_ref(listing_type, listing_id)
        start, end = self.window(request)
        content = CalendarExporter().export_calendar(ref, start, end)

        response = HttpResponse(content, content_type="text/calendar; charset=utf-8")
        response["Content-Disposition"] = (
            f'attachment; filename="{ref.listing_type}-{ref.listing_id}-availability.ics"'
        )
        return response
