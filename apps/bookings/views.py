"""API views for the booking domain.

Every state change goes through ``BookingService``; domain errors it
raises are turned into responses by the project exception handler.
"""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.application.service import BookingService, CreateBookingCommand, TransitionBookingCommand
from apps.bookings.bootstrap import build_booking_service
from apps.users.gateway import actor_for

from .filters import BookingFilterSet
from .models import Booking
from .serializers import (
    AvailabilityQuerySerializer,
    BookingCancelSerializer,
    BookingCreateSerializer,
    BookingSerializer,
    BookingStatusSerializer,
)


class BookingViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Create bookings, move them through their lifecycle and list them."""

    queryset = Booking.objects.select_related("property").all()
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = BookingSerializer
    filterset_class = BookingFilterSet

    def get_service(self) -> BookingService:
        return build_booking_service()

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action == "change_status":
            return BookingStatusSerializer
        if self.action in ("cancel", "destroy"):
            return BookingCancelSerializer
        return BookingSerializer

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if getattr(user, "is_administrator", False):
            return qs
        if getattr(user, "is_host", False):
            return qs.filter(Q(user=user) | Q(property__owner=user))
        return qs.filter(user=user)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        booking = self.get_service().create_booking(CreateBookingCommand(
            property_id=data["property_id"],
            user_id=request.user.pk,
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
            guest_count=data["guest_count"],
            special_requests=data["special_requests"],
        ))
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["put", "patch"], url_path="status", url_name="status")
    def change_status(self, request, pk=None):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = self.get_service().transition_status(TransitionBookingCommand(
            booking_id=pk,
            actor=actor_for(request.user),
            target_status=serializer.validated_data["status"],
            reason=serializer.validated_data.get("reason"),
        ))
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        return self._cancel(request, pk)

    def destroy(self, request, pk=None):  # type: ignore
        return self._cancel(request, pk)

    def _cancel(self, request, pk):  # type: ignore
        serializer = BookingCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = self.get_service().cancel_booking(
            pk,
            actor_for(request.user),
            reason=serializer.validated_data.get("reason"),
        )
        return Response(BookingSerializer(booking).data)

    @action(detail=False, methods=["get"])
    def availability(self, request):  # type: ignore
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        available = self.get_service().is_available(
            query.validated_data["property_id"],
            query.validated_data["start_date"],
            query.validated_data["end_date"],
        )
        return Response({"available": available})
