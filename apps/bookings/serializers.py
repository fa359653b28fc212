"""Serializers for the booking domain.

Write serializers only check the payload shape. Dates are passed to the
booking service as sent, so a missing or malformed date is reported the
same way whichever client sent it.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore


class BookingCreateSerializer(serializers.Serializer):
    """Booking request sent by a guest."""

    property_id = serializers.IntegerField()
    start_date = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    end_date = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    guest_count = serializers.IntegerField(default=1)
    special_requests = serializers.CharField(required=False, allow_blank=True, default="")


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.CharField()
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)


class BookingCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)


class AvailabilityQuerySerializer(serializers.Serializer):
    property_id = serializers.IntegerField()
    start_date = serializers.CharField()
    end_date = serializers.CharField()


class BookingSerializer(serializers.Serializer):
    """Read serializer.

    Renders both the booking aggregate returned by the service and the
    ``Booking`` rows the list endpoint pages through.
    """

    id = serializers.UUIDField(read_only=True)
    property_id = serializers.IntegerField(read_only=True)
    user_id = serializers.IntegerField(read_only=True)
    start_date = serializers.DateTimeField(read_only=True)
    end_date = serializers.DateTimeField(read_only=True)
    status = serializers.SerializerMethodField()
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    guest_count = serializers.IntegerField(read_only=True)
    special_requests = serializers.CharField(read_only=True)
    cancellation_reason = serializers.CharField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)

    def get_status(self, obj) -> str:  # type: ignore
        return getattr(obj.status, "value", obj.status)
