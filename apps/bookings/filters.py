"""FilterSet definitions for the booking list."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    """Filters accepted by ``GET bookings/``."""

    status = django_filters.ChoiceFilter(choices=Booking.Status.choices)
    property = django_filters.NumberFilter(field_name="property_id", lookup_expr="exact")
    start_after = django_filters.IsoDateTimeFilter(field_name="start_date", lookup_expr="gte")
    end_before = django_filters.IsoDateTimeFilter(field_name="end_date", lookup_expr="lte")

    class Meta:
        model = Booking
        fields = ["status", "property"]
