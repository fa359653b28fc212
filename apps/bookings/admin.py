"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "property",
        "user",
        "status",
        "start_date",
        "end_date",
        "total_price",
        "created_at",
    )
    list_filter = ("status", "start_date", "end_date")
    search_fields = ("property__title", "user__email")
    # Status changes must go through the booking service
    readonly_fields = (
        "status",
        "total_price",
        "cancellation_reason",
        "created_at",
        "updated_at",
    )
