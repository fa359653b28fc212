"""Admin registrations for properties domain."""

from __future__ import annotations

from django.contrib import admin

from .models import Property


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ("title", "location", "status", "price_per_night", "owner", "created_at")
    list_filter = ("status",)
    search_fields = ("title", "location", "owner__email")
    readonly_fields = ("created_at", "updated_at")
