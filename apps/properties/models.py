"""Property models for Staybook.

The booking engine treats properties as read-only: it needs the owner,
the nightly rate and whether the listing currently accepts bookings.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.bookings.domain.entities import PropertySnapshot, PropertyStatus


class Property(models.Model):
    """A listing offered for short-term rent."""

    class Status(models.TextChoices):
        AVAILABLE = "AVAILABLE", _("Available")
        MAINTENANCE = "MAINTENANCE", _("Under maintenance")
        DELETED = "DELETED", _("Deleted")

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="properties",
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    price_per_night = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.AVAILABLE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Property")
        verbose_name_plural = _("Properties")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="property_status_idx"),
            models.Index(fields=["owner", "status"], name="property_owner_status_idx"),
        ]

    def __str__(self) -> str:
        return self.title

    def to_snapshot(self) -> PropertySnapshot:
        return PropertySnapshot(
            id=self.pk,
            owner_id=self.owner_id,
            price_per_night=self.price_per_night,
            status=PropertyStatus(self.status),
        )
