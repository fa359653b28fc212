"""Booking persistence model for Staybook."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.bookings.domain.entities import Booking as BookingEntity, BookingStatus
from shared.domain.value_objects import DateRange


class Booking(models.Model):
    """Stored form of the booking aggregate.

    Rows are written through the booking repository only; status is the
    single column that changes after creation and bookings are never
    deleted by the engine.
    """

    class Status(models.TextChoices):
        PENDING = BookingStatus.PENDING.value, _("Pending confirmation")
        CONFIRMED = BookingStatus.CONFIRMED.value, _("Confirmed")
        CANCELLED = BookingStatus.CANCELLED.value, _("Cancelled")
        COMPLETED = BookingStatus.COMPLETED.value, _("Completed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    total_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Fixed when the booking is created."),
    )
    guest_count = models.PositiveSmallIntegerField(default=1)
    special_requests = models.TextField(blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="booking_valid_dates",
            ),
            models.CheckConstraint(
                condition=models.Q(total_price__gte=0),
                name="booking_non_negative_price",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "start_date", "end_date"], name="booking_property_period_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.pk} for property {self.property_id}"

    def to_entity(self) -> BookingEntity:
        return BookingEntity(
            id=self.pk,
            property_id=self.property_id,
            user_id=self.user_id,
            period=DateRange(self.start_date, self.end_date),
            total_price=self.total_price,
            status=BookingStatus(self.status),
            guest_count=self.guest_count,
            special_requests=self.special_requests,
            cancellation_reason=self.cancellation_reason,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_entity(cls, booking: BookingEntity) -> "Booking":
        return cls(
            id=booking.id,
            property_id=booking.property_id,
            user_id=booking.user_id,
            start_date=booking.start_date,
            end_date=booking.end_date,
            status=booking.status.value,
            total_price=booking.total_price,
            guest_count=booking.guest_count,
            special_requests=booking.special_requests,
            cancellation_reason=booking.cancellation_reason,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )
