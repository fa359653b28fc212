"""Composition root of the booking engine.

Reads ``settings.BOOKING_ENGINE`` and wires the service to the Django
unit of work. Views and tasks call :func:`build_booking_service`; tests
build their own service around an in-memory store instead.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

from django.apps import apps as django_apps  # type: ignore
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.message_bus import MessageBus

from apps.bookings.application.handlers import register_handlers
from apps.bookings.application.service import BookingPolicy, BookingService
from apps.bookings.infrastructure.unit_of_work import DjangoBookingUnitOfWork

DEFAULTS = {
    "CANCELLATION_LEAD_TIME_HOURS": 0,
    "PROPERTY_LOCK_TIMEOUT_SECONDS": 5.0,
}


def engine_settings() -> dict:
    return {**DEFAULTS, **getattr(settings, "BOOKING_ENGINE", {})}


def booking_policy_from_settings() -> BookingPolicy:
    config = engine_settings()
    lock_timeout = config["PROPERTY_LOCK_TIMEOUT_SECONDS"]
    return BookingPolicy(
        cancellation_lead_time=timedelta(hours=float(config["CANCELLATION_LEAD_TIME_HOURS"])),
        property_lock_timeout=float(lock_timeout) if lock_timeout is not None else None,
    )


def build_message_bus() -> MessageBus:
    return register_handlers(MessageBus())


def build_booking_service(message_bus: Optional[MessageBus] = None) -> BookingService:
    if message_bus is None:
        message_bus = django_apps.get_app_config("bookings").message_bus
    return BookingService(
        uow_factory=lambda: DjangoBookingUnitOfWork(message_bus),
        policy=booking_policy_from_settings(),
        clock=timezone.now,
    )
