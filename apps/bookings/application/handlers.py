"""Default subscribers for booking domain events."""

from __future__ import annotations

import structlog

from shared.application.message_bus import MessageBus

from apps.bookings.domain.events import BookingCreated, BookingStatusChanged

logger = structlog.get_logger(__name__)


def log_booking_created(event: BookingCreated) -> None:
    logger.info(
        "booking.event.created",
        event_id=str(event.event_id),
        booking_id=str(event.booking_id),
        property_id=event.property_id,
        start_date=event.period.start_date.isoformat(),
        end_date=event.period.end_date.isoformat(),
    )


def log_status_changed(event: BookingStatusChanged) -> None:
    logger.info(
        "booking.event.status_changed",
        event_id=str(event.event_id),
        booking_id=str(event.booking_id),
        old_status=event.old_status.value,
        new_status=event.new_status.value,
        actor_role=event.actor_role.value,
        frees_dates=event.frees_dates,
    )


def register_handlers(bus: MessageBus) -> MessageBus:
    bus.subscribe(BookingCreated, log_booking_created)
    bus.subscribe(BookingStatusChanged, log_status_changed)
    return bus
