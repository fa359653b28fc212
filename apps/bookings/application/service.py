"""
Booking Service

Use cases of the booking engine. The service owns no storage: it is
built with a unit-of-work factory, a clock and a policy, and opens one
unit of work per operation.

Operations:
- create_booking: validate, check availability under the property lock, store PENDING
- transition_status: move a booking through the state machine
- cancel_booking: transition_status(..., CANCELLED)
- get_booking: lookup used by the API and the review gate
- complete_elapsed: sweep CONFIRMED bookings whose stay is over
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional, Union
from uuid import UUID

import structlog

from shared.domain.base import utcnow
from shared.domain.errors import DomainError
from shared.domain.value_objects import DateRange, to_instant

from apps.bookings.domain import pricing
from apps.bookings.domain.availability import AvailabilityIndex
from apps.bookings.domain.entities import SYSTEM_ACTOR, Actor, Booking, BookingStatus
from apps.bookings.domain.state_machine import BookingStateMachine

logger = structlog.get_logger(__name__)

NEAR_TERM_CANCEL_MESSAGE = "Cannot cancel a near-term booking"


@dataclass(frozen=True)
class BookingPolicy:
    """
    Tunables read from settings

    cancellation_lead_time: minimum time left before start_date for a
        CONFIRMED booking to be cancellable; zero disables the rule.
    property_lock_timeout: seconds a creation waits for the property
        lock before failing with a conflict.
    """
    cancellation_lead_time: timedelta = timedelta(0)
    property_lock_timeout: Optional[float] = 5.0


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    property_id: int
    user_id: int
    start_date: Union[datetime, str, None]
    end_date: Union[datetime, str, None]
    guest_count: int = 1
    special_requests: str = ''


@dataclass
class TransitionBookingCommand:
    booking_id: Union[UUID, str]
    actor: Actor
    target_status: Union[BookingStatus, str]
    reason: Optional[str] = None


class BookingService:

    def __init__(
        self,
        uow_factory: Callable,
        policy: Optional[BookingPolicy] = None,
        clock: Callable[[], datetime] = utcnow,
        state_machine: Optional[BookingStateMachine] = None,
    ):
        self._uow_factory = uow_factory
        self._policy = policy or BookingPolicy()
        self._clock = clock
        self._state_machine = state_machine or BookingStateMachine()

    @property
    def policy(self) -> BookingPolicy:
        return self._policy

    # ----- queries -----

    def get_booking(self, booking_id) -> Booking:
        booking_uuid = _parse_booking_id(booking_id)
        with self._uow_factory() as uow:
            booking = uow.bookings.get(booking_uuid)
        if booking is None:
            raise DomainError.not_found("Booking not found")
        return booking

    def is_available(self, property_id: int, start_date, end_date) -> bool:
        period = self._parse_period(start_date, end_date)
        with self._uow_factory() as uow:
            if uow.properties.get(property_id) is None:
                raise DomainError.not_found("Property not found")
            return not AvailabilityIndex(uow.bookings).conflicting(property_id, period)

    # ----- commands -----

    def create_booking(self, command: CreateBookingCommand) -> Booking:
        period = self._parse_period(command.start_date, command.end_date)
        now = self._clock()
        if period.start_date < now:
            raise DomainError.validation("Start date must be in the future")
        if command.guest_count is None or command.guest_count < 1:
            raise DomainError.validation("Guest count must be at least 1")

        with self._uow_factory() as uow:
            property_ = uow.properties.get(command.property_id)
            if property_ is None:
                raise DomainError.not_found("Property not found")
            if not property_.accepts_bookings:
                raise DomainError.validation("Property is not available for booking")

            with uow.property_lock(property_.id, timeout=self._policy.property_lock_timeout) as locked:
                # Re-read under the lock: status or rate may have changed meanwhile
                if not locked.accepts_bookings:
                    raise DomainError.validation("Property is not available for booking")

                blocking = AvailabilityIndex(uow.bookings).conflicting(locked.id, period)
                if blocking:
                    logger.info(
                        "booking.conflict",
                        property_id=locked.id,
                        requested=str(period),
                        blocking_ids=[str(b.id) for b in blocking],
                    )
                    raise DomainError.conflict("Property is already booked for these dates")

                booking = Booking(
                    property_id=locked.id,
                    user_id=command.user_id,
                    period=period,
                    total_price=pricing.total(locked.price_per_night, period.start_date, period.end_date),
                    status=BookingStatus.PENDING,
                    guest_count=command.guest_count,
                    special_requests=command.special_requests or '',
                    created_at=now,
                    updated_at=now,
                )
                booking.record_created()
                uow.bookings.add(booking)
                uow.collect_events(booking)

        logger.info(
            "booking.created",
            booking_id=str(booking.id),
            property_id=booking.property_id,
            user_id=booking.user_id,
            total_price=str(booking.total_price),
        )
        return booking

    def transition_status(self, command: TransitionBookingCommand) -> Booking:
        target = _parse_status(command.target_status)
        booking_uuid = _parse_booking_id(command.booking_id)

        with self._uow_factory() as uow:
            booking = uow.bookings.get(booking_uuid)
            if booking is None:
                raise DomainError.not_found("Booking not found")

            self._state_machine.ensure_legal(booking.status, target)

            property_ = uow.properties.get(booking.property_id)
            if property_ is None:
                raise DomainError.not_found("Property not found")
            self._state_machine.ensure_authorized(booking, property_, command.actor, target)

            now = self._clock()
            if target is BookingStatus.CANCELLED:
                self._ensure_cancellation_window(booking, now)

            expected = booking.status
            booking.move_to(target, command.actor, reason=command.reason or '', at=now)
            if not uow.bookings.update_status(booking, expected=expected):
                raise DomainError.conflict("Booking was modified by another request, reload and retry")
            uow.collect_events(booking)

        logger.info(
            "booking.status_changed",
            booking_id=str(booking.id),
            old_status=expected.value,
            new_status=booking.status.value,
            actor_id=command.actor.id,
            actor_role=command.actor.role.value,
        )
        return booking

    def cancel_booking(self, booking_id, actor: Actor, reason: Optional[str] = None) -> Booking:
        return self.transition_status(TransitionBookingCommand(
            booking_id=booking_id,
            actor=actor,
            target_status=BookingStatus.CANCELLED,
            reason=reason,
        ))

    def complete_elapsed(self, now: Optional[datetime] = None) -> dict:
        """
        Complete every CONFIRMED booking whose end_date has passed

        Each booking is its own transition; one that fails (for instance
        because it was cancelled in the meantime) is logged and skipped.
        """
        now = now or self._clock()
        with self._uow_factory() as uow:
            due = uow.bookings.list_ending_before(BookingStatus.CONFIRMED, now)

        completed = skipped = 0
        for booking in due:
            try:
                self.transition_status(TransitionBookingCommand(
                    booking_id=booking.id,
                    actor=SYSTEM_ACTOR,
                    target_status=BookingStatus.COMPLETED,
                ))
                completed += 1
            except DomainError as exc:
                skipped += 1
                logger.warning(
                    "booking.complete_skipped",
                    booking_id=str(booking.id),
                    kind=exc.kind.value,
                    reason=exc.message,
                )
        return {"completed": completed, "skipped": skipped}

    # ----- helpers -----

    def _parse_period(self, start_date, end_date) -> DateRange:
        try:
            start = to_instant(start_date)
            end = to_instant(end_date)
        except (TypeError, ValueError):
            raise DomainError.validation("Start date and end date must be valid ISO-8601 dates")
        if start >= end:
            raise DomainError.validation("End date must be after start date")
        return DateRange(start, end)

    def _ensure_cancellation_window(self, booking: Booking, now: datetime) -> None:
        lead_time = self._policy.cancellation_lead_time
        if booking.status is not BookingStatus.CONFIRMED or lead_time <= timedelta(0):
            return
        if booking.start_date - now < lead_time:
            raise DomainError.validation(NEAR_TERM_CANCEL_MESSAGE)


def _parse_status(value) -> BookingStatus:
    if isinstance(value, BookingStatus):
        return value
    try:
        return BookingStatus(str(value).upper())
    except ValueError:
        raise DomainError.validation(f"Unknown booking status: {value}")


def _parse_booking_id(value) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise DomainError.not_found("Booking not found")
