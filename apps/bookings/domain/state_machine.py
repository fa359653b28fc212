"""
Booking State Machine

Structural rules (which status may follow which) and the authorization
policy for each target status. Timing rules such as the cancellation
window live in the application service because they depend on
configuration and on the clock.
"""

from typing import Dict, FrozenSet

from shared.domain.errors import DomainError

from apps.bookings.domain.entities import Actor, Booking, BookingStatus, PropertySnapshot

COMPLETED_CANCEL_MESSAGE = "Cannot cancel a completed booking"

TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}


class BookingStateMachine:
    """
    Legal transitions:
    - PENDING -> CONFIRMED | CANCELLED
    - CONFIRMED -> CANCELLED | COMPLETED
    CANCELLED and COMPLETED are terminal.

    Who may request them:
    - -> CONFIRMED: property owner, administrator
    - -> CANCELLED: the booking's guest, property owner, administrator
    - -> COMPLETED: system process, administrator
    """

    transitions = TRANSITIONS

    def allowed_targets(self, current: BookingStatus) -> FrozenSet[BookingStatus]:
        return self.transitions[BookingStatus(current)]

    def is_terminal(self, status: BookingStatus) -> bool:
        return not self.allowed_targets(status)

    def is_legal(self, current: BookingStatus, target: BookingStatus) -> bool:
        return BookingStatus(target) in self.allowed_targets(current)

    def ensure_legal(self, current: BookingStatus, target: BookingStatus) -> None:
        current, target = BookingStatus(current), BookingStatus(target)
        if self.is_legal(current, target):
            return
        if target is BookingStatus.CANCELLED:
            if current is BookingStatus.COMPLETED:
                raise DomainError.validation(COMPLETED_CANCEL_MESSAGE)
            if current is BookingStatus.CANCELLED:
                raise DomainError.validation("Booking is already cancelled")
        raise DomainError.validation(
            f"Cannot transition booking from {current.value} to {target.value}"
        )

    def is_authorized(
        self,
        booking: Booking,
        property_: PropertySnapshot,
        actor: Actor,
        target: BookingStatus,
    ) -> bool:
        target = BookingStatus(target)
        if actor.is_admin:
            return True

        is_owner = actor.id is not None and actor.id == property_.owner_id
        if target is BookingStatus.CONFIRMED:
            return is_owner
        if target is BookingStatus.CANCELLED:
            return is_owner or (actor.id is not None and actor.id == booking.user_id)
        if target is BookingStatus.COMPLETED:
            return actor.is_system
        return False

    def ensure_authorized(
        self,
        booking: Booking,
        property_: PropertySnapshot,
        actor: Actor,
        target: BookingStatus,
    ) -> None:
        if not self.is_authorized(booking, property_, actor, target):
            raise DomainError.authorization(
                f"Not authorized to mark this booking as {BookingStatus(target).value}"
            )
