"""
Review Gate

Decides whether a user may review a property on the strength of a
booking. Checks run in a fixed order so the caller always gets the most
specific reason: the booking must exist, belong to the user, be for the
reviewed property and be COMPLETED; only then is the one-review-per-
booking rule consulted.
"""

from typing import Callable
from uuid import UUID

from shared.domain.errors import DomainError

from apps.bookings.domain.entities import Booking, BookingStatus
from apps.reviews.repositories import ALREADY_REVIEWED_MESSAGE, ReviewRepository

NOT_COMPLETED_MESSAGE = "Cannot review a booking that is not completed"


class ReviewGate:

    def __init__(self, booking_lookup: Callable[[object], Booking], reviews: ReviewRepository):
        """
        booking_lookup: ``BookingService.get_booking`` or anything that
            returns a booking by id and raises a not-found DomainError.
        reviews: storage answering ``exists_for(user_id, booking_id)``.
        """
        self._booking_lookup = booking_lookup
        self._reviews = reviews

    def ensure_can_review(self, user_id: int, property_id: int, booking_id) -> Booking:
        booking = self._booking_lookup(booking_id)

        if booking.user_id != user_id:
            raise DomainError.authorization("You can only review your own bookings")
        if booking.property_id != property_id:
            raise DomainError.validation("Booking does not belong to this property")
        if booking.status is not BookingStatus.COMPLETED:
            raise DomainError.validation(NOT_COMPLETED_MESSAGE)
        if self._reviews.exists_for(user_id, _as_uuid(booking.id)):
            raise DomainError.validation(ALREADY_REVIEWED_MESSAGE)

        return booking

    def can_review(self, user_id: int, property_id: int, booking_id) -> bool:
        try:
            self.ensure_can_review(user_id, property_id, booking_id)
        except DomainError:
            return False
        return True


def _as_uuid(value) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))
