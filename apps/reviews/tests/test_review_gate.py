from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from shared.domain.errors import DomainError, ErrorKind
from shared.domain.value_objects import DateRange

from apps.bookings.domain.entities import Booking, BookingStatus
from apps.reviews.gate import NOT_COMPLETED_MESSAGE, ReviewGate
from apps.reviews.repositories import ALREADY_REVIEWED_MESSAGE, InMemoryReviewRepository, ReviewRecord

GUEST_ID = 7
PROPERTY_ID = 3


def make_booking(status=BookingStatus.COMPLETED, user_id=GUEST_ID, property_id=PROPERTY_ID) -> Booking:
    return Booking(
        property_id=property_id,
        user_id=user_id,
        period=DateRange(
            datetime(2025, 8, 1, tzinfo=timezone.utc),
            datetime(2025, 8, 5, tzinfo=timezone.utc),
        ),
        total_price=Decimal("400.00"),
        status=status,
    )


class FakeBookings:
    def __init__(self, *bookings):
        self._by_id = {b.id: b for b in bookings}

    def get_booking(self, booking_id):
        booking = self._by_id.get(booking_id)
        if booking is None:
            raise DomainError.not_found("Booking not found")
        return booking


@pytest.fixture
def reviews():
    return InMemoryReviewRepository()


def gate_for(reviews, *bookings) -> ReviewGate:
    return ReviewGate(FakeBookings(*bookings).get_booking, reviews)


def kind_of(gate, *args) -> ErrorKind:
    with pytest.raises(DomainError) as exc_info:
        gate.ensure_can_review(*args)
    return exc_info.value.kind


def test_completed_booking_of_the_user_can_be_reviewed(reviews):
    booking = make_booking()
    gate = gate_for(reviews, booking)

    assert gate.ensure_can_review(GUEST_ID, PROPERTY_ID, booking.id) is booking
    assert gate.can_review(GUEST_ID, PROPERTY_ID, booking.id)


def test_missing_booking_is_not_found(reviews):
    gate = gate_for(reviews)

    assert kind_of(gate, GUEST_ID, PROPERTY_ID, uuid4()) is ErrorKind.NOT_FOUND
    assert not gate.can_review(GUEST_ID, PROPERTY_ID, uuid4())


def test_someone_elses_booking_is_an_authorization_error(reviews):
    booking = make_booking(user_id=GUEST_ID + 1)

    assert kind_of(gate_for(reviews, booking), GUEST_ID, PROPERTY_ID, booking.id) is ErrorKind.AUTHORIZATION


def test_booking_of_another_property_is_rejected(reviews):
    booking = make_booking(property_id=PROPERTY_ID + 1)

    assert kind_of(gate_for(reviews, booking), GUEST_ID, PROPERTY_ID, booking.id) is ErrorKind.VALIDATION


@pytest.mark.parametrize("status", [BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.CANCELLED])
def test_only_completed_bookings_can_be_reviewed(reviews, status):
    booking = make_booking(status=status)
    gate = gate_for(reviews, booking)

    with pytest.raises(DomainError, match=NOT_COMPLETED_MESSAGE):
        gate.ensure_can_review(GUEST_ID, PROPERTY_ID, booking.id)
    assert not gate.can_review(GUEST_ID, PROPERTY_ID, booking.id)


def test_second_review_of_the_same_booking_is_rejected(reviews):
    booking = make_booking()
    gate = gate_for(reviews, booking)
    reviews.add(ReviewRecord(user_id=GUEST_ID, property_id=PROPERTY_ID, booking_id=booking.id, rating=5))

    with pytest.raises(DomainError) as exc_info:
        gate.ensure_can_review(GUEST_ID, PROPERTY_ID, booking.id)

    assert exc_info.value.kind is ErrorKind.VALIDATION
    assert exc_info.value.message == ALREADY_REVIEWED_MESSAGE


def test_ownership_is_checked_before_uniqueness(reviews):
    booking = make_booking(user_id=GUEST_ID + 1)
    reviews.add(ReviewRecord(user_id=GUEST_ID, property_id=PROPERTY_ID, booking_id=booking.id, rating=4))

    assert kind_of(gate_for(reviews, booking), GUEST_ID, PROPERTY_ID, booking.id) is ErrorKind.AUTHORIZATION


def test_another_completed_booking_can_still_be_reviewed(reviews):
    first, second = make_booking(), make_booking()
    reviews.add(ReviewRecord(user_id=GUEST_ID, property_id=PROPERTY_ID, booking_id=first.id, rating=4))

    assert gate_for(reviews, first, second).can_review(GUEST_ID, PROPERTY_ID, second.id)


def test_repository_rejects_duplicates(reviews):
    booking_id = uuid4()
    reviews.add(ReviewRecord(user_id=GUEST_ID, property_id=PROPERTY_ID, booking_id=booking_id, rating=4))

    with pytest.raises(DomainError, match=ALREADY_REVIEWED_MESSAGE):
        reviews.add(ReviewRecord(user_id=GUEST_ID, property_id=PROPERTY_ID, booking_id=booking_id, rating=2))
    assert len(reviews.for_property(PROPERTY_ID)) == 1
