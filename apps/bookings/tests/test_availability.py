from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from shared.domain.value_objects import DateRange

from apps.bookings.domain.availability import AvailabilityIndex, intervals_conflict
from apps.bookings.domain.entities import Booking, BookingStatus
from apps.bookings.infrastructure.repositories import InMemoryBookingRepository


def at(day: int) -> datetime:
    return datetime(2025, 8, day, tzinfo=timezone.utc)


def make_booking(start: int, end: int, status=BookingStatus.PENDING, property_id: int = 1) -> Booking:
    return Booking(
        property_id=property_id,
        user_id=7,
        period=DateRange(at(start), at(end)),
        total_price=Decimal("0"),
        status=status,
    )


@pytest.fixture
def repository():
    return InMemoryBookingRepository()


@pytest.fixture
def index(repository):
    return AvailabilityIndex(repository)


def test_adjacent_intervals_do_not_conflict():
    assert not intervals_conflict(DateRange(at(1), at(5)), DateRange(at(5), at(8)))
    assert not intervals_conflict(DateRange(at(5), at(8)), DateRange(at(1), at(5)))


def test_overlapping_intervals_conflict():
    assert intervals_conflict(DateRange(at(1), at(5)), DateRange(at(4), at(6)))
    assert intervals_conflict(DateRange(at(1), at(10)), DateRange(at(3), at(4)))


def test_empty_property_is_free(index):
    assert not index.conflicts(1, at(1), at(5))


@pytest.mark.parametrize("status", [BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.COMPLETED])
def test_active_statuses_block_dates(repository, index, status):
    repository.add(make_booking(1, 5, status=status))

    assert index.conflicts(1, at(4), at(6))


def test_cancelled_bookings_are_ignored(repository, index):
    repository.add(make_booking(1, 5, status=BookingStatus.CANCELLED))

    assert not index.conflicts(1, at(1), at(5))


def test_adjacent_request_is_free(repository, index):
    repository.add(make_booking(5, 8))

    assert not index.conflicts(1, at(8), at(10))
    assert not index.conflicts(1, at(1), at(5))


def test_other_properties_are_independent(repository, index):
    repository.add(make_booking(1, 5, property_id=2))

    assert not index.conflicts(1, at(2), at(3))


def test_excluded_booking_is_skipped(repository, index):
    booking = make_booking(1, 5)
    repository.add(booking)

    assert index.conflicts(1, at(2), at(3))
    assert not index.conflicts(1, at(2), at(3), exclude_booking_id=booking.id)
    assert index.conflicts(1, at(2), at(3), exclude_booking_id=uuid4())


def test_conflicting_returns_the_blocking_bookings(repository, index):
    first = make_booking(1, 5)
    second = make_booking(6, 9)
    repository.add(first)
    repository.add(second)
    repository.add(make_booking(10, 12))

    blocking = index.conflicting(1, DateRange(at(4), at(7)))

    assert [b.id for b in blocking] == [first.id, second.id]


def test_invalid_interval_is_rejected(index):
    with pytest.raises(ValueError):
        index.conflicts(1, at(5), at(5))


@pytest.mark.parametrize(
    "status, blocks",
    [
        (BookingStatus.PENDING, True),
        (BookingStatus.CONFIRMED, True),
        (BookingStatus.COMPLETED, True),
        (BookingStatus.CANCELLED, False),
    ],
)
def test_blocks_dates_follows_status(status, blocks):
    assert make_booking(1, 5, status=status).blocks_dates is blocks
