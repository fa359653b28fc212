"""BookingService against the in-memory unit of work."""

import threading
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from shared.application.message_bus import MessageBus
from shared.domain.errors import DomainError, ErrorKind

from apps.bookings.application.service import (
    NEAR_TERM_CANCEL_MESSAGE,
    BookingPolicy,
    BookingService,
    CreateBookingCommand,
    TransitionBookingCommand,
)
from apps.bookings.domain.entities import (
    SYSTEM_ACTOR,
    Actor,
    BookingStatus,
    PropertySnapshot,
    PropertyStatus,
    Role,
)
from apps.bookings.domain.events import BookingCreated, BookingStatusChanged
from apps.bookings.infrastructure.unit_of_work import InMemoryBookingUnitOfWork, InMemoryStore

NOW = datetime(2025, 7, 1, 12, 0, tzinfo=timezone.utc)

OWNER = Actor(id=10, role=Role.HOST)
GUEST = Actor(id=20, role=Role.GUEST)
STRANGER = Actor(id=30, role=Role.GUEST)
ADMIN = Actor(id=99, role=Role.ADMIN)


@pytest.fixture
def store():
    store = InMemoryStore(lock_timeout=2.0)
    store.properties.put(PropertySnapshot(
        id=1, owner_id=OWNER.id, price_per_night=Decimal("100.00"),
    ))
    store.properties.put(PropertySnapshot(
        id=2, owner_id=OWNER.id, price_per_night=Decimal("80.00"), status=PropertyStatus.MAINTENANCE,
    ))
    store.properties.put(PropertySnapshot(
        id=3, owner_id=OWNER.id, price_per_night=Decimal("55.00"),
    ))
    return store


@pytest.fixture
def published():
    return []


@pytest.fixture
def bus(published):
    bus = MessageBus()
    bus.subscribe(BookingCreated, published.append)
    bus.subscribe(BookingStatusChanged, published.append)
    return bus


def make_service(store, bus, policy=None):
    return BookingService(
        uow_factory=lambda: InMemoryBookingUnitOfWork(store, bus),
        policy=policy,
        clock=lambda: NOW,
    )


@pytest.fixture
def service(store, bus):
    return make_service(store, bus)


def book(service, start, end, property_id=1, user_id=GUEST.id, **kwargs):
    return service.create_booking(CreateBookingCommand(
        property_id=property_id,
        user_id=user_id,
        start_date=start,
        end_date=end,
        **kwargs,
    ))


def error_of(call, *args, **kwargs) -> DomainError:
    with pytest.raises(DomainError) as exc_info:
        call(*args, **kwargs)
    return exc_info.value


# ----- creation -----

def test_august_examples(service):
    a = book(service, "2025-08-01T00:00:00Z", "2025-08-05T00:00:00Z")
    b = book(service, "2025-08-05T00:00:00Z", "2025-08-08T00:00:00Z")

    error = error_of(book, service, "2025-08-04T00:00:00Z", "2025-08-06T00:00:00Z")

    assert a.status is BookingStatus.PENDING
    assert b.status is BookingStatus.PENDING
    assert a.total_price == Decimal("400.00")
    assert error.kind is ErrorKind.CONFLICT
    assert error.message == "Property is already booked for these dates"


def test_created_booking_is_stored_and_published(service, store, published):
    booking = book(service, "2025-08-01", "2025-08-03", guest_count=2, special_requests="Late check-in")

    stored = service.get_booking(booking.id)
    assert stored.user_id == GUEST.id
    assert stored.guest_count == 2
    assert stored.special_requests == "Late check-in"
    assert stored.start_date == datetime(2025, 8, 1, tzinfo=timezone.utc)
    assert len(store.bookings) == 1
    assert [type(e) for e in published] == [BookingCreated]
    assert published[0].booking_id == booking.id


def test_naive_datetimes_are_read_as_utc(service):
    booking = book(service, datetime(2025, 8, 1, 15), datetime(2025, 8, 2, 11))

    assert booking.start_date.tzinfo is not None
    assert booking.start_date == datetime(2025, 8, 1, 15, tzinfo=timezone.utc)
    assert booking.total_price == Decimal("100.00")


@pytest.mark.parametrize(
    "start, end, message",
    [
        (None, "2025-08-05", "Start date and end date must be valid ISO-8601 dates"),
        ("2025-08-01", "", "Start date and end date must be valid ISO-8601 dates"),
        ("not-a-date", "2025-08-05", "Start date and end date must be valid ISO-8601 dates"),
        ("2025-08-05", "2025-08-01", "End date must be after start date"),
        ("2025-08-05", "2025-08-05", "End date must be after start date"),
        ("2025-06-30", "2025-07-05", "Start date must be in the future"),
    ],
)
def test_invalid_periods_are_validation_errors(service, published, start, end, message):
    error = error_of(book, service, start, end)

    assert error.kind is ErrorKind.VALIDATION
    assert error.message == message
    assert published == []


def test_guest_count_must_be_positive(service):
    error = error_of(book, service, "2025-08-01", "2025-08-02", guest_count=0)

    assert error.kind is ErrorKind.VALIDATION


def test_unknown_property_is_not_found(service):
    error = error_of(book, service, "2025-08-01", "2025-08-02", property_id=404)

    assert error.kind is ErrorKind.NOT_FOUND


def test_property_under_maintenance_is_rejected(service):
    error = error_of(book, service, "2025-08-01", "2025-08-02", property_id=2)

    assert error.kind is ErrorKind.VALIDATION
    assert error.message == "Property is not available for booking"


def test_cancelled_booking_frees_its_dates(service):
    first = book(service, "2025-08-01", "2025-08-05")
    service.cancel_booking(first.id, GUEST)

    second = book(service, "2025-08-02", "2025-08-04", user_id=STRANGER.id)

    assert second.status is BookingStatus.PENDING


def test_properties_do_not_block_each_other(service):
    book(service, "2025-08-01", "2025-08-05", property_id=1)
    other = book(service, "2025-08-01", "2025-08-05", property_id=3)

    assert other.total_price == Decimal("220.00")


def test_is_available(service):
    book(service, "2025-08-01", "2025-08-05")

    assert not service.is_available(1, "2025-08-03", "2025-08-04")
    assert service.is_available(1, "2025-08-05", "2025-08-07")
    assert error_of(service.is_available, 404, "2025-08-01", "2025-08-02").kind is ErrorKind.NOT_FOUND


# ----- concurrency -----

def test_concurrent_creations_for_the_same_interval_admit_one(store, bus):
    service = make_service(store, bus)
    attempts = 8
    barrier = threading.Barrier(attempts)
    outcomes = []
    outcomes_guard = threading.Lock()

    def attempt(user_id):
        barrier.wait()
        try:
            book(service, "2025-08-10", "2025-08-15", user_id=user_id)
            result = "created"
        except DomainError as exc:
            result = exc.kind
        with outcomes_guard:
            outcomes.append(result)

    threads = [threading.Thread(target=attempt, args=(100 + i,)) for i in range(attempts)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert outcomes.count("created") == 1
    assert outcomes.count(ErrorKind.CONFLICT) == attempts - 1
    assert len(store.bookings.list_by_property(1, statuses=[BookingStatus.PENDING])) == 1


def test_lock_timeout_is_a_conflict(store, bus):
    service = make_service(store, bus, policy=BookingPolicy(property_lock_timeout=0.01))

    with store.locks.hold(1):
        error = error_of(book, service, "2025-08-01", "2025-08-02")

    assert error.kind is ErrorKind.CONFLICT


# ----- transitions -----

def test_owner_confirms_then_system_completes(service, published):
    booking = book(service, "2025-08-01", "2025-08-05")

    confirmed = service.transition_status(TransitionBookingCommand(booking.id, OWNER, "confirmed"))
    completed = service.transition_status(TransitionBookingCommand(booking.id, SYSTEM_ACTOR, BookingStatus.COMPLETED))

    assert confirmed.status is BookingStatus.CONFIRMED
    assert completed.status is BookingStatus.COMPLETED
    changes = [e for e in published if isinstance(e, BookingStatusChanged)]
    assert [(e.old_status, e.new_status) for e in changes] == [
        (BookingStatus.PENDING, BookingStatus.CONFIRMED),
        (BookingStatus.CONFIRMED, BookingStatus.COMPLETED),
    ]
    assert changes[1].actor_role is Role.SYSTEM


def test_guest_cannot_confirm(service):
    booking = book(service, "2025-08-01", "2025-08-05")

    error = error_of(service.transition_status, TransitionBookingCommand(booking.id, GUEST, BookingStatus.CONFIRMED))

    assert error.kind is ErrorKind.AUTHORIZATION
    assert service.get_booking(booking.id).status is BookingStatus.PENDING


def test_stranger_cannot_cancel(service):
    booking = book(service, "2025-08-01", "2025-08-05")

    error = error_of(service.cancel_booking, booking.id, STRANGER)

    assert error.kind is ErrorKind.AUTHORIZATION


def test_cancel_records_reason(service, published):
    booking = book(service, "2025-08-01", "2025-08-05")

    cancelled = service.cancel_booking(booking.id, OWNER, reason="Double listing")

    assert cancelled.status is BookingStatus.CANCELLED
    assert service.get_booking(booking.id).cancellation_reason == "Double listing"
    assert published[-1].frees_dates


def test_completed_booking_cannot_be_cancelled_even_by_admin(service):
    booking = book(service, "2025-08-01", "2025-08-05")
    service.transition_status(TransitionBookingCommand(booking.id, OWNER, BookingStatus.CONFIRMED))
    service.transition_status(TransitionBookingCommand(booking.id, ADMIN, BookingStatus.COMPLETED))

    for actor in (GUEST, OWNER, ADMIN, STRANGER):
        error = error_of(service.cancel_booking, booking.id, actor)
        assert error.kind is ErrorKind.VALIDATION
        assert error.message == "Cannot cancel a completed booking"


def test_illegal_transition_is_validation(service):
    booking = book(service, "2025-08-01", "2025-08-05")
    service.cancel_booking(booking.id, GUEST)

    error = error_of(service.transition_status, TransitionBookingCommand(booking.id, OWNER, BookingStatus.CONFIRMED))

    assert error.kind is ErrorKind.VALIDATION
    assert error.message == "Cannot transition booking from CANCELLED to CONFIRMED"


@pytest.mark.parametrize("booking_id", ["00000000-0000-0000-0000-000000000000", "garbage", None])
def test_missing_booking_is_not_found(service, booking_id):
    error = error_of(service.cancel_booking, booking_id, ADMIN)

    assert error.kind is ErrorKind.NOT_FOUND


def test_unknown_target_status(service):
    booking = book(service, "2025-08-01", "2025-08-05")

    error = error_of(service.transition_status, TransitionBookingCommand(booking.id, ADMIN, "ARCHIVED"))

    assert error.kind is ErrorKind.VALIDATION
    assert error.message == "Unknown booking status: ARCHIVED"


def test_lost_compare_and_swap_is_a_conflict(service, store, monkeypatch):
    booking = book(service, "2025-08-01", "2025-08-05")
    stale = store.bookings.get(booking.id)
    service.cancel_booking(booking.id, GUEST)
    monkeypatch.setattr(store.bookings, "get", lambda booking_id: stale)

    error = error_of(service.transition_status, TransitionBookingCommand(booking.id, OWNER, BookingStatus.CONFIRMED))

    assert error.kind is ErrorKind.CONFLICT
    monkeypatch.undo()
    assert service.get_booking(booking.id).status is BookingStatus.CANCELLED


# ----- cancellation window -----

@pytest.fixture
def strict_service(store, bus):
    return make_service(store, bus, policy=BookingPolicy(cancellation_lead_time=timedelta(hours=48)))


def test_near_term_confirmed_booking_cannot_be_cancelled(strict_service):
    start = NOW + timedelta(hours=24)
    booking = book(strict_service, start, start + timedelta(days=2))
    strict_service.transition_status(TransitionBookingCommand(booking.id, OWNER, BookingStatus.CONFIRMED))

    error = error_of(strict_service.cancel_booking, booking.id, GUEST)

    assert error.kind is ErrorKind.VALIDATION
    assert error.message == NEAR_TERM_CANCEL_MESSAGE


def test_near_term_pending_booking_can_be_cancelled(strict_service):
    start = NOW + timedelta(hours=24)
    booking = book(strict_service, start, start + timedelta(days=2))

    assert strict_service.cancel_booking(booking.id, GUEST).status is BookingStatus.CANCELLED


def test_distant_confirmed_booking_can_be_cancelled(strict_service):
    start = NOW + timedelta(hours=72)
    booking = book(strict_service, start, start + timedelta(days=2))
    strict_service.transition_status(TransitionBookingCommand(booking.id, OWNER, BookingStatus.CONFIRMED))

    assert strict_service.cancel_booking(booking.id, GUEST).status is BookingStatus.CANCELLED


def test_default_policy_has_no_window(service):
    start = NOW + timedelta(hours=1)
    booking = book(service, start, start + timedelta(days=1))
    service.transition_status(TransitionBookingCommand(booking.id, OWNER, BookingStatus.CONFIRMED))

    assert service.cancel_booking(booking.id, GUEST).status is BookingStatus.CANCELLED


# ----- completion sweep -----

def test_complete_elapsed_only_touches_finished_confirmed_bookings(service):
    finished = book(service, "2025-08-01", "2025-08-05")
    running = book(service, "2025-08-05", "2025-08-20")
    pending = book(service, "2025-07-20", "2025-07-25")
    for booking in (finished, running):
        service.transition_status(TransitionBookingCommand(booking.id, OWNER, BookingStatus.CONFIRMED))

    result = service.complete_elapsed(now=datetime(2025, 8, 6, tzinfo=timezone.utc))

    assert result == {"completed": 1, "skipped": 0}
    assert service.get_booking(finished.id).status is BookingStatus.COMPLETED
    assert service.get_booking(running.id).status is BookingStatus.CONFIRMED
    assert service.get_booking(pending.id).status is BookingStatus.PENDING
