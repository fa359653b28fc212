"""
Booking units of work

Each unit of work exposes the repositories the booking engine needs
(``bookings``, ``properties``, ``reviews``) and a ``property_lock``
context manager that makes the availability check and the insert that
follows it atomic with respect to other creations on the same property.
"""

from contextlib import contextmanager
from typing import Optional

from django.db import OperationalError  # type: ignore

from shared.application.message_bus import MessageBus
from shared.application.uow import DjangoUnitOfWork, InMemoryUnitOfWork
from shared.domain.errors import DomainError

from apps.bookings.infrastructure.locks import PropertyLockRegistry
from apps.bookings.infrastructure.repositories import (
    DjangoBookingRepository,
    InMemoryBookingRepository,
)
from apps.properties.catalog import DjangoPropertyCatalog, InMemoryPropertyCatalog
from apps.reviews.repositories import DjangoReviewRepository, InMemoryReviewRepository


BUSY_MESSAGE = "Property is being booked by another request, retry later"

# SQLite "database is locked", Postgres lock_not_available (55P03)
LOCK_CONTENTION_MARKERS = ("database is locked", "lock timeout", "could not obtain lock")


def is_lock_contention(exc: BaseException) -> bool:
    if not isinstance(exc, OperationalError):
        return False
    cause = exc.__cause__
    if getattr(cause, "sqlstate", None) == "55P03" or getattr(cause, "pgcode", None) == "55P03":
        return True
    text = str(exc).lower()
    return any(marker in text for marker in LOCK_CONTENTION_MARKERS)


class DjangoBookingUnitOfWork(DjangoUnitOfWork):
    """
    Transaction-scoped unit of work

    The property lock is a SELECT ... FOR UPDATE on the property row,
    held until the surrounding transaction commits or rolls back. SQLite
    has no row locks; there transactions are opened IMMEDIATE (see
    ``SQLITE_OPTIONS`` in settings) so the database write lock serializes
    writers instead.

    A writer that gives up waiting for either lock, at BEGIN, inside the
    block or at COMMIT, fails with a conflict rather than a database error.
    """

    def __init__(self, message_bus: Optional[MessageBus] = None):
        super().__init__(message_bus)
        self.bookings = DjangoBookingRepository()
        self.properties = DjangoPropertyCatalog()
        self.reviews = DjangoReviewRepository()

    def __enter__(self):
        try:
            return super().__enter__()
        except OperationalError as exc:
            if is_lock_contention(exc):
                self._transaction = None
                raise DomainError.conflict(BUSY_MESSAGE) from exc
            raise

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            super().__exit__(exc_type, exc_val, exc_tb)
        except OperationalError as exc:
            if is_lock_contention(exc):
                raise DomainError.conflict(BUSY_MESSAGE) from exc
            raise
        if exc_val is not None and is_lock_contention(exc_val):
            raise DomainError.conflict(BUSY_MESSAGE) from exc_val
        return False

    @contextmanager
    def property_lock(self, property_id, timeout: Optional[float] = None):
        locked = self.properties.get(property_id, lock=True, lock_timeout=timeout)
        if locked is None:
            raise DomainError.not_found("Property not found")
        yield locked


class InMemoryStore:
    """
    Process-local storage shared by in-memory units of work

    Built once per process and handed to every unit of work, so that
    all requests see the same bookings and contend on the same locks.
    """

    def __init__(self, lock_timeout: Optional[float] = 5.0):
        self.bookings = InMemoryBookingRepository()
        self.properties = InMemoryPropertyCatalog()
        self.reviews = InMemoryReviewRepository()
        self.locks = PropertyLockRegistry(default_timeout=lock_timeout)


class InMemoryBookingUnitOfWork(InMemoryUnitOfWork):

    def __init__(self, store: InMemoryStore, message_bus: Optional[MessageBus] = None):
        super().__init__(message_bus)
        self._store = store
        self.bookings = store.bookings
        self.properties = store.properties
        self.reviews = store.reviews

    @contextmanager
    def property_lock(self, property_id, timeout: Optional[float] = None):
        with self._store.locks.hold(property_id, timeout):
            locked = self.properties.get(property_id)
            if locked is None:
                raise DomainError.not_found("Property not found")
            yield locked
