"""
Booking Repository Port

The persistence operations the engine relies on. Implementations live
in apps.bookings.infrastructure.repositories.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from shared.domain.value_objects import DateRange

from apps.bookings.domain.entities import Booking, BookingStatus


class BookingRepository(ABC):

    @abstractmethod
    def add(self, booking: Booking) -> None:
        """Persist a new booking"""

    @abstractmethod
    def get(self, booking_id: UUID) -> Optional[Booking]:
        """Booking by id, or None"""

    @abstractmethod
    def list_by_property(
        self,
        property_id: int,
        statuses: Iterable[BookingStatus],
        overlapping: Optional[DateRange] = None,
    ) -> List[Booking]:
        """
        Bookings of a property in one of ``statuses``

        When ``overlapping`` is given, only bookings whose interval
        overlaps it are returned.
        """

    @abstractmethod
    def list_ending_before(self, status: BookingStatus, moment: datetime) -> List[Booking]:
        """Bookings in ``status`` whose end_date is at or before ``moment``"""

    @abstractmethod
    def update_status(self, booking: Booking, expected: BookingStatus) -> bool:
        """
        Compare-and-swap the status columns

        Writes booking.status and its cancellation reason only if the
        stored status still equals ``expected``. Returns False when
        another writer got there first.
        """
