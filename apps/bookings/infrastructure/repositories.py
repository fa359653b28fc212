"""
Booking repository implementations

- DjangoBookingRepository: ORM-backed, used by the web application
- InMemoryBookingRepository: process-local, used by single-process runs and tests
"""

import threading
from copy import deepcopy
from datetime import datetime
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from shared.domain.value_objects import DateRange

from apps.bookings.domain.entities import Booking, BookingStatus
from apps.bookings.domain.repositories import BookingRepository


class DjangoBookingRepository(BookingRepository):

    @property
    def model(self):
        from apps.bookings.models import Booking as BookingModel

        return BookingModel

    def add(self, booking: Booking) -> None:
        self.model.from_entity(booking).save(force_insert=True)

    def get(self, booking_id: UUID) -> Optional[Booking]:
        row = self.model.objects.filter(pk=booking_id).first()
        return row.to_entity() if row else None

    def list_by_property(
        self,
        property_id: int,
        statuses: Iterable[BookingStatus],
        overlapping: Optional[DateRange] = None,
    ) -> List[Booking]:
        queryset = self.model.objects.filter(
            property_id=property_id,
            status__in=[BookingStatus(s).value for s in statuses],
        )
        if overlapping is not None:
            queryset = queryset.filter(
                start_date__lt=overlapping.end_date,
                end_date__gt=overlapping.start_date,
            )
        return [row.to_entity() for row in queryset.order_by("start_date")]

    def list_ending_before(self, status: BookingStatus, moment: datetime) -> List[Booking]:
        queryset = self.model.objects.filter(
            status=BookingStatus(status).value,
            end_date__lte=moment,
        ).order_by("end_date")
        return [row.to_entity() for row in queryset]

    def update_status(self, booking: Booking, expected: BookingStatus) -> bool:
        updated = self.model.objects.filter(
            pk=booking.id,
            status=BookingStatus(expected).value,
        ).update(
            status=booking.status.value,
            cancellation_reason=booking.cancellation_reason,
            updated_at=booking.updated_at,
        )
        return updated == 1


class InMemoryBookingRepository(BookingRepository):
    """
    Dictionary-backed repository

    Stored entities are copies, so callers can only change state
    through add() and update_status().
    """

    def __init__(self):
        self._rows: Dict[UUID, Booking] = {}
        self._guard = threading.Lock()

    @staticmethod
    def _copy(booking: Booking) -> Booking:
        clone = deepcopy(booking)
        clone.clear_events()
        return clone

    def add(self, booking: Booking) -> None:
        with self._guard:
            if booking.id in self._rows:
                raise ValueError(f"Booking {booking.id} already stored")
            self._rows[booking.id] = self._copy(booking)

    def get(self, booking_id: UUID) -> Optional[Booking]:
        with self._guard:
            row = self._rows.get(booking_id)
            return self._copy(row) if row else None

    def list_by_property(
        self,
        property_id: int,
        statuses: Iterable[BookingStatus],
        overlapping: Optional[DateRange] = None,
    ) -> List[Booking]:
        wanted = {BookingStatus(s) for s in statuses}
        with self._guard:
            rows = [
                self._copy(row) for row in self._rows.values()
                if row.property_id == property_id
                and row.status in wanted
                and (overlapping is None or row.period.overlaps_with(overlapping))
            ]
        return sorted(rows, key=lambda b: b.start_date)

    def list_ending_before(self, status: BookingStatus, moment: datetime) -> List[Booking]:
        status = BookingStatus(status)
        with self._guard:
            rows = [
                self._copy(row) for row in self._rows.values()
                if row.status is status and row.end_date <= moment
            ]
        return sorted(rows, key=lambda b: b.end_date)

    def update_status(self, booking: Booking, expected: BookingStatus) -> bool:
        with self._guard:
            row = self._rows.get(booking.id)
            if row is None or row.status is not BookingStatus(expected):
                return False
            row.status = booking.status
            row.cancellation_reason = booking.cancellation_reason
            row.updated_at = booking.updated_at
            return True

    def __len__(self):
        return len(self._rows)
