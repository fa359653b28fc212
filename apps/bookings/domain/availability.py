"""
Availability Index

Answers "is this interval free for the property?" against the stored
bookings whose status still occupies dates (PENDING, CONFIRMED,
COMPLETED). Cancelled bookings free their interval.

The index is a read-only query. Callers that act on the answer must
evaluate it inside the property lock of the current unit of work,
otherwise two writers can both see a free interval.
"""

from typing import List, Optional
from uuid import UUID

from shared.domain.value_objects import DateRange

from apps.bookings.domain.entities import ACTIVE_STATUSES, Booking


def intervals_conflict(a: DateRange, b: DateRange) -> bool:
    """[a.start, a.end) and [b.start, b.end) share at least one instant."""
    return a.overlaps_with(b)


class AvailabilityIndex:
    """
    Overlap queries over a booking repository

    The repository narrows the candidates with the requested window;
    the overlap rule is applied again here so every backend gives the
    same answer for adjacent intervals.
    """

    def __init__(self, bookings):
        self._bookings = bookings

    def conflicting(
        self,
        property_id: int,
        period: DateRange,
        exclude_booking_id: Optional[UUID] = None,
    ) -> List[Booking]:
        candidates = self._bookings.list_by_property(
            property_id,
            statuses=ACTIVE_STATUSES,
            overlapping=period,
        )
        return [
            booking for booking in candidates
            if booking.id != exclude_booking_id
            and booking.blocks_dates
            and intervals_conflict(booking.period, period)
        ]

    def conflicts(
        self,
        property_id: int,
        start,
        end,
        exclude_booking_id: Optional[UUID] = None,
    ) -> bool:
        period = DateRange.parse(start, end)
        return bool(self.conflicting(property_id, period, exclude_booking_id))
