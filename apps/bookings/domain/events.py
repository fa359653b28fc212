"""
Booking Domain Events

Published after the transaction that produced them has committed.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from shared.domain.base import DomainEvent
from shared.domain.value_objects import DateRange

from apps.bookings.domain.entities import BookingStatus, Role


@dataclass(kw_only=True)
class BookingCreated(DomainEvent):
    """
    Event: a PENDING booking was stored

    Triggers:
    - notify the property owner that a request awaits confirmation
    """
    booking_id: UUID
    property_id: int
    user_id: int
    period: DateRange
    total_price: Decimal


@dataclass(kw_only=True)
class BookingStatusChanged(DomainEvent):
    """
    Event: a booking moved through the state machine

    A CANCELLED new_status means the interval is free again.
    """
    booking_id: UUID
    property_id: int
    old_status: BookingStatus
    new_status: BookingStatus
    actor_role: Role
    reason: str = ''

    @property
    def frees_dates(self) -> bool:
        return self.new_status is BookingStatus.CANCELLED
