"""
Booking Domain Entities

Core business entities for the booking domain:
- Booking: aggregate representing a reservation of a property
- BookingStatus: lifecycle states (see state_machine for the transitions)
- Actor / Role: who is asking, as resolved by the auth gateway
- PropertySnapshot: the read-only view of a property the engine works with
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from shared.domain.base import Aggregate, utcnow
from shared.domain.value_objects import DateRange


class BookingStatus(str, Enum):
    """
    Booking lifecycle

    - PENDING -> CONFIRMED (owner accepted)
    - PENDING -> CANCELLED
    - CONFIRMED -> CANCELLED
    - CONFIRMED -> COMPLETED (stay is over)
    """
    PENDING = 'PENDING'
    CONFIRMED = 'CONFIRMED'
    CANCELLED = 'CANCELLED'
    COMPLETED = 'COMPLETED'


# Statuses that keep the booked interval occupied
ACTIVE_STATUSES = frozenset({
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.COMPLETED,
})


class PropertyStatus(str, Enum):
    AVAILABLE = 'AVAILABLE'
    MAINTENANCE = 'MAINTENANCE'
    DELETED = 'DELETED'


class Role(str, Enum):
    GUEST = 'guest'
    HOST = 'host'
    ADMIN = 'admin'
    SYSTEM = 'system'


@dataclass(frozen=True)
class Actor:
    """Caller identity handed over by the auth gateway."""
    id: Optional[int]
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def is_system(self) -> bool:
        return self.role is Role.SYSTEM


# Used by scheduled jobs such as the completion sweep
SYSTEM_ACTOR = Actor(id=None, role=Role.SYSTEM)


@dataclass(frozen=True)
class PropertySnapshot:
    id: int
    owner_id: int
    price_per_night: Decimal
    status: PropertyStatus = PropertyStatus.AVAILABLE

    @property
    def accepts_bookings(self) -> bool:
        return self.status is PropertyStatus.AVAILABLE


@dataclass(eq=False, kw_only=True)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    Key invariants:
    - period is a valid half-open range (enforced by DateRange)
    - total_price is fixed when the booking is created
    - only status and the cancellation reason change afterwards
    """

    property_id: int
    user_id: int
    period: DateRange
    total_price: Decimal
    status: BookingStatus = BookingStatus.PENDING
    guest_count: int = 1
    special_requests: str = ''
    cancellation_reason: str = ''

    def __post_init__(self):
        if self.guest_count < 1:
            raise ValueError("Guest count must be at least 1")
        if self.total_price < 0:
            raise ValueError("Total price cannot be negative")
        self.status = BookingStatus(self.status)

    @property
    def start_date(self) -> datetime:
        return self.period.start_date

    @property
    def end_date(self) -> datetime:
        return self.period.end_date

    @property
    def blocks_dates(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def record_created(self):
        from apps.bookings.domain.events import BookingCreated

        self.add_event(BookingCreated(
            aggregate_id=self.id,
            booking_id=self.id,
            property_id=self.property_id,
            user_id=self.user_id,
            period=self.period,
            total_price=self.total_price,
        ))

    def move_to(self, target: BookingStatus, actor: Actor, reason: str = '', at: Optional[datetime] = None):
        """
        Apply an already validated transition

        Legality and authorization are the state machine's job; this only
        mutates the aggregate and records BookingStatusChanged.
        """
        from apps.bookings.domain.events import BookingStatusChanged

        old_status = self.status
        self.status = BookingStatus(target)
        if self.status is BookingStatus.CANCELLED:
            self.cancellation_reason = reason or ''
        self.updated_at = at or utcnow()

        self.add_event(BookingStatusChanged(
            aggregate_id=self.id,
            booking_id=self.id,
            property_id=self.property_id,
            old_status=old_status,
            new_status=self.status,
            actor_role=actor.role,
            reason=reason or '',
        ))

    def __str__(self):
        return f"Booking {self.id} ({self.status.value})"

    def __repr__(self):
        return (
            f"Booking(id={self.id}, property_id={self.property_id}, "
            f"status={self.status.value}, period={self.period!r})"
        )
