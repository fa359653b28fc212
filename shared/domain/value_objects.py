"""
Common Value Objects

- DateRange: half-open stay period [start_date, end_date) between two instants
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from shared.domain.base import ValueObject


def to_instant(value) -> datetime:
    """
    Coerce a datetime, date or ISO-8601 string into an aware datetime

    Naive values are read as UTC and bare dates as midnight UTC.
    Raises ValueError for anything that does not parse.
    """
    if value is None or value == '':
        raise ValueError("Date is required")
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(('Z', 'z')):
            text = text[:-1] + '+00:00'
        value = datetime.fromisoformat(text)
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    elif not isinstance(value, datetime):
        raise ValueError(f"Unsupported date value: {value!r}")

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Stay period

    start_date is inclusive, end_date is exclusive, so a stay ending at
    the instant another one starts does not overlap it.
    """
    start_date: datetime
    end_date: datetime

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise ValueError("End date must be after start date")

    @classmethod
    def parse(cls, start, end) -> 'DateRange':
        return cls(to_instant(start), to_instant(end))

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        Examples:
            - [1st, 5th) overlaps with [3rd, 6th) -> True
            - [1st, 5th) overlaps with [5th, 10th) -> False (adjacent)
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")

        return (self.start_date < other.end_date and
                other.start_date < self.end_date)

    def contains(self, instant: datetime) -> bool:
        return self.start_date <= instant < self.end_date

    @property
    def duration(self) -> timedelta:
        return self.end_date - self.start_date

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date.isoformat()}, {self.end_date.isoformat()})"
