"""
Common Value Objects

Value objects used across the booking domain:
- to_utc_day: Normalizes any incoming date value to a UTC calendar day
- DateRange: Represents a half-open range of days [start, end)
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Iterator

from shared.domain.base import ValueObject

ONE_DAY = timedelta(days=1)


def to_utc_day(value) -> date:
    """
    Truncate a date-like value to its UTC calendar day

    This is the only place where external dates enter the domain.
    - date: returned as is
    - aware datetime: converted to UTC, then truncated
    - naive datetime: treated as UTC
    - str: parsed as ISO 8601 ('2024-06-01', '2024-06-01T21:00:00Z', ...)
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Invalid date value: {value!r}")

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            try:
                value = value.astimezone(timezone.utc)
            except OverflowError:
                raise ValueError(f"Date out of range: {value.isoformat()!r}")
        return value.date()

    if isinstance(value, date):
        return value

    raise ValueError(f"Unsupported date value: {value!r}")


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date (inclusive) to end_date (exclusive).
    A booking whose end_date equals another booking's start_date does not
    overlap it: the shared day is a checkout/check-in day.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must be before end date ({self.end_date})")

    @classmethod
    def single_day(cls, day: date) -> 'DateRange':
        """Range occupying exactly one day"""
        return cls(day, day + ONE_DAY)

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        Examples:
            - DateRange(25, 28) overlaps with DateRange(27, 30) -> True
            - DateRange(25, 28) overlaps with DateRange(28, 31) -> False (adjacent)
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")

        return (self.start_date < other.end_date and
                self.end_date > other.start_date)

    def contains(self, check_date: date) -> bool:
        """start_date <= check_date < end_date"""
        return self.start_date <= check_date < self.end_date

    def is_interior(self, check_date: date) -> bool:
        """Strictly between start and end, both endpoints excluded"""
        return self.start_date < check_date < self.end_date

    def days(self) -> Iterator[date]:
        """Iterate occupied days, end_date excluded"""
        current = self.start_date
        while current < self.end_date:
            yield current
            current += ONE_DAY

    def __len__(self) -> int:
        """Number of days (nights) in this range"""
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
