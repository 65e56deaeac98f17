"""
Booking Domain Entities

Core business entities for the booking domain:
- ResourceKind: The two bookable units of the property
- BookingStatus: Lifecycle states
- Booking: Aggregate representing one reservation
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from shared.domain.base import Aggregate, utc_now
from shared.domain.value_objects import DateRange


class ResourceKind(Enum):
    """
    Bookable units

    POOL occupies exactly one day; its stored end date is the next day.
    VILLA (villa + pool) spans several days and blocks the pool as well.
    """
    POOL = 'pool'
    VILLA = 'villa_pool'


class BookingStatus(Enum):
    """
    Booking lifecycle

    There is no terminal state: an admin may move a booking between any
    two statuses. REJECTED bookings leave the live set and stop blocking dates.
    """
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'


@dataclass(eq=False, kw_only=True)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    Key invariants:
    - dates is a half-open range with end_date > start_date
    - POOL bookings span exactly one day
    - rejection_reason is non-empty iff status is REJECTED
    """

    agent_id: int | None
    resource_kind: ResourceKind
    dates: DateRange
    status: BookingStatus = BookingStatus.PENDING
    rejection_reason: str = ''

    def __post_init__(self):
        if self.resource_kind == ResourceKind.POOL and len(self.dates) != 1:
            raise ValueError(
                f"Pool bookings must span exactly one day, got {self.dates}"
            )
        if self.status == BookingStatus.REJECTED and not self.rejection_reason:
            raise ValueError("Rejected bookings must carry a rejection reason")

    @property
    def start_date(self) -> date:
        return self.dates.start_date

    @property
    def end_date(self) -> date:
        return self.dates.end_date

    @property
    def duration(self) -> int:
        """Number of days; always 1 for the pool"""
        return len(self.dates)

    @property
    def is_live(self) -> bool:
        """Live bookings block dates for others"""
        return self.status != BookingStatus.REJECTED

    def change_status(self, new_status: BookingStatus, reason: str = '') -> BookingStatus:
        """
        Move to new_status and emit BookingStatusChanged

        Callers validate the transition first (see transitions.evaluate_transition).
        Returns the previous status.
        """
        if new_status == BookingStatus.REJECTED and not (reason or '').strip():
            raise ValueError("A rejection reason is required to reject a booking")

        from apps.bookings.domain.events import BookingStatusChanged

        previous = self.status
        self.status = new_status
        self.rejection_reason = reason.strip() if new_status == BookingStatus.REJECTED else ''
        self.updated_at = utc_now()

        self.add_event(BookingStatusChanged(
            aggregate_id=self.id,
            booking_id=self.id,
            agent_id=self.agent_id,
            previous_status=previous.value,
            new_status=new_status.value,
            rejection_reason=self.rejection_reason,
        ))
        return previous

    def reschedule(self, dates: DateRange):
        """Replace the occupied range; the caller has re-run conflict checks"""
        if self.resource_kind == ResourceKind.POOL and len(dates) != 1:
            raise ValueError(
                f"Pool bookings must span exactly one day, got {dates}"
            )

        from apps.bookings.domain.events import BookingRescheduled

        previous = self.dates
        self.dates = dates
        self.updated_at = utc_now()

        self.add_event(BookingRescheduled(
            aggregate_id=self.id,
            booking_id=self.id,
            previous_dates=previous,
            dates=dates,
        ))

    def __str__(self):
        return f"Booking {self.id} ({self.resource_kind.value}, {self.dates}, {self.status.value})"

    def __repr__(self):
        return (
            f"Booking(id={self.id}, kind={self.resource_kind.value}, "
            f"status={self.status.value}, dates={self.dates!r})"
        )
