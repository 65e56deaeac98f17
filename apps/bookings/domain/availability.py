"""
Availability Index

Computes, from the live booking set, which days a NEW booking of each
resource kind may not occupy. The snapshot is rebuilt on every read; nothing
is cached between requests, so a status change is visible immediately.

Rules:
- poolUnavailable: every day of a live pool booking, plus every day of a
  live villa booking except that villa's checkout (end) day
- villaUnavailable: every day of a live villa booking except its end day
- villaStartDates / villaEndDates: boundaries of live villa bookings, used by
  the calendar to mark check-in and checkout days

Start-date collisions across kinds are enforced by the conflict resolver,
not here.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import FrozenSet, Iterable, List

from apps.bookings.domain.entities import Booking, BookingStatus, ResourceKind


@dataclass(frozen=True)
class AvailabilitySnapshot:
    pool_unavailable: FrozenSet[date] = field(default_factory=frozenset)
    villa_unavailable: FrozenSet[date] = field(default_factory=frozenset)
    villa_start_dates: FrozenSet[date] = field(default_factory=frozenset)
    villa_end_dates: FrozenSet[date] = field(default_factory=frozenset)
    pending_dates: FrozenSet[date] = field(default_factory=frozenset)
    approved_dates: FrozenSet[date] = field(default_factory=frozenset)

    def to_dict(self) -> dict:
        """ISO strings, sorted, in the shape the calendar consumes"""
        def _iso(days):
            return [d.isoformat() for d in sorted(days)]

        return {
            'poolUnavailableDates': _iso(self.pool_unavailable),
            'villaUnavailableDates': _iso(self.villa_unavailable),
            'villaStartDates': _iso(self.villa_start_dates),
            'villaEndDates': _iso(self.villa_end_dates),
            'pendingDates': _iso(self.pending_dates),
            'approvedDates': _iso(self.approved_dates),
        }


def live_only(bookings: Iterable[Booking]) -> List[Booking]:
    """Drop REJECTED bookings"""
    return [b for b in bookings if b.is_live]


def compute_unavailability(bookings: Iterable[Booking]) -> AvailabilitySnapshot:
    """
    Build the availability snapshot

    Rejected bookings are filtered out here as well, so callers may pass
    any booking collection.
    """
    pool_unavailable = set()
    villa_unavailable = set()
    villa_starts = set()
    villa_ends = set()
    pending = set()
    approved = set()

    for booking in live_only(bookings):
        occupied = set(booking.dates.days())

        if booking.resource_kind == ResourceKind.VILLA:
            villa_starts.add(booking.start_date)
            villa_ends.add(booking.end_date)
            villa_unavailable |= occupied
        pool_unavailable |= occupied

        if booking.status == BookingStatus.PENDING:
            pending |= occupied
        elif booking.status == BookingStatus.APPROVED:
            approved |= occupied

    return AvailabilitySnapshot(
        pool_unavailable=frozenset(pool_unavailable),
        villa_unavailable=frozenset(villa_unavailable),
        villa_start_dates=frozenset(villa_starts),
        villa_end_dates=frozenset(villa_ends),
        pending_dates=frozenset(pending),
        approved_dates=frozenset(approved),
    )


def get_availability(bookings: Iterable[Booking]) -> AvailabilitySnapshot:
    """Read-side entry point used by the calendar"""
    return compute_unavailability(bookings)
