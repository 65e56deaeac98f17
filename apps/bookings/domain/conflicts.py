"""
Conflict Resolver

Decides whether a proposed booking may be stored given the live booking set.
All checks run over one snapshot, in order, and stop at the first failure:

1. Normalize the candidate to UTC days. A pool candidate always ends the day
   after it starts.
2. No double start: the candidate may not start on a day another live
   booking (pool or villa) starts on.
3. Occupied days: no day in [start, end) of the candidate may be another
   live booking's start day or one of its interior days. For half-open
   ranges that is plain overlap, so it is checked per booking, not per day.

Step 3 covers both cross-kind cases: a pool day is its booking's start, so
it blocks any villa range containing it, and a villa's start and interior
days block the pool. A booking's end day is never occupied, which is what
lets a new booking start on another one's checkout day.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, List
from uuid import UUID

from shared.domain.value_objects import ONE_DAY, DateRange, to_utc_day
from apps.bookings.domain.availability import live_only
from apps.bookings.domain.entities import Booking, ResourceKind
from apps.bookings.domain.results import Accept, Reject, ResultCode


@dataclass(frozen=True)
class BookingCandidate:
    """
    A booking that has not been stored yet

    Dates may be anything to_utc_day understands. end_date is optional for
    the pool, where it is derived from start_date.
    """
    resource_kind: Any
    start_date: Any
    end_date: Any = None


def _parse_kind(value) -> ResourceKind | None:
    if isinstance(value, ResourceKind):
        return value
    try:
        return ResourceKind(value)
    except ValueError:
        return None


def normalize_candidate(
    candidate: BookingCandidate,
    *,
    strict_pool_range: bool = False,
    max_villa_days: int | None = None,
) -> tuple[ResourceKind, DateRange] | Reject:
    """
    Validate fields and produce the normalized (kind, range) pair

    Returns a Reject with field-level errors when the candidate is malformed.
    """
    errors: dict[str, list[str]] = {}

    kind = _parse_kind(candidate.resource_kind)
    if kind is None:
        errors['rental_type'] = [
            f"Unknown rental type {candidate.resource_kind!r}. "
            f"Expected one of: {', '.join(k.value for k in ResourceKind)}."
        ]

    start = end = None
    if candidate.start_date in (None, ''):
        errors['start_date'] = ["This field is required."]
    else:
        try:
            start = to_utc_day(candidate.start_date)
        except ValueError as exc:
            errors['start_date'] = [str(exc)]

    ignore_end = kind == ResourceKind.POOL and not strict_pool_range
    if candidate.end_date not in (None, '') and not ignore_end:
        try:
            end = to_utc_day(candidate.end_date)
        except ValueError as exc:
            errors['end_date'] = [str(exc)]
    elif kind == ResourceKind.VILLA:
        errors['end_date'] = ["This field is required."]

    if errors:
        return Reject(
            code=ResultCode.VALIDATION_ERROR,
            message="Please provide all required fields.",
            errors=errors,
        )

    if kind == ResourceKind.POOL:
        if start == date.max:
            # no checkout day can be represented after date.max
            return Reject(
                code=ResultCode.INVALID_RANGE,
                message="Selected start date is out of range.",
                errors={'start_date': [f"Pool bookings must start before {date.max.isoformat()}."]},
            )
        expected_end = start + ONE_DAY
        if strict_pool_range and end is not None and end != expected_end:
            return Reject(
                code=ResultCode.INVALID_RANGE,
                message="Pool bookings must be for a single day only.",
                errors={'end_date': [f"Expected {expected_end.isoformat()} for a pool booking."]},
            )
        return kind, DateRange.single_day(start)

    if end <= start:
        return Reject(
            code=ResultCode.INVALID_RANGE,
            message="End date must be after start date.",
            errors={'end_date': ["End date must be after start date."]},
        )
    if max_villa_days is not None and (end - start).days > max_villa_days:
        return Reject(
            code=ResultCode.INVALID_RANGE,
            message=f"Villa bookings may not be longer than {max_villa_days} days.",
            errors={'end_date': [f"At most {max_villa_days} days after the start date."]},
        )
    return kind, DateRange(start, end)


def blocking_bookings(dates: DateRange, bookings: Iterable[Booking]) -> List[Booking]:
    """
    Live bookings occupying any day of dates

    A day is occupied when it is a booking's start or interior day, i.e. it
    lies in [start, end); so this is half-open overlap.
    """
    return [
        booking for booking in live_only(bookings)
        if booking.dates.overlaps_with(dates)
    ]


def evaluate_create(
    candidate: BookingCandidate,
    live_bookings: Iterable[Booking],
    *,
    strict_pool_range: bool = False,
    max_villa_days: int | None = None,
    exclude_id: UUID | None = None,
) -> Accept | Reject:
    """
    Decide whether the candidate may be stored

    exclude_id skips one booking, so an edited booking is not checked
    against its own previous dates. max_villa_days caps the length of a
    villa range; None means no cap.
    On Accept, result.dates is the normalized range to persist.
    """
    normalized = normalize_candidate(
        candidate,
        strict_pool_range=strict_pool_range,
        max_villa_days=max_villa_days,
    )
    if isinstance(normalized, Reject):
        return normalized
    _kind, dates = normalized

    others = [b for b in live_only(live_bookings) if b.id != exclude_id]

    same_start = [b for b in others if b.start_date == dates.start_date]
    if same_start:
        return Reject(
            code=ResultCode.START_DATE_TAKEN,
            message=(
                f"Selected start date ({dates.start_date.isoformat()}) "
                f"is not available for booking. There are {len(same_start)} "
                f"booking(s) already starting on that date."
            ),
            conflicts=tuple(b.id for b in same_start),
        )

    blocking = blocking_bookings(dates, others)
    if blocking:
        return Reject(
            code=ResultCode.DATE_RANGE_BLOCKED,
            message=(
                f"Selected dates are not available. There are {len(blocking)} "
                f"booking(s) that conflict with your requested dates."
            ),
            conflicts=tuple(b.id for b in blocking),
        )

    return Accept(dates=dates)


def find_collisions(booking: Booking, live_bookings: Iterable[Booking]) -> List[Booking]:
    """
    Live bookings that collide with an existing booking

    Used when a rejected booking re-enters the live set: either side's start
    day or occupied days overlapping counts as a collision.
    """
    others = [b for b in live_only(live_bookings) if b.id != booking.id]
    return [
        other for other in others
        if other.start_date == booking.start_date or other.dates.overlaps_with(booking.dates)
    ]
