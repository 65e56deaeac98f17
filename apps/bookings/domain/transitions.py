"""
Status Transition Validator

All six transitions between PENDING, APPROVED and REJECTED are legal.
- * -> REJECTED needs a non-empty reason; the booking leaves the live set.
- * -> APPROVED / PENDING clears the reason; the booking re-enters the live
  set without re-running the conflict resolver. Any live bookings it now
  collides with are reported as warnings, never as a rejection.
- Same status: no-op, the stored reason is left untouched.
"""

from typing import Iterable

from apps.bookings.domain.conflicts import find_collisions
from apps.bookings.domain.entities import Booking, BookingStatus
from apps.bookings.domain.results import Accept, Reject, ResultCode


def _parse_status(value) -> BookingStatus | None:
    if isinstance(value, BookingStatus):
        return value
    try:
        return BookingStatus(value)
    except ValueError:
        return None


def evaluate_transition(
    booking: Booking,
    new_status,
    reason: str | None = None,
    live_bookings: Iterable[Booking] = (),
) -> Accept | Reject:
    """
    Decide whether booking may move to new_status

    live_bookings is only consulted for re-entry warnings.
    """
    target = _parse_status(new_status)
    if target is None:
        return Reject(
            code=ResultCode.VALIDATION_ERROR,
            message="Invalid status. Must be pending, approved, or rejected.",
            errors={'status': [f"{new_status!r} is not a valid status."]},
        )

    if target == booking.status:
        return Accept(
            warnings=(f"Booking status already set to {target.value}",),
            noop=True,
        )

    if target == BookingStatus.REJECTED:
        if not (reason or '').strip():
            return Reject(
                code=ResultCode.MISSING_REJECTION_REASON,
                message="Rejection reason is required when rejecting a booking.",
                errors={'rejection_reason': ["This field is required."]},
            )
        return Accept(warnings=("The dates are now available for other bookings.",))

    if booking.status != BookingStatus.REJECTED:
        return Accept()

    collisions = find_collisions(booking, live_bookings)
    if not collisions:
        return Accept()

    return Accept(
        warnings=(
            f"This booking now conflicts with {len(collisions)} live booking(s) "
            f"created while it was rejected.",
        ),
        conflicts=tuple(b.id for b in collisions),
    )
