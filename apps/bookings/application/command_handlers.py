"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- CreateBookingCommand: Create a new booking
- ChangeBookingStatusCommand: Approve, reject or reset a booking (admin)
- UpdateBookingCommand: Edit guest details and, optionally, dates
- DeleteBookingCommand: Hard-delete a booking

Queries:
- GetAvailabilityQuery: Availability snapshot for the calendar

Expected outcomes (validation, conflicts, illegal transitions) are returned
as Accept/Reject results. Lookup and authorization failures raise.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict
from uuid import UUID
import logging

from django.conf import settings  # type: ignore

from shared.application.uow import DjangoUnitOfWork
from apps.bookings.domain.availability import AvailabilitySnapshot, get_availability
from apps.bookings.domain.conflicts import BookingCandidate, evaluate_create
from apps.bookings.domain.entities import Booking, BookingStatus, ResourceKind
from apps.bookings.domain.events import BookingCreated, BookingDeleted
from apps.bookings.domain.results import Accept, Reject, ResultCode
from apps.bookings.domain.transitions import evaluate_transition
from apps.bookings.models import Booking as BookingModel
from apps.bookings.repositories import DjangoBookingRepository

logger = logging.getLogger(__name__)

DETAIL_FIELDS = (
    'guest_name',
    'phone_number',
    'adults',
    'children',
    'guest_count',
    'amount',
    'details',
)


class BookingNotFound(Exception):
    """Raised when the requested booking does not exist."""


class BookingPermissionDenied(Exception):
    """Raised when the caller may not act on the booking."""


@dataclass(frozen=True)
class Caller:
    """Identity and role of whoever issued the command"""
    user_id: int
    is_admin: bool = False

    @classmethod
    def from_user(cls, user) -> 'Caller':
        is_admin = user.is_admin() if hasattr(user, 'is_admin') else bool(user.is_superuser)
        return cls(user_id=user.pk, is_admin=is_admin)

    def may_manage(self, row: BookingModel) -> bool:
        return self.is_admin or row.agent_id == self.user_id


@dataclass
class BookingOutcome:
    """Engine result plus the stored row it refers to"""
    result: Accept | Reject
    booking: BookingModel | None = None
    previous_status: str | None = None

    @property
    def accepted(self) -> bool:
        return self.result.accepted


def strict_pool_range() -> bool:
    return bool(getattr(settings, 'BOOKING_STRICT_POOL_RANGE', False))


def max_villa_days() -> int | None:
    return getattr(settings, 'BOOKING_MAX_VILLA_DAYS', None) or None


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to create a new booking

    Dates are passed through untouched; the conflict resolver normalizes them.
    """
    caller: Caller
    rental_type: Any
    start_date: Any
    end_date: Any = None
    guest_name: str = ''
    phone_number: str = ''
    adults: int = 1
    children: int = 0
    guest_count: int | None = None
    amount: Decimal = Decimal('0')
    details: str = ''


@dataclass
class ChangeBookingStatusCommand:
    """Command to move a booking to another status"""
    caller: Caller
    booking_id: UUID
    status: Any
    rejection_reason: str | None = None


@dataclass
class UpdateBookingCommand:
    """Command to edit a booking; changes holds only the provided fields"""
    caller: Caller
    booking_id: UUID
    changes: Dict[str, Any] = field(default_factory=dict)


@dataclass
class DeleteBookingCommand:
    """Command to hard-delete a booking"""
    caller: Caller
    booking_id: UUID


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    1. Start transaction and lock the inventory row
    2. Load the live booking set
    3. Evaluate the candidate (conflict resolver)
    4. Persist as APPROVED for admins, PENDING otherwise
    5. Publish BookingCreated after commit
    """

    def __init__(self, booking_repo: DjangoBookingRepository | None = None):
        self.booking_repo = booking_repo or DjangoBookingRepository()

    def handle(self, command: CreateBookingCommand) -> BookingOutcome:
        logger.info(
            f"Creating {command.rental_type} booking for user {command.caller.user_id}, "
            f"dates {command.start_date} - {command.end_date}"
        )

        candidate = BookingCandidate(
            resource_kind=command.rental_type,
            start_date=command.start_date,
            end_date=command.end_date,
        )

        with DjangoUnitOfWork() as uow:
            inventory = self.booking_repo.lock_inventory()
            live = self.booking_repo.live_bookings()

            result = evaluate_create(
                candidate,
                live,
                strict_pool_range=strict_pool_range(),
                max_villa_days=max_villa_days(),
            )
            if not result:
                logger.info(f"Booking rejected: {result.code.value} ({result.message})")
                return BookingOutcome(result)

            status = BookingStatus.APPROVED if command.caller.is_admin else BookingStatus.PENDING
            booking = Booking(
                agent_id=command.caller.user_id,
                resource_kind=ResourceKind(command.rental_type),
                dates=result.dates,
                status=status,
            )
            booking.add_event(BookingCreated(
                aggregate_id=booking.id,
                booking_id=booking.id,
                agent_id=booking.agent_id,
                resource_kind=booking.resource_kind.value,
                dates=booking.dates,
                status=booking.status.value,
            ))

            guest_count = command.guest_count
            if guest_count is None:
                guest_count = command.adults + command.children

            row = self.booking_repo.add(
                booking,
                guest_name=command.guest_name,
                phone_number=command.phone_number,
                adults=command.adults,
                children=command.children,
                guest_count=guest_count,
                amount=command.amount,
                details=command.details or '',
            )
            self.booking_repo.bump_inventory(inventory)
            uow.collect_events(booking)

        logger.info(
            f"Booking created: {row.id} ({row.rental_type}, "
            f"{row.start_date} - {row.end_date}, status {row.status})"
        )
        return BookingOutcome(result, booking=row)


class ChangeBookingStatusHandler:
    """
    Handler for status changes (admin only)

    Rejection frees the dates immediately. Moving a rejected booking back to
    pending/approved is never blocked; collisions come back as warnings.
    """

    def __init__(self, booking_repo: DjangoBookingRepository | None = None):
        self.booking_repo = booking_repo or DjangoBookingRepository()

    def handle(self, command: ChangeBookingStatusCommand) -> BookingOutcome:
        if not command.caller.is_admin:
            raise BookingPermissionDenied("Only admin can update booking status")

        with DjangoUnitOfWork() as uow:
            inventory = self.booking_repo.lock_inventory()
            booking = self.booking_repo.get_by_id(command.booking_id)
            if not booking:
                raise BookingNotFound(f"Booking with ID {command.booking_id} not found")

            live = self.booking_repo.live_bookings(exclude_id=booking.id)
            result = evaluate_transition(
                booking,
                command.status,
                command.rejection_reason,
                live,
            )
            if not result or result.noop:
                return BookingOutcome(result, booking=self.booking_repo.get_row(booking.id))

            previous = booking.change_status(
                BookingStatus(command.status),
                command.rejection_reason or '',
            )
            self.booking_repo.save(booking)
            self.booking_repo.bump_inventory(inventory)
            uow.collect_events(booking)

        logger.info(
            f"Booking {booking.id} status changed: {previous.value} -> {booking.status.value}"
        )
        if result.conflicts:
            logger.warning(
                f"Booking {booking.id} re-entered the live set with "
                f"{len(result.conflicts)} colliding booking(s)"
            )
        return BookingOutcome(
            result,
            booking=self.booking_repo.get_row(booking.id),
            previous_status=previous.value,
        )


class UpdateBookingHandler:
    """
    Handler for editing a booking

    Guest details are copied as given. If dates change the conflict resolver
    runs again against every other live booking. The rental type is fixed.
    """

    def __init__(self, booking_repo: DjangoBookingRepository | None = None):
        self.booking_repo = booking_repo or DjangoBookingRepository()

    def handle(self, command: UpdateBookingCommand) -> BookingOutcome:
        changes = dict(command.changes)

        with DjangoUnitOfWork() as uow:
            inventory = self.booking_repo.lock_inventory()
            row = self.booking_repo.get_row(command.booking_id)
            if row is None:
                raise BookingNotFound(f"Booking with ID {command.booking_id} not found")
            if not command.caller.may_manage(row):
                raise BookingPermissionDenied("You are not authorized to update this booking")

            booking = self.booking_repo.get_by_id(row.id)

            new_kind = changes.pop('rental_type', None)
            if new_kind is not None and str(getattr(new_kind, 'value', new_kind)) != row.rental_type:
                return BookingOutcome(
                    Reject(
                        code=ResultCode.VALIDATION_ERROR,
                        message="Rental type cannot be changed after creation.",
                        errors={'rental_type': ["Rental type is immutable."]},
                    ),
                    booking=row,
                )

            result = Accept()
            if 'start_date' in changes or 'end_date' in changes:
                # pool end dates are derived from the start unless strict mode checks them
                default_end = None if booking.resource_kind == ResourceKind.POOL else booking.end_date
                candidate = BookingCandidate(
                    resource_kind=booking.resource_kind,
                    start_date=changes.pop('start_date', booking.start_date),
                    end_date=changes.pop('end_date', default_end),
                )
                live = self.booking_repo.live_bookings() if booking.is_live else []
                result = evaluate_create(
                    candidate,
                    live,
                    strict_pool_range=strict_pool_range(),
                    max_villa_days=max_villa_days(),
                    exclude_id=booking.id,
                )
                if not result:
                    logger.info(
                        f"Reschedule of booking {booking.id} rejected: {result.code.value}"
                    )
                    return BookingOutcome(result, booking=row)
                if result.dates != booking.dates:
                    booking.reschedule(result.dates)

            details = {name: changes[name] for name in DETAIL_FIELDS if name in changes}
            self.booking_repo.save(booking, **details)
            self.booking_repo.bump_inventory(inventory)
            uow.collect_events(booking)

        logger.info(f"Booking {booking.id} updated ({', '.join(sorted(command.changes)) or 'no fields'})")
        return BookingOutcome(result, booking=self.booking_repo.get_row(booking.id))


class DeleteBookingHandler:
    """
    Handler for deleting a booking

    Admins may delete any booking. Agents may delete only their own
    bookings, and only once they have been rejected.
    """

    def __init__(self, booking_repo: DjangoBookingRepository | None = None):
        self.booking_repo = booking_repo or DjangoBookingRepository()

    def handle(self, command: DeleteBookingCommand) -> None:
        with DjangoUnitOfWork() as uow:
            inventory = self.booking_repo.lock_inventory()
            booking = self.booking_repo.get_by_id(command.booking_id)
            if booking is None:
                raise BookingNotFound(f"Booking with ID {command.booking_id} not found")

            caller = command.caller
            if not caller.is_admin:
                if booking.agent_id != caller.user_id:
                    raise BookingPermissionDenied("You are not authorized to delete this booking")
                if booking.status != BookingStatus.REJECTED:
                    raise BookingPermissionDenied(
                        "Agents can only delete rejected bookings. Please contact admin for other cases."
                    )

            booking.add_event(BookingDeleted(
                aggregate_id=booking.id,
                booking_id=booking.id,
                dates=booking.dates,
            ))
            self.booking_repo.delete(booking.id)
            self.booking_repo.bump_inventory(inventory)
            uow.collect_events(booking)

        logger.info(f"Booking {command.booking_id} deleted by user {command.caller.user_id}")


# ===== Queries =====

class GetAvailabilityQuery:
    """Availability snapshot over a fresh read of the live booking set"""

    def __init__(self, booking_repo: DjangoBookingRepository | None = None):
        self.booking_repo = booking_repo or DjangoBookingRepository()

    def handle(self) -> AvailabilitySnapshot:
        return get_availability(self.booking_repo.live_bookings())
