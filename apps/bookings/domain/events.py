"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from uuid import UUID

from shared.domain.base import DomainEvent
from shared.domain.value_objects import DateRange


@dataclass(kw_only=True)
class BookingCreated(DomainEvent):
    """
    Event: A new booking was accepted and stored

    Triggers:
    - "Booking submitted" email to the creator
    - Summary email to the admin mailbox
    """
    booking_id: UUID
    agent_id: int | None
    resource_kind: str
    dates: DateRange
    status: str


@dataclass(kw_only=True)
class BookingStatusChanged(DomainEvent):
    """
    Event: An admin moved a booking to another status

    Triggers:
    - Status update email to the creator
    """
    booking_id: UUID
    agent_id: int | None
    previous_status: str
    new_status: str
    rejection_reason: str = ''


@dataclass(kw_only=True)
class BookingRescheduled(DomainEvent):
    """Event: A booking's dates were edited"""
    booking_id: UUID
    previous_dates: DateRange
    dates: DateRange


@dataclass(kw_only=True)
class BookingDeleted(DomainEvent):
    """Event: A booking was hard-deleted; its dates are free again"""
    booking_id: UUID
    dates: DateRange
