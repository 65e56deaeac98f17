"""Django-backed repository for the booking aggregate."""

from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from django.core.exceptions import ValidationError  # type: ignore
from django.db import transaction  # type: ignore
from django.db.models import F  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.domain.entities import Booking, BookingStatus, ResourceKind
from shared.domain.value_objects import DateRange

from .models import Booking as BookingModel
from .models import Inventory

logger = logging.getLogger(__name__)


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def to_domain(row: BookingModel) -> Booking:
    return Booking(
        id=row.id,
        agent_id=row.agent_id,
        resource_kind=ResourceKind(row.rental_type),
        dates=DateRange(row.start_date, row.end_date),
        status=BookingStatus(row.status),
        rejection_reason=row.rejection_reason,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class DjangoBookingRepository:
    """
    Loads and stores booking aggregates.

    Writes must run inside DjangoUnitOfWork and call lock_inventory() before
    reading the live set, so read-decide-write is serialised.
    """

    model = BookingModel

    def lock_inventory(self) -> Inventory:
        """Take the calendar-wide write lock (SELECT ... FOR UPDATE)."""
        Inventory.objects.get_or_create(key=Inventory.DEFAULT_KEY)
        inventory = _lock_queryset_if_possible(
            Inventory.objects.filter(key=Inventory.DEFAULT_KEY)
        ).get()
        return inventory

    def bump_inventory(self, inventory: Inventory) -> None:
        Inventory.objects.filter(pk=inventory.pk).update(version=F("version") + 1)

    def get_row(self, booking_id: UUID) -> BookingModel | None:
        try:
            return self.model.objects.select_related("agent").filter(pk=booking_id).first()
        except ValidationError:
            # malformed id
            return None

    def get_by_id(self, booking_id: UUID) -> Booking | None:
        row = self.get_row(booking_id)
        return to_domain(row) if row else None

    def live_bookings(self, *, exclude_id: UUID | None = None) -> List[Booking]:
        """Fresh snapshot of every booking whose status is not rejected."""
        qs = self.model.objects.exclude(status=BookingModel.Status.REJECTED)
        if exclude_id is not None:
            qs = qs.exclude(pk=exclude_id)
        return [to_domain(row) for row in qs.order_by("start_date")]

    def add(self, booking: Booking, **details) -> BookingModel:
        """Insert a new booking; details carries guest and payment fields."""
        row = self.model.objects.create(
            id=booking.id,
            agent_id=booking.agent_id,
            rental_type=booking.resource_kind.value,
            start_date=booking.start_date,
            end_date=booking.end_date,
            duration=booking.duration,
            status=booking.status.value,
            rejection_reason=booking.rejection_reason,
            **details,
        )
        logger.debug(f"Inserted booking {row.id}")
        return row

    def save(self, booking: Booking, **details) -> int:
        """Persist lifecycle fields and dates of an existing booking."""
        fields = {
            "start_date": booking.start_date,
            "end_date": booking.end_date,
            "duration": booking.duration,
            "status": booking.status.value,
            "rejection_reason": booking.rejection_reason,
            "updated_at": timezone.now(),
        }
        fields.update(details)
        return self.model.objects.filter(pk=booking.id).update(**fields)

    def delete(self, booking_id: UUID) -> int:
        deleted, _ = self.model.objects.filter(pk=booking_id).delete()
        return deleted
