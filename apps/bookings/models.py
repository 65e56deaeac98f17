"""Booking storage models."""

from __future__ import annotations

import uuid

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Booking(models.Model):
    """A pool or villa+pool reservation made by an agent or admin."""

    class RentalType(models.TextChoices):
        POOL = "pool", _("Pool only")
        VILLA_POOL = "villa_pool", _("Villa + Pool")

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    agent = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
        help_text=_("Creator of the booking (agent or admin)."),
    )
    guest_name = models.CharField(max_length=255)
    phone_number = models.CharField(max_length=32)
    adults = models.PositiveSmallIntegerField(default=1)
    children = models.PositiveSmallIntegerField(default=0)
    guest_count = models.PositiveSmallIntegerField(default=1)
    rental_type = models.CharField(max_length=20, choices=RentalType.choices)
    start_date = models.DateField(help_text=_("UTC calendar day, inclusive."))
    end_date = models.DateField(help_text=_("UTC calendar day, exclusive (checkout day)."))
    duration = models.PositiveSmallIntegerField(default=1)
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Transaction amount as entered by the agent."),
    )
    details = models.TextField(blank=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    rejection_reason = models.CharField(max_length=500, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "start_date"], name="booking_status_start_idx"),
            models.Index(fields=["agent", "status"], name="booking_agent_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.id} ({self.rental_type}, {self.start_date} - {self.end_date})"

    def clean(self) -> None:
        if self.start_date and self.end_date and self.start_date >= self.end_date:
            raise ValidationError(_("End date must be after start date."))
        if self.rental_type == self.RentalType.POOL and self.start_date and self.end_date:
            if (self.end_date - self.start_date).days != 1:
                raise ValidationError(_("Pool bookings must be for a single day only."))
        if self.status == self.Status.REJECTED and not self.rejection_reason:
            raise ValidationError(_("Rejected bookings must have a rejection reason."))

    @property
    def is_live(self) -> bool:
        return self.status != self.Status.REJECTED


class Inventory(models.Model):
    """
    Lock row for the property's calendar.

    Every write that reads the live booking set and then inserts or updates
    a booking first takes SELECT ... FOR UPDATE on this row, so concurrent
    writers are serialised and cannot both pass the conflict check.
    """

    DEFAULT_KEY = "default"

    key = models.CharField(max_length=32, unique=True, default=DEFAULT_KEY)
    version = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Inventory lock")
        verbose_name_plural = _("Inventory locks")

    def __str__(self) -> str:
        return f"Inventory({self.key}, v{self.version})"
