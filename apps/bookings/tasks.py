"""Celery tasks for the booking domain.

Notifications are fire-and-forget: a missing booking or a mail failure is
logged and the task returns False, nothing is retried or re-raised.
"""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .models import Booking

logger = logging.getLogger(__name__)


@shared_task(name="bookings.notify_booking_created")
def notify_booking_created(booking_id: str) -> bool:
    """Submission email to the creator and summary to the admin mailbox."""
    try:
        booking = Booking.objects.select_related("agent").get(id=booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for creation notification")
        return False

    from apps.notifications.services import send_booking_submitted_email

    sent = send_booking_submitted_email(booking, booking.agent)
    logger.info(f"[NOTIFICATION] Booking created notification for {booking.id}: sent={sent}")
    return sent


@shared_task(name="bookings.notify_booking_status_changed")
def notify_booking_status_changed(booking_id: str, previous_status: str) -> bool:
    """Status update email to the creator."""
    try:
        booking = Booking.objects.select_related("agent").get(id=booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for status notification")
        return False

    from apps.notifications.services import send_booking_status_update_email

    sent = send_booking_status_update_email(booking, booking.agent, previous_status)
    logger.info(
        f"[NOTIFICATION] Status update {previous_status} -> {booking.status} "
        f"for booking {booking.id}: sent={sent}"
    )
    return sent
