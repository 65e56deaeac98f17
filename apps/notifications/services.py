"""Email notifications sent to booking creators and the admin mailbox."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.models import Booking
    from apps.users.models import CustomUser

logger = logging.getLogger(__name__)

RENTAL_TYPE_LABELS = {
    "pool": "Pool Only",
    "villa_pool": "Villa + Pool",
}

SIGNATURE = "Thank you,\nThe Villa App Team"


def send_email_notification(recipient_email: str, subject: str, message: str) -> bool:
    """
    Send a plain-text email.

    Returns:
        bool: True if the message was handed to the mail backend.
        Failures are logged and reported as False, never raised.
    """
    if not recipient_email:
        logger.warning(f"Skipping email without recipient: {subject}")
        return False

    try:
        send_mail(
            subject=subject,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            fail_silently=False,
        )
        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


def _format_date(value) -> str:
    return value.strftime("%B %d, %Y")


def _duration_label(days: int) -> str:
    return f"{days} {'day' if days == 1 else 'days'}"


def send_booking_submitted_email(booking: "Booking", agent: "CustomUser") -> bool:
    """Confirmation to the creator, plus a separate summary to ADMIN_EMAIL."""
    rental_type = RENTAL_TYPE_LABELS.get(booking.rental_type, booking.rental_type)
    check_in = _format_date(booking.start_date)
    check_out = _format_date(booking.end_date)

    agent_message = f"""Hi {agent.display_name},

Your booking #{booking.id} has been submitted.

Booking Details:
- Guest Name: {booking.guest_name}
- Rental Type: {rental_type}
- Check-in: {check_in}
- Check-out: {check_out}
- Duration: {_duration_label(booking.duration)}
- Amount: {booking.amount}
- Status: {booking.get_status_display()}

If you have any questions, please don't hesitate to contact us.

{SIGNATURE}"""

    sent = send_email_notification(agent.email, "Booking Submitted", agent_message)

    admin_email = getattr(settings, "ADMIN_EMAIL", "")
    if admin_email:
        admin_message = f"""Hello Admin,

A new booking has been created.

Booking Details:
- Booking ID: {booking.id}
- Agent: {agent.display_name}
- Guest Name: {booking.guest_name}
- Rental Type: {rental_type}
- Check-in: {check_in}
- Check-out: {check_out}
- Duration: {_duration_label(booking.duration)}
- Amount: {booking.amount}
- Status: {booking.get_status_display()}

Please review this booking in the admin dashboard.

{SIGNATURE}"""
        send_email_notification(admin_email, "New Booking Created", admin_message)

    return sent


def send_booking_status_update_email(
    booking: "Booking",
    agent: "CustomUser",
    previous_status: str,
) -> bool:
    """Tell the creator their booking moved from previous_status to its current status."""
    old_status = previous_status.capitalize()
    new_status = booking.status.capitalize()

    additional_info = ""
    if booking.status == booking.Status.REJECTED and booking.rejection_reason:
        additional_info = f"\nReason for rejection: {booking.rejection_reason}"

    message = f"""Hi {agent.display_name},

Your booking #{booking.id} status has changed from {old_status} to {new_status}.{additional_info}

Booking Details:
- Guest Name: {booking.guest_name}
- Check-in: {_format_date(booking.start_date)}
- Check-out: {_format_date(booking.end_date)}
- Amount: {booking.amount}

If you have any questions about this status change, please contact us.

{SIGNATURE}"""

    return send_email_notification(agent.email, "Booking Status Update", message)


def send_welcome_email(user: "CustomUser") -> bool:
    """Greet a newly created account; ADMIN_EMAIL gets a copy."""
    message = f"""Hello {user.name or 'there'},

Your account has been created successfully. You can now log in and start using our platform.

{SIGNATURE}"""

    sent = send_email_notification(user.email, "Welcome to Villa App", message)

    admin_email = getattr(settings, "ADMIN_EMAIL", "")
    if admin_email and admin_email != user.email:
        send_email_notification(admin_email, "Welcome to Villa App", message)

    return sent
