"""
Booking Event Handlers

Bridge domain events to Celery notification tasks. They run after the
transaction commits; failing to enqueue is logged and never reaches the
request that produced the event.
"""

import logging

from apps.bookings.domain.events import BookingCreated, BookingStatusChanged
from shared.application.message_bus import MessageBus

logger = logging.getLogger(__name__)


def enqueue_booking_created(event: BookingCreated):
    from apps.bookings.tasks import notify_booking_created

    try:
        notify_booking_created.delay(str(event.booking_id))
    except Exception as e:
        logger.error(f"Could not enqueue creation notification for {event.booking_id}: {e}")


def enqueue_status_changed(event: BookingStatusChanged):
    from apps.bookings.tasks import notify_booking_status_changed

    try:
        notify_booking_status_changed.delay(str(event.booking_id), event.previous_status)
    except Exception as e:
        logger.error(f"Could not enqueue status notification for {event.booking_id}: {e}")


def register_handlers(bus: MessageBus):
    bus.register_event_handler(BookingCreated, enqueue_booking_created)
    bus.register_event_handler(BookingStatusChanged, enqueue_status_changed)
