from django.apps import AppConfig


class BookingsConfig(AppConfig):
    name = 'apps.bookings'
    default_auto_field = 'django.db.models.BigAutoField'

    def ready(self):
        from shared.application.message_bus import message_bus
        from apps.bookings.application.event_handlers import register_handlers

        register_handlers(message_bus)
