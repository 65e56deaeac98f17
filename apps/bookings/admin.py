"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, Inventory


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """
    Read-mostly view of bookings

    Dates, rental type and status only change through the booking API, where
    the conflict resolver runs under the inventory lock. Here only guest
    details may be corrected.
    """

    list_display = (
        "id",
        "guest_name",
        "agent",
        "rental_type",
        "status",
        "live",
        "start_date",
        "end_date",
        "amount",
        "created_at",
    )
    list_filter = ("status", "rental_type", "start_date")
    search_fields = ("guest_name", "phone_number", "agent__email")
    readonly_fields = (
        "id",
        "rental_type",
        "start_date",
        "end_date",
        "duration",
        "status",
        "rejection_reason",
        "created_at",
        "updated_at",
    )

    @admin.display(boolean=True, description="Live")
    def live(self, obj: Booking) -> bool:
        return obj.is_live

    def has_add_permission(self, request) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(Inventory)
class InventoryAdmin(admin.ModelAdmin):
    list_display = ("key", "version", "updated_at")
    readonly_fields = ("version", "updated_at")
