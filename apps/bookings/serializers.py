"""Serializers for the booking domain.

Dates are accepted as raw strings and handed to the engine unchanged; the
engine truncates them to UTC days, so browsers sending ``2024-06-01`` or
``2024-06-01T00:00:00.000Z`` land on the same day.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Booking


class BookingCreateSerializer(serializers.Serializer):
    """Fields an agent or admin submits to create a booking."""

    guest_name = serializers.CharField(max_length=255, trim_whitespace=True)
    phone_number = serializers.CharField(max_length=32)
    adults = serializers.IntegerField(min_value=1)
    children = serializers.IntegerField(min_value=0, default=0)
    guest_count = serializers.IntegerField(min_value=1, required=False)
    rental_type = serializers.ChoiceField(choices=Booking.RentalType.choices)
    start_date = serializers.CharField()
    end_date = serializers.CharField(required=False, allow_blank=True)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    details = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):  # type: ignore
        if attrs.get("rental_type") == Booking.RentalType.VILLA_POOL and not attrs.get("end_date"):
            raise serializers.ValidationError({"end_date": ["Villa bookings must have both start and end dates."]})
        return attrs


class BookingUpdateSerializer(serializers.Serializer):
    """Partial edit; only provided fields are applied."""

    guest_name = serializers.CharField(max_length=255, required=False)
    phone_number = serializers.CharField(max_length=32, required=False)
    adults = serializers.IntegerField(min_value=1, required=False)
    children = serializers.IntegerField(min_value=0, required=False)
    guest_count = serializers.IntegerField(min_value=1, required=False)
    rental_type = serializers.ChoiceField(choices=Booking.RentalType.choices, required=False)
    start_date = serializers.CharField(required=False)
    end_date = serializers.CharField(required=False)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    details = serializers.CharField(required=False, allow_blank=True)


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=Booking.Status.choices,
        error_messages={"invalid_choice": "Invalid status. Must be pending, approved, or rejected."},
    )
    rejection_reason = serializers.CharField(required=False, allow_blank=True, default="")


class BookingSerializer(serializers.ModelSerializer):
    """Read representation of a booking."""

    agent_id = serializers.ReadOnlyField(source="agent.id")
    agent_name = serializers.ReadOnlyField(source="agent.display_name")

    class Meta:
        model = Booking
        fields = [
            "id",
            "agent_id",
            "agent_name",
            "guest_name",
            "phone_number",
            "adults",
            "children",
            "guest_count",
            "rental_type",
            "start_date",
            "end_date",
            "duration",
            "amount",
            "details",
            "status",
            "rejection_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
