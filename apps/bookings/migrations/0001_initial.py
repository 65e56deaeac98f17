import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def create_default_inventory(apps, schema_editor):
    Inventory = apps.get_model("bookings", "Inventory")
    Inventory.objects.get_or_create(key="default")


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Inventory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(default="default", max_length=32, unique=True)),
                ("version", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Inventory lock",
                "verbose_name_plural": "Inventory locks",
            },
        ),
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("guest_name", models.CharField(max_length=255)),
                ("phone_number", models.CharField(max_length=32)),
                ("adults", models.PositiveSmallIntegerField(default=1)),
                ("children", models.PositiveSmallIntegerField(default=0)),
                ("guest_count", models.PositiveSmallIntegerField(default=1)),
                (
                    "rental_type",
                    models.CharField(
                        choices=[("pool", "Pool only"), ("villa_pool", "Villa + Pool")],
                        max_length=20,
                    ),
                ),
                ("start_date", models.DateField(help_text="UTC calendar day, inclusive.")),
                ("end_date", models.DateField(help_text="UTC calendar day, exclusive (checkout day).")),
                ("duration", models.PositiveSmallIntegerField(default=1)),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Transaction amount as entered by the agent.",
                        max_digits=10,
                    ),
                ),
                ("details", models.TextField(blank=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("rejection_reason", models.CharField(blank=True, default="", max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "agent",
                    models.ForeignKey(
                        help_text="Creator of the booking (agent or admin).",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking",
                "verbose_name_plural": "Bookings",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "start_date"], name="booking_status_start_idx"),
                    models.Index(fields=["agent", "status"], name="booking_agent_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gt", models.F("start_date"))),
                        name="booking_valid_dates",
                    ),
                ],
            },
        ),
        migrations.RunPython(create_default_inventory, migrations.RunPython.noop),
    ]
