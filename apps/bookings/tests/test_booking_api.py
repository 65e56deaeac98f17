"""Integration tests for booking API endpoints."""

from __future__ import annotations

from decimal import Decimal

from django.core import mail
from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking, Inventory
from apps.users.models import CustomUser


class BookingAPITestBase(APITestCase):
    def setUp(self) -> None:
        self.agent = CustomUser.objects.create_user(
            email="agent@example.com",
            password="AgentPass123",
            name="Agent Smith",
        )
        self.other_agent = CustomUser.objects.create_user(
            email="other@example.com",
            password="OtherPass123",
        )
        self.admin = CustomUser.objects.create_user(
            email="admin@example.com",
            password="AdminPass123",
            role=CustomUser.RoleChoices.ADMIN,
        )
        self.list_url = reverse("booking-list")
        self.availability_url = reverse("booking-availability")

    def _payload(self, rental_type: str, start: str, end: str | None = None, **extra) -> dict:
        payload = {
            "guest_name": "Jane Guest",
            "phone_number": "+15550001111",
            "adults": 2,
            "children": 1,
            "rental_type": rental_type,
            "start_date": start,
            "amount": "150.00",
        }
        if end is not None:
            payload["end_date"] = end
        payload.update(extra)
        return payload

    def _create(self, user, rental_type: str, start: str, end: str | None = None, **extra):
        self.client.force_authenticate(user)
        return self.client.post(self.list_url, self._payload(rental_type, start, end, **extra), format="json")

    def _set_status(self, booking_id, new_status: str, reason: str | None = None):
        self.client.force_authenticate(self.admin)
        data = {"status": new_status}
        if reason is not None:
            data["rejection_reason"] = reason
        return self.client.patch(reverse("booking-change-status", args=[booking_id]), data, format="json")


class BookingCreateAPITests(BookingAPITestBase):
    def test_agent_booking_starts_pending(self) -> None:
        response = self._create(self.agent, "villa_pool", "2024-08-01", "2024-08-03")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        data = response.data["data"]
        self.assertEqual(data["status"], "pending")
        self.assertEqual(data["end_date"], "2024-08-03")
        self.assertEqual(data["duration"], 2)
        self.assertEqual(data["guest_count"], 3)
        self.assertEqual(data["agent_name"], "Agent Smith")

        booking = Booking.objects.get()
        self.assertEqual(booking.agent, self.agent)
        self.assertEqual(booking.amount, Decimal("150.00"))

    def test_admin_booking_is_approved(self) -> None:
        response = self._create(self.admin, "pool", "2024-08-01")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["data"]["status"], "approved")

    def test_pool_end_date_is_recomputed(self) -> None:
        response = self._create(self.agent, "pool", "2024-08-01T00:00:00.000Z", "2024-08-09")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["data"]["end_date"], "2024-08-02")
        self.assertEqual(response.data["data"]["duration"], 1)

    @override_settings(BOOKING_STRICT_POOL_RANGE=True)
    def test_strict_pool_range(self) -> None:
        response = self._create(self.agent, "pool", "2024-08-01", "2024-08-09")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "INVALID_RANGE")
        self.assertFalse(Booking.objects.exists())

    def test_pool_on_villa_checkout_day(self) -> None:
        self._create(self.admin, "villa_pool", "2024-06-01", "2024-06-05")

        response = self._create(self.agent, "pool", "2024-06-05")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_pool_inside_villa_conflicts(self) -> None:
        first = self._create(self.admin, "villa_pool", "2024-06-01", "2024-06-05")

        response = self._create(self.agent, "pool", "2024-06-03")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "DATE_RANGE_BLOCKED")
        self.assertEqual(response.data["conflicts"], [first.data["data"]["id"]])
        self.assertEqual(Booking.objects.count(), 1)

    def test_villa_over_pool_day_conflicts(self) -> None:
        self._create(self.admin, "pool", "2024-07-10")

        response = self._create(self.agent, "villa_pool", "2024-07-09", "2024-07-12")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "DATE_RANGE_BLOCKED")

    def test_same_start_date_conflicts(self) -> None:
        self._create(self.agent, "pool", "2024-07-10")

        response = self._create(self.other_agent, "villa_pool", "2024-07-10", "2024-07-12")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "START_DATE_TAKEN")
        self.assertEqual(
            response.data["message"],
            "Selected start date (2024-07-10) is not available for booking. "
            "There are 1 booking(s) already starting on that date.",
        )

    def test_villa_end_must_follow_start(self) -> None:
        response = self._create(self.agent, "villa_pool", "2024-07-10", "2024-07-10")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "INVALID_RANGE")

    def test_pool_on_last_representable_day(self) -> None:
        response = self._create(self.agent, "pool", "9999-12-31")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "INVALID_RANGE")
        self.assertFalse(Booking.objects.exists())

    @override_settings(BOOKING_MAX_VILLA_DAYS=30)
    def test_villa_longer_than_cap(self) -> None:
        response = self._create(self.agent, "villa_pool", "2024-06-01", "2024-07-02")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "INVALID_RANGE")
        self.assertIn("end_date", response.data["details"])

        response = self._create(self.agent, "villa_pool", "2024-06-01", "2024-07-01")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    @override_settings(BOOKING_MAX_VILLA_DAYS=30)
    def test_edit_cannot_stretch_villa_past_cap(self) -> None:
        created = self._create(self.agent, "villa_pool", "2024-06-01", "2024-06-05")
        booking_id = created.data["data"]["id"]

        response = self.client.patch(
            reverse("booking-detail", args=[booking_id]),
            {"end_date": "2025-06-01"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "INVALID_RANGE")
        self.assertEqual(Booking.objects.get().end_date.isoformat(), "2024-06-05")

    def test_missing_fields(self) -> None:
        self.client.force_authenticate(self.agent)
        response = self.client.post(self.list_url, {"rental_type": "villa_pool"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertFalse(response.data["success"])
        self.assertIn("guest_name", response.data["details"])
        self.assertIn("start_date", response.data["details"])

    def test_unparseable_date(self) -> None:
        response = self._create(self.agent, "pool", "next tuesday")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "VALIDATION_ERROR")
        self.assertIn("start_date", response.data["details"])

    def test_requires_authentication(self) -> None:
        response = self.client.post(self.list_url, self._payload("pool", "2024-07-10"), format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_every_write_bumps_inventory_version(self) -> None:
        self._create(self.agent, "pool", "2024-07-10")
        self._create(self.agent, "pool", "2024-07-11")

        inventory = Inventory.objects.get(key=Inventory.DEFAULT_KEY)
        self.assertEqual(inventory.version, 2)

    def test_creation_notifies_agent_and_admin_after_commit(self) -> None:
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            response = self._create(self.agent, "pool", "2024-07-10")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(len(callbacks), 1)
        subjects = sorted(message.subject for message in mail.outbox)
        self.assertEqual(subjects, ["Booking Submitted", "New Booking Created"])
        submitted = next(m for m in mail.outbox if m.subject == "Booking Submitted")
        self.assertEqual(submitted.to, ["agent@example.com"])

    def test_rejected_create_sends_nothing(self) -> None:
        self._create(self.agent, "pool", "2024-07-10")

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            response = self._create(self.agent, "pool", "2024-07-10")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(callbacks, [])
        self.assertEqual(mail.outbox, [])


class BookingStatusAPITests(BookingAPITestBase):
    def setUp(self) -> None:
        super().setUp()
        response = self._create(self.agent, "villa_pool", "2024-06-01", "2024-06-05")
        self.booking_id = response.data["data"]["id"]

    def test_reject_without_reason_is_refused(self) -> None:
        response = self._set_status(self.booking_id, "rejected")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "MISSING_REJECTION_REASON")
        booking = Booking.objects.get(pk=self.booking_id)
        self.assertEqual(booking.status, Booking.Status.PENDING)
        self.assertEqual(booking.rejection_reason, "")

    def test_rejection_frees_the_dates(self) -> None:
        response = self._set_status(self.booking_id, "rejected", "Guest cancelled")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("The dates are now available for other bookings.", response.data["message"])
        self.assertEqual(response.data["data"]["rejection_reason"], "Guest cancelled")

        availability = self.client.get(self.availability_url)
        self.assertEqual(availability.data["data"]["villaUnavailableDates"], [])

        retry = self._create(self.other_agent, "pool", "2024-06-03")
        self.assertEqual(retry.status_code, status.HTTP_201_CREATED, retry.data)

    def test_approval_clears_reason(self) -> None:
        self._set_status(self.booking_id, "rejected", "Guest cancelled")

        response = self._set_status(self.booking_id, "approved")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        booking = Booking.objects.get(pk=self.booking_id)
        self.assertEqual(booking.status, Booking.Status.APPROVED)
        self.assertEqual(booking.rejection_reason, "")

    def test_same_status_is_a_noop(self) -> None:
        self._set_status(self.booking_id, "rejected", "Guest cancelled")

        response = self._set_status(self.booking_id, "rejected", "Another reason")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["message"], "Booking status already set to rejected")
        booking = Booking.objects.get(pk=self.booking_id)
        self.assertEqual(booking.rejection_reason, "Guest cancelled")

    def test_reentry_conflicts_are_warnings(self) -> None:
        self._set_status(self.booking_id, "rejected", "Guest cancelled")
        newcomer = self._create(self.other_agent, "pool", "2024-06-03")
        self.assertEqual(newcomer.status_code, status.HTTP_201_CREATED, newcomer.data)

        response = self._set_status(self.booking_id, "pending")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["conflicts"], [newcomer.data["data"]["id"]])
        self.assertEqual(len(response.data["warnings"]), 1)
        self.assertEqual(Booking.objects.get(pk=self.booking_id).status, Booking.Status.PENDING)

    def test_invalid_status(self) -> None:
        response = self._set_status(self.booking_id, "cancelled")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)

    def test_agents_cannot_change_status(self) -> None:
        self.client.force_authenticate(self.agent)
        response = self.client.patch(
            reverse("booking-change-status", args=[self.booking_id]),
            {"status": "approved"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)
        self.assertEqual(Booking.objects.get(pk=self.booking_id).status, Booking.Status.PENDING)

    def test_unknown_booking(self) -> None:
        response = self._set_status("00000000-0000-0000-0000-000000000000", "approved")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_status_change_notifies_agent(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            self._set_status(self.booking_id, "rejected", "Pool maintenance")

        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.subject, "Booking Status Update")
        self.assertEqual(message.to, ["agent@example.com"])
        self.assertIn("Reason for rejection: Pool maintenance", message.body)


class BookingManageAPITests(BookingAPITestBase):
    def setUp(self) -> None:
        super().setUp()
        self.own = self._create(self.agent, "pool", "2024-06-10").data["data"]
        self.foreign = self._create(self.other_agent, "pool", "2024-06-12").data["data"]
        self.villa = self._create(self.admin, "villa_pool", "2024-06-20", "2024-06-25").data["data"]

    def test_agents_list_their_own_bookings(self) -> None:
        self.client.force_authenticate(self.agent)

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([b["id"] for b in response.data["data"]], [self.own["id"]])

    def test_calendar_listing_shows_everything(self) -> None:
        self.client.force_authenticate(self.agent)

        response = self.client.get(self.list_url, {"for_calendar": "true"})

        self.assertEqual(response.data["count"], 3)

    def test_admin_lists_and_filters(self) -> None:
        self.client.force_authenticate(self.admin)

        everything = self.client.get(self.list_url)
        villas = self.client.get(self.list_url, {"rental_type": "villa_pool"})
        pending = self.client.get(self.list_url, {"status": "pending"})

        self.assertEqual(everything.data["count"], 3)
        self.assertEqual([b["id"] for b in villas.data["data"]], [self.villa["id"]])
        self.assertEqual(pending.data["count"], 2)

    def test_agent_cannot_read_foreign_booking(self) -> None:
        self.client.force_authenticate(self.agent)

        response = self.client.get(reverse("booking-detail", args=[self.foreign["id"]]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_guest_details(self) -> None:
        self.client.force_authenticate(self.agent)

        response = self.client.patch(
            reverse("booking-detail", args=[self.own["id"]]),
            {"guest_name": "John Guest", "amount": "99.50"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        booking = Booking.objects.get(pk=self.own["id"])
        self.assertEqual(booking.guest_name, "John Guest")
        self.assertEqual(booking.amount, Decimal("99.50"))

    def test_reschedule_rechecks_conflicts(self) -> None:
        self.client.force_authenticate(self.admin)
        url = reverse("booking-detail", args=[self.villa["id"]])

        blocked = self.client.patch(url, {"start_date": "2024-06-11"}, format="json")
        extended = self.client.patch(url, {"end_date": "2024-06-27"}, format="json")

        self.assertEqual(blocked.status_code, status.HTTP_409_CONFLICT, blocked.data)
        self.assertEqual(blocked.data["code"], "DATE_RANGE_BLOCKED")
        self.assertEqual(extended.status_code, status.HTTP_200_OK, extended.data)
        self.assertEqual(extended.data["data"]["end_date"], "2024-06-27")
        self.assertEqual(extended.data["data"]["duration"], 7)

    def test_rental_type_is_fixed(self) -> None:
        self.client.force_authenticate(self.agent)

        response = self.client.patch(
            reverse("booking-detail", args=[self.own["id"]]),
            {"rental_type": "villa_pool"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "VALIDATION_ERROR")

    def test_agent_cannot_edit_foreign_booking(self) -> None:
        self.client.force_authenticate(self.agent)

        response = self.client.patch(
            reverse("booking-detail", args=[self.foreign["id"]]),
            {"guest_name": "Mallory"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_agent_deletes_only_rejected_bookings(self) -> None:
        url = reverse("booking-detail", args=[self.own["id"]])
        self.client.force_authenticate(self.agent)

        refused = self.client.delete(url)
        self.assertEqual(refused.status_code, status.HTTP_403_FORBIDDEN)

        self._set_status(self.own["id"], "rejected", "Duplicate")
        self.client.force_authenticate(self.agent)
        deleted = self.client.delete(url)

        self.assertEqual(deleted.status_code, status.HTTP_200_OK, deleted.data)
        self.assertFalse(Booking.objects.filter(pk=self.own["id"]).exists())

    def test_admin_deletes_anything(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.delete(reverse("booking-detail", args=[self.foreign["id"]]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Booking.objects.count(), 2)

    def test_availability_snapshot(self) -> None:
        self.client.force_authenticate(self.agent)

        response = self.client.get(self.availability_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data["data"]
        self.assertEqual(data["villaStartDates"], ["2024-06-20"])
        self.assertEqual(data["villaEndDates"], ["2024-06-25"])
        self.assertIn("2024-06-10", data["poolUnavailableDates"])
        self.assertNotIn("2024-06-25", data["poolUnavailableDates"])
        self.assertEqual(data["pendingDates"], ["2024-06-10", "2024-06-12"])
