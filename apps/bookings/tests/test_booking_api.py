"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.rooms.models import Hotel, Room


class BookingAPITests(APITestCase):
    """Covers creation, conflicts and the booking lifecycle."""

    def setUp(self) -> None:
        self.staff = get_user_model().objects.create_user(
            username="frontdesk",
            email="frontdesk@example.com",
            password="FrontDesk123",
            is_staff=True,
        )
        self.hotel = Hotel.objects.create(name="Harbour Hotel", location="Porto")
        self.room = Room.objects.create(
            hotel=self.hotel,
            name="Double 12",
            base_price=Decimal("100.00"),
            airbnb_price=Decimal("130.00"),
            currency="EUR",
        )
        self.list_url = reverse("booking-list")
        self.today = timezone.localdate()

    def _payload(self, check_in: date, check_out: date, **extra) -> dict[str, str]:
        payload = {
            "room": str(self.room.id),
            "guest_name": "Ana Silva",
            "guest_email": "ana@example.com",
            "check_in_date": str(check_in),
            "check_out_date": str(check_out),
        }
        payload.update(extra)
        return payload

    def test_guest_can_create_booking(self) -> None:
        check_in = self.today + timedelta(days=1)
        check_out = check_in + timedelta(days=2)

        response = self.client.post(self.list_url, self._payload(check_in, check_out, channel="airbnb"), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["reference_number"], f"BK-{self.today.year}-0001")
        self.assertEqual(response.data["status"], Booking.Status.PENDING)
        self.assertEqual(Decimal(response.data["total_cost"]), Decimal("260.00"))
        self.assertEqual(response.data["nights"], 2)
        self.assertEqual(Booking.objects.count(), 1)

    def test_prevent_double_booking_on_overlap(self) -> None:
        check_in = self.today + timedelta(days=1)
        first_payload = self._payload(check_in, check_in + timedelta(days=2))
        second_payload = self._payload(check_in + timedelta(days=1), check_in + timedelta(days=3))

        first_response = self.client.post(self.list_url, first_payload, format="json")
        self.assertEqual(first_response.status_code, status.HTTP_201_CREATED, first_response.data)

        conflict_response = self.client.post(self.list_url, second_payload, format="json")
        self.assertEqual(conflict_response.status_code, status.HTTP_409_CONFLICT, conflict_response.data)
        self.assertEqual(conflict_response.data["reason"], "booking_overlap")
        self.assertEqual(conflict_response.data["reference_number"], first_response.data["reference_number"])
        self.assertEqual(Booking.objects.count(), 1)

    def test_past_check_in_is_rejected(self) -> None:
        check_in = self.today - timedelta(days=2)

        response = self.client.post(self.list_url, self._payload(check_in, check_in + timedelta(days=3)), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertFalse(Booking.objects.exists())

    def test_check_out_must_follow_check_in(self) -> None:
        check_in = self.today + timedelta(days=5)

        response = self.client.post(self.list_url, self._payload(check_in, check_in), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("check_out_date", response.data)

    def test_unknown_channel_is_rejected(self) -> None:
        check_in = self.today + timedelta(days=5)

        response = self.client.post(
            self.list_url,
            self._payload(check_in, check_in + timedelta(days=1), channel="fax"),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("channel", response.data)

    def test_listing_requires_staff(self) -> None:
        response = self.client.get(self.list_url)
        self.assertIn(response.status_code, {status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN})

        self.client.force_authenticate(self.staff)
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_staff_confirms_and_cancels_booking(self) -> None:
        check_in = self.today + timedelta(days=3)
        created = self.client.post(self.list_url, self._payload(check_in, check_in + timedelta(days=2)), format="json")
        self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)
        booking_id = created.data["id"]

        self.client.force_authenticate(self.staff)
        confirmed = self.client.post(reverse("booking-confirm", args=[booking_id]))
        self.assertEqual(confirmed.status_code, status.HTTP_200_OK, confirmed.data)
        self.assertEqual(confirmed.data["status"], Booking.Status.CONFIRMED)

        again = self.client.post(reverse("booking-confirm", args=[booking_id]))
        self.assertEqual(again.status_code, status.HTTP_400_BAD_REQUEST)

        cancelled = self.client.post(
            reverse("booking-cancel", args=[booking_id]), {"reason": "guest request"}, format="json"
        )
        self.assertEqual(cancelled.status_code, status.HTTP_200_OK, cancelled.data)
        self.assertEqual(cancelled.data["status"], Booking.Status.CANCELLED)
        self.assertEqual(cancelled.data["cancellation_reason"], "guest request")

    def test_dates_can_be_rebooked_after_cancellation(self) -> None:
        check_in = self.today + timedelta(days=3)
        payload = self._payload(check_in, check_in + timedelta(days=2))
        created = self.client.post(self.list_url, payload, format="json")

        self.client.force_authenticate(self.staff)
        self.client.post(reverse("booking-cancel", args=[created.data["id"]]), {}, format="json")

        rebooked = self.client.post(self.list_url, payload, format="json")
        self.assertEqual(rebooked.status_code, status.HTTP_201_CREATED, rebooked.data)
        self.assertEqual(rebooked.data["reference_number"], f"BK-{self.today.year}-0002")
