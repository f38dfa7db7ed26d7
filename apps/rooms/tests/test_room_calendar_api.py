"""Integration tests for room quotes, calendars and blocked dates."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.rooms.models import BlockedDate, Hotel, RateRule, Room


class RoomCalendarAPITests(APITestCase):
    def setUp(self) -> None:
        self.staff = get_user_model().objects.create_user(
            username="housekeeping", email="hk@example.com", password="Housekeeping1", is_staff=True
        )
        hotel = Hotel.objects.create(name="Riverside")
        self.room = Room.objects.create(
            hotel=hotel,
            name="Garden View",
            base_price=Decimal("100.00"),
            airbnb_price=Decimal("130.00"),
            currency="EUR",
        )
        self.today = timezone.localdate()
        self.start = self.today + timedelta(days=10)

    def test_quote_uses_channel_price(self) -> None:
        url = reverse("room-quote", args=[self.room.id])

        response = self.client.get(
            url,
            {"check_in": str(self.start), "check_out": str(self.start + timedelta(days=2)), "channel": "airbnb"},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["total_cost"], "260.00")
        self.assertEqual(response.data["min_nightly_rate"], "130.00")
        self.assertEqual(response.data["nights"], 2)
        self.assertTrue(response.data["available"])
        self.assertIsNone(response.data["conflict"])
        self.assertEqual(len(response.data["breakdown"]), 2)

    def test_quote_reports_blocked_date(self) -> None:
        BlockedDate.objects.create(room=self.room, date=self.start + timedelta(days=1))

        response = self.client.get(
            reverse("room-quote", args=[self.room.id]),
            {"check_in": str(self.start), "check_out": str(self.start + timedelta(days=3))},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["available"])
        self.assertEqual(response.data["conflict"]["reason"], "blocked_date")
        self.assertEqual(response.data["conflict"]["blocked_date"], str(self.start + timedelta(days=1)))

    def test_quote_requires_valid_range(self) -> None:
        response = self.client.get(
            reverse("room-quote", args=[self.room.id]),
            {"check_in": str(self.start), "check_out": str(self.start)},
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_calendar_lists_every_day_with_rate(self) -> None:
        RateRule.objects.create(
            room=self.room,
            start_date=self.start,
            end_date=self.start + timedelta(days=1),
            weekdays=list(range(7)),
            premium=Decimal("15.00"),
        )
        BlockedDate.objects.create(room=self.room, date=self.start + timedelta(days=2))

        response = self.client.get(
            reverse("room-calendar", args=[self.room.id]),
            {"start": str(self.start), "end": str(self.start + timedelta(days=3))},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        days = response.data["dates"]
        self.assertEqual(len(days), 4)
        self.assertEqual([Decimal(day["rate"]) for day in days], [Decimal("115.00"), Decimal("115.00"), Decimal("100.00"), Decimal("100.00")])
        self.assertEqual([day["status"] for day in days], ["available", "available", "blocked", "available"])
        self.assertEqual(days[0]["pricing_source"], "general")

    def test_calendar_window_is_limited(self) -> None:
        response = self.client.get(
            reverse("room-calendar", args=[self.room.id]),
            {"start": str(self.start), "end": str(self.start + timedelta(days=400))},
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_staff_blocks_and_unblocks_dates(self) -> None:
        url = reverse("room-blocked-date-list", args=[self.room.id])
        day = self.start + timedelta(days=4)

        anonymous = self.client.post(url, {"date": str(day)}, format="json")
        self.assertIn(anonymous.status_code, {status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN})

        self.client.force_authenticate(self.staff)
        created = self.client.post(url, {"date": str(day), "notes": "boiler repair"}, format="json")
        self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)

        duplicate = self.client.post(url, {"date": str(day)}, format="json")
        self.assertEqual(duplicate.status_code, status.HTTP_400_BAD_REQUEST)

        listed = self.client.get(url)
        self.assertEqual([entry["date"] for entry in listed.data], [str(day)])

        detail = reverse("room-blocked-date-detail", args=[self.room.id, created.data["id"]])
        self.assertEqual(self.client.delete(detail).status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(BlockedDate.objects.exists())
