"""Tests for the Booking aggregate lifecycle."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from apps.bookings.domain.entities import Booking, BookingStatus, InvalidBookingTransition
from apps.bookings.domain.events import BookingCancelled, BookingConfirmed, BookingCreated
from shared.domain.value_objects import DateRange, Money


class BookingAggregateTests(SimpleTestCase):
    def setUp(self) -> None:
        self.booking = Booking.create(
            reference_number="BK-2025-0001",
            room_id=uuid.uuid4(),
            dates=DateRange(date(2025, 3, 10), date(2025, 3, 15)),
            total_cost=Money(Decimal("500"), "EUR"),
            channel="airbnb",
            guest_name="Jane Doe",
        )

    def test_create_starts_pending_with_event(self) -> None:
        self.assertEqual(self.booking.status, BookingStatus.PENDING)
        self.assertTrue(self.booking.blocks_dates())
        self.assertEqual(self.booking.nights, 5)
        self.assertEqual(len(self.booking.events), 1)
        event = self.booking.events[0]
        self.assertIsInstance(event, BookingCreated)
        self.assertEqual(event.reference_number, "BK-2025-0001")
        self.assertEqual(event.total_cost, Money(Decimal("500"), "EUR"))

    def test_confirm(self) -> None:
        self.booking.clear_events()

        self.booking.confirm()

        self.assertEqual(self.booking.status, BookingStatus.CONFIRMED)
        self.assertIsNotNone(self.booking.confirmed_at)
        self.assertIsInstance(self.booking.events[0], BookingConfirmed)

    def test_confirm_twice_is_rejected(self) -> None:
        self.booking.confirm()

        with self.assertRaises(InvalidBookingTransition):
            self.booking.confirm()

    def test_cancel_releases_dates(self) -> None:
        self.booking.confirm()
        self.booking.clear_events()

        self.booking.cancel("guest request")

        self.assertEqual(self.booking.status, BookingStatus.CANCELLED)
        self.assertFalse(self.booking.blocks_dates())
        self.assertFalse(self.booking.as_booked_stay().blocks_dates)
        event = self.booking.events[0]
        self.assertIsInstance(event, BookingCancelled)
        self.assertEqual(event.old_status, "confirmed")
        self.assertEqual(event.reason, "guest request")

    def test_cancelled_booking_cannot_change(self) -> None:
        self.booking.cancel()

        with self.assertRaises(InvalidBookingTransition):
            self.booking.cancel()
        with self.assertRaises(InvalidBookingTransition):
            self.booking.confirm()

    def test_event_payload_is_serialisable(self) -> None:
        payload = self.booking.events[0].to_dict()

        self.assertEqual(payload["event_type"], "BookingCreated")
        self.assertEqual(payload["reference_number"], "BK-2025-0001")
        self.assertEqual(payload["booking_id"], str(self.booking.id))
        self.assertEqual(payload["dates"], {"start_date": "2025-03-10", "end_date": "2025-03-15"})
        self.assertEqual(payload["total_cost"], {"amount": "500", "currency": "EUR"})
        self.assertEqual(payload["channel"], "airbnb")
