"""Tests for the availability check and the room calendar."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from apps.bookings.domain.availability import (
    BookedStay,
    BookingConflictError,
    ConflictReason,
    check_availability,
)
from apps.bookings.domain.calendar import AVAILABLE, BLOCKED, BOOKED, calendar_days
from apps.rooms.domain.entities import ALL_WEEKDAYS, RateRule, RoomRates
from shared.domain.value_objects import Money


def eur(amount) -> Money:
    return Money(Decimal(str(amount)), "EUR")


class CheckAvailabilityTests(SimpleTestCase):
    def setUp(self) -> None:
        self.room = RoomRates(room_id=uuid.uuid4(), base_price=eur(100))
        self.confirmed = BookedStay(
            reference_number="BK-2025-0003",
            check_in=date(2025, 3, 10),
            check_out=date(2025, 3, 15),
            status="confirmed",
        )

    def test_overlapping_booking_is_reported(self) -> None:
        conflict = check_availability(
            self.room, [], date(2025, 3, 12), date(2025, 3, 18), [self.confirmed], []
        )

        self.assertIsNotNone(conflict)
        self.assertEqual(conflict.reason, ConflictReason.BOOKING_OVERLAP)
        self.assertEqual(conflict.reference_number, "BK-2025-0003")
        self.assertIn("BK-2025-0003", conflict.message)

    def test_back_to_back_stays_are_allowed(self) -> None:
        before = check_availability(self.room, [], date(2025, 3, 5), date(2025, 3, 10), [self.confirmed], [])
        after = check_availability(self.room, [], date(2025, 3, 15), date(2025, 3, 20), [self.confirmed], [])

        self.assertIsNone(before)
        self.assertIsNone(after)

    def test_cancelled_bookings_do_not_block(self) -> None:
        cancelled = BookedStay("BK-2025-0004", date(2025, 3, 10), date(2025, 3, 15), "cancelled")

        self.assertIsNone(
            check_availability(self.room, [], date(2025, 3, 12), date(2025, 3, 18), [cancelled], [])
        )

    def test_pending_bookings_block(self) -> None:
        pending = BookedStay("BK-2025-0005", date(2025, 3, 10), date(2025, 3, 15), "pending")

        conflict = check_availability(self.room, [], date(2025, 3, 14), date(2025, 3, 16), [pending], [])

        self.assertEqual(conflict.reason, ConflictReason.BOOKING_OVERLAP)

    def test_earliest_overlapping_booking_is_reported(self) -> None:
        second = BookedStay("BK-2025-0001", date(2025, 3, 16), date(2025, 3, 20), "pending")

        conflict = check_availability(
            self.room, [], date(2025, 3, 1), date(2025, 3, 31), [second, self.confirmed], []
        )

        self.assertEqual(conflict.reference_number, "BK-2025-0003")

    def test_first_blocked_date_is_reported(self) -> None:
        blocked = [date(2025, 4, 7), date(2025, 4, 3), date(2025, 4, 20)]

        conflict = check_availability(self.room, [], date(2025, 4, 1), date(2025, 4, 10), [], blocked)

        self.assertEqual(conflict.reason, ConflictReason.BLOCKED_DATE)
        self.assertEqual(conflict.blocked_date, date(2025, 4, 3))

    def test_blocked_check_out_day_is_bookable(self) -> None:
        self.assertIsNone(
            check_availability(self.room, [], date(2025, 4, 1), date(2025, 4, 3), [], [date(2025, 4, 3)])
        )

    def test_room_minimum_nights(self) -> None:
        room = RoomRates(room_id=None, base_price=eur(100), minimum_nights=3)

        conflict = check_availability(room, [], date(2025, 5, 1), date(2025, 5, 3), [], [])

        self.assertEqual(conflict.reason, ConflictReason.MINIMUM_NIGHTS)
        self.assertEqual(conflict.required_nights, 3)

    def test_rule_minimum_stay_applies_from_check_in_night(self) -> None:
        summer = RateRule(
            id=uuid.uuid4(),
            start_date=date(2025, 7, 1),
            end_date=date(2025, 8, 31),
            weekdays=ALL_WEEKDAYS,
            premium=eur(20),
            min_stay_nights=5,
        )

        short = check_availability(self.room, [summer], date(2025, 7, 10), date(2025, 7, 12), [], [])
        starts_before = check_availability(self.room, [summer], date(2025, 6, 29), date(2025, 7, 2), [], [])

        self.assertEqual(short.reason, ConflictReason.MINIMUM_STAY)
        self.assertEqual(short.rule_id, summer.id)
        self.assertIsNone(starts_before)

    def test_conflict_error_carries_details(self) -> None:
        conflict = check_availability(
            self.room, [], date(2025, 3, 12), date(2025, 3, 18), [self.confirmed], []
        )
        error = BookingConflictError(conflict)

        self.assertEqual(error.reason, "booking_overlap")
        self.assertEqual(error.details()["reference_number"], "BK-2025-0003")


class CalendarDaysTests(SimpleTestCase):
    def test_statuses_and_rates(self) -> None:
        room = RoomRates(room_id=None, base_price=eur(80))
        stay = BookedStay("BK-2025-0010", date(2025, 6, 2), date(2025, 6, 4), "confirmed")
        cancelled = BookedStay("BK-2025-0011", date(2025, 6, 5), date(2025, 6, 6), "cancelled")

        days = calendar_days(
            room, [], date(2025, 6, 1), date(2025, 6, 5), [stay, cancelled], [date(2025, 6, 3), date(2025, 6, 4)]
        )

        self.assertEqual([day.day.day for day in days], [1, 2, 3, 4, 5])
        self.assertEqual([day.status for day in days], [AVAILABLE, BOOKED, BOOKED, BLOCKED, AVAILABLE])
        self.assertEqual(days[1].reference_number, "BK-2025-0010")
        self.assertTrue(all(day.rate == eur(80) for day in days))
