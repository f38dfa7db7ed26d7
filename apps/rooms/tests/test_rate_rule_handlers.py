"""Tests for the rate-rule authoring use cases."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.test import TestCase
from django.utils import timezone

from apps.rooms.application.command_handlers import (
    CreateRateRuleCommand,
    CreateRateRuleHandler,
    DeleteRateRuleCommand,
    DeleteRateRuleHandler,
    RateRuleNotFound,
    UpdateRateRuleCommand,
    UpdateRateRuleHandler,
)
from apps.rooms.domain.rate_rules import RateRuleConflictError, RateRuleValidationError
from apps.rooms.models import Hotel, RateRule, Room

MON, TUE, WED, THU = 1, 2, 3, 4


class RateRuleHandlerTests(TestCase):
    def setUp(self) -> None:
        self.today = timezone.localdate()
        hotel = Hotel.objects.create(name="Mountain Lodge")
        self.room = Room.objects.create(hotel=hotel, name="Suite", base_price=Decimal("150.00"), currency="EUR")
        self.other_room = Room.objects.create(hotel=hotel, name="Twin", base_price=Decimal("90.00"), currency="EUR")

    def _create(self, start: int, end: int, weekdays, room=None, **kwargs) -> RateRule:
        return CreateRateRuleHandler().handle(
            CreateRateRuleCommand(
                room_id=(room or self.room).id,
                start_date=self.today + timedelta(days=start),
                end_date=self.today + timedelta(days=end),
                weekdays=frozenset(weekdays),
                premium=kwargs.pop("premium", Decimal("20.00")),
                **kwargs,
            )
        )

    def test_create_rule(self) -> None:
        rule = self._create(10, 40, {WED, MON, TUE}, channel=" AIRBNB ", min_stay_nights=2)

        stored = RateRule.objects.get(pk=rule.id)
        self.assertEqual(stored.weekdays, [MON, TUE, WED])
        self.assertEqual(stored.channel, "airbnb")
        self.assertEqual(stored.min_stay_nights, 2)
        self.assertEqual(stored.premium, Decimal("20.00"))

    def test_overlapping_rule_is_rejected(self) -> None:
        existing = self._create(10, 40, {MON, TUE, WED})

        with self.assertRaises(RateRuleConflictError) as ctx:
            self._create(25, 60, {TUE, WED, THU})

        details = ctx.exception.details()
        self.assertEqual(details["conflicting_rule_id"], str(existing.id))
        self.assertEqual(details["shared_weekdays"], [TUE, WED])
        self.assertEqual(RateRule.objects.count(), 1)

    def test_second_general_rule_is_rejected(self) -> None:
        self._create(10, 40, range(7))

        with self.assertRaises(RateRuleConflictError) as ctx:
            self._create(30, 50, range(7))

        self.assertTrue(ctx.exception.conflict.involves_general_rule)

    def test_same_dates_on_another_room_are_accepted(self) -> None:
        self._create(10, 40, range(7))
        self._create(10, 40, range(7), room=self.other_room)

        self.assertEqual(RateRule.objects.count(), 2)

    def test_channel_specific_rules_do_not_clash_across_channels(self) -> None:
        self._create(10, 40, {MON}, channel="airbnb")
        self._create(10, 40, {MON}, channel="booking.com")

        with self.assertRaises(RateRuleConflictError):
            self._create(10, 40, {MON})

    def test_rule_outside_authoring_window_is_rejected(self) -> None:
        with self.assertRaises(RateRuleValidationError):
            self._create(6 * 366, 6 * 366 + 10, {MON})

    def test_update_does_not_conflict_with_itself(self) -> None:
        rule = self._create(10, 40, {MON, TUE})

        updated = UpdateRateRuleHandler().handle(
            UpdateRateRuleCommand(
                rule_id=rule.id,
                changes={"end_date": self.today + timedelta(days=50), "premium": Decimal("35.00")},
            )
        )

        self.assertEqual(updated.end_date, self.today + timedelta(days=50))
        self.assertEqual(RateRule.objects.get(pk=rule.id).premium, Decimal("35.00"))

    def test_update_into_conflict_is_rejected(self) -> None:
        self._create(10, 40, {MON})
        other = self._create(10, 40, {TUE})

        with self.assertRaises(RateRuleConflictError):
            UpdateRateRuleHandler().handle(
                UpdateRateRuleCommand(rule_id=other.id, changes={"weekdays": [TUE, MON]})
            )

        self.assertEqual(RateRule.objects.get(pk=other.id).weekdays, [TUE])

    def test_update_unknown_field_is_rejected(self) -> None:
        rule = self._create(10, 40, {MON})

        with self.assertRaises(RateRuleValidationError):
            UpdateRateRuleHandler().handle(UpdateRateRuleCommand(rule_id=rule.id, changes={"room": self.other_room}))

    def test_delete_rule(self) -> None:
        rule = self._create(10, 40, {MON})

        DeleteRateRuleHandler().handle(DeleteRateRuleCommand(rule_id=rule.id))

        self.assertFalse(RateRule.objects.exists())
        with self.assertRaises(RateRuleNotFound):
            DeleteRateRuleHandler().handle(DeleteRateRuleCommand(rule_id=rule.id))

    def test_changes_schedule_quote_revalidation_after_commit(self) -> None:
        with mock.patch("apps.bookings.tasks.revalidate_pending_quotes.delay") as delay:
            with self.captureOnCommitCallbacks(execute=True):
                rule = self._create(10, 40, {MON})
            with self.captureOnCommitCallbacks(execute=True):
                DeleteRateRuleHandler().handle(DeleteRateRuleCommand(rule_id=rule.id))

        self.assertEqual(delay.call_count, 2)
        delay.assert_called_with(str(self.room.id))

    def test_rejected_rule_schedules_nothing(self) -> None:
        self._create(10, 40, {MON})

        with mock.patch("apps.bookings.tasks.revalidate_pending_quotes.delay") as delay:
            with self.captureOnCommitCallbacks(execute=True):
                with self.assertRaises(RateRuleConflictError):
                    self._create(10, 40, {MON})

        delay.assert_not_called()
