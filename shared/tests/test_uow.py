"""Tests for row locking in the unit of work."""

from __future__ import annotations

from decimal import Decimal
from unittest import mock

from django.db import connection
from django.test import TestCase

from apps.rooms.models import Hotel, Room
from shared.application.uow import DjangoUnitOfWork


class UnitOfWorkLockTests(TestCase):
    def setUp(self) -> None:
        hotel = Hotel.objects.create(name="Seaside")
        self.room = Room.objects.create(hotel=hotel, name="101", base_price=Decimal("100.00"), currency="EUR")
        self.queryset = Room.objects.select_related("hotel").filter(pk=self.room.pk)

    def _features(self, *, for_update: bool, for_update_of: bool):
        return (
            mock.patch.object(connection.features, "has_select_for_update", for_update),
            mock.patch.object(connection.features, "has_select_for_update_of", for_update_of),
        )

    def test_lock_limited_to_own_table(self) -> None:
        for_update, for_update_of = self._features(for_update=True, for_update_of=True)
        with DjangoUnitOfWork() as uow, for_update, for_update_of:
            locked = uow.lock(self.queryset, of=("self",))

        self.assertTrue(locked.query.select_for_update)
        self.assertEqual(locked.query.select_for_update_of, ("self",))

    def test_lock_without_for_update_of_support(self) -> None:
        for_update, for_update_of = self._features(for_update=True, for_update_of=False)
        with DjangoUnitOfWork() as uow, for_update, for_update_of:
            locked = uow.lock(self.queryset, of=("self",))

        self.assertTrue(locked.query.select_for_update)
        self.assertEqual(locked.query.select_for_update_of, ())

    def test_backend_without_row_locks_gets_plain_queryset(self) -> None:
        for_update, for_update_of = self._features(for_update=False, for_update_of=False)
        with DjangoUnitOfWork() as uow, for_update, for_update_of:
            locked = uow.lock(self.queryset, of=("self",))

        self.assertIs(locked, self.queryset)
        self.assertFalse(locked.query.select_for_update)
