"""ORM access for rooms, rate rules and blocked dates."""

from __future__ import annotations

from datetime import date
from typing import List
from uuid import UUID

from shared.domain.exceptions import NotFoundError
from apps.rooms.domain.entities import RateRule as RateRuleSnapshot
from apps.rooms.models import BlockedDate, RateRule, Room


class RoomNotFound(NotFoundError):
    """Raised when a room id does not exist."""


class RoomRepository:
    """Loads the state the pricing and availability checks need for one room."""

    def get(self, room_id: UUID, uow=None) -> Room:
        """Fetch a room; with a unit of work the row stays locked until it ends."""
        queryset = Room.objects.select_related("hotel").filter(pk=room_id)
        if uow is not None:
            queryset = uow.lock(queryset, of=("self",))
        room = queryset.first()
        if room is None:
            raise RoomNotFound(f"Room {room_id} not found")
        return room

    def rules(self, room: Room, *, start: date | None = None, end: date | None = None) -> List[RateRuleSnapshot]:
        """Rate rules of room, optionally only those touching [start, end]."""
        queryset = RateRule.objects.filter(room=room)
        if start is not None:
            queryset = queryset.filter(end_date__gte=start)
        if end is not None:
            queryset = queryset.filter(start_date__lte=end)
        return [rule.to_snapshot(room.currency) for rule in queryset]

    def pricing_rules(self, room: Room, check_in: date, check_out: date, channel: str | None) -> List[RateRuleSnapshot]:
        """Rules that take part in pricing a stay sold through channel."""
        return [
            rule for rule in self.rules(room, start=check_in, end=check_out)
            if rule.prices_channel(channel)
        ]

    def blocked_dates(self, room: Room, start: date, end: date) -> List[date]:
        """Blocked dates of room within the half-open window [start, end)."""
        return list(
            BlockedDate.objects.filter(room=room, date__gte=start, date__lt=end)
            .order_by("date")
            .values_list("date", flat=True)
        )
