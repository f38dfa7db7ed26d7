"""
Rate Rule Command Handlers

Authoring use cases for rate rules. Every command locks the room row, so
two concurrent edits on one room cannot both pass the conflict check.

Commands:
- CreateRateRuleCommand: Add a rule to a room
- UpdateRateRuleCommand: Change some fields of a rule
- DeleteRateRuleCommand: Remove a rule
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, FrozenSet
from uuid import UUID
import logging

from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import NotFoundError
from shared.domain.value_objects import Money
from apps.rooms.domain.entities import RateRule as RateRuleSnapshot, normalize_channel
from apps.rooms.domain.events import RateRuleChanged
from apps.rooms.domain.rate_rules import (
    AuthoringWindow,
    RateRuleConflictError,
    RateRuleValidationError,
    check_rule_conflict,
)
from apps.rooms.models import RateRule
from apps.rooms.repositories import RoomRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('start_date', 'end_date', 'weekdays', 'premium', 'min_stay_nights', 'channel')


class RateRuleNotFound(NotFoundError):
    """Raised when a rate rule id does not exist."""


def authoring_window() -> AuthoringWindow:
    return AuthoringWindow(
        max_past_years=getattr(settings, 'RATE_RULE_MAX_PAST_YEARS', 1),
        max_future_years=getattr(settings, 'RATE_RULE_MAX_FUTURE_YEARS', 5),
    )


# ===== Commands =====

@dataclass
class CreateRateRuleCommand:
    room_id: UUID
    start_date: date
    end_date: date
    weekdays: FrozenSet[int]
    premium: Decimal
    min_stay_nights: int | None = None
    channel: str | None = None


@dataclass
class UpdateRateRuleCommand:
    """Fields missing from changes keep their stored value"""
    rule_id: UUID
    changes: Dict[str, Any] = field(default_factory=dict)


@dataclass
class DeleteRateRuleCommand:
    rule_id: UUID


# ===== Command Handlers =====

class CreateRateRuleHandler:
    def __init__(self, room_repo: RoomRepository | None = None):
        self.room_repo = room_repo or RoomRepository()

    def handle(self, command: CreateRateRuleCommand) -> RateRule:
        """
        Raises:
            RoomNotFound, RateRuleValidationError, RateRuleConflictError
        """
        with DjangoUnitOfWork() as uow:
            room = self.room_repo.get(command.room_id, uow=uow)

            candidate = RateRuleSnapshot(
                id=None,
                room_id=room.id,
                start_date=command.start_date,
                end_date=command.end_date,
                weekdays=frozenset(command.weekdays),
                premium=Money(command.premium, room.currency),
                min_stay_nights=command.min_stay_nights,
                channel=command.channel,
            )
            _ensure_no_conflict(self.room_repo, room, candidate)

            rule = RateRule.objects.create(
                room=room,
                start_date=candidate.start_date,
                end_date=candidate.end_date,
                weekdays=sorted(candidate.weekdays),
                premium=candidate.premium.amount,
                min_stay_nights=candidate.min_stay_nights,
                channel=candidate.channel,
            )
            uow.add_event(_changed(rule, 'created'))

        logger.info(
            f"Rate rule {rule.id} created for room {room.id}: "
            f"{rule.start_date} - {rule.end_date}, premium {rule.premium}"
        )
        return rule


class UpdateRateRuleHandler:
    def __init__(self, room_repo: RoomRepository | None = None):
        self.room_repo = room_repo or RoomRepository()

    def handle(self, command: UpdateRateRuleCommand) -> RateRule:
        unknown = set(command.changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise RateRuleValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        room_id = _room_id_of(command.rule_id)

        with DjangoUnitOfWork() as uow:
            room = self.room_repo.get(room_id, uow=uow)
            rule = RateRule.objects.filter(pk=command.rule_id, room=room).first()
            if rule is None:
                raise RateRuleNotFound(f"Rate rule {command.rule_id} not found")

            merged = {name: getattr(rule, name) for name in UPDATABLE_FIELDS}
            merged.update(command.changes)
            merged['channel'] = normalize_channel(merged['channel'])

            candidate = RateRuleSnapshot(
                id=rule.id,
                room_id=room.id,
                start_date=merged['start_date'],
                end_date=merged['end_date'],
                weekdays=frozenset(merged['weekdays']),
                premium=Money(merged['premium'], room.currency),
                min_stay_nights=merged['min_stay_nights'],
                channel=merged['channel'],
            )
            _ensure_no_conflict(self.room_repo, room, candidate, exclude_rule_id=rule.id)

            for name, value in merged.items():
                setattr(rule, name, value)
            rule.weekdays = sorted(candidate.weekdays)
            rule.save()
            uow.add_event(_changed(rule, 'updated'))

        logger.info(f"Rate rule {rule.id} updated: {', '.join(sorted(command.changes)) or 'no changes'}")
        return rule


class DeleteRateRuleHandler:
    def __init__(self, room_repo: RoomRepository | None = None):
        self.room_repo = room_repo or RoomRepository()

    def handle(self, command: DeleteRateRuleCommand):
        room_id = _room_id_of(command.rule_id)

        with DjangoUnitOfWork() as uow:
            room = self.room_repo.get(room_id, uow=uow)
            rule = RateRule.objects.filter(pk=command.rule_id, room=room).first()
            if rule is None:
                raise RateRuleNotFound(f"Rate rule {command.rule_id} not found")
            event = _changed(rule, 'deleted')
            rule.delete()
            uow.add_event(event)

        logger.info(f"Rate rule {command.rule_id} deleted from room {room_id}")


def _room_id_of(rule_id: UUID) -> UUID:
    room_id = RateRule.objects.filter(pk=rule_id).values_list('room_id', flat=True).first()
    if room_id is None:
        raise RateRuleNotFound(f"Rate rule {rule_id} not found")
    return room_id


def _ensure_no_conflict(room_repo: RoomRepository, room, candidate: RateRuleSnapshot, exclude_rule_id=None):
    conflict = check_rule_conflict(
        room.id,
        candidate,
        room_repo.rules(room, start=candidate.start_date, end=candidate.end_date),
        exclude_rule_id=exclude_rule_id,
        today=timezone.localdate(),
        window=authoring_window(),
    )
    if conflict is not None:
        logger.warning(
            f"Rate rule rejected for room {room.id}: conflicts with {conflict.rule_id} "
            f"on weekdays {sorted(conflict.shared_weekdays)}"
        )
        raise RateRuleConflictError(conflict)


def _changed(rule: RateRule, change: str) -> RateRuleChanged:
    return RateRuleChanged(
        aggregate_id=rule.room_id,
        room_id=rule.room_id,
        rule_id=rule.id,
        change=change,
        start_date=rule.start_date,
        end_date=rule.end_date,
    )
