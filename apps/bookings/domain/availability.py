"""
Availability Checking

The read half of booking creation. check_availability has no side effects;
callers must run it and the insert inside one unit of work holding the
room lock, otherwise two requests can both see the room as free.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable
from uuid import UUID

from shared.domain.base import ValueObject
from shared.domain.exceptions import ConflictError
from shared.domain.value_objects import overlaps
from apps.rooms.domain.entities import RateRule, RoomRates, weekday_of

BLOCKING_STATUSES = frozenset({'pending', 'confirmed'})


class ConflictReason(Enum):
    MINIMUM_NIGHTS = 'minimum_nights'
    MINIMUM_STAY = 'minimum_stay'
    BOOKING_OVERLAP = 'booking_overlap'
    BLOCKED_DATE = 'blocked_date'


@dataclass(frozen=True)
class BookedStay(ValueObject):
    """An existing booking as seen by the availability check"""
    reference_number: str
    check_in: date
    check_out: date
    status: str
    room_id: UUID | None = None

    @property
    def blocks_dates(self) -> bool:
        return self.status in BLOCKING_STATUSES


@dataclass(frozen=True)
class AvailabilityConflict(ValueObject):
    reason: ConflictReason
    reference_number: str | None = None
    blocked_date: date | None = None
    required_nights: int | None = None
    rule_id: UUID | None = None

    @property
    def message(self) -> str:
        if self.reason is ConflictReason.BOOKING_OVERLAP:
            return (
                "Room is not available for the selected dates. "
                f"Conflicting booking reference: {self.reference_number}"
            )
        if self.reason is ConflictReason.BLOCKED_DATE:
            return (
                "Room is blocked for some of the selected dates. "
                f"First blocked date: {self.blocked_date.isoformat()}"
            )
        if self.reason is ConflictReason.MINIMUM_STAY:
            return f"Rate for the check-in date requires a stay of at least {self.required_nights} nights"
        return f"Room requires a stay of at least {self.required_nights} nights"

    def to_dict(self) -> dict:
        return {
            'reason': self.reason.value,
            'reference_number': self.reference_number,
            'blocked_date': self.blocked_date.isoformat() if self.blocked_date else None,
            'required_nights': self.required_nights,
            'rule_id': str(self.rule_id) if self.rule_id else None,
        }


class BookingConflictError(ConflictError):
    """Raised when a room is busy for the requested dates."""

    def __init__(self, conflict: AvailabilityConflict):
        super().__init__(conflict.message)
        self.conflict = conflict
        self.reason = conflict.reason.value

    def details(self) -> dict:
        return self.conflict.to_dict()


def check_availability(
    room: RoomRates,
    rules: Iterable[RateRule],
    check_in: date,
    check_out: date,
    existing_bookings: Iterable[BookedStay],
    blocked_dates: Iterable[date],
) -> AvailabilityConflict | None:
    """
    Decide whether [check_in, check_out) can be booked

    Checks run in order: room minimum nights, minimum stay of the rule
    pricing the check-in night, overlapping pending/confirmed bookings,
    blocked dates. Returns None when the stay is bookable.

    existing_bookings and blocked_dates are expected to be the room's own;
    bookings tagged with another room_id are ignored.
    """
    nights = (check_out - check_in).days

    if room.minimum_nights is not None and nights < room.minimum_nights:
        return AvailabilityConflict(ConflictReason.MINIMUM_NIGHTS, required_nights=room.minimum_nights)

    stay_rule = _rule_for_check_in(rules, check_in)
    if stay_rule is not None and stay_rule.min_stay_nights and nights < stay_rule.min_stay_nights:
        return AvailabilityConflict(
            ConflictReason.MINIMUM_STAY,
            required_nights=stay_rule.min_stay_nights,
            rule_id=stay_rule.id,
        )

    clashing = sorted(
        (
            booking for booking in existing_bookings
            if booking.blocks_dates
            and (booking.room_id is None or room.room_id is None or booking.room_id == room.room_id)
            and overlaps(check_in, check_out, booking.check_in, booking.check_out)
        ),
        key=lambda booking: (booking.check_in, booking.reference_number),
    )
    if clashing:
        return AvailabilityConflict(ConflictReason.BOOKING_OVERLAP, reference_number=clashing[0].reference_number)

    blocked = sorted(day for day in blocked_dates if check_in <= day < check_out)
    if blocked:
        return AvailabilityConflict(ConflictReason.BLOCKED_DATE, blocked_date=blocked[0])

    return None


def _rule_for_check_in(rules: Iterable[RateRule], check_in: date) -> RateRule | None:
    """The rule that prices the check-in night, if any"""
    weekday = weekday_of(check_in)
    covering = [rule for rule in rules if rule.covers(check_in)]
    day_specific = [rule for rule in covering if not rule.is_general and weekday in rule.weekdays]
    candidates = day_specific or [rule for rule in covering if rule.is_general]
    if not candidates:
        return None
    return max(candidates, key=lambda rule: (rule.premium.amount, str(rule.id)))
