"""
Room Calendar

Day-by-day view of a room: whether each date is free, booked or blocked,
and the rate the resolver would charge for that night.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List
from uuid import UUID

from shared.domain.base import ValueObject
from shared.domain.value_objects import DateRange, Money
from apps.bookings.domain.availability import BookedStay
from apps.rooms.domain.entities import RateRule, RoomRates
from apps.rooms.domain.pricing import resolve_pricing

AVAILABLE = 'available'
BOOKED = 'booked'
BLOCKED = 'blocked'


@dataclass(frozen=True)
class CalendarDay(ValueObject):
    day: date
    status: str
    rate: Money
    source: str
    rule_id: UUID | None = None
    reference_number: str | None = None


def calendar_days(
    room: RoomRates,
    rules: Iterable[RateRule],
    first: date,
    last: date,
    existing_bookings: Iterable[BookedStay],
    blocked_dates: Iterable[date],
    channel: str | None = None,
) -> List[CalendarDay]:
    """
    One entry per date in [first, last], both inclusive

    A date covered by a pending or confirmed booking is booked even when it
    is also blocked.
    """
    window = DateRange.inclusive(first, last)
    pricing = resolve_pricing(room, rules, window.start_date, window.end_date, channel)
    stays = [stay for stay in existing_bookings if stay.blocks_dates]
    blocked = set(blocked_dates)

    days = []
    for nightly in pricing.nights:
        stay = next(
            (stay for stay in stays if stay.check_in <= nightly.night < stay.check_out),
            None,
        )
        if stay is not None:
            status = BOOKED
        elif nightly.night in blocked:
            status = BLOCKED
        else:
            status = AVAILABLE
        days.append(CalendarDay(
            day=nightly.night,
            status=status,
            rate=nightly.rate,
            source=nightly.source.value,
            rule_id=nightly.rule_id,
            reference_number=stay.reference_number if stay else None,
        ))
    return days
