"""
Nightly Price Resolution

One pure function prices a stay for every caller (quotes, booking
creation, checkout), so the amount quoted is the amount charged.

Per night, in order of precedence:
1. Day-specific rules active on that weekday: base_price + highest premium
2. The general rule covering that night: base_price + its premium
3. Otherwise the channel price (or base price)

Premiums are added to the room's plain base price, while the fallback uses
the channel price. Both paths are kept as the booking engine has always
priced them; see DESIGN.md before changing either.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, Tuple

from shared.domain.base import ValueObject
from shared.domain.value_objects import DateRange, Money
from apps.rooms.domain.entities import RateRule, RoomRates, weekday_of


class RateSource(Enum):
    """Which branch produced a night's rate"""
    BASE = 'base'
    GENERAL = 'general'
    DAY_SPECIFIC = 'day_specific'


@dataclass(frozen=True)
class NightlyRate(ValueObject):
    night: date
    rate: Money
    source: RateSource
    rule_id: object = None


@dataclass(frozen=True)
class PricingResult(ValueObject):
    """
    Resolved price of a stay

    min_nightly_rate is the "from" price for display, never for billing.
    """
    total_cost: Money
    min_nightly_rate: Money
    nights: Tuple[NightlyRate, ...] = ()

    @property
    def night_count(self) -> int:
        return len(self.nights)


def resolve_pricing(
    room: RoomRates,
    rules: Iterable[RateRule],
    check_in: date,
    check_out: date,
    channel: str | None = None,
) -> PricingResult:
    """
    Price every night of [check_in, check_out)

    The caller guarantees check_in < check_out. Never fails for valid
    input, and the result does not depend on the order of rules.
    """
    stay = DateRange(check_in, check_out)
    rules = list(rules)
    channel_price = room.price_for_channel(channel)

    if not rules:
        nights = tuple(
            NightlyRate(night, channel_price, RateSource.BASE)
            for night in stay.nights()
        )
        return PricingResult(
            total_cost=channel_price * len(stay),
            min_nightly_rate=max(channel_price, room.base_price),
            nights=nights,
        )

    candidates = [rule for rule in rules if rule.touches(check_in, check_out)]

    total = Money.zero(room.currency)
    minimum = None
    nights = []

    for night in stay.nights():
        nightly = _rate_for_night(room, candidates, night, channel_price)
        nights.append(nightly)
        total = total + nightly.rate
        if minimum is None or nightly.rate < minimum:
            minimum = nightly.rate

    return PricingResult(total_cost=total, min_nightly_rate=minimum, nights=tuple(nights))


def _rate_for_night(room: RoomRates, rules, night: date, channel_price: Money) -> NightlyRate:
    covering = [rule for rule in rules if rule.covers(night)]
    weekday = weekday_of(night)

    day_specific = [
        rule for rule in covering
        if not rule.is_general and weekday in rule.weekdays
    ]
    if day_specific:
        rule = _highest_premium(day_specific)
        return NightlyRate(night, room.base_price + rule.premium, RateSource.DAY_SPECIFIC, rule.id)

    general = [rule for rule in covering if rule.is_general]
    if general:
        # At most one by the authoring invariant; pick deterministically anyway
        rule = _highest_premium(general)
        return NightlyRate(night, room.base_price + rule.premium, RateSource.GENERAL, rule.id)

    return NightlyRate(night, channel_price, RateSource.BASE)


def _highest_premium(rules) -> RateRule:
    return max(rules, key=lambda rule: (rule.premium.amount, str(rule.id)))
