"""
Room Domain Entities

Read-side snapshots the pricing and conflict logic work on:
- RoomRates: a room's base price, per-channel prices and stay limits
- RateRule: a weekday-scoped premium over an inclusive date range
- Channel helpers: normalisation of sales-channel names

Weekdays use the 0=Sunday ... 6=Saturday convention throughout.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Mapping
from uuid import UUID

from shared.domain.base import ValueObject
from shared.domain.value_objects import DateRange, Money

ALL_WEEKDAYS = frozenset(range(7))

WEBSITE = 'website'
DIRECT = 'direct'
AIRBNB = 'airbnb'
BOOKING_COM = 'booking.com'

_CHANNEL_ALIASES = {
    'booking_com': BOOKING_COM,
    'bookingcom': BOOKING_COM,
}


def normalize_channel(channel: str | None) -> str | None:
    """Lower-case a channel name, map aliases, and treat blank as unset"""
    if channel is None:
        return None
    value = channel.strip().lower()
    if not value:
        return None
    return _CHANNEL_ALIASES.get(value, value)


def sales_channel(channel: str | None) -> str:
    """Channel a stay is sold through; unset means the hotel's own website"""
    return normalize_channel(channel) or WEBSITE


def weekday_of(day: date) -> int:
    """Weekday number with Sunday as 0"""
    return (day.weekday() + 1) % 7


@dataclass(frozen=True)
class RoomRates(ValueObject):
    """
    Pricing view of a room

    channel_prices only holds channels that override the base price.
    """
    room_id: UUID | None
    base_price: Money
    channel_prices: Mapping[str, Money] = field(default_factory=dict)
    minimum_nights: int | None = None

    def __post_init__(self):
        if self.minimum_nights is not None and self.minimum_nights < 1:
            raise ValueError("minimum_nights must be at least 1")

    @property
    def currency(self) -> str:
        return self.base_price.currency

    def price_for_channel(self, channel: str | None) -> Money:
        """Channel-specific price, falling back to the base price"""
        channel = normalize_channel(channel)
        if channel is None:
            return self.base_price
        return self.channel_prices.get(channel) or self.base_price


@dataclass(frozen=True)
class RateRule(ValueObject):
    """
    Rate rule snapshot

    start_date and end_date are both inclusive. A rule covering all seven
    weekdays is the general rule for its range; anything narrower is
    day-specific and wins over the general rule on matching nights.
    """
    id: UUID | None
    start_date: date
    end_date: date
    weekdays: frozenset
    premium: Money
    min_stay_nights: int | None = None
    channel: str | None = None
    room_id: UUID | None = None

    def __post_init__(self):
        object.__setattr__(self, 'weekdays', frozenset(self.weekdays))
        object.__setattr__(self, 'channel', normalize_channel(self.channel))

    @property
    def is_general(self) -> bool:
        return self.weekdays >= ALL_WEEKDAYS

    @property
    def period(self) -> DateRange:
        """Half-open equivalent of the inclusive rule range"""
        return DateRange.inclusive(self.start_date, self.end_date)

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def applies_on(self, day: date) -> bool:
        """Rule range contains day and the rule is active on its weekday"""
        return self.covers(day) and weekday_of(day) in self.weekdays

    def touches(self, check_in: date, check_out: date) -> bool:
        """Coarse filter used before per-night resolution"""
        return self.start_date <= check_out and self.end_date >= check_in

    def prices_channel(self, channel: str | None) -> bool:
        """Rule takes part in pricing a stay sold through channel"""
        return self.channel is None or self.channel == sales_channel(channel)

    def shares_channel_with(self, other: 'RateRule') -> bool:
        """Same channel, or either rule applies regardless of channel"""
        if self.channel is None or other.channel is None:
            return True
        return self.channel == other.channel
