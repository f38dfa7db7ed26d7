"""Hotel, room and rate-rule models.

Rooms carry the base price and per-channel price overrides; rate rules
and blocked dates hang off a room. Conversion helpers turn rows into the
immutable snapshots used by the pricing and conflict logic in
``apps.rooms.domain``.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import SUPPORTED_CURRENCIES, Money
from apps.rooms.domain.entities import RateRule as RateRuleSnapshot, RoomRates


CURRENCY_CHOICES = [(code, code) for code in SUPPORTED_CURRENCIES]


class Channel(models.TextChoices):
    WEBSITE = "website", _("Website")
    DIRECT = "direct", _("Direct")
    AIRBNB = "airbnb", _("Airbnb")
    BOOKING_COM = "booking.com", _("Booking.com")


class Hotel(models.Model):
    """A property that owns rooms."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    location = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Hotel")
        verbose_name_plural = _("Hotels")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Room(models.Model):
    """A bookable room with base and channel prices."""

    class Status(models.TextChoices):
        AVAILABLE = "available", _("Available")
        OUT_OF_SERVICE = "out_of_service", _("Out of service")
        CLEANING = "cleaning", _("Cleaning")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    hotel = models.ForeignKey(Hotel, on_delete=models.CASCADE, related_name="rooms")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    max_capacity = models.PositiveSmallIntegerField(default=2)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.AVAILABLE)
    base_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Nightly price for the website and any channel without its own price."),
    )
    airbnb_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    booking_com_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default=settings.DEFAULT_CURRENCY)
    minimum_nights = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Room")
        verbose_name_plural = _("Rooms")
        ordering = ["hotel", "name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(currency__in=SUPPORTED_CURRENCIES),
                name="room_supported_currency",
            ),
        ]
        indexes = [
            models.Index(fields=["hotel", "status"], name="rooms_room_hotel_i_5d0c1e_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.hotel.name} / {self.name}"

    @property
    def channel_prices(self) -> dict[str, Decimal]:
        prices = {}
        if self.airbnb_price is not None:
            prices[Channel.AIRBNB.value] = self.airbnb_price
        if self.booking_com_price is not None:
            prices[Channel.BOOKING_COM.value] = self.booking_com_price
        return prices

    def to_rates(self) -> RoomRates:
        return RoomRates(
            room_id=self.id,
            base_price=Money(self.base_price, self.currency),
            channel_prices={
                channel: Money(price, self.currency)
                for channel, price in self.channel_prices.items()
            },
            minimum_nights=self.minimum_nights,
        )


class RateRule(models.Model):
    """Premium added to the room's base price on some weekdays of a date range."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name="rate_rules")
    start_date = models.DateField()
    end_date = models.DateField()
    weekdays = models.JSONField(
        default=list,
        help_text=_("Weekdays the rule applies to (0=Sunday ... 6=Saturday)."),
    )
    premium = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("-999999")), MaxValueValidator(Decimal("999999"))],
        help_text=_("Added to the base price; negative values are discounts."),
    )
    min_stay_nights = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(365)],
    )
    channel = models.CharField(
        max_length=50,
        null=True,
        blank=True,
        help_text=_("Sales channel; empty means the rule applies to every channel."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Rate rule")
        verbose_name_plural = _("Rate rules")
        ordering = ["room", "start_date", "channel"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="rate_rule_valid_date_range",
            ),
        ]
        indexes = [
            models.Index(fields=["room", "start_date", "end_date"], name="rooms_rater_room_id_8f2a4b_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.room}: {self.start_date} - {self.end_date} ({self.premium:+})"

    @property
    def is_general(self) -> bool:
        return len(set(self.weekdays or [])) == 7

    def to_snapshot(self, currency: str | None = None) -> RateRuleSnapshot:
        return RateRuleSnapshot(
            id=self.id,
            start_date=self.start_date,
            end_date=self.end_date,
            weekdays=frozenset(self.weekdays or []),
            premium=Money(self.premium, currency or self.room.currency),
            min_stay_nights=self.min_stay_nights,
            channel=self.channel,
            room_id=self.room_id,
        )


class BlockedDate(models.Model):
    """A date on which the room cannot be booked (maintenance, manual hold)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name="blocked_dates")
    date = models.DateField()
    notes = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Blocked date")
        verbose_name_plural = _("Blocked dates")
        ordering = ["date"]
        constraints = [
            models.UniqueConstraint(fields=["room", "date"], name="blocked_date_unique_per_room"),
        ]

    def __str__(self) -> str:
        return f"{self.room}: {self.date}"
