"""Booking models."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.bookings.domain.availability import BookedStay


class Booking(models.Model):
    """A reservation of one room over [check_in_date, check_out_date)."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")

    BLOCKING_STATUSES = (Status.PENDING, Status.CONFIRMED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    room = models.ForeignKey(
        "rooms.Room",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    reference_number = models.CharField(max_length=20, unique=True, editable=False)
    guest_name = models.CharField(max_length=255, blank=True)
    guest_email = models.EmailField(blank=True)
    guest_contact = models.CharField(max_length=64, blank=True)
    check_in_date = models.DateField()
    check_out_date = models.DateField()
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    total_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Price quoted at creation time; never recomputed."),
    )
    currency = models.CharField(max_length=3)
    channel = models.CharField(max_length=50, null=True, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out_date__gt=models.F("check_in_date")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["room", "check_in_date", "check_out_date"], name="bookings_bo_room_id_3c9e71_idx"),
            models.Index(fields=["status"], name="bookings_bo_status_7b1d2f_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.reference_number} for room {self.room_id}"

    @property
    def nights(self) -> int:
        return (self.check_out_date - self.check_in_date).days

    def to_booked_stay(self) -> BookedStay:
        return BookedStay(
            reference_number=self.reference_number,
            check_in=self.check_in_date,
            check_out=self.check_out_date,
            status=self.status,
            room_id=self.room_id,
        )


class BookingReferenceSequence(models.Model):
    """Lock row per calendar year; holding it serialises reference generation."""

    year = models.PositiveSmallIntegerField(unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Booking reference sequence")
        verbose_name_plural = _("Booking reference sequences")
        ordering = ["-year"]

    def __str__(self) -> str:
        return str(self.year)
