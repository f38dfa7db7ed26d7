"""ORM access for bookings and reference sequences."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List
from uuid import UUID

from django.db.models import IntegerField, Max, Q  # type: ignore
from django.db.models.functions import Cast, Substr  # type: ignore

from shared.domain.exceptions import NotFoundError
from shared.domain.value_objects import DateRange, Money
from apps.bookings.domain.availability import BookedStay
from apps.bookings.domain.entities import Booking as BookingAggregate, BookingStatus
from apps.bookings.domain.references import format_reference, reference_prefix
from apps.bookings.models import Booking, BookingReferenceSequence


class BookingNotFound(NotFoundError):
    """Raised when a booking id does not exist."""


class BookingRepository:
    """Maps Booking rows to the Booking aggregate and back."""

    def get_by_id(self, booking_id: UUID, uow=None) -> BookingAggregate:
        queryset = Booking.objects.filter(pk=booking_id)
        if uow is not None:
            queryset = uow.lock(queryset)
        model = queryset.first()
        if model is None:
            raise BookingNotFound(f"Booking {booking_id} not found")
        return self._to_domain(model)

    def save(self, booking: BookingAggregate) -> Booking:
        model, _ = Booking.objects.update_or_create(
            pk=booking.id,
            defaults={
                "room_id": booking.room_id,
                "reference_number": booking.reference_number,
                "guest_name": booking.guest_name,
                "guest_email": booking.guest_email,
                "guest_contact": booking.guest_contact,
                "check_in_date": booking.dates.start_date,
                "check_out_date": booking.dates.end_date,
                "status": booking.status.value,
                "total_cost": booking.total_cost.amount,
                "currency": booking.total_cost.currency,
                "channel": booking.channel,
                "cancellation_reason": booking.cancellation_reason,
                "confirmed_at": booking.confirmed_at,
                "cancelled_at": booking.cancelled_at,
            },
        )
        return model

    def active_stays(self, room_id: UUID, start: date, end: date, exclude_booking_id: UUID | None = None) -> List[BookedStay]:
        """Pending and confirmed bookings of the room overlapping [start, end)."""
        queryset = Booking.objects.filter(
            room_id=room_id,
            status__in=Booking.BLOCKING_STATUSES,
        ).filter(Q(check_in_date__lt=end) & Q(check_out_date__gt=start))
        if exclude_booking_id is not None:
            queryset = queryset.exclude(pk=exclude_booking_id)
        return [booking.to_booked_stay() for booking in queryset.order_by("check_in_date")]

    def lock_reference_year(self, year: int, uow) -> BookingReferenceSequence:
        """Create (once) and lock the sequence row for year."""
        BookingReferenceSequence.objects.get_or_create(year=year)
        return uow.lock(BookingReferenceSequence.objects.filter(year=year)).get()

    def latest_reference(self, year: int) -> str | None:
        """Highest reference issued in year, by sequence number, computed in the database."""
        prefix = reference_prefix(year)
        highest = (
            Booking.objects.filter(reference_number__regex=rf"^{prefix}[0-9]+$")
            .annotate(sequence=Cast(Substr("reference_number", len(prefix) + 1), output_field=IntegerField()))
            .aggregate(highest=Max("sequence"))["highest"]
        )
        return format_reference(year, highest) if highest else None

    @staticmethod
    def _to_domain(model: Booking) -> BookingAggregate:
        return BookingAggregate(
            id=model.id,
            created_at=model.created_at,
            updated_at=model.updated_at,
            reference_number=model.reference_number,
            room_id=model.room_id,
            dates=DateRange(model.check_in_date, model.check_out_date),
            total_cost=Money(Decimal(model.total_cost), model.currency),
            channel=model.channel,
            guest_name=model.guest_name,
            guest_email=model.guest_email,
            guest_contact=model.guest_contact,
            status=BookingStatus(model.status),
            cancellation_reason=model.cancellation_reason,
            confirmed_at=model.confirmed_at,
            cancelled_at=model.cancelled_at,
        )
