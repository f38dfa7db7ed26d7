"""
Booking Domain Entities

- Booking: aggregate root for a room reservation
- BookingStatus: lifecycle states
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from shared.domain.base import Aggregate, utcnow
from shared.domain.exceptions import DomainValidationError
from shared.domain.value_objects import Money, DateRange
from apps.bookings.domain.availability import BookedStay
from apps.bookings.domain.events import BookingCancelled, BookingConfirmed, BookingCreated


class BookingStatus(Enum):
    """
    Booking lifecycle

    State transitions:
    - PENDING -> CONFIRMED (payment captured)
    - PENDING -> CANCELLED
    - CONFIRMED -> CANCELLED
    CONFIRMED and CANCELLED are terminal for payment; CANCELLED is final.
    """
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'


class InvalidBookingTransition(DomainValidationError):
    """Raised for a lifecycle transition the current status does not allow"""


@dataclass(kw_only=True, eq=False)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    Key invariants:
    - dates is a valid half-open range (check_out exclusive)
    - only PENDING and CONFIRMED bookings block the room's dates
    """

    reference_number: str
    room_id: UUID
    dates: DateRange
    total_cost: Money
    channel: str | None = None

    guest_name: str = ''
    guest_email: str = ''
    guest_contact: str = ''

    status: BookingStatus = BookingStatus.PENDING
    cancellation_reason: str = ''
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None

    @classmethod
    def create(cls, **kwargs) -> 'Booking':
        """New PENDING booking with its BookingCreated event"""
        booking = cls(status=BookingStatus.PENDING, **kwargs)
        booking.add_event(BookingCreated(
            aggregate_id=booking.id,
            booking_id=booking.id,
            room_id=booking.room_id,
            reference_number=booking.reference_number,
            dates=booking.dates,
            total_cost=booking.total_cost,
            channel=booking.channel,
        ))
        return booking

    def confirm(self):
        """PENDING -> CONFIRMED"""
        if self.status != BookingStatus.PENDING:
            raise InvalidBookingTransition(
                f"Cannot confirm booking {self.reference_number} from status {self.status.value}. "
                f"Booking must be PENDING."
            )

        self.status = BookingStatus.CONFIRMED
        self.confirmed_at = utcnow()
        self.touch()

        self.add_event(BookingConfirmed(
            aggregate_id=self.id,
            booking_id=self.id,
            room_id=self.room_id,
            reference_number=self.reference_number,
            dates=self.dates,
        ))

    def cancel(self, reason: str = ''):
        """PENDING or CONFIRMED -> CANCELLED"""
        if self.status == BookingStatus.CANCELLED:
            raise InvalidBookingTransition(f"Booking {self.reference_number} is already cancelled")

        old_status = self.status
        self.status = BookingStatus.CANCELLED
        self.cancellation_reason = reason
        self.cancelled_at = utcnow()
        self.touch()

        self.add_event(BookingCancelled(
            aggregate_id=self.id,
            booking_id=self.id,
            room_id=self.room_id,
            reference_number=self.reference_number,
            reason=reason,
            old_status=old_status.value,
        ))

    def blocks_dates(self) -> bool:
        return self.status in (BookingStatus.PENDING, BookingStatus.CONFIRMED)

    def as_booked_stay(self) -> BookedStay:
        return BookedStay(
            reference_number=self.reference_number,
            check_in=self.dates.start_date,
            check_out=self.dates.end_date,
            status=self.status.value,
            room_id=self.room_id,
        )

    @property
    def nights(self) -> int:
        return len(self.dates)

    def __str__(self):
        return f"Booking {self.reference_number} ({self.status.value})"

    def __repr__(self):
        return (
            f"Booking(id={self.id}, reference_number={self.reference_number}, "
            f"status={self.status.value}, dates={self.dates})"
        )
