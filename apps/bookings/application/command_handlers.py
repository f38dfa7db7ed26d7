"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- CreateBookingCommand: Price, check and create a pending booking
- ConfirmBookingCommand: Confirm payment for a booking
- CancelBookingCommand: Cancel a booking

Queries:
- quote_stay: Price and availability of a stay without writing anything
- room_calendar: Per-date status and rate of a room
"""

from dataclasses import dataclass
from datetime import date
from typing import List
from uuid import UUID
import logging

from dateutil.relativedelta import relativedelta
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import DomainValidationError
from shared.domain.value_objects import ONE_DAY, DateRange
from apps.bookings.domain.availability import AvailabilityConflict, BookingConflictError, check_availability
from apps.bookings.domain.calendar import CalendarDay, calendar_days
from apps.bookings.domain.entities import Booking
from apps.bookings.domain.references import next_reference
from apps.bookings.repositories import BookingRepository
from apps.rooms.domain.entities import normalize_channel
from apps.rooms.domain.pricing import PricingResult, resolve_pricing
from apps.rooms.models import Room
from apps.rooms.repositories import RoomRepository

logger = logging.getLogger(__name__)


class BookingValidationError(DomainValidationError):
    """Request rejected before pricing or availability is looked at"""


def validate_stay_dates(check_in: date, check_out: date, today: date | None = None):
    """
    Check-out after check-in, check-in not in the past and not more than
    BOOKING_MAX_ADVANCE_YEARS ahead
    """
    today = today or timezone.localdate()
    if check_in >= check_out:
        raise BookingValidationError("Check-out date must be after check-in date")
    if check_in < today:
        raise BookingValidationError("Check-in date cannot be in the past")

    max_years = getattr(settings, 'BOOKING_MAX_ADVANCE_YEARS', 2)
    if check_in > today + relativedelta(years=max_years):
        raise BookingValidationError(
            f"Check-in date cannot be more than {max_years} year(s) in the future"
        )


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to create a new booking

    This is the primary entry point for creating bookings.
    """
    room_id: UUID
    check_in: date
    check_out: date
    guest_name: str
    guest_email: str = ''
    guest_contact: str = ''
    channel: str | None = None


@dataclass
class ConfirmBookingCommand:
    """Command to confirm a booking after successful payment"""
    booking_id: UUID


@dataclass
class CancelBookingCommand:
    """Command to cancel a booking"""
    booking_id: UUID
    reason: str = ''


@dataclass(frozen=True)
class StayQuote:
    room_id: UUID
    channel: str | None
    dates: DateRange
    pricing: PricingResult
    conflict: AvailabilityConflict | None

    @property
    def available(self) -> bool:
        return self.conflict is None


# ===== Queries =====

def quote_stay(room_id: UUID, check_in: date, check_out: date, channel: str | None = None,
               room_repo: RoomRepository | None = None,
               booking_repo: BookingRepository | None = None) -> StayQuote:
    """
    Price a stay and report whether it could be booked right now

    Read-only, so the verdict can be stale by the time a booking is made;
    CreateBookingHandler repeats both steps under the room lock.
    """
    room_repo = room_repo or RoomRepository()
    booking_repo = booking_repo or BookingRepository()
    channel = normalize_channel(channel)

    room = room_repo.get(room_id)
    dates = DateRange(check_in, check_out)
    pricing, conflict = _price_and_check(room, dates, channel, room_repo, booking_repo)
    return StayQuote(room_id=room.id, channel=channel, dates=dates, pricing=pricing, conflict=conflict)


def room_calendar(room_id: UUID, first: date, last: date, channel: str | None = None,
                  room_repo: RoomRepository | None = None,
                  booking_repo: BookingRepository | None = None) -> List[CalendarDay]:
    """Status and nightly rate of every date in [first, last]"""
    room_repo = room_repo or RoomRepository()
    booking_repo = booking_repo or BookingRepository()
    channel = normalize_channel(channel)

    room = room_repo.get(room_id)
    end = last + ONE_DAY
    return calendar_days(
        room.to_rates(),
        room_repo.pricing_rules(room, first, end, channel),
        first,
        last,
        booking_repo.active_stays(room.id, first, end),
        room_repo.blocked_dates(room, first, end),
        channel,
    )


def _price_and_check(room: Room, dates: DateRange, channel, room_repo, booking_repo):
    rates = room.to_rates()
    rules = room_repo.pricing_rules(room, dates.start_date, dates.end_date, channel)

    pricing = resolve_pricing(rates, rules, dates.start_date, dates.end_date, channel)
    conflict = check_availability(
        rates,
        rules,
        dates.start_date,
        dates.end_date,
        booking_repo.active_stays(room.id, dates.start_date, dates.end_date),
        room_repo.blocked_dates(room, dates.start_date, dates.end_date),
    )
    return pricing, conflict


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    Strategy:
    1. Start database transaction (atomic)
    2. Lock the room row (SELECT FOR UPDATE); concurrent bookings of the
       same room queue here, other rooms are unaffected
    3. Resolve pricing and check availability against committed state
    4. Lock the year's reference row and take the next reference
    5. Insert the PENDING booking
    6. Commit, then publish events
    """

    def __init__(self, booking_repo: BookingRepository | None = None, room_repo: RoomRepository | None = None):
        self.booking_repo = booking_repo or BookingRepository()
        self.room_repo = room_repo or RoomRepository()

    def handle(self, command: CreateBookingCommand) -> Booking:
        """
        Handle booking creation

        Returns: Created Booking aggregate

        Raises:
            BookingValidationError: dates or room state make the request invalid
            BookingConflictError: the room is not bookable for the dates
            RoomNotFound: unknown room
        """
        channel = normalize_channel(command.channel)
        logger.info(
            f"Creating booking for room {command.room_id}, "
            f"dates {command.check_in} - {command.check_out}, channel {channel or 'website'}"
        )

        validate_stay_dates(command.check_in, command.check_out)
        dates = DateRange(command.check_in, command.check_out)

        with DjangoUnitOfWork() as uow:
            room = self.room_repo.get(command.room_id, uow=uow)
            if room.status != Room.Status.AVAILABLE:
                raise BookingValidationError(f"Room {room.id} is not available for booking ({room.status})")

            pricing, conflict = _price_and_check(room, dates, channel, self.room_repo, self.booking_repo)
            if conflict is not None:
                logger.warning(
                    f"Booking rejected for room {room.id} ({dates}): {conflict.reason.value}"
                )
                raise BookingConflictError(conflict)

            year = timezone.localdate().year
            self.booking_repo.lock_reference_year(year, uow)
            latest = self.booking_repo.latest_reference(year)
            reference_number = next_reference(year, [latest] if latest else [])

            booking = Booking.create(
                reference_number=reference_number,
                room_id=room.id,
                dates=dates,
                total_cost=pricing.total_cost,
                channel=channel,
                guest_name=command.guest_name,
                guest_email=command.guest_email,
                guest_contact=command.guest_contact,
            )

            self.booking_repo.save(booking)
            uow.collect_events(booking)

        logger.info(
            f"Booking created successfully: {booking.reference_number} "
            f"(ID: {booking.id}, total {booking.total_cost})"
        )

        return booking


class ConfirmBookingHandler:
    """Handler for confirming booking after payment"""

    def __init__(self, booking_repo: BookingRepository | None = None):
        self.booking_repo = booking_repo or BookingRepository()

    def handle(self, command: ConfirmBookingCommand) -> Booking:
        """Confirm booking"""
        logger.info(f"Confirming booking {command.booking_id}")

        with DjangoUnitOfWork() as uow:
            booking = self.booking_repo.get_by_id(command.booking_id, uow=uow)

            # PENDING -> CONFIRMED, raises InvalidBookingTransition otherwise
            booking.confirm()

            self.booking_repo.save(booking)
            uow.collect_events(booking)

        logger.info(f"Booking {booking.reference_number} confirmed successfully")
        return booking


class CancelBookingHandler:
    """Handler for cancelling booking"""

    def __init__(self, booking_repo: BookingRepository | None = None):
        self.booking_repo = booking_repo or BookingRepository()

    def handle(self, command: CancelBookingCommand) -> Booking:
        """Cancel booking; its dates are free again once this commits"""
        logger.info(f"Cancelling booking {command.booking_id}, reason: {command.reason}")

        with DjangoUnitOfWork() as uow:
            booking = self.booking_repo.get_by_id(command.booking_id, uow=uow)
            booking.cancel(command.reason)

            self.booking_repo.save(booking)
            uow.collect_events(booking)

        logger.info(f"Booking {booking.reference_number} cancelled successfully")
        return booking
