"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from uuid import UUID

from shared.domain.base import DomainEvent
from shared.domain.value_objects import Money, DateRange


@dataclass(kw_only=True)
class BookingCreated(DomainEvent):
    """
    Event: A new pending booking was created

    Triggers:
    - Guest confirmation and payment hand-off (outside this service)
    """
    booking_id: UUID
    room_id: UUID
    reference_number: str
    dates: DateRange
    total_cost: Money
    channel: str | None


@dataclass(kw_only=True)
class BookingConfirmed(DomainEvent):
    """Event: Payment captured (PENDING -> CONFIRMED)"""
    booking_id: UUID
    room_id: UUID
    reference_number: str
    dates: DateRange


@dataclass(kw_only=True)
class BookingCancelled(DomainEvent):
    """
    Event: Booking was cancelled

    The dates stop counting toward availability as soon as the
    cancelling transaction commits.
    """
    booking_id: UUID
    room_id: UUID
    reference_number: str
    reason: str
    old_status: str  # Status before cancellation
