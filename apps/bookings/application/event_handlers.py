"""
Booking Event Handlers

Subscribed to the message bus in BookingsConfig.ready(); they run after the
producing transaction has committed.
"""

import logging

from shared.application.message_bus import message_bus
from apps.bookings.domain.events import BookingCancelled, BookingConfirmed, BookingCreated
from apps.rooms.domain.events import RateRuleChanged

logger = logging.getLogger(__name__)


@message_bus.subscribe(RateRuleChanged)
def schedule_quote_revalidation(event: RateRuleChanged):
    """Re-price pending bookings of the room whose rules changed"""
    from apps.bookings.tasks import revalidate_pending_quotes

    logger.info(
        f"Rate rule {event.rule_id} {event.change} on room {event.room_id}, "
        f"scheduling quote re-validation"
    )
    revalidate_pending_quotes.delay(str(event.room_id))


@message_bus.subscribe(BookingCreated, BookingConfirmed, BookingCancelled)
def log_booking_lifecycle(event):
    logger.info(
        f"{type(event).__name__}: {event.reference_number} on room {event.room_id}",
        extra={"booking_event": event.to_dict()},
    )
