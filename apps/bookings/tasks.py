"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from uuid import UUID

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from apps.rooms.domain.pricing import resolve_pricing
from apps.rooms.repositories import RoomRepository

from .models import Booking

logger = logging.getLogger(__name__)


@shared_task(name="bookings.revalidate_pending_quotes")
def revalidate_pending_quotes(room_id: str) -> dict[str, int]:
    """
    Re-price the room's pending future bookings after its rate rules changed.

    Bookings keep the total they were quoted; a drift is only logged so the
    hotel can follow up with the guest.

    Returns:
        dict: {"checked": bookings re-priced, "drifted": totals that differ}
    """
    room_repo = RoomRepository()
    room = room_repo.get(UUID(str(room_id)))
    rates = room.to_rates()

    pending = Booking.objects.filter(
        room=room,
        status=Booking.Status.PENDING,
        check_in_date__gte=timezone.localdate(),
    ).order_by("check_in_date")

    checked = drifted = 0
    for booking in pending:
        rules = room_repo.pricing_rules(room, booking.check_in_date, booking.check_out_date, booking.channel)
        current = resolve_pricing(rates, rules, booking.check_in_date, booking.check_out_date, booking.channel)
        checked += 1
        if current.total_cost.amount != booking.total_cost:
            drifted += 1
            logger.warning(
                f"Booking {booking.reference_number} quoted {booking.total_cost} {booking.currency}, "
                f"current rules price it at {current.total_cost}"
            )

    if checked:
        logger.info(f"Re-validated {checked} pending bookings for room {room.id}, {drifted} drifted")

    return {"checked": checked, "drifted": drifted}
