"""
Room Domain Events

Published after the rate-rule authoring transaction commits.
"""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class RateRuleChanged(DomainEvent):
    """
    Event: A rate rule was created, updated or deleted

    Triggers:
    - Re-validation of pending quotes on the room
    """
    room_id: UUID
    rule_id: UUID
    change: str  # created / updated / deleted
    start_date: date
    end_date: date
