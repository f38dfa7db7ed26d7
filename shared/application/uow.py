"""
Unit of Work Pattern

Wraps a database transaction around a check-then-write sequence, hands out
row locks for the consistency boundary (a room, a reference year) and
publishes collected domain events only after the transaction commits.
"""

from abc import ABC, abstractmethod
from typing import List
import logging

from django.db import transaction
from django.db.utils import NotSupportedError

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):
    """Abstract Unit of Work pattern"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self):
        """Commit the transaction"""

    @abstractmethod
    def rollback(self):
        """Rollback the transaction"""

    @abstractmethod
    def lock(self, queryset, of=()):
        """Return queryset whose rows stay locked until the unit of work ends"""

    @abstractmethod
    def collect_events(self, aggregate):
        """Collect events from aggregate root"""


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Django implementation of Unit of Work

    Usage:
        with DjangoUnitOfWork() as uow:
            room = uow.lock(Room.objects.filter(pk=room_id)).get()

            # read state, run the pure checks, write

            uow.collect_events(booking)
        # Events are published after commit
    """

    def __init__(self):
        self._events: List[DomainEvent] = []
        self._transaction = None

    def __enter__(self):
        """Start database transaction"""
        self._transaction = transaction.atomic()
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Complete or rollback transaction"""
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)

    def lock(self, queryset, of=()):
        """
        Apply SELECT ... FOR UPDATE to queryset

        of names the tables to lock when the query joins others, e.g.
        ("self",) with select_related; backends without FOR UPDATE OF lock
        every joined row. Backends without row locking (SQLite) serialise
        writers on the database file instead, so the plain queryset is
        returned there.
        """
        features = transaction.get_connection().features
        if not features.has_select_for_update:
            return queryset
        try:
            if of and features.has_select_for_update_of:
                return queryset.select_for_update(of=of)
            return queryset.select_for_update()
        except NotSupportedError:
            return queryset

    def commit(self):
        """
        Schedule event publishing

        Events go out through transaction.on_commit() so nothing is
        published for a transaction that later fails.
        """
        logger.debug(f"Committing transaction with {len(self._events)} events")

        events = self._events.copy()
        self._events.clear()

        if events:
            transaction.on_commit(lambda: self._publish_events(events))

    def rollback(self):
        """Rollback changes and discard events"""
        logger.warning(f"Rolling back transaction, discarding {len(self._events)} events")
        self._events.clear()

    def collect_events(self, aggregate):
        """Extract and clear domain events from an aggregate root"""
        if hasattr(aggregate, 'events'):
            new_events = aggregate.events
            if new_events:
                self._events.extend(new_events)
                aggregate.clear_events()
                logger.debug(
                    f"Collected {len(new_events)} events from "
                    f"{aggregate.__class__.__name__} (ID: {aggregate.id})"
                )

    def add_event(self, event: DomainEvent):
        """Queue an event that is not owned by an aggregate"""
        self._events.append(event)

    def _publish_events(self, events: List[DomainEvent]):
        """Publish collected events to the message bus after commit"""
        from shared.application.message_bus import message_bus

        logger.info(f"Publishing {len(events)} domain events after commit")

        try:
            message_bus.publish_events(events)
        except Exception as e:
            # The transaction is already committed at this point
            logger.error(f"Error publishing events: {e}", exc_info=True)
