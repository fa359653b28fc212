"""
Unit of Work Pattern

Manages transactions and guarantees that domain events are published
only after a successful commit.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
import logging

from django.db import transaction

from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):
    """
    Abstract Unit of Work

    Subclasses attach their repositories in __init__ and decide how a
    commit is made durable.
    """

    def __init__(self, message_bus: Optional[MessageBus] = None):
        self._message_bus = message_bus
        self._events: List[DomainEvent] = []

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

    def rollback(self):
        """Discard collected events"""
        if self._events:
            logger.warning(f"Rolling back transaction, discarding {len(self._events)} events")
        self._events.clear()

    def collect_events(self, aggregate):
        """
        Collect events from aggregate root

        Moves the aggregate's pending events into the unit of work so
        they are emitted exactly once.
        """
        new_events = aggregate.events
        if new_events:
            self._events.extend(new_events)
            aggregate.clear_events()
            logger.debug(
                f"Collected {len(new_events)} events from "
                f"{aggregate.__class__.__name__} (ID: {aggregate.id})"
            )

    def _drain_events(self) -> List[DomainEvent]:
        events = self._events.copy()
        self._events.clear()
        return events

    def _publish_events(self, events: List[DomainEvent]):
        if not events or self._message_bus is None:
            return
        logger.info(f"Publishing {len(events)} domain events after commit")
        self._message_bus.publish_events(events)


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Django implementation of Unit of Work

    Wraps the block in transaction.atomic() and schedules event
    publishing with transaction.on_commit().

    Usage:
        with uow:
            booking = uow.bookings.get(booking_id)
            ...
            uow.collect_events(booking)
        # events are published after the outermost commit
    """

    def __init__(self, message_bus: Optional[MessageBus] = None):
        super().__init__(message_bus)
        self._transaction = None

    def __enter__(self):
        self._transaction = transaction.atomic()
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            super().__exit__(exc_type, exc_val, exc_tb)
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)
                self._transaction = None

    def commit(self):
        events = self._drain_events()
        logger.debug(f"Committing transaction with {len(events)} events")
        if events:
            transaction.on_commit(lambda: self._publish_events(events))


class InMemoryUnitOfWork(AbstractUnitOfWork):
    """
    Unit of Work for single-process deployments and tests

    Writes go straight to the in-memory repositories, so commit only has
    to publish the collected events.
    """

    def commit(self):
        self._publish_events(self._drain_events())
