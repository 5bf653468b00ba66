"""
Event dispatcher for the DApp Registry.

Delivers registry events synchronously to in-process subscribers and
keeps a bounded history for later inspection.
"""

import logging
import threading
import uuid
from collections import deque
from dataclasses import dataclass, field
from typing import Callable

from dapp_registry.events.models import RegistryEvent, RegistryEventType

logger = logging.getLogger(__name__)

EventHandler = Callable[[RegistryEvent], None]


@dataclass
class Subscription:
    """A registered event handler."""

    subscription_id: str
    handler: EventHandler
    event_types: frozenset[RegistryEventType] = field(default_factory=frozenset)

    def accepts(self, event: RegistryEvent) -> bool:
        """Return True if this subscription wants the event."""
        return not self.event_types or event.event_type in self.event_types


@dataclass
class DispatcherStats:
    """Counters for dispatched events."""

    total_emitted: int = 0
    total_delivered: int = 0
    total_failed: int = 0


class EventDispatcher:
    """
    Synchronous fan-out of registry events.

    Handler failures are logged and counted; they never propagate to the
    code that emitted the event.
    """

    DEFAULT_HISTORY_SIZE = 1000

    def __init__(self, history_size: int = DEFAULT_HISTORY_SIZE):
        """Initialize dispatcher with a bounded event history."""
        self._lock = threading.RLock()
        self._subscriptions: dict[str, Subscription] = {}
        self._history: deque[RegistryEvent] = deque(maxlen=history_size)
        self._stats = DispatcherStats()

    @property
    def stats(self) -> DispatcherStats:
        """Get dispatcher statistics."""
        with self._lock:
            return DispatcherStats(
                total_emitted=self._stats.total_emitted,
                total_delivered=self._stats.total_delivered,
                total_failed=self._stats.total_failed,
            )

    def subscribe(
        self,
        handler: EventHandler,
        event_types: list[RegistryEventType] | None = None,
    ) -> str:
        """
        Register a handler.

        Args:
            handler: Callable invoked with each matching event
            event_types: Restrict delivery to these types (all when omitted)

        Returns:
            Subscription ID usable with unsubscribe()
        """
        subscription_id = f"sub_{uuid.uuid4().hex[:8]}"
        with self._lock:
            self._subscriptions[subscription_id] = Subscription(
                subscription_id=subscription_id,
                handler=handler,
                event_types=frozenset(event_types or ()),
            )
        return subscription_id

    def unsubscribe(self, subscription_id: str) -> bool:
        """Remove a handler. Returns False if it was not registered."""
        with self._lock:
            return self._subscriptions.pop(subscription_id, None) is not None

    def emit(self, event: RegistryEvent) -> None:
        """Record the event and deliver it to matching subscribers."""
        with self._lock:
            self._history.append(event)
            self._stats.total_emitted += 1
            subscriptions = list(self._subscriptions.values())

        for subscription in subscriptions:
            if not subscription.accepts(event):
                continue
            try:
                subscription.handler(event)
            except Exception as e:
                logger.warning(
                    "Event handler %s failed for %s: %s",
                    subscription.subscription_id,
                    event.event_id,
                    e,
                )
                with self._lock:
                    self._stats.total_failed += 1
            else:
                with self._lock:
                    self._stats.total_delivered += 1

    def history(
        self,
        record_id: int | None = None,
        event_type: RegistryEventType | None = None,
        limit: int | None = None,
    ) -> list[RegistryEvent]:
        """
        Return emitted events, oldest first.

        Args:
            record_id: Only events for this record
            event_type: Only events of this type
            limit: Keep only the most recent N matches
        """
        with self._lock:
            events = list(self._history)

        if record_id is not None:
            events = [e for e in events if e.record_id == record_id]
        if event_type is not None:
            events = [e for e in events if e.event_type == event_type]
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events

    def clear_history(self) -> None:
        """Drop all retained events."""
        with self._lock:
            self._history.clear()
