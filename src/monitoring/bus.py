# EventBus for navigation monitoring events
"""
Event bus for the navigation monitoring layer.

Provides a minimal, thread-safe, in-process pub/sub mechanism:

- Subscribers receive MonitoringEvent objects.
- Used by:
    - StuckMonitor / RoutePlayer / RouteRecorder notifications
    - MapDataStore discovery notifications
    - File-based logger
    - Tests and dev tools
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Callable, List

from .events import EventType, MonitoringEvent


log = logging.getLogger(__name__)


# ============================================================
# Type aliases
# ============================================================

SubscriberFn = Callable[[MonitoringEvent], None]


# ============================================================
# Event Bus
# ============================================================

class EventBus:
    """
    Simple in-process event bus for monitoring events.

    Design goals:
    - Minimal: no external dependencies or IPC.
    - Thread-safe: subscribers list protected by a Lock.
    - Non-blocking-ish: each publish iterates over a snapshot of subscribers.
    """

    def __init__(self) -> None:
        # Registered monitoring event subscribers
        self._subscribers: List[SubscriberFn] = []
        self._lock = Lock()

    # --------------------------------------------------------
    # Subscription API
    # --------------------------------------------------------

    def subscribe(self, fn: SubscriberFn) -> None:
        """Register a subscriber to receive MonitoringEvent instances."""
        with self._lock:
            self._subscribers.append(fn)

    def unsubscribe(self, fn: SubscriberFn) -> None:
        """
        Remove a previously registered subscriber.

        Safe to call even if `fn` is not present.
        """
        with self._lock:
            if fn in self._subscribers:
                self._subscribers.remove(fn)

    def subscribe_type(self, event_type: EventType, fn: SubscriberFn) -> SubscriberFn:
        """
        Register `fn` for a single EventType.

        Returns the wrapper actually subscribed so callers can unsubscribe it.
        """

        def _filtered(event: MonitoringEvent) -> None:
            if event.event_type is event_type:
                fn(event)

        self.subscribe(_filtered)
        return _filtered

    # --------------------------------------------------------
    # Publish API
    # --------------------------------------------------------

    def publish(self, event: MonitoringEvent) -> None:
        """
        Publish a MonitoringEvent to all subscribers.

        Takes a snapshot of subscribers under the lock, then iterates without
        holding the lock to avoid deadlocks if subscribers call back into the bus.
        """
        with self._lock:
            subscribers = list(self._subscribers)

        for fn in subscribers:
            try:
                fn(event)
            except Exception:
                # One bad subscriber must not kill the event stream.
                log.exception(
                    "EventBus subscriber %r failed on %s", fn, event.event_type.name
                )

    # --------------------------------------------------------
    # Utility
    # --------------------------------------------------------

    def clear(self) -> None:
        """
        Clear all subscribers.

        Mostly useful for tests; probably not what you want in production.
        """
        with self._lock:
            self._subscribers.clear()
