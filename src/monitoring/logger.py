# JSON logger subscribing to EventBus
"""
Structured logging for the navigation monitoring layer.

Provides:
- JsonFileLogger: subscribes to an EventBus and writes MonitoringEvents as JSONL.
- log_event: convenience helper for publishing MonitoringEvents via the EventBus.

Usage patterns:

    from pathlib import Path
    from monitoring.bus import EventBus
    from monitoring.logger import JsonFileLogger, log_event
    from monitoring.events import EventType

    bus = EventBus()
    logger = JsonFileLogger(Path("logs/navigation/events.log"), bus)

    log_event(
        bus=bus,
        module="waypoints.player",
        event_type=EventType.WAYPOINT_REACHED,
        message="Reached waypoint 3",
        payload={"index": 3},
    )
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional

from .bus import EventBus
from .events import EventType, MonitoringEvent


log = logging.getLogger(__name__)


# ============================================================
# JSONL File Logger
# ============================================================

class JsonFileLogger:
    """
    JSON-lines logger for MonitoringEvent instances.

    - Subscribes to an EventBus and writes one JSON object per line.
    - Ensures UTF-8 encoding.
    - Ensures parent directory exists.
    """

    def __init__(self, path: Path, bus: EventBus) -> None:
        self._path = path
        self._bus = bus
        path.parent.mkdir(parents=True, exist_ok=True)
        self._file = path.open("a", encoding="utf-8")
        bus.subscribe(self._on_event)

    def _on_event(self, event: MonitoringEvent) -> None:
        """
        Callback invoked for each MonitoringEvent published on the EventBus.
        Writes the event as a JSON object to the log file.
        """
        line = json.dumps(event.to_dict(), ensure_ascii=False)
        try:
            self._file.write(line + "\n")
            self._file.flush()
        except (OSError, ValueError):
            # Logging must not crash the process (disk full, closed handle).
            log.warning("Dropped monitoring event %s for %s", event.event_type.name, self._path)

    def close(self) -> None:
        """
        Unsubscribe and close the underlying file handle.

        Should be called at graceful shutdown.
        """
        self._bus.unsubscribe(self._on_event)
        self._file.close()


# ============================================================
# Convenience helper for emitting events
# ============================================================

def log_event(
    bus: Optional[EventBus],
    module: str,
    event_type: EventType,
    message: str,
    payload: Optional[Dict[str, Any]] = None,
    correlation_id: Optional[str] = None,
) -> None:
    """
    Create and publish a MonitoringEvent.

    Components hold an optional bus; when it is None this is a no-op so
    callers never have to branch on whether monitoring is wired up.

    Parameters
    ----------
    bus:
        EventBus instance to publish the event to, or None.
    module:
        String identifying the source module ("nav_core.stuck", "mapping.store").
    event_type:
        EventType enum member describing what kind of event this is.
    message:
        Short human-readable description.
    payload:
        Structured JSON-safe data attached to this event.
    correlation_id:
        Optional ID linking related events (per-route, per-recording, etc.).
    """
    if bus is None:
        return

    event = MonitoringEvent(
        ts=time.time(),
        module=module,
        event_type=event_type,
        message=message,
        payload=payload or {},
        correlation_id=correlation_id,
    )
    bus.publish(event)
