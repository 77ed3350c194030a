# path: src/monitoring/events.py
"""
Event schemas for the navigation monitoring layer.

This module defines:
- EventType enum
- MonitoringEvent (structured runtime events)

Every observer notification raised by the stuck monitor, route player,
route recorder and discovery store is a MonitoringEvent published on a
monitoring.bus.EventBus. Events are JSON-serializable via `.to_dict()` and
can be persisted with monitoring.logger.JsonFileLogger.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum, auto
from typing import Any, Dict, Optional


# ============================================================
# Event Types
# ============================================================

class EventType(Enum):
    """Typed monitoring events emitted by the navigation core."""

    # Stuck monitor
    STUCK_STATE_CHANGED = auto()   # payload: {"is_stuck": bool}
    MOVEMENT_STUCK = auto()        # recovery attempts exhausted

    # Route playback
    PLAYBACK_STARTED = auto()
    WAYPOINT_REACHED = auto()
    PATH_COMPLETED = auto()
    PLAYBACK_ABORTED = auto()

    # Route recording
    RECORDING_STARTED = auto()
    WAYPOINT_RECORDED = auto()
    RECORDING_STOPPED = auto()

    # Discovery store
    NODE_DISCOVERED = auto()
    NPC_DISCOVERED = auto()
    MOB_SPAWN_DISCOVERED = auto()

    # Generic log messages
    LOG = auto()


# ============================================================
# Monitoring Event Structure
# ============================================================

@dataclass
class MonitoringEvent:
    """
    Runtime event emitted by a navigation component.

    All fields must be JSON-safe.
    """

    ts: float                   # UNIX timestamp (seconds)
    module: str                 # Source module string ("waypoints.player", ...)
    event_type: EventType       # Enum describing the event class
    message: str                # Short human-readable description
    payload: Dict[str, Any]     # Structured data (waypoint, record, state)
    correlation_id: Optional[str] = None  # Groups events per route / session

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dict for loggers."""
        data = asdict(self)
        data["event_type"] = self.event_type.name  # store name, not enum
        return data
