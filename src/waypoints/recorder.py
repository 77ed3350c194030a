# path: src/waypoints/recorder.py
"""
RouteRecorder: sample the live position feed into a new WaypointPath.

Automatic sampling happens in update() and passes only when BOTH gates
pass:
    - time since the last sample >= min_sample_interval_s
    - 3D distance from the last sample >= min_sample_distance
      (skipped while the path is still empty)

start_recording() captures the start position immediately, and
stop_recording() always captures the end position, bypassing the gates.
Manual point-of-interest captures (vendor / repair / node) also bypass
both gates.

Driven by the same tick as the player and stuck monitor; not thread-safe.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event
from nav_core.nav.geometry import distance
from nav_core.snapshot import Position

from .files import WaypointFileManager
from .model import Waypoint, WaypointKind, WaypointPath


log = logging.getLogger(__name__)

_MODULE = "waypoints.recorder"


@dataclass
class RecorderConfig:
    """Sampling gates for automatic capture."""

    min_sample_distance: float = 5.0
    min_sample_interval_s: float = 1.0
    default_kind: WaypointKind = WaypointKind.NORMAL


class RouteRecorder:
    """
    Accumulates waypoints while recording is active.

    Public contract:
      start_recording(name, position) -> bool
      update(position)                       automatic, gated sampling
      record_current_position(...) -> bool   manual, ungated
      stop_recording(position) -> WaypointPath | None
    """

    def __init__(
        self,
        *,
        config: RecorderConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        bus: EventBus | None = None,
    ) -> None:
        self._cfg = config if config is not None else RecorderConfig()
        self._clock = clock
        self._bus = bus

        self._path = WaypointPath()
        self._recording = False
        self._last_position: Optional[Position] = None
        self._last_sample_at: float = self._clock()

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #

    @property
    def config(self) -> RecorderConfig:
        return self._cfg

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def recorded_count(self) -> int:
        return self._path.count

    @property
    def recording_name(self) -> Optional[str]:
        return self._path.name if self._recording else None

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def start_recording(
        self,
        name: Optional[str] = None,
        position: Optional[Position] = None,
    ) -> bool:
        """
        Begin a new recording; False if one is already in progress.

        The start position is captured immediately when available.
        """
        if self._recording:
            return False

        now = datetime.now(timezone.utc)
        self._path = WaypointPath(
            name=name if name is not None else now.strftime("Recording_%Y%m%d_%H%M%S"),
            created_at=now,
            last_modified=now,
        )
        self._recording = True
        self._last_position = None
        self._last_sample_at = self._clock()

        log.info("Recording started: %s", self._path.name)
        log_event(
            self._bus,
            module=_MODULE,
            event_type=EventType.RECORDING_STARTED,
            message=f"Recording {self._path.name}",
            payload={"name": self._path.name},
        )

        self._capture(position, self._cfg.default_kind, None)
        return True

    def stop_recording(self, position: Optional[Position] = None) -> Optional[WaypointPath]:
        """
        Stop and return an independent copy of the recorded path.

        The final position is captured unconditionally. Returns None when
        not recording.
        """
        if not self._recording:
            return None

        self._capture(position, self._cfg.default_kind, None)
        self._recording = False

        result = self._path.copy()
        result.last_modified = datetime.now(timezone.utc)

        self._path = WaypointPath()
        self._last_position = None

        log.info("Recording stopped: %s (%d waypoints)", result.name, result.count)
        log_event(
            self._bus,
            module=_MODULE,
            event_type=EventType.RECORDING_STOPPED,
            message=f"Recorded {result.count} waypoints",
            payload={"name": result.name, "count": result.count},
        )
        return result

    def stop_and_save(
        self,
        file_manager: WaypointFileManager,
        position: Optional[Position] = None,
    ) -> Optional[WaypointPath]:
        """Stop recording and save; None when not recording or the save failed."""
        path = self.stop_recording(position)
        if path is None:
            return None
        try:
            file_manager.save_path(path)
        except OSError:
            log.exception("Error saving waypoint path %r", path.name)
            return None
        return path

    def cancel_recording(self) -> None:
        """Drop the current recording without producing a path."""
        if not self._recording:
            return
        log.info("Recording cancelled: %s", self._path.name)
        self._recording = False
        self._path = WaypointPath()
        self._last_position = None

    # ------------------------------------------------------------------ #
    # Sampling
    # ------------------------------------------------------------------ #

    def update(self, position: Optional[Position]) -> bool:
        """Gated automatic sample; True when a waypoint was captured."""
        if not self._recording or position is None:
            return False

        if self._clock() - self._last_sample_at < self._cfg.min_sample_interval_s:
            return False

        if self._last_position is not None and self._path.has_waypoints:
            if distance(self._last_position, position) < self._cfg.min_sample_distance:
                return False

        return self._capture(position, self._cfg.default_kind, None)

    def record_current_position(
        self,
        position: Optional[Position],
        kind: Optional[WaypointKind] = None,
        name: Optional[str] = None,
    ) -> bool:
        """Manual capture bypassing both gates; False if not recording or no position."""
        if not self._recording:
            return False
        return self._capture(position, kind or self._cfg.default_kind, name)

    def record_vendor(self, position: Optional[Position], name: Optional[str] = None) -> bool:
        return self.record_current_position(position, WaypointKind.VENDOR, name or "Vendor")

    def record_repair(self, position: Optional[Position], name: Optional[str] = None) -> bool:
        return self.record_current_position(position, WaypointKind.REPAIR, name or "Repair")

    def record_node(self, position: Optional[Position], name: Optional[str] = None) -> bool:
        return self.record_current_position(position, WaypointKind.NODE, name or "Resource Node")

    def _capture(
        self,
        position: Optional[Position],
        kind: WaypointKind,
        name: Optional[str],
    ) -> bool:
        if position is None:
            return False

        wp = Waypoint(position=position, kind=kind, name=name)
        self._path.add_waypoint(wp)
        self._last_position = position
        self._last_sample_at = self._clock()

        index = self._path.count - 1
        log.debug("Recorded waypoint %d: %s", index, wp)
        log_event(
            self._bus,
            module=_MODULE,
            event_type=EventType.WAYPOINT_RECORDED,
            message=str(wp),
            payload={"index": index, "waypoint": wp.to_dict()},
        )
        return True


__all__ = ["RecorderConfig", "RouteRecorder"]
