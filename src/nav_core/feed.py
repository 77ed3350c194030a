# track the latest position feed reading and its freshness
# src/nav_core/feed.py
"""
Position feed adapter for nav_core.

Consumes raw, loosely-typed position updates from whatever reads the game
(IPC bridge, memory reader, test harness) and exposes the latest reading as
an Optional[FeedSnapshot].

Rules:
- Malformed fields are ignored; they never poison the last good reading.
- A reading older than `max_age_s` is reported as absent, because stale
  data must not be treated as "standing still".
- `mark_lost()` drops the reading outright (scene change, disconnect).
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Mapping, Optional

from .snapshot import FeedSnapshot, Position


log = logging.getLogger(__name__)


class PositionTracker:
    """
    Holds the most recent feed reading.

    Expected update fields (all optional):
        - "x", "y", "z": float
        - "yaw": float, degrees
        - "in_combat": bool
    """

    def __init__(
        self,
        *,
        max_age_s: Optional[float] = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_age_s = max_age_s
        self._clock = clock

        self._position: Optional[Position] = None
        self._yaw: float = 0.0
        self._in_combat: bool = False
        self._updated_at: Optional[float] = None

    # ------------------------------------------------------------------
    # Ingest
    # ------------------------------------------------------------------

    def handle_update(self, pkt: Mapping[str, Any]) -> None:
        """Merge a raw update into the tracked state."""
        base = self._position
        x = pkt.get("x", base.x if base else None)
        y = pkt.get("y", base.y if base else None)
        z = pkt.get("z", base.z if base else None)

        if x is not None and y is not None and z is not None:
            try:
                self._position = Position(float(x), float(y), float(z))
                self._updated_at = self._clock()
            except (TypeError, ValueError):
                log.debug("Ignoring malformed position update: %r", pkt)

        yaw = pkt.get("yaw")
        if yaw is not None:
            try:
                self._yaw = float(yaw) % 360.0
            except (TypeError, ValueError):
                pass

        if "in_combat" in pkt:
            self._in_combat = bool(pkt["in_combat"])

    def mark_lost(self) -> None:
        """Forget the current reading; current() returns None until the next update."""
        self._position = None
        self._updated_at = None
        self._in_combat = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def is_stale(self) -> bool:
        if self._updated_at is None:
            return True
        if self._max_age_s is None:
            return False
        return self._clock() - self._updated_at > self._max_age_s

    def current(self) -> Optional[FeedSnapshot]:
        """Latest fresh reading, or None when there is no authoritative data."""
        if self._position is None or self.is_stale:
            return None
        return FeedSnapshot(
            position=self._position,
            yaw_degrees=self._yaw,
            in_combat=self._in_combat,
        )

    @property
    def current_position(self) -> Optional[Position]:
        snap = self.current()
        return snap.position if snap is not None else None


__all__ = ["PositionTracker"]
