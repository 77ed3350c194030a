# path: src/waypoints/player.py
"""
RoutePlayer: follow a WaypointPath tick by tick.

State machine:

    IDLE --play--> PLAYING <--> WAITING (dwelling at a delay waypoint)
                      |
                      +--> COMPLETED   (end reached, no loop / reverse)
                      +--> STOPPED     (stop(), or stuck recovery gave up)
                      +--> PAUSED      (pause(); resume() continues)

Traversal position is a (logical index, reversed) pair. The logical index
counts steps in the current direction; physical_index() maps it onto the
waypoint list. advance_index() holds the whole loop / reverse-at-end /
completion rule so it can be tested in isolation.

Driven by the same tick as the recorder and stuck monitor; not thread-safe.
The player never mutates the path it is traversing.
"""

from __future__ import annotations

import logging
import math
import time
from enum import Enum
from typing import Callable, Optional, Tuple

from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event
from nav_core.nav.geometry import distance
from nav_core.nav.mover import Navigator
from nav_core.nav.stuck import StuckMonitor
from nav_core.snapshot import FeedSnapshot, Position

from .model import Waypoint, WaypointPath


log = logging.getLogger(__name__)

_MODULE = "waypoints.player"


class RouteState(Enum):
    IDLE = "idle"
    PLAYING = "playing"
    WAITING = "waiting"
    PAUSED = "paused"
    STOPPED = "stopped"
    COMPLETED = "completed"


# ============================================================
# Index arithmetic
# ============================================================

def physical_index(logical: int, reversed_: bool, count: int) -> int:
    """Map a logical step index onto the waypoint list."""
    return count - 1 - logical if reversed_ else logical


def advance_index(
    logical: int,
    reversed_: bool,
    count: int,
    loop: bool,
    reverse_at_end: bool,
) -> Tuple[int, bool, bool]:
    """
    Step once in the current direction.

    Returns (logical, reversed, completed). On overflow past the end of the
    current direction:
      - loop: wrap to logical 0, direction unchanged
      - reverse_at_end: flip direction and continue at logical 1, so the
        endpoint that was just reached is not visited twice in a row
      - otherwise: completed, logical index left on the final waypoint
    """
    nxt = logical + 1
    if nxt < count:
        return nxt, reversed_, False

    if loop:
        return 0, reversed_, False

    if reverse_at_end:
        return min(1, count - 1), not reversed_, False

    return logical, reversed_, True


# ============================================================
# Player
# ============================================================

class RoutePlayer:
    """
    Moves the agent along a path using a Navigator, deferring to a
    StuckMonitor whenever recovery is in progress.

    `override_loop`, when not None, replaces the path's own `loop` flag.
    With `abort_on_stuck`, exhausted stuck recovery stops playback and
    publishes PLAYBACK_ABORTED so a supervisor can intervene.
    """

    def __init__(
        self,
        navigator: Navigator,
        stuck_monitor: StuckMonitor,
        *,
        bus: EventBus | None = None,
        clock: Callable[[], float] = time.monotonic,
        override_loop: Optional[bool] = None,
        abort_on_stuck: bool = True,
    ) -> None:
        self._nav = navigator
        self._stuck = stuck_monitor
        self._bus = bus
        self._clock = clock
        self.override_loop = override_loop
        self.abort_on_stuck = abort_on_stuck

        self._path: Optional[WaypointPath] = None
        self._state = RouteState.IDLE
        self._logical = 0
        self._reversed = False
        self._waiting = False
        self._delay_started_at = 0.0

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> RouteState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state in (RouteState.PLAYING, RouteState.WAITING)

    @property
    def current_path(self) -> Optional[WaypointPath]:
        return self._path

    @property
    def logical_index(self) -> int:
        return self._logical

    @property
    def is_reversed(self) -> bool:
        return self._reversed

    @property
    def waiting_for_delay(self) -> bool:
        return self._waiting

    @property
    def current_physical_index(self) -> Optional[int]:
        if self._path is None or not self._path.waypoints:
            return None
        idx = physical_index(self._logical, self._reversed, self._path.count)
        if 0 <= idx < self._path.count:
            return idx
        return None

    @property
    def current_waypoint(self) -> Optional[Waypoint]:
        idx = self.current_physical_index
        if idx is None:
            return None
        return self._path.waypoints[idx]  # type: ignore[union-attr]

    # ------------------------------------------------------------------ #
    # Playback control
    # ------------------------------------------------------------------ #

    def play(
        self,
        path: Optional[WaypointPath] = None,
        position: Optional[Position] = None,
    ) -> bool:
        """
        Start `path` from the waypoint nearest `position`.

        With no path, behaves as resume(). An empty path is rejected and
        leaves the player untouched.
        """
        if path is None:
            return self.resume()

        if not path.waypoints:
            log.warning("Refusing to play empty path %r", path.name)
            return False

        self._path = path
        self._reversed = False
        self._waiting = False
        self._logical = self._nearest_index(path, position)
        self._state = RouteState.PLAYING
        self._stuck.reset()

        log.info("Playing path %r from waypoint %d", path.name, self._logical)
        self._publish(
            EventType.PLAYBACK_STARTED,
            f"Playing {path.name}",
            {"start_index": self._logical},
        )
        return True

    def resume(self) -> bool:
        """Continue a paused or stopped path from where it left off."""
        if self._path is None:
            return False
        if self.is_playing:
            return True
        if self._state not in (RouteState.PAUSED, RouteState.STOPPED):
            return False

        self._state = RouteState.WAITING if self._waiting else RouteState.PLAYING
        self._stuck.reset()
        log.info("Resumed path %r at waypoint %d", self._path.name, self._logical)
        return True

    def pause(self) -> None:
        if not self.is_playing:
            return
        self._state = RouteState.PAUSED
        self._nav.stop_movement()

    def stop(self) -> None:
        self._waiting = False
        if self._path is not None:
            self._state = RouteState.STOPPED
        self._nav.stop_movement()

    # ------------------------------------------------------------------ #
    # Manual index edits (no loop / reverse semantics)
    # ------------------------------------------------------------------ #

    def jump_to(self, index: int) -> bool:
        if self._path is None or index < 0 or index >= self._path.count:
            return False
        self._set_logical(index)
        return True

    def skip_next(self) -> bool:
        if self._path is None:
            return False
        self._set_logical(min(self._logical + 1, self._path.count - 1))
        return True

    def skip_previous(self) -> bool:
        if self._path is None:
            return False
        self._set_logical(max(self._logical - 1, 0))
        return True

    def _set_logical(self, index: int) -> None:
        self._logical = index
        if self._waiting:
            self._waiting = False
            if self._state is RouteState.WAITING:
                self._state = RouteState.PLAYING

    # ------------------------------------------------------------------ #
    # Tick
    # ------------------------------------------------------------------ #

    def update(self, snapshot: Optional[FeedSnapshot]) -> None:
        """Advance playback by one tick."""
        if not self.is_playing or self._path is None:
            return

        position = snapshot.position if snapshot is not None else None
        in_combat = snapshot.in_combat if snapshot is not None else False

        # Recovery owns the movement keys while it runs.
        if self._stuck.check(position):
            return

        if self._stuck.exhausted and self.abort_on_stuck:
            self._abort("stuck recovery exhausted")
            return

        if self._waiting:
            if in_combat:
                log.info("Combat while waiting at waypoint %d; moving on", self._logical)
                self._finish_wait()
                return

            wp = self.current_waypoint
            delay = wp.delay if wp is not None else 0.0
            if self._clock() - self._delay_started_at >= delay:
                self._finish_wait()
            return

        wp = self.current_waypoint
        if wp is None:
            self._advance()
            return

        if position is None:
            return

        if self._nav.has_reached(wp.position, position):
            log.debug("Reached waypoint %d: %s", self._logical, wp)
            self._publish(
                EventType.WAYPOINT_REACHED,
                str(wp),
                {
                    "logical_index": self._logical,
                    "physical_index": self.current_physical_index,
                    "waypoint": wp.to_dict(),
                },
            )

            if wp.delay > 0:
                self._waiting = True
                self._state = RouteState.WAITING
                self._delay_started_at = self._clock()
                self._nav.stop_movement()
                return

            self._advance()
        else:
            self._nav.move_to(wp.position, position)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _finish_wait(self) -> None:
        self._waiting = False
        self._state = RouteState.PLAYING
        self._advance()

    def _advance(self) -> None:
        path = self._path
        if path is None:
            return

        loop = self.override_loop if self.override_loop is not None else path.loop
        logical, reversed_, completed = advance_index(
            self._logical, self._reversed, path.count, loop, path.reverse_at_end
        )
        self._logical, self._reversed = logical, reversed_

        if completed:
            self._complete()

    def _complete(self) -> None:
        self._state = RouteState.COMPLETED
        self._waiting = False
        self._nav.stop_movement()
        log.info("Path %r completed", self._path.name if self._path else None)
        self._publish(EventType.PATH_COMPLETED, "Path completed", {})

    def _abort(self, reason: str) -> None:
        self._state = RouteState.STOPPED
        self._waiting = False
        self._nav.stop_movement()
        log.warning("Playback aborted at waypoint %d: %s", self._logical, reason)
        self._publish(
            EventType.PLAYBACK_ABORTED,
            f"Playback aborted: {reason}",
            {"logical_index": self._logical, "reason": reason},
        )

    @staticmethod
    def _nearest_index(path: WaypointPath, position: Optional[Position]) -> int:
        if position is None:
            return 0
        nearest, best = 0, math.inf
        for i, wp in enumerate(path.waypoints):
            d = distance(position, wp.position)
            if d < best:
                nearest, best = i, d
        return nearest

    def _publish(self, event_type: EventType, message: str, payload: dict) -> None:
        payload = dict(payload)
        if self._path is not None:
            payload.setdefault("path", self._path.name)
        log_event(
            self._bus,
            module=_MODULE,
            event_type=event_type,
            message=message,
            payload=payload,
        )


__all__ = ["RoutePlayer", "RouteState", "advance_index", "physical_index"]
