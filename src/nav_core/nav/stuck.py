# stuck detection + escalating recovery maneuvers
# src/nav_core/nav/stuck.py
"""
Stuck monitor for nav_core.

Samples position deltas on a fixed interval and declares the agent stuck
when it stops making horizontal progress. While stuck, every performed check
triggers one recovery maneuver, escalating by attempt ordinal:

    attempt 1   -> hop
    attempt 2   -> strafe left or right (single coin flip)
    attempt 3   -> step backward + hop
    attempt >=4 -> small right turn + hop

After `max_unstuck_attempts` maneuvers, the next stuck check publishes a
single MOVEMENT_STUCK event and recovery stops until progress resumes or
the monitor is reset. A missing position never counts as "no progress".

Not thread-safe: the caller serialises ticks.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional

from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event

from ..input import MovementInput
from ..snapshot import Position
from .geometry import horizontal_distance


log = logging.getLogger(__name__)

_MODULE = "nav_core.stuck"


@dataclass
class StuckMonitorConfig:
    """Tuning knobs for stuck detection and recovery."""

    # Minimum spacing between two performed checks.
    check_interval_s: float = 2.0

    # Horizontal movement between checks below this counts as no progress.
    progress_threshold: float = 0.5

    # Recovery maneuvers before giving up and reporting MOVEMENT_STUCK.
    max_unstuck_attempts: int = 3

    # Hold durations for the timed maneuvers.
    strafe_duration_s: float = 0.5
    backup_duration_s: float = 0.5
    turn_duration_s: float = 0.3


class StuckMonitor:
    """
    Two-state (Moving / Stuck) monitor with an attempt counter.

    Public contract:
      check(position) -> bool   True while a recovery maneuver owns movement
      reset()                   forget everything (new route / new target)
    """

    def __init__(
        self,
        movement: MovementInput,
        *,
        config: StuckMonitorConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
        bus: EventBus | None = None,
    ) -> None:
        self._movement = movement
        self._cfg = config if config is not None else StuckMonitorConfig()
        self._clock = clock
        self._rng = rng if rng is not None else random.Random()
        self._bus = bus

        self._is_stuck = False
        self._attempts = 0
        self._exhausted = False
        self._last_position: Optional[Position] = None
        self._last_checked_at = self._clock()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def config(self) -> StuckMonitorConfig:
        return self._cfg

    @property
    def is_stuck(self) -> bool:
        return self._is_stuck

    @property
    def unstuck_attempts(self) -> int:
        return self._attempts

    @property
    def exhausted(self) -> bool:
        """True once recovery gave up; cleared by progress or reset()."""
        return self._exhausted

    @property
    def recovering(self) -> bool:
        """Stuck and still allowed to attempt recovery."""
        return self._is_stuck and not self._exhausted

    @property
    def last_checked_position(self) -> Optional[Position]:
        return self._last_position

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def check(self, position: Optional[Position]) -> bool:
        """
        Run one stuck-detection tick.

        Returns True when the agent is stuck and a recovery maneuver is in
        charge of movement this tick, False otherwise.
        """
        if position is None:
            # No authoritative data: skip the check entirely.
            return False

        now = self._clock()

        if self._last_position is None:
            # Nothing to compare against yet.
            self._last_position = position
            self._last_checked_at = now
            return False

        if now - self._last_checked_at < self._cfg.check_interval_s:
            return self._is_stuck

        moved = horizontal_distance(self._last_position, position)
        self._last_position = position
        self._last_checked_at = now

        if moved < self._cfg.progress_threshold:
            if not self._is_stuck:
                self._is_stuck = True
                self._attempts = 0
                self._exhausted = False
                log.info("Stuck detected at %s (moved %.2f)", position, moved)
                self._publish_state_changed()
            return self._attempt_recovery()

        if self._is_stuck:
            log.info("Unstuck after %d attempt(s); moved %.2f", self._attempts, moved)
            self._is_stuck = False
            self._attempts = 0
            self._exhausted = False
            self._publish_state_changed()

        return False

    def reset(self) -> None:
        """
        Clear all detection state.

        Call whenever a new route or target begins so stale deltas from the
        previous destination never count as "no progress".
        """
        self._is_stuck = False
        self._attempts = 0
        self._exhausted = False
        self._last_position = None
        self._last_checked_at = self._clock()

    reset_stuck_detection = reset

    # ------------------------------------------------------------------
    # Recovery
    # ------------------------------------------------------------------

    def _attempt_recovery(self) -> bool:
        if self._exhausted:
            return False

        if self._attempts >= self._cfg.max_unstuck_attempts:
            self._exhausted = True
            log.warning(
                "Movement stuck: %d recovery attempts exhausted", self._attempts
            )
            log_event(
                self._bus,
                module=_MODULE,
                event_type=EventType.MOVEMENT_STUCK,
                message="Recovery attempts exhausted",
                payload={
                    "attempts": self._attempts,
                    "position": self._last_position.to_dict() if self._last_position else None,
                },
            )
            return False

        self._attempts += 1
        self._perform_maneuver(self._attempts)
        return True

    def _perform_maneuver(self, attempt: int) -> None:
        cfg = self._cfg
        movement = self._movement

        if attempt == 1:
            log.debug("Unstuck attempt 1: jump")
            movement.jump()
        elif attempt == 2:
            if self._rng.random() < 0.5:
                log.debug("Unstuck attempt 2: strafe left")
                movement.strafe_left(cfg.strafe_duration_s)
            else:
                log.debug("Unstuck attempt 2: strafe right")
                movement.strafe_right(cfg.strafe_duration_s)
        elif attempt == 3:
            log.debug("Unstuck attempt 3: back up + jump")
            movement.move_backward(cfg.backup_duration_s)
            movement.jump()
        else:
            log.debug("Unstuck attempt %d: turn + jump", attempt)
            movement.turn_right(cfg.turn_duration_s)
            movement.jump()

    def _publish_state_changed(self) -> None:
        log_event(
            self._bus,
            module=_MODULE,
            event_type=EventType.STUCK_STATE_CHANGED,
            message="Stuck" if self._is_stuck else "Moving",
            payload={"is_stuck": self._is_stuck},
        )


__all__ = ["StuckMonitor", "StuckMonitorConfig"]
