# convert targets into directional movement commands
# src/nav_core/nav/mover.py
"""
Navigator: direct-line approach toward a target position.

Owns:
- target → direction → key presses (diagonals as two primitives)
- arrival tests against the stopping distance
- turning to face a target

It does NOT plan around obstacles and does NOT detect stuck states; route
following composes it with StuckMonitor. Every method takes the current
position explicitly and degrades to False / +inf when it is absent.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from ..input import MovementInput
from ..snapshot import Position
from .geometry import (
    Direction,
    angle_to_target,
    direction,
    distance,
    normalize_angle_delta,
)


log = logging.getLogger(__name__)


@dataclass
class NavigatorConfig:
    """Arrival and facing tolerances."""

    # Arrival radius: a target within this distance counts as reached.
    stopping_distance: float = 2.0

    # Facing is considered done within this many degrees of the target.
    facing_tolerance_deg: float = 10.0


def press_direction(movement: MovementInput, heading: Direction) -> None:
    """
    Press the primitive(s) that move the agent toward `heading`.

    Diagonals are composed from two simultaneous primitives, e.g.
    ForwardLeft = move_forward + strafe_left.
    """
    if heading in (Direction.FORWARD, Direction.FORWARD_LEFT, Direction.FORWARD_RIGHT):
        movement.move_forward()
    elif heading in (Direction.BACKWARD, Direction.BACKWARD_LEFT, Direction.BACKWARD_RIGHT):
        movement.move_backward()

    if heading in (Direction.LEFT, Direction.FORWARD_LEFT, Direction.BACKWARD_LEFT):
        movement.strafe_left()
    elif heading in (Direction.RIGHT, Direction.FORWARD_RIGHT, Direction.BACKWARD_RIGHT):
        movement.strafe_right()


class Navigator:
    """
    Issue movement commands toward a target.

    Public contract:
      move_to(target, current) -> bool    True if movement was issued
      has_reached(target, current) -> bool
      distance_to(target, current) -> float
      face_target(target, current, yaw) -> bool
    """

    def __init__(
        self,
        movement: MovementInput,
        *,
        config: NavigatorConfig | None = None,
    ) -> None:
        self._movement = movement
        self._cfg = config if config is not None else NavigatorConfig()

    @property
    def config(self) -> NavigatorConfig:
        return self._cfg

    @property
    def movement(self) -> MovementInput:
        return self._movement

    @property
    def stopping_distance(self) -> float:
        return self._cfg.stopping_distance

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------

    def move_to(self, target: Position, current: Optional[Position]) -> bool:
        """
        Start moving toward `target`.

        Returns False when there is no current position, or when the target
        is already within stopping distance (movement is stopped then).
        """
        if current is None:
            return False

        if distance(current, target) <= self._cfg.stopping_distance:
            self.stop_movement()
            return False

        heading = direction(current, target)
        log.debug("move_to %s from %s heading %s", target, current, heading.value)

        self._movement.stop_all_movement()
        press_direction(self._movement, heading)
        return True

    def has_reached(self, target: Position, current: Optional[Position]) -> bool:
        if current is None:
            return False
        return distance(current, target) <= self._cfg.stopping_distance

    def distance_to(self, target: Position, current: Optional[Position]) -> float:
        """3D distance to `target`, or +inf without a reading."""
        if current is None:
            return math.inf
        return distance(current, target)

    def stop_movement(self) -> None:
        self._movement.stop_all_movement()

    # ------------------------------------------------------------------
    # Facing
    # ------------------------------------------------------------------

    def _facing_delta(self, target: Position, current: Position, yaw: float) -> float:
        return normalize_angle_delta(angle_to_target(current, target) - yaw)

    def face_target(
        self,
        target: Position,
        current: Optional[Position],
        yaw: float,
    ) -> bool:
        """
        Turn toward `target`.

        Returns True if a turn was started, False if there is no reading or
        the agent already faces the target within tolerance.
        """
        if current is None:
            return False

        delta = self._facing_delta(target, current, yaw)
        if abs(delta) <= self._cfg.facing_tolerance_deg:
            self._movement.stop_turning()
            return False

        if delta > 0:
            self._movement.turn_right()
        else:
            self._movement.turn_left()
        return True

    def is_facing(self, target: Position, current: Optional[Position], yaw: float) -> bool:
        if current is None:
            return False
        return abs(self._facing_delta(target, current, yaw)) <= self._cfg.facing_tolerance_deg


__all__ = ["Navigator", "NavigatorConfig", "press_direction"]
