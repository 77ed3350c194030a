# Position + per-tick feed snapshot types
# src/nav_core/snapshot.py
"""
Snapshot structures for nav_core.

Defines the value types every navigation component consumes:

- Position: immutable {x, y, z} point in world space.
- FeedSnapshot: one tick of the external position/vitals/combat feed.

The feed is always handled as `Optional[FeedSnapshot]`. A `None` snapshot
means "no authoritative data this tick"; it is never interpreted as
"stationary at the last known position".
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class Position:
    """
    A point in the 3D world.

    `y` is the vertical axis; `x` and `z` span the horizontal plane.
    """

    x: float
    y: float
    z: float

    def distance_to(self, other: "Position") -> float:
        """Euclidean 3D distance to another position."""
        dx = self.x - other.x
        dy = self.y - other.y
        dz = self.z - other.z
        return math.sqrt(dx * dx + dy * dy + dz * dz)

    def horizontal_distance_to(self, other: "Position") -> float:
        """Distance in the X-Z plane, ignoring height."""
        dx = self.x - other.x
        dz = self.z - other.z
        return math.sqrt(dx * dx + dz * dz)

    def offset(self, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> "Position":
        return Position(self.x + dx, self.y + dy, self.z + dz)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Position":
        """
        Build a Position from a {"x", "y", "z"} mapping.

        Raises KeyError / TypeError / ValueError on missing or non-numeric
        coordinates; persistence layers translate those into their own
        format errors.
        """
        return cls(float(data["x"]), float(data["y"]), float(data["z"]))

    def __str__(self) -> str:
        return f"({self.x:.2f}, {self.y:.2f}, {self.z:.2f})"


@dataclass(frozen=True)
class FeedSnapshot:
    """
    One tick of the external feed.

    Fields:
      - position: current player position
      - yaw_degrees: heading around the vertical axis, 0-360
      - in_combat: whether a combat engagement is in progress
    """

    position: Position
    yaw_degrees: float = 0.0
    in_combat: bool = False


__all__ = [
    "Position",
    "FeedSnapshot",
]
