# distance / bearing / direction helpers
# src/nav_core/nav/geometry.py
"""
Pure geometry over Position values.

Everything here is stateless and side-effect free. Distances are Euclidean;
directions are classified in the horizontal X-Z plane with bearings measured
by atan2(dz, dx), so +X is bearing 0 and +Z is bearing 90.

Direction sectors are 45 degrees wide and centred on the +Z axis for
Forward (north in game coordinates) and the +X axis for Right (east).
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Optional

from ..snapshot import Position


class Direction(Enum):
    """Cardinal or intercardinal movement direction."""

    FORWARD = "Forward"
    BACKWARD = "Backward"
    LEFT = "Left"
    RIGHT = "Right"
    FORWARD_LEFT = "ForwardLeft"
    FORWARD_RIGHT = "ForwardRight"
    BACKWARD_LEFT = "BackwardLeft"
    BACKWARD_RIGHT = "BackwardRight"


# Sector order starting at bearing 0 (+X), counter-clockwise towards +Z.
_SECTORS = (
    Direction.RIGHT,           # 0
    Direction.FORWARD_RIGHT,   # 45
    Direction.FORWARD,         # 90
    Direction.FORWARD_LEFT,    # 135
    Direction.LEFT,            # 180
    Direction.BACKWARD_LEFT,   # 225
    Direction.BACKWARD,        # 270
    Direction.BACKWARD_RIGHT,  # 315
)


def distance(a: Position, b: Position) -> float:
    """3D Euclidean distance."""
    return math.sqrt(distance_squared(a, b))


def distance_squared(a: Position, b: Position) -> float:
    """Squared 3D distance; use for ordering and threshold comparisons."""
    dx = b.x - a.x
    dy = b.y - a.y
    dz = b.z - a.z
    return dx * dx + dy * dy + dz * dz


def horizontal_distance(a: Position, b: Position) -> float:
    """Distance in the X-Z plane. Vertical noise does not count."""
    dx = b.x - a.x
    dz = b.z - a.z
    return math.sqrt(dx * dx + dz * dz)


def distance_or_inf(a: Optional[Position], b: Optional[Position]) -> float:
    """3D distance, or +inf when either side has no reading."""
    if a is None or b is None:
        return math.inf
    return distance(a, b)


def angle_to_target(frm: Position, to: Position) -> float:
    """Signed atan2(dz, dx) angle in degrees, in (-180, 180]."""
    return math.degrees(math.atan2(to.z - frm.z, to.x - frm.x))


def bearing_degrees(frm: Position, to: Position) -> float:
    """Bearing from `frm` to `to` in [0, 360)."""
    bearing = angle_to_target(frm, to) % 360.0
    # -0.0 % 360 and tiny negatives can round to exactly 360.0
    if bearing >= 360.0:
        bearing -= 360.0
    return bearing


def direction_for_bearing(bearing: float) -> Direction:
    """Bucket a bearing (any range) into one of the 8 sectors."""
    normalized = bearing % 360.0
    sector = int(((normalized + 22.5) % 360.0) // 45.0)
    return _SECTORS[sector]


def direction(frm: Position, to: Position) -> Direction:
    """Direction of `to` as seen from `frm` in the horizontal plane."""
    return direction_for_bearing(bearing_degrees(frm, to))


def normalize_angle_delta(angle: float) -> float:
    """
    Reduce an angle to [-180, 180].

    The sign gives the shortest turn direction (positive turns right).
    """
    while angle > 180.0:
        angle -= 360.0
    while angle < -180.0:
        angle += 360.0
    return angle


__all__ = [
    "Direction",
    "distance",
    "distance_squared",
    "horizontal_distance",
    "distance_or_inf",
    "angle_to_target",
    "bearing_degrees",
    "direction_for_bearing",
    "direction",
    "normalize_angle_delta",
]
