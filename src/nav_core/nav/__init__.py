# src/nav_core/nav/__init__.py
"""
Navigation subsystem for nav_core.

Provides:
- geometry: distance / bearing / 8-way direction helpers
- StuckMonitor: stuck detection with escalating recovery
- Navigator: direct-line movement, arrival tests and facing
"""

from __future__ import annotations

from .geometry import (
    Direction,
    bearing_degrees,
    direction,
    distance,
    distance_squared,
    horizontal_distance,
    normalize_angle_delta,
)
from .stuck import StuckMonitor, StuckMonitorConfig
from .mover import Navigator, NavigatorConfig, press_direction

__all__ = [
    "Direction",
    "bearing_degrees",
    "direction",
    "distance",
    "distance_squared",
    "horizontal_distance",
    "normalize_angle_delta",
    "StuckMonitor",
    "StuckMonitorConfig",
    "Navigator",
    "NavigatorConfig",
    "press_direction",
]
