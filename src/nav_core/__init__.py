# nav_core package
# src/nav_core/__init__.py
"""
nav_core package: movement core for route-following agents.

Exports:
    - Position / FeedSnapshot: per-tick value types
    - PositionTracker: freshness-aware feed adapter
    - MovementInput: directional command protocol
    - Navigator / StuckMonitor: direct-line movement and stuck recovery
"""

from __future__ import annotations

from .snapshot import FeedSnapshot, Position
from .feed import PositionTracker
from .input import MovementInput
from .nav import Direction, Navigator, NavigatorConfig, StuckMonitor, StuckMonitorConfig

__all__ = [
    "FeedSnapshot",
    "Position",
    "PositionTracker",
    "MovementInput",
    "Direction",
    "Navigator",
    "NavigatorConfig",
    "StuckMonitor",
    "StuckMonitorConfig",
]
