# path: src/waypoints/__init__.py
"""
waypoints package: route memory.

- model: Waypoint / WaypointPath and the JSON path file format
- files: WaypointFileManager (one file per path)
- exchange: WaypointExchange (versioned export / import of single paths)
- recorder: RouteRecorder (live capture)
- player: RoutePlayer (tick-driven playback)
"""

from __future__ import annotations

from .model import Waypoint, WaypointFormatError, WaypointKind, WaypointPath
from .files import WaypointFileManager
from .exchange import ExportResult, ImportResult, WaypointExchange, WaypointExport, read_path_file
from .recorder import RecorderConfig, RouteRecorder
from .player import RoutePlayer, RouteState, advance_index, physical_index

__all__ = [
    "Waypoint",
    "WaypointFormatError",
    "WaypointKind",
    "WaypointPath",
    "WaypointFileManager",
    "WaypointExchange",
    "WaypointExport",
    "ExportResult",
    "ImportResult",
    "read_path_file",
    "RecorderConfig",
    "RouteRecorder",
    "RoutePlayer",
    "RouteState",
    "advance_index",
    "physical_index",
]
