# AgentProfile and the config sections it is built from
# src/env/schema.py

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from nav_core.nav.mover import NavigatorConfig
from nav_core.nav.stuck import StuckMonitorConfig
from waypoints.recorder import RecorderConfig


@dataclass
class PlaybackConfig:
    """Route player switches."""
    override_loop: Optional[bool] = None   # None = use each path's own flag
    abort_on_stuck: bool = True


@dataclass
class MappingConfig:
    """Discovery store + scanner settings."""
    dedup_radius: float = 5.0
    auto_discovery: bool = True
    record_nodes: bool = True
    record_npcs: bool = True
    record_mob_spawns: bool = True


@dataclass
class PathsConfig:
    """Where things live on disk (relative paths resolve against the project root)."""
    waypoint_directory: Path = Path("waypoints")
    map_data_directory: Path = Path("mapdata")
    export_directory: Path = Path("exports")
    event_log: Optional[Path] = None       # JSONL monitoring log; None disables it


@dataclass
class AgentProfile:
    """Resolved configuration for one navigation runtime."""
    navigator: NavigatorConfig = field(default_factory=NavigatorConfig)
    stuck: StuckMonitorConfig = field(default_factory=StuckMonitorConfig)
    playback: PlaybackConfig = field(default_factory=PlaybackConfig)
    recorder: RecorderConfig = field(default_factory=RecorderConfig)
    mapping: MappingConfig = field(default_factory=MappingConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
