from __future__ import annotations

import logging
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union

import yaml

from nav_core.nav.mover import NavigatorConfig
from nav_core.nav.stuck import StuckMonitorConfig
from waypoints.model import WaypointKind
from waypoints.recorder import RecorderConfig

from .schema import AgentProfile, MappingConfig, PathsConfig, PlaybackConfig


log = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when navigation.yaml contains an invalid value."""


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_ROOT = PROJECT_ROOT / "config"
DEFAULT_CONFIG = CONFIG_ROOT / "navigation.yaml"

T = TypeVar("T")


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping; an empty file is an empty mapping."""
    with path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Expected mapping at top of {path}, got {type(data).__name__}")
    return data


def _section(data: Mapping[str, Any], key: str) -> Dict[str, Any]:
    raw = data.get(key)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{key}' must be a mapping, got {type(raw).__name__}")
    return dict(raw)


def _coerce(name: str, default: Any, value: Any) -> Any:
    """Coerce `value` to the type of the field's default."""
    if isinstance(default, bool) or (default is None and isinstance(value, bool)):
        if not isinstance(value, bool):
            raise ConfigError(f"'{name}' must be true or false, got {value!r}")
        return value
    if isinstance(default, (int, float)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"'{name}' must be a number, got {value!r}")
        if value < 0:
            raise ConfigError(f"'{name}' must not be negative, got {value!r}")
        return int(value) if isinstance(default, int) else float(value)
    return value


def _build(cls: Type[T], raw: Mapping[str, Any], where: str) -> T:
    """Instantiate a config dataclass from `raw`; absent keys keep their defaults."""
    defaults = cls()  # type: ignore[call-arg]
    known = {f.name for f in fields(cls)}  # type: ignore[arg-type]

    unknown = set(raw) - known
    if unknown:
        raise ConfigError(f"Unknown key(s) in '{where}': {', '.join(sorted(unknown))}")

    kwargs = {
        name: _coerce(f"{where}.{name}", getattr(defaults, name), value)
        for name, value in raw.items()
    }
    return cls(**kwargs)


def _resolve(base_dir: Path, value: Any) -> Path:
    p = Path(str(value)).expanduser()
    return p if p.is_absolute() else base_dir / p


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def profile_from_mapping(
    data: Mapping[str, Any],
    base_dir: Optional[Path] = None,
) -> AgentProfile:
    """
    Build an AgentProfile from an already-parsed config mapping.

    Recognised top-level sections: navigation, recorder, mapping, paths.
    Relative paths resolve against `base_dir` (default: project root).
    """
    base_dir = base_dir if base_dir is not None else PROJECT_ROOT

    navigation = _section(data, "navigation")
    stuck_raw = navigation.pop("stuck", None) or {}
    playback_raw = navigation.pop("playback", None) or {}
    if not isinstance(stuck_raw, dict) or not isinstance(playback_raw, dict):
        raise ConfigError("'navigation.stuck' and 'navigation.playback' must be mappings")

    navigator = _build(NavigatorConfig, navigation, "navigation")
    stuck = _build(StuckMonitorConfig, stuck_raw, "navigation.stuck")
    playback = _build(PlaybackConfig, playback_raw, "navigation.playback")

    if playback.override_loop is not None and not isinstance(playback.override_loop, bool):
        raise ConfigError("'navigation.playback.override_loop' must be true, false or null")
    if stuck.check_interval_s <= 0:
        raise ConfigError("'navigation.stuck.check_interval_s' must be positive")

    recorder_raw = _section(data, "recorder")
    kind_raw = recorder_raw.pop("default_kind", None)
    recorder = _build(RecorderConfig, recorder_raw, "recorder")
    if kind_raw is not None:
        try:
            recorder.default_kind = WaypointKind(kind_raw)
        except ValueError as exc:
            raise ConfigError(f"Unknown waypoint kind in 'recorder.default_kind': {kind_raw!r}") from exc

    mapping = _build(MappingConfig, _section(data, "mapping"), "mapping")

    paths_raw = _section(data, "paths")
    unknown = set(paths_raw) - {f.name for f in fields(PathsConfig)}
    if unknown:
        raise ConfigError(f"Unknown key(s) in 'paths': {', '.join(sorted(unknown))}")
    defaults = PathsConfig()
    event_log = paths_raw.get("event_log", defaults.event_log)
    paths = PathsConfig(
        waypoint_directory=_resolve(base_dir, paths_raw.get("waypoint_directory", defaults.waypoint_directory)),
        map_data_directory=_resolve(base_dir, paths_raw.get("map_data_directory", defaults.map_data_directory)),
        export_directory=_resolve(base_dir, paths_raw.get("export_directory", defaults.export_directory)),
        event_log=_resolve(base_dir, event_log) if event_log else None,
    )

    return AgentProfile(
        navigator=navigator,
        stuck=stuck,
        playback=playback,
        recorder=recorder,
        mapping=mapping,
        paths=paths,
    )


def load_profile(path: Union[str, Path, None] = None) -> AgentProfile:
    """
    Main entry point: returns a fully resolved AgentProfile.

    With no `path`, reads config/navigation.yaml and falls back to built-in
    defaults when it is absent. An explicitly requested file that does not
    exist raises FileNotFoundError.
    """
    if path is None:
        if not DEFAULT_CONFIG.exists():
            log.info("No %s; using default navigation profile", DEFAULT_CONFIG)
            return profile_from_mapping({})
        return profile_from_mapping(_load_yaml(DEFAULT_CONFIG))

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Missing config file: {config_path}")
    return profile_from_mapping(_load_yaml(config_path))
