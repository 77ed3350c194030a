# path: src/waypoints/model.py
"""
Waypoint / path model and its JSON file format.

A WaypointPath is an ordered list of typed waypoints plus traversal flags
(`loop`, `reverse_at_end`) and descriptive metadata. Paths persist as one
indented JSON object per file with camelCase keys; enum fields are written
as their string value.

`last_modified` is refreshed by every mutation and by save, and is excluded
from equality so a saved-then-loaded path compares equal to the original.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from nav_core.snapshot import Position


log = logging.getLogger(__name__)

PathLike = Union[str, Path]


class WaypointFormatError(ValueError):
    """Raised when a waypoint file is not valid JSON or lacks required keys."""


class WaypointKind(Enum):
    """Persisted as the string value under the `type` key."""

    NORMAL = "Normal"
    VENDOR = "Vendor"
    REPAIR = "Repair"
    NODE = "Node"                  # mining / herbalism resource node
    QUEST_GIVER = "QuestGiver"
    QUEST_TURN_IN = "QuestTurnIn"
    REST_AREA = "RestArea"         # safe to rest / regen
    DANGER_ZONE = "DangerZone"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(raw: Any) -> datetime:
    dt = datetime.fromisoformat(str(raw))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass
class Waypoint:
    position: Position
    kind: WaypointKind = WaypointKind.NORMAL
    name: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)
    delay: float = 0.0  # seconds to dwell after arriving

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position.to_dict(),
            "type": self.kind.value,
            "name": self.name,
            "metadata": dict(self.metadata),
            "delay": self.delay,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Waypoint":
        return cls(
            position=Position.from_dict(data["position"]),
            kind=WaypointKind(data["type"]),
            name=data.get("name"),
            metadata={str(k): str(v) for k, v in (data.get("metadata") or {}).items()},
            delay=float(data.get("delay") or 0.0),
        )

    def __str__(self) -> str:
        label = self.name or "Waypoint"
        return f"{label} {self.position} - {self.kind.value}"


@dataclass
class WaypointPath:
    """
    Ordered, optionally looping or reversing sequence of waypoints.

    Mutate through add_waypoint / add_point / remove_waypoint /
    clear_waypoints so `last_modified` stays current.
    """

    name: str = ""
    waypoints: List[Waypoint] = field(default_factory=list)
    loop: bool = False
    reverse_at_end: bool = False
    description: Optional[str] = None
    level_range: Optional[str] = None
    zone: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_utcnow)
    last_modified: datetime = field(default_factory=_utcnow, compare=False)

    # ------------------------------------------------------------------ #
    # Editing
    # ------------------------------------------------------------------ #

    def _touch(self) -> None:
        self.last_modified = _utcnow()

    def add_waypoint(self, waypoint: Waypoint) -> None:
        self.waypoints.append(waypoint)
        self._touch()

    def add_point(
        self,
        x: float,
        y: float,
        z: float,
        kind: WaypointKind = WaypointKind.NORMAL,
    ) -> Waypoint:
        wp = Waypoint(Position(x, y, z), kind)
        self.add_waypoint(wp)
        return wp

    def remove_waypoint(self, index: int) -> bool:
        if index < 0 or index >= len(self.waypoints):
            return False
        del self.waypoints[index]
        self._touch()
        return True

    def clear_waypoints(self) -> None:
        self.waypoints.clear()
        self._touch()

    @property
    def count(self) -> int:
        return len(self.waypoints)

    @property
    def has_waypoints(self) -> bool:
        return bool(self.waypoints)

    def copy(self) -> "WaypointPath":
        """Independent deep copy."""
        return copy.deepcopy(self)

    # ------------------------------------------------------------------ #
    # Validation
    # ------------------------------------------------------------------ #

    def validate(self) -> List[str]:
        """
        Return human-readable problems with this path.

        Advisory only: an invalid path can still be played.
        """
        errors: List[str] = []

        if not self.name or not self.name.strip():
            errors.append("Path name is required.")

        if len(self.waypoints) < 2:
            errors.append("Path must have at least 2 waypoints.")

        for i, wp in enumerate(self.waypoints):
            if wp.kind is WaypointKind.VENDOR and not wp.name:
                errors.append(f"Waypoint {i} is marked as Vendor but has no name.")

        if self.loop and self.reverse_at_end:
            errors.append("Path cannot have both loop and reverseAtEnd enabled.")

        return errors

    # ------------------------------------------------------------------ #
    # Serialization
    # ------------------------------------------------------------------ #

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "waypoints": [wp.to_dict() for wp in self.waypoints],
            "loop": self.loop,
            "reverseAtEnd": self.reverse_at_end,
            "description": self.description,
            "levelRange": self.level_range,
            "zone": self.zone,
            "metadata": dict(self.metadata),
            "createdAt": self.created_at.isoformat(),
            "lastModified": self.last_modified.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WaypointPath":
        """
        Build a path from its JSON shape.

        Raises WaypointFormatError when a required key is missing or a value
        has the wrong shape.
        """
        if not isinstance(data, Mapping):
            raise WaypointFormatError(f"expected a JSON object, got {type(data).__name__}")

        try:
            raw_waypoints = data["waypoints"]
            if not isinstance(raw_waypoints, list):
                raise TypeError("waypoints must be a list")

            path = cls(
                name=str(data["name"]),
                waypoints=[Waypoint.from_dict(w) for w in raw_waypoints],
                loop=bool(data.get("loop", False)),
                reverse_at_end=bool(data.get("reverseAtEnd", False)),
                description=data.get("description"),
                level_range=data.get("levelRange"),
                zone=data.get("zone"),
                metadata={str(k): str(v) for k, v in (data.get("metadata") or {}).items()},
            )
            if data.get("createdAt") is not None:
                path.created_at = _parse_datetime(data["createdAt"])
            if data.get("lastModified") is not None:
                path.last_modified = _parse_datetime(data["lastModified"])
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise WaypointFormatError(f"invalid waypoint path: {exc!r}") from exc

        return path

    def save_to_file(self, file_path: PathLike) -> None:
        """Refresh last_modified and write the path as indented JSON."""
        self._touch()
        text = json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
        Path(file_path).write_text(text, encoding="utf-8")
        log.debug("Saved path %r (%d waypoints) to %s", self.name, self.count, file_path)

    @classmethod
    def load_from_file(cls, file_path: PathLike) -> Optional["WaypointPath"]:
        """
        Load a path, returning None when the file does not exist.

        Raises WaypointFormatError for malformed JSON or missing keys.
        """
        p = Path(file_path)
        if not p.exists():
            return None

        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise WaypointFormatError(f"{p}: {exc}") from exc

        return cls.from_dict(data)

    def __str__(self) -> str:
        mode = "Loop" if self.loop else "Reverse" if self.reverse_at_end else "One-way"
        return f"{self.name} ({self.count} waypoints, {mode})"


__all__ = [
    "Waypoint",
    "WaypointFormatError",
    "WaypointKind",
    "WaypointPath",
]
