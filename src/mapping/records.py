# path: src/mapping/records.py
"""
Discovery record types persisted by MapDataStore.

Each record keeps the location where it was FIRST observed; re-observations
within the dedup radius only bump `last_seen_at` / `times_seen`.
JSON shape (camelCase):

    {"id": 1, "name": "Iron Vein", "position": {"x":..,"y":..,"z":..},
     "zone": "Stowaway's Step", "discoveredAt": "...", "lastSeenAt": "...",
     "timesSeen": 2, "requiredSkill": "Mining"}
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, ClassVar, Dict, Mapping, Optional, Tuple

from nav_core.snapshot import Position


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(raw: Any) -> datetime:
    dt = datetime.fromisoformat(str(raw))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _as_bool(raw: Any) -> bool:
    if not isinstance(raw, bool):
        raise TypeError(f"expected true/false, got {raw!r}")
    return raw


def _as_int(raw: Any) -> int:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise TypeError(f"expected a number, got {raw!r}")
    return int(raw)


def _as_str(raw: Any) -> str:
    if not isinstance(raw, str):
        raise TypeError(f"expected a string, got {raw!r}")
    return raw


def _as_optional_str(raw: Any) -> Optional[str]:
    return None if raw is None else _as_str(raw)


@dataclass
class Discovery:
    """Fields shared by every discovery variant."""

    id: int
    name: str
    position: Position
    zone: str = "Unknown"
    discovered_at: Optional[datetime] = None
    last_seen_at: Optional[datetime] = None
    times_seen: int = 1

    # Extra camelCase keys written by the subclass: (json key, attribute, parser).
    _extra_fields: ClassVar[Tuple[Tuple[str, str, Callable[[Any], Any]], ...]] = ()

    def __post_init__(self) -> None:
        if self.discovered_at is None:
            self.discovered_at = _utcnow()
        if self.last_seen_at is None:
            self.last_seen_at = self.discovered_at

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "position": self.position.to_dict(),
            "zone": self.zone,
            "discoveredAt": self.discovered_at.isoformat(),
            "lastSeenAt": self.last_seen_at.isoformat(),
            "timesSeen": self.times_seen,
        }
        for key, attr, _ in self._extra_fields:
            data[key] = getattr(self, attr)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]):
        """Raises KeyError / TypeError / ValueError on a malformed record."""
        kwargs: Dict[str, Any] = {
            "id": int(data["id"]),
            "name": str(data["name"]),
            "position": Position.from_dict(data["position"]),
            "zone": str(data.get("zone") or "Unknown"),
            "discovered_at": _parse_datetime(data["discoveredAt"]),
            "last_seen_at": _parse_datetime(data.get("lastSeenAt", data["discoveredAt"])),
            "times_seen": int(data.get("timesSeen", 1)),
        }
        for key, attr, parse in cls._extra_fields:
            if key in data:
                kwargs[attr] = parse(data[key])
        return cls(**kwargs)

    def _where(self) -> str:
        return f"{self.name} at {self.position} in {self.zone}"


@dataclass
class ResourceNodeDiscovery(Discovery):
    required_skill: Optional[str] = None

    _extra_fields: ClassVar[Tuple[Tuple[str, str, Callable[[Any], Any]], ...]] = (
        ("requiredSkill", "required_skill", _as_optional_str),
    )

    def __str__(self) -> str:
        return f"{self._where()} - seen {self.times_seen}x"


@dataclass
class NpcDiscovery(Discovery):
    is_vendor: bool = False
    has_quests: bool = False

    _extra_fields: ClassVar[Tuple[Tuple[str, str, Callable[[Any], Any]], ...]] = (
        ("isVendor", "is_vendor", _as_bool),
        ("hasQuests", "has_quests", _as_bool),
    )

    def __str__(self) -> str:
        tags = (" [Vendor]" if self.is_vendor else "") + (" [Quests]" if self.has_quests else "")
        return self._where() + tags


@dataclass
class MobSpawnPoint(Discovery):
    level: int = 0
    faction: str = "Neutral"

    _extra_fields: ClassVar[Tuple[Tuple[str, str, Callable[[Any], Any]], ...]] = (
        ("level", "level", _as_int),
        ("faction", "faction", _as_str),
    )

    def __str__(self) -> str:
        return f"{self.name} (Level {self.level}) at {self.position} in {self.zone} - seen {self.times_seen}x"


@dataclass(frozen=True)
class MapDataStatistics:
    resource_node_count: int = 0
    vendor_count: int = 0
    quest_giver_count: int = 0
    mob_spawn_count: int = 0

    def __str__(self) -> str:
        return (
            f"Nodes: {self.resource_node_count}, Vendors: {self.vendor_count}, "
            f"Quest Givers: {self.quest_giver_count}, Mob Spawns: {self.mob_spawn_count}"
        )


__all__ = [
    "Discovery",
    "ResourceNodeDiscovery",
    "NpcDiscovery",
    "MobSpawnPoint",
    "MapDataStatistics",
]
