# path: src/mapping/store.py
"""
MapDataStore: thread-safe, JSON-persisted store of discovered map data.

Three collections (resource nodes, NPCs, mob spawn points), each deduplicated
by exact name plus 2D (X-Z) distance <= dedup_radius. All reads, mutations
and file I/O happen under one lock, so record_* may be called from a
different thread than the one running periodic save_to_disk().

Discovery events are published after the lock is released, so subscribers
may safely call back into the store.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar, Union

from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event
from nav_core.snapshot import Position

from .records import (
    Discovery,
    MapDataStatistics,
    MobSpawnPoint,
    NpcDiscovery,
    ResourceNodeDiscovery,
)


log = logging.getLogger(__name__)

_MODULE = "mapping.store"

RESOURCE_NODES_FILE = "resource_nodes.json"
NPCS_FILE = "npcs.json"
MOB_SPAWNS_FILE = "mob_spawns.json"

DEFAULT_DEDUP_RADIUS = 5.0

D = TypeVar("D", bound=Discovery)


class MapDataFormatError(ValueError):
    """A discovery file exists but is not a valid JSON array of records."""


class MapDataStore:
    """
    Public contract:
      record_resource_node / record_npc / record_mob_spawn -> bool (True = new)
      resource_nodes / npcs / mob_spawns                   copies
      save_to_disk() / load_from_disk() / clear() / get_statistics()
    """

    def __init__(
        self,
        data_directory: Union[str, Path] = "./mapdata",
        *,
        dedup_radius: float = DEFAULT_DEDUP_RADIUS,
        bus: EventBus | None = None,
    ) -> None:
        self._dir = Path(data_directory)
        self._dir.mkdir(parents=True, exist_ok=True)
        self.dedup_radius = dedup_radius
        self.current_zone = "Unknown"
        self._bus = bus

        self._lock = threading.Lock()
        self._resource_nodes: List[ResourceNodeDiscovery] = []
        self._npcs: List[NpcDiscovery] = []
        self._mob_spawns: List[MobSpawnPoint] = []

    @property
    def data_directory(self) -> Path:
        return self._dir

    # ------------------------------------------------------------------ #
    # Read accessors
    # ------------------------------------------------------------------ #

    @property
    def resource_nodes(self) -> List[ResourceNodeDiscovery]:
        with self._lock:
            return copy.deepcopy(self._resource_nodes)

    @property
    def npcs(self) -> List[NpcDiscovery]:
        with self._lock:
            return copy.deepcopy(self._npcs)

    @property
    def mob_spawns(self) -> List[MobSpawnPoint]:
        with self._lock:
            return copy.deepcopy(self._mob_spawns)

    # ------------------------------------------------------------------ #
    # Recording
    # ------------------------------------------------------------------ #

    def record_resource_node(
        self,
        name: str,
        position: Position,
        required_skill: Optional[str] = None,
    ) -> bool:
        with self._lock:
            created = self._record(
                self._resource_nodes,
                name,
                position,
                lambda _: None,
                lambda new_id, now: ResourceNodeDiscovery(
                    id=new_id,
                    name=name,
                    position=position,
                    zone=self.current_zone,
                    discovered_at=now,
                    last_seen_at=now,
                    required_skill=required_skill,
                ),
            )
        return self._announce(created, EventType.NODE_DISCOVERED)

    def record_npc(
        self,
        name: str,
        position: Position,
        is_vendor: bool = False,
        has_quests: bool = False,
    ) -> bool:
        def merge(existing: NpcDiscovery) -> None:
            # Flags only ever turn on.
            existing.is_vendor = existing.is_vendor or is_vendor
            existing.has_quests = existing.has_quests or has_quests

        with self._lock:
            created = self._record(
                self._npcs,
                name,
                position,
                merge,
                lambda new_id, now: NpcDiscovery(
                    id=new_id,
                    name=name,
                    position=position,
                    zone=self.current_zone,
                    discovered_at=now,
                    last_seen_at=now,
                    is_vendor=is_vendor,
                    has_quests=has_quests,
                ),
            )
        return self._announce(created, EventType.NPC_DISCOVERED)

    def record_mob_spawn(
        self,
        name: str,
        position: Position,
        level: int = 0,
        faction: str = "Neutral",
    ) -> bool:
        with self._lock:
            created = self._record(
                self._mob_spawns,
                name,
                position,
                lambda _: None,
                lambda new_id, now: MobSpawnPoint(
                    id=new_id,
                    name=name,
                    position=position,
                    zone=self.current_zone,
                    discovered_at=now,
                    last_seen_at=now,
                    level=level,
                    faction=faction,
                ),
            )
        return self._announce(created, EventType.MOB_SPAWN_DISCOVERED)

    def _record(
        self,
        items: List[D],
        name: str,
        position: Position,
        merge: Callable[[D], None],
        create: Callable[[int, datetime], D],
    ) -> Optional[D]:
        """Update a nearby same-name record or append a new one. Lock must be held."""
        now = datetime.now(timezone.utc)

        existing = self._find_nearby(items, name, position)
        if existing is not None:
            # The first observed position stays canonical.
            existing.last_seen_at = now
            existing.times_seen += 1
            merge(existing)
            log.debug("Re-observed %s (seen %dx)", existing.name, existing.times_seen)
            return None

        new_id = max((item.id for item in items), default=0) + 1
        record = create(new_id, now)
        items.append(record)
        return copy.deepcopy(record)

    def _find_nearby(self, items: List[D], name: str, position: Position) -> Optional[D]:
        radius_sq = self.dedup_radius * self.dedup_radius
        for item in items:
            if item.name != name:
                continue
            dx = item.position.x - position.x
            dz = item.position.z - position.z
            if dx * dx + dz * dz <= radius_sq:
                return item
        return None

    def _announce(self, created: Optional[Discovery], event_type: EventType) -> bool:
        if created is None:
            return False
        log.info("Discovered %s", created)
        log_event(
            self._bus,
            module=_MODULE,
            event_type=event_type,
            message=str(created),
            payload=created.to_dict(),
        )
        return True

    # ------------------------------------------------------------------ #
    # Persistence
    # ------------------------------------------------------------------ #

    def _collections(self) -> Tuple[Tuple[str, List[Any], Type[Discovery]], ...]:
        return (
            (RESOURCE_NODES_FILE, self._resource_nodes, ResourceNodeDiscovery),
            (NPCS_FILE, self._npcs, NpcDiscovery),
            (MOB_SPAWNS_FILE, self._mob_spawns, MobSpawnPoint),
        )

    def save_to_disk(self) -> None:
        """
        Write all three collections.

        Each file is written to a temporary sibling and moved into place, so
        a failed write leaves the previous file intact. OSError propagates.
        """
        with self._lock:
            for file_name, items, _ in self._collections():
                target = self._dir / file_name
                tmp = target.with_name(target.name + ".tmp")
                text = json.dumps([item.to_dict() for item in items], indent=2, ensure_ascii=False)
                tmp.write_text(text, encoding="utf-8")
                os.replace(tmp, target)
        log.info("Saved map data to %s", self._dir)

    def load_from_disk(self) -> None:
        """
        Replace in-memory collections with the files on disk.

        A missing file leaves that collection as it is. All files are parsed
        before anything is replaced, so MapDataFormatError leaves the store
        unchanged.
        """
        with self._lock:
            loaded: Dict[str, List[Discovery]] = {}
            for file_name, _, record_type in self._collections():
                records = self._read_file(self._dir / file_name, record_type)
                if records is not None:
                    loaded[file_name] = records

            for file_name, items, _ in self._collections():
                if file_name in loaded:
                    items[:] = loaded[file_name]

        log.info("Loaded map data from %s (%d file(s))", self._dir, len(loaded))

    @staticmethod
    def _read_file(path: Path, record_type: Type[Discovery]) -> Optional[List[Discovery]]:
        if not path.exists():
            return None
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise MapDataFormatError(f"{path}: {exc}") from exc

        if not isinstance(raw, list):
            raise MapDataFormatError(f"{path}: expected a JSON array")

        try:
            return [record_type.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise MapDataFormatError(f"{path}: invalid record: {exc!r}") from exc

    # ------------------------------------------------------------------ #
    # Misc
    # ------------------------------------------------------------------ #

    def clear(self) -> None:
        with self._lock:
            self._resource_nodes.clear()
            self._npcs.clear()
            self._mob_spawns.clear()

    def get_statistics(self) -> MapDataStatistics:
        with self._lock:
            return MapDataStatistics(
                resource_node_count=len(self._resource_nodes),
                vendor_count=sum(1 for n in self._npcs if n.is_vendor),
                quest_giver_count=sum(1 for n in self._npcs if n.has_quests),
                mob_spawn_count=len(self._mob_spawns),
            )


__all__ = [
    "MapDataFormatError",
    "MapDataStore",
    "DEFAULT_DEDUP_RADIUS",
    "RESOURCE_NODES_FILE",
    "NPCS_FILE",
    "MOB_SPAWNS_FILE",
]
