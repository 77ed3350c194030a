# path: src/mapping/discovery.py
"""
MapDiscoveryController: feed nearby entities into a MapDataStore.

Each tick the caller passes what it can currently see. Every entity is
recorded at most once per session (keyed by name and rounded X/Z), at the
entity's own position rather than the player's. Vendor / quest flags and
gathering skills are inferred from name keywords.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Set

from nav_core.snapshot import Position

from .records import MapDataStatistics
from .store import MapDataStore


log = logging.getLogger(__name__)


class EntityKind(Enum):
    NODE = "Node"
    NPC = "NPC"
    MOB = "Mob"


@dataclass(frozen=True)
class NearbyEntity:
    name: str
    kind: EntityKind
    position: Position
    level: int = 0
    hostility: str = "Neutral"


_VENDOR_KEYWORDS = ("Vendor", "Merchant", "Trader")
_QUEST_KEYWORDS = ("Quest", "Captain", "Guard")

# First match wins.
_SKILL_KEYWORDS = (
    ("Mining", ("Ore", "Iron", "Copper", "Tin", "Silver", "Gold")),
    ("Herbalism", ("Herb", "Plant", "Flower")),
    ("Woodcutting", ("Tree", "Wood")),
)


def infer_required_skill(node_name: str) -> Optional[str]:
    for skill, keywords in _SKILL_KEYWORDS:
        if any(k in node_name for k in keywords):
            return skill
    return None


def infer_npc_roles(npc_name: str) -> tuple[bool, bool]:
    """(is_vendor, has_quests) guessed from the NPC's name."""
    is_vendor = any(k in npc_name for k in _VENDOR_KEYWORDS)
    has_quests = any(k in npc_name for k in _QUEST_KEYWORDS)
    return is_vendor, has_quests


def entity_key(entity: NearbyEntity) -> str:
    return f"{entity.name}_{entity.position.x:.0f}_{entity.position.z:.0f}"


class MapDiscoveryController:
    """
    Scanner on top of MapDataStore.

    Toggles: `enabled`, `record_nodes`, `record_npcs`, `record_mob_spawns`.
    Counters count only brand-new discoveries made through this controller.
    """

    def __init__(
        self,
        store: MapDataStore,
        *,
        enabled: bool = True,
        record_nodes: bool = True,
        record_npcs: bool = True,
        record_mob_spawns: bool = True,
    ) -> None:
        self._store = store
        self.enabled = enabled
        self.record_nodes = record_nodes
        self.record_npcs = record_npcs
        self.record_mob_spawns = record_mob_spawns

        self.nodes_discovered = 0
        self.npcs_discovered = 0
        self.mob_spawns_discovered = 0

        self._seen_nodes: Set[str] = set()
        self._seen_npcs: Set[str] = set()
        self._seen_mobs: Set[str] = set()

    @property
    def store(self) -> MapDataStore:
        return self._store

    def update(self, entities: Iterable[NearbyEntity], position: Optional[Position]) -> int:
        """
        Record newly seen entities; returns how many new discoveries were made.

        Skipped entirely when disabled, with nothing in view, or without a
        player position this tick.
        """
        if not self.enabled or position is None:
            return 0

        visible = list(entities)
        if not visible:
            return 0

        found = 0
        for entity in visible:
            key = entity_key(entity)

            if entity.kind is EntityKind.NODE:
                if not self.record_nodes or key in self._seen_nodes:
                    continue
                self._seen_nodes.add(key)
                if self._store.record_resource_node(
                    entity.name, entity.position, infer_required_skill(entity.name)
                ):
                    self.nodes_discovered += 1
                    found += 1

            elif entity.kind is EntityKind.NPC:
                if not self.record_npcs or key in self._seen_npcs:
                    continue
                self._seen_npcs.add(key)
                is_vendor, has_quests = infer_npc_roles(entity.name)
                if self._store.record_npc(entity.name, entity.position, is_vendor, has_quests):
                    self.npcs_discovered += 1
                    found += 1

            elif entity.kind is EntityKind.MOB:
                if not self.record_mob_spawns or key in self._seen_mobs:
                    continue
                self._seen_mobs.add(key)
                if self._store.record_mob_spawn(
                    entity.name, entity.position, entity.level, entity.hostility
                ):
                    self.mob_spawns_discovered += 1
                    found += 1

        if found:
            log.debug("Discovery scan: %d new of %d visible", found, len(visible))
        return found

    def reset_recording_history(self) -> None:
        """Forget which entities were recorded this session."""
        self._seen_nodes.clear()
        self._seen_npcs.clear()
        self._seen_mobs.clear()

    def save_to_disk(self) -> None:
        self._store.save_to_disk()

    def load_from_disk(self) -> None:
        self._store.load_from_disk()

    def get_statistics(self) -> MapDataStatistics:
        return self._store.get_statistics()


__all__ = [
    "EntityKind",
    "MapDiscoveryController",
    "NearbyEntity",
    "entity_key",
    "infer_npc_roles",
    "infer_required_skill",
]
