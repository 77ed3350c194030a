# path: src/mapping/__init__.py
"""
mapping package: discovered map data (resource nodes, NPCs, mob spawns).
"""

from __future__ import annotations

from .records import (
    Discovery,
    MapDataStatistics,
    MobSpawnPoint,
    NpcDiscovery,
    ResourceNodeDiscovery,
)
from .store import MapDataFormatError, MapDataStore
from .discovery import EntityKind, MapDiscoveryController, NearbyEntity

__all__ = [
    "Discovery",
    "MapDataStatistics",
    "MobSpawnPoint",
    "NpcDiscovery",
    "ResourceNodeDiscovery",
    "MapDataFormatError",
    "MapDataStore",
    "EntityKind",
    "MapDiscoveryController",
    "NearbyEntity",
]
