# tests/test_map_discovery.py
"""
Tests for mapping.discovery.MapDiscoveryController.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from mapping.discovery import (
    EntityKind,
    MapDiscoveryController,
    NearbyEntity,
    entity_key,
    infer_npc_roles,
    infer_required_skill,
)
from mapping.store import MapDataStore
from nav_core.snapshot import Position


PLAYER = Position(0.0, 64.0, 0.0)


def node(name: str, x: float = 10.0, z: float = 10.0) -> NearbyEntity:
    return NearbyEntity(name, EntityKind.NODE, Position(x, 64.0, z))


@pytest.mark.parametrize(
    "name, skill",
    [
        ("Copper Ore", "Mining"),
        ("Gold Deposit", "Mining"),
        ("Fire Flower", "Herbalism"),
        ("Wild Herb", "Herbalism"),
        ("Old Tree", "Woodcutting"),
        ("Driftwood", None),   # keyword match is case-sensitive
        ("Crate", None),
    ],
)
def test_infer_required_skill(name: str, skill) -> None:
    assert infer_required_skill(name) == skill


def test_infer_npc_roles() -> None:
    assert infer_npc_roles("Merchant Ann") == (True, False)
    assert infer_npc_roles("Guard Captain") == (False, True)
    assert infer_npc_roles("Quest Vendor") == (True, True)
    assert infer_npc_roles("Villager") == (False, False)


def test_entity_key_rounds_coordinates() -> None:
    assert entity_key(node("Herb", 10.4, -3.6)) == "Herb_10_-4"


def test_update_records_each_kind(tmp_path: Path) -> None:
    store = MapDataStore(tmp_path)
    controller = MapDiscoveryController(store)

    found = controller.update(
        [
            node("Iron Ore"),
            NearbyEntity("Trader Joe", EntityKind.NPC, Position(5, 64, 5)),
            NearbyEntity("Wolf", EntityKind.MOB, Position(30, 64, 30), level=4, hostility="Hostile"),
        ],
        PLAYER,
    )

    assert found == 3
    assert controller.nodes_discovered == 1
    assert controller.npcs_discovered == 1
    assert controller.mob_spawns_discovered == 1

    (n,) = store.resource_nodes
    assert n.required_skill == "Mining"
    assert n.position == Position(10, 64, 10)   # entity position, not the player's
    assert store.npcs[0].is_vendor
    assert store.mob_spawns[0].level == 4
    assert store.mob_spawns[0].faction == "Hostile"


def test_same_entity_recorded_once_per_session(tmp_path: Path) -> None:
    store = MapDataStore(tmp_path)
    controller = MapDiscoveryController(store)

    controller.update([node("Herb")], PLAYER)
    controller.update([node("Herb")], PLAYER)

    assert store.resource_nodes[0].times_seen == 1

    controller.reset_recording_history()
    controller.update([node("Herb")], PLAYER)

    assert store.resource_nodes[0].times_seen == 2
    assert controller.nodes_discovered == 1


def test_counters_follow_store_result(tmp_path: Path) -> None:
    store = MapDataStore(tmp_path)
    controller = MapDiscoveryController(store)

    # Different session keys, same record within the dedup radius
    controller.update([node("Herb", 10, 10), node("Herb", 12, 10)], PLAYER)

    assert controller.nodes_discovered == 1
    assert store.resource_nodes[0].times_seen == 2


def test_update_skipped_without_position_or_when_disabled(tmp_path: Path) -> None:
    store = MapDataStore(tmp_path)
    controller = MapDiscoveryController(store)

    assert controller.update([node("Herb")], None) == 0
    controller.enabled = False
    assert controller.update([node("Herb")], PLAYER) == 0
    controller.enabled = True
    assert controller.update([], PLAYER) == 0

    assert store.get_statistics().resource_node_count == 0


def test_per_kind_toggles(tmp_path: Path) -> None:
    store = MapDataStore(tmp_path)
    controller = MapDiscoveryController(store, record_mob_spawns=False)

    controller.update(
        [node("Herb"), NearbyEntity("Wolf", EntityKind.MOB, Position(0, 0, 0))],
        PLAYER,
    )

    stats = controller.get_statistics()
    assert stats.resource_node_count == 1
    assert stats.mob_spawn_count == 0


def test_save_and_load_delegate_to_store(tmp_path: Path) -> None:
    store = MapDataStore(tmp_path)
    controller = MapDiscoveryController(store)
    controller.update([node("Herb")], PLAYER)
    controller.save_to_disk()

    other = MapDiscoveryController(MapDataStore(tmp_path))
    other.load_from_disk()

    assert other.get_statistics().resource_node_count == 1
