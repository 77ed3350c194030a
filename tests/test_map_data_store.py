# tests/test_map_data_store.py
"""
Tests for mapping.store.MapDataStore.

Covers:
- dedup by name + 2D radius, id assignment, NPC flag merging
- discovery events
- JSON persistence (round-trip, missing files, malformed files)
- concurrent record/save smoke check
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import List

import pytest

from mapping.store import MapDataFormatError, MapDataStore
from monitoring.bus import EventBus
from monitoring.events import EventType, MonitoringEvent
from nav_core.snapshot import Position


def make_store(tmp_path: Path, **kwargs):
    bus = EventBus()
    events: List[MonitoringEvent] = []
    bus.subscribe(events.append)
    store = MapDataStore(tmp_path / "mapdata", bus=bus, **kwargs)
    return store, events


def test_directory_created(tmp_path: Path) -> None:
    store, _ = make_store(tmp_path)
    assert store.data_directory.is_dir()


def test_same_name_within_radius_is_merged(tmp_path: Path) -> None:
    store, events = make_store(tmp_path)

    assert store.record_resource_node("Iron Vein", Position(0, 0, 0), "Mining") is True
    assert store.record_resource_node("Iron Vein", Position(3, 50, 4), "Mining") is False

    nodes = store.resource_nodes
    assert len(nodes) == 1
    assert nodes[0].times_seen == 2
    # canonical position is the first observation
    assert nodes[0].position == Position(0, 0, 0)
    assert nodes[0].last_seen_at >= nodes[0].discovered_at
    assert len([e for e in events if e.event_type is EventType.NODE_DISCOVERED]) == 1


def test_outside_radius_creates_new_record(tmp_path: Path) -> None:
    store, _ = make_store(tmp_path)
    store.record_mob_spawn("Wolf", Position(0, 0, 0), 3, "Hostile")

    assert store.record_mob_spawn("Wolf", Position(5.1, 0, 0), 3, "Hostile") is True

    spawns = store.mob_spawns
    assert [s.id for s in spawns] == [1, 2]
    assert spawns[1].level == 3
    assert spawns[1].faction == "Hostile"


def test_different_name_is_never_merged(tmp_path: Path) -> None:
    store, _ = make_store(tmp_path)
    store.record_resource_node("Copper Vein", Position(0, 0, 0))
    assert store.record_resource_node("Tin Vein", Position(0, 0, 0)) is True


def test_ids_continue_from_max(tmp_path: Path) -> None:
    store, _ = make_store(tmp_path)
    for i in range(3):
        store.record_resource_node("Herb", Position(i * 100, 0, 0))

    assert [n.id for n in store.resource_nodes] == [1, 2, 3]


def test_custom_dedup_radius(tmp_path: Path) -> None:
    store, _ = make_store(tmp_path, dedup_radius=20.0)
    store.record_npc("Guard Captain", Position(0, 0, 0), False, True)
    assert store.record_npc("Guard Captain", Position(15, 0, 0), False, True) is False


def test_npc_flags_are_ored(tmp_path: Path) -> None:
    store, events = make_store(tmp_path)
    store.record_npc("Trader Bob", Position(0, 0, 0), is_vendor=True, has_quests=False)
    store.record_npc("Trader Bob", Position(1, 0, 1), is_vendor=False, has_quests=True)
    store.record_npc("Trader Bob", Position(1, 0, 1), is_vendor=False, has_quests=False)

    (npc,) = store.npcs
    assert npc.is_vendor and npc.has_quests
    assert npc.times_seen == 3
    assert [e.event_type for e in events] == [EventType.NPC_DISCOVERED]


def test_current_zone_stamps_new_records(tmp_path: Path) -> None:
    store, _ = make_store(tmp_path)
    store.current_zone = "Port Azure"
    store.record_resource_node("Oak Tree", Position(0, 0, 0))
    assert store.resource_nodes[0].zone == "Port Azure"


def test_accessors_return_copies(tmp_path: Path) -> None:
    store, _ = make_store(tmp_path)
    store.record_resource_node("Herb", Position(0, 0, 0))

    store.resource_nodes[0].times_seen = 99
    store.resource_nodes.clear()

    assert store.resource_nodes[0].times_seen == 1


def test_subscriber_may_call_back_into_store(tmp_path: Path) -> None:
    bus = EventBus()
    store = MapDataStore(tmp_path, bus=bus)
    seen = []
    # Would deadlock if events were published while holding the store lock
    bus.subscribe(lambda e: seen.append(store.get_statistics()))

    store.record_resource_node("Herb", Position(0, 0, 0))

    assert seen and seen[0].resource_node_count == 1


def test_statistics(tmp_path: Path) -> None:
    store, _ = make_store(tmp_path)
    store.record_resource_node("Herb", Position(0, 0, 0))
    store.record_npc("Merchant", Position(0, 0, 0), True, False)
    store.record_npc("Quest Giver", Position(50, 0, 0), False, True)
    store.record_mob_spawn("Wolf", Position(0, 0, 0), 2, "Hostile")

    stats = store.get_statistics()

    assert stats.resource_node_count == 1
    assert stats.vendor_count == 1
    assert stats.quest_giver_count == 1
    assert stats.mob_spawn_count == 1
    assert "Nodes: 1" in str(stats)


def test_save_load_round_trip(tmp_path: Path) -> None:
    store, _ = make_store(tmp_path)
    store.record_resource_node("Iron Vein", Position(1, 2, 3), "Mining")
    store.record_npc("Merchant", Position(4, 5, 6), True, False)
    store.record_mob_spawn("Wolf", Position(7, 8, 9), 4, "Hostile")
    store.save_to_disk()

    fresh = MapDataStore(store.data_directory)
    fresh.load_from_disk()

    assert fresh.resource_nodes == store.resource_nodes
    assert fresh.npcs == store.npcs
    assert fresh.mob_spawns == store.mob_spawns


def test_files_are_camel_case_arrays(tmp_path: Path) -> None:
    store, _ = make_store(tmp_path)
    store.record_npc("Merchant", Position(4, 5, 6), True, False)
    store.save_to_disk()

    data = json.loads((store.data_directory / "npcs.json").read_text(encoding="utf-8"))

    assert isinstance(data, list)
    assert data[0]["isVendor"] is True
    assert data[0]["timesSeen"] == 1
    assert "discoveredAt" in data[0]
    assert not list(store.data_directory.glob("*.tmp"))


def test_load_is_destructive_to_unsaved_state(tmp_path: Path) -> None:
    store, _ = make_store(tmp_path)
    store.record_resource_node("Herb", Position(0, 0, 0))
    store.save_to_disk()
    store.record_resource_node("Flower", Position(100, 0, 0))

    store.load_from_disk()

    assert [n.name for n in store.resource_nodes] == ["Herb"]


def test_missing_files_leave_collections_unchanged(tmp_path: Path) -> None:
    store, _ = make_store(tmp_path)
    store.record_npc("Merchant", Position(0, 0, 0), True, False)

    store.load_from_disk()  # nothing on disk yet

    assert len(store.npcs) == 1


def test_malformed_file_raises_and_keeps_memory(tmp_path: Path) -> None:
    store, _ = make_store(tmp_path)
    store.record_resource_node("Herb", Position(0, 0, 0))
    store.save_to_disk()
    store.record_npc("Merchant", Position(0, 0, 0), True, False)
    (store.data_directory / "mob_spawns.json").write_text("{oops", encoding="utf-8")

    with pytest.raises(MapDataFormatError):
        store.load_from_disk()

    assert len(store.resource_nodes) == 1
    assert len(store.npcs) == 1


def test_record_with_missing_keys_raises(tmp_path: Path) -> None:
    store, _ = make_store(tmp_path)
    (store.data_directory / "resource_nodes.json").write_text(
        json.dumps([{"id": 1, "name": "Herb"}]), encoding="utf-8"
    )

    with pytest.raises(MapDataFormatError):
        store.load_from_disk()


def test_clear(tmp_path: Path) -> None:
    store, _ = make_store(tmp_path)
    store.record_resource_node("Herb", Position(0, 0, 0))
    store.clear()
    assert store.get_statistics().resource_node_count == 0


def test_concurrent_record_and_save_smoke(tmp_path: Path) -> None:
    store, _ = make_store(tmp_path)
    per_thread = 50

    def recorder(offset: int) -> None:
        for i in range(per_thread):
            store.record_resource_node(f"Node{offset}", Position((offset * 1000) + i * 10, 0, 0))

    def saver() -> None:
        for _ in range(10):
            store.save_to_disk()

    threads = [threading.Thread(target=recorder, args=(n,)) for n in range(3)]
    threads.append(threading.Thread(target=saver))
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    nodes = store.resource_nodes
    assert len(nodes) == 3 * per_thread
    assert sorted(n.id for n in nodes) == list(range(1, 3 * per_thread + 1))

    store.save_to_disk()
    fresh = MapDataStore(store.data_directory)
    fresh.load_from_disk()
    assert len(fresh.resource_nodes) == 3 * per_thread


@pytest.mark.parametrize(
    "file_name, key, value",
    [
        ("npcs.json", "isVendor", "false"),
        ("npcs.json", "hasQuests", 1),
        ("mob_spawns.json", "level", "12"),
        ("mob_spawns.json", "faction", None),
        ("resource_nodes.json", "requiredSkill", 3),
    ],
)
def test_wrongly_typed_fields_are_rejected(tmp_path: Path, file_name: str, key: str, value) -> None:
    store, _ = make_store(tmp_path)
    store.record_resource_node("Herb", Position(0, 0, 0), "Herbalism")
    store.record_npc("Merchant", Position(0, 0, 0), True, False)
    store.record_mob_spawn("Wolf", Position(0, 0, 0), 3, "Hostile")
    store.save_to_disk()

    target = store.data_directory / file_name
    records = json.loads(target.read_text(encoding="utf-8"))
    records[0][key] = value
    target.write_text(json.dumps(records), encoding="utf-8")

    fresh = MapDataStore(store.data_directory)
    with pytest.raises(MapDataFormatError):
        fresh.load_from_disk()
    assert fresh.get_statistics().vendor_count == 0
