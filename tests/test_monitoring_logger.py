# tests/test_monitoring_logger.py
"""
Tests for monitoring.logger: the JSONL event log written next to a
navigation session, and the log_event helper components publish through.
"""

from __future__ import annotations

import json
from pathlib import Path

from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import JsonFileLogger, log_event
from nav_core.snapshot import Position
from waypoints.model import Waypoint, WaypointKind


def read_lines(path: Path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_waypoint_reached_event_round_trips_as_json(tmp_path: Path) -> None:
    bus = EventBus()
    log_path = tmp_path / "events.log"
    logger = JsonFileLogger(log_path, bus)

    wp = Waypoint(Position(12.5, 64.0, -3.0), WaypointKind.VENDOR, "Smith", delay=2.0)
    log_event(
        bus=bus,
        module="waypoints.player",
        event_type=EventType.WAYPOINT_REACHED,
        message=str(wp),
        payload={"logical_index": 3, "physical_index": 1, "waypoint": wp.to_dict()},
        correlation_id="Mines Loop",
    )
    logger.close()

    (record,) = read_lines(log_path)
    assert record["module"] == "waypoints.player"
    assert record["event_type"] == "WAYPOINT_REACHED"
    assert record["correlation_id"] == "Mines Loop"
    assert record["payload"]["physical_index"] == 1
    assert Waypoint.from_dict(record["payload"]["waypoint"]) == wp
    assert isinstance(record["ts"], float)


def test_non_ascii_names_are_kept_readable(tmp_path: Path) -> None:
    bus = EventBus()
    log_path = tmp_path / "events.log"
    logger = JsonFileLogger(log_path, bus)

    log_event(
        bus=bus,
        module="mapping.store",
        event_type=EventType.NPC_DISCOVERED,
        message="Händler Jörg",
        payload={"name": "Händler Jörg", "isVendor": True},
    )
    logger.close()

    assert "Händler Jörg" in log_path.read_text(encoding="utf-8")


def test_session_log_directory_is_created(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "navigation" / "events.log"
    bus = EventBus()
    logger = JsonFileLogger(log_path, bus)

    log_event(bus=bus, module="waypoints.recorder", event_type=EventType.RECORDING_STARTED, message="Loop")
    logger.close()

    assert [r["event_type"] for r in read_lines(log_path)] == ["RECORDING_STARTED"]


def test_logger_appends_across_sessions(tmp_path: Path) -> None:
    log_path = tmp_path / "events.log"
    for message in ("first run", "second run"):
        bus = EventBus()
        logger = JsonFileLogger(log_path, bus)
        log_event(bus=bus, module="nav_core.nav.stuck", event_type=EventType.MOVEMENT_STUCK, message=message)
        logger.close()

    assert [r["message"] for r in read_lines(log_path)] == ["first run", "second run"]


def test_log_event_without_bus_is_noop() -> None:
    # Components built without monitoring pass bus=None
    log_event(
        bus=None,
        module="waypoints.player",
        event_type=EventType.PLAYBACK_STARTED,
        message="nobody listening",
    )


def test_logger_stops_writing_after_close(tmp_path: Path) -> None:
    bus = EventBus()
    log_path = tmp_path / "events.log"
    logger = JsonFileLogger(log_path, bus)

    log_event(bus=bus, module="waypoints.player", event_type=EventType.PATH_COMPLETED, message="done")
    logger.close()
    log_event(bus=bus, module="waypoints.player", event_type=EventType.PLAYBACK_STARTED, message="again")

    assert [r["event_type"] for r in read_lines(log_path)] == ["PATH_COMPLETED"]
