# tests/test_stuck_monitor.py
"""
Unit tests for nav_core.nav.stuck.StuckMonitor.

Time is driven by FakeClock; movement commands are captured by
FakeMovementInput.
"""

from __future__ import annotations

import random
from typing import List

from monitoring.bus import EventBus
from monitoring.events import EventType, MonitoringEvent
from nav_core.nav.stuck import StuckMonitor, StuckMonitorConfig
from nav_core.snapshot import Position
from nav_core.testing.fakes import FakeClock, FakeMovementInput


HERE = Position(10.0, 64.0, 10.0)


def make_monitor(**cfg_overrides):
    movement = FakeMovementInput()
    clock = FakeClock()
    bus = EventBus()
    events: List[MonitoringEvent] = []
    bus.subscribe(events.append)
    monitor = StuckMonitor(
        movement,
        config=StuckMonitorConfig(**cfg_overrides),
        clock=clock,
        rng=random.Random(1234),
        bus=bus,
    )
    return monitor, movement, clock, events


def stuck_check(monitor: StuckMonitor, clock: FakeClock, position: Position = HERE) -> bool:
    clock.advance(monitor.config.check_interval_s)
    return monitor.check(position)


def test_first_check_only_records_position() -> None:
    monitor, movement, _, _ = make_monitor()

    assert monitor.check(HERE) is False
    assert monitor.last_checked_position == HERE
    assert movement.commands == []


def test_missing_position_is_not_no_progress() -> None:
    monitor, movement, clock, _ = make_monitor()
    monitor.check(HERE)

    for _ in range(10):
        clock.advance(5.0)
        assert monitor.check(None) is False

    assert not monitor.is_stuck
    assert movement.commands == []


def test_checks_within_interval_are_skipped() -> None:
    monitor, movement, clock, _ = make_monitor()
    monitor.check(HERE)

    clock.advance(1.0)
    assert monitor.check(HERE) is False
    assert not monitor.is_stuck
    assert movement.commands == []


def test_recovery_maneuvers_escalate() -> None:
    monitor, movement, clock, _ = make_monitor()
    monitor.check(HERE)

    assert stuck_check(monitor, clock) is True
    assert movement.names() == ["jump"]

    movement.clear()
    assert stuck_check(monitor, clock) is True
    assert len(movement.commands) == 1
    assert movement.commands[0].name in ("strafe_left", "strafe_right")
    assert movement.commands[0].duration == 0.5

    movement.clear()
    assert stuck_check(monitor, clock) is True
    assert movement.names() == ["move_backward", "jump"]

    assert monitor.unstuck_attempts == 3


def test_turn_maneuver_from_fourth_attempt() -> None:
    monitor, movement, clock, _ = make_monitor(max_unstuck_attempts=5)
    monitor.check(HERE)
    for _ in range(3):
        stuck_check(monitor, clock)

    movement.clear()
    assert stuck_check(monitor, clock) is True
    assert movement.names() == ["turn_right", "jump"]
    assert movement.commands[0].duration == 0.3


def test_exhaustion_emits_single_terminal_signal() -> None:
    monitor, movement, clock, events = make_monitor()
    monitor.check(HERE)

    results = [stuck_check(monitor, clock) for _ in range(3 + 1)]
    assert results == [True, True, True, False]
    assert monitor.exhausted

    # Keep failing: no more maneuvers, no more terminal events
    movement.clear()
    for _ in range(5):
        assert stuck_check(monitor, clock) is False
    assert movement.commands == []

    stuck_events = [e for e in events if e.event_type is EventType.MOVEMENT_STUCK]
    assert len(stuck_events) == 1
    assert stuck_events[0].payload["attempts"] == 3


def test_progress_clears_stuck_state() -> None:
    monitor, _, clock, events = make_monitor()
    monitor.check(HERE)
    stuck_check(monitor, clock)
    assert monitor.is_stuck

    assert stuck_check(monitor, clock, HERE.offset(dx=3.0)) is False
    assert not monitor.is_stuck
    assert monitor.unstuck_attempts == 0

    changes = [e.payload["is_stuck"] for e in events if e.event_type is EventType.STUCK_STATE_CHANGED]
    assert changes == [True, False]


def test_vertical_motion_does_not_count_as_progress() -> None:
    monitor, _, clock, _ = make_monitor()
    monitor.check(HERE)

    # Jumping in place changes y only
    assert stuck_check(monitor, clock, HERE.offset(dy=1.5)) is True
    assert monitor.is_stuck


def test_recovering_reported_between_checks() -> None:
    monitor, _, clock, _ = make_monitor()
    monitor.check(HERE)
    stuck_check(monitor, clock)

    clock.advance(0.5)
    assert monitor.check(HERE) is True


def test_between_checks_reports_stuck_even_when_exhausted() -> None:
    monitor, movement, clock, _ = make_monitor()
    monitor.check(HERE)
    for _ in range(4):
        stuck_check(monitor, clock)
    assert monitor.exhausted
    assert not monitor.recovering

    movement.clear()
    clock.advance(0.5)
    assert monitor.check(HERE) is True
    assert movement.commands == []


def test_reset_clears_everything() -> None:
    monitor, _, clock, _ = make_monitor()
    monitor.check(HERE)
    for _ in range(4):
        stuck_check(monitor, clock)
    assert monitor.exhausted

    monitor.reset()

    assert not monitor.is_stuck
    assert not monitor.exhausted
    assert monitor.unstuck_attempts == 0
    assert monitor.last_checked_position is None
