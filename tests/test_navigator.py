# tests/test_navigator.py
"""
Unit tests for nav_core.nav.mover.Navigator.
"""

from __future__ import annotations

import math

from nav_core.nav.geometry import Direction
from nav_core.nav.mover import Navigator, NavigatorConfig, press_direction
from nav_core.snapshot import Position
from nav_core.testing.fakes import FakeMovementInput


ORIGIN = Position(0.0, 0.0, 0.0)


def make_nav(stopping_distance: float = 2.0):
    movement = FakeMovementInput()
    nav = Navigator(movement, config=NavigatorConfig(stopping_distance=stopping_distance))
    return nav, movement


def test_move_to_presses_forward_for_positive_z() -> None:
    nav, movement = make_nav()

    assert nav.move_to(Position(0, 0, 20), ORIGIN) is True
    assert movement.names() == ["stop_all_movement", "move_forward"]
    assert movement.held == {"move_forward"}


def test_move_to_diagonal_presses_two_primitives() -> None:
    nav, movement = make_nav()

    nav.move_to(Position(-10, 0, 10), ORIGIN)
    assert movement.held == {"move_forward", "strafe_left"}

    nav.move_to(Position(10, 0, -10), ORIGIN)
    assert movement.held == {"move_backward", "strafe_right"}


def test_move_to_without_position_is_noop() -> None:
    nav, movement = make_nav()

    assert nav.move_to(Position(0, 0, 20), None) is False
    assert movement.commands == []


def test_move_to_within_stopping_distance_stops() -> None:
    nav, movement = make_nav(stopping_distance=2.0)

    assert nav.move_to(Position(0, 0, 1.5), ORIGIN) is False
    assert movement.names() == ["stop_all_movement"]


def test_has_reached_and_distance_to() -> None:
    nav, _ = make_nav(stopping_distance=1.0)
    target = Position(0, 0, 1.0)

    assert nav.has_reached(target, ORIGIN)
    assert not nav.has_reached(Position(0, 0, 1.01), ORIGIN)
    assert not nav.has_reached(target, None)
    assert nav.distance_to(target, None) == math.inf
    assert nav.distance_to(Position(3, 4, 0), ORIGIN) == 5.0


def test_face_target_turns_and_stops_within_tolerance() -> None:
    nav, movement = make_nav()
    target = Position(0, 0, 10)  # angle 90

    assert nav.face_target(target, ORIGIN, yaw=0.0) is True
    assert movement.names() == ["turn_right"]

    movement.clear()
    assert nav.face_target(target, ORIGIN, yaw=180.0) is True
    assert movement.names() == ["turn_left"]

    movement.clear()
    assert nav.face_target(target, ORIGIN, yaw=95.0) is False
    assert movement.names() == ["stop_turning"]
    assert nav.is_facing(target, ORIGIN, yaw=85.0)


def test_press_direction_cardinals() -> None:
    movement = FakeMovementInput()
    press_direction(movement, Direction.LEFT)
    press_direction(movement, Direction.BACKWARD)
    assert movement.names() == ["strafe_left", "move_backward"]
