# src/nav_core/input.py
"""
Movement command surface consumed by nav_core.

The concrete input emitter (keyboard simulation, IPC bridge, ...) lives
outside this repository. Navigation code only talks to the MovementInput
protocol below, so any emitter that implements it can drive the agent.

Primitives are idempotent while held. `duration=None` means "hold until
explicitly stopped"; a float holds the key for that many seconds.
"""

from __future__ import annotations

from typing import Optional, Protocol


class MovementInput(Protocol):
    """Directional movement primitives."""

    def move_forward(self, duration: Optional[float] = None) -> None:
        ...

    def move_backward(self, duration: Optional[float] = None) -> None:
        ...

    def strafe_left(self, duration: Optional[float] = None) -> None:
        ...

    def strafe_right(self, duration: Optional[float] = None) -> None:
        ...

    def turn_left(self, duration: Optional[float] = None) -> None:
        ...

    def turn_right(self, duration: Optional[float] = None) -> None:
        ...

    def jump(self) -> None:
        ...

    def stop_turning(self) -> None:
        """Release both turn keys."""
        ...

    def stop_all_movement(self) -> None:
        """Release every held movement key."""
        ...


__all__ = ["MovementInput"]
