# wire navigation components from an AgentProfile and drive them per tick
# src/nav_core/runtime.py
"""
Runtime wiring for the navigation core.

NavRuntime owns one instance of every tick-driven component and calls them
in a fixed order from a single caller:

    1. RouteRecorder.update(position)
    2. RoutePlayer.update(snapshot)        (consults the StuckMonitor)
    3. MapDiscoveryController.update(entities, position)

None of these components lock internally, so ticks must never overlap;
MapDataStore is the only piece that may also be used from other threads
(e.g. a periodic saver).
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from env.schema import AgentProfile
from mapping.discovery import MapDiscoveryController, NearbyEntity
from mapping.store import MapDataStore
from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import JsonFileLogger, log_event
from waypoints.exchange import WaypointExchange
from waypoints.files import WaypointFileManager
from waypoints.player import RoutePlayer
from waypoints.recorder import RouteRecorder

from .input import MovementInput
from .nav.mover import Navigator
from .nav.stuck import StuckMonitor
from .snapshot import FeedSnapshot


log = logging.getLogger(__name__)


@dataclass
class NavRuntime:
    """Bundle of wired navigation components."""

    profile: AgentProfile
    navigator: Navigator
    stuck_monitor: StuckMonitor
    player: RoutePlayer
    recorder: RouteRecorder
    files: WaypointFileManager
    exchange: WaypointExchange
    map_store: MapDataStore
    discovery: MapDiscoveryController
    bus: Optional[EventBus] = None
    event_logger: Optional[JsonFileLogger] = None

    @classmethod
    def from_profile(
        cls,
        profile: AgentProfile,
        movement: MovementInput,
        bus: Optional[EventBus] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
    ) -> "NavRuntime":
        navigator = Navigator(movement, config=profile.navigator)
        stuck = StuckMonitor(
            movement,
            config=profile.stuck,
            clock=clock,
            rng=rng,
            bus=bus,
        )
        player = RoutePlayer(
            navigator,
            stuck,
            bus=bus,
            clock=clock,
            override_loop=profile.playback.override_loop,
            abort_on_stuck=profile.playback.abort_on_stuck,
        )
        recorder = RouteRecorder(config=profile.recorder, clock=clock, bus=bus)
        files = WaypointFileManager(profile.paths.waypoint_directory)

        store = MapDataStore(
            profile.paths.map_data_directory,
            dedup_radius=profile.mapping.dedup_radius,
            bus=bus,
        )
        discovery = MapDiscoveryController(
            store,
            enabled=profile.mapping.auto_discovery,
            record_nodes=profile.mapping.record_nodes,
            record_npcs=profile.mapping.record_npcs,
            record_mob_spawns=profile.mapping.record_mob_spawns,
        )

        return cls(
            profile=profile,
            navigator=navigator,
            stuck_monitor=stuck,
            player=player,
            recorder=recorder,
            files=files,
            exchange=WaypointExchange(files, profile.paths.export_directory),
            map_store=store,
            discovery=discovery,
            bus=bus,
        )

    # ------------------------------------------------------------------
    # Event log
    # ------------------------------------------------------------------

    def attach_event_log(self) -> Optional[JsonFileLogger]:
        """Start writing bus events to profile.paths.event_log, if configured."""
        if self.event_logger is not None:
            return self.event_logger
        path = self.profile.paths.event_log
        if self.bus is None or path is None:
            return None
        self.event_logger = JsonFileLogger(path, self.bus)
        log.info("Writing navigation events to %s", path)
        return self.event_logger

    def close(self) -> None:
        self.navigator.stop_movement()
        if self.event_logger is not None:
            self.event_logger.close()
            self.event_logger = None

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(
        self,
        snapshot: Optional[FeedSnapshot],
        entities: Iterable[NearbyEntity] = (),
    ) -> None:
        position = snapshot.position if snapshot is not None else None

        self.recorder.update(position)
        self.player.update(snapshot)
        self.discovery.update(entities, position)

    def safe_tick(
        self,
        snapshot: Optional[FeedSnapshot],
        entities: Iterable[NearbyEntity] = (),
        correlation_id: Optional[str] = None,
    ) -> None:
        """
        tick() inside a guard.

        A failure is reported as a LOG event with subtype
        "NAV_TICK_EXCEPTION" and then re-raised; the caller decides how
        fatal it is.
        """
        try:
            self.tick(snapshot, entities)
        except Exception as exc:
            log.exception("Navigation tick failed")
            log_event(
                bus=self.bus,
                module="nav_core.runtime",
                event_type=EventType.LOG,
                message="Navigation tick raised an exception",
                payload={
                    "subtype": "NAV_TICK_EXCEPTION",
                    "player_state": self.player.state.value,
                    "exception_repr": repr(exc),
                },
                correlation_id=correlation_id,
            )
            raise


__all__ = ["NavRuntime"]
