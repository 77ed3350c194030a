# src/cli/inspect_routes.py
"""
Inspect saved route files and discovered map data from the terminal.

    python -m cli.inspect_routes path waypoints/MinesLoop.json
    python -m cli.inspect_routes path exports/waypoints/MinesLoop.json
    python -m cli.inspect_routes mapdata mapdata/

Exit codes: 0 ok, 1 file missing / unreadable, 2 usage error.
"""

import argparse
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mapping.store import MapDataFormatError, MapDataStore
from monitoring.logging_config import configure_logging, resolve_level
from waypoints.exchange import read_path_file
from waypoints.model import WaypointFormatError, WaypointPath


def _fmt(value: float) -> str:
    return f"{value:.1f}"


def render_path(path: WaypointPath, console: Console) -> None:
    """Print one path as a waypoint table plus its validation problems."""
    mode = "loop" if path.loop else "reverse at end" if path.reverse_at_end else "one-way"
    console.print(f"[bold]{escape(path.name)}[/bold]  ({path.count} waypoints, {mode})")
    if path.zone or path.level_range:
        console.print(f"zone: {escape(path.zone or '-')}   levels: {escape(path.level_range or '-')}")
    if path.description:
        console.print(escape(path.description))

    table = Table(title="Waypoints")
    table.add_column("#", justify="right")
    table.add_column("Type")
    table.add_column("Name")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")
    table.add_column("Z", justify="right")
    table.add_column("Delay", justify="right")

    for i, wp in enumerate(path.waypoints):
        table.add_row(
            str(i),
            wp.kind.value,
            escape(wp.name or ""),
            _fmt(wp.position.x),
            _fmt(wp.position.y),
            _fmt(wp.position.z),
            f"{wp.delay:g}s" if wp.delay else "",
        )
    console.print(table)

    problems = path.validate()
    if problems:
        console.print("[yellow]Validation problems:[/yellow]")
        for problem in problems:
            console.print(f"  - {escape(problem)}")
    else:
        console.print("[green]Path is valid.[/green]")


def render_map_data(store: MapDataStore, console: Console) -> None:
    """Print discovery statistics and one table per discovery kind."""
    console.print(f"[bold]{escape(str(store.data_directory))}[/bold]  {store.get_statistics()}")

    nodes = Table(title="Resource nodes")
    for col in ("Id", "Name", "Skill", "Position", "Zone", "Seen"):
        nodes.add_column(col)
    for n in store.resource_nodes:
        nodes.add_row(
            str(n.id),
            escape(n.name),
            escape(n.required_skill or "-"),
            str(n.position),
            escape(n.zone),
            str(n.times_seen),
        )
    console.print(nodes)

    npcs = Table(title="NPCs")
    for col in ("Id", "Name", "Vendor", "Quests", "Position", "Zone", "Seen"):
        npcs.add_column(col)
    for n in store.npcs:
        npcs.add_row(
            str(n.id),
            escape(n.name),
            "yes" if n.is_vendor else "",
            "yes" if n.has_quests else "",
            str(n.position),
            escape(n.zone),
            str(n.times_seen),
        )
    console.print(npcs)

    mobs = Table(title="Mob spawns")
    for col in ("Id", "Name", "Level", "Faction", "Position", "Zone", "Seen"):
        mobs.add_column(col)
    for m in store.mob_spawns:
        mobs.add_row(
            str(m.id),
            escape(m.name),
            str(m.level),
            escape(m.faction),
            str(m.position),
            escape(m.zone),
            str(m.times_seen),
        )
    console.print(mobs)


def _cmd_path(args: argparse.Namespace, console: Console) -> int:
    try:
        path = read_path_file(args.file)
    except FileNotFoundError:
        console.print(f"[red]No such file:[/red] {escape(args.file)}")
        return 1
    except WaypointFormatError as exc:
        console.print(f"[red]Malformed waypoint file:[/red] {escape(str(exc))}")
        return 1
    render_path(path, console)
    return 0


def _cmd_mapdata(args: argparse.Namespace, console: Console) -> int:
    directory = Path(args.directory)
    if not directory.is_dir():
        console.print(f"[red]No such directory:[/red] {escape(str(directory))}")
        return 1
    store = MapDataStore(directory)
    try:
        store.load_from_disk()
    except MapDataFormatError as exc:
        console.print(f"[red]Malformed map data:[/red] {escape(str(exc))}")
        return 1
    render_map_data(store, console)
    return 0


def main(argv: Optional[list[str]] = None, console: Optional[Console] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Inspect waypoint path files and discovered map data.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_path = sub.add_parser("path", help="Show the waypoints of a saved or exported path file")
    p_path.add_argument("file", help="Path JSON file")
    p_path.set_defaults(handler=_cmd_path)

    p_map = sub.add_parser("mapdata", help="Show discoveries stored in a map data directory")
    p_map.add_argument("directory", help="Directory holding resource_nodes.json / npcs.json / mob_spawns.json")
    p_map.set_defaults(handler=_cmd_mapdata)

    args = parser.parse_args(argv)
    try:
        level = resolve_level(args.log_level)
    except ValueError as exc:
        parser.error(str(exc))
    configure_logging(level)

    return args.handler(args, console or Console())


if __name__ == "__main__":
    raise SystemExit(main())
