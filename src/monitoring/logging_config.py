# src/monitoring/logging_config.py
"""
Process-wide logging setup for navigation tools and runtimes.

Entry points (cli.inspect_routes, embedding runtimes) call
configure_logging() once before building a NavRuntime:

    from monitoring.logging_config import configure_logging
    configure_logging("INFO", module_levels={"waypoints.player": "DEBUG"})

Per-tick chatter (move_to headings, recorder samples) is logged at DEBUG,
state transitions at INFO, so the default level shows route progress
without flooding the console.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Mapping, Optional, Union

LevelLike = Union[int, str]

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def resolve_level(level: LevelLike) -> int:
    """Accept logging.DEBUG or a name like "debug"; unknown names raise ValueError."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def configure_logging(
    level: LevelLike = logging.INFO,
    *,
    log_file: Optional[Path] = None,
    module_levels: Optional[Mapping[str, LevelLike]] = None,
) -> None:
    """
    Install a stdout handler (and optionally a file handler) on the root
    logger, unless the host application already configured one.

    `module_levels` overrides individual loggers such as "nav_core.nav.stuck"
    and is applied even when root handlers already exist.
    """
    for name, module_level in (module_levels or {}).items():
        logging.getLogger(name).setLevel(resolve_level(module_level))

    root = logging.getLogger()
    if root.handlers:
        return

    formatter = logging.Formatter(fmt=LOG_FORMAT)

    console = logging.StreamHandler(stream=sys.stdout)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root.setLevel(resolve_level(level))
