# path: src/waypoints/files.py
"""
Directory-backed storage for waypoint path files (one JSON file per path).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from .model import WaypointFormatError, WaypointPath


log = logging.getLogger(__name__)

_INVALID_FILE_NAME_CHARS = set('<>:"/\\|?*') | {chr(c) for c in range(32)}


def sanitize_file_name(name: str) -> str:
    """Strip characters that are not valid in file names; falls back to "waypoint"."""
    cleaned = "".join(ch for ch in name if ch not in _INVALID_FILE_NAME_CHARS)
    return cleaned if cleaned.strip() else "waypoint"


class WaypointFileManager:
    """
    Saves and loads WaypointPaths under a single directory.

    The directory is created lazily on the first save; listing or loading
    from a directory that does not exist yields nothing.
    """

    sanitize_file_name = staticmethod(sanitize_file_name)

    def __init__(self, directory: Union[str, Path]) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def list_files(self) -> List[Path]:
        if not self._directory.is_dir():
            return []
        return sorted(self._directory.glob("*.json"))

    def path_for(self, name: str) -> Path:
        return self._directory / (sanitize_file_name(name) + ".json")

    def save_path(self, path: WaypointPath, file_name: Optional[str] = None) -> Path:
        """
        Write `path` into the directory and return the file written.

        The file name defaults to the sanitised path name.
        """
        self._directory.mkdir(parents=True, exist_ok=True)
        target = self._directory / file_name if file_name else self.path_for(path.name)
        path.save_to_file(target)
        log.info("Saved waypoint path %r to %s", path.name, target)
        return target

    def load_path(self, name: str) -> Optional[WaypointPath]:
        """Load by path name; None when no such file exists."""
        return WaypointPath.load_from_file(self.path_for(name))

    def load_all(self) -> List[WaypointPath]:
        """Load every readable path file, skipping (and logging) bad ones."""
        paths: List[WaypointPath] = []
        for file in self.list_files():
            try:
                loaded = WaypointPath.load_from_file(file)
            except (WaypointFormatError, OSError) as exc:
                log.warning("Error loading waypoint file %s: %s", file, exc)
                continue
            if loaded is not None:
                paths.append(loaded)
        return paths


__all__ = ["WaypointFileManager", "sanitize_file_name"]
