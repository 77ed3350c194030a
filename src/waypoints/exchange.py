# path: src/waypoints/exchange.py
"""
Sharing waypoint paths between installations.

An export is a standalone JSON file wrapping one path in a small versioned
envelope:

    {"version": "1.0", "exportedAt": "...", "exportedBy": "route-nav-core",
     "path": {<WaypointPath JSON>}}

Imports accept either that envelope or a bare path file as written by
WaypointFileManager, and only hand back paths that pass
WaypointPath.validate(). Operations report outcomes through ImportResult /
ExportResult instead of raising, so batch imports can keep going past a
bad file.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from .files import WaypointFileManager, sanitize_file_name
from .model import WaypointFormatError, WaypointPath, _parse_datetime


log = logging.getLogger(__name__)

EXPORT_FORMAT_VERSION = "1.0"
EXPORTED_BY = "route-nav-core"

PathLike = Union[str, Path]


class ImportResult(Enum):
    SUCCESS = "success"
    FILE_NOT_FOUND = "file_not_found"
    INVALID_FORMAT = "invalid_format"
    VALIDATION_FAILED = "validation_failed"
    FAILED = "failed"


class ExportResult(Enum):
    SUCCESS = "success"
    FILE_EXISTS = "file_exists"
    INVALID_DATA = "invalid_data"
    FAILED = "failed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class WaypointExport:
    """The envelope written around an exported path."""

    path: WaypointPath
    exported_at: datetime
    version: str = EXPORT_FORMAT_VERSION
    exported_by: Optional[str] = EXPORTED_BY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "exportedAt": self.exported_at.isoformat(),
            "exportedBy": self.exported_by,
            "path": self.path.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WaypointExport":
        version = str(data.get("version") or EXPORT_FORMAT_VERSION)
        if version.split(".")[0] != EXPORT_FORMAT_VERSION.split(".")[0]:
            raise WaypointFormatError(f"unsupported export version {version!r}")
        try:
            exported_at = _parse_datetime(data["exportedAt"]) if data.get("exportedAt") else _utcnow()
        except ValueError as exc:
            raise WaypointFormatError(f"invalid exportedAt: {exc}") from exc
        exported_by = data.get("exportedBy")
        return cls(
            path=WaypointPath.from_dict(data["path"]),
            exported_at=exported_at,
            version=version,
            exported_by=str(exported_by) if exported_by is not None else None,
        )


def read_path_file(file_path: PathLike) -> WaypointPath:
    """
    Read an export envelope or a bare path file.

    Raises FileNotFoundError when the file is missing and WaypointFormatError
    when it is neither shape.
    """
    p = Path(file_path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise WaypointFormatError(f"{p}: {exc}") from exc

    if isinstance(data, Mapping) and isinstance(data.get("path"), Mapping):
        return WaypointExport.from_dict(data).path
    return WaypointPath.from_dict(data)


class WaypointExchange:
    """
    Export / import of waypoint paths against a WaypointFileManager.

    `export_directory` receives exports written without an explicit target;
    imports that are saved go into the file manager's directory.
    """

    def __init__(
        self,
        files: WaypointFileManager,
        export_directory: PathLike = "exports",
        *,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._files = files
        self._export_directory = Path(export_directory)
        self._now = now

    @property
    def files(self) -> WaypointFileManager:
        return self._files

    @property
    def export_directory(self) -> Path:
        return self._export_directory

    # ------------------------------------------------------------------ #
    # Export
    # ------------------------------------------------------------------ #

    def default_export_file(self, path: WaypointPath) -> Path:
        stamp = self._now().strftime("%Y%m%d_%H%M%S")
        return self._export_directory / f"waypoints_{sanitize_file_name(path.name)}_{stamp}.json"

    def export_path(
        self,
        path: Optional[WaypointPath],
        file_path: Optional[PathLike] = None,
        overwrite: bool = False,
    ) -> ExportResult:
        """Write `path` inside an export envelope; invalid paths are refused."""
        if path is None:
            return ExportResult.INVALID_DATA

        problems = path.validate()
        if problems:
            log.info("Not exporting %r: %s", path.name, "; ".join(problems))
            return ExportResult.INVALID_DATA

        target = Path(file_path) if file_path else self.default_export_file(path)
        if target.exists() and not overwrite:
            return ExportResult.FILE_EXISTS

        envelope = WaypointExport(path=path, exported_at=self._now())
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(json.dumps(envelope.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            log.warning("Export of %r to %s failed: %s", path.name, target, exc)
            return ExportResult.FAILED

        log.info("Exported waypoint path %r to %s", path.name, target)
        return ExportResult.SUCCESS

    def export_all(self, output_directory: Optional[PathLike] = None, overwrite: bool = False) -> int:
        """Export every stored path as <name>.json; returns how many were written."""
        out = Path(output_directory) if output_directory else self._export_directory / "waypoints"
        exported = 0
        for path in self._files.load_all():
            target = out / (sanitize_file_name(path.name) + ".json")
            if self.export_path(path, target, overwrite) is ExportResult.SUCCESS:
                exported += 1
        return exported

    # ------------------------------------------------------------------ #
    # Import
    # ------------------------------------------------------------------ #

    def import_path(self, file_path: PathLike) -> Tuple[ImportResult, Optional[WaypointPath]]:
        """Read and validate a path file without storing it."""
        try:
            path = read_path_file(file_path)
        except FileNotFoundError:
            return ImportResult.FILE_NOT_FOUND, None
        except WaypointFormatError as exc:
            log.info("Cannot import %s: %s", file_path, exc)
            return ImportResult.INVALID_FORMAT, None
        except OSError as exc:
            log.warning("Cannot read %s: %s", file_path, exc)
            return ImportResult.FAILED, None

        problems = path.validate()
        if problems:
            log.info("Rejected %s: %s", file_path, "; ".join(problems))
            return ImportResult.VALIDATION_FAILED, None

        return ImportResult.SUCCESS, path

    def validate_file(self, file_path: PathLike) -> ImportResult:
        result, _ = self.import_path(file_path)
        return result

    def import_and_save(self, file_path: PathLike, new_name: Optional[str] = None) -> ImportResult:
        """Import a path into the file manager's directory, optionally renamed."""
        result, path = self.import_path(file_path)
        if path is None:
            return result

        if new_name is not None and new_name.strip():
            path.name = new_name

        try:
            self._files.save_path(path)
        except OSError as exc:
            log.warning("Saving imported path %r failed: %s", path.name, exc)
            return ImportResult.FAILED
        return ImportResult.SUCCESS

    def import_directory(self, input_directory: PathLike, overwrite: bool = False) -> int:
        """
        Import every *.json file of a directory; returns how many were saved.

        Paths whose name already has a stored file are skipped unless
        `overwrite` is set. Unreadable or invalid files are skipped.
        """
        directory = Path(input_directory)
        if not directory.is_dir():
            return 0

        imported = 0
        for file in sorted(directory.glob("*.json")):
            _, path = self.import_path(file)
            if path is None:
                continue
            if self._files.path_for(path.name).exists() and not overwrite:
                log.info("Skipping %s: path %r already stored", file, path.name)
                continue
            try:
                self._files.save_path(path)
            except OSError as exc:
                log.warning("Saving imported path %r failed: %s", path.name, exc)
                continue
            imported += 1
        return imported


__all__ = [
    "EXPORT_FORMAT_VERSION",
    "ExportResult",
    "ImportResult",
    "WaypointExchange",
    "WaypointExport",
    "read_path_file",
]
