"""
Data Models - Type definitions for the catalog.

These dataclasses represent the records held in the in-memory catalog,
the status reported to callers, and the persisted-file payloads.
"""

import math
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class IndexState(Enum):
    """Lifecycle state of the orchestrator."""
    IDLE = "idle"
    BUILDING = "building"
    DISABLED = "disabled"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Render a datetime as ISO-8601 (UTC), or None."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a persisted timestamp.

    Accepts datetimes, ISO-8601 strings (with or without a trailing "Z")
    and epoch milliseconds. Returns None for anything unusable.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, bool):
        return None
    elif isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _basename(path: str) -> str:
    # Persisted paths may come from another platform
    return path.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1] or path


@dataclass
class IndexEntry:
    """
    One catalog record.

    `path` is absolute and is the catalog key; re-indexing the same path
    overwrites the previous record.
    """
    name: str
    path: str
    is_directory: bool
    is_file: bool
    size: int
    modified: datetime

    @classmethod
    def from_stat(
        cls,
        path: str,
        is_directory: bool,
        is_file: bool,
        stat_result: os.stat_result,
    ) -> "IndexEntry":
        """Create an IndexEntry from a crawled path and its stat result."""
        return cls(
            name=os.path.basename(path) or path,
            path=path,
            is_directory=is_directory,
            is_file=is_file,
            size=stat_result.st_size,
            modified=datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc),
        )

    @classmethod
    def from_record(cls, path: Any, record: Any) -> Optional["IndexEntry"]:
        """
        Normalize a persisted record.

        Missing or malformed fields fall back to defaults: basename for
        `name`, False for `isDirectory`, `not isDirectory` for `isFile`,
        0 for `size` and the capture time for `modified`.
        Returns None when there is no usable path.
        """
        if not isinstance(path, str) or not path:
            return None
        if not isinstance(record, dict):
            return None

        name = record.get("name")
        if not isinstance(name, str):
            name = _basename(path)

        is_directory = record.get("isDirectory")
        if not isinstance(is_directory, bool):
            is_directory = False

        is_file = record.get("isFile")
        if not isinstance(is_file, bool):
            is_file = not is_directory

        size = record.get("size")
        if isinstance(size, bool) or not isinstance(size, (int, float)) or not math.isfinite(size):
            size = 0

        modified = parse_timestamp(record.get("modified")) or utc_now()

        return cls(
            name=name,
            path=path,
            is_directory=is_directory,
            is_file=is_file,
            size=int(size),
            modified=modified,
        )

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the persisted-file shape."""
        return {
            "name": self.name,
            "path": self.path,
            "isDirectory": self.is_directory,
            "isFile": self.is_file,
            "size": self.size,
            "modified": format_timestamp(self.modified),
        }


@dataclass
class IndexStatus:
    """Status snapshot reported to the UI layer."""
    is_indexing: bool = False
    total_files: int = 0
    indexed_files: int = 0
    last_index_time: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isIndexing": self.is_indexing,
            "totalFiles": self.total_files,
            "indexedFiles": self.indexed_files,
            "lastIndexTime": format_timestamp(self.last_index_time),
        }


@dataclass
class LoadResult:
    """Catalog and build time read back from the index file."""
    catalog: Dict[str, IndexEntry]
    last_index_time: Optional[datetime]


@dataclass
class BuildStats:
    """Statistics from a build run."""
    roots_scanned: int = 0
    roots_skipped: int = 0
    entries_indexed: int = 0
    errors: int = 0
    cancelled: bool = False
    duration_seconds: float = 0.0

    def __str__(self) -> str:
        outcome = "cancelled" if self.cancelled else "complete"
        return (
            f"Build {outcome}: {self.entries_indexed} entries "
            f"from {self.roots_scanned} roots "
            f"({self.roots_skipped} skipped, {self.errors} errors) "
            f"in {self.duration_seconds:.1f}s"
        )
