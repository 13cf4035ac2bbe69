"""
Persistence Store - The catalog on disk.

A single versioned JSON file lets startup skip the rescan. Writes go to a
temp file in the same directory and are renamed over the target, so a crash
mid-write leaves the previous index intact.
"""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

from .config import get_config, CatalogConfig
from .models import IndexEntry, LoadResult, format_timestamp, parse_timestamp
from .errors import CorruptIndexError, PersistenceError


logger = logging.getLogger(__name__)


INDEX_VERSION = 1


class PersistenceStore:
    """Reads and writes the index file at `config.index_path`."""

    def __init__(self, config: Optional[CatalogConfig] = None, path: Optional[Path] = None):
        self.config = config or get_config()
        self.path = Path(path) if path is not None else self.config.index_path

    def save(
        self,
        entries: Iterable[Tuple[str, IndexEntry]],
        last_index_time: Optional[datetime],
    ) -> int:
        """
        Write the catalog, replacing any previous file.

        Args:
            entries: (path, IndexEntry) pairs, usually `catalog.items()`
            last_index_time: Completion time of the build

        Returns:
            Number of entries written

        Raises:
            PersistenceError: if the file cannot be written
        """
        payload = {
            "version": INDEX_VERSION,
            "lastIndexTime": format_timestamp(last_index_time),
            "index": [[path, entry.to_record()] for path, entry in entries],
        }

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f"{self.path.name}.tmp-", dir=str(self.path.parent)
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f)
                os.replace(tmp_name, self.path)
            except BaseException:
                try:
                    os.unlink(tmp_name)
                except FileNotFoundError:
                    pass
                raise
        except OSError as e:
            raise PersistenceError(self.path, f"write failed: {e}") from e

        count = len(payload["index"])
        logger.info(f"Index saved to {self.path} ({count} entries)")
        return count

    def load(self) -> Optional[LoadResult]:
        """
        Read the catalog back.

        Returns:
            LoadResult, or None if the file is missing or unreadable
        """
        try:
            return self.read()
        except FileNotFoundError:
            logger.info("No existing index found")
            return None
        except PersistenceError as e:
            logger.error(f"Error loading index: {e}")
            return None

    def read(self) -> LoadResult:
        """
        Strict variant of `load`.

        Raises:
            FileNotFoundError: if there is no index file
            CorruptIndexError: if the file cannot be parsed
            PersistenceError: for other read failures
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CorruptIndexError(self.path, f"unparseable index: {e}") from e
        except OSError as e:
            raise PersistenceError(self.path, f"read failed: {e}") from e

        if not isinstance(data, dict):
            raise CorruptIndexError(self.path, "top-level value is not an object")

        version = data.get("version", INDEX_VERSION)
        if version != INDEX_VERSION:
            logger.warning(f"Index version {version!r} differs from {INDEX_VERSION}, loading anyway")

        raw_index = data.get("index")
        catalog = self._normalize_entries(raw_index if isinstance(raw_index, list) else [])
        last_index_time = parse_timestamp(data.get("lastIndexTime"))

        logger.info(f"Index loaded: {len(catalog)} entries")
        return LoadResult(catalog=catalog, last_index_time=last_index_time)

    @staticmethod
    def _normalize_entries(raw_entries: list) -> Dict[str, IndexEntry]:
        """Accept [path, record] pairs as well as bare records carrying `path`."""
        catalog: Dict[str, IndexEntry] = {}
        for raw in raw_entries:
            path: Any = None
            record: Any = None

            if isinstance(raw, list) and len(raw) >= 2:
                path, record = raw[0], raw[1]
            elif isinstance(raw, dict):
                path, record = raw.get("path"), raw

            entry = IndexEntry.from_record(path, record)
            if entry is not None:
                catalog[entry.path] = entry
        return catalog

    def clear(self) -> None:
        """Delete the index file. A missing file counts as success."""
        try:
            self.path.unlink()
            logger.info("Index file deleted")
        except FileNotFoundError:
            pass
        except OSError as e:
            raise PersistenceError(self.path, f"delete failed: {e}") from e
