"""
Crawler - Depth-first file system traversal into the catalog.

Directory listing and stat() run in the loop's default executor so the
event loop stays responsive; the catalog itself is only touched on the loop
thread. Cancellation and the size cap are checked once per directory.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from .config import get_config, CatalogConfig
from .exclusion import ExclusionFilter
from .models import IndexEntry
from .errors import handle_error


logger = logging.getLogger(__name__)


DirectoryCallback = Callable[[str, int], None]


class CancellationToken:
    """Cooperative cancellation flag shared between a build and its crawls."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class Crawler:
    """
    Walks a root and inserts an IndexEntry for every non-excluded child.

    The walk uses an explicit stack, so deep trees don't hit the recursion
    limit. A directory is only descended into while the catalog is below
    `max_index_size`; the children of the last directory listed can push it
    slightly over.
    """

    def __init__(
        self,
        config: Optional[CatalogConfig] = None,
        exclusion: Optional[ExclusionFilter] = None,
        on_directory: Optional[DirectoryCallback] = None,
    ):
        self.config = config or get_config()
        self.exclusion = exclusion or ExclusionFilter(self.config)
        self.on_directory = on_directory
        self.error_count = 0

    async def scan(
        self,
        root: Path,
        catalog: Dict[str, IndexEntry],
        token: Optional[CancellationToken] = None,
    ) -> int:
        """
        Crawl `root` into `catalog`.

        Partial progress is kept when cancelled. Filesystem errors are
        logged and never raised.

        Returns:
            Number of entries inserted (overwrites included)
        """
        token = token or CancellationToken()
        loop = asyncio.get_running_loop()
        cap = self.config.max_index_size

        added = 0
        stack: List[str] = [str(root)]

        while stack:
            if token.cancelled:
                logger.debug(f"Scan of {root} cancelled with {len(stack)} directories pending")
                break

            directory = stack.pop()
            if self.exclusion.should_exclude(directory):
                continue
            if len(catalog) >= cap:
                continue

            try:
                entries, errors = await loop.run_in_executor(
                    None, self._list_directory_sync, directory
                )
            except OSError as e:
                handle_error(e, Path(directory), "list_directory")
                self.error_count += 1
                continue

            self.error_count += errors
            subdirs: List[str] = []

            for entry in entries:
                catalog[entry.path] = entry
                added += 1
                if entry.is_directory and len(catalog) < cap:
                    subdirs.append(entry.path)

            # Reversed so the first child is popped first
            stack.extend(reversed(subdirs))

            if self.on_directory is not None:
                self.on_directory(directory, len(catalog))

        return added

    def _list_directory_sync(self, directory: str) -> Tuple[List[IndexEntry], int]:
        """
        List and stat the children of one directory (runs in an executor thread).

        A stat failure skips that child only.
        """
        entries: List[IndexEntry] = []
        errors = 0

        with os.scandir(directory) as it:
            for dir_entry in it:
                if self.exclusion.should_exclude(dir_entry.path):
                    continue
                try:
                    is_directory = dir_entry.is_dir(follow_symlinks=False)
                    is_file = dir_entry.is_file(follow_symlinks=False)
                    stat_result = dir_entry.stat()
                except OSError as e:
                    handle_error(e, Path(dir_entry.path), "stat")
                    errors += 1
                    continue

                entries.append(
                    IndexEntry.from_stat(dir_entry.path, is_directory, is_file, stat_result)
                )

        return entries, errors
