"""
Orchestrator - Lifecycle of the file catalog.

Owns the in-memory catalog and coordinates the other components:
RootEnumerator → Crawler (ExclusionFilter) → catalog → PersistenceStore,
with SearchEngine on the read path.

All state lives on one asyncio event loop; blocking I/O runs in executors.
At most one build runs at a time. Public coroutines never raise: failures
are logged and surface as empty results or no-ops.
"""

import asyncio
import json
import locale
import logging
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Coroutine, Dict, List, Optional, Set

from .config import get_config, CatalogConfig, set_config
from .models import BuildStats, IndexEntry, IndexState, IndexStatus, utc_now
from .roots import RootEnumerator, default_enumerator
from .exclusion import ExclusionFilter
from .crawler import CancellationToken, Crawler
from .store import PersistenceStore
from .search import SearchEngine
from .errors import PersistenceError


logger = logging.getLogger(__name__)


ProgressCallback = Callable[[IndexStatus], None]


class Orchestrator:
    """
    Build, search and lifecycle control for the catalog.

    States: idle, building, disabled. Searches may run during a build and
    see whatever has been inserted so far.
    """

    def __init__(
        self,
        config: Optional[CatalogConfig] = None,
        enumerator: Optional[RootEnumerator] = None,
        exclusion: Optional[ExclusionFilter] = None,
        store: Optional[PersistenceStore] = None,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self.config = config or get_config()
        if config:
            set_config(config)

        # Initialize components
        self._enumerator = enumerator or default_enumerator(self.config.roots)
        self._exclusion = exclusion or ExclusionFilter(self.config)
        self._crawler = Crawler(self.config, self._exclusion, on_directory=self._on_directory)
        self._store = store or PersistenceStore(self.config)
        self._search_engine = SearchEngine(self.config)
        self.on_progress = on_progress

        self._catalog: Dict[str, IndexEntry] = {}
        self._enabled = self.config.enabled
        self._building = False
        self._total_files = 0
        self._last_index_time: Optional[datetime] = None
        self._token: Optional[CancellationToken] = None
        self._build_done: Optional[asyncio.Event] = None
        self._init_task: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self, enabled: bool) -> None:
        """
        Start the catalog in the background.

        Loads the saved index, then builds when it is empty or rebuilds when
        it is older than `stale_after`. Returns without waiting for either.
        """
        self._enabled = enabled

        if not enabled:
            logger.info("Indexer disabled, skipping initialization")
            return

        logger.info("Initializing...")
        self._init_task = self._spawn(self._initialize())

    async def _initialize(self) -> None:
        try:
            await self.load_index()

            if not self._catalog:
                logger.info("No existing index found, building now...")
                self._spawn(self.build_index())
            elif self.is_stale():
                logger.info("Index is outdated, rebuilding...")
                self._spawn(self.rebuild_index())
            else:
                logger.info(f"Using existing index with {len(self._catalog)} entries")
        except Exception:
            logger.exception("Initialization failed")
        finally:
            self._init_task = None

    def is_stale(self, now: Optional[datetime] = None) -> bool:
        """True when there is no build time or it is older than `stale_after`."""
        if self._last_index_time is None:
            return True
        now = now or utc_now()
        return now - self._last_index_time > self.config.stale_after

    async def build_index(self) -> Optional[BuildStats]:
        """
        Crawl every root into a fresh catalog and persist it.

        No-op when a build is already running or the indexer is disabled.
        A cancelled build stops at the next directory, then records the
        build time and saves whatever it indexed so far.

        Returns:
            Statistics for the build, or None if it did not run
        """
        if self._building:
            logger.info("Already indexing, skipping...")
            return None

        if not self._enabled:
            logger.info("Indexer is disabled, skipping...")
            return None

        self._building = True
        self._catalog.clear()
        self._total_files = 0
        token = self._token = CancellationToken()
        done = self._build_done = asyncio.Event()

        stats = BuildStats()
        start_time = time.monotonic()
        errors_before = self._crawler.error_count
        logger.info("Starting index build...")

        try:
            loop = asyncio.get_running_loop()
            roots = await loop.run_in_executor(None, self._enumerator.list_roots)
            logger.info(f"Locations to scan: {', '.join(str(r) for r in roots)}")

            accessible = await loop.run_in_executor(None, self._accessible_roots, roots)
            self._total_files = len(accessible) * self.config.estimate_per_root
            self._notify_progress()

            for root in roots:
                if token.cancelled:
                    break

                if root not in accessible:
                    logger.info(f"Skipping {root}: not accessible")
                    stats.roots_skipped += 1
                    continue

                logger.info(f"Scanning: {root}")
                try:
                    added = await self._crawler.scan(root, self._catalog, token)
                except Exception:
                    logger.exception(f"Error scanning {root}")
                    stats.roots_skipped += 1
                    stats.errors += 1
                    continue

                stats.roots_scanned += 1
                stats.entries_indexed += added
                logger.info(
                    f"Finished {root}: indexed {added} entries (total: {len(self._catalog)})"
                )

            stats.cancelled = token.cancelled
            if token.cancelled:
                logger.info(f"Index build cancelled, saving {len(self._catalog)} entries")

            self._last_index_time = utc_now()
            await self.save_index()
        except Exception:
            logger.exception("Error building index")
            stats.errors += 1
        finally:
            self._building = False
            token.cancel()
            if self._token is token:
                self._token = None
            stats.errors += self._crawler.error_count - errors_before
            stats.duration_seconds = time.monotonic() - start_time
            done.set()
            self._notify_progress()

        logger.info(str(stats))
        return stats

    async def rebuild_index(self) -> Optional[BuildStats]:
        """Cancel any running build, wipe catalog and index file, build again."""
        logger.info("Rebuilding index...")

        try:
            if self._token is not None:
                self._token.cancel()
            if self._building and self._build_done is not None:
                await self._build_done.wait()
            await self.clear_index()
        except Exception:
            logger.exception("Rebuild failed while clearing")

        return await self.build_index()

    def set_enabled(self, enabled: bool) -> None:
        """
        Gate all indexing and search.

        Disabling cancels a running build at its next directory boundary.
        Enabling does not start a build.
        """
        self._enabled = enabled
        logger.info(f"Indexer {'enabled' if enabled else 'disabled'}")

        if not enabled and self._token is not None:
            self._token.cancel()

    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def state(self) -> IndexState:
        if not self._enabled:
            return IndexState.DISABLED
        if self._building:
            return IndexState.BUILDING
        return IndexState.IDLE

    def get_status(self) -> IndexStatus:
        return IndexStatus(
            is_indexing=self._building,
            total_files=self._total_files,
            indexed_files=len(self._catalog),
            last_index_time=self._last_index_time,
        )

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    async def search(self, query: str) -> List[IndexEntry]:
        """Up to `result_limit` entries whose name contains `query`."""
        if not self._enabled:
            return []

        try:
            await self._ensure_loaded()
            return self._search_engine.search(self._catalog, query)
        except Exception:
            logger.exception("Search error")
            return []

    async def get_entries(self) -> List[IndexEntry]:
        """Every entry in the catalog."""
        if not self._enabled:
            return []

        try:
            await self._ensure_loaded()
            return list(self._catalog.values())
        except Exception:
            logger.exception("Error listing entries")
            return []

    async def _ensure_loaded(self) -> None:
        # Wait for the initial load, not for the build it may start
        init_task = self._init_task
        if init_task is not None and not init_task.done():
            await asyncio.shield(init_task)

        if not self._catalog and not self._building:
            await self.load_index()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def load_index(self) -> bool:
        """
        Replace the catalog with the saved index.

        Returns:
            True if an index was loaded
        """
        try:
            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(None, self._store.load)
        except Exception:
            logger.exception("Error loading index")
            return False

        if result is None:
            return False

        if self._building:
            logger.debug("Build started while loading, discarding loaded index")
            return False

        self._catalog.clear()
        self._catalog.update(result.catalog)
        self._last_index_time = result.last_index_time
        return True

    async def save_index(self) -> bool:
        """
        Write the catalog to disk.

        On failure the in-memory catalog is kept as is.
        """
        entries = list(self._catalog.items())
        last_index_time = self._last_index_time

        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._store.save, entries, last_index_time)
            return True
        except PersistenceError as e:
            logger.error(f"Error saving index: {e}")
        except Exception:
            logger.exception("Error saving index")
        return False

    async def clear_index(self) -> None:
        """Empty the catalog and delete the index file."""
        self._catalog.clear()
        self._last_index_time = None

        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._store.clear)
        except PersistenceError as e:
            logger.error(f"Error deleting index: {e}")
        except Exception:
            logger.exception("Error deleting index")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _accessible_roots(roots: List[Path]) -> Set[Path]:
        accessible: Set[Path] = set()
        for root in roots:
            try:
                if os.path.isdir(root) and os.access(root, os.R_OK):
                    accessible.add(root)
            except OSError:
                continue
        return accessible

    def _on_directory(self, directory: str, catalog_size: int) -> None:
        self._notify_progress()

    def _notify_progress(self) -> None:
        if self.on_progress is None:
            return
        try:
            self.on_progress(self.get_status())
        except Exception:
            logger.exception("Progress callback failed")

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait for background initialization and builds to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self):
        """Cancel the running build and any background tasks."""
        if self._token is not None:
            self._token.cancel()
        for task in list(self._tasks):
            if not task.done():
                task.cancel()


async def build_catalog(config: Optional[CatalogConfig] = None) -> Optional[BuildStats]:
    """
    Convenience function to build and save a catalog once.

    Usage:
        stats = await build_catalog()
        print(stats)
    """
    orchestrator = Orchestrator(config)
    try:
        return await orchestrator.build_index()
    finally:
        orchestrator.close()


def main():
    """CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Filename catalog indexer")
    parser.add_argument("command", choices=["build", "rebuild", "search", "status", "clear"])
    parser.add_argument("query", nargs="?", default="", help="Search query")
    parser.add_argument("--roots", nargs="+", help="Directories to index")
    parser.add_argument("--index-path", help="Index file location")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s"
    )

    # Result ordering uses strxfrm, which only collates per LC_COLLATE
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.warning(f"Cannot apply the user's collation locale, sorting by code point: {e}")

    config = CatalogConfig.from_env()
    if args.roots:
        config.roots = [Path(r) for r in args.roots]
    if args.index_path:
        config.index_path = Path(args.index_path)
    config.__post_init__()

    async def _main():
        orchestrator = Orchestrator(config)

        try:
            if args.command == "build":
                stats = await orchestrator.build_index()
                print(f"\n{stats}")
            elif args.command == "rebuild":
                stats = await orchestrator.rebuild_index()
                print(f"\n{stats}")
            elif args.command == "search":
                for entry in await orchestrator.search(args.query):
                    marker = "/" if entry.is_directory else ""
                    print(f"{entry.path}{marker}")
            elif args.command == "status":
                await orchestrator.load_index()
                print(json.dumps(orchestrator.get_status().to_dict(), indent=2))
            elif args.command == "clear":
                await orchestrator.clear_index()
                print("Index cleared.")
        except KeyboardInterrupt:
            print("\nStopped.")
        finally:
            orchestrator.close()

    asyncio.run(_main())


if __name__ == "__main__":
    main()
