"""
Catalog Configuration - Centralized settings for the file catalog.

Uses environment variables with sensible defaults. All paths are resolved
to absolute paths for reliability.
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import FrozenSet, List, Optional


DEFAULT_EXCLUDE_SEGMENTS: FrozenSet[str] = frozenset({
    # Dependencies / version control
    "node_modules", ".git", ".npm", ".docker",
    # Caches
    ".cache", "cache", "caches",
    # Trash
    ".trash", "trash", "$recycle.bin",
    # Windows system
    "system volume information", "appdata", "programdata", "windows",
    "program files", "program files (x86)", "$windows.~bt", "$windows.~ws",
    "recovery", "perflogs", "$winreagent", "config.msi", "msocache",
    # macOS system
    "library",
    # Vendor driver folders
    "intel", "nvidia", "amd",
})

DEFAULT_EXCLUDE_FILES: FrozenSet[str] = frozenset({
    "pagefile.sys", "hiberfil.sys", "swapfile.sys",
    "dumpstack.log.tmp", "dumpstack.log",
    ".ds_store", "thumbs.db", "desktop.ini",
    "ntuser.dat", "ntuser.dat.log", "ntuser.dat.log1", "ntuser.dat.log2",
})


@dataclass
class CatalogConfig:
    """
    Configuration for the catalog indexer.

    The index file defaults to ~/.file-catalog/file-index.json.
    `roots` is empty by default, meaning the platform enumerator decides.
    """

    # --- Paths ---
    roots: List[Path] = field(default_factory=list)
    index_path: Path = field(
        default_factory=lambda: Path.home() / ".file-catalog" / "file-index.json"
    )

    # --- Limits ---
    max_index_size: int = 100_000   # Hard cap, checked before descending
    result_limit: int = 100         # Raw matches collected before ranking
    estimate_per_root: int = 1000   # Progress heuristic only

    # --- Lifecycle ---
    enabled: bool = True
    stale_after: timedelta = timedelta(days=7)

    # --- Skip Patterns (matched case-insensitively, whole segments) ---
    exclude_segments: FrozenSet[str] = DEFAULT_EXCLUDE_SEGMENTS
    exclude_files: FrozenSet[str] = DEFAULT_EXCLUDE_FILES

    def __post_init__(self):
        """Ensure all paths are absolute and the index directory exists."""
        self.index_path = Path(self.index_path).expanduser().resolve()
        self.roots = [Path(p).expanduser().resolve() for p in self.roots]
        self.exclude_segments = frozenset(s.lower() for s in self.exclude_segments)
        self.exclude_files = frozenset(f.lower() for f in self.exclude_files)

        self.index_path.parent.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_env(cls) -> "CatalogConfig":
        """
        Create config from environment variables.

        Supported env vars:
            FILE_CATALOG_ROOTS: Comma-separated list of paths to crawl
            FILE_CATALOG_INDEX_PATH: Path to the persisted index file
            FILE_CATALOG_MAX_ENTRIES: Catalog size cap
            FILE_CATALOG_RESULT_LIMIT: Search result cap
            FILE_CATALOG_STALE_DAYS: Age after which the index is rebuilt
            FILE_CATALOG_ENABLED: "0"/"false"/"no" disables indexing
        """
        config = cls()

        if roots := os.environ.get("FILE_CATALOG_ROOTS"):
            config.roots = [Path(p.strip()) for p in roots.split(",") if p.strip()]

        if index_path := os.environ.get("FILE_CATALOG_INDEX_PATH"):
            config.index_path = Path(index_path)

        if max_entries := os.environ.get("FILE_CATALOG_MAX_ENTRIES"):
            config.max_index_size = int(max_entries)

        if limit := os.environ.get("FILE_CATALOG_RESULT_LIMIT"):
            config.result_limit = int(limit)

        if stale_days := os.environ.get("FILE_CATALOG_STALE_DAYS"):
            config.stale_after = timedelta(days=float(stale_days))

        if enabled := os.environ.get("FILE_CATALOG_ENABLED"):
            config.enabled = enabled.strip().lower() not in {"0", "false", "no", "off"}

        config.__post_init__()
        return config


# Singleton default config
_default_config: Optional[CatalogConfig] = None


def get_config() -> CatalogConfig:
    """Get the default configuration (singleton)."""
    global _default_config
    if _default_config is None:
        _default_config = CatalogConfig.from_env()
    return _default_config


def set_config(config: Optional[CatalogConfig]) -> None:
    """Override the default configuration (for testing)."""
    global _default_config
    _default_config = config
