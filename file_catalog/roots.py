"""
Root Enumeration - Top-level locations the crawler walks.

The orchestrator only depends on the RootEnumerator protocol. The platform
adapter here covers the usual user folders and mounted volumes; hosts with
their own volume detection can inject a different enumerator.
"""

import logging
import os
import string
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, runtime_checkable


logger = logging.getLogger(__name__)


USER_FOLDERS = {
    "win32": ["Desktop", "Documents", "Downloads", "Pictures", "Music", "Videos"],
    "darwin": ["Desktop", "Documents", "Downloads", "Pictures", "Music", "Movies"],
    "linux": ["Desktop", "Documents", "Downloads", "Pictures", "Music", "Videos"],
}

SYSTEM_LOCATIONS = {
    "win32": [],
    "darwin": ["/Applications", "/Users"],
    "linux": ["/usr", "/opt", "/home"],
}

VOLUME_PARENTS = {
    "darwin": ["/Volumes"],
    "linux": ["/media", "/mnt", "/run/media"],
}


@runtime_checkable
class RootEnumerator(Protocol):
    """Supplies the ordered list of absolute paths to crawl."""

    def list_roots(self) -> List[Path]:
        ...


class StaticRootEnumerator:
    """Returns a fixed list of roots."""

    def __init__(self, roots: Iterable[Path]):
        self._roots = [Path(r) for r in roots]

    def list_roots(self) -> List[Path]:
        return list(self._roots)


class PlatformRootEnumerator:
    """
    Platform-aware root list: user-profile folders, a few system locations
    and mounted volumes.

    Failures for any single candidate are swallowed; callers get whatever
    subset could be enumerated. Accessibility of the returned roots is checked
    by the orchestrator at crawl time.
    """

    def __init__(self, platform: Optional[str] = None, home: Optional[Path] = None):
        self.platform = self._normalize_platform(platform or sys.platform)
        self.home = home or Path.home()

    @staticmethod
    def _normalize_platform(platform: str) -> str:
        if platform.startswith("win"):
            return "win32"
        if platform == "darwin":
            return "darwin"
        return "linux"

    def list_roots(self) -> List[Path]:
        locations: List[Path] = [self.home / name for name in USER_FOLDERS[self.platform]]
        locations.extend(Path(p) for p in SYSTEM_LOCATIONS[self.platform])

        root = Path(os.path.abspath(os.sep))
        for volume in self.list_volumes():
            # Crawling "/" would duplicate every other root
            if self.platform != "win32" and volume == root:
                continue
            if volume not in locations:
                locations.append(volume)

        logger.debug(f"Enumerated {len(locations)} roots for {self.platform}")
        return locations

    def list_volumes(self) -> List[Path]:
        """Mounted volumes, including the filesystem root on POSIX."""
        if self.platform == "win32":
            return self._windows_drives()

        volumes: List[Path] = [Path("/")]
        for parent in VOLUME_PARENTS[self.platform]:
            try:
                children = sorted(os.listdir(parent))
            except OSError:
                continue
            for child in children:
                if child.startswith("."):
                    continue
                candidate = Path(parent) / child
                try:
                    if candidate.is_dir():
                        volumes.append(candidate)
                except OSError:
                    continue
        return volumes

    def _windows_drives(self) -> List[Path]:
        drives: List[Path] = []
        for letter in string.ascii_uppercase:
            drive = f"{letter}:\\"
            try:
                if os.path.exists(drive):
                    drives.append(Path(drive))
            except OSError:
                continue

        if not drives:
            logger.info("No drives detected, defaulting to C:\\")
            drives.append(Path("C:\\"))
        return drives


def default_enumerator(roots: Optional[List[Path]] = None) -> RootEnumerator:
    """Static enumerator when roots are configured, platform one otherwise."""
    if roots:
        return StaticRootEnumerator(roots)
    return PlatformRootEnumerator()
