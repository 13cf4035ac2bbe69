"""
Exclusion Filter - Decides which paths never enter the catalog.

Matching is on whole path segments, case-insensitively, so a folder named
"Windows App" is kept while "Windows" is skipped.
"""

import re
from typing import Iterable, List, Optional

from .config import CatalogConfig, get_config


_SEPARATORS = re.compile(r"[\\/]+")


def split_segments(path: str) -> List[str]:
    """Split a path on both POSIX and Windows separators."""
    return [segment for segment in _SEPARATORS.split(str(path)) if segment]


class ExclusionFilter:
    """Stateless deny-list filter over filenames and path segments."""

    def __init__(
        self,
        config: Optional[CatalogConfig] = None,
        exclude_segments: Optional[Iterable[str]] = None,
        exclude_files: Optional[Iterable[str]] = None,
    ):
        config = config or get_config()
        segments = config.exclude_segments if exclude_segments is None else exclude_segments
        files = config.exclude_files if exclude_files is None else exclude_files
        self.exclude_segments = frozenset(s.lower() for s in segments)
        self.exclude_files = frozenset(f.lower() for f in files)

    def should_exclude(self, path) -> bool:
        segments = split_segments(path)
        if not segments:
            return False

        if segments[-1].lower() in self.exclude_files:
            return True

        return any(segment.lower() in self.exclude_segments for segment in segments)

    __call__ = should_exclude
