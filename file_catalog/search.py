"""
Search - Filename substring queries over the in-memory catalog.

Matches are collected in catalog order until the result limit is hit, and
only that collected subset is ranked. An exact match found after the limit
is therefore not returned.
"""

import locale
import logging
from typing import List, Mapping, Optional, Tuple

from .config import get_config, CatalogConfig
from .models import IndexEntry


logger = logging.getLogger(__name__)


def name_sort_key(name: str) -> Tuple[str, str]:
    """
    Ordering under the current LC_COLLATE: case-insensitive first, raw name
    as tie-break.

    Collation is only locale-aware once `locale.setlocale(LC_COLLATE, ...)`
    has been called (the CLI does); otherwise this is code-point order.
    """
    return locale.strxfrm(name.casefold()), locale.strxfrm(name)


class SearchEngine:
    """Case-insensitive substring search on entry names."""

    def __init__(self, config: Optional[CatalogConfig] = None, limit: Optional[int] = None):
        self.config = config or get_config()
        self.limit = limit if limit is not None else self.config.result_limit

    def search(self, catalog: Mapping[str, IndexEntry], query: str) -> List[IndexEntry]:
        lower_query = query.lower()
        results: List[IndexEntry] = []

        for entry in catalog.values():
            if lower_query in entry.name.lower():
                results.append(entry)
                if len(results) >= self.limit:
                    break

        results.sort(key=lambda e: (e.name.lower() != lower_query, name_sort_key(e.name)))

        logger.debug(f"Search {query!r}: {len(results)} results from {len(catalog)} entries")
        return results
