"""
File Catalog - Filename index of the user's disks with substring search.

Modules:
    - config: Centralized configuration
    - roots: Platform-specific list of locations to crawl
    - exclusion: Path-segment and filename deny-lists
    - crawler: Cancellable depth-first traversal into the catalog
    - store: Versioned JSON persistence of the catalog
    - search: Substring search with exact-match-first ranking
    - orchestrator: Main entry point (build, search, lifecycle)

Flow:
    Enumerate roots → Crawl (filter) → Catalog → Persist
                                          ↓
                                        Search

Usage:
    from file_catalog import Orchestrator

    orchestrator = Orchestrator()
    await orchestrator.initialize(enabled=True)
    results = await orchestrator.search("report")
"""

from .orchestrator import Orchestrator

__all__ = ["Orchestrator"]
