"""
Test Configuration - Shared fixtures for catalog tests.

Uses pytest fixtures to create isolated test environments.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from file_catalog.config import CatalogConfig, set_config


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    tmp = tempfile.mkdtemp(prefix="catalog_test_")
    # Resolve to handle macOS /var -> /private/var symlink
    resolved = Path(tmp).resolve()
    yield resolved
    shutil.rmtree(str(resolved), ignore_errors=True)


@pytest.fixture
def data_root(temp_dir: Path) -> Path:
    """Directory that gets crawled (kept apart from the index file)."""
    root = temp_dir / "data"
    root.mkdir()
    return root


@pytest.fixture
def test_config(temp_dir: Path, data_root: Path) -> Generator[CatalogConfig, None, None]:
    """Create an isolated test configuration."""
    config = CatalogConfig(
        roots=[data_root],
        index_path=temp_dir / "state" / "file-index.json",
    )
    set_config(config)
    yield config
    set_config(None)


@pytest.fixture
def sample_tree(data_root: Path) -> dict[str, Path]:
    """
    Create a small tree with both indexable and excluded content:

        data/a.txt, data/b.txt
        data/.git/config           (excluded segment)
        data/cache/tmp.bin         (excluded segment, case-insensitive)
        data/notes/todo.md
        data/Windows App/setup.txt (kept: not an exact segment match)
        data/Thumbs.db             (excluded filename)
    """
    files = {}

    files["a"] = data_root / "a.txt"
    files["a"].write_text("alpha")

    files["b"] = data_root / "b.txt"
    files["b"].write_text("bravo")

    git_dir = data_root / ".git"
    git_dir.mkdir()
    files["git_config"] = git_dir / "config"
    files["git_config"].write_text("[core]")

    cache_dir = data_root / "cache"
    cache_dir.mkdir()
    files["cache"] = cache_dir / "tmp.bin"
    files["cache"].write_bytes(b"\x00\x01")

    notes = data_root / "notes"
    notes.mkdir()
    files["notes"] = notes
    files["todo"] = notes / "todo.md"
    files["todo"].write_text("- write tests")

    windows_app = data_root / "Windows App"
    windows_app.mkdir()
    files["windows_app"] = windows_app / "setup.txt"
    files["windows_app"].write_text("kept")

    files["thumbs"] = data_root / "Thumbs.db"
    files["thumbs"].write_bytes(b"\x00")

    return files


@pytest.fixture
def wide_tree(data_root: Path) -> Path:
    """20 directories with 10 files each (220 entries)."""
    for d in range(20):
        sub = data_root / f"dir_{d:02d}"
        sub.mkdir()
        for f in range(10):
            (sub / f"file_{f}.txt").write_text(str(f))
    return data_root
