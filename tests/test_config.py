"""
Config Tests - Verify defaults and environment overrides.
"""

from datetime import timedelta
from pathlib import Path

import pytest

from file_catalog.config import CatalogConfig, get_config, set_config


@pytest.fixture
def isolated_home(temp_dir, monkeypatch):
    monkeypatch.setenv("HOME", str(temp_dir))
    monkeypatch.setenv("USERPROFILE", str(temp_dir))
    for var in (
        "FILE_CATALOG_ROOTS", "FILE_CATALOG_INDEX_PATH", "FILE_CATALOG_MAX_ENTRIES",
        "FILE_CATALOG_RESULT_LIMIT", "FILE_CATALOG_STALE_DAYS", "FILE_CATALOG_ENABLED",
    ):
        monkeypatch.delenv(var, raising=False)
    set_config(None)
    yield temp_dir
    set_config(None)


class TestDefaults:
    """Tests for default values."""

    def test_defaults(self, isolated_home):
        """Defaults match the documented limits."""
        config = CatalogConfig()

        assert config.max_index_size == 100_000
        assert config.result_limit == 100
        assert config.stale_after == timedelta(days=7)
        assert config.enabled is True
        assert config.roots == []
        assert config.index_path == (isolated_home / ".file-catalog" / "file-index.json").resolve()
        assert config.index_path.parent.is_dir()

    def test_deny_lists_are_lowercased(self, temp_dir):
        """Custom deny-lists are normalized to lowercase."""
        config = CatalogConfig(
            index_path=temp_dir / "i.json",
            exclude_segments={"Build"},
            exclude_files={"SECRET.txt"},
        )

        assert config.exclude_segments == frozenset({"build"})
        assert config.exclude_files == frozenset({"secret.txt"})


class TestFromEnv:
    """Tests for environment overrides."""

    def test_reads_environment(self, isolated_home, monkeypatch):
        """Every supported variable is applied."""
        monkeypatch.setenv("FILE_CATALOG_ROOTS", f"{isolated_home / 'a'}, {isolated_home / 'b'}")
        monkeypatch.setenv("FILE_CATALOG_INDEX_PATH", str(isolated_home / "idx" / "i.json"))
        monkeypatch.setenv("FILE_CATALOG_MAX_ENTRIES", "500")
        monkeypatch.setenv("FILE_CATALOG_RESULT_LIMIT", "7")
        monkeypatch.setenv("FILE_CATALOG_STALE_DAYS", "2")
        monkeypatch.setenv("FILE_CATALOG_ENABLED", "false")

        config = CatalogConfig.from_env()

        assert config.roots == [isolated_home / "a", isolated_home / "b"]
        assert config.index_path == isolated_home / "idx" / "i.json"
        assert config.max_index_size == 500
        assert config.result_limit == 7
        assert config.stale_after == timedelta(days=2)
        assert config.enabled is False
        assert (isolated_home / "idx").is_dir()

    def test_get_config_is_singleton(self, isolated_home):
        """get_config caches until overridden."""
        first = get_config()
        assert get_config() is first

        override = CatalogConfig(index_path=Path(isolated_home) / "other.json")
        set_config(override)
        assert get_config() is override
