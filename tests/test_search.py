"""
Search Tests - Verify matching, ranking and the result cap.
"""

from datetime import datetime, timezone

import pytest

from file_catalog.search import SearchEngine, name_sort_key
from file_catalog.models import IndexEntry


def build_catalog(names):
    catalog = {}
    for i, name in enumerate(names):
        path = f"/data/{i}/{name}"
        catalog[path] = IndexEntry(
            name=name,
            path=path,
            is_directory=False,
            is_file=True,
            size=1,
            modified=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
    return catalog


@pytest.fixture
def engine(test_config):
    return SearchEngine(test_config)


class TestMatching:
    """Tests for substring matching."""

    def test_case_insensitive_substring(self, engine):
        """Query matches anywhere in the name, ignoring case."""
        catalog = build_catalog(["Quarterly REPORT.pdf", "report.txt", "notes.md"])

        names = {e.name for e in engine.search(catalog, "Report")}
        assert names == {"Quarterly REPORT.pdf", "report.txt"}

    def test_matches_name_not_path(self, engine):
        """Only the base name is searched."""
        catalog = build_catalog(["photo.jpg"])

        assert engine.search(catalog, "data") == []

    def test_no_match_returns_empty(self, engine):
        """A query matching nothing returns an empty list."""
        catalog = build_catalog(["a.txt", "b.txt"])

        assert engine.search(catalog, "nonexistent-file-xyz") == []

    def test_empty_catalog(self, engine):
        """Searching an empty catalog returns an empty list."""
        assert engine.search({}, "anything") == []


class TestRanking:
    """Tests for exact-match-first ordering."""

    def test_exact_match_first(self, engine):
        """The exact case-insensitive match leads; the rest sort by name."""
        catalog = build_catalog(["ReadMeNow", "readme.txt", "Readme"])

        results = engine.search(catalog, "readme")

        assert results[0].name == "Readme"
        rest = [e.name for e in results[1:]]
        assert rest == sorted(["readme.txt", "ReadMeNow"], key=name_sort_key)

    def test_multiple_exact_matches_sorted_together(self, engine):
        """All exact matches come before partial matches."""
        catalog = build_catalog(["readme-notes.txt", "README", "readme"])

        results = engine.search(catalog, "README")

        assert {e.name for e in results[:2]} == {"README", "readme"}
        assert results[2].name == "readme-notes.txt"

    def test_partial_matches_in_name_order(self, engine):
        """Without an exact match, results are ordered by name."""
        catalog = build_catalog(["c-log", "a-log", "b-log"])

        assert [e.name for e in engine.search(catalog, "log")] == ["a-log", "b-log", "c-log"]


class TestResultCap:
    """Tests for the raw collection cap."""

    def test_never_returns_more_than_limit(self, engine):
        """At most 100 entries are returned."""
        catalog = build_catalog([f"file_{i:03d}.txt" for i in range(250)])

        results = engine.search(catalog, "file")
        assert len(results) == 100

    def test_cap_applies_before_ranking(self, engine):
        """An exact match found after the cap is not returned."""
        names = [f"log_{i:03d}.txt" for i in range(150)]
        names.append("log")
        catalog = build_catalog(names)

        results = engine.search(catalog, "log")

        assert len(results) == 100
        assert "log" not in {e.name for e in results}

    def test_exact_match_within_cap_is_first(self, engine):
        """An exact match collected before the cap is ranked first."""
        names = ["log"] + [f"log_{i:03d}.txt" for i in range(150)]
        catalog = build_catalog(names)

        results = engine.search(catalog, "log")

        assert results[0].name == "log"

    def test_custom_limit(self, test_config):
        """The limit can be set per engine."""
        engine = SearchEngine(test_config, limit=3)
        catalog = build_catalog([f"x{i}" for i in range(10)])

        assert len(engine.search(catalog, "x")) == 3

    def test_empty_query_matches_everything_up_to_limit(self, engine):
        """An empty query is a substring of every name."""
        catalog = build_catalog([f"n{i}" for i in range(5)])

        assert len(engine.search(catalog, "")) == 5
