"""Shared pytest fixtures.

This module provides:
- The generator's ``all_11.js`` bucket and a store loaded from it
- Small hand-built records for ordering and duplicate-key cases
- A metrics provider with its own registry
"""

from __future__ import annotations

from pathlib import Path

import pytest

from doxsearch.loader import load_file
from doxsearch.records import Reference, SearchIndexRecord
from doxsearch.store import SearchIndexStore
from doxsearch_common.logging import set_correlation_id
from doxsearch_common.observability import MetricsProvider

FIXTURES_DIR = Path(__file__).parent / "fixtures"
SEARCH_DIR = FIXTURES_DIR / "search"
BUCKET_FILE = SEARCH_DIR / "all_11.js"

BUCKET_RECORD_COUNT = 28


@pytest.fixture
def search_dir() -> Path:
    """Directory holding the generated bucket fixture."""
    return SEARCH_DIR


@pytest.fixture
def bucket_file() -> Path:
    """Path to the generator's ``all_11.js`` bucket."""
    return BUCKET_FILE


@pytest.fixture
def bucket_text() -> str:
    """Raw text of ``all_11.js`` exactly as the generator wrote it."""
    with BUCKET_FILE.open(encoding="utf-8", newline="") as handle:
        return handle.read()


@pytest.fixture
def metrics() -> MetricsProvider:
    """Metrics provider isolated from the process-wide registry."""
    return MetricsProvider()


@pytest.fixture
def bucket_store(metrics: MetricsProvider) -> SearchIndexStore:
    """Store loaded from ``all_11.js``."""
    return load_file(BUCKET_FILE, metrics=metrics)


@pytest.fixture
def sample_records() -> list[SearchIndexRecord]:
    """Records covering a duplicate key and an encoded key."""
    page = "../classmlclient_1_1_search_result.html"
    return [
        SearchIndexRecord("search", "search", (Reference(f"{page}#a1", "mlclient::search()"),)),
        SearchIndexRecord("searchresult", "SearchResult", (Reference(page, "mlclient"),)),
        SearchIndexRecord(
            "searchresult",
            "SearchResult",
            (
                Reference(f"{page}#a2", "mlclient::SearchResult::SearchResult()"),
                Reference(
                    f"{page}#a3",
                    "mlclient::SearchResult::SearchResult(const SearchResult &amp;other)",
                ),
            ),
        ),
        SearchIndexRecord(
            "searchdescription_2ehpp",
            "SearchDescription.hpp",
            (Reference("../_search_description_8hpp.html", ""),),
        ),
        SearchIndexRecord("setquery", "setQuery", (Reference("../a.html#q", "mlclient::Q"),)),
    ]


@pytest.fixture
def sample_store(sample_records: list[SearchIndexRecord]) -> SearchIndexStore:
    """Store over :func:`sample_records`."""
    return SearchIndexStore(sample_records, source="sample")


@pytest.fixture(autouse=True)
def _reset_correlation_id() -> None:
    """Clear correlation IDs leaked by a previous test."""
    set_correlation_id(None)
