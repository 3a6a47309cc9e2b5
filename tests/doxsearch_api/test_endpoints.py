"""Tests for the lookup service endpoints.

Tests cover lookups over the generated bucket, limit handling, Problem Details
emission for unloaded and malformed tables, settings-driven loading, health
reporting, startup logging, correlation IDs and metrics.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from fastapi.testclient import TestClient

import doxsearch_api.app as app_module
from doxsearch_api.app import app, get_settings, get_store, load_configured_store
from doxsearch_common.errors import IndexNotLoadedError, IndexSourceError, MalformedIndexError
from doxsearch_common.errors.http import PROBLEM_JSON
from doxsearch_common.settings import load_settings

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from doxsearch.store import SearchIndexStore
    from doxsearch_common.settings import DoxsearchSettings


@pytest.fixture(autouse=True)
def _clear_cached_state() -> Iterator[None]:
    """Drop cached settings and tables around each test."""
    get_settings.cache_clear()
    load_configured_store.cache_clear()
    yield
    get_settings.cache_clear()
    load_configured_store.cache_clear()


@pytest.fixture
def settings() -> DoxsearchSettings:
    """Settings with small limits so bounds are easy to hit."""
    return load_settings(api={"default_limit": 5, "max_limit": 20})


@pytest.fixture
def client(
    bucket_store: SearchIndexStore, settings: DoxsearchSettings
) -> Iterator[TestClient]:
    """Client over the ``all_11.js`` bucket."""
    app.dependency_overrides[get_store] = lambda: bucket_store
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def unloaded_client(settings: DoxsearchSettings) -> Iterator[TestClient]:
    """Client whose store dependency reports no configured table."""

    def _unloaded() -> SearchIndexStore:
        msg = "No search table configured; set DOXSEARCH_INDEX__PATH"
        raise IndexNotLoadedError(msg)

    app.dependency_overrides[get_store] = _unloaded
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestLookupEndpoint:
    """Successful lookups."""

    def test_returns_matches_in_order(self, client: TestClient) -> None:
        """Records come back in generation order with their references."""
        response = client.get("/lookup", params={"prefix": "searchresult"})
        assert response.status_code == 200
        body = response.json()
        assert body["prefix"] == "searchresult"
        assert [result["id"] for result in body["results"]] == [
            "searchresult",
            "searchresult",
            "searchresultset",
            "searchresultset",
            "searchresultsetiterator",
        ]
        first = body["results"][0]
        assert first["label"] == "SearchResult"
        assert first["references"] == [
            {"scope_label": "mlclient", "target": "../classmlclient_1_1_search_result.html"}
        ]

    def test_is_case_insensitive(self, client: TestClient) -> None:
        """Typed capitals do not change the result."""
        upper = client.get("/lookup", params={"prefix": "SetQ", "limit": 20}).json()
        lower = client.get("/lookup", params={"prefix": "setq", "limit": 20}).json()
        assert upper["results"] == lower["results"]
        assert [r["label"] for r in upper["results"]] == ["setQuery", "setQueryText"]

    def test_no_match(self, client: TestClient) -> None:
        """An unmatched prefix returns an empty list."""
        body = client.get("/lookup", params={"prefix": "searchresulting"}).json()
        assert body == {"prefix": "searchresulting", "results": []}

    def test_default_limit(self, client: TestClient) -> None:
        """Without ``limit`` the configured default applies."""
        body = client.get("/lookup").json()
        assert body["prefix"] == ""
        assert len(body["results"]) == 5
        assert body["results"][0]["id"] == "savedocument"

    def test_explicit_limit(self, client: TestClient) -> None:
        """An explicit limit up to the maximum is honoured."""
        body = client.get("/lookup", params={"prefix": "", "limit": 20}).json()
        assert len(body["results"]) == 20

    @pytest.mark.parametrize("limit", [0, -1, 21])
    def test_limit_out_of_range(self, client: TestClient, limit: int) -> None:
        """Limits outside 1..max_limit are rejected with Problem Details."""
        response = client.get("/lookup", params={"prefix": "s", "limit": limit})
        assert response.status_code == 400
        assert response.headers["content-type"].startswith(PROBLEM_JSON)
        body = response.json()
        assert body["code"] == "invalid-query"
        assert body["extensions"] == {"limit": limit}


class TestLookupErrors:
    """Error responses from the lookup endpoint."""

    def test_unloaded_store(self, unloaded_client: TestClient) -> None:
        """An unconfigured table is a 503."""
        response = unloaded_client.get("/lookup", params={"prefix": "search"})
        assert response.status_code == 503
        assert response.json()["code"] == "index-not-loaded"

    def test_malformed_store(self, settings: DoxsearchSettings) -> None:
        """A malformed table is a 422 naming the source file."""

        def _malformed() -> SearchIndexStore:
            msg = "record 4: references list is empty"
            raise MalformedIndexError(msg, position=4, source="all_2.js")

        app.dependency_overrides[get_store] = _malformed
        app.dependency_overrides[get_settings] = lambda: settings
        try:
            response = TestClient(app).get("/lookup", params={"prefix": "x"})
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "malformed-index"
        assert body["extensions"] == {"position": 4, "source": "all_2.js"}


class TestConfiguredStore:
    """The real store dependency loading from settings."""

    def test_loads_configured_path(self, search_dir: Path) -> None:
        """get_store loads the configured path once and caches it."""
        configured = load_settings(index={"path": search_dir})
        store = get_store(configured)
        assert len(store) == 28
        assert get_store(configured) is store
        assert load_configured_store(search_dir, "all") is store

    def test_unconfigured_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without a path the dependency raises IndexNotLoadedError."""
        monkeypatch.delenv("DOXSEARCH_INDEX__PATH", raising=False)
        monkeypatch.delenv("DOXSEARCH_INDEX_PATH", raising=False)
        with pytest.raises(IndexNotLoadedError):
            get_store(load_settings())

    def test_failed_load_is_retried(self, tmp_path: Path, bucket_text: str) -> None:
        """A missing table is not cached; it loads once it appears."""
        target = tmp_path / "all_11.js"
        configured = load_settings(index={"path": target})
        with pytest.raises(IndexSourceError):
            get_store(configured)
        target.write_text(bucket_text, encoding="utf-8")
        assert len(get_store(configured)) == 28

    def test_lookup_uses_settings_path(self, search_dir: Path) -> None:
        """Without overrides on get_store, lookups read the configured table."""
        configured = load_settings(index={"path": search_dir})
        app.dependency_overrides[get_settings] = lambda: configured
        try:
            body = TestClient(app).get("/lookup", params={"prefix": "setQ"}).json()
        finally:
            app.dependency_overrides.clear()
        assert [r["label"] for r in body["results"]] == ["setQuery", "setQueryText"]


class TestHealthz:
    """Health endpoint."""

    @staticmethod
    def _health(configured: DoxsearchSettings) -> dict[str, object]:
        app.dependency_overrides[get_settings] = lambda: configured
        try:
            response = TestClient(app).get("/healthz")
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 200
        return response.json()

    def test_loaded(self, search_dir: Path) -> None:
        """A loaded table reports its record count and source."""
        body = self._health(load_settings(index={"path": search_dir}))
        assert body == {
            "status": "ok",
            "records": 28,
            "source": str(search_dir),
            "error": None,
        }

    def test_unconfigured(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A missing configuration is reported, not raised."""
        monkeypatch.delenv("DOXSEARCH_INDEX__PATH", raising=False)
        monkeypatch.delenv("DOXSEARCH_INDEX_PATH", raising=False)
        body = self._health(load_settings())
        assert body["status"] == "unloaded"
        assert body["error"] == "index-not-loaded"
        assert body["records"] is None

    def test_missing_source(self, tmp_path: Path) -> None:
        """A configured path that does not exist names the load error."""
        body = self._health(load_settings(index={"path": tmp_path / "missing.js"}))
        assert body["status"] == "unloaded"
        assert body["error"] == "index-source-unavailable"


class TestLifespan:
    """Application startup."""

    def test_configures_logging_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Startup installs JSON logging at the configured level."""
        monkeypatch.setenv("DOXSEARCH_LOG_LEVEL", "debug")
        get_settings.cache_clear()
        levels: list[int | str] = []
        monkeypatch.setattr(app_module, "setup_logging", levels.append)
        with TestClient(app):
            pass
        assert levels == ["DEBUG"]


class TestCorrelationId:
    """X-Correlation-ID handling."""

    def test_echoes_header(self, client: TestClient) -> None:
        """A supplied correlation ID is echoed back."""
        response = client.get("/healthz", headers={"X-Correlation-ID": "req-42"})
        assert response.headers["X-Correlation-ID"] == "req-42"

    def test_generates_header(self, client: TestClient) -> None:
        """A correlation ID is generated when absent."""
        response = client.get("/healthz")
        assert len(response.headers["X-Correlation-ID"]) == 36


class TestMetricsEndpoint:
    """Prometheus exposition."""

    def test_exposes_lookup_metrics(self, client: TestClient) -> None:
        """Served lookups show up in the exposition."""
        client.get("/lookup", params={"prefix": "search"})
        response = client.get("/metrics")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert 'doxsearch_operations_total{component="api",operation="lookup"' in response.text

    def test_disabled(self, bucket_store: SearchIndexStore) -> None:
        """Metrics can be switched off."""
        disabled = load_settings(observability={"metrics_enabled": False})
        app.dependency_overrides[get_store] = lambda: bucket_store
        app.dependency_overrides[get_settings] = lambda: disabled
        try:
            response = TestClient(app).get("/metrics")
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 404
