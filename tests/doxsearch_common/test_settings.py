"""Tests for doxsearch_common.settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from doxsearch_common.errors import ErrorCode, SettingsError
from doxsearch_common.settings import DoxsearchSettings, load_settings

ENV_VARS = (
    "DOXSEARCH_INDEX__PATH",
    "DOXSEARCH_INDEX__SECTION",
    "DOXSEARCH_INDEX_PATH",
    "DOXSEARCH_INDEX_SECTION",
    "DOXSEARCH_API__DEFAULT_LIMIT",
    "DOXSEARCH_API__MAX_LIMIT",
    "DOXSEARCH_LOG_LEVEL",
    "DOXSEARCH_METRICS_ENABLED",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start each test without doxsearch variables from the outer environment."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    """Settings without any environment."""

    def test_defaults(self) -> None:
        """Unset variables fall back to documented defaults."""
        settings = load_settings()
        assert isinstance(settings, DoxsearchSettings)
        assert settings.index.path is None
        assert settings.index.section == "all"
        assert settings.api.default_limit == 50
        assert settings.api.max_limit == 500
        assert settings.observability.log_level == "INFO"
        assert settings.observability.metrics_enabled is True


class TestEnvironment:
    """Settings read from environment variables."""

    def test_nested_index_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """``DOXSEARCH_INDEX__PATH`` sets the table location."""
        monkeypatch.setenv("DOXSEARCH_INDEX__PATH", "docs/html/search")
        monkeypatch.setenv("DOXSEARCH_INDEX__SECTION", "classes")
        settings = load_settings()
        assert settings.index.path == Path("docs/html/search")
        assert settings.index.section == "classes"

    def test_api_limits(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Lookup limits are parsed as integers."""
        monkeypatch.setenv("DOXSEARCH_API__DEFAULT_LIMIT", "10")
        monkeypatch.setenv("DOXSEARCH_API__MAX_LIMIT", "20")
        settings = load_settings()
        assert settings.api.default_limit == 10
        assert settings.api.max_limit == 20

    def test_log_level_is_uppercased(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Log levels are accepted in any case."""
        monkeypatch.setenv("DOXSEARCH_LOG_LEVEL", "debug")
        monkeypatch.setenv("DOXSEARCH_METRICS_ENABLED", "false")
        settings = load_settings()
        assert settings.observability.log_level == "DEBUG"
        assert settings.observability.metrics_enabled is False


class TestValidation:
    """Invalid configuration fails fast with SettingsError."""

    def test_invalid_limit_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A zero limit is rejected."""
        monkeypatch.setenv("DOXSEARCH_API__MAX_LIMIT", "0")
        with pytest.raises(SettingsError) as exc_info:
            load_settings()
        assert exc_info.value.code is ErrorCode.CONFIGURATION_ERROR
        assert "validation_error" in exc_info.value.context

    def test_default_above_max(self) -> None:
        """The default limit may not exceed the maximum."""
        with pytest.raises(SettingsError, match="exceeds"):
            load_settings(api={"default_limit": 100, "max_limit": 10})

    def test_unknown_log_level(self) -> None:
        """Unknown log levels are rejected."""
        with pytest.raises(SettingsError, match="unknown log level"):
            load_settings(observability={"log_level": "LOUD"})

    def test_unknown_field(self) -> None:
        """Unexpected settings are rejected."""
        with pytest.raises(SettingsError):
            load_settings(cache={"enabled": True})
