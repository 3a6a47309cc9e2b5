"""Runtime settings with typed configuration and fail-fast validation.

Settings are read from ``DOXSEARCH_*`` environment variables; nested groups
use ``__`` as delimiter (``DOXSEARCH_INDEX__PATH``).

Examples
--------
>>> from doxsearch_common.settings import load_settings
>>> settings = load_settings()
>>> settings.index.section
'all'
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from doxsearch_common.errors import SettingsError
from doxsearch_common.logging import get_logger

__all__ = [
    "ApiConfig",
    "DoxsearchSettings",
    "IndexConfig",
    "ObservabilityConfig",
    "load_settings",
]

logger = get_logger(__name__)

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class IndexConfig(BaseSettings):
    """Location of the generated search table (``DOXSEARCH_INDEX_*``)."""

    model_config = SettingsConfigDict(env_prefix="DOXSEARCH_INDEX_", extra="forbid")

    path: Path | None = Field(
        default=None,
        description="Search table file (all_11.js) or generated search/ directory",
    )
    section: str = Field(
        default="all",
        min_length=1,
        description="Section prefix of the bucket files to load from a directory",
    )


class ApiConfig(BaseSettings):
    """Lookup endpoint limits (``DOXSEARCH_API_*``)."""

    model_config = SettingsConfigDict(env_prefix="DOXSEARCH_API_", extra="forbid")

    default_limit: int = Field(
        default=50, ge=1, description="Results returned when no limit is given"
    )
    max_limit: int = Field(default=500, ge=1, description="Largest accepted limit parameter")


class ObservabilityConfig(BaseSettings):
    """Logging and metrics toggles (``DOXSEARCH_*`` namespace)."""

    model_config = SettingsConfigDict(env_prefix="DOXSEARCH_", extra="forbid")

    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    metrics_enabled: bool = Field(default=True, description="Expose Prometheus metrics")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            msg = f"unknown log level {value!r}"
            raise ValueError(msg)
        return level


class DoxsearchSettings(BaseSettings):
    """Aggregate runtime configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DOXSEARCH_",
        env_nested_delimiter="__",
        extra="forbid",
        case_sensitive=False,
    )

    index: IndexConfig = Field(default_factory=IndexConfig, description="Search table location")
    api: ApiConfig = Field(default_factory=ApiConfig, description="HTTP lookup limits")
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig, description="Observability configuration"
    )

    def __init__(self, **overrides: object) -> None:
        """Initialise settings, converting validation failures to SettingsError."""
        try:
            super().__init__(**overrides)  # type: ignore[arg-type]
        except ValueError as exc:
            msg = f"Configuration validation failed: {exc}"
            logger.exception(
                "Settings validation failed",
                extra={"operation": "load_settings", "error_type": type(exc).__name__},
            )
            raise SettingsError(
                msg,
                cause=exc,
                context={"validation_error": str(exc)},
            ) from exc
        if self.api.default_limit > self.api.max_limit:
            msg = (
                f"api.default_limit ({self.api.default_limit}) exceeds "
                f"api.max_limit ({self.api.max_limit})"
            )
            raise SettingsError(msg, context={"validation_error": msg})


def load_settings(**overrides: object) -> DoxsearchSettings:
    """Load :class:`DoxsearchSettings` with optional overrides.

    Parameters
    ----------
    **overrides : object
        Field values taking precedence over the environment.

    Returns
    -------
    DoxsearchSettings
        Validated settings.

    Raises
    ------
    SettingsError
        If the environment or overrides fail validation.
    """
    return DoxsearchSettings(**overrides)
