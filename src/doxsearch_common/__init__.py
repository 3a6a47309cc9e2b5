"""Shared infrastructure for doxsearch packages.

Errors with Problem Details mapping, structured logging, typed settings,
filesystem helpers and Prometheus metrics.
"""

from __future__ import annotations

from doxsearch_common.errors import DoxsearchError, ErrorCode, MalformedIndexError
from doxsearch_common.logging import get_logger, setup_logging
from doxsearch_common.settings import DoxsearchSettings, load_settings

__all__ = [
    "DoxsearchError",
    "DoxsearchSettings",
    "ErrorCode",
    "MalformedIndexError",
    "get_logger",
    "load_settings",
    "setup_logging",
]
